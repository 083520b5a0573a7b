"""Shared pytest fixtures for slippytile tests."""

import tempfile
from pathlib import Path

import pytest

from slippytile import config
from slippytile.errors import ExternalOperationError, ToolUnavailableError


class FakeMagick:
    """Stand-in image operator recording calls and writing placeholder files."""

    def __init__(self, width=1000, height=600, missing=(), fail_on=None):
        self.width = width
        self.height = height
        self.missing = set(missing)
        self.fail_on = fail_on
        self.calls = []

    @property
    def commands(self):
        return ["convert", "identify"]

    async def verify(self, command):
        self.calls.append(("verify", command))
        if command in self.missing:
            raise ToolUnavailableError(f"Command '{command}' is not available")

    async def probe_dimensions(self, path):
        self.calls.append(("probe", Path(path)))
        return self.width, self.height

    async def scale(self, src, percent, dst):
        self.calls.append(("scale", Path(src), percent, Path(dst)))
        Path(dst).write_bytes(b"level")

    async def extend_canvas(self, path, width, height):
        self.calls.append(("extend", Path(path), width, height))

    async def crop(self, path, width, height, x, y, dst):
        self.calls.append(("crop", Path(path), width, height, x, y, Path(dst)))
        if self.fail_on is not None and Path(dst).match(self.fail_on):
            raise ExternalOperationError(f"Command failed: crop {dst}")
        Path(dst).write_bytes(b"tile")

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture(autouse=True)
def quiet_settings():
    """Silence progress output and restore the verbosity afterwards."""
    previous = config.settings.get("verbose", 1)
    config.settings.set("verbose", 0)
    yield
    config.settings.set("verbose", previous)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_image(temp_dir):
    """Provide an (unreadable) source image file inside temp_dir."""
    path = temp_dir / "map.png"
    path.write_bytes(b"not really a png")
    return path


@pytest.fixture
def fake_magick():
    """Provide a fake operator reporting a 1000x600 source."""
    return FakeMagick()


def tile_files(output_dir):
    """All tile files below output_dir, relative, excluding the viewer page."""
    return sorted(
        str(path.relative_to(output_dir)) for path in Path(output_dir).rglob("*")
        if path.is_file() and path.name != "index.html"
    )


@pytest.fixture
def make_fake():
    """Provide the FakeMagick class for tests needing custom behaviour."""
    return FakeMagick


@pytest.fixture
def list_tiles():
    """Provide the tile_files helper."""
    return tile_files
