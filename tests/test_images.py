"""Tests for the slippytile.images module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from slippytile.images import SourceImage, Tile, Workspace, ZoomLevelImage


class TestSourceImage:
    """Tests for SourceImage."""

    @pytest.fixture
    def image(self):
        return SourceImage(name="bg.png", directory=Path("any/dir"))

    def test_dimensions_unknown_until_measured(self, image):
        assert image.width == -1
        assert image.height == -1

    def test_path_joins_directory_and_name(self, image):
        assert image.path == Path("any/dir/bg.png")

    def test_ext_includes_dot(self, image):
        assert image.ext == ".png"

    def test_ext_of_nested_name(self):
        image = SourceImage(name="maps/old.world.jpg", directory=Path("/data"))
        assert image.ext == ".jpg"
        assert image.path == Path("/data/maps/old.world.jpg")

    def test_with_size_returns_new_instance(self, image):
        sized = image.with_size(10, 20)
        assert (sized.width, sized.height) == (10, 20)
        assert image.width == -1
        assert sized.name == image.name

    def test_is_immutable(self, image):
        with pytest.raises(ValidationError):
            image.width = 10


class TestZoomLevelImage:
    """Tests for ZoomLevelImage."""

    def test_for_level_names_after_zoom(self):
        source = SourceImage(name="bg.png", directory=Path("."))
        level = ZoomLevelImage.for_level(source, 3, Path(".tmp"), 1024, 768)

        assert level.name == "3.png"
        assert level.path == Path(".tmp/3.png")
        assert level.ext == ".png"
        assert (level.width, level.height) == (1024, 768)


class TestRecords:
    """Tests for Tile and Workspace."""

    def test_tile_is_immutable(self):
        tile = Tile(zoom=0, column=0, row=0, crop_x=0, crop_y=0, size=256,
                    output_path=Path("tiles/0/0/0.png"))
        with pytest.raises(ValidationError):
            tile.row = 1

    def test_workspace_coerces_paths(self):
        workspace = Workspace(scratch_dir=".tmp", output_dir="tiles")
        assert workspace.scratch_dir == Path(".tmp")
        assert workspace.output_dir == Path("tiles")
