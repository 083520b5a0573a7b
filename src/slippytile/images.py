"""Value types describing the images and tiles of a pyramid run."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class SourceImage(BaseModel):
    """The image to be tiled.

    Width and height are -1 until probed with :meth:`with_size`.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    directory: Path
    width: int = -1
    height: int = -1

    @property
    def path(self) -> Path:
        return self.directory / self.name

    @property
    def ext(self) -> str:
        """Extension of the image name, including the leading dot."""
        return Path(self.name).suffix

    def with_size(self, width: int, height: int) -> "SourceImage":
        return self.model_copy(update={"width": width, "height": height})


class ZoomLevelImage(BaseModel):
    """Scaled and padded working image for one internal zoom level."""
    model_config = ConfigDict(frozen=True)

    zoom: int
    name: str
    directory: Path
    width: int
    height: int

    @classmethod
    def for_level(cls, source: SourceImage, zoom: int, directory: Path,
                  width: int, height: int) -> "ZoomLevelImage":
        return cls(zoom=zoom, name=f"{zoom}{source.ext}",
                   directory=directory, width=width, height=height)

    @property
    def path(self) -> Path:
        return self.directory / self.name

    @property
    def ext(self) -> str:
        return Path(self.name).suffix


class Tile(BaseModel):
    """One cell of a zoom level grid.

    ``zoom``, ``column`` and ``row`` are the 0-based indices that name the
    tile on disk; ``crop_x`` and ``crop_y`` locate its window in the working
    image.
    """
    model_config = ConfigDict(frozen=True)

    zoom: int
    column: int
    row: int
    crop_x: int
    crop_y: int
    size: int
    output_path: Path


class Workspace(BaseModel):
    """Directories owned by a run."""
    model_config = ConfigDict(frozen=True)

    scratch_dir: Path
    output_dir: Path
