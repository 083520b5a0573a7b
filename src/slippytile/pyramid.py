"""Build a slippy map tile pyramid from a single image.

The run is a strict sequence of stages::

    Init -> VerifyTooling -> BuildWorkspace -> ProbeSource
         -> GenerateLevels -> Cleanup -> Finalize -> Done

The first failing stage moves the run to ``Failed`` and its error is
re-raised unchanged. Nothing is rolled back: the scratch directory and any
tiles already written stay on disk.

Inside ``GenerateLevels`` all zoom levels are processed concurrently, and
each level fans out over its columns and rows. Sibling operations are not
cancelled when one of them fails; the stage reports the first error.
"""
import asyncio
import enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from . import config, magick, viewer
from .errors import InvalidInputError
from .images import SourceImage, Workspace, ZoomLevelImage
from .tilers import grid
from .tilers.geometry import count_tiles, plan_level, zoom_levels
from .utils import log, title
from .workspace import create_workspace, remove_dir


class Stage(enum.Enum):
    INIT = "Init"
    VERIFY_TOOLING = "VerifyTooling"
    BUILD_WORKSPACE = "BuildWorkspace"
    PROBE_SOURCE = "ProbeSource"
    GENERATE_LEVELS = "GenerateLevels"
    CLEANUP = "Cleanup"
    FINALIZE = "Finalize"
    DONE = "Done"
    FAILED = "Failed"


class TileOptions(BaseModel):
    """Resolved configuration of a run."""
    model_config = ConfigDict(frozen=True)

    image: str
    min_zoom: int
    max_zoom: int
    tile_size: int
    scratch_dir: Path
    output_dir: Path

    @classmethod
    def resolve(cls, image: Optional[str] = None, min_zoom: Optional[int] = None,
                max_zoom: Optional[int] = None, zoom: Optional[int] = None,
                tile_size: Optional[int] = None, output_dir=None,
                scratch_dir=None, cwd=None) -> "TileOptions":
        """Validate the user arguments and fill in configured defaults.

        Raises
        ------
        InvalidInputError
            If the image is missing or the zoom range or tile size is unusable.
        """
        if not image:
            raise InvalidInputError("Please provide an image.")
        if min_zoom is not None and max_zoom is not None and min_zoom > max_zoom:
            raise InvalidInputError("Min zoom is greater than max zoom.")
        if zoom is not None:
            min_zoom = max_zoom = zoom
        min_zoom = min_zoom if min_zoom is not None else config.get("min_zoom")
        max_zoom = max_zoom if max_zoom is not None else config.get("max_zoom")
        tile_size = tile_size if tile_size is not None else config.get("tile_size")

        # Checked again once configured defaults have filled the gaps.
        if min_zoom > max_zoom:
            raise InvalidInputError("Min zoom is greater than max zoom.")
        if min_zoom < 0:
            raise InvalidInputError("Zoom levels cannot be negative.")
        if tile_size <= 0:
            raise InvalidInputError("Tile size must be a positive number of pixels.")
        if not Path(image).suffix:
            raise InvalidInputError(f"Image '{image}' has no file extension.")

        cwd = Path(cwd) if cwd is not None else Path.cwd()
        scratch_dir = scratch_dir or config.get("scratch_dir")
        output_dir = output_dir or config.get("output_dir")
        return cls(image=str(image), min_zoom=min_zoom, max_zoom=max_zoom,
                   tile_size=tile_size, scratch_dir=cwd / scratch_dir,
                   output_dir=cwd / output_dir)


class RunContext(BaseModel):
    """State threaded through the stages; each stage returns a new copy."""
    model_config = ConfigDict(frozen=True)

    options: TileOptions
    source: SourceImage
    workspace: Optional[Workspace] = None
    tile_count: int = 0

    def update(self, **changes) -> "RunContext":
        return self.model_copy(update=changes)


class Pyramid:
    """Orchestrate one pyramid run.

    Parameters
    ----------
    image : str
        Path of the source image, relative to ``cwd``.
    min_zoom, max_zoom : int, optional
        User facing zoom range. If None, uses settings.
    zoom : int, optional
        Single zoom level overriding both bounds.
    tile_size : int, optional
        Tile edge length in pixels. If None, uses settings.
    output_dir, scratch_dir : str or pathlib.Path, optional
        Requested workspace directories. If None, uses settings.
    cwd : str or pathlib.Path, optional
        Base directory for relative paths, the process working directory
        by default.
    operator : Magick, optional
        Image operator; an ImageMagick backed one is created if None.
    """

    def __init__(self, image=None, min_zoom=None, max_zoom=None, zoom=None,
                 tile_size=None, output_dir=None, scratch_dir=None, cwd=None,
                 operator=None):
        self.arguments = dict(image=image, min_zoom=min_zoom, max_zoom=max_zoom,
                              zoom=zoom, tile_size=tile_size, output_dir=output_dir,
                              scratch_dir=scratch_dir, cwd=cwd)
        self.operator = operator if operator is not None else magick.Magick()
        self.stage = None

    def make(self) -> RunContext:
        """Run the pyramid to completion on a fresh event loop."""
        return asyncio.run(self.run())

    async def run(self) -> RunContext:
        try:
            self.stage = Stage.INIT
            ctx = self.init()
            self.stage = Stage.VERIFY_TOOLING
            await self.verify_commands(ctx)
            self.stage = Stage.BUILD_WORKSPACE
            ctx = await self.build_workspace(ctx)
            self.stage = Stage.PROBE_SOURCE
            ctx = await self.probe_source(ctx)
            self.stage = Stage.GENERATE_LEVELS
            ctx = await self.generate_levels(ctx)
            self.stage = Stage.CLEANUP
            await self.clean_workspace(ctx)
            self.stage = Stage.FINALIZE
            self.place_viewer(ctx)
        except Exception:
            self.stage = Stage.FAILED
            raise
        self.stage = Stage.DONE
        return ctx

    def init(self) -> RunContext:
        title("Initialization")
        options = TileOptions.resolve(**self.arguments)
        base = Path(self.arguments["cwd"]) if self.arguments["cwd"] else Path.cwd()
        source = SourceImage(name=options.image, directory=base)
        if not source.path.is_file():
            raise InvalidInputError(f"Image '{source.path}' does not exist.")

        log("Image Name:  ", options.image)
        log("Min Zoom:    ", options.min_zoom)
        log("Max Zoom:    ", options.max_zoom)
        log("Tile Size:   ", f"{options.tile_size}px")
        return RunContext(options=options, source=source)

    async def verify_commands(self, ctx: RunContext):
        title("Verifying Commands")
        for cmd in self.operator.commands:
            log("Verifying:   ", cmd)
        await asyncio.gather(*(self.operator.verify(cmd)
                               for cmd in self.operator.commands))

    async def build_workspace(self, ctx: RunContext) -> RunContext:
        title("Creating Workspace")
        workspace = await create_workspace(ctx.options.scratch_dir,
                                           ctx.options.output_dir)
        return ctx.update(workspace=workspace)

    async def probe_source(self, ctx: RunContext) -> RunContext:
        title("Getting Image Dimension")
        width, height = await self.operator.probe_dimensions(ctx.source.path)
        log("Image Size:  ", f"{width}px x {height}px")
        options = ctx.options
        log("Tiles:       ", count_tiles(width, height, options.tile_size,
                                         options.min_zoom, options.max_zoom))
        return ctx.update(source=ctx.source.with_size(width, height))

    async def generate_levels(self, ctx: RunContext) -> RunContext:
        title("Creating Tiles")
        counts = await asyncio.gather(
            *(self.make_level(ctx, zoom)
              for zoom in zoom_levels(ctx.options.min_zoom, ctx.options.max_zoom)))
        return ctx.update(tile_count=sum(counts))

    async def make_level(self, ctx: RunContext, zoom: int) -> int:
        """Scale, pad and tile one internal zoom level."""
        source = ctx.source
        tile_size = ctx.options.tile_size
        plan = plan_level(source.width, source.height, tile_size, zoom)
        level_image = ZoomLevelImage.for_level(
            source, zoom, ctx.workspace.scratch_dir,
            plan.padded_width, plan.padded_height)

        log("Resizing Image @ Zoom:  ", zoom)
        await self.operator.scale(source.path, plan.scale_percent, level_image.path)
        log("Extending Image @ Zoom: ", zoom)
        await self.operator.extend_canvas(level_image.path,
                                          level_image.width, level_image.height)
        tiles = await grid.tile_level(self.operator, level_image, plan,
                                      tile_size, ctx.workspace.output_dir)
        log("Tiled Zoom:  ", f"{zoom - 1} ({plan.columns}x{plan.rows} tiles)")
        return len(tiles)

    async def clean_workspace(self, ctx: RunContext):
        log("Clean Workspace: ", ctx.workspace.scratch_dir)
        await remove_dir(ctx.workspace.scratch_dir)

    def place_viewer(self, ctx: RunContext):
        log("Creating Test HTML File.")
        return viewer.write_viewer(ctx.workspace.output_dir,
                                   ctx.options.min_zoom, ctx.options.max_zoom,
                                   tile_size=ctx.options.tile_size,
                                   ext=ctx.source.ext)


def make(image, min_zoom=None, max_zoom=None, zoom=None, tile_size=None, **kwargs):
    """Build a tile pyramid for ``image`` and return the final run context."""
    return Pyramid(image, min_zoom=min_zoom, max_zoom=max_zoom, zoom=zoom,
                   tile_size=tile_size, **kwargs).make()
