"""Cut one zoom level's working image into its tile grid.

Columns are processed concurrently; inside a column the rows are cropped
concurrently once the column directory exists. Every tile writes to its own
path, so no coordination between siblings is needed.
"""
import asyncio
from itertools import groupby
from operator import itemgetter
from pathlib import Path
from typing import List

from ..images import Tile, ZoomLevelImage
from ..utils import log
from ..workspace import ensure_dir
from .geometry import LevelPlan, crop_offset, tile_windows


def build_tile(level_image: ZoomLevelImage, column: int, row: int,
               tile_size: int, output_dir: Path) -> Tile:
    """Describe the tile at 1-based ``column``/``row`` of ``level_image``."""
    zoom = level_image.zoom - 1
    output_path = (Path(output_dir) / str(zoom) / str(column - 1)
                   / f"{row - 1}{level_image.ext}")
    return Tile(zoom=zoom, column=column - 1, row=row - 1,
                crop_x=crop_offset(tile_size, column),
                crop_y=crop_offset(tile_size, row),
                size=tile_size, output_path=output_path)


async def crop_tile(operator, level_image: ZoomLevelImage, tile: Tile) -> Tile:
    log("Creating Tile: ", tile.output_path, level=1)
    await operator.crop(level_image.path, tile.size, tile.size,
                        tile.crop_x, tile.crop_y, tile.output_path)
    return tile


async def tile_column(operator, level_image: ZoomLevelImage,
                      tiles: List[Tile]) -> List[Tile]:
    """Create the column directory, then crop every tile in it."""
    column_dir = tiles[0].output_path.parent
    log("Creating Dir:  ", column_dir, level=1)
    await ensure_dir(column_dir)
    return list(await asyncio.gather(
        *(crop_tile(operator, level_image, tile) for tile in tiles)))


async def tile_level(operator, level_image: ZoomLevelImage, plan: LevelPlan,
                     tile_size: int, output_dir: Path) -> List[Tile]:
    """Crop all tiles of a zoom level.

    Parameters
    ----------
    operator : slippytile.magick.Magick
        Image operator performing the crops.
    level_image : ZoomLevelImage
        Scaled and padded working image of the level.
    plan : LevelPlan
        Geometry of the level, giving the grid dimensions.
    tile_size : int
        Edge length of a tile in pixels.
    output_dir : pathlib.Path
        Root of the tile tree.

    Returns
    -------
    list of Tile
        The tiles written, column by column.
    """
    columns = [
        [build_tile(level_image, column, row, tile_size, output_dir)
         for _, row, _, _ in windows]
        for column, windows in groupby(tile_windows(plan, tile_size),
                                       key=itemgetter(0))
    ]
    written = await asyncio.gather(
        *(tile_column(operator, level_image, tiles) for tiles in columns))
    return [tile for column in written for tile in column]
