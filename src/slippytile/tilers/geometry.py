"""Pyramid geometry.

Pure functions deciding, for each zoom level, how much the source image is
scaled, how far its canvas is extended so it divides evenly into tiles, and
where every tile is cropped from.

Zoom levels are 1-based here: level 1 is the coarsest and its longer side
is exactly one tile long. Level ``z`` is written to the folder ``z - 1`` so
that user facing zoom values match folder names.
"""
from typing import Iterator, List, Tuple

from pydantic import BaseModel, ConfigDict


class LevelPlan(BaseModel):
    """Geometry of one zoom level.

    Attributes
    ----------
    zoom : int
        Internal 1-based zoom level.
    size : int
        Length in pixels of the longer side of the scaled image.
    scale_percent : float
        Resize factor applied to the source, in percent.
    scaled_width, scaled_height : float
        Source dimensions after scaling, before padding.
    columns, rows : int
        Number of tiles along each axis.
    padded_width, padded_height : int
        Canvas the scaled image is extended to, a whole number of tiles.
    """
    model_config = ConfigDict(frozen=True)

    zoom: int
    size: int
    scale_percent: float
    scaled_width: float
    scaled_height: float
    columns: int
    rows: int
    padded_width: int
    padded_height: int

    @property
    def grid(self) -> Tuple[int, int]:
        return self.columns, self.rows

    @property
    def tile_count(self) -> int:
        return self.columns * self.rows


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def plan_level(source_width: int, source_height: int,
               tile_size: int, zoom: int) -> LevelPlan:
    """Compute the geometry of zoom level ``zoom``.

    Parameters
    ----------
    source_width, source_height : int
        Dimensions of the source image in pixels.
    tile_size : int
        Edge length of a tile in pixels.
    zoom : int
        Internal 1-based zoom level.

    Returns
    -------
    LevelPlan
        Scale, grid and canvas of the level.
    """
    size = tile_size * 2 ** (zoom - 1)
    max_side = max(source_width, source_height)

    # Integer arithmetic so that the longer side lands on exactly `size`.
    columns = _ceil_div(source_width * size, max_side * tile_size)
    rows = _ceil_div(source_height * size, max_side * tile_size)

    return LevelPlan(
        zoom=zoom,
        size=size,
        scale_percent=(size / max_side) * 100,
        scaled_width=source_width * size / max_side,
        scaled_height=source_height * size / max_side,
        columns=columns,
        rows=rows,
        padded_width=columns * tile_size,
        padded_height=rows * tile_size,
    )


def crop_offset(tile_size: int, index: int) -> int:
    """Top/left pixel of the tile at 1-based ``index`` along an axis."""
    return tile_size * index - tile_size


def tile_windows(plan: LevelPlan, tile_size: int) -> Iterator[Tuple[int, int, int, int]]:
    """Yield ``(column, row, crop_x, crop_y)`` for every cell of ``plan``.

    Columns and rows are 1-based; cells are yielded column by column.
    """
    for column in range(1, plan.columns + 1):
        for row in range(1, plan.rows + 1):
            yield (column, row,
                   crop_offset(tile_size, column), crop_offset(tile_size, row))


def zoom_levels(min_zoom: int, max_zoom: int) -> List[int]:
    """Internal levels covering the user facing range ``[min_zoom, max_zoom]``."""
    return list(range(min_zoom + 1, max_zoom + 2))


def count_tiles(source_width: int, source_height: int, tile_size: int,
                min_zoom: int, max_zoom: int) -> int:
    """Total number of tiles written for a zoom range."""
    return sum(
        plan_level(source_width, source_height, tile_size, zoom).tile_count
        for zoom in zoom_levels(min_zoom, max_zoom)
    )
