"""Tile geometry and per-level tiling.

This package contains the pure pyramid geometry and the concurrent cropping
of a zoom level's working image into its tile grid.
"""

from .geometry import LevelPlan, plan_level, crop_offset, tile_windows, zoom_levels, count_tiles
from .grid import build_tile, tile_level
