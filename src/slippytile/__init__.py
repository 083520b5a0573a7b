"""Cut a single raster image into a slippy map tile pyramid.

The pixel work is done by ImageMagick; this package plans the pyramid
geometry, manages the workspace and drives the external commands
concurrently across zoom levels, columns and rows.
"""

from .errors import (TileError, InvalidInputError, ToolUnavailableError,
                     FilesystemError, ExternalOperationError)
from .pyramid import Pyramid, Stage, TileOptions, make

__all__ = [
    "TileError",
    "InvalidInputError",
    "ToolUnavailableError",
    "FilesystemError",
    "ExternalOperationError",
    "Pyramid",
    "Stage",
    "TileOptions",
    "make",
]
