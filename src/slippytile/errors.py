"""Exceptions raised while building a tile pyramid.

Every failure of a run is a :class:`TileError`; the command line prints the
message and exits with status 1.
"""


class TileError(Exception):
    """Base class for all slippytile errors."""


class InvalidInputError(TileError):
    """The run was started with unusable arguments."""


class ToolUnavailableError(TileError):
    """A required external command cannot be invoked."""


class FilesystemError(TileError):
    """Creating, probing or removing a path failed."""


class ExternalOperationError(TileError):
    """An external image command exited with a non-zero status."""

    def __init__(self, message, cmd=None, returncode=None, stderr=""):
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
