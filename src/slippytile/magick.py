"""ImageMagick commands run as asyncio subprocesses.

All pixel work of a pyramid run happens here: probing the source size,
scaling it per zoom level, extending the canvas and cropping tiles. Each
call spawns one ImageMagick process and suspends until it exits.
"""
import asyncio
import contextlib
import re
import shlex

from . import config
from .errors import ExternalOperationError, ToolUnavailableError
from .utils import vprint

_DIMENSIONS = re.compile(r"(\d+),(\d+)")


def format_percent(percent: float) -> str:
    """Render a resize percentage without exponent notation."""
    return f"{percent:.6f}".rstrip("0").rstrip(".") + "%"


class Magick:
    """Thin async wrapper around the ``convert`` and ``identify`` commands.

    Parameters
    ----------
    convert : str, optional
        Executable used to transform images. If None, uses settings.
    identify : str, optional
        Executable used to probe images. If None, uses settings.
    jobs : int, optional
        Maximum number of concurrent processes, 0 for no limit. If None,
        uses settings.
    """

    def __init__(self, convert: str = None, identify: str = None, jobs: int = None):
        self.convert = convert or config.get("convert_command")
        self.identify = identify or config.get("identify_command")
        self.jobs = jobs if jobs is not None else config.get("jobs")
        self._semaphore = None
        self._loop = None

    @property
    def commands(self):
        return [self.convert, self.identify]

    def _slot(self):
        if self.jobs <= 0:
            return contextlib.nullcontext()
        # Semaphores belong to one event loop; every asyncio.run gets its own.
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._semaphore = asyncio.Semaphore(self.jobs)
            self._loop = loop
        return self._semaphore

    async def run(self, *args) -> str:
        """Run a command and return its stdout.

        Raises
        ------
        ExternalOperationError
            If the command cannot be spawned or exits with a non-zero status.
        """
        cmd = [str(arg) for arg in args]
        cmdline = shlex.join(cmd)
        vprint(f"  $ {cmdline}", level=2)
        async with self._slot():
            try:
                proc = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as err:
                raise ExternalOperationError(
                    f"Command failed: {cmdline}: {err}", cmd=cmd) from err
            stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            stderr = stderr.decode(errors="replace").strip()
            raise ExternalOperationError(
                f"Command failed: {cmdline}\n{stderr}",
                cmd=cmd, returncode=proc.returncode, stderr=stderr)
        return stdout.decode(errors="replace")

    async def verify(self, command: str):
        """Check that ``command`` answers a version probe."""
        try:
            await self.run(*shlex.split(command), "-version")
        except ExternalOperationError as err:
            raise ToolUnavailableError(
                f"Command '{command}' is not available: {err}") from err

    async def probe_dimensions(self, path):
        """Return the ``(width, height)`` of the image at ``path``.

        Multi-frame sources (animated GIF, multi-page TIFF) report one line
        per frame; the first frame is the one that gets tiled.
        """
        stdout = await self.run(*shlex.split(self.identify),
                                "-format", "%w,%h\n", path)
        first = stdout.strip().splitlines()[0] if stdout.strip() else ""
        match = _DIMENSIONS.fullmatch(first)
        width, height = (int(match.group(1)), int(match.group(2))) if match else (0, 0)
        if width <= 0 or height <= 0:
            raise ExternalOperationError(
                f"Cannot read dimensions of {path} from {stdout!r}")
        return width, height

    async def scale(self, src, percent: float, dst):
        """Resize the first frame of ``src`` by ``percent`` into ``dst``."""
        await self.run(*shlex.split(self.convert), f"{src}[0]",
                       "-resize", format_percent(percent), dst)

    async def extend_canvas(self, path, width: int, height: int):
        """Extend ``path`` in place to ``width`` x ``height``.

        The image stays anchored top-left; the added area is transparent.
        """
        await self.run(*shlex.split(self.convert), path,
                       "-background", "none", "-gravity", "NorthWest",
                       "-extent", f"{width}x{height}", path)

    async def crop(self, path, width: int, height: int, x: int, y: int, dst):
        await self.run(*shlex.split(self.convert), path,
                       "-crop", f"{width}x{height}+{x}+{y}", "+repage", dst)
