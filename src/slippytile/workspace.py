"""Workspace directories.

A run owns two directories: a scratch directory for the per-level working
images and the output directory receiving the tile tree. Neither is ever
reused; when the requested path exists a numeric suffix is appended to the
leaf name (``tiles``, ``tiles1``, ``tiles2``, ...) until a free one is found.

Per-tile directories are different: they are namespaced by zoom and column,
so :func:`ensure_dir` creates them with "exists is fine" semantics.
"""
import asyncio
import os
import shutil
from pathlib import Path

from .errors import FilesystemError
from .images import Workspace
from .utils import log


def candidate_path(path: Path, count: int) -> Path:
    """``path`` with ``count`` appended to its leaf, ``path`` itself for 0."""
    if count == 0:
        return path
    return path.with_name(f"{path.name}{count}")


async def _exists(path: Path) -> bool:
    try:
        await asyncio.to_thread(os.stat, path)
    except FileNotFoundError:
        return False
    except OSError as err:
        raise FilesystemError(f"Cannot inspect {path}: {err}") from err
    return True


async def create_unique_dir(path) -> Path:
    """Create ``path`` or the first free suffixed sibling of it.

    Parameters
    ----------
    path : str or pathlib.Path
        Desired directory. Missing parents are created.

    Returns
    -------
    pathlib.Path
        The directory actually created.

    Raises
    ------
    FilesystemError
        If probing or creating a candidate fails for any reason other than
        the candidate already existing.
    """
    path = Path(path)
    count = 0
    while True:
        candidate = candidate_path(path, count)
        count += 1
        if await _exists(candidate):
            continue
        log("Creating:    ", candidate)
        try:
            await asyncio.to_thread(candidate.mkdir, parents=True)
        except FileExistsError:
            # Lost a race against another creator, try the next name.
            continue
        except OSError as err:
            raise FilesystemError(f"Cannot create {candidate}: {err}") from err
        return candidate


async def create_workspace(scratch_dir, output_dir) -> Workspace:
    """Create the scratch and output directories concurrently."""
    scratch, output = await asyncio.gather(
        create_unique_dir(scratch_dir),
        create_unique_dir(output_dir),
    )
    return Workspace(scratch_dir=scratch, output_dir=output)


async def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents, accepting an existing directory."""
    try:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)
    except OSError as err:
        raise FilesystemError(f"Cannot create {path}: {err}") from err
    return Path(path)


async def remove_dir(path: Path):
    """Delete ``path`` and everything below it."""
    try:
        await asyncio.to_thread(shutil.rmtree, path)
    except OSError as err:
        raise FilesystemError(f"Cannot remove {path}: {err}") from err
