"""Configuration management for slippytile.

Settings are loaded with Dynaconf from several locations in order of
increasing priority:

1. Global settings (/etc/slippytile/)
2. User settings (~/.config/slippytile/)
3. Current directory settings (./)
4. Environment variable specified file (SLIPPYTILE_SETTINGS_FILE_FOR_DYNACONF)

Environment variables prefixed with ``SLIPPYTILE_`` override all files.

Recognised keys
---------------
tile_size : int
    Edge length of every tile in pixels, default 256.
min_zoom, max_zoom : int
    Default zoom range, 0 and 2.
scratch_dir, output_dir : str
    Workspace directory names relative to the working directory,
    ``.tmp`` and ``tiles``.
convert_command, identify_command : str
    ImageMagick executables, ``convert`` and ``identify``.
jobs : int
    Maximum number of concurrent ImageMagick processes, 0 for no limit.
verbose : int
    Console verbosity, 0 silences progress output.
"""
import contextlib
import os
import pathlib

from dynaconf import Dynaconf

DEFAULTS = {
    "tile_size": 256,
    "min_zoom": 0,
    "max_zoom": 2,
    "scratch_dir": ".tmp",
    "output_dir": "tiles",
    "convert_command": "convert",
    "identify_command": "identify",
    "jobs": 0,
    "verbose": 1,
}
INT_KEYS = ("tile_size", "min_zoom", "max_zoom", "jobs", "verbose")

USER_DIR = pathlib.Path("~/.config/slippytile").expanduser()
GLOB_DIR = pathlib.Path("/etc/slippytile/")
CURR_DIR = pathlib.Path("./").absolute()
settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    USER_DIR / ".secrets.toml",
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("SLIPPYTILE_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="SLIPPYTILE",
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)


def get(key):
    """Return setting ``key``, falling back to its built-in default.

    Integer keys are coerced so values from environment variables and TOML
    files compare the same way.
    """
    value = settings.get(key, DEFAULTS[key])
    if key in INT_KEYS:
        return int(value)
    return value


@contextlib.contextmanager
def overridden(key, value):
    """Temporarily set ``key`` to ``value``, restoring the old value on exit."""
    previous = settings.get(key, DEFAULTS.get(key))
    settings.set(key, value)
    try:
        yield
    finally:
        settings.set(key, previous)


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()
