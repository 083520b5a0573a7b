"""Console output helpers.

Progress lines are gated on the ``verbose`` setting so that the per-tile
chatter of large pyramids only shows up when asked for.
"""
import typer

from . import config


def verbosity():
    return config.get("verbose")


def vprint(text, level=0):
    """Print text if the verbosity setting is above ``level``.

    Parameters
    ----------
    text : str
        Text to print.
    level : int, optional
        Minimum verbosity (exclusive) needed to print, by default 0.
    """
    if verbosity() > level:
        print(text)


def title(msg):
    """Print a section title."""
    if verbosity() > 0:
        typer.secho(" ", bg=typer.colors.BLUE, nl=False)
        typer.secho(f" {msg}", fg=typer.colors.BLUE, bold=True)


def log(name, msg="", level=0):
    """Print a progress line made of a highlighted name and a value."""
    if verbosity() > level:
        typer.secho(" ", bg=typer.colors.YELLOW, nl=False)
        typer.secho(f" {name}", fg=typer.colors.YELLOW, bold=True, nl=False)
        typer.echo(f" {msg}")


def success(msg):
    if verbosity() > 0:
        typer.secho(" ", bg=typer.colors.GREEN, nl=False)
        typer.secho(f" {msg}", fg=typer.colors.GREEN, bold=True)


def error(msg):
    """Print an error on stderr regardless of verbosity."""
    typer.secho(" ", bg=typer.colors.RED, nl=False, err=True)
    typer.secho(f" {msg}", fg=typer.colors.RED, bold=True, err=True)
