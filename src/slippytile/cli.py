"""Command-line interface for slippytile.

Cuts an image into slippy map tiles using the Typer framework::

    slippytile photo.png --min-zoom 0 --max-zoom 4
"""
from typing import Optional

import typer

from . import config, utils
from .errors import TileError
from .magick import Magick
from .pyramid import Pyramid

app = typer.Typer(add_completion=False,
                  help="Cut an image into slippy map tiles for a web map viewer.")


@app.command()
def make(
    image: Optional[str] = typer.Argument(
        None, help="Image to tile, relative to the working directory."),
    min_zoom: Optional[int] = typer.Option(
        None, "--min-zoom", "--minZoom", help="Lowest zoom level [default: 0]."),
    max_zoom: Optional[int] = typer.Option(
        None, "--max-zoom", "--maxZoom", help="Highest zoom level [default: 2]."),
    zoom: Optional[int] = typer.Option(
        None, "--zoom", help="Generate a single zoom level, overrides both bounds."),
    tile_size: Optional[int] = typer.Option(
        None, "--tile-size", "--tileSize", help="Tile size in pixels [default: 256]."),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output directory [default: tiles]."),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", help="Limit concurrent ImageMagick processes (0: no limit)."),
    env: str = typer.Option("DEFAULT", "--env", help="Settings environment to use."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True,
                                help="Print more progress, repeat for more."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors."),
):
    """Cut IMAGE into slippy map tiles under ./tiles."""
    if env != "DEFAULT":
        config.change_env(env)
    if quiet:
        level = 0
    elif verbose:
        level = 1 + verbose
    else:
        level = config.get("verbose")

    with config.overridden("verbose", level):
        try:
            pyramid = Pyramid(image, min_zoom=min_zoom, max_zoom=max_zoom, zoom=zoom,
                              tile_size=tile_size, output_dir=output,
                              operator=Magick(jobs=jobs))
            ctx = pyramid.make()
        except TileError as err:
            utils.error(str(err))
            raise typer.Exit(code=1)

        utils.success("Conversion Finished!")
        utils.success(f"{ctx.tile_count} tiles created in {ctx.workspace.output_dir}")


def main():
    app()
