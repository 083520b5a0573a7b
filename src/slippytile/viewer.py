"""Preview page written next to the tiles."""
import pathlib
from importlib import resources

from jinja2 import Template

from .errors import FilesystemError


def render(min_zoom, max_zoom, tile_size=256, ext=".png"):
    """Render the Leaflet preview page for a tile tree.

    Args:
        min_zoom: Lowest zoom level present in the tree
        max_zoom: Highest zoom level present in the tree
        tile_size: Tile edge length in pixels
        ext: Tile file extension, including the dot
    """
    source = resources.files("slippytile").joinpath("templates/index.html")
    template = Template(source.read_text(encoding="utf-8"))
    return template.render(min_zoom=min_zoom, max_zoom=max_zoom,
                           tile_size=tile_size, ext=ext)


def write_viewer(output_dir, min_zoom, max_zoom, tile_size=256, ext=".png"):
    """Write ``index.html`` into ``output_dir`` and return its path."""
    output_path = pathlib.Path(output_dir) / "index.html"
    rendered = render(min_zoom, max_zoom, tile_size=tile_size, ext=ext)
    try:
        with open(output_path, "w", encoding="utf-8") as fp:
            fp.write(rendered)
    except OSError as err:
        raise FilesystemError(f"Cannot write {output_path}: {err}") from err
    return output_path
