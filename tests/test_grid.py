"""Tests for the slippytile.tilers.grid module."""

import asyncio
from pathlib import Path

import pytest

from slippytile.errors import ExternalOperationError
from slippytile.images import SourceImage, ZoomLevelImage
from slippytile.tilers import grid
from slippytile.tilers.geometry import plan_level, tile_windows


@pytest.fixture
def level(temp_dir):
    """Working image of internal level 3 for a 1000x600 source."""
    source = SourceImage(name="map.png", directory=temp_dir, width=1000, height=600)
    plan = plan_level(1000, 600, 256, 3)
    image = ZoomLevelImage.for_level(source, 3, temp_dir / ".tmp",
                                     plan.padded_width, plan.padded_height)
    return image, plan


class TestBuildTile:
    """Tests for build_tile."""

    def test_indices_are_zero_based(self, level, temp_dir):
        image, _ = level
        tile = grid.build_tile(image, 4, 3, 256, temp_dir / "tiles")

        assert (tile.zoom, tile.column, tile.row) == (2, 3, 2)
        assert tile.output_path == temp_dir / "tiles" / "2" / "3" / "2.png"

    def test_crop_window(self, level, temp_dir):
        image, _ = level
        tile = grid.build_tile(image, 2, 3, 256, temp_dir / "tiles")

        assert (tile.crop_x, tile.crop_y, tile.size) == (256, 512, 256)


class TestTileLevel:
    """Tests for tile_level."""

    def test_writes_one_file_per_cell(self, level, temp_dir, fake_magick, list_tiles):
        image, plan = level
        output_dir = temp_dir / "tiles"

        tiles = asyncio.run(grid.tile_level(fake_magick, image, plan, 256, output_dir))

        assert len(tiles) == plan.columns * plan.rows == 12
        files = list_tiles(output_dir)
        assert len(files) == 12
        assert files[0] == str(Path("2") / "0" / "0.png")
        assert str(Path("2") / "3" / "2.png") in files

    def test_tiles_follow_level_windows(self, level, temp_dir, fake_magick):
        image, plan = level
        tiles = asyncio.run(grid.tile_level(fake_magick, image, plan, 256, temp_dir / "tiles"))

        windows = list(tile_windows(plan, 256))
        assert [(tile.column + 1, tile.row + 1, tile.crop_x, tile.crop_y)
                for tile in tiles] == windows

    def test_crops_from_working_image(self, level, temp_dir, fake_magick):
        image, plan = level
        asyncio.run(grid.tile_level(fake_magick, image, plan, 256, temp_dir / "tiles"))

        crops = fake_magick.called("crop")
        assert {call[1] for call in crops} == {image.path}
        assert {(call[4], call[5]) for call in crops} == {
            (x, y) for x in (0, 256, 512, 768) for y in (0, 256, 512)}

    def test_existing_column_dir_is_reused(self, level, temp_dir, fake_magick, list_tiles):
        image, plan = level
        output_dir = temp_dir / "tiles"
        (output_dir / "2" / "0").mkdir(parents=True)

        asyncio.run(grid.tile_level(fake_magick, image, plan, 256, output_dir))
        assert len(list_tiles(output_dir)) == 12

    def test_crop_failure_propagates(self, level, temp_dir, make_fake):
        """A failing crop should fail the level while its siblings still run."""
        image, plan = level
        operator = make_fake(fail_on="*/2/1/1.png")
        output_dir = temp_dir / "tiles"

        with pytest.raises(ExternalOperationError):
            asyncio.run(grid.tile_level(operator, image, plan, 256, output_dir))

        assert not (output_dir / "2" / "1" / "1.png").exists()
        assert (output_dir / "2" / "1" / "0.png").exists()
        assert (output_dir / "2" / "1" / "2.png").exists()
