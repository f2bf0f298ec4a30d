"""Unit tests for image tiling."""

import numpy as np
import pytest

from tiletrace.core.tiling import Tile, partition_tiles, tile_grid, tiles_to_array


class TestTileGrid:
    @pytest.mark.parametrize(
        "num_tiles, expected",
        [(1, (1, 1)), (2, (1, 2)), (4, (2, 2)), (6, (2, 3)), (7, (1, 7)), (12, (3, 4)), (16, (4, 4))],
    )
    def test_grid_shape(self, num_tiles, expected):
        assert tile_grid(num_tiles) == expected

    @pytest.mark.parametrize("num_tiles", [0, -3])
    def test_invalid_count_raises(self, num_tiles):
        with pytest.raises(ValueError):
            tile_grid(num_tiles)


class TestPartitionTiles:
    def test_four_tiles_are_quadrants(self):
        tiles = partition_tiles(1280, 720, 4)

        assert [(t.x0, t.y0, t.x1, t.y1) for t in tiles] == [
            (0, 0, 640, 360),
            (640, 0, 1280, 360),
            (0, 360, 640, 720),
            (640, 360, 1280, 720),
        ]
        assert [t.index for t in tiles] == [0, 1, 2, 3]

    @pytest.mark.parametrize(
        "width, height, num_tiles",
        [(1, 1, 1), (13, 7, 3), (13, 7, 6), (100, 37, 12), (5, 5, 5), (1280, 720, 16)],
    )
    def test_tiles_cover_every_pixel_once(self, width, height, num_tiles):
        tiles = partition_tiles(width, height, num_tiles)

        coverage = np.zeros((width, height), dtype=np.int32)
        for t in tiles:
            assert t.width > 0 and t.height > 0
            coverage[t.x0 : t.x1, t.y0 : t.y1] += 1

        assert len(tiles) == num_tiles
        assert np.all(coverage == 1)
        assert sum(t.pixel_count for t in tiles) == width * height

    def test_tile_sizes_differ_by_at_most_one(self):
        tiles = partition_tiles(101, 50, 6)

        widths = {t.width for t in tiles}
        heights = {t.height for t in tiles}
        assert max(widths) - min(widths) <= 1
        assert max(heights) - min(heights) <= 1

    @pytest.mark.parametrize(
        "width, height, num_tiles",
        [(0, 10, 1), (10, 0, 1), (10, 10, 0), (2, 10, 3), (10, 1, 4)],
    )
    def test_invalid_partition_raises(self, width, height, num_tiles):
        with pytest.raises(ValueError):
            partition_tiles(width, height, num_tiles)


class TestTile:
    def test_contains_is_half_open(self):
        tile = Tile(index=0, x0=2, y0=3, x1=5, y1=4)

        assert tile.contains(2, 3)
        assert tile.contains(4, 3)
        assert not tile.contains(5, 3)
        assert not tile.contains(2, 4)
        assert (tile.width, tile.height, tile.pixel_count) == (3, 1, 3)

    def test_tiles_to_array(self):
        array = tiles_to_array(partition_tiles(8, 4, 2))

        assert array.dtype == np.int32
        np.testing.assert_array_equal(array, [[0, 0, 4, 4], [4, 0, 8, 4]])
