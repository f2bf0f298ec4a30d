"""Partitioning of the image into disjoint rectangular tiles.

The image is cut into a near-square grid of ``rows x cols`` tiles, where
``rows`` is the largest divisor of the tile count not exceeding its square
root. Column and row boundaries come from integer division, so the tiles
cover every pixel exactly once and differ in size by at most one pixel
along each axis. Four tiles give the four image quadrants.

Example:
    >>> tiles = partition_tiles(1280, 720, 4)
    >>> [(t.x0, t.y0, t.x1, t.y1) for t in tiles]
    [(0, 0, 640, 360), (640, 0, 1280, 360), (0, 360, 640, 720), (640, 360, 1280, 720)]
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True)
class Tile:
    """A half-open pixel rectangle [x0, x1) x [y0, y1) owned by one worker.

    Attributes:
        index: Position of the tile in the partition (row-major, bottom row first).
        x0: First column.
        y0: First row.
        x1: One past the last column.
        y1: One past the last row.
    """

    index: int
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        """Check whether pixel (x, y) belongs to this tile."""
        return self.x0 <= x < self.x1 and self.y0 <= y < self.y1


def tile_grid(num_tiles: int) -> tuple[int, int]:
    """Get the (rows, cols) grid used for a given tile count.

    Raises:
        ValueError: If num_tiles is not positive.
    """
    if num_tiles <= 0:
        raise ValueError(f"Tile count must be positive, got {num_tiles}")
    rows = 1
    for candidate in range(1, math.isqrt(num_tiles) + 1):
        if num_tiles % candidate == 0:
            rows = candidate
    return rows, num_tiles // rows


def partition_tiles(width: int, height: int, num_tiles: int) -> list[Tile]:
    """Split a width x height image into num_tiles disjoint tiles.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_tiles: Number of tiles (workers).

    Returns:
        The tiles in row-major order, bottom row first.

    Raises:
        ValueError: If the image size or tile count is not positive, or the
            grid would leave a tile without pixels.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")

    rows, cols = tile_grid(num_tiles)
    if cols > width or rows > height:
        raise ValueError(
            f"Cannot split a {width}x{height} image into {num_tiles} tiles "
            f"({rows} rows x {cols} columns)"
        )

    x_bounds = [c * width // cols for c in range(cols + 1)]
    y_bounds = [r * height // rows for r in range(rows + 1)]

    tiles = []
    for r in range(rows):
        for c in range(cols):
            tiles.append(
                Tile(
                    index=len(tiles),
                    x0=x_bounds[c],
                    y0=y_bounds[r],
                    x1=x_bounds[c + 1],
                    y1=y_bounds[r + 1],
                )
            )
    return tiles


def tiles_to_array(tiles: list[Tile]) -> npt.NDArray[np.int32]:
    """Pack tile rectangles into an (n, 4) int32 array of (x0, y0, x1, y1)."""
    return np.array([(t.x0, t.y0, t.x1, t.y1) for t in tiles], dtype=np.int32).reshape(-1, 4)
