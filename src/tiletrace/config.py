"""Render configuration.

RenderConfig collects every tunable of a render in one place. It is passed
to the TileRenderer and built by the command-line front end.

This module declares no Taichi fields, so it can be imported before
ti.init() is called.

Example:
    >>> from tiletrace.config import RenderConfig
    >>> config = RenderConfig(width=320, height=180, samples_per_pixel=4)
    >>> config.validate()
    >>> config.aspect_ratio
    1.7777777777777777
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

from tiletrace.core.tiling import tile_grid

# =============================================================================
# Limits and Defaults
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Maximum number of tiles per render
MAX_TILES = 1024

# Maximum ray bounces (path length)
MAX_DEPTH = 8

# Sky color for rays that escape the scene
DEFAULT_BACKGROUND = (0.8, 0.8, 1.0)

# tan(fov / 2) = 16 / 9, so a 16:9 image spans [-1, 1] vertically
DEFAULT_FIELD_OF_VIEW = math.degrees(2.0 * math.atan(16.0 / 9.0))


@dataclass
class RenderConfig:
    """Configuration for a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        field_of_view: Horizontal field of view in degrees, in (0, 180).
        samples_per_pixel: Jittered samples averaged per pixel.
        max_depth: Bounce budget per camera ray.
        num_tiles: Number of tiles, one parallel worker each.
        seed: Master seed; per-tile seeds are derived from it.
        background: Sky color, or the color straight down when
            background_top is set.
        background_top: Optional sky color straight up, enabling a vertical
            gradient.
        gamma: Output gamma applied at PNG encoding (2.0 = square root,
            1.0 = linear).
    """

    width: int = 1280
    height: int = 720
    field_of_view: float = DEFAULT_FIELD_OF_VIEW
    samples_per_pixel: int = 16
    max_depth: int = MAX_DEPTH
    num_tiles: int = 4
    seed: int = 0
    background: tuple[float, float, float] = DEFAULT_BACKGROUND
    background_top: tuple[float, float, float] | None = None
    gamma: float = 2.0

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def validate(self) -> None:
        """Check that the configuration describes a renderable image.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if not 0.0 < self.field_of_view < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.field_of_view}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"Samples per pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"Max depth must be non-negative, got {self.max_depth}")
        if self.num_tiles <= 0:
            raise ValueError(f"Tile count must be positive, got {self.num_tiles}")
        if self.num_tiles > MAX_TILES:
            raise ValueError(f"Tile count {self.num_tiles} exceeds maximum supported ({MAX_TILES})")
        rows, cols = tile_grid(self.num_tiles)
        if cols > self.width or rows > self.height:
            raise ValueError(
                f"Cannot split a {self.width}x{self.height} image into {self.num_tiles} tiles"
            )
        if self.seed < 0:
            raise ValueError(f"Seed must be non-negative, got {self.seed}")
        if self.gamma <= 0.0:
            raise ValueError(f"Gamma must be positive, got {self.gamma}")
        for name, color in (("background", self.background), ("background_top", self.background_top)):
            if color is not None and len(color) != 3:
                raise ValueError(f"{name} must have 3 components, got {color!r}")

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration as a plain dictionary."""
        return asdict(self)
