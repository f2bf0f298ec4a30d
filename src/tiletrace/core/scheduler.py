"""Tiled parallel rendering.

The image is split into disjoint tiles (see tiling.py) and rendered by one
Taichi kernel whose outermost loop runs over tiles. Taichi parallelizes only
the outermost loop of a kernel, so every tile becomes an independent task on
its thread pool and all loops inside a tile run serially in that task.

Each tile task:
    - seeds a private generator from its entry in the tile seed table
    - walks its own half-open pixel rectangle
    - averages samples_per_pixel estimates per pixel
    - writes each pixel of its rectangle exactly once

Tiles never write the same pixel, so the shared color buffer needs no locks
or atomics. The join is the kernel returning followed by ti.sync(); only then
is the image read back.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.config import RenderConfig
    >>> from tiletrace.core.scheduler import TileRenderer
    >>> from tiletrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = TileRenderer(RenderConfig(width=320, height=180), camera)
    >>> image = renderer.render()  # (180, 320, 3) float32
"""

import logging
import time
from dataclasses import replace

import numpy as np
import numpy.typing as npt
import taichi as ti

from tiletrace.camera.pinhole import PinholeCamera, setup_camera
from tiletrace.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, MAX_TILES, RenderConfig
from tiletrace.core.integrator import get_color, setup_background
from tiletrace.core.sampler import derive_tile_seeds
from tiletrace.core.tiling import Tile, partition_tiles, tiles_to_array
from tiletrace.scene.intersection import get_shape_count

logger = logging.getLogger(__name__)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer, pixel (0, 0) is bottom-left
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Tile table: (x0, y0, x1, y1) and generator seed per tile
_tile_bounds = ti.Vector.field(4, dtype=ti.i32, shape=MAX_TILES)
_tile_seeds = ti.field(dtype=ti.u32, shape=MAX_TILES)


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Values are linear radiance and are not clamped.

    Returns:
        Array of shape (height, width, 3), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


# =============================================================================
# Tile Kernel
# =============================================================================


def _upload_tiles(tiles: list[Tile], seeds: npt.NDArray[np.uint32]) -> None:
    if len(tiles) > MAX_TILES:
        raise ValueError(f"Tile count {len(tiles)} exceeds maximum supported ({MAX_TILES})")
    bounds = tiles_to_array(tiles)
    for i in range(len(tiles)):
        _tile_bounds[i] = bounds[i].tolist()
        _tile_seeds[i] = int(seeds[i])


@ti.kernel
def _render_tiles(num_tiles: ti.i32, samples: ti.i32, max_depth: ti.i32):
    """Render every tile, one parallel task per tile."""
    ti.loop_config(block_dim=1)
    for tile in range(num_tiles):
        bounds = _tile_bounds[tile]
        state = _tile_seeds[tile]
        for y in range(bounds[1], bounds[3]):
            for x in range(bounds[0], bounds[2]):
                color, state = get_color(x, y, samples, max_depth, state)
                _color_buffer[x, y] = color


# =============================================================================
# Renderer
# =============================================================================


class TileRenderer:
    """Renders the current scene with one parallel worker per tile.

    The scene (shape and material tables) must be populated before render()
    is called, typically through a SceneManager. The renderer owns the
    camera, background and image buffer setup for the duration of a render.

    Attributes:
        config: The validated render configuration.
        camera: The camera used for primary rays.
        tiles: The tile partition of the image.
        seeds: Per-tile generator seeds derived from config.seed.
    """

    def __init__(self, config: RenderConfig, camera: PinholeCamera | None = None) -> None:
        """Validate the configuration and plan the tiles.

        Args:
            config: Render configuration.
            camera: Camera to render from. If None, a camera at the origin
                looking down +Z is used. In both cases the camera's field of
                view is the one in ``config``.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config.validate()
        if camera is None:
            camera = PinholeCamera()
        self.config = config
        self.camera = replace(camera, field_of_view=config.field_of_view)
        self.tiles = partition_tiles(config.width, config.height, config.num_tiles)
        self.seeds = derive_tile_seeds(config.seed, len(self.tiles))
        logger.debug(
            "Planned %d tiles for %dx%d: %s",
            len(self.tiles),
            config.width,
            config.height,
            [(t.x0, t.y0, t.x1, t.y1) for t in self.tiles],
        )

    def render(self) -> npt.NDArray[np.float32]:
        """Render the image and wait for every tile to finish.

        Returns:
            Linear radiance array of shape (height, width, 3), top row first.
        """
        config = self.config

        setup_render_target(config.width, config.height)
        setup_camera(self.camera, config.width, config.height)
        setup_background(config.background, config.background_top)
        _upload_tiles(self.tiles, self.seeds)

        if get_shape_count() == 0:
            logger.warning("Scene has no shapes, every pixel will be the background")

        logger.info(
            "Rendering %dx%d at %d spp, max depth %d, %d tiles",
            config.width,
            config.height,
            config.samples_per_pixel,
            config.max_depth,
            len(self.tiles),
        )
        start = time.perf_counter()

        _render_tiles(len(self.tiles), config.samples_per_pixel, config.max_depth)
        ti.sync()

        elapsed = time.perf_counter() - start
        logger.info(
            "Rendered %d pixels in %.3f s (%.1f ksamples/s)",
            config.pixel_count,
            elapsed,
            config.pixel_count * config.samples_per_pixel / max(elapsed, 1e-9) / 1000.0,
        )

        return get_image_numpy()


def render_scene(config: RenderConfig, camera: PinholeCamera | None = None) -> npt.NDArray[np.float32]:
    """Render the current scene with the given configuration and camera.

    Convenience wrapper around TileRenderer(config, camera).render().
    """
    return TileRenderer(config, camera).render()
