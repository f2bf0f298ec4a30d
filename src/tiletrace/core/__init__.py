"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector helpers
    sampler: Per-worker xorshift32 generator and per-tile seed derivation
    integrator: Radiance estimation along a ray (bounce loop, background)
    tiling: Partition of the image into disjoint tiles
    scheduler: Tiled parallel rendering into the image buffer

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    normalize_tuple,
    random_in_unit_sphere,
    ray_at,
    reflect,
    refract,
    schlick,
    vec3,
)
from .sampler import derive_tile_seeds, next_float, next_symmetric, seed_to_state, xorshift32
from .tiling import Tile, partition_tiles, tile_grid

# Note: integrator and scheduler are NOT imported here to avoid circular imports.
# Import directly from tiletrace.core.integrator or tiletrace.core.scheduler.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "normalize_tuple",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick",
    "near_zero",
    "random_in_unit_sphere",
    "xorshift32",
    "next_float",
    "next_symmetric",
    "derive_tile_seeds",
    "seed_to_state",
    "Tile",
    "tile_grid",
    "partition_tiles",
]
