"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection
routines:

Components:
    sphere: Sphere primitive, the shared HitRecord, and the EPSILON policy
    plane: Infinite one-sided plane primitive

All intersection routines are Taichi functions (@ti.func) and share one
contract: hits with t <= EPSILON are rejected, and numerical degeneracies
(negative discriminant, ray parallel to the plane) are reported as misses.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape)
"""

from .plane import PARALLEL_THRESHOLD, Plane, hit_plane
from .sphere import EPSILON, HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = [
    "EPSILON",
    "PARALLEL_THRESHOLD",
    "HitRecord",
    "Sphere",
    "Plane",
    "hit_sphere",
    "hit_plane",
    "make_miss_record",
]
