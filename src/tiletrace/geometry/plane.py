"""Infinite plane primitive with ray-plane intersection.

A plane is the set of points p with dot(p, normal) = offset, where normal
is unit length and offset is the signed distance of the plane from the
origin along that normal.

The plane is one-sided in normal orientation: the reported normal is always
the stored normal, regardless of which side the ray arrives from.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.geometry.plane import Plane, hit_plane
    >>> # Floor at y = -1
    >>> floor = Plane(normal=ti.math.vec3(0, 1, 0), offset=-1.0)
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from .sphere import EPSILON, HitRecord, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays closer than this to parallel with the plane are treated as misses
PARALLEL_THRESHOLD = 1e-6


@ti.dataclass
class Plane:
    """An infinite plane defined by a unit normal and a signed offset.

    Attributes:
        normal: Unit normal of the plane (vec3).
        offset: Signed distance from the origin along the normal.
    """

    normal: vec3
    offset: ti.f32


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Solves dot(origin + t * direction, normal) = offset:

        t = (offset - dot(normal, origin)) / dot(normal, direction)

    Near-parallel rays (|dot(normal, direction)| below PARALLEL_THRESHOLD)
    are misses, as are hits with t <= EPSILON.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord whose normal is the plane normal.
    """
    denom = tm.dot(plane.normal, ray_direction)

    result = make_miss_record()

    if ti.abs(denom) >= PARALLEL_THRESHOLD:
        t = (plane.offset - tm.dot(plane.normal, ray_origin)) / denom
        if t > EPSILON:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=plane.normal,
            )

    return result
