"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord shared by all
primitives, and the sphere intersection routine. The quadratic is solved
with the numerically stable formulation from Ray Tracing Gems, which avoids
catastrophic cancellation when b^2 is nearly equal to 4ac.

Hits with t <= EPSILON are rejected so that rays scattered from a surface
do not immediately re-hit it ("shadow acne").

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 3), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum accepted ray parameter, in world units
EPSILON = 1e-3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The outward surface normal at the intersection point (unit
            length). It is never flipped toward the viewer.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def _sphere_roots(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Roots of a*t^2 + 2*h*t + c = 0 as (near, far).

    Uses q = -(h + sign(h) * sqrt_d), t = q / a and t = c / q, which keeps
    both roots accurate when h^2 is close to a*c.
    """
    q = -(h + ti.select(h < 0.0, -1.0, 1.0) * sqrt_d)

    r0 = (-h - sqrt_d) / a
    r1 = (-h + sqrt_d) / a
    # q is zero only when h and the discriminant both vanish
    if ti.abs(q) >= 1e-10:
        r0 = q / a
        r1 = c / q

    return ti.min(r0, r1), ti.max(r0, r1)


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2, i.e.

        a*t^2 + b*t + c = 0
        a = dot(d, d),  b = 2 * dot(d, o - center),  c = |o - center|^2 - r^2

    (internally in half-b form, h = b / 2). A negative discriminant is a
    miss. The smaller root is preferred; only when it is negative (the origin
    is inside the sphere) is the larger root used instead. The chosen root
    must then exceed EPSILON, so a smaller root in [0, EPSILON] is a miss
    even if the larger one lies ahead.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord with the outward normal normalize(point - center).
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        near, far = _sphere_roots(h, a, c, sqrt_d)

        t = near
        if t < 0.0:
            t = far

        if t > EPSILON:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=tm.normalize(hit_point - sphere.center),
            )

    return result
