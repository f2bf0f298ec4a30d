"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the vector helpers used by the
intersection, scattering and camera code. Kernel-side helpers are Taichi
functions operating on ``taichi.math.vec3``; arithmetic (add, subtract,
scale, element-wise multiply) comes straight from the vec3 operators.

Random sampling helpers thread an explicit generator state (see
``tiletrace.core.sampler``) instead of using Taichi's global RNG, so every
tile worker draws from its own stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math

import taichi as ti
import taichi.math as tm

from tiletrace.core.sampler import next_symmetric

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Intersection and
            scattering code expects it to be unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Precondition: v must have non-zero length. Taichi does not raise inside
    kernels, so a zero vector yields NaN components.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 * dot(normal, incident) * normal. The normal
    must be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(normal, incident) * normal


@ti.func
def refract(incident: vec3, normal: vec3, ratio: ti.f32):
    """Refract an incident vector through a surface using Snell's law.

    The normal must face the incoming ray (dot(incident, normal) <= 0) and
    ``ratio`` is n_incident / n_transmitted.

    Args:
        incident: The incoming direction vector (normalized).
        normal: The surface normal on the incident side (normalized).
        ratio: The ratio of refractive indices.

    Returns:
        A tuple (did_refract, direction). did_refract is 0 on total internal
        reflection, in which case direction is the zero vector.
    """
    dt = tm.dot(incident, normal)
    discriminant = 1.0 - ratio * ratio * (1.0 - dt * dt)
    did_refract = 0
    direction = vec3(0.0, 0.0, 0.0)
    if discriminant > 0.0:
        did_refract = 1
        direction = normalize(ratio * (incident - dt * normal) - ti.sqrt(discriminant) * normal)
    return did_refract, direction


@ti.func
def schlick(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the incidence angle, in [0, 1].
        refractive_index: Index of refraction of the material (> 0).

    Returns:
        The approximate reflectance in [0, 1].
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is close to zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Draw a uniformly distributed point inside the unit ball.

    Rejection sampling: draws three uniform components in [-1, 1) until the
    squared length is at most 1.

    Args:
        state: The worker's generator state.

    Returns:
        A tuple (point, new_state).
    """
    s = state
    p = vec3(2.0, 2.0, 2.0)
    while length_squared(p) > 1.0:
        x, s1 = next_symmetric(s)
        y, s2 = next_symmetric(s1)
        z, s3 = next_symmetric(s2)
        p = vec3(x, y, z)
        s = s3
    return p, s


# =============================================================================
# Python-side helpers (scene and camera setup)
# =============================================================================


def normalize_tuple(v: tuple[float, float, float], name: str = "vector") -> tuple[float, float, float]:
    """Normalize a 3-tuple on the Python side.

    Args:
        v: The vector to normalize.
        name: Name used in the error message.

    Returns:
        The unit-length vector as a tuple.

    Raises:
        ValueError: If v has (near) zero length.
    """
    norm = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    if norm < 1e-12:
        raise ValueError(f"Cannot normalize zero-length {name}: {tuple(v)}")
    return (v[0] / norm, v[1] / norm, v[2] / norm)
