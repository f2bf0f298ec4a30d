"""Dielectric (glass/water) material implementation.

Dielectrics both reflect and refract. Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the refraction discriminant is negative

Normals coming from the primitives always point outward, so the material
works out whether the ray is entering or leaving the medium from the sign
of dot(direction, normal). Between reflection and refraction it chooses at
random, weighted by the Schlick reflectance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_dielectric(
    >>> #     refractive_index, incident_dir, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from tiletrace.core.ray import reflect, refract, schlick
from tiletrace.core.sampler import next_float

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered ray direction for a dielectric material.

    Exiting the medium (dot(d, n) > 0) refracts about the flipped normal
    with ratio eta; entering refracts about the normal with ratio 1/eta.
    Total internal reflection forces a reflection; otherwise a uniform draw
    picks reflection with probability schlick(cosine, eta).

    Args:
        refractive_index: Index of refraction of the material (eta).
        incident_direction: The incoming ray direction (normalized).
        normal: The outward surface normal (normalized).
        state: The worker's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        Dielectrics always scatter and never absorb, so did_scatter is 1 and
        attenuation is white.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    d_dot_n = tm.dot(incident_direction, normal)
    outward_normal = normal
    ratio = 1.0 / refractive_index
    cosine = -d_dot_n
    if d_dot_n > 0.0:
        outward_normal = -normal
        ratio = refractive_index
        cosine = refractive_index * d_dot_n
    cosine = tm.clamp(cosine, 0.0, 1.0)

    did_refract, refracted = refract(incident_direction, outward_normal, ratio)

    u, new_state = next_float(state)

    scattered_direction = reflect(incident_direction, normal)
    if did_refract == 1 and schlick(cosine, refractive_index) < u:
        scattered_direction = refracted

    return 1, attenuation, scattered_direction, new_state


def check_refractive_index(refractive_index: float) -> None:
    """Validate an index of refraction.

    Raises:
        ValueError: If the index is not strictly positive.
    """
    if refractive_index <= 0.0:
        raise ValueError(
            f"Refractive index = {refractive_index} must be positive. "
            "Common values: Air=1.0, Water=1.33, Glass=1.5, Diamond=2.4"
        )
