"""Metal (specular reflective) material implementation.

Metals reflect the incoming ray about the surface normal:

    R = I - 2(N . I)N

and then perturb the reflection by ``fuzz`` times a random point in the unit
ball. A fuzz of 0 is a perfect mirror. If the perturbed direction ends up
below the surface the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from tiletrace.core.ray import normalize, random_in_unit_sphere, reflect
from tiletrace.materials.lambertian import check_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered ray direction for a metal material.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The perturbation radius in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (normalized).
        normal: The surface normal (normalized).
        state: The worker's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state)
        where did_scatter is 1 only if the scattered direction points away
        from the surface (dot with the normal > 0).
    """
    reflected = reflect(incident_direction, normal)

    offset, new_state = random_in_unit_sphere(state)
    scattered_direction = normalize(reflected + fuzz * offset)

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, scattered_direction, new_state


def check_metal_params(albedo: tuple[float, float, float], fuzz: float) -> None:
    """Validate metal material parameters.

    Raises:
        ValueError: If any albedo component or the fuzz is outside [0, 1].
    """
    check_albedo(albedo)
    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )
