"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters incoming light in a direction drawn around the
surface normal: a uniformly random point inside the unit ball is added to
the normal and the sum is normalized. The resulting distribution is cosine
weighted, so the attenuation is simply the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_lambertian(
    >>> #     albedo, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from tiletrace.core.ray import near_zero, normalize, random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a scattered ray direction for a Lambertian material.

    Lambertian surfaces always scatter. The direction is
    normalize(random_in_unit_sphere() + normal); if that sum degenerates to
    (nearly) zero the normal itself is used.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The surface normal at the hit point (normalized).
        state: The worker's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state)
        where did_scatter is always 1 and attenuation equals albedo.
    """
    offset, new_state = random_in_unit_sphere(state)
    direction = offset + normal

    if near_zero(direction):
        direction = normal

    return 1, albedo, normalize(direction), new_state


def check_albedo(albedo: tuple[float, float, float]) -> None:
    """Validate an albedo for energy conservation.

    Args:
        albedo: RGB reflectance to validate.

    Raises:
        ValueError: If albedo does not have three components or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
