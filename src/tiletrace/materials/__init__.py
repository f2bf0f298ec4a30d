"""Materials module for the scattering contract.

Every material answers one question for the integrator: given an incoming
ray and a hit, does the ray scatter, with what attenuation, and in which
direction?

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)

Each scatter function is a Taichi function with the signature

    scatter_*(params..., state) -> (did_scatter, attenuation, direction, state)

where ``state`` is the calling worker's private generator state. The
scattered ray always starts at the hit point.
"""

from .dielectric import check_refractive_index, scatter_dielectric
from .lambertian import check_albedo, scatter_lambertian
from .metal import check_metal_params, scatter_metal

__all__ = [
    "scatter_lambertian",
    "scatter_metal",
    "scatter_dielectric",
    "check_albedo",
    "check_metal_params",
    "check_refractive_index",
]
