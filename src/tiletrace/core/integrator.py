"""Path tracing integrator for Monte Carlo light transport.

This module estimates the radiance carried along a camera ray. Starting from
the ray, it repeatedly intersects the scene and asks the hit surface's
material for a scattered ray and an attenuation, multiplying the
attenuations into a running throughput:

    - the ray escapes the scene: the result is throughput * background
    - the material absorbs the ray: the result is black
    - the bounce budget runs out: the result is black

Surfaces do not emit; all light in an image comes from the background.

Every function that consumes randomness takes the calling worker's
generator state and returns the advanced state, so the integrator has no
shared mutable state of its own.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.core.integrator import setup_background, trace_ray
    >>> setup_background((0.8, 0.8, 1.0))
    >>> color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))  # Sky color if nothing is hit
"""

import taichi as ti
import taichi.math as tm

from tiletrace.camera.pinhole import get_ray
from tiletrace.config import DEFAULT_BACKGROUND, MAX_DEPTH
from tiletrace.core.sampler import next_float, seed_to_state
from tiletrace.materials.dielectric import scatter_dielectric
from tiletrace.materials.lambertian import scatter_lambertian
from tiletrace.materials.metal import scatter_metal
from tiletrace.scene.intersection import intersect_scene
from tiletrace.scene.manager import (
    MaterialType,
    get_material_albedo,
    get_material_param,
    get_material_type,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Background Configuration
# =============================================================================

_background_bottom = ti.Vector.field(3, dtype=ti.f32, shape=())
_background_top = ti.Vector.field(3, dtype=ti.f32, shape=())
_background_gradient = ti.field(dtype=ti.i32, shape=())


def setup_background(
    color: tuple[float, float, float] = DEFAULT_BACKGROUND,
    top: tuple[float, float, float] | None = None,
) -> None:
    """Configure the radiance returned for rays that escape the scene.

    Args:
        color: The background color. With no ``top`` this is a flat color;
            otherwise it is the color straight down.
        top: Optional color straight up. When given, the background blends
            linearly from ``color`` to ``top`` with the ray's y component.
    """
    _background_bottom[None] = [color[0], color[1], color[2]]
    if top is None:
        _background_top[None] = [color[0], color[1], color[2]]
        _background_gradient[None] = 0
    else:
        _background_top[None] = [top[0], top[1], top[2]]
        _background_gradient[None] = 1


def get_background() -> tuple[tuple[float, float, float], tuple[float, float, float] | None]:
    """Get the configured background as (color, top or None)."""
    bottom = _background_bottom[None]
    color = (float(bottom[0]), float(bottom[1]), float(bottom[2]))
    top = None
    if _background_gradient[None] == 1:
        t = _background_top[None]
        top = (float(t[0]), float(t[1]), float(t[2]))
    return color, top


@ti.func
def background_radiance(direction: vec3) -> vec3:
    """Radiance arriving along an escaped ray with the given direction."""
    result = _background_bottom[None]
    if _background_gradient[None] == 1:
        t = 0.5 * (direction.y + 1.0)
        result = (1.0 - t) * _background_bottom[None] + t * _background_top[None]
    return result


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The material ID of the hit surface.
        incident_direction: The incoming ray direction (normalized).
        normal: The outward surface normal (normalized).
        state: The worker's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered_direction = vec3(0.0, 0.0, 0.0)
    new_state = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        did_scatter, attenuation, scattered_direction, new_state = scatter_lambertian(
            get_material_albedo(material_id), normal, state
        )

    elif mat_type == int(MaterialType.METAL):
        did_scatter, attenuation, scattered_direction, new_state = scatter_metal(
            get_material_albedo(material_id),
            get_material_param(material_id),
            incident_direction,
            normal,
            state,
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        did_scatter, attenuation, scattered_direction, new_state = scatter_dielectric(
            get_material_param(material_id), incident_direction, normal, state
        )

    return did_scatter, attenuation, scattered_direction, new_state


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def cast_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
    state: ti.u32,
):
    """Estimate the radiance arriving at ray_origin from ray_direction.

    Follows the path bounce by bounce from ``depth`` up to ``max_depth``.
    A ray cast at depth >= max_depth contributes nothing.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized).
        depth: Number of bounces already taken.
        max_depth: Bounce budget.
        state: The worker's generator state.

    Returns:
        A tuple (radiance, state).
    """
    origin = ray_origin
    direction = ray_direction
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current_state = state

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(depth, max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction)

            if hit_record.hit == 0:
                radiance = throughput * background_radiance(direction)
                active = 0
            else:
                did_scatter, attenuation, scattered_direction, current_state = scatter_material(
                    hit_record.material_id, direction, hit_record.normal, current_state
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    return radiance, current_state


@ti.func
def get_color(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    state: ti.u32,
):
    """Average ``samples`` jittered radiance estimates for one pixel.

    Each sample offsets the pixel coordinates by U[-0.5, 0.5) in both axes
    for antialiasing. The mean is kept as a running average, so a constant
    radiance averages to itself exactly.

    Returns:
        A tuple (color, state).
    """
    color = vec3(0.0, 0.0, 0.0)
    current_state = state

    for n in range(samples):
        jitter_x, current_state = next_float(current_state)
        jitter_y, current_state = next_float(current_state)
        ray = get_ray(
            ti.cast(pixel_x, ti.f32) + jitter_x - 0.5,
            ti.cast(pixel_y, ti.f32) + jitter_y - 0.5,
        )
        radiance, current_state = cast_ray(ray.origin, ray.direction, 0, max_depth, current_state)

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        color += (radiance - color) / ti.cast(n + 1, ti.f32)

    return color, current_state


# =============================================================================
# Single-ray Kernels (testing and diagnostics)
# =============================================================================

# Result slot for the single-ray kernels
_estimate = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_ray_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
    max_depth: ti.i32,
    seed: ti.i64,
):
    # Single-iteration outer loop keeps the bounce loop serial
    for _serial in range(1):
        radiance, _ = cast_ray(
            vec3(ox, oy, oz),
            tm.normalize(vec3(dx, dy, dz)),
            depth,
            max_depth,
            ti.cast(seed, ti.u32),
        )
        _estimate[None] = radiance


@ti.kernel
def _sample_pixel_kernel(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    seed: ti.i64,
):
    for _serial in range(1):
        color, _ = get_color(pixel_x, pixel_y, samples, max_depth, ti.cast(seed, ti.u32))
        _estimate[None] = color


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
    seed: int = 1,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized before tracing; must be non-zero).
        depth: Bounces already taken.
        max_depth: Bounce budget.
        seed: Generator seed for this estimate.

    Returns:
        The radiance estimate as an (R, G, B) tuple.
    """
    _trace_ray_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        depth,
        max_depth,
        seed_to_state(seed),
    )
    result = _estimate[None]
    return (float(result[0]), float(result[1]), float(result[2]))


def sample_pixel(
    pixel_x: int,
    pixel_y: int,
    samples: int = 1,
    max_depth: int = MAX_DEPTH,
    seed: int = 1,
) -> tuple[float, float, float]:
    """Estimate the color of one pixel through the current camera.

    The camera must have been set up with setup_camera first.

    Returns:
        The averaged color as an (R, G, B) tuple.
    """
    if samples <= 0:
        raise ValueError(f"Sample count must be positive, got {samples}")
    _sample_pixel_kernel(pixel_x, pixel_y, samples, max_depth, seed_to_state(seed))
    result = _estimate[None]
    return (float(result[0]), float(result[1]), float(result[2]))
