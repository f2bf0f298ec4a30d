"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for
rendering. The camera is described by a position, a look-at target, an up
vector and a horizontal field of view in degrees.

From these and the image size, setup_camera derives three vectors once:

- bottom_left: the ray direction through pixel (0, 0), the bottom-left pixel
- step_x: the change in direction from one pixel column to the next
- step_y: the change in direction from one pixel row to the next

A ray through (possibly fractional) pixel coordinates (x, y) is then

    direction = normalize(bottom_left + x * step_x + y * step_y)

so the centre pixel ((width - 1) / 2, (height - 1) / 2) looks straight down
the forward axis.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     position=(0.0, 0.0, 0.0),
    ...     target=(0.0, 0.0, 1.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     field_of_view=90.0,
    ... )
    >>> setup_camera(camera, 320, 180)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(159.5, 89.5)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from tiletrace.core.ray import Ray, make_ray, normalize, vec3

logger = logging.getLogger(__name__)

# Up vectors closer than this to the view axis are rejected
_PARALLEL_TOLERANCE = 1e-6

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        target: Point the camera is looking at in world space (x, y, z).
        up: Up direction vector for camera orientation (typically (0, 1, 0)).
        field_of_view: Horizontal field of view in degrees, in (0, 180).
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    target: tuple[float, float, float] = (0.0, 0.0, 1.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    field_of_view: float = 90.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_bottom_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_step_x = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_step_y = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())


def _unit(v: np.ndarray, name: str) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    if norm < 1e-12:
        raise ValueError(f"{name} must be non-zero, got {tuple(v.tolist())}")
    return v / norm


# =============================================================================
# Camera Setup (Python-side, called once per render)
# =============================================================================


def setup_camera(camera: PinholeCamera, width: int, height: int) -> None:
    """Initialize camera state from configuration and image size.

    Builds the camera basis and writes the derived ray-generation vectors to
    Taichi fields. The basis is

        forward    = normalize(target - position)
        horizontal = cross(up, forward)
        vertical   = cross(forward, horizontal)

    and the image plane sits at unit distance along forward, spanning
    tan(fov / 2) to either side horizontally and tan(fov / 2) * height / width
    vertically. A dimension of 1 pixel gets a zero step.

    Args:
        camera: Camera configuration.
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the image size is not positive, the field of view is
            outside (0, 180), position equals target, or the up vector is
            parallel to the view direction.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if not 0.0 < camera.field_of_view < 180.0:
        raise ValueError(f"Field of view must be in (0, 180) degrees, got {camera.field_of_view}")

    position = np.array(camera.position, dtype=np.float64)
    target = np.array(camera.target, dtype=np.float64)
    up = _unit(np.array(camera.up, dtype=np.float64), "up vector")

    forward = _unit(target - position, "view direction (target - position)")

    horizontal = np.cross(up, forward)
    if np.linalg.norm(horizontal) < _PARALLEL_TOLERANCE:
        raise ValueError("up vector must not be parallel to the view direction")
    horizontal = _unit(horizontal, "horizontal axis")
    vertical = _unit(np.cross(forward, horizontal), "vertical axis")

    half_width = math.tan(math.radians(camera.field_of_view) / 2.0)
    half_height = half_width * height / width

    step_x = horizontal * (2.0 * half_width / (width - 1)) if width > 1 else np.zeros(3)
    step_y = vertical * (2.0 * half_height / (height - 1)) if height > 1 else np.zeros(3)

    bottom_left = forward - step_x * (width - 1) / 2.0 - step_y * (height - 1) / 2.0

    _camera_position[None] = position.tolist()
    _camera_forward[None] = forward.tolist()
    _camera_bottom_left[None] = bottom_left.tolist()
    _camera_step_x[None] = step_x.tolist()
    _camera_step_y[None] = step_y.tolist()

    logger.debug(
        "Camera at %s looking at %s, fov %.1f deg, image %dx%d",
        camera.position,
        camera.target,
        camera.field_of_view,
        width,
        height,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(x: ti.f32, y: ti.f32) -> Ray:
    """Generate a ray through pixel coordinates (x, y).

    Coordinates are in pixels with (0, 0) the bottom-left pixel; fractional
    values address points between pixel centers, which is how jittered
    samples are taken.

    Args:
        x: Horizontal pixel coordinate (left to right).
        y: Vertical pixel coordinate (bottom to top).

    Returns:
        A Ray from the camera position with a unit-length direction.
    """
    direction = normalize(
        _camera_bottom_left[None] + x * _camera_step_x[None] + y * _camera_step_y[None]
    )
    return make_ray(_camera_position[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with position, forward, bottom_left, step_x and step_y.
    """
    fields = {
        "position": _camera_position,
        "forward": _camera_forward,
        "bottom_left": _camera_bottom_left,
        "step_x": _camera_step_x,
        "step_y": _camera_step_y,
    }
    info = {}
    for name, f in fields.items():
        v = f[None]
        info[name] = (float(v[0]), float(v[1]), float(v[2]))
    return info
