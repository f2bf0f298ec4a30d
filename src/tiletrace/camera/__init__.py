"""Camera module for view and ray generation.

Components:
    pinhole: Simple pinhole (perspective) camera model

Ray generation uses pixel coordinates:
    x in [0, width - 1]: left to right across image
    y in [0, height - 1]: bottom to top across image

Camera state is computed once on the Python side and stored in Taichi
fields, so every tile reads the same immutable camera during a render.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
