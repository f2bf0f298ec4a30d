"""Preview module for rendering output.

Components:
    export: Gamma encoding, 8-bit quantization and PNG export

Example:
    >>> from tiletrace.preview import save_png
    >>> save_png(image, "output.png", gamma=2.0)
"""

from tiletrace.preview.export import (
    apply_gamma,
    compute_rmse,
    load_png,
    save_png,
    to_uint8,
)

__all__ = [
    "apply_gamma",
    "to_uint8",
    "save_png",
    "load_png",
    "compute_rmse",
]
