"""Image export utilities for rendered images.

This module is the output boundary of the renderer. It turns a linear
radiance image into 8-bit display values and writes PNG files:

    1. clamp every channel to [0, 1]
    2. apply c ** (1 / gamma) (square root at the default gamma of 2.0)
    3. quantize to 8 bits

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from tiletrace.preview.export import save_png
    >>> from tiletrace.core.scheduler import render_scene
    >>>
    >>> image = render_scene(config, camera)
    >>> save_png(image, "out.png", gamma=2.0)
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def apply_gamma(image: npt.NDArray[np.float32], gamma: float = 2.0) -> npt.NDArray[np.float32]:
    """Clamp an image to [0, 1] and apply gamma encoding.

    Args:
        image: Linear image array.
        gamma: Gamma value. 1.0 leaves the clamped values unchanged.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    clamped = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return clamped.astype(np.float32)
    return np.power(clamped, 1.0 / gamma).astype(np.float32)


def to_uint8(image: npt.NDArray[np.float32], gamma: float = 2.0) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit display values.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.0, square root).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    return (apply_gamma(image, gamma) * 255.0).astype(np.uint8)


def save_png(image: npt.NDArray[np.float32], filepath: str | Path, gamma: float = 2.0) -> None:
    """Save a linear float image as an 8-bit RGB PNG file.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
        gamma: Gamma value applied before quantization.

    Raises:
        ValueError: If the image is not (H, W, 3).
        OSError: If the file cannot be written.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    image_uint8 = to_uint8(image, gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath, format="PNG")
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load an RGB PNG file as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
