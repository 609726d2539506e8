"""Image export utilities for rendered images.

Rendered images are float arrays of shape (H, W, 3) with channels in
[0, 1] and row 0 at the top. They are quantized to 8 bits per channel and
written with Pillow.

Example:
    >>> from yars.preview.export import save_png
    >>> from yars.core.integrator import get_image_numpy
    >>>
    >>> save_png(get_image_numpy(), "output.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from yars.preview.display import apply_gamma

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8.

    Values are clamped, then scaled by 255 and floored, so 1.0 maps to 255
    and anything below 1/255 maps to 0.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value (default 1.0, no correction).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image is not of shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")

    processed = np.clip(apply_gamma(image.astype(np.float32), gamma), 0.0, 1.0)
    return np.floor(processed * 255.0).astype(np.uint8)


def save_png(
    image: npt.NDArray[np.floating],
    filepath: str | os.PathLike[str],
    *,
    gamma: float = 1.0,
) -> None:
    """Save a float image as an 8-bit RGB PNG file.

    Args:
        image: Image array of shape (H, W, 3) in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0, no correction).
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)

    # uint8 (H, W, 3) is read as RGB
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)

    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)
