"""Matplotlib-based preview display for rendered images.

Rendered images are already in [0, 1] per channel (colour arithmetic
saturates), so no tone mapping is needed; only optional gamma correction
is applied before display.

Example:
    >>> from yars.preview.display import show_preview
    >>> from yars.core.integrator import get_image_numpy
    >>>
    >>> show_preview(get_image_numpy(), title="Demo scene")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value. 1.0 (the default) leaves the image unchanged.

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    # Apply gamma encoding: out = in^(1/gamma)
    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def show_preview(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Image array of shape (H, W, 3) in [0, 1], row 0 at the top.
        gamma: Gamma correction value.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = np.clip(apply_gamma(image, gamma), 0.0, 1.0)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # imshow puts row 0 at the top, matching the image layout
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
