"""Preview module for output and visualization.

Components:
    display: Gamma correction and Matplotlib preview
    export: 8-bit conversion and PNG export via Pillow

Example:
    >>> from yars.preview import save_png, show_preview
    >>> from yars.core.integrator import get_image_numpy
    >>>
    >>> image = get_image_numpy()
    >>> save_png(image, "output.png")
    >>> show_preview(image)
"""

from yars.preview.display import apply_gamma, show_preview
from yars.preview.export import image_to_uint8, save_png

__all__ = [
    "apply_gamma",
    "show_preview",
    "image_to_uint8",
    "save_png",
]
