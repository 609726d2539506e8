"""Camera module for view and ray generation.

Components:
    camera: Camera builder, built camera and the device-side get_ray()

A camera is built on the host from a canvas size, a vertical field of view,
a position and an orientation, then uploaded once with setup_camera().
Render kernels call get_ray(i, j) to obtain the primary ray through pixel
(i, j), with row 0 at the top of the image.
"""

from .camera import (
    Camera,
    CameraBuilder,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraBuilder",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
