"""Rotatable pinhole camera for primary ray generation.

The camera sits at a position, looks down its local +Z axis, and is turned
into the world by an orientation (a Rotation). The image plane lies at unit
distance in front of the camera; its world-space height follows from the
field of view and its width from the canvas aspect ratio.

For a canvas of W x H pixels, pixel (x, y) maps to the direction

    orientation * (xs * (x - W/2), ys * (y - H/2), 1)

where xs = world_width / W and ys = world_height / H. Directions are not
normalized. Pixel row 0 is the top row of the image.

Cameras are assembled with a CameraBuilder, which is immutable: rotated()
and translated() return new builders.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.camera.camera import CameraBuilder, setup_camera
    >>> from yars.core.rotation import Rotation
    >>>
    >>> builder = CameraBuilder(800, 600, 90.0).rotated(Rotation.rotation_x(0.1))
    >>> camera = builder.build()
    >>> camera.get_direction_through_pixel(400, 300)
    >>> setup_camera(camera)
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

import taichi as ti
import taichi.math as tm

from yars.core.ray import Ray, make_ray
from yars.core.rotation import Rotation, Vector3

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraBuilder:
    """Configuration for a camera before it is built.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        fov: Vertical field of view in degrees, strictly between 0 and 180.
        position: Camera position in world space (x, y, z).
        orientation: Rotation from camera space into world space.
    """

    width: int
    height: int
    fov: float
    position: Vector3 = (0.0, 0.0, 0.0)
    orientation: Rotation = field(default_factory=Rotation.identity)

    def __post_init__(self) -> None:
        if self.fov <= 0.0 or self.fov >= 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Canvas dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def world_height(self) -> float:
        """Height of the image plane at unit distance."""
        return 2.0 * math.tan(math.radians(self.fov) / 2.0)

    @property
    def world_width(self) -> float:
        """Width of the image plane at unit distance."""
        return self.width / self.height * self.world_height

    def rotated(self, rotation: Rotation) -> "CameraBuilder":
        """Return a builder whose orientation is rotation applied after the current one."""
        return replace(self, orientation=rotation * self.orientation)

    def translated(self, offset: Sequence[float]) -> "CameraBuilder":
        """Return a builder moved by offset."""
        x, y, z = self.position
        return replace(self, position=(x + offset[0], y + offset[1], z + offset[2]))

    def build(self) -> "Camera":
        return Camera(
            width=self.width,
            height=self.height,
            world_width=self.world_width,
            world_height=self.world_height,
            position=tuple(float(c) for c in self.position),
            orientation=self.orientation,
        )


@dataclass(frozen=True)
class Camera:
    """A built camera ready to generate rays.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        world_width: Image plane width at unit distance.
        world_height: Image plane height at unit distance.
        position: Camera position in world space.
        orientation: Rotation from camera space into world space.
    """

    width: int
    height: int
    world_width: float
    world_height: float
    position: Vector3
    orientation: Rotation

    @property
    def x_step(self) -> float:
        return self.world_width / self.width

    @property
    def y_step(self) -> float:
        return self.world_height / self.height

    def _check_pixel(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(
                f"Pixel ({x}, {y}) outside the {self.width}x{self.height} canvas"
            )

    def get_direction_through_pixel(self, x: int, y: int) -> Vector3:
        """World-space direction of the ray through pixel (x, y).

        Raises:
            ValueError: If the pixel lies outside the canvas.
        """
        self._check_pixel(x, y)
        local = (
            self.x_step * (x - self.width / 2.0),
            self.y_step * (y - self.height / 2.0),
            1.0,
        )
        return self.orientation.apply(local)

    def get_ray_through_pixel(self, x: int, y: int) -> tuple[Vector3, Vector3]:
        """Return (origin, direction) of the ray through pixel (x, y).

        Raises:
            ValueError: If the pixel lies outside the canvas.
        """
        return self.position, self.get_direction_through_pixel(x, y)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=float, shape=())

# Orientation matrix (camera space to world space)
_camera_orientation = ti.Matrix.field(3, 3, dtype=float, shape=())

# Canvas size in pixels and per-pixel world steps
_canvas_size = ti.Vector.field(2, dtype=float, shape=())
_pixel_step = ti.Vector.field(2, dtype=float, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Upload a built camera to the fields read by get_ray().

    Must be called before rendering.
    """
    _camera_origin[None] = list(camera.position)
    _camera_orientation[None] = camera.orientation.matrix.tolist()
    _canvas_size[None] = [float(camera.width), float(camera.height)]
    _pixel_step[None] = [camera.x_step, camera.y_step]

    logger.debug(
        "Camera set up: %dx%d canvas at %s", camera.width, camera.height, camera.position
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate the primary ray through pixel (pixel_i, pixel_j).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        A Ray from the camera position. The direction is not normalized.
    """
    size = _canvas_size[None]
    step = _pixel_step[None]
    local = vec3(
        step[0] * (ti.cast(pixel_i, float) - size[0] / 2.0),
        step[1] * (ti.cast(pixel_j, float) - size[1] / 2.0),
        1.0,
    )
    return make_ray(_camera_origin[None], _camera_orientation[None] @ local)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, canvas size and pixel step.
    """
    origin_vec = _camera_origin[None]
    size_vec = _canvas_size[None]
    step_vec = _pixel_step[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "canvas": (float(size_vec[0]), float(size_vec[1])),
        "step": (float(step_vec[0]), float(step_vec[1])),
    }
