"""Depth-bounded recursive ray tracer and render loop.

This module composes the closest-hit engine and Phong shading into the
Whitted-style recursion

    trace(d, ray) = nothing                                if d < 1
                  = nothing                                if ray misses
                  = local + reflectivity * trace(d-1, r)   if the reflected
                                                           trace yields a colour
                  = local                                  otherwise

where local is the Phong colour at the hit, r is the ray leaving the hit
point in the direction reflect(normal, view), and + saturates per channel.
Each hit spawns exactly one reflected ray, so at most d hits are shaded.

Taichi functions are inlined and cannot recurse, so trace_to_depth_impl()
runs the recursion as a forward pass that records each level's local
colour and reflectivity, followed by a backward fold that applies the
nested saturating additions innermost-first. This reproduces the recursive
result exactly. The depth budget is bounded at compile time by
MAX_TRACE_DEPTH.

"No contribution" is kept distinct from black all the way up: the device
functions return a hit flag, trace_to_depth() returns None, and the render
target records a per-pixel contribution mask next to the colour buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.core.integrator import setup_render_target, render_image
    >>> from yars.camera.camera import CameraBuilder, setup_camera
    >>> from yars.scene.demo import create_demo_scene
    >>>
    >>> scene, builder = create_demo_scene()
    >>> setup_camera(builder.build())
    >>> setup_render_target(builder.width, builder.height)
    >>> render_image(max_depth=2)
"""

import logging
import time
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from yars.camera.camera import get_camera_info, get_ray
from yars.core.ray import reflect
from yars.core.shading import saturating_add, scale, shade
from yars.materials.phong import get_phong_reflectivity
from yars.scene.intersection import trace_ray

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Largest depth budget trace_to_depth accepts (compile-time unroll bound)
MAX_TRACE_DEPTH = 8

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


# =============================================================================
# Recursive Tracing Core
# =============================================================================


@ti.func
def trace_to_depth_impl(max_depth: ti.i32, ray_origin: vec3, ray_direction: vec3):
    """Trace a ray and its mirror reflections up to a depth budget.

    Args:
        max_depth: The depth budget. Values below 1 yield no contribution;
            values above MAX_TRACE_DEPTH are truncated to it.
        ray_origin: The starting point of the primary ray.
        ray_direction: The direction of the primary ray.

    Returns:
        A tuple (hit, colour) where hit is 1 if the primary ray contributed
        a colour and 0 for "no contribution". colour is only meaningful
        when hit == 1.
    """
    local_colours = ti.Matrix.zero(float, MAX_TRACE_DEPTH, 3)
    reflectivities = ti.Matrix.zero(float, MAX_TRACE_DEPTH, 3)
    num_hits = 0

    origin = ray_origin
    direction = ray_direction

    # Active flag for path continuation (no break inside unrolled loops)
    active = 1

    # Forward pass: one closest-hit and local shading per level
    for level in ti.static(range(MAX_TRACE_DEPTH)):
        if active == 1 and level < max_depth:
            cell = trace_ray(origin, direction)
            if cell.hit == 0:
                # Ray escaped the scene
                active = 0
            else:
                local = shade(cell)
                mirror = get_phong_reflectivity(cell.material_id)
                for c in ti.static(range(3)):
                    local_colours[level, c] = local[c]
                    reflectivities[level, c] = mirror[c]
                num_hits += 1

                origin = cell.point
                direction = reflect(cell.normal, cell.view)

    # Backward fold: compose the deepest level first
    colour = vec3(0.0, 0.0, 0.0)
    for level in ti.static(range(MAX_TRACE_DEPTH - 1, -1, -1)):
        if level < num_hits:
            local = vec3(local_colours[level, 0], local_colours[level, 1], local_colours[level, 2])
            if level + 1 < num_hits:
                mirror = vec3(
                    reflectivities[level, 0], reflectivities[level, 1], reflectivities[level, 2]
                )
                local = saturating_add(local, scale(colour, mirror))
            colour = local

    hit = 0
    if num_hits > 0:
        hit = 1

    return hit, colour


# =============================================================================
# Single-Ray Tracing
# =============================================================================

_single_origin = ti.Vector.field(3, dtype=float, shape=())
_single_direction = ti.Vector.field(3, dtype=float, shape=())
_single_colour = ti.Vector.field(3, dtype=float, shape=())
_single_hit = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_ray(max_depth: ti.i32):
    """Trace the single ray and store its result in the single-ray fields."""
    hit, colour = trace_to_depth_impl(max_depth, _single_origin[None], _single_direction[None])
    _single_hit[None] = hit
    _single_colour[None] = colour


def _check_depth(max_depth: int) -> None:
    if max_depth > MAX_TRACE_DEPTH:
        raise ValueError(
            f"Depth budget {max_depth} exceeds the maximum supported ({MAX_TRACE_DEPTH})"
        )


def trace_to_depth(
    max_depth: int,
    origin: Sequence[float],
    direction: Sequence[float],
) -> tuple[float, float, float] | None:
    """Trace one ray through the current scene.

    This is the per-sample entry point: a host renderer computes a ray and
    receives either a colour or None for "no contribution" (background).
    The function is pure with respect to the scene; identical inputs give
    bit-identical results.

    Args:
        max_depth: The depth budget. 0 or less always yields None.
        origin: The ray origin as (x, y, z).
        direction: The ray direction as (x, y, z), not necessarily unit.

    Returns:
        The colour (R, G, B), each channel in [0, 1], or None.

    Raises:
        ValueError: If max_depth exceeds MAX_TRACE_DEPTH.
    """
    _check_depth(max_depth)
    if max_depth < 1:
        return None

    _single_origin[None] = [origin[0], origin[1], origin[2]]
    _single_direction[None] = [direction[0], direction[1], direction[2]]
    _trace_single_ray(max_depth)

    if _single_hit[None] == 0:
        return None

    colour = _single_colour[None]
    return (float(colour[0]), float(colour[1]), float(colour[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Colour buffer and per-pixel contribution flag (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=float, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_contribution = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers."""
    _color_buffer.fill(0.0)
    _contribution.fill(0)


def reset_render_target() -> None:
    """Forget the render target so it must be set up again."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def _check_camera_matches_target(width: int, height: int) -> None:
    """Raise if the uploaded camera canvas differs from the render target."""
    canvas_width, canvas_height = get_camera_info()["canvas"]
    if (canvas_width, canvas_height) != (float(width), float(height)):
        raise ValueError(
            f"Camera canvas {int(canvas_width)}x{int(canvas_height)} does not match "
            f"the {width}x{height} render target. Call setup_camera() with a camera "
            "of the same size."
        )


@ti.kernel
def _render_pixels(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one primary ray per pixel.

    Pixels are independent, so the outer loop runs in parallel.
    """
    for i, j in ti.ndrange(width, height):
        ray = get_ray(i, j)
        hit, colour = trace_to_depth_impl(max_depth, ray.origin, ray.direction)
        _contribution[i, j] = hit
        _color_buffer[i, j] = colour


def render_image(max_depth: int = 2) -> None:
    """Render every pixel of the render target with the current camera.

    Args:
        max_depth: The depth budget per primary ray.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth exceeds MAX_TRACE_DEPTH, or the camera
            canvas size differs from the render target size.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)

    width, height = get_image_dimensions()
    _check_camera_matches_target(width, height)
    logger.info("Rendering %dx%d image at depth %d", width, height, max_depth)
    start = time.perf_counter()

    if max_depth < 1:
        clear_render_target()
    else:
        _render_pixels(width, height, max_depth)
        ti.sync()

    logger.info("Render finished in %.3fs", time.perf_counter() - start)


def get_contribution_mask() -> npt.NDArray[np.bool_]:
    """Get the per-pixel contribution mask.

    Returns:
        Boolean array of shape (height, width); False where the primary ray
        produced no contribution.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    mask = _contribution.to_numpy()[:width, :height]

    # Transpose from (width, height) to (height, width) for image layout
    return np.transpose(mask) != 0


def get_image_numpy(
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Row 0 is the top row of the image. Pixels without a contribution are
    painted with the background colour.

    Args:
        background: Colour for pixels whose primary ray contributed nothing.

    Returns:
        NumPy array of shape (height, width, 3) with values in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Extract active region and transpose to (height, width, 3)
    image = _color_buffer.to_numpy()[:width, :height, :]
    image = np.transpose(image, (1, 0, 2))

    mask = get_contribution_mask()
    image = np.where(mask[:, :, None], image, np.asarray(background, dtype=image.dtype))

    return np.clip(image, 0.0, 1.0).astype(np.float32)
