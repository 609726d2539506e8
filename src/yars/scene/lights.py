"""Ambient and point light storage with shadow-ray visibility.

The scene carries one ambient light (colour only) and any number of point
lights (position and colour). Light colours are per-channel intensities on
the same scale as rendered colours, [0, 1] per channel for an unsaturated
light.

A point light illuminates a world point when a shadow ray fired from the
point toward the light reaches it unobstructed. A surface found *behind*
the light (farther from the point than the light itself) does not block
it.
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from yars.scene.intersection import trace_ray

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of point lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=float, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=float, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

ambient_light_color = ti.Vector.field(3, dtype=float, shape=())


def validate_light_colour(name: str, colour: Sequence[float]) -> None:
    """Raise ValueError unless colour has 3 non-negative components."""
    if len(colour) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(colour)}")
    for i, component in enumerate(colour):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative")


def clear_lights() -> None:
    """Remove all point lights and reset the ambient light to black."""
    num_lights[None] = 0
    ambient_light_color[None] = vec3(0.0, 0.0, 0.0)


def set_ambient_light(colour: Sequence[float]) -> None:
    """Set the scene's ambient light colour.

    Raises:
        ValueError: If any component is negative.
    """
    validate_light_colour("Ambient light colour", colour)
    ambient_light_color[None] = vec3(colour[0], colour[1], colour[2])


def add_light(position: Sequence[float], colour: Sequence[float]) -> int:
    """Add a point light to the scene.

    Args:
        position: The light position as (x, y, z).
        colour: The light colour as (R, G, B), each component non-negative.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If any colour component is negative.
    """
    validate_light_colour("Light colour", colour)

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_colors[idx] = vec3(colour[0], colour[1], colour[2])
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of point lights in the scene."""
    return int(num_lights[None])


def get_ambient_light() -> tuple[float, float, float]:
    """Get the ambient light colour (Python side)."""
    c = ambient_light_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


@ti.func
def illuminates(point: vec3, light_idx: ti.i32) -> ti.i32:
    """Test whether a point light is visible from a world point.

    Fires a shadow ray from the point toward the light. The light is
    occluded only if the nearest hit lies strictly closer to the point than
    the light does. Together with the closest-hit self-intersection
    tolerance this keeps a surface from shadowing itself.

    Args:
        point: The world point being lit.
        light_idx: Index of the point light.

    Returns:
        1 if the light reaches the point, 0 if something blocks it.
    """
    to_light = light_positions[light_idx] - point
    cell = trace_ray(point, to_light)

    lit = 1
    if cell.hit == 1:
        if cell.distance < tm.length(to_light):
            lit = 0

    return lit
