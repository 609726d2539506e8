"""Phong local illumination.

Given a ShadeCell (hit point, normal, view direction, material) this module
computes the colour a surface reflects toward the viewer from the scene's
lights, without following any secondary reflection:

    colour = ambient
           + sum over lit lights of diffuse(L)
           + sum over lit lights of specular(L)

with

    ambient     = ambient_light * m.ambient
    diffuse(L)  = max(0, n . normalize(L.pos - p)) * L.colour * m.diffuse
    specular(L) = max(0, r . -view) ^ m.shine * L.colour * m.specular
    r           = reflect(n, normalize(p - L.pos))

Colours are per-channel reals on [0, COLOR_MAX]. Every addition saturates:
a channel never exceeds COLOR_MAX and never drops below zero. Lights that
fail the shadow test contribute nothing.
"""

import taichi as ti
import taichi.math as tm

from yars.core.ray import normalize, reflect
from yars.materials.phong import PhongMaterial, get_phong_material
from yars.scene.intersection import ShadeCell
from yars.scene.lights import (
    ambient_light_color,
    illuminates,
    light_colors,
    light_positions,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum representable channel value
COLOR_MAX = 1.0


@ti.func
def saturating_add(a: vec3, b: vec3) -> vec3:
    """Add two colours, clamping each channel to [0, COLOR_MAX]."""
    return tm.clamp(a + b, 0.0, COLOR_MAX)


@ti.func
def scale(colour: vec3, factors: vec3) -> vec3:
    """Scale a colour componentwise by per-channel factors."""
    return colour * factors


@ti.func
def positive_dot(a: vec3, b: vec3) -> float:
    """Dot product clamped below at zero."""
    return ti.max(tm.dot(a, b), 0.0)


@ti.func
def ambient_term(material: PhongMaterial) -> vec3:
    """Ambient light reflected by the material."""
    return scale(ambient_light_color[None], material.ambient)


@ti.func
def diffuse_term(cell: ShadeCell, material: PhongMaterial, light_idx: ti.i32) -> vec3:
    """Lambertian contribution of one point light, ignoring shadows."""
    to_light = normalize(light_positions[light_idx] - cell.point)
    intensity = positive_dot(cell.normal, to_light)
    return scale(intensity * light_colors[light_idx], material.diffuse)


@ti.func
def specular_term(cell: ShadeCell, material: PhongMaterial, light_idx: ti.i32) -> vec3:
    """Phong highlight of one point light, ignoring shadows."""
    from_light = normalize(cell.point - light_positions[light_idx])
    reflected = reflect(cell.normal, from_light)
    intensity = positive_dot(reflected, -cell.view) ** material.shine
    return scale(intensity * light_colors[light_idx], material.specular)


@ti.func
def shade(cell: ShadeCell) -> vec3:
    """Compute the local Phong colour at a hit.

    Args:
        cell: A ShadeCell with hit == 1.

    Returns:
        The local colour with every channel in [0, COLOR_MAX].
    """
    material = get_phong_material(cell.material_id)

    colour = saturating_add(vec3(0.0, 0.0, 0.0), ambient_term(material))

    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)
    for light_idx in range(num_lights[None]):
        if illuminates(cell.point, light_idx) == 1:
            diffuse = saturating_add(diffuse, diffuse_term(cell, material, light_idx))
            specular = saturating_add(specular, specular_term(cell, material, light_idx))

    colour = saturating_add(colour, diffuse)
    colour = saturating_add(colour, specular)
    return colour
