"""Phong material model.

A Phong material describes how a surface responds to light with four
per-channel reflectivities and a shininess exponent:

    ambient: fraction of the ambient light reflected
    diffuse: fraction of direct light reflected in proportion to n . l
    specular: weight of the view-dependent highlight
    reflectivity: fraction of the mirror-reflected ray's colour blended in
    shine: Phong specular power

Materials are registered once before rendering and read by the shading
kernels through get_phong_material(). A registered material never changes
during a render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.materials.phong import add_phong_material, plain_material
    >>> red = plain_material((1.0, 0.0, 0.0))
    >>> material_id = add_phong_material(**red.as_kwargs())
"""

from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Colour = tuple[float, float, float]


@ti.dataclass
class PhongMaterial:
    """Phong material properties as seen by the shading kernels.

    Attributes:
        ambient: Ambient reflectivity per channel, in [0, 1].
        diffuse: Diffuse reflectivity per channel, in [0, 1].
        specular: Specular reflectivity per channel, in [0, 1].
        reflectivity: Mirror reflectivity per channel, in [0, 1].
        shine: Specular exponent (non-negative).
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    reflectivity: vec3
    shine: float


@dataclass(frozen=True)
class PhongParams:
    """Host-side description of a Phong material.

    Mirrors PhongMaterial so scenes can be built, compared and serialized
    without touching Taichi fields.
    """

    ambient: Colour
    diffuse: Colour
    specular: Colour
    reflectivity: Colour = (0.0, 0.0, 0.0)
    shine: float = 1.0

    def as_kwargs(self) -> dict[str, Any]:
        """Return the parameters as keyword arguments for add_phong_material()."""
        return asdict(self)


def plain_material(colour: Colour) -> PhongParams:
    """Build the default matte material for a base colour.

    The surface is mostly diffuse with a weak ambient term, a small white
    highlight and no mirror reflection.

    Args:
        colour: Base colour as (R, G, B), each component in [0, 1].

    Returns:
        The material parameters.
    """
    r, g, b = colour
    return PhongParams(
        ambient=(0.2 * r, 0.2 * g, 0.2 * b),
        diffuse=(r, g, b),
        specular=(0.4, 0.4, 0.4),
        reflectivity=(0.0, 0.0, 0.0),
        shine=7.0,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Phong materials in the scene
MAX_PHONG_MATERIALS = 256

phong_ambients = ti.Vector.field(3, dtype=float, shape=MAX_PHONG_MATERIALS)
phong_diffuses = ti.Vector.field(3, dtype=float, shape=MAX_PHONG_MATERIALS)
phong_speculars = ti.Vector.field(3, dtype=float, shape=MAX_PHONG_MATERIALS)
phong_reflectivities = ti.Vector.field(3, dtype=float, shape=MAX_PHONG_MATERIALS)
phong_shines = ti.field(dtype=float, shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def _validate_reflectivity(name: str, values: Colour) -> None:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    for i, component in enumerate(values):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "Reflectivities are fractions of the incoming light."
            )


def validate_phong_params(
    ambient: Colour,
    diffuse: Colour,
    specular: Colour,
    reflectivity: Colour,
    shine: float,
) -> None:
    """Check Phong parameters without registering them.

    Raises:
        ValueError: If any reflectivity component is outside [0, 1] or
            shine is negative.
    """
    _validate_reflectivity("ambient", ambient)
    _validate_reflectivity("diffuse", diffuse)
    _validate_reflectivity("specular", specular)
    _validate_reflectivity("reflectivity", reflectivity)

    if shine < 0.0:
        raise ValueError(f"Shine = {shine} must be non-negative")


def clear_phong_materials() -> None:
    """Clear all Phong materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_phong_materials[None] = 0


def add_phong_material(
    ambient: Colour,
    diffuse: Colour,
    specular: Colour,
    reflectivity: Colour = (0.0, 0.0, 0.0),
    shine: float = 1.0,
) -> int:
    """Add a Phong material to the material registry.

    Args:
        ambient: Ambient reflectivity as (R, G, B).
        diffuse: Diffuse reflectivity as (R, G, B).
        specular: Specular reflectivity as (R, G, B).
        reflectivity: Mirror reflectivity as (R, G, B). Default is no
            reflection.
        shine: Specular exponent. Default is 1.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any reflectivity component is outside [0, 1].
        ValueError: If shine is negative.
    """
    validate_phong_params(ambient, diffuse, specular, reflectivity, shine)

    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Phong materials ({MAX_PHONG_MATERIALS}) exceeded"
        )

    phong_ambients[idx] = vec3(ambient[0], ambient[1], ambient[2])
    phong_diffuses[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    phong_speculars[idx] = vec3(specular[0], specular[1], specular[2])
    phong_reflectivities[idx] = vec3(reflectivity[0], reflectivity[1], reflectivity[2])
    phong_shines[idx] = shine
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of Phong materials in the registry."""
    return int(num_phong_materials[None])


@ti.func
def get_phong_material(material_idx: ti.i32) -> PhongMaterial:
    """Look up a Phong material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The PhongMaterial stored at that index.
    """
    return PhongMaterial(
        ambient=phong_ambients[material_idx],
        diffuse=phong_diffuses[material_idx],
        specular=phong_speculars[material_idx],
        reflectivity=phong_reflectivities[material_idx],
        shine=phong_shines[material_idx],
    )


@ti.func
def get_phong_reflectivity(material_idx: ti.i32) -> vec3:
    """Get the mirror reflectivity for a Phong material by index."""
    return phong_reflectivities[material_idx]
