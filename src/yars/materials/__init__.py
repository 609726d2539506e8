"""Materials module for the Phong reflection model.

Components:
    phong: Phong material (ambient, diffuse, specular, mirror reflectivity,
        shininess), its host-side parameters and the material registry

Each material provides per-channel reflectivities in [0, 1] that the
shader multiplies against light colours, plus the mirror reflectivity the
recursive tracer uses to weight reflected rays.
"""

from .phong import (
    MAX_PHONG_MATERIALS,
    PhongMaterial,
    PhongParams,
    add_phong_material,
    clear_phong_materials,
    get_phong_material,
    get_phong_material_count,
    get_phong_reflectivity,
    plain_material,
    validate_phong_params,
)

__all__ = [
    "PhongMaterial",
    "PhongParams",
    "plain_material",
    "validate_phong_params",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
    "get_phong_reflectivity",
    "MAX_PHONG_MATERIALS",
]
