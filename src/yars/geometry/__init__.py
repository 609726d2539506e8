"""Geometry module for shape primitives.

This module provides geometric primitives and their intersection routines:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane built from two spanning directions

Each primitive offers the same capability set, implemented as Taichi
functions so the scene can dispatch on shape type inside kernels:

    hit, point = intersect_<shape>(ray_origin, ray_direction, shape)
    normal = <shape>_normal(shape, point)

Materials are not stored on the primitives; the scene's shape table pairs
each shape with a material ID.
"""

from .plane import (
    Plane,
    intersect_plane,
    make_plane,
    orthonormal_span,
    plane_normal,
)
from .sphere import Sphere, intersect_sphere, make_sphere, sphere_normal

__all__ = [
    "Sphere",
    "intersect_sphere",
    "sphere_normal",
    "make_sphere",
    "Plane",
    "intersect_plane",
    "plane_normal",
    "make_plane",
    "orthonormal_span",
]
