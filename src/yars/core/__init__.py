"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and device-side vector utilities
    rotation: Host-side rotation group for orienting the camera
    shading: Phong local illumination with saturating colour arithmetic
    integrator: Depth-bounded recursive tracer and the render loop

The core module evaluates one ray at a time: closest hit, Phong shading
with shadow rays, then the mirror-reflected ray until the depth budget is
spent. No state is shared between rays, so the render kernel traces all
pixels in parallel.
"""

from .ray import (
    Ray,
    cross,
    dot,
    make_ray,
    norm,
    normalize,
    ray_at,
    reflect,
    vec3,
)
from .rotation import Rotation, matrix_distance

# Note: shading and integrator are NOT imported here because they depend on
# modules that declare Taichi fields. Import them directly once ti.init()
# has run, e.g. from yars.core.integrator import trace_to_depth

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "norm",
    "normalize",
    "reflect",
    "Rotation",
    "matrix_distance",
]
