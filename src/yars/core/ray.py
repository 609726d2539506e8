"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the Ray dataclass and the small vector algebra the
tracer is built on. All functions are Taichi functions so they can be
inlined into intersection, shading and rendering kernels.

Vectors use the interpreter's default floating-point precision, so a
program initialised with ``ti.init(default_fp=ti.f64)`` traces in double
precision.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point_along() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, 1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It need not be
            unit length; callers normalize where a unit vector matters.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: float) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> float:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def norm(v: vec3) -> float:
    """Compute the Euclidean norm sqrt(v . v)."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The zero vector has no direction; normalizing it yields NaN components.
    Callers must not pass a zero-length vector.

    Args:
        v: The input vector (non-zero).

    Returns:
        v / norm(v).
    """
    return v / norm(v)


@ti.func
def reflect(n: vec3, v: vec3) -> vec3:
    """Reflect a vector about a unit normal.

    Computes -(2 (n . v) n - v), the mirror image of the incoming direction
    v about the surface normal n.

    Args:
        n: The surface normal (unit length).
        v: The incoming direction, pointing toward the surface.

    Returns:
        The reflected direction, with the same length as v.
    """
    return -(2.0 * tm.dot(n, v) * n - v)
