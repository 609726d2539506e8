"""Infinite plane primitive with ray-plane intersection.

A plane is specified by two in-plane spanning directions and an anchor
point it passes through (the origin unless stated otherwise). The spanning
pair is orthonormalized on the host with Gram-Schmidt and the normal is
their cross product, so the normal's orientation follows the right-hand
rule from the first direction to the second.

Degenerate spans (a zero-length direction or two parallel directions) are
rejected when the plane is built, never at intersection time.

Ray-plane intersection:
    t = ((anchor - o) . n) / (d . n)

which reduces to t = -(o . n) / (d . n) for a plane through the origin.
Only t > 0 is accepted, and a ray parallel to the plane misses it.

Example:
    >>> from yars.geometry.plane import orthonormal_span
    >>> u, v, n = orthonormal_span((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    >>> n
    (0.0, -1.0, 0.0)
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Spanning vectors shorter than this (before or after orthogonalization)
# are treated as degenerate
DEGENERATE_SPAN_EPSILON = 1e-12

# |d . n| at or below this is treated as a ray parallel to the plane
PARALLEL_EPSILON = 1e-12


def orthonormal_span(
    direction_u: Sequence[float],
    direction_v: Sequence[float],
) -> tuple[tuple[float, float, float], tuple[float, float, float], tuple[float, float, float]]:
    """Orthonormalize two spanning directions and compute the plane normal.

    Args:
        direction_u: First in-plane direction.
        direction_v: Second in-plane direction, not parallel to the first.

    Returns:
        Tuple of (u, v, normal) as plain float tuples, where u and v are an
        orthonormal basis of the plane and normal = u x v.

    Raises:
        ValueError: If either direction has zero length or the two are
            parallel.
    """
    u = np.asarray(direction_u, dtype=np.float64)
    v = np.asarray(direction_v, dtype=np.float64)
    if u.shape != (3,) or v.shape != (3,):
        raise ValueError("Plane spanning directions must be 3-vectors")

    u_len = np.linalg.norm(u)
    v_len = np.linalg.norm(v)
    if u_len <= DEGENERATE_SPAN_EPSILON or v_len <= DEGENERATE_SPAN_EPSILON:
        raise ValueError(
            f"Plane spanning directions must be non-zero, got {tuple(u)} and {tuple(v)}"
        )

    u = u / u_len
    # Remove the component of v along u
    v_perp = v - np.dot(v, u) * u
    v_perp_len = np.linalg.norm(v_perp)
    if v_perp_len <= DEGENERATE_SPAN_EPSILON * v_len:
        raise ValueError(
            f"Plane spanning directions are parallel: {tuple(direction_u)} and "
            f"{tuple(direction_v)}"
        )
    v = v_perp / v_perp_len

    n = np.cross(u, v)

    def as_tuple(a: np.ndarray) -> tuple[float, float, float]:
        return (float(a[0]), float(a[1]), float(a[2]))

    return as_tuple(u), as_tuple(v), as_tuple(n)


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        normal: Unit normal, the cross product of the orthonormalized
            spanning directions (vec3).
        anchor: A point the plane passes through (vec3).
    """

    normal: vec3
    anchor: vec3


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    """Intersect a ray with a plane.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        plane: The plane to test intersection against.

    Returns:
        A tuple (hit, point) where hit is 1 when the ray crosses the plane
        at some t > 0. point is only meaningful when hit == 1.
    """
    denom = tm.dot(ray_direction, plane.normal)

    did_hit = 0
    hit_point = vec3(0.0, 0.0, 0.0)

    # Ray not parallel to plane
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.anchor - ray_origin, plane.normal) / denom
        if t > 0.0:
            did_hit = 1
            hit_point = ray_origin + t * ray_direction

    return did_hit, hit_point


@ti.func
def plane_normal(plane: Plane, point: vec3) -> vec3:
    """Surface normal of a plane; independent of the point."""
    return plane.normal


@ti.func
def make_plane(normal: vec3, anchor: vec3) -> Plane:
    """Create a plane from a unit normal and anchor inside a Taichi kernel."""
    return Plane(normal=normal, anchor=anchor)
