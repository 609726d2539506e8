"""Sphere primitive with ray-sphere intersection.

This module provides a Sphere dataclass, its intersection routine and its
surface normal.

The intersection solves |o + t d - c|^2 = r^2 in the half-b form:

    a = d . d
    b = d . (o - c)
    c = (o - c) . (o - c) - r^2
    discriminant = b^2 - a c

Root selection picks (-b - sqrt(disc)) / a exactly when that root is
positive (-b > sqrt(disc)), and the far root (-b + sqrt(disc)) / a
otherwise. The chosen t must then be strictly positive, so a sphere lying
entirely behind the ray origin is never reported.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 3), radius=1.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: float


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Intersect a ray with a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.

    Returns:
        A tuple (hit, point) where hit is 1 when the ray meets the sphere in
        front of its origin and point is the intersection. point is only
        meaningful when hit == 1.
    """
    # Vector from sphere center to ray origin
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    b = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = b * b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_point = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-b + sqrt_d) / a
        if -b > sqrt_d:
            t = (-b - sqrt_d) / a

        # t <= 0 means the intersection is behind the ray origin
        if t > 0.0:
            did_hit = 1
            hit_point = ray_origin + t * ray_direction

    return did_hit, hit_point


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere surface.

    Args:
        sphere: The sphere.
        point: A point on the sphere surface (must differ from the center).

    Returns:
        (point - center) / |point - center|.
    """
    w = point - sphere.center
    return w / ti.sqrt(tm.dot(w, w))


@ti.func
def make_sphere(center: vec3, radius: float) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
