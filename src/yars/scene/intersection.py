"""Scene-level closest-hit search over heterogeneous shapes.

This module owns the scene's shape table and answers the central query of
the tracer: which surface does a ray see first?

Shapes are stored in a single ordered table of (shape type, type-local
index, material ID) entries, backed by per-type Structure-of-Arrays storage.
trace_ray() walks the table in insertion order, dispatches on the shape
type, and keeps the nearest valid hit. Hits within
SELF_INTERSECTION_TOLERANCE of the ray origin are discarded so that rays
leaving a surface do not immediately re-strike it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.scene.intersection import add_sphere, clear_scene, trace_ray
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 3.0), 1.0, material_id=0)
    >>> # Use trace_ray within a Taichi kernel
"""

from collections.abc import Sequence
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from yars.geometry.plane import Plane, intersect_plane, plane_normal
from yars.geometry.sphere import Sphere, intersect_sphere, sphere_normal

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Candidate hits closer than this to the ray origin are ignored
SELF_INTERSECTION_TOLERANCE = 1e-5


class ShapeType(IntEnum):
    """Enumeration of supported shape types.

    Used for shape dispatch in the closest-hit search.
    """

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class ShadeCell:
    """Result of a closest-hit query, consumed by shading.

    Attributes:
        hit: 1 if the ray hit a surface, 0 if it escaped the scene.
        point: The nearest hit point. Only valid if hit == 1.
        normal: The unit surface normal at the hit point. Only valid if
            hit == 1.
        view: The ray direction, normalized. Only valid if hit == 1.
        material_id: The material ID of the hit shape. -1 on a miss.
        distance: Euclidean distance from the ray origin to the hit point.
    """

    hit: ti.i32
    point: vec3
    normal: vec3
    view: vec3
    material_id: ti.i32
    distance: float


# Maximum number of shapes supported in the scene
MAX_SHAPES = 2048
MAX_SPHERES = 1024
MAX_PLANES = 1024

# Ordered shape table
shape_types = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_type_indices = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=float, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=float, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage: unit normal and a point on the plane
plane_normals = ti.Vector.field(3, dtype=float, shape=MAX_PLANES)
plane_anchors = ti.Vector.field(3, dtype=float, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all shapes from the scene.

    Resets the shape counts to zero. The actual field data is not cleared
    but will be overwritten when new shapes are added.
    """
    num_shapes[None] = 0
    num_spheres[None] = 0
    num_planes[None] = 0


def _append_shape(shape_type: ShapeType, type_index: int, material_id: int) -> int:
    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
    shape_types[idx] = int(shape_type)
    shape_type_indices[idx] = type_index
    shape_material_ids[idx] = material_id
    num_shapes[None] = idx + 1
    return idx


def add_sphere(center: Sequence[float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere (must be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The shape index of the added sphere in the ordered shape table.

    Raises:
        RuntimeError: If the maximum number of spheres or shapes is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    sphere_idx = num_spheres[None]
    if sphere_idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    shape_idx = _append_shape(ShapeType.SPHERE, sphere_idx, material_id)
    sphere_centers[sphere_idx] = vec3(center[0], center[1], center[2])
    sphere_radii[sphere_idx] = radius
    num_spheres[None] = sphere_idx + 1
    return shape_idx


def add_plane(
    normal: Sequence[float],
    anchor: Sequence[float] = (0.0, 0.0, 0.0),
    material_id: int = 0,
) -> int:
    """Add a plane to the scene.

    Args:
        normal: The unit normal of the plane, as produced by
            geometry.plane.orthonormal_span().
        anchor: A point on the plane. Default is the origin.
        material_id: The material ID to associate with this plane.

    Returns:
        The shape index of the added plane in the ordered shape table.

    Raises:
        RuntimeError: If the maximum number of planes or shapes is exceeded.
    """
    plane_idx = num_planes[None]
    if plane_idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")

    shape_idx = _append_shape(ShapeType.PLANE, plane_idx, material_id)
    plane_normals[plane_idx] = vec3(normal[0], normal[1], normal[2])
    plane_anchors[plane_idx] = vec3(anchor[0], anchor[1], anchor[2])
    num_planes[None] = plane_idx + 1
    return shape_idx


def get_shape_count() -> int:
    """Get the total number of shapes in the scene."""
    return int(num_shapes[None])


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


# =============================================================================
# Shape Dispatch
# =============================================================================


@ti.func
def intersect_shape(shape_idx: ti.i32, ray_origin: vec3, ray_direction: vec3):
    """Intersect a ray with one entry of the shape table.

    Args:
        shape_idx: Index into the ordered shape table.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A tuple (hit, point) as returned by the shape's intersection routine.
    """
    kind = shape_types[shape_idx]
    type_index = shape_type_indices[shape_idx]

    did_hit = 0
    hit_point = vec3(0.0, 0.0, 0.0)

    if kind == int(ShapeType.SPHERE):
        sphere = Sphere(center=sphere_centers[type_index], radius=sphere_radii[type_index])
        did_hit, hit_point = intersect_sphere(ray_origin, ray_direction, sphere)

    elif kind == int(ShapeType.PLANE):
        plane = Plane(normal=plane_normals[type_index], anchor=plane_anchors[type_index])
        did_hit, hit_point = intersect_plane(ray_origin, ray_direction, plane)

    return did_hit, hit_point


@ti.func
def shape_normal(shape_idx: ti.i32, point: vec3) -> vec3:
    """Unit surface normal of a shape-table entry at a point on its surface."""
    kind = shape_types[shape_idx]
    type_index = shape_type_indices[shape_idx]

    normal = vec3(0.0, 0.0, 0.0)

    if kind == int(ShapeType.SPHERE):
        sphere = Sphere(center=sphere_centers[type_index], radius=sphere_radii[type_index])
        normal = sphere_normal(sphere, point)

    elif kind == int(ShapeType.PLANE):
        plane = Plane(normal=plane_normals[type_index], anchor=plane_anchors[type_index])
        normal = plane_normal(plane, point)

    return normal


@ti.func
def _make_miss_cell() -> ShadeCell:
    """Create a ShadeCell indicating no intersection."""
    return ShadeCell(
        hit=0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        view=vec3(0.0, 0.0, 0.0),
        material_id=-1,
        distance=0.0,
    )


# =============================================================================
# Closest-Hit Engine
# =============================================================================


@ti.func
def trace_ray(ray_origin: vec3, ray_direction: vec3) -> ShadeCell:
    """Find the nearest surface hit along a ray.

    Every shape is intersected in table order. Hits closer than
    SELF_INTERSECTION_TOLERANCE to the ray origin are discarded; among the
    rest the smallest distance wins, and ties keep the earliest shape.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized).

    Returns:
        A ShadeCell for the nearest hit, or a miss cell (hit == 0) if no
        shape yields a valid hit.
    """
    best_shape = -1
    best_distance = 0.0
    best_point = vec3(0.0, 0.0, 0.0)

    for i in range(num_shapes[None]):
        did_hit, hit_point = intersect_shape(i, ray_origin, ray_direction)
        if did_hit == 1:
            distance = tm.length(ray_origin - hit_point)
            # A NaN distance means a degenerate ray or shape upstream
            assert distance == distance, "NaN hit distance in closest-hit search"
            if distance >= SELF_INTERSECTION_TOLERANCE:
                if best_shape == -1 or distance < best_distance:
                    best_shape = i
                    best_distance = distance
                    best_point = hit_point

    result = _make_miss_cell()
    if best_shape != -1:
        result = ShadeCell(
            hit=1,
            point=best_point,
            normal=shape_normal(best_shape, best_point),
            view=tm.normalize(ray_direction),
            material_id=shape_material_ids[best_shape],
            distance=best_distance,
        )

    return result
