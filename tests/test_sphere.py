"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere
- Sphere entirely behind the ray origin
- Ray starting inside sphere
- Ray starting on the surface
- Non-unit ray directions and non-unit radii
- Surface normals
"""

import pytest
import taichi as ti


def _run_intersection(origin, direction, center, radius):
    from yars.geometry.sphere import Sphere, intersect_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    point = ti.Vector.field(3, dtype=float, shape=())

    @ti.kernel
    def test_kernel(
        ox: float, oy: float, oz: float,
        dx: float, dy: float, dz: float,
        cx: float, cy: float, cz: float,
        r: float,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        did_hit, hit_point = intersect_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere)
        hit[None] = did_hit
        point[None] = hit_point

    test_kernel(*origin, *direction, *center, radius)
    p = point[None]
    return hit[None], (p[0], p[1], p[2])


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from yars.geometry.sphere import make_sphere, vec3

        center_result = ti.Vector.field(3, dtype=float, shape=())
        radius_result = ti.field(dtype=float, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((1.0, 2.0, 3.0))
        assert radius_result[None] == pytest.approx(0.5)


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_returns_near_surface_point(self):
        """Test ray hitting sphere head-on from outside."""
        hit, point = _run_intersection((0, 0, -5), (0, 0, 1), (0, 0, 0), 1.0)
        assert hit == 1
        assert point == pytest.approx((0.0, 0.0, -1.0))

    def test_miss(self):
        """Test ray passing beside the sphere."""
        hit, _ = _run_intersection((5, 0, 0), (0, 0, -1), (0, 0, 0), 1.0)
        assert hit == 0

    def test_sphere_behind_origin(self):
        """Test that a sphere behind the ray is never reported."""
        hit, _ = _run_intersection((0, 0, 5), (0, 0, 1), (0, 0, 0), 1.0)
        assert hit == 0

    def test_ray_from_inside_hits_far_side(self):
        """Test ray starting at the center exits through the far side."""
        hit, point = _run_intersection((0, 0, 0), (0, 0, 1), (0, 0, 0), 1.0)
        assert hit == 1
        assert point == pytest.approx((0.0, 0.0, 1.0))

    def test_ray_from_surface_outward_misses(self):
        """Test that a ray leaving the surface outward does not re-hit it."""
        hit, _ = _run_intersection((1, 0, 0), (1, 0, 0), (0, 0, 0), 1.0)
        assert hit == 0

    def test_ray_from_surface_inward_hits_opposite_side(self):
        """Test that a ray entering from the surface hits the opposite side."""
        hit, point = _run_intersection((1, 0, 0), (-1, 0, 0), (0, 0, 0), 1.0)
        assert hit == 1
        assert point == pytest.approx((-1.0, 0.0, 0.0))

    def test_radius_is_squared(self):
        """Test that a non-unit radius gives the correct surface point."""
        hit, point = _run_intersection((0, 0, 0), (0, 0, 1), (0, 0, 10), 3.0)
        assert hit == 1
        assert point == pytest.approx((0.0, 0.0, 7.0))

    def test_non_unit_direction(self):
        """Test that the hit point does not depend on direction length."""
        hit, point = _run_intersection((0, 0, -5), (0, 0, 4), (0, 0, 0), 1.0)
        assert hit == 1
        assert point == pytest.approx((0.0, 0.0, -1.0))

    def test_hit_point_lies_on_surface(self):
        """Test that an oblique hit lies on the sphere surface."""
        hit, point = _run_intersection((-3, 1, -4), (1, -0.2, 1), (0.5, 0.5, 0.5), 1.5)
        assert hit == 1
        dist2 = sum((p - c) ** 2 for p, c in zip(point, (0.5, 0.5, 0.5)))
        assert dist2 == pytest.approx(1.5**2)


class TestSphereNormal:
    """Tests for the sphere surface normal."""

    def test_normal_points_outward(self):
        """Test that the normal is the unit vector from center to point."""
        from yars.geometry.sphere import Sphere, sphere_normal, vec3

        result = ti.Vector.field(3, dtype=float, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, 1.0, 1.0), radius=2.0)
            result[None] = sphere_normal(sphere, vec3(1.0, 3.0, 1.0))

        test_kernel()
        n = result[None]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, 1.0, 0.0))
