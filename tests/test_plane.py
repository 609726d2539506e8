"""Unit tests for the plane primitive.

Tests cover:
- Orthonormalizing spanning directions and rejecting degenerate pairs
- Ray-plane intersection from either side
- Parallel rays and planes behind the ray origin
"""

import math

import pytest
import taichi as ti


class TestOrthonormalSpan:
    """Tests for the host-side plane construction."""

    def test_axis_aligned_normal(self):
        """Test that the normal is u x v for axis directions."""
        from yars.geometry.plane import orthonormal_span

        u, v, n = orthonormal_span((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert u == pytest.approx((1.0, 0.0, 0.0))
        assert v == pytest.approx((0.0, 0.0, 1.0))
        assert n == pytest.approx((0.0, -1.0, 0.0))

    def test_swapping_directions_flips_normal(self):
        """Test that the order of the directions selects the facing side."""
        from yars.geometry.plane import orthonormal_span

        _, _, n = orthonormal_span((0.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        assert n == pytest.approx((0.0, 1.0, 0.0))

    def test_non_orthogonal_directions_are_orthonormalized(self):
        """Test Gram-Schmidt on scaled, skewed directions."""
        from yars.geometry.plane import orthonormal_span

        u, v, n = orthonormal_span((2.0, 0.0, 0.0), (3.0, 4.0, 0.0))
        assert u == pytest.approx((1.0, 0.0, 0.0))
        assert v == pytest.approx((0.0, 1.0, 0.0))
        assert n == pytest.approx((0.0, 0.0, 1.0))

    def test_result_is_orthonormal(self):
        """Test that u, v and n are mutually orthogonal unit vectors."""
        from yars.geometry.plane import orthonormal_span

        u, v, n = orthonormal_span((1.0, 2.0, 3.0), (-2.0, 0.5, 1.0))

        def dot(a, b):
            return sum(x * y for x, y in zip(a, b))

        for w in (u, v, n):
            assert math.sqrt(dot(w, w)) == pytest.approx(1.0)
        assert dot(u, v) == pytest.approx(0.0, abs=1e-12)
        assert dot(u, n) == pytest.approx(0.0, abs=1e-12)
        assert dot(v, n) == pytest.approx(0.0, abs=1e-12)

    def test_parallel_directions_rejected(self):
        """Test that parallel spanning directions raise."""
        from yars.geometry.plane import orthonormal_span

        with pytest.raises(ValueError, match="parallel"):
            orthonormal_span((1.0, 1.0, 0.0), (-2.0, -2.0, 0.0))

    def test_zero_direction_rejected(self):
        """Test that a zero-length spanning direction raises."""
        from yars.geometry.plane import orthonormal_span

        with pytest.raises(ValueError, match="non-zero"):
            orthonormal_span((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))

    def test_wrong_dimension_rejected(self):
        """Test that non-3-vectors raise."""
        from yars.geometry.plane import orthonormal_span

        with pytest.raises(ValueError, match="3-vectors"):
            orthonormal_span((1.0, 0.0), (0.0, 1.0))


def _run_intersection(origin, direction, normal, anchor):
    from yars.geometry.plane import Plane, intersect_plane, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    point = ti.Vector.field(3, dtype=float, shape=())

    @ti.kernel
    def test_kernel(
        ox: float, oy: float, oz: float,
        dx: float, dy: float, dz: float,
        nx: float, ny: float, nz: float,
        ax: float, ay: float, az: float,
    ):
        plane = Plane(normal=vec3(nx, ny, nz), anchor=vec3(ax, ay, az))
        did_hit, hit_point = intersect_plane(vec3(ox, oy, oz), vec3(dx, dy, dz), plane)
        hit[None] = did_hit
        point[None] = hit_point

    test_kernel(*origin, *direction, *normal, *anchor)
    p = point[None]
    return hit[None], (p[0], p[1], p[2])


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_from_front(self):
        """Test a ray meeting the plane against its normal."""
        hit, point = _run_intersection((0, 0, 0), (0, 1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 1
        assert point == pytest.approx((0.0, 1.0, 0.0))

    def test_hit_from_back(self):
        """Test that planes are two-sided."""
        hit, point = _run_intersection((0, 5, 0), (0, -1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 1
        assert point == pytest.approx((0.0, 1.0, 0.0))

    def test_oblique_hit(self):
        """Test an oblique ray with a non-unit direction."""
        hit, point = _run_intersection((0, 0, 0), (2, 2, 4), (0, -1, 0), (7, 1, -3))
        assert hit == 1
        assert point == pytest.approx((1.0, 1.0, 2.0))

    def test_parallel_ray_misses(self):
        """Test that a ray parallel to the plane never hits."""
        hit, _ = _run_intersection((0, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 0

    def test_plane_behind_origin_misses(self):
        """Test that a plane behind the ray origin is not reported."""
        hit, _ = _run_intersection((0, 0, 0), (0, -1, 0), (0, -1, 0), (0, 1, 0))
        assert hit == 0


class TestPlaneNormal:
    """Tests for the plane surface normal."""

    def test_normal_is_constant(self):
        """Test that the normal does not depend on the point."""
        from yars.geometry.plane import make_plane, plane_normal, vec3

        result = ti.Vector.field(3, dtype=float, shape=())

        @ti.kernel
        def test_kernel():
            plane = make_plane(vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 2.0))
            result[None] = plane_normal(plane, vec3(5.0, -3.0, 2.0))

        test_kernel()
        n = result[None]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, 0.0, 1.0))
