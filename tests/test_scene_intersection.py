"""Tests for the shape table and closest-hit engine.

Tests cover:
- Shape registration and counts
- Nearest hit among spheres and planes
- Tie-breaking by insertion order
- Self-intersection tolerance
- Miss cells
"""

import pytest
import taichi as ti


def _trace(origin, direction):
    """Run trace_ray in a kernel and return the cell as a dict."""
    from yars.scene.intersection import trace_ray, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=float, shape=())
    point = ti.Vector.field(3, dtype=float, shape=())
    normal = ti.Vector.field(3, dtype=float, shape=())
    view = ti.Vector.field(3, dtype=float, shape=())

    @ti.kernel
    def test_kernel(ox: float, oy: float, oz: float, dx: float, dy: float, dz: float):
        cell = trace_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        hit[None] = cell.hit
        material_id[None] = cell.material_id
        distance[None] = cell.distance
        point[None] = cell.point
        normal[None] = cell.normal
        view[None] = cell.view

    test_kernel(*origin, *direction)
    return {
        "hit": hit[None],
        "material_id": material_id[None],
        "distance": distance[None],
        "point": tuple(point.to_numpy()),
        "normal": tuple(normal.to_numpy()),
        "view": tuple(view.to_numpy()),
    }


class TestShapeRegistry:
    """Tests for adding shapes to the table."""

    def test_shape_indices_follow_insertion_order(self):
        """Test that spheres and planes share one ordered table."""
        from yars.scene.intersection import (
            add_plane,
            add_sphere,
            get_plane_count,
            get_shape_count,
            get_sphere_count,
        )

        assert add_sphere((0.0, 0.0, 0.0), 1.0) == 0
        assert add_plane((0.0, 1.0, 0.0)) == 1
        assert add_sphere((3.0, 0.0, 0.0), 1.0) == 2

        assert get_shape_count() == 3
        assert get_sphere_count() == 2
        assert get_plane_count() == 1

    def test_clear_scene(self):
        """Test that clearing empties all shape counts."""
        from yars.scene.intersection import (
            add_plane,
            add_sphere,
            clear_scene,
            get_shape_count,
        )

        add_sphere((0.0, 0.0, 0.0), 1.0)
        add_plane((0.0, 0.0, 1.0))
        clear_scene()
        assert get_shape_count() == 0

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_rejected(self, radius):
        """Test that degenerate spheres raise."""
        from yars.scene.intersection import add_sphere

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, 0.0), radius)


class TestClosestHit:
    """Tests for the closest-hit search."""

    def test_empty_scene_misses(self):
        """Test that every ray misses an empty scene."""
        cell = _trace((0, 0, 0), (0, 0, 1))
        assert cell["hit"] == 0
        assert cell["material_id"] == -1

    def test_nearest_of_two_spheres(self):
        """Test that the nearer of two spheres on the ray wins."""
        from yars.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
        add_sphere((3.0, 0.0, 0.0), 1.0, material_id=1)

        cell = _trace((5, 0, 0), (-1, 0, 0))
        assert cell["hit"] == 1
        assert cell["point"] == pytest.approx((4.0, 0.0, 0.0))
        assert cell["material_id"] == 1
        assert cell["distance"] == pytest.approx(1.0)
        assert cell["normal"] == pytest.approx((1.0, 0.0, 0.0))

    def test_insertion_order_does_not_matter(self):
        """Test the same nearest hit when shapes are added in reverse."""
        from yars.scene.intersection import add_sphere

        add_sphere((3.0, 0.0, 0.0), 1.0, material_id=1)
        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)

        cell = _trace((5, 0, 0), (-1, 0, 0))
        assert cell["point"] == pytest.approx((4.0, 0.0, 0.0))
        assert cell["material_id"] == 1

    def test_tie_keeps_earlier_shape(self):
        """Test that equally distant hits keep the first shape added."""
        from yars.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 5.0), 1.0, material_id=7)
        add_sphere((0.0, 0.0, 5.0), 1.0, material_id=9)

        cell = _trace((0, 0, 0), (0, 0, 1))
        assert cell["hit"] == 1
        assert cell["material_id"] == 7

    def test_sphere_in_front_of_plane(self):
        """Test dispatch across shape types."""
        from yars.scene.intersection import add_plane, add_sphere

        add_plane((0.0, 0.0, -1.0), anchor=(0.0, 0.0, 10.0), material_id=2)
        add_sphere((0.0, 0.0, 5.0), 1.0, material_id=3)

        cell = _trace((0, 0, 0), (0, 0, 1))
        assert cell["material_id"] == 3
        assert cell["point"] == pytest.approx((0.0, 0.0, 4.0))

        # Beside the sphere only the plane is hit
        cell = _trace((5, 0, 0), (0, 0, 1))
        assert cell["material_id"] == 2
        assert cell["point"] == pytest.approx((5.0, 0.0, 10.0))
        assert cell["normal"] == pytest.approx((0.0, 0.0, -1.0))

    def test_view_is_normalized_direction(self):
        """Test that the cell carries the normalized ray direction."""
        from yars.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 10.0), 1.0)

        cell = _trace((0, 0, 0), (0, 0, 3))
        assert cell["view"] == pytest.approx((0.0, 0.0, 1.0))
        assert cell["distance"] == pytest.approx(9.0)

    def test_hits_within_tolerance_are_ignored(self):
        """Test that a ray leaving a plane does not re-hit it."""
        from yars.scene.intersection import SELF_INTERSECTION_TOLERANCE, add_plane

        add_plane((0.0, 1.0, 0.0), anchor=(0.0, 0.0, 0.0))

        # Start just above the plane, heading down through it
        offset = SELF_INTERSECTION_TOLERANCE / 10.0
        cell = _trace((0, offset, 0), (0, -1, 0))
        assert cell["hit"] == 0

        # Far enough away, the same plane is hit
        cell = _trace((0, 1, 0), (0, -1, 0))
        assert cell["hit"] == 1
        assert cell["point"] == pytest.approx((0.0, 0.0, 0.0))

    def test_tolerance_falls_back_to_next_hit(self):
        """Test that a discarded near hit lets a farther shape win."""
        from yars.scene.intersection import add_plane, add_sphere

        # Ray starts on the sphere surface; the near root is t = 0
        add_sphere((0.0, 0.0, 0.0), 1.0, material_id=0)
        add_plane((0.0, 0.0, 1.0), anchor=(0.0, 0.0, 5.0), material_id=1)

        cell = _trace((0, 0, 1), (0, 0, 1))
        assert cell["hit"] == 1
        assert cell["material_id"] == 1
        assert cell["point"] == pytest.approx((0.0, 0.0, 5.0))
