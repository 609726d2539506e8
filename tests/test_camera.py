"""Tests for the camera builder and primary ray generation.

Tests cover:
- Field of view and canvas validation
- Direction through the canvas centre and corners
- Rotated and translated cameras
- Device-side ray generation
"""

import math

import pytest
import taichi as ti


class TestCameraBuilder:
    """Tests for building cameras."""

    @pytest.mark.parametrize("fov", [0.0, -10.0, 180.0, 270.0])
    def test_invalid_fov_rejected(self, fov):
        """Test that fields of view outside (0, 180) raise."""
        from yars.camera.camera import CameraBuilder

        with pytest.raises(ValueError, match="Field of view"):
            CameraBuilder(100, 100, fov)

    @pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
    def test_invalid_canvas_rejected(self, size):
        """Test that empty canvases raise."""
        from yars.camera.camera import CameraBuilder

        with pytest.raises(ValueError, match="Canvas"):
            CameraBuilder(*size, 90.0)

    def test_world_size(self):
        """Test the image plane size for a 90 degree field of view."""
        from yars.camera.camera import CameraBuilder

        builder = CameraBuilder(200, 100, 90.0)
        assert builder.world_height == pytest.approx(2.0)
        assert builder.world_width == pytest.approx(4.0)

    def test_builder_is_immutable(self):
        """Test that rotated and translated return new builders."""
        from yars.camera.camera import CameraBuilder
        from yars.core.rotation import Rotation

        builder = CameraBuilder(100, 100, 90.0)
        moved = builder.translated((1.0, 2.0, 3.0))
        turned = builder.rotated(Rotation.rotation_y(1.0))

        assert builder.position == (0.0, 0.0, 0.0)
        assert builder.orientation == Rotation.identity()
        assert moved.position == (1.0, 2.0, 3.0)
        assert turned.orientation == Rotation.rotation_y(1.0)

    def test_rotations_pre_compose(self):
        """Test that a later rotation is applied after an earlier one."""
        from yars.camera.camera import CameraBuilder
        from yars.core.rotation import Rotation

        first = Rotation.rotation_z(0.3)
        second = Rotation.rotation_x(0.8)
        builder = CameraBuilder(100, 100, 90.0).rotated(first).rotated(second)

        assert builder.orientation.is_close(second * first)


class TestCameraDirections:
    """Tests for host-side ray directions."""

    def test_centre_direction(self):
        """Test that the centre pixel looks straight down +Z."""
        from yars.camera.camera import CameraBuilder

        camera = CameraBuilder(100, 100, 90.0).build()
        assert camera.get_direction_through_pixel(50, 50) == (0.0, 0.0, 1.0)

    def test_top_left_corner_direction(self):
        """Test that pixel (0, 0) is at the top left (negative X and Y)."""
        from yars.camera.camera import CameraBuilder

        camera = CameraBuilder(100, 100, 90.0).build()
        assert camera.get_direction_through_pixel(0, 0) == pytest.approx((-1.0, -1.0, 1.0))

    def test_aspect_ratio_widens_x(self):
        """Test that a wide canvas uses the same step in X and Y."""
        from yars.camera.camera import CameraBuilder

        camera = CameraBuilder(200, 100, 90.0).build()
        assert camera.x_step == pytest.approx(camera.y_step)
        assert camera.get_direction_through_pixel(0, 50) == pytest.approx((-2.0, 0.0, 1.0))

    def test_rotated_direction(self):
        """Test that the orientation turns the view direction."""
        from yars.camera.camera import CameraBuilder
        from yars.core.rotation import Rotation

        camera = CameraBuilder(100, 100, 90.0).rotated(Rotation.rotation_y(math.pi / 2)).build()
        assert camera.get_direction_through_pixel(50, 50) == pytest.approx(
            (1.0, 0.0, 0.0), abs=1e-12
        )

    def test_ray_through_pixel_uses_position(self):
        """Test that a translated camera emits rays from its position."""
        from yars.camera.camera import CameraBuilder

        camera = CameraBuilder(100, 100, 90.0).translated((1.0, 0.0, 0.0)).build()
        origin, direction = camera.get_ray_through_pixel(50, 50)
        assert origin == (1.0, 0.0, 0.0)
        assert direction == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("pixel", [(100, 0), (0, 100), (-1, 5)])
    def test_pixel_outside_canvas_rejected(self, pixel):
        """Test that pixels outside the canvas raise."""
        from yars.camera.camera import CameraBuilder

        camera = CameraBuilder(100, 100, 90.0).build()
        with pytest.raises(ValueError, match="outside"):
            camera.get_direction_through_pixel(*pixel)


class TestDeviceRays:
    """Tests for get_ray() inside kernels."""

    def _get_ray(self, i, j):
        from yars.camera.camera import get_ray

        origin = ti.Vector.field(3, dtype=float, shape=())
        direction = ti.Vector.field(3, dtype=float, shape=())

        @ti.kernel
        def test_kernel(pixel_i: ti.i32, pixel_j: ti.i32):
            ray = get_ray(pixel_i, pixel_j)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel(i, j)
        return tuple(origin.to_numpy()), tuple(direction.to_numpy())

    def test_device_ray_matches_host(self):
        """Test that get_ray agrees with the host-side camera."""
        from yars.camera.camera import CameraBuilder, setup_camera
        from yars.core.rotation import Rotation

        camera = (
            CameraBuilder(64, 48, 60.0)
            .rotated(Rotation.rotation_x(0.2) * Rotation.rotation_y(-0.5))
            .translated((0.5, -1.0, 2.0))
            .build()
        )
        setup_camera(camera)

        for i, j in [(0, 0), (32, 24), (63, 47), (10, 40)]:
            origin, direction = self._get_ray(i, j)
            expected_origin, expected_direction = camera.get_ray_through_pixel(i, j)
            assert origin == pytest.approx(expected_origin)
            assert direction == pytest.approx(expected_direction, abs=1e-12)

    def test_camera_info(self):
        """Test the debugging snapshot of the uploaded camera."""
        from yars.camera.camera import CameraBuilder, get_camera_info, setup_camera

        setup_camera(CameraBuilder(100, 50, 90.0).translated((1.0, 2.0, 3.0)).build())
        info = get_camera_info()

        assert info["origin"] == pytest.approx((1.0, 2.0, 3.0))
        assert info["canvas"] == pytest.approx((100.0, 50.0))
        assert info["step"] == pytest.approx((0.04, 0.04))
