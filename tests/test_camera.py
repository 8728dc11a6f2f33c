"""Unit tests for the field-of-view camera."""

import math

import numpy as np
import pytest


class TestCameraGeometry:
    """Tests for derived camera sizes."""

    def test_construction(self):
        from raytracer.camera.camera import Camera
        from raytracer.core.matrix import identity

        c = Camera(160, 120, math.pi / 2)
        assert c.hsize == 160
        assert c.vsize == 120
        assert c.field_of_view == pytest.approx(math.pi / 2)
        np.testing.assert_array_equal(c.transform, identity())

    def test_pixel_size_horizontal_canvas(self):
        from raytracer.camera.camera import Camera

        assert Camera(200, 125, math.pi / 2).pixel_size == pytest.approx(0.01)

    def test_pixel_size_vertical_canvas(self):
        from raytracer.camera.camera import Camera

        assert Camera(125, 200, math.pi / 2).pixel_size == pytest.approx(0.01)

    @pytest.mark.parametrize(
        "hsize, vsize, fov",
        [
            (0, 10, math.pi / 2),
            (10, -1, math.pi / 2),
            (10, 10, 0.0),
            (10, 10, math.pi),
        ],
    )
    def test_invalid_camera_rejected(self, hsize, vsize, fov):
        from raytracer.camera.camera import Camera

        with pytest.raises(ValueError):
            Camera(hsize, vsize, fov)

    def test_singular_transform_rejected(self):
        from raytracer.camera.camera import Camera
        from raytracer.core.matrix import NonInvertibleMatrixError, scaling

        with pytest.raises(NonInvertibleMatrixError):
            Camera(10, 10, math.pi / 2, scaling(0, 0, 0))


class TestRayForPixel:
    """Tests for per-pixel ray generation."""

    def test_center_of_canvas(self):
        from raytracer.camera.camera import Camera

        r = Camera(201, 101, math.pi / 2).ray_for_pixel(100, 50)
        np.testing.assert_allclose(r.origin, [0, 0, 0, 1], atol=1e-5)
        np.testing.assert_allclose(r.direction, [0, 0, -1, 0], atol=1e-5)

    def test_corner_of_canvas(self):
        from raytracer.camera.camera import Camera

        r = Camera(201, 101, math.pi / 2).ray_for_pixel(0, 0)
        np.testing.assert_allclose(r.direction, [0.66519, 0.33259, -0.66851, 0], atol=1e-4)

    def test_transformed_camera(self):
        from raytracer.camera.camera import Camera
        from raytracer.core.matrix import chain, rotation_y, translation

        c = Camera(201, 101, math.pi / 2, chain(translation(0, -2, 5), rotation_y(math.pi / 4)))
        r = c.ray_for_pixel(100, 50)
        h = math.sqrt(2) / 2
        np.testing.assert_allclose(r.origin, [0, 2, -5, 1], atol=1e-4)
        np.testing.assert_allclose(r.direction, [h, 0, -h, 0], atol=1e-4)

    def test_off_center_pixel(self):
        from raytracer.camera.camera import Camera
        from raytracer.core.tuples import normalize, vector

        r = Camera(200, 125, math.pi / 2).ray_for_pixel(100, 50)
        np.testing.assert_allclose(r.direction, normalize(vector(-0.005, 0.12, -1)), atol=1e-5)

    def test_setup_camera_fields(self):
        from raytracer.camera.camera import Camera, get_camera_info, setup_camera

        setup_camera(Camera(200, 125, math.pi / 2))
        info = get_camera_info()
        assert info["half_width"] == pytest.approx(1.0, abs=1e-6)
        assert info["half_height"] == pytest.approx(0.625, abs=1e-6)
        assert info["pixel_size"] == pytest.approx(0.01, abs=1e-6)
