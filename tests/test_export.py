"""Tests for PPM and PNG export."""

import numpy as np
import pytest


def _sample_canvas():
    from raytracer.core.canvas import Canvas
    from raytracer.core.tuples import color

    c = Canvas(5, 3)
    c.write_pixel(0, 0, color(1.5, 0, 0))
    c.write_pixel(2, 1, color(0, 0.5, 0))
    c.write_pixel(4, 2, color(-0.5, 0, 1))
    return c


class TestPPM:
    """Tests for plain PPM serialization."""

    def test_header(self):
        from raytracer.core.canvas import Canvas
        from raytracer.preview.export import canvas_to_ppm

        lines = canvas_to_ppm(Canvas(5, 3)).splitlines()
        assert lines[:3] == ["P3", "5 3", "255"]

    def test_pixel_data_is_clamped_and_scaled(self):
        from raytracer.preview.export import canvas_to_ppm

        lines = canvas_to_ppm(_sample_canvas()).splitlines()
        assert lines[3:6] == [
            "255 0 0 0 0 0 0 0 0 0 0 0 0 0 0",
            "0 0 0 0 0 0 0 128 0 0 0 0 0 0 0",
            "0 0 0 0 0 0 0 0 0 0 0 0 0 0 255",
        ]

    def test_long_lines_are_wrapped(self):
        from raytracer.core.canvas import Canvas
        from raytracer.preview.export import PPM_LINE_WIDTH, canvas_to_ppm

        c = Canvas(10, 2)
        c.fill((1, 0.8, 0.6))
        lines = canvas_to_ppm(c).splitlines()
        assert lines[3:7] == [
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
        ]
        assert all(len(line) <= PPM_LINE_WIDTH for line in lines)

    def test_ends_with_newline(self):
        from raytracer.core.canvas import Canvas
        from raytracer.preview.export import canvas_to_ppm

        assert canvas_to_ppm(Canvas(5, 3)).endswith("\n")

    def test_save_ppm(self, tmp_path):
        from raytracer.preview.export import canvas_to_ppm, save_canvas

        path = tmp_path / "out.ppm"
        save_canvas(_sample_canvas(), path)
        assert path.read_text(encoding="ascii") == canvas_to_ppm(_sample_canvas())


class TestPNG:
    """Tests for 8-bit conversion and PNG files."""

    def test_canvas_to_uint8(self):
        from raytracer.preview.export import canvas_to_uint8

        data = canvas_to_uint8(_sample_canvas())
        assert data.dtype == np.uint8
        assert data.shape == (3, 5, 3)
        np.testing.assert_array_equal(data[0, 0], [255, 0, 0])
        np.testing.assert_array_equal(data[1, 2], [0, 128, 0])
        np.testing.assert_array_equal(data[2, 4], [0, 0, 255])

    def test_save_png_round_trip(self, tmp_path):
        from PIL import Image

        from raytracer.preview.export import canvas_to_uint8, save_canvas

        path = tmp_path / "out.png"
        canvas = _sample_canvas()
        save_canvas(canvas, path)
        with Image.open(path) as img:
            assert img.size == (5, 3)
            assert img.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(img), canvas_to_uint8(canvas))

    def test_unknown_extension_rejected(self, tmp_path):
        from raytracer.preview.export import save_canvas

        with pytest.raises(ValueError):
            save_canvas(_sample_canvas(), tmp_path / "out.jpg")


class TestImageUtilities:
    """Tests for gamma and RMSE helpers."""

    def test_apply_gamma_clamps(self):
        from raytracer.preview.export import apply_gamma

        out = apply_gamma(np.array([-1.0, 0.25, 2.0, np.nan]))
        np.testing.assert_allclose(out, [0.0, 0.25, 1.0, 0.0])

    def test_apply_gamma_two(self):
        from raytracer.preview.export import apply_gamma

        np.testing.assert_allclose(apply_gamma(np.array([0.25]), 2.0), [0.5])

    def test_non_positive_gamma_rejected(self):
        from raytracer.preview.export import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros(3), 0.0)

    def test_compute_rmse(self):
        from raytracer.preview.export import compute_rmse

        assert compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 2, 3))) == 0.0
        assert compute_rmse(np.zeros((1, 1, 3)), np.ones((1, 1, 3))) == pytest.approx(1.0)
        with pytest.raises(ValueError):
            compute_rmse(np.zeros((1, 1, 3)), np.zeros((2, 1, 3)))
