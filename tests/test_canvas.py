"""Unit tests for the Canvas pixel grid."""

import numpy as np
import pytest


class TestCanvas:
    """Tests for canvas creation and pixel access."""

    def test_new_canvas_is_black(self):
        from raytracer.core.canvas import Canvas

        c = Canvas(10, 20)
        assert (c.width, c.height) == (10, 20)
        assert c.pixels.shape == (20, 10, 3)
        assert np.all(c.pixels == 0.0)

    def test_write_and_read_pixel(self):
        from raytracer.core.canvas import Canvas
        from raytracer.core.tuples import color

        c = Canvas(10, 20)
        c.write_pixel(2, 3, color(1, 0, 0))
        np.testing.assert_array_equal(c.pixel_at(2, 3), [1, 0, 0])
        np.testing.assert_array_equal(c.pixels[3, 2], [1, 0, 0])

    def test_values_are_not_clamped(self):
        from raytracer.core.canvas import Canvas

        c = Canvas(2, 2)
        c.write_pixel(0, 0, (1.5, -0.5, 2.0))
        np.testing.assert_array_equal(c.pixel_at(0, 0), [1.5, -0.5, 2.0])

    @pytest.mark.parametrize("x, y", [(-1, 0), (10, 0), (0, 20), (0, -1)])
    def test_out_of_range_pixel(self, x, y):
        from raytracer.core.canvas import Canvas

        c = Canvas(10, 20)
        with pytest.raises(IndexError):
            c.pixel_at(x, y)
        with pytest.raises(IndexError):
            c.write_pixel(x, y, (1, 1, 1))

    def test_invalid_dimensions(self):
        from raytracer.core.canvas import Canvas

        with pytest.raises(ValueError):
            Canvas(0, 5)

    def test_from_array_and_fill(self):
        from raytracer.core.canvas import Canvas

        c = Canvas.from_array(np.ones((3, 4, 3)))
        assert (c.width, c.height) == (4, 3)
        c.fill((0.25, 0.5, 0.75))
        np.testing.assert_array_equal(c.pixel_at(3, 2), [0.25, 0.5, 0.75])

    def test_from_array_rejects_bad_shape(self):
        from raytracer.core.canvas import Canvas

        with pytest.raises(ValueError):
            Canvas.from_array(np.ones((3, 4)))
