"""Unit tests for the axis-aligned cube primitive."""

import numpy as np
import pytest


class TestCubeIntersection:
    """Tests for slab intersection against the [-1, 1] cube."""

    @pytest.mark.parametrize(
        "origin, direction, t1, t2",
        [
            ((5, 0.5, 0), (-1, 0, 0), 4, 6),
            ((-5, 0.5, 0), (1, 0, 0), 4, 6),
            ((0.5, 5, 0), (0, -1, 0), 4, 6),
            ((0.5, -5, 0), (0, 1, 0), 4, 6),
            ((0.5, 0, 5), (0, 0, -1), 4, 6),
            ((0.5, 0, -5), (0, 0, 1), 4, 6),
            ((0, 0.5, 0), (0, 0, 1), -1, 1),
        ],
    )
    def test_ray_hits_cube(self, origin, direction, t1, t2):
        from raytracer.core.ray import host_ray
        from raytracer.geometry.shape import cube

        xs = cube().intersect(host_ray(origin, direction))
        assert xs == pytest.approx([t1, t2], abs=1e-4)

    @pytest.mark.parametrize(
        "origin, direction",
        [
            ((-2, 0, 0), (0.2673, 0.5345, 0.8018)),
            ((0, -2, 0), (0.8018, 0.2673, 0.5345)),
            ((0, 0, -2), (0.5345, 0.8018, 0.2673)),
            ((2, 0, 2), (0, 0, -1)),
            ((0, 2, 2), (0, -1, 0)),
            ((2, 2, 0), (-1, 0, 0)),
        ],
    )
    def test_ray_misses_cube(self, origin, direction):
        from raytracer.core.ray import host_ray
        from raytracer.geometry.shape import cube

        assert cube().intersect(host_ray(origin, direction)) == []


class TestCubeNormal:
    """Tests for picking the face normal."""

    @pytest.mark.parametrize(
        "p, expected",
        [
            ((1, 0.5, -0.8), (1, 0, 0)),
            ((-1, -0.2, 0.9), (-1, 0, 0)),
            ((-0.4, 1, -0.1), (0, 1, 0)),
            ((0.3, -1, -0.7), (0, -1, 0)),
            ((-0.6, 0.3, 1), (0, 0, 1)),
            ((0.4, 0.4, -1), (0, 0, -1)),
            ((1, 1, 1), (1, 0, 0)),
            ((-1, -1, -1), (-1, 0, 0)),
        ],
    )
    def test_normal_on_face(self, p, expected):
        from raytracer.core.tuples import point
        from raytracer.geometry.shape import cube

        np.testing.assert_allclose(cube().normal_at(point(*p))[:3], expected, atol=1e-5)
