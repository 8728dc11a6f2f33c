"""Unit tests for the cylinder primitive.

Tests cover:
- Infinite open cylinders (misses, hits, tangents)
- Truncation by minimum/maximum (exclusive bounds)
- End caps on closed cylinders
- Side and cap normals
"""

import pytest


def _ray(origin, direction):
    from raytracer.core.ray import HostRay
    from raytracer.core.tuples import normalize, point, vector

    return HostRay(point(*origin), normalize(vector(*direction)))


class TestInfiniteCylinder:
    """Tests for the default open, infinite cylinder."""

    @pytest.mark.parametrize(
        "origin, direction",
        [
            ((1, 0, 0), (0, 1, 0)),
            ((0, 0, 0), (0, 1, 0)),
            ((0, 0, -5), (1, 1, 1)),
        ],
    )
    def test_ray_misses(self, origin, direction):
        from raytracer.geometry.shape import cylinder

        assert cylinder().intersect(_ray(origin, direction)) == []

    @pytest.mark.parametrize(
        "origin, direction, t0, t1",
        [
            ((1, 0, -5), (0, 0, 1), 5.0, 5.0),
            ((0, 0, -5), (0, 0, 1), 4.0, 6.0),
            ((0.5, 0, -5), (0.1, 1, 1), 6.80798, 7.08872),
        ],
    )
    def test_ray_hits(self, origin, direction, t0, t1):
        from raytracer.geometry.shape import cylinder

        xs = cylinder().intersect(_ray(origin, direction))
        assert xs == pytest.approx([t0, t1], abs=1e-3)

    def test_wide_cylinder_still_hit(self):
        from raytracer.core.matrix import scaling
        from raytracer.geometry.shape import cylinder

        # Local horizontal direction is only 0.005 long after the inverse scaling
        xs = cylinder(transform=scaling(200, 1, 200)).intersect(_ray((0, 0, -500), (0, 0, 1)))
        assert xs == pytest.approx([300.0, 700.0], abs=0.5)

    @pytest.mark.parametrize(
        "p, expected",
        [
            ((1, 0, 0), (1, 0, 0)),
            ((0, 5, -1), (0, 0, -1)),
            ((0, -2, 1), (0, 0, 1)),
            ((-1, 1, 0), (-1, 0, 0)),
        ],
    )
    def test_side_normal(self, p, expected):
        from raytracer.core.tuples import point
        from raytracer.geometry.shape import cylinder

        n = cylinder().normal_at(point(*p))
        assert list(n[:3]) == pytest.approx(list(expected), abs=1e-5)


class TestTruncatedCylinder:
    """Tests for minimum/maximum bounds and caps."""

    def test_default_bounds_are_infinite(self):
        import math

        from raytracer.geometry.shape import cylinder

        c = cylinder()
        assert c.minimum == -math.inf
        assert c.maximum == math.inf
        assert c.closed is False

    @pytest.mark.parametrize(
        "origin, direction, count",
        [
            ((0, 1.5, 0), (0.1, 1, 0), 0),
            ((0, 3, -5), (0, 0, 1), 0),
            ((0, 0, -5), (0, 0, 1), 0),
            ((0, 2, -5), (0, 0, 1), 0),
            ((0, 1, -5), (0, 0, 1), 0),
            ((0, 1.5, -2), (0, 0, 1), 2),
        ],
    )
    def test_constrained_intersections(self, origin, direction, count):
        from raytracer.geometry.shape import cylinder

        c = cylinder(minimum=1, maximum=2)
        assert len(c.intersect(_ray(origin, direction))) == count

    @pytest.mark.parametrize(
        "origin, direction",
        [
            ((0, 3, 0), (0, -1, 0)),
            ((0, 3, -2), (0, -1, 2)),
            ((0, 0, -2), (0, 1, 2)),
        ],
    )
    def test_capped_intersections(self, origin, direction):
        from raytracer.geometry.shape import cylinder

        c = cylinder(minimum=1, maximum=2, closed=True)
        assert len(c.intersect(_ray(origin, direction))) == 2

    def test_axis_ray_hits_both_caps(self):
        from raytracer.geometry.shape import cylinder

        c = cylinder(minimum=1, maximum=2, closed=True)
        xs = sorted(c.intersect(_ray((0, 3, 0), (0, -1, 0))))
        assert xs == pytest.approx([1.0, 2.0], abs=1e-4)

    @pytest.mark.parametrize(
        "p, expected",
        [
            ((0, 1, 0), (0, -1, 0)),
            ((0.5, 1, 0), (0, -1, 0)),
            ((0, 1, 0.5), (0, -1, 0)),
            ((0, 2, 0), (0, 1, 0)),
            ((0.5, 2, 0), (0, 1, 0)),
            ((0, 2, 0.5), (0, 1, 0)),
        ],
    )
    def test_cap_normal(self, p, expected):
        from raytracer.core.tuples import point
        from raytracer.geometry.shape import cylinder

        c = cylinder(minimum=1, maximum=2, closed=True)
        assert list(c.normal_at(point(*p))[:3]) == pytest.approx(list(expected), abs=1e-5)

    def test_closed_needs_finite_bounds(self):
        from raytracer.geometry.shape import cylinder

        with pytest.raises(ValueError):
            cylinder(closed=True)

    def test_minimum_above_maximum_rejected(self):
        from raytracer.geometry.shape import cylinder

        with pytest.raises(ValueError):
            cylinder(minimum=2, maximum=1)
