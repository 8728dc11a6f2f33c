"""Unit tests for the host-side Shape and its transform handling."""

import numpy as np
import pytest


class TestShapeTransform:
    """Tests for transform assignment and caching."""

    def test_default_transform_is_identity(self):
        from raytracer.core.matrix import identity
        from raytracer.geometry.shape import sphere

        s = sphere()
        np.testing.assert_array_equal(s.transform, identity())
        np.testing.assert_array_equal(s.inverse, identity())

    def test_assigning_transform_updates_inverse(self):
        from raytracer.core.matrix import inverse, translation
        from raytracer.geometry.shape import sphere

        s = sphere()
        s.set_transform(translation(2, 3, 4))
        np.testing.assert_allclose(s.inverse, inverse(translation(2, 3, 4)))
        np.testing.assert_allclose(s.normal_matrix, inverse(translation(2, 3, 4)).T)

    def test_singular_transform_rejected(self):
        from raytracer.core.matrix import NonInvertibleMatrixError, scaling
        from raytracer.geometry.shape import cube

        with pytest.raises(NonInvertibleMatrixError):
            cube(transform=scaling(1, 0, 1))

        c = cube()
        with pytest.raises(NonInvertibleMatrixError):
            c.transform = scaling(0, 0, 0)

    def test_default_material(self):
        from raytracer.geometry.shape import plane
        from raytracer.materials.material import Material

        m = plane().material
        assert isinstance(m, Material)
        assert m.ambient == pytest.approx(0.1)
        np.testing.assert_array_equal(m.color, [1, 1, 1])

    def test_repr_names_kind(self):
        from raytracer.geometry.shape import cylinder

        assert "CYLINDER" in repr(cylinder())

    def test_zero_local_direction_has_no_hits(self):
        from raytracer.core.ray import host_ray
        from raytracer.geometry.shape import sphere

        # A ray with zero direction never reaches the surface
        assert sphere().intersect(host_ray((0, 0, 0), (0, 0, 0))) == []

    def test_device_bounds_are_finite(self):
        from raytracer.core.epsilon import INFINITY
        from raytracer.geometry.shape import cylinder

        assert cylinder().device_bounds() == (-INFINITY, INFINITY)
        assert cylinder(minimum=0, maximum=3).device_bounds() == (0.0, 3.0)
