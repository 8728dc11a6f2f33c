"""Unit sphere primitive.

The sphere is centered at the origin of its local space with radius 1;
position and size come from the owning shape's transform. Roots are
computed in the cancellation-free form.

Example:
    >>> from raytracer.geometry.sphere import intersect_unit_sphere
    >>> # Inside a kernel, with a ray already in local space:
    >>> # count, ts = intersect_unit_sphere(origin, direction)
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import DEGENERATE_EPSILON

vec3 = tm.vec3
vec4 = tm.vec4


@ti.func
def _quadratic_roots(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Roots of a*t^2 + 2*h*t + c = 0, smaller first.

    One root comes from q = -(h + sign(h) * sqrt_d) and the other from
    c / q, so neither subtracts two nearly equal numbers.
    """
    q = -(h + ti.select(h < 0.0, -1.0, 1.0) * sqrt_d)

    near = 0.0
    far = 0.0
    if ti.abs(q) < DEGENERATE_EPSILON:
        # h and sqrt_d both vanish: the ray grazes the center plane
        near = -sqrt_d / a
        far = sqrt_d / a
    else:
        near = ti.min(q / a, c / q)
        far = ti.max(q / a, c / q)

    return near, far


@ti.func
def intersect_unit_sphere(origin: vec3, direction: vec3):
    """Intersect a local-space ray with the unit sphere.

    Solves |origin + t * direction|^2 = 1, rearranged as
        a*t^2 + 2*h*t + c = 0
    where
        a = dot(direction, direction)
        h = dot(direction, origin)  (half of traditional b)
        c = dot(origin, origin) - 1

    Args:
        origin: Ray origin in the sphere's local space.
        direction: Ray direction in local space (need not be normalized).

    Returns:
        Tuple of (count, ts): count is 0 on a miss, else 2, with the roots
        in ts[0] <= ts[1]. A tangent ray yields two equal roots.
    """
    a = tm.dot(direction, direction)
    h = tm.dot(direction, origin)
    c = tm.dot(origin, origin) - 1.0

    discriminant = h * h - a * c

    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)

    if discriminant >= 0.0 and a > 0.0:
        t0, t1 = _quadratic_roots(h, a, c, ti.sqrt(discriminant))
        ts[0] = t0
        ts[1] = t1
        count = 2

    return count, ts


@ti.func
def unit_sphere_normal(local_point: vec3) -> vec3:
    """Outward normal of the unit sphere: the vector from the center to the point."""
    return local_point
