"""Unit-radius cylinder about the local y axis.

By default the cylinder is infinite and open. ``minimum`` and ``maximum``
truncate it (both bounds exclusive for the side wall), and ``closed`` adds
end caps at the truncation planes. Infinite bounds are represented by
+/-INFINITY since kernels run in f32.

Example:
    >>> # Inside a kernel, with a ray already in local space:
    >>> # count, ts = intersect_cylinder(origin, direction, 1.0, 2.0, 1)
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import EPSILON

vec3 = tm.vec3
vec4 = tm.vec4

# Side wall (2) plus both caps (2)
MAX_CYLINDER_HITS = 4


@ti.func
def _push_hit(count: ti.i32, ts: vec4, t: ti.f32):
    """Append t to the fixed-size root list without dynamic indexing."""
    result = ts
    for k in ti.static(range(MAX_CYLINDER_HITS)):
        if k == count:
            result[k] = t
    return count + 1, result


@ti.func
def _check_cap(origin: vec3, direction: vec3, t: ti.f32) -> ti.i32:
    """Whether the ray at t lies within the unit radius of a cap plane."""
    x = origin.x + t * direction.x
    z = origin.z + t * direction.z
    return x * x + z * z <= 1.0


@ti.func
def intersect_cylinder(origin: vec3, direction: vec3, minimum: ti.f32, maximum: ti.f32, closed: ti.i32):
    """Intersect a local-space ray with the cylinder.

    The side wall solves x^2 + z^2 = 1 over the x and z components only.
    A ray with both x and z direction components near zero runs parallel to
    the axis and can only hit the caps.

    Args:
        origin: Ray origin in local space.
        direction: Ray direction in local space.
        minimum: Lower y bound (exclusive).
        maximum: Upper y bound (exclusive).
        closed: 1 to intersect the end caps, 0 for an open tube.

    Returns:
        Tuple of (count, ts) with up to four roots. Side-wall roots come
        first in ascending order, then the lower and upper cap roots.
    """
    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)

    a = direction.x * direction.x + direction.z * direction.z
    if ti.abs(direction.x) >= EPSILON or ti.abs(direction.z) >= EPSILON:
        b = 2.0 * (origin.x * direction.x + origin.z * direction.z)
        c = origin.x * origin.x + origin.z * origin.z - 1.0
        discriminant = b * b - 4.0 * a * c

        if discriminant >= 0.0:
            sqrt_d = ti.sqrt(discriminant)
            t0 = (-b - sqrt_d) / (2.0 * a)
            t1 = (-b + sqrt_d) / (2.0 * a)
            if t0 > t1:
                temp = t0
                t0 = t1
                t1 = temp

            y0 = origin.y + t0 * direction.y
            if minimum < y0 and y0 < maximum:
                count, ts = _push_hit(count, ts, t0)

            y1 = origin.y + t1 * direction.y
            if minimum < y1 and y1 < maximum:
                count, ts = _push_hit(count, ts, t1)

    if closed == 1 and ti.abs(direction.y) >= EPSILON:
        t_lower = (minimum - origin.y) / direction.y
        if _check_cap(origin, direction, t_lower):
            count, ts = _push_hit(count, ts, t_lower)

        t_upper = (maximum - origin.y) / direction.y
        if _check_cap(origin, direction, t_upper):
            count, ts = _push_hit(count, ts, t_upper)

    return count, ts


@ti.func
def cylinder_normal(local_point: vec3, minimum: ti.f32, maximum: ti.f32) -> vec3:
    """Local normal: radial on the side wall, +/-y on the caps."""
    dist = local_point.x * local_point.x + local_point.z * local_point.z

    normal = vec3(local_point.x, 0.0, local_point.z)
    if dist < 1.0 and local_point.y >= maximum - EPSILON:
        normal = vec3(0.0, 1.0, 0.0)
    elif dist < 1.0 and local_point.y <= minimum + EPSILON:
        normal = vec3(0.0, -1.0, 0.0)

    return normal
