"""Axis-aligned cube primitive spanning [-1, 1] on every local axis.

Intersection uses the slab method: each axis contributes an entry and exit
``t`` for the pair of parallel faces, and the ray is inside the cube where
all three intervals overlap.
"""

import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import EPSILON, INFINITY

vec3 = tm.vec3
vec4 = tm.vec4


@ti.func
def _check_axis(origin: ti.f32, direction: ti.f32):
    """Entry and exit t of one slab.

    A direction component within EPSILON of zero never crosses the slab, so
    its bounds are pushed out to +/-INFINITY.

    Returns:
        Tuple of (tmin, tmax) with tmin <= tmax.
    """
    tmin_numerator = -1.0 - origin
    tmax_numerator = 1.0 - origin

    tmin = 0.0
    tmax = 0.0
    if ti.abs(direction) >= EPSILON:
        tmin = tmin_numerator / direction
        tmax = tmax_numerator / direction
    else:
        tmin = tmin_numerator * INFINITY
        tmax = tmax_numerator * INFINITY

    if tmin > tmax:
        temp = tmin
        tmin = tmax
        tmax = temp

    return tmin, tmax


@ti.func
def intersect_unit_cube(origin: vec3, direction: vec3):
    """Intersect a local-space ray with the cube.

    Returns:
        Tuple of (count, ts): count is 0 when the slab intervals do not
        overlap, else 2 with the bounding roots in ts[0] <= ts[1].
    """
    xtmin, xtmax = _check_axis(origin.x, direction.x)
    ytmin, ytmax = _check_axis(origin.y, direction.y)
    ztmin, ztmax = _check_axis(origin.z, direction.z)

    tmin = ti.max(xtmin, ytmin, ztmin)
    tmax = ti.min(xtmax, ytmax, ztmax)

    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)
    if tmin <= tmax:
        ts[0] = tmin
        ts[1] = tmax
        count = 2

    return count, ts


@ti.func
def unit_cube_normal(local_point: vec3) -> vec3:
    """Normal of the face the point lies on, picked by its largest component."""
    ax = ti.abs(local_point.x)
    ay = ti.abs(local_point.y)
    az = ti.abs(local_point.z)
    maxc = ti.max(ax, ay, az)

    normal = vec3(0.0, 0.0, local_point.z)
    if maxc == ax:
        normal = vec3(local_point.x, 0.0, 0.0)
    elif maxc == ay:
        normal = vec3(0.0, local_point.y, 0.0)

    return normal
