"""Infinite xz-plane primitive (y = 0 in local space)."""

import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import EPSILON

vec3 = tm.vec3
vec4 = tm.vec4


@ti.func
def intersect_xz_plane(origin: vec3, direction: vec3):
    """Intersect a local-space ray with the plane y = 0.

    A ray whose direction has |y| < EPSILON is parallel to the plane (or lies
    in it) and never intersects.

    Returns:
        Tuple of (count, ts) with at most one root in ts[0].
    """
    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)

    if ti.abs(direction.y) >= EPSILON:
        ts[0] = -origin.y / direction.y
        count = 1

    return count, ts


@ti.func
def xz_plane_normal(local_point: vec3) -> vec3:
    # Same normal everywhere on the plane
    return vec3(0.0, 1.0, 0.0)
