"""Rays inside kernels and on the host.

This module provides the Ray dataclass used inside kernels, the transform
helpers that carry rays, points and vectors between world and local space,
and HostRay, the immutable host-side counterpart used when building scenes
and in single-ray queries.

A single "probe" ray lives in Taichi fields so that host code can hand one
ray to a kernel without passing structs as kernel arguments.

Example:
    >>> from raytracer.core.ray import host_ray
    >>> r = host_ray((2.0, 3.0, 4.0), (1.0, 0.0, 0.0))
    >>> r.position(2.5)
    array([4.5, 3. , 4. , 1. ])
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import DEGENERATE_EPSILON
from raytracer.core.matrix import Matrix4, transform
from raytracer.core.tuples import Tuple4, is_point, is_vector, point, vector

vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4


@ti.dataclass
class Ray:
    """Origin and direction as kernels see them.

    ``direction`` need not be unit length; rays carried into a shape's
    local space generally are not.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Position ``origin + t * direction``; negative t lies behind the origin."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Transform Helpers
# =============================================================================


@ti.func
def transform_point(m: mat4, p: vec3) -> vec3:
    """Apply a 4x4 transform to a point (w = 1)."""
    r = m @ vec4(p.x, p.y, p.z, 1.0)
    return vec3(r.x, r.y, r.z)


@ti.func
def transform_vector(m: mat4, v: vec3) -> vec3:
    """Apply a 4x4 transform to a vector (w = 0), ignoring translation."""
    r = m @ vec4(v.x, v.y, v.z, 0.0)
    return vec3(r.x, r.y, r.z)


@ti.func
def transform_ray(ray: Ray, m: mat4) -> Ray:
    """Transform both the origin and direction of a ray.

    The direction is not renormalized, so ``t`` values found against the
    transformed ray are valid for the original ray as well.
    """
    return make_ray(transform_point(m, ray.origin), transform_vector(m, ray.direction))


# =============================================================================
# Vector Helpers
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    return tm.normalize(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about a unit ``normal``."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 if every component is below DEGENERATE_EPSILON in magnitude."""
    s = DEGENERATE_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Host-side Ray
# =============================================================================


@dataclass(frozen=True)
class HostRay:
    """An immutable ray built from host tuples.

    Attributes:
        origin: A point (w = 1).
        direction: A vector (w = 0).
    """

    origin: Tuple4
    direction: Tuple4

    def __post_init__(self) -> None:
        if not is_point(self.origin):
            raise ValueError("Ray origin must be a point")
        if not is_vector(self.direction):
            raise ValueError("Ray direction must be a vector")

    def position(self, t: float) -> Tuple4:
        """Return origin + direction * t."""
        return self.origin + self.direction * t

    def transform(self, m: Matrix4) -> "HostRay":
        """Return a new ray with the transform applied to origin and direction."""
        return HostRay(transform(m, self.origin), transform(m, self.direction))


def host_ray(origin: tuple[float, float, float], direction: tuple[float, float, float]) -> HostRay:
    """Convenience constructor from plain coordinate triples."""
    return HostRay(point(*origin), vector(*direction))


# =============================================================================
# Probe Ray (single-ray queries from Python)
# =============================================================================

probe_ray_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
probe_ray_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def write_probe_ray(ray: HostRay) -> None:
    """Copy a host ray into the probe fields."""
    probe_ray_origin[None] = [float(c) for c in np.asarray(ray.origin)[:3]]
    probe_ray_direction[None] = [float(c) for c in np.asarray(ray.direction)[:3]]


@ti.func
def load_probe_ray() -> Ray:
    return make_ray(probe_ray_origin[None], probe_ray_direction[None])
