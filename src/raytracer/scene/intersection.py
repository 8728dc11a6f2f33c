"""Scene-level shape storage, intersection queries and prepared computations.

Shapes are stored in Taichi fields (Structure of Arrays) so that every
kernel sees the same geometry. Three queries run against the store:

- ``intersect_scene``: the hit, i.e. the smallest non-negative ``t`` over
  all shapes. Ties keep the first shape in insertion order.
- ``is_occluded``: whether any intersection lies strictly between 0 and a
  distance (shadow rays).
- ``intersect_all``: every ``t`` of every shape, for host-side inspection.

Primary and shadow rays go through the same ``intersect_shape`` dispatch.

The second half of the module turns one intersection into the shading
inputs (Computations): the point, the over-point nudged along the normal,
the eye vector, the eye-facing normal, the inside flag and the reflection
vector.

Example:
    >>> from raytracer.geometry.shape import sphere
    >>> from raytracer.scene.intersection import Intersection, hit, intersections
    >>> s = sphere()
    >>> xs = intersections(Intersection(-1.0, s), Intersection(1.0, s))
    >>> hit(xs).t
    1.0
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import EPSILON, INFINITY
from raytracer.core.ray import (
    HostRay,
    Ray,
    load_probe_ray,
    mat4,
    ray_at,
    reflect,
    write_probe_ray,
)
from raytracer.core.tuples import Tuple4, point, vector
from raytracer.geometry.shape import (
    Shape,
    ShapeData,
    intersect_shape,
    load_probe_shape,
    normal_at,
    write_probe_shape,
)

vec3 = tm.vec3

# Maximum number of shapes supported in the scene
MAX_SHAPES = 1024

# Roots reported per shape (cylinder side wall plus two caps)
MAX_HITS_PER_SHAPE = 4

# Shape storage: Structure of Arrays layout
shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_inverses = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SHAPES)
shape_normal_matrices = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SHAPES)
shape_minimums = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
shape_maximums = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
shape_closed = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all shapes from the scene.

    Resets the shape count to zero. The field data is overwritten when new
    shapes are added.
    """
    num_shapes[None] = 0


def add_shape(shape: Shape, material_id: int = 0) -> int:
    """Add a shape to the scene.

    Args:
        shape: The host shape to copy into the store.
        material_id: The material ID to associate with this shape.

    Returns:
        The index of the added shape.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
    minimum, maximum = shape.device_bounds()
    shape_kinds[idx] = int(shape.kind)
    shape_inverses[idx] = shape.inverse.tolist()
    shape_normal_matrices[idx] = shape.normal_matrix.tolist()
    shape_minimums[idx] = minimum
    shape_maximums[idx] = maximum
    shape_closed[idx] = 1 if shape.closed else 0
    shape_material_ids[idx] = material_id
    num_shapes[None] = idx + 1
    return idx


def get_shape_count() -> int:
    """Get the number of shapes in the scene."""
    return int(num_shapes[None])


@ti.func
def load_shape(i: ti.i32) -> ShapeData:
    return ShapeData(
        kind=shape_kinds[i],
        inverse=shape_inverses[i],
        normal_matrix=shape_normal_matrices[i],
        minimum=shape_minimums[i],
        maximum=shape_maximums[i],
        closed=shape_closed[i],
        material_id=shape_material_ids[i],
    )


# =============================================================================
# Scene Queries (Taichi)
# =============================================================================


@ti.dataclass
class SceneHit:
    """Result of a nearest-hit query.

    Attributes:
        hit: 1 if some intersection has t >= 0, else 0.
        t: The hit's parameter along the ray. Only valid if hit == 1.
        shape_id: Index of the hit shape in the store, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    shape_id: ti.i32


@ti.func
def intersect_scene(ray: Ray) -> SceneHit:
    """Find the hit: the smallest non-negative t over all shapes.

    Negative roots are behind the ray origin and are skipped. The strict
    comparison keeps the first shape (in insertion order) on equal t.
    """
    closest_t = INFINITY
    did_hit = 0
    hit_id = -1

    n = num_shapes[None]
    for i in range(n):
        count, ts = intersect_shape(load_shape(i), ray)
        for k in ti.static(range(MAX_HITS_PER_SHAPE)):
            if k < count and ts[k] >= 0.0 and ts[k] < closest_t:
                closest_t = ts[k]
                did_hit = 1
                hit_id = i

    return SceneHit(hit=did_hit, t=closest_t, shape_id=hit_id)


@ti.func
def is_occluded(ray: Ray, distance: ti.f32) -> ti.i32:
    """Whether any intersection lies strictly between 0 and ``distance``."""
    blocked = 0

    n = num_shapes[None]
    for i in range(n):
        if blocked == 0:
            count, ts = intersect_shape(load_shape(i), ray)
            for k in ti.static(range(MAX_HITS_PER_SHAPE)):
                if k < count and ts[k] > 0.0 and ts[k] < distance:
                    blocked = 1

    return blocked


_all_hit_counts = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
_all_hit_ts = ti.Vector.field(MAX_HITS_PER_SHAPE, dtype=ti.f32, shape=MAX_SHAPES)


@ti.kernel
def _intersect_all_probe(n: ti.i32):
    for i in range(n):
        count, ts = intersect_shape(load_shape(i), load_probe_ray())
        _all_hit_counts[i] = count
        _all_hit_ts[i] = ts


def intersect_all(ray: HostRay) -> list[tuple[int, float]]:
    """Every intersection of the ray with the stored shapes.

    Returns:
        (shape_index, t) pairs grouped by shape in insertion order, each
        shape's roots in the order its primitive produced them. Negative
        ``t`` values are included.
    """
    n = get_shape_count()
    if n == 0:
        return []
    write_probe_ray(ray)
    _intersect_all_probe(n)
    counts = _all_hit_counts.to_numpy()[:n]
    ts = _all_hit_ts.to_numpy()[:n]
    return [(i, float(ts[i, k])) for i in range(n) for k in range(int(counts[i]))]


# =============================================================================
# Host-side Intersections
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """A ``t`` value paired with the shape the ray met there."""

    t: float
    shape: Shape


def intersections(*xs: Intersection) -> list[Intersection]:
    """Collect intersections sorted ascending by t.

    The sort is stable, so equal t values keep their argument order.
    """
    return sorted(xs, key=lambda x: x.t)


def hit(xs: list[Intersection]) -> Intersection | None:
    """The intersection with the smallest non-negative t, or None.

    On equal t the earliest one in ``xs`` wins.
    """
    best = None
    for x in xs:
        if x.t >= 0.0 and (best is None or x.t < best.t):
            best = x
    return best


# =============================================================================
# Prepared Computations
# =============================================================================


@ti.dataclass
class Computations:
    """Shading inputs derived from one intersection.

    Attributes:
        t: Parameter of the intersection.
        point: World-space intersection point.
        over_point: ``point`` nudged along the normal by EPSILON, used as the
            origin of shadow and reflection rays.
        eyev: Vector toward the ray origin (negated ray direction).
        normalv: Unit normal, flipped to face the eye when inside.
        reflectv: Ray direction reflected about the normal.
        inside: 1 if the ray origin is inside the shape.
        material_id: Material of the intersected shape.
        object_inverse: Inverse transform of the intersected shape.
    """

    t: ti.f32
    point: vec3
    over_point: vec3
    eyev: vec3
    normalv: vec3
    reflectv: vec3
    inside: ti.i32
    material_id: ti.i32
    object_inverse: mat4


@ti.func
def prepare_hit(t: ti.f32, shape: ShapeData, ray: Ray) -> Computations:
    p = ray_at(ray, t)
    eyev = -ray.direction
    normalv = normal_at(shape, p)

    inside = 0
    if tm.dot(normalv, eyev) < 0.0:
        inside = 1
        normalv = -normalv

    return Computations(
        t=t,
        point=p,
        over_point=p + normalv * EPSILON,
        eyev=eyev,
        normalv=normalv,
        reflectv=reflect(ray.direction, normalv),
        inside=inside,
        material_id=shape.material_id,
        object_inverse=shape.inverse,
    )


@dataclass
class HostComputations:
    """Host copy of Computations, tied back to the host shape."""

    t: float
    shape: Shape
    point: Tuple4
    over_point: Tuple4
    eyev: Tuple4
    normalv: Tuple4
    reflectv: Tuple4
    inside: bool


_comps_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_comps_over_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_comps_eyev = ti.Vector.field(3, dtype=ti.f32, shape=())
_comps_normalv = ti.Vector.field(3, dtype=ti.f32, shape=())
_comps_reflectv = ti.Vector.field(3, dtype=ti.f32, shape=())
_comps_inside = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _prepare_probe(t: ti.f32):
    comps = prepare_hit(t, load_probe_shape(), load_probe_ray())
    _comps_point[None] = comps.point
    _comps_over_point[None] = comps.over_point
    _comps_eyev[None] = comps.eyev
    _comps_normalv[None] = comps.normalv
    _comps_reflectv[None] = comps.reflectv
    _comps_inside[None] = comps.inside


def _as_point(v) -> Tuple4:
    return point(float(v[0]), float(v[1]), float(v[2]))


def _as_vector(v) -> Tuple4:
    return vector(float(v[0]), float(v[1]), float(v[2]))


def prepare_computations(intersection: Intersection, ray: HostRay) -> HostComputations:
    """Derive the shading inputs for one intersection of ``ray``."""
    write_probe_shape(intersection.shape)
    write_probe_ray(ray)
    _prepare_probe(intersection.t)
    return HostComputations(
        t=intersection.t,
        shape=intersection.shape,
        point=_as_point(_comps_point[None]),
        over_point=_as_point(_comps_over_point[None]),
        eyev=_as_vector(_comps_eyev[None]),
        normalv=_as_vector(_comps_normalv[None]),
        reflectv=_as_vector(_comps_reflectv[None]),
        inside=bool(_comps_inside[None]),
    )


def write_probe_computations(comps: HostComputations) -> None:
    """Copy host computations back into the probe fields for shading."""

    def xyz(v: Tuple4) -> list[float]:
        return [float(c) for c in np.asarray(v)[:3]]

    _comps_point[None] = xyz(comps.point)
    _comps_over_point[None] = xyz(comps.over_point)
    _comps_eyev[None] = xyz(comps.eyev)
    _comps_normalv[None] = xyz(comps.normalv)
    _comps_reflectv[None] = xyz(comps.reflectv)
    _comps_inside[None] = 1 if comps.inside else 0


@ti.func
def load_probe_computations(t: ti.f32, material_id: ti.i32, object_inverse: mat4) -> Computations:
    return Computations(
        t=t,
        point=_comps_point[None],
        over_point=_comps_over_point[None],
        eyev=_comps_eyev[None],
        normalv=_comps_normalv[None],
        reflectv=_comps_reflectv[None],
        inside=_comps_inside[None],
        material_id=material_id,
        object_inverse=object_inverse,
    )
