"""Shape records, world-space dispatch and the host-side Shape class.

Shapes form a closed tagged variant. ShapeData carries the tag plus every
field any primitive needs; ``local_intersect`` and ``local_normal_at``
dispatch on the tag to the per-primitive functions in this package.

World-space queries follow the same two steps for every primitive:

- intersect: transform the ray by the inverse transform, then intersect in
  local space. ``t`` values carry over unchanged since the direction is not
  renormalized.
- normal: transform the point by the inverse transform, take the local
  normal, carry it back with the inverse-transpose and renormalize.

Example:
    >>> from raytracer.core.matrix import scaling
    >>> from raytracer.core.ray import host_ray
    >>> from raytracer.geometry.shape import sphere
    >>> s = sphere(transform=scaling(2, 2, 2))
    >>> s.intersect(host_ray((0, 0, -5), (0, 0, 1)))
    [3.0, 7.0]
"""

import math
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.epsilon import clamp_infinite
from raytracer.core.matrix import Matrix4, identity, inverse
from raytracer.core.ray import (
    HostRay,
    Ray,
    load_probe_ray,
    mat4,
    near_zero,
    normalize,
    transform_point,
    transform_ray,
    transform_vector,
    write_probe_ray,
)
from raytracer.core.tuples import Tuple4, vector
from raytracer.geometry.cube import intersect_unit_cube, unit_cube_normal
from raytracer.geometry.cylinder import cylinder_normal, intersect_cylinder
from raytracer.geometry.plane import intersect_xz_plane, xz_plane_normal
from raytracer.geometry.sphere import intersect_unit_sphere, unit_sphere_normal
from raytracer.materials.material import Material

vec3 = tm.vec3
vec4 = tm.vec4


class ShapeType(IntEnum):
    """Primitive tags."""

    SPHERE = 0
    PLANE = 1
    CUBE = 2
    CYLINDER = 3


@ti.dataclass
class ShapeData:
    """A shape as seen inside a kernel.

    Attributes:
        kind: ShapeType tag.
        inverse: Inverse of the object-to-world transform.
        normal_matrix: Transpose of ``inverse``.
        minimum: Cylinder lower bound (unused by other primitives).
        maximum: Cylinder upper bound (unused by other primitives).
        closed: 1 if a cylinder has end caps.
        material_id: Index into the material registry.
    """

    kind: ti.i32
    inverse: mat4
    normal_matrix: mat4
    minimum: ti.f32
    maximum: ti.f32
    closed: ti.i32
    material_id: ti.i32


# =============================================================================
# Dispatch (Taichi)
# =============================================================================


@ti.func
def local_intersect(shape: ShapeData, origin: vec3, direction: vec3):
    """Intersect a local-space ray with the shape's primitive.

    Returns:
        Tuple of (count, ts) with up to four roots.
    """
    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)
    if shape.kind == int(ShapeType.SPHERE):
        count, ts = intersect_unit_sphere(origin, direction)
    elif shape.kind == int(ShapeType.PLANE):
        count, ts = intersect_xz_plane(origin, direction)
    elif shape.kind == int(ShapeType.CUBE):
        count, ts = intersect_unit_cube(origin, direction)
    elif shape.kind == int(ShapeType.CYLINDER):
        count, ts = intersect_cylinder(origin, direction, shape.minimum, shape.maximum, shape.closed)
    return count, ts


@ti.func
def local_normal_at(shape: ShapeData, local_point: vec3) -> vec3:
    normal = vec3(0.0, 0.0, 0.0)
    if shape.kind == int(ShapeType.SPHERE):
        normal = unit_sphere_normal(local_point)
    elif shape.kind == int(ShapeType.PLANE):
        normal = xz_plane_normal(local_point)
    elif shape.kind == int(ShapeType.CUBE):
        normal = unit_cube_normal(local_point)
    elif shape.kind == int(ShapeType.CYLINDER):
        normal = cylinder_normal(local_point, shape.minimum, shape.maximum)
    return normal


@ti.func
def intersect_shape(shape: ShapeData, ray: Ray):
    """Intersect a world-space ray with a shape.

    A ray whose local direction is (near) zero has no intersections.

    Returns:
        Tuple of (count, ts) in the same order the primitive produced them.
    """
    local_ray = transform_ray(ray, shape.inverse)
    count = 0
    ts = vec4(0.0, 0.0, 0.0, 0.0)
    if not near_zero(local_ray.direction):
        count, ts = local_intersect(shape, local_ray.origin, local_ray.direction)
    return count, ts


@ti.func
def normal_at(shape: ShapeData, world_point: vec3) -> vec3:
    """Unit world-space normal at a point on the shape's surface."""
    local_point = transform_point(shape.inverse, world_point)
    local_normal = local_normal_at(shape, local_point)
    world_normal = transform_vector(shape.normal_matrix, local_normal)
    return normalize(world_normal)


# =============================================================================
# Host-side Shape
# =============================================================================


class Shape:
    """A primitive with a transform and a material.

    Args:
        kind: Which primitive this is.
        transform: Object-to-world transform; must be invertible.
        material: Surface material (a default Material if omitted).
        minimum: Cylinder lower bound, exclusive.
        maximum: Cylinder upper bound, exclusive.
        closed: Whether a cylinder has end caps.

    Raises:
        NonInvertibleMatrixError: If the transform is singular.
        ValueError: For a closed cylinder with an infinite bound, or
            minimum > maximum.
    """

    def __init__(
        self,
        kind: ShapeType,
        transform: Matrix4 | None = None,
        material: Material | None = None,
        minimum: float = -math.inf,
        maximum: float = math.inf,
        closed: bool = False,
    ) -> None:
        self.kind = ShapeType(kind)
        self.material = material if material is not None else Material()
        self.minimum = float(minimum)
        self.maximum = float(maximum)
        self.closed = bool(closed)
        self._check_bounds()
        self.transform = identity() if transform is None else transform

    def _check_bounds(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(f"Shape minimum ({self.minimum}) exceeds maximum ({self.maximum})")
        if self.closed and (math.isinf(self.minimum) or math.isinf(self.maximum)):
            raise ValueError("A closed cylinder needs finite minimum and maximum")

    @property
    def transform(self) -> Matrix4:
        return self._transform

    @transform.setter
    def transform(self, m: Matrix4) -> None:
        m = np.asarray(m, dtype=np.float64)
        inv = inverse(m)
        self._transform = m
        self._inverse = inv
        self._normal_matrix = inv.T.copy()

    @property
    def inverse(self) -> Matrix4:
        return self._inverse

    @property
    def normal_matrix(self) -> Matrix4:
        return self._normal_matrix

    def set_transform(self, m: Matrix4) -> "Shape":
        self.transform = m
        return self

    def device_bounds(self) -> tuple[float, float]:
        """Cylinder bounds with infinities mapped to finite f32 stand-ins."""
        self._check_bounds()
        return clamp_infinite(self.minimum), clamp_infinite(self.maximum)

    def intersect(self, ray: HostRay) -> list[float]:
        """All ``t`` values where the ray meets this shape (possibly empty)."""
        write_probe_shape(self)
        write_probe_ray(ray)
        _intersect_probe()
        count = int(_probe_hit_count[None])
        ts = _probe_hit_ts[None]
        return [float(ts[k]) for k in range(count)]

    def normal_at(self, world_point: Tuple4) -> Tuple4:
        """Unit world-space normal at a point on the surface."""
        write_probe_shape(self)
        _probe_point[None] = [float(c) for c in np.asarray(world_point)[:3]]
        n = _normal_probe()
        return vector(float(n[0]), float(n[1]), float(n[2]))

    def __repr__(self) -> str:
        return f"Shape(kind={self.kind.name}, transform={self._transform.tolist()})"


def sphere(transform: Matrix4 | None = None, material: Material | None = None) -> Shape:
    return Shape(ShapeType.SPHERE, transform, material)


def plane(transform: Matrix4 | None = None, material: Material | None = None) -> Shape:
    return Shape(ShapeType.PLANE, transform, material)


def cube(transform: Matrix4 | None = None, material: Material | None = None) -> Shape:
    return Shape(ShapeType.CUBE, transform, material)


def cylinder(
    transform: Matrix4 | None = None,
    material: Material | None = None,
    minimum: float = -math.inf,
    maximum: float = math.inf,
    closed: bool = False,
) -> Shape:
    return Shape(ShapeType.CYLINDER, transform, material, minimum, maximum, closed)


# =============================================================================
# Probe Shape (single-shape queries from Python)
# =============================================================================

_probe_kind = ti.field(dtype=ti.i32, shape=())
_probe_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_probe_normal_matrix = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_probe_minimum = ti.field(dtype=ti.f32, shape=())
_probe_maximum = ti.field(dtype=ti.f32, shape=())
_probe_closed = ti.field(dtype=ti.i32, shape=())
_probe_material_id = ti.field(dtype=ti.i32, shape=())

_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_hit_count = ti.field(dtype=ti.i32, shape=())
_probe_hit_ts = ti.Vector.field(4, dtype=ti.f32, shape=())


def write_probe_shape(shape: Shape, material_id: int = 0) -> None:
    """Copy a host shape into the probe fields."""
    minimum, maximum = shape.device_bounds()
    _probe_kind[None] = int(shape.kind)
    _probe_inverse[None] = shape.inverse.tolist()
    _probe_normal_matrix[None] = shape.normal_matrix.tolist()
    _probe_minimum[None] = minimum
    _probe_maximum[None] = maximum
    _probe_closed[None] = 1 if shape.closed else 0
    _probe_material_id[None] = material_id


@ti.func
def load_probe_shape() -> ShapeData:
    return ShapeData(
        kind=_probe_kind[None],
        inverse=_probe_inverse[None],
        normal_matrix=_probe_normal_matrix[None],
        minimum=_probe_minimum[None],
        maximum=_probe_maximum[None],
        closed=_probe_closed[None],
        material_id=_probe_material_id[None],
    )


@ti.kernel
def _intersect_probe():
    count, ts = intersect_shape(load_probe_shape(), load_probe_ray())
    _probe_hit_count[None] = count
    _probe_hit_ts[None] = ts


@ti.kernel
def _normal_probe() -> vec3:
    return normal_at(load_probe_shape(), _probe_point[None])
