"""World: the light plus the shapes, and the shading built on top of them.

Shading pipeline for one ray:

    color_at(ray)
      -> intersect_scene         nearest non-negative t, or background
      -> prepare_hit             point, over_point, eyev, normalv, reflectv
      -> shade_hit
           surface   = lighting(..., is_shadowed(over_point))
           reflected = reflective * color_at(reflected ray, remaining - 1)

Reflection is bounded by ``remaining``. Kernels cannot recurse, so
``trace`` unrolls the reflection chain into a loop that carries the product
of reflectivities, the same way a path tracer carries its throughput.

The host-side World owns the shapes and the light. Before any query it
uploads them into the shape store, the material registry and the light
fields; kernels only ever read that uploaded copy.

Example:
    >>> from raytracer.core.ray import host_ray
    >>> from raytracer.scene.presets import default_world
    >>> world = default_world()
    >>> world.color_at(host_ray((0, 0, -5), (0, 0, 1)))  # ~(0.38066, 0.47583, 0.2855)
"""

import logging
from collections.abc import Iterable

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.ray import (
    HostRay,
    Ray,
    length,
    load_probe_ray,
    make_ray,
    normalize,
    write_probe_ray,
)
from raytracer.core.tuples import Color, Tuple4, color
from raytracer.geometry.shape import Shape
from raytracer.materials.material import (
    add_material,
    clear_materials,
    load_material,
    material_reflective,
    phong_lighting,
    write_probe_material,
)
from raytracer.scene.intersection import (
    Computations,
    HostComputations,
    Intersection,
    add_shape,
    clear_scene,
    intersect_all,
    intersect_scene,
    intersections,
    is_occluded,
    load_probe_computations,
    load_shape,
    prepare_hit,
    write_probe_computations,
)
from raytracer.scene.light import PointLight, get_light_intensity, get_light_position, setup_light

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Maximum number of mirror bounces after the primary hit
MAX_REFLECTION_DEPTH = 5

# Color returned for rays that hit nothing
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


# =============================================================================
# Shading (Taichi)
# =============================================================================


@ti.func
def is_shadowed(p: vec3) -> ti.i32:
    """Whether any shape lies between the point and the light.

    Uses the same intersection dispatch as primary rays.
    """
    v = get_light_position() - p
    distance = length(v)
    return is_occluded(make_ray(p, normalize(v)), distance)


@ti.func
def shade_surface(comps: Computations) -> vec3:
    """Direct Phong shading at a prepared hit, with the shadow test applied."""
    material = load_material(comps.material_id)
    shadowed = is_shadowed(comps.over_point)
    return phong_lighting(
        material,
        comps.object_inverse,
        get_light_position(),
        get_light_intensity(),
        comps.over_point,
        comps.eyev,
        comps.normalv,
        shadowed,
    )


@ti.func
def trace(ray: Ray, remaining: ti.i32) -> vec3:
    """Color seen along a ray, following up to ``remaining`` mirror bounces.

    Args:
        ray: The ray to trace.
        remaining: Number of reflection bounces still allowed.

    Returns:
        The accumulated color; BACKGROUND_COLOR where the ray escapes.
    """
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of reflectivities along the chain so far
    weight = 1.0

    origin = ray.origin
    direction = ray.direction

    # Taichi doesn't support break in ti.func loops
    active = 1

    for bounce in range(MAX_REFLECTION_DEPTH + 1):
        if active == 1:
            current = make_ray(origin, direction)
            rec = intersect_scene(current)

            if rec.hit == 0:
                radiance += weight * BACKGROUND_COLOR
                active = 0
            else:
                comps = prepare_hit(rec.t, load_shape(rec.shape_id), current)
                radiance += weight * shade_surface(comps)

                reflective = material_reflective[comps.material_id]
                if bounce >= remaining or reflective <= 0.0:
                    active = 0
                else:
                    weight *= reflective
                    origin = comps.over_point
                    direction = comps.reflectv

    return radiance


@ti.func
def reflected_color(comps: Computations, remaining: ti.i32) -> vec3:
    """Mirror contribution at a hit; black when not reflective or out of bounces."""
    result = vec3(0.0, 0.0, 0.0)
    reflective = material_reflective[comps.material_id]
    if remaining > 0 and reflective > 0.0:
        result = reflective * trace(make_ray(comps.over_point, comps.reflectv), remaining - 1)
    return result


@ti.func
def shade_hit(comps: Computations, remaining: ti.i32) -> vec3:
    return shade_surface(comps) + reflected_color(comps, remaining)


@ti.func
def color_at(ray: Ray, remaining: ti.i32) -> vec3:
    return trace(ray, remaining)


# =============================================================================
# Single-query Kernels
# =============================================================================

# Loops inside these kernels must not be parallelized, so each body runs
# inside a single-iteration outer loop.

_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_flag = ti.field(dtype=ti.i32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_object_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())


@ti.kernel
def _color_at_probe(remaining: ti.i32):
    for _ in range(1):
        _probe_color[None] = color_at(load_probe_ray(), remaining)


@ti.kernel
def _shade_hit_probe(t: ti.f32, material_id: ti.i32, remaining: ti.i32):
    for _ in range(1):
        comps = load_probe_computations(t, material_id, _probe_object_inverse[None])
        _probe_color[None] = shade_hit(comps, remaining)


@ti.kernel
def _reflected_color_probe(t: ti.f32, material_id: ti.i32, remaining: ti.i32):
    for _ in range(1):
        comps = load_probe_computations(t, material_id, _probe_object_inverse[None])
        _probe_color[None] = reflected_color(comps, remaining)


@ti.kernel
def _is_shadowed_probe():
    for _ in range(1):
        _probe_flag[None] = is_shadowed(_probe_point[None])


def _read_color() -> Color:
    c = _probe_color[None]
    return color(float(c[0]), float(c[1]), float(c[2]))


# =============================================================================
# Host-side World
# =============================================================================


class World:
    """A point light and an ordered collection of shapes.

    Args:
        light: The single light source. Required.
        shapes: Initial shapes, kept in insertion order.

    Raises:
        ValueError: If ``light`` is None.
    """

    def __init__(self, light: PointLight | None, shapes: Iterable[Shape] = ()) -> None:
        if light is None:
            raise ValueError("A world needs a light source")
        self._light = light
        self.shapes: list[Shape] = list(shapes)

    @property
    def light(self) -> PointLight:
        return self._light

    @light.setter
    def light(self, light: PointLight) -> None:
        if light is None:
            raise ValueError("A world needs a light source")
        self._light = light

    def add_shape(self, shape: Shape) -> Shape:
        self.shapes.append(shape)
        return shape

    def remove_shape(self, shape: Shape) -> None:
        """Remove a shape by identity.

        Raises:
            ValueError: If the shape is not in this world.
        """
        for i, s in enumerate(self.shapes):
            if s is shape:
                del self.shapes[i]
                return
        raise ValueError("Shape is not part of this world")

    def __contains__(self, shape: Shape) -> bool:
        return any(s is shape for s in self.shapes)

    def upload(self) -> None:
        """Copy shapes, their materials and the light into Taichi fields.

        Each shape gets its own material slot, so material IDs equal shape
        indices.
        """
        clear_scene()
        clear_materials()
        for shape in self.shapes:
            material_id = add_material(shape.material)
            add_shape(shape, material_id)
        setup_light(self._light)
        logger.debug("Uploaded world with %d shapes", len(self.shapes))

    def intersect(self, ray: HostRay) -> list[Intersection]:
        """All intersections of the ray, sorted by t then insertion order.

        Negative t values are kept; ``hit`` filters them.
        """
        self.upload()
        xs = [Intersection(t, self.shapes[i]) for i, t in intersect_all(ray)]
        return intersections(*xs)

    def color_at(self, ray: HostRay, remaining: int = MAX_REFLECTION_DEPTH) -> Color:
        """Shaded color seen along a ray (black if it hits nothing)."""
        self.upload()
        write_probe_ray(ray)
        _color_at_probe(_clamp_remaining(remaining))
        return _read_color()

    def _write_comps(self, comps: HostComputations) -> int:
        self.upload()
        material_id = write_probe_material(comps.shape.material)
        write_probe_computations(comps)
        _probe_object_inverse[None] = comps.shape.inverse.tolist()
        return material_id

    def shade_hit(self, comps: HostComputations, remaining: int = MAX_REFLECTION_DEPTH) -> Color:
        """Phong shading with shadows, plus reflection, at a prepared hit."""
        material_id = self._write_comps(comps)
        _shade_hit_probe(comps.t, material_id, _clamp_remaining(remaining))
        return _read_color()

    def reflected_color(self, comps: HostComputations, remaining: int = MAX_REFLECTION_DEPTH) -> Color:
        material_id = self._write_comps(comps)
        _reflected_color_probe(comps.t, material_id, _clamp_remaining(remaining))
        return _read_color()

    def is_shadowed(self, p: Tuple4) -> bool:
        """Whether some shape lies strictly between ``p`` and the light."""
        self.upload()
        _probe_point[None] = [float(c) for c in np.asarray(p)[:3]]
        _is_shadowed_probe()
        return bool(_probe_flag[None])


def _clamp_remaining(remaining: int) -> int:
    return max(0, min(int(remaining), MAX_REFLECTION_DEPTH))
