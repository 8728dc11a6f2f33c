"""Phong materials and the lighting model.

This module holds three things:

- Material: the host-side description of a surface (flat color or pattern,
  Phong coefficients, reflectivity, and transparency / refractive index).
- The material registry: Structure-of-Arrays Taichi fields indexed by
  material ID, filled from Material objects when a world is uploaded.
- phong_lighting(): the Phong reflectance function, written once as a Taichi
  function. The host-side ``lighting`` runs it through a reserved probe slot.

Phong model for one point light:
    effective = surface_color * light.intensity
    ambient   = effective * ambient
    diffuse   = effective * diffuse * dot(lightv, normalv)      (if facing the light)
    specular  = intensity * specular * dot(reflectv, eyev)^shininess  (if > 0)
In shadow only the ambient term survives.

Example:
    >>> from raytracer.core.tuples import color, point, vector
    >>> from raytracer.materials.material import Material, lighting
    >>> from raytracer.scene.light import PointLight
    >>> light = PointLight(point(0, 0, -10), color(1, 1, 1))
    >>> lighting(Material(), None, light, point(0, 0, 0),
    ...          vector(0, 0, -1), vector(0, 0, -1), False)  # ~(1.9, 1.9, 1.9)
"""

from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.matrix import Matrix4, identity
from raytracer.core.ray import mat4, normalize, reflect
from raytracer.core.tuples import Color, Tuple4, color
from raytracer.materials.pattern import Pattern, PatternType, pattern_at_object

vec3 = tm.vec3

# =============================================================================
# Host-side Material
# =============================================================================


@dataclass
class Material:
    """Surface properties of a shape.

    Attributes:
        color: Base RGB color, used when no pattern is attached.
        ambient: Ambient reflection coefficient (>= 0).
        diffuse: Diffuse reflection coefficient (>= 0).
        specular: Specular reflection coefficient (>= 0).
        shininess: Specular exponent (> 0).
        reflective: Mirror reflectivity in [0, 1].
        transparency: Transparency in [0, 1].
        refractive_index: Index of refraction (> 0).
        pattern: Optional pattern overriding ``color``.
    """

    color: Color = field(default_factory=lambda: color(1.0, 1.0, 1.0))
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0
    reflective: float = 0.0
    transparency: float = 0.0
    refractive_index: float = 1.0
    pattern: Pattern | None = None

    def __post_init__(self) -> None:
        self.color = np.asarray(self.color, dtype=np.float64)[:3]
        for name in ("ambient", "diffuse", "specular"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"Material {name} must be non-negative, got {getattr(self, name)}")
        if self.shininess <= 0.0:
            raise ValueError(f"Material shininess must be positive, got {self.shininess}")
        for name in ("reflective", "transparency"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Material {name} must be in [0, 1], got {value}")
        if self.refractive_index <= 0.0:
            raise ValueError(f"Material refractive_index must be positive, got {self.refractive_index}")


# =============================================================================
# Material Registry (Taichi fields)
# =============================================================================

MAX_MATERIALS = 1024

# Extra slot past the last registry entry, used for single host-side queries
PROBE_MATERIAL = MAX_MATERIALS

material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_ambient = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_specular = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_reflective = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_transparency = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_refractive_index = ti.field(dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_pattern_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS + 1)
material_pattern_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_pattern_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS + 1)
material_pattern_inverses = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_MATERIALS + 1)
num_materials = ti.field(dtype=ti.i32, shape=())


def _write_material(idx: int, material: Material) -> None:
    material_colors[idx] = [float(c) for c in material.color]
    material_ambient[idx] = material.ambient
    material_diffuse[idx] = material.diffuse
    material_specular[idx] = material.specular
    material_shininess[idx] = material.shininess
    material_reflective[idx] = material.reflective
    material_transparency[idx] = material.transparency
    material_refractive_index[idx] = material.refractive_index

    pattern = material.pattern
    if pattern is None:
        material_pattern_kinds[idx] = int(PatternType.NONE)
        material_pattern_a[idx] = [0.0, 0.0, 0.0]
        material_pattern_b[idx] = [0.0, 0.0, 0.0]
        material_pattern_inverses[idx] = identity().tolist()
    else:
        material_pattern_kinds[idx] = int(pattern.kind)
        material_pattern_a[idx] = [float(c) for c in pattern.a]
        material_pattern_b[idx] = [float(c) for c in pattern.b]
        material_pattern_inverses[idx] = pattern.inverse.tolist()


def clear_materials() -> None:
    """Reset the material count. Stale field data is overwritten on reuse."""
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Register a material.

    Args:
        material: The material to copy into the registry.

    Returns:
        The material ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    _write_material(idx, material)
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


def write_probe_material(material: Material) -> int:
    """Copy a material into the probe slot and return the slot index."""
    _write_material(PROBE_MATERIAL, material)
    return PROBE_MATERIAL


@ti.dataclass
class MaterialData:
    """Material parameters as loaded inside a kernel."""

    color: vec3
    ambient: ti.f32
    diffuse: ti.f32
    specular: ti.f32
    shininess: ti.f32
    reflective: ti.f32
    transparency: ti.f32
    refractive_index: ti.f32
    pattern_kind: ti.i32
    pattern_a: vec3
    pattern_b: vec3
    pattern_inverse: mat4


@ti.func
def load_material(material_id: ti.i32) -> MaterialData:
    return MaterialData(
        color=material_colors[material_id],
        ambient=material_ambient[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        reflective=material_reflective[material_id],
        transparency=material_transparency[material_id],
        refractive_index=material_refractive_index[material_id],
        pattern_kind=material_pattern_kinds[material_id],
        pattern_a=material_pattern_a[material_id],
        pattern_b=material_pattern_b[material_id],
        pattern_inverse=material_pattern_inverses[material_id],
    )


# =============================================================================
# Phong Lighting (Taichi)
# =============================================================================


@ti.func
def surface_color(material: MaterialData, object_inverse: mat4, world_point: vec3) -> vec3:
    """Pattern color at the point if a pattern is attached, else the flat color."""
    result = material.color
    if material.pattern_kind != int(PatternType.NONE):
        result = pattern_at_object(
            material.pattern_kind,
            material.pattern_a,
            material.pattern_b,
            material.pattern_inverse,
            object_inverse,
            world_point,
        )
    return result


@ti.func
def phong_lighting(
    material: MaterialData,
    object_inverse: mat4,
    light_position: vec3,
    light_intensity: vec3,
    point: vec3,
    eyev: vec3,
    normalv: vec3,
    in_shadow: ti.i32,
) -> vec3:
    """Phong reflectance at a surface point lit by one point light.

    Args:
        material: Surface parameters.
        object_inverse: Inverse transform of the shape, used for patterns.
        light_position: World position of the light.
        light_intensity: RGB intensity of the light.
        point: World-space surface point.
        eyev: Vector toward the eye.
        normalv: Unit surface normal, already facing the eye.
        in_shadow: 1 if the light is occluded; only ambient is returned.

    Returns:
        ambient + diffuse + specular, component-wise.
    """
    effective_color = surface_color(material, object_inverse, point) * light_intensity
    ambient = effective_color * material.ambient

    result = ambient
    if in_shadow == 0:
        lightv = normalize(light_position - point)
        light_dot_normal = tm.dot(lightv, normalv)

        # Negative means the light is on the other side of the surface
        if light_dot_normal >= 0.0:
            diffuse = effective_color * material.diffuse * light_dot_normal

            specular = vec3(0.0, 0.0, 0.0)
            reflectv = reflect(-lightv, normalv)
            reflect_dot_eye = tm.dot(reflectv, eyev)
            if reflect_dot_eye > 0.0:
                factor = reflect_dot_eye**material.shininess
                specular = light_intensity * material.specular * factor

            result = ambient + diffuse + specular

    return result


# =============================================================================
# Single-point Lighting from Python
# =============================================================================

_probe_object_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_probe_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_light_intensity = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_eyev = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normalv = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _lighting_probe(in_shadow: ti.i32) -> vec3:
    return phong_lighting(
        load_material(PROBE_MATERIAL),
        _probe_object_inverse[None],
        _probe_light_position[None],
        _probe_light_intensity[None],
        _probe_point[None],
        _probe_eyev[None],
        _probe_normalv[None],
        in_shadow,
    )


def _xyz(t: Tuple4) -> list[float]:
    return [float(c) for c in np.asarray(t)[:3]]


def lighting(
    material: Material,
    shape,
    light,
    point: Tuple4,
    eyev: Tuple4,
    normalv: Tuple4,
    in_shadow: bool,
) -> Color:
    """Evaluate the Phong model for one point from Python.

    Args:
        material: Surface material.
        shape: Shape the point lies on (its ``inverse`` is used to place
            patterns), or None for an untransformed surface.
        light: A PointLight.
        point: World-space surface point.
        eyev: Vector toward the eye.
        normalv: Unit surface normal.
        in_shadow: Whether the point is occluded from the light.

    Returns:
        The shaded color.
    """
    object_inverse: Matrix4 = identity() if shape is None else shape.inverse
    write_probe_material(material)
    _probe_object_inverse[None] = np.asarray(object_inverse, dtype=np.float64).tolist()
    _probe_light_position[None] = _xyz(light.position)
    _probe_light_intensity[None] = _xyz(light.intensity)
    _probe_point[None] = _xyz(point)
    _probe_eyev[None] = _xyz(eyev)
    _probe_normalv[None] = _xyz(normalv)
    result = _lighting_probe(1 if in_shadow else 0)
    return color(float(result[0]), float(result[1]), float(result[2]))
