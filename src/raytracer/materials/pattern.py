"""Procedural color patterns.

A pattern is a small tagged variant: a PatternType, two colors and a
transform of its own. The pattern transform is independent of the shape's
transform; a world point is first taken into the shape's local space, then
into pattern space, before the pattern function is evaluated.

Pattern functions (pattern space point -> color):
    SOLID:    always ``a``
    STRIPES:  ``a`` when floor(x) is even, else ``b``
    GRADIENT: ``a + (b - a) * (x - floor(x))``
    RING:     ``a`` when floor(sqrt(x^2 + z^2)) is even, else ``b``
    CHECKERS: ``a`` when floor(x) + floor(y) + floor(z) is even, else ``b``

Example:
    >>> from raytracer.core.tuples import color, point
    >>> from raytracer.materials.pattern import pattern_at, stripe_pattern
    >>> stripes = stripe_pattern(color(1, 1, 1), color(0, 0, 0))
    >>> pattern_at(stripes, point(0.9, 0, 0))  # white
"""

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.matrix import Matrix4, identity, inverse
from raytracer.core.ray import mat4, transform_point
from raytracer.core.tuples import Color, Tuple4, color

vec3 = tm.vec3


class PatternType(IntEnum):
    """Pattern variants. NONE means the material's flat color is used."""

    NONE = 0
    SOLID = 1
    STRIPES = 2
    GRADIENT = 3
    RING = 4
    CHECKERS = 5


@dataclass
class Pattern:
    """Host-side pattern description.

    Attributes:
        kind: Which pattern function to evaluate.
        a: First color.
        b: Second color (ignored by SOLID).
        transform: Pattern-to-object transform; must be invertible.
    """

    kind: PatternType
    a: Color
    b: Color = field(default_factory=lambda: color(0.0, 0.0, 0.0))
    transform: Matrix4 = field(default_factory=identity)

    def __post_init__(self) -> None:
        if self.kind == PatternType.NONE:
            raise ValueError("PatternType.NONE is not a valid pattern; use no pattern instead")
        self.a = np.asarray(self.a, dtype=np.float64)[:3]
        self.b = np.asarray(self.b, dtype=np.float64)[:3]
        self.transform = np.asarray(self.transform, dtype=np.float64)
        # Fail fast on singular transforms
        inverse(self.transform)

    @property
    def inverse(self) -> Matrix4:
        return inverse(self.transform)

    def set_transform(self, m: Matrix4) -> "Pattern":
        inverse(m)
        self.transform = np.asarray(m, dtype=np.float64)
        return self


def solid_pattern(a: Color) -> Pattern:
    return Pattern(PatternType.SOLID, a, a)


def stripe_pattern(a: Color, b: Color) -> Pattern:
    return Pattern(PatternType.STRIPES, a, b)


def gradient_pattern(a: Color, b: Color) -> Pattern:
    return Pattern(PatternType.GRADIENT, a, b)


def ring_pattern(a: Color, b: Color) -> Pattern:
    return Pattern(PatternType.RING, a, b)


def checkers_pattern(a: Color, b: Color) -> Pattern:
    return Pattern(PatternType.CHECKERS, a, b)


# =============================================================================
# Pattern Evaluation (Taichi)
# =============================================================================


@ti.func
def _is_even(value: ti.f32) -> ti.i32:
    return ti.cast(ti.floor(value), ti.i32) % 2 == 0


@ti.func
def evaluate_pattern(kind: ti.i32, a: vec3, b: vec3, p: vec3) -> vec3:
    """Evaluate a pattern at a point already in pattern space."""
    result = a
    if kind == int(PatternType.STRIPES):
        if not _is_even(p.x):
            result = b
    elif kind == int(PatternType.GRADIENT):
        fraction = p.x - ti.floor(p.x)
        result = a + (b - a) * fraction
    elif kind == int(PatternType.RING):
        if not _is_even(ti.sqrt(p.x * p.x + p.z * p.z)):
            result = b
    elif kind == int(PatternType.CHECKERS):
        if not _is_even(ti.floor(p.x) + ti.floor(p.y) + ti.floor(p.z)):
            result = b
    return result


@ti.func
def pattern_at_object(
    kind: ti.i32,
    a: vec3,
    b: vec3,
    pattern_inverse: mat4,
    object_inverse: mat4,
    world_point: vec3,
) -> vec3:
    """Evaluate a pattern at a world point on a shape.

    The point goes world -> object space via the shape's inverse transform,
    then object -> pattern space via the pattern's inverse transform.
    """
    object_point = transform_point(object_inverse, world_point)
    pattern_point = transform_point(pattern_inverse, object_point)
    return evaluate_pattern(kind, a, b, pattern_point)


# =============================================================================
# Single-point Queries from Python
# =============================================================================

_probe_kind = ti.field(dtype=ti.i32, shape=())
_probe_a = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_b = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_pattern_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_probe_object_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _evaluate_probe() -> vec3:
    return pattern_at_object(
        _probe_kind[None],
        _probe_a[None],
        _probe_b[None],
        _probe_pattern_inverse[None],
        _probe_object_inverse[None],
        _probe_point[None],
    )


def _evaluate(pattern: Pattern, object_inverse: Matrix4, world_point: Tuple4) -> Color:
    _probe_kind[None] = int(pattern.kind)
    _probe_a[None] = [float(c) for c in pattern.a]
    _probe_b[None] = [float(c) for c in pattern.b]
    _probe_pattern_inverse[None] = pattern.inverse.tolist()
    _probe_object_inverse[None] = np.asarray(object_inverse, dtype=np.float64).tolist()
    _probe_point[None] = [float(c) for c in np.asarray(world_point)[:3]]
    result = _evaluate_probe()
    return color(float(result[0]), float(result[1]), float(result[2]))


def pattern_at(pattern: Pattern, p: Tuple4) -> Color:
    """Evaluate a pattern at a point in pattern space, ignoring its transform."""
    return _evaluate(Pattern(pattern.kind, pattern.a, pattern.b), identity(), p)


def pattern_at_shape(pattern: Pattern, shape, world_point: Tuple4) -> Color:
    """Evaluate a pattern at a world point on ``shape``.

    ``shape`` only needs an ``inverse`` attribute holding its inverse transform.
    """
    return _evaluate(pattern, shape.inverse, world_point)
