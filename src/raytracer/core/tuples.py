"""Host-side points, vectors and colors.

Tuples are float64 NumPy arrays of length 4. The ``w`` component tags the
kind: 1.0 for a point, 0.0 for a vector. Arithmetic keeps that tag
consistent, so adding two points is rejected instead of producing ``w == 2``.
Colors are plain length-3 arrays.

Example:
    >>> from raytracer.core.tuples import point, vector, add
    >>> p = point(1.0, 2.0, 3.0)
    >>> add(p, vector(0.0, 1.0, 0.0))
    array([1., 3., 3., 1.])
"""

import numpy as np
import numpy.typing as npt

from raytracer.core.epsilon import EPSILON

Tuple4 = npt.NDArray[np.float64]
Color = npt.NDArray[np.float64]

POINT_W = 1.0
VECTOR_W = 0.0


def point(x: float, y: float, z: float) -> Tuple4:
    """Create a point (w = 1)."""
    return np.array([x, y, z, POINT_W], dtype=np.float64)


def vector(x: float, y: float, z: float) -> Tuple4:
    """Create a vector (w = 0)."""
    return np.array([x, y, z, VECTOR_W], dtype=np.float64)


def color(r: float, g: float, b: float) -> Color:
    """Create an RGB color."""
    return np.array([r, g, b], dtype=np.float64)


def as_tuple(values, w: float) -> Tuple4:
    """Build a tuple from any 3- or 4-sequence, forcing the given w."""
    arr = np.asarray(values, dtype=np.float64)
    return np.array([arr[0], arr[1], arr[2], w], dtype=np.float64)


def is_point(t: Tuple4) -> bool:
    return abs(t[3] - POINT_W) < EPSILON


def is_vector(t: Tuple4) -> bool:
    return abs(t[3] - VECTOR_W) < EPSILON


def add(a: Tuple4, b: Tuple4) -> Tuple4:
    """Add two tuples.

    Raises:
        ValueError: If both operands are points.
    """
    if is_point(a) and is_point(b):
        raise ValueError("Cannot add two points")
    return a + b


def subtract(a: Tuple4, b: Tuple4) -> Tuple4:
    """Subtract b from a.

    point - point is a vector, point - vector is a point and
    vector - vector is a vector.

    Raises:
        ValueError: If a vector has a point subtracted from it.
    """
    if is_vector(a) and is_point(b):
        raise ValueError("Cannot subtract a point from a vector")
    return a - b


def negate(t: Tuple4) -> Tuple4:
    """Negate the x, y and z components, keeping w."""
    return np.array([-t[0], -t[1], -t[2], t[3]], dtype=np.float64)


def scale(t: Tuple4, factor: float) -> Tuple4:
    """Multiply x, y and z by a scalar; w is kept so the kind does not change."""
    return np.array([t[0] * factor, t[1] * factor, t[2] * factor, t[3]], dtype=np.float64)


def magnitude(v: Tuple4) -> float:
    return float(np.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2]))


def normalize(v: Tuple4) -> Tuple4:
    """Scale a vector to unit length.

    Raises:
        ValueError: If the vector has zero length.
    """
    m = magnitude(v)
    if m < EPSILON * EPSILON:
        raise ValueError("Cannot normalize a zero-length vector")
    return np.array([v[0] / m, v[1] / m, v[2] / m, v[3]], dtype=np.float64)


def dot(a: Tuple4, b: Tuple4) -> float:
    """Dot product over x, y and z only."""
    return float(a[0] * b[0] + a[1] * b[1] + a[2] * b[2])


def cross(a: Tuple4, b: Tuple4) -> Tuple4:
    """Cross product of two vectors; the result is a vector."""
    c = np.cross(np.asarray(a[:3]), np.asarray(b[:3]))
    return vector(c[0], c[1], c[2])


def reflect(incoming: Tuple4, normal: Tuple4) -> Tuple4:
    """Reflect a vector about a unit normal."""
    return incoming - normal * 2.0 * dot(incoming, normal)


def hadamard(a: Color, b: Color) -> Color:
    """Component-wise product of two colors."""
    return np.asarray(a, dtype=np.float64) * np.asarray(b, dtype=np.float64)
