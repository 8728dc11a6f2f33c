"""4x4 affine transforms on the host.

Transforms are float64 NumPy arrays applied to column tuples, so ``m @ p``
transforms point ``p``. Composition with ``chain`` lists transforms in the
order they are applied, which is the reverse of the multiplication order.

Inversion is the one fallible operation: a matrix whose determinant is
within DETERMINANT_EPSILON of zero raises NonInvertibleMatrixError. Shapes,
patterns and the camera invert their transform when it is assigned, so a
singular transform fails while the scene is being built, not mid-render.

Example:
    >>> import math
    >>> from raytracer.core.matrix import chain, rotation_x, scaling, translation
    >>> m = chain(rotation_x(math.pi / 2), scaling(5, 5, 5), translation(10, 5, 7))
"""

import math

import numpy as np
import numpy.typing as npt

from raytracer.core.epsilon import DETERMINANT_EPSILON
from raytracer.core.tuples import Tuple4, cross, normalize, subtract

Matrix4 = npt.NDArray[np.float64]


class NonInvertibleMatrixError(ValueError):
    """Raised when a transform with a (near) zero determinant is inverted."""


# =============================================================================
# Constructors
# =============================================================================


def identity() -> Matrix4:
    return np.identity(4, dtype=np.float64)


def translation(x: float, y: float, z: float) -> Matrix4:
    m = identity()
    m[0, 3] = x
    m[1, 3] = y
    m[2, 3] = z
    return m


def scaling(x: float, y: float, z: float) -> Matrix4:
    return np.diag([x, y, z, 1.0]).astype(np.float64)


def rotation_x(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[1, 1] = c
    m[1, 2] = -s
    m[2, 1] = s
    m[2, 2] = c
    return m


def rotation_y(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 2] = s
    m[2, 0] = -s
    m[2, 2] = c
    return m


def rotation_z(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 1] = -s
    m[1, 0] = s
    m[1, 1] = c
    return m


def shearing(xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Matrix4:
    """Shear each coordinate in proportion to the other two.

    ``xy`` moves x in proportion to y, ``xz`` moves x in proportion to z,
    and so on.
    """
    m = identity()
    m[0, 1] = xy
    m[0, 2] = xz
    m[1, 0] = yx
    m[1, 2] = yz
    m[2, 0] = zx
    m[2, 1] = zy
    return m


def chain(*transforms: Matrix4) -> Matrix4:
    """Compose transforms, the first argument being applied first."""
    result = identity()
    for m in transforms:
        result = np.asarray(m, dtype=np.float64) @ result
    return result


def view_transform(from_point: Tuple4, to_point: Tuple4, up: Tuple4) -> Matrix4:
    """Build the world-to-camera transform for an eye looking from one point to another.

    Args:
        from_point: Eye position.
        to_point: Point the eye looks at.
        up: Approximate up vector; it is re-orthogonalized.

    Returns:
        The orientation matrix multiplied by a translation moving the eye
        to the origin.
    """
    forward = normalize(subtract(to_point, from_point))
    left = cross(forward, normalize(up))
    true_up = cross(left, forward)
    orientation = np.array(
        [
            [left[0], left[1], left[2], 0.0],
            [true_up[0], true_up[1], true_up[2], 0.0],
            [-forward[0], -forward[1], -forward[2], 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
    return orientation @ translation(-from_point[0], -from_point[1], -from_point[2])


# =============================================================================
# Operations
# =============================================================================


def determinant(m: Matrix4) -> float:
    return float(np.linalg.det(np.asarray(m, dtype=np.float64)))


def is_invertible(m: Matrix4) -> bool:
    return abs(determinant(m)) >= DETERMINANT_EPSILON


def inverse(m: Matrix4) -> Matrix4:
    """Invert a transform.

    Raises:
        NonInvertibleMatrixError: If the determinant is within DETERMINANT_EPSILON of zero.
    """
    if not is_invertible(m):
        raise NonInvertibleMatrixError(f"Matrix is not invertible (determinant {determinant(m):.3g})")
    return np.linalg.inv(np.asarray(m, dtype=np.float64))


def transpose(m: Matrix4) -> Matrix4:
    return np.asarray(m, dtype=np.float64).T.copy()


def normal_matrix(m: Matrix4) -> Matrix4:
    """Inverse-transpose of a transform, used to carry normals to world space."""
    return transpose(inverse(m))


def transform(m: Matrix4, t: Tuple4) -> Tuple4:
    """Apply a transform to a point or vector."""
    return np.asarray(m, dtype=np.float64) @ np.asarray(t, dtype=np.float64)
