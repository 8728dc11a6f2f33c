"""Shared floating-point tolerance.

All near-equality tests, degenerate-geometry checks and the over-point offset
use EPSILON. Kernels run in single precision, so the tolerance is sized for
f32 rather than f64.
"""

import numpy as np

EPSILON = 1e-4

# Determinants scale with the cube of a transform's scale factor
DETERMINANT_EPSILON = EPSILON**3

# Below this a direction or root denominator is treated as zero
DEGENERATE_EPSILON = EPSILON**2

# Stand-in for infinity inside kernels (f32 max is ~3.4e38)
INFINITY = 1e30


def approx_equal(a, b, tolerance: float = EPSILON) -> bool:
    """Check whether two scalars or arrays agree component-wise within tolerance."""
    return bool(np.all(np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)) < tolerance))


def clamp_infinite(value: float) -> float:
    """Map +/-inf onto +/-INFINITY so the value survives an f32 field."""
    if value > INFINITY:
        return INFINITY
    if value < -INFINITY:
        return -INFINITY
    return float(value)

