"""The single point light.

A world has exactly one PointLight. ``setup_light`` copies it into Taichi
fields so shading kernels can read it.
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.tuples import Color, Tuple4, is_point

vec3 = tm.vec3


@dataclass
class PointLight:
    """A point light source with no size.

    Attributes:
        position: World-space position (a point).
        intensity: RGB intensity.
    """

    position: Tuple4
    intensity: Color

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=np.float64)
        self.intensity = np.asarray(self.intensity, dtype=np.float64)[:3]
        if self.position.shape != (4,) or not is_point(self.position):
            raise ValueError("Light position must be a point")


# =============================================================================
# Light Fields
# =============================================================================

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_intensity = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_light(light: PointLight) -> None:
    """Write the light into the fields read by shading kernels."""
    _light_position[None] = [float(c) for c in light.position[:3]]
    _light_intensity[None] = [float(c) for c in light.intensity]


@ti.func
def get_light_position() -> vec3:
    return _light_position[None]


@ti.func
def get_light_intensity() -> vec3:
    return _light_intensity[None]
