"""Field-of-view camera that maps pixels to world-space rays.

The camera sits at the origin of its own space looking down -z at a canvas
one unit away. Its transform is the world-to-camera (view) transform; ray
generation uses the inverse to carry the canvas point and the eye into
world space.

Derived sizes, for a canvas of hsize x vsize pixels:
    half_view = tan(field_of_view / 2)
    aspect    = hsize / vsize
    aspect >= 1: half_width = half_view, half_height = half_view / aspect
    aspect <  1: half_width = half_view * aspect, half_height = half_view
    pixel_size = 2 * half_width / hsize

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.camera import Camera
    >>> camera = Camera(201, 101, math.pi / 2)
    >>> camera.ray_for_pixel(100, 50).direction  # ~(0, 0, -1)
"""

import math
from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from raytracer.core.matrix import Matrix4, identity, inverse
from raytracer.core.ray import HostRay, Ray, make_ray, normalize, transform_point
from raytracer.core.tuples import point, vector

vec3 = tm.vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for the perspective camera.

    Attributes:
        hsize: Canvas width in pixels.
        vsize: Canvas height in pixels.
        field_of_view: Angle (radians) spanned by the wider canvas axis.
        transform: World-to-camera transform, typically from view_transform().
    """

    hsize: int
    vsize: int
    field_of_view: float
    transform: Matrix4 = field(default_factory=identity)

    def __post_init__(self) -> None:
        if self.hsize <= 0 or self.vsize <= 0:
            raise ValueError(f"Camera size must be positive, got {self.hsize}x{self.vsize}")
        if not 0.0 < self.field_of_view < math.pi:
            raise ValueError(f"Field of view must be in (0, pi), got {self.field_of_view}")
        self.transform = np.asarray(self.transform, dtype=np.float64)
        # Fail fast on singular transforms
        inverse(self.transform)

    def _half_extents(self) -> tuple[float, float]:
        half_view = math.tan(self.field_of_view / 2.0)
        aspect = self.hsize / self.vsize
        if aspect >= 1.0:
            return half_view, half_view / aspect
        return half_view * aspect, half_view

    @property
    def half_width(self) -> float:
        return self._half_extents()[0]

    @property
    def half_height(self) -> float:
        return self._half_extents()[1]

    @property
    def pixel_size(self) -> float:
        return self.half_width * 2.0 / self.hsize

    @property
    def inverse(self) -> Matrix4:
        return inverse(self.transform)

    def ray_for_pixel(self, px: int, py: int) -> HostRay:
        """World-space ray from the eye through the center of pixel (px, py)."""
        setup_camera(self)
        _ray_for_pixel_probe(px, py)
        o = _probe_origin[None]
        d = _probe_direction[None]
        return HostRay(
            point(float(o[0]), float(o[1]), float(o[2])),
            vector(float(d[0]), float(d[1]), float(d[2])),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_camera_half_width = ti.field(dtype=ti.f32, shape=())
_camera_half_height = ti.field(dtype=ti.f32, shape=())
_camera_pixel_size = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Copy the camera's inverse transform and derived sizes into Taichi fields.

    Must be called before rendering, from Python scope.
    """
    _camera_inverse[None] = camera.inverse.tolist()
    _camera_half_width[None] = camera.half_width
    _camera_half_height[None] = camera.half_height
    _camera_pixel_size[None] = camera.pixel_size


def get_camera_info() -> dict[str, float]:
    """Current camera state, for debugging."""
    return {
        "half_width": float(_camera_half_width[None]),
        "half_height": float(_camera_half_height[None]),
        "pixel_size": float(_camera_pixel_size[None]),
    }


# =============================================================================
# Ray Generation (Taichi)
# =============================================================================


@ti.func
def ray_for_pixel(px: ti.i32, py: ti.i32) -> Ray:
    """Ray through the center of pixel (px, py); (0, 0) is the top-left pixel.

    Canvas x grows to the left in camera space because the camera looks
    down -z, hence ``half_width - x_offset``.
    """
    pixel_size = _camera_pixel_size[None]
    x_offset = (ti.cast(px, ti.f32) + 0.5) * pixel_size
    y_offset = (ti.cast(py, ti.f32) + 0.5) * pixel_size

    world_x = _camera_half_width[None] - x_offset
    world_y = _camera_half_height[None] - y_offset

    inv = _camera_inverse[None]
    pixel = transform_point(inv, vec3(world_x, world_y, -1.0))
    origin = transform_point(inv, vec3(0.0, 0.0, 0.0))
    return make_ray(origin, normalize(pixel - origin))


_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _ray_for_pixel_probe(px: ti.i32, py: ti.i32):
    ray = ray_for_pixel(px, py)
    _probe_origin[None] = ray.origin
    _probe_direction[None] = ray.direction
