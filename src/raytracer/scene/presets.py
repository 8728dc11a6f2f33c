"""Built-in scenes.

- ``default_world``: the two concentric spheres and light used throughout
  the tests (outer sphere colored, inner sphere scaled by one half).
- ``create_showcase_scene``: a small scene exercising every primitive and
  pattern, with a reflective floor.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.scene.presets import create_showcase_scene
    >>> camera, world = create_showcase_scene(320, 180)
"""

import math
from dataclasses import dataclass

from raytracer.camera.camera import Camera
from raytracer.core.matrix import chain, rotation_x, rotation_y, scaling, translation, view_transform
from raytracer.core.tuples import color, point, vector
from raytracer.geometry.shape import cube, cylinder, plane, sphere
from raytracer.materials.material import Material
from raytracer.materials.pattern import checkers_pattern, gradient_pattern, ring_pattern, stripe_pattern
from raytracer.scene.light import PointLight
from raytracer.scene.world import World

# =============================================================================
# Default World
# =============================================================================

DEFAULT_LIGHT_POSITION = (-10.0, 10.0, -10.0)
DEFAULT_OUTER_COLOR = (0.8, 1.0, 0.6)


def default_world() -> World:
    """Light at (-10, 10, -10) and two spheres centered at the origin.

    The outer unit sphere is colored (0.8, 1.0, 0.6) with diffuse 0.7 and
    specular 0.2; the inner sphere has a default material and is scaled
    by 0.5.
    """
    light = PointLight(point(*DEFAULT_LIGHT_POSITION), color(1.0, 1.0, 1.0))
    outer = sphere(material=Material(color=color(*DEFAULT_OUTER_COLOR), diffuse=0.7, specular=0.2))
    inner = sphere(transform=scaling(0.5, 0.5, 0.5))
    return World(light, [outer, inner])


# =============================================================================
# Showcase Scene
# =============================================================================


@dataclass
class ShowcaseParams:
    """Parameters for the showcase scene.

    Attributes:
        field_of_view: Camera field of view in radians.
        eye: Camera position.
        look_at: Point the camera looks at.
        light_position: Position of the point light.
        floor_reflective: Reflectivity of the checkered floor.
    """

    field_of_view: float = math.pi / 3.0
    eye: tuple[float, float, float] = (0.0, 1.5, -5.0)
    look_at: tuple[float, float, float] = (0.0, 1.0, 0.0)
    light_position: tuple[float, float, float] = (-10.0, 10.0, -10.0)
    floor_reflective: float = 0.3


def create_showcase_scene(width: int, height: int, params: ShowcaseParams | None = None) -> tuple[Camera, World]:
    """Create a camera and world showing every primitive and pattern.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        params: Scene parameters. Uses defaults if None.

    Returns:
        Tuple of (camera, world).
    """
    if params is None:
        params = ShowcaseParams()

    camera = Camera(
        width,
        height,
        params.field_of_view,
        view_transform(point(*params.eye), point(*params.look_at), vector(0.0, 1.0, 0.0)),
    )

    floor_pattern = checkers_pattern(color(0.9, 0.9, 0.9), color(0.2, 0.2, 0.2))
    floor = plane(
        material=Material(pattern=floor_pattern, specular=0.0, reflective=params.floor_reflective),
    )

    backdrop_pattern = ring_pattern(color(0.6, 0.8, 1.0), color(0.3, 0.4, 0.7))
    backdrop_pattern.set_transform(scaling(0.5, 0.5, 0.5))
    backdrop = plane(
        transform=chain(rotation_x(math.pi / 2.0), translation(0.0, 0.0, 8.0)),
        material=Material(pattern=backdrop_pattern, specular=0.0),
    )

    middle = sphere(
        transform=translation(-0.5, 1.0, 0.5),
        material=Material(color=color(0.1, 1.0, 0.5), diffuse=0.7, specular=0.3, reflective=0.2),
    )

    stripes = stripe_pattern(color(1.0, 0.5, 0.1), color(1.0, 1.0, 1.0))
    stripes.set_transform(chain(scaling(0.25, 0.25, 0.25), rotation_y(math.pi / 4.0)))
    box = cube(
        transform=chain(scaling(0.4, 0.4, 0.4), rotation_y(math.pi / 5.0), translation(1.5, 0.4, -0.5)),
        material=Material(pattern=stripes, diffuse=0.7, specular=0.3),
    )

    gradient = gradient_pattern(color(1.0, 0.2, 0.2), color(0.2, 0.2, 1.0))
    gradient.set_transform(chain(scaling(2.0, 1.0, 1.0), translation(-1.0, 0.0, 0.0)))
    column = cylinder(
        transform=chain(scaling(0.35, 1.0, 0.35), translation(-2.0, 0.0, 1.0)),
        material=Material(pattern=gradient, diffuse=0.8, specular=0.4),
        minimum=0.0,
        maximum=1.5,
        closed=True,
    )

    light = PointLight(point(*params.light_position), color(1.0, 1.0, 1.0))
    world = World(light, [floor, backdrop, middle, box, column])

    return camera, world
