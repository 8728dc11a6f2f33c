"""JSON scene descriptions.

A scene file is a JSON list of commands, each an object with an ``add`` key:

    [
      {"add": "camera", "width": 100, "height": 100, "field-of-view": 0.785,
       "from": [-6, 6, -10], "to": [6, 0, 6], "up": [-0.45, 1, 0]},
      {"add": "light", "at": [50, 100, -50], "intensity": [1, 1, 1]},
      {"add": "plane", "material": {"color": [1, 1, 1], "ambient": 1},
       "transform": [["rotate-x", 1.5707963267948966], ["translate", 0, 0, 500]]},
      {"add": "cylinder", "minimum": 0, "maximum": 1, "closed": true}
    ]

Transforms are applied in the listed order. Supported transform entries:
``translate``, ``scale``, ``rotate-x``, ``rotate-y``, ``rotate-z`` and
``shearing`` (xy, xz, yx, yz, zx, zy). Material keys mirror Material's
fields, with ``refractive-index`` spelled in kebab case; a ``pattern`` entry
has a ``type``, two ``colors`` and an optional ``transform``.

Exactly one camera and one light are required.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any

from raytracer.camera.camera import Camera
from raytracer.core.matrix import (
    Matrix4,
    chain,
    identity,
    rotation_x,
    rotation_y,
    rotation_z,
    scaling,
    shearing,
    translation,
    view_transform,
)
from raytracer.core.tuples import color, point, vector
from raytracer.geometry.shape import Shape, ShapeType
from raytracer.materials.material import Material
from raytracer.materials.pattern import Pattern, PatternType
from raytracer.scene.light import PointLight
from raytracer.scene.world import World

logger = logging.getLogger(__name__)

SHAPE_TYPES = {
    "sphere": ShapeType.SPHERE,
    "plane": ShapeType.PLANE,
    "cube": ShapeType.CUBE,
    "cylinder": ShapeType.CYLINDER,
}

PATTERN_TYPES = {
    "solid": PatternType.SOLID,
    "stripes": PatternType.STRIPES,
    "gradient": PatternType.GRADIENT,
    "ring": PatternType.RING,
    "checkers": PatternType.CHECKERS,
}

MATERIAL_KEYS = {
    "ambient": "ambient",
    "diffuse": "diffuse",
    "specular": "specular",
    "shininess": "shininess",
    "reflective": "reflective",
    "transparency": "transparency",
    "refractive-index": "refractive_index",
}


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"{what} must be a number, got {value!r}")
    return float(value)


def _triple(value: Any, what: str) -> tuple[float, float, float]:
    if not isinstance(value, list | tuple) or len(value) != 3:
        raise ValueError(f"{what} must be a list of three numbers, got {value!r}")
    return _number(value[0], what), _number(value[1], what), _number(value[2], what)


def parse_transform(entries: list[list[Any]] | None) -> Matrix4:
    """Build a transform from a list of ``[name, *args]`` entries.

    Raises:
        ValueError: For an unknown transform name, a non-numeric argument or
            a wrong argument count.
    """
    if not entries:
        return identity()
    if not isinstance(entries, list):
        raise ValueError(f"A transform must be a list of entries, got {entries!r}")

    steps = []
    for entry in entries:
        if not isinstance(entry, list) or not entry:
            raise ValueError(f"Transform entry must be a non-empty list, got {entry!r}")
        name, args = entry[0], [_number(a, f"{entry[0]} argument") for a in entry[1:]]
        if name in ("translate", "scale"):
            if len(args) != 3:
                raise ValueError(f"{name} takes 3 arguments, got {len(args)}")
            steps.append(translation(*args) if name == "translate" else scaling(*args))
        elif name in ("rotate-x", "rotate-y", "rotate-z"):
            if len(args) != 1:
                raise ValueError(f"{name} takes 1 argument, got {len(args)}")
            rotate = {"rotate-x": rotation_x, "rotate-y": rotation_y, "rotate-z": rotation_z}[name]
            steps.append(rotate(args[0]))
        elif name == "shearing":
            if len(args) != 6:
                raise ValueError(f"shearing takes 6 arguments, got {len(args)}")
            steps.append(shearing(*args))
        else:
            raise ValueError(f"Unknown transform {name!r}")
    return chain(*steps)


def parse_pattern(spec: dict[str, Any]) -> Pattern:
    if not isinstance(spec, dict):
        raise ValueError(f"A pattern must be an object, got {spec!r}")
    kind = spec.get("type")
    if kind not in PATTERN_TYPES:
        raise ValueError(f"Unknown pattern type {kind!r}")
    colors = spec.get("colors", [])
    if not isinstance(colors, list):
        raise ValueError(f"Pattern colors must be a list, got {colors!r}")
    if len(colors) == 1:
        colors = [colors[0], colors[0]]
    if len(colors) != 2:
        raise ValueError("A pattern needs one or two colors")
    a = color(*_triple(colors[0], "pattern color"))
    b = color(*_triple(colors[1], "pattern color"))
    return Pattern(PATTERN_TYPES[kind], a, b, parse_transform(spec.get("transform")))


def parse_material(spec: dict[str, Any] | None) -> Material:
    """Build a Material; missing keys keep their defaults."""
    if not spec:
        return Material()
    if not isinstance(spec, dict):
        raise ValueError(f"A material must be an object, got {spec!r}")
    kwargs: dict[str, Any] = {}
    if "color" in spec:
        kwargs["color"] = color(*_triple(spec["color"], "material color"))
    for key, attr in MATERIAL_KEYS.items():
        if key in spec:
            kwargs[attr] = _number(spec[key], f"material {key}")
    if "pattern" in spec:
        kwargs["pattern"] = parse_pattern(spec["pattern"])
    return Material(**kwargs)


def parse_shape(spec: dict[str, Any]) -> Shape:
    kind = SHAPE_TYPES[spec["add"]]
    minimum = _number(spec.get("minimum", -math.inf), "cylinder minimum")
    maximum = _number(spec.get("maximum", math.inf), "cylinder maximum")
    closed = bool(spec.get("closed", False))
    if kind != ShapeType.CYLINDER and ("minimum" in spec or "maximum" in spec or "closed" in spec):
        raise ValueError(f"Only cylinders accept minimum/maximum/closed, not {spec['add']}")
    return Shape(
        kind,
        transform=parse_transform(spec.get("transform")),
        material=parse_material(spec.get("material")),
        minimum=minimum,
        maximum=maximum,
        closed=closed,
    )


def parse_camera(spec: dict[str, Any]) -> Camera:
    try:
        transform = view_transform(
            point(*_triple(spec["from"], "camera from")),
            point(*_triple(spec["to"], "camera to")),
            vector(*_triple(spec["up"], "camera up")),
        )
        width = _number(spec["width"], "camera width")
        height = _number(spec["height"], "camera height")
        if not (width.is_integer() and height.is_integer()):
            raise ValueError(f"Camera size must be whole pixels, got {width}x{height}")
        return Camera(int(width), int(height), _number(spec["field-of-view"], "camera field-of-view"), transform)
    except KeyError as e:
        raise ValueError(f"Camera is missing {e.args[0]!r}") from e


def parse_light(spec: dict[str, Any]) -> PointLight:
    try:
        return PointLight(point(*_triple(spec["at"], "light at")), color(*_triple(spec["intensity"], "light intensity")))
    except KeyError as e:
        raise ValueError(f"Light is missing {e.args[0]!r}") from e


def load_scene(commands: list[dict[str, Any]]) -> tuple[Camera, World]:
    """Build a camera and world from parsed scene commands.

    Raises:
        ValueError: On unknown commands, invalid values, or a missing or
            repeated camera or light.
    """
    if not isinstance(commands, list):
        raise ValueError("A scene must be a list of commands")

    camera = None
    light = None
    shapes = []

    for command in commands:
        kind = command.get("add") if isinstance(command, dict) else None
        if not isinstance(kind, str):
            kind = None
        if kind == "camera":
            if camera is not None:
                raise ValueError("Only one camera is allowed")
            camera = parse_camera(command)
        elif kind == "light":
            if light is not None:
                raise ValueError("Only one light is allowed")
            light = parse_light(command)
        elif kind in SHAPE_TYPES:
            shapes.append(parse_shape(command))
        else:
            raise ValueError(f"Unknown scene command {command!r}")

    if light is None:
        raise ValueError("Light is required")
    if camera is None:
        raise ValueError("Camera is required")

    logger.info("Loaded scene: %dx%d camera, %d shapes", camera.hsize, camera.vsize, len(shapes))
    return camera, World(light, shapes)


def load_scene_file(path: str | Path) -> tuple[Camera, World]:
    """Read a JSON scene file and build its camera and world."""
    with open(path, encoding="utf-8") as f:
        commands = json.load(f)
    logger.debug("Read scene file %s", path)
    return load_scene(commands)
