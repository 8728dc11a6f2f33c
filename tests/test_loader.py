"""Tests for JSON scene descriptions."""

import json
import math
from pathlib import Path

import numpy as np
import pytest

EXAMPLE_SCENE = Path(__file__).resolve().parent.parent / "examples" / "scenes" / "showcase.json"


def _minimal_scene(*extra):
    return [
        {
            "add": "camera",
            "width": 20,
            "height": 10,
            "field-of-view": math.pi / 3,
            "from": [0, 1.5, -5],
            "to": [0, 1, 0],
            "up": [0, 1, 0],
        },
        {"add": "light", "at": [-10, 10, -10], "intensity": [1, 1, 1]},
        *extra,
    ]


class TestParseTransform:
    """Tests for transform lists."""

    def test_empty_is_identity(self):
        from raytracer.core.matrix import identity
        from raytracer.scene.loader import parse_transform

        np.testing.assert_array_equal(parse_transform(None), identity())
        np.testing.assert_array_equal(parse_transform([]), identity())

    def test_entries_apply_in_order(self):
        from raytracer.core.matrix import chain, rotation_x, scaling, translation
        from raytracer.scene.loader import parse_transform

        m = parse_transform([["rotate-x", math.pi / 2], ["scale", 5, 5, 5], ["translate", 10, 5, 7]])
        expected = chain(rotation_x(math.pi / 2), scaling(5, 5, 5), translation(10, 5, 7))
        np.testing.assert_allclose(m, expected)

    def test_shearing(self):
        from raytracer.core.matrix import shearing
        from raytracer.scene.loader import parse_transform

        np.testing.assert_array_equal(parse_transform([["shearing", 1, 0, 0, 0, 0, 0]]), shearing(1, 0, 0, 0, 0, 0))

    @pytest.mark.parametrize(
        "entries",
        [
            [["twist", 1]],
            [["translate", 1, 2]],
            [["rotate-y"]],
            [["shearing", 1, 2, 3]],
            [[]],
            [["scale", None, 1, 1]],
            [["translate", "1", 0, 0]],
            ["translate"],
            {"translate": [1, 2, 3]},
        ],
    )
    def test_invalid_entries(self, entries):
        from raytracer.scene.loader import parse_transform

        with pytest.raises(ValueError):
            parse_transform(entries)


class TestParseMaterial:
    """Tests for material and pattern entries."""

    def test_defaults_when_missing(self):
        from raytracer.scene.loader import parse_material

        m = parse_material(None)
        assert m.ambient == pytest.approx(0.1)
        assert m.pattern is None

    def test_keys(self):
        from raytracer.scene.loader import parse_material

        m = parse_material({"color": [1, 0, 0], "diffuse": 0.5, "reflective": 0.3, "refractive-index": 1.5})
        np.testing.assert_array_equal(m.color, [1, 0, 0])
        assert m.diffuse == pytest.approx(0.5)
        assert m.reflective == pytest.approx(0.3)
        assert m.refractive_index == pytest.approx(1.5)

    def test_pattern(self):
        from raytracer.materials.pattern import PatternType
        from raytracer.scene.loader import parse_material

        m = parse_material({"pattern": {"type": "checkers", "colors": [[1, 1, 1], [0, 0, 0]], "transform": [["scale", 2, 2, 2]]}})
        assert m.pattern.kind == PatternType.CHECKERS
        np.testing.assert_array_equal(m.pattern.b, [0, 0, 0])
        assert m.pattern.transform[0, 0] == 2

    def test_unknown_pattern(self):
        from raytracer.scene.loader import parse_pattern

        with pytest.raises(ValueError):
            parse_pattern({"type": "marble", "colors": [[1, 1, 1], [0, 0, 0]]})

    @pytest.mark.parametrize(
        "spec",
        [
            {"ambient": None},
            {"diffuse": "bright"},
            {"pattern": "checkers"},
            {"pattern": {"type": "stripes", "colors": "red"}},
            {"color": [1, None, 0]},
            ["ambient", 0.5],
        ],
    )
    def test_malformed_values_raise_value_error(self, spec):
        from raytracer.scene.loader import parse_material

        with pytest.raises(ValueError):
            parse_material(spec)

    def test_invalid_material_value(self):
        from raytracer.scene.loader import parse_material

        with pytest.raises(ValueError):
            parse_material({"reflective": 2.0})


class TestLoadScene:
    """Tests for building a camera and world from commands."""

    def test_minimal_scene(self):
        from raytracer.geometry.shape import ShapeType
        from raytracer.scene.loader import load_scene

        camera, world = load_scene(_minimal_scene({"add": "sphere"}, {"add": "plane", "transform": [["translate", 0, -1, 0]]}))
        assert (camera.hsize, camera.vsize) == (20, 10)
        assert [s.kind for s in world.shapes] == [ShapeType.SPHERE, ShapeType.PLANE]
        np.testing.assert_array_equal(world.light.position, [-10, 10, -10, 1])

    def test_cylinder_bounds(self):
        from raytracer.scene.loader import load_scene

        _, world = load_scene(_minimal_scene({"add": "cylinder", "minimum": 0, "maximum": 2, "closed": True}))
        c = world.shapes[0]
        assert (c.minimum, c.maximum, c.closed) == (0.0, 2.0, True)

    def test_bounds_only_on_cylinders(self):
        from raytracer.scene.loader import load_scene

        with pytest.raises(ValueError):
            load_scene(_minimal_scene({"add": "cube", "minimum": 0}))

    def test_light_required(self):
        from raytracer.scene.loader import load_scene

        commands = [c for c in _minimal_scene() if c["add"] != "light"]
        with pytest.raises(ValueError, match="Light is required"):
            load_scene(commands)

    def test_camera_required(self):
        from raytracer.scene.loader import load_scene

        commands = [c for c in _minimal_scene() if c["add"] != "camera"]
        with pytest.raises(ValueError, match="Camera is required"):
            load_scene(commands)

    def test_camera_missing_key(self):
        from raytracer.scene.loader import load_scene

        commands = _minimal_scene()
        del commands[0]["field-of-view"]
        with pytest.raises(ValueError):
            load_scene(commands)

    @pytest.mark.parametrize("kind", ["camera", "light"])
    def test_second_camera_or_light_rejected(self, kind):
        from raytracer.scene.loader import load_scene

        commands = _minimal_scene()
        duplicate = dict(next(c for c in commands if c["add"] == kind))
        with pytest.raises(ValueError, match=f"Only one {kind}"):
            load_scene([*commands, duplicate])

    def test_non_numeric_camera_size(self):
        from raytracer.scene.loader import load_scene

        commands = _minimal_scene()
        commands[0]["width"] = None
        with pytest.raises(ValueError):
            load_scene(commands)

    def test_non_numeric_cylinder_bound(self):
        from raytracer.scene.loader import load_scene

        with pytest.raises(ValueError):
            load_scene(_minimal_scene({"add": "cylinder", "minimum": "low"}))

    def test_non_string_command(self):
        from raytracer.scene.loader import load_scene

        with pytest.raises(ValueError):
            load_scene(_minimal_scene({"add": ["sphere"]}))

    def test_unknown_command(self):
        from raytracer.scene.loader import load_scene

        with pytest.raises(ValueError):
            load_scene(_minimal_scene({"add": "torus"}))

    def test_not_a_list(self):
        from raytracer.scene.loader import load_scene

        with pytest.raises(ValueError):
            load_scene({"add": "camera"})

    def test_load_scene_file(self, tmp_path):
        from raytracer.scene.loader import load_scene_file

        path = tmp_path / "scene.json"
        path.write_text(json.dumps(_minimal_scene({"add": "sphere"})), encoding="utf-8")
        camera, world = load_scene_file(path)
        assert camera.hsize == 20
        assert len(world.shapes) == 1

    def test_bundled_example_scene(self):
        from raytracer.core.integrator import render
        from raytracer.scene.loader import load_scene_file

        camera, world = load_scene_file(EXAMPLE_SCENE)
        assert len(world.shapes) == 4
        small = type(camera)(16, 8, camera.field_of_view, camera.transform)
        canvas = render(small, world)
        assert canvas.pixels.max() > 0.0
