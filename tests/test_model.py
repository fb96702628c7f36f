"""Tests for the scene value types (model.py)."""
from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest

from scenetext.model import (
    Attribute,
    Document,
    Prim,
    Quaternion,
    RawArray,
    Reference,
    Stage,
    Transform,
    Vector3,
    coerce_value,
)


class TestVector3:
    def test_components_become_floats(self):
        v = Vector3(1, 2, 3)
        assert v.x == 1.0 and isinstance(v.x, float)
        assert tuple(v) == (1.0, 2.0, 3.0)

    def test_coerce_rejects_wrong_arity(self):
        with pytest.raises(ValueError):
            Vector3.coerce((1.0, 2.0))

    def test_as_array(self):
        np.testing.assert_allclose(Vector3(1.0, -2.0, 0.5).as_array(), [1.0, -2.0, 0.5])


class TestQuaternion:
    def test_identity_is_scalar_first(self):
        assert tuple(Quaternion.IDENTITY) == (1.0, 0.0, 0.0, 0.0)

    def test_from_axis_angle_quarter_turn_about_y(self):
        q = Quaternion.from_axis_angle((0.0, 2.0, 0.0), math.pi / 2)
        half = math.sqrt(0.5)
        assert q.is_close(Quaternion(half, 0.0, half, 0.0))

    def test_rotate_x_to_minus_z(self):
        q = Quaternion.from_axis_angle(Vector3.UNIT_Y, math.pi / 2)
        rotated = q.rotate(Vector3.UNIT_X)
        assert rotated.is_close(Vector3(0.0, 0.0, -1.0))

    def test_zero_axis_rejected(self):
        with pytest.raises(ValueError):
            Quaternion.from_axis_angle(Vector3.ZERO, 1.0)

    def test_normalized_zero_falls_back_to_identity(self):
        assert Quaternion(0.0, 0.0, 0.0, 0.0).normalized() == Quaternion.IDENTITY


class TestAttribute:
    def test_float_kind_rounds_to_32_bit(self):
        attr = Attribute("scale", 0.1, "float")
        assert attr.value == float(np.float32(0.1))
        assert attr.value != 0.1

    def test_double_keeps_precision(self):
        assert Attribute("height", 0.1, "double").value == 0.1

    def test_int_rejects_float(self):
        with pytest.raises(ValueError):
            Attribute("count", 1.5, "int")

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValueError):
            Attribute("height", True, "double")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError, match="unknown attribute value kind"):
            Attribute("x", 1.0, "matrix4d")

    def test_vector_kind_coerces_sequence(self):
        attr = Attribute("extent", [1, 2, 3], "float3")
        assert attr.value == Vector3(1.0, 2.0, 3.0)

    def test_array_kind_wraps_text(self):
        attr = Attribute("faceVertexIndices", "0, 1, 2", "int[]")
        assert attr.is_array
        assert attr.value == RawArray("0, 1, 2")

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Attribute("", 1.0, "double")

    def test_coerce_value_string_kinds(self):
        assert coerce_value("steel", "token") == "steel"
        with pytest.raises(ValueError):
            coerce_value(3, "string")


def test_raw_array_items_split_outside_parentheses():
    arr = RawArray("(0, 0, 0), (1.5, 0, 0), (0, 2, 0)")
    assert arr.items() == ["(0, 0, 0)", "(1.5, 0, 0)", "(0, 2, 0)"]


def test_transform_coerces_sequences():
    t = Transform(position=(0, 1.5, 0), orientation=(1, 0, 0, 0))
    assert t.position == Vector3(0.0, 1.5, 0.0)
    assert t.orientation == Quaternion.IDENTITY


class TestReference:
    def test_from_syntax_strips_delimiters(self):
        ref = Reference.from_syntax("@./Sibling.usd@")
        assert ref.file_path == "./Sibling.usd"
        assert ref.syntax == "@./Sibling.usd@"

    def test_resolve_relative(self):
        assert Reference("./Sibling.usd").resolve("/a/b/") == Path("/a/b/Sibling.usd")

    def test_resolve_bare_relative(self):
        assert Reference("parts/Valve.usd").resolve("/a/b") == Path("/a/b/parts/Valve.usd")

    def test_resolve_absolute_unchanged(self):
        assert Reference("/lib/Engine.usd").resolve("/a/b") == Path("/lib/Engine.usd")


class TestPrimTree:
    def test_walk_is_depth_first(self, rocket_document):
        names = [prim.name for prim in rocket_document.walk()]
        assert names == ["Rocket", "Tank", "Nose"]

    def test_find_and_attribute_value(self, rocket_document):
        rocket = rocket_document.default_root()
        assert rocket is not None
        tank = rocket.find("Tank")
        assert tank is not None
        assert tank.attribute_value("height") == 3.0
        assert tank.attribute_value("missing", 7.0) == 7.0
        assert rocket.find("Booster") is None

    def test_references_helpers(self):
        prim = Prim("Engine", "Xform", references=[Reference("./Engine.usd")])
        assert prim.has_references
        assert prim.primary_reference == Reference("./Engine.usd")
        assert not Prim("Bare", "Xform").has_references
        assert Prim("Bare", "Xform").primary_reference is None

    def test_empty_prim_name_rejected(self):
        with pytest.raises(ValueError):
            Prim("", "Xform")

    def test_default_root_falls_back_to_first(self):
        doc = Document(stage=Stage(default_prim="Missing"), root_prims=(Prim("A", "Xform"), Prim("B", "Xform")))
        assert doc.default_root().name == "A"
        assert Document().default_root() is None
