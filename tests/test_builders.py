"""Tests for prim factories (builders.py)."""
from __future__ import annotations

from scenetext.builders import TYPE_METADATA_KEY, assembly, cone, cylinder, single_prim_document
from scenetext.model import Quaternion, Transform, Vector3


def test_cylinder_defaults():
    prim = cylinder("TestCylinder")
    assert prim.kind == "Cylinder"
    assert prim.attribute_value("height") == 2.0
    assert prim.attribute_value("radius") == 0.5
    assert prim.transform == Transform()
    assert prim.metadata == {TYPE_METADATA_KEY: "cylinder"}


def test_cone_defaults_and_placement():
    prim = cone("TestCone", position=(0.0, 1.0, 0.0), orientation=Quaternion.from_axis_angle(Vector3.UNIT_X, 0.0))
    assert prim.kind == "Cone"
    assert prim.attribute_value("radius") == 1.0
    assert prim.transform.position == Vector3(0.0, 1.0, 0.0)
    assert prim.transform.orientation.is_close(Quaternion.IDENTITY)


def test_caller_metadata_overrides_type_tag():
    prim = cylinder("Tank", metadata={"material": "steel", TYPE_METADATA_KEY: "tank"})
    assert prim.metadata == {"material": "steel", TYPE_METADATA_KEY: "tank"}


def test_assembly_and_single_prim_document():
    root = assembly("Rocket", children=[cylinder("Tank"), cone("Nose")])
    assert root.kind == "Xform"
    assert [child.name for child in root.children] == ["Tank", "Nose"]
    doc = single_prim_document(root)
    assert doc.stage.default_prim == "Rocket"
    assert doc.default_root() is root
