"""Pytest configuration: custom markers and shared fixtures."""
import importlib.util

import pytest

from scenetext.builders import assembly, cone, cylinder
from scenetext.model import Document, Stage


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "openusd: needs the OpenUSD python bindings (usd-core)"
    )


def pytest_collection_modifyitems(config, items):
    if importlib.util.find_spec("pxr") is not None:
        return
    skip_openusd = pytest.mark.skip(reason="pxr (usd-core) is not installed")
    for item in items:
        if "openusd" in item.keywords:
            item.add_marker(skip_openusd)


@pytest.fixture
def rocket_document() -> Document:
    """Xform "Rocket" holding a fuel tank cylinder and a nose cone."""
    tank = cylinder("Tank", height=3.0, radius=1.0, position=(0.0, 1.5, 0.0))
    nose = cone("Nose", height=1.5, radius=1.0, position=(0.0, 4.0, 0.0))
    rocket = assembly("Rocket", children=[tank, nose])
    return Document(stage=Stage(default_prim="Rocket"), root_prims=(rocket,))


@pytest.fixture
def rocket_text() -> str:
    return (
        "#usda 1.0\n"
        "(\n"
        '    defaultPrim = "Rocket"\n'
        "    metersPerUnit = 1.0\n"
        '    upAxis = "Y"\n'
        ")\n"
        "\n"
        'def Xform "Rocket"\n'
        "{\n"
        "    double3 xformOp:translate = (0.0, 0.0, 0.0)\n"
        "    quatf xformOp:orient = (1.0, 0.0, 0.0, 0.0)\n"
        '    uniform token[] xformOpOrder = ["xformOp:translate", "xformOp:orient"]\n'
        "\n"
        '    def Cylinder "Tank"\n'
        "    {\n"
        "        double height = 3.0\n"
        "        double radius = 1.0\n"
        "        double3 xformOp:translate = (0.0, 1.5, 0.0)\n"
        "        quatf xformOp:orient = (1.0, 0.0, 0.0, 0.0)\n"
        '        uniform token[] xformOpOrder = ["xformOp:translate", "xformOp:orient"]\n'
        "\n"
        "        customData = {\n"
        '            string modelDrawType = "cylinder"\n'
        "        }\n"
        "    }\n"
        "\n"
        '    def Cone "Nose"\n'
        "    {\n"
        "        double height = 1.5\n"
        "        double radius = 1.0\n"
        "        double3 xformOp:translate = (0.0, 4.0, 0.0)\n"
        "        quatf xformOp:orient = (1.0, 0.0, 0.0, 0.0)\n"
        '        uniform token[] xformOpOrder = ["xformOp:translate", "xformOp:orient"]\n'
        "\n"
        "        customData = {\n"
        '            string modelDrawType = "cone"\n'
        "        }\n"
        "    }\n"
        "\n"
        "    customData = {\n"
        '        string modelDrawType = "assembly"\n'
        "    }\n"
        "}\n"
    )
