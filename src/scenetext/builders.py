from __future__ import annotations

"""Convenience constructors for the prim kinds the writer supports."""

from typing import Mapping, Sequence

from .model import (
    CONE,
    CYLINDER,
    XFORM,
    Attribute,
    Document,
    Prim,
    Quaternion,
    Stage,
    Transform,
    Vector3,
)

TYPE_METADATA_KEY = "modelDrawType"


def _metadata(type_tag: str, metadata: Mapping[str, str] | None) -> dict[str, str]:
    merged = {TYPE_METADATA_KEY: type_tag}
    merged.update(metadata or {})
    return merged


def _solid(
    kind: str,
    name: str,
    height: float,
    radius: float,
    position: Vector3 | Sequence[float],
    orientation: Quaternion | Sequence[float],
    metadata: Mapping[str, str] | None,
) -> Prim:
    return Prim(
        name=name,
        kind=kind,
        attributes={
            "height": Attribute("height", float(height), "double"),
            "radius": Attribute("radius", float(radius), "double"),
        },
        transform=Transform(position=position, orientation=orientation),
        metadata=_metadata(kind.lower(), metadata),
    )


def cylinder(
    name: str,
    height: float = 2.0,
    radius: float = 0.5,
    position: Vector3 | Sequence[float] = Vector3.ZERO,
    orientation: Quaternion | Sequence[float] = Quaternion.IDENTITY,
    metadata: Mapping[str, str] | None = None,
) -> Prim:
    """Cylinder positioned by its geometric center."""
    return _solid(CYLINDER, name, height, radius, position, orientation, metadata)


def cone(
    name: str,
    height: float = 2.0,
    radius: float = 1.0,
    position: Vector3 | Sequence[float] = Vector3.ZERO,
    orientation: Quaternion | Sequence[float] = Quaternion.IDENTITY,
    metadata: Mapping[str, str] | None = None,
) -> Prim:
    """Cone with base radius `radius`, positioned by its geometric center."""
    return _solid(CONE, name, height, radius, position, orientation, metadata)


def assembly(
    name: str,
    children: Sequence[Prim],
    position: Vector3 | Sequence[float] = Vector3.ZERO,
    orientation: Quaternion | Sequence[float] = Quaternion.IDENTITY,
    metadata: Mapping[str, str] | None = None,
) -> Prim:
    return Prim(
        name=name,
        kind=XFORM,
        transform=Transform(position=position, orientation=orientation),
        children=tuple(children),
        metadata=_metadata("assembly", metadata),
    )


def single_prim_document(prim: Prim, custom_layer_data: Mapping[str, str] | None = None) -> Document:
    stage = Stage(default_prim=prim.name, custom_layer_data=dict(custom_layer_data or {}))
    return Document(stage=stage, root_prims=(prim,))
