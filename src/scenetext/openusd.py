from __future__ import annotations

"""OpenUSD interop: build real `pxr` stages from documents and back."""

import logging
import re

from .codec import parse_index_array, parse_number_array, parse_point_array
from .model import (
    ARRAY_KINDS,
    INT_KINDS,
    QUATERNION_KINDS,
    TYPELESS_KIND,
    VECTOR_KINDS,
    Attribute,
    Document,
    Prim,
)
from .parser import parse_text

logger = logging.getLogger("scenetext.openusd")

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9_]")


def _require_pxr() -> tuple[object, object, object, object]:
    try:
        from pxr import Gf, Sdf, Usd, UsdGeom
    except ImportError as exc:  # pragma: no cover
        raise ImportError(
            "OpenUSD Python bindings are required. Install the `openusd` extra (usd-core)."
        ) from exc
    return Gf, Sdf, Usd, UsdGeom


def _safe_name(raw: str) -> str:
    value = _SAFE_NAME_RE.sub("_", raw).strip("_")
    if not value:
        value = "item"
    if value[0].isdigit():
        value = f"n_{value}"
    return value


def _usd_value(attribute: Attribute, Gf) -> object | None:
    value = attribute.value
    kind = attribute.value_kind
    if kind in VECTOR_KINDS:
        return tuple(value)
    if kind in QUATERNION_KINDS:
        quat_type = Gf.Quatd if kind == "quatd" else Gf.Quatf
        return quat_type(value.w, value.x, value.y, value.z)
    if kind in ARRAY_KINDS:
        element = kind[:-2]
        if element in VECTOR_KINDS:
            return [tuple(row) for row in parse_point_array(value).tolist()]
        if element in INT_KINDS:
            return parse_index_array(value).tolist()
        if element in ("double", "float"):
            return parse_number_array(value).tolist()
        logger.warning(f"Not exporting array attribute '{attribute.name}' of kind {kind}")
        return None
    return value


def _define_prim(stage, parent_path, prim: Prim, pxr_modules) -> None:
    Gf, Sdf, Usd, UsdGeom = pxr_modules
    path = parent_path.AppendChild(_safe_name(prim.name))
    type_name = "" if prim.kind == TYPELESS_KIND else prim.kind
    usd_prim = stage.DefinePrim(path, type_name)

    for name in sorted(prim.attributes):
        attribute = prim.attributes[name]
        value_type = Sdf.ValueTypeNames.Find(attribute.value_kind)
        value = _usd_value(attribute, Gf)
        if not value_type or value is None:
            continue
        usd_prim.CreateAttribute(name, value_type).Set(value)

    if prim.transform is not None:
        if usd_prim.IsA(UsdGeom.Xformable):
            xformable = UsdGeom.Xformable(usd_prim)
            xformable.AddTranslateOp().Set(Gf.Vec3d(*prim.transform.position))
            q = prim.transform.orientation
            xformable.AddOrientOp().Set(Gf.Quatf(q.w, q.x, q.y, q.z))
        else:
            logger.warning(f"Prim '{prim.name}' of kind {prim.kind} is not xformable; transform dropped")

    if prim.metadata:
        usd_prim.SetCustomData(dict(prim.metadata))
    for reference in prim.references:
        usd_prim.GetReferences().AddReference(reference.file_path)

    for child in prim.children:
        _define_prim(stage, path, child, pxr_modules)


def document_to_stage(document: Document) -> object:
    """Build an in-memory OpenUSD stage mirroring `document`."""
    pxr_modules = _require_pxr()
    _, Sdf, Usd, UsdGeom = pxr_modules

    stage = Usd.Stage.CreateInMemory()
    UsdGeom.SetStageUpAxis(stage, document.stage.up_axis)
    UsdGeom.SetStageMetersPerUnit(stage, document.stage.meters_per_unit)
    if document.stage.custom_layer_data:
        stage.GetRootLayer().customLayerData = dict(document.stage.custom_layer_data)

    for prim in document.root_prims:
        _define_prim(stage, Sdf.Path.absoluteRootPath, prim, pxr_modules)

    if document.stage.default_prim:
        default = stage.GetPrimAtPath(f"/{_safe_name(document.stage.default_prim)}")
        if default:
            stage.SetDefaultPrim(default)
    return stage


def document_to_usda(document: Document) -> str:
    stage = document_to_stage(document)
    return stage.GetRootLayer().ExportToString()


def stage_to_document(stage) -> Document:
    """Parse an OpenUSD stage's root layer through the text engine."""
    return parse_text(stage.GetRootLayer().ExportToString())
