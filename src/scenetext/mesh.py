from __future__ import annotations

"""Mesh decoding at the consumer boundary.

The codec keeps `points` / `faceVertexIndices` as raw array text. This
module turns them into numpy buffers and enforces the triangle-list
constraint that renderers need.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .codec import parse_index_array, parse_point_array
from .errors import MeshConversionError, MissingRequiredAttributeError
from .model import Document, Prim, RawArray

logger = logging.getLogger("scenetext.mesh")

MESH_KINDS = frozenset({"Mesh", "GeomMesh"})
POINTS_ATTRIBUTE = "points"
INDICES_ATTRIBUTE = "faceVertexIndices"


@dataclass(frozen=True)
class MeshArrays:
    name: str
    points: np.ndarray
    face_vertex_indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(self.points.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.face_vertex_indices.shape[0] // 3)

    @property
    def triangles(self) -> np.ndarray:
        return self.face_vertex_indices.reshape(-1, 3)


def _array_text(prim: Prim, attribute_name: str) -> RawArray | str:
    attribute = prim.attributes.get(attribute_name)
    if attribute is None:
        raise MissingRequiredAttributeError(prim.name, attribute_name)
    if not isinstance(attribute.value, (RawArray, str)):
        raise MeshConversionError(
            f"Attribute '{attribute_name}' on '{prim.name}' is {attribute.value_kind}, not an array"
        )
    return attribute.value


def mesh_arrays(prim: Prim) -> MeshArrays:
    """Decode a mesh prim's point and index arrays.

    Accepts both the multi-line `Type[]` form and single string-encoded
    arrays. Raises MeshConversionError when the indices do not describe
    whole triangles or reference missing vertices.
    """
    try:
        points = parse_point_array(_array_text(prim, POINTS_ATTRIBUTE))
        indices = parse_index_array(_array_text(prim, INDICES_ATTRIBUTE))
    except ValueError as exc:
        raise MeshConversionError(f"Mesh '{prim.name}': {exc}") from exc

    if indices.shape[0] % 3 != 0:
        raise MeshConversionError(
            f"Mesh '{prim.name}': face index count {indices.shape[0]} is not a multiple of 3"
        )
    if indices.size and (indices.min() < 0 or indices.max() >= points.shape[0]):
        raise MeshConversionError(f"Mesh '{prim.name}': face index out of range for {points.shape[0]} points")
    return MeshArrays(name=prim.name, points=points, face_vertex_indices=indices)


def collect_meshes(prims: Document | Iterable[Prim]) -> list[MeshArrays]:
    """Decode every mesh prim in a tree, skipping ones that fail.

    A broken mesh is logged and skipped so its siblings still convert.
    """
    walker = prims.walk() if isinstance(prims, Document) else (p for root in prims for p in root.walk())
    meshes: list[MeshArrays] = []
    for prim in walker:
        if prim.kind not in MESH_KINDS:
            continue
        try:
            meshes.append(mesh_arrays(prim))
        except (MeshConversionError, MissingRequiredAttributeError) as exc:
            logger.warning(f"Skipping mesh '{prim.name}': {exc}")
    return meshes
