from __future__ import annotations

"""Value types for parsed and generated scene documents.

Every object here is an immutable dataclass created fresh for each parse or
write call; nothing is cached or shared between calls.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping, Sequence, Union

import numpy as np

CYLINDER = "Cylinder"
CONE = "Cone"
XFORM = "Xform"
# Kind given to `def "Name"` declarations that carry no type token.
TYPELESS_KIND = "Typeless"


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        for axis in ("x", "y", "z"):
            object.__setattr__(self, axis, float(getattr(self, axis)))

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    @staticmethod
    def coerce(value: "Vector3 | Sequence[float]") -> "Vector3":
        if isinstance(value, Vector3):
            return value
        if len(value) != 3:
            raise ValueError("Vector3 requires exactly 3 components")
        return Vector3(*value)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_close(self, other: "Vector3", tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.as_array(), other.as_array(), rtol=0.0, atol=tol))


Vector3.ZERO = Vector3(0.0, 0.0, 0.0)
Vector3.UNIT_X = Vector3(1.0, 0.0, 0.0)
Vector3.UNIT_Y = Vector3(0.0, 1.0, 0.0)
Vector3.UNIT_Z = Vector3(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Quaternion:
    """Rotation quaternion stored scalar-first, matching `quatf` text order."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        for part in ("w", "x", "y", "z"):
            object.__setattr__(self, part, float(getattr(self, part)))

    def __iter__(self) -> Iterator[float]:
        return iter((self.w, self.x, self.y, self.z))

    @staticmethod
    def coerce(value: "Quaternion | Sequence[float]") -> "Quaternion":
        if isinstance(value, Quaternion):
            return value
        if len(value) != 4:
            raise ValueError("Quaternion requires exactly 4 components (w, x, y, z)")
        return Quaternion(*value)

    @staticmethod
    def from_axis_angle(axis: Vector3 | Sequence[float], angle: float) -> "Quaternion":
        """Rotation of `angle` radians about `axis` (normalized here)."""
        vec = Vector3.coerce(axis).as_array()
        norm = float(np.linalg.norm(vec))
        if norm <= 0.0:
            raise ValueError("rotation axis must be non-zero")
        vec = vec / norm
        half = angle * 0.5
        s = math.sin(half)
        return Quaternion(math.cos(half), vec[0] * s, vec[1] * s, vec[2] * s)

    def as_array(self) -> np.ndarray:
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    def normalized(self) -> "Quaternion":
        arr = self.as_array()
        norm = float(np.linalg.norm(arr))
        if norm <= 0.0:
            return Quaternion.IDENTITY
        return Quaternion(*(arr / norm))

    def rotate(self, vector: Vector3 | Sequence[float]) -> Vector3:
        q = self.normalized()
        u = np.array([q.x, q.y, q.z], dtype=np.float64)
        v = Vector3.coerce(vector).as_array()
        t = 2.0 * np.cross(u, v)
        return Vector3(*(v + q.w * t + np.cross(u, t)))

    def is_close(self, other: "Quaternion", tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.as_array(), other.as_array(), rtol=0.0, atol=tol))


Quaternion.IDENTITY = Quaternion(1.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class RawArray:
    """Array attribute payload kept as comma-joined text.

    The codec never interprets elements; consumers such as
    `scenetext.mesh` decode them on demand.
    """

    text: str

    def items(self) -> list[str]:
        """Top-level elements, splitting on commas outside parentheses."""
        items: list[str] = []
        depth = 0
        current: list[str] = []
        for char in self.text:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            if char == "," and depth == 0:
                items.append("".join(current).strip())
                current = []
                continue
            current.append(char)
        tail = "".join(current).strip()
        if tail:
            items.append(tail)
        return [item for item in items if item]


AttributeValue = Union[float, int, str, Vector3, Quaternion, RawArray]

DOUBLE_KINDS = frozenset({"double"})
FLOAT_KINDS = frozenset({"float"})
INT_KINDS = frozenset({"int"})
STRING_KINDS = frozenset({"string", "token", "asset"})
VECTOR_KINDS = frozenset(
    {"double3", "float3", "point3f", "point3d", "vector3f", "vector3d", "normal3f", "color3f"}
)
QUATERNION_KINDS = frozenset({"quatf", "quatd", "quath"})
_ELEMENT_KINDS = DOUBLE_KINDS | FLOAT_KINDS | INT_KINDS | STRING_KINDS | VECTOR_KINDS | QUATERNION_KINDS
ARRAY_KINDS = frozenset(f"{kind}[]" for kind in _ELEMENT_KINDS)
VALUE_KINDS = _ELEMENT_KINDS | ARRAY_KINDS


def is_known_value_kind(value_kind: str) -> bool:
    return value_kind in VALUE_KINDS


def _as_float32(value: float) -> float:
    return float(np.float32(value))


def coerce_value(value: object, value_kind: str) -> AttributeValue:
    """Validate `value` against `value_kind` and normalise its Python type.

    Raises ValueError for unknown kinds or mismatched values.
    """
    if value_kind not in VALUE_KINDS:
        raise ValueError(f"unknown attribute value kind: {value_kind!r}")
    if value_kind in DOUBLE_KINDS or value_kind in FLOAT_KINDS:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
            raise ValueError(f"{value_kind} attribute requires a number, got {type(value).__name__}")
        return _as_float32(value) if value_kind in FLOAT_KINDS else float(value)
    if value_kind in INT_KINDS:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ValueError(f"int attribute requires an integer, got {type(value).__name__}")
        return int(value)
    if value_kind in STRING_KINDS:
        if not isinstance(value, str):
            raise ValueError(f"{value_kind} attribute requires a str, got {type(value).__name__}")
        return value
    if value_kind in VECTOR_KINDS:
        if isinstance(value, (str, bytes)):
            raise ValueError(f"{value_kind} attribute requires a Vector3")
        return Vector3.coerce(value)
    if value_kind in QUATERNION_KINDS:
        if isinstance(value, (str, bytes)):
            raise ValueError(f"{value_kind} attribute requires a Quaternion")
        return Quaternion.coerce(value)
    if isinstance(value, RawArray):
        return value
    if isinstance(value, str):
        return RawArray(value)
    raise ValueError(f"{value_kind} attribute requires a RawArray, got {type(value).__name__}")


@dataclass(frozen=True)
class Attribute:
    name: str
    value: AttributeValue
    value_kind: str
    time_varying: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("attribute name must be non-empty")
        object.__setattr__(self, "value", coerce_value(self.value, self.value_kind))

    @property
    def is_array(self) -> bool:
        return self.value_kind in ARRAY_KINDS


@dataclass(frozen=True)
class Transform:
    """Geometric-center position plus rotation about that center."""

    position: Vector3 = Vector3.ZERO
    orientation: Quaternion = Quaternion.IDENTITY

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", Vector3.coerce(self.position))
        object.__setattr__(self, "orientation", Quaternion.coerce(self.orientation))


@dataclass(frozen=True)
class Reference:
    """Pointer from a prim to an external file supplying its definition."""

    file_path: str
    kind: str | None = None

    @staticmethod
    def from_syntax(reference_path: str) -> "Reference":
        """Build from `@./file.usd@` syntax by stripping the `@` delimiters."""
        return Reference(file_path=reference_path.strip().strip("@"))

    @property
    def syntax(self) -> str:
        return f"@{self.file_path}@"

    def resolve(self, base: str | Path) -> Path:
        if self.file_path.startswith("./"):
            return Path(base) / self.file_path[2:]
        if self.file_path.startswith("/"):
            return Path(self.file_path)
        return Path(base) / self.file_path


@dataclass(frozen=True)
class Stage:
    default_prim: str | None = None
    meters_per_unit: float = 1.0
    up_axis: str = "Y"
    custom_layer_data: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "meters_per_unit", float(self.meters_per_unit))
        object.__setattr__(self, "custom_layer_data", dict(self.custom_layer_data))


@dataclass(frozen=True)
class Prim:
    name: str
    kind: str
    attributes: Mapping[str, Attribute] = field(default_factory=dict)
    transform: Transform | None = None
    children: tuple["Prim", ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    references: tuple[Reference, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("prim name must be non-empty")
        object.__setattr__(self, "attributes", dict(self.attributes))
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "metadata", dict(self.metadata))
        object.__setattr__(self, "references", tuple(self.references))

    @property
    def has_references(self) -> bool:
        return bool(self.references)

    @property
    def primary_reference(self) -> Reference | None:
        return self.references[0] if self.references else None

    def attribute_value(self, name: str, default: AttributeValue | None = None) -> AttributeValue | None:
        attribute = self.attributes.get(name)
        return attribute.value if attribute is not None else default

    def walk(self) -> Iterator["Prim"]:
        """Depth-first iteration over this prim and all descendants."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> "Prim | None":
        for prim in self.walk():
            if prim.name == name:
                return prim
        return None


@dataclass(frozen=True)
class Document:
    stage: Stage = field(default_factory=Stage)
    root_prims: tuple[Prim, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "root_prims", tuple(self.root_prims))

    def default_root(self) -> Prim | None:
        """Root prim named by `stage.default_prim`, else the first root."""
        if self.stage.default_prim is not None:
            for prim in self.root_prims:
                if prim.name == self.stage.default_prim:
                    return prim
        return self.root_prims[0] if self.root_prims else None

    def walk(self) -> Iterator[Prim]:
        for prim in self.root_prims:
            yield from prim.walk()
