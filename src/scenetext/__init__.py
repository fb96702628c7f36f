"""scenetext -- read and write `#usda 1.0` scene files for component geometry.

Core modules:
  - model:       Document, Stage, Prim, Attribute, Transform, Reference
  - header:      Stage header codec
  - blocks:      Brace-balanced prim block extraction
  - codec:       Attribute / transform / array value codec
  - references:  `references = @path@` extraction and resolution
  - parser:      Text -> Document (recursive prim tree builder)
  - writer:      Document -> canonical text
  - fileio:      Extension-checked, atomic file read/write

Extras:
  - builders:    Cylinder / Cone / assembly constructors
  - mesh:        points / faceVertexIndices -> numpy buffers
  - openusd:     Conversion to and from `pxr` stages (needs usd-core)
"""

from .builders import assembly, cone, cylinder, single_prim_document
from .config import Settings, load_settings
from .errors import (
    InvalidFileExtensionError,
    InvalidSyntaxError,
    MeshConversionError,
    MissingRequiredAttributeError,
    SceneFileError,
    SceneFileNotFoundError,
    UnsupportedKindError,
    WritePermissionDeniedError,
)
from .fileio import read_document, validate_file, write_document
from .model import (
    CONE,
    CYLINDER,
    TYPELESS_KIND,
    XFORM,
    Attribute,
    Document,
    Prim,
    Quaternion,
    RawArray,
    Reference,
    Stage,
    Transform,
    Vector3,
)
from .parser import parse_prim, parse_text
from .references import extract_references, resolve_references
from .writer import write_prim, write_text

__all__ = [
    # model
    "Attribute",
    "CONE",
    "CYLINDER",
    "Document",
    "Prim",
    "Quaternion",
    "RawArray",
    "Reference",
    "Stage",
    "TYPELESS_KIND",
    "Transform",
    "Vector3",
    "XFORM",
    # errors
    "InvalidFileExtensionError",
    "InvalidSyntaxError",
    "MeshConversionError",
    "MissingRequiredAttributeError",
    "SceneFileError",
    "SceneFileNotFoundError",
    "UnsupportedKindError",
    "WritePermissionDeniedError",
    # config
    "Settings",
    "load_settings",
    # text engine
    "extract_references",
    "parse_prim",
    "parse_text",
    "resolve_references",
    "write_prim",
    "write_text",
    # files
    "read_document",
    "validate_file",
    "write_document",
    # builders
    "assembly",
    "cone",
    "cylinder",
    "single_prim_document",
]
