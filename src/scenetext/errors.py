from __future__ import annotations

"""Error taxonomy for reading and writing scene files.

Structural problems (unbalanced blocks, missing version marker, unknown
prim kinds at write time, wrong extension) raise one of these. Value-level
problems inside an otherwise valid file never do: the codec falls back to
a zero/identity default and logs a warning instead.
"""

from pathlib import Path


class SceneFileError(Exception):
    """Base class for every error raised by scenetext."""


class SceneFileNotFoundError(SceneFileError):
    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f"Scene file not found: {self.path}")


class InvalidSyntaxError(SceneFileError):
    def __init__(self, line: int, message: str):
        self.line = line
        self.message = message
        super().__init__(f"Invalid syntax at line {line}: {message}")


class UnsupportedKindError(SceneFileError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unsupported prim kind: {kind}")


class MissingRequiredAttributeError(SceneFileError):
    def __init__(self, prim: str, attribute: str):
        self.prim = prim
        self.attribute = attribute
        super().__init__(f"Missing required attribute '{attribute}' on prim '{prim}'")


class WritePermissionDeniedError(SceneFileError):
    def __init__(self, path: str | Path):
        self.path = str(path)
        super().__init__(f"Write permission denied: {self.path}")


class InvalidFileExtensionError(SceneFileError):
    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid file extension. Expected {expected}, got {actual}")


class MeshConversionError(SceneFileError):
    """Array attributes could not be turned into triangle mesh buffers."""
