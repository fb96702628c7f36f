from __future__ import annotations

"""Filesystem boundary for scene documents.

This is the only module that touches the disk. The extension is checked
before any I/O; parsing and serialisation run on in-memory text.
"""

import logging
import os
import tempfile
from pathlib import Path

from .config import Settings
from .errors import (
    InvalidFileExtensionError,
    SceneFileNotFoundError,
    WritePermissionDeniedError,
)
from .model import Document
from .parser import parse_text
from .writer import write_text

logger = logging.getLogger("scenetext.fileio")


def check_extension(path: str | Path, settings: Settings | None = None) -> Path:
    settings = settings or Settings()
    path = Path(path)
    if path.suffix.lower() != settings.file_extension:
        raise InvalidFileExtensionError(expected=settings.file_extension, actual=path.suffix)
    return path


def read_document(path: str | Path, settings: Settings | None = None) -> Document:
    path = check_extension(path, settings)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            content = handle.read()
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise SceneFileNotFoundError(path) from exc
    document = parse_text(content)
    logger.info(f"Read {path} ({len(document.root_prims)} root prims)")
    return document


def write_document(document: Document, path: str | Path, settings: Settings | None = None) -> Path:
    """Serialise `document` and write it atomically to `path`.

    The text is generated before the file is opened, so a serialisation
    error never leaves a partial file behind.
    """
    settings = settings or Settings()
    path = check_extension(path, settings)
    content = write_text(document, settings)

    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
        tmp_name = None
    except (PermissionError, IsADirectoryError, FileNotFoundError) as exc:
        raise WritePermissionDeniedError(path) from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.info(f"Scene file written: {path}")
    return path


def validate_file(path: str | Path, settings: Settings | None = None) -> bool:
    """True if `path` has the expected extension and exists."""
    try:
        path = check_extension(path, settings)
    except InvalidFileExtensionError:
        return False
    return path.is_file()
