from __future__ import annotations

"""`references = @path@` extraction and resolution."""

import re
from pathlib import Path
from typing import Iterable

from .model import Prim, Reference

REFERENCES_KEY = "references ="
_ASSET_PATH_RE = re.compile(r"@([^@]+)@")


def extract_references(metadata_text: str) -> list[Reference]:
    """References declared in a prim's declaration-metadata text.

    Single form: everything strictly between the first and last `@` after
    the marker. List form (`[@a@, @b@]`): one reference per `@...@` span.
    No marker or no well-formed span yields an empty list.
    """
    marker = metadata_text.find(REFERENCES_KEY)
    if marker < 0:
        return []
    rest = metadata_text[marker + len(REFERENCES_KEY):].lstrip()
    if rest.startswith("["):
        closer = rest.find("]")
        span = rest[1:closer] if closer >= 0 else rest[1:]
        return [Reference(file_path=path.strip()) for path in _ASSET_PATH_RE.findall(span) if path.strip()]

    line = rest.splitlines()[0] if rest else ""
    first = line.find("@")
    last = line.rfind("@")
    if first < 0 or last <= first + 1:
        return []
    return [Reference.from_syntax(line[first:last + 1])]


def encode_references(references: Iterable[Reference]) -> str | None:
    """`references = ...` metadata line, or None when there are none."""
    refs = list(references)
    if not refs:
        return None
    if len(refs) == 1:
        return f"{REFERENCES_KEY} {refs[0].syntax}"
    return f"{REFERENCES_KEY} [" + ", ".join(ref.syntax for ref in refs) + "]"


def resolve_references(prim: Prim, base: str | Path) -> list[Path]:
    return [reference.resolve(base) for reference in prim.references]
