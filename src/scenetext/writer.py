from __future__ import annotations

"""Document -> canonical text.

Every prim renders in the same fixed order: declaration, `{`, attributes
(sorted by name), transform ops, children (Xform only), customData
(sorted by key), `}`. customData comes last so a consumer that drops or
mangles it still sees intact geometry above it.
"""

import logging
from typing import Callable

from .codec import encode_attribute, encode_string_entries, encode_transform, sanitize_name
from .config import Settings
from .errors import MissingRequiredAttributeError, UnsupportedKindError
from .header import write_stage_header
from .model import CONE, CYLINDER, XFORM, Document, Prim
from .references import encode_references

logger = logging.getLogger("scenetext.writer")

REQUIRED_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    CYLINDER: ("height", "radius"),
    CONE: ("height", "radius"),
    XFORM: (),
}


def _declaration(prim: Prim, indent: str) -> list[str]:
    lines = [f'def {prim.kind} "{sanitize_name(prim.name)}"']
    reference_line = encode_references(prim.references)
    if reference_line is not None:
        lines[0] += " ("
        lines.append(f"{indent}{reference_line}")
        lines.append(")")
    lines.append("{")
    return lines


def _check_required(prim: Prim) -> None:
    for attribute in REQUIRED_ATTRIBUTES.get(prim.kind, ()):
        if attribute not in prim.attributes:
            raise MissingRequiredAttributeError(prim.name, attribute)


def _render_body(prim: Prim, indent: str, children: list[str]) -> str:
    lines = _declaration(prim, indent)
    for name in sorted(prim.attributes):
        lines.append(f"{indent}{encode_attribute(prim.attributes[name])}")
    if prim.transform is not None:
        lines.extend(f"{indent}{line}" for line in encode_transform(prim.transform))
    for child in children:
        lines.append("")
        lines.extend(f"{indent}{line}" if line else "" for line in child.split("\n"))
    custom_data = encode_string_entries("customData", prim.metadata, indent)
    if custom_data:
        lines.append("")
        lines.extend(f"{indent}{line}" for line in custom_data)
    lines.append("}")
    return "\n".join(lines)


def _render_geometry(prim: Prim, settings: Settings) -> str:
    _check_required(prim)
    if prim.children:
        logger.warning(f"{prim.kind} prim '{prim.name}' has children; only Xform prims write children")
    return _render_body(prim, settings.indent, [])


def _render_xform(prim: Prim, settings: Settings) -> str:
    children = [write_prim(child, settings) for child in prim.children]
    return _render_body(prim, settings.indent, children)


_RENDERERS: dict[str, Callable[[Prim, Settings], str]] = {
    CYLINDER: _render_geometry,
    CONE: _render_geometry,
    XFORM: _render_xform,
}


def write_prim(prim: Prim, settings: Settings | None = None) -> str:
    """Render one prim (and, for Xform, its subtree).

    Raises UnsupportedKindError for kinds without a renderer.
    """
    renderer = _RENDERERS.get(prim.kind)
    if renderer is None:
        raise UnsupportedKindError(prim.kind)
    return renderer(prim, settings or Settings())


def write_text(document: Document, settings: Settings | None = None) -> str:
    settings = settings or Settings()
    header = write_stage_header(document.stage, settings)
    prims = [write_prim(prim, settings) for prim in document.root_prims]
    if not prims:
        return header + "\n"
    return header + "\n\n" + "\n\n".join(prims) + "\n"
