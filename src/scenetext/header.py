from __future__ import annotations

"""Stage header: `#usda 1.0` marker plus the `( ... )` layer metadata block."""

import logging

from .blocks import is_prim_declaration
from .codec import consume_dictionary, encode_string_entries, format_float, mask_quoted, sanitize_name, unquote
from .config import VERSION_MARKER, Settings
from .errors import InvalidSyntaxError
from .model import Stage

logger = logging.getLogger("scenetext.header")

VERSION_PREFIX = "#usda"
# Both spellings name the same scale (meters per scene unit); the value
# is taken as is, not inverted.
_UNIT_KEYS = ("metersPerUnit", "unitsPerMeter")


def write_stage_header(stage: Stage, settings: Settings | None = None) -> str:
    settings = settings or Settings()
    indent = settings.indent

    fields: list[str] = []
    if stage.default_prim is not None:
        fields.append(f'defaultPrim = "{sanitize_name(stage.default_prim)}"')
    fields.append(f"metersPerUnit = {format_float(stage.meters_per_unit)}")
    fields.append(f'upAxis = "{stage.up_axis}"')
    fields.extend(encode_string_entries("customLayerData", stage.custom_layer_data, indent))

    lines = [VERSION_MARKER]
    if fields:
        lines.append("(")
        lines.extend(f"{indent}{field}" for field in fields)
        lines.append(")")
    return "\n".join(lines)


def _find_matching_paren(text: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None


def _value_of(line: str, key: str) -> str | None:
    if not line.startswith(key):
        return None
    rest = line[len(key):].lstrip()
    if not rest.startswith("="):
        return None
    return rest[1:].strip()


def read_stage_header(text: str) -> Stage:
    """Parse stage metadata; a file without a `( ... )` block gets defaults."""
    lines = text.splitlines()
    first_content = next((i for i, line in enumerate(lines) if line.strip()), None)
    if first_content is None or not lines[first_content].strip().startswith(VERSION_PREFIX):
        raise InvalidSyntaxError(1 if first_content is None else first_content + 1, "Missing #usda header")

    preamble_lines: list[str] = []
    for line in lines:
        if is_prim_declaration(line):
            break
        preamble_lines.append(line)
    preamble = "\n".join(preamble_lines)
    masked = mask_quoted(preamble)

    open_index = masked.find("(")
    if open_index < 0:
        return Stage()
    close_index = _find_matching_paren(masked, open_index)
    if close_index is None:
        line_number = preamble.count("\n", 0, open_index) + 1
        raise InvalidSyntaxError(line_number, "Unterminated stage metadata (unbalanced parentheses)")

    metadata_lines = [line.strip() for line in preamble[open_index + 1:close_index].splitlines()]
    metadata_lines = [line for line in metadata_lines if line]

    default_prim: str | None = None
    meters_per_unit = 1.0
    up_axis = "Y"
    custom_layer_data: dict[str, str] = {}

    i = 0
    while i < len(metadata_lines):
        line = metadata_lines[i]
        key = line.split("=", 1)[0].strip()
        value = _value_of(line, key) if key else None
        if key == "defaultPrim" and value is not None:
            default_prim = unquote(value) or None
        elif key in _UNIT_KEYS and value is not None:
            try:
                meters_per_unit = float(value)
            except ValueError:
                logger.warning(f"Ignoring malformed unit scale {value!r}; using {meters_per_unit}")
        elif key == "upAxis" and value is not None:
            up_axis = unquote(value) or "Y"
        elif key == "customLayerData" and "{" in line:
            entries, i = consume_dictionary(metadata_lines, i)
            custom_layer_data.update(entries)
            continue
        elif "=" in line and line.split("=", 1)[1].strip().startswith("{"):
            _, i = consume_dictionary(metadata_lines, i)
            continue
        else:
            logger.debug(f"Ignoring stage metadata line: {line!r}")
        i += 1

    return Stage(
        default_prim=default_prim,
        meters_per_unit=meters_per_unit,
        up_axis=up_axis,
        custom_layer_data=custom_layer_data,
    )
