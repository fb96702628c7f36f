from __future__ import annotations

"""Attribute and transform codec for prim bodies.

Decoding works on the stripped lines that belong to a single prim (child
blocks already removed). Value-level problems never raise: numbers fall
back to 0, vectors to zero and quaternions to identity, each with a
logged warning. Only unterminated multi-line arrays are treated as
structural errors.
"""

import logging
import re
from typing import Iterable, Sequence

import numpy as np

from .errors import InvalidSyntaxError
from .model import (
    ARRAY_KINDS,
    DOUBLE_KINDS,
    FLOAT_KINDS,
    INT_KINDS,
    QUATERNION_KINDS,
    STRING_KINDS,
    TYPELESS_KIND,
    VECTOR_KINDS,
    Attribute,
    AttributeValue,
    Quaternion,
    RawArray,
    Transform,
    Vector3,
    is_known_value_kind,
)

logger = logging.getLogger("scenetext.codec")

TRANSFORM_PREFIX = "xformOp"
TRANSLATE_KEY = "xformOp:translate ="
ORIENT_KEY = "xformOp:orient ="
XFORM_OP_ORDER_LINE = 'uniform token[] xformOpOrder = ["xformOp:translate", "xformOp:orient"]'
CUSTOM_DATA_KEY = "customData"

_ATTRIBUTE_QUALIFIERS = frozenset({"uniform", "custom", "varying"})
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?(?:inf|nan)")
_INTEGER_RE = re.compile(r"[-+]?\d+")
_TUPLE_RE = re.compile(r"\(([^()]*)\)")


# =========================================================================
# Declarations
# =========================================================================

def parse_prim_header(line: str, line_number: int = 1) -> tuple[str, str]:
    """Return `(kind, name)` from a `def <Kind> "<Name>"` declaration.

    The name runs from the first quote to its closing quote, so it may
    contain `(` or `{`; anything after the closing quote is metadata/body.
    A bare `def "Name"` yields TYPELESS_KIND.
    """
    text = line.strip()
    if not text.startswith("def"):
        raise InvalidSyntaxError(line_number, f"Invalid prim header format: {text!r}")
    declaration = text[3:]
    if declaration[:1] not in (" ", "\t", '"'):
        raise InvalidSyntaxError(line_number, f"Invalid prim header format: {text!r}")
    first_quote = declaration.find('"')
    if first_quote < 0:
        raise InvalidSyntaxError(line_number, "Could not extract prim name from quotes")
    last_quote = declaration.find('"', first_quote + 1)
    if last_quote < 0:
        raise InvalidSyntaxError(line_number, "Could not extract prim name from quotes")
    name = declaration[first_quote + 1:last_quote]
    if not name:
        raise InvalidSyntaxError(line_number, "Empty prim name")
    type_tokens = declaration[:first_quote].split()
    kind = type_tokens[-1] if type_tokens else TYPELESS_KIND
    return kind, name


# =========================================================================
# Scalar and vector values
# =========================================================================

def unquote(text: str) -> str:
    """Strip one layer of surrounding double quotes, if present."""
    value = text.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def parse_float(text: str, default: float = 0.0) -> float:
    try:
        return float(text.strip())
    except ValueError:
        logger.warning(f"Failed to parse number from: {text!r}; using {default}")
        return default


def parse_int(text: str, default: int = 0) -> int:
    try:
        return int(text.strip())
    except ValueError:
        logger.warning(f"Failed to parse integer from: {text!r}; using {default}")
        return default


def _split_components(text: str) -> list[str]:
    inner = text.strip().strip("()")
    return [part.strip() for part in inner.split(",")]


def _parse_components(text: str, count: int) -> list[float] | None:
    components = _split_components(text)
    if len(components) != count:
        return None
    try:
        return [float(part) for part in components]
    except ValueError:
        return None


def parse_vector3(text: str) -> Vector3:
    values = _parse_components(text, 3)
    if values is None:
        logger.warning(f"Failed to parse Vector3 from: {text!r}")
        return Vector3.ZERO
    return Vector3(*values)


def parse_quaternion(text: str) -> Quaternion:
    values = _parse_components(text, 4)
    if values is None:
        logger.warning(f"Failed to parse Quaternion from: {text!r}")
        return Quaternion.IDENTITY
    return Quaternion(*values)


def decode_value(text: str, value_kind: str) -> AttributeValue:
    """Decode the right-hand side of an attribute line by its value kind."""
    clean = text.strip()
    if value_kind in DOUBLE_KINDS or value_kind in FLOAT_KINDS:
        return parse_float(clean)
    if value_kind in INT_KINDS:
        return parse_int(clean)
    if value_kind in STRING_KINDS:
        return unquote(clean.strip("@")) if value_kind == "asset" else unquote(clean)
    if value_kind in VECTOR_KINDS:
        return parse_vector3(clean)
    if value_kind in QUATERNION_KINDS:
        return parse_quaternion(clean)
    if value_kind in ARRAY_KINDS:
        if clean.startswith("[") and clean.endswith("]"):
            clean = clean[1:-1]
        return RawArray(_join_array_pieces([clean]))
    raise ValueError(f"unknown attribute value kind: {value_kind!r}")


# =========================================================================
# Dictionaries (customData / customLayerData)
# =========================================================================

def parse_string_entry(line: str) -> tuple[str, str] | None:
    """Parse `string key = "value"`; anything else yields None."""
    text = line.strip()
    if not text.startswith("string "):
        return None
    rest = text[len("string "):]
    if "=" not in rest:
        return None
    key, raw_value = rest.split("=", 1)
    key = key.strip()
    raw_value = raw_value.strip()
    if not key or not (len(raw_value) >= 2 and raw_value.startswith('"') and raw_value.endswith('"')):
        return None
    return key, raw_value[1:-1]


def mask_quoted(text: str) -> str:
    """`text` with the contents of double-quoted strings blanked out.

    Length and positions are preserved, so indices found in the mask can
    slice the original text. Strings never span lines.
    """
    chars = []
    quoted = False
    for char in text:
        if char == '"':
            quoted = not quoted
            chars.append(char)
        elif char == "\n":
            quoted = False
            chars.append(char)
        else:
            chars.append(" " if quoted else char)
    return "".join(chars)


def consume_dictionary(lines: Sequence[str], start: int) -> tuple[dict[str, str], int]:
    """Read the `{ ... }` dictionary opened on `lines[start]`.

    Returns the top-level string entries and the index just past the
    closing brace. Nested dictionaries are skipped. Braces inside quoted
    values do not count.
    """
    opener = lines[start]
    masked = mask_quoted(opener)
    brace = masked.find("{")
    masked_after = masked[brace + 1:]
    if "}" in masked_after:
        after_open = opener[brace + 1:]
        entry = parse_string_entry(after_open[:masked_after.rfind("}")])
        return (dict([entry]) if entry else {}), start + 1

    entries: dict[str, str] = {}
    depth = 1
    i = start + 1
    while i < len(lines):
        line = lines[i].strip()
        masked = mask_quoted(line)
        opens = masked.count("{")
        closes = masked.count("}")
        if depth == 1 and opens == 0 and closes == 0:
            entry = parse_string_entry(line)
            if entry is not None:
                entries[entry[0]] = entry[1]
            elif line:
                logger.debug(f"Skipping non-string dictionary entry: {line!r}")
        depth += opens - closes
        i += 1
        if depth <= 0:
            return entries, i
    logger.warning("Dictionary block is missing its closing brace; keeping entries read so far")
    return entries, i


def _opens_dictionary(line: str, key: str) -> bool:
    text = line.strip()
    if not text.startswith(key):
        return False
    rest = text[len(key):].lstrip()
    return rest.startswith("=") and rest[1:].lstrip().startswith("{")


def decode_custom_data(lines: Sequence[str]) -> dict[str, str]:
    """Collect `customData = { string k = "v" ... }` entries.

    A missing block is not an error; it yields an empty mapping.
    """
    custom_data: dict[str, str] = {}
    i = 0
    while i < len(lines):
        if _opens_dictionary(lines[i], CUSTOM_DATA_KEY):
            entries, i = consume_dictionary(lines, i)
            custom_data.update(entries)
        else:
            i += 1
    return custom_data


# =========================================================================
# Attributes
# =========================================================================

def _join_array_pieces(pieces: Iterable[str]) -> str:
    cleaned = []
    for piece in pieces:
        text = piece.strip().strip(",").strip()
        if text:
            cleaned.append(text)
    return ", ".join(cleaned)


def consume_array(
    lines: Sequence[str],
    start: int,
    first_fragment: str,
    *,
    line_numbers: Sequence[int] | None = None,
) -> tuple[str, int]:
    """Consume a multi-line `[ ... ]` array whose `[` sits on `lines[start]`.

    `first_fragment` is whatever followed the `[` on the opening line.
    Returns the comma-joined element text and the index past the closer.
    """
    pieces = [first_fragment]
    i = start + 1
    while i < len(lines):
        line = lines[i]
        if "]" in line:
            pieces.append(line[:line.index("]")])
            return _join_array_pieces(pieces), i + 1
        pieces.append(line)
        i += 1
    line = line_numbers[start] if line_numbers is not None else start + 1
    raise InvalidSyntaxError(line, "Unterminated array attribute")


def _split_declarator(left: str) -> tuple[str, str] | None:
    tokens = left.split()
    if len(tokens) < 2:
        return None
    if any(token not in _ATTRIBUTE_QUALIFIERS for token in tokens[:-2]):
        return None
    return tokens[-2], tokens[-1]


def _is_structural(line: str) -> bool:
    return (
        not line
        or line.startswith("def ")
        or line.startswith(CUSTOM_DATA_KEY)
        or line.startswith("#")
        or line in ("{", "}", "(", ")")
    )


def decode_attributes(
    lines: Sequence[str],
    *,
    line_numbers: Sequence[int] | None = None,
) -> dict[str, Attribute]:
    """Decode generic attribute lines of a prim body.

    Transform ops, the op-order directive, customData and other
    dictionary-valued lines are skipped. Lines with an unknown value
    kind are dropped with a warning.
    """
    attributes: dict[str, Attribute] = {}
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if "=" in line and line.split("=", 1)[1].strip().startswith("{"):
            _, i = consume_dictionary(lines, i)
            continue
        if _is_structural(line) or "=" not in line:
            i += 1
            continue

        left, right = line.split("=", 1)
        right = right.strip()
        declarator = _split_declarator(left)
        if declarator is None:
            i += 1
            continue
        value_kind, name = declarator

        if value_kind.endswith("[]") and right.startswith("[") and "]" not in right:
            raw, i = consume_array(lines, i, right[1:], line_numbers=line_numbers)
            right = f"[{raw}]"
        else:
            i += 1

        if name.startswith(TRANSFORM_PREFIX) or "." in name:
            continue
        if not is_known_value_kind(value_kind):
            logger.warning(f"Skipping attribute '{name}' with unsupported value kind '{value_kind}'")
            continue
        attributes[name] = Attribute(name=name, value=decode_value(right, value_kind), value_kind=value_kind)
    return attributes


# =========================================================================
# Transform
# =========================================================================

def _value_after_equals(line: str) -> str:
    return line[line.index("=") + 1:].strip()


def decode_transform(lines: Sequence[str]) -> Transform | None:
    """Find translate/orient ops anywhere on a line.

    Neither present -> None; one present -> the other defaults.
    """
    position = Vector3.ZERO
    orientation = Quaternion.IDENTITY
    has_transform = False
    for line in lines:
        if TRANSLATE_KEY in line:
            position = parse_vector3(_value_after_equals(line))
            has_transform = True
        elif ORIENT_KEY in line:
            orientation = parse_quaternion(_value_after_equals(line))
            has_transform = True
    return Transform(position=position, orientation=orientation) if has_transform else None


# =========================================================================
# String-encoded point / index arrays
# =========================================================================

def _array_body(text: str | RawArray) -> str:
    body = text.text if isinstance(text, RawArray) else str(text)
    body = body.strip()
    if body.startswith("[") and body.endswith("]"):
        body = body[1:-1]
    return body


def parse_point_array(text: str | RawArray) -> np.ndarray:
    """Decode `[(x,y,z), ...]` or a flat `[x, y, z, ...]` list into (N, 3).

    Raises ValueError if elements cannot form 3-component points.
    """
    body = _array_body(text)
    tuples = _TUPLE_RE.findall(body)
    if tuples:
        rows = []
        for item in tuples:
            values = [float(v) for v in _NUMBER_RE.findall(item)]
            if len(values) != 3:
                raise ValueError(f"point must have 3 components, got {item!r}")
            rows.append(values)
        return np.asarray(rows, dtype=np.float64).reshape(-1, 3)
    flat = [float(v) for v in _NUMBER_RE.findall(body)]
    if len(flat) % 3 != 0:
        raise ValueError("flat point array length is not a multiple of 3")
    return np.asarray(flat, dtype=np.float64).reshape(-1, 3)


def parse_index_array(text: str | RawArray) -> np.ndarray:
    """Decode `[i0, i1, ...]`; any element count is accepted here."""
    body = _array_body(text)
    return np.asarray([int(v) for v in _INTEGER_RE.findall(body)], dtype=np.int64)


def parse_number_array(text: str | RawArray) -> np.ndarray:
    """Every numeric literal of an array, flattened, in order."""
    body = _array_body(text)
    return np.asarray([float(v) for v in _NUMBER_RE.findall(body)], dtype=np.float64)


def encode_point_array(points: Sequence[Sequence[float]] | np.ndarray) -> RawArray:
    arr = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return RawArray(", ".join(f"({format_float(x)}, {format_float(y)}, {format_float(z)})" for x, y, z in arr))


def encode_index_array(indices: Sequence[int] | np.ndarray) -> RawArray:
    return RawArray(", ".join(str(int(i)) for i in np.asarray(indices).reshape(-1)))


# =========================================================================
# Encoding
# =========================================================================

def sanitize_name(name: str) -> str:
    """Prim names are written with spaces replaced by underscores."""
    return name.replace(" ", "_")


def format_float(value: float) -> str:
    return repr(float(value))


def format_float32(value: float) -> str:
    return str(np.float32(value))


def encode_value(value: AttributeValue, value_kind: str) -> str:
    if value_kind in DOUBLE_KINDS:
        return format_float(value)
    if value_kind in FLOAT_KINDS:
        return format_float32(value)
    if value_kind in INT_KINDS:
        return str(int(value))
    if value_kind == "asset":
        return f"@{value}@"
    if value_kind in STRING_KINDS:
        return f'"{value}"'
    if value_kind in VECTOR_KINDS:
        return "(" + ", ".join(format_float(v) for v in value) + ")"
    if value_kind in QUATERNION_KINDS:
        return "(" + ", ".join(format_float(v) for v in value) + ")"
    if value_kind in ARRAY_KINDS:
        return f"[{value.text}]"
    raise ValueError(f"unknown attribute value kind: {value_kind!r}")


def encode_attribute(attribute: Attribute) -> str:
    value = encode_value(attribute.value, attribute.value_kind)
    return f"{attribute.value_kind} {attribute.name} = {value}"


def encode_transform(transform: Transform) -> list[str]:
    """The three transform lines, always emitted together."""
    position = ", ".join(format_float(v) for v in transform.position)
    orientation = ", ".join(format_float(v) for v in transform.orientation)
    return [
        f"double3 xformOp:translate = ({position})",
        f"quatf xformOp:orient = ({orientation})",
        XFORM_OP_ORDER_LINE,
    ]


def encode_string_entries(key: str, entries: dict[str, str] | None, indent: str) -> list[str]:
    """`key = { string k = "v" ... }` block with sorted keys, or nothing."""
    if not entries:
        return []
    lines = [f"{key} = {{"]
    for entry_key in sorted(entries):
        lines.append(f'{indent}string {entry_key} = "{entries[entry_key]}"')
    lines.append("}")
    return lines
