from __future__ import annotations

"""Brace-balanced extraction of `def <Kind> "<Name>" ... { ... }` blocks.

All scanning is single-pass and cursor based: every helper takes a start
index and returns the index just past what it consumed, so nested calls
never share mutable position state.
"""

from dataclasses import dataclass
from typing import Sequence

from .errors import InvalidSyntaxError


@dataclass(frozen=True)
class Block:
    """Raw lines of one prim block and the file line number of the first."""

    lines: tuple[str, ...]
    start_line: int = 1

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def header(self) -> str:
        return self.lines[0].strip()


@dataclass(frozen=True)
class SplitBlock:
    """A block separated into declaration, own content and child blocks."""

    header: str
    start_line: int
    declaration_metadata: str
    own_lines: tuple[str, ...]
    own_line_numbers: tuple[int, ...]
    children: tuple[Block, ...]


def is_prim_declaration(line: str) -> bool:
    text = line.strip()
    return text.startswith("def ") and '"' in text


def extract_block(
    lines: Sequence[str],
    start: int,
    *,
    line_numbers: Sequence[int] | None = None,
) -> tuple[Block, int]:
    """Extract the block whose declaration is `lines[start]`.

    Braces are counted over every character of every line; the block ends
    when the count returns to zero after having gone positive. Characters
    inside double-quoted strings never count. Before the body opens, braces
    inside the `( ... )` declaration metadata (e.g. a `customData`
    dictionary) do not count either; once the body is open, parentheses are
    ignored so a malformed value cannot swallow the closing brace.
    """
    start_line = line_numbers[start] if line_numbers is not None else start + 1
    depth = 0
    parens = 0
    opened = False
    for i in range(start, len(lines)):
        quoted = False
        for char in lines[i]:
            if char == '"':
                quoted = not quoted
            elif quoted:
                continue
            elif opened:
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
            elif char == "(":
                parens += 1
            elif char == ")":
                parens = max(parens - 1, 0)
            elif parens:
                continue
            elif char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
        if opened and depth == 0:
            return Block(lines=tuple(lines[start:i + 1]), start_line=start_line), i + 1
    raise InvalidSyntaxError(start_line, "Unterminated prim block (unbalanced braces)")


def extract_prim_blocks(text: str) -> list[Block]:
    """All top-level prim blocks of a document, in file order."""
    lines = text.splitlines()
    blocks: list[Block] = []
    i = 0
    while i < len(lines):
        if is_prim_declaration(lines[i]):
            block, i = extract_block(lines, i)
            blocks.append(block)
        else:
            i += 1
    return blocks


def _closing_name_quote(header: str) -> int:
    first = header.find('"')
    return header.find('"', first + 1)


def _consume_parenthesized(
    lines: Sequence[str],
    row: int,
    col: int,
    start_line: int,
) -> tuple[str, int, str]:
    """Read from the `(` at `lines[row][col]` to its matching `)`.

    Returns the inner text, the row holding the `)` and the rest of that
    row after it.
    """
    depth = 0
    inner: list[str] = []
    current: list[str] = []
    r, c = row, col
    while r < len(lines):
        line = lines[r]
        quoted = False
        while c < len(line):
            char = line[c]
            if char == '"':
                quoted = not quoted
            elif quoted:
                pass
            elif char == "(":
                depth += 1
                if depth == 1:
                    c += 1
                    continue
            elif char == ")":
                depth -= 1
                if depth == 0:
                    inner.append("".join(current))
                    return "\n".join(inner), r, line[c + 1:]
            current.append(char)
            c += 1
        inner.append("".join(current))
        current = []
        r += 1
        c = 0
    raise InvalidSyntaxError(start_line + row, "Unterminated prim metadata (unbalanced parentheses)")


def split_block(block: Block) -> SplitBlock:
    """Separate a block's own lines from its nested child blocks.

    The opening brace and the final closing brace are dropped; every
    nested `def` is extracted with the same balance algorithm.
    """
    lines = block.lines
    header = lines[0].strip()
    start_line = block.start_line

    name_end = _closing_name_quote(lines[0])
    if name_end < 0:
        raise InvalidSyntaxError(start_line, "Could not extract prim name from quotes")
    row = 0
    remainder = lines[0][name_end + 1:]
    metadata = ""
    paren = remainder.find("(")
    brace = remainder.find("{")
    if paren >= 0 and (brace < 0 or paren < brace):
        metadata, row, remainder = _consume_parenthesized(lines, 0, name_end + 1 + paren, start_line)

    # Locate the opening brace of the body.
    while "{" not in remainder:
        row += 1
        if row >= len(lines):
            raise InvalidSyntaxError(start_line, "Prim block has no body")
        remainder = lines[row]
    remainder = remainder[remainder.index("{") + 1:]

    body: list[str] = [remainder]
    numbers: list[int] = [start_line + row]
    for offset in range(row + 1, len(lines)):
        body.append(lines[offset])
        numbers.append(start_line + offset)

    last = body[-1]
    body[-1] = last[:last.rfind("}")]

    own_lines: list[str] = []
    own_numbers: list[int] = []
    children: list[Block] = []
    i = 0
    while i < len(body):
        if is_prim_declaration(body[i]):
            child, i = extract_block(body, i, line_numbers=numbers)
            children.append(child)
            continue
        text = body[i].strip()
        if text:
            own_lines.append(text)
            own_numbers.append(numbers[i])
        i += 1

    return SplitBlock(
        header=header,
        start_line=start_line,
        declaration_metadata=metadata,
        own_lines=tuple(own_lines),
        own_line_numbers=tuple(own_numbers),
        children=tuple(children),
    )
