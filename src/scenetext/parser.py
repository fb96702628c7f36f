from __future__ import annotations

"""Text -> Document. Builds the recursive Prim tree from extracted blocks.

Prim kinds are not checked here; any `def <Kind>` is accepted so files
written by newer producers still load. Kind checks happen at write time.
"""

import logging

from .blocks import Block, extract_prim_blocks, split_block
from .codec import decode_attributes, decode_custom_data, decode_transform, parse_prim_header
from .header import read_stage_header
from .model import Document, Prim
from .references import extract_references

logger = logging.getLogger("scenetext.parser")


def parse_prim(block: Block) -> Prim:
    """Parse one prim block, recursing into nested child blocks."""
    split = split_block(block)
    kind, name = parse_prim_header(split.header, split.start_line)

    declaration_lines = [line.strip() for line in split.declaration_metadata.splitlines()]
    # customData may live in the declaration metadata (external tooling) or
    # at the end of the body (our own writer); the body wins on conflicts.
    metadata = decode_custom_data(declaration_lines)
    metadata.update(decode_custom_data(split.own_lines))

    attributes = decode_attributes(split.own_lines, line_numbers=split.own_line_numbers)
    transform = decode_transform(split.own_lines)
    references = extract_references(split.declaration_metadata)
    children = [parse_prim(child) for child in split.children]

    return Prim(
        name=name,
        kind=kind,
        attributes=attributes,
        transform=transform,
        children=children,
        metadata=metadata,
        references=references,
    )


def parse_text(text: str) -> Document:
    stage = read_stage_header(text)
    root_prims = [parse_prim(block) for block in extract_prim_blocks(text)]
    logger.debug(f"Parsed {len(root_prims)} root prims (defaultPrim={stage.default_prim!r})")
    return Document(stage=stage, root_prims=root_prims)
