"""Tests for brace-balanced prim block extraction (blocks.py)."""
from __future__ import annotations

import pytest

from scenetext.blocks import Block, extract_block, extract_prim_blocks, is_prim_declaration, split_block
from scenetext.errors import InvalidSyntaxError

NESTED = """#usda 1.0

def Xform "Outer"
{
    double3 xformOp:translate = (1.0, 0.0, 0.0)

    def Xform "Middle"
    {
        def Cone "Inner" { double height = 1.0 }
    }

    def Cylinder "Side"
    {
        double radius = 0.5
    }
}

def Cone "Second"
{
}
"""


def test_is_prim_declaration():
    assert is_prim_declaration('  def Xform "A"')
    assert not is_prim_declaration("double height = 1.0")
    assert not is_prim_declaration("def Xform")


def test_top_level_blocks_in_file_order():
    blocks = extract_prim_blocks(NESTED)
    assert [block.header for block in blocks] == ['def Xform "Outer"', 'def Cone "Second"']
    assert blocks[0].start_line == 3
    assert blocks[1].start_line == 18


def test_split_separates_own_lines_and_children():
    outer = extract_prim_blocks(NESTED)[0]
    split = split_block(outer)
    assert split.own_lines == ("double3 xformOp:translate = (1.0, 0.0, 0.0)",)
    assert split.own_line_numbers == (5,)
    assert [child.header for child in split.children] == ['def Xform "Middle"', 'def Cylinder "Side"']
    assert split.children[0].start_line == 7


def test_single_line_block_splits():
    middle = split_block(extract_prim_blocks(NESTED)[0]).children[0]
    inner = split_block(middle).children[0]
    assert split_block(inner).own_lines == ("double height = 1.0",)


def test_unbalanced_braces_raise_with_line_number():
    text = '#usda 1.0\n\ndef Xform "Broken"\n{\n    def Cone "Child"\n    {\n}\n'
    with pytest.raises(InvalidSyntaxError) as excinfo:
        extract_prim_blocks(text)
    assert excinfo.value.line == 3
    assert "line 3" in str(excinfo.value)


def test_braces_inside_metadata_and_strings_do_not_count():
    lines = [
        'def Cylinder "Tank" (',
        "    customData = {",
        '        string note = "uses { and ( freely"',
        "    }",
        ")",
        "{",
        "    double height = 2.0",
        "}",
        'def Cone "After"',
        "{",
        "}",
    ]
    block, next_index = extract_block(lines, 0)
    assert next_index == 8
    split = split_block(block)
    assert "customData" in split.declaration_metadata
    assert split.own_lines == ("double height = 2.0",)


def test_declaration_metadata_on_following_lines():
    text = 'def Xform "Engine" (\n    references = @./Engine.usd@\n)\n{\n}\n'
    split = split_block(extract_prim_blocks(text)[0])
    assert "references = @./Engine.usd@" in split.declaration_metadata
    assert split.own_lines == ()
    assert split.children == ()


def test_unterminated_metadata_raises():
    block = Block(lines=('def Xform "Engine" (', "{", "}"), start_line=4)
    with pytest.raises(InvalidSyntaxError) as excinfo:
        split_block(block)
    assert excinfo.value.line == 4


def test_unbalanced_paren_in_body_does_not_hide_closing_brace():
    lines = [
        'def Cylinder "Tank"',
        "{",
        "    double3 xformOp:translate = (0, 1.5",
        "    double height = 3.0",
        "}",
        'def Cone "Nose"',
        "{",
        "}",
    ]
    block, nxt = extract_block(lines, 0)
    assert len(block.lines) == 5
    assert nxt == 5
    assert [b.header for b in extract_prim_blocks("\n".join(lines))] == ['def Cylinder "Tank"', 'def Cone "Nose"']
