"""Tests for blocks_models.py - lesson block variants.

Tests:
- camelCase persisted keys and optional field omission
- Decoding with defaults
- Field validation on decode
- Unknown block types
"""

from __future__ import annotations

import pytest

from coursecraft.errors import MalformedBlockError, UnknownBlockTypeError
from coursecraft.lessons.blocks_models import (
    BLOCK_LABELS,
    BlockType,
    CodeBlock,
    ExplanationBlock,
    HeadingLevel,
    OutputBlock,
    PracticeBlock,
    TextBlock,
    UnsupportedBlock,
    block_from_dict,
)


# =============================================================================
# Encoding
# =============================================================================


class TestToDict:
    """Persisted form of each variant."""

    def test_text_block(self) -> None:
        block = TextBlock(id="t1", content="Intro", heading=HeadingLevel.H2)
        assert block.to_dict() == {"type": "text", "id": "t1", "content": "Intro", "heading": "h2"}

    def test_code_block_omits_missing_title(self) -> None:
        block = CodeBlock(id="c1", language="python", code="print(1)")
        assert block.to_dict() == {
            "type": "code",
            "id": "c1",
            "language": "python",
            "code": "print(1)",
            "showLineNumbers": True,
        }

    def test_code_block_with_title(self) -> None:
        block = CodeBlock(id="c1", language="sql", code="SELECT 1", title="Query", show_line_numbers=False)
        data = block.to_dict()
        assert data["title"] == "Query"
        assert data["showLineNumbers"] is False

    def test_output_block_link(self) -> None:
        assert "linkedCodeBlockId" not in OutputBlock(id="o1", output="1").to_dict()
        linked = OutputBlock(id="o1", output="1", linked_code_block_id="c1")
        assert linked.to_dict()["linkedCodeBlockId"] == "c1"

    def test_practice_block(self) -> None:
        block = PracticeBlock(id="p1", question="Q?", xp_value=10, hints=("a", "b"))
        assert block.to_dict() == {
            "type": "practice",
            "id": "p1",
            "question": "Q?",
            "xpValue": 10,
            "hints": ["a", "b"],
        }

    def test_practice_block_optional_fields(self) -> None:
        block = PracticeBlock(id="p1", expected_output="42", validation_rule="exact")
        data = block.to_dict()
        assert data["expectedOutput"] == "42"
        assert data["validationRule"] == "exact"


# =============================================================================
# Decoding
# =============================================================================


class TestFromDict:
    """Decoding entries back into variants."""

    def test_text_heading_defaults_to_paragraph(self) -> None:
        block = block_from_dict({"type": "text", "id": "t1", "content": "x"})
        assert block == TextBlock(id="t1", content="x", heading=HeadingLevel.PARAGRAPH)

    def test_code_show_line_numbers_defaults_true(self) -> None:
        block = block_from_dict({"type": "code", "id": "c1", "language": "python", "code": ""})
        assert isinstance(block, CodeBlock)
        assert block.show_line_numbers is True

    def test_explanation(self) -> None:
        block = block_from_dict({"type": "explanation", "id": "e1", "content": "Why"})
        assert block == ExplanationBlock(id="e1", content="Why")

    def test_practice_hints_become_tuple(self) -> None:
        block = block_from_dict({"type": "practice", "id": "p1", "question": "", "xpValue": 5, "hints": ["h"]})
        assert isinstance(block, PracticeBlock)
        assert block.hints == ("h",)
        assert block.xp_value == 5

    def test_to_dict_from_dict_is_identity(self) -> None:
        block = PracticeBlock(id="p1", question="Q", expected_output="1", xp_value=3, hints=("x",))
        assert block_from_dict(block.to_dict()) == block

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(UnknownBlockTypeError) as exc:
            block_from_dict({"type": "mystery", "id": "x"})
        assert exc.value.block_type == "mystery"
        assert exc.value.block_id == "x"

    def test_non_object_entry_raises(self) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict(["text"])

    def test_missing_id_raises(self) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict({"type": "text", "content": "x"})

    @pytest.mark.parametrize("xp_value", [-1, "10", 1.5, True])
    def test_bad_xp_value_raises(self, xp_value: object) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict({"type": "practice", "id": "p1", "xpValue": xp_value})

    def test_bad_heading_raises(self) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict({"type": "text", "id": "t1", "heading": "h4"})

    def test_code_without_language_raises(self) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict({"type": "code", "id": "c1", "code": "x"})

    def test_hints_must_be_strings(self) -> None:
        with pytest.raises(MalformedBlockError):
            block_from_dict({"type": "practice", "id": "p1", "hints": [1, 2]})


class TestUnsupportedBlock:
    """Undecodable entries keep their raw form."""

    def test_exposes_id_and_type(self) -> None:
        block = UnsupportedBlock(raw={"type": "mystery", "id": "x", "extra": 1}, reason="unknown")
        assert block.id == "x"
        assert block.raw_type == "mystery"
        assert block.to_dict() == {"type": "mystery", "id": "x", "extra": 1}

    def test_non_dict_raw(self) -> None:
        block = UnsupportedBlock(raw=42, reason="not an object")
        assert block.id == ""
        assert block.raw_type is None


class TestBlockTypes:
    def test_every_type_has_a_label(self) -> None:
        assert set(BLOCK_LABELS) == set(BlockType)
