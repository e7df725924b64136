"""Tests for legacy_import.py - converting legacy markdown into blocks."""

from __future__ import annotations

from collections.abc import Callable

from coursecraft.lessons.blocks_models import (
    CodeBlock,
    HeadingLevel,
    OutputBlock,
    TextBlock,
    UnsupportedBlock,
)
from coursecraft.lessons.legacy_import import import_legacy
from coursecraft.lessons.serializer import deserialize, serialize


LEGACY_LESSON = """# Intro
Some text
```python
print(1)
```
**Output:**
```
1
```
"""


class TestImportLegacy:
    """Legacy segments become the matching block variants."""

    def test_full_lesson(self, id_factory: Callable[[], str]) -> None:
        assert import_legacy(LEGACY_LESSON, id_factory=id_factory) == [
            TextBlock(id="b1", content="Intro", heading=HeadingLevel.H1),
            TextBlock(id="b2", content="Some text", heading=HeadingLevel.PARAGRAPH),
            CodeBlock(id="b3", language="python", code="print(1)", show_line_numbers=True),
            OutputBlock(id="b4", output="1", linked_code_block_id="b3"),
        ]

    def test_output_without_preceding_code(self, id_factory: Callable[[], str]) -> None:
        blocks = import_legacy("Text\n**Output:**\n```\nx\n```", id_factory=id_factory)
        assert blocks[-1] == OutputBlock(id="b2", output="x", linked_code_block_id=None)

    def test_heading_levels(self, id_factory: Callable[[], str]) -> None:
        blocks = import_legacy("## Two\n### Three", id_factory=id_factory)
        assert [b.heading for b in blocks] == [HeadingLevel.H2, HeadingLevel.H3]

    def test_deep_heading_stays_paragraph(self, id_factory: Callable[[], str]) -> None:
        (block,) = import_legacy("#### Four", id_factory=id_factory)
        assert block.heading is HeadingLevel.PARAGRAPH
        assert block.content == "#### Four"

    def test_hashtag_is_not_heading(self, id_factory: Callable[[], str]) -> None:
        (block,) = import_legacy("#hashtag", id_factory=id_factory)
        assert block.heading is HeadingLevel.PARAGRAPH

    def test_heading_splits_paragraph_runs(self, id_factory: Callable[[], str]) -> None:
        blocks = import_legacy("a\nb\n# H\nc", id_factory=id_factory)
        assert [(b.content, b.heading) for b in blocks] == [
            ("a\nb", HeadingLevel.PARAGRAPH),
            ("H", HeadingLevel.H1),
            ("c", HeadingLevel.PARAGRAPH),
        ]

    def test_structured_content_returned_decoded(self) -> None:
        blocks = [TextBlock(id="t", content="x")]
        assert import_legacy(serialize(blocks)) == blocks

    def test_unsupported_entries_kept(self) -> None:
        (entry,) = import_legacy('[{"type":"mystery","id":"x"}]')
        assert isinstance(entry, UnsupportedBlock)

    def test_result_serializes_as_structured(self, id_factory: Callable[[], str]) -> None:
        blocks = import_legacy(LEGACY_LESSON, id_factory=id_factory)
        assert deserialize(serialize(blocks)) == blocks
