"""Convert legacy markdown lessons into block sequences.

Uses the legacy segment parser for code and output fences, and mistletoe
to recognise heading lines in the prose between them.
"""

from __future__ import annotations

import logging
from typing import Any

from mistletoe import Document
from mistletoe.block_token import Heading
from mistletoe.span_token import RawText

from .blocks_models import Block, CodeBlock, HeadingLevel, LessonEntry, OutputBlock, TextBlock
from .editor import IdFactory, new_block_id
from .legacy_parser import SegmentKind, split_legacy
from .serializer import LegacyContent, deserialize

logger = logging.getLogger(__name__)

_HEADING_LEVELS = {1: HeadingLevel.H1, 2: HeadingLevel.H2, 3: HeadingLevel.H3}


def import_legacy(text: str, *, id_factory: IdFactory = new_block_id) -> list[LessonEntry]:
    """Build a block sequence equivalent to a legacy payload.

    Args:
        text: Stored lesson content. Structured payloads are returned
            decoded, unsupported entries included.
        id_factory: Source of ids for the new blocks.

    Returns:
        Blocks in source order. An output fence directly after a code fence
        becomes an OutputBlock linked to that code block.
    """
    content = deserialize(text)
    if not isinstance(content, LegacyContent):
        return content

    blocks: list[LessonEntry] = []
    for segment in split_legacy(content.text):
        if segment.kind is SegmentKind.CODE:
            blocks.append(CodeBlock(
                id=id_factory(),
                language=segment.language or "text",
                code=segment.content,
                show_line_numbers=True,
            ))
        elif segment.kind is SegmentKind.OUTPUT:
            previous = blocks[-1] if blocks else None
            link = previous.id if isinstance(previous, CodeBlock) else None
            blocks.append(OutputBlock(id=id_factory(), output=segment.content, linked_code_block_id=link))
        else:
            blocks.extend(_text_blocks(segment.content, id_factory))

    logger.info("Imported legacy lesson into %d blocks", len(blocks))
    return blocks


def _text_blocks(markdown: str, id_factory: IdFactory) -> list[Block]:
    """Split prose into heading blocks and paragraph runs."""
    blocks: list[Block] = []
    pending: list[str] = []

    def flush() -> None:
        body = "\n".join(pending).strip("\n")
        if body.strip():
            blocks.append(TextBlock(id=id_factory(), content=body, heading=HeadingLevel.PARAGRAPH))
        pending.clear()

    for line in markdown.split("\n"):
        heading = _heading_of(line)
        if heading is None:
            pending.append(line)
            continue
        flush()
        level, title = heading
        blocks.append(TextBlock(id=id_factory(), content=title, heading=level))
    flush()
    return blocks


def _heading_of(line: str) -> tuple[HeadingLevel, str] | None:
    """Return (level, text) when ``line`` is an ATX heading of level 1-3."""
    if not line.lstrip().startswith("#"):
        return None
    tokens = list(Document(line).children)
    if len(tokens) != 1 or not isinstance(tokens[0], Heading):
        return None
    level = _HEADING_LEVELS.get(tokens[0].level)
    title = _extract_text(tokens[0]).strip()
    if level is None or not title:
        return None
    return level, title


def _extract_text(token: Any) -> str:
    """Extract plain text from a token."""
    if isinstance(token, RawText):
        return token.content
    elif getattr(token, "children", None):
        return "".join(_extract_text(child) for child in token.children)
    return getattr(token, "content", "") or ""
