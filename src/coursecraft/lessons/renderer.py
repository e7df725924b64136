"""Turn stored lesson content into display instructions.

Both storage formats are accepted. Block sequences map one block to one
instruction; legacy markdown goes through the legacy segment parser. The
output is a list of format-agnostic RenderInstruction values that a view
layer can draw without knowing which format the lesson was stored in.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from typing import Union

from ..errors import CourseCraftError, UnknownBlockTypeError
from ..settings import LIMITS
from .blocks_models import (
    CodeBlock,
    ExplanationBlock,
    HeadingLevel,
    LessonEntry,
    OutputBlock,
    PracticeBlock,
    TextBlock,
    UnsupportedBlock,
)
from .languages import DEFAULT_LANGUAGES, LanguageTable
from .legacy_parser import LegacySegment, SegmentKind, split_legacy
from .markdown_html import sanitize_html, to_safe_html
from .serializer import LegacyContent, deserialize

logger = logging.getLogger(__name__)


# =============================================================================
# Render instructions
# =============================================================================


@dataclass(frozen=True)
class StyledText:
    """Prose as sanitized HTML. ``heading`` is set for heading text blocks."""

    markdown: str
    html: str
    block_id: str | None = None
    heading: HeadingLevel | None = None


@dataclass(frozen=True)
class CodeBlockView:
    language: str
    code: str
    label: str
    grammar: str | None = None
    title: str | None = None
    show_line_numbers: bool = True
    block_id: str | None = None

    @property
    def lines(self) -> list[str]:
        return self.code.split("\n")


@dataclass(frozen=True)
class OutputView:
    """Program output, whitespace preserved.

    ``linked`` is true only when ``linked_code_block_id`` names a code block
    of the same lesson.
    """

    output: str
    block_id: str | None = None
    linked_code_block_id: str | None = None
    linked: bool = False
    collapsible: bool = False


@dataclass(frozen=True)
class ExplanationView:
    markdown: str
    html: str
    block_id: str | None = None


@dataclass(frozen=True)
class PracticeView:
    block_id: str
    question: str
    question_html: str
    xp_value: int
    hints: tuple[str, ...] = field(default_factory=tuple)
    expected_output: str | None = None
    completed: bool = False


@dataclass(frozen=True)
class UnsupportedView:
    """Placeholder for one entry that could not be decoded."""

    block_id: str
    block_type: str | None
    reason: str


RenderInstruction = Union[
    StyledText, CodeBlockView, OutputView, ExplanationView, PracticeView, UnsupportedView
]


# =============================================================================
# Renderer
# =============================================================================


class RenderedLesson:
    """Lazy, restartable sequence of instructions for one payload.

    Each iteration re-derives the instructions from the payload; nothing is
    cached between iterations.
    """

    def __init__(
        self,
        renderer: ContentRenderer,
        text: str,
        completed_block_ids: frozenset[str],
    ) -> None:
        self._renderer = renderer
        self._text = text
        self._completed = completed_block_ids

    def __iter__(self) -> Iterator[RenderInstruction]:
        return self._renderer._instructions(self._text, self._completed)

    @property
    def is_legacy(self) -> bool:
        return isinstance(deserialize(self._text), LegacyContent)


class ContentRenderer:
    """Render lesson payloads with an injected language table.

    Args:
        languages: Language table used for code labels and grammars.
        output_collapse_lines: Outputs with more lines than this are
            marked collapsible.
    """

    def __init__(
        self,
        languages: LanguageTable = DEFAULT_LANGUAGES,
        output_collapse_lines: int = LIMITS.OUTPUT_COLLAPSE_LINES,
    ) -> None:
        self.languages = languages
        self.output_collapse_lines = output_collapse_lines

    def render(
        self,
        text: str,
        completed_block_ids: Collection[str] = (),
    ) -> RenderedLesson:
        """Render a stored payload.

        Args:
            text: The lesson's stored content, either format.
            completed_block_ids: Practice block ids the viewer has
                completed, as supplied by the completion tracker.
        """
        return RenderedLesson(self, text, frozenset(completed_block_ids))

    def _instructions(self, text: str, completed: frozenset[str]) -> Iterator[RenderInstruction]:
        content = deserialize(text)
        if isinstance(content, LegacyContent):
            for segment in split_legacy(content.text):
                yield self._render_segment(segment)
            return

        code_ids = {entry.id for entry in content if isinstance(entry, CodeBlock)}
        for entry in content:
            try:
                yield self._render_entry(entry, code_ids, completed)
            except CourseCraftError as e:
                logger.warning("Could not render block %r: %s", getattr(entry, "id", ""), e.message)
                yield UnsupportedView(block_id=getattr(entry, "id", ""), block_type=None, reason=e.message)

    def _render_entry(
        self,
        entry: LessonEntry,
        code_ids: set[str],
        completed: frozenset[str],
    ) -> RenderInstruction:
        if isinstance(entry, TextBlock):
            return self._render_text(entry)
        if isinstance(entry, CodeBlock):
            return CodeBlockView(
                language=entry.language,
                code=entry.code,
                label=self.languages.label_for(entry.language),
                grammar=self.languages.grammar_for(entry.language),
                title=entry.title,
                show_line_numbers=entry.show_line_numbers,
                block_id=entry.id,
            )
        if isinstance(entry, OutputBlock):
            link = entry.linked_code_block_id
            return OutputView(
                output=entry.output,
                block_id=entry.id,
                linked_code_block_id=link,
                linked=link is not None and link in code_ids,
                collapsible=self._is_collapsible(entry.output),
            )
        if isinstance(entry, ExplanationBlock):
            return ExplanationView(markdown=entry.content, html=to_safe_html(entry.content), block_id=entry.id)
        if isinstance(entry, PracticeBlock):
            return PracticeView(
                block_id=entry.id,
                question=entry.question,
                question_html=to_safe_html(entry.question),
                xp_value=entry.xp_value,
                hints=entry.hints,
                expected_output=entry.expected_output,
                completed=entry.id in completed,
            )
        if isinstance(entry, UnsupportedBlock):
            return UnsupportedView(block_id=entry.id, block_type=entry.raw_type, reason=entry.reason)
        raise UnknownBlockTypeError(f"Cannot render {type(entry).__name__}", block_type=type(entry).__name__)

    def _render_text(self, block: TextBlock) -> StyledText:
        level = HeadingLevel(block.heading)
        if level is HeadingLevel.PARAGRAPH:
            return StyledText(markdown=block.content, html=to_safe_html(block.content), block_id=block.id)
        # Headings are plain text, not markdown
        tag = level.value
        markup = sanitize_html(f"<{tag}>{html.escape(block.content, quote=False)}</{tag}>")
        return StyledText(markdown=block.content, html=markup, block_id=block.id, heading=level)

    def _render_segment(self, segment: LegacySegment) -> RenderInstruction:
        if segment.kind is SegmentKind.OUTPUT:
            return OutputView(output=segment.content, collapsible=self._is_collapsible(segment.content))
        if segment.kind is SegmentKind.CODE:
            language = segment.language or "text"
            return CodeBlockView(
                language=language,
                code=segment.content,
                label=self.languages.label_for(language),
                grammar=self.languages.grammar_for(language),
            )
        return StyledText(markdown=segment.content, html=to_safe_html(segment.content))

    def _is_collapsible(self, output: str) -> bool:
        return len(output.split("\n")) > self.output_collapse_lines


_default_renderer = ContentRenderer()


def render(
    text: str,
    completed_block_ids: Collection[str] = (),
    *,
    languages: LanguageTable | None = None,
) -> RenderedLesson:
    """Render a stored payload with the default configuration.

    Pass ``languages`` to use a different language table for this call.
    """
    renderer = _default_renderer if languages is None else ContentRenderer(languages=languages)
    return renderer.render(text, completed_block_ids)
