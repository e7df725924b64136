"""Split legacy lesson markdown into text, code and output segments.

Legacy lessons are plain markdown where program output is written as::

    **Output:**
    ```
    42
    ```

and code as ordinary fenced blocks. Output fences are found first, on the
original text; generic fences are then looked for only in the text between
them. Otherwise every output fence would also match as a code fence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_OUTPUT_FENCE_RE = re.compile(r"\*\*Output:\*\*\r?\n```\r?\n(.*?)```", re.DOTALL)
_CODE_FENCE_RE = re.compile(r"```(\w+)?\r?\n(.*?)```", re.DOTALL)

DEFAULT_FENCE_LANGUAGE = "text"


class SegmentKind(str, Enum):
    TEXT = "text"
    CODE = "code"
    OUTPUT = "output"


@dataclass(frozen=True)
class LegacySegment:
    """One piece of a legacy lesson, with its span in the source text."""

    kind: SegmentKind
    content: str
    start: int
    end: int
    language: str | None = None


def split_legacy(text: str) -> list[LegacySegment]:
    """Split legacy markdown into segments in source order.

    Whitespace-only text between fences is dropped. An unterminated fence
    never matches, so it stays part of the surrounding text.
    """
    segments: list[LegacySegment] = []
    cursor = 0
    for match in _OUTPUT_FENCE_RE.finditer(text):
        segments.extend(_split_code_fences(text, cursor, match.start()))
        segments.append(LegacySegment(
            kind=SegmentKind.OUTPUT,
            content=trim_blank_lines(match.group(1)),
            start=match.start(),
            end=match.end(),
        ))
        cursor = match.end()
    segments.extend(_split_code_fences(text, cursor, len(text)))
    return segments


def trim_blank_lines(text: str) -> str:
    """Drop blank lines at both ends, keeping indentation of the rest."""
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(line.rstrip("\r") for line in lines)


def _split_code_fences(text: str, start: int, end: int) -> list[LegacySegment]:
    segments: list[LegacySegment] = []
    cursor = start
    for match in _CODE_FENCE_RE.finditer(text, start, end):
        _append_text(segments, text, cursor, match.start())
        segments.append(LegacySegment(
            kind=SegmentKind.CODE,
            content=trim_blank_lines(match.group(2)),
            start=match.start(),
            end=match.end(),
            language=match.group(1) or DEFAULT_FENCE_LANGUAGE,
        ))
        cursor = match.end()
    _append_text(segments, text, cursor, end)
    return segments


def _append_text(segments: list[LegacySegment], text: str, start: int, end: int) -> None:
    chunk = text[start:end]
    if chunk.strip():
        segments.append(LegacySegment(kind=SegmentKind.TEXT, content=chunk.strip(), start=start, end=end))
