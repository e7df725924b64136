"""XP values derived from lesson content.

A lesson is worth a fixed base plus the XP of its practice blocks. Course
totals are always recomputed from every lesson; they are never patched
incrementally, so a deleted lesson's XP cannot linger.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..errors import UnknownBlockTypeError
from ..settings import LIMITS
from .blocks_models import (
    CodeBlock,
    ExplanationBlock,
    LessonEntry,
    OutputBlock,
    PracticeBlock,
    TextBlock,
    UnsupportedBlock,
)
from .serializer import LegacyContent, deserialize

BASE_LESSON_XP = LIMITS.BASE_LESSON_XP


@dataclass(frozen=True)
class CourseAggregates:
    total_lessons: int
    xp_reward: int


def practice_xp(blocks: Iterable[LessonEntry]) -> int:
    """Sum of xp_value over practice blocks."""
    total = 0
    for block in blocks:
        if isinstance(block, PracticeBlock):
            total += block.xp_value
        elif isinstance(block, (TextBlock, CodeBlock, OutputBlock, ExplanationBlock, UnsupportedBlock)):
            continue
        else:
            raise UnknownBlockTypeError(
                f"Cannot compute XP for {type(block).__name__}",
                block_type=type(block).__name__,
            )
    return total


def lesson_xp(blocks: Iterable[LessonEntry]) -> int:
    """XP reward of one lesson: base plus practice XP."""
    return BASE_LESSON_XP + practice_xp(blocks)


def content_xp(text: str) -> int:
    """XP reward of a stored payload. Legacy content earns the base only."""
    content = deserialize(text)
    if isinstance(content, LegacyContent):
        return BASE_LESSON_XP
    return lesson_xp(content)


def course_xp(lessons: Iterable[Sequence[LessonEntry]]) -> int:
    """Sum of lesson_xp over every lesson of a course."""
    return sum(lesson_xp(blocks) for blocks in lessons)


def course_lesson_count(lessons: Iterable[Sequence[LessonEntry]]) -> int:
    return sum(1 for _ in lessons)


def compute_course_aggregates(lessons: Iterable[Sequence[LessonEntry]]) -> CourseAggregates:
    """Compute both course totals from scratch."""
    lessons = list(lessons)
    return CourseAggregates(
        total_lessons=course_lesson_count(lessons),
        xp_reward=course_xp(lessons),
    )
