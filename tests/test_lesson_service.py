"""Tests for lesson_service.py - saving lessons and course XP bookkeeping.

Tests:
- Course aggregates after create/update/delete
- Legacy lessons in aggregates
- Rendering with completion tracking
- Store failures propagate
"""

from __future__ import annotations

from typing import Any

import pytest

from coursecraft.errors import DatabaseError, NotFoundError
from coursecraft.lesson_db import LessonDB
from coursecraft.lesson_service import LessonService
from coursecraft.lessons.blocks_models import CodeBlock, PracticeBlock, TextBlock
from coursecraft.lessons.renderer import PracticeView, StyledText


@pytest.fixture
def service(lesson_db: LessonDB) -> LessonService:
    return LessonService(lesson_db, completions=lesson_db)


@pytest.fixture
def course_id(lesson_db: LessonDB) -> str:
    return lesson_db.create_course("Course")


def _course(db: LessonDB, course_id: str) -> tuple[int, int]:
    course = db.get_course(course_id)
    return course["total_lessons"], course["xp_reward"]


class TestCourseAggregates:
    """Course totals follow every write."""

    def test_create_update_delete(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        first = service.create_lesson(course_id, "One", [PracticeBlock(id="p", xp_value=10)])
        second = service.create_lesson(course_id, "Two", [PracticeBlock(id="q", xp_value=20)])
        assert lesson_db.get_lesson(first)["xp_reward"] == 35
        assert lesson_db.get_lesson(second)["xp_reward"] == 45
        assert _course(lesson_db, course_id) == (2, 80)

        assert service.delete_lesson(first) is True
        assert _course(lesson_db, course_id) == (1, 45)

    def test_update_recomputes(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        lesson_id = service.create_lesson(course_id, "One")
        assert _course(lesson_db, course_id) == (1, 25)
        assert service.update_lesson(lesson_id, [PracticeBlock(id="p", xp_value=5)]) == 30
        assert _course(lesson_db, course_id) == (1, 30)

    def test_legacy_lessons_count_base_xp(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        lesson_db.insert_lesson(course_id, "Old", "Old **markdown** lesson", 25)
        service.create_lesson(course_id, "New", [PracticeBlock(id="p", xp_value=10)])
        assert _course(lesson_db, course_id) == (2, 60)

    def test_recompute_fixes_stale_totals(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        service.create_lesson(course_id, "One")
        lesson_db.save_course_aggregates(course_id, 99, 999)
        aggregates = service.recompute_course(course_id)
        assert (aggregates.total_lessons, aggregates.xp_reward) == (1, 25)
        assert _course(lesson_db, course_id) == (1, 25)

    def test_delete_missing_lesson(self, service: LessonService) -> None:
        assert service.delete_lesson("nope") is False

    def test_update_missing_lesson(self, service: LessonService) -> None:
        with pytest.raises(NotFoundError):
            service.update_lesson("nope", [])


class TestReads:
    def test_load_content(self, service: LessonService, course_id: str) -> None:
        lesson_id = service.create_lesson(course_id, "One", [TextBlock(id="t", content="hi")])
        assert service.load_content(lesson_id).startswith("[")

    def test_open_editor(self, service: LessonService, course_id: str) -> None:
        blocks = [TextBlock(id="t", content="hi"), CodeBlock(id="c", language="python", code="x")]
        lesson_id = service.create_lesson(course_id, "One", blocks)
        editor = service.open_editor(lesson_id)
        assert editor.blocks == blocks

    def test_open_editor_on_legacy(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        lesson_id = lesson_db.insert_lesson(course_id, "Old", "Old lesson", 25)
        assert service.open_editor(lesson_id).blocks == []
        assert len(service.open_editor(lesson_id, import_legacy=True).blocks) == 1

    def test_render_with_completions(self, service: LessonService, lesson_db: LessonDB, course_id: str) -> None:
        lesson_id = service.create_lesson(
            course_id, "One", [TextBlock(id="t", content="hi"), PracticeBlock(id="p", xp_value=10)]
        )
        lesson_db.record_completion("u1", lesson_id, "p")

        views = list(service.render_lesson(lesson_id, "u1"))
        assert isinstance(views[0], StyledText)
        assert isinstance(views[1], PracticeView)
        assert views[1].completed is True

        anonymous = list(service.render_lesson(lesson_id))
        assert anonymous[1].completed is False

    def test_render_missing_lesson(self, service: LessonService) -> None:
        with pytest.raises(NotFoundError):
            service.render_lesson("nope")


class FailingStore:
    """In-memory store whose aggregate write fails."""

    def __init__(self) -> None:
        self.lessons: dict[str, dict[str, Any]] = {}

    def get_lesson(self, lesson_id: str) -> dict[str, Any] | None:
        return self.lessons.get(lesson_id)

    def insert_lesson(self, course_id: str, title: str, content: str, xp_reward: int, *, lesson_id: str | None = None) -> str:
        lesson_id = lesson_id or f"l{len(self.lessons) + 1}"
        self.lessons[lesson_id] = {"lesson_id": lesson_id, "course_id": course_id, "content": content, "xp_reward": xp_reward}
        return lesson_id

    def save_lesson(self, lesson_id: str, content: str, xp_reward: int) -> None:
        self.lessons[lesson_id].update(content=content, xp_reward=xp_reward)

    def delete_lesson(self, lesson_id: str) -> bool:
        return self.lessons.pop(lesson_id, None) is not None

    def list_lessons_for_course(self, course_id: str) -> list[dict[str, Any]]:
        return [row for row in self.lessons.values() if row["course_id"] == course_id]

    def save_course_aggregates(self, course_id: str, total_lessons: int, xp_reward: int) -> None:
        raise DatabaseError("disk full", operation="save_course_aggregates")


class TestStoreFailures:
    def test_failure_propagates(self) -> None:
        service = LessonService(FailingStore())
        with pytest.raises(DatabaseError):
            service.create_lesson("c1", "One")
