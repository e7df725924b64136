"""Lesson Service - saving, rendering and XP bookkeeping for lessons.

Every write serializes the lesson, stores its XP, and then recomputes the
course totals from the content of every lesson in the course. The store is
the only state; nothing is cached here.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from .errors import NotFoundError
from .lessons.blocks_models import LessonEntry
from .lessons.editor import BlockEditor
from .lessons.renderer import ContentRenderer, RenderedLesson
from .lessons.serializer import serialize
from .lessons.xp import CourseAggregates, content_xp, lesson_xp

logger = logging.getLogger(__name__)


class LessonStore(Protocol):
    """Record store holding lesson and course rows."""

    def get_lesson(self, lesson_id: str) -> dict[str, Any] | None: ...

    def insert_lesson(
        self, course_id: str, title: str, content: str, xp_reward: int, *, lesson_id: str | None = None
    ) -> str: ...

    def save_lesson(self, lesson_id: str, content: str, xp_reward: int) -> None: ...

    def delete_lesson(self, lesson_id: str) -> bool: ...

    def list_lessons_for_course(self, course_id: str) -> list[dict[str, Any]]: ...

    def save_course_aggregates(self, course_id: str, total_lessons: int, xp_reward: int) -> None: ...


class CompletionSource(Protocol):
    """Completion tracking for practice blocks."""

    def completed_block_ids(self, user_id: str, lesson_id: str) -> frozenset[str]: ...


class LessonService:
    """Write lessons through a store and keep course totals consistent.

    Args:
        store: Record store for lessons and courses.
        completions: Completion tracker used when rendering for a user.
            Rendering without one marks nothing as completed.
        renderer: Renderer to use; defaults to the standard language table.
    """

    def __init__(
        self,
        store: LessonStore,
        completions: CompletionSource | None = None,
        renderer: ContentRenderer | None = None,
    ) -> None:
        self.store = store
        self.completions = completions
        self.renderer = renderer or ContentRenderer()

    # =========================================================================
    # Writes
    # =========================================================================

    def create_lesson(
        self,
        course_id: str,
        title: str,
        blocks: Sequence[LessonEntry] = (),
        *,
        lesson_id: str | None = None,
    ) -> str:
        """Insert a lesson and refresh its course's totals."""
        lesson_id = self.store.insert_lesson(
            course_id, title, serialize(blocks), lesson_xp(blocks), lesson_id=lesson_id
        )
        self.recompute_course(course_id)
        return lesson_id

    def update_lesson(self, lesson_id: str, blocks: Sequence[LessonEntry]) -> int:
        """Save a lesson's blocks and return its new XP reward.

        Raises:
            NotFoundError: If the lesson does not exist.
        """
        lesson = self._require_lesson(lesson_id)
        xp_reward = lesson_xp(blocks)
        self.store.save_lesson(lesson_id, serialize(blocks), xp_reward)
        self.recompute_course(lesson["course_id"])
        return xp_reward

    def delete_lesson(self, lesson_id: str) -> bool:
        lesson = self.store.get_lesson(lesson_id)
        if lesson is None:
            return False
        deleted = self.store.delete_lesson(lesson_id)
        self.recompute_course(lesson["course_id"])
        return deleted

    def recompute_course(self, course_id: str) -> CourseAggregates:
        """Recompute course totals from the stored content of every lesson."""
        lessons = self.store.list_lessons_for_course(course_id)
        aggregates = CourseAggregates(
            total_lessons=len(lessons),
            xp_reward=sum(content_xp(lesson["content"]) for lesson in lessons),
        )
        self.store.save_course_aggregates(course_id, aggregates.total_lessons, aggregates.xp_reward)
        logger.info(
            "Course %s: %d lessons, %d XP", course_id, aggregates.total_lessons, aggregates.xp_reward
        )
        return aggregates

    # =========================================================================
    # Reads
    # =========================================================================

    def load_content(self, lesson_id: str) -> str:
        return self._require_lesson(lesson_id)["content"]

    def open_editor(self, lesson_id: str, *, import_legacy: bool = False) -> BlockEditor:
        """Start an editing session on a stored lesson."""
        return BlockEditor.from_content(
            self.load_content(lesson_id),
            import_legacy=import_legacy,
            languages=self.renderer.languages,
        )

    def render_lesson(self, lesson_id: str, user_id: str | None = None) -> RenderedLesson:
        """Render a stored lesson, marking the user's completed practice."""
        content = self.load_content(lesson_id)
        completed: frozenset[str] = frozenset()
        if user_id is not None and self.completions is not None:
            completed = self.completions.completed_block_ids(user_id, lesson_id)
        return self.renderer.render(content, completed)

    def _require_lesson(self, lesson_id: str) -> dict[str, Any]:
        lesson = self.store.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError(f"Lesson not found: {lesson_id}", resource_type="lesson", resource_id=lesson_id)
        return lesson
