"""SQLite-based storage for courses, lessons and practice completions.

This is the record store the lesson service writes through. It is plain
CRUD: each call runs in its own transaction, and concurrent writers to the
same lesson are last-write-wins.

Tables:
- courses: title plus the derived total_lessons / xp_reward aggregates
- lessons: stored content payload and derived xp_reward
- practice_completions: which practice blocks a user has completed
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from .errors import DatabaseError, NotFoundError
from .settings import settings

logger = logging.getLogger(__name__)

# Schema version for migrations
# v1: courses, lessons
# v2: practice_completions
SCHEMA_VERSION = 2


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LessonDB:
    """Record store backed by one SQLite file."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else settings.db_path
        self._conn: sqlite3.Connection | None = None

    # =========================================================================
    # Connection management
    # =========================================================================

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            except (OSError, sqlite3.Error) as e:
                raise DatabaseError(f"Cannot open lesson database: {e}", operation="connect") from e
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _transaction(self, operation: str, table: str) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"{operation} failed: {e}", operation=operation, table=table) from e
        except Exception:
            conn.rollback()
            raise

    def migrate(self) -> None:
        """Create or upgrade the schema."""
        with self._transaction("migrate", "schema_version") as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER PRIMARY KEY)")
            row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
            current = row[0] or 0
            if current >= SCHEMA_VERSION:
                return

            logger.info("Running schema migrations from v%d to v%d", current, SCHEMA_VERSION)
            if current < 1:
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS courses (
                        course_id TEXT PRIMARY KEY,
                        title TEXT NOT NULL,
                        total_lessons INTEGER NOT NULL DEFAULT 0,
                        xp_reward INTEGER NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS lessons (
                        lesson_id TEXT PRIMARY KEY,
                        course_id TEXT NOT NULL REFERENCES courses(course_id) ON DELETE CASCADE,
                        title TEXT NOT NULL,
                        content TEXT NOT NULL DEFAULT '',
                        xp_reward INTEGER NOT NULL DEFAULT 0,
                        position INTEGER NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_lessons_course_id ON lessons(course_id);
                """)
            if current < 2:
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS practice_completions (
                        user_id TEXT NOT NULL,
                        lesson_id TEXT NOT NULL REFERENCES lessons(lesson_id) ON DELETE CASCADE,
                        block_id TEXT NOT NULL,
                        completed_at TEXT NOT NULL,
                        PRIMARY KEY (user_id, lesson_id, block_id)
                    );
                """)
            conn.execute("DELETE FROM schema_version")
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))

    # =========================================================================
    # Courses
    # =========================================================================

    def create_course(self, title: str, *, course_id: str | None = None) -> str:
        course_id = course_id or f"course-{uuid4().hex[:12]}"
        now = _now_iso()
        with self._transaction("create_course", "courses") as conn:
            conn.execute(
                "INSERT INTO courses (course_id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (course_id, title, now, now),
            )
        return course_id

    def get_course(self, course_id: str) -> dict[str, Any] | None:
        row = self.connect().execute(
            "SELECT * FROM courses WHERE course_id = ?", (course_id,)
        ).fetchone()
        return dict(row) if row else None

    def save_course_aggregates(self, course_id: str, total_lessons: int, xp_reward: int) -> None:
        """Store recomputed course totals.

        Raises:
            NotFoundError: If the course does not exist.
        """
        with self._transaction("save_course_aggregates", "courses") as conn:
            cursor = conn.execute(
                "UPDATE courses SET total_lessons = ?, xp_reward = ?, updated_at = ? WHERE course_id = ?",
                (total_lessons, xp_reward, _now_iso(), course_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Course not found: {course_id}", resource_type="course", resource_id=course_id)

    # =========================================================================
    # Lessons
    # =========================================================================

    def insert_lesson(
        self,
        course_id: str,
        title: str,
        content: str,
        xp_reward: int,
        *,
        lesson_id: str | None = None,
    ) -> str:
        """Insert a lesson at the end of its course and return its id."""
        lesson_id = lesson_id or f"lesson-{uuid4().hex[:12]}"
        now = _now_iso()
        with self._transaction("insert_lesson", "lessons") as conn:
            if conn.execute("SELECT 1 FROM courses WHERE course_id = ?", (course_id,)).fetchone() is None:
                raise NotFoundError(f"Course not found: {course_id}", resource_type="course", resource_id=course_id)
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM lessons WHERE course_id = ?",
                (course_id,),
            ).fetchone()[0]
            conn.execute(
                """
                INSERT INTO lessons (lesson_id, course_id, title, content, xp_reward, position, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (lesson_id, course_id, title, content, xp_reward, position, now, now),
            )
        return lesson_id

    def get_lesson(self, lesson_id: str) -> dict[str, Any] | None:
        row = self.connect().execute(
            "SELECT * FROM lessons WHERE lesson_id = ?", (lesson_id,)
        ).fetchone()
        return dict(row) if row else None

    def save_lesson(self, lesson_id: str, content: str, xp_reward: int) -> None:
        """Overwrite a lesson's content and XP.

        Raises:
            NotFoundError: If the lesson does not exist.
        """
        with self._transaction("save_lesson", "lessons") as conn:
            cursor = conn.execute(
                "UPDATE lessons SET content = ?, xp_reward = ?, updated_at = ? WHERE lesson_id = ?",
                (content, xp_reward, _now_iso(), lesson_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Lesson not found: {lesson_id}", resource_type="lesson", resource_id=lesson_id)

    def delete_lesson(self, lesson_id: str) -> bool:
        with self._transaction("delete_lesson", "lessons") as conn:
            cursor = conn.execute("DELETE FROM lessons WHERE lesson_id = ?", (lesson_id,))
            return cursor.rowcount > 0

    def list_lessons_for_course(self, course_id: str) -> list[dict[str, Any]]:
        rows = self.connect().execute(
            "SELECT * FROM lessons WHERE course_id = ? ORDER BY position, created_at",
            (course_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    # =========================================================================
    # Practice completions
    # =========================================================================

    def record_completion(self, user_id: str, lesson_id: str, block_id: str) -> None:
        with self._transaction("record_completion", "practice_completions") as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO practice_completions (user_id, lesson_id, block_id, completed_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, lesson_id, block_id, _now_iso()),
            )

    def completed_block_ids(self, user_id: str, lesson_id: str) -> frozenset[str]:
        rows = self.connect().execute(
            "SELECT block_id FROM practice_completions WHERE user_id = ? AND lesson_id = ?",
            (user_id, lesson_id),
        ).fetchall()
        return frozenset(row["block_id"] for row in rows)
