"""Centralized configuration for coursecraft.

This module provides a single source of truth for:
- Local storage paths (lesson database, log file)
- Logging level and rotation
- Lesson content constants (base XP, practice defaults, output collapsing)

Values can be overridden via environment variables where noted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


# =============================================================================
# Helper functions
# =============================================================================


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """Get integer from environment with optional minimum enforcement."""
    val = int(os.environ.get(name, str(default)))
    if min_val is not None and val < min_val:
        return min_val
    return val


def _env_path(name: str, default: Path) -> Path:
    raw = os.environ.get(name)
    if not raw:
        return default
    return Path(raw).expanduser()


# =============================================================================
# Service Settings
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """Static settings for local tooling.

    Keep defaults local and auditable; nothing here talks to the network.
    """

    data_dir: Path = _env_path("COURSECRAFT_DATA_DIR", Path.home() / ".coursecraft")
    log_level: str = os.environ.get("COURSECRAFT_LOG_LEVEL", "INFO")
    log_max_bytes: int = _env_int("COURSECRAFT_LOG_MAX_BYTES", 1_000_000, min_val=10_000)
    log_backup_count: int = _env_int("COURSECRAFT_LOG_BACKUP_COUNT", 3, min_val=0)

    @property
    def db_path(self) -> Path:
        return self.data_dir / "lessons.db"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "coursecraft.log"


settings = Settings()


# =============================================================================
# Lesson Content Limits
# =============================================================================


@dataclass(frozen=True)
class LessonLimits:
    """Constants of the lesson content model.

    BASE_LESSON_XP is part of the lesson XP invariant and is not tunable.
    """

    # Every lesson earns this much before any practice block is counted
    BASE_LESSON_XP: int = 25

    # xpValue given to a freshly added practice block
    DEFAULT_PRACTICE_XP: int = 25

    # Outputs longer than this many lines render as collapsible
    OUTPUT_COLLAPSE_LINES: int = _env_int("COURSECRAFT_OUTPUT_COLLAPSE_LINES", 10, min_val=1)

    # Attempts at drawing a fresh block id before giving up
    MAX_ID_ATTEMPTS: int = 8


LIMITS = LessonLimits()
