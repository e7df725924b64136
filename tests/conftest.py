from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic block ids: b1, b2, ..."""
    counter = iter(range(1, 10_000))
    return lambda: f"b{next(counter)}"


@pytest.fixture
def lesson_db(tmp_path: Path) -> Iterator:
    """A migrated lesson database in a temp directory.

    Tests never write to the real data directory.
    """
    from coursecraft.lesson_db import LessonDB

    db = LessonDB(tmp_path / "lessons-test.db")
    db.migrate()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point COURSECRAFT_DATA_DIR at a temp directory."""
    data_dir = tmp_path / "coursecraft-data"
    data_dir.mkdir()
    monkeypatch.setenv("COURSECRAFT_DATA_DIR", str(data_dir))
    return data_dir
