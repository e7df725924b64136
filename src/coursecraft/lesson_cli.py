"""Command line tools for lesson content.

Usage:
    coursecraft render FILE [--completed ID ...]   Print render instructions as JSON
    coursecraft xp FILE                            Print the lesson's XP reward
    coursecraft html [FILE]                        Markdown (FILE or stdin) to safe HTML
    coursecraft import-legacy FILE                 Convert legacy markdown to blocks
    coursecraft course-create TITLE                Create a course in the lesson database
    coursecraft lesson-add COURSE_ID TITLE FILE    Store a lesson and refresh course totals
    coursecraft course-show COURSE_ID              Show a course and its lessons

FILE is a stored lesson payload: a JSON block array or legacy markdown.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .errors import CourseCraftError
from .lesson_db import LessonDB
from .lesson_service import LessonService
from .lessons.legacy_import import import_legacy
from .lessons.markdown_html import to_safe_html
from .lessons.renderer import RenderInstruction, render
from .lessons.serializer import serialize
from .lessons.xp import content_xp
from .logging_setup import configure_logging
from .settings import settings


def instruction_to_dict(instruction: RenderInstruction) -> dict[str, Any]:
    """JSON-ready form of one render instruction."""
    return {"kind": type(instruction).__name__, **dataclasses.asdict(instruction)}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coursecraft",
        description="Lesson content tools",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Lesson database (default: {settings.db_path})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.log_level.upper(),
        help=f"Logging level (default: {settings.log_level})",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("render", help="Print render instructions as JSON")
    p.add_argument("file", type=Path)
    p.add_argument("--completed", nargs="*", default=[], metavar="ID", help="Completed practice block ids")

    p = sub.add_parser("xp", help="Print a lesson's XP reward")
    p.add_argument("file", type=Path)

    p = sub.add_parser("html", help="Convert markdown to sanitized HTML")
    p.add_argument("file", type=Path, nargs="?")

    p = sub.add_parser("import-legacy", help="Convert legacy markdown to a block payload")
    p.add_argument("file", type=Path)

    p = sub.add_parser("course-create", help="Create a course")
    p.add_argument("title")

    p = sub.add_parser("lesson-add", help="Store a lesson and refresh course totals")
    p.add_argument("course_id")
    p.add_argument("title")
    p.add_argument("file", type=Path)

    p = sub.add_parser("course-show", help="Show a course and its lessons")
    p.add_argument("course_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "render":
            return cmd_render(args.file, args.completed)
        elif args.command == "xp":
            return cmd_xp(args.file)
        elif args.command == "html":
            return cmd_html(args.file)
        elif args.command == "import-legacy":
            return cmd_import_legacy(args.file)
        elif args.command == "course-create":
            return cmd_course_create(args.db, args.title)
        elif args.command == "lesson-add":
            return cmd_lesson_add(args.db, args.course_id, args.title, args.file)
        elif args.command == "course-show":
            return cmd_course_show(args.db, args.course_id)
    except CourseCraftError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 1


def cmd_render(path: Path, completed: list[str]) -> int:
    """Print the instructions for a stored payload."""
    instructions = [instruction_to_dict(i) for i in render(path.read_text(encoding="utf-8"), completed)]
    print(json.dumps(instructions, indent=2, ensure_ascii=False))
    return 0


def cmd_xp(path: Path) -> int:
    print(content_xp(path.read_text(encoding="utf-8")))
    return 0


def cmd_html(path: Path | None) -> int:
    markdown = path.read_text(encoding="utf-8") if path else sys.stdin.read()
    print(to_safe_html(markdown))
    return 0


def cmd_import_legacy(path: Path) -> int:
    """Print the block payload for a legacy lesson."""
    print(serialize(import_legacy(path.read_text(encoding="utf-8"))))
    return 0


def cmd_course_create(db_path: Path | None, title: str) -> int:
    db = _open_db(db_path)
    try:
        course_id = db.create_course(title)
    finally:
        db.close()
    print(f"Created course: {course_id}")
    return 0


def cmd_lesson_add(db_path: Path | None, course_id: str, title: str, path: Path) -> int:
    """Store a lesson file; legacy files are imported to blocks first."""
    text = path.read_text(encoding="utf-8")
    blocks = import_legacy(text)

    db = _open_db(db_path)
    try:
        service = LessonService(db, completions=db)
        lesson_id = service.create_lesson(course_id, title, blocks)
        lesson = db.get_lesson(lesson_id)
    finally:
        db.close()
    print(f"Created lesson: {lesson_id} ({lesson['xp_reward']} XP)")
    return 0


def cmd_course_show(db_path: Path | None, course_id: str) -> int:
    db = _open_db(db_path)
    try:
        course = db.get_course(course_id)
        lessons = db.list_lessons_for_course(course_id)
    finally:
        db.close()
    if course is None:
        print(f"Course not found: {course_id}", file=sys.stderr)
        return 1

    print(f"\n{course['title']} ({course['course_id']})")
    print(f"Lessons: {course['total_lessons']}  XP: {course['xp_reward']}")
    print("-" * 60)
    for lesson in lessons:
        print(f"{lesson['lesson_id']:<20} {lesson['title']:<30} {lesson['xp_reward']:>5} XP")
    return 0


def _open_db(db_path: Path | None) -> LessonDB:
    db = LessonDB(db_path)
    db.migrate()
    return db


if __name__ == "__main__":
    sys.exit(main())
