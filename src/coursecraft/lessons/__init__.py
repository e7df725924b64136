"""Block-based lesson content.

Key components:
- blocks_models: Block variants, BlockType, UnsupportedBlock
- serializer: Block sequence <-> stored text, legacy detection
- markdown_html: Markdown -> sanitized HTML
- legacy_parser: Legacy markdown -> text/code/output segments
- renderer: Stored content -> render instructions
- editor: Add/update/delete/move operations
- xp: Lesson and course XP totals
- legacy_import: Legacy markdown -> blocks
"""

from .blocks_models import (
    BLOCK_LABELS,
    Block,
    BlockType,
    CodeBlock,
    ExplanationBlock,
    HeadingLevel,
    OutputBlock,
    PracticeBlock,
    TextBlock,
    UnsupportedBlock,
    block_from_dict,
)
from .editor import (
    BlockEditor,
    MoveDirection,
    add_block,
    delete_block,
    move_block,
    reorder_blocks,
    update_block,
)
from .languages import DEFAULT_LANGUAGES, LanguageSpec, LanguageTable
from .legacy_import import import_legacy
from .markdown_html import sanitize_html, to_safe_html
from .renderer import (
    CodeBlockView,
    ContentRenderer,
    ExplanationView,
    OutputView,
    PracticeView,
    StyledText,
    UnsupportedView,
    render,
)
from .serializer import LegacyContent, deserialize, is_legacy, serialize
from .xp import CourseAggregates, compute_course_aggregates, course_lesson_count, course_xp, lesson_xp

__all__ = [
    "BLOCK_LABELS",
    "Block",
    "BlockType",
    "CodeBlock",
    "ExplanationBlock",
    "HeadingLevel",
    "OutputBlock",
    "PracticeBlock",
    "TextBlock",
    "UnsupportedBlock",
    "block_from_dict",
    "BlockEditor",
    "MoveDirection",
    "add_block",
    "delete_block",
    "move_block",
    "reorder_blocks",
    "update_block",
    "DEFAULT_LANGUAGES",
    "LanguageSpec",
    "LanguageTable",
    "import_legacy",
    "sanitize_html",
    "to_safe_html",
    "CodeBlockView",
    "ContentRenderer",
    "ExplanationView",
    "OutputView",
    "PracticeView",
    "StyledText",
    "UnsupportedView",
    "render",
    "LegacyContent",
    "deserialize",
    "is_legacy",
    "serialize",
    "CourseAggregates",
    "compute_course_aggregates",
    "course_lesson_count",
    "course_xp",
    "lesson_xp",
]
