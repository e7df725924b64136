"""Data models for block-based lesson content.

This module defines the closed set of lesson block variants. A lesson body is
an ordered list of these blocks; list position is the only ordering signal.

Persisted keys are camelCase (the stored JSON format), attributes snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from ..errors import MalformedBlockError, UnknownBlockTypeError


class BlockType(str, Enum):
    """Supported lesson block types."""

    TEXT = "text"
    CODE = "code"
    OUTPUT = "output"
    EXPLANATION = "explanation"
    PRACTICE = "practice"


class HeadingLevel(str, Enum):
    """Display level of a text block."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    PARAGRAPH = "paragraph"


@dataclass(frozen=True)
class BlockLabel:
    """Authoring metadata shown next to a block type."""

    label: str
    description: str


BLOCK_LABELS: dict[BlockType, BlockLabel] = {
    BlockType.TEXT: BlockLabel("Text Block", "Headings, paragraphs, lists"),
    BlockType.CODE: BlockLabel("Code Block", "Syntax highlighted code"),
    BlockType.OUTPUT: BlockLabel("Output Block", "Expected code output"),
    BlockType.EXPLANATION: BlockLabel("Explanation", "Plain explanation text"),
    BlockType.PRACTICE: BlockLabel("Practice Block", "XP-earning challenge"),
}


# =============================================================================
# Block variants
# =============================================================================


@dataclass(frozen=True)
class TextBlock:
    """Markdown prose, optionally displayed as a heading."""

    type: ClassVar[BlockType] = BlockType.TEXT

    id: str
    content: str = ""
    heading: HeadingLevel = HeadingLevel.PARAGRAPH

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "id": self.id,
            "content": self.content,
            "heading": HeadingLevel(self.heading).value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextBlock:
        """Create from dictionary."""
        block_id = _id_of(data)
        raw_heading = _opt_str(data, "heading", block_id) or HeadingLevel.PARAGRAPH.value
        try:
            heading = HeadingLevel(raw_heading)
        except ValueError:
            raise MalformedBlockError(
                f"Unsupported heading level: {raw_heading}", field="heading", block_id=block_id
            ) from None
        return cls(
            id=block_id,
            content=_str(data, "content", block_id),
            heading=heading,
        )


@dataclass(frozen=True)
class CodeBlock:
    """A code listing. ``language`` is a key into a LanguageTable."""

    type: ClassVar[BlockType] = BlockType.CODE

    id: str
    language: str
    code: str = ""
    title: str | None = None
    show_line_numbers: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "type": self.type.value,
            "id": self.id,
            "language": self.language,
            "code": self.code,
        }
        if self.title is not None:
            result["title"] = self.title
        result["showLineNumbers"] = self.show_line_numbers
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CodeBlock:
        """Create from dictionary."""
        block_id = _id_of(data)
        language = _opt_str(data, "language", block_id)
        if not language:
            raise MalformedBlockError("Code block has no language", field="language", block_id=block_id)
        return cls(
            id=block_id,
            language=language,
            code=_str(data, "code", block_id),
            title=_opt_str(data, "title", block_id),
            show_line_numbers=_bool(data, "showLineNumbers", block_id, default=True),
        )


@dataclass(frozen=True)
class OutputBlock:
    """Expected program output.

    ``linked_code_block_id`` is a plain lookup key into the same sequence.
    It may name a block that no longer exists.
    """

    type: ClassVar[BlockType] = BlockType.OUTPUT

    id: str
    output: str = ""
    linked_code_block_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "type": self.type.value,
            "id": self.id,
            "output": self.output,
        }
        if self.linked_code_block_id is not None:
            result["linkedCodeBlockId"] = self.linked_code_block_id
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OutputBlock:
        """Create from dictionary."""
        block_id = _id_of(data)
        return cls(
            id=block_id,
            output=_str(data, "output", block_id),
            linked_code_block_id=_opt_str(data, "linkedCodeBlockId", block_id),
        )


@dataclass(frozen=True)
class ExplanationBlock:
    """A highlighted aside in markdown."""

    type: ClassVar[BlockType] = BlockType.EXPLANATION

    id: str
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.type.value, "id": self.id, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExplanationBlock:
        """Create from dictionary."""
        block_id = _id_of(data)
        return cls(id=block_id, content=_str(data, "content", block_id))


@dataclass(frozen=True)
class PracticeBlock:
    """An exercise worth ``xp_value`` XP.

    ``validation_rule`` is carried verbatim; checking answers against it
    happens outside this package.
    """

    type: ClassVar[BlockType] = BlockType.PRACTICE

    id: str
    question: str = ""
    expected_output: str | None = None
    validation_rule: str | None = None
    xp_value: int = 0
    hints: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "type": self.type.value,
            "id": self.id,
            "question": self.question,
        }
        if self.expected_output is not None:
            result["expectedOutput"] = self.expected_output
        if self.validation_rule is not None:
            result["validationRule"] = self.validation_rule
        result["xpValue"] = self.xp_value
        result["hints"] = list(self.hints)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PracticeBlock:
        """Create from dictionary."""
        block_id = _id_of(data)
        xp_value = data.get("xpValue", 0)
        # bool is an int subclass; True is not an XP value
        if isinstance(xp_value, bool) or not isinstance(xp_value, int) or xp_value < 0:
            raise MalformedBlockError(
                f"xpValue must be a non-negative integer, got {xp_value!r}",
                field="xpValue",
                block_id=block_id,
            )
        hints = data.get("hints") or []
        if not isinstance(hints, list) or not all(isinstance(h, str) for h in hints):
            raise MalformedBlockError("hints must be a list of strings", field="hints", block_id=block_id)
        return cls(
            id=block_id,
            question=_str(data, "question", block_id),
            expected_output=_opt_str(data, "expectedOutput", block_id),
            validation_rule=_opt_str(data, "validationRule", block_id),
            xp_value=xp_value,
            hints=tuple(hints),
        )


Block = Union[TextBlock, CodeBlock, OutputBlock, ExplanationBlock, PracticeBlock]

BLOCK_CLASSES: dict[BlockType, type[Block]] = {
    BlockType.TEXT: TextBlock,
    BlockType.CODE: CodeBlock,
    BlockType.OUTPUT: OutputBlock,
    BlockType.EXPLANATION: ExplanationBlock,
    BlockType.PRACTICE: PracticeBlock,
}


@dataclass(frozen=True)
class UnsupportedBlock:
    """A stored entry that could not be decoded into a Block.

    The raw entry is kept verbatim so saving the lesson again does not lose
    it. This is a decode result, not a sixth block variant.
    """

    raw: Any
    reason: str

    @property
    def id(self) -> str:
        if isinstance(self.raw, dict) and isinstance(self.raw.get("id"), str):
            return self.raw["id"]
        return ""

    @property
    def raw_type(self) -> str | None:
        if isinstance(self.raw, dict) and self.raw.get("type") is not None:
            return str(self.raw["type"])
        return None

    def to_dict(self) -> Any:
        """Return the original entry unchanged."""
        return self.raw


LessonEntry = Union[Block, UnsupportedBlock]


def block_from_dict(data: Any) -> Block:
    """Decode one serialized entry into its block variant.

    Raises:
        UnknownBlockTypeError: If ``type`` is not one of the known variants.
        MalformedBlockError: If the entry is not an object or a field is ill-typed.
    """
    if not isinstance(data, dict):
        raise MalformedBlockError(f"Block entry must be an object, got {type(data).__name__}")

    raw_type = data.get("type")
    try:
        block_type = BlockType(raw_type)
    except ValueError:
        block_id = data.get("id") if isinstance(data.get("id"), str) else None
        raise UnknownBlockTypeError(
            f"Unknown block type: {raw_type!r}",
            block_type=str(raw_type),
            block_id=block_id,
        ) from None

    return BLOCK_CLASSES[block_type].from_dict(data)


# =============================================================================
# Field helpers
# =============================================================================


def _id_of(data: dict[str, Any]) -> str:
    block_id = data.get("id")
    if not isinstance(block_id, str) or not block_id:
        raise MalformedBlockError("Block id must be a non-empty string", field="id")
    return block_id


def _str(data: dict[str, Any], key: str, block_id: str) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedBlockError(f"{key} must be a string", field=key, block_id=block_id)
    return value


def _opt_str(data: dict[str, Any], key: str, block_id: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedBlockError(f"{key} must be a string", field=key, block_id=block_id)
    return value


def _bool(data: dict[str, Any], key: str, block_id: str, *, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise MalformedBlockError(f"{key} must be a boolean", field=key, block_id=block_id)
    return value
