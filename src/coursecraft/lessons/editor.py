"""Authoring operations over a lesson's block sequence.

Every operation takes a sequence and returns a new list; the input is never
modified. Operations naming an id that is not in the sequence return an
unchanged copy, so a caller acting on stale state cannot corrupt a lesson.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any
from uuid import uuid4

from ..errors import CourseCraftError, ValidationError
from ..settings import LIMITS
from .blocks_models import (
    Block,
    BlockType,
    CodeBlock,
    ExplanationBlock,
    HeadingLevel,
    LessonEntry,
    OutputBlock,
    PracticeBlock,
    TextBlock,
    UnsupportedBlock,
    block_from_dict,
)
from .languages import DEFAULT_LANGUAGES, LanguageTable
from .serializer import LegacyContent, deserialize, serialize
from .xp import lesson_xp

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


def new_block_id() -> str:
    """Generate a block id such as ``block_1718000000000_3f9a1c2be``."""
    return f"block_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def create_block(
    block_type: BlockType | str,
    block_id: str,
    *,
    languages: LanguageTable = DEFAULT_LANGUAGES,
) -> Block:
    """Build a block of ``block_type`` with its authoring defaults."""
    kind = _block_type(block_type)
    if kind is BlockType.TEXT:
        return TextBlock(id=block_id, content="", heading=HeadingLevel.PARAGRAPH)
    if kind is BlockType.CODE:
        return CodeBlock(id=block_id, language=languages.default.key, code="", show_line_numbers=True)
    if kind is BlockType.OUTPUT:
        return OutputBlock(id=block_id, output="")
    if kind is BlockType.EXPLANATION:
        return ExplanationBlock(id=block_id, content="")
    if kind is BlockType.PRACTICE:
        return PracticeBlock(id=block_id, question="", xp_value=LIMITS.DEFAULT_PRACTICE_XP, hints=())
    raise ValidationError(f"Unsupported block type: {block_type}", field="type")


def add_block(
    blocks: Sequence[LessonEntry],
    block_type: BlockType | str,
    *,
    id_factory: IdFactory = new_block_id,
    languages: LanguageTable = DEFAULT_LANGUAGES,
) -> list[LessonEntry]:
    """Append a new block with a fresh id.

    Raises:
        ValidationError: If ``block_type`` is not a block type, or no unused
            id could be drawn from ``id_factory``.
    """
    taken = {block.id for block in blocks}
    for _ in range(LIMITS.MAX_ID_ATTEMPTS):
        block_id = id_factory()
        if block_id and block_id not in taken:
            return [*blocks, create_block(block_type, block_id, languages=languages)]
    raise ValidationError("Could not generate a unique block id", field="id")


def update_block(blocks: Sequence[LessonEntry], block_id: str, **fields: Any) -> list[LessonEntry]:
    """Replace the block ``block_id`` with a copy carrying ``fields``.

    Fields use attribute names (``xp_value``, ``linked_code_block_id``...).
    The variant cannot change; delete and add a block instead.

    Raises:
        ValidationError: On ``id``/``type`` changes, unknown fields, or
            values the block could not be stored with.
    """
    for forbidden in ("id", "type"):
        if forbidden in fields:
            raise ValidationError(f"Block {forbidden} cannot be changed", field=forbidden)

    index = _index_of(blocks, block_id)
    if index is None:
        logger.debug("update_block: no block %s", block_id)
        return list(blocks)

    current = blocks[index]
    if isinstance(current, UnsupportedBlock):
        raise ValidationError("Unsupported entries cannot be edited", field="type", value=current.raw_type)

    if "hints" in fields and isinstance(fields["hints"], list):
        fields["hints"] = tuple(fields["hints"])
    try:
        candidate = dataclasses.replace(current, **fields)
        # Re-decode so the result is exactly what a save/load would give back
        updated = block_from_dict(candidate.to_dict())
    except TypeError as e:
        raise ValidationError(f"Invalid field for {current.type.value} block: {e}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid value for {current.type.value} block: {e}") from e
    except CourseCraftError as e:
        raise ValidationError(e.message, field=e.context.get("field")) from e

    result = list(blocks)
    result[index] = updated
    return result


def delete_block(blocks: Sequence[LessonEntry], block_id: str) -> list[LessonEntry]:
    """Remove ``block_id``. Outputs linking to it keep their link."""
    return [block for block in blocks if block.id != block_id]


def move_block(
    blocks: Sequence[LessonEntry],
    block_id: str,
    direction: MoveDirection | str,
) -> list[LessonEntry]:
    """Swap ``block_id`` with its neighbour; no-op at either end."""
    try:
        step = -1 if MoveDirection(direction) is MoveDirection.UP else 1
    except ValueError:
        raise ValidationError(f"Unknown direction: {direction}", field="direction") from None

    result = list(blocks)
    index = _index_of(result, block_id)
    if index is None:
        return result
    target = index + step
    if target < 0 or target >= len(result):
        return result
    result[index], result[target] = result[target], result[index]
    return result


def reorder_blocks(blocks: Sequence[LessonEntry], block_ids: Sequence[str]) -> list[LessonEntry]:
    """Put blocks in the order given by ``block_ids``.

    Raises:
        ValidationError: If ``block_ids`` is not a permutation of the ids
            in ``blocks``.
    """
    by_id = {block.id: block for block in blocks}
    if len(block_ids) != len(blocks) or set(block_ids) != set(by_id):
        raise ValidationError("Reorder must list every block exactly once", field="block_ids")
    return [by_id[block_id] for block_id in block_ids]


def code_blocks(blocks: Sequence[LessonEntry]) -> list[CodeBlock]:
    """Code blocks an output block can link to."""
    return [block for block in blocks if isinstance(block, CodeBlock)]


def _index_of(blocks: Sequence[LessonEntry], block_id: str) -> int | None:
    for i, block in enumerate(blocks):
        if block.id == block_id:
            return i
    return None


def _block_type(block_type: BlockType | str) -> BlockType:
    try:
        return BlockType(block_type)
    except ValueError:
        raise ValidationError(f"Unknown block type: {block_type}", field="type", value=block_type) from None


# =============================================================================
# Editor session
# =============================================================================


class BlockEditor:
    """Single-writer editing session over one lesson.

    Holds a private copy of the sequence; each operation replaces it and
    returns the full updated sequence.
    """

    def __init__(
        self,
        blocks: Sequence[LessonEntry] = (),
        *,
        id_factory: IdFactory = new_block_id,
        languages: LanguageTable = DEFAULT_LANGUAGES,
    ) -> None:
        self._blocks: tuple[LessonEntry, ...] = tuple(blocks)
        self._id_factory = id_factory
        self.languages = languages

    @classmethod
    def from_content(
        cls,
        text: str,
        *,
        import_legacy: bool = False,
        id_factory: IdFactory = new_block_id,
        languages: LanguageTable = DEFAULT_LANGUAGES,
    ) -> BlockEditor:
        """Open stored content.

        Legacy content opens as an empty lesson unless ``import_legacy`` is
        set, in which case it is converted to blocks.
        """
        content = deserialize(text)
        if isinstance(content, LegacyContent):
            if not import_legacy:
                return cls(id_factory=id_factory, languages=languages)
            from .legacy_import import import_legacy as convert

            return cls(convert(content.text, id_factory=id_factory), id_factory=id_factory, languages=languages)
        return cls(content, id_factory=id_factory, languages=languages)

    @property
    def blocks(self) -> list[LessonEntry]:
        return list(self._blocks)

    def add_block(self, block_type: BlockType | str) -> list[LessonEntry]:
        return self._commit(add_block(self._blocks, block_type, id_factory=self._id_factory, languages=self.languages))

    def update_block(self, block_id: str, **fields: Any) -> list[LessonEntry]:
        return self._commit(update_block(self._blocks, block_id, **fields))

    def delete_block(self, block_id: str) -> list[LessonEntry]:
        return self._commit(delete_block(self._blocks, block_id))

    def move_block(self, block_id: str, direction: MoveDirection | str) -> list[LessonEntry]:
        return self._commit(move_block(self._blocks, block_id, direction))

    def reorder_blocks(self, block_ids: Sequence[str]) -> list[LessonEntry]:
        return self._commit(reorder_blocks(self._blocks, block_ids))

    def code_blocks(self) -> list[CodeBlock]:
        return code_blocks(self._blocks)

    def total_xp(self) -> int:
        return lesson_xp(self._blocks)

    def to_content(self) -> str:
        return serialize(self._blocks)

    def _commit(self, blocks: list[LessonEntry]) -> list[LessonEntry]:
        self._blocks = tuple(blocks)
        return list(blocks)
