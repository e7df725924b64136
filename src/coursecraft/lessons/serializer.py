"""Convert lesson block sequences to and from their stored text payload.

A lesson's ``content`` column holds either a JSON array of blocks or legacy
free-form markdown. There is no format flag: anything that does not parse
as a JSON array is legacy content.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable

from ..errors import MalformedBlockError, UnknownBlockTypeError
from .blocks_models import LessonEntry, UnsupportedBlock, block_from_dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegacyContent:
    """Payload that predates the block model, kept exactly as stored."""

    text: str


def serialize(blocks: Iterable[LessonEntry]) -> str:
    """Serialize blocks to a canonical JSON array.

    Same input gives byte-identical output. Unsupported entries are written
    back as they were read.
    """
    return json.dumps(
        [block.to_dict() for block in blocks],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def deserialize(text: str) -> list[LessonEntry] | LegacyContent:
    """Parse a stored payload.

    Args:
        text: The lesson's stored content.

    Returns:
        The decoded entries in stored order, or LegacyContent wrapping
        ``text`` unchanged when it is not a JSON array. Entries that fail to
        decode come back as UnsupportedBlock; the rest are unaffected.
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        logger.debug("Content is not JSON; treating as legacy markdown")
        return LegacyContent(text)

    if not isinstance(parsed, list):
        logger.debug("Content is JSON but not an array; treating as legacy markdown")
        return LegacyContent(text)

    return [_decode_entry(index, raw) for index, raw in enumerate(parsed)]


def is_legacy(text: str) -> bool:
    """Check whether a payload would be handled as legacy content."""
    return isinstance(deserialize(text), LegacyContent)


def _decode_entry(index: int, raw: object) -> LessonEntry:
    try:
        return block_from_dict(raw)
    except (UnknownBlockTypeError, MalformedBlockError) as e:
        logger.warning("Lesson entry %d could not be decoded: %s", index, e.message)
        return UnsupportedBlock(raw=raw, reason=e.message)
