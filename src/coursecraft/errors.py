"""Coursecraft Error Hierarchy.

Provides a structured error hierarchy for lesson content operations:
- CourseCraftError: Base exception for all application errors
- ValidationError: Invalid editor input or field values
- UnknownBlockTypeError: A stored entry names a block type we do not know
- MalformedBlockError: A stored entry has the right shape but bad fields
- DatabaseError: Record store operation failures
- NotFoundError: A lesson or course does not exist
- ConfigurationError: Bad injected configuration (language tables, settings)

Each error type includes:
- Descriptive message
- Optional context for debugging
- Recoverable flag for retry logic
- Structured representation for CLI/JSON responses

Usage:
    from coursecraft.errors import UnknownBlockTypeError

    if block_type not in BLOCK_CLASSES:
        raise UnknownBlockTypeError(f"Unknown block type: {block_type}", block_type=block_type)
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Base Classes
# =============================================================================


class CourseCraftError(Exception):
    """Base class for lesson, store and configuration failures.

    ``context`` carries the ids involved (block id, table, setting) and is
    flattened next to the message by ``to_dict`` for CLI output.
    """

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.context = dict(context) if context else {}

    @property
    def kind(self) -> str:
        """Short name used in JSON output: ``NotFoundError`` -> ``notfound``."""
        return type(self).__name__.removesuffix("Error").lower()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        data.update((key, value) for key, value in self.context.items() if value is not None)
        return data


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(CourseCraftError):
    """A block field or editor argument was rejected.

    ``field`` names the offending attribute (``xp_value``, ``heading``...).
    ``value`` is echoed back, truncated to 100 characters.

    Example:
        raise ValidationError("Block id cannot be changed", field="id")
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        details = dict(context or {})
        details.update(field=field, constraint=constraint)
        if value is not None:
            details["value"] = _truncate(str(value), 100)
        super().__init__(message, context=details)
        self.field = field
        self.constraint = constraint


class UnknownBlockTypeError(ValidationError):
    """A serialized entry carries a block type outside the closed set."""

    def __init__(
        self,
        message: str,
        *,
        block_type: str | None = None,
        block_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            field="type",
            constraint="known_block_type",
            context={"block_type": block_type, "block_id": block_id},
        )
        self.block_type = block_type
        self.block_id = block_id


class MalformedBlockError(ValidationError):
    """A serialized entry could not be decoded into its block variant."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        block_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            field=field,
            constraint="block_schema",
            context={"block_id": block_id},
        )
        self.block_id = block_id


# =============================================================================
# Storage Errors
# =============================================================================


class DatabaseError(CourseCraftError):
    """Database operation failed."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        table: str | None = None,
        recoverable: bool = False,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation
        if table:
            context["table"] = table
        super().__init__(message, recoverable=recoverable, context=context)


class NotFoundError(CourseCraftError):
    """Resource not found."""

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={"resource_type": resource_type, "resource_id": resource_id},
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CourseCraftError):
    """Configuration is invalid or incomplete."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={"setting": setting},
        )


def _truncate(value: str | None, max_len: int) -> str | None:
    """Truncate a string value for safe logging."""
    if value is None:
        return None
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."
