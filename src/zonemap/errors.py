"""Unified error types for index build surfaces."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categorize index build errors."""

    SCHEMA = "schema"
    TYPE_MISMATCH = "type_mismatch"


class ZoneMapError(Exception):
    """Base exception for zone map index failures."""

    def __init__(self, message: str, *, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


def _located(message: str, column: str | None, block_index: int | None) -> str:
    parts: list[str] = []
    if column is not None:
        parts.append(f"column={column!r}")
    if block_index is not None:
        parts.append(f"block={block_index}")
    if not parts:
        return message
    return f"{message} ({', '.join(parts)})"


class SchemaError(ZoneMapError, ValueError):
    """Raised when a key column is absent from a block or inconsistently present."""

    def __init__(
        self,
        message: str,
        *,
        column: str,
        block_index: int | None = None,
    ) -> None:
        self.column = column
        self.block_index = block_index
        super().__init__(_located(message, column, block_index), kind=ErrorKind.SCHEMA)


class TypeMismatchError(ZoneMapError, TypeError):
    """Raised when value kinds disagree or a value kind is unsupported."""

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        block_index: int | None = None,
    ) -> None:
        self.column = column
        self.block_index = block_index
        super().__init__(
            _located(message, column, block_index),
            kind=ErrorKind.TYPE_MISMATCH,
        )


__all__ = [
    "ErrorKind",
    "SchemaError",
    "TypeMismatchError",
    "ZoneMapError",
]
