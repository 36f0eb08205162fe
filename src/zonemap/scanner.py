"""Single-pass per-block column bounds."""

from __future__ import annotations

from dataclasses import dataclass

from zonemap.block import Block
from zonemap.errors import SchemaError, TypeMismatchError
from zonemap.values import Ordering, Value, compare


@dataclass(frozen=True)
class BlockStats:
    """Bounds and null presence for one column of one block."""

    min: Value | None
    max: Value | None
    has_null: bool
    all_null: bool
    row_count: int


def scan_block(block: Block, column: str) -> BlockStats:
    """Compute min/max bounds and null presence of a block column.

    Parameters
    ----------
    block
        Block to scan.
    column
        Column name to summarize.

    Returns
    -------
    BlockStats
        Bounds over the non-null values; ``all_null`` with no bounds when the
        block has no non-null value.

    Raises
    ------
    SchemaError
        Raised when the column is absent from the block.
    TypeMismatchError
        Raised when the column kind is unsupported or a value disagrees with it.
    """
    kinds = block.schema()
    if column not in kinds:
        msg = "Column is absent from block"
        raise SchemaError(msg, column=column)
    kind = kinds[column]
    if kind is None:
        msg = "Column has an unsupported value kind"
        raise TypeMismatchError(msg, column=column)
    low: Value | None = None
    high: Value | None = None
    has_null = False
    rows = 0
    for value in block.column(column):
        rows += 1
        if value.data is None:
            has_null = True
            continue
        if value.kind != kind:
            msg = f"Value of kind {value.kind} in a {kind} column"
            raise TypeMismatchError(msg, column=column)
        if low is None or high is None:
            low = high = value
            continue
        if compare(value, low) is Ordering.LESS:
            low = value
        elif compare(value, high) is Ordering.GREATER:
            high = value
    all_null = low is None
    return BlockStats(
        min=low,
        max=high,
        has_null=has_null,
        all_null=all_null,
        row_count=rows,
    )


__all__ = ["BlockStats", "scan_block"]
