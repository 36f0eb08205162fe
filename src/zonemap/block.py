"""Block boundary: the protocol blocks satisfy and the Arrow adapter."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Protocol, runtime_checkable

import pyarrow as pa

from zonemap.values import Value, ValueKind

type ArrowData = pa.RecordBatch | pa.Table


@runtime_checkable
class Block(Protocol):
    """Immutable columnar batch of rows, one page of a file.

    ``schema`` maps every column name to its value kind, or ``None`` when the
    column's physical type has no supported kind.
    """

    @property
    def num_rows(self) -> int:
        """Return the number of rows in the block."""
        ...

    def schema(self) -> Mapping[str, ValueKind | None]:
        """Return the column kinds of the block."""
        ...

    def column(self, name: str) -> Sequence[Value]:
        """Return the ordered values of a column."""
        ...


_ARROW_KIND_CHECKS: tuple[tuple[Callable[[pa.DataType], bool], ValueKind], ...] = (
    (pa.types.is_int8, ValueKind.INT8),
    (pa.types.is_int16, ValueKind.INT16),
    (pa.types.is_int32, ValueKind.INT32),
    (pa.types.is_int64, ValueKind.INT64),
    (pa.types.is_uint8, ValueKind.UINT8),
    (pa.types.is_uint16, ValueKind.UINT16),
    (pa.types.is_uint32, ValueKind.UINT32),
    (pa.types.is_uint64, ValueKind.UINT64),
    (pa.types.is_float32, ValueKind.FLOAT32),
    (pa.types.is_float64, ValueKind.FLOAT64),
    (pa.types.is_string, ValueKind.UTF8),
    (pa.types.is_large_string, ValueKind.UTF8),
)


def value_kind_for_arrow(dtype: pa.DataType) -> ValueKind | None:
    """Return the value kind for an Arrow data type.

    Dictionary-encoded columns resolve through their value type.

    Returns
    -------
    ValueKind | None
        Matching kind, or ``None`` when the type is unsupported.
    """
    if pa.types.is_dictionary(dtype):
        return value_kind_for_arrow(dtype.value_type)
    for check, kind in _ARROW_KIND_CHECKS:
        if check(dtype):
            return kind
    return None


class ArrowBlock:
    """Block backed by a pyarrow ``RecordBatch`` or ``Table``."""

    __slots__ = ("_data", "_kinds")

    def __init__(self, data: ArrowData) -> None:
        self._data = data
        self._kinds: dict[str, ValueKind | None] = {
            field.name: value_kind_for_arrow(field.type) for field in data.schema
        }

    @property
    def num_rows(self) -> int:
        """Return the number of rows in the block.

        Returns
        -------
        int
            Row count.
        """
        return int(self._data.num_rows)

    @property
    def arrow(self) -> ArrowData:
        """Return the wrapped Arrow data.

        Returns
        -------
        ArrowData
            Underlying record batch or table.
        """
        return self._data

    def schema(self) -> Mapping[str, ValueKind | None]:
        """Return the column kinds of the block.

        Returns
        -------
        Mapping[str, ValueKind | None]
            Column name to value kind.
        """
        return dict(self._kinds)

    def column(self, name: str) -> Sequence[Value]:
        """Return the ordered values of a column.

        Returns
        -------
        Sequence[Value]
            One value per row, nulls included.

        Raises
        ------
        KeyError
            Raised when the column is absent or has no supported kind.
        """
        kind = self._kinds.get(name)
        if kind is None:
            msg = f"Column {name!r} is absent or unsupported"
            raise KeyError(msg)
        return [Value(kind=kind, data=item) for item in self._data.column(name).to_pylist()]

    def __repr__(self) -> str:
        return f"ArrowBlock(num_rows={self.num_rows}, columns={list(self._kinds)})"


def blocks_from_batches(batches: Iterable[pa.RecordBatch]) -> tuple[ArrowBlock, ...]:
    """Wrap record batches as blocks, preserving order.

    Returns
    -------
    tuple[ArrowBlock, ...]
        One block per batch.
    """
    return tuple(ArrowBlock(batch) for batch in batches)


def blocks_from_table(table: pa.Table, *, rows_per_block: int) -> tuple[ArrowBlock, ...]:
    """Split a table into blocks of at most ``rows_per_block`` rows.

    Returns
    -------
    tuple[ArrowBlock, ...]
        Blocks in table order.

    Raises
    ------
    ValueError
        Raised when ``rows_per_block`` is not positive.
    """
    if rows_per_block <= 0:
        msg = f"rows_per_block must be positive, got {rows_per_block}"
        raise ValueError(msg)
    return blocks_from_batches(table.to_batches(max_chunksize=rows_per_block))


__all__ = [
    "ArrowBlock",
    "Block",
    "blocks_from_batches",
    "blocks_from_table",
    "value_kind_for_arrow",
]
