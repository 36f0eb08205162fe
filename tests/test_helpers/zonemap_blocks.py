"""Helpers for building blocks and index schemas in tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pyarrow as pa

from zonemap.block import ArrowBlock
from zonemap.models import IndexSchema, MinMaxIndex, SparseIndexValue
from zonemap.values import Value, ValueKind, make_value


def arrow_block(
    columns: Mapping[str, Sequence[object]],
    schema: pa.Schema | None = None,
) -> ArrowBlock:
    """Build an Arrow-backed block from Python columns.

    Returns
    -------
    ArrowBlock
        Block wrapping a record batch.
    """
    return ArrowBlock(pa.RecordBatch.from_pydict(dict(columns), schema=schema))


class ListBlock:
    """Block over plain Python values, used to exercise protocol edge cases."""

    def __init__(self, columns: Mapping[str, tuple[ValueKind | None, Sequence[Value]]]) -> None:
        self._columns = dict(columns)

    @property
    def num_rows(self) -> int:
        if not self._columns:
            return 0
        return max(len(values) for _, values in self._columns.values())

    def schema(self) -> Mapping[str, ValueKind | None]:
        return {name: kind for name, (kind, _) in self._columns.items()}

    def column(self, name: str) -> Sequence[Value]:
        return list(self._columns[name][1])


def v(kind: ValueKind, data: object) -> Value:
    """Shorthand for a validated value.

    Returns
    -------
    Value
        Value of ``kind``.
    """
    return make_value(kind, data)


def page(
    page_no: int,
    low: Value | None,
    high: Value | None,
    *,
    has_null: bool = False,
) -> SparseIndexValue:
    """Build a sparse entry.

    Returns
    -------
    SparseIndexValue
        Sparse index entry.
    """
    return SparseIndexValue(min=low, max=high, page_no=page_no, has_null=has_null)


def int_schema(
    col: str,
    bounds: Sequence[tuple[int, int] | None],
    *,
    nulls: Sequence[int] = (),
) -> IndexSchema:
    """Build an int64 index schema from per-page bounds.

    ``None`` bounds produce all-null sentinel pages; ``nulls`` lists pages
    flagged with nulls.

    Returns
    -------
    IndexSchema
        Schema with folded global bounds.
    """
    entries: list[SparseIndexValue] = []
    for page_no, bound in enumerate(bounds):
        if bound is None:
            entries.append(page(page_no, None, None, has_null=True))
            continue
        low, high = bound
        entries.append(
            page(
                page_no,
                v(ValueKind.INT64, low),
                v(ValueKind.INT64, high),
                has_null=page_no in nulls,
            )
        )
    real = [bound for bound in bounds if bound is not None]
    if real:
        min_max = MinMaxIndex(
            min=v(ValueKind.INT64, min(low for low, _ in real)),
            max=v(ValueKind.INT64, max(high for _, high in real)),
        )
    else:
        min_max = MinMaxIndex.unbounded()
    return IndexSchema(col=col, min_max=min_max, sparse=tuple(entries))
