"""Persisted index records and pruning results."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum

from zonemap.serde_msgspec import (
    StructBaseRecord,
    StructBaseStrict,
    dumps_json,
    dumps_msgpack,
    loads_json,
    loads_msgpack,
)
from zonemap.values import Value, resolve_float_tokens


class SparseIndexValue(StructBaseRecord):
    """Bounds observed within one block for one column.

    ``min``/``max`` of ``None`` mark a sentinel page without a usable bound,
    written for blocks with no non-null value (zero-row blocks included);
    sentinels always carry ``has_null=True``.
    """

    min: Value | None
    max: Value | None
    page_no: int
    has_null: bool

    @property
    def is_sentinel(self) -> bool:
        """Return whether the page carries no usable bound.

        Returns
        -------
        bool
            ``True`` for all-null pages.
        """
        return self.min is None or self.max is None


class MinMaxIndex(StructBaseRecord):
    """Bounds across all non-null values of a column."""

    min: Value | None
    max: Value | None

    @classmethod
    def unbounded(cls) -> MinMaxIndex:
        """Return the "no bound" sentinel.

        Returns
        -------
        MinMaxIndex
            Index with neither bound set.
        """
        return cls(min=None, max=None)

    @property
    def is_bounded(self) -> bool:
        """Return whether both bounds are set.

        Returns
        -------
        bool
            ``True`` when the column had at least one non-null value.
        """
        return self.min is not None and self.max is not None


class IndexSchema(StructBaseRecord):
    """Summary of one column over an ordered block sequence."""

    col: str
    min_max: MinMaxIndex
    sparse: tuple[SparseIndexValue, ...]

    @property
    def page_count(self) -> int:
        """Return the number of pages summarized.

        Returns
        -------
        int
            Count of sparse entries.
        """
        return len(self.sparse)


class DiagnosticKind(StrEnum):
    """Reasons a predicate subtree could not be used for pruning."""

    UNSUPPORTED_NODE = "unsupported_node"
    UNKNOWN_COLUMN = "unknown_column"
    LITERAL_MISMATCH = "literal_mismatch"
    INVALID_BOUNDS = "invalid_bounds"


class PruneDiagnostic(StructBaseStrict):
    """Note about a predicate subtree that could not be used for pruning."""

    kind: DiagnosticKind
    detail: str


class PruneResult(StructBaseRecord):
    """Pages a scan must read for a predicate."""

    scan_pages: frozenset[int]
    proven_empty: bool
    diagnostics: tuple[PruneDiagnostic, ...] = ()


def schemas_by_column(schemas: Iterable[IndexSchema]) -> dict[str, IndexSchema]:
    """Key index schemas by column name.

    Returns
    -------
    dict[str, IndexSchema]
        Mapping of column name to schema; later duplicates win.
    """
    return {schema.col: schema for schema in schemas}


def _resolved_bound(value: Value | None) -> Value | None:
    return None if value is None else resolve_float_tokens(value)


def _resolved_schema(schema: IndexSchema) -> IndexSchema:
    return IndexSchema(
        col=schema.col,
        min_max=MinMaxIndex(
            min=_resolved_bound(schema.min_max.min),
            max=_resolved_bound(schema.min_max.max),
        ),
        sparse=tuple(
            SparseIndexValue(
                min=_resolved_bound(entry.min),
                max=_resolved_bound(entry.max),
                page_no=entry.page_no,
                has_null=entry.has_null,
            )
            for entry in schema.sparse
        ),
    )


def dumps_index_schemas(
    schemas: Sequence[IndexSchema],
    *,
    fmt: str = "json",
) -> bytes:
    """Serialize index schemas for sidecar persistence.

    Parameters
    ----------
    schemas
        Index schemas in key order.
    fmt
        ``"json"`` or ``"msgpack"``.

    Returns
    -------
    bytes
        Encoded payload.

    Raises
    ------
    ValueError
        Raised when the format is unknown.
    """
    payload = tuple(schemas)
    if fmt == "json":
        return dumps_json(payload)
    if fmt == "msgpack":
        return dumps_msgpack(payload)
    msg = f"Unknown index payload format: {fmt!r}"
    raise ValueError(msg)


def loads_index_schemas(buf: bytes, *, fmt: str = "json") -> tuple[IndexSchema, ...]:
    """Deserialize index schemas written by ``dumps_index_schemas``.

    Non-finite float bounds written as JSON tokens are restored as floats.

    Returns
    -------
    tuple[IndexSchema, ...]
        Decoded schemas in their persisted order.

    Raises
    ------
    ValueError
        Raised when the format is unknown.
    """
    if fmt == "json":
        decoded = loads_json(buf, target_type=tuple[IndexSchema, ...])
        return tuple(_resolved_schema(schema) for schema in decoded)
    if fmt == "msgpack":
        return loads_msgpack(buf, target_type=tuple[IndexSchema, ...])
    msg = f"Unknown index payload format: {fmt!r}"
    raise ValueError(msg)


def index_schema_mapping(
    schemas: Mapping[str, IndexSchema] | Iterable[IndexSchema],
) -> Mapping[str, IndexSchema]:
    """Normalize a mapping or sequence of schemas to a column mapping.

    Returns
    -------
    Mapping[str, IndexSchema]
        Column name to schema.
    """
    if isinstance(schemas, Mapping):
        return schemas
    return schemas_by_column(schemas)


__all__ = [
    "DiagnosticKind",
    "IndexSchema",
    "MinMaxIndex",
    "PruneDiagnostic",
    "PruneResult",
    "SparseIndexValue",
    "dumps_index_schemas",
    "index_schema_mapping",
    "loads_index_schemas",
    "schemas_by_column",
]
