"""Zone map pruning: decide which pages a predicate can skip.

Every rule here answers one question for a page: can the page be *proven* to
hold no row satisfying the predicate? A ``True`` answer discards the page, so
each rule must only fire when the stored bounds make a match impossible.
Anything the evaluator does not understand answers ``False``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from zonemap.config import IndexerConfig
from zonemap.errors import TypeMismatchError
from zonemap.models import (
    DiagnosticKind,
    IndexSchema,
    PruneDiagnostic,
    PruneResult,
    SparseIndexValue,
    index_schema_mapping,
)
from zonemap.predicates import (
    And,
    ColumnRef,
    Comparison,
    ComparisonOp,
    IsNotNull,
    IsNull,
    Literal,
    Not,
    Or,
    referenced_columns,
)
from zonemap.values import Ordering, Value, coerce_value, compare

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Zone:
    """Bounds of one column over one page, or over a whole file."""

    min: Value | None
    max: Value | None
    has_null: bool

    @property
    def bounded(self) -> bool:
        return self.min is not None and self.max is not None

    @classmethod
    def for_page(cls, entry: SparseIndexValue) -> Zone:
        return cls(min=entry.min, max=entry.max, has_null=entry.has_null)

    @classmethod
    def for_file(cls, schema: IndexSchema) -> Zone:
        return cls(
            min=schema.min_max.min,
            max=schema.min_max.max,
            has_null=any(page.has_null for page in schema.sparse),
        )


type ZoneLookup = Callable[[str], Zone | None]
type BoundsRule = Callable[[Value, Value, Value], bool]


_COMPARISON_RULES: dict[ComparisonOp, BoundsRule] = {
    ComparisonOp.EQ: lambda low, high, lit: (
        compare(lit, low) is Ordering.LESS or compare(lit, high) is Ordering.GREATER
    ),
    ComparisonOp.NE: lambda low, high, lit: (
        compare(low, high) is Ordering.EQUAL and compare(low, lit) is Ordering.EQUAL
    ),
    ComparisonOp.LT: lambda low, _high, lit: compare(low, lit) is not Ordering.LESS,
    ComparisonOp.LE: lambda low, _high, lit: compare(low, lit) is Ordering.GREATER,
    ComparisonOp.GT: lambda _low, high, lit: compare(high, lit) is not Ordering.GREATER,
    ComparisonOp.GE: lambda _low, high, lit: compare(high, lit) is Ordering.LESS,
}


class _Notes:
    """Deduplicated diagnostics gathered across evaluation passes."""

    def __init__(self) -> None:
        self._items: dict[tuple[DiagnosticKind, str], PruneDiagnostic] = {}

    def add(self, kind: DiagnosticKind, detail: str) -> None:
        self._items.setdefault((kind, detail), PruneDiagnostic(kind=kind, detail=detail))

    def items(self) -> tuple[PruneDiagnostic, ...]:
        return tuple(self._items.values())


def _comparison_excludes(
    op: ComparisonOp,
    node: Comparison,
    lookup: ZoneLookup,
    notes: _Notes,
) -> bool:
    zone = lookup(node.column)
    if zone is None:
        return False
    if zone.min is None or zone.max is None:
        return False
    literal = coerce_value(node.literal, zone.min.kind)
    if literal is None:
        notes.add(
            DiagnosticKind.LITERAL_MISMATCH,
            f"{node.column}: {node.literal.kind} literal against {zone.min.kind} column",
        )
        return False
    if literal.data is None:
        return False
    try:
        return _COMPARISON_RULES[op](zone.min, zone.max, literal)
    except (TypeMismatchError, ValueError) as exc:
        notes.add(DiagnosticKind.INVALID_BOUNDS, f"{node.column}: {exc}")
        return False


def _null_check_excludes(column: str, lookup: ZoneLookup, *, want_null: bool) -> bool:
    zone = lookup(column)
    if zone is None:
        return False
    if want_null:
        return not zone.has_null
    return not zone.bounded


def _excludes(predicate: object, lookup: ZoneLookup, notes: _Notes) -> bool:
    """Return whether the zones returned by ``lookup`` cannot satisfy ``predicate``.

    Parameters
    ----------
    predicate
        Predicate tree; unknown node types never exclude.
    lookup
        Zone for a column name, or ``None`` when nothing is known about it.
    notes
        Diagnostics sink.

    Returns
    -------
    bool
        ``True`` only when no row in the zone can match.
    """
    if isinstance(predicate, Comparison):
        return _comparison_excludes(predicate.op, predicate, lookup, notes)
    if isinstance(predicate, IsNull):
        return _null_check_excludes(predicate.column, lookup, want_null=True)
    if isinstance(predicate, IsNotNull):
        return _null_check_excludes(predicate.column, lookup, want_null=False)
    if isinstance(predicate, And):
        left = _excludes(predicate.left, lookup, notes)
        right = _excludes(predicate.right, lookup, notes)
        return left or right
    if isinstance(predicate, Or):
        left = _excludes(predicate.left, lookup, notes)
        right = _excludes(predicate.right, lookup, notes)
        return left and right
    if isinstance(predicate, Not):
        operand = predicate.operand
        if isinstance(operand, Comparison):
            return _comparison_excludes(operand.op.negated(), operand, lookup, notes)
        return False
    if isinstance(predicate, (Literal, ColumnRef)):
        return False
    notes.add(DiagnosticKind.UNSUPPORTED_NODE, type(predicate).__name__)
    return False


def _page_universe(schemas: Mapping[str, IndexSchema]) -> frozenset[int]:
    return frozenset(entry.page_no for schema in schemas.values() for entry in schema.sparse)


def _page_lookups(
    schemas: Mapping[str, IndexSchema],
    columns: Iterable[str],
) -> dict[str, dict[int, SparseIndexValue]]:
    return {
        column: {entry.page_no: entry for entry in schemas[column].sparse}
        for column in columns
        if column in schemas
    }


def evaluate(
    predicate: object,
    schemas: Mapping[str, IndexSchema] | Iterable[IndexSchema],
    *,
    config: IndexerConfig | None = None,
) -> PruneResult:
    """Return the pages that must be scanned for a predicate.

    Parameters
    ----------
    predicate
        Predicate tree.
    schemas
        Index schemas keyed by column name, or a sequence of schemas.
    config
        Pruning policy; defaults to ``IndexerConfig()``.

    Returns
    -------
    PruneResult
        Surviving page numbers, whether the file is proven empty for the
        predicate, and any diagnostics.
    """
    policy = config or IndexerConfig()
    by_column = index_schema_mapping(schemas)
    notes = _Notes()
    columns = sorted(referenced_columns(predicate))
    for column in columns:
        if column not in by_column:
            notes.add(DiagnosticKind.UNKNOWN_COLUMN, column)

    file_zones = {
        column: Zone.for_file(by_column[column]) for column in columns if column in by_column
    }
    if _excludes(predicate, file_zones.get, notes):
        result = PruneResult(scan_pages=frozenset(), proven_empty=True, diagnostics=notes.items())
        _log_result(result, total_pages=len(_page_universe(by_column)), policy=policy)
        return result

    page_tables = _page_lookups(by_column, columns)
    universe = _page_universe(by_column)
    scan_pages: set[int] = set()
    for page_no in sorted(universe):

        def lookup(column: str, page_no: int = page_no) -> Zone | None:
            entry = page_tables.get(column, {}).get(page_no)
            return None if entry is None else Zone.for_page(entry)

        if not _excludes(predicate, lookup, notes):
            scan_pages.add(page_no)
    result = PruneResult(
        scan_pages=frozenset(scan_pages),
        proven_empty=not scan_pages,
        diagnostics=notes.items(),
    )
    _log_result(result, total_pages=len(universe), policy=policy)
    return result


def _log_result(result: PruneResult, *, total_pages: int, policy: IndexerConfig) -> None:
    logger.debug(
        "Zone map pruning kept %d of %d pages (proven_empty=%s)",
        len(result.scan_pages),
        total_pages,
        result.proven_empty,
    )
    if policy.log_diagnostics:
        for diagnostic in result.diagnostics:
            logger.warning(
                "Pruning could not use a predicate subtree: %s %s",
                diagnostic.kind,
                diagnostic.detail,
            )


__all__ = ["Zone", "evaluate"]
