"""Property tests: pruning never drops a page holding a matching row."""

from __future__ import annotations

import math

import hypothesis.strategies as st
import pyarrow as pa
from hypothesis import given

from tests.test_helpers.predicate_oracle import row_selected
from tests.test_helpers.zonemap_blocks import arrow_block
from zonemap.block import ArrowBlock
from zonemap.builder import create_index
from zonemap.evaluator import evaluate
from zonemap.predicates import And, ComparisonOp, IsNotNull, IsNull, Not, Or, comparison, lt
from zonemap.values import Ordering, compare

_SCHEMA = pa.schema([("a", pa.int64()), ("b", pa.string()), ("c", pa.float64())])
_COLUMNS = ("a", "b", "c")
_FLOATS = [-math.inf, -1.5, -0.0, 0.0, 2.0, math.inf, math.nan]

_CELLS = {
    "a": st.none() | st.integers(-5, 5),
    "b": st.none() | st.text(alphabet="abc", max_size=3),
    "c": st.none() | st.sampled_from(_FLOATS),
}
_LITERALS = {
    "a": st.integers(-6, 6),
    "b": st.text(alphabet="abcd", max_size=3),
    "c": st.sampled_from(_FLOATS) | st.integers(-2, 2),
}


@st.composite
def block_lists(draw: st.DrawFn) -> list[ArrowBlock]:
    blocks: list[ArrowBlock] = []
    for _ in range(draw(st.integers(1, 5))):
        rows = draw(st.integers(0, 6))
        columns = {
            name: draw(st.lists(cells, min_size=rows, max_size=rows))
            for name, cells in _CELLS.items()
        }
        blocks.append(arrow_block(columns, schema=_SCHEMA))
    return blocks


@st.composite
def comparisons(draw: st.DrawFn) -> object:
    column = draw(st.sampled_from(_COLUMNS))
    # Mostly same-kind literals, sometimes another column's kind or null.
    literal = draw(
        st.one_of(
            _LITERALS[column],
            _LITERALS[draw(st.sampled_from(_COLUMNS))],
            st.none(),
        )
    )
    return comparison(draw(st.sampled_from(list(ComparisonOp))), column, literal)


_LEAVES = st.one_of(
    comparisons(),
    st.builds(IsNull, column=st.sampled_from(_COLUMNS)),
    st.builds(IsNotNull, column=st.sampled_from(_COLUMNS)),
)
predicates = st.recursive(
    _LEAVES,
    lambda children: st.one_of(
        st.builds(And, left=children, right=children),
        st.builds(Or, left=children, right=children),
        st.builds(Not, operand=children),
    ),
    max_leaves=8,
)


def _matching_pages(predicate: object, blocks: list[ArrowBlock]) -> set[int]:
    matches: set[int] = set()
    for page_no, block in enumerate(blocks):
        columns = {name: block.column(name) for name in _COLUMNS}
        for row_no in range(block.num_rows):
            row = {name: values[row_no] for name, values in columns.items()}
            if row_selected(predicate, row):
                matches.add(page_no)
                break
    return matches


@given(blocks=block_lists(), predicate=predicates)
def test_pruning_is_sound(blocks: list[ArrowBlock], predicate: object) -> None:
    """Keep every page with a matching row; prove empty only when none match."""
    schemas = create_index(list(_COLUMNS), blocks)
    result = evaluate(predicate, schemas)
    matches = _matching_pages(predicate, blocks)
    assert matches <= result.scan_pages
    assert result.scan_pages <= set(range(len(blocks)))
    if result.proven_empty:
        assert not matches
        assert not result.scan_pages


@given(blocks=block_lists(), left=predicates, right=predicates)
def test_conjunction_never_widens(blocks: list[ArrowBlock], left: object, right: object) -> None:
    """Scan no more pages for ``p AND q`` than for ``p`` alone."""
    schemas = create_index(list(_COLUMNS), blocks)
    combined = evaluate(And(left=left, right=right), schemas)  # type: ignore[arg-type]
    assert combined.scan_pages <= evaluate(left, schemas).scan_pages
    assert combined.scan_pages <= evaluate(right, schemas).scan_pages


@given(blocks=block_lists(), low=st.integers(-6, 6), high=st.integers(-6, 6))
def test_range_pruning_is_monotonic(blocks: list[ArrowBlock], low: int, high: int) -> None:
    """Scan a subset of pages for a tighter upper bound."""
    low, high = min(low, high), max(low, high)
    schemas = create_index(list(_COLUMNS), blocks)
    tight = evaluate(lt("a", low), schemas).scan_pages
    assert tight <= evaluate(lt("a", high), schemas).scan_pages


@given(blocks=block_lists())
def test_global_bounds_cover_pages(blocks: list[ArrowBlock]) -> None:
    """Keep every page bound inside the global bound."""
    for schema in create_index(list(_COLUMNS), blocks):
        assert [entry.page_no for entry in schema.sparse] == list(range(len(blocks)))
        bounded = [entry for entry in schema.sparse if not entry.is_sentinel]
        assert schema.min_max.is_bounded == bool(bounded)
        for entry in bounded:
            assert compare(schema.min_max.min, entry.min) is not Ordering.GREATER
            assert compare(schema.min_max.max, entry.max) is not Ordering.LESS
            assert compare(entry.min, entry.max) is not Ordering.GREATER
