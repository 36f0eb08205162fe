"""Build per-column zone map indexes over an ordered block sequence."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import reduce

from zonemap.block import Block
from zonemap.config import IndexerConfig
from zonemap.errors import SchemaError, TypeMismatchError
from zonemap.models import IndexSchema, MinMaxIndex, SparseIndexValue
from zonemap.scanner import scan_block
from zonemap.values import Value, value_max, value_min

logger = logging.getLogger(__name__)

type Checkpoint = Callable[[], None]


def _validate_key(key: str, blocks: Sequence[Block]) -> None:
    kinds = [block.schema() for block in blocks]
    present = [key in schema for schema in kinds]
    if not any(present):
        msg = "Key column is absent from every block"
        raise SchemaError(msg, column=key)
    if not all(present):
        first_missing = present.index(False)
        msg = "Key column is absent from some blocks"
        raise SchemaError(msg, column=key, block_index=first_missing)
    expected = kinds[0][key]
    for index, schema in enumerate(kinds):
        kind = schema[key]
        if kind is None:
            msg = "Key column has an unsupported value kind"
            raise TypeMismatchError(msg, column=key, block_index=index)
        if kind != expected:
            msg = f"Key column kind {kind} differs from {expected}"
            raise TypeMismatchError(msg, column=key, block_index=index)


def _sparse_entry(block: Block, key: str, page_no: int) -> SparseIndexValue:
    try:
        stats = scan_block(block, key)
    except TypeMismatchError as exc:
        msg = "Block values disagree with the declared column kind"
        raise TypeMismatchError(msg, column=key, block_index=page_no) from exc
    return SparseIndexValue(
        min=stats.min,
        max=stats.max,
        page_no=page_no,
        has_null=stats.has_null or stats.all_null,
    )


def _fold_bounds(sparse: Sequence[SparseIndexValue]) -> MinMaxIndex:
    bounded = [entry for entry in sparse if not entry.is_sentinel]
    if not bounded:
        return MinMaxIndex.unbounded()
    lows: list[Value] = [entry.min for entry in bounded if entry.min is not None]
    highs: list[Value] = [entry.max for entry in bounded if entry.max is not None]
    return MinMaxIndex(min=reduce(value_min, lows), max=reduce(value_max, highs))


def build_key_index(
    key: str,
    blocks: Sequence[Block],
    *,
    checkpoint: Checkpoint | None = None,
) -> IndexSchema:
    """Build the index of one key column.

    Parameters
    ----------
    key
        Column name.
    blocks
        Blocks in file order; position is the page number.
    checkpoint
        Optional callable invoked before each block scan. Exceptions it raises
        abort the build.

    Returns
    -------
    IndexSchema
        Sparse per-page bounds plus the folded global bounds.
    """
    if not blocks:
        return IndexSchema(col=key, min_max=MinMaxIndex.unbounded(), sparse=())
    _validate_key(key, blocks)
    sparse: list[SparseIndexValue] = []
    for page_no, block in enumerate(blocks):
        if checkpoint is not None:
            checkpoint()
        sparse.append(_sparse_entry(block, key, page_no))
    return IndexSchema(col=key, min_max=_fold_bounds(sparse), sparse=tuple(sparse))


def create_index(
    keys: Sequence[str],
    blocks: Sequence[Block],
    *,
    config: IndexerConfig | None = None,
    checkpoint: Checkpoint | None = None,
) -> tuple[IndexSchema, ...]:
    """Build one index schema per key column.

    Parameters
    ----------
    keys
        Key column names; output preserves this order.
    blocks
        Blocks in file order.
    config
        Build policy; defaults to ``IndexerConfig()``.
    checkpoint
        Optional cooperative cancellation hook, called before each block scan.

    Returns
    -------
    tuple[IndexSchema, ...]
        Index schemas in key order.

    Raises
    ------
    SchemaError
        Raised when a key is absent from some or all blocks.
    TypeMismatchError
        Raised when a key's value kind is unsupported or differs across blocks.
    """
    policy = config or IndexerConfig()
    block_seq = tuple(blocks)
    workers = min(policy.build_threads, len(keys))
    if workers <= 1:
        schemas = tuple(build_key_index(key, block_seq, checkpoint=checkpoint) for key in keys)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(build_key_index, key, block_seq, checkpoint=checkpoint)
                for key in keys
            ]
            schemas = tuple(future.result() for future in futures)
    logger.debug(
        "Built zone map index for %d keys over %d blocks (threads=%d)",
        len(schemas),
        len(block_seq),
        max(workers, 1),
    )
    return schemas


__all__ = ["build_key_index", "create_index"]
