"""Zone map indexes: per-block column bounds and predicate-based page pruning."""

from __future__ import annotations

from zonemap.block import ArrowBlock, Block, blocks_from_batches, blocks_from_table
from zonemap.builder import create_index
from zonemap.config import IndexerConfig
from zonemap.errors import ErrorKind, SchemaError, TypeMismatchError, ZoneMapError
from zonemap.evaluator import evaluate
from zonemap.indexer import Index, Indexer
from zonemap.models import (
    IndexSchema,
    MinMaxIndex,
    PruneDiagnostic,
    PruneResult,
    SparseIndexValue,
    dumps_index_schemas,
    loads_index_schemas,
)
from zonemap.values import Value, ValueKind, compare, infer_value, is_null, make_value

__all__ = [
    "ArrowBlock",
    "Block",
    "ErrorKind",
    "Index",
    "IndexSchema",
    "Indexer",
    "IndexerConfig",
    "MinMaxIndex",
    "PruneDiagnostic",
    "PruneResult",
    "SchemaError",
    "SparseIndexValue",
    "TypeMismatchError",
    "Value",
    "ValueKind",
    "ZoneMapError",
    "blocks_from_batches",
    "blocks_from_table",
    "compare",
    "create_index",
    "dumps_index_schemas",
    "evaluate",
    "infer_value",
    "is_null",
    "loads_index_schemas",
    "make_value",
]
