"""Index capability: build summaries at write time, prune at query time."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from zonemap.block import Block
from zonemap.builder import Checkpoint, create_index
from zonemap.config import IndexerConfig
from zonemap.evaluator import evaluate
from zonemap.models import IndexSchema, PruneResult


class Index(Protocol):
    """Protocol for zone map index implementations."""

    def create_index(
        self,
        keys: Sequence[str],
        blocks: Sequence[Block],
    ) -> tuple[IndexSchema, ...]:
        """Create one index schema per key from blocks in file order."""
        ...

    def evaluate(
        self,
        predicate: object,
        schemas: Mapping[str, IndexSchema] | Iterable[IndexSchema],
    ) -> PruneResult:
        """Return the pages a scan must read for a predicate."""
        ...


class Indexer:
    """Zone map index bound to one configuration.

    Each block is one row group of a file, in file order::

        file
        | block 0 | block 1 | ... |

    ``create_index`` records bounds per block; ``evaluate`` uses them to skip
    blocks that cannot match a filter.
    """

    def __init__(self, config: IndexerConfig) -> None:
        self.config = config

    @classmethod
    def create(cls, config: IndexerConfig | None = None) -> Indexer:
        """Return an indexer, resolving config from the environment if omitted.

        Returns
        -------
        Indexer
            Configured indexer.
        """
        return cls(config if config is not None else IndexerConfig.from_env())

    def create_index(
        self,
        keys: Sequence[str],
        blocks: Sequence[Block],
        *,
        checkpoint: Checkpoint | None = None,
    ) -> tuple[IndexSchema, ...]:
        """Create one index schema per key from blocks in file order.

        Returns
        -------
        tuple[IndexSchema, ...]
            Index schemas in key order.
        """
        return create_index(keys, blocks, config=self.config, checkpoint=checkpoint)

    def evaluate(
        self,
        predicate: object,
        schemas: Mapping[str, IndexSchema] | Iterable[IndexSchema],
    ) -> PruneResult:
        """Return the pages a scan must read for a predicate.

        Returns
        -------
        PruneResult
            Pruning outcome.
        """
        return evaluate(predicate, schemas, config=self.config)


__all__ = ["Index", "Indexer"]
