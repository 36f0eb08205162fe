from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace

from zonemap.env_utils import env_bool, env_int, env_text

PROFILE_ENV = "ZONEMAP_PROFILE"
BUILD_THREADS_ENV = "ZONEMAP_BUILD_THREADS"
LOG_DIAGNOSTICS_ENV = "ZONEMAP_LOG_DIAGNOSTICS"

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexerConfig:
    """Runtime policy for index build and pruning.

    Keep this intentionally small:
      - build parallelism
      - diagnostics surfacing
    Pruning semantics live in the evaluator, not here.
    """

    name: str = "DEFAULT"

    # Worker threads for per-key builds; 1 builds keys serially.
    build_threads: int = 1

    # Log pruning diagnostics at WARNING in addition to returning them.
    log_diagnostics: bool = True

    def __post_init__(self) -> None:
        if self.build_threads < 1:
            msg = f"build_threads must be >= 1, got {self.build_threads}"
            raise ValueError(msg)

    @classmethod
    def profile(cls, name: str) -> IndexerConfig:
        profile = DEFAULT_INDEXER_PROFILES.get(name)
        if profile is None:
            raise KeyError(f"Unknown indexer profile={name!r}")
        return profile

    @classmethod
    def from_env(cls) -> IndexerConfig:
        """Resolve the configured profile, then apply env overrides.

        Returns
        -------
        IndexerConfig
            Effective configuration.
        """
        base = cls.profile(env_text(PROFILE_ENV, default="DEFAULT") or "DEFAULT")
        threads = env_int(BUILD_THREADS_ENV, default=base.build_threads)
        if threads < 1:
            _LOGGER.warning("Invalid thread count for %s: %r", BUILD_THREADS_ENV, threads)
            threads = base.build_threads
        return replace(
            base,
            build_threads=threads,
            log_diagnostics=env_bool(LOG_DIAGNOSTICS_ENV, default=base.log_diagnostics),
        )


# --------------------------
# Default policy registry
# --------------------------

DEFAULT_INDEXER_PROFILES: Mapping[str, IndexerConfig] = {
    # Serial build; deterministic and cheap for small block sets.
    "DEFAULT": IndexerConfig(name="DEFAULT", build_threads=1, log_diagnostics=True),
    # Keys fan out over a thread pool.
    "THROUGHPUT": IndexerConfig(name="THROUGHPUT", build_threads=8, log_diagnostics=True),
    # Quiet pruning for hot query paths; diagnostics are still returned.
    "QUIET": IndexerConfig(name="QUIET", build_threads=1, log_diagnostics=False),
}
