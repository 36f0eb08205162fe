"""Pytest configuration for zone map tests."""

from __future__ import annotations

import os

import hypothesis
import pytest

from zonemap.config import BUILD_THREADS_ENV, LOG_DIAGNOSTICS_ENV, PROFILE_ENV

hypothesis.settings.register_profile("ci", max_examples=300, deadline=None)
hypothesis.settings.register_profile("dev", max_examples=100, deadline=None)

hypothesis.settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _isolate_zonemap_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (PROFILE_ENV, BUILD_THREADS_ENV, LOG_DIAGNOSTICS_ENV):
        monkeypatch.delenv(name, raising=False)
