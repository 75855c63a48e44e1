"""Shared pytest fixtures for observed-deaths tests."""

from __future__ import annotations

import pytest

_MORTALITY_ENV_VARS = (
    "MORTALITY_CACHE_DIR",
    "MORTALITY_OUTPUT_DIR",
    "MORTALITY_SOURCE_URL",
    "MORTALITY_CACHE_TTL_HOURS",
    "MORTALITY_WORKERS",
)


@pytest.fixture(autouse=True)
def _isolate_mortality_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer MORTALITY_* overrides out of test runs."""
    for name in _MORTALITY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
