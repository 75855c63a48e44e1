"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import MortalityConfig
from core.constants import DEFAULT_CACHE_TTL_HOURS, DEFAULT_SOURCE_URL, DEFAULT_WORKER_COUNT
from core.errors import MortalityConfigError


def test_from_env_reads_cache_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve cache directory from environment."""
    monkeypatch.setenv("MORTALITY_CACHE_DIR", "./.tmp-mortality-cache")

    config = MortalityConfig.from_env()

    assert config.cache_dir.name == ".tmp-mortality-cache" and config.cache_dir.is_absolute()


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fall back to built-in defaults when variables are unset."""
    for variable in (
        "MORTALITY_SOURCE_URL",
        "MORTALITY_CACHE_TTL_HOURS",
        "MORTALITY_WORKERS",
    ):
        monkeypatch.delenv(variable, raising=False)

    config = MortalityConfig.from_env()

    assert (config.source_url, config.cache_ttl_hours, config.worker_count) == (
        DEFAULT_SOURCE_URL,
        DEFAULT_CACHE_TTL_HOURS,
        DEFAULT_WORKER_COUNT,
    )


def test_from_env_reads_worker_count(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should parse the worker pool size."""
    monkeypatch.setenv("MORTALITY_WORKERS", "8")

    config = MortalityConfig.from_env()

    assert config.worker_count == 8


def test_from_env_raises_for_invalid_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric cache TTL."""
    monkeypatch.setenv("MORTALITY_CACHE_TTL_HOURS", "not-a-number")

    with pytest.raises(MortalityConfigError):
        MortalityConfig.from_env()

    assert os.getenv("MORTALITY_CACHE_TTL_HOURS") == "not-a-number"


def test_from_env_raises_for_zero_workers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject a non-positive worker count."""
    monkeypatch.setenv("MORTALITY_WORKERS", "0")

    with pytest.raises(MortalityConfigError):
        MortalityConfig.from_env()
