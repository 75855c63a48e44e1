"""Unit tests for the SDK client."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from core.config import MortalityConfig
from core.types import RenderOptions
from store.mortality_sdk import MortalityClient
from tests.fixture_paths import fixture_path


def _client(tmp_path) -> MortalityClient:
    config = replace(
        MortalityConfig.from_env(),
        cache_dir=tmp_path / "cache",
        output_dir=tmp_path / "output",
        worker_count=2,
    )
    return MortalityClient(config)


def _options() -> RenderOptions:
    return RenderOptions(
        source_uri=str(fixture_path("weekly_deaths.csv")),
        census_path=str(fixture_path("census.csv")),
        as_of=date(2022, 3, 1),
    )


def test_rankings_skips_images(tmp_path) -> None:
    """Rankings should compute tables without writing images."""
    result = _client(tmp_path).rankings(_options())

    assert result.image_paths == {} and not list((tmp_path / "output").glob("*.png"))
    assert result.snapshot.as_of == date(2021, 12, 25)


def test_fetch_returns_local_source(tmp_path) -> None:
    """Fetching a local path should return it unchanged."""
    source_path = _client(tmp_path).fetch(str(fixture_path("weekly_deaths.csv")))

    assert source_path == fixture_path("weekly_deaths.csv")


def test_with_cache_dir_returns_new_client(tmp_path) -> None:
    """Cache-dir override should not mutate the original client."""
    client = _client(tmp_path)

    updated = client.with_cache_dir(str(tmp_path / "other"))

    assert updated.config.cache_dir == (tmp_path / "other").resolve()
    assert client.config.cache_dir == tmp_path / "cache"


def test_with_worker_count_overrides_pool_size(tmp_path) -> None:
    """Worker override should only change the pool size."""
    updated = _client(tmp_path).with_worker_count(7)

    assert updated.config.worker_count == 7
