"""Unit tests for the cached source download."""

from __future__ import annotations

import os
import time
from dataclasses import replace

import pytest
import requests

from core.config import MortalityConfig
from core.errors import MortalityIngestError
from ingest.source_cache import SourceCache, build_cache_file_name, is_fresh
from ingest.source_reader import resolve_source_path

_URL = "https://data.example.org/api/views/abcd/rows.csv?accessType=DOWNLOAD"


class _FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.calls: list[str] = []
        self._response = response or _FakeResponse(b"State,Type\n")
        self._error = error

    def get(self, url: str, timeout: int) -> _FakeResponse:
        self.calls.append(url)
        if self._error is not None:
            raise self._error
        return self._response


def _config(tmp_path, ttl_hours: int = 24) -> MortalityConfig:
    return replace(MortalityConfig.from_env(), cache_dir=tmp_path / "cache", cache_ttl_hours=ttl_hours)


def test_fetch_downloads_and_caches(tmp_path) -> None:
    """First fetch should download and store the body."""
    session = _FakeSession(_FakeResponse(b"a,b\n1,2\n"))
    cache = SourceCache(_config(tmp_path), session=session)

    cached_file = cache.fetch(_URL)

    assert cached_file.read_bytes() == b"a,b\n1,2\n" and session.calls == [_URL]


def test_fetch_reuses_fresh_copy(tmp_path) -> None:
    """A cached copy younger than the TTL should be reused."""
    session = _FakeSession()
    cache = SourceCache(_config(tmp_path), session=session)

    cache.fetch(_URL)
    cache.fetch(_URL)

    assert len(session.calls) == 1


def test_fetch_downloads_again_when_expired(tmp_path) -> None:
    """A cached copy older than the TTL should be replaced."""
    session = _FakeSession()
    cache = SourceCache(_config(tmp_path, ttl_hours=1), session=session)
    cached_file = cache.fetch(_URL)
    two_hours_ago = time.time() - 7200
    os.utime(cached_file, (two_hours_ago, two_hours_ago))

    cache.fetch(_URL)

    assert len(session.calls) == 2


def test_fetch_refresh_ignores_fresh_copy(tmp_path) -> None:
    """Refresh should force a new download."""
    session = _FakeSession()
    cache = SourceCache(_config(tmp_path), session=session)

    cache.fetch(_URL)
    cache.fetch(_URL, refresh=True)

    assert len(session.calls) == 2


def test_fetch_wraps_network_errors(tmp_path) -> None:
    """Network failures should surface as ingest errors."""
    session = _FakeSession(error=requests.ConnectionError("offline"))
    cache = SourceCache(_config(tmp_path), session=session)

    with pytest.raises(MortalityIngestError, match="offline"):
        cache.fetch(_URL)


def test_fetch_wraps_http_status_errors(tmp_path) -> None:
    """HTTP error statuses should surface as ingest errors."""
    session = _FakeSession(_FakeResponse(b"", status_code=503))
    cache = SourceCache(_config(tmp_path), session=session)

    with pytest.raises(MortalityIngestError):
        cache.fetch(_URL)


def test_resolve_source_path_routes_urls_through_cache(tmp_path) -> None:
    """URL sources should be resolved to the cached file."""
    config = _config(tmp_path)
    cache = SourceCache(config, session=_FakeSession())

    source_path = resolve_source_path(_URL, config, cache=cache)

    assert source_path == cache.cache_path(_URL) and source_path.exists()


def test_build_cache_file_name_is_flat() -> None:
    """Cache file names should not contain path separators."""
    file_name = build_cache_file_name(_URL)

    assert "/" not in file_name and file_name.startswith("data.example.org")


def test_is_fresh_boundary() -> None:
    """Copies exactly as old as the TTL are expired."""
    assert is_fresh(10, 11) and not is_fresh(11, 11)
