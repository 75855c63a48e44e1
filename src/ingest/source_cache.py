"""Cached download of the upstream mortality export.

This module fetches the export over HTTP and keeps one copy on disk.
A cached copy younger than the configured TTL is reused as-is.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import Any

import requests

from core.config import MortalityConfig
from core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from core.errors import MortalityIngestError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)
_UNSAFE_FILE_CHARACTERS = re.compile(r"[^A-Za-z0-9._=&-]")


class SourceCache:
    """Filesystem-backed download cache with a staleness TTL."""

    def __init__(self, config: MortalityConfig, session: Any | None = None) -> None:
        self._cache_dir = config.cache_dir
        self._ttl_seconds = config.cache_ttl_hours * 3600
        self._session = session if session is not None else requests.Session()

    def fetch(self, url: str, refresh: bool = False) -> Path:
        """Return a local path holding the body of ``url``.

        Args:
            url: HTTP(S) location of the export.
            refresh: Download even when a fresh cached copy exists.

        Returns:
            Path of the cached file.

        Raises:
            MortalityIngestError: If the download fails.
        """
        cached_file = self.cache_path(url)
        if cached_file.exists():
            age_seconds = time.time() - cached_file.stat().st_mtime
            if not refresh and is_fresh(age_seconds, self._ttl_seconds):
                _LOGGER.info("source_cache_hit", path=str(cached_file), age_seconds=round(age_seconds))
                return cached_file
            _LOGGER.info(
                "source_cache_expired",
                path=str(cached_file),
                age_seconds=round(age_seconds),
                refresh=refresh,
            )
            cached_file.unlink()
        body = self._download(url)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        cached_file.write_bytes(body)
        _LOGGER.info("source_fetched", url=url, path=str(cached_file), size_bytes=len(body))
        return cached_file

    def cache_path(self, url: str) -> Path:
        """Return the cache file path used for ``url``."""
        return self._cache_dir / build_cache_file_name(url)

    def _download(self, url: str) -> bytes:
        try:
            response = self._session.get(url, timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as error:
            raise MortalityIngestError(
                f"Failed to download mortality data from {url}: {error}. "
                "Check network access or pass a local --source file."
            ) from error
        return response.content


def build_cache_file_name(url: str) -> str:
    """Flatten a URL into a single safe file name."""
    without_scheme = url.split("://", 1)[-1]
    return _UNSAFE_FILE_CHARACTERS.sub("-", without_scheme)


def is_fresh(age_seconds: float, ttl_seconds: float) -> bool:
    """Return whether a cached copy of the given age is still usable."""
    return age_seconds < ttl_seconds
