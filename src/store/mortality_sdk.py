"""Python SDK surface for observed-deaths runs.

This module wraps the render pipeline and the source cache behind a
small client. The CLI and library users share this entry point.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import MortalityConfig
from core.types import RenderOptions, RenderRunResult
from ingest.pipeline import run_render_pipeline
from ingest.source_cache import SourceCache
from ingest.source_reader import resolve_source_path


class MortalityClient:
    """Primary SDK entry point."""

    def __init__(self, config: MortalityConfig | None = None, cache: SourceCache | None = None) -> None:
        """Initialize client with runtime config.

        Args:
            config: Optional runtime configuration.
            cache: Optional source cache, mainly for tests.
        """
        self._config = config or MortalityConfig.from_env()
        self._cache = cache

    @property
    def config(self) -> MortalityConfig:
        """Runtime configuration used by this client."""
        return self._config

    def render(self, options: RenderOptions) -> RenderRunResult:
        """Render region images and write every report.

        Args:
            options: Render request options.

        Returns:
            Written artifacts and computed rankings.
        """
        return run_render_pipeline(options, self._config, self._cache)

    def rankings(self, options: RenderOptions) -> RenderRunResult:
        """Compute rankings and reports without rendering images."""
        return run_render_pipeline(replace(options, render_images=False), self._config, self._cache)

    def fetch(self, source_uri: str | None = None, refresh: bool = False) -> Path:
        """Download or reuse the cached source export and return its path."""
        return resolve_source_path(source_uri, self._config, refresh=refresh, cache=self._cache)

    def with_cache_dir(self, cache_dir: str) -> "MortalityClient":
        """Return a client writing downloads to another directory."""
        resolved_dir = Path(cache_dir).expanduser().resolve()
        return MortalityClient(replace(self._config, cache_dir=resolved_dir), self._cache)

    def with_worker_count(self, worker_count: int) -> "MortalityClient":
        """Return a client using another per-region pool size."""
        return MortalityClient(replace(self._config, worker_count=worker_count), self._cache)
