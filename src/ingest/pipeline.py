"""Render pipeline orchestration.

This module coordinates source loading, per-region trimming and rendering
on a bounded worker pool, and the cross-region aggregation that runs once
every region is ready.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import date
from pathlib import Path

from core.config import MortalityConfig
from core.constants import (
    DEFAULT_CANVAS_SIZE,
    EXCESS_DEATHS_FILE_NAME,
    EXCESS_PER_CAPITA_FILE_NAME,
    PER_CAPITA_SNAPSHOT_FILE_NAME,
    RATE_MATRIX_FILE_NAME,
    RATE_TRIPLES_FILE_NAME,
    REGION_STATISTICS_FILE_NAME,
)
from core.logging_config import get_logger
from core.run_settings import RunSettings, load_run_settings
from core.types import (
    PerCapitaSnapshot,
    RankedTable,
    RegionRenderOutcome,
    RegionStatistics,
    RenderOptions,
    RenderRunResult,
    Series,
)
from ingest.source_cache import SourceCache
from ingest.source_reader import read_census, read_observation_records, resolve_source_path
from render.plot_renderer import image_file_name, render_region_image
from render.radial_geometry import GeometrySettings, RadialPlotGeometry
from render.year_palette import PaletteSettings, YearPalette
from store.report_writer import (
    per_capita_snapshot_frame,
    ranked_table_frame,
    region_statistics_frame,
    write_frame,
)
from transforms.rate_tables import per_capita_rate_matrix, per_capita_rate_triples
from transforms.region_aggregation import AggregationSettings, RegionAggregator
from transforms.reporting_lag import trim_reporting_lag
from transforms.series_builder import build_region_series

_LOGGER = get_logger(__name__)


class RenderPipelineRunner:
    """Single-use runner for one render or rankings pass."""

    def __init__(
        self,
        options: RenderOptions,
        config: MortalityConfig,
        cache: SourceCache | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._cache = cache
        self._settings = _resolve_settings(options)
        self._census = read_census(options.census_path)
        self._today = options.as_of or date.today()
        self._output_dir = (
            Path(options.output_dir).expanduser() if options.output_dir else config.output_dir
        )
        self._geometry = RadialPlotGeometry(
            GeometrySettings.from_run_settings(self._settings),
            YearPalette(_palette_settings(self._settings), self._today),
        )
        self._aggregator = RegionAggregator(
            AggregationSettings(
                region_aliases=self._settings.region_aliases,
                excluded_region=self._settings.excluded_region,
            ),
            self._census,
        )

    def run(self) -> RenderRunResult:
        """Execute the pipeline and return its artifacts."""
        series_by_region = self._load_series()
        outcomes = self._process_regions(series_by_region)
        cleaned = {region: outcomes[region].series for region in series_by_region}
        merged = self._aggregator.merge_aliased_regions(cleaned)
        snapshot = self._aggregator.per_capita_snapshot(merged, self._today)
        excess = self._aggregator.excess_deaths(merged)
        excess_ranking = self._aggregator.rank(excess)
        excess_per_capita_ranking = self._aggregator.rank(
            self._aggregator.per_capita_cumulative_excess(excess)
        )
        statistics = tuple(self._aggregator.region_statistics(merged, self._today))
        report_paths = self._write_reports(
            merged, snapshot, excess_ranking, excess_per_capita_ranking, statistics
        )
        image_paths = {
            region: outcome.image_path
            for region, outcome in outcomes.items()
            if outcome.image_path is not None
        }
        skipped_regions = {
            region: outcome.diagnostic
            for region, outcome in outcomes.items()
            if outcome.diagnostic is not None
        }
        _LOGGER.info(
            "render_run_completed",
            region_count=len(series_by_region),
            image_count=len(image_paths),
            skipped_count=len(skipped_regions),
            report_count=len(report_paths),
            as_of=snapshot.as_of.isoformat(),
            output_dir=str(self._output_dir),
        )
        return RenderRunResult(
            image_paths=image_paths,
            report_paths=tuple(str(path) for path in report_paths),
            skipped_regions=skipped_regions,
            snapshot=snapshot,
            excess_ranking=excess_ranking,
            excess_per_capita_ranking=excess_per_capita_ranking,
            statistics=statistics,
        )

    def _load_series(self) -> dict[str, Series]:
        source_path = resolve_source_path(
            self._options.source_uri,
            self._config,
            refresh=self._options.refresh,
            cache=self._cache,
        )
        records = read_observation_records(source_path)
        return build_region_series(records, self._settings.outcome)

    def _process_regions(self, series_by_region: dict[str, Series]) -> dict[str, RegionRenderOutcome]:
        """Fan out one task per region and wait for all of them."""
        outcomes: dict[str, RegionRenderOutcome] = {}
        with ThreadPoolExecutor(max_workers=self._config.worker_count) as executor:
            futures = {
                executor.submit(self._process_region, series): region
                for region, series in series_by_region.items()
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()
        return outcomes

    def _process_region(self, series: Series) -> RegionRenderOutcome:
        ordered = series.sorted_by_date()
        kept_points = trim_reporting_lag(ordered.points, self._settings.trim_window)
        trimmed_count = len(ordered.points) - len(kept_points)
        if trimmed_count:
            _LOGGER.info("reporting_lag_trimmed", region=series.region, trimmed_count=trimmed_count)
        cleaned = Series(region=series.region, points=tuple(kept_points))
        if not self._options.render_images:
            return RegionRenderOutcome(region=series.region, series=cleaned, trimmed_count=trimmed_count)
        layout = self._geometry.layout(cleaned, DEFAULT_CANVAS_SIZE / 2)
        if not layout.plottable:
            _LOGGER.warning("region_plot_skipped", region=series.region, reason=layout.diagnostic)
            return RegionRenderOutcome(
                region=series.region,
                series=cleaned,
                diagnostic=layout.diagnostic,
                trimmed_count=trimmed_count,
            )
        image_path = render_region_image(
            layout,
            self._output_dir / image_file_name(series.region),
            footer=_image_footer(self._settings, layout.ring_step),
        )
        _LOGGER.info(
            "region_rendered",
            region=series.region,
            point_count=len(layout.points),
            max_count=layout.max_count,
            path=str(image_path),
        )
        return RegionRenderOutcome(
            region=series.region,
            series=cleaned,
            image_path=str(image_path),
            trimmed_count=trimmed_count,
        )

    def _write_reports(
        self,
        merged: dict[str, Series],
        snapshot: PerCapitaSnapshot,
        excess_ranking: RankedTable,
        excess_per_capita_ranking: RankedTable,
        statistics: tuple[RegionStatistics, ...],
    ) -> list[Path]:
        output_dir = self._output_dir
        return [
            write_frame(per_capita_snapshot_frame(snapshot), output_dir / PER_CAPITA_SNAPSHOT_FILE_NAME),
            write_frame(ranked_table_frame(excess_ranking, "Count"), output_dir / EXCESS_DEATHS_FILE_NAME),
            write_frame(
                ranked_table_frame(excess_per_capita_ranking, "Rate", decimals=2),
                output_dir / EXCESS_PER_CAPITA_FILE_NAME,
            ),
            write_frame(
                per_capita_rate_matrix(merged, self._census),
                output_dir / RATE_MATRIX_FILE_NAME,
                index=True,
            ),
            write_frame(per_capita_rate_triples(merged, self._census), output_dir / RATE_TRIPLES_FILE_NAME),
            write_frame(region_statistics_frame(statistics), output_dir / REGION_STATISTICS_FILE_NAME),
        ]


def run_render_pipeline(
    options: RenderOptions,
    config: MortalityConfig,
    cache: SourceCache | None = None,
) -> RenderRunResult:
    """Run the mortality pipeline end to end.

    Args:
        options: Render request options.
        config: Runtime configuration.
        cache: Optional source cache, mainly for tests.

    Returns:
        Written images, reports, and the computed rankings.

    Raises:
        MortalityIngestError: If the source or census cannot be read.
        MortalitySettingsError: If the settings file is invalid.
        MortalityAggregationError: If cross-region aggregation fails.
        MortalityRenderError: If an image cannot be written.
        MortalityStoreError: If a report cannot be written.
    """
    runner = RenderPipelineRunner(options, config, cache)
    return runner.run()


def _resolve_settings(options: RenderOptions) -> RunSettings:
    settings = load_run_settings(options.settings_path)
    if options.trim_window is not None:
        return replace(settings, trim_window=options.trim_window)
    return settings


def _palette_settings(settings: RunSettings) -> PaletteSettings:
    return PaletteSettings(
        year_colors=settings.year_colors,
        incomplete_color=settings.incomplete_color,
        gradient_start=settings.gradient_start,
        gradient_end=settings.gradient_end,
        color_mode=settings.color_mode,
    )


def _image_footer(settings: RunSettings, ring_step: int) -> str:
    return (
        f"Radius scale: {settings.radius_transform}. Rings every {ring_step:,} deaths. "
        "Source: CDC weekly counts of deaths."
    )
