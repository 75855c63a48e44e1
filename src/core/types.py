"""Shared typed models.

This module defines immutable data models used by ingest, transforms,
aggregation, and rendering layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping


@dataclass(frozen=True)
class ObservationRecord:
    """One typed row of the weekly mortality export.

    Attributes:
        region: Reporting region, e.g. a state or "United States".
        kind: Upstream row type such as ``Unweighted`` or ``Predicted (weighted)``.
        count: Observed death count for the week.
        week_ending_date: Last day of the reporting week.
        average_expected_count: Upstream expected count for the week.
        excess_estimate: Upstream excess-death estimate for the week.
        outcome: Upstream cause-of-death grouping, empty when not published.
    """

    region: str
    kind: str
    count: int
    week_ending_date: date
    average_expected_count: int = 0
    excess_estimate: int = 0
    outcome: str = ""


@dataclass(frozen=True)
class DataPoint:
    """One observed week for one region.

    Attributes:
        date: Week ending date.
        count: Observed death count.
        average_expected_count: Expected count for the week.
        excess_estimate: Published excess-death estimate.
    """

    date: date
    count: int
    average_expected_count: int = 0
    excess_estimate: int = 0


@dataclass(frozen=True)
class Series:
    """Weekly observations for a single region.

    Attributes:
        region: Region name.
        points: Observed points, not necessarily sorted.
    """

    region: str
    points: tuple[DataPoint, ...]

    def sorted_by_date(self) -> "Series":
        """Return a copy with points ordered by date."""
        ordered = tuple(sorted(self.points, key=lambda point: point.date))
        return Series(region=self.region, points=ordered)

    @property
    def max_count(self) -> int:
        """Largest weekly count, 0 for an empty series."""
        return max((point.count for point in self.points), default=0)

    @property
    def min_date(self) -> date | None:
        """Earliest point date, None for an empty series."""
        return min((point.date for point in self.points), default=None)

    @property
    def max_date(self) -> date | None:
        """Latest point date, None for an empty series."""
        return max((point.date for point in self.points), default=None)


@dataclass(frozen=True)
class CensusEntry:
    """Population of one region.

    Attributes:
        region: Region name as used by the mortality export.
        population: Resident population, always positive.
    """

    region: str
    population: int


@dataclass(frozen=True)
class RegionStatistics:
    """Derived per-region statistics.

    Attributes:
        region: Region name.
        deaths_by_year: Total observed deaths per calendar year.
        year_over_year_change: Fractional change against the previous year.
        peak_week: Week with the most deaths, None for an empty series.
        per_capita_rate: Deaths per unit population at the last good date.
        cumulative_excess: Summed excess estimate since the excess start date.
        cumulative_excess_per_capita: Cumulative excess per unit population.
    """

    region: str
    deaths_by_year: Mapping[int, int]
    year_over_year_change: Mapping[int, float]
    peak_week: DataPoint | None
    per_capita_rate: float | None
    cumulative_excess: int
    cumulative_excess_per_capita: float | None


@dataclass(frozen=True)
class PerCapitaRow:
    """One row of the per-capita snapshot."""

    region: str
    count: int
    population: int
    rate: float


@dataclass(frozen=True)
class PerCapitaSnapshot:
    """Per-capita weekly death rates at the last fully reported week.

    Attributes:
        as_of: Week ending date the snapshot describes.
        rows: Ranked rows, highest rate first.
        excluded: Row for the excluded aggregate region, when present.
    """

    as_of: date
    rows: tuple[PerCapitaRow, ...]
    excluded: PerCapitaRow | None = None


@dataclass(frozen=True)
class RankedValue:
    """One region value inside a ranked table."""

    region: str
    value: float


@dataclass(frozen=True)
class RankedTable:
    """Region values sorted descending.

    Attributes:
        entries: Ranked entries, excluded region removed.
        excluded: Value of the excluded aggregate region, when present.
    """

    entries: tuple[RankedValue, ...]
    excluded: RankedValue | None = None


@dataclass(frozen=True)
class RGBA:
    """Color with float channels in [0, 1]."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return channels in matplotlib order."""
        return (self.red, self.green, self.blue, self.alpha)


@dataclass(frozen=True)
class PlotInstruction:
    """Drawing instruction for one data point.

    The segment ending at this point is drawn with its color and stroke.

    Attributes:
        date: Week ending date.
        count: Observed count.
        cartesian_point: Canvas coordinates relative to the plot centre, y up.
        color: Stroke color.
        stroke_width: Stroke width in canvas units.
        dashed: Whether the stroke is dashed.
    """

    date: date
    count: int
    cartesian_point: tuple[float, float]
    color: RGBA
    stroke_width: float
    dashed: bool


@dataclass(frozen=True)
class RingSpec:
    """One concentric count ring.

    Attributes:
        index: One-based ring index.
        count: Count value the ring marks.
        radius: Ring radius in canvas units.
        label: Formatted count label.
        label_angle: Drawing angle of the label in radians.
    """

    index: int
    count: int
    radius: float
    label: str
    label_angle: float


@dataclass(frozen=True)
class TickSpec:
    """One month tick on the radial plot.

    Attributes:
        month: Month number in 1..12.
        label: English month name.
        angle: Drawing angle in radians.
        end_point: Outer tick end in canvas units.
        label_point: Label anchor in canvas units.
        label_rotation: Label rotation in degrees, counterclockwise.
    """

    month: int
    label: str
    angle: float
    end_point: tuple[float, float]
    label_point: tuple[float, float]
    label_rotation: float


@dataclass(frozen=True)
class LegendEntry:
    """One key entry shown beside the plot."""

    label: str
    color: RGBA
    dashed: bool = False


@dataclass(frozen=True)
class PlotLayout:
    """Complete drawing plan for one region.

    Attributes:
        region: Region name.
        rings: Concentric rings, innermost first.
        points: Data point instructions ordered by date.
        month_ticks: Twelve month ticks.
        legend: Year and incompleteness key.
        max_count: Largest plotted count.
        ring_step: Count distance between rings.
        min_date: Earliest plotted date.
        max_date: Latest plotted date.
        plottable: False when the series cannot be drawn as a line.
        diagnostic: Reason the series was not plottable.
    """

    region: str
    rings: tuple[RingSpec, ...]
    points: tuple[PlotInstruction, ...]
    month_ticks: tuple[TickSpec, ...]
    legend: tuple[LegendEntry, ...] = ()
    max_count: int = 0
    ring_step: int = 0
    min_date: date | None = None
    max_date: date | None = None
    plottable: bool = True
    diagnostic: str | None = None


@dataclass(frozen=True)
class RenderOptions:
    """Render command options.

    Attributes:
        source_uri: Local CSV path or http(s) URL, configured default if omitted.
        output_dir: Output directory, configured default if omitted.
        census_path: Census CSV path, bundled table if omitted.
        settings_path: Optional YAML run-settings file.
        as_of: Reference day for incompleteness, today if omitted.
        refresh: Ignore a fresh cache entry and download again.
        render_images: Whether to write per-region PNG images.
        trim_window: Override for the reporting-lag window.
    """

    source_uri: str | None = None
    output_dir: str | None = None
    census_path: str | None = None
    settings_path: str | None = None
    as_of: date | None = None
    refresh: bool = False
    render_images: bool = True
    trim_window: int | None = None


@dataclass(frozen=True)
class RegionRenderOutcome:
    """Result of one per-region worker task.

    Attributes:
        region: Region name.
        series: Sorted and trimmed series.
        image_path: Written PNG path, None when skipped.
        diagnostic: Reason no image was written.
        trimmed_count: Points removed by the reporting-lag trimmer.
    """

    region: str
    series: Series
    image_path: str | None = None
    diagnostic: str | None = None
    trimmed_count: int = 0


@dataclass(frozen=True)
class RenderRunResult:
    """Artifacts produced by one pipeline run.

    Attributes:
        image_paths: Written PNG files keyed by region.
        report_paths: Written CSV reports.
        skipped_regions: Regions without an image and the reason.
        snapshot: Per-capita snapshot at the last good date.
        excess_ranking: Cumulative excess deaths ranking.
        excess_per_capita_ranking: Cumulative excess per capita ranking.
        statistics: Per-region derived statistics.
    """

    image_paths: Mapping[str, str]
    report_paths: tuple[str, ...]
    skipped_regions: Mapping[str, str]
    snapshot: PerCapitaSnapshot
    excess_ranking: RankedTable
    excess_per_capita_ranking: RankedTable
    statistics: tuple[RegionStatistics, ...] = field(default_factory=tuple)

