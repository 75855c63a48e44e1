"""Cross-region aggregation and derived statistics.

This module merges regions that are reported in pieces, ranks regions by
per-capita and excess-death measures, and derives per-region statistics.
It runs once after every region's series is ready.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Mapping

from core.constants import (
    DEFAULT_EXCLUDED_REGION,
    DEFAULT_REGION_ALIASES,
    EXCESS_START_DATE,
    INCOMPLETE_DATA_DAYS,
    PER_CAPITA_UNIT,
)
from core.errors import MortalityAggregationError
from core.logging_config import get_logger
from core.types import (
    CensusEntry,
    DataPoint,
    PerCapitaRow,
    PerCapitaSnapshot,
    RankedTable,
    RankedValue,
    RegionStatistics,
    Series,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class AggregationSettings:
    """Immutable aggregation tables.

    Attributes:
        region_aliases: Composite region name to the regions summed into it.
        excluded_region: Aggregate region kept out of rank lists.
        per_capita_unit: Population unit for rates.
        incomplete_data_days: Age after which a week counts as fully reported.
        excess_start: First date counted toward cumulative excess deaths.
    """

    region_aliases: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_REGION_ALIASES)
    )
    excluded_region: str | None = DEFAULT_EXCLUDED_REGION
    per_capita_unit: int = PER_CAPITA_UNIT
    incomplete_data_days: int = INCOMPLETE_DATA_DAYS
    excess_start: date = EXCESS_START_DATE


class RegionAggregator:
    """Aggregation over a complete set of region series."""

    def __init__(self, settings: AggregationSettings, census: Mapping[str, CensusEntry]) -> None:
        self._settings = settings
        self._census = census

    def merge_aliased_regions(self, series_by_region: Mapping[str, Series]) -> dict[str, Series]:
        """Sum regions reported in pieces into their composite region.

        Args:
            series_by_region: Series keyed by region.

        Returns:
            New mapping with member regions replaced by composites.

        Raises:
            MortalityAggregationError: If any member region is missing or
                reports the same date twice.
        """
        merged = dict(series_by_region)
        for composite, members in self._settings.region_aliases.items():
            missing = [member for member in members if member not in merged]
            if missing:
                raise MortalityAggregationError(
                    f"Cannot merge region '{composite}': missing {', '.join(missing)}. "
                    "The upstream region layout may have changed."
                )
            member_series = [merged.pop(member) for member in members]
            merged[composite] = _sum_by_date(composite, member_series)
        return merged

    def last_good_date(self, series_by_region: Mapping[str, Series], today: date) -> date:
        """Return the latest date that is past the reporting lag.

        Raises:
            MortalityAggregationError: If no region has a point old enough.
        """
        cutoff = today - timedelta(days=self._settings.incomplete_data_days)
        candidates = [
            point.date
            for series in series_by_region.values()
            for point in series.points
            if point.date <= cutoff
        ]
        if not candidates:
            raise MortalityAggregationError(
                f"No observations on or before {cutoff.isoformat()}. "
                "Check the source data or the --as-of date."
            )
        return max(candidates)

    def per_capita_snapshot(
        self,
        series_by_region: Mapping[str, Series],
        today: date,
    ) -> PerCapitaSnapshot:
        """Rank regions by deaths per capita at the last good date.

        Regions without a census entry are left out of the snapshot.
        """
        as_of = self.last_good_date(series_by_region, today)
        rows: list[PerCapitaRow] = []
        for region, series in series_by_region.items():
            entry = self._census_entry(region)
            if entry is None:
                continue
            count = _count_on(series, as_of)
            rate = count / entry.population * self._settings.per_capita_unit
            rows.append(PerCapitaRow(region=region, count=count, population=entry.population, rate=rate))
        rows.sort(key=lambda row: row.rate, reverse=True)
        excluded = self._pop_excluded_row(rows)
        return PerCapitaSnapshot(as_of=as_of, rows=tuple(rows), excluded=excluded)

    def excess_deaths(self, series_by_region: Mapping[str, Series]) -> dict[str, int]:
        """Sum published excess estimates since the excess start date."""
        return {
            region: sum(
                point.excess_estimate
                for point in series.points
                if point.date >= self._settings.excess_start
            )
            for region, series in series_by_region.items()
        }

    def per_capita_cumulative_excess(self, excess: Mapping[str, int]) -> dict[str, float]:
        """Scale cumulative excess deaths to the per-capita unit."""
        rates: dict[str, float] = {}
        for region, value in excess.items():
            entry = self._census_entry(region)
            if entry is None:
                continue
            rates[region] = value / entry.population * self._settings.per_capita_unit
        return rates

    def rank(self, values: Mapping[str, float]) -> RankedTable:
        """Sort values descending with the excluded region reported apart."""
        excluded_region = self._settings.excluded_region
        excluded = None
        if excluded_region is not None and excluded_region in values:
            excluded = RankedValue(region=excluded_region, value=values[excluded_region])
        entries = sorted(
            (
                RankedValue(region=region, value=value)
                for region, value in values.items()
                if region != excluded_region
            ),
            key=lambda entry: entry.value,
            reverse=True,
        )
        return RankedTable(entries=tuple(entries), excluded=excluded)

    def region_statistics(
        self,
        series_by_region: Mapping[str, Series],
        today: date,
    ) -> list[RegionStatistics]:
        """Derive yearly totals, peaks, and per-capita figures per region."""
        as_of = self.last_good_date(series_by_region, today)
        excess = self.excess_deaths(series_by_region)
        excess_rates = self.per_capita_cumulative_excess(excess)
        statistics: list[RegionStatistics] = []
        for region, series in series_by_region.items():
            entry = self._census_entry(region)
            per_capita_rate = None
            if entry is not None:
                per_capita_rate = (
                    _count_on(series, as_of) / entry.population * self._settings.per_capita_unit
                )
            by_year = deaths_by_year(series.points)
            statistics.append(
                RegionStatistics(
                    region=region,
                    deaths_by_year=by_year,
                    year_over_year_change=year_over_year_change(by_year),
                    peak_week=peak_week(series.points),
                    per_capita_rate=per_capita_rate,
                    cumulative_excess=excess[region],
                    cumulative_excess_per_capita=excess_rates.get(region),
                )
            )
        return statistics

    def _census_entry(self, region: str) -> CensusEntry | None:
        entry = self._census.get(region)
        if entry is None:
            _LOGGER.warning("census_region_missing", region=region)
        return entry

    def _pop_excluded_row(self, rows: list[PerCapitaRow]) -> PerCapitaRow | None:
        for index, row in enumerate(rows):
            if row.region == self._settings.excluded_region:
                return rows.pop(index)
        return None


def deaths_by_year(points: tuple[DataPoint, ...]) -> dict[int, int]:
    """Total observed deaths per calendar year, years ascending."""
    totals: dict[int, int] = defaultdict(int)
    for point in points:
        totals[point.date.year] += point.count
    return dict(sorted(totals.items()))


def year_over_year_change(totals: Mapping[int, int]) -> dict[int, float]:
    """Fractional change of each year's total against the previous year."""
    changes: dict[int, float] = {}
    for year, total in totals.items():
        previous = totals.get(year - 1)
        if previous:
            changes[year] = (total - previous) / previous
    return changes


def peak_week(points: tuple[DataPoint, ...]) -> DataPoint | None:
    """Return the week with the most deaths."""
    return max(points, key=lambda point: point.count, default=None)


def _count_on(series: Series, target: date) -> int:
    for point in series.points:
        if point.date == target:
            return point.count
    return 0


def _sum_by_date(composite: str, member_series: list[Series]) -> Series:
    """Add member points that share a date; dates some member lacks are dropped.

    Raises:
        MortalityAggregationError: If a member reports the same date twice.
    """
    by_date: dict[date, dict[str, DataPoint]] = defaultdict(dict)
    for series in member_series:
        for point in series.points:
            members_on_date = by_date[point.date]
            if series.region in members_on_date:
                raise MortalityAggregationError(
                    f"Cannot merge region '{composite}': '{series.region}' reports "
                    f"{point.date.isoformat()} more than once. Set an outcome filter so "
                    "each week has one row per region."
                )
            members_on_date[series.region] = point
    merged_points: list[DataPoint] = []
    unmatched_dates = 0
    for point_date in sorted(by_date):
        points = by_date[point_date]
        if len(points) != len(member_series):
            unmatched_dates += 1
            continue
        merged_points.append(
            DataPoint(
                date=point_date,
                count=sum(point.count for point in points.values()),
                average_expected_count=sum(point.average_expected_count for point in points.values()),
                excess_estimate=sum(point.excess_estimate for point in points.values()),
            )
        )
    if unmatched_dates:
        _LOGGER.warning(
            "region_merge_unmatched_dates",
            region=composite,
            members=[series.region for series in member_series],
            dropped_dates=unmatched_dates,
        )
    return Series(region=composite, points=tuple(merged_points))
