"""Time-indexed per-capita rate tables.

This module builds the wide week-by-region rate matrix and its long-format
counterpart as pandas frames for the report writer.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping

import pandas as pd

from core.constants import EXCESS_START_DATE, PER_CAPITA_UNIT
from core.types import CensusEntry, Series


def per_capita_rate_matrix(
    series_by_region: Mapping[str, Series],
    census: Mapping[str, CensusEntry],
    since: date = EXCESS_START_DATE,
    unit: int = PER_CAPITA_UNIT,
) -> pd.DataFrame:
    """Build a week-by-region matrix of deaths per capita unit.

    Args:
        series_by_region: Series keyed by region.
        census: Census entries keyed by region.
        since: First week included.
        unit: Population unit for rates.

    Returns:
        Frame indexed by ``Week`` with one column per region with census
        data; weeks a region did not report hold 0.
    """
    regions = [region for region in series_by_region if region in census]
    weeks = sorted(
        {
            point.date
            for series in series_by_region.values()
            for point in series.points
            if point.date >= since
        }
    )
    columns: dict[str, pd.Series] = {}
    for region in regions:
        population = census[region].population
        counts = {point.date: point.count for point in series_by_region[region].points}
        columns[region] = pd.Series(
            [round(counts.get(week, 0) / population * unit, 2) for week in weeks],
            index=weeks,
            dtype=float,
        )
    return pd.DataFrame(columns, index=pd.Index(weeks, name="Week"))


def per_capita_rate_triples(
    series_by_region: Mapping[str, Series],
    census: Mapping[str, CensusEntry],
    since: date = EXCESS_START_DATE,
    unit: int = PER_CAPITA_UNIT,
) -> pd.DataFrame:
    """Build long-format ``(Region, Week, Ratio)`` rows.

    Only weeks on or after ``since`` with a positive count are included.
    """
    rows: list[dict[str, object]] = []
    for region, series in series_by_region.items():
        entry = census.get(region)
        if entry is None:
            continue
        for point in series.points:
            if point.date >= since and point.count > 0:
                rows.append(
                    {
                        "Region": region,
                        "Week": point.date,
                        "Ratio": round(point.count / entry.population * unit, 2),
                    }
                )
    return pd.DataFrame(rows, columns=["Region", "Week", "Ratio"])
