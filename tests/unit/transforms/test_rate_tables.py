"""Unit tests for per-capita rate tables."""

from __future__ import annotations

from datetime import date

from core.types import CensusEntry, DataPoint, Series
from transforms.rate_tables import per_capita_rate_matrix, per_capita_rate_triples

_CENSUS = {
    "Alpha": CensusEntry(region="Alpha", population=1_000_000),
    "Beta": CensusEntry(region="Beta", population=200_000),
}


def _series(region: str, points: list[tuple[date, int]]) -> Series:
    return Series(region=region, points=tuple(DataPoint(date=day, count=count) for day, count in points))


def test_rate_matrix_fills_missing_weeks_with_zero() -> None:
    """Weeks a region did not report should hold 0."""
    series = {
        "Alpha": _series("Alpha", [(date(2020, 1, 4), 50), (date(2020, 1, 11), 60)]),
        "Beta": _series("Beta", [(date(2020, 1, 11), 3)]),
    }

    frame = per_capita_rate_matrix(series, _CENSUS)

    assert list(frame.columns) == ["Alpha", "Beta"]
    assert frame.loc[date(2020, 1, 4), "Alpha"] == 5.0
    assert frame.loc[date(2020, 1, 4), "Beta"] == 0.0
    assert frame.loc[date(2020, 1, 11), "Beta"] == 1.5


def test_rate_matrix_skips_regions_without_census_and_old_weeks() -> None:
    """Only census regions and weeks since the start date are kept."""
    series = {
        "Alpha": _series("Alpha", [(date(2019, 12, 28), 50), (date(2020, 1, 4), 50)]),
        "Guam": _series("Guam", [(date(2020, 1, 4), 5)]),
    }

    frame = per_capita_rate_matrix(series, _CENSUS)

    assert list(frame.columns) == ["Alpha"] and list(frame.index) == [date(2020, 1, 4)]
    assert frame.index.name == "Week"


def test_rate_triples_lists_positive_points() -> None:
    """Triples should carry region, week, and rounded ratio."""
    series = {"Beta": _series("Beta", [(date(2020, 1, 4), 1), (date(2019, 12, 28), 9)])}

    frame = per_capita_rate_triples(series, _CENSUS)

    assert frame.to_dict("records") == [{"Region": "Beta", "Week": date(2020, 1, 4), "Ratio": 0.5}]


def test_rate_triples_empty_frame_keeps_columns() -> None:
    """No qualifying points still yields the three columns."""
    frame = per_capita_rate_triples({}, _CENSUS)

    assert list(frame.columns) == ["Region", "Week", "Ratio"] and frame.empty
