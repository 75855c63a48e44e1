"""Per-region series construction.

This module keeps directly observed weekly counts and groups them by region.
It is the first transform stage after row decoding.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import DEFAULT_OUTCOME, PREDICTED_KIND_PREFIX
from core.logging_config import get_logger
from core.types import DataPoint, ObservationRecord, Series

_LOGGER = get_logger(__name__)


def build_region_series(
    records: Iterable[ObservationRecord],
    outcome: str | None = DEFAULT_OUTCOME,
) -> dict[str, Series]:
    """Split observation records into per-region series.

    Predicted rows and rows without a positive count are dropped. Points
    keep encounter order; callers sort by date before geometric use.

    Args:
        records: Decoded observation records.
        outcome: Outcome to keep, None to keep every outcome.

    Returns:
        Series keyed by region, in first-seen region order.
    """
    grouped: dict[str, list[DataPoint]] = {}
    dropped_count = 0
    for record in records:
        if not _is_retained(record, outcome):
            dropped_count += 1
            continue
        grouped.setdefault(record.region, []).append(_to_data_point(record))
    _LOGGER.info("series_built", region_count=len(grouped), dropped_rows=dropped_count)
    return {region: Series(region=region, points=tuple(points)) for region, points in grouped.items()}


def is_observed(record: ObservationRecord) -> bool:
    """Return whether a record holds a directly observed count."""
    return not record.kind.startswith(PREDICTED_KIND_PREFIX)


def _is_retained(record: ObservationRecord, outcome: str | None) -> bool:
    if not is_observed(record):
        return False
    if record.count <= 0:
        return False
    if outcome is not None and record.outcome and record.outcome != outcome:
        return False
    return True


def _to_data_point(record: ObservationRecord) -> DataPoint:
    return DataPoint(
        date=record.week_ending_date,
        count=record.count,
        average_expected_count=record.average_expected_count,
        excess_estimate=record.excess_estimate,
    )
