"""Reporting-lag tail trimming.

Death certificates take weeks to be processed, so the most recent weeks
of a series look lower than they will eventually be. This transform drops
trailing weeks whose fall is larger than one standard deviation of the
preceding window, two points at a time, until the tail looks consistent.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.constants import DEFAULT_TRIM_WINDOW
from core.errors import MortalityTransformError
from core.types import DataPoint


def trim_reporting_lag(
    points: Sequence[DataPoint],
    window: int = DEFAULT_TRIM_WINDOW,
) -> list[DataPoint]:
    """Trim an under-reported tail from a date-ordered series.

    Args:
        points: Points ordered by date.
        window: Number of points used for the standard deviation.

    Returns:
        Leading points of the input; the input unchanged when it has fewer
        than ``window + 2`` points.

    Raises:
        MortalityTransformError: If window is not positive.
    """
    if window < 1:
        raise MortalityTransformError(
            f"Invalid reporting-lag window {window}: expected a positive integer."
        )
    end = len(points)
    while end >= window + 2 and _tail_drop_exceeds_spread(points, end, window):
        end -= 2
    return list(points[:end])


def _tail_drop_exceeds_spread(points: Sequence[DataPoint], end: int, window: int) -> bool:
    """Check the last two points of ``points[:end]`` against the preceding window."""
    last_count = points[end - 1].count
    previous_count = points[end - 2].count
    deviation = last_count - previous_count
    preceding = [point.count for point in points[end - 2 - window:end - 2]]
    sigma = float(np.std(preceding))
    return deviation < 0 and abs(deviation) > sigma
