"""CSV report writers for ranked and per-capita tables.

Every report is written through pandas so column order and number
formatting stay uniform across files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd

from core.constants import PER_CAPITA_UNIT
from core.errors import MortalityStoreError
from core.logging_config import get_logger
from core.types import PerCapitaSnapshot, RankedTable, RegionStatistics

_LOGGER = get_logger(__name__)


def per_capita_snapshot_frame(snapshot: PerCapitaSnapshot) -> pd.DataFrame:
    """Ranked snapshot rows; the excluded aggregate region is last without a rank."""
    rows = [
        {
            "Rank": rank,
            "Region": row.region,
            "Count": row.count,
            "Population": row.population,
            "Rate": round(row.rate, 2),
        }
        for rank, row in enumerate(snapshot.rows, start=1)
    ]
    if snapshot.excluded is not None:
        excluded = snapshot.excluded
        rows.append(
            {
                "Rank": None,
                "Region": excluded.region,
                "Count": excluded.count,
                "Population": excluded.population,
                "Rate": round(excluded.rate, 2),
            }
        )
    frame = pd.DataFrame(rows, columns=["Rank", "Region", "Count", "Population", "Rate"])
    frame["Rank"] = frame["Rank"].astype("Int64")
    return frame


def ranked_table_frame(table: RankedTable, value_column: str, decimals: int | None = None) -> pd.DataFrame:
    """Two-column ranking of the ranked regions; the excluded region is left out."""
    entries = table.entries
    values = [entry.value if decimals is None else round(entry.value, decimals) for entry in entries]
    return pd.DataFrame(
        {"Region": [entry.region for entry in entries], value_column: values},
        columns=["Region", value_column],
    )


def region_statistics_frame(
    statistics: Sequence[RegionStatistics],
    unit: int = PER_CAPITA_UNIT,
) -> pd.DataFrame:
    """One row per region with yearly totals and derived figures."""
    years = sorted({year for entry in statistics for year in entry.deaths_by_year})
    rows: list[dict[str, object]] = []
    for entry in sorted(statistics, key=lambda item: item.region):
        row: dict[str, object] = {
            "Region": entry.region,
            "PeakWeek": entry.peak_week.date.isoformat() if entry.peak_week else None,
            "PeakCount": entry.peak_week.count if entry.peak_week else None,
            f"DeathsPer{unit}": _rounded(entry.per_capita_rate),
            "CumulativeExcess": entry.cumulative_excess,
            f"CumulativeExcessPer{unit}": _rounded(entry.cumulative_excess_per_capita),
        }
        for year in years:
            row[f"Deaths{year}"] = entry.deaths_by_year.get(year)
        for year in years:
            change = entry.year_over_year_change.get(year)
            row[f"Change{year}"] = None if change is None else round(change, 4)
        rows.append(row)
    return pd.DataFrame(rows)


def write_frame(frame: pd.DataFrame, output_path: Path, index: bool = False) -> Path:
    """Write one frame as CSV.

    Raises:
        MortalityStoreError: If the file cannot be written.
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output_path, index=index)
    except OSError as error:
        raise MortalityStoreError(
            f"Failed to write report {output_path}: {error}. "
            "Check that the output directory is writable."
        ) from error
    _LOGGER.info("report_written", path=str(output_path), rows=len(frame))
    return output_path


def _rounded(value: float | None) -> float | None:
    return None if value is None else round(value, 2)
