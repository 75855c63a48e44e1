"""Tabular source readers for ingestion.

This module loads the mortality export and the census table from CSV.
It returns raw header/row matrices and hands typing to the row mapper.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from core.config import MortalityConfig
from core.constants import CENSUS_FILE_NAME
from core.errors import MortalityIngestError
from core.logging_config import get_logger
from core.types import CensusEntry, ObservationRecord
from ingest.row_mapper import decode_census, decode_observations
from ingest.source_cache import SourceCache

_LOGGER = get_logger(__name__)
BUNDLED_CENSUS_PATH = Path(__file__).resolve().parent / CENSUS_FILE_NAME


def read_csv_table(csv_path: Path) -> tuple[list[str], list[list[str]]]:
    """Read a CSV file as a header and rows of raw strings.

    Args:
        csv_path: CSV file location.

    Returns:
        Header cells and data rows, every cell a string.

    Raises:
        MortalityIngestError: If the file is missing or not parseable CSV.
    """
    if not csv_path.exists():
        raise MortalityIngestError(
            f"Failed to read source at {csv_path}: path does not exist. "
            "Provide an existing CSV file."
        )
    try:
        frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding="utf-8")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as error:
        raise MortalityIngestError(
            f"Failed to parse CSV at {csv_path}: {error}. Check the file contents and retry."
        ) from error
    header = [str(column) for column in frame.columns]
    rows = frame.to_numpy().tolist()
    return header, rows


def read_observation_records(csv_path: Path) -> list[ObservationRecord]:
    """Load typed observation records from a mortality export file."""
    header, rows = read_csv_table(csv_path)
    records = decode_observations(header, rows)
    _LOGGER.info("observations_read", path=str(csv_path), row_count=len(records))
    return records


def read_census(census_path: str | None = None) -> dict[str, CensusEntry]:
    """Load the census table keyed by region.

    Args:
        census_path: Census CSV path, the bundled 2020 table if omitted.

    Returns:
        Census entries keyed by region name.

    Raises:
        MortalityIngestError: If the file is invalid or a population is not positive.
    """
    csv_path = Path(census_path).expanduser() if census_path else BUNDLED_CENSUS_PATH
    header, rows = read_csv_table(csv_path)
    census: dict[str, CensusEntry] = {}
    for entry in decode_census(header, rows):
        if entry.population <= 0:
            raise MortalityIngestError(
                f"Invalid census population for '{entry.region}' in {csv_path}: "
                f"expected a positive integer, got {entry.population}."
            )
        census[entry.region] = entry
    return census


def resolve_source_path(
    source_uri: str | None,
    config: MortalityConfig,
    refresh: bool = False,
    cache: SourceCache | None = None,
) -> Path:
    """Resolve a local path for the mortality export.

    Args:
        source_uri: Local file path or http(s) URL, configured URL if omitted.
        config: Runtime configuration.
        refresh: Force a fresh download for URL sources.
        cache: Optional cache instance, mainly for tests.

    Returns:
        Local CSV path.
    """
    location = source_uri or config.source_url
    if location.startswith(("http://", "https://")):
        source_cache = cache if cache is not None else SourceCache(config)
        return source_cache.fetch(location, refresh=refresh)
    return Path(location).expanduser()
