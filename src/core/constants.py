"""Core constants used across observed-deaths modules.

This module centralizes defaults for ingest, aggregation, and rendering.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

DEFAULT_SOURCE_URL = (
    "https://data.cdc.gov/api/views/xkkf-xrst/rows.csv"
    "?accessType=DOWNLOAD&bom=true&format=true"
)
DEFAULT_CACHE_DIR = Path(".mortality-cache")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CACHE_TTL_HOURS = 24
DEFAULT_WORKER_COUNT = 4
DEFAULT_HTTP_TIMEOUT_SECONDS = 120
CENSUS_FILE_NAME = "census_2020.csv"

PREDICTED_KIND_PREFIX = "Predicted"
DEFAULT_OUTCOME = "All causes"

DEFAULT_TRIM_WINDOW = 10
PER_CAPITA_UNIT = 100000
INCOMPLETE_DATA_DAYS = 6 * 7
EXCESS_START_DATE = date(2020, 1, 1)
DEFAULT_EXCLUDED_REGION = "United States"
DEFAULT_REGION_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("New York", ("New York", "New York City")),
)

DAYS_PER_PLOT_YEAR = 366
DEFAULT_CANVAS_SIZE = 1000
PLOT_RADIUS_FRACTION = 0.80
DATA_RADIUS_FRACTION = 0.90
DATA_STROKE_WIDTH = 4.0
RING_STROKE_WIDTH = 1.0
MONTH_LABEL_OFFSET = 5.0
DASH_PATTERN = (9.0, 9.0)
DEFAULT_RING_STEPS: tuple[tuple[int, int], ...] = (
    (20000, 10000),
    (5000, 1000),
    (4000, 500),
    (1800, 400),
    (500, 200),
    (200, 50),
)
DEFAULT_FALLBACK_RING_STEP = 20

DEFAULT_RADIUS_TRANSFORM = "sqrt"
SUPPORTED_RADIUS_TRANSFORMS = ("sqrt", "identity")
DEFAULT_COLOR_MODE = "year"
SUPPORTED_COLOR_MODES = ("year", "gradient-rgb", "gradient-hsb")
INCOMPLETE_DATA_ALPHA = 0.3
INCOMPLETE_DATA_LABEL = "incomplete data"
DEFAULT_YEAR_COLORS: tuple[tuple[int, str], ...] = (
    (2015, "#8b4513"),
    (2016, "#00ffff"),
    (2017, "#ffafaf"),
    (2018, "#808080"),
    (2019, "#0000ff"),
    (2020, "#ff0000"),
    (2021, "#00ff00"),
    (2022, "#ffc800"),
    (2023, "#ffff00"),
    (2024, "#ff00ff"),
    (2025, "#800080"),
    (2026, "#008080"),
)
INCOMPLETE_DATA_COLOR = "#000000"
GRADIENT_START_COLOR = "#0000ff"
GRADIENT_END_COLOR = "#ff0000"

PER_CAPITA_SNAPSHOT_FILE_NAME = "DeathsPerCapitaSnapshot.csv"
EXCESS_DEATHS_FILE_NAME = "ExcessDeaths.csv"
EXCESS_PER_CAPITA_FILE_NAME = f"ExcessDeathsCumulativePer{PER_CAPITA_UNIT}.csv"
RATE_MATRIX_FILE_NAME = f"DeathsPer{PER_CAPITA_UNIT}.csv"
RATE_TRIPLES_FILE_NAME = f"DeathsPer{PER_CAPITA_UNIT}-triples.csv"
REGION_STATISTICS_FILE_NAME = "RegionStatistics.csv"
