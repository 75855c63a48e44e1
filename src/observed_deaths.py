"""Public SDK surface for observed-deaths.

This module provides a stable import path for library users.
It re-exports the primary client, typed option models, and pipeline stages.
"""

from __future__ import annotations

from core.config import MortalityConfig
from core.run_settings import RunSettings, default_run_settings, load_run_settings
from core.types import (
    DataPoint,
    ObservationRecord,
    PlotLayout,
    RenderOptions,
    RenderRunResult,
    Series,
)
from ingest.pipeline import run_render_pipeline
from render.radial_geometry import GeometrySettings, RadialPlotGeometry
from render.year_palette import PaletteSettings, YearPalette
from store.mortality_sdk import MortalityClient
from transforms.region_aggregation import AggregationSettings, RegionAggregator
from transforms.reporting_lag import trim_reporting_lag
from transforms.series_builder import build_region_series

__all__ = [
    "AggregationSettings",
    "DataPoint",
    "GeometrySettings",
    "MortalityClient",
    "MortalityConfig",
    "ObservationRecord",
    "PaletteSettings",
    "PlotLayout",
    "RadialPlotGeometry",
    "RegionAggregator",
    "RenderOptions",
    "RenderRunResult",
    "RunSettings",
    "Series",
    "YearPalette",
    "build_region_series",
    "default_run_settings",
    "load_run_settings",
    "run_render_pipeline",
    "trim_reporting_lag",
]
