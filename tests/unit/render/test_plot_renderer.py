"""Unit tests for PNG rendering of plot layouts."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from core.errors import MortalityRenderError
from core.run_settings import default_run_settings
from core.types import DataPoint, Series
from render.plot_renderer import image_file_name, render_region_image
from render.radial_geometry import GeometrySettings, RadialPlotGeometry
from render.year_palette import PaletteSettings, YearPalette

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _geometry(today: date) -> RadialPlotGeometry:
    settings = default_run_settings()
    palette = YearPalette(
        PaletteSettings(
            year_colors=settings.year_colors,
            incomplete_color=settings.incomplete_color,
            gradient_start=settings.gradient_start,
            gradient_end=settings.gradient_end,
        ),
        today,
    )
    return RadialPlotGeometry(GeometrySettings.from_run_settings(settings), palette)


def _series(weeks: int) -> Series:
    start = date(2020, 1, 4)
    return Series(
        region="New York",
        points=tuple(
            DataPoint(date=start + timedelta(weeks=index), count=3000 + (index % 13) * 150)
            for index in range(weeks)
        ),
    )


def test_image_file_name_removes_whitespace() -> None:
    """Region names become compact PNG file names."""
    assert image_file_name("District of Columbia") == "DistrictofColumbia.png"


def test_render_region_image_writes_png(tmp_path) -> None:
    """Renderer should write a PNG file for a plottable layout."""
    layout = _geometry(date(2021, 3, 1)).layout(_series(60), 500.0)
    output_path = tmp_path / "images" / image_file_name(layout.region)

    written = render_region_image(layout, output_path, footer="Radius scale: sqrt.")

    assert written == output_path
    assert output_path.read_bytes()[:8] == _PNG_SIGNATURE


def test_render_region_image_draws_incomplete_weeks(tmp_path) -> None:
    """Layouts with dashed incomplete weeks should still render."""
    layout = _geometry(date(2021, 2, 1)).layout(_series(60), 500.0)

    written = render_region_image(layout, tmp_path / "incomplete.png")

    assert any(point.dashed for point in layout.points) and written.exists()


def test_render_region_image_rejects_unplottable_layout(tmp_path) -> None:
    """Unplottable layouts should not be drawn."""
    layout = _geometry(date(2021, 3, 1)).layout(_series(1), 500.0)

    with pytest.raises(MortalityRenderError, match="not plottable"):
        render_region_image(layout, tmp_path / "single.png")
