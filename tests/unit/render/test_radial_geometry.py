"""Unit tests for the radial plot geometry."""

from __future__ import annotations

import math
from datetime import date, timedelta

import pytest

from core.constants import INCOMPLETE_DATA_LABEL
from core.types import RGBA, DataPoint, Series
from render.radial_geometry import (
    GeometrySettings,
    RadialPlotGeometry,
    date_to_angle,
    month_start_angle,
    polar_to_cartesian,
    to_draw_angle,
    upright_rotation,
)
from render.radius_scale import IDENTITY_TRANSFORM
from render.year_palette import PaletteSettings, YearPalette

_CANVAS_RADIUS = 500.0
_TODAY = date(2022, 3, 1)


def _geometry(today: date = _TODAY, settings: GeometrySettings | None = None) -> RadialPlotGeometry:
    palette = YearPalette(
        PaletteSettings(
            year_colors={2020: RGBA(1.0, 0.0, 0.0), 2021: RGBA(0.0, 1.0, 0.0)},
            incomplete_color=RGBA(0.0, 0.0, 0.0),
            gradient_start=RGBA(0.0, 0.0, 1.0),
            gradient_end=RGBA(1.0, 0.0, 0.0),
        ),
        today,
    )
    return RadialPlotGeometry(settings or GeometrySettings(), palette)


def _weekly_series(counts: list[int], start: date = date(2021, 1, 2)) -> Series:
    return Series(
        region="Alpha",
        points=tuple(
            DataPoint(date=start + timedelta(weeks=index), count=count)
            for index, count in enumerate(counts)
        ),
    )


def test_date_to_angle_starts_at_zero() -> None:
    """January 1st maps to angle zero."""
    assert date_to_angle(date(2021, 1, 1)) == 0.0


def test_date_to_angle_uses_fixed_year_length() -> None:
    """The angle uses a 366-day year in every year."""
    assert date_to_angle(date(2021, 12, 31)) == pytest.approx(364 / 366 * 2 * math.pi)


@pytest.mark.parametrize("day", [date(2020, 1, 1), date(2020, 2, 10), date(2020, 7, 4)])
def test_date_to_angle_is_periodic_over_366_days(day: date) -> None:
    """A date and the date 366 days later share an angle within a leap year cycle."""
    assert date_to_angle(day) == pytest.approx(date_to_angle(day + timedelta(days=366)))


def test_to_draw_angle_puts_day_one_at_twelve_o_clock() -> None:
    """Day one is drawn straight up and time runs clockwise."""
    top_x, top_y = polar_to_cartesian(1.0, to_draw_angle(0.0))
    later_x, _ = polar_to_cartesian(1.0, to_draw_angle(0.1))

    assert (top_x, top_y) == pytest.approx((0.0, 1.0)) and later_x > 0


def test_month_start_angle_respects_leap_years() -> None:
    """March starts later in a leap year."""
    assert month_start_angle(3, 2020) < month_start_angle(3, 2021)
    assert month_start_angle(1, 2021) == pytest.approx(math.pi / 2)


def test_month_start_angle_lines_up_with_data_points() -> None:
    """Month ticks share the 366-day scale of plotted weeks in common years."""
    assert month_start_angle(3, 2021) == pytest.approx(to_draw_angle(59 / 366 * 2 * math.pi))
    assert month_start_angle(12, 2021) == pytest.approx(to_draw_angle(date_to_angle(date(2021, 12, 1))))


@pytest.mark.parametrize("angle_degrees", [90.0, 30.0, 0.0, -45.0, -90.0, -135.0, -200.0, -269.0])
def test_upright_rotation_never_upside_down(angle_degrees: float) -> None:
    """Month labels stay readable around the whole circle."""
    rotation = upright_rotation(math.radians(angle_degrees)) % 360.0

    assert not 90.0 < rotation < 270.0


def test_upright_rotation_is_horizontal_at_top_and_bottom() -> None:
    """Labels at 12 and 6 o'clock are horizontal."""
    assert math.cos(math.radians(upright_rotation(math.pi / 2))) == pytest.approx(1.0)
    assert math.cos(math.radians(upright_rotation(-math.pi / 2))) == pytest.approx(1.0)


def test_layout_places_maximum_at_data_radius() -> None:
    """The largest count lands at 90% of the tick length."""
    layout = _geometry().layout(_weekly_series([100, 400, 200]), _CANVAS_RADIUS)

    peak = max(layout.points, key=lambda point: point.count)

    assert math.hypot(*peak.cartesian_point) == pytest.approx(_CANVAS_RADIUS * 0.8 * 0.9)


def test_layout_orders_points_by_date() -> None:
    """Unsorted input is drawn in date order."""
    series = _weekly_series([100, 400, 200])
    shuffled = Series(region="Alpha", points=tuple(reversed(series.points)))

    layout = _geometry().layout(shuffled, _CANVAS_RADIUS)

    assert [point.date for point in layout.points] == sorted(point.date for point in series.points)


def test_layout_rings_for_six_thousand() -> None:
    """A 6000 maximum yields seven rings 1000 apart with grouped labels."""
    layout = _geometry().layout(_weekly_series([3000, 6000]), _CANVAS_RADIUS)

    assert layout.ring_step == 1000
    assert [ring.count for ring in layout.rings] == [1000, 2000, 3000, 4000, 5000, 6000, 7000]
    assert layout.rings[0].label == "1,000"


def test_layout_ring_labels_are_staggered() -> None:
    """Each ring label sits at a different angle."""
    layout = _geometry().layout(_weekly_series([3000, 6000]), _CANVAS_RADIUS)

    angles = [ring.label_angle for ring in layout.rings]

    assert len(set(angles)) == len(angles)


def test_layout_has_twelve_month_ticks() -> None:
    """Every layout carries twelve month ticks reaching the upper limit."""
    layout = _geometry().layout(_weekly_series([10, 20]), _CANVAS_RADIUS)

    assert [tick.label for tick in layout.month_ticks][:2] == ["January", "February"]
    assert len(layout.month_ticks) == 12
    assert math.hypot(*layout.month_ticks[0].end_point) == pytest.approx(_CANVAS_RADIUS * 0.8)


def test_layout_identity_transform_is_linear() -> None:
    """With the identity transform half the count is half the radius."""
    geometry = _geometry(settings=GeometrySettings(transform=IDENTITY_TRANSFORM))

    layout = geometry.layout(_weekly_series([200, 400]), _CANVAS_RADIUS)

    radii = [math.hypot(*point.cartesian_point) for point in layout.points]

    assert radii[0] == pytest.approx(radii[1] / 2)


def test_layout_flags_incomplete_points() -> None:
    """Recent weeks are dashed and add a legend entry."""
    series = _weekly_series([100, 110, 120], start=date(2021, 12, 18))

    layout = _geometry(today=date(2022, 2, 1)).layout(series, _CANVAS_RADIUS)

    assert [point.dashed for point in layout.points] == [False, True, True]
    assert layout.legend[-1].label == INCOMPLETE_DATA_LABEL and layout.legend[-1].dashed


def test_layout_legend_lists_years() -> None:
    """Legend has one entry per plotted year."""
    series = Series(
        region="Alpha",
        points=(
            DataPoint(date=date(2020, 12, 26), count=100),
            DataPoint(date=date(2021, 1, 2), count=120),
        ),
    )

    layout = _geometry().layout(series, _CANVAS_RADIUS)

    assert [(entry.label, entry.color) for entry in layout.legend] == [
        ("2020", RGBA(1.0, 0.0, 0.0)),
        ("2021", RGBA(0.0, 1.0, 0.0)),
    ]


def test_layout_legend_keeps_year_with_only_incomplete_points() -> None:
    """A year reached only by incomplete weeks still gets its year entry."""
    series = Series(
        region="Alpha",
        points=(
            DataPoint(date=date(2020, 12, 19), count=100),
            DataPoint(date=date(2020, 12, 26), count=110),
            DataPoint(date=date(2021, 1, 2), count=120),
        ),
    )

    layout = _geometry(today=date(2021, 1, 20)).layout(series, _CANVAS_RADIUS)

    assert [entry.label for entry in layout.legend] == ["2020", "2021", INCOMPLETE_DATA_LABEL]
    assert layout.legend[1].color == RGBA(0.0, 1.0, 0.0) and not layout.legend[1].dashed


@pytest.mark.parametrize("counts", [[], [150]])
def test_layout_short_series_is_not_plottable(counts: list[int]) -> None:
    """Series with fewer than two points are skipped with a diagnostic."""
    layout = _geometry().layout(_weekly_series(counts), _CANVAS_RADIUS)

    assert not layout.plottable and layout.diagnostic
    assert layout.rings == () and layout.points == () and len(layout.month_ticks) == 12


def test_layout_zero_maximum_is_not_plottable() -> None:
    """All-zero series never reach the scale division."""
    layout = _geometry().layout(_weekly_series([0, 0, 0]), _CANVAS_RADIUS)

    assert not layout.plottable and "0" in (layout.diagnostic or "")
