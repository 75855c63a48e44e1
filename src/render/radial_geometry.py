"""Polar layout of one region's weekly series.

A year maps to one revolution, with January 1st at 12 o'clock and time
running clockwise. Counts map to radius through an invertible transform
and a scale solved from the series maximum.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date

from core.constants import (
    DATA_RADIUS_FRACTION,
    DATA_STROKE_WIDTH,
    DAYS_PER_PLOT_YEAR,
    DEFAULT_FALLBACK_RING_STEP,
    DEFAULT_RING_STEPS,
    INCOMPLETE_DATA_LABEL,
    MONTH_LABEL_OFFSET,
    PLOT_RADIUS_FRACTION,
)
from core.logging_config import get_logger
from core.run_settings import RunSettings
from core.types import LegendEntry, PlotInstruction, PlotLayout, RingSpec, Series, TickSpec
from render.radius_scale import (
    SQUARE_ROOT_TRANSFORM,
    RadialScale,
    RadiusTransform,
    derive_scale,
    resolve_radius_transform,
    ring_count,
    select_ring_step,
)
from render.year_palette import YearPalette

_LOGGER = get_logger(__name__)
_FULL_TURN = 2 * math.pi
_RING_LABEL_START = 7 * math.pi / 12
_RING_LABEL_STAGGER = math.pi / 6


@dataclass(frozen=True)
class GeometrySettings:
    """Immutable geometry options.

    Attributes:
        transform: Count to radius transform.
        ring_steps: Descending ``(threshold, step)`` pairs.
        fallback_ring_step: Ring step when no threshold matches.
        plot_radius_fraction: Month tick length as a fraction of the canvas radius.
        data_radius_fraction: Radius of the series maximum as a fraction of the tick length.
        data_stroke_width: Data line width in canvas units.
        month_label_offset: Gap between a tick end and its label.
    """

    transform: RadiusTransform = SQUARE_ROOT_TRANSFORM
    ring_steps: tuple[tuple[int, int], ...] = DEFAULT_RING_STEPS
    fallback_ring_step: int = DEFAULT_FALLBACK_RING_STEP
    plot_radius_fraction: float = PLOT_RADIUS_FRACTION
    data_radius_fraction: float = DATA_RADIUS_FRACTION
    data_stroke_width: float = DATA_STROKE_WIDTH
    month_label_offset: float = MONTH_LABEL_OFFSET

    @classmethod
    def from_run_settings(cls, settings: RunSettings) -> "GeometrySettings":
        """Build geometry settings from validated run settings."""
        return cls(
            transform=resolve_radius_transform(settings.radius_transform),
            ring_steps=settings.ring_steps,
            fallback_ring_step=settings.fallback_ring_step,
        )


def date_to_angle(point_date: date) -> float:
    """Angle of a date in radians, on a fixed 366-day year."""
    day_of_year = point_date.timetuple().tm_yday
    return (day_of_year - 1) / DAYS_PER_PLOT_YEAR * _FULL_TURN


def to_draw_angle(angle: float) -> float:
    """Rotate so day one sits at 12 o'clock and angles run clockwise."""
    return -angle + math.pi / 2


def month_start_angle(month: int, reference_year: int) -> float:
    """Drawing angle of the first day of a month, on the same scale as data points."""
    return to_draw_angle(date_to_angle(date(reference_year, month, 1)))


def polar_to_cartesian(radius: float, angle: float) -> tuple[float, float]:
    """Convert polar coordinates to canvas coordinates, y up."""
    return (radius * math.cos(angle), radius * math.sin(angle))


def upright_rotation(angle: float) -> float:
    """Tangential text rotation in degrees, flipped to never read upside down."""
    rotation = (math.degrees(angle) - 90.0) % 360.0
    if 90.0 < rotation < 270.0:
        rotation -= 180.0
    return rotation


class RadialPlotGeometry:
    """Series to drawing plan mapper."""

    def __init__(self, settings: GeometrySettings, palette: YearPalette) -> None:
        self._settings = settings
        self._palette = palette

    def layout(self, series: Series, canvas_radius: float) -> PlotLayout:
        """Build the drawing plan for one region.

        Args:
            series: Region series; points need not be sorted.
            canvas_radius: Half the canvas width in canvas units.

        Returns:
            Layout with rings, point instructions, month ticks, and legend.
            Series that cannot be drawn as a line yield ``plottable=False``
            with a diagnostic and only the month ticks.
        """
        ordered = series.sorted_by_date()
        upper_limit = canvas_radius * self._settings.plot_radius_fraction
        reference_year = (
            ordered.max_date.year if ordered.max_date is not None else self._palette.incomplete_cutoff.year
        )
        ticks = self.month_ticks(upper_limit, reference_year)
        diagnostic = _degenerate_reason(ordered)
        if diagnostic is not None:
            _LOGGER.info("plot_layout_degenerate", region=series.region, reason=diagnostic)
            return PlotLayout(
                region=series.region,
                rings=(),
                points=(),
                month_ticks=ticks,
                max_count=ordered.max_count,
                min_date=ordered.min_date,
                max_date=ordered.max_date,
                plottable=False,
                diagnostic=diagnostic,
            )
        max_count = ordered.max_count
        scale = derive_scale(
            self._settings.transform,
            max_count,
            upper_limit * self._settings.data_radius_fraction,
        )
        step = select_ring_step(max_count, self._settings.ring_steps, self._settings.fallback_ring_step)
        return PlotLayout(
            region=series.region,
            rings=self.rings(max_count, step, scale),
            points=self.plot_points(ordered, scale),
            month_ticks=ticks,
            legend=self.legend(ordered),
            max_count=max_count,
            ring_step=step,
            min_date=ordered.min_date,
            max_date=ordered.max_date,
        )

    def rings(self, max_count: int, step: int, scale: RadialScale) -> tuple[RingSpec, ...]:
        """Concentric count rings covering ``[0, max_count]``."""
        specs: list[RingSpec] = []
        for index in range(1, ring_count(max_count, step) + 1):
            count = index * step
            specs.append(
                RingSpec(
                    index=index,
                    count=count,
                    radius=scale.to_canvas(count),
                    label=f"{count:,}",
                    label_angle=_RING_LABEL_START - index * _RING_LABEL_STAGGER,
                )
            )
        return tuple(specs)

    def plot_points(self, series: Series, scale: RadialScale) -> tuple[PlotInstruction, ...]:
        """Point instructions for a date-sorted series."""
        span_start = series.min_date
        span_end = series.max_date
        instructions: list[PlotInstruction] = []
        for point in series.points:
            angle = to_draw_angle(date_to_angle(point.date))
            style = self._palette.style_for(point.date, span_start, span_end)
            instructions.append(
                PlotInstruction(
                    date=point.date,
                    count=point.count,
                    cartesian_point=polar_to_cartesian(scale.to_canvas(point.count), angle),
                    color=style.color,
                    stroke_width=self._settings.data_stroke_width,
                    dashed=style.dashed,
                )
            )
        return tuple(instructions)

    def month_ticks(self, upper_limit: float, reference_year: int) -> tuple[TickSpec, ...]:
        """Twelve month ticks from the centre to ``upper_limit``."""
        label_radius = upper_limit + self._settings.month_label_offset
        ticks: list[TickSpec] = []
        for month in range(1, 13):
            angle = month_start_angle(month, reference_year)
            ticks.append(
                TickSpec(
                    month=month,
                    label=calendar.month_name[month],
                    angle=angle,
                    end_point=polar_to_cartesian(upper_limit, angle),
                    label_point=polar_to_cartesian(label_radius, angle),
                    label_rotation=upright_rotation(angle),
                )
            )
        return tuple(ticks)

    def legend(self, series: Series) -> tuple[LegendEntry, ...]:
        """Year key from the first to the last plotted year, plus an incomplete-data entry."""
        first_dates: dict[int, date] = {}
        has_incomplete = False
        for point in series.points:
            first_dates.setdefault(point.date.year, point.date)
            if self._palette.is_incomplete(point.date):
                has_incomplete = True
        entries: list[LegendEntry] = []
        for year in range(series.min_date.year, series.max_date.year + 1):
            key_date = first_dates.get(year, date(year, 1, 1))
            style = self._palette.complete_style_for(key_date, series.min_date, series.max_date)
            entries.append(LegendEntry(label=str(year), color=style.color))
        if has_incomplete:
            style = self._palette.incomplete_style()
            entries.append(LegendEntry(label=INCOMPLETE_DATA_LABEL, color=style.color, dashed=True))
        return tuple(entries)


def _degenerate_reason(series: Series) -> str | None:
    point_count = len(series.points)
    if point_count < 2:
        return f"series has {point_count} point(s); at least 2 are needed to draw a line"
    if series.max_count == 0:
        return "series maximum count is 0; nothing to scale"
    return None
