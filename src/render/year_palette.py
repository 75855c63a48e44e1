"""Point colors and strokes for the radial plot.

Each week is colored by its calendar year, or along a gradient over the
series' date span. Weeks inside the reporting-lag window are drawn in the
incomplete-data style: faded and dashed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Mapping

import matplotlib
from matplotlib.colors import hsv_to_rgb, rgb_to_hsv

from core.constants import (
    DEFAULT_COLOR_MODE,
    INCOMPLETE_DATA_ALPHA,
    INCOMPLETE_DATA_DAYS,
    SUPPORTED_COLOR_MODES,
)
from core.errors import MortalityRenderError
from core.types import RGBA

_FALLBACK_COLORMAP = "tab10"


@dataclass(frozen=True)
class PaletteSettings:
    """Immutable color tables.

    Attributes:
        year_colors: Color per calendar year.
        incomplete_color: Color of weeks still being reported.
        gradient_start: Gradient color at the first date of a series.
        gradient_end: Gradient color at the last date of a series.
        color_mode: ``year``, ``gradient-rgb`` or ``gradient-hsb``.
    """

    year_colors: Mapping[int, RGBA]
    incomplete_color: RGBA
    gradient_start: RGBA
    gradient_end: RGBA
    color_mode: str = DEFAULT_COLOR_MODE


@dataclass(frozen=True)
class PointStyle:
    """Resolved stroke style for one date."""

    color: RGBA
    dashed: bool


class YearPalette:
    """Date to stroke style resolver for one reference day."""

    def __init__(
        self,
        settings: PaletteSettings,
        today: date,
        incomplete_data_days: int = INCOMPLETE_DATA_DAYS,
    ) -> None:
        if settings.color_mode not in SUPPORTED_COLOR_MODES:
            supported = ", ".join(SUPPORTED_COLOR_MODES)
            raise MortalityRenderError(
                f"Unsupported color mode '{settings.color_mode}'. Choose one of: {supported}."
            )
        self._settings = settings
        self._incomplete_cutoff = today - timedelta(days=incomplete_data_days)

    @property
    def incomplete_cutoff(self) -> date:
        """First date treated as incompletely reported."""
        return self._incomplete_cutoff

    def is_incomplete(self, point_date: date) -> bool:
        """Return whether a week is still inside the reporting-lag window."""
        return point_date >= self._incomplete_cutoff

    def incomplete_style(self) -> PointStyle:
        """Style of incompletely reported weeks."""
        color = replace(self._settings.incomplete_color, alpha=INCOMPLETE_DATA_ALPHA)
        return PointStyle(color=color, dashed=True)

    def style_for(self, point_date: date, span_start: date, span_end: date) -> PointStyle:
        """Resolve the stroke style of a date inside a series span.

        Args:
            point_date: Date being styled.
            span_start: First date of the series.
            span_end: Last date of the series.

        Returns:
            Color and dash flag for the segment ending at ``point_date``.
        """
        if self.is_incomplete(point_date):
            return self.incomplete_style()
        return self.complete_style_for(point_date, span_start, span_end)

    def complete_style_for(self, point_date: date, span_start: date, span_end: date) -> PointStyle:
        """Year or gradient style of a date, ignoring the incomplete window."""
        mode = self._settings.color_mode
        if mode == "year":
            return PointStyle(color=self.year_color(point_date.year), dashed=False)
        fraction = _distance_along(point_date, span_start, span_end)
        if mode == "gradient-hsb":
            color = interpolate_hsb(self._settings.gradient_end, self._settings.gradient_start, fraction)
        else:
            color = interpolate_rgb(self._settings.gradient_end, self._settings.gradient_start, fraction)
        return PointStyle(color=color, dashed=False)

    def year_color(self, year: int) -> RGBA:
        """Color for a calendar year; unknown years use a stable fallback."""
        color = self._settings.year_colors.get(year)
        if color is not None:
            return color
        red, green, blue, alpha = matplotlib.colormaps[_FALLBACK_COLORMAP](year % 10)
        return RGBA(red=red, green=green, blue=blue, alpha=alpha)


def interpolate_rgb(end_color: RGBA, start_color: RGBA, fraction: float) -> RGBA:
    """Blend two colors channel by channel in RGB space.

    Raises:
        MortalityRenderError: If fraction is outside [0, 1].
    """
    _check_fraction(fraction)
    inverse = 1.0 - fraction
    return RGBA(
        red=end_color.red * fraction + start_color.red * inverse,
        green=end_color.green * fraction + start_color.green * inverse,
        blue=end_color.blue * fraction + start_color.blue * inverse,
    )


def interpolate_hsb(end_color: RGBA, start_color: RGBA, fraction: float) -> RGBA:
    """Blend two colors in hue/saturation/brightness space.

    Raises:
        MortalityRenderError: If fraction is outside [0, 1].
    """
    _check_fraction(fraction)
    start_hsv = rgb_to_hsv((start_color.red, start_color.green, start_color.blue))
    end_hsv = rgb_to_hsv((end_color.red, end_color.green, end_color.blue))
    blended = end_hsv * fraction + start_hsv * (1.0 - fraction)
    red, green, blue = (float(channel) for channel in hsv_to_rgb(blended))
    return RGBA(red=red, green=green, blue=blue)


def _distance_along(point_date: date, span_start: date, span_end: date) -> float:
    total_days = (span_end - span_start).days
    if total_days <= 0:
        return 0.0
    return min(max((point_date - span_start).days / total_days, 0.0), 1.0)


def _check_fraction(fraction: float) -> None:
    if fraction < 0.0 or fraction > 1.0:
        raise MortalityRenderError(
            f"Color interpolation fraction {fraction} is outside [0, 1]."
        )
