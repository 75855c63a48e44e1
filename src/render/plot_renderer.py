"""PNG rendering of radial plot layouts.

Figures are built with matplotlib's object-oriented API on an Agg canvas so
several regions can render concurrently without sharing pyplot state. One
canvas unit is one output pixel.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from core.constants import DASH_PATTERN, DEFAULT_CANVAS_SIZE, RING_STROKE_WIDTH
from core.errors import MortalityDependencyError, MortalityRenderError
from core.types import PlotLayout
from render.radial_geometry import polar_to_cartesian

_DPI = 100
_POINTS_PER_INCH = 72.0
_GRID_COLOR = "#b4b4b4"
_TEXT_COLOR = "#333333"
_WHITESPACE = re.compile(r"\s+")


def image_file_name(region: str) -> str:
    """PNG file name for a region, whitespace removed."""
    return _WHITESPACE.sub("", region) + ".png"


def render_region_image(
    layout: PlotLayout,
    output_path: Path,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
    footer: str | None = None,
) -> Path:
    """Draw one region layout and write it as PNG.

    Args:
        layout: Plottable drawing plan.
        output_path: Target PNG path; parent directories are created.
        canvas_size: Image width and height in pixels.
        footer: Optional text printed along the bottom edge.

    Returns:
        Written image path.

    Raises:
        MortalityRenderError: If the layout is not plottable or writing fails.
        MortalityDependencyError: If matplotlib is missing.
    """
    if not layout.plottable:
        raise MortalityRenderError(
            f"Layout for region '{layout.region}' is not plottable: {layout.diagnostic}."
        )
    try:
        from matplotlib.backends.backend_agg import FigureCanvasAgg
        from matplotlib.figure import Figure
    except ImportError as error:
        raise MortalityDependencyError(
            "Plot rendering requires matplotlib. Install matplotlib to produce region images."
        ) from error
    figure = Figure(figsize=(canvas_size / _DPI, canvas_size / _DPI), dpi=_DPI)
    FigureCanvasAgg(figure)
    axis = figure.add_axes((0.0, 0.0, 1.0, 1.0))
    half = canvas_size / 2
    axis.set_xlim(-half, half)
    axis.set_ylim(-half, half)
    axis.set_aspect("equal")
    axis.axis("off")
    _draw_rings(axis, layout)
    _draw_month_ticks(axis, layout)
    _draw_series(axis, layout)
    _draw_legend(axis, layout)
    _draw_captions(figure, layout, footer)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        figure.savefig(output_path, dpi=_DPI, facecolor="white")
    except OSError as error:
        raise MortalityRenderError(
            f"Failed to write image {output_path}: {error}. Check that the output directory is writable."
        ) from error
    return output_path


def _draw_rings(axis: Any, layout: PlotLayout) -> None:
    """Draw concentric count rings and their staggered labels."""
    from matplotlib.patches import Circle

    for ring in layout.rings:
        axis.add_patch(
            Circle(
                (0.0, 0.0),
                ring.radius,
                fill=False,
                edgecolor=_GRID_COLOR,
                linewidth=_to_points(RING_STROKE_WIDTH),
            )
        )
        label_x, label_y = polar_to_cartesian(ring.radius, ring.label_angle)
        axis.text(label_x, label_y, ring.label, color=_TEXT_COLOR, fontsize=8, ha="center", va="center")


def _draw_month_ticks(axis: Any, layout: PlotLayout) -> None:
    for tick in layout.month_ticks:
        end_x, end_y = tick.end_point
        axis.plot([0.0, end_x], [0.0, end_y], color=_GRID_COLOR, linewidth=_to_points(RING_STROKE_WIDTH))
        label_x, label_y = tick.label_point
        axis.text(
            label_x,
            label_y,
            tick.label,
            rotation=tick.label_rotation,
            rotation_mode="anchor",
            color=_TEXT_COLOR,
            fontsize=10,
            ha="center",
            va="bottom",
        )


def _draw_series(axis: Any, layout: PlotLayout) -> None:
    """Draw one segment per consecutive point pair, styled by the later point."""
    dashes = tuple(_to_points(length) for length in DASH_PATTERN)
    for previous, current in zip(layout.points, layout.points[1:]):
        start_x, start_y = previous.cartesian_point
        end_x, end_y = current.cartesian_point
        axis.plot(
            [start_x, end_x],
            [start_y, end_y],
            color=current.color.as_tuple(),
            linewidth=_to_points(current.stroke_width),
            linestyle=(0, dashes) if current.dashed else "solid",
            solid_capstyle="round",
        )


def _draw_legend(axis: Any, layout: PlotLayout) -> None:
    if not layout.legend:
        return
    from matplotlib.lines import Line2D

    dashes = tuple(_to_points(length) for length in DASH_PATTERN)
    handles = [
        Line2D(
            [],
            [],
            color=entry.color.as_tuple(),
            linewidth=3.0,
            linestyle=(0, dashes) if entry.dashed else "solid",
            label=entry.label,
        )
        for entry in layout.legend
    ]
    axis.legend(handles=handles, loc="lower right", frameon=False, fontsize=9)


def _draw_captions(figure: Any, layout: PlotLayout, footer: str | None) -> None:
    figure.text(0.02, 0.97, layout.region, fontsize=20, color=_TEXT_COLOR, va="top")
    if layout.min_date is not None and layout.max_date is not None:
        span = f"Weekly deaths {layout.min_date.isoformat()} to {layout.max_date.isoformat()}"
        figure.text(0.02, 0.93, span, fontsize=11, color=_TEXT_COLOR, va="top")
    if footer:
        figure.text(0.02, 0.02, footer, fontsize=9, color=_TEXT_COLOR, va="bottom")


def _to_points(canvas_units: float) -> float:
    """Convert a pixel length to matplotlib points."""
    return canvas_units * _POINTS_PER_INCH / _DPI
