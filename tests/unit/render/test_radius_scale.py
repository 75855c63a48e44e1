"""Unit tests for radius transforms and ring spacing."""

from __future__ import annotations

import pytest

from core.errors import MortalityRenderError
from render.radius_scale import (
    IDENTITY_TRANSFORM,
    SQUARE_ROOT_TRANSFORM,
    derive_scale,
    resolve_radius_transform,
    ring_count,
    select_ring_step,
)


@pytest.mark.parametrize("value", [0.0, 1.0, 2.5, 6000.0, 123456.0])
def test_square_root_transform_round_trips(value: float) -> None:
    """Backward should invert forward for non-negative counts."""
    transform = SQUARE_ROOT_TRANSFORM

    assert transform.backward(transform.forward(value)) == pytest.approx(value)


def test_resolve_radius_transform_by_name() -> None:
    """Transforms should resolve case-insensitively by name."""
    assert resolve_radius_transform("SQRT") is SQUARE_ROOT_TRANSFORM
    assert resolve_radius_transform("identity") is IDENTITY_TRANSFORM


def test_resolve_radius_transform_rejects_unknown() -> None:
    """Unknown transform names are render errors."""
    with pytest.raises(MortalityRenderError, match="log"):
        resolve_radius_transform("log")


def test_derive_scale_places_maximum_on_target() -> None:
    """The series maximum should land on the target radius."""
    scale = derive_scale(SQUARE_ROOT_TRANSFORM, 6000, 360.0)

    assert scale.to_canvas(6000) == pytest.approx(360.0)
    assert scale.to_count(scale.to_canvas(1500)) == pytest.approx(1500)


def test_derive_scale_square_root_halves_radius_for_quarter_count() -> None:
    """Under the square-root transform a quarter of the count is half the radius."""
    scale = derive_scale(SQUARE_ROOT_TRANSFORM, 400, 100.0)

    assert scale.to_canvas(100) == pytest.approx(50.0)


def test_derive_scale_rejects_zero_maximum() -> None:
    """A zero maximum must not reach the division."""
    with pytest.raises(MortalityRenderError):
        derive_scale(IDENTITY_TRANSFORM, 0, 100.0)


@pytest.mark.parametrize(
    ("max_count", "expected_step"),
    [
        (25000, 10000),
        (20000, 1000),
        (6000, 1000),
        (4500, 500),
        (2000, 400),
        (600, 200),
        (300, 50),
        (200, 20),
        (1, 20),
    ],
)
def test_select_ring_step_thresholds(max_count: int, expected_step: int) -> None:
    """First exceeded threshold decides the ring step."""
    assert select_ring_step(max_count) == expected_step


def test_ring_layout_for_six_thousand() -> None:
    """Max count 6000 uses step 1000 and seven rings."""
    step = select_ring_step(6000)

    assert (step, ring_count(6000, step)) == (1000, 7)


@pytest.mark.parametrize("max_count", [1, 19, 20, 999, 5001, 40000])
def test_rings_cover_maximum(max_count: int) -> None:
    """The outermost ring is never below the maximum count."""
    step = select_ring_step(max_count)

    assert ring_count(max_count, step) * step >= max_count


def test_select_ring_step_uses_custom_table() -> None:
    """Custom ring tables replace the built-in thresholds."""
    assert select_ring_step(150, ((1000, 250), (100, 25)), 10) == 25
    assert select_ring_step(50, ((1000, 250), (100, 25)), 10) == 10
