"""Radius transforms and count-to-canvas scaling.

The default square-root transform makes the area under the curve, not its
radius, proportional to the count, so outlier weeks do not dominate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from core.constants import DEFAULT_FALLBACK_RING_STEP, DEFAULT_RING_STEPS, SUPPORTED_RADIUS_TRANSFORMS
from core.errors import MortalityRenderError


@dataclass(frozen=True)
class RadiusTransform:
    """Invertible monotonic transform applied to counts.

    Attributes:
        name: Transform identifier.
        forward: Count space to transformed space.
        backward: Transformed space to count space.
    """

    name: str
    forward: Callable[[float], float]
    backward: Callable[[float], float]


def _square(value: float) -> float:
    return value * value


def _identity(value: float) -> float:
    return value


SQUARE_ROOT_TRANSFORM = RadiusTransform(name="sqrt", forward=math.sqrt, backward=_square)
IDENTITY_TRANSFORM = RadiusTransform(name="identity", forward=_identity, backward=_identity)
_TRANSFORMS = {
    SQUARE_ROOT_TRANSFORM.name: SQUARE_ROOT_TRANSFORM,
    IDENTITY_TRANSFORM.name: IDENTITY_TRANSFORM,
}


def resolve_radius_transform(name: str) -> RadiusTransform:
    """Return the transform registered under ``name``.

    Raises:
        MortalityRenderError: If the name is unknown.
    """
    transform = _TRANSFORMS.get(name.lower().strip())
    if transform is None:
        supported = ", ".join(SUPPORTED_RADIUS_TRANSFORMS)
        raise MortalityRenderError(
            f"Unsupported radius transform '{name}'. Choose one of: {supported}."
        )
    return transform


@dataclass(frozen=True)
class RadialScale:
    """Linear factor applied after the radius transform."""

    transform: RadiusTransform
    factor: float

    def to_canvas(self, count: float) -> float:
        """Map a count to a canvas radius."""
        return self.transform.forward(count) * self.factor

    def to_count(self, radius: float) -> float:
        """Map a canvas radius back to a count."""
        return self.transform.backward(radius / self.factor)


def derive_scale(transform: RadiusTransform, max_count: int, target_radius: float) -> RadialScale:
    """Solve the factor placing ``max_count`` at ``target_radius``.

    Raises:
        MortalityRenderError: If max_count or target_radius is not positive.
    """
    if max_count <= 0:
        raise MortalityRenderError(
            f"Cannot derive a radial scale for max count {max_count}: expected a positive count."
        )
    if target_radius <= 0:
        raise MortalityRenderError(
            f"Cannot derive a radial scale for target radius {target_radius}."
        )
    return RadialScale(transform=transform, factor=target_radius / transform.forward(max_count))


def select_ring_step(
    max_count: int,
    ring_steps: Sequence[tuple[int, int]] = DEFAULT_RING_STEPS,
    fallback_step: int = DEFAULT_FALLBACK_RING_STEP,
) -> int:
    """Pick the ring spacing for a series maximum; first threshold exceeded wins."""
    for threshold, step in ring_steps:
        if max_count > threshold:
            return step
    return fallback_step


def ring_count(max_count: int, step: int) -> int:
    """Number of rings needed to enclose ``max_count``."""
    return max_count // step + 1
