"""Typed run-settings parsing for plot and aggregation tables.

This module loads and validates optional YAML settings files. Year colors,
region aliases, and ring thresholds live here as immutable values that are
handed to aggregation and geometry components at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Sequence, cast

from matplotlib.colors import to_rgba

from core.constants import (
    DEFAULT_COLOR_MODE,
    DEFAULT_EXCLUDED_REGION,
    DEFAULT_FALLBACK_RING_STEP,
    DEFAULT_OUTCOME,
    DEFAULT_RADIUS_TRANSFORM,
    DEFAULT_REGION_ALIASES,
    DEFAULT_RING_STEPS,
    DEFAULT_TRIM_WINDOW,
    DEFAULT_YEAR_COLORS,
    GRADIENT_END_COLOR,
    GRADIENT_START_COLOR,
    INCOMPLETE_DATA_COLOR,
    SUPPORTED_COLOR_MODES,
    SUPPORTED_RADIUS_TRANSFORMS,
)
from core.errors import MortalityDependencyError, MortalitySettingsError
from core.types import RGBA

_ALLOWED_KEYS = frozenset(
    {
        "year_colors",
        "incomplete_color",
        "gradient_colors",
        "region_aliases",
        "excluded_region",
        "ring_steps",
        "fallback_ring_step",
        "radius_transform",
        "color_mode",
        "trim_window",
        "outcome",
    }
)


@dataclass(frozen=True)
class RunSettings:
    """Validated lookup tables and plot options for one run.

    Attributes:
        year_colors: Stroke color per calendar year.
        incomplete_color: Stroke color for weeks still being reported.
        gradient_start: First color of gradient color modes.
        gradient_end: Last color of gradient color modes.
        region_aliases: Composite region name to the regions summed into it.
        excluded_region: Aggregate region reported outside rank lists.
        ring_steps: Descending ``(threshold, step)`` pairs for ring spacing.
        fallback_ring_step: Ring step when no threshold matches.
        radius_transform: Radius transform name.
        color_mode: Point color mode name.
        trim_window: Reporting-lag trimmer window.
        outcome: Outcome rows to keep, None to keep every outcome.
    """

    year_colors: Mapping[int, RGBA]
    incomplete_color: RGBA
    gradient_start: RGBA
    gradient_end: RGBA
    region_aliases: Mapping[str, tuple[str, ...]]
    excluded_region: str | None
    ring_steps: tuple[tuple[int, int], ...]
    fallback_ring_step: int
    radius_transform: str
    color_mode: str
    trim_window: int
    outcome: str | None


def default_run_settings() -> RunSettings:
    """Return built-in run settings."""
    return RunSettings(
        year_colors={year: parse_color(value, "year color") for year, value in DEFAULT_YEAR_COLORS},
        incomplete_color=parse_color(INCOMPLETE_DATA_COLOR, "incomplete color"),
        gradient_start=parse_color(GRADIENT_START_COLOR, "gradient start"),
        gradient_end=parse_color(GRADIENT_END_COLOR, "gradient end"),
        region_aliases=dict(DEFAULT_REGION_ALIASES),
        excluded_region=DEFAULT_EXCLUDED_REGION,
        ring_steps=DEFAULT_RING_STEPS,
        fallback_ring_step=DEFAULT_FALLBACK_RING_STEP,
        radius_transform=DEFAULT_RADIUS_TRANSFORM,
        color_mode=DEFAULT_COLOR_MODE,
        trim_window=DEFAULT_TRIM_WINDOW,
        outcome=DEFAULT_OUTCOME,
    )


def load_run_settings(settings_path: str | None) -> RunSettings:
    """Load run settings from YAML, falling back to built-ins.

    Keys absent from the file keep their built-in values.

    Args:
        settings_path: YAML file path, or None for built-in settings.

    Returns:
        Fully validated settings.

    Raises:
        MortalityDependencyError: If PyYAML is unavailable.
        MortalitySettingsError: If the file is invalid or schema checks fail.
    """
    settings = default_run_settings()
    if settings_path is None:
        return settings
    payload = _load_yaml_payload(settings_path)
    root_mapping = _expect_mapping(payload, "settings root")
    _validate_root_keys(root_mapping)
    return _apply_overrides(settings, root_mapping)


def parse_color(value: object, context: str) -> RGBA:
    """Parse a color name, ``#rrggbb`` string, or channel list.

    Channel lists may use 0-255 integers or 0-1 floats.

    Raises:
        MortalitySettingsError: If the value is not a color.
    """
    if isinstance(value, Sequence) and not isinstance(value, str):
        value = _normalize_channels(value, context)
    try:
        red, green, blue, alpha = to_rgba(cast(str, value))
    except ValueError as error:
        raise MortalitySettingsError(
            f"Invalid {context}: '{value}' is not a color. "
            "Use a name, '#rrggbb', or [r, g, b]."
        ) from error
    return RGBA(red=red, green=green, blue=blue, alpha=alpha)


def _normalize_channels(channels: Sequence[object], context: str) -> tuple[float, ...]:
    if len(channels) not in (3, 4) or not all(
        isinstance(channel, (int, float)) for channel in channels
    ):
        raise MortalitySettingsError(
            f"Invalid {context}: expected 3 or 4 numeric channels, got {list(channels)}."
        )
    numbers = [float(cast(float, channel)) for channel in channels]
    if any(number > 1.0 for number in numbers[:3]):
        numbers[:3] = [number / 255.0 for number in numbers[:3]]
    return tuple(numbers)


def _load_yaml_payload(settings_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise MortalityDependencyError(
            "YAML settings support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    settings_file = Path(settings_path).expanduser().resolve()
    if not settings_file.exists():
        raise MortalitySettingsError(
            f"Settings file does not exist at {settings_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(settings_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise MortalitySettingsError(
            f"Failed to read settings at {settings_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise MortalitySettingsError(
            f"Failed to parse YAML settings at {settings_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    return payload


def _apply_overrides(settings: RunSettings, root_mapping: Mapping[object, object]) -> RunSettings:
    if "year_colors" in root_mapping:
        settings = replace(settings, year_colors=_parse_year_colors(root_mapping["year_colors"]))
    if "incomplete_color" in root_mapping:
        settings = replace(
            settings,
            incomplete_color=parse_color(root_mapping["incomplete_color"], "incomplete_color"),
        )
    if "gradient_colors" in root_mapping:
        start, end = _parse_gradient_colors(root_mapping["gradient_colors"])
        settings = replace(settings, gradient_start=start, gradient_end=end)
    if "region_aliases" in root_mapping:
        settings = replace(
            settings, region_aliases=_parse_region_aliases(root_mapping["region_aliases"])
        )
    if "excluded_region" in root_mapping:
        settings = replace(
            settings,
            excluded_region=_optional_string(root_mapping["excluded_region"], "excluded_region"),
        )
    if "ring_steps" in root_mapping:
        settings = replace(settings, ring_steps=_parse_ring_steps(root_mapping["ring_steps"]))
    if "fallback_ring_step" in root_mapping:
        settings = replace(
            settings,
            fallback_ring_step=_positive_int(root_mapping["fallback_ring_step"], "fallback_ring_step"),
        )
    if "radius_transform" in root_mapping:
        settings = replace(
            settings,
            radius_transform=_choice(
                root_mapping["radius_transform"], "radius_transform", SUPPORTED_RADIUS_TRANSFORMS
            ),
        )
    if "color_mode" in root_mapping:
        settings = replace(
            settings,
            color_mode=_choice(root_mapping["color_mode"], "color_mode", SUPPORTED_COLOR_MODES),
        )
    if "trim_window" in root_mapping:
        settings = replace(
            settings, trim_window=_positive_int(root_mapping["trim_window"], "trim_window")
        )
    if "outcome" in root_mapping:
        settings = replace(settings, outcome=_optional_string(root_mapping["outcome"], "outcome"))
    return settings


def _parse_year_colors(value: object) -> dict[int, RGBA]:
    mapping = _expect_mapping(value, "year_colors")
    colors: dict[int, RGBA] = {}
    for raw_year, raw_color in mapping.items():
        try:
            year = int(cast(str, raw_year))
        except ValueError as error:
            raise MortalitySettingsError(
                f"Invalid year_colors key '{raw_year}': expected a calendar year."
            ) from error
        colors[year] = parse_color(raw_color, f"year_colors[{year}]")
    return colors


def _parse_gradient_colors(value: object) -> tuple[RGBA, RGBA]:
    rows = _expect_sequence(value, "gradient_colors")
    if len(rows) != 2:
        raise MortalitySettingsError(
            f"Invalid gradient_colors: expected [start, end], got {len(rows)} colors."
        )
    return parse_color(rows[0], "gradient start"), parse_color(rows[1], "gradient end")


def _parse_region_aliases(value: object) -> dict[str, tuple[str, ...]]:
    mapping = _expect_mapping(value, "region_aliases")
    aliases: dict[str, tuple[str, ...]] = {}
    for composite, raw_members in mapping.items():
        members = _expect_sequence(raw_members, f"region_aliases[{composite}]")
        if len(members) < 2 or not all(isinstance(member, str) for member in members):
            raise MortalitySettingsError(
                f"Invalid region_aliases[{composite}]: expected at least two region names."
            )
        aliases[str(composite)] = tuple(cast(Sequence[str], members))
    return aliases


def _parse_ring_steps(value: object) -> tuple[tuple[int, int], ...]:
    rows = _expect_sequence(value, "ring_steps")
    steps: list[tuple[int, int]] = []
    for index, row in enumerate(rows):
        pair = _expect_sequence(row, f"ring_steps #{index + 1}")
        if len(pair) != 2:
            raise MortalitySettingsError(
                f"Invalid ring_steps #{index + 1}: expected [threshold, step]."
            )
        threshold = _non_negative_int(pair[0], f"ring_steps #{index + 1} threshold")
        step = _positive_int(pair[1], f"ring_steps #{index + 1} step")
        steps.append((threshold, step))
    thresholds = [threshold for threshold, _ in steps]
    if thresholds != sorted(thresholds, reverse=True):
        raise MortalitySettingsError(
            "Invalid ring_steps: thresholds must be listed in descending order."
        )
    return tuple(steps)


def _expect_mapping(value: object, context: str) -> Mapping[object, object]:
    if isinstance(value, Mapping):
        return value
    raise MortalitySettingsError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise MortalitySettingsError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _optional_string(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        normalized_value = value.strip()
        return normalized_value if normalized_value else None
    raise MortalitySettingsError(f"Settings field '{field_name}' must be a string when provided.")


def _positive_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise MortalitySettingsError(
            f"Settings field '{field_name}' must be a positive integer, got {value!r}."
        )
    return value


def _non_negative_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MortalitySettingsError(
            f"Settings field '{field_name}' must be a non-negative integer, got {value!r}."
        )
    return value


def _choice(value: object, field_name: str, choices: tuple[str, ...]) -> str:
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()
    raise MortalitySettingsError(
        f"Unsupported {field_name} {value!r}. Choose one of: {', '.join(choices)}."
    )


def _validate_root_keys(root_mapping: Mapping[object, object]) -> None:
    unknown_keys = sorted(str(key) for key in set(root_mapping) - _ALLOWED_KEYS)
    if unknown_keys:
        raise MortalitySettingsError(
            f"Settings contain unknown fields: {', '.join(unknown_keys)}."
        )
