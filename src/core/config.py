"""Runtime configuration model for observed-deaths.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_TTL_HOURS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SOURCE_URL,
    DEFAULT_WORKER_COUNT,
)
from core.errors import MortalityConfigError


@dataclass(frozen=True)
class MortalityConfig:
    """Validated runtime configuration.

    Attributes:
        cache_dir: Directory holding downloaded source files.
        output_dir: Directory receiving images and reports.
        source_url: Default mortality export location.
        cache_ttl_hours: Age after which a cached download is expired.
        worker_count: Size of the per-region worker pool.
    """

    cache_dir: Path
    output_dir: Path
    source_url: str
    cache_ttl_hours: int
    worker_count: int

    @classmethod
    def from_env(cls) -> "MortalityConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            MortalityConfigError: If environment values are invalid.
        """
        cache_dir_value = os.getenv("MORTALITY_CACHE_DIR", str(DEFAULT_CACHE_DIR))
        output_dir_value = os.getenv("MORTALITY_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR))
        source_url = os.getenv("MORTALITY_SOURCE_URL", DEFAULT_SOURCE_URL)
        cache_ttl_hours = _parse_positive_int(
            "MORTALITY_CACHE_TTL_HOURS",
            os.getenv("MORTALITY_CACHE_TTL_HOURS", str(DEFAULT_CACHE_TTL_HOURS)),
        )
        worker_count = _parse_positive_int(
            "MORTALITY_WORKERS",
            os.getenv("MORTALITY_WORKERS", str(DEFAULT_WORKER_COUNT)),
        )
        return cls(
            cache_dir=Path(cache_dir_value).expanduser().resolve(),
            output_dir=Path(output_dir_value).expanduser().resolve(),
            source_url=source_url,
            cache_ttl_hours=cache_ttl_hours,
            worker_count=worker_count,
        )


def _parse_positive_int(variable_name: str, raw_value: str) -> int:
    """Parse a positive integer environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        MortalityConfigError: If value is not a positive integer.
    """
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise MortalityConfigError(
            f"Invalid {variable_name} value: "
            f"expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a numeric value."
        ) from error
    if parsed_value <= 0:
        raise MortalityConfigError(
            f"Invalid {variable_name} value: expected a positive integer, got {parsed_value}."
        )
    return parsed_value
