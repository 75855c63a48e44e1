"""Observed-deaths exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class MortalityError(Exception):
    """Base exception for all observed-deaths failures."""


class MortalityConfigError(MortalityError):
    """Raised for invalid runtime configuration."""


class MortalitySettingsError(MortalityError):
    """Raised for invalid or unsupported run-settings files."""


class MortalityIngestError(MortalityError):
    """Raised for source fetch, parsing, and row mapping failures."""


class MortalityTransformError(MortalityError):
    """Raised for series transform failures."""


class MortalityAggregationError(MortalityError):
    """Raised when cross-region aggregation cannot proceed."""


class MortalityRenderError(MortalityError):
    """Raised for plot geometry and rendering failures."""


class MortalityStoreError(MortalityError):
    """Raised for report persistence failures."""


class MortalityDependencyError(MortalityError):
    """Raised when an optional runtime dependency is missing."""
