"""Exception hierarchy for the cross-section spline list.

Only programmer errors raise. Cache misses, absent inputs, and I/O or format
failures on save/load are reported through logs and return values instead.
"""

from __future__ import annotations


class SplineListError(Exception):
    """Base class for spline list errors."""


class InvalidEnergyRangeError(SplineListError, ValueError):
    """Raised when a spline is requested over an energy range with e_min >= e_max."""

    def __init__(self, e_min: float, e_max: float) -> None:
        self.e_min = e_min
        self.e_max = e_max
        super().__init__(f"Invalid spline energy range: e_min={e_min!r} GeV must be < e_max={e_max!r} GeV")


class KnotPlanError(SplineListError, ValueError):
    """Raised when a knot layout cannot be planned for the requested inputs."""


class SplineBuildError(SplineListError):
    """Raised when the cross-section integrator returns an unusable value."""


class ConfigError(SplineListError):
    """Raised when a spline list configuration file cannot be read."""
