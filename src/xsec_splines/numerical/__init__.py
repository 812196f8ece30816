"""Numerical primitives used by the spline list."""

from .spline import MIN_KNOTS, FloatArray, InterpolationMode, Spline

__all__ = [
    "FloatArray",
    "InterpolationMode",
    "MIN_KNOTS",
    "Spline",
]
