"""Knot-based interpolating spline.

A Spline is built once from (x, y) knots and is immutable afterwards: the
knot arrays are copied and flagged read-only, so a spline handed out by the
spline list is a read-only view of the cached data.

Evaluation contract:
- Values outside [x_min, x_max] evaluate to 0.
- Within range, interpolation is linear in the configured axes
  (see InterpolationMode).
- Negative interpolated values are clamped to 0 unless the spline was built
  with ``y_can_be_negative=True`` (cross sections are non-negative).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

FloatArray = NDArray[np.float64]

MIN_KNOTS = 2


class InterpolationMode(Enum):
    """Axes in which the spline interpolates linearly."""

    LINEAR = "linear"  # y(x)
    LOG_X = "log_x"  # y(log10 x)
    LOG_LOG = "log_log"  # log10 y(log10 x), linear where y <= 0


def _as_knot_array(values: ArrayLike, name: str) -> FloatArray:
    arr = np.array(values, dtype=np.float64, copy=True)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a 1D sequence")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must contain only finite values")
    arr.setflags(write=False)
    return arr


class Spline:
    """Interpolating spline over strictly increasing knots."""

    __slots__ = ("_x", "_y", "_mode", "_y_can_be_negative")

    def __init__(
        self,
        x: ArrayLike,
        y: ArrayLike,
        *,
        mode: InterpolationMode = InterpolationMode.LINEAR,
        y_can_be_negative: bool = False,
    ) -> None:
        self._x = _as_knot_array(x, "x")
        self._y = _as_knot_array(y, "y")
        if len(self._x) != len(self._y):
            raise ValueError(f"x and y must have equal length (got {len(self._x)} and {len(self._y)})")
        if len(self._x) < MIN_KNOTS:
            raise ValueError(f"Spline requires at least {MIN_KNOTS} knots")
        if not np.all(np.diff(self._x) > 0):
            raise ValueError("x must be strictly increasing")
        if mode is not InterpolationMode.LINEAR and self._x[0] <= 0:
            raise ValueError(f"{mode.value} interpolation requires positive x")
        self._mode = mode
        self._y_can_be_negative = y_can_be_negative

    @classmethod
    def from_knots(cls, knots: Sequence[tuple[float, float]], **kwargs: object) -> Spline:
        """Build a spline from a sequence of (x, y) pairs."""
        if not knots:
            raise ValueError(f"Spline requires at least {MIN_KNOTS} knots")
        x, y = zip(*knots)
        return cls(x, y, **kwargs)  # type: ignore[arg-type]

    @property
    def x(self) -> FloatArray:
        return self._x

    @property
    def y(self) -> FloatArray:
        return self._y

    @property
    def n_knots(self) -> int:
        return len(self._x)

    @property
    def x_min(self) -> float:
        return float(self._x[0])

    @property
    def x_max(self) -> float:
        return float(self._x[-1])

    @property
    def mode(self) -> InterpolationMode:
        return self._mode

    @property
    def y_can_be_negative(self) -> bool:
        return self._y_can_be_negative

    def knots(self) -> Iterator[tuple[float, float]]:
        """Iterate over (x, y) knot pairs as Python floats."""
        for xi, yi in zip(self._x, self._y):
            yield float(xi), float(yi)

    def is_in_range(self, x: float) -> bool:
        return self.x_min <= x <= self.x_max

    def evaluate(self, x: float | ArrayLike) -> float | FloatArray:
        """Evaluate the spline at x (scalar or array).

        Returns a float for scalar input and an array otherwise.
        """
        scalar = np.ndim(x) == 0
        xs = np.atleast_1d(np.asarray(x, dtype=np.float64))
        result = np.zeros_like(xs)
        inside = (xs >= self._x[0]) & (xs <= self._x[-1])
        if np.any(inside):
            result[inside] = self._interpolate(xs[inside])
        if not self._y_can_be_negative:
            np.maximum(result, 0.0, out=result)
        if scalar:
            return float(result[0])
        return result

    __call__ = evaluate

    def _interpolate(self, xs: FloatArray) -> FloatArray:
        if self._mode is InterpolationMode.LINEAR:
            return np.interp(xs, self._x, self._y)
        log_x = np.log10(self._x)
        log_xs = np.log10(xs)
        if self._mode is InterpolationMode.LOG_X:
            return np.interp(log_xs, log_x, self._y)
        # LOG_LOG: segments with non-positive end points fall back to LOG_X.
        linear = np.interp(log_xs, log_x, self._y)
        positive = self._y > 0
        if not np.any(positive):
            return linear
        log_y = np.log10(np.where(positive, self._y, 1.0))
        loglog = 10.0 ** np.interp(log_xs, log_x, log_y)
        idx = np.clip(np.searchsorted(self._x, xs, side="right") - 1, 0, len(self._x) - 2)
        segment_ok = positive[idx] & positive[idx + 1]
        return np.where(segment_ok, loglog, linear)

    def is_close(self, other: Spline, rtol: float = 1e-12, atol: float = 0.0) -> bool:
        """Return True if both splines have the same knots within tolerance."""
        if self.n_knots != other.n_knots:
            return False
        return bool(np.allclose(self._x, other.x, rtol=rtol, atol=atol)) and bool(
            np.allclose(self._y, other.y, rtol=rtol, atol=atol)
        )

    def __len__(self) -> int:
        return self.n_knots

    def __repr__(self) -> str:
        return (
            f"Spline(n_knots={self.n_knots}, x_min={self.x_min:g}, x_max={self.x_max:g}, "
            f"mode={self._mode.value})"
        )
