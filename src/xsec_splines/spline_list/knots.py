"""Knot placement for cross-section splines.

Knots are distributed over [e_min, e_max] around the interaction threshold:

- When the threshold lies above e_min, 5 knots are spaced linearly in
  [e_min, Ethr) so the spline behaves in the sub-threshold region instead of
  extrapolating.
- The first of the remaining knots sits exactly on max(Ethr, e_min), where
  the cross section rises fastest.
- The rest are spaced linearly, or with equal steps in log10(E), up to e_max.

With a threshold at or below e_min no sub-threshold knots are placed and all
knots span [e_min, e_max].
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from xsec_splines.errors import InvalidEnergyRangeError, KnotPlanError
from xsec_splines.numerical import FloatArray

logger = logging.getLogger(__name__)

SUBTHRESHOLD_KNOTS = 5
MIN_REQUESTED_KNOTS = 3


@dataclass(frozen=True, slots=True)
class KnotPlanner:
    """Plans the energies at which a cross section is sampled.

    Attributes:
        use_log_energy: Space above-threshold knots in log10(E) instead of E.
        default_n_knots: Knot count used when a request asks for fewer than 3.
    """

    use_log_energy: bool
    default_n_knots: int

    def __post_init__(self) -> None:
        if self.default_n_knots < MIN_REQUESTED_KNOTS:
            raise ValueError(f"default_n_knots must be >= {MIN_REQUESTED_KNOTS}")

    def resolve_n_knots(self, n_knots: int) -> int:
        return n_knots if n_knots >= MIN_REQUESTED_KNOTS else self.default_n_knots

    def plan(self, threshold: float, n_knots: int, e_min: float, e_max: float) -> FloatArray:
        """Return exactly ``n_knots`` strictly increasing energies in GeV.

        Args:
            threshold: Interaction threshold energy in GeV.
            n_knots: Requested knot count (< 3 falls back to the default).
            e_min: Lower energy bound in GeV.
            e_max: Upper energy bound in GeV.

        Raises:
            InvalidEnergyRangeError: If e_min >= e_max.
            KnotPlanError: If fewer than 2 knots remain above threshold, or the
                threshold is not below e_max.
        """
        if not e_min < e_max:
            raise InvalidEnergyRangeError(e_min, e_max)
        nk = self.resolve_n_knots(n_knots)

        n_below = SUBTHRESHOLD_KNOTS if threshold > e_min else 0
        n_above = nk - n_below
        if n_above < 2:
            raise KnotPlanError(
                f"Cannot place {nk} knots: {n_below} are reserved below threshold and at least 2 "
                "are required at and above it"
            )
        e0 = max(threshold, e_min)
        if not e0 < e_max:
            raise KnotPlanError(f"Threshold {threshold!r} GeV is not below e_max={e_max!r} GeV")
        if self.use_log_energy and e0 <= 0:
            raise KnotPlanError("Logarithmic knot spacing requires a positive lower energy")

        energies = np.empty(nk, dtype=np.float64)
        if n_below:
            step_below = (threshold - e_min) / n_below
            energies[:n_below] = e_min + step_below * np.arange(n_below)

        idx = np.arange(n_above)
        if self.use_log_energy:
            log_e0 = math.log10(e0)
            step_above = (math.log10(e_max) - log_e0) / (n_above - 1)
            energies[n_below:] = np.power(10.0, log_e0 + idx * step_above)
        else:
            step_above = (e_max - e0) / (n_above - 1)
            energies[n_below:] = e0 + idx * step_above
        # Pin the anchor knots so rounding in the step arithmetic cannot move them.
        energies[n_below] = e0
        energies[-1] = e_max

        logger.debug(
            "Planned %d knots (%d below threshold %g GeV) in [%g, %g] GeV, log spacing %s",
            nk,
            n_below,
            threshold,
            e_min,
            e_max,
            "on" if self.use_log_energy else "off",
        )
        return energies
