"""Drive a cross-section algorithm over planned energies and build a spline."""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import ArrayLike

from xsec_splines.errors import SplineBuildError
from xsec_splines.interaction import CrossSectionAlgorithm, InteractionLike, LorentzVector
from xsec_splines.numerical import Spline
from xsec_splines.units import XSEC_DISPLAY_UNIT, to_display_xsec

logger = logging.getLogger(__name__)


def compute_cross_sections(
    algorithm: CrossSectionAlgorithm,
    interaction: InteractionLike,
    energies: ArrayLike,
) -> np.ndarray:
    """Integrate the cross section at each probe energy.

    The probe four-momentum on ``interaction.initial_state`` is overwritten
    for every energy and left at the last one on return.

    Returns:
        Cross sections in natural units (GeV^-2), same length as ``energies``.

    Raises:
        SplineBuildError: If the algorithm returns a non-finite value.
    """
    e_arr = np.asarray(energies, dtype=np.float64)
    init_state = interaction.initial_state
    probe_mass = init_state.probe_mass

    xsec = np.empty_like(e_arr)
    for i, energy in enumerate(e_arr):
        init_state.set_probe_p4(LorentzVector.along_z(float(energy), probe_mass))
        value = float(algorithm.integral(interaction))
        if not math.isfinite(value):
            raise SplineBuildError(
                f"{algorithm.id} returned a non-finite cross section ({value!r}) at E = {energy:g} GeV "
                f"for {interaction.as_string()}"
            )
        xsec[i] = value
        logger.info("xsec(E = %g) = %g x %s", energy, to_display_xsec(value), XSEC_DISPLAY_UNIT)
    return xsec


def build_spline(
    algorithm: CrossSectionAlgorithm,
    interaction: InteractionLike,
    energies: ArrayLike,
) -> Spline:
    """Build a cross-section spline sampled at ``energies``.

    Knots are stored in natural units; display conversion happens elsewhere.
    """
    e_arr = np.asarray(energies, dtype=np.float64)
    xsec = compute_cross_sections(algorithm, interaction, e_arr)
    return Spline(e_arr, xsec)
