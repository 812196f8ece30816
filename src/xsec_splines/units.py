"""Natural units and energy parsing for cross-section splines.

Cross sections are stored in natural units (GeV^-2) and energies in GeV.
Conversion to a physical display unit (1e-38 cm^2) happens only when values
are printed or logged, so persisted spline files never depend on a display
choice.

This module also provides the annotated-type pattern used by the config
models: flexible input parsing ("500 MeV", "10GeV", 2.5) with a canonical
float value in GeV stored internally.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Annotated

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pydantic import BeforeValidator, WithJsonSchema

# Energy scale: GeV is the unit of the system.
GEV: float = 1.0
MEV: float = 1e-3 * GEV
KEV: float = 1e-6 * GEV
TEV: float = 1e3 * GEV

# hbar*c in GeV*fm
HBARC_GEV_FM: float = 0.1973269804

FERMI: float = 1.0 / HBARC_GEV_FM  # GeV^-1
CM: float = 1e13 * FERMI
CM2: float = CM * CM  # GeV^-2

# Multiply an internal cross section by this factor to obtain units of 1e-38 cm^2.
XSEC_DISPLAY_FACTOR: float = 1e38 / CM2
XSEC_DISPLAY_UNIT: str = "1E-38 cm^2"

_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_ENERGY_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z]+)\s*$")

_ENERGY_SCALES_GEV: dict[str, Decimal] = {
    "kev": Decimal("1e-6"),
    "mev": Decimal("1e-3"),
    "gev": Decimal(1),
    "tev": Decimal(1000),
}

_ENERGY_JSON_SCHEMA = {
    "anyOf": [
        {"type": "number"},
        {"type": "string", "pattern": r"^\s*[+-]?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\s*$"},
        {
            "type": "string",
            "pattern": r"^\s*[+-]?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\s*(keV|MeV|GeV|TeV|kev|mev|gev|tev)\s*$",
        },
    ],
    "title": "EnergyGeV",
    "description": "Energy in GeV (number or numeric string) or string with keV/MeV/GeV/TeV units.",
}


def _decimal_from_number(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value for EnergyGeV: {text!r}") from exc


def _finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("EnergyGeV must be finite.")
    return value


def parse_energy_gev(value: str | int | float) -> float:
    """Parse an energy value to GeV as float."""
    if isinstance(value, bool):
        raise ValueError("EnergyGeV does not accept boolean values.")
    if isinstance(value, (int, float)):
        return _finite(float(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("EnergyGeV requires a numeric value.")
        if _NUMBER_RE.match(text):
            return _finite(float(_decimal_from_number(text)))
        match = _ENERGY_RE.match(text)
        if not match:
            raise ValueError("EnergyGeV string must be formatted like '10GeV', '500 MeV', or '0.01'.")
        number_text, unit = match.groups()
        scale = _ENERGY_SCALES_GEV.get(unit.lower())
        if scale is None:
            raise ValueError(f"Unknown EnergyGeV unit: {unit!r}")
        return _finite(float(_decimal_from_number(number_text) * scale))
    raise ValueError(f"Unsupported EnergyGeV value: {value!r}")


EnergyGeV = Annotated[float, BeforeValidator(parse_energy_gev), WithJsonSchema(_ENERGY_JSON_SCHEMA)]


def to_display_xsec(xsec: float) -> float:
    """Convert an internal cross section (GeV^-2) to units of 1e-38 cm^2."""
    return xsec * XSEC_DISPLAY_FACTOR


def to_display_xsec_array(xsec: ArrayLike) -> NDArray[np.float64]:
    """Array variant of :func:`to_display_xsec`."""
    return np.asarray(xsec, dtype=np.float64) * XSEC_DISPLAY_FACTOR


def from_display_xsec(xsec_1e38_cm2: float) -> float:
    """Convert a cross section in 1e-38 cm^2 to internal units (GeV^-2)."""
    return xsec_1e38_cm2 / XSEC_DISPLAY_FACTOR
