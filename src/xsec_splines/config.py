"""Spline list configuration.

Process-wide defaults consulted by XSecSplineList.create whenever a call does
not override them. Follows the strict-model conventions used throughout the
package:
- ConfigDict(extra="forbid") so misspelled keys are rejected
- Annotated EnergyGeV type accepting "500 MeV" style strings
- JSON schema export for tooling

Example YAML::

    use_log_energy: true
    n_knots: 200
    e_min: 10 MeV
    e_max: 150 GeV
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import ConfigError
from .units import EnergyGeV

DEFAULT_USE_LOG_ENERGY = True
DEFAULT_N_KNOTS = 100
DEFAULT_E_MIN_GEV = 0.01
DEFAULT_E_MAX_GEV = 100.0
MIN_N_KNOTS = 10


class SplineListConfig(BaseModel):
    """Defaults applied to spline creation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    use_log_energy: bool = Field(DEFAULT_USE_LOG_ENERGY, description="Space knots logarithmically above threshold")
    n_knots: int = Field(DEFAULT_N_KNOTS, description=f"Default knot count (floored at {MIN_N_KNOTS})")
    e_min: EnergyGeV = Field(DEFAULT_E_MIN_GEV, gt=0, description="Default minimum energy (GeV)")
    e_max: EnergyGeV = Field(DEFAULT_E_MAX_GEV, gt=0, description="Default maximum energy (GeV)")

    @field_validator("n_knots")
    @classmethod
    def _floor_n_knots(cls, value: int) -> int:
        return max(value, MIN_N_KNOTS)

    @model_validator(mode="after")
    def _check_energy_range(self) -> SplineListConfig:
        if self.e_min >= self.e_max:
            raise ValueError(f"e_min ({self.e_min} GeV) must be < e_max ({self.e_max} GeV)")
        return self


def load_spline_list_config(data: dict[str, Any] | None) -> SplineListConfig:
    """Load and validate a SplineListConfig from a dictionary.

    Raises:
        pydantic.ValidationError: If data fails validation.
    """
    return SplineListConfig.model_validate(data or {})


def load_config_file(path: Path) -> SplineListConfig:
    """Load a SplineListConfig from a YAML (.yaml/.yml) or JSON file.

    Raises:
        ConfigError: If the file cannot be read or decoded.
        pydantic.ValidationError: If the content fails validation.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read spline list config {path}: {e}") from e
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot decode spline list config {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Spline list config {path} must contain a mapping")
    return load_spline_list_config(data)


def spline_list_config_schema() -> dict[str, Any]:
    """Return the JSON schema of SplineListConfig."""
    return SplineListConfig.model_json_schema()
