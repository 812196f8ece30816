"""xsec_splines: cached cross-section splines for event generation.

Computing a total cross section means integrating a differential model, which
is far too slow to do per event. This package memoizes those integrations as
splines over probe energy, keyed by (cross-section algorithm, interaction),
and persists them to XML so the cost is paid once across runs.

Public API
----------
- :class:`XSecSplineList` - the spline cache (``create``, ``get``, ``exists``, ...)
- :func:`instance` - the process-wide spline list
- :class:`Spline` - read-only knot spline with log/linear evaluation
- :class:`XmlParserStatus` - outcome of ``load_from_xml``
- :class:`SplineListConfig` / :func:`load_config_file` - creation defaults

Example
-------
>>> from xsec_splines import instance
>>> splines = instance()
>>> status = splines.load_from_xml("xsec_splines.xml")
>>> if not splines.exists_for(alg, interaction):
...     splines.create(alg, interaction)
>>> splines.save_as_xml("xsec_splines_new.xml", save_initial=False)
"""

from __future__ import annotations

from xsec_splines.config import SplineListConfig, load_config_file, load_spline_list_config
from xsec_splines.errors import (
    ConfigError,
    InvalidEnergyRangeError,
    KnotPlanError,
    SplineBuildError,
    SplineListError,
)
from xsec_splines.interaction import (
    AlgorithmId,
    CrossSectionAlgorithm,
    InitialState,
    Interaction,
    InteractionLike,
    LorentzVector,
)
from xsec_splines.numerical import InterpolationMode, Spline
from xsec_splines.spline_list import (
    KnotPlanner,
    XmlParserStatus,
    XSecSplineList,
    build_spline_key,
    instance,
    reset_instance,
)

__version__ = "0.1.0"

__all__ = [
    # Spline list
    "XSecSplineList",
    "XmlParserStatus",
    "KnotPlanner",
    "build_spline_key",
    "instance",
    "reset_instance",
    # Numerical
    "Spline",
    "InterpolationMode",
    # Collaborators
    "AlgorithmId",
    "CrossSectionAlgorithm",
    "InitialState",
    "Interaction",
    "InteractionLike",
    "LorentzVector",
    # Config
    "SplineListConfig",
    "load_config_file",
    "load_spline_list_config",
    # Errors
    "ConfigError",
    "InvalidEnergyRangeError",
    "KnotPlanError",
    "SplineBuildError",
    "SplineListError",
]
