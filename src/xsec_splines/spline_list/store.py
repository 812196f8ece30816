"""Cross-section spline list: the cache of computed cross-section splines.

The list memoizes expensive cross-section integrations as splines keyed by
(algorithm, interaction). It holds at most one spline per key; creating a
spline for an existing key replaces it. Keys loaded from a spline file are
tracked in an initial-set so that a later save can skip them.

A process-wide list is available through :func:`instance`, created lazily
with default settings. Library code should accept a list argument and only
fall back to the process-wide one at the application boundary; tests build
their own lists.

The list is not thread-safe. Concurrent create/load calls must be serialized
by the caller.

Usage:
    >>> splines = XSecSplineList()
    >>> if not splines.exists_for(alg, interaction):
    ...     splines.create(alg, interaction)
    >>> xsec = splines.get_for(alg, interaction).evaluate(3.0)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from xsec_splines.config import (
    DEFAULT_E_MAX_GEV,
    DEFAULT_E_MIN_GEV,
    DEFAULT_N_KNOTS,
    DEFAULT_USE_LOG_ENERGY,
    MIN_N_KNOTS,
    SplineListConfig,
)
from xsec_splines.errors import InvalidEnergyRangeError
from xsec_splines.interaction import CrossSectionAlgorithm, InteractionLike
from xsec_splines.numerical import Spline

from .builder import build_spline
from .keys import build_spline_key
from .knots import KnotPlanner

if TYPE_CHECKING:
    from .xml_codec import XmlParserStatus

logger = logging.getLogger(__name__)


class XSecSplineList:
    """Mapping from spline key to cross-section spline, plus creation defaults."""

    def __init__(
        self,
        use_log_energy: bool = DEFAULT_USE_LOG_ENERGY,
        n_knots: int = DEFAULT_N_KNOTS,
        e_min: float = DEFAULT_E_MIN_GEV,
        e_max: float = DEFAULT_E_MAX_GEV,
    ) -> None:
        self._splines: dict[str, Spline] = {}
        self._initial_keys: set[str] = set()
        self._use_log_energy = DEFAULT_USE_LOG_ENERGY
        self._n_knots = DEFAULT_N_KNOTS
        self._e_min = DEFAULT_E_MIN_GEV
        self._e_max = DEFAULT_E_MAX_GEV
        self.set_use_log_energy(use_log_energy)
        self.set_n_knots(n_knots)
        self.set_min_energy(e_min)
        self.set_max_energy(e_max)

    @classmethod
    def from_config(cls, config: SplineListConfig) -> XSecSplineList:
        return cls(
            use_log_energy=config.use_log_energy,
            n_knots=config.n_knots,
            e_min=config.e_min,
            e_max=config.e_max,
        )

    def configure(self, config: SplineListConfig) -> None:
        """Apply configured defaults. Stored splines are not affected."""
        self.set_use_log_energy(config.use_log_energy)
        self.set_n_knots(config.n_knots)
        self.set_min_energy(config.e_min)
        self.set_max_energy(config.e_max)

    def to_config(self) -> SplineListConfig:
        """Snapshot the current defaults.

        Raises:
            pydantic.ValidationError: If the defaults currently have e_min >= e_max.
        """
        return SplineListConfig(
            use_log_energy=self._use_log_energy,
            n_knots=self._n_knots,
            e_min=self._e_min,
            e_max=self._e_max,
        )

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    @property
    def use_log_energy(self) -> bool:
        return self._use_log_energy

    @property
    def n_knots(self) -> int:
        return self._n_knots

    @property
    def e_min(self) -> float:
        return self._e_min

    @property
    def e_max(self) -> float:
        return self._e_max

    def set_use_log_energy(self, on: bool) -> None:
        self._use_log_energy = bool(on)

    def set_n_knots(self, n_knots: int) -> None:
        """Set the default knot count; values below 10 are raised to 10."""
        self._n_knots = max(int(n_knots), MIN_N_KNOTS)

    def set_min_energy(self, energy: float) -> None:
        """Set the default minimum energy (GeV); non-positive values are ignored."""
        if energy > 0:
            self._e_min = float(energy)

    def set_max_energy(self, energy: float) -> None:
        """Set the default maximum energy (GeV); non-positive values are ignored."""
        if energy > 0:
            self._e_max = float(energy)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def build_key(
        self,
        algorithm: CrossSectionAlgorithm | None,
        interaction: InteractionLike | None,
    ) -> str:
        return build_spline_key(algorithm, interaction)

    def exists(self, key: str) -> bool:
        logger.debug("Checking for spline with key = %s", key)
        found = key in self._splines
        logger.debug("Spline found?....%s", "Yes" if found else "No")
        return found

    def exists_for(
        self,
        algorithm: CrossSectionAlgorithm | None,
        interaction: InteractionLike | None,
    ) -> bool:
        return self.exists(self.build_key(algorithm, interaction))

    def get(self, key: str) -> Spline | None:
        """Return the spline stored under ``key``, or None (with a warning) on a miss.

        The returned spline is read-only and stays valid until the key is
        replaced by create/load or the list is cleared.
        """
        if self.exists(key):
            return self._splines[key]
        logger.warning("Couldn't find spline for key = %s", key)
        return None

    def get_for(
        self,
        algorithm: CrossSectionAlgorithm | None,
        interaction: InteractionLike | None,
    ) -> Spline | None:
        return self.get(self.build_key(algorithm, interaction))

    def keys(self) -> list[str]:
        """Return all keys in lexicographic order."""
        return sorted(self._splines)

    def initial_keys(self) -> list[str]:
        """Return keys that were loaded from a spline file, in lexicographic order."""
        return sorted(self._initial_keys)

    def is_initial(self, key: str) -> bool:
        return key in self._initial_keys

    def items(self) -> Iterator[tuple[str, Spline]]:
        """Iterate over (key, spline) pairs in key order."""
        for key in self.keys():
            yield key, self._splines[key]

    def __len__(self) -> int:
        return len(self._splines)

    def __contains__(self, key: object) -> bool:
        return key in self._splines

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create(
        self,
        algorithm: CrossSectionAlgorithm | None,
        interaction: InteractionLike | None,
        n_knots: int = 0,
        e_min: float = -1.0,
        e_max: float = -1.0,
    ) -> Spline | None:
        """Compute a cross-section spline and store it, replacing any existing entry.

        Per-call overrides that are unset or unacceptable (``n_knots <= 2``,
        negative energies) fall back to the list defaults.

        Returns:
            The stored spline, or None if the algorithm or interaction is absent.

        Raises:
            InvalidEnergyRangeError: If the effective e_min is not below e_max.
            KnotPlanError: If the threshold leaves no room for above-threshold knots.
            SplineBuildError: If the algorithm returns a non-finite cross section.
        """
        key = self.build_key(algorithm, interaction)
        if algorithm is None or interaction is None:
            logger.warning("Not creating spline: algorithm or interaction is missing")
            return None

        logger.info("Creating cross section spline using the algorithm: %s", algorithm.id)

        if e_min < 0.0:
            e_min = self._e_min
        if e_max < 0.0:
            e_max = self._e_max
        if n_knots <= 2:
            n_knots = self._n_knots
        if not e_min < e_max:
            raise InvalidEnergyRangeError(e_min, e_max)

        threshold = interaction.threshold()
        logger.info("Energy threshold for current interaction = %g GeV", threshold)

        planner = KnotPlanner(use_log_energy=self._use_log_energy, default_n_knots=self._n_knots)
        energies = planner.plan(threshold, n_knots, e_min, e_max)
        spline = build_spline(algorithm, interaction, energies)

        if key in self._splines:
            logger.info("Replacing existing spline for key = %s", key)
        self._splines[key] = spline
        self._initial_keys.discard(key)
        return spline

    def insert(self, key: str, spline: Spline, *, initial: bool = False) -> None:
        """Store ``spline`` under ``key``, replacing any existing entry.

        Args:
            key: Spline key.
            spline: Spline to store. The list takes ownership.
            initial: Mark the key as loaded from a spline file.
        """
        if not key:
            raise ValueError("Spline key must be non-empty")
        self._splines[key] = spline
        if initial:
            self._initial_keys.add(key)
        else:
            self._initial_keys.discard(key)

    def clear(self) -> None:
        """Drop all splines and the initial-set."""
        self._splines.clear()
        self._initial_keys.clear()

    # ------------------------------------------------------------------
    # Persistence and diagnostics
    # ------------------------------------------------------------------

    def save_as_xml(self, path: str | Path, save_initial: bool = True) -> bool:
        """Write the list to an XML spline file. See xml_codec.save_as_xml."""
        from .xml_codec import save_as_xml

        return save_as_xml(self, path, save_initial=save_initial)

    def load_from_xml(self, path: str | Path, keep: bool = False) -> XmlParserStatus:
        """Load splines from an XML spline file. See xml_codec.load_from_xml."""
        from .xml_codec import load_from_xml

        return load_from_xml(self, path, keep=keep)

    def print(self, stream: TextIO | None = None) -> None:
        from .diagnostics import print_spline_list

        print_spline_list(self, stream)

    def __str__(self) -> str:
        from .diagnostics import format_spline_list

        return format_spline_list(self)

    def __repr__(self) -> str:
        return (
            f"XSecSplineList(n_splines={len(self)}, use_log_energy={self._use_log_energy}, "
            f"n_knots={self._n_knots}, e_min={self._e_min:g}, e_max={self._e_max:g})"
        )


_instance: XSecSplineList | None = None


def instance() -> XSecSplineList:
    """Return the process-wide spline list, creating it with defaults on first use."""
    global _instance
    if _instance is None:
        logger.debug("Creating process-wide cross-section spline list")
        _instance = XSecSplineList()
    return _instance


def reset_instance() -> None:
    """Forget the process-wide spline list; the next instance() call builds a new one."""
    global _instance
    _instance = None
