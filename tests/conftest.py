"""Pytest configuration and shared fixtures for test suite.

This module provides:
- Deterministic test environment setup
- A fake cross-section algorithm and interaction factories
- Isolation of the process-wide spline list between tests
"""
from __future__ import annotations

import os
from collections.abc import Callable, Iterator

import pytest

from xsec_splines.interaction import AlgorithmId, InitialState, Interaction, InteractionLike
from xsec_splines.spline_list import XSecSplineList, reset_instance

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MUON_MASS_GEV = 0.105658


# ---------------------------------------------------------------------------
# Environment Setup
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest environment for determinism."""
    deterministic_env = {
        "LC_ALL": "C",
        "LANG": "C",
        "TZ": "UTC",
        "PYTHONHASHSEED": "0",
    }
    for key, value in deterministic_env.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def _isolated_process_spline_list() -> Iterator[None]:
    """Make every test start and end without a process-wide spline list."""
    reset_instance()
    yield
    reset_instance()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeXSecAlgorithm:
    """Cross-section algorithm with a closed-form cross section.

    sigma(E) = scale * (E - Ethr) / (1 + E) above threshold, 0 below. Every
    call records the probe four-momentum it was evaluated at.
    """

    def __init__(self, name: str = "genie::FakeQELModel", config: str = "Default", scale: float = 1e-11) -> None:
        self._id = AlgorithmId(name, config)
        self.scale = scale
        self.calls: list[tuple[float, float]] = []

    @property
    def id(self) -> AlgorithmId:
        return self._id

    def integral(self, interaction: InteractionLike) -> float:
        p4 = interaction.initial_state.probe_p4  # type: ignore[attr-defined]
        self.calls.append((p4.energy, p4.pz))
        energy = p4.energy
        threshold = interaction.threshold()
        if energy <= threshold:
            return 0.0
        return self.scale * (energy - threshold) / (1.0 + energy)

    def expected(self, energy: float, threshold: float) -> float:
        if energy <= threshold:
            return 0.0
        return self.scale * (energy - threshold) / (1.0 + energy)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_algorithm() -> FakeXSecAlgorithm:
    return FakeXSecAlgorithm()


@pytest.fixture
def make_algorithm() -> Callable[..., FakeXSecAlgorithm]:
    """Factory for fake algorithms with a chosen name, config and scale."""
    return FakeXSecAlgorithm


@pytest.fixture
def make_interaction() -> Callable[..., Interaction]:
    """Factory for interactions.

    Usage:
        def test_something(make_interaction):
            interaction = make_interaction(threshold=1.0, process="Weak[CC],RES")
    """

    def _make(
        threshold: float = 0.0,
        process: str = "Weak[CC],QES",
        probe_pdg: int = 14,
        target_pdg: int = 1000260560,
        probe_mass: float = 0.0,
        hit_nucleon_pdg: int = 2112,
    ) -> Interaction:
        state = InitialState(
            probe_pdg=probe_pdg,
            target_pdg=target_pdg,
            probe_mass=probe_mass,
            hit_nucleon_pdg=hit_nucleon_pdg,
        )
        return Interaction(initial_state=state, process=process, threshold_gev=threshold)

    return _make


@pytest.fixture
def spline_list() -> XSecSplineList:
    """A fresh spline list with default settings."""
    return XSecSplineList()


@pytest.fixture
def populated_spline_list(
    fake_algorithm: FakeXSecAlgorithm,
    make_interaction: Callable[..., Interaction],
) -> XSecSplineList:
    """A spline list holding three small splines (20 knots, 0.01-10 GeV)."""
    splines = XSecSplineList(n_knots=20, e_min=0.01, e_max=10.0)
    splines.create(fake_algorithm, make_interaction(threshold=0.0, process="Weak[NC],QES"))
    splines.create(fake_algorithm, make_interaction(threshold=1.0, process="Weak[CC],RES"))
    muon_qe = make_interaction(threshold=0.2, process="EM,QES", probe_pdg=13, probe_mass=MUON_MASS_GEV)
    splines.create(fake_algorithm, muon_qe)
    return splines
