"""Interfaces consumed by the spline list from the physics layer.

The spline list does not compute cross sections itself. It drives a
cross-section algorithm over an interaction whose probe four-momentum it
sets before each integration. This module defines those collaborators:

- LorentzVector: four-momentum (px, py, pz, E) in GeV
- AlgorithmId: algorithm name plus configuration-variant label
- CrossSectionAlgorithm: protocol for anything exposing ``id`` and ``integral``
- InitialState / Interaction: the interaction channel, carrying a canonical
  string identity and a threshold energy

The concrete dataclasses are deliberately small: physics generators provide
their own richer interaction records, and only need to satisfy the
``InteractionLike`` protocol.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class LorentzVector:
    """Four-momentum in GeV."""

    px: float
    py: float
    pz: float
    energy: float

    @property
    def p(self) -> float:
        """Magnitude of the three-momentum."""
        return math.sqrt(self.px * self.px + self.py * self.py + self.pz * self.pz)

    @property
    def mass(self) -> float:
        """Invariant mass; negative m^2 from rounding is reported as 0."""
        m2 = self.energy * self.energy - self.p * self.p
        return math.sqrt(m2) if m2 > 0.0 else 0.0

    @classmethod
    def along_z(cls, energy: float, mass: float = 0.0) -> LorentzVector:
        """Build an on-shell four-momentum travelling along +z.

        The longitudinal momentum is solved from E^2 = p^2 + m^2 and clipped
        to zero when the energy is below the rest mass.
        """
        pz = energy
        if mass > 0.0:
            pz = math.sqrt(max(0.0, energy * energy - mass * mass))
        return cls(0.0, 0.0, pz, energy)


@dataclass(frozen=True, slots=True)
class AlgorithmId:
    """Identity of a cross-section algorithm: its name and configuration variant."""

    name: str
    config: str = "Default"

    @property
    def key(self) -> str:
        return f"{self.name}/{self.config}"

    def __str__(self) -> str:
        return self.key


@runtime_checkable
class InitialStateLike(Protocol):
    @property
    def probe_mass(self) -> float: ...

    def set_probe_p4(self, p4: LorentzVector) -> None: ...


@runtime_checkable
class InteractionLike(Protocol):
    """What the spline list needs from an interaction."""

    @property
    def initial_state(self) -> InitialStateLike: ...

    def as_string(self) -> str: ...

    def threshold(self) -> float: ...


@runtime_checkable
class CrossSectionAlgorithm(Protocol):
    """A cross-section model able to integrate at the current probe state."""

    @property
    def id(self) -> AlgorithmId: ...

    def integral(self, interaction: InteractionLike) -> float: ...


@dataclass(slots=True)
class InitialState:
    """Initial state: probe and target codes plus the mutable probe four-momentum.

    Attributes:
        probe_pdg: PDG code of the probe (e.g. 14 for nu_mu).
        target_pdg: PDG code of the target (10-digit nuclear code, e.g. 1000260560).
        probe_mass: Probe rest mass in GeV.
        hit_nucleon_pdg: Struck nucleon PDG code, 0 when not applicable.
    """

    probe_pdg: int
    target_pdg: int
    probe_mass: float = 0.0
    hit_nucleon_pdg: int = 0
    probe_p4: LorentzVector = field(default_factory=lambda: LorentzVector(0.0, 0.0, 0.0, 0.0))

    def __post_init__(self) -> None:
        if self.probe_mass < 0:
            raise ValueError("probe_mass must be non-negative")

    def set_probe_p4(self, p4: LorentzVector) -> None:
        self.probe_p4 = p4

    @property
    def probe_energy(self) -> float:
        return self.probe_p4.energy

    def as_string(self) -> str:
        text = f"nu:{self.probe_pdg};tgt:{self.target_pdg};"
        if self.hit_nucleon_pdg:
            text += f"N:{self.hit_nucleon_pdg};"
        return text


@dataclass(slots=True)
class Interaction:
    """An interaction channel with a canonical identity and a threshold energy.

    Attributes:
        initial_state: Probe/target initial state.
        process: Process label, e.g. ``"Weak[CC],QES"``.
        threshold_gev: Kinematic threshold in GeV; 0 for threshold-less channels.
        extra: Optional channel qualifier appended to the canonical string.
    """

    initial_state: InitialState
    process: str
    threshold_gev: float = 0.0
    extra: str = ""

    def __post_init__(self) -> None:
        if not self.process:
            raise ValueError("process must be non-empty")
        if self.threshold_gev < 0:
            raise ValueError("threshold_gev must be non-negative")

    def threshold(self) -> float:
        return self.threshold_gev

    def as_string(self) -> str:
        text = f"{self.initial_state.as_string()}proc:{self.process};"
        if self.extra:
            text += f"{self.extra};"
        return text

    def __str__(self) -> str:
        return self.as_string()
