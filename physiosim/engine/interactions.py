"""Interaction dimensions, pair records and goal presets."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping, Optional, Tuple

BENEFIT_DIMENSIONS = ("anabolic", "vascularity", "strength", "joint")
RISK_DIMENSIONS = ("bp", "hematocrit", "bloat", "neuro", "estrogenic", "hepatic")
DIMENSIONS = BENEFIT_DIMENSIONS + RISK_DIMENSIONS

# Each dimension is scaled by one of the user's sensitivity axes.
SENSITIVITY_AXES: Dict[str, str] = {
    "bloat": "water",
    "estrogenic": "estrogen",
    "bp": "cardio",
    "hematocrit": "cardio",
    "hepatic": "cardio",
    "neuro": "neuro",
}
DEFAULT_SENSITIVITIES: Mapping[str, float] = MappingProxyType(
    {"estrogen": 1.0, "water": 1.0, "neuro": 1.0, "cardio": 1.0}
)

DEFAULT_EC50 = 300.0
DEFAULT_HILL_N = 2.0


def dimension_polarity(dimension: str) -> Optional[str]:
    """Return ``"benefit"``, ``"risk"`` or ``None`` for unknown dimensions."""

    if dimension in BENEFIT_DIMENSIONS:
        return "benefit"
    if dimension in RISK_DIMENSIONS:
        return "risk"
    return None


@dataclass(frozen=True)
class HillParameters:
    d50_a: float = DEFAULT_EC50
    d50_b: float = DEFAULT_EC50
    n: float = DEFAULT_HILL_N


@dataclass(frozen=True)
class EvidenceWeights:
    clinical: float = 0.5
    anecdote: float = 0.5

    def scalar(self, blend: float) -> float:
        """Blend clinical and anecdotal weight; ``blend`` is the anecdote share."""

        blend = float(max(0.0, min(1.0, blend)))
        total = self.clinical + self.anecdote
        denominator = total if total > 0.0 else 1.0
        return (self.clinical * (1.0 - blend) + self.anecdote * blend) / denominator


@dataclass(frozen=True)
class InteractionPair:
    """Static record describing how two compounds interact."""

    id: str
    compound_a: str
    compound_b: str
    synergy: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    penalties: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    dimension_weights: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: MappingProxyType({}))
    hill: HillParameters = field(default_factory=HillParameters)
    evidence: EvidenceWeights = field(default_factory=EvidenceWeights)
    dose_ranges: Mapping[str, Tuple[float, float]] = field(default_factory=lambda: MappingProxyType({}))
    default_doses: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    description: str = ""

    @property
    def key(self) -> FrozenSet[str]:
        return frozenset((self.compound_a, self.compound_b))

    @property
    def dimensions(self) -> Tuple[str, ...]:
        """Dimensions the pair participates in, benefit first, in canonical order."""

        present = set(self.synergy) | set(self.penalties)
        return tuple(dim for dim in DIMENSIONS if dim in present)

    def coefficient(self, dimension: str) -> float:
        polarity = dimension_polarity(dimension)
        if polarity == "benefit":
            return float(self.synergy.get(dimension, 0.0))
        if polarity == "risk":
            return float(self.penalties.get(dimension, 0.0))
        return 0.0

    def weight_for(self, compound: str, dimension: str) -> float:
        weights = self.dimension_weights.get(compound)
        if not weights:
            return 1.0
        return float(weights.get(dimension, 1.0))


def pair_key(first: str, second: str) -> FrozenSet[str]:
    return frozenset((first, second))


class InteractionTable:
    """Order-insensitive lookup over :class:`InteractionPair` records."""

    def __init__(self, pairs: Mapping[str, InteractionPair] | None = None) -> None:
        self._by_id: Dict[str, InteractionPair] = dict(pairs or {})
        self._by_key: Dict[FrozenSet[str], InteractionPair] = {
            pair.key: pair for pair in self._by_id.values()
        }

    def get(self, first: str, second: str) -> InteractionPair | None:
        if first == second:
            return None
        return self._by_key.get(pair_key(first, second))

    def by_id(self, pair_id: str) -> InteractionPair | None:
        return self._by_id.get(pair_id)

    def __iter__(self) -> Iterator[InteractionPair]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, pair_id: object) -> bool:
        return pair_id in self._by_id


@dataclass(frozen=True)
class GoalPreset:
    """Dimension weights expressing what a user optimises for."""

    key: str
    label: str = ""
    benefit: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    risk: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    def benefit_scale(self) -> float:
        total = sum(self.benefit.values())
        return total if self.benefit else 1.0

    def risk_scale(self) -> float:
        total = sum(self.risk.values())
        return total if self.risk else 1.0

    def benefit_weight(self, dimension: str) -> float:
        """Weight of one benefit dimension; an empty preset weighs every dimension 1."""

        if not self.benefit:
            return 1.0
        return float(self.benefit.get(dimension, 0.0))

    def risk_weight(self, dimension: str) -> float:
        if not self.risk:
            return 1.0
        return float(self.risk.get(dimension, 0.0))


NEUTRAL_GOAL = GoalPreset(key="neutral", label="Neutral")


__all__ = [
    "BENEFIT_DIMENSIONS",
    "DEFAULT_EC50",
    "DEFAULT_HILL_N",
    "DEFAULT_SENSITIVITIES",
    "DIMENSIONS",
    "EvidenceWeights",
    "GoalPreset",
    "HillParameters",
    "InteractionPair",
    "InteractionTable",
    "NEUTRAL_GOAL",
    "RISK_DIMENSIONS",
    "SENSITIVITY_AXES",
    "dimension_polarity",
    "pair_key",
]
