"""Hill-shaped synergy and penalty deltas between two compounds."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Tuple

from ..engine.compounds import CompoundProfile
from ..engine.interactions import DEFAULT_SENSITIVITIES, SENSITIVITY_AXES, InteractionPair, dimension_polarity
from ..engine.profile import UserProfile
from .advisories import Advisory
from .curves import interpolate_curve
from .personalization import PersonalizationAdjuster

DIMENSION_TOTAL_BOUNDS = (0.0, 6.0)


def hill(dose: float, ec50: float, n: float) -> float:
    """Hill response dⁿ/(dⁿ+EC50ⁿ) in [0, 1]."""

    if dose <= 0.0 or math.isnan(dose):
        return 0.0
    if ec50 <= 0.0:
        return 1.0
    # logistic form of the ratio keeps extreme doses from overflowing
    exponent = n * (math.log(ec50) - math.log(dose))
    if exponent > 700.0:
        return 0.0
    return 1.0 / (1.0 + math.exp(exponent))


def _clamp_total(value: float) -> float:
    low, high = DIMENSION_TOTAL_BOUNDS
    return float(max(low, min(high, value)))


@dataclass(frozen=True)
class PairDelta:
    """Contribution of one interaction pair to one dimension."""

    pair_id: str
    dimension: str
    polarity: str
    naive: float
    delta: float
    total: float
    dose_shape: float = 0.0


class PairInteractionModel:
    """Evaluate one pair on one named dimension.

    ``dose_a`` and ``dose_b`` follow the pair record's own orientation
    (``compound_a`` then ``compound_b``) and are expressed on each compound's
    curve basis.
    """

    def __init__(self, adjuster: PersonalizationAdjuster | None = None) -> None:
        self.adjuster = adjuster or PersonalizationAdjuster()

    def _naive_component(
        self,
        compound: CompoundProfile | None,
        polarity: str,
        dose: float,
        weight: float,
        profile: UserProfile,
    ) -> Tuple[float, Tuple[Advisory, ...]]:
        if compound is None:
            return 0.0, ()
        curve = compound.benefit_curve if polarity == "benefit" else compound.risk_curve
        response = self.adjuster.adjust(compound, polarity, dose, interpolate_curve(curve, dose), profile)
        return response.value * weight, response.advisories

    def evaluate(
        self,
        pair: InteractionPair,
        dimension: str,
        dose_a: float,
        dose_b: float,
        compounds: Mapping[str, CompoundProfile],
        profile: UserProfile,
        sensitivities: Mapping[str, float] | None = None,
        evidence_blend: float = 0.4,
    ) -> PairDelta | None:
        """Return naive, delta and clamped total for ``dimension``.

        Unknown dimensions yield ``None``; a pair without a coefficient for a
        known dimension contributes a zero delta.
        """

        polarity = dimension_polarity(dimension)
        if polarity is None:
            return None

        naive_a, _ = self._naive_component(
            compounds.get(pair.compound_a), polarity, dose_a, pair.weight_for(pair.compound_a, dimension), profile
        )
        naive_b, _ = self._naive_component(
            compounds.get(pair.compound_b), polarity, dose_b, pair.weight_for(pair.compound_b, dimension), profile
        )
        naive = naive_a + naive_b

        dose_shape = hill(dose_a, pair.hill.d50_a, pair.hill.n) * hill(dose_b, pair.hill.d50_b, pair.hill.n)
        coefficient = pair.coefficient(dimension)
        axis = SENSITIVITY_AXES.get(dimension)
        sensitivity = max(0.0, float((sensitivities or DEFAULT_SENSITIVITIES).get(axis, 1.0))) if axis else 1.0
        evidence = pair.evidence.scalar(evidence_blend)
        delta = coefficient * dose_shape * sensitivity * evidence

        if polarity == "benefit":
            total = _clamp_total(naive + delta)
        else:
            total = _clamp_total(naive + abs(delta))
        return PairDelta(
            pair_id=pair.id,
            dimension=dimension,
            polarity=polarity,
            naive=naive,
            delta=delta,
            total=total,
            dose_shape=dose_shape,
        )


__all__ = ["DIMENSION_TOTAL_BOUNDS", "PairDelta", "PairInteractionModel", "hill"]
