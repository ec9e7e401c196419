"""Stack-level benefit/risk scoring.

Each compound contributes a personalized *base* benefit and risk read off its
own curves.  Every unordered pair of compounds with an interaction record then
adds one delta per dimension it defines; deltas accumulate into per-dimension
totals that are kept apart from the base so the goal preset can weight them.
Pairs are visited in a canonical order and summed with :func:`math.fsum`, so
the result does not depend on the order of the stack.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from itertools import combinations
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

from ..engine.compounds import CompoundProfile
from ..engine.interactions import (
    BENEFIT_DIMENSIONS,
    DIMENSIONS,
    NEUTRAL_GOAL,
    RISK_DIMENSIONS,
    GoalPreset,
    InteractionTable,
)
from ..engine.profile import DEFAULT_PROFILE, UserProfile
from ..engine.regimen import StackEntry
from .advisories import (
    HEPATOTOXICITY_SYNERGY,
    KIDNEY_STRESS,
    NO_AROMATIZING_BASE,
    NOR19_STACKING,
    Advisory,
    dedupe,
)
from .curves import interpolate_curve
from .dosing import DoseNormalizer
from .interactions import PairDelta, PairInteractionModel
from .personalization import PersonalizationAdjuster

LOGGER = logging.getLogger(__name__)

BENEFIT_DIMENSION_BOUNDS = (-6.0, 6.0)
RISK_DIMENSION_BOUNDS = (0.0, 6.0)
HEPATIC_SYNERGY_THRESHOLD = 1.5
BP_STRESS_THRESHOLD = 3.0
DEFAULT_EVIDENCE_BLEND = 0.4


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return float(max(low, min(high, value)))


@dataclass(frozen=True)
class CompoundScore:
    """Personalized single-compound response at its curve-basis dose."""

    compound_id: str
    dose: float
    benefit: float
    benefit_ci: float
    risk: float
    risk_ci: float


@dataclass(frozen=True)
class EvaluationResult:
    goal: str
    compounds: Tuple[CompoundScore, ...] = ()
    pairs: Tuple[PairDelta, ...] = ()
    dimension_totals: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({dim: 0.0 for dim in DIMENSIONS})
    )
    base_benefit: float = 0.0
    base_risk: float = 0.0
    total_benefit: float = 0.0
    total_risk: float = 0.0
    weighted_benefit: float = 0.0
    weighted_risk: float = 0.0
    net_score: float = 0.0
    ratio: float = 0.0
    advisories: Tuple[Advisory, ...] = ()
    ignored: Tuple[str, ...] = ()

    def compound(self, compound_id: str) -> CompoundScore | None:
        for score in self.compounds:
            if score.compound_id == compound_id:
                return score
        return None


class StackAggregator:
    """Sum per-compound and pairwise contributions into weighted totals."""

    def __init__(
        self,
        normalizer: DoseNormalizer | None = None,
        adjuster: PersonalizationAdjuster | None = None,
    ) -> None:
        self.normalizer = normalizer or DoseNormalizer()
        self.adjuster = adjuster or PersonalizationAdjuster()
        self.pair_model = PairInteractionModel(self.adjuster)

    def _curve_doses(
        self,
        stack: Sequence[StackEntry],
        compounds: Mapping[str, CompoundProfile],
    ) -> Tuple[Dict[str, float], Tuple[str, ...]]:
        loads, ignored = self.normalizer.normalize_stack(stack, compounds)
        doses: Dict[str, float] = {}
        for load in loads:
            doses[load.compound_id] = doses.get(load.compound_id, 0.0) + load.curve_dose
        return doses, ignored

    def _score_compound(
        self,
        compound: CompoundProfile,
        dose: float,
        profile: UserProfile,
    ) -> Tuple[CompoundScore, Tuple[Advisory, ...]]:
        benefit = self.adjuster.adjust(
            compound, "benefit", dose, interpolate_curve(compound.benefit_curve, dose), profile
        )
        risk = self.adjuster.adjust(compound, "risk", dose, interpolate_curve(compound.risk_curve, dose), profile)
        score = CompoundScore(
            compound_id=compound.id,
            dose=dose,
            benefit=benefit.value,
            benefit_ci=benefit.ci,
            risk=risk.value,
            risk_ci=risk.ci,
        )
        return score, risk.advisories

    def evaluate(
        self,
        stack: Sequence[StackEntry],
        compounds: Mapping[str, CompoundProfile],
        pairs: InteractionTable,
        profile: UserProfile | None = None,
        goal: GoalPreset | None = None,
        sensitivities: Mapping[str, float] | None = None,
        evidence_blend: float = DEFAULT_EVIDENCE_BLEND,
    ) -> EvaluationResult:
        profile = (profile or DEFAULT_PROFILE).normalized()
        goal = goal or NEUTRAL_GOAL
        doses, ignored = self._curve_doses(stack, compounds)
        if not doses:
            return EvaluationResult(goal=goal.key, ignored=ignored)

        scores: List[CompoundScore] = []
        advisories: List[Advisory] = []
        for compound_id, dose in doses.items():
            score, notes = self._score_compound(compounds[compound_id], dose, profile)
            scores.append(score)
            advisories.extend(notes)

        deltas: List[PairDelta] = []
        contributions: Dict[str, List[float]] = {dim: [] for dim in DIMENSIONS}
        for first, second in combinations(sorted(doses), 2):
            pair = pairs.get(first, second)
            if pair is None:
                continue
            dose_a = doses.get(pair.compound_a, 0.0)
            dose_b = doses.get(pair.compound_b, 0.0)
            for dimension in pair.dimensions:
                result = self.pair_model.evaluate(
                    pair,
                    dimension,
                    dose_a,
                    dose_b,
                    compounds,
                    profile,
                    sensitivities=sensitivities,
                    evidence_blend=evidence_blend,
                )
                if result is None:
                    continue
                deltas.append(result)
                contribution = result.delta if result.polarity == "benefit" else abs(result.delta)
                contributions[dimension].append(contribution)

        totals: Dict[str, float] = {}
        for dimension in BENEFIT_DIMENSIONS:
            totals[dimension] = _clamp(math.fsum(contributions[dimension]), BENEFIT_DIMENSION_BOUNDS)
        for dimension in RISK_DIMENSIONS:
            totals[dimension] = _clamp(math.fsum(contributions[dimension]), RISK_DIMENSION_BOUNDS)

        base_benefit = math.fsum(score.benefit for score in scores)
        base_risk = math.fsum(score.risk for score in scores)
        total_benefit = base_benefit + math.fsum(totals[dim] for dim in BENEFIT_DIMENSIONS)
        total_risk = base_risk + math.fsum(totals[dim] for dim in RISK_DIMENSIONS)

        weighted_benefit = base_benefit * goal.benefit_scale() + math.fsum(
            totals[dim] * goal.benefit_weight(dim) for dim in BENEFIT_DIMENSIONS
        )
        weighted_risk = base_risk * goal.risk_scale() + math.fsum(
            totals[dim] * goal.risk_weight(dim) for dim in RISK_DIMENSIONS
        )
        ratio = total_benefit / total_risk if total_risk > 0.0 else total_benefit

        advisories.extend(self._stack_advisories([compounds[cid] for cid in sorted(doses)], totals))
        LOGGER.debug("Evaluated %d compounds with %d pair deltas", len(scores), len(deltas))
        return EvaluationResult(
            goal=goal.key,
            compounds=tuple(scores),
            pairs=tuple(deltas),
            dimension_totals=MappingProxyType(totals),
            base_benefit=base_benefit,
            base_risk=base_risk,
            total_benefit=total_benefit,
            total_risk=total_risk,
            weighted_benefit=weighted_benefit,
            weighted_risk=weighted_risk,
            net_score=weighted_benefit - weighted_risk,
            ratio=ratio,
            advisories=dedupe(advisories),
            ignored=ignored,
        )

    def _stack_advisories(
        self,
        present: Sequence[CompoundProfile],
        totals: Mapping[str, float],
    ) -> List[Advisory]:
        notes: List[Advisory] = []
        orals = [compound for compound in present if compound.is_oral]
        if len(orals) >= 2 or totals.get("hepatic", 0.0) > HEPATIC_SYNERGY_THRESHOLD:
            notes.append(
                Advisory(
                    code=HEPATOTOXICITY_SYNERGY,
                    level="high",
                    category="toxicity",
                    message=(
                        "Hepatotoxicity synergy: multiple oral compounds compete for the same hepatic "
                        "clearance, so liver stress compounds rather than adds."
                    ),
                )
            )

        renal_toxic = any(compound.has_flag("renal_toxic") for compound in present)
        heavy_bp = any(compound.has_flag("heavy_bp") for compound in present)
        if renal_toxic and (heavy_bp or totals.get("bp", 0.0) > BP_STRESS_THRESHOLD):
            notes.append(
                Advisory(
                    code=KIDNEY_STRESS,
                    level="critical",
                    category="toxicity",
                    message=(
                        "Kidney stress: a renal-toxic compound is combined with a heavy blood pressure "
                        "driver; filtration capacity may drop."
                    ),
                )
            )

        if sum(1 for compound in present if compound.has_flag("nor19")) >= 2:
            notes.append(
                Advisory(
                    code=NOR19_STACKING,
                    level="high",
                    category="synergy",
                    message=(
                        "19-nor stacking: combining several 19-nor compounds multiplies prolactin "
                        "and suppression risk."
                    ),
                )
            )

        suppressive = any(compound.has_flag("suppressive") for compound in present)
        aromatizing = any(compound.aromatization > 0.0 for compound in present)
        if suppressive and not aromatizing:
            notes.append(
                Advisory(
                    code=NO_AROMATIZING_BASE,
                    level="critical",
                    category="hormonal",
                    message=(
                        "No aromatizing base: suppressive compounds without a testosterone base "
                        "leave estradiol with no substrate."
                    ),
                )
            )
        return notes


__all__ = [
    "BENEFIT_DIMENSION_BOUNDS",
    "CompoundScore",
    "DEFAULT_EVIDENCE_BLEND",
    "EvaluationResult",
    "RISK_DIMENSION_BOUNDS",
    "StackAggregator",
]
