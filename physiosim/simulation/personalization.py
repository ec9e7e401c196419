"""Profile-driven multiplicative adjustment of single-compound responses.

Every axis of :class:`~physiosim.engine.profile.UserProfile` contributes an
independent scalar.  Scalars compose by multiplication, so the effect of one
axis can be read off by holding the others at their defaults:

* receptor sensitivity scales benefit (hyper ×1.2, normal ×1.0, low ×0.8);
* enzyme activity scales risk of aromatizing compounds only;
* neuro sensitivity scales risk of neurotoxic compounds (≈2× at ``high``);
* a cutting diet removes a third of the benefit (less for anti-catabolic
  compounds) and bulking raises oral risk;
* training style favours the matching archetype, and crossfit raises
  the risk of cardio-impairing compounds and emits an advisory;
* lean mass dilutes risk per mg, body fat raises aromatizer risk;
* female profiles enter a steep virilization regime on both polarities;
* risk rises with age, and benefit falls with experience.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Mapping, Tuple

from ..engine.compounds import CompoundProfile
from ..engine.profile import REFERENCE_LEAN_MASS_KG, UserProfile
from .advisories import CARDIO_CAPACITY, Advisory
from .curves import CurveSample

RECEPTOR_SENSITIVITY_BENEFIT: Mapping[str, float] = {"low": 0.8, "normal": 1.0, "hyper": 1.2}
ENZYME_ACTIVITY_RISK: Mapping[str, float] = {"low": 0.8, "moderate": 1.0, "high": 1.3}
NEURO_SENSITIVITY_RISK: Mapping[str, float] = {"low": 0.7, "moderate": 1.0, "high": 2.0}
EXPERIENCE_BENEFIT: Mapping[str, float] = {
    "none": 1.15,
    "test_only": 1.05,
    "multi_compound": 0.95,
    "blast_cruise": 0.9,
}
TRAINING_BENEFIT: Mapping[str, Mapping[str, float]] = {
    "powerlifting": {"strength": 1.2, "hypertrophy": 0.8},
    "bodybuilding": {"*": 1.2},
    "crossfit": {"endurance": 1.2},
}

CUTTING_BENEFIT = 0.65
CUTTING_ANTI_CATABOLIC_BENEFIT = 0.85
BULKING_ORAL_RISK = 1.2
CROSSFIT_CARDIO_RISK = 1.25
FEMALE_BENEFIT = 8.0
FEMALE_RISK = 10.0

AGE_PIVOT = 30.0
AGE_RISK_SLOPE = 0.012
AGE_RISK_BOUNDS = (0.85, 1.6)
LEAN_MASS_DILUTION_BOUNDS = (0.75, 1.35)
SATURATION_CAPACITY_BOUNDS = (0.8, 1.25)
BODY_FAT_PIVOT = 15.0
BODY_FAT_AROMATASE_SLOPE = 0.015
BODY_FAT_AROMATASE_CAP = 0.4


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return float(max(low, min(high, value)))


def age_risk_multiplier(age: float) -> float:
    return _clamp(1.0 + AGE_RISK_SLOPE * (float(age) - AGE_PIVOT), AGE_RISK_BOUNDS)


def lean_mass_dilution(profile: UserProfile) -> float:
    """Risk-per-mg scalar; heavier, leaner bodies dilute a fixed dose."""

    return _clamp(math.sqrt(REFERENCE_LEAN_MASS_KG / profile.lean_mass_kg), LEAN_MASS_DILUTION_BOUNDS)


def saturation_capacity(profile: UserProfile | None) -> float:
    """Scale applied to the saturation thresholds for this body."""

    if profile is None:
        return 1.0
    return _clamp(profile.lean_mass_kg / REFERENCE_LEAN_MASS_KG, SATURATION_CAPACITY_BOUNDS)


def body_fat_aromatase(profile: UserProfile) -> float:
    excess = max(0.0, float(profile.body_fat_pct) - BODY_FAT_PIVOT)
    return 1.0 + min(BODY_FAT_AROMATASE_CAP, BODY_FAT_AROMATASE_SLOPE * excess)


@dataclass(frozen=True)
class PersonalizedResponse:
    value: float
    ci: float
    multiplier: float
    advisories: Tuple[Advisory, ...] = ()


class PersonalizationAdjuster:
    """Apply profile scalars to a single compound/polarity/dose response."""

    def benefit_multiplier(self, compound: CompoundProfile, profile: UserProfile) -> float:
        multiplier = RECEPTOR_SENSITIVITY_BENEFIT.get(profile.receptor_sensitivity, 1.0)

        if profile.diet_state == "cutting":
            multiplier *= CUTTING_ANTI_CATABOLIC_BENEFIT if compound.has_flag("anti_catabolic") else CUTTING_BENEFIT

        training = TRAINING_BENEFIT.get(profile.training_style, {})
        multiplier *= training.get(compound.archetype, training.get("*", 1.0))

        if profile.gender == "female":
            multiplier *= FEMALE_BENEFIT
        multiplier *= EXPERIENCE_BENEFIT.get(profile.experience, 1.0)
        return multiplier

    def risk_multiplier(self, compound: CompoundProfile, profile: UserProfile) -> Tuple[float, Tuple[Advisory, ...]]:
        multiplier = 1.0
        advisories: List[Advisory] = []

        if compound.aromatization > 0.0:
            multiplier *= ENZYME_ACTIVITY_RISK.get(profile.enzyme_activity, 1.0)
            multiplier *= body_fat_aromatase(profile)
        if compound.has_flag("neurotoxic"):
            multiplier *= NEURO_SENSITIVITY_RISK.get(profile.neuro_sensitivity, 1.0)
        if profile.diet_state == "bulking" and compound.is_oral:
            multiplier *= BULKING_ORAL_RISK
        if profile.training_style == "crossfit" and compound.has_flag("cardio_impairing"):
            multiplier *= CROSSFIT_CARDIO_RISK
            advisories.append(
                Advisory(
                    code=CARDIO_CAPACITY,
                    level="warning",
                    category="performance",
                    message=(
                        f"CARDIO CAPACITY WARNING: {compound.name} impairs aerobic capacity, "
                        "which conflicts with conditioning-heavy training."
                    ),
                )
            )

        multiplier *= lean_mass_dilution(profile)
        if profile.gender == "female":
            multiplier *= FEMALE_RISK
        multiplier *= age_risk_multiplier(profile.age)
        return multiplier, tuple(advisories)

    def adjust(
        self,
        compound: CompoundProfile,
        polarity: str,
        dose: float,
        base: CurveSample,
        profile: UserProfile,
    ) -> PersonalizedResponse:
        """Return the personalized value and CI for one response."""

        if dose <= 0.0 or base.is_zero:
            return PersonalizedResponse(value=0.0, ci=0.0, multiplier=1.0)
        advisories: Tuple[Advisory, ...] = ()
        if polarity == "benefit":
            multiplier = self.benefit_multiplier(compound, profile)
        else:
            multiplier, advisories = self.risk_multiplier(compound, profile)
        multiplier = max(0.0, multiplier)
        return PersonalizedResponse(
            value=max(0.0, base.value * multiplier),
            ci=max(0.0, base.ci * multiplier),
            multiplier=multiplier,
            advisories=advisories,
        )


__all__ = [
    "PersonalizationAdjuster",
    "PersonalizedResponse",
    "age_risk_multiplier",
    "body_fat_aromatase",
    "lean_mass_dilution",
    "saturation_capacity",
]
