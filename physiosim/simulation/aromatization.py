"""Michaelis-Menten conversion of aromatizable substrate into estradiol."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..engine.compounds import CompoundProfile
from ..engine.profile import UserProfile
from .dosing import NormalizedCompoundLoad
from .personalization import body_fat_aromatase

VMAX = 180.0
KM_MG = 600.0
ENZYME_VMAX: Mapping[str, float] = {"low": 0.75, "moderate": 1.0, "high": 1.3}
ENZYME_KM: Mapping[str, float] = {"low": 1.15, "moderate": 1.0, "high": 0.85}

AI_HALF_INHIBITION_MG = 3.0
AI_MAX_INHIBITION = 0.95
METHYL_ESTROGEN_FACTOR = 0.05

ESTRADIOL_FLOOR = 8.0
ESTRADIOL_NATURAL = 17.0
SUPPRESSION_DECAY_MG = 400.0
ESTRADIOL_BOUNDS = (5.0, 350.0)


@dataclass(frozen=True)
class AromatizationResult:
    estradiol: float
    baseline: float
    substrate_mg: float
    conversion: float
    metabolite: float
    vmax: float
    km: float
    inhibition: float


class AromatizationKinetics:
    """``conversion = Vmax·S/(Km+S)`` over free aromatizable substrate."""

    def __init__(self, vmax: float = VMAX, km: float = KM_MG) -> None:
        self.vmax = vmax
        self.km = km

    def inhibition(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
    ) -> float:
        inhibitor_load = math.fsum(
            load.saturation_mg * compounds[load.compound_id].ai_potency
            for load in loads
            if load.compound_id in compounds and compounds[load.compound_id].is_aromatase_inhibitor
        )
        if inhibitor_load <= 0.0:
            return 0.0
        return inhibitor_load / (inhibitor_load + AI_HALF_INHIBITION_MG) * AI_MAX_INHIBITION

    def baseline(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
    ) -> float:
        """Endogenous estradiol, shrinking toward a floor under suppression."""

        suppressive = math.fsum(
            load.saturation_mg
            for load in loads
            if load.compound_id in compounds and compounds[load.compound_id].has_flag("suppressive")
        )
        return ESTRADIOL_FLOOR + ESTRADIOL_NATURAL * math.exp(-suppressive / SUPPRESSION_DECAY_MG)

    def evaluate(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        profile: UserProfile,
        free_fractions: Mapping[str, float] | None = None,
    ) -> AromatizationResult:
        """Estimate estradiol (pg/mL); ``free_fractions`` defaults to fully free."""

        fractions = free_fractions or {}
        substrate = 0.0
        metabolite = 0.0
        for load in loads:
            compound = compounds.get(load.compound_id)
            if compound is None:
                continue
            free_mg = load.saturation_mg * float(fractions.get(load.key, 1.0))
            substrate += free_mg * compound.aromatization
            metabolite += free_mg * float(compound.metabolic.get("methyl_estrogen", 0.0)) * METHYL_ESTROGEN_FACTOR

        inhibition = self.inhibition(loads, compounds)
        vmax = (
            self.vmax
            * ENZYME_VMAX.get(profile.enzyme_activity, 1.0)
            * body_fat_aromatase(profile)
            * (1.0 - inhibition)
        )
        km = self.km * ENZYME_KM.get(profile.enzyme_activity, 1.0)
        conversion = vmax * substrate / (km + substrate) if substrate > 0.0 else 0.0
        baseline = self.baseline(loads, compounds)

        low, high = ESTRADIOL_BOUNDS
        estradiol = float(max(low, min(high, baseline + conversion + metabolite)))
        return AromatizationResult(
            estradiol=estradiol,
            baseline=baseline,
            substrate_mg=substrate,
            conversion=conversion,
            metabolite=metabolite,
            vmax=vmax,
            km=km,
            inhibition=inhibition,
        )


__all__ = ["AromatizationKinetics", "AromatizationResult", "ESTRADIOL_BOUNDS"]
