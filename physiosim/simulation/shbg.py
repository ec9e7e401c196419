"""Carrier-protein (SHBG) equilibrium and binding-capacity competition.

Androgenic pressure from the stack suppresses the SHBG pool while estradiol
above its reference induces it.  The resulting level defines a finite binding
capacity that bindable compounds compete for in proportion to their demand.
The free fractions are used once, in a single correction pass, and are not
iterated to convergence.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from ..engine.compounds import CompoundProfile
from .dosing import NormalizedCompoundLoad

SHBG_BASELINE_NMOL = 35.0
SHBG_BOUNDS = (5.0, 120.0)
MAX_SUPPRESSION = 0.85
SUPPRESSION_SCALE = 10.0
ESTRADIOL_REFERENCE = 25.0
INDUCTION_PER_PG = 0.12
CAPACITY_MG_PER_NMOL = 10.0


@dataclass(frozen=True)
class ShbgDynamics:
    level: float
    baseline: float
    suppression: float
    induction: float
    capacity_mg: float
    demand_mg: float
    bound_mg: float
    free_fractions: Mapping[str, float]

    def free_fraction(self, key: str) -> float:
        return float(self.free_fractions.get(key, 1.0))


class ShbgDynamicsModel:
    def __init__(
        self,
        baseline: float = SHBG_BASELINE_NMOL,
        capacity_per_nmol: float = CAPACITY_MG_PER_NMOL,
    ) -> None:
        self.baseline = baseline
        self.capacity_per_nmol = capacity_per_nmol

    def suppression(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
    ) -> float:
        """Saturating suppression factor in ``[0, MAX_SUPPRESSION)``."""

        pressure = math.fsum(
            load.toxicity_load * float(compounds[load.compound_id].pathways.get("shbg_suppression", 0.0))
            for load in loads
            if load.compound_id in compounds
        ) / SUPPRESSION_SCALE
        pressure = max(0.0, pressure)
        return pressure / (1.0 + pressure) * MAX_SUPPRESSION

    def level(self, suppression: float, estradiol: float) -> float:
        induction = max(0.0, estradiol - ESTRADIOL_REFERENCE) * INDUCTION_PER_PG
        low, high = SHBG_BOUNDS
        raw = self.baseline * (1.0 - suppression) + induction
        if not math.isfinite(raw):
            return high if raw > 0 else low
        return float(max(low, min(high, raw)))

    def evaluate(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        estradiol: float,
    ) -> ShbgDynamics:
        suppression = self.suppression(loads, compounds)
        induction = max(0.0, estradiol - ESTRADIOL_REFERENCE) * INDUCTION_PER_PG
        level = self.level(suppression, estradiol)
        capacity = level * self.capacity_per_nmol

        demands: Dict[str, float] = {}
        fractions: Dict[str, float] = {}
        for load in loads:
            compound = compounds.get(load.compound_id)
            binding = float(compound.pathways.get("shbg_binding", 0.0)) if compound else 0.0
            binding = max(0.0, min(1.0, binding))
            demand = binding * load.saturation_mg
            if demand <= 0.0:
                fractions[load.key] = 1.0
                continue
            demands[load.key] = demand

        total_demand = math.fsum(demands.values())
        allocated_total = min(capacity, total_demand)
        for key, demand in demands.items():
            allocated = allocated_total * demand / total_demand
            fractions[key] = max(0.0, min(1.0, 1.0 - allocated / demand))

        return ShbgDynamics(
            level=level,
            baseline=self.baseline,
            suppression=suppression,
            induction=induction,
            capacity_mg=capacity,
            demand_mg=total_demand,
            bound_mg=allocated_total,
            free_fractions=fractions,
        )


__all__ = ["SHBG_BOUNDS", "ShbgDynamics", "ShbgDynamicsModel"]
