"""Dose normalization and the three-tier saturation curve.

A regimen entry is reduced to weekly active mg (dose × administrations per
week × ester weight) and then to steady-state *saturation* mg by the
pharmacokinetic accumulation ratio ``R = 1/(1 − e^(−kτ))`` with
``k = ln2/t½`` and ``τ = 7/doses-per-week`` (both in days).  ``R`` is capped
so very long esters or very frequent dosing cannot blow up.

The summed saturation mg of a stack then passes through
:class:`SaturationCurve`, whose slope drops from 1.0 to 0.7 to 0.3 across two
thresholds.  The ratio of effective to raw load is a single damping factor
shared by every compound's projected gains.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Sequence, Tuple

from ..engine.compounds import CompoundProfile
from ..engine.regimen import StackEntry

LOGGER = logging.getLogger(__name__)

SATURATION_THRESHOLD_1 = 1500.0
SATURATION_THRESHOLD_2 = 2500.0
TOXICITY_CEILING = 3000.0
LOAD_REFERENCE_MG = 500.0
DEFAULT_MAX_ACCUMULATION_RATIO = 6.0


def accumulation_ratio(
    half_life_hours: float,
    doses_per_week: float,
    max_ratio: float = DEFAULT_MAX_ACCUMULATION_RATIO,
) -> float:
    """Steady-state accumulation ratio for repeated dosing, capped at ``max_ratio``."""

    if half_life_hours <= 0.0 or doses_per_week <= 0.0:
        return 1.0
    k = math.log(2.0) / (half_life_hours / 24.0)
    tau = 7.0 / doses_per_week
    retained = 1.0 - math.exp(-k * tau)
    if retained <= 1.0 / max_ratio:
        return float(max_ratio)
    return float(min(max_ratio, 1.0 / retained))


@dataclass(frozen=True)
class NormalizedCompoundLoad:
    """Derived per-entry load; recomputed for every evaluation."""

    key: str
    compound_id: str
    ester: str | None
    doses_per_week: float
    weekly_mg: float
    weekly_active_mg: float
    daily_mg: float
    curve_dose: float
    half_life_hours: float
    accumulation_ratio: float
    saturation_mg: float
    is_oral: bool = False
    efficiency: float = 1.0

    @property
    def toxicity_load(self) -> float:
        """Saturation relative to the 500 mg reference load."""

        return self.saturation_mg / LOAD_REFERENCE_MG


class DoseNormalizer:
    """Convert stack entries into :class:`NormalizedCompoundLoad` records."""

    def __init__(self, max_accumulation_ratio: float = DEFAULT_MAX_ACCUMULATION_RATIO) -> None:
        self.max_accumulation_ratio = float(max(1.0, max_accumulation_ratio))

    def doses_per_week(self, entry: StackEntry, compound: CompoundProfile) -> float:
        if entry.frequency is None:
            return float(max(0.0, compound.default_frequency))
        return float(max(0.0, entry.frequency))

    def normalize(self, entry: StackEntry, compound: CompoundProfile, key: str | None = None) -> NormalizedCompoundLoad:
        frequency = self.doses_per_week(entry, compound)
        weekly_mg = max(0.0, entry.dose) * frequency
        weekly_active_mg = weekly_mg * compound.ester_weight(entry.ester)
        half_life = compound.half_life_for(entry.ester)
        ratio = accumulation_ratio(half_life, frequency, self.max_accumulation_ratio)
        daily_mg = weekly_mg / 7.0
        curve_dose = daily_mg if compound.curve_basis == "daily" else weekly_mg
        return NormalizedCompoundLoad(
            key=key or entry.key,
            compound_id=compound.id,
            ester=compound.resolved_ester(entry.ester),
            doses_per_week=frequency,
            weekly_mg=weekly_mg,
            weekly_active_mg=weekly_active_mg,
            daily_mg=daily_mg,
            curve_dose=curve_dose,
            half_life_hours=half_life,
            accumulation_ratio=ratio,
            saturation_mg=weekly_active_mg * ratio,
            is_oral=compound.is_oral,
        )

    def normalize_stack(
        self,
        stack: Sequence[StackEntry],
        compounds: Mapping[str, CompoundProfile],
    ) -> Tuple[Tuple[NormalizedCompoundLoad, ...], Tuple[str, ...]]:
        """Normalize every resolvable entry; unknown ids are returned separately."""

        loads: List[NormalizedCompoundLoad] = []
        ignored: List[str] = []
        seen: Dict[str, int] = {}
        for entry in stack:
            compound = compounds.get(entry.compound)
            if compound is None:
                LOGGER.debug("Ignoring unknown compound '%s'", entry.compound)
                ignored.append(entry.compound)
                continue
            key = entry.key
            seen[key] = seen.get(key, 0) + 1
            if seen[key] > 1:
                key = f"{key}#{seen[key]}"
            loads.append(self.normalize(entry, compound, key=key))
        return tuple(loads), tuple(ignored)


@dataclass(frozen=True)
class SaturationState:
    total_saturation_mg: float
    effective_load: float
    efficiency_ratio: float
    tier: int


class SaturationCurve:
    """Three linear segments of decreasing slope over combined saturation mg."""

    def __init__(
        self,
        threshold_1: float = SATURATION_THRESHOLD_1,
        threshold_2: float = SATURATION_THRESHOLD_2,
        mid_slope: float = 0.7,
        tail_slope: float = 0.3,
        capacity_scale: float = 1.0,
    ) -> None:
        scale = float(max(capacity_scale, 1e-6))
        self.threshold_1 = threshold_1 * scale
        self.threshold_2 = max(threshold_2 * scale, self.threshold_1)
        self.mid_slope = mid_slope
        self.tail_slope = tail_slope

    def effective_load(self, total_saturation_mg: float) -> float:
        total = max(0.0, total_saturation_mg)
        if total <= self.threshold_1:
            return total
        if total <= self.threshold_2:
            return self.threshold_1 + (total - self.threshold_1) * self.mid_slope
        base = self.threshold_1 + (self.threshold_2 - self.threshold_1) * self.mid_slope
        return base + (total - self.threshold_2) * self.tail_slope

    def evaluate(self, total_saturation_mg: float) -> SaturationState:
        total = max(0.0, total_saturation_mg)
        effective = self.effective_load(total)
        if total <= self.threshold_1:
            tier = 1
        elif total <= self.threshold_2:
            tier = 2
        else:
            tier = 3
        efficiency = effective / total if total > 0.0 else 1.0
        return SaturationState(
            total_saturation_mg=total,
            effective_load=effective,
            efficiency_ratio=efficiency,
            tier=tier,
        )


def apply_efficiency(
    loads: Sequence[NormalizedCompoundLoad],
    efficiency: float,
) -> Tuple[NormalizedCompoundLoad, ...]:
    return tuple(replace(load, efficiency=efficiency) for load in loads)


__all__ = [
    "DEFAULT_MAX_ACCUMULATION_RATIO",
    "DoseNormalizer",
    "LOAD_REFERENCE_MG",
    "NormalizedCompoundLoad",
    "SATURATION_THRESHOLD_1",
    "SATURATION_THRESHOLD_2",
    "SaturationCurve",
    "SaturationState",
    "TOXICITY_CEILING",
    "accumulation_ratio",
    "apply_efficiency",
]
