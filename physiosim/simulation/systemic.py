"""Organ stress, projected labs, CNS balance and projected gains.

All quantities read the *free* saturation of each entry, i.e. saturation mg
after the SHBG correction.  Toxicity grows supra-linearly with load
(``loadRatio ** 1.25``) and oral compounds add a hepatic surge once the daily
dose passes 10 mg.  Support compounds shield the hepatic and renal axes only.
Every tripped lab tier adds to a penalty multiplier applied to the final
scores.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Sequence, Tuple

from ..engine.compounds import CompoundProfile
from ..engine.profile import UserProfile
from .advisories import LAB_PREFIX, ORGAN_CRITICAL, Advisory
from .dosing import LOAD_REFERENCE_MG, TOXICITY_CEILING, NormalizedCompoundLoad
from .personalization import NEURO_SENSITIVITY_RISK

ORGAN_AXES = ("androgenic", "cardiovascular", "hepatic", "renal", "neuro")
AXIS_WEIGHTS: Mapping[str, float] = {
    "androgenic": 2.0,
    "cardiovascular": 2.5,
    "hepatic": 5.0,
    "renal": 4.0,
    "neuro": 4.0,
}
AXIS_LABELS: Mapping[str, str] = {
    "androgenic": "Androgenic",
    "cardiovascular": "Cardiovascular",
    "hepatic": "Hepatic",
    "renal": "Renal",
    "neuro": "Neuro / CNS",
}
TOXICITY_EXPONENT = 1.25
AXIS_FULL_SCALE = 80.0
TOTAL_FULL_SCALE = 160.0
DOMINANT_PRESSURE_FLOOR = 5.0
CRITICAL_ORGAN_SCORE = 70.0

ORAL_SURGE_DAILY_MG = 10.0
ORAL_SURGE_REFERENCE_MG = 25.0
ORAL_SURGE_EXPONENT = 1.35
ORAL_SURGE_SCALE = 6.0
ORAL_SURGE_HEPATIC_SHARE = 0.9

MAX_SHIELD = 0.6

WARNING_PENALTY = 0.15
CRITICAL_PENALTY = 0.35

BASELINE_LABS: Mapping[str, float] = {
    "hdl": 50.0,
    "ldl": 90.0,
    "alt": 25.0,
    "ast": 22.0,
    "hematocrit": 45.0,
    "prolactin": 12.0,
    "creatinine": 0.9,
}
FEMALE_HDL = 55.0
ENDOGENOUS_TESTOSTERONE = 600.0
ENDOGENOUS_DECAY_MG = 400.0
FREE_TESTOSTERONE_SHARE = 0.025

# (lab, direction, warning, critical)
LAB_THRESHOLDS: Tuple[Tuple[str, str, float, float], ...] = (
    ("hdl", "low", 35.0, 25.0),
    ("ldl", "high", 160.0, 190.0),
    ("alt", "high", 60.0, 100.0),
    ("ast", "high", 60.0, 100.0),
    ("creatinine", "high", 1.3, 1.6),
    ("hematocrit", "high", 52.0, 54.0),
)


def _clamp(value: float, low: float, high: float) -> float:
    return float(max(low, min(high, value)))


@dataclass(frozen=True)
class LabFlag:
    lab: str
    value: float
    tier: str
    threshold: float


@dataclass(frozen=True)
class ProjectedLabs:
    total_testosterone: float
    free_testosterone: float
    free_fraction: float
    estradiol: float
    shbg: float
    hdl: float
    ldl: float
    alt: float
    ast: float
    hematocrit: float
    prolactin: float
    creatinine: float
    flags: Tuple[LabFlag, ...] = ()

    def value(self, lab: str) -> float:
        return float(getattr(self, lab))


@dataclass(frozen=True)
class OrganStress:
    scores: Mapping[str, float]
    raw: Mapping[str, float]
    total: float
    hepatic_shield: float
    renal_shield: float
    critical_multiplier: float
    is_critical: bool
    dominant_pressure: str


@dataclass(frozen=True)
class CnsProfile:
    drive: float
    fatigue: float
    net: float
    state: str


@dataclass(frozen=True)
class EfficiencyMetrics:
    anabolic_signal: float
    toxic_drag: float
    net_gap: float
    is_critical: bool


@dataclass(frozen=True)
class ProjectedGains:
    hypertrophy: float
    strength: float
    fat_loss: float
    composite: float


@dataclass(frozen=True)
class SystemicLoad:
    organs: OrganStress
    labs: ProjectedLabs
    cns: CnsProfile
    gains: ProjectedGains
    efficiency: EfficiencyMetrics
    advisories: Tuple[Advisory, ...] = ()


def _free_saturation(load: NormalizedCompoundLoad, free_fractions: Mapping[str, float]) -> float:
    return load.saturation_mg * float(free_fractions.get(load.key, 1.0))


def oral_hepatic_surge(daily_mg: float, toxicity_tier: float) -> float:
    """Nonlinear hepatic surge for oral doses above the daily threshold."""

    if daily_mg <= ORAL_SURGE_DAILY_MG:
        return 0.0
    ratio = max(1.0, daily_mg / ORAL_SURGE_REFERENCE_MG)
    return ratio**ORAL_SURGE_EXPONENT * ORAL_SURGE_SCALE * toxicity_tier


def support_shield(
    loads: Sequence[NormalizedCompoundLoad],
    compounds: Mapping[str, CompoundProfile],
) -> Tuple[float, float]:
    """Return ``(hepatic, renal)`` shielding fractions, each capped at 60%."""

    hepatic: List[float] = []
    renal: List[float] = []
    for load in loads:
        compound = compounds.get(load.compound_id)
        if compound is None or not compound.is_support or not compound.support.is_active:
            continue
        support = compound.support
        hepatic.append(min(support.cap, load.daily_mg * support.hepatic_per_mg))
        renal.append(min(support.cap, load.daily_mg * support.renal_per_mg))
    return min(MAX_SHIELD, math.fsum(hepatic)), min(MAX_SHIELD, math.fsum(renal))


def project_gains(
    loads: Sequence[NormalizedCompoundLoad],
    compounds: Mapping[str, CompoundProfile],
    free_fractions: Mapping[str, float] | None = None,
) -> ProjectedGains:
    """Gains scaled by each load's shared efficiency factor and free load."""

    fractions = free_fractions or {}
    hypertrophy: List[float] = []
    strength: List[float] = []
    fat_loss: List[float] = []
    for load in loads:
        compound = compounds.get(load.compound_id)
        if compound is None:
            continue
        potency = load.efficiency * _free_saturation(load, fractions) / LOAD_REFERENCE_MG * compound.base_potency
        hypertrophy.append(float(compound.benefits.get("hypertrophy", 0.0)) * potency * 1.5)
        strength.append(float(compound.benefits.get("strength", 0.0)) * potency * 1.2)
        fat_loss.append(float(compound.benefits.get("fat_loss", 0.0)) * potency)
    totals = (math.fsum(hypertrophy), math.fsum(strength), math.fsum(fat_loss))
    return ProjectedGains(
        hypertrophy=totals[0],
        strength=totals[1],
        fat_loss=totals[2],
        composite=min(10.0, sum(totals) / 5.0),
    )


class SystemicLoadModel:
    """Compute organ stress, labs and the CNS profile for one snapshot."""

    def organ_raw(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        free_fractions: Mapping[str, float],
    ) -> Dict[str, float]:
        parts: Dict[str, List[float]] = {axis: [] for axis in ORGAN_AXES}
        for load in loads:
            compound = compounds.get(load.compound_id)
            if compound is None:
                continue
            drag = (_free_saturation(load, free_fractions) / LOAD_REFERENCE_MG) ** TOXICITY_EXPONENT
            for axis in ORGAN_AXES:
                parts[axis].append(float(compound.toxicity.get(axis, 0.0)) * AXIS_WEIGHTS[axis] * drag)
            if compound.is_oral:
                surge = oral_hepatic_surge(load.daily_mg, compound.toxicity_tier)
                parts["hepatic"].append(surge * ORAL_SURGE_HEPATIC_SHARE)
        return {axis: math.fsum(values) for axis, values in parts.items()}

    def project_labs(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        profile: UserProfile,
        free_fractions: Mapping[str, float],
        estradiol: float,
        shbg_level: float,
    ) -> ProjectedLabs:
        labs = dict(BASELINE_LABS)
        if profile.gender == "female":
            labs["hdl"] = FEMALE_HDL

        exogenous: List[float] = []
        converting: List[Tuple[float, float]] = []
        suppressive_mg = 0.0
        for load in loads:
            compound = compounds.get(load.compound_id)
            if compound is None:
                continue
            free_mg = _free_saturation(load, free_fractions)
            ratio = free_mg / LOAD_REFERENCE_MG
            toxicity = compound.toxicity

            lipid = float(toxicity.get("lipid", 0.0))
            # support and ancillary compounds only move lipids through their own lipid axis
            base_hdl, base_ldl = (2.0, 5.0) if compound.is_androgen else (0.0, 0.0)
            hdl_penalty = ratio * (base_hdl + 0.4 * lipid)
            labs["hdl"] -= hdl_penalty * (2.5 if compound.is_oral else 1.0)
            labs["ldl"] += ratio * (base_ldl + lipid)
            hepatic = float(toxicity.get("hepatic", 0.0))
            labs["alt"] += hepatic * ratio * 3.0
            labs["ast"] += hepatic * ratio * 2.5
            if compound.is_oral:
                surge = oral_hepatic_surge(load.daily_mg, compound.toxicity_tier)
                labs["alt"] += surge * 2.2
                labs["ast"] += surge * 1.8
            labs["creatinine"] += float(toxicity.get("renal", 0.0)) * ratio * 0.03
            labs["hematocrit"] += float(toxicity.get("erythropoietic", 0.0)) * ratio * 0.8
            labs["prolactin"] += float(compound.metabolic.get("prolactin", 0.0)) * ratio * 6.0

            conversion = float(compound.metabolic.get("conversion_factor", 0.0))
            if conversion > 0.0:
                exogenous.append(load.saturation_mg * conversion)
                converting.append((load.saturation_mg * conversion, float(free_fractions.get(load.key, 1.0))))
            if compound.has_flag("suppressive"):
                suppressive_mg += load.saturation_mg

        labs["hdl"] = max(5.0, labs["hdl"])
        labs["hematocrit"] = min(65.0, labs["hematocrit"])
        labs["creatinine"] = min(5.0, labs["creatinine"])

        total_t = ENDOGENOUS_TESTOSTERONE * math.exp(-suppressive_mg / ENDOGENOUS_DECAY_MG) + math.fsum(exogenous)
        weight = math.fsum(amount for amount, _ in converting)
        if weight > 0.0:
            free_fraction = math.fsum(amount * fraction for amount, fraction in converting) / weight
        else:
            free_fraction = 1.0
        free_t = total_t * free_fraction * FREE_TESTOSTERONE_SHARE

        partial = ProjectedLabs(
            total_testosterone=total_t,
            free_testosterone=free_t,
            free_fraction=free_fraction,
            estradiol=estradiol,
            shbg=shbg_level,
            **labs,
        )
        return replace(partial, flags=self.lab_flags(partial))

    def lab_flags(self, labs: ProjectedLabs) -> Tuple[LabFlag, ...]:
        flags: List[LabFlag] = []
        for lab, direction, warning, critical in LAB_THRESHOLDS:
            value = labs.value(lab)
            if direction == "low":
                tripped_critical, tripped_warning = value < critical, value < warning
            else:
                tripped_critical, tripped_warning = value > critical, value > warning
            if tripped_critical:
                flags.append(LabFlag(lab=lab, value=value, tier="critical", threshold=critical))
            elif tripped_warning:
                flags.append(LabFlag(lab=lab, value=value, tier="warning", threshold=warning))
        return tuple(flags)

    def critical_multiplier(self, flags: Sequence[LabFlag]) -> float:
        """Additive stacking; a critical flag has tripped its warning tier too."""

        multiplier = 1.0
        for flag in flags:
            multiplier += WARNING_PENALTY
            if flag.tier == "critical":
                multiplier += CRITICAL_PENALTY
        return multiplier

    def organ_stress(
        self,
        raw: Mapping[str, float],
        shield: Tuple[float, float],
        multiplier: float,
        total_saturation_mg: float,
    ) -> OrganStress:
        hepatic_shield, renal_shield = shield
        shielded = dict(raw)
        shielded["hepatic"] = raw["hepatic"] * (1.0 - hepatic_shield)
        shielded["renal"] = raw["renal"] * (1.0 - renal_shield)

        scores = {
            axis: _clamp(value / AXIS_FULL_SCALE * 100.0 * multiplier, 0.0, 100.0)
            for axis, value in shielded.items()
        }
        total = math.fsum(shielded.values()) / TOTAL_FULL_SCALE * 100.0
        pressure = total_saturation_mg / TOXICITY_CEILING
        if pressure > 0.4:
            total += (pressure - 0.4) ** 1.1 * 140.0
        total = _clamp(total * multiplier, 0.0, 100.0)

        ranked = sorted(ORGAN_AXES, key=lambda axis: (-shielded[axis], axis))
        leader = ranked[0]
        dominant = AXIS_LABELS[leader] if shielded[leader] > DOMINANT_PRESSURE_FLOOR else "Balanced"
        return OrganStress(
            scores=scores,
            raw=dict(raw),
            total=total,
            hepatic_shield=hepatic_shield,
            renal_shield=renal_shield,
            critical_multiplier=multiplier,
            is_critical=scores["hepatic"] > CRITICAL_ORGAN_SCORE or scores["renal"] > CRITICAL_ORGAN_SCORE,
            dominant_pressure=dominant,
        )

    def cns_profile(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        profile: UserProfile,
        free_fractions: Mapping[str, float],
        neuro_score: float,
    ) -> CnsProfile:
        drive: List[float] = []
        fatigue: List[float] = []
        for load in loads:
            compound = compounds.get(load.compound_id)
            if compound is None:
                continue
            ratio = _free_saturation(load, free_fractions) / LOAD_REFERENCE_MG
            drive.append(float(compound.cns.get("drive", 0.0)) * ratio)
            fatigue.append(float(compound.cns.get("fatigue", 0.0)) * ratio)
        sensitivity = NEURO_SENSITIVITY_RISK.get(profile.neuro_sensitivity, 1.0)
        total_drive = math.fsum(drive)
        total_fatigue = (math.fsum(fatigue) + neuro_score / 25.0) * sensitivity
        net = total_drive - total_fatigue
        if total_drive > 6.0 and total_fatigue > 4.0:
            state = "Overstimulated"
        elif net >= 1.0:
            state = "Driven"
        elif net <= -1.0:
            state = "Fatigued"
        else:
            state = "Balanced"
        return CnsProfile(drive=total_drive, fatigue=total_fatigue, net=net, state=state)

    def evaluate(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        profile: UserProfile,
        free_fractions: Mapping[str, float] | None = None,
        estradiol: float = 25.0,
        shbg_level: float = 35.0,
        total_saturation_mg: float = 0.0,
    ) -> SystemicLoad:
        fractions = free_fractions or {}
        labs = self.project_labs(loads, compounds, profile, fractions, estradiol, shbg_level)
        multiplier = self.critical_multiplier(labs.flags)
        organs = self.organ_stress(
            self.organ_raw(loads, compounds, fractions),
            support_shield(loads, compounds),
            multiplier,
            total_saturation_mg,
        )
        cns = self.cns_profile(loads, compounds, profile, fractions, organs.scores["neuro"])
        gains = project_gains(loads, compounds, fractions)

        anabolic = gains.hypertrophy + gains.strength
        drag = organs.total / 10.0
        efficiency = EfficiencyMetrics(
            anabolic_signal=anabolic,
            toxic_drag=drag,
            net_gap=anabolic - drag,
            is_critical=organs.is_critical,
        )

        advisories: List[Advisory] = [
            Advisory(
                code=f"{LAB_PREFIX}{flag.lab}",
                level=flag.tier,
                category="labs",
                message=f"Projected {flag.lab} {flag.value:.1f} crosses the {flag.tier} threshold ({flag.threshold:g}).",
            )
            for flag in labs.flags
        ]
        if organs.is_critical:
            advisories.append(
                Advisory(
                    code=ORGAN_CRITICAL,
                    level="critical",
                    category="toxicity",
                    message="Hepatic or renal stress is in the critical range after support shielding.",
                )
            )
        return SystemicLoad(
            organs=organs,
            labs=labs,
            cns=cns,
            gains=gains,
            efficiency=efficiency,
            advisories=tuple(advisories),
        )


__all__ = [
    "AXIS_FULL_SCALE",
    "CRITICAL_ORGAN_SCORE",
    "CnsProfile",
    "EfficiencyMetrics",
    "LAB_THRESHOLDS",
    "LabFlag",
    "MAX_SHIELD",
    "ORGAN_AXES",
    "OrganStress",
    "ProjectedGains",
    "ProjectedLabs",
    "SystemicLoad",
    "SystemicLoadModel",
    "oral_hepatic_surge",
    "project_gains",
    "support_shield",
]
