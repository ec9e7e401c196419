"""Pydantic schemas used by the public API surface."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Sequence

from pydantic import BaseModel, Field

from ..engine.compounds import CompoundProfile
from ..engine.interactions import GoalPreset
from ..engine.profile import UserProfile
from ..engine.regimen import StackEntry
from ..simulation.advisories import Advisory
from ..simulation.aggregator import CompoundScore, EvaluationResult
from ..simulation.interactions import PairDelta
from ..simulation.metrics import SystemicSnapshot
from ..simulation.serum import FrontLoadPlan, SerumProfile

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


class ErrorPayload(BaseModel):
    """Standard error envelope returned by API endpoints."""

    code: str = Field(..., description="Machine readable error identifier")
    message: str = Field(..., description="Human readable explanation")
    context: Dict[str, Any] = Field(default_factory=dict, description="Additional context")


class AdvisoryPayload(BaseModel):
    code: str
    level: str
    message: str
    category: str = "safety"

    @classmethod
    def from_domain(cls, advisory: Advisory) -> "AdvisoryPayload":
        return cls(code=advisory.code, level=advisory.level, message=advisory.message, category=advisory.category)


class StackItem(BaseModel):
    """One regimen entry; ``dose`` is mg per administration."""

    compound: str = Field(..., min_length=1, description="Compound id or common alias (e.g. 'deca')")
    dose: float = Field(..., ge=0.0, description="Milligrams per administration")
    frequency: float | str | None = Field(
        default=None,
        description="Administrations per week or a token such as 'EOD', 'ED', '2x/wk'",
    )
    ester: str | None = None

    class Config:
        extra = "forbid"

    def to_domain(self) -> StackEntry:
        return StackEntry.create(self.compound, self.dose, frequency=self.frequency, ester=self.ester)


class ProfilePayload(BaseModel):
    """Physiological profile; omitted fields keep their defaults."""

    age: float | None = Field(default=None, gt=0.0)
    bodyweight_kg: float | None = Field(default=None, gt=0.0)
    body_fat_pct: float | None = Field(default=None, ge=0.0, le=60.0)
    gender: str | None = None
    receptor_sensitivity: str | None = None
    enzyme_activity: str | None = None
    neuro_sensitivity: str | None = None
    training_style: str | None = None
    diet_state: str | None = None
    experience: str | None = None

    def to_domain(self) -> UserProfile:
        return UserProfile.from_mapping(self.model_dump(exclude_none=True))


def build_stack(items: Sequence[StackItem]) -> List[StackEntry]:
    return [item.to_domain() for item in items]


# ---------------------------------------------------------------------------
# Reference listings
# ---------------------------------------------------------------------------


class CompoundSummary(BaseModel):
    id: str
    name: str
    administration: str
    archetype: str
    half_life_hours: float
    default_frequency: float
    esters: List[str] = Field(default_factory=list)
    default_ester: str | None = None
    flags: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, compound: CompoundProfile) -> "CompoundSummary":
        return cls(
            id=compound.id,
            name=compound.name,
            administration=compound.administration,
            archetype=compound.archetype,
            half_life_hours=compound.half_life_hours,
            default_frequency=compound.default_frequency,
            esters=sorted(compound.esters),
            default_ester=compound.default_ester,
            flags=sorted(compound.flags),
        )


class CompoundListResponse(BaseModel):
    compounds: List[CompoundSummary]


class GoalSummary(BaseModel):
    key: str
    label: str
    benefit: Dict[str, float] = Field(default_factory=dict)
    risk: Dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, goal: GoalPreset) -> "GoalSummary":
        return cls(key=goal.key, label=goal.label, benefit=dict(goal.benefit), risk=dict(goal.risk))


class GoalListResponse(BaseModel):
    goals: List[GoalSummary]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class EvaluateRequest(BaseModel):
    stack: List[StackItem] = Field(default_factory=list)
    profile: ProfilePayload | None = None
    goal: str | None = Field(default=None, description="Goal preset key; defaults to the configured goal")
    sensitivities: Dict[str, float] = Field(default_factory=dict)
    evidence_blend: float | None = Field(default=None, ge=0.0, le=1.0)


class CompoundScorePayload(BaseModel):
    compound: str
    dose: float
    benefit: float
    benefit_ci: float
    risk: float
    risk_ci: float

    @classmethod
    def from_domain(cls, score: CompoundScore) -> "CompoundScorePayload":
        return cls(
            compound=score.compound_id,
            dose=score.dose,
            benefit=score.benefit,
            benefit_ci=score.benefit_ci,
            risk=score.risk,
            risk_ci=score.risk_ci,
        )


class PairDeltaPayload(BaseModel):
    pair: str
    dimension: str
    polarity: str
    naive: float
    delta: float
    total: float

    @classmethod
    def from_domain(cls, delta: PairDelta) -> "PairDeltaPayload":
        return cls(
            pair=delta.pair_id,
            dimension=delta.dimension,
            polarity=delta.polarity,
            naive=delta.naive,
            delta=delta.delta,
            total=delta.total,
        )


class EvaluateResponse(BaseModel):
    goal: str
    compounds: List[CompoundScorePayload]
    pairs: List[PairDeltaPayload]
    dimension_totals: Dict[str, float]
    base_benefit: float
    base_risk: float
    total_benefit: float
    total_risk: float
    weighted_benefit: float
    weighted_risk: float
    net_score: float
    ratio: float
    advisories: List[AdvisoryPayload] = Field(default_factory=list)
    ignored: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: EvaluationResult) -> "EvaluateResponse":
        return cls(
            goal=result.goal,
            compounds=[CompoundScorePayload.from_domain(score) for score in result.compounds],
            pairs=[PairDeltaPayload.from_domain(delta) for delta in result.pairs],
            dimension_totals=dict(result.dimension_totals),
            base_benefit=result.base_benefit,
            base_risk=result.base_risk,
            total_benefit=result.total_benefit,
            total_risk=result.total_risk,
            weighted_benefit=result.weighted_benefit,
            weighted_risk=result.weighted_risk,
            net_score=result.net_score,
            ratio=result.ratio,
            advisories=[AdvisoryPayload.from_domain(item) for item in result.advisories],
            ignored=list(result.ignored),
        )


# ---------------------------------------------------------------------------
# Serum
# ---------------------------------------------------------------------------


class SerumRequest(BaseModel):
    stack: List[StackItem] = Field(default_factory=list)
    duration_days: float | None = Field(default=None, gt=0.0, le=730.0)
    backend: Literal["discrete", "scipy"] | None = None
    front_load: Dict[str, float] = Field(
        default_factory=dict,
        description="First-dose override in mg, keyed by entry key or compound id",
    )


class SerumResponse(BaseModel):
    timepoints: List[float]
    trajectories: Dict[str, List[float]]
    total: List[float]
    summary: Dict[str, Dict[str, float]]
    duration_days: float
    backend: str
    fallbacks: List[str] = Field(default_factory=list)
    ignored: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, profile: SerumProfile) -> "SerumResponse":
        return cls(
            timepoints=profile.timepoints.tolist(),
            trajectories={key: values.tolist() for key, values in profile.per_entry.items()},
            total=profile.total.tolist(),
            summary={key: dict(values) for key, values in profile.summary.items()},
            duration_days=profile.duration_days,
            backend=profile.backend,
            fallbacks=list(profile.fallbacks),
            ignored=list(profile.ignored),
        )


# ---------------------------------------------------------------------------
# Cycle metrics
# ---------------------------------------------------------------------------


class CycleMetricsRequest(BaseModel):
    stack: List[StackItem] = Field(default_factory=list)
    profile: ProfilePayload | None = None


class LoadPayload(BaseModel):
    key: str
    compound: str
    ester: str | None = None
    doses_per_week: float
    weekly_mg: float
    weekly_active_mg: float
    saturation_mg: float
    accumulation_ratio: float
    efficiency: float


class CycleMetricsResponse(BaseModel):
    loads: List[LoadPayload]
    saturation: Dict[str, float]
    gains: Dict[str, float]
    organs: Dict[str, Any]
    labs: Dict[str, Any]
    receptors: Dict[str, Any]
    shbg: Dict[str, Any]
    aromatization: Dict[str, float]
    cns: Dict[str, Any]
    efficiency: Dict[str, Any]
    advisories: List[AdvisoryPayload] = Field(default_factory=list)
    ignored: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, snapshot: SystemicSnapshot) -> "CycleMetricsResponse":
        labs = snapshot.labs
        organs = snapshot.organs
        aromatization = snapshot.aromatization
        return cls(
            loads=[
                LoadPayload(
                    key=load.key,
                    compound=load.compound_id,
                    ester=load.ester,
                    doses_per_week=load.doses_per_week,
                    weekly_mg=load.weekly_mg,
                    weekly_active_mg=load.weekly_active_mg,
                    saturation_mg=load.saturation_mg,
                    accumulation_ratio=load.accumulation_ratio,
                    efficiency=load.efficiency,
                )
                for load in snapshot.loads
            ],
            saturation={
                "total_mg": snapshot.saturation.total_saturation_mg,
                "effective_load": snapshot.saturation.effective_load,
                "efficiency_ratio": snapshot.saturation.efficiency_ratio,
                "tier": float(snapshot.saturation.tier),
            },
            gains={
                "hypertrophy": snapshot.gains.hypertrophy,
                "strength": snapshot.gains.strength,
                "fat_loss": snapshot.gains.fat_loss,
                "composite": snapshot.gains.composite,
            },
            organs={
                "scores": dict(organs.scores),
                "total": organs.total,
                "hepatic_shield": organs.hepatic_shield,
                "renal_shield": organs.renal_shield,
                "critical_multiplier": organs.critical_multiplier,
                "is_critical": organs.is_critical,
                "dominant_pressure": organs.dominant_pressure,
            },
            labs={
                "total_testosterone": labs.total_testosterone,
                "free_testosterone": labs.free_testosterone,
                "free_fraction": labs.free_fraction,
                "estradiol": labs.estradiol,
                "shbg": labs.shbg,
                "hdl": labs.hdl,
                "ldl": labs.ldl,
                "alt": labs.alt,
                "ast": labs.ast,
                "hematocrit": labs.hematocrit,
                "prolactin": labs.prolactin,
                "creatinine": labs.creatinine,
                "flags": [
                    {"lab": flag.lab, "value": flag.value, "tier": flag.tier, "threshold": flag.threshold}
                    for flag in labs.flags
                ],
            },
            receptors={
                "occupancy": dict(snapshot.receptors.occupancy),
                "total_occupancy": snapshot.receptors.total_occupancy,
                "free_fraction": snapshot.receptors.free_fraction,
            },
            shbg={
                "level": snapshot.shbg.level,
                "baseline": snapshot.shbg.baseline,
                "suppression": snapshot.shbg.suppression,
                "induction": snapshot.shbg.induction,
                "free_fractions": dict(snapshot.shbg.free_fractions),
            },
            aromatization={
                "estradiol": aromatization.estradiol,
                "first_pass_estradiol": snapshot.first_pass_estradiol,
                "baseline": aromatization.baseline,
                "conversion": aromatization.conversion,
                "inhibition": aromatization.inhibition,
            },
            cns={
                "drive": snapshot.cns.drive,
                "fatigue": snapshot.cns.fatigue,
                "net": snapshot.cns.net,
                "state": snapshot.cns.state,
            },
            efficiency={
                "anabolic_signal": snapshot.efficiency.anabolic_signal,
                "toxic_drag": snapshot.efficiency.toxic_drag,
                "net_gap": snapshot.efficiency.net_gap,
                "is_critical": snapshot.efficiency.is_critical,
            },
            advisories=[AdvisoryPayload.from_domain(item) for item in snapshot.advisories],
            ignored=list(snapshot.ignored),
        )


# ---------------------------------------------------------------------------
# Front load
# ---------------------------------------------------------------------------


class FrontLoadRequest(BaseModel):
    compound: str = Field(..., min_length=1)
    weekly_dose_mg: float = Field(..., ge=0.0)
    interval_days: float = Field(default=3.5, gt=0.0, le=28.0)
    ester: str | None = None


class FrontLoadResponse(BaseModel):
    compound: str
    ester: str | None = None
    weekly_dose_mg: float
    interval_days: float
    maintenance_dose_mg: float
    front_load_dose_mg: float
    accumulation_ratio: float
    half_life_days: float
    days_saved: float
    weeks_saved: float
    message: str

    @classmethod
    def from_domain(cls, plan: FrontLoadPlan) -> "FrontLoadResponse":
        return cls(
            compound=plan.compound,
            ester=plan.ester,
            weekly_dose_mg=plan.weekly_dose_mg,
            interval_days=plan.interval_days,
            maintenance_dose_mg=plan.maintenance_dose_mg,
            front_load_dose_mg=plan.front_load_dose_mg,
            accumulation_ratio=plan.accumulation_ratio,
            half_life_days=plan.half_life_days,
            days_saved=plan.days_saved,
            weeks_saved=plan.weeks_saved,
            message=plan.message,
        )


__all__ = [
    "AdvisoryPayload",
    "CompoundListResponse",
    "CompoundSummary",
    "CycleMetricsRequest",
    "CycleMetricsResponse",
    "ErrorPayload",
    "EvaluateRequest",
    "EvaluateResponse",
    "FrontLoadRequest",
    "FrontLoadResponse",
    "GoalListResponse",
    "GoalSummary",
    "ProfilePayload",
    "SerumRequest",
    "SerumResponse",
    "StackItem",
    "build_stack",
]
