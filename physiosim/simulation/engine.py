"""High level facade over the scoring, systemic and serum layers."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..engine.compounds import resolve_compound
from ..engine.interactions import NEUTRAL_GOAL, GoalPreset
from ..engine.profile import UserProfile
from ..engine.reference import ReferenceTables
from ..engine.regimen import StackEntry
from .aggregator import EvaluationResult, StackAggregator
from .assets import load_reference_tables
from .dosing import DoseNormalizer
from .metrics import CycleOptions, SystemicSnapshot, calculate_cycle_metrics
from .serum import FrontLoadPlan, SerumOptions, SerumProfile, calculate_front_load, simulate_serum

LOGGER = logging.getLogger(__name__)


class SimulationEngine:
    """Coordinate stack scoring, the systemic pipeline and serum simulation.

    The engine owns no mutable state: reference tables are injected (the
    bundled sample tables are used when none are given) and every call is a
    pure function of its arguments.
    """

    def __init__(self, tables: ReferenceTables | None = None, config: EngineConfig | None = None) -> None:
        self.tables = tables if tables is not None else load_reference_tables()
        self.config = config or DEFAULT_ENGINE_CONFIG
        self.aggregator = StackAggregator(DoseNormalizer(self.config.max_accumulation_ratio))

    def resolve_goal(self, goal: str | GoalPreset | None) -> GoalPreset:
        """Return the goal preset for ``goal``; unknown keys weigh every dimension evenly."""

        if isinstance(goal, GoalPreset):
            return goal
        key = (goal or self.config.default_goal or "").strip().lower()
        preset = self.tables.goal(key)
        if preset is None:
            LOGGER.debug("Unknown goal '%s'; using neutral weights", key)
            return NEUTRAL_GOAL
        return preset

    def evaluate(
        self,
        stack: Sequence[StackEntry],
        profile: UserProfile | None = None,
        goal: str | GoalPreset | None = None,
        sensitivities: Mapping[str, float] | None = None,
        evidence_blend: float | None = None,
    ) -> EvaluationResult:
        blend = self.config.evidence_blend if evidence_blend is None else evidence_blend
        return self.aggregator.evaluate(
            stack,
            self.tables.compounds,
            self.tables.pairs,
            profile=profile,
            goal=self.resolve_goal(goal),
            sensitivities=sensitivities,
            evidence_blend=blend,
        )

    def serum_options(self, **overrides: object) -> SerumOptions:
        """Serum options seeded from the engine configuration."""

        values = {
            "step_hours": self.config.serum_step_hours,
            "half_life_multiple": self.config.serum_half_life_multiple,
            "min_days": self.config.serum_min_days,
            "max_days": self.config.serum_max_days,
            "backend": self.config.serum_backend,
            "max_accumulation_ratio": self.config.max_accumulation_ratio,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return SerumOptions(**values)

    def simulate_serum(self, stack: Sequence[StackEntry], options: SerumOptions | None = None) -> SerumProfile:
        return simulate_serum(stack, self.tables.compounds, options or self.serum_options())

    def calculate_cycle_metrics(
        self,
        stack: Sequence[StackEntry],
        options: CycleOptions | None = None,
    ) -> SystemicSnapshot:
        options = options or CycleOptions(max_accumulation_ratio=self.config.max_accumulation_ratio)
        return calculate_cycle_metrics(stack, self.tables.compounds, options)

    def calculate_front_load(
        self,
        compound: str,
        weekly_dose_mg: float,
        interval_days: float = 3.5,
        ester: str | None = None,
    ) -> FrontLoadPlan | None:
        compound_id, alias_ester = resolve_compound(compound)
        profile = self.tables.compound(compound_id)
        if profile is None:
            LOGGER.debug("Front load requested for unknown compound '%s'", compound)
        return calculate_front_load(
            profile,
            weekly_dose_mg,
            interval_days=interval_days,
            ester=ester or alias_ester,
            max_ratio=self.config.max_accumulation_ratio,
        )


__all__ = ["SimulationEngine"]
