"""Numerical simulation components.

The :mod:`physiosim.simulation` package holds the models that turn a regimen
and a user profile into scores, a systemic snapshot and serum trajectories.
Every model is a plain class or function over the immutable tables from
:mod:`physiosim.engine`; :class:`engine.SimulationEngine` wires them to the
bundled reference data and the runtime configuration.
"""

from .aggregator import EvaluationResult, StackAggregator
from .engine import SimulationEngine
from .metrics import CycleOptions, SystemicSnapshot, calculate_cycle_metrics
from .serum import FrontLoadPlan, SerumOptions, SerumProfile, calculate_front_load, simulate_serum

__all__ = [
    "CycleOptions",
    "EvaluationResult",
    "FrontLoadPlan",
    "SerumOptions",
    "SerumProfile",
    "SimulationEngine",
    "StackAggregator",
    "SystemicSnapshot",
    "calculate_cycle_metrics",
    "calculate_front_load",
    "simulate_serum",
]
