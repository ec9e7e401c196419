"""Depot/serum trajectories and the analytic front-load dose.

Each stack entry owns a depot (unabsorbed oil or gut content) and an active
serum compartment.  Doses land in the depot on their dosing interval; every
fixed step a half-life-derived share of the depot is absorbed and the active
level decays by ``0.5 ** (Δt / t½)``.

Two backends produce the trajectory:

``discrete``
    The fixed-step stepper described above (default).
``scipy``
    The equivalent continuous model, ``depot' = −ka·depot`` and
    ``active' = ka·depot − ke·active``, integrated with
    :func:`scipy.integrate.solve_ivp` between dose events.  Any solver failure
    falls back to the discrete stepper and is recorded in ``fallbacks``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np
import numpy.typing as npt
from scipy.integrate import solve_ivp

from ..engine.compounds import CompoundProfile
from ..engine.regimen import StackEntry
from ._integration import time_average, trapezoid_integral
from .dosing import DEFAULT_MAX_ACCUMULATION_RATIO, DoseNormalizer, accumulation_ratio

LOGGER = logging.getLogger(__name__)

SERUM_BACKENDS = ("discrete", "scipy")
DEFAULT_STEP_HOURS = 4.0
DEFAULT_HALF_LIFE_MULTIPLE = 6.0
DEFAULT_MIN_DAYS = 28.0
DEFAULT_MAX_DAYS = 140.0
STEADY_STATE_WINDOW_HOURS = 168.0
DEFAULT_FRONT_LOAD_INTERVAL_DAYS = 3.5
STEADY_STATE_HALF_LIVES = 5.0
MAX_SERUM_DAYS = 730.0
MIN_STEP_HOURS = 0.25


def absorption_rate(half_life_hours: float) -> float:
    """Share of the depot absorbed per step: fast, moderate or slow release."""

    if half_life_hours < 12.0:
        return 0.8
    if half_life_hours < 48.0:
        return 0.15
    return 0.05


def elimination_factor(half_life_hours: float, step_hours: float) -> float:
    if half_life_hours <= 0.0:
        return 0.0
    return 0.5 ** (step_hours / half_life_hours)


@dataclass(frozen=True)
class SerumOptions:
    """Simulation window and backend; ``duration_days`` overrides the heuristic."""

    duration_days: float | None = None
    step_hours: float = DEFAULT_STEP_HOURS
    half_life_multiple: float = DEFAULT_HALF_LIFE_MULTIPLE
    min_days: float = DEFAULT_MIN_DAYS
    max_days: float = DEFAULT_MAX_DAYS
    backend: str = "discrete"
    front_load: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    max_accumulation_ratio: float = DEFAULT_MAX_ACCUMULATION_RATIO


@dataclass(frozen=True)
class SerumProfile:
    timepoints: npt.NDArray[np.float64]
    per_entry: Dict[str, npt.NDArray[np.float64]]
    total: npt.NDArray[np.float64]
    summary: Dict[str, Dict[str, float]]
    duration_days: float
    backend: str
    fallbacks: tuple[str, ...] = ()
    ignored: tuple[str, ...] = ()


@dataclass(frozen=True)
class _DosingSchedule:
    key: str
    half_life_hours: float
    pin_active_mg: float
    doses_per_week: float
    first_dose_active_mg: float

    def dose_vector(self, size: int, step_hours: float) -> npt.NDArray[np.float64]:
        """Active mg landing in the depot at each step index."""

        doses = np.zeros(size, dtype=float)
        if size == 0 or self.doses_per_week <= 0.0:
            return doses
        horizon = (size - 1) * step_hours
        interval = 168.0 / self.doses_per_week
        count = int(math.floor(horizon / interval)) + 1
        for n in range(count):
            index = min(size - 1, int(math.floor(n * interval / step_hours + 1e-9)))
            doses[index] += self.first_dose_active_mg if n == 0 else self.pin_active_mg
        return doses


def simulation_days(half_lives: Sequence[float], options: SerumOptions) -> float:
    """Explicit duration, or the half-life heuristic; never longer than two years."""

    requested = options.duration_days
    if requested is not None and requested > 0.0:
        return float(min(MAX_SERUM_DAYS, requested))
    longest = max(half_lives, default=0.0) / 24.0
    days = max(options.min_days, min(options.max_days, options.half_life_multiple * longest))
    if math.isnan(days) or days <= 0.0:
        return DEFAULT_MIN_DAYS
    return float(min(MAX_SERUM_DAYS, days))


def _step_hours(options: SerumOptions) -> float:
    step = float(options.step_hours)
    if not math.isfinite(step) or step <= 0.0:
        return DEFAULT_STEP_HOURS
    return max(MIN_STEP_HOURS, step)


def _schedules(
    stack: Sequence[StackEntry],
    compounds: Mapping[str, CompoundProfile],
    options: SerumOptions,
) -> Tuple[List[_DosingSchedule], Tuple[str, ...]]:
    loads, ignored = DoseNormalizer(options.max_accumulation_ratio).normalize_stack(stack, compounds)
    schedules: List[_DosingSchedule] = []
    for entry_load in loads:
        compound = compounds[entry_load.compound_id]
        pin = entry_load.weekly_active_mg / entry_load.doses_per_week if entry_load.doses_per_week > 0.0 else 0.0
        override = options.front_load.get(entry_load.key, options.front_load.get(entry_load.compound_id))
        first = pin
        if override is not None and override > 0.0:
            first = float(override) * compound.ester_weight(entry_load.ester)
        schedules.append(
            _DosingSchedule(
                key=entry_load.key,
                half_life_hours=entry_load.half_life_hours,
                pin_active_mg=pin,
                doses_per_week=entry_load.doses_per_week,
                first_dose_active_mg=first,
            )
        )
    return schedules, ignored


def _discrete_entry(schedule: _DosingSchedule, size: int, step_hours: float) -> npt.NDArray[np.float64]:
    doses = schedule.dose_vector(size, step_hours)
    rate = absorption_rate(schedule.half_life_hours)
    decay = elimination_factor(schedule.half_life_hours, step_hours)
    depot = 0.0
    active = 0.0
    levels = np.zeros(size, dtype=float)
    for index in range(size):
        depot += doses[index]
        absorbed = depot * rate
        depot -= absorbed
        active = (active + absorbed) * decay
        levels[index] = active
    return levels


def _ivp_entry(
    schedule: _DosingSchedule,
    time: npt.NDArray[np.float64],
    step_hours: float,
) -> npt.NDArray[np.float64]:
    size = time.size
    doses = schedule.dose_vector(size, step_hours)
    rate = absorption_rate(schedule.half_life_hours)
    ka = -math.log(1.0 - rate) / step_hours
    ke = math.log(2.0) / schedule.half_life_hours if schedule.half_life_hours > 0.0 else 1e6

    def dynamics(_t: float, state: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        depot, active = state
        return np.array([-ka * depot, ka * depot - ke * active], dtype=float)

    levels = np.zeros(size, dtype=float)
    boundaries = sorted({0, size - 1, *np.flatnonzero(doses).tolist()})
    state = np.zeros(2, dtype=float)
    for start, stop in zip(boundaries, boundaries[1:]):
        state[0] += doses[start]
        solution = solve_ivp(
            dynamics,
            (float(time[start]), float(time[stop])),
            y0=state,
            t_eval=time[start : stop + 1],
            max_step=float(step_hours),
        )
        if not solution.success:
            raise RuntimeError(f"SciPy serum solver failed: {solution.message}")
        levels[start : stop + 1] = np.clip(solution.y[1], 0.0, None)
        state = solution.y[:, -1].astype(float).copy()
    return levels


def _summarize(levels: npt.NDArray[np.float64], time: npt.NDArray[np.float64]) -> Dict[str, float]:
    if levels.size == 0:
        return {"auc": 0.0, "peak": 0.0, "trough": 0.0, "steady_state_mean": 0.0}
    window = time >= max(0.0, float(time[-1]) - STEADY_STATE_WINDOW_HOURS)
    return {
        "auc": trapezoid_integral(levels, time),
        "peak": float(np.max(levels)),
        "trough": float(np.min(levels[window])),
        "steady_state_mean": time_average(levels[window], time[window]),
    }


def _assemble(
    schedules: Sequence[_DosingSchedule],
    per_entry: Dict[str, npt.NDArray[np.float64]],
    time: npt.NDArray[np.float64],
    duration_days: float,
    backend: str,
    ignored: Tuple[str, ...],
) -> SerumProfile:
    total = np.zeros(time.size, dtype=float)
    for schedule in schedules:
        total = total + per_entry[schedule.key]
    summary = {key: _summarize(levels, time) for key, levels in per_entry.items()}
    summary["total"] = _summarize(total, time)
    return SerumProfile(
        timepoints=time,
        per_entry=per_entry,
        total=total,
        summary=summary,
        duration_days=duration_days,
        backend=backend,
        ignored=ignored,
    )


def simulate_serum(
    stack: Sequence[StackEntry],
    compounds: Mapping[str, CompoundProfile],
    options: SerumOptions | None = None,
) -> SerumProfile:
    """Simulate serum levels (active mg) for every resolvable entry."""

    options = options or SerumOptions()
    step = _step_hours(options)
    schedules, ignored = _schedules(stack, compounds, options)
    days = simulation_days([schedule.half_life_hours for schedule in schedules], options)
    time = np.arange(0.0, days * 24.0 + step / 2.0, step)

    backend = options.backend.lower() if options.backend else "discrete"
    if backend not in SERUM_BACKENDS:
        LOGGER.debug("Unknown serum backend '%s'; using discrete stepper", options.backend)
        backend = "discrete"

    fallbacks: list[str] = []
    if backend == "scipy":
        try:
            per_entry = {schedule.key: _ivp_entry(schedule, time, step) for schedule in schedules}
            return _assemble(schedules, per_entry, time, days, "scipy", ignored)
        except Exception as exc:
            LOGGER.debug("SciPy serum integrator failed (%s); falling back to discrete stepper", exc)
            fallbacks.append(f"scipy:{exc.__class__.__name__}")

    per_entry = {schedule.key: _discrete_entry(schedule, time.size, step) for schedule in schedules}
    profile = _assemble(schedules, per_entry, time, days, "discrete", ignored)
    if fallbacks:
        return replace(profile, fallbacks=tuple(fallbacks))
    return profile


@dataclass(frozen=True)
class FrontLoadPlan:
    compound: str
    ester: str | None
    weekly_dose_mg: float
    interval_days: float
    maintenance_dose_mg: float
    front_load_dose_mg: float
    accumulation_ratio: float
    half_life_days: float
    days_saved: float
    weeks_saved: float
    message: str


def calculate_front_load(
    compound: CompoundProfile | None,
    weekly_dose_mg: float,
    interval_days: float = DEFAULT_FRONT_LOAD_INTERVAL_DAYS,
    ester: str | None = None,
    max_ratio: float = DEFAULT_MAX_ACCUMULATION_RATIO,
) -> FrontLoadPlan | None:
    """First dose equal to the steady-state peak, derived analytically.

    ``front_load = pin × R`` where ``pin`` is the maintenance dose per
    injection and ``R`` the accumulation ratio for the injection interval.
    Without a front load steady state takes roughly five half-lives.
    """

    if compound is None:
        return None
    if interval_days <= 0.0 or not math.isfinite(interval_days):
        LOGGER.debug("Invalid front-load interval %r; using %.1f days", interval_days, DEFAULT_FRONT_LOAD_INTERVAL_DAYS)
        interval_days = DEFAULT_FRONT_LOAD_INTERVAL_DAYS
    weekly = max(0.0, float(weekly_dose_mg))
    half_life_hours = compound.half_life_for(ester)
    ratio = accumulation_ratio(half_life_hours, 7.0 / interval_days, max_ratio)
    pin = weekly / 7.0 * interval_days
    front = pin * ratio
    half_life_days = half_life_hours / 24.0
    days_saved = STEADY_STATE_HALF_LIVES * half_life_days
    weeks_saved = days_saved / 7.0
    message = (
        f"Front-load {round(front)}mg to hit peak levels immediately. "
        f"Saves ~{round(weeks_saved)} weeks of ramp-up."
    )
    return FrontLoadPlan(
        compound=compound.id,
        ester=compound.resolved_ester(ester),
        weekly_dose_mg=weekly,
        interval_days=float(interval_days),
        maintenance_dose_mg=pin,
        front_load_dose_mg=front,
        accumulation_ratio=ratio,
        half_life_days=half_life_days,
        days_saved=days_saved,
        weeks_saved=weeks_saved,
        message=message,
    )


__all__ = [
    "FrontLoadPlan",
    "MAX_SERUM_DAYS",
    "SERUM_BACKENDS",
    "SerumOptions",
    "SerumProfile",
    "absorption_rate",
    "calculate_front_load",
    "elimination_factor",
    "simulate_serum",
    "simulation_days",
]
