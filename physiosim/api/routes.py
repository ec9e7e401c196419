"""FastAPI router wiring the simulation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ..engine.compounds import resolve_compound
from ..simulation import CycleOptions, SimulationEngine
from . import schemas


@dataclass
class ServiceRegistry:
    """Container bundling service layer dependencies for the API."""

    simulation_engine: SimulationEngine = field(default_factory=SimulationEngine)

    def configure(self, *, simulation_engine: SimulationEngine | None = None) -> None:
        if simulation_engine is not None:
            self.simulation_engine = simulation_engine


services = ServiceRegistry()


def configure_services(*, simulation_engine: SimulationEngine | None = None) -> None:
    """Configure the shared service registry used by API routes."""

    services.configure(simulation_engine=simulation_engine)


def get_services() -> ServiceRegistry:
    return services


def get_simulation_engine(svc: ServiceRegistry = Depends(get_services)) -> SimulationEngine:
    return svc.simulation_engine


def _http_error(status_code: int, code: str, message: str, *, context: Dict[str, object] | None = None) -> HTTPException:
    payload = schemas.ErrorPayload(code=code, message=message, context=context or {})
    return HTTPException(status_code=status_code, detail=payload.model_dump())


router = APIRouter()


@router.get("/compounds", response_model=schemas.CompoundListResponse)
def list_compounds(engine: SimulationEngine = Depends(get_simulation_engine)) -> schemas.CompoundListResponse:
    compounds = [schemas.CompoundSummary.from_domain(engine.tables.compounds[cid]) for cid in sorted(engine.tables.compounds)]
    return schemas.CompoundListResponse(compounds=compounds)


@router.get("/goals", response_model=schemas.GoalListResponse)
def list_goals(engine: SimulationEngine = Depends(get_simulation_engine)) -> schemas.GoalListResponse:
    goals = [schemas.GoalSummary.from_domain(engine.tables.goals[key]) for key in sorted(engine.tables.goals)]
    return schemas.GoalListResponse(goals=goals)


@router.post("/evaluate", response_model=schemas.EvaluateResponse)
def evaluate_stack(
    request: schemas.EvaluateRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> schemas.EvaluateResponse:
    goal_key = request.goal.strip().lower() if request.goal else None
    if goal_key and engine.tables.goal(goal_key) is None:
        raise _http_error(
            status.HTTP_404_NOT_FOUND,
            "goal_not_found",
            f"Goal preset '{request.goal}' is not defined.",
            context={"goal": request.goal, "available": sorted(engine.tables.goals)},
        )
    profile = request.profile.to_domain() if request.profile is not None else None
    result = engine.evaluate(
        schemas.build_stack(request.stack),
        profile=profile,
        goal=goal_key,
        sensitivities=request.sensitivities,
        evidence_blend=request.evidence_blend,
    )
    return schemas.EvaluateResponse.from_domain(result)


@router.post("/serum", response_model=schemas.SerumResponse)
def simulate_serum(
    request: schemas.SerumRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> schemas.SerumResponse:
    front_load: Dict[str, float] = {}
    for key, value in request.front_load.items():
        front_load[key if ":" in key else resolve_compound(key)[0]] = value
    options = engine.serum_options(
        duration_days=request.duration_days,
        backend=request.backend,
        front_load=front_load,
    )
    profile = engine.simulate_serum(schemas.build_stack(request.stack), options)
    return schemas.SerumResponse.from_domain(profile)


@router.post("/cycle-metrics", response_model=schemas.CycleMetricsResponse)
def cycle_metrics(
    request: schemas.CycleMetricsRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> schemas.CycleMetricsResponse:
    options = CycleOptions(
        profile=request.profile.to_domain() if request.profile is not None else None,
        max_accumulation_ratio=engine.config.max_accumulation_ratio,
    )
    snapshot = engine.calculate_cycle_metrics(schemas.build_stack(request.stack), options)
    return schemas.CycleMetricsResponse.from_domain(snapshot)


@router.post("/front-load", response_model=schemas.FrontLoadResponse)
def front_load(
    request: schemas.FrontLoadRequest,
    engine: SimulationEngine = Depends(get_simulation_engine),
) -> schemas.FrontLoadResponse:
    plan = engine.calculate_front_load(
        request.compound,
        request.weekly_dose_mg,
        interval_days=request.interval_days,
        ester=request.ester,
    )
    if plan is None:
        raise _http_error(
            status.HTTP_404_NOT_FOUND,
            "compound_not_found",
            f"Compound '{request.compound}' is not in the reference tables.",
            context={"compound": request.compound},
        )
    return schemas.FrontLoadResponse.from_domain(plan)


api_router = router

__all__ = [
    "ServiceRegistry",
    "api_router",
    "configure_services",
    "get_services",
    "get_simulation_engine",
    "router",
]
