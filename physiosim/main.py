"""FastAPI application entrypoint for the physiosim service."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import configure_services, router as api_router
from .config import DEFAULT_ENGINE_CONFIG, DEFAULT_SERVICE_CONFIG
from .simulation import SimulationEngine


API_DESCRIPTION = """
The physiosim API exposes a personalized pharmacokinetic / pharmacodynamic
simulation engine.  The service exposes endpoints to:

* score a regimen's benefit, risk and pairwise interactions (`/evaluate`)
* simulate serum trajectories over time (`/serum`)
* compute the systemic snapshot: saturation, receptors, SHBG, estradiol,
  organ stress and projected labs (`/cycle-metrics`)
* plan a front-loaded first injection (`/front-load`)
* list the bundled reference compounds and goal presets (`/compounds`, `/goals`)

Use the OpenAPI schema for complete request/response examples.
"""


app = FastAPI(title="physiosim API", description=API_DESCRIPTION, version=__version__)


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(DEFAULT_SERVICE_CONFIG.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


simulation_engine = SimulationEngine(config=DEFAULT_ENGINE_CONFIG)
configure_services(simulation_engine=simulation_engine)


app.include_router(api_router)


@app.get("/")
def read_root() -> dict[str, str]:
    """Basic health check."""

    return {"status": "ok", "version": __version__}


@app.get("/health")
def health() -> dict[str, str]:
    """Alias of :func:`read_root` for uptime monitors."""

    return {"status": "ok", "version": __version__}


__all__ = ["app"]
