"""API package exposing FastAPI routers and schemas."""

from .routes import api_router, configure_services, get_services, get_simulation_engine, router

__all__ = ["api_router", "configure_services", "get_services", "get_simulation_engine", "router"]
