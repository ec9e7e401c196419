"""Configuration helpers for the simulation engine and service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Tuple

import math
import os

SERUM_BACKEND_CHOICES = ("discrete", "scipy")


def _parse_float(raw: str | None, default: float, *, minimum: float | None = None) -> float:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed):
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


def _parse_ratio(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return default
    if parsed <= 0.0:
        return 0.0
    if parsed >= 1.0:
        return 1.0
    return parsed


@dataclass(slots=True)
class EngineConfig:
    """Runtime tuning for :class:`~physiosim.simulation.engine.SimulationEngine`.

    Every field can be overridden from the environment with the ``PHYSIOSIM_``
    prefix, e.g. ``PHYSIOSIM_SERUM_BACKEND=scipy`` or
    ``PHYSIOSIM_SERUM_STEP_HOURS=2``.  Malformed values are ignored and the
    default is kept.
    """

    serum_step_hours: float = 4.0
    serum_min_days: float = 28.0
    serum_max_days: float = 140.0
    serum_half_life_multiple: float = 6.0
    serum_backend: str = "discrete"
    max_accumulation_ratio: float = 6.0
    evidence_blend: float = 0.4
    default_goal: str = "balanced"

    def __post_init__(self) -> None:
        if self.serum_min_days > self.serum_max_days:
            self.serum_min_days, self.serum_max_days = self.serum_max_days, self.serum_min_days
        backend = (self.serum_backend or "discrete").strip().lower()
        self.serum_backend = backend if backend in SERUM_BACKEND_CHOICES else "discrete"

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "PHYSIOSIM_",
    ) -> "EngineConfig":
        """Create a configuration object from environment variables."""

        env = env if env is not None else os.environ
        defaults = cls()
        return cls(
            serum_step_hours=_parse_float(
                env.get(f"{prefix}SERUM_STEP_HOURS"), defaults.serum_step_hours, minimum=0.25
            ),
            serum_min_days=_parse_float(env.get(f"{prefix}SERUM_MIN_DAYS"), defaults.serum_min_days, minimum=1.0),
            serum_max_days=_parse_float(env.get(f"{prefix}SERUM_MAX_DAYS"), defaults.serum_max_days, minimum=1.0),
            serum_half_life_multiple=_parse_float(
                env.get(f"{prefix}SERUM_HALF_LIFE_MULTIPLE"), defaults.serum_half_life_multiple, minimum=1.0
            ),
            serum_backend=env.get(f"{prefix}SERUM_BACKEND", defaults.serum_backend),
            max_accumulation_ratio=_parse_float(
                env.get(f"{prefix}MAX_ACCUMULATION_RATIO"), defaults.max_accumulation_ratio, minimum=1.0
            ),
            evidence_blend=_parse_ratio(env.get(f"{prefix}EVIDENCE_BLEND"), defaults.evidence_blend),
            default_goal=(env.get(f"{prefix}DEFAULT_GOAL") or defaults.default_goal).strip().lower(),
        )


@dataclass(slots=True)
class ServiceConfig:
    """HTTP service settings read by :mod:`physiosim.main`."""

    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ServiceConfig":
        env = env if env is not None else os.environ
        raw = env.get("CORS_ORIGINS", "*")
        origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
        return cls(cors_origins=origins or ("*",))


DEFAULT_ENGINE_CONFIG = EngineConfig.from_env()
DEFAULT_SERVICE_CONFIG = ServiceConfig.from_env()
