"""User physiological profile consumed by the personalization layer."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

LOGGER = logging.getLogger(__name__)

GENDERS = ("male", "female")
RECEPTOR_SENSITIVITIES = ("low", "normal", "hyper")
ENZYME_ACTIVITIES = ("low", "moderate", "high")
NEURO_SENSITIVITIES = ("low", "moderate", "high")
TRAINING_STYLES = ("general", "powerlifting", "bodybuilding", "crossfit")
DIET_STATES = ("maintenance", "cutting", "bulking")
EXPERIENCE_TIERS = ("none", "test_only", "multi_compound", "blast_cruise")

_VALUE_ALIASES = {
    "hyper_responder": "hyper",
    "low_responder": "low",
    "average": "normal",
    "medium": "moderate",
}

REFERENCE_LEAN_MASS_KG = 75.0


def normalize_choice(value: Any, choices: Tuple[str, ...], default: str) -> str:
    """Return ``value`` if it is one of ``choices`` (after aliasing) else ``default``."""

    token = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
    token = _VALUE_ALIASES.get(token, token)
    if token in choices:
        return token
    if token == "normal" and default in choices:
        return default
    if token:
        LOGGER.debug("Unrecognised profile value '%s'; using '%s'", value, default)
    return default


@dataclass(frozen=True)
class UserProfile:
    """Read-only profile describing the person a regimen is simulated for."""

    age: float = 30.0
    bodyweight_kg: float = 90.0
    body_fat_pct: float = 15.0
    gender: str = "male"
    receptor_sensitivity: str = "normal"
    enzyme_activity: str = "moderate"
    neuro_sensitivity: str = "moderate"
    training_style: str = "general"
    diet_state: str = "maintenance"
    experience: str = "test_only"

    @property
    def lean_mass_kg(self) -> float:
        body_fat = max(0.0, min(60.0, float(self.body_fat_pct)))
        return max(1.0, float(self.bodyweight_kg)) * (1.0 - body_fat / 100.0)

    def normalized(self) -> "UserProfile":
        """Return a copy with every categorical axis mapped onto a known value."""

        return UserProfile(
            age=_coerce_float(self.age, 30.0),
            bodyweight_kg=_coerce_float(self.bodyweight_kg, 90.0),
            body_fat_pct=_coerce_float(self.body_fat_pct, 15.0),
            gender=normalize_choice(self.gender, GENDERS, "male"),
            receptor_sensitivity=normalize_choice(self.receptor_sensitivity, RECEPTOR_SENSITIVITIES, "normal"),
            enzyme_activity=normalize_choice(self.enzyme_activity, ENZYME_ACTIVITIES, "moderate"),
            neuro_sensitivity=normalize_choice(self.neuro_sensitivity, NEURO_SENSITIVITIES, "moderate"),
            training_style=normalize_choice(self.training_style, TRAINING_STYLES, "general"),
            diet_state=normalize_choice(self.diet_state, DIET_STATES, "maintenance"),
            experience=normalize_choice(self.experience, EXPERIENCE_TIERS, "test_only"),
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "UserProfile":
        """Build a profile from a loose mapping, ignoring unknown keys."""

        known = {item.name for item in fields(cls)}
        values = {key: value for key, value in (payload or {}).items() if key in known and value is not None}
        return cls(**values).normalized()


def _coerce_float(value: Any, default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if math.isfinite(parsed) else default


DEFAULT_PROFILE = UserProfile()


__all__ = [
    "DEFAULT_PROFILE",
    "DIET_STATES",
    "ENZYME_ACTIVITIES",
    "EXPERIENCE_TIERS",
    "GENDERS",
    "NEURO_SENSITIVITIES",
    "RECEPTOR_SENSITIVITIES",
    "REFERENCE_LEAN_MASS_KG",
    "TRAINING_STYLES",
    "UserProfile",
    "normalize_choice",
]
