"""Qualitative advisories attached to simulation results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

LEVELS = ("info", "warning", "high", "critical")


@dataclass(frozen=True)
class Advisory:
    """A human-readable note raised by a fixed threshold predicate."""

    code: str
    level: str
    message: str
    category: str = "safety"


def dedupe(advisories: Iterable[Advisory]) -> Tuple[Advisory, ...]:
    """Drop repeated codes while keeping the first occurrence's position."""

    seen: set[str] = set()
    unique: List[Advisory] = []
    for advisory in advisories:
        if advisory.code in seen:
            continue
        seen.add(advisory.code)
        unique.append(advisory)
    return tuple(unique)


CARDIO_CAPACITY = "cardio_capacity"
HEPATOTOXICITY_SYNERGY = "hepatotoxicity_synergy"
KIDNEY_STRESS = "kidney_stress"
NOR19_STACKING = "nor19_stacking"
NO_AROMATIZING_BASE = "no_aromatizing_base"
ORGAN_CRITICAL = "organ_critical"
LAB_PREFIX = "lab_"


__all__ = [
    "Advisory",
    "CARDIO_CAPACITY",
    "HEPATOTOXICITY_SYNERGY",
    "KIDNEY_STRESS",
    "LAB_PREFIX",
    "LEVELS",
    "NOR19_STACKING",
    "NO_AROMATIZING_BASE",
    "ORGAN_CRITICAL",
    "dedupe",
]
