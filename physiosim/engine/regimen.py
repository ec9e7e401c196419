"""Regimen inputs and the dosing-frequency parser."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

from .compounds import resolve_compound

FREQUENCY_TABLE: Dict[str, float] = {
    "ED": 7.0,
    "QD": 7.0,
    "EOD": 3.5,
    "QW": 1.0,
    "2X/WK": 2.0,
    "3X/WK": 3.0,
    "3.5X/WK": 3.5,
    "Q3D": 7.0 / 3.0,
    "Q4D": 7.0 / 4.0,
}


def parse_frequency(value: float | int | str | None) -> float:
    """Return doses per week for a numeric or free-text frequency.

    Numbers are taken as doses per week (negative values clamp to zero).
    Text tokens are looked up in :data:`FREQUENCY_TABLE`; phrases containing
    ``TWICE``, ``WEEKLY`` or ``DAILY`` are understood as well.  Empty input
    and unknown tokens mean once a week.
    """

    if not value:
        return 1.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = float(value)
        return max(parsed, 0.0) if math.isfinite(parsed) else 1.0
    key = str(value).strip().upper()
    if key in FREQUENCY_TABLE:
        return FREQUENCY_TABLE[key]
    if "TWICE" in key:
        return 2.0
    if "WEEKLY" in key:
        return 1.0
    if "DAILY" in key:
        return 7.0
    try:
        parsed = float(key)
    except ValueError:
        return 1.0
    return max(parsed, 0.0) if math.isfinite(parsed) else 1.0


@dataclass(frozen=True)
class StackEntry:
    """A single compound in a regimen.

    ``dose`` is mg per administration and ``frequency`` is administrations per
    week.  ``frequency`` is ``None`` when the compound's default schedule
    applies (daily for orals, weekly for depot injectables).
    """

    compound: str
    dose: float
    frequency: Optional[float] = None
    ester: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.compound}:{self.ester}" if self.ester else self.compound

    @classmethod
    def create(
        cls,
        compound: str,
        dose: float,
        frequency: float | int | str | None = None,
        ester: str | None = None,
    ) -> "StackEntry":
        """Resolve aliases and parse the frequency into doses per week."""

        compound_id, alias_ester = resolve_compound(compound)
        try:
            parsed_dose = float(dose)
        except (TypeError, ValueError):
            parsed_dose = 0.0
        if not math.isfinite(parsed_dose):
            parsed_dose = 0.0
        parsed_frequency = None
        if frequency is not None and frequency != "":
            parsed_frequency = parse_frequency(frequency)
        chosen_ester = (ester or "").strip().lower() or alias_ester
        return cls(
            compound=compound_id,
            dose=max(0.0, parsed_dose),
            frequency=parsed_frequency,
            ester=chosen_ester,
        )


__all__ = ["FREQUENCY_TABLE", "StackEntry", "parse_frequency"]
