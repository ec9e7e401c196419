"""Mass-action competition for a single shared receptor site."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from ..engine.compounds import CompoundProfile, infer_ki
from .dosing import NormalizedCompoundLoad

BINDING_SCALE_MG = 1000.0


@dataclass(frozen=True)
class ReceptorOccupancy:
    """Per-entry occupancy fractions plus the unoccupied remainder."""

    occupancy: Mapping[str, float]
    binding_terms: Mapping[str, float]
    ki: Mapping[str, float]
    free_fraction: float = 1.0

    @property
    def total_occupancy(self) -> float:
        return math.fsum(self.occupancy.values())


class ReceptorCompetitionModel:
    """``occupancy_i = b_i / (1 + Σ b_j)`` with ``b_i = (saturation_i/scale)/Ki_i``.

    Compounds without a receptor affinity are skipped.  The denominator's
    leading 1 keeps the summed occupancy strictly below one.
    """

    def __init__(self, scale_mg: float = BINDING_SCALE_MG) -> None:
        self.scale_mg = scale_mg if scale_mg > 0.0 else BINDING_SCALE_MG

    def evaluate(
        self,
        loads: Sequence[NormalizedCompoundLoad],
        compounds: Mapping[str, CompoundProfile],
        reference: CompoundProfile | None = None,
    ) -> ReceptorOccupancy:
        terms: Dict[str, float] = {}
        kis: Dict[str, float] = {}
        for load in loads:
            compound = compounds.get(load.compound_id)
            if compound is None or load.saturation_mg <= 0.0:
                continue
            ki = infer_ki(compound, reference)
            if ki is None:
                continue
            kis[load.key] = ki
            terms[load.key] = (load.saturation_mg / self.scale_mg) / ki

        if not terms:
            return ReceptorOccupancy(occupancy={}, binding_terms={}, ki={}, free_fraction=1.0)

        denominator = 1.0 + math.fsum(terms.values())
        occupancy = {key: term / denominator for key, term in terms.items()}
        free_fraction = max(0.0, 1.0 - math.fsum(occupancy.values()))
        return ReceptorOccupancy(
            occupancy=occupancy,
            binding_terms=terms,
            ki=kis,
            free_fraction=free_fraction,
        )


__all__ = ["BINDING_SCALE_MG", "ReceptorCompetitionModel", "ReceptorOccupancy"]
