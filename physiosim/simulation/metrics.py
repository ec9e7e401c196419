"""Cycle-metrics pipeline producing a :class:`SystemicSnapshot`.

Stages, in order:

1. normalize every entry into weekly active and saturation mg;
2. pass the summed saturation through the three-tier saturation curve and
   stamp the shared efficiency ratio onto each load;
3. compute receptor occupancy on first-pass saturation;
4. estimate estradiol with every compound fully free (first pass);
5. solve the SHBG level from that estradiol and derive per-entry free
   fractions;
6. re-run aromatization, gains and organ stress on the free saturation
   (single correction pass).

Receptor occupancy is informational and keeps using first-pass saturation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Sequence, Tuple

from ..engine.compounds import REFERENCE_COMPOUND, CompoundProfile
from ..engine.profile import DEFAULT_PROFILE, UserProfile
from ..engine.regimen import StackEntry
from .advisories import Advisory
from .aromatization import AromatizationKinetics, AromatizationResult
from .dosing import (
    DEFAULT_MAX_ACCUMULATION_RATIO,
    DoseNormalizer,
    NormalizedCompoundLoad,
    SaturationCurve,
    SaturationState,
    apply_efficiency,
)
from .personalization import saturation_capacity
from .receptors import ReceptorCompetitionModel, ReceptorOccupancy
from .shbg import ShbgDynamics, ShbgDynamicsModel
from .systemic import (
    CnsProfile,
    EfficiencyMetrics,
    OrganStress,
    ProjectedGains,
    ProjectedLabs,
    SystemicLoadModel,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleOptions:
    profile: UserProfile | None = None
    max_accumulation_ratio: float = DEFAULT_MAX_ACCUMULATION_RATIO


@dataclass(frozen=True)
class SystemicSnapshot:
    loads: Tuple[NormalizedCompoundLoad, ...]
    saturation: SaturationState
    gains: ProjectedGains
    organs: OrganStress
    labs: ProjectedLabs
    receptors: ReceptorOccupancy
    shbg: ShbgDynamics
    aromatization: AromatizationResult
    first_pass_estradiol: float
    cns: CnsProfile
    efficiency: EfficiencyMetrics
    advisories: Tuple[Advisory, ...] = ()
    ignored: Tuple[str, ...] = ()


def calculate_cycle_metrics(
    stack: Sequence[StackEntry],
    compounds: Mapping[str, CompoundProfile],
    options: CycleOptions | None = None,
) -> SystemicSnapshot:
    """Run the systemic/PK pipeline for ``stack`` against ``compounds``."""

    options = options or CycleOptions()
    profile = (options.profile or DEFAULT_PROFILE).normalized()

    normalizer = DoseNormalizer(options.max_accumulation_ratio)
    raw_loads, ignored = normalizer.normalize_stack(stack, compounds)
    total_saturation = math.fsum(load.saturation_mg for load in raw_loads)
    saturation = SaturationCurve(capacity_scale=saturation_capacity(profile)).evaluate(total_saturation)
    loads = apply_efficiency(raw_loads, saturation.efficiency_ratio)

    receptors = ReceptorCompetitionModel().evaluate(loads, compounds, compounds.get(REFERENCE_COMPOUND))

    kinetics = AromatizationKinetics()
    first_pass = kinetics.evaluate(loads, compounds, profile)
    shbg = ShbgDynamicsModel().evaluate(loads, compounds, first_pass.estradiol)
    corrected = kinetics.evaluate(loads, compounds, profile, shbg.free_fractions)

    systemic = SystemicLoadModel().evaluate(
        loads,
        compounds,
        profile,
        free_fractions=shbg.free_fractions,
        estradiol=corrected.estradiol,
        shbg_level=shbg.level,
        total_saturation_mg=saturation.total_saturation_mg,
    )
    LOGGER.debug(
        "Cycle metrics: %.1f mg saturation, efficiency %.3f, SHBG %.1f, E2 %.1f -> %.1f",
        saturation.total_saturation_mg,
        saturation.efficiency_ratio,
        shbg.level,
        first_pass.estradiol,
        corrected.estradiol,
    )
    return SystemicSnapshot(
        loads=loads,
        saturation=saturation,
        gains=systemic.gains,
        organs=systemic.organs,
        labs=systemic.labs,
        receptors=receptors,
        shbg=shbg,
        aromatization=corrected,
        first_pass_estradiol=first_pass.estradiol,
        cns=systemic.cns,
        efficiency=systemic.efficiency,
        advisories=systemic.advisories,
        ignored=ignored,
    )


__all__ = ["CycleOptions", "SystemicSnapshot", "calculate_cycle_metrics"]
