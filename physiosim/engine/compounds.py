"""
compounds
=========

Static description of the compounds understood by the simulation core.

A :class:`CompoundProfile` is loaded once from the bundled reference assets
(or from whatever table a caller injects) and never mutated afterwards.  Each
profile carries several small named vectors rather than a single flat score
so that the different models can read only the axes they care about:

``toxicity``
    Organ stress per unit load on a 0–10 scale.  Axes are ``hepatic``,
    ``renal``, ``cardiovascular``, ``lipid``, ``neuro``, ``androgenic`` and
    ``erythropoietic``.

``metabolic``
    Conversion behaviour: ``aromatization`` (fraction of substrate available
    to aromatase), ``dht_conversion``, ``diuretic``, ``methyl_estrogen``
    (17α-methylated estrogenic metabolite), ``prolactin`` (19-nor
    progestogenic load) and ``conversion_factor`` (contribution to a total
    testosterone assay).

``benefits``
    Projected-gain weights: ``hypertrophy``, ``strength``, ``fat_loss``,
    ``endurance`` and ``joint``.

``cns``
    ``drive`` and ``fatigue`` used by the CNS classification.

``pathways``
    ``receptor_affinity`` (relative androgen receptor affinity, 0–10),
    ``shbg_binding`` (bindable share of the compound, 0–1) and
    ``shbg_suppression`` (how strongly the compound lowers SHBG, 0–10).

Benefit and risk curves are ordered control points whose dose axis is the
compound's ``curve_basis``: weekly mg for injectables and daily mg for orals.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


ADMINISTRATION_CLASSES = ("injectable", "oral", "ancillary", "support")
ARCHETYPES = ("hypertrophy", "strength", "endurance", "hardener", "support")
CURVE_BASES = ("weekly", "daily")

TOXICITY_AXES = (
    "hepatic",
    "renal",
    "cardiovascular",
    "lipid",
    "neuro",
    "androgenic",
    "erythropoietic",
)
METABOLIC_KEYS = (
    "aromatization",
    "dht_conversion",
    "diuretic",
    "methyl_estrogen",
    "prolactin",
    "conversion_factor",
)
BENEFIT_KEYS = ("hypertrophy", "strength", "fat_loss", "endurance", "joint")
CNS_KEYS = ("drive", "fatigue")
PATHWAY_KEYS = ("receptor_affinity", "shbg_binding", "shbg_suppression")

COMPOUND_FLAGS: FrozenSet[str] = frozenset(
    {
        "anti_catabolic",
        "neurotoxic",
        "cardio_impairing",
        "suppressive",
        "renal_toxic",
        "heavy_bp",
        "nor19",
    }
)

# Ki values are expressed in nM against the androgen receptor.
REFERENCE_COMPOUND = "testosterone"
REFERENCE_KI_NM = 0.9
REFERENCE_AFFINITY = 5.0

COMPOUND_ALIASES: Dict[str, Tuple[str, Optional[str]]] = {
    "test": ("testosterone", None),
    "test_e": ("testosterone", "enanthate"),
    "test_c": ("testosterone", "cypionate"),
    "test_p": ("testosterone", "propionate"),
    "deca": ("nandrolone", "decanoate"),
    "npp": ("nandrolone", "phenylpropionate"),
    "tren": ("trenbolone", None),
    "eq": ("boldenone", "undecylenate"),
    "equipoise": ("boldenone", "undecylenate"),
    "masteron": ("drostanolone", None),
    "mast": ("drostanolone", None),
    "dianabol": ("methandrostenolone", None),
    "dbol": ("methandrostenolone", None),
    "anadrol": ("oxymetholone", None),
    "anavar": ("oxandrolone", None),
    "var": ("oxandrolone", None),
    "winstrol": ("stanozolol", None),
    "winny": ("stanozolol", None),
    "arimidex": ("anastrozole", None),
    "adex": ("anastrozole", None),
}


@dataclass(frozen=True)
class CurvePoint:
    """One control point of a dose-response curve."""

    dose: float
    value: float
    ci: float = 0.0
    tier: str = "unrated"


@dataclass(frozen=True)
class EsterVariant:
    """Formulation variant: active-mass weight and release half-life."""

    name: str
    weight: float
    half_life_hours: float
    is_blend: bool = False


@dataclass(frozen=True)
class SupportProfile:
    """Organ shielding contributed by a support compound per daily mg."""

    hepatic_per_mg: float = 0.0
    renal_per_mg: float = 0.0
    cap: float = 0.35

    @property
    def is_active(self) -> bool:
        return self.hepatic_per_mg > 0.0 or self.renal_per_mg > 0.0


def _frozen(mapping: Mapping[str, float] | None) -> Mapping[str, float]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class CompoundProfile:
    """Immutable pharmacological profile of a single compound."""

    id: str
    name: str
    administration: str = "injectable"
    archetype: str = "hypertrophy"
    half_life_hours: float = 24.0
    default_frequency: float = 1.0
    curve_basis: str = "weekly"
    base_potency: float = 1.0
    esters: Mapping[str, EsterVariant] = field(default_factory=lambda: MappingProxyType({}))
    default_ester: Optional[str] = None
    benefit_curve: Tuple[CurvePoint, ...] = ()
    risk_curve: Tuple[CurvePoint, ...] = ()
    toxicity: Mapping[str, float] = field(default_factory=lambda: _frozen(None))
    metabolic: Mapping[str, float] = field(default_factory=lambda: _frozen(None))
    benefits: Mapping[str, float] = field(default_factory=lambda: _frozen(None))
    cns: Mapping[str, float] = field(default_factory=lambda: _frozen(None))
    pathways: Mapping[str, float] = field(default_factory=lambda: _frozen(None))
    ki: Optional[float] = None
    toxicity_tier: float = 1.0
    support: SupportProfile = field(default_factory=SupportProfile)
    ai_potency: float = 0.0
    flags: FrozenSet[str] = frozenset()

    @property
    def is_oral(self) -> bool:
        return self.administration == "oral"

    @property
    def is_androgen(self) -> bool:
        return self.administration in ("injectable", "oral")

    @property
    def is_support(self) -> bool:
        return self.administration == "support"

    @property
    def is_aromatase_inhibitor(self) -> bool:
        return self.ai_potency > 0.0

    @property
    def aromatization(self) -> float:
        return float(self.metabolic.get("aromatization", 0.0))

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def ester_variant(self, ester: str | None = None) -> EsterVariant | None:
        """Return the requested ester, falling back to the default one."""

        if ester and ester in self.esters:
            return self.esters[ester]
        if ester:
            LOGGER.debug("Unknown ester '%s' for %s; using default", ester, self.id)
        if self.default_ester and self.default_ester in self.esters:
            return self.esters[self.default_ester]
        return None

    def half_life_for(self, ester: str | None = None) -> float:
        variant = self.ester_variant(ester)
        if variant is not None:
            return float(variant.half_life_hours)
        return float(self.half_life_hours)

    def ester_weight(self, ester: str | None = None) -> float:
        variant = self.ester_variant(ester)
        if variant is not None:
            return float(variant.weight)
        return 1.0

    def resolved_ester(self, ester: str | None = None) -> str | None:
        variant = self.ester_variant(ester)
        return variant.name if variant is not None else None


def resolve_compound(name: str) -> Tuple[str, Optional[str]]:
    """Map a user-facing compound name to ``(compound_id, ester)``.

    Names are case-insensitive and whitespace/hyphen tolerant.  Unknown names
    are returned normalised but otherwise untouched so that the core can
    report them as ignored rather than failing.
    """

    token = (name or "").strip().lower().replace("-", "_").replace(" ", "_")
    if token in COMPOUND_ALIASES:
        return COMPOUND_ALIASES[token]
    return token, None


def infer_ki(compound: CompoundProfile, reference: CompoundProfile | None = None) -> Optional[float]:
    """Return an explicit or affinity-inferred Ki in nM.

    Compounds without receptor affinity are non-binders and yield ``None``.
    The inferred value scales the reference compound's Ki by the ratio of
    affinity scores, so doubling affinity halves Ki.
    """

    if compound.ki is not None and compound.ki > 0.0:
        return float(compound.ki)
    affinity = float(compound.pathways.get("receptor_affinity", 0.0))
    if affinity <= 0.0 or not math.isfinite(affinity):
        return None
    reference_ki = REFERENCE_KI_NM
    reference_affinity = REFERENCE_AFFINITY
    if reference is not None:
        if reference.ki is not None and reference.ki > 0.0:
            reference_ki = float(reference.ki)
        reference_affinity = float(reference.pathways.get("receptor_affinity", reference_affinity)) or REFERENCE_AFFINITY
    return reference_ki * reference_affinity / affinity


__all__ = [
    "ADMINISTRATION_CLASSES",
    "ARCHETYPES",
    "BENEFIT_KEYS",
    "CNS_KEYS",
    "COMPOUND_ALIASES",
    "COMPOUND_FLAGS",
    "CURVE_BASES",
    "CompoundProfile",
    "CurvePoint",
    "EsterVariant",
    "METABOLIC_KEYS",
    "PATHWAY_KEYS",
    "REFERENCE_COMPOUND",
    "REFERENCE_KI_NM",
    "SupportProfile",
    "TOXICITY_AXES",
    "infer_ki",
    "resolve_compound",
]
