"""Parsing of the static reference tables into immutable domain objects.

The simulation core never reads files.  A collaborator (normally
:func:`physiosim.simulation.assets.load_reference_tables`) hands raw mappings
to :func:`build_reference_tables`, which validates their shape and freezes
them.  Structural problems raise :class:`ReferenceDataError`; softer curve
invariants (start at the origin, monotone risk) are reported by
:func:`find_curve_violations` so that audits can list every offender at once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from .compounds import (
    ADMINISTRATION_CLASSES,
    ARCHETYPES,
    COMPOUND_FLAGS,
    CURVE_BASES,
    REFERENCE_COMPOUND,
    CompoundProfile,
    CurvePoint,
    EsterVariant,
    SupportProfile,
)
from .interactions import (
    DEFAULT_EC50,
    DEFAULT_HILL_N,
    DIMENSIONS,
    EvidenceWeights,
    GoalPreset,
    HillParameters,
    InteractionPair,
    InteractionTable,
)

LOGGER = logging.getLogger(__name__)


class ReferenceDataError(ValueError):
    """Raised when a reference table cannot be interpreted."""


def _as_float(value: Any, context: str, *, default: float | None = None) -> float:
    if value is None and default is not None:
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ReferenceDataError(f"{context}: expected a number, got {value!r}") from exc
    if not math.isfinite(parsed):
        raise ReferenceDataError(f"{context}: value must be finite")
    return parsed


def _float_map(raw: Any, context: str) -> Mapping[str, float]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(f"{context}: expected an object")
    return MappingProxyType({str(key): _as_float(value, f"{context}.{key}") for key, value in raw.items()})


def parse_curve(raw: Any, context: str) -> Tuple[CurvePoint, ...]:
    """Parse ``[[dose, value, ci, tier], ...]`` or a list of point objects."""

    if not raw:
        return ()
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise ReferenceDataError(f"{context}: expected a list of points")
    points: List[CurvePoint] = []
    for index, item in enumerate(raw):
        where = f"{context}[{index}]"
        if isinstance(item, Mapping):
            dose = item.get("dose")
            value = item.get("value")
            ci = item.get("ci", 0.0)
            tier = item.get("tier", "unrated")
        elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)) and len(item) >= 2:
            dose, value = item[0], item[1]
            ci = item[2] if len(item) > 2 else 0.0
            tier = item[3] if len(item) > 3 else "unrated"
        else:
            raise ReferenceDataError(f"{where}: malformed curve point {item!r}")
        point = CurvePoint(
            dose=_as_float(dose, f"{where}.dose"),
            value=_as_float(value, f"{where}.value"),
            ci=_as_float(ci, f"{where}.ci", default=0.0),
            tier=str(tier or "unrated"),
        )
        if points and point.dose <= points[-1].dose:
            raise ReferenceDataError(f"{where}: doses must be strictly increasing")
        points.append(point)
    return tuple(points)


def parse_compound(compound_id: str, raw: Mapping[str, Any]) -> CompoundProfile:
    context = f"compounds.{compound_id}"
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(f"{context}: expected an object")
    administration = str(raw.get("administration", "injectable")).lower()
    if administration not in ADMINISTRATION_CLASSES:
        raise ReferenceDataError(f"{context}.administration: unknown class '{administration}'")
    archetype = str(raw.get("archetype", "hypertrophy")).lower()
    if archetype not in ARCHETYPES:
        raise ReferenceDataError(f"{context}.archetype: unknown archetype '{archetype}'")
    curve_basis = str(raw.get("curve_basis", "daily" if administration == "oral" else "weekly")).lower()
    if curve_basis not in CURVE_BASES:
        raise ReferenceDataError(f"{context}.curve_basis: expected one of {CURVE_BASES}")

    esters = {}
    for name, ester_raw in (raw.get("esters") or {}).items():
        ester_context = f"{context}.esters.{name}"
        if not isinstance(ester_raw, Mapping):
            raise ReferenceDataError(f"{ester_context}: expected an object")
        esters[str(name)] = EsterVariant(
            name=str(name),
            weight=_as_float(ester_raw.get("weight"), f"{ester_context}.weight", default=1.0),
            half_life_hours=_as_float(ester_raw.get("half_life_hours"), f"{ester_context}.half_life_hours"),
            is_blend=bool(ester_raw.get("is_blend", False)),
        )
    default_ester = raw.get("default_ester")
    if default_ester is not None and str(default_ester) not in esters:
        raise ReferenceDataError(f"{context}.default_ester: '{default_ester}' is not a listed ester")

    flags = frozenset(str(flag) for flag in raw.get("flags") or ())
    unknown_flags = flags - COMPOUND_FLAGS
    if unknown_flags:
        LOGGER.debug("Ignoring unknown flags %s on %s", sorted(unknown_flags), compound_id)
        flags = flags & COMPOUND_FLAGS

    support_raw = raw.get("support") or {}
    support = SupportProfile(
        hepatic_per_mg=_as_float(support_raw.get("hepatic_per_mg"), f"{context}.support.hepatic_per_mg", default=0.0),
        renal_per_mg=_as_float(support_raw.get("renal_per_mg"), f"{context}.support.renal_per_mg", default=0.0),
        cap=_as_float(support_raw.get("cap"), f"{context}.support.cap", default=0.35),
    )
    ki_raw = raw.get("ki")
    default_frequency = 7.0 if administration == "oral" else 1.0

    return CompoundProfile(
        id=compound_id,
        name=str(raw.get("name", compound_id)),
        administration=administration,
        archetype=archetype,
        half_life_hours=_as_float(raw.get("half_life_hours"), f"{context}.half_life_hours", default=24.0),
        default_frequency=_as_float(raw.get("default_frequency"), f"{context}.default_frequency", default=default_frequency),
        curve_basis=curve_basis,
        base_potency=_as_float(raw.get("base_potency"), f"{context}.base_potency", default=1.0),
        esters=MappingProxyType(esters),
        default_ester=str(default_ester) if default_ester is not None else None,
        benefit_curve=parse_curve(raw.get("benefit_curve"), f"{context}.benefit_curve"),
        risk_curve=parse_curve(raw.get("risk_curve"), f"{context}.risk_curve"),
        toxicity=_float_map(raw.get("toxicity"), f"{context}.toxicity"),
        metabolic=_float_map(raw.get("metabolic"), f"{context}.metabolic"),
        benefits=_float_map(raw.get("benefits"), f"{context}.benefits"),
        cns=_float_map(raw.get("cns"), f"{context}.cns"),
        pathways=_float_map(raw.get("pathways"), f"{context}.pathways"),
        ki=_as_float(ki_raw, f"{context}.ki") if ki_raw is not None else None,
        toxicity_tier=_as_float(raw.get("toxicity_tier"), f"{context}.toxicity_tier", default=1.0),
        support=support,
        ai_potency=_as_float(raw.get("ai_potency"), f"{context}.ai_potency", default=0.0),
        flags=flags,
    )


def parse_pair(pair_id: str, raw: Mapping[str, Any]) -> InteractionPair:
    context = f"pairs.{pair_id}"
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(f"{context}: expected an object")
    compounds = raw.get("compounds")
    if not isinstance(compounds, Sequence) or isinstance(compounds, str) or len(compounds) != 2:
        raise ReferenceDataError(f"{context}.compounds: expected exactly two compound ids")
    compound_a, compound_b = str(compounds[0]), str(compounds[1])
    if compound_a == compound_b:
        raise ReferenceDataError(f"{context}.compounds: a pair needs two distinct compounds")

    synergy = _float_map(raw.get("synergy"), f"{context}.synergy")
    penalties = _float_map(raw.get("penalties"), f"{context}.penalties")
    for dimension in (*synergy, *penalties):
        if dimension not in DIMENSIONS:
            raise ReferenceDataError(f"{context}: unknown dimension '{dimension}'")

    weights_raw = raw.get("dimension_weights") or {}
    dimension_weights = MappingProxyType(
        {str(compound): _float_map(values, f"{context}.dimension_weights.{compound}") for compound, values in weights_raw.items()}
    )
    model = raw.get("dose_model") or {}
    hill = HillParameters(
        d50_a=_as_float(model.get("d50_a"), f"{context}.dose_model.d50_a", default=DEFAULT_EC50),
        d50_b=_as_float(model.get("d50_b"), f"{context}.dose_model.d50_b", default=DEFAULT_EC50),
        n=_as_float(model.get("n"), f"{context}.dose_model.n", default=DEFAULT_HILL_N),
    )
    evidence_raw = raw.get("evidence") or {}
    evidence = EvidenceWeights(
        clinical=_as_float(evidence_raw.get("clinical"), f"{context}.evidence.clinical", default=0.5),
        anecdote=_as_float(evidence_raw.get("anecdote"), f"{context}.evidence.anecdote", default=0.5),
    )
    dose_ranges = {}
    for compound, bounds in (raw.get("dose_ranges") or {}).items():
        if not isinstance(bounds, Sequence) or isinstance(bounds, str) or len(bounds) != 2:
            raise ReferenceDataError(f"{context}.dose_ranges.{compound}: expected [min, max]")
        low = _as_float(bounds[0], f"{context}.dose_ranges.{compound}[0]")
        high = _as_float(bounds[1], f"{context}.dose_ranges.{compound}[1]")
        dose_ranges[str(compound)] = (min(low, high), max(low, high))

    return InteractionPair(
        id=pair_id,
        compound_a=compound_a,
        compound_b=compound_b,
        synergy=synergy,
        penalties=penalties,
        dimension_weights=dimension_weights,
        hill=hill,
        evidence=evidence,
        dose_ranges=MappingProxyType(dose_ranges),
        default_doses=_float_map(raw.get("default_doses"), f"{context}.default_doses"),
        description=str(raw.get("description", "")),
    )


def parse_goal(key: str, raw: Mapping[str, Any]) -> GoalPreset:
    context = f"goals.{key}"
    if not isinstance(raw, Mapping):
        raise ReferenceDataError(f"{context}: expected an object")
    benefit = _float_map(raw.get("benefit"), f"{context}.benefit")
    risk = _float_map(raw.get("risk"), f"{context}.risk")
    for dimension in (*benefit, *risk):
        if dimension not in DIMENSIONS:
            raise ReferenceDataError(f"{context}: unknown dimension '{dimension}'")
    return GoalPreset(key=key, label=str(raw.get("label", key)), benefit=benefit, risk=risk)


@dataclass(frozen=True)
class ReferenceTables:
    """Immutable bundle of compound, interaction and goal tables."""

    compounds: Mapping[str, CompoundProfile] = field(default_factory=lambda: MappingProxyType({}))
    pairs: InteractionTable = field(default_factory=InteractionTable)
    goals: Mapping[str, GoalPreset] = field(default_factory=lambda: MappingProxyType({}))

    def compound(self, compound_id: str) -> CompoundProfile | None:
        return self.compounds.get(compound_id)

    def goal(self, key: str | None) -> GoalPreset | None:
        if not key:
            return None
        return self.goals.get(key)

    @property
    def reference_compound(self) -> CompoundProfile | None:
        return self.compounds.get(REFERENCE_COMPOUND)


def build_reference_tables(
    compounds: Mapping[str, Any] | None = None,
    pairs: Mapping[str, Any] | None = None,
    goals: Mapping[str, Any] | None = None,
) -> ReferenceTables:
    """Validate raw mappings and return frozen :class:`ReferenceTables`."""

    parsed_compounds = {str(cid): parse_compound(str(cid), raw) for cid, raw in (compounds or {}).items()}
    parsed_pairs = {str(pid): parse_pair(str(pid), raw) for pid, raw in (pairs or {}).items()}
    for pair in parsed_pairs.values():
        missing = [cid for cid in (pair.compound_a, pair.compound_b) if cid not in parsed_compounds]
        if missing:
            LOGGER.debug("Pair %s references unknown compounds %s", pair.id, missing)
    parsed_goals = {str(key): parse_goal(str(key), raw) for key, raw in (goals or {}).items()}
    return ReferenceTables(
        compounds=MappingProxyType(parsed_compounds),
        pairs=InteractionTable(parsed_pairs),
        goals=MappingProxyType(parsed_goals),
    )


def find_curve_violations(compounds: Iterable[CompoundProfile]) -> List[str]:
    """List compounds whose curves break the origin or monotone-risk rules."""

    problems: List[str] = []
    for compound in compounds:
        for label, curve in (("benefit", compound.benefit_curve), ("risk", compound.risk_curve)):
            if not curve:
                continue
            first = curve[0]
            if first.dose != 0.0 or first.value != 0.0:
                problems.append(f"{compound.id}.{label}: curve does not start at (0, 0)")
        for previous, current in zip(compound.risk_curve, compound.risk_curve[1:]):
            if current.value < previous.value:
                problems.append(
                    f"{compound.id}.risk: value drops between {previous.dose:g} and {current.dose:g} mg"
                )
    return problems


__all__ = [
    "ReferenceDataError",
    "ReferenceTables",
    "build_reference_tables",
    "find_curve_violations",
    "parse_compound",
    "parse_curve",
    "parse_goal",
    "parse_pair",
]
