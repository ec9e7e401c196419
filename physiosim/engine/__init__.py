"""
physiosim.engine
================

Static domain primitives for the simulation core.  This package holds the
immutable description of compounds, interaction pairs, goal presets and user
profiles together with the helpers that turn raw reference tables into those
objects.  Nothing in here performs numerical modelling; the models live in
:mod:`physiosim.simulation` and receive these objects as injected, read-only
inputs so that the same tables can be shared safely between concurrent
callers.

Compound names arriving from users are normalised through
:func:`compounds.resolve_compound`, which understands common street aliases
(``deca``, ``npp``, ``eq``, ``dbol`` …) and maps them onto a canonical id plus
an optional ester.  Dosing frequency is normalised once at the same boundary
by :func:`regimen.parse_frequency`, so the numerical pipeline only ever sees
doses per week.
"""

from .compounds import CompoundProfile, CurvePoint, EsterVariant, infer_ki, resolve_compound  # noqa: F401
from .interactions import GoalPreset, InteractionPair, InteractionTable  # noqa: F401
from .profile import DEFAULT_PROFILE, UserProfile  # noqa: F401
from .reference import ReferenceDataError, ReferenceTables, build_reference_tables  # noqa: F401
from .regimen import StackEntry, parse_frequency  # noqa: F401

__all__ = [
    "CompoundProfile",
    "CurvePoint",
    "DEFAULT_PROFILE",
    "EsterVariant",
    "GoalPreset",
    "InteractionPair",
    "InteractionTable",
    "ReferenceDataError",
    "ReferenceTables",
    "StackEntry",
    "UserProfile",
    "build_reference_tables",
    "infer_ki",
    "parse_frequency",
    "resolve_compound",
]
