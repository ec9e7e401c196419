"""Reference tables bundled with the simulation package."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

from ...engine.reference import ReferenceTables, build_reference_tables

LOGGER = logging.getLogger(__name__)

COMPOUNDS_ASSET = "compounds.json"
PAIRS_ASSET = "interaction_pairs.json"
GOALS_ASSET = "goal_presets.json"

__all__ = [
    "load_compound_data",
    "load_goal_data",
    "load_pair_data",
    "load_reference_tables",
]


def _read_json_asset(name: str) -> Dict[str, Any]:
    package = resources.files(__name__)
    with resources.as_file(package.joinpath(name)) as asset_path:
        with asset_path.open("r", encoding="utf-8") as handle:
            return json.load(handle)


def load_compound_data() -> Dict[str, Any]:
    """Return the raw compound table keyed by compound id."""

    return _read_json_asset(COMPOUNDS_ASSET)


def load_pair_data() -> Dict[str, Any]:
    return _read_json_asset(PAIRS_ASSET)


def load_goal_data() -> Dict[str, Any]:
    return _read_json_asset(GOALS_ASSET)


@lru_cache(maxsize=1)
def load_reference_tables() -> ReferenceTables:
    """Parse the bundled JSON tables once and return them frozen."""

    tables = build_reference_tables(
        compounds=load_compound_data(),
        pairs=load_pair_data(),
        goals=load_goal_data(),
    )
    LOGGER.info(
        "Loaded reference tables: %d compounds, %d pairs, %d goals",
        len(tables.compounds),
        len(tables.pairs),
        len(tables.goals),
    )
    return tables
