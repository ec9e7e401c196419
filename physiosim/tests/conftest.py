import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Mapping

import pytest

from physiosim.config import EngineConfig
from physiosim.engine.compounds import CompoundProfile
from physiosim.engine.reference import ReferenceTables
from physiosim.engine.regimen import StackEntry
from physiosim.simulation.assets import load_reference_tables
from physiosim.simulation.dosing import DoseNormalizer, NormalizedCompoundLoad
from physiosim.simulation.engine import SimulationEngine


@pytest.fixture(scope="session")
def reference_tables() -> ReferenceTables:
    """Bundled sample reference tables, parsed once per session."""

    return load_reference_tables()


@pytest.fixture(scope="session")
def compounds(reference_tables: ReferenceTables) -> Mapping[str, CompoundProfile]:
    return reference_tables.compounds


@pytest.fixture()
def engine(reference_tables: ReferenceTables) -> SimulationEngine:
    return SimulationEngine(tables=reference_tables, config=EngineConfig())


@pytest.fixture()
def normalize(compounds: Mapping[str, CompoundProfile]):
    """Normalize ``(name, dose, frequency)`` tuples into loads."""

    def _normalize(*items) -> tuple[NormalizedCompoundLoad, ...]:
        stack = [StackEntry.create(*item) for item in items]
        loads, _ = DoseNormalizer().normalize_stack(stack, compounds)
        return loads

    return _normalize
