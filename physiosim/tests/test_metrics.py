from __future__ import annotations

import pytest

from physiosim.engine.profile import UserProfile
from physiosim.engine.regimen import StackEntry
from physiosim.simulation.metrics import CycleOptions, calculate_cycle_metrics


def _stack(*items):
    return [StackEntry.create(*item) for item in items]


def test_empty_stack_is_baseline(compounds) -> None:
    snapshot = calculate_cycle_metrics([], compounds)

    assert snapshot.loads == ()
    assert snapshot.saturation.total_saturation_mg == 0.0
    assert snapshot.saturation.efficiency_ratio == 1.0
    assert snapshot.first_pass_estradiol == pytest.approx(25.0)
    assert snapshot.aromatization.estradiol == pytest.approx(25.0)
    assert snapshot.shbg.level == pytest.approx(35.0)
    assert snapshot.receptors.total_occupancy == 0.0
    assert snapshot.labs.total_testosterone == pytest.approx(600.0)
    assert snapshot.advisories == ()


def test_shbg_correction_never_raises_estradiol(compounds) -> None:
    snapshot = calculate_cycle_metrics(_stack(("testosterone", 250, 2), ("masteron", 100, "EOD")), compounds)

    assert snapshot.aromatization.estradiol <= snapshot.first_pass_estradiol
    assert snapshot.shbg.free_fractions["testosterone"] < 1.0
    assert snapshot.shbg.free_fractions["drostanolone"] < 1.0


def test_large_stack_shares_diminished_efficiency(compounds) -> None:
    snapshot = calculate_cycle_metrics(_stack(("testosterone", 500, 2), ("tren", 100, "ED")), compounds)

    assert snapshot.saturation.tier == 3
    assert snapshot.saturation.efficiency_ratio < 1.0
    assert {load.efficiency for load in snapshot.loads} == {snapshot.saturation.efficiency_ratio}
    assert 0.0 < snapshot.receptors.total_occupancy < 1.0
    assert snapshot.organs.total > 0.0


def test_unknown_compounds_are_ignored(compounds) -> None:
    snapshot = calculate_cycle_metrics(_stack(("testosterone", 250, 2), ("mystery_peptide", 5)), compounds)

    assert snapshot.ignored == ("mystery_peptide",)
    assert [load.key for load in snapshot.loads] == ["testosterone"]


def test_heavy_oral_stack_is_critical(compounds) -> None:
    snapshot = calculate_cycle_metrics(_stack(("dianabol", 100), ("anadrol", 100)), compounds)

    assert snapshot.organs.is_critical
    assert snapshot.efficiency.is_critical
    assert "organ_critical" in {advisory.code for advisory in snapshot.advisories}


def test_profile_changes_saturation_capacity(compounds) -> None:
    stack = _stack(("testosterone", 500, 2), ("tren", 100, "ED"))
    small = calculate_cycle_metrics(stack, compounds, CycleOptions(profile=UserProfile(bodyweight_kg=60, body_fat_pct=25)))
    large = calculate_cycle_metrics(stack, compounds, CycleOptions(profile=UserProfile(bodyweight_kg=110, body_fat_pct=10)))

    assert large.saturation.effective_load > small.saturation.effective_load
