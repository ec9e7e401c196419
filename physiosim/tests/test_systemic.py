from __future__ import annotations

import dataclasses

import pytest

from physiosim.engine.profile import UserProfile
from physiosim.simulation.advisories import ORGAN_CRITICAL
from physiosim.simulation.dosing import apply_efficiency
from physiosim.simulation.systemic import (
    MAX_SHIELD,
    LabFlag,
    SystemicLoadModel,
    oral_hepatic_surge,
    project_gains,
    support_shield,
)

PROFILE = UserProfile()


def test_oral_surge_starts_above_ten_mg() -> None:
    assert oral_hepatic_surge(10.0, 1.5) == 0.0
    assert oral_hepatic_surge(25.0, 1.0) == pytest.approx(6.0)
    assert oral_hepatic_surge(100.0, 1.0) > 4 * oral_hepatic_surge(25.0, 1.0)


def test_support_shield_is_capped(compounds, normalize) -> None:
    single = support_shield(normalize(("tudca", 250)), compounds)
    stacked = support_shield(normalize(("tudca", 5000), ("nac", 10000)), compounds)

    assert single[0] == pytest.approx(0.15)
    assert single[1] == 0.0
    assert stacked[0] == pytest.approx(MAX_SHIELD)
    assert stacked[1] <= MAX_SHIELD


def test_support_reduces_hepatic_stress_only(compounds, normalize) -> None:
    model = SystemicLoadModel()
    bare = model.evaluate(normalize(("dianabol", 30)), compounds, PROFILE)
    shielded = model.evaluate(normalize(("dianabol", 30), ("tudca", 500)), compounds, PROFILE)

    assert shielded.organs.scores["hepatic"] < bare.organs.scores["hepatic"]
    assert shielded.organs.scores["cardiovascular"] == pytest.approx(bare.organs.scores["cardiovascular"])


def test_critical_multiplier_stacks_both_tiers() -> None:
    flags = [
        LabFlag(lab="hdl", value=30.0, tier="warning", threshold=35.0),
        LabFlag(lab="alt", value=150.0, tier="critical", threshold=100.0),
    ]

    assert SystemicLoadModel().critical_multiplier(flags) == pytest.approx(1.0 + 0.15 + 0.15 + 0.35)
    assert SystemicLoadModel().critical_multiplier([]) == 1.0


def test_heavy_orals_go_critical(compounds, normalize) -> None:
    load = SystemicLoadModel().evaluate(normalize(("dianabol", 100), ("anadrol", 100)), compounds, PROFILE)

    assert load.organs.is_critical
    assert load.organs.dominant_pressure == "Hepatic"
    assert {flag.lab for flag in load.labs.flags} >= {"alt", "hdl"}
    codes = {advisory.code for advisory in load.advisories}
    assert ORGAN_CRITICAL in codes
    assert "lab_alt" in codes
    assert load.organs.critical_multiplier > 1.0


def test_empty_stack_projects_baseline_labs(compounds) -> None:
    load = SystemicLoadModel().evaluate((), compounds, PROFILE)

    assert load.labs.total_testosterone == pytest.approx(600.0)
    assert load.labs.flags == ()
    assert load.organs.total == 0.0
    assert load.organs.dominant_pressure == "Balanced"
    assert load.cns.state == "Balanced"


def test_bound_hormone_lowers_free_testosterone(compounds, normalize) -> None:
    loads = normalize(("testosterone", 250, 2))
    model = SystemicLoadModel()

    free = model.project_labs(loads, compounds, PROFILE, {}, 30.0, 35.0)
    bound = model.project_labs(loads, compounds, PROFILE, {"testosterone": 0.6}, 30.0, 35.0)

    assert bound.total_testosterone == pytest.approx(free.total_testosterone)
    assert bound.free_testosterone == pytest.approx(free.free_testosterone * 0.6)
    assert bound.free_fraction == pytest.approx(0.6)


def test_trenbolone_is_fatiguing_for_sensitive_users(compounds, normalize) -> None:
    loads = normalize(("tren", 150, "ED"))
    model = SystemicLoadModel()

    regular = model.evaluate(loads, compounds, PROFILE)
    sensitive = model.evaluate(loads, compounds, UserProfile(neuro_sensitivity="high"))

    assert sensitive.cns.fatigue > regular.cns.fatigue
    assert sensitive.cns.net < regular.cns.net


def test_gains_follow_efficiency(compounds, normalize) -> None:
    loads = normalize(("testosterone", 250, 2))
    damped = apply_efficiency(loads, 0.5)

    full = project_gains(loads, compounds)
    half = project_gains(damped, compounds)

    assert half.hypertrophy == pytest.approx(full.hypertrophy / 2.0)
    assert half.composite <= 10.0


def test_support_alone_leaves_lipids_at_baseline(compounds, normalize) -> None:
    result = SystemicLoadModel().evaluate(normalize(("tudca", 500)), compounds, PROFILE)

    assert result.labs.hdl == pytest.approx(50.0)
    assert result.labs.ldl == pytest.approx(90.0)
    assert result.labs.flags == ()


def test_ancillary_moves_lipids_through_its_own_axis(compounds, normalize) -> None:
    loads = normalize(("anastrozole", 1, 7))
    result = SystemicLoadModel().evaluate(loads, compounds, PROFILE)
    ratio = loads[0].toxicity_load

    assert result.labs.ldl == pytest.approx(90.0 + ratio)
    assert result.labs.hdl == pytest.approx(50.0 - 0.4 * ratio)


def test_gains_scale_with_base_potency(compounds, normalize) -> None:
    loads = normalize(("testosterone", 250, 2))
    boosted = dict(compounds)
    boosted["testosterone"] = dataclasses.replace(compounds["testosterone"], base_potency=2.0)

    regular = project_gains(loads, compounds)
    doubled = project_gains(loads, boosted)

    assert doubled.hypertrophy == pytest.approx(regular.hypertrophy * 2.0 / compounds["testosterone"].base_potency)


def test_shield_ignores_compounds_without_support_role(compounds, normalize) -> None:
    assert support_shield(normalize(("testosterone", 250, 2), ("anastrozole", 1, 7)), compounds) == (0.0, 0.0)
