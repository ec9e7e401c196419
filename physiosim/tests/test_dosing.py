from __future__ import annotations

import math

import pytest

from physiosim.engine.regimen import StackEntry, parse_frequency
from physiosim.simulation.dosing import (
    DoseNormalizer,
    SaturationCurve,
    accumulation_ratio,
    apply_efficiency,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ED", 7.0),
        ("eod", 3.5),
        ("2x/wk", 2.0),
        ("3.5X/WK", 3.5),
        ("Q4D", 7.0 / 4.0),
        ("twice weekly", 2.0),
        ("daily", 7.0),
        ("QW", 1.0),
        (3, 3.0),
        ("2.5", 2.5),
        (-2, 0.0),
        (None, 1.0),
        ("", 1.0),
        ("whenever", 1.0),
    ],
)
def test_frequency_parser_table(raw, expected) -> None:
    assert parse_frequency(raw) == pytest.approx(expected)


def test_stack_entry_resolves_alias_and_ester() -> None:
    entry = StackEntry.create("Deca", 300, "QW")

    assert entry.compound == "nandrolone"
    assert entry.ester == "decanoate"
    assert entry.frequency == 1.0
    assert entry.key == "nandrolone:decanoate"


def test_stack_entry_sanitises_dose() -> None:
    assert StackEntry.create("test", "abc").dose == 0.0
    assert StackEntry.create("test", -50).dose == 0.0
    assert StackEntry.create("test", float("nan")).dose == 0.0


def test_accumulation_ratio_matches_closed_form() -> None:
    k = math.log(2.0) / 4.5
    expected = 1.0 / (1.0 - math.exp(-k * 3.5))

    assert accumulation_ratio(108.0, 2.0) == pytest.approx(expected)
    assert accumulation_ratio(4.0, 1.0) == pytest.approx(1.0, abs=1e-6)


def test_accumulation_ratio_is_capped() -> None:
    assert accumulation_ratio(360.0, 7.0, max_ratio=6.0) == 6.0
    assert accumulation_ratio(360.0, 7.0, max_ratio=4.0) == 4.0
    assert accumulation_ratio(0.0, 7.0) == 1.0
    assert accumulation_ratio(108.0, 0.0) == 1.0


def test_injectable_is_normalized_to_weekly_active_and_saturation(compounds) -> None:
    entry = StackEntry.create("testosterone", 250, "2x/wk")

    load = DoseNormalizer().normalize(entry, compounds["testosterone"])

    assert load.ester == "enanthate"
    assert load.weekly_mg == pytest.approx(500.0)
    assert load.weekly_active_mg == pytest.approx(360.0)
    assert load.curve_dose == pytest.approx(500.0)
    assert load.saturation_mg == pytest.approx(360.0 * accumulation_ratio(108.0, 2.0))


def test_oral_curve_dose_is_daily(compounds) -> None:
    load = DoseNormalizer().normalize(StackEntry.create("dianabol", 30), compounds["methandrostenolone"])

    assert load.doses_per_week == 7.0
    assert load.daily_mg == pytest.approx(30.0)
    assert load.curve_dose == pytest.approx(30.0)
    assert load.is_oral


def test_unknown_compounds_are_ignored_and_duplicates_keyed(compounds) -> None:
    stack = [
        StackEntry.create("testosterone", 250, 2),
        StackEntry.create("unobtainium", 100),
        StackEntry.create("testosterone", 100, 1),
    ]

    loads, ignored = DoseNormalizer().normalize_stack(stack, compounds)

    assert ignored == ("unobtainium",)
    assert [load.key for load in loads] == ["testosterone", "testosterone#2"]


def test_saturation_curve_segments() -> None:
    curve = SaturationCurve()

    assert curve.effective_load(1000.0) == pytest.approx(1000.0)
    assert curve.effective_load(2000.0) == pytest.approx(1500.0 + 500.0 * 0.7)
    assert curve.effective_load(3000.0) == pytest.approx(1500.0 + 1000.0 * 0.7 + 500.0 * 0.3)

    light, medium, heavy = curve.evaluate(1000.0), curve.evaluate(2000.0), curve.evaluate(3000.0)
    assert (light.tier, medium.tier, heavy.tier) == (1, 2, 3)
    assert light.efficiency_ratio == pytest.approx(1.0)
    assert 1.0 > medium.efficiency_ratio > heavy.efficiency_ratio
    assert curve.evaluate(0.0).efficiency_ratio == 1.0


def test_saturation_capacity_scales_thresholds() -> None:
    roomy = SaturationCurve(capacity_scale=1.2)

    assert roomy.evaluate(1700.0).tier == 1
    assert SaturationCurve().evaluate(1700.0).tier == 2


def test_efficiency_is_shared_by_every_load(normalize) -> None:
    loads = apply_efficiency(normalize(("testosterone", 250, 2), ("trenbolone", 100, "EOD")), 0.8)

    assert {load.efficiency for load in loads} == {0.8}
