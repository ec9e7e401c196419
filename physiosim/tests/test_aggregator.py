from __future__ import annotations

import math

import pytest

from physiosim.engine.interactions import DIMENSIONS
from physiosim.engine.profile import UserProfile
from physiosim.engine.regimen import StackEntry
from physiosim.simulation.advisories import (
    HEPATOTOXICITY_SYNERGY,
    KIDNEY_STRESS,
    NO_AROMATIZING_BASE,
    NOR19_STACKING,
)
from physiosim.simulation.aggregator import StackAggregator


def _evaluate(reference_tables, *items, **kwargs):
    stack = [StackEntry.create(*item) for item in items]
    return StackAggregator().evaluate(stack, reference_tables.compounds, reference_tables.pairs, **kwargs)


def _codes(result) -> set[str]:
    return {advisory.code for advisory in result.advisories}


def test_empty_stack_scores_zero(reference_tables) -> None:
    result = _evaluate(reference_tables)

    assert result.total_benefit == 0.0
    assert result.total_risk == 0.0
    assert result.net_score == 0.0
    assert result.ratio == 0.0
    assert set(result.dimension_totals) == set(DIMENSIONS)
    assert all(value == 0.0 for value in result.dimension_totals.values())


def test_stack_order_does_not_change_the_result(reference_tables) -> None:
    forward = _evaluate(reference_tables, ("testosterone", 250, 2), ("nandrolone", 300, 1), ("dbol", 30))
    backward = _evaluate(reference_tables, ("dbol", 30), ("nandrolone", 300, 1), ("testosterone", 250, 2))

    assert forward.total_benefit == backward.total_benefit
    assert forward.total_risk == backward.total_risk
    assert dict(forward.dimension_totals) == dict(backward.dimension_totals)


def test_tripling_testosterone_does_not_triple_benefit(reference_tables) -> None:
    low = _evaluate(reference_tables, ("testosterone", 500, "QW"))
    high = _evaluate(reference_tables, ("testosterone", 1500, "QW"))

    assert high.total_benefit > low.total_benefit
    assert high.total_benefit / low.total_benefit < 2.5


def test_doubling_an_oral_more_than_doubles_risk(reference_tables) -> None:
    low = _evaluate(reference_tables, ("dianabol", 50))
    high = _evaluate(reference_tables, ("dianabol", 100))

    assert high.total_risk / low.total_risk > 2.2


def test_responder_type_scales_benefit(reference_tables) -> None:
    results = {
        sensitivity: _evaluate(
            reference_tables, ("testosterone", 500, "QW"), profile=UserProfile(receptor_sensitivity=sensitivity)
        ).total_benefit
        for sensitivity in ("low", "normal", "hyper")
    }

    assert results["hyper"] / results["normal"] == pytest.approx(1.2, rel=0.01)
    assert results["hyper"] / results["low"] == pytest.approx(1.5, rel=0.01)


def test_pair_deltas_feed_dimension_totals(reference_tables) -> None:
    result = _evaluate(reference_tables, ("testosterone", 500, "QW"), ("nandrolone", 300, "QW"))

    assert {delta.pair_id for delta in result.pairs} == {"testosterone_nandrolone"}
    assert result.dimension_totals["joint"] > 0.0
    assert result.total_benefit == pytest.approx(
        result.base_benefit + sum(result.dimension_totals[dim] for dim in ("anabolic", "vascularity", "strength", "joint"))
    )


def test_goal_weights_scale_base_scores(reference_tables) -> None:
    goal = reference_tables.goal("health_first")
    result = _evaluate(reference_tables, ("testosterone", 500, "QW"), goal=goal)

    assert result.goal == "health_first"
    assert result.weighted_risk == pytest.approx(result.base_risk * goal.risk_scale())
    assert result.net_score == pytest.approx(result.weighted_benefit - result.weighted_risk)


def test_unknown_compounds_are_listed_not_scored(reference_tables) -> None:
    result = _evaluate(reference_tables, ("testosterone", 500, "QW"), ("unobtainium", 100))

    assert result.ignored == ("unobtainium",)
    assert [score.compound_id for score in result.compounds] == ["testosterone"]


def test_stack_advisories(reference_tables) -> None:
    orals = _evaluate(reference_tables, ("testosterone", 250, 2), ("dianabol", 30), ("anadrol", 50))
    nor19 = _evaluate(reference_tables, ("tren", 100, "EOD"), ("deca", 300, 1))
    kidneys = _evaluate(reference_tables, ("tren", 100, "EOD"), ("anadrol", 50), ("testosterone", 250, 2))
    base = _evaluate(reference_tables, ("testosterone", 250, 2), ("tren", 100, "EOD"))

    assert HEPATOTOXICITY_SYNERGY in _codes(orals)
    assert NOR19_STACKING in _codes(nor19)
    assert NO_AROMATIZING_BASE not in _codes(nor19)
    assert KIDNEY_STRESS in _codes(kidneys)
    assert NO_AROMATIZING_BASE not in _codes(base)
    assert NO_AROMATIZING_BASE in _codes(_evaluate(reference_tables, ("tren", 100, "EOD")))


def test_vanishing_dose_does_not_break_pair_scoring(reference_tables) -> None:
    stack = [StackEntry("testosterone", 1e-160, 2.0), StackEntry("nandrolone", 100.0, 1.0)]

    result = StackAggregator().evaluate(stack, reference_tables.compounds, reference_tables.pairs)

    assert math.isfinite(result.total_benefit)
    assert all(math.isfinite(delta.delta) for delta in result.pairs)
