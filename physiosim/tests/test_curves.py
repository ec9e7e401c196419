from __future__ import annotations

import pytest

from physiosim.engine.compounds import CurvePoint
from physiosim.simulation.curves import ZERO_SAMPLE, interpolate_curve


CURVE = (
    CurvePoint(dose=0.0, value=0.0, ci=0.0, tier="none"),
    CurvePoint(dose=100.0, value=1.0, ci=0.2, tier="clinical"),
    CurvePoint(dose=300.0, value=2.0, ci=0.6, tier="anecdote"),
)


def test_boundary_doses_return_control_points_exactly() -> None:
    low = interpolate_curve(CURVE, 0.0)
    high = interpolate_curve(CURVE, 300.0)

    assert (low.value, low.ci) == (0.0, 0.0)
    assert (high.value, high.ci, high.tier) == (2.0, 0.6, "anecdote")


def test_out_of_range_doses_clamp_to_the_nearest_end() -> None:
    assert interpolate_curve(CURVE, -50.0).value == 0.0
    above = interpolate_curve(CURVE, 5000.0)
    assert above.value == 2.0
    assert above.ci == 0.6


def test_interior_doses_are_convex_combinations() -> None:
    sample = interpolate_curve(CURVE, 200.0)

    assert sample.value == pytest.approx(1.5)
    assert sample.ci == pytest.approx(0.4)
    assert sample.tier == "clinical"
    for dose in (10.0, 99.0, 101.0, 250.0):
        value = interpolate_curve(CURVE, dose).value
        assert 0.0 <= value <= 2.0


def test_missing_curve_is_zero_response() -> None:
    assert interpolate_curve((), 250.0) is ZERO_SAMPLE
    assert interpolate_curve(None, 250.0).is_zero


def test_bundled_curves_hit_every_control_point(compounds) -> None:
    for compound in compounds.values():
        for point in compound.benefit_curve:
            assert interpolate_curve(compound.benefit_curve, point.dose).value == point.value
