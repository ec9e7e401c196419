from __future__ import annotations

import pytest

from physiosim.engine.profile import UserProfile
from physiosim.simulation.aromatization import ESTRADIOL_BOUNDS, AromatizationKinetics

PROFILE = UserProfile()


def test_no_stack_returns_endogenous_baseline(compounds) -> None:
    result = AromatizationKinetics().evaluate((), compounds, PROFILE)

    assert result.conversion == 0.0
    assert result.estradiol == pytest.approx(25.0)


def test_conversion_saturates(compounds, normalize) -> None:
    kinetics = AromatizationKinetics()
    single = kinetics.evaluate(normalize(("testosterone", 250, 2)), compounds, PROFILE)
    double = kinetics.evaluate(normalize(("testosterone", 500, 2)), compounds, PROFILE)

    assert double.conversion > single.conversion
    assert double.conversion < 2.0 * single.conversion


def test_aromatase_inhibitor_lowers_estradiol(compounds, normalize) -> None:
    kinetics = AromatizationKinetics()
    plain = kinetics.evaluate(normalize(("testosterone", 250, 2)), compounds, PROFILE)
    inhibited = kinetics.evaluate(normalize(("testosterone", 250, 2), ("adex", 0.5, "EOD")), compounds, PROFILE)

    assert 0.0 < inhibited.inhibition < 0.95
    assert inhibited.estradiol < plain.estradiol


def test_aromatizing_androgen_is_not_an_inhibitor(compounds, normalize) -> None:
    loads = normalize(("testosterone", 250, 2), ("tudca", 500))

    assert AromatizationKinetics().inhibition(loads, compounds) == 0.0


def test_enzyme_activity_and_body_fat_raise_conversion(compounds, normalize) -> None:
    kinetics = AromatizationKinetics()
    loads = normalize(("testosterone", 250, 2))
    moderate = kinetics.evaluate(loads, compounds, PROFILE)

    assert kinetics.evaluate(loads, compounds, UserProfile(enzyme_activity="high")).estradiol > moderate.estradiol
    assert kinetics.evaluate(loads, compounds, UserProfile(body_fat_pct=30)).estradiol > moderate.estradiol


def test_bound_substrate_does_not_convert(compounds, normalize) -> None:
    kinetics = AromatizationKinetics()
    loads = normalize(("testosterone", 250, 2))

    free = kinetics.evaluate(loads, compounds, PROFILE)
    half_bound = kinetics.evaluate(loads, compounds, PROFILE, free_fractions={"testosterone": 0.5})

    assert half_bound.substrate_mg == pytest.approx(free.substrate_mg / 2.0)
    assert half_bound.estradiol < free.estradiol


def test_estradiol_is_bounded(compounds, normalize) -> None:
    result = AromatizationKinetics(vmax=1e6).evaluate(normalize(("testosterone", 2000, 7)), compounds, PROFILE)

    assert result.estradiol == ESTRADIOL_BOUNDS[1]
