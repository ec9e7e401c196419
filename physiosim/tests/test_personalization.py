from __future__ import annotations

import pytest

from physiosim.engine.profile import UserProfile
from physiosim.simulation.advisories import CARDIO_CAPACITY
from physiosim.simulation.curves import CurveSample
from physiosim.simulation.personalization import (
    PersonalizationAdjuster,
    age_risk_multiplier,
    lean_mass_dilution,
    saturation_capacity,
)

BASE = CurveSample(value=2.0, ci=0.4, tier="clinical")


def _benefit(compound, **profile) -> float:
    return PersonalizationAdjuster().adjust(compound, "benefit", 500.0, BASE, UserProfile(**profile)).value


def _risk(compound, **profile) -> float:
    return PersonalizationAdjuster().adjust(compound, "risk", 500.0, BASE, UserProfile(**profile)).value


def test_receptor_sensitivity_scales_benefit(compounds) -> None:
    testosterone = compounds["testosterone"]
    hyper = _benefit(testosterone, receptor_sensitivity="hyper")
    normal = _benefit(testosterone, receptor_sensitivity="normal")
    low = _benefit(testosterone, receptor_sensitivity="low")

    assert hyper / normal == pytest.approx(1.2)
    assert hyper / low == pytest.approx(1.5)


def test_enzyme_activity_only_touches_aromatizers(compounds) -> None:
    assert _risk(compounds["testosterone"], enzyme_activity="high") > _risk(compounds["testosterone"])
    assert _risk(compounds["trenbolone"], enzyme_activity="high") == pytest.approx(_risk(compounds["trenbolone"]))


def test_neuro_sensitivity_doubles_neurotoxic_risk(compounds) -> None:
    trenbolone = compounds["trenbolone"]

    assert _risk(trenbolone, neuro_sensitivity="high") == pytest.approx(2.0 * _risk(trenbolone))
    assert _risk(compounds["testosterone"], neuro_sensitivity="high") == pytest.approx(_risk(compounds["testosterone"]))


def test_cutting_spares_anti_catabolic_compounds(compounds) -> None:
    tren_ratio = _benefit(compounds["trenbolone"], diet_state="cutting") / _benefit(compounds["trenbolone"])
    test_ratio = _benefit(compounds["testosterone"], diet_state="cutting") / _benefit(compounds["testosterone"])

    assert tren_ratio == pytest.approx(0.85)
    assert test_ratio == pytest.approx(0.65)


def test_female_profile_is_steep_on_both_polarities(compounds) -> None:
    testosterone = compounds["testosterone"]

    assert _benefit(testosterone, gender="female") == pytest.approx(8.0 * _benefit(testosterone))
    assert _risk(testosterone, gender="female") == pytest.approx(10.0 * _risk(testosterone))


def test_crossfit_with_cardio_impairing_compound_emits_advisory(compounds) -> None:
    response = PersonalizationAdjuster().adjust(
        compounds["trenbolone"], "risk", 300.0, BASE, UserProfile(training_style="crossfit")
    )

    assert [advisory.code for advisory in response.advisories] == [CARDIO_CAPACITY]


def test_zero_dose_or_zero_curve_stays_zero(compounds) -> None:
    adjuster = PersonalizationAdjuster()
    profile = UserProfile(receptor_sensitivity="hyper")

    assert adjuster.adjust(compounds["testosterone"], "benefit", 0.0, BASE, profile).value == 0.0
    zero = CurveSample(value=0.0, ci=0.0)
    assert adjuster.adjust(compounds["testosterone"], "risk", 500.0, zero, profile).value == 0.0


def test_scalar_helpers_are_bounded() -> None:
    assert age_risk_multiplier(30) == pytest.approx(1.0)
    assert age_risk_multiplier(200) == pytest.approx(1.6)
    assert age_risk_multiplier(-50) == pytest.approx(0.85)
    assert 0.75 <= lean_mass_dilution(UserProfile(bodyweight_kg=300, body_fat_pct=5)) <= 1.35
    assert saturation_capacity(None) == 1.0
    assert saturation_capacity(UserProfile(bodyweight_kg=40)) == pytest.approx(0.8)


def test_unknown_profile_values_fall_back_to_defaults() -> None:
    profile = UserProfile.from_mapping({"receptor_sensitivity": "legendary", "age": "old", "shoe_size": 44})

    assert profile.receptor_sensitivity == "normal"
    assert profile.age == 30.0
