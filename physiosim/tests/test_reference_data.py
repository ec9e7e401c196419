from __future__ import annotations

import pytest

from physiosim.engine.compounds import (
    REFERENCE_KI_NM,
    CompoundProfile,
    infer_ki,
    resolve_compound,
)
from physiosim.engine.reference import (
    ReferenceDataError,
    build_reference_tables,
    find_curve_violations,
)


def test_bundled_tables_load(reference_tables) -> None:
    assert "testosterone" in reference_tables.compounds
    assert reference_tables.pairs.get("nandrolone", "testosterone") is not None
    assert reference_tables.goal("balanced") is not None
    assert reference_tables.reference_compound is reference_tables.compounds["testosterone"]


def test_bundled_curves_start_at_origin_and_risk_never_drops(compounds) -> None:
    assert find_curve_violations(compounds.values()) == []
    for compound in compounds.values():
        if compound.benefit_curve:
            assert (compound.benefit_curve[0].dose, compound.benefit_curve[0].value) == (0.0, 0.0)
        values = [point.value for point in compound.risk_curve]
        assert values == sorted(values)


def test_curve_violations_are_reported() -> None:
    tables = build_reference_tables(
        compounds={
            "broken": {
                "benefit_curve": [[10, 1.0]],
                "risk_curve": [[0, 0], [100, 2.0], [200, 1.5]],
            }
        }
    )

    problems = find_curve_violations(tables.compounds.values())

    assert any("broken.benefit" in problem for problem in problems)
    assert any("broken.risk" in problem for problem in problems)


def test_non_increasing_curve_doses_are_rejected() -> None:
    with pytest.raises(ReferenceDataError):
        build_reference_tables(compounds={"bad": {"risk_curve": [[0, 0], [100, 1], [100, 2]]}})


def test_unknown_pair_dimension_is_rejected() -> None:
    with pytest.raises(ReferenceDataError):
        build_reference_tables(
            pairs={"x": {"compounds": ["a", "b"], "synergy": {"charisma": 0.5}}},
        )


def test_pair_lookup_is_order_insensitive(reference_tables) -> None:
    forward = reference_tables.pairs.get("testosterone", "trenbolone")
    backward = reference_tables.pairs.get("trenbolone", "testosterone")

    assert forward is backward
    assert reference_tables.pairs.get("testosterone", "testosterone") is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("deca", ("nandrolone", "decanoate")),
        ("Test-C", ("testosterone", "cypionate")),
        ("dbol", ("methandrostenolone", None)),
        ("Unobtainium", ("unobtainium", None)),
    ],
)
def test_aliases_resolve_to_canonical_ids(name, expected) -> None:
    assert resolve_compound(name) == expected


def test_ki_is_inferred_from_affinity(compounds) -> None:
    reference = compounds["testosterone"]

    assert infer_ki(reference) == pytest.approx(REFERENCE_KI_NM)
    assert infer_ki(compounds["nandrolone"], reference) == pytest.approx(0.9 * 5.0 / 6.0)
    weak = CompoundProfile(id="weak", name="weak", pathways={"receptor_affinity": 2.5})
    strong = CompoundProfile(id="strong", name="strong", pathways={"receptor_affinity": 5.0})
    assert infer_ki(weak, reference) == pytest.approx(2.0 * infer_ki(strong, reference))
    assert infer_ki(compounds["anastrozole"], reference) is None
