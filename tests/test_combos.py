"""Org unit × program combination tests."""

from event_export.export.combos import OrgunitProgramComboItem, get_id, get_orgunit_program_combo
from event_export.schemas import IdObject


def test_combo_without_programs_has_one_item_per_orgunit() -> None:
    combo = get_orgunit_program_combo([{"id": "A"}, {"id": "B"}], [])

    assert combo == [OrgunitProgramComboItem("A"), OrgunitProgramComboItem("B")]
    assert [item.to_params() for item in combo] == [{"ou": "A"}, {"ou": "B"}]


def test_combo_with_programs_is_orgunit_major_cross_product() -> None:
    combo = get_orgunit_program_combo(["A", "B"], ["P1", "P2", "P3"])

    assert len(combo) == 6
    assert [(c.org_unit, c.program) for c in combo] == [
        ("A", "P1"), ("A", "P2"), ("A", "P3"),
        ("B", "P1"), ("B", "P2"), ("B", "P3"),
    ]


def test_combo_program_none_is_treated_as_no_programs() -> None:
    assert get_orgunit_program_combo(["A"], None) == [OrgunitProgramComboItem("A", None)]


def test_combo_empty_orgunits_is_empty() -> None:
    assert get_orgunit_program_combo([], ["P1"]) == []


def test_combo_is_deterministic() -> None:
    orgunits = [IdObject(id="A"), IdObject(id="B")]
    programs = [IdObject(id="P1", name="Malaria"), IdObject(id="P2")]

    assert get_orgunit_program_combo(orgunits, programs) == get_orgunit_program_combo(orgunits, programs)


def test_get_id_accepts_models_dicts_and_strings() -> None:
    assert get_id(IdObject(id="X")) == "X"
    assert get_id({"id": "Y", "name": "ignored"}) == "Y"
    assert get_id("Z") == "Z"
