import pytest

from acadsched.services.duration import SubjectCatalog, SubjectMeta, slots_for
from acadsched.services.naming import parse_subject_name, subject_token


@pytest.mark.parametrize(
    "lec,lab,comp_lab,kind,expected",
    [
        (2, 1, True, "LEC", 4),
        (2, 1, True, "LAB", 2),
        (0, 3, False, "LAB", 6),
        (0, 0, False, "LEC", 2),
        (2, 1, True, None, 6),
        (2, 1, False, None, 4),
        (0, 0, True, None, 2),
        (3, 0, False, None, 6),
    ],
)
def test_slots_for_follows_unit_rule_with_one_hour_floor(lec, lab, comp_lab, kind, expected):
    meta = SubjectMeta(name="X", lec_units=lec, lab_units=lab, is_computer_lab=comp_lab, kind=kind)
    assert slots_for(meta) == expected


def test_subject_name_markers_are_parsed():
    assert parse_subject_name("WEB DEV (LAB)").kind == "LAB"
    assert parse_subject_name("web dev ( lec )").kind == "LEC"
    assert parse_subject_name("WEB DEV").kind is None
    assert subject_token("WEB DEV (LAB)") == "webdev"
    assert subject_token("Web-Dev.") == "webdev"


def test_catalog_uses_the_half_named_by_the_marker(catalog):
    lecture = catalog.meta_for("DB SYSTEMS (LEC)")
    lab = catalog.meta_for("DB SYSTEMS (LAB)")
    assert (lecture.lec_units, lecture.lab_units) == (2, 0)
    assert (lab.lec_units, lab.lab_units) == (0, 1)
    assert lab.is_lab_session
    assert not lecture.is_lab_session
    assert catalog.slots_for_subject("DB SYSTEMS (LEC)") == 4
    assert catalog.slots_for_subject("DB SYSTEMS (LAB)") == 2


def test_catalog_falls_back_for_unknown_subjects():
    catalog = SubjectCatalog([{"courseName": "Ethics", "lecUnits": "3", "isComputerLab": "no"}], default_slots=4)
    assert catalog.slots_for_subject("ETHICS") == 6
    assert catalog.meta_for("Calculus") is None
    assert catalog.slots_for_subject("Calculus") == 4
    assert catalog.names == ["Ethics"]
