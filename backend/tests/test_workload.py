import pytest

from acadsched.services.snapshot import non_teaching_block
from acadsched.services.time_axis import DEFAULT_AXIS, Day
from acadsched.services.workload import (
    ClassBlock,
    auto_admin_hours,
    is_over_limit,
    is_overloaded,
    mark_non_teaching_conflicts,
    professor_class_blocks,
    shift_unit_cap,
    summarize_workload,
)

from factories import build_schedule, faculty_member


@pytest.mark.parametrize(
    "shift,units,overloaded,over_limit",
    [
        ("FULL-TIME", 24, False, False),
        ("FULL-TIME", 25, True, False),
        ("FULL-TIME", 31, True, True),
        ("PART-TIME", 15, False, False),
        ("part-time", 16, True, True),
    ],
)
def test_shift_unit_limits(shift, units, overloaded, over_limit):
    assert is_overloaded(shift, units) is overloaded
    assert is_over_limit(shift, units) is over_limit


def test_unknown_shift_uses_full_time_cap():
    assert shift_unit_cap(None) == 24


def test_non_teaching_hours_become_slots():
    assert non_teaching_block("Monday", "9:00AM", "Consultation", 1.5).duration_slots == 3
    assert non_teaching_block("Monday", "9:00AM", "Consultation", 0.2).duration_slots == 1
    late = non_teaching_block("Monday", "8:00PM", "Administrative", 3)
    assert late.duration_slots == len(DEFAULT_AXIS) - DEFAULT_AXIS.index_of("8:00PM")


def test_lab_blocks_credit_automatic_admin_hours():
    blocks = [
        ClassBlock(Day.monday, 4, 6, "WEB DEV (LAB)", "A_1st"),
        ClassBlock(Day.monday, 12, 4, "NETWORKS (LEC)", "A_1st"),
    ]
    assert auto_admin_hours(blocks) == 1.5


def test_non_teaching_conflicts_are_marked_sequentially():
    classes = [ClassBlock(Day.monday, 4, 4, "NETWORKS (LEC)", "A_1st")]
    rows = [
        non_teaching_block("Monday", "10:00AM", "Consultation", 1),
        non_teaching_block("Tuesday", "9:00AM", "Consultation", 2),
        non_teaching_block("Tuesday", "10:00AM", "Administrative", 1),
        non_teaching_block("Monday", "11:00AM", "Administrative", 1),
    ]
    assert mark_non_teaching_conflicts(rows, classes, len(DEFAULT_AXIS)) == [True, False, True, False]


def test_workload_summary_counts_assigned_classes_only():
    schedules = [
        build_schedule(
            "A_1st",
            "A",
            {
                "Monday_9:00AM": ("WEB DEV (LAB)", 4, "COMP LAB 601", "Ana Cruz"),
                "Tuesday_9:00AM": ("NETWORKS (LEC)", 4, "ROOM 301", "Ben Uy", "Ana Cruz"),
            },
        ),
        build_schedule("B_1st", "B", {"Friday_9:00AM": ("ETHICS", 2, "ROOM 302", "Ana Cruz")}, status="archived"),
    ]
    member = faculty_member(
        "Ana Cruz",
        ("WEBDEV", "Web Development"),
        non_teaching=[
            {"day": "Wednesday", "time": "9:00AM", "type": "Consultation", "hours": 2},
            {"day": "Thursday", "time": "9:00AM", "type": "Administrative", "hours": 3},
        ],
    )
    assert [block.subject for block in professor_class_blocks("Ana Cruz", schedules)] == ["WEB DEV (LAB)"]

    summary = summarize_workload(member, schedules, 6, 4)
    assert summary.teaching_hours == 2
    assert summary.consultation_hours == 2
    assert summary.auto_admin_hours == 1
    assert summary.admin_hours == 4
    assert summary.remaining_consultation_hours == 4
    assert summary.remaining_admin_hours == 0
    assert not summary.requirements_met
