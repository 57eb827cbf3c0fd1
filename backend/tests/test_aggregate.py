from acadsched.services.aggregate import derive_aggregate_view
from acadsched.services.snapshot import ScheduleSnapshot
from acadsched.services.time_axis import Day

from factories import build_schedule, faculty_member


def _snapshot():
    section_a = build_schedule(
        "A_1st",
        "A",
        {
            "Tuesday_9:00AM": ("NETWORKS (LEC)", 4, "ROOM 301", "Ana Cruz"),
            "Monday_1:00PM": ("ETHICS", 2, "ROOM 301", "Ana Cruz", "Ben Uy"),
        },
    )
    section_b = build_schedule("B_1st", "B", {"Monday_9:00AM": ("WEB DEV (LAB)", 4, "COMP LAB 601", "")})
    archived = build_schedule("C_1st", "C", {"Monday_7:00AM": ("OLD", 2, "ROOM 302", "Cara Diaz")}, status="archived")
    faculty = (
        faculty_member("Ana Cruz", non_teaching=[{"day": "Wednesday", "time": "9:00AM", "type": "Consultation", "hours": 1}]),
        faculty_member("Dan Sy", non_teaching=[{"day": "Monday", "time": "9:00AM", "type": "Administrative", "hours": 2}]),
    )
    return ScheduleSnapshot(schedules=(section_a, section_b, archived), faculty=faculty)


def test_room_view_groups_live_entries_by_room():
    view = derive_aggregate_view("room", _snapshot())
    assert list(view) == ["COMP LAB 601", "ROOM 301"]
    room = view["ROOM 301"]
    assert [(item.day, item.subject) for item in room] == [(Day.monday, "ETHICS"), (Day.tuesday, "NETWORKS (LEC)")]
    assert room[1].start_label() == "9:00AM"
    assert room[1].end_label() == "11:00AM"
    assert room[1].section == "A"


def test_professor_view_uses_the_effective_professor():
    view = derive_aggregate_view("professor", _snapshot())
    assert list(view) == ["Ana Cruz", "Ben Uy"]
    assert [item.subject for item in view["Ben Uy"]] == ["ETHICS"]
    ana = view["Ana Cruz"]
    assert [(item.subject, item.kind) for item in ana] == [
        ("NETWORKS (LEC)", "class"),
        ("CONSULTATION", "non-teaching"),
    ]
