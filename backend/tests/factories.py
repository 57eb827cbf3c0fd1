from acadsched.services.duration import SubjectCatalog
from acadsched.services.occupancy import ScheduleEntry, ScheduleGrid
from acadsched.services.snapshot import FacultyMember, Schedule
from acadsched.services.time_axis import make_key


def build_schedule(schedule_id, section, cells, *, status="draft", catalog=None, program="BSIT"):
    """``cells`` maps "Day_Label" to (subject, slots, room, professor[, substitute])."""
    entries = {}
    for text, values in cells.items():
        day, label = text.split("_")
        subject, slots, room, professor, *rest = values
        entries[make_key(day, label)] = ScheduleEntry(
            subject=subject,
            duration_slots=slots,
            room=room,
            assigned_professor=professor,
            substitute_teacher=rest[0] if rest else "",
        )
    return Schedule(
        id=schedule_id,
        section_name=section,
        grid=ScheduleGrid(entries),
        program=program,
        semester="1st Semester",
        year="2026",
        status=status,
        catalog=catalog or SubjectCatalog(),
    )


def faculty_member(name, *courses, non_teaching=(), archived=False):
    return FacultyMember.from_document(
        name,
        [{"courseCode": code, "courseName": course_name} for code, course_name in courses],
        list(non_teaching),
        archived=archived,
    )
