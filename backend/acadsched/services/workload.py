from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from acadsched.services.naming import same_professor
from acadsched.services.snapshot import FacultyMember, NonTeachingBlock, Schedule
from acadsched.services.time_axis import Day

FULL_TIME_REGULAR_UNITS = 24
FULL_TIME_MAX_UNITS = 30
PART_TIME_MAX_UNITS = 15


def shift_unit_cap(shift: str | None) -> int:
    normalized = (shift or "").strip().upper()
    if normalized == "PART-TIME":
        return PART_TIME_MAX_UNITS
    return FULL_TIME_REGULAR_UNITS


def shift_unit_ceiling(shift: str | None) -> int:
    normalized = (shift or "").strip().upper()
    if normalized == "PART-TIME":
        return PART_TIME_MAX_UNITS
    return FULL_TIME_MAX_UNITS


def is_overloaded(shift: str | None, units: float) -> bool:
    return units > shift_unit_cap(shift)


def is_over_limit(shift: str | None, units: float) -> bool:
    return units > shift_unit_ceiling(shift)


@dataclass(frozen=True)
class ClassBlock:
    day: Day
    start: int
    duration_slots: int
    subject: str
    schedule_id: str


def professor_class_blocks(professor: str, schedules: Iterable[Schedule]) -> list[ClassBlock]:
    """Every live block where ``professor`` is the assigned professor."""
    blocks = []
    for schedule in schedules:
        if schedule.is_archived:
            continue
        for key, entry in schedule.grid.items():
            if same_professor(entry.assigned_professor, professor):
                blocks.append(ClassBlock(key.day, key.start, entry.duration_slots, entry.subject, schedule.id))
    return blocks


def auto_admin_hours(blocks: Iterable[ClassBlock]) -> float:
    # Half of every lab block's teaching time is credited as administrative time.
    total = 0.0
    for block in blocks:
        if "lab" in block.subject.lower():
            total += block.duration_slots / 4
    return total


def mark_non_teaching_conflicts(
    blocks: Iterable[NonTeachingBlock],
    class_blocks: Iterable[ClassBlock],
    slot_count: int,
) -> list[bool]:
    """Flag each non-teaching row that lands on an occupied slot.

    Rows are checked in order; a row that passes occupies its slots for the
    rows after it, so of two overlapping rows only the later one is flagged.
    """
    occupied: set[tuple[Day, int]] = set()

    def mark(day: Day, start: int, duration: int) -> None:
        for index in range(start, min(start + duration, slot_count)):
            occupied.add((day, index))

    for block in class_blocks:
        mark(block.day, block.start, max(1, block.duration_slots))

    flags = []
    for block in blocks:
        cells = [(block.day, index) for index in range(block.start, min(block.start + block.duration_slots, slot_count))]
        conflict = any(cell in occupied for cell in cells)
        flags.append(conflict)
        if not conflict:
            occupied.update(cells)
    return flags


@dataclass(frozen=True)
class WorkloadSummary:
    professor_name: str
    shift: str
    units: float
    unit_cap: int
    unit_ceiling: int
    overloaded: bool
    over_limit: bool
    teaching_hours: float
    consultation_hours: float
    admin_hours: float
    auto_admin_hours: float
    remaining_consultation_hours: float
    remaining_admin_hours: float

    @property
    def requirements_met(self) -> bool:
        return self.remaining_consultation_hours == 0 and self.remaining_admin_hours == 0


def summarize_workload(
    member: FacultyMember,
    schedules: Iterable[Schedule],
    required_consultation_hours: float,
    required_admin_hours: float,
) -> WorkloadSummary:
    class_blocks = professor_class_blocks(member.professor_name, schedules)
    consultation = sum(block.hours for block in member.non_teaching if block.type == "Consultation")
    manual_admin = sum(block.hours for block in member.non_teaching if block.type == "Administrative")
    auto_admin = auto_admin_hours(class_blocks)
    admin = manual_admin + auto_admin
    return WorkloadSummary(
        professor_name=member.professor_name,
        shift=member.shift,
        units=member.units,
        unit_cap=shift_unit_cap(member.shift),
        unit_ceiling=shift_unit_ceiling(member.shift),
        overloaded=is_overloaded(member.shift, member.units),
        over_limit=is_over_limit(member.shift, member.units),
        teaching_hours=sum(block.duration_slots for block in class_blocks) / 2,
        consultation_hours=consultation,
        admin_hours=admin,
        auto_admin_hours=auto_admin,
        remaining_consultation_hours=max(0.0, required_consultation_hours - consultation),
        remaining_admin_hours=max(0.0, required_admin_hours - admin),
    )
