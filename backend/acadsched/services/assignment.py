"""Allocation mutation: grid edit batches, professor assignment and substitutes.

Per-entry assignment states::

    unassigned -> assigned(professor) -> substituted(original, substitute)
                                      <- archive: history record written,
                                         overlay cleared, original kept

Every function here is pure: it takes a :class:`Schedule` plus the snapshot
it was read from and returns a new ``Schedule`` or an explicit rejection.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from acadsched.services.conflict_service import ExcludeSelf, find_conflict
from acadsched.services.naming import normalize_professor, same_professor
from acadsched.services.occupancy import PlacementRejected, PlacementResult, ScheduleEntry
from acadsched.services.qualification import professor_qualifies, room_candidates
from acadsched.services.rooms import RoomPool, room_category
from acadsched.services.snapshot import Schedule, ScheduleSnapshot
from acadsched.services.time_axis import SlotKey, parse_key

logger = logging.getLogger(__name__)


class AssignmentState(str, Enum):
    unassigned = "unassigned"
    assigned = "assigned"
    substituted = "substituted"


def assignment_state(entry: ScheduleEntry) -> AssignmentState:
    if not entry.assigned_professor:
        return AssignmentState.unassigned
    if entry.substitute_teacher:
        return AssignmentState.substituted
    return AssignmentState.assigned


# -- grid edits ---------------------------------------------------------------


@dataclass(frozen=True)
class EditOutcome:
    schedule: Schedule
    rejection: PlacementRejected | None = None
    applied: int = 0

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def _desired_slots(schedule: Schedule, subject: str, fallback: int | None = None) -> int:
    if schedule.catalog.meta_for(subject) is None and fallback:
        return fallback
    return schedule.catalog.slots_for_subject(subject)


def _room_is_free(schedule: Schedule, key: SlotKey, snapshot: ScheduleSnapshot, pool: RoomPool) -> bool:
    entry = schedule.grid.get(key)
    if entry is None or not entry.room:
        return True
    offered = room_candidates(
        entry.subject,
        schedule.catalog.meta_for(entry.subject),
        key.day,
        key.start,
        entry.duration_slots,
        pool,
        snapshot.with_schedule(schedule),
        ExcludeSelf(schedule.id, key),
    )
    return entry.room in offered.candidates


def apply_edit(schedule: Schedule, operation, snapshot: ScheduleSnapshot, pool: RoomPool) -> PlacementResult:
    """Apply one ``place``/``move``/``remove``/``set_room`` operation to the grid."""
    grid = schedule.grid
    key = parse_key(operation.key, grid.axis)

    if operation.op == "place":
        subject = operation.subject.strip()
        duration = operation.duration_slots or _desired_slots(schedule, subject)
        return grid.place(key.day, key.start, subject, duration)

    if operation.op == "move":
        entry = grid.get(key)
        if entry is None:
            return grid.move(key, key.day, key.start, 0)
        target = parse_key(operation.target, grid.axis)
        duration = operation.duration_slots or _desired_slots(schedule, entry.subject, entry.duration_slots)
        result = grid.move(key, target.day, target.start, duration)
        if not result.accepted or result.key == key:
            return result
        moved = schedule.with_grid(result.grid)
        # A carried room that is taken at the new time is dropped.
        if not _room_is_free(moved, result.key, snapshot, pool):
            logger.debug("Dropped room %s from %s after move", entry.room, grid.key_text(result.key))
            return result.grid.update_entry(result.key, room="")
        return result

    if operation.op == "remove":
        return grid.remove(key.day, key.start)

    # set_room
    entry = grid.get(key)
    if entry is None:
        return grid.update_entry(key)
    room = (operation.room or "").strip()
    if room:
        offered = room_candidates(
            entry.subject,
            schedule.catalog.meta_for(entry.subject),
            key.day,
            key.start,
            entry.duration_slots,
            pool,
            snapshot.with_schedule(schedule),
            ExcludeSelf(schedule.id, key),
        )
        if room not in offered.candidates:
            return PlacementResult(
                grid=grid,
                rejection=PlacementRejected("room-unavailable", grid.key_text(key), entry.subject),
                key=key,
            )
    return grid.update_entry(key, room=room)


def apply_edits(schedule: Schedule, operations: Iterable, snapshot: ScheduleSnapshot, pool: RoomPool) -> EditOutcome:
    """Apply a batch in order; the first rejection discards the whole batch."""
    operations = list(operations)
    if schedule.is_locked:
        first_key = operations[0].key if operations else ""
        return EditOutcome(schedule=schedule, rejection=PlacementRejected("locked", first_key))

    working = schedule
    for applied, operation in enumerate(operations):
        result = apply_edit(working, operation, snapshot, pool)
        if not result.accepted:
            return EditOutcome(schedule=schedule, rejection=result.rejection, applied=applied)
        working = working.with_grid(result.grid)
    return EditOutcome(schedule=working, applied=len(operations))


def unplaced_subjects(schedule: Schedule) -> list[str]:
    placed = schedule.grid.subjects()
    return [name for name in schedule.catalog.names if name not in placed]


def submit_issues(schedule: Schedule, pool: RoomPool) -> list[dict]:
    """Every entry must carry a room drawn from its subject's room category."""
    issues = []
    for key, entry in schedule.grid.items():
        text = schedule.grid.key_text(key)
        category = room_category(entry.subject, schedule.catalog.meta_for(entry.subject))
        if not entry.room:
            issues.append({"field": "room", "key": text, "subject": entry.subject, "message": "No room selected"})
        elif entry.room not in pool.rooms_for(category):
            issues.append({
                "field": "room",
                "key": text,
                "subject": entry.subject,
                "message": f"{entry.room} is not a {category.value.replace('_', ' ')} room",
            })
    return issues


# -- professor assignment -------------------------------------------------------


class ProfessorAssignmentDraft:
    """Pending professor choices for one schedule, saved only as a whole."""

    def __init__(self, schedule: Schedule) -> None:
        self.schedule = schedule
        self.original: dict[SlotKey, str] = {
            key: entry.assigned_professor for key, entry in schedule.grid.items() if entry.assigned_professor
        }
        self.pending: dict[SlotKey, str] = dict(self.original)

    def assign(self, key: SlotKey, professor: str | None) -> None:
        if key not in self.schedule.grid:
            raise KeyError(self.schedule.grid.key_text(key))
        name = normalize_professor(professor)
        if name:
            self.pending[key] = name
        else:
            self.pending.pop(key, None)

    def assign_many(self, assignments: Mapping[str, str]) -> None:
        self.pending = {}
        for raw_key, professor in assignments.items():
            self.assign(parse_key(raw_key, self.schedule.grid.axis), professor)

    @property
    def is_dirty(self) -> bool:
        return self.pending != self.original

    def unmet_slots(self) -> list[str]:
        return [
            self.schedule.grid.key_text(key)
            for key, _entry in self.schedule.grid.items()
            if not self.pending.get(key)
        ]

    def applied(self) -> Schedule:
        grid = self.schedule.grid
        for key, entry in self.schedule.grid.items():
            professor = self.pending.get(key, "")
            if professor == entry.assigned_professor:
                continue
            # A new assigned professor drops any substitute overlay of the old one.
            grid = grid.update_entry(key, assigned_professor=professor, substitute_teacher="").grid
        return self.schedule.with_grid(grid)

    def validate(self, snapshot: ScheduleSnapshot) -> list[dict]:
        issues = []
        if not self.is_dirty:
            issues.append({"field": "assignments", "message": "No changes to save"})
        for text in self.unmet_slots():
            entry = self.schedule.grid.get(parse_key(text, self.schedule.grid.axis))
            issues.append({
                "field": "assigned_professor",
                "key": text,
                "subject": entry.subject,
                "message": "Required before saving",
            })

        draft = self.applied()
        fresh = snapshot.with_schedule(draft)
        faculty = fresh.active_faculty()
        for key, entry in draft.grid.items():
            if not entry.assigned_professor or self.original.get(key) == entry.assigned_professor:
                continue
            text = draft.grid.key_text(key)
            member = fresh.faculty_member(entry.assigned_professor)
            if member is None or member.archived or not professor_qualifies(member, entry.subject, draft.program):
                issues.append({
                    "field": "assigned_professor",
                    "key": text,
                    "subject": entry.subject,
                    "message": f"{entry.assigned_professor} is not qualified for {entry.subject}",
                })
                continue
            start, end = draft.grid.span(key, entry)
            clash = find_conflict(
                "professor",
                entry.assigned_professor,
                key.day,
                start,
                end - start,
                fresh.schedules,
                ExcludeSelf(draft.id, key),
                faculty,
            )
            if clash is not None:
                issues.append({
                    "field": "assigned_professor",
                    "key": text,
                    "subject": entry.subject,
                    "message": f"{entry.assigned_professor} is already busy with {clash.subject}"
                    + (f" ({clash.section})" if clash.section else ""),
                })
        return issues


# -- substitutes -----------------------------------------------------------------

SubstituteRejection = Literal[
    "missing",
    "locked",
    "unassigned",
    "same-professor",
    "unqualified",
    "conflict",
    "no-substitute",
]

SUBSTITUTE_MESSAGES: dict[str, str] = {
    "missing": "No subject is scheduled in this cell.",
    "locked": "The schedule is archived.",
    "unassigned": "Assign a professor before choosing a substitute.",
    "same-professor": "The substitute must differ from the assigned professor.",
    "unqualified": "The substitute is not qualified for this subject.",
    "conflict": "The substitute is already busy at this time.",
    "no-substitute": "This cell has no substitute to archive.",
}


@dataclass(frozen=True)
class SubstituteResult:
    schedule: Schedule
    key: str
    rejection: SubstituteRejection | None = None
    changed: bool = False

    @property
    def accepted(self) -> bool:
        return self.rejection is None

    @property
    def message(self) -> str | None:
        return SUBSTITUTE_MESSAGES[self.rejection] if self.rejection else None


def set_substitute(schedule: Schedule, key: SlotKey, substitute: str, snapshot: ScheduleSnapshot) -> SubstituteResult:
    text = schedule.grid.key_text(key)
    entry = schedule.grid.get(key)
    if schedule.is_archived:
        return SubstituteResult(schedule, text, "locked")
    if entry is None:
        return SubstituteResult(schedule, text, "missing")
    if not entry.assigned_professor:
        return SubstituteResult(schedule, text, "unassigned")
    name = normalize_professor(substitute)
    if same_professor(name, entry.assigned_professor):
        return SubstituteResult(schedule, text, "same-professor")
    if same_professor(name, entry.substitute_teacher):
        return SubstituteResult(schedule, text)

    member = snapshot.faculty_member(name)
    if member is None or member.archived or not professor_qualifies(member, entry.subject, schedule.program):
        return SubstituteResult(schedule, text, "unqualified")
    start, end = schedule.grid.span(key, entry)
    clash = find_conflict(
        "professor",
        name,
        key.day,
        start,
        end - start,
        snapshot.schedules,
        ExcludeSelf(schedule.id, key),
        snapshot.active_faculty(),
    )
    if clash is not None:
        logger.debug("Substitute %s busy with %s at %s", name, clash.subject, text)
        return SubstituteResult(schedule, text, "conflict")

    updated = schedule.grid.update_entry(key, substitute_teacher=member.professor_name).grid
    return SubstituteResult(schedule.with_grid(updated), text, changed=True)


@dataclass(frozen=True)
class SubstituteRecord:
    schedule_id: str
    doc_key: str
    section: str
    program: str
    day: str
    start_time: str
    end_time: str
    subject: str
    original_professor: str
    substitute_teacher: str
    archived_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def archive_substitute(
    schedule: Schedule,
    key: SlotKey,
    archived_at: datetime | None = None,
) -> tuple[SubstituteResult, SubstituteRecord | None]:
    """Record the overlay in history and return the entry to its assigned state."""
    text = schedule.grid.key_text(key)
    entry = schedule.grid.get(key)
    if entry is None:
        return SubstituteResult(schedule, text, "missing"), None
    if not entry.substitute_teacher:
        return SubstituteResult(schedule, text, "no-substitute"), None

    start_label = key.label(schedule.grid.axis)
    record = SubstituteRecord(
        schedule_id=schedule.id,
        doc_key=text,
        section=schedule.section_name,
        program=schedule.program,
        day=key.day.value,
        start_time=start_label,
        end_time=schedule.grid.end_label(key),
        subject=entry.subject,
        original_professor=entry.assigned_professor,
        substitute_teacher=entry.substitute_teacher,
        archived_at=archived_at or datetime.now(timezone.utc),
    )
    updated = schedule.grid.update_entry(key, substitute_teacher="").grid
    return SubstituteResult(schedule.with_grid(updated), text, changed=True), record


def substitute_keys_for(schedule: Schedule, professor: str) -> list[SlotKey]:
    """Cells of ``schedule`` where ``professor`` is the assigned professor and a substitute is set."""
    return [
        key
        for key, entry in schedule.grid.items()
        if entry.substitute_teacher and same_professor(entry.assigned_professor, professor)
    ]
