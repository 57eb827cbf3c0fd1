from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Dict, List, Literal

from acadsched.schemas.conflict import AffectedSlot, ConflictDetail, ConflictReport, ResolutionAction
from acadsched.services.naming import normalize_professor
from acadsched.services.rooms import RoomCategory, RoomPool, room_category
from acadsched.services.snapshot import FacultyMember, Schedule, ScheduleSnapshot
from acadsched.services.time_axis import Day, SlotKey

logger = logging.getLogger(__name__)

ResourceKind = Literal["room", "professor"]


@dataclass(frozen=True)
class ExcludeSelf:
    schedule_id: str
    key: SlotKey


@dataclass(frozen=True)
class Occupancy:
    """One block of a resource's calendar, teaching or non-teaching."""

    resource_id: str
    day: Day
    start: int
    end: int
    subject: str
    section: str = ""
    schedule_id: str | None = None
    key: SlotKey | None = None
    room: str = ""

    @property
    def is_class(self) -> bool:
        return self.schedule_id is not None


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def resource_of(kind: ResourceKind, entry) -> str:
    if kind == "room":
        return entry.room
    return entry.effective_professor


def iter_occupancy(
    kind: ResourceKind,
    schedules: Iterable[Schedule],
    faculty: Iterable[FacultyMember] = (),
) -> Iterator[Occupancy]:
    """Every block held by any room or professor, archived schedules skipped.

    Professors also hold their consultation and administrative blocks.
    """
    for schedule in schedules:
        if schedule.is_archived:
            continue
        for key, entry in schedule.grid.items():
            resource = resource_of(kind, entry)
            if not resource:
                continue
            start, end = schedule.grid.span(key, entry)
            yield Occupancy(
                resource_id=resource,
                day=key.day,
                start=start,
                end=end,
                subject=entry.subject,
                section=schedule.section_name,
                schedule_id=schedule.id,
                key=key,
                room=entry.room,
            )
    if kind != "professor":
        return
    for member in faculty:
        if member.archived:
            continue
        for block in member.non_teaching:
            yield Occupancy(
                resource_id=member.normalized_name,
                day=block.day,
                start=block.start,
                end=block.start + block.duration_slots,
                subject=block.label,
            )


def _matches(kind: ResourceKind, resource_id: str, candidate: str) -> bool:
    if kind == "room":
        return bool(resource_id) and candidate == resource_id
    wanted = normalize_professor(resource_id)
    return bool(wanted) and normalize_professor(candidate) == wanted


def find_conflict(
    kind: ResourceKind,
    resource_id: str,
    day: Day,
    start_index: int,
    duration_slots: int,
    schedules: Iterable[Schedule],
    exclude_self: ExcludeSelf | None = None,
    faculty: Iterable[FacultyMember] = (),
) -> Occupancy | None:
    end_index = start_index + max(1, duration_slots)
    for block in iter_occupancy(kind, schedules, faculty):
        if block.day != day:
            continue
        if exclude_self is not None and block.schedule_id == exclude_self.schedule_id and block.key == exclude_self.key:
            continue
        if not _matches(kind, resource_id, block.resource_id):
            continue
        if intervals_overlap(start_index, end_index, block.start, block.end):
            return block
    return None


def has_conflict(
    kind: ResourceKind,
    resource_id: str,
    day: Day,
    start_index: int,
    duration_slots: int,
    schedules: Iterable[Schedule],
    exclude_self: ExcludeSelf | None = None,
    faculty: Iterable[FacultyMember] = (),
) -> bool:
    block = find_conflict(kind, resource_id, day, start_index, duration_slots, schedules, exclude_self, faculty)
    if block is not None:
        logger.debug(
            "%s %s busy on %s [%d, %d) with %s (%s)",
            kind,
            resource_id,
            day.value,
            block.start,
            block.end,
            block.subject,
            block.section or "non-teaching",
        )
    return block is not None


class ConflictService:
    """Whole-snapshot audit: every overlapping pair sharing a room, professor or section."""

    def __init__(self, snapshot: ScheduleSnapshot, room_pool: RoomPool | None = None):
        self.snapshot = snapshot
        self.room_pool = room_pool
        self.schedules: List[Schedule] = list(snapshot.live_schedules())

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []
        conflicts.extend(self._room_type_conflicts())

        for kind, conflict_type, label in (
            ("room", "room_conflict", "Room"),
            ("professor", "professor_conflict", "Professor"),
        ):
            by_resource_day: Dict[tuple, List] = defaultdict(list)
            for block in iter_occupancy(kind, self.schedules, self.snapshot.active_faculty()):
                key = (block.resource_id if kind == "room" else normalize_professor(block.resource_id), block.day)
                by_resource_day[key].append(block)
            for (resource, day), blocks in by_resource_day.items():
                n = len(blocks)
                for i in range(n):
                    b1 = blocks[i]
                    for j in range(i + 1, n):
                        b2 = blocks[j]
                        if not intervals_overlap(b1.start, b1.end, b2.start, b2.end):
                            continue
                        # Two non-teaching blocks of one professor are checked on save.
                        if not b1.is_class and not b2.is_class:
                            continue
                        affected = [self._slot(block) for block in (b1, b2) if block.is_class]
                        conflicts.append(ConflictDetail(
                            id=f"{kind}-{resource}-{day.value}-{b1.start}-{b2.start}-{len(conflicts)}",
                            conflict_type=conflict_type,
                            description=(
                                f"{label} overlap for {resource} on {day.value}: "
                                f"{b1.subject} ({b1.section or 'non-teaching'}) and "
                                f"{b2.subject} ({b2.section or 'non-teaching'})"
                            ),
                            severity="hard",
                            affected_slots=affected,
                        ))

        for schedule in self.schedules:
            for day in Day:
                day_entries = schedule.grid.entries_on(day)
                n = len(day_entries)
                for i in range(n):
                    k1, e1 = day_entries[i]
                    s1, end1 = schedule.grid.span(k1, e1)
                    for j in range(i + 1, n):
                        k2, e2 = day_entries[j]
                        s2, end2 = schedule.grid.span(k2, e2)
                        if intervals_overlap(s1, end1, s2, end2):
                            conflicts.append(ConflictDetail(
                                id=f"sec-{schedule.id}-{schedule.grid.key_text(k1)}-{schedule.grid.key_text(k2)}",
                                conflict_type="section_conflict",
                                description=f"Section overlap in {schedule.section_name}: {e1.subject} and {e2.subject}",
                                severity="hard",
                                affected_slots=[
                                    AffectedSlot(schedule_id=schedule.id, key=schedule.grid.key_text(k1)),
                                    AffectedSlot(schedule_id=schedule.id, key=schedule.grid.key_text(k2)),
                                ],
                            ))

        resolutions: List[ResolutionAction] = []
        for conflict in conflicts:
            resolutions.extend(self.generate_resolutions(conflict))
        return ConflictReport(conflicts=conflicts, suggested_resolutions=resolutions)

    def _room_type_conflicts(self) -> List[ConflictDetail]:
        if self.room_pool is None:
            return []
        conflicts = []
        for schedule in self.schedules:
            for key, entry in schedule.grid.items():
                if not entry.room:
                    continue
                category = room_category(entry.subject, schedule.catalog.meta_for(entry.subject))
                if entry.room in self.room_pool.rooms_for(category):
                    continue
                text = schedule.grid.key_text(key)
                conflicts.append(ConflictDetail(
                    id=f"type-{schedule.id}-{text}",
                    conflict_type="room_type",
                    description=f"{entry.subject} needs a {_category_label(category)} room, not {entry.room}",
                    severity="hard",
                    affected_slots=[AffectedSlot(schedule_id=schedule.id, key=text)],
                ))
        return conflicts

    @staticmethod
    def _slot(block: Occupancy) -> AffectedSlot:
        return AffectedSlot(schedule_id=block.schedule_id, key=block.key.as_text())

    def generate_resolutions(self, conflict: ConflictDetail) -> List[ResolutionAction]:
        resolutions = []
        if not conflict.affected_slots:
            return resolutions
        target = conflict.affected_slots[0]
        if conflict.conflict_type in ("room_conflict", "room_type"):
            resolutions.append(ResolutionAction(
                action_type="change_room",
                description="Pick another room from the room candidates",
                target=target,
            ))
        if conflict.conflict_type == "professor_conflict":
            resolutions.append(ResolutionAction(
                action_type="change_professor",
                description="Assign another qualified professor",
                target=target,
            ))
        if conflict.conflict_type in ("professor_conflict", "section_conflict"):
            resolutions.append(ResolutionAction(
                action_type="move_slot",
                description="Move to a different time slot",
                target=target,
            ))
        return resolutions


def _category_label(category: RoomCategory) -> str:
    return {
        RoomCategory.lecture: "lecture",
        RoomCategory.laboratory: "laboratory",
        RoomCategory.physical_education: "P.E.",
    }[category]
