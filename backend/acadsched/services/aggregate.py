"""Room and professor week views derived from the section schedules.

Nothing here is stored; every call rebuilds the view from one snapshot.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from acadsched.services.conflict_service import ResourceKind, resource_of
from acadsched.services.snapshot import ScheduleSnapshot
from acadsched.services.time_axis import DEFAULT_AXIS, Day, TimeAxis, day_sort_key


@dataclass(frozen=True)
class AggregateEntry:
    day: Day
    start: int
    duration_slots: int
    subject: str
    section: str = ""
    schedule_id: str | None = None
    room: str = ""
    professor: str = ""
    substitute_teacher: str = ""
    kind: str = "class"

    def start_label(self, axis: TimeAxis = DEFAULT_AXIS) -> str:
        return axis.require_label(self.start)

    def end_label(self, axis: TimeAxis = DEFAULT_AXIS) -> str:
        return axis.end_label(self.start_label(axis), self.duration_slots)


def derive_aggregate_view(kind: ResourceKind, snapshot: ScheduleSnapshot) -> dict[str, list[AggregateEntry]]:
    view: dict[str, list[AggregateEntry]] = defaultdict(list)
    for schedule in snapshot.live_schedules():
        for key, entry in schedule.grid.items():
            resource = resource_of(kind, entry)
            if not resource:
                continue
            view[resource].append(AggregateEntry(
                day=key.day,
                start=key.start,
                duration_slots=entry.duration_slots,
                subject=entry.subject,
                section=schedule.section_name,
                schedule_id=schedule.id,
                room=entry.room,
                professor=entry.assigned_professor,
                substitute_teacher=entry.substitute_teacher,
            ))

    if kind == "professor":
        for member in snapshot.active_faculty():
            # Only professors that already teach get a calendar.
            if member.normalized_name not in view:
                continue
            for block in member.non_teaching:
                view[member.normalized_name].append(AggregateEntry(
                    day=block.day,
                    start=block.start,
                    duration_slots=block.duration_slots,
                    subject=block.label,
                    professor=member.normalized_name,
                    kind="non-teaching",
                ))

    for entries in view.values():
        entries.sort(key=lambda item: (day_sort_key(item.day), item.start))
    return dict(sorted(view.items()))
