"""Sparse occupancy map of one section's week.

Entries are anchored at ``(day, start)`` and cover ``[start, start + duration)``.
Within one grid no two entries overlap on a day and no subject appears twice.
Every mutation returns a new grid inside a :class:`PlacementResult`; a
rejected mutation carries the reason instead of silently doing nothing.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Literal

from acadsched.services.naming import normalize_professor
from acadsched.services.time_axis import DEFAULT_AXIS, Day, SlotKey, TimeAxis, day_sort_key, parse_key

logger = logging.getLogger(__name__)

RejectionReason = Literal[
    "occupied",
    "covered",
    "duplicate-subject",
    "missing",
    "locked",
    "room-unavailable",
]

REJECTION_MESSAGES: dict[str, str] = {
    "occupied": "Another subject already starts in this cell.",
    "covered": "This cell is inside another subject's block.",
    "duplicate-subject": "This subject is already scheduled. Move the existing block instead of adding another.",
    "missing": "No subject is scheduled in this cell.",
    "locked": "The schedule is submitted or archived and cannot be edited.",
    "room-unavailable": "The room is not available for this subject at this time.",
}


@dataclass(frozen=True)
class ScheduleEntry:
    subject: str
    duration_slots: int
    room: str = ""
    assigned_professor: str = ""
    substitute_teacher: str = ""

    @property
    def effective_professor(self) -> str:
        return normalize_professor(self.substitute_teacher) or normalize_professor(self.assigned_professor)


@dataclass(frozen=True)
class PlacementRejected:
    reason: RejectionReason
    key: str
    subject: str | None = None

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self.reason]


@dataclass(frozen=True)
class PlacementResult:
    grid: "ScheduleGrid"
    rejection: PlacementRejected | None = None
    key: SlotKey | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


class ScheduleGrid:
    def __init__(self, entries: Mapping[SlotKey, ScheduleEntry] | None = None, axis: TimeAxis = DEFAULT_AXIS) -> None:
        self.axis = axis
        self._entries: dict[SlotKey, ScheduleEntry] = dict(entries or {})

    # -- read access -------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScheduleGrid):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ScheduleGrid({len(self._entries)} entries)"

    def get(self, key: SlotKey) -> ScheduleEntry | None:
        return self._entries.get(key)

    def items(self) -> Iterator[tuple[SlotKey, ScheduleEntry]]:
        for key in sorted(self._entries, key=lambda item: (day_sort_key(item.day), item.start)):
            yield key, self._entries[key]

    def entries_on(self, day: Day) -> list[tuple[SlotKey, ScheduleEntry]]:
        return [(key, entry) for key, entry in self.items() if key.day == day]

    def key_text(self, key: SlotKey) -> str:
        return key.as_text(self.axis)

    def span(self, key: SlotKey, entry: ScheduleEntry) -> tuple[int, int]:
        """Half-open slot range of ``entry``, clipped to the end of the day."""
        length = self.axis.clamp_run(key.start, max(1, entry.duration_slots))
        return key.start, key.start + length

    def end_label(self, key: SlotKey) -> str:
        entry = self._entries[key]
        return self.axis.end_label(self.axis.require_label(key.start), entry.duration_slots)

    def find_subject(self, subject: str) -> SlotKey | None:
        for key, entry in self._entries.items():
            if entry.subject == subject:
                return key
        return None

    def subjects(self) -> set[str]:
        return {entry.subject for entry in self._entries.values()}

    # -- occupancy queries -------------------------------------------------

    def covering_key(self, day: Day, index: int, excluding: SlotKey | None = None) -> SlotKey | None:
        for key, entry in self._entries.items():
            if key.day != day or key == excluding:
                continue
            start, end = self.span(key, entry)
            if start < index < end:
                return key
        return None

    def is_covered(self, day: Day, index: int, excluding: SlotKey | None = None) -> bool:
        """True when ``index`` is a continuation cell of some entry (never its anchor)."""
        return self.covering_key(day, index, excluding) is not None

    def available_run(self, day: Day, start_index: int, desired_slots: int, excluding: SlotKey | None = None) -> int:
        want = max(1, int(desired_slots or 1))
        longest = min(want, len(self.axis) - start_index)
        next_start = len(self.axis)
        for key in self._entries:
            if key == excluding or key.day != day:
                continue
            if start_index < key.start < next_start:
                next_start = key.start
        longest = min(longest, next_start - start_index)
        return max(1, longest)

    # -- mutations ---------------------------------------------------------

    def _reject(self, reason: RejectionReason, key: SlotKey, subject: str | None) -> PlacementResult:
        logger.debug("Rejected %s at %s: %s", subject, self.key_text(key), reason)
        return PlacementResult(grid=self, rejection=PlacementRejected(reason, self.key_text(key), subject), key=key)

    def place(
        self,
        day: Day,
        start_index: int,
        subject: str,
        duration_slots: int,
        *,
        source: SlotKey | None = None,
        room: str | None = None,
    ) -> PlacementResult:
        """Anchor ``subject`` at ``(day, start_index)``.

        With ``source`` set this is a move of the entry anchored there: the
        entry's room is carried over; its professor and substitute are not.
        The requested duration is truncated to the free run before the next
        entry.
        """
        target = SlotKey(day, start_index)
        self.axis.require_label(start_index)
        if source is not None:
            carried = self._entries.get(source)
            if carried is None or carried.subject != subject:
                return self._reject("missing", source, subject)
            if source == target:
                return PlacementResult(grid=self, key=target)
        else:
            carried = None

        if target in self._entries:
            return self._reject("occupied", target, subject)
        if self.is_covered(day, start_index, excluding=source):
            return self._reject("covered", target, subject)
        if source is None and self.find_subject(subject) is not None:
            return self._reject("duplicate-subject", target, subject)

        slots = self.available_run(day, start_index, duration_slots, excluding=source)
        entries = {
            key: entry
            for key, entry in self._entries.items()
            if key != source and entry.subject != subject
        }
        entries[target] = ScheduleEntry(
            subject=subject,
            duration_slots=slots,
            room=room if room is not None else (carried.room if carried else ""),
        )
        return PlacementResult(grid=ScheduleGrid(entries, self.axis), key=target)

    def move(self, source: SlotKey, day: Day, start_index: int, duration_slots: int) -> PlacementResult:
        entry = self._entries.get(source)
        if entry is None:
            return self._reject("missing", source, None)
        return self.place(day, start_index, entry.subject, duration_slots, source=source)

    def remove(self, day: Day, start_index: int) -> PlacementResult:
        key = SlotKey(day, start_index)
        if key not in self._entries:
            return self._reject("missing", key, None)
        entries = {item: entry for item, entry in self._entries.items() if item != key}
        return PlacementResult(grid=ScheduleGrid(entries, self.axis), key=key)

    def update_entry(self, key: SlotKey, **changes) -> PlacementResult:
        entry = self._entries.get(key)
        if entry is None:
            return self._reject("missing", key, None)
        entries = dict(self._entries)
        entries[key] = replace(entry, **changes)
        return PlacementResult(grid=ScheduleGrid(entries, self.axis), key=key)

    # -- document mapping --------------------------------------------------

    @classmethod
    def from_document(
        cls,
        schedule_map: Mapping[str, Mapping] | None,
        professor_assignments: Mapping[str, str] | None = None,
        axis: TimeAxis = DEFAULT_AXIS,
    ) -> "ScheduleGrid":
        # Keys are canonicalised so "Mon_9:00AM" and "Monday_9:00AM" name the same cell.
        assignments = {
            parse_key(raw_key, axis): normalize_professor(name)
            for raw_key, name in (professor_assignments or {}).items()
        }
        entries: dict[SlotKey, ScheduleEntry] = {}
        seen: set[str] = set()
        for raw_key, value in (schedule_map or {}).items():
            if not value or not value.get("subject"):
                continue
            if value["subject"] in seen:
                continue
            seen.add(value["subject"])
            key = parse_key(raw_key, axis)
            try:
                slots = int(value.get("durationSlots") or 0)
            except (TypeError, ValueError):
                slots = 0
            if slots < 1:
                end = axis.index_of(value.get("endTime") or "")
                slots = end - key.start if end is not None and end > key.start else 1
            entries[key] = ScheduleEntry(
                subject=str(value["subject"]),
                duration_slots=slots,
                room=str(value.get("room") or ""),
                assigned_professor=assignments.get(key, ""),
                substitute_teacher=normalize_professor(value.get("substituteTeacher")),
            )
        return cls(entries, axis)

    def to_document(self) -> tuple[dict[str, dict], dict[str, str]]:
        schedule_map: dict[str, dict] = {}
        assignments: dict[str, str] = {}
        for key, entry in self.items():
            text = self.key_text(key)
            start_label = key.label(self.axis)
            value = {
                "subject": entry.subject,
                "room": entry.room,
                "durationSlots": entry.duration_slots,
                "startTime": start_label,
                "endTime": self.axis.end_label(start_label, entry.duration_slots),
            }
            if entry.substitute_teacher:
                value["substituteTeacher"] = entry.substitute_teacher
            schedule_map[text] = value
            if entry.assigned_professor:
                assignments[text] = entry.assigned_professor
        return schedule_map, assignments
