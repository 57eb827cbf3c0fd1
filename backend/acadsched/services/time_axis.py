"""Fixed weekly time grid: six teaching days and half-hour slot labels.

Slot ``i`` covers ``[label(i), label(i + 1))``. Index arithmetic never wraps
into the next day; callers clamp runs to the day's slot count.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from acadsched.core.exceptions import TimeAxisError


class Day(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"


DAY_ORDER: tuple[Day, ...] = tuple(Day)

DAY_SHORT_MAP = {
    "Mon": Day.monday,
    "Tue": Day.tuesday,
    "Wed": Day.wednesday,
    "Thu": Day.thursday,
    "Fri": Day.friday,
    "Sat": Day.saturday,
}

TIME_LABELS: tuple[str, ...] = (
    "7:00AM",
    "7:30AM",
    "8:00AM",
    "8:30AM",
    "9:00AM",
    "9:30AM",
    "10:00AM",
    "10:30AM",
    "11:00AM",
    "11:30AM",
    "12:00PM",
    "12:30PM",
    "1:00PM",
    "1:30PM",
    "2:00PM",
    "2:30PM",
    "3:00PM",
    "3:30PM",
    "4:00PM",
    "4:30PM",
    "5:00PM",
    "5:30PM",
    "6:00PM",
    "6:30PM",
    "7:00PM",
    "7:30PM",
    "8:00PM",
    "8:30PM",
)

# Consultation and administrative blocks may only start up to 6:00PM.
NON_TEACHING_START_LABELS: tuple[str, ...] = TIME_LABELS[: TIME_LABELS.index("6:00PM") + 1]

KEY_SEPARATOR = "_"


def parse_day(value: str | Day) -> Day:
    if isinstance(value, Day):
        return value
    cleaned = str(value or "").strip()
    cleaned = DAY_SHORT_MAP.get(cleaned, cleaned)
    try:
        return Day(cleaned)
    except ValueError as exc:
        raise TimeAxisError(f"Unknown day {value!r}") from exc


class TimeAxis:
    def __init__(self, labels: tuple[str, ...] = TIME_LABELS) -> None:
        self.labels = tuple(labels)
        self._index = {label: position for position, label in enumerate(self.labels)}

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def last_index(self) -> int:
        return len(self.labels) - 1

    def index_of(self, label: str) -> int | None:
        return self._index.get(str(label or "").strip())

    def require_index(self, label: str) -> int:
        index = self.index_of(label)
        if index is None:
            raise TimeAxisError(f"Unknown time label {label!r}")
        return index

    def label_at(self, index: int) -> str | None:
        if 0 <= index < len(self.labels):
            return self.labels[index]
        return None

    def require_label(self, index: int) -> str:
        label = self.label_at(index)
        if label is None:
            raise TimeAxisError(f"Time slot index {index} is outside the day")
        return label

    def end_label(self, start_label: str, duration_slots: int) -> str:
        start = self.index_of(start_label)
        if start is None:
            return ""
        return self.labels[min(start + duration_slots, self.last_index)]

    def duration_between(self, start_label: str, end_label: str) -> int | None:
        start = self.index_of(start_label)
        end = self.index_of(end_label)
        if start is None or end is None or end < start:
            return None
        return end - start

    def clamp_run(self, start_index: int, duration_slots: int) -> int:
        return max(0, min(duration_slots, len(self.labels) - start_index))


DEFAULT_AXIS = TimeAxis()


class SlotKey(NamedTuple):
    day: Day
    start: int

    def label(self, axis: TimeAxis = DEFAULT_AXIS) -> str:
        return axis.require_label(self.start)

    def as_text(self, axis: TimeAxis = DEFAULT_AXIS) -> str:
        return f"{self.day.value}{KEY_SEPARATOR}{self.label(axis)}"


def make_key(day: str | Day, label: str, axis: TimeAxis = DEFAULT_AXIS) -> SlotKey:
    return SlotKey(parse_day(day), axis.require_index(label))


def parse_key(key: str, axis: TimeAxis = DEFAULT_AXIS) -> SlotKey:
    day, separator, label = str(key).partition(KEY_SEPARATOR)
    if not separator:
        raise TimeAxisError(f"Malformed schedule key {key!r}")
    return make_key(day, label, axis)


def day_sort_key(day: Day) -> int:
    return DAY_ORDER.index(day)
