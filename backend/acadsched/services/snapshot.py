from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Literal

from acadsched.services.duration import SubjectCatalog
from acadsched.services.naming import normalize_professor
from acadsched.services.occupancy import ScheduleGrid
from acadsched.services.time_axis import DEFAULT_AXIS, Day, TimeAxis, parse_day

ScheduleState = Literal["draft", "submitted", "archived"]
NonTeachingType = Literal["Consultation", "Administrative"]


@dataclass(frozen=True)
class Schedule:
    id: str
    section_name: str
    grid: ScheduleGrid
    program: str = ""
    semester: str = ""
    year_level: str = ""
    year: str = ""
    status: ScheduleState = "draft"
    catalog: SubjectCatalog = field(default_factory=SubjectCatalog, compare=False)

    @property
    def is_archived(self) -> bool:
        return self.status == "archived"

    @property
    def is_locked(self) -> bool:
        return self.status in ("submitted", "archived")

    def with_grid(self, grid: ScheduleGrid) -> "Schedule":
        return replace(self, grid=grid)


@dataclass(frozen=True)
class QualifiedCourse:
    course_code: str = ""
    course_name: str = ""
    program: str = ""
    units: float = 0


@dataclass(frozen=True)
class NonTeachingBlock:
    day: Day
    start: int
    duration_slots: int
    type: NonTeachingType
    hours: float

    @property
    def label(self) -> str:
        return "CONSULTATION" if self.type == "Consultation" else "ADMIN"


def non_teaching_slots(hours: float) -> int:
    # 0.5 hour = 1 slot
    return max(1, round(float(hours or 0) * 2))


def non_teaching_block(
    day: str,
    time: str,
    type_: str,
    hours: float,
    axis: TimeAxis = DEFAULT_AXIS,
) -> NonTeachingBlock:
    start = axis.require_index(time)
    kind: NonTeachingType = "Consultation" if str(type_).strip().lower() == "consultation" else "Administrative"
    return NonTeachingBlock(
        day=parse_day(day),
        start=start,
        duration_slots=axis.clamp_run(start, non_teaching_slots(hours)),
        type=kind,
        hours=float(hours or 0),
    )


@dataclass(frozen=True)
class FacultyMember:
    professor_name: str
    qualified_courses: tuple[QualifiedCourse, ...] = ()
    non_teaching: tuple[NonTeachingBlock, ...] = ()
    shift: str = "FULL-TIME"
    units: float = 0
    archived: bool = False
    id: str | None = None

    @property
    def normalized_name(self) -> str:
        return normalize_professor(self.professor_name)

    @classmethod
    def from_document(
        cls,
        professor_name: str,
        qualified_courses: Iterable[Mapping] = (),
        non_teaching_assignments: Iterable[Mapping] = (),
        **attrs,
    ) -> "FacultyMember":
        courses = tuple(
            QualifiedCourse(
                course_code=str(course.get("courseCode") or ""),
                course_name=str(course.get("courseName") or course.get("course") or ""),
                program=str(course.get("program") or ""),
                units=float(course.get("units") or 0),
            )
            for course in qualified_courses
        )
        blocks = tuple(
            non_teaching_block(item["day"], item["time"], item.get("type", "Consultation"), item.get("hours", 1))
            for item in non_teaching_assignments
            if item.get("day") and item.get("time") and item.get("hours")
        )
        return cls(professor_name=normalize_professor(professor_name), qualified_courses=courses, non_teaching=blocks, **attrs)


@dataclass(frozen=True)
class ScheduleSnapshot:
    """One consistent read of every schedule and faculty record.

    Every conflict and candidate computation for a request runs against a
    single snapshot; a newer store read produces a new snapshot.
    """

    schedules: tuple[Schedule, ...] = ()
    faculty: tuple[FacultyMember, ...] = ()

    def schedule(self, schedule_id: str) -> Schedule | None:
        for item in self.schedules:
            if item.id == schedule_id:
                return item
        return None

    def live_schedules(self) -> tuple[Schedule, ...]:
        return tuple(item for item in self.schedules if not item.is_archived)

    def active_faculty(self) -> tuple[FacultyMember, ...]:
        return tuple(member for member in self.faculty if not member.archived)

    def faculty_member(self, professor_name: str) -> FacultyMember | None:
        wanted = normalize_professor(professor_name)
        for member in self.faculty:
            if member.normalized_name == wanted:
                return member
        return None

    def with_schedule(self, schedule: Schedule) -> "ScheduleSnapshot":
        others = tuple(item for item in self.schedules if item.id != schedule.id)
        return replace(self, schedules=others + (schedule,))
