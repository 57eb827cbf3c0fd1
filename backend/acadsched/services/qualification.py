from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from acadsched.services.conflict_service import ExcludeSelf, ResourceKind, has_conflict
from acadsched.services.duration import SubjectMeta
from acadsched.services.naming import normalize_professor, normalize_token, subject_token
from acadsched.services.rooms import RoomPool, room_category
from acadsched.services.snapshot import FacultyMember, ScheduleSnapshot
from acadsched.services.time_axis import Day

logger = logging.getLogger(__name__)

CandidateStatus = Literal["available", "no-qualified-candidate", "no-subject"]


@dataclass(frozen=True)
class CandidateList:
    """Selectable resources for one cell.

    ``no-subject`` means nothing is placed yet; ``no-qualified-candidate``
    means the subject is known but every resource was filtered out.
    """

    kind: ResourceKind
    status: CandidateStatus
    candidates: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, kind: ResourceKind, names: Iterable[str]) -> "CandidateList":
        ordered = tuple(sorted(set(names), key=lambda name: (name.casefold(), name)))
        return cls(kind=kind, status="available" if ordered else "no-qualified-candidate", candidates=ordered)

    @classmethod
    def empty(cls, kind: ResourceKind) -> "CandidateList":
        return cls(kind=kind, status="no-subject")


def _contains_either_way(left: str, right: str) -> bool:
    return bool(left) and bool(right) and (left in right or right in left)


def professor_qualifies(member: FacultyMember, subject: str, program: str | None = None) -> bool:
    """Permissive course match on normalised code or name, in either direction."""
    wanted = subject_token(subject)
    if not wanted:
        return False
    wanted_program = normalize_token(program)
    for course in member.qualified_courses:
        course_program = normalize_token(course.program)
        if wanted_program and course_program and course_program != wanted_program:
            continue
        code = normalize_token(course.course_code)
        name = subject_token(course.course_name)
        if _contains_either_way(wanted, code) or _contains_either_way(wanted, name):
            return True
    return False


def room_candidates(
    subject: str,
    meta: SubjectMeta | None,
    day: Day,
    start_index: int,
    duration_slots: int,
    pool: RoomPool,
    snapshot: ScheduleSnapshot,
    exclude_self: ExcludeSelf | None = None,
) -> CandidateList:
    if not subject:
        return CandidateList.empty("room")
    category = room_category(subject, meta)
    free = []
    for room in pool.rooms_for(category):
        if has_conflict("room", room, day, start_index, duration_slots, snapshot.schedules, exclude_self):
            continue
        free.append(room)
    logger.debug("%d %s rooms free for %s", len(free), category.value, subject)
    return CandidateList.build("room", free)


def professor_candidates(
    subject: str,
    day: Day,
    start_index: int,
    duration_slots: int,
    snapshot: ScheduleSnapshot,
    exclude_self: ExcludeSelf | None = None,
    exclude_professors: Iterable[str] = (),
    program: str | None = None,
) -> CandidateList:
    if not subject:
        return CandidateList.empty("professor")
    skipped = {normalize_professor(name) for name in exclude_professors if name}
    faculty = snapshot.active_faculty()
    names = []
    for member in faculty:
        if member.normalized_name in skipped:
            continue
        if not professor_qualifies(member, subject, program):
            continue
        if has_conflict(
            "professor",
            member.professor_name,
            day,
            start_index,
            duration_slots,
            snapshot.schedules,
            exclude_self,
            faculty,
        ):
            continue
        names.append(member.professor_name)
    return CandidateList.build("professor", names)
