from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

from acadsched.core.config import Settings
from acadsched.services.duration import SubjectMeta
from acadsched.services.naming import parse_subject_name

# "P.E 1", "PE 2", "PHYSICAL EDUCATION", "PATHFIT 3"; not "SPEECH" or "PEOPLEWARE".
_PE_PATTERN = re.compile(r"(\bP\.\s*E\b\.?|\bPE\b|PHYSICAL\s+EDUCATION|PATHFIT)", re.IGNORECASE)


class RoomCategory(str, Enum):
    lecture = "lecture"
    laboratory = "laboratory"
    physical_education = "physical_education"


def is_pe_subject(subject_name: str | None) -> bool:
    return bool(_PE_PATTERN.search(str(subject_name or "")))


def room_category(subject_name: str, meta: SubjectMeta | None = None) -> RoomCategory:
    if is_pe_subject(subject_name):
        return RoomCategory.physical_education
    if meta is not None:
        return RoomCategory.laboratory if meta.is_lab_session else RoomCategory.lecture
    if parse_subject_name(subject_name).kind == "LAB":
        return RoomCategory.laboratory
    return RoomCategory.lecture


class RoomPool:
    def __init__(self, rooms: Iterable[str], pe_rooms: Iterable[str] = (), lab_marker: str = "LAB") -> None:
        self.rooms = [room for room in rooms if room]
        self.pe_rooms = [room for room in pe_rooms if room]
        self.lab_marker = lab_marker.upper()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RoomPool":
        return cls(settings.room_pool, settings.pe_rooms, settings.lab_room_marker)

    def is_lab_room(self, room: str) -> bool:
        return self.lab_marker in room.upper()

    def rooms_for(self, category: RoomCategory) -> list[str]:
        if category == RoomCategory.physical_education:
            return list(self.pe_rooms)
        if category == RoomCategory.laboratory:
            return [room for room in self.rooms if self.is_lab_room(room)]
        return [room for room in self.rooms if not self.is_lab_room(room)]

    def all_rooms(self) -> list[str]:
        return self.rooms + [room for room in self.pe_rooms if room not in self.rooms]
