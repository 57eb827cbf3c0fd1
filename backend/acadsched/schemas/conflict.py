from pydantic import BaseModel
from typing import Literal, List

class AffectedSlot(BaseModel):
    schedule_id: str
    key: str

class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal[
        "room_conflict",
        "professor_conflict",
        "section_conflict",
        "room_type",
    ]
    description: str
    severity: Literal["hard", "soft"]
    affected_slots: List[AffectedSlot]

class ResolutionAction(BaseModel):
    action_type: Literal["move_slot", "change_room", "change_professor"]
    description: str
    target: AffectedSlot

class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail]
    suggested_resolutions: List[ResolutionAction]
