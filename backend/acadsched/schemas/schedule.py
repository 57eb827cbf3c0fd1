from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from acadsched.models.schedule import ScheduleStatus


class SubjectRecord(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    lec: float = Field(default=0, ge=0, le=20)
    lab: float = Field(default=0, ge=0, le=20)
    comp_lab: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Subject name cannot be blank")
        return name

    @field_validator("comp_lab", mode="before")
    @classmethod
    def parse_yes_no(cls, value):
        if isinstance(value, str):
            return value.strip().lower() in {"yes", "y", "true", "1"}
        return value

    def to_document(self) -> dict:
        return {"name": self.name, "lec": self.lec, "lab": self.lab, "compLab": "Yes" if self.comp_lab else "No"}


class ScheduleCreate(BaseModel):
    section_id: str = Field(min_length=1, max_length=80)
    section_name: str = Field(min_length=1, max_length=120)
    program: str = Field(default="", max_length=120)
    semester: str = Field(min_length=1, max_length=40)
    year_level: str = Field(default="", max_length=40)
    year: str = Field(default="", max_length=20)
    subjects: list[SubjectRecord] = Field(default_factory=list, max_length=200)

    @model_validator(mode="after")
    def unique_subjects(self) -> "ScheduleCreate":
        names = [subject.name for subject in self.subjects]
        if len(names) != len(set(names)):
            raise ValueError("Subject names must be unique within a section")
        return self


class ScheduleEntryOut(BaseModel):
    key: str
    day: str
    start_time: str
    end_time: str
    subject: str
    duration_slots: int
    room: str = ""
    assigned_professor: str = ""
    substitute_teacher: str = ""


class ScheduleOut(BaseModel):
    id: str
    section_id: str
    section_name: str
    program: str
    semester: str
    year_level: str
    year: str
    status: ScheduleStatus
    entries: list[ScheduleEntryOut] = Field(default_factory=list)
    unplaced_subjects: list[str] = Field(default_factory=list)
    unassigned_keys: list[str] = Field(default_factory=list)
    updated_at: datetime | None = None


class EditOperation(BaseModel):
    op: Literal["place", "move", "remove", "set_room"]
    key: str = Field(min_length=3, max_length=40)
    subject: str | None = Field(default=None, max_length=200)
    target: str | None = Field(default=None, max_length=40)
    duration_slots: int | None = Field(default=None, ge=1, le=28)
    room: str | None = Field(default=None, max_length=120)

    @model_validator(mode="after")
    def validate_operation(self) -> "EditOperation":
        if self.op == "place" and not (self.subject or "").strip():
            raise ValueError("place requires a subject")
        if self.op == "move" and not self.target:
            raise ValueError("move requires a target key")
        if self.op == "set_room" and self.room is None:
            raise ValueError("set_room requires a room (empty string clears it)")
        return self


class EditBatch(BaseModel):
    operations: list[EditOperation] = Field(min_length=1, max_length=200)


class CandidateListOut(BaseModel):
    kind: Literal["room", "professor"]
    key: str
    status: Literal["available", "no-qualified-candidate", "no-subject"]
    candidates: list[str] = Field(default_factory=list)


class ProfessorAssignmentSave(BaseModel):
    assignments: dict[str, str] = Field(default_factory=dict)

    @field_validator("assignments")
    @classmethod
    def strip_names(cls, value: dict[str, str]) -> dict[str, str]:
        return {key.strip(): " ".join(str(name).split()) for key, name in value.items()}
