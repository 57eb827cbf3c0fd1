from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class SubstituteSet(BaseModel):
    substitute_teacher: str = Field(min_length=1, max_length=200)

    @field_validator("substitute_teacher")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        name = " ".join(value.split())
        if not name:
            raise ValueError("Substitute name cannot be blank")
        return name


class SubstituteBatchItem(SubstituteSet):
    schedule_id: str = Field(min_length=1, max_length=120)
    key: str = Field(min_length=3, max_length=40)


class SubstituteBatch(BaseModel):
    items: list[SubstituteBatchItem] = Field(min_length=1, max_length=200)


class SubstituteBatchResult(BaseModel):
    schedule_id: str
    key: str
    saved: bool
    reason: str | None = None
    message: str | None = None


class ProfessorClassOut(BaseModel):
    schedule_id: str
    key: str
    section: str
    program: str
    day: str
    start_time: str
    end_time: str
    subject: str
    room: str = ""
    assigned_professor: str
    substitute_teacher: str = ""


class SubstituteHistoryOut(BaseModel):
    id: str
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
    archived_at: datetime

    model_config = {"from_attributes": True}
