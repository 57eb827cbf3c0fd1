from pydantic import BaseModel, Field


class AggregateEntryOut(BaseModel):
    day: str
    start_time: str
    end_time: str
    duration_slots: int
    subject: str
    kind: str = "class"
    section: str = ""
    schedule_id: str | None = None
    room: str = ""
    professor: str = ""
    substitute_teacher: str = ""


class ResourceViewOut(BaseModel):
    resource: str
    entries: list[AggregateEntryOut] = Field(default_factory=list)
