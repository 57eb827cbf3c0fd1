from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from acadsched.models.faculty import FacultyShift, FacultyStatus
from acadsched.services.time_axis import DAY_ORDER, NON_TEACHING_START_LABELS

DAY_VALUES = {day.value for day in DAY_ORDER}


class QualifiedCourseIn(BaseModel):
    course_code: str = Field(default="", max_length=50)
    course_name: str = Field(default="", max_length=200)
    program: str = Field(default="", max_length=120)
    units: float = Field(default=0, ge=0, le=30)

    @model_validator(mode="after")
    def require_identity(self) -> "QualifiedCourseIn":
        if not self.course_code.strip() and not self.course_name.strip():
            raise ValueError("A qualified course needs a course code or a course name")
        return self

    def to_document(self) -> dict:
        return {
            "courseCode": self.course_code.strip(),
            "courseName": self.course_name.strip(),
            "program": self.program.strip(),
            "units": self.units,
        }


class NonTeachingAssignmentIn(BaseModel):
    day: str
    time: str
    type: Literal["Consultation", "Administrative"]
    hours: float = Field(gt=0, le=12)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = value.strip()
        if day not in DAY_VALUES:
            raise ValueError("Invalid day value")
        return day

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        label = value.strip()
        if label not in NON_TEACHING_START_LABELS:
            raise ValueError("Non-teaching blocks start between 7:00AM and 6:00PM on the half hour")
        return label

    def to_document(self) -> dict:
        return {"day": self.day, "time": self.time, "type": self.type, "hours": self.hours}


class NonTeachingSave(BaseModel):
    assignments: list[NonTeachingAssignmentIn] = Field(default_factory=list, max_length=60)


class NonTeachingCheckRow(BaseModel):
    day: str
    time: str
    type: str
    hours: float
    conflict: bool


class NonTeachingCheckOut(BaseModel):
    professor_name: str
    rows: list[NonTeachingCheckRow]
    has_conflict: bool


class FacultyCreate(BaseModel):
    professor_name: str = Field(min_length=1, max_length=200)
    shift: FacultyShift = FacultyShift.full_time
    units: float | None = Field(default=None, ge=0, le=60)
    qualified_courses: list[QualifiedCourseIn] = Field(default_factory=list, max_length=100)
    non_teaching_assignments: list[NonTeachingAssignmentIn] = Field(default_factory=list, max_length=60)

    @field_validator("professor_name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        name = " ".join(value.split())
        if not name:
            raise ValueError("Professor name cannot be blank")
        return name


class FacultyOut(BaseModel):
    id: str
    professor_name: str
    shift: FacultyShift
    status: FacultyStatus
    units: float
    qualified_courses: list[dict]
    non_teaching_assignments: list[dict]
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class WorkloadOut(BaseModel):
    professor_name: str
    shift: str
    units: float
    unit_cap: int
    unit_ceiling: int
    overloaded: bool
    over_limit: bool
    teaching_hours: float
    consultation_hours: float
    admin_hours: float
    auto_admin_hours: float
    remaining_consultation_hours: float
    remaining_admin_hours: float
    requirements_met: bool
