import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Float, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from acadsched.db.base import Base


class FacultyShift(str, Enum):
    full_time = "FULL-TIME"
    part_time = "PART-TIME"


class FacultyStatus(str, Enum):
    active = "active"
    archived = "archived"


class Faculty(Base):
    __tablename__ = "faculty"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    professor_name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    shift: Mapped[FacultyShift] = mapped_column(
        SAEnum(FacultyShift, name="faculty_shift", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=FacultyShift.full_time,
    )
    status: Mapped[FacultyStatus] = mapped_column(
        SAEnum(FacultyStatus, name="faculty_status"), nullable=False, default=FacultyStatus.active
    )
    units: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    qualified_courses: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    non_teaching_assignments: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
