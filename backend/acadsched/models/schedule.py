from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from acadsched.db.base import Base


class ScheduleStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    archived = "archived"


class ScheduleDocument(Base):
    __tablename__ = "schedules"

    # "{sectionId}_{semKey}", e.g. "BT1101_1st"
    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    section_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    section_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    program: Mapped[str] = mapped_column(String(100), nullable=False, default="", index=True)
    semester: Mapped[str] = mapped_column(String(30), nullable=False, default="", index=True)
    year_level: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    year: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    status: Mapped[ScheduleStatus] = mapped_column(
        SAEnum(ScheduleStatus, name="schedule_status"), nullable=False, default=ScheduleStatus.draft
    )
    schedule_map: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    professor_assignments: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    subjects: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
