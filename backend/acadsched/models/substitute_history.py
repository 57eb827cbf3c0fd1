import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from acadsched.db.base import Base


class SubstituteHistory(Base):
    __tablename__ = "substitute_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    doc_key: Mapped[str] = mapped_column(String(40), nullable=False)
    section: Mapped[str] = mapped_column(String(100), nullable=False)
    program: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    day: Mapped[str] = mapped_column(String(12), nullable=False)
    start_time: Mapped[str] = mapped_column(String(10), nullable=False)
    end_time: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    original_professor: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    substitute_teacher: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    archived_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
