"""Maps stored schedule and faculty documents to engine snapshots and back."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from acadsched.core.config import get_settings
from acadsched.core.exceptions import PersistenceFailure, ResourceNotFoundError, TimeAxisError, ValidationFailed
from acadsched.models.faculty import Faculty, FacultyStatus
from acadsched.models.schedule import ScheduleDocument, ScheduleStatus
from acadsched.models.substitute_history import SubstituteHistory
from acadsched.services.assignment import SubstituteRecord
from acadsched.services.duration import SubjectCatalog
from acadsched.services.occupancy import ScheduleGrid
from acadsched.services.snapshot import FacultyMember, Schedule, ScheduleSnapshot
from acadsched.services.time_axis import DEFAULT_AXIS, TimeAxis, parse_key

logger = logging.getLogger(__name__)


def semester_key(semester: str | None) -> str:
    normalized = (semester or "").strip().lower()
    if normalized.startswith("2"):
        return "2nd"
    if normalized.startswith("sum"):
        return "Summer"
    return "1st"


def schedule_document_id(section_id: str, semester: str | None) -> str:
    return f"{section_id.strip()}_{semester_key(semester)}"


def prune_schedule_map(
    schedule_map: Mapping[str, Mapping] | None,
    catalog: SubjectCatalog,
    axis: TimeAxis = DEFAULT_AXIS,
) -> dict[str, dict]:
    """Drop empty and repeated subjects, coerce durations, recompute time labels."""
    pruned: dict[str, dict] = {}
    seen: set[str] = set()
    for raw_key, value in (schedule_map or {}).items():
        if not value or not value.get("subject"):
            continue
        subject = str(value["subject"])
        if subject in seen:
            continue
        seen.add(subject)
        key = parse_key(raw_key, axis)
        try:
            slots = int(value.get("durationSlots") or 0)
        except (TypeError, ValueError):
            slots = 0
        if slots < 1:
            slots = catalog.slots_for_subject(subject)
        start_label = key.label(axis)
        item = dict(value)
        item.update({
            "subject": subject,
            "durationSlots": slots,
            "startTime": start_label,
            "endTime": axis.end_label(start_label, slots),
        })
        pruned[key.as_text(axis)] = item
    return pruned


def catalog_for(document: ScheduleDocument) -> SubjectCatalog:
    return SubjectCatalog(document.subjects or [], get_settings().default_subject_slots)


def to_schedule(document: ScheduleDocument) -> Schedule:
    catalog = catalog_for(document)
    grid = ScheduleGrid.from_document(
        prune_schedule_map(document.schedule_map, catalog),
        document.professor_assignments or {},
    )
    return Schedule(
        id=document.id,
        section_name=document.section_name,
        grid=grid,
        program=document.program or "",
        semester=document.semester or "",
        year_level=document.year_level or "",
        year=document.year or "",
        status=ScheduleStatus(document.status).value,
        catalog=catalog,
    )


def to_faculty_member(row: Faculty) -> FacultyMember:
    return FacultyMember.from_document(
        row.professor_name,
        row.qualified_courses or [],
        row.non_teaching_assignments or [],
        shift=getattr(row.shift, "value", row.shift),
        units=float(row.units or 0),
        archived=row.status == FacultyStatus.archived,
        id=row.id,
    )


def load_snapshot(
    db: Session,
    *,
    program: str | None = None,
    semester: str | None = None,
    year_level: str | None = None,
    year: str | None = None,
) -> ScheduleSnapshot:
    query = select(ScheduleDocument)
    if program:
        query = query.where(ScheduleDocument.program == program)
    if year_level:
        query = query.where(ScheduleDocument.year_level == year_level)
    if year:
        query = query.where(ScheduleDocument.year == year)
    documents = db.execute(query.order_by(ScheduleDocument.id)).scalars().all()
    if semester:
        # Semester text is free-form; "1st Sem" and "1st Semester" are the same term.
        term = semester_key(semester)
        documents = [document for document in documents if semester_key(document.semester) == term]
    faculty = db.execute(select(Faculty).order_by(Faculty.professor_name)).scalars().all()
    return ScheduleSnapshot(
        schedules=tuple(to_schedule(document) for document in documents),
        faculty=tuple(to_faculty_member(row) for row in faculty),
    )


def snapshot_for(db: Session, document: ScheduleDocument) -> ScheduleSnapshot:
    """Every schedule sharing ``document``'s semester and school year."""
    return load_snapshot(db, semester=document.semester, year=document.year)


def get_document(db: Session, schedule_id: str) -> ScheduleDocument:
    document = db.get(ScheduleDocument, schedule_id)
    if document is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return document


def get_faculty(db: Session, professor_name: str) -> Faculty:
    name = " ".join(professor_name.split())
    row = db.execute(select(Faculty).where(Faculty.professor_name == name)).scalar_one_or_none()
    if row is None:
        raise ResourceNotFoundError("Faculty", name)
    return row


def write_grid(document: ScheduleDocument, schedule: Schedule) -> None:
    schedule_map, assignments = schedule.grid.to_document()
    # New objects so the JSON columns are flagged as changed.
    document.schedule_map = dict(schedule_map)
    document.professor_assignments = dict(assignments)


def add_history(db: Session, record: SubstituteRecord) -> SubstituteHistory:
    row = SubstituteHistory(
        schedule_id=record.schedule_id,
        doc_key=record.doc_key,
        section=record.section,
        program=record.program,
        day=record.day,
        start_time=record.start_time,
        end_time=record.end_time,
        subject=record.subject,
        original_professor=record.original_professor,
        substitute_teacher=record.substitute_teacher,
        archived_at=record.archived_at,
    )
    db.add(row)
    return row


def commit(db: Session, action: str, entity_id: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist %s for %s", action, entity_id)
        raise PersistenceFailure(f"Could not save {action} for {entity_id}; retry the same request") from exc
    logger.info("Persisted %s for %s", action, entity_id)


def parse_cell_key(key: str, axis: TimeAxis = DEFAULT_AXIS):
    """Parse a ``{Day}_{TimeLabel}`` key sent by a client."""
    try:
        return parse_key(key, axis)
    except TimeAxisError as exc:
        raise ValidationFailed("Invalid schedule cell", [{"field": "key", "key": key, "message": exc.message}]) from exc
