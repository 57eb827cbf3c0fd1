import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from acadsched.api.deps import get_actor, get_db
from acadsched.core.config import get_settings
from acadsched.core.exceptions import AppError, ValidationFailed
from acadsched.models.faculty import Faculty, FacultyStatus
from acadsched.schemas.faculty import (
    FacultyCreate,
    FacultyOut,
    NonTeachingCheckOut,
    NonTeachingCheckRow,
    NonTeachingSave,
    WorkloadOut,
)
from acadsched.services import schedule_store
from acadsched.services.audit import log_activity
from acadsched.services.snapshot import non_teaching_block
from acadsched.services.time_axis import DEFAULT_AXIS
from acadsched.services.workload import mark_non_teaching_conflicts, professor_class_blocks, summarize_workload

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_rows(professor_name: str, payload: NonTeachingSave, db: Session) -> list[NonTeachingCheckRow]:
    blocks = [non_teaching_block(item.day, item.time, item.type, item.hours) for item in payload.assignments]
    class_blocks = professor_class_blocks(professor_name, schedule_store.load_snapshot(db).schedules)
    flags = mark_non_teaching_conflicts(blocks, class_blocks, len(DEFAULT_AXIS))
    return [
        NonTeachingCheckRow(day=item.day, time=item.time, type=item.type, hours=item.hours, conflict=flag)
        for item, flag in zip(payload.assignments, flags)
    ]


@router.get("/faculty", response_model=list[FacultyOut])
def list_faculty(
    include_archived: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    query = select(Faculty).order_by(Faculty.professor_name)
    if not include_archived:
        query = query.where(Faculty.status == FacultyStatus.active)
    return list(db.execute(query).scalars())


@router.post("/faculty", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> FacultyOut:
    existing = db.execute(select(Faculty).where(Faculty.professor_name == payload.professor_name)).scalar_one_or_none()
    if existing:
        raise AppError("Professor already exists", status_code=409, details={"professor_name": payload.professor_name})
    units = payload.units
    if units is None:
        units = sum(course.units for course in payload.qualified_courses)
    row = Faculty(
        professor_name=payload.professor_name,
        shift=payload.shift,
        status=FacultyStatus.active,
        units=units,
        qualified_courses=[course.to_document() for course in payload.qualified_courses],
        non_teaching_assignments=[item.to_document() for item in payload.non_teaching_assignments],
    )
    db.add(row)
    log_activity(db, actor=actor, action="faculty.create", entity_type="faculty", entity_id=payload.professor_name)
    schedule_store.commit(db, "faculty registration", payload.professor_name)
    db.refresh(row)
    return row


@router.post("/faculty/{professor}/archive", response_model=FacultyOut)
def archive_faculty(
    professor: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> FacultyOut:
    row = schedule_store.get_faculty(db, professor)
    row.status = FacultyStatus.archived
    log_activity(db, actor=actor, action="faculty.archive", entity_type="faculty", entity_id=row.professor_name)
    schedule_store.commit(db, "faculty archive", row.professor_name)
    db.refresh(row)
    return row


@router.post("/faculty/{professor}/non-teaching/check", response_model=NonTeachingCheckOut)
def check_non_teaching(professor: str, payload: NonTeachingSave, db: Session = Depends(get_db)) -> NonTeachingCheckOut:
    row = schedule_store.get_faculty(db, professor)
    rows = _check_rows(row.professor_name, payload, db)
    return NonTeachingCheckOut(
        professor_name=row.professor_name,
        rows=rows,
        has_conflict=any(item.conflict for item in rows),
    )


@router.put("/faculty/{professor}/non-teaching", response_model=FacultyOut)
def save_non_teaching(
    professor: str,
    payload: NonTeachingSave,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> FacultyOut:
    row = schedule_store.get_faculty(db, professor)
    rows = _check_rows(row.professor_name, payload, db)
    issues = [
        {
            "field": "non_teaching_assignments",
            "key": f"{item.day}_{item.time}",
            "message": f"{item.type} block overlaps a class or an earlier block",
        }
        for item in rows
        if item.conflict
    ]
    if issues:
        raise ValidationFailed("Non-teaching hours overlap other commitments", issues)

    row.non_teaching_assignments = [item.to_document() for item in payload.assignments]
    log_activity(
        db,
        actor=actor,
        action="faculty.non_teaching",
        entity_type="faculty",
        entity_id=row.professor_name,
        details={"assignments": len(payload.assignments)},
    )
    schedule_store.commit(db, "non-teaching hours", row.professor_name)
    db.refresh(row)
    return row


@router.get("/faculty/{professor}/workload", response_model=WorkloadOut)
def get_workload(professor: str, db: Session = Depends(get_db)) -> WorkloadOut:
    settings = get_settings()
    row = schedule_store.get_faculty(db, professor)
    summary = summarize_workload(
        schedule_store.to_faculty_member(row),
        schedule_store.load_snapshot(db).schedules,
        settings.required_consultation_hours,
        settings.required_admin_hours,
    )
    return WorkloadOut(
        professor_name=summary.professor_name,
        shift=summary.shift,
        units=summary.units,
        unit_cap=summary.unit_cap,
        unit_ceiling=summary.unit_ceiling,
        overloaded=summary.overloaded,
        over_limit=summary.over_limit,
        teaching_hours=summary.teaching_hours,
        consultation_hours=summary.consultation_hours,
        admin_hours=summary.admin_hours,
        auto_admin_hours=summary.auto_admin_hours,
        remaining_consultation_hours=summary.remaining_consultation_hours,
        remaining_admin_hours=summary.remaining_admin_hours,
        requirements_met=summary.requirements_met,
    )
