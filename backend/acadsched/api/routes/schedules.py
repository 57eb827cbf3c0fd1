import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from acadsched.api.deps import get_actor, get_db, get_room_pool
from acadsched.core.exceptions import AppError, PlacementRejectedError, ScheduleLockedError, ValidationFailed
from acadsched.models.schedule import ScheduleDocument, ScheduleStatus
from acadsched.schemas.schedule import (
    CandidateListOut,
    EditBatch,
    ScheduleCreate,
    ScheduleEntryOut,
    ScheduleOut,
)
from acadsched.services import schedule_store
from acadsched.services.assignment import apply_edits, submit_issues, unplaced_subjects
from acadsched.services.audit import log_activity
from acadsched.services.conflict_service import ExcludeSelf
from acadsched.services.qualification import room_candidates
from acadsched.services.rooms import RoomPool
from acadsched.services.snapshot import Schedule

logger = logging.getLogger(__name__)

router = APIRouter()


def schedule_out(document: ScheduleDocument, schedule: Schedule) -> ScheduleOut:
    grid = schedule.grid
    entries = [
        ScheduleEntryOut(
            key=grid.key_text(key),
            day=key.day.value,
            start_time=key.label(grid.axis),
            end_time=grid.end_label(key),
            subject=entry.subject,
            duration_slots=entry.duration_slots,
            room=entry.room,
            assigned_professor=entry.assigned_professor,
            substitute_teacher=entry.substitute_teacher,
        )
        for key, entry in grid.items()
    ]
    return ScheduleOut(
        id=document.id,
        section_id=document.section_id,
        section_name=document.section_name,
        program=document.program,
        semester=document.semester,
        year_level=document.year_level,
        year=document.year,
        status=document.status,
        entries=entries,
        unplaced_subjects=unplaced_subjects(schedule),
        unassigned_keys=[item.key for item in entries if not item.assigned_professor],
        updated_at=document.updated_at,
    )


@router.post("/schedules", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    schedule_id = schedule_store.schedule_document_id(payload.section_id, payload.semester)
    if db.get(ScheduleDocument, schedule_id) is not None:
        raise AppError(f"Schedule {schedule_id} already exists", status_code=409, details={"schedule_id": schedule_id})

    document = ScheduleDocument(
        id=schedule_id,
        section_id=payload.section_id.strip(),
        section_name=payload.section_name.strip(),
        program=payload.program.strip(),
        semester=payload.semester.strip(),
        year_level=payload.year_level.strip(),
        year=payload.year.strip(),
        status=ScheduleStatus.draft,
        schedule_map={},
        professor_assignments={},
        subjects=[subject.to_document() for subject in payload.subjects],
    )
    db.add(document)
    log_activity(
        db,
        actor=actor,
        action="schedule.create",
        entity_type="schedule",
        entity_id=schedule_id,
        details={"section": document.section_name, "subjects": len(payload.subjects)},
    )
    schedule_store.commit(db, "schedule creation", schedule_id)
    db.refresh(document)
    return schedule_out(document, schedule_store.to_schedule(document))


@router.get("/schedules", response_model=list[ScheduleOut])
def list_schedules(
    program: str | None = Query(default=None),
    semester: str | None = Query(default=None),
    year_level: str | None = Query(default=None, alias="yearLevel"),
    year: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    query = select(ScheduleDocument)
    if program:
        query = query.where(ScheduleDocument.program == program)
    if semester:
        query = query.where(ScheduleDocument.semester == semester)
    if year_level:
        query = query.where(ScheduleDocument.year_level == year_level)
    if year:
        query = query.where(ScheduleDocument.year == year)
    documents = db.execute(query.order_by(ScheduleDocument.section_name)).scalars().all()
    return [schedule_out(document, schedule_store.to_schedule(document)) for document in documents]


@router.get("/schedules/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    return schedule_out(document, schedule_store.to_schedule(document))


@router.post("/schedules/{schedule_id}/edits", response_model=ScheduleOut)
def apply_schedule_edits(
    schedule_id: str,
    payload: EditBatch,
    actor: str | None = Depends(get_actor),
    pool: RoomPool = Depends(get_room_pool),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    for operation in payload.operations:
        schedule_store.parse_cell_key(operation.key)
        if operation.target:
            schedule_store.parse_cell_key(operation.target)

    snapshot = schedule_store.snapshot_for(db, document)
    schedule = schedule_store.to_schedule(document)
    outcome = apply_edits(schedule, payload.operations, snapshot, pool)
    if not outcome.accepted:
        rejection = outcome.rejection
        logger.info("Edit batch for %s rejected at operation %d: %s", schedule_id, outcome.applied, rejection.reason)
        raise PlacementRejectedError(rejection.reason, rejection.key, rejection.subject, rejection.message)

    schedule_store.write_grid(document, outcome.schedule)
    log_activity(
        db,
        actor=actor,
        action="schedule.edit",
        entity_type="schedule",
        entity_id=schedule_id,
        details={"operations": [operation.model_dump(exclude_none=True) for operation in payload.operations]},
    )
    schedule_store.commit(db, "schedule edits", schedule_id)
    db.refresh(document)
    return schedule_out(document, schedule_store.to_schedule(document))


@router.get("/schedules/{schedule_id}/cells/{key}/rooms", response_model=CandidateListOut)
def list_room_candidates(
    schedule_id: str,
    key: str,
    pool: RoomPool = Depends(get_room_pool),
    db: Session = Depends(get_db),
) -> CandidateListOut:
    document = schedule_store.get_document(db, schedule_id)
    slot = schedule_store.parse_cell_key(key)
    schedule = schedule_store.to_schedule(document)
    entry = schedule.grid.get(slot)
    subject = entry.subject if entry else ""
    duration = entry.duration_slots if entry else 1
    result = room_candidates(
        subject,
        schedule.catalog.meta_for(subject) if subject else None,
        slot.day,
        slot.start,
        duration,
        pool,
        schedule_store.snapshot_for(db, document),
        ExcludeSelf(schedule.id, slot),
    )
    return CandidateListOut(kind="room", key=schedule.grid.key_text(slot), status=result.status, candidates=list(result.candidates))


@router.post("/schedules/{schedule_id}/submit", response_model=ScheduleOut)
def submit_schedule(
    schedule_id: str,
    actor: str | None = Depends(get_actor),
    pool: RoomPool = Depends(get_room_pool),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    if document.status != ScheduleStatus.draft:
        raise ScheduleLockedError(schedule_id, document.status.value)
    schedule = schedule_store.to_schedule(document)
    if len(schedule.grid) == 0:
        raise ValidationFailed("Schedule has no subjects placed", [{"field": "schedule", "message": "Place at least one subject"}])
    issues = submit_issues(schedule, pool)
    if issues:
        raise ValidationFailed("Every scheduled subject needs a valid room before submitting", issues)

    schedule_store.write_grid(document, schedule)
    document.status = ScheduleStatus.submitted
    log_activity(db, actor=actor, action="schedule.submit", entity_type="schedule", entity_id=schedule_id)
    schedule_store.commit(db, "schedule submission", schedule_id)
    db.refresh(document)
    return schedule_out(document, schedule)


@router.post("/schedules/{schedule_id}/archive", response_model=ScheduleOut)
def archive_schedule(
    schedule_id: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    if document.status == ScheduleStatus.archived:
        raise ScheduleLockedError(schedule_id, document.status.value)
    document.status = ScheduleStatus.archived
    log_activity(db, actor=actor, action="schedule.archive", entity_type="schedule", entity_id=schedule_id)
    schedule_store.commit(db, "schedule archive", schedule_id)
    db.refresh(document)
    return schedule_out(document, schedule_store.to_schedule(document))
