import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from acadsched.api.deps import get_actor, get_db
from acadsched.api.routes.schedules import schedule_out
from acadsched.core.exceptions import AppError, PersistenceFailure, ResourceNotFoundError, ValidationFailed
from acadsched.models.substitute_history import SubstituteHistory
from acadsched.schemas.schedule import CandidateListOut, ScheduleOut
from acadsched.schemas.substitute import (
    ProfessorClassOut,
    SubstituteBatch,
    SubstituteBatchResult,
    SubstituteHistoryOut,
    SubstituteSet,
)
from acadsched.services import schedule_store
from acadsched.services.assignment import archive_substitute, set_substitute, substitute_keys_for
from acadsched.services.audit import log_activity
from acadsched.services.conflict_service import ExcludeSelf
from acadsched.services.naming import normalize_professor, same_professor
from acadsched.services.qualification import professor_candidates

logger = logging.getLogger(__name__)

router = APIRouter()


def _rejected(result) -> AppError:
    return AppError(
        result.message,
        status_code=409,
        details={"reason": result.rejection, "key": result.key},
    )


@router.get("/faculty/{professor}/classes", response_model=list[ProfessorClassOut])
def list_professor_classes(professor: str, db: Session = Depends(get_db)) -> list[ProfessorClassOut]:
    name = normalize_professor(professor)
    rows: list[ProfessorClassOut] = []
    for schedule in schedule_store.load_snapshot(db).live_schedules():
        grid = schedule.grid
        for key, entry in grid.items():
            if not same_professor(entry.assigned_professor, name):
                continue
            rows.append(ProfessorClassOut(
                schedule_id=schedule.id,
                key=grid.key_text(key),
                section=schedule.section_name,
                program=schedule.program,
                day=key.day.value,
                start_time=key.label(grid.axis),
                end_time=grid.end_label(key),
                subject=entry.subject,
                room=entry.room,
                assigned_professor=entry.assigned_professor,
                substitute_teacher=entry.substitute_teacher,
            ))
    return rows


@router.get("/schedules/{schedule_id}/cells/{key}/substitutes", response_model=CandidateListOut)
def list_substitute_candidates(schedule_id: str, key: str, db: Session = Depends(get_db)) -> CandidateListOut:
    document = schedule_store.get_document(db, schedule_id)
    slot = schedule_store.parse_cell_key(key)
    schedule = schedule_store.to_schedule(document)
    entry = schedule.grid.get(slot)
    result = professor_candidates(
        entry.subject if entry else "",
        slot.day,
        slot.start,
        entry.duration_slots if entry else 1,
        schedule_store.snapshot_for(db, document),
        exclude_self=ExcludeSelf(schedule.id, slot),
        exclude_professors=[entry.assigned_professor] if entry else [],
        program=schedule.program,
    )
    return CandidateListOut(
        kind="professor",
        key=schedule.grid.key_text(slot),
        status=result.status,
        candidates=list(result.candidates),
    )


@router.put("/schedules/{schedule_id}/cells/{key}/substitute", response_model=ScheduleOut)
def save_substitute(
    schedule_id: str,
    key: str,
    payload: SubstituteSet,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    slot = schedule_store.parse_cell_key(key)
    schedule = schedule_store.to_schedule(document)
    result = set_substitute(schedule, slot, payload.substitute_teacher, schedule_store.snapshot_for(db, document))
    if not result.accepted:
        raise _rejected(result)
    if result.changed:
        schedule_store.write_grid(document, result.schedule)
        log_activity(
            db,
            actor=actor,
            action="substitute.set",
            entity_type="schedule",
            entity_id=schedule_id,
            details={"key": result.key, "substitute_teacher": payload.substitute_teacher},
        )
        schedule_store.commit(db, "substitute", schedule_id)
        db.refresh(document)
    return schedule_out(document, schedule_store.to_schedule(document))


@router.put("/substitutes", response_model=list[SubstituteBatchResult])
def save_substitutes(
    payload: SubstituteBatch,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> list[SubstituteBatchResult]:
    """Save several substitutes; each schedule document commits on its own."""
    results: list[SubstituteBatchResult] = []
    for item in payload.items:
        try:
            document = schedule_store.get_document(db, item.schedule_id)
            slot = schedule_store.parse_cell_key(item.key)
        except (ResourceNotFoundError, ValidationFailed) as exc:
            reason = "missing-schedule" if isinstance(exc, ResourceNotFoundError) else "invalid-key"
            results.append(SubstituteBatchResult(
                schedule_id=item.schedule_id,
                key=item.key,
                saved=False,
                reason=reason,
                message=exc.message,
            ))
            continue
        schedule = schedule_store.to_schedule(document)
        result = set_substitute(schedule, slot, item.substitute_teacher, schedule_store.snapshot_for(db, document))
        if not result.accepted:
            results.append(SubstituteBatchResult(
                schedule_id=item.schedule_id,
                key=result.key,
                saved=False,
                reason=result.rejection,
                message=result.message,
            ))
            continue
        if result.changed:
            schedule_store.write_grid(document, result.schedule)
            log_activity(
                db,
                actor=actor,
                action="substitute.set",
                entity_type="schedule",
                entity_id=item.schedule_id,
                details={"key": result.key, "substitute_teacher": item.substitute_teacher},
            )
            try:
                schedule_store.commit(db, "substitute", item.schedule_id)
            except PersistenceFailure as exc:
                results.append(SubstituteBatchResult(
                    schedule_id=item.schedule_id,
                    key=result.key,
                    saved=False,
                    reason="persistence",
                    message=exc.message,
                ))
                continue
        results.append(SubstituteBatchResult(schedule_id=item.schedule_id, key=result.key, saved=True))
    return results


@router.post("/schedules/{schedule_id}/cells/{key}/substitute/archive", response_model=SubstituteHistoryOut)
def archive_cell_substitute(
    schedule_id: str,
    key: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> SubstituteHistoryOut:
    document = schedule_store.get_document(db, schedule_id)
    slot = schedule_store.parse_cell_key(key)
    result, record = archive_substitute(schedule_store.to_schedule(document), slot)
    if record is None:
        raise _rejected(result)

    # History row and cleared overlay land in one transaction.
    row = schedule_store.add_history(db, record)
    schedule_store.write_grid(document, result.schedule)
    log_activity(
        db,
        actor=actor,
        action="substitute.archive",
        entity_type="schedule",
        entity_id=schedule_id,
        details={"key": record.doc_key, "substitute_teacher": record.substitute_teacher},
    )
    schedule_store.commit(db, "substitute archive", schedule_id)
    db.refresh(row)
    return row


@router.post("/faculty/{professor}/substitutes/archive", response_model=list[SubstituteHistoryOut])
def archive_professor_substitutes(
    professor: str,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> list[SubstituteHistoryOut]:
    """Archive every substitution covering ``professor``'s classes."""
    name = normalize_professor(professor)
    rows = []
    for schedule in schedule_store.load_snapshot(db).live_schedules():
        keys = substitute_keys_for(schedule, name)
        if not keys:
            continue
        document = schedule_store.get_document(db, schedule.id)
        current = schedule
        for slot in keys:
            result, record = archive_substitute(current, slot)
            current = result.schedule
            rows.append(schedule_store.add_history(db, record))
        schedule_store.write_grid(document, current)
        log_activity(
            db,
            actor=actor,
            action="substitute.archive_all",
            entity_type="schedule",
            entity_id=schedule.id,
            details={"professor": name, "keys": [schedule.grid.key_text(slot) for slot in keys]},
        )
        schedule_store.commit(db, "substitute archive", schedule.id)
    for row in rows:
        db.refresh(row)
    return rows


@router.get("/substitute-history", response_model=list[SubstituteHistoryOut])
def list_substitute_history(
    professor: str | None = Query(default=None),
    schedule_id: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[SubstituteHistoryOut]:
    query = select(SubstituteHistory)
    if professor:
        name = normalize_professor(professor)
        query = query.where(
            (SubstituteHistory.original_professor == name) | (SubstituteHistory.substitute_teacher == name)
        )
    if schedule_id:
        query = query.where(SubstituteHistory.schedule_id == schedule_id)
    query = query.order_by(SubstituteHistory.archived_at.desc(), SubstituteHistory.id).limit(limit)
    return list(db.execute(query).scalars())
