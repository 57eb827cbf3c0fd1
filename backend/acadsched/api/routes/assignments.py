import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from acadsched.api.deps import get_actor, get_db
from acadsched.api.routes.schedules import schedule_out
from acadsched.core.exceptions import ScheduleLockedError, ValidationFailed
from acadsched.models.schedule import ScheduleStatus
from acadsched.schemas.schedule import CandidateListOut, ProfessorAssignmentSave, ScheduleOut
from acadsched.services import schedule_store
from acadsched.services.assignment import ProfessorAssignmentDraft
from acadsched.services.audit import log_activity
from acadsched.services.conflict_service import ExcludeSelf
from acadsched.services.qualification import professor_candidates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/schedules/{schedule_id}/cells/{key}/professors", response_model=CandidateListOut)
def list_professor_candidates(schedule_id: str, key: str, db: Session = Depends(get_db)) -> CandidateListOut:
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
        program=schedule.program,
    )
    return CandidateListOut(
        kind="professor",
        key=schedule.grid.key_text(slot),
        status=result.status,
        candidates=list(result.candidates),
    )


@router.put("/schedules/{schedule_id}/professor-assignments", response_model=ScheduleOut)
def save_professor_assignments(
    schedule_id: str,
    payload: ProfessorAssignmentSave,
    actor: str | None = Depends(get_actor),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    document = schedule_store.get_document(db, schedule_id)
    if document.status == ScheduleStatus.archived:
        raise ScheduleLockedError(schedule_id, document.status.value)

    schedule = schedule_store.to_schedule(document)
    draft = ProfessorAssignmentDraft(schedule)
    unknown = []
    for raw_key in payload.assignments:
        slot = schedule_store.parse_cell_key(raw_key)
        if slot not in schedule.grid:
            unknown.append({"field": "key", "key": raw_key, "message": "No subject is scheduled in this cell"})
    if unknown:
        raise ValidationFailed("Assignments reference empty cells", unknown)
    draft.assign_many(payload.assignments)

    issues = draft.validate(schedule_store.snapshot_for(db, document))
    if issues:
        logger.info("Professor assignment save for %s blocked by %d issue(s)", schedule_id, len(issues))
        raise ValidationFailed("Professor assignments cannot be saved", issues)

    updated = draft.applied()
    schedule_store.write_grid(document, updated)
    log_activity(
        db,
        actor=actor,
        action="schedule.assign_professors",
        entity_type="schedule",
        entity_id=schedule_id,
        details={"assignments": {schedule.grid.key_text(key): name for key, name in draft.pending.items()}},
    )
    schedule_store.commit(db, "professor assignments", schedule_id)
    db.refresh(document)
    return schedule_out(document, schedule_store.to_schedule(document))
