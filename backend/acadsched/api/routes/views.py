from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from acadsched.api.deps import get_db
from acadsched.schemas.view import AggregateEntryOut, ResourceViewOut
from acadsched.services import schedule_store
from acadsched.services.aggregate import derive_aggregate_view

router = APIRouter()


def _view(
    kind: Literal["room", "professor"],
    db: Session,
    program: str | None,
    semester: str | None,
    year_level: str | None,
    year: str | None,
) -> list[ResourceViewOut]:
    snapshot = schedule_store.load_snapshot(db, program=program, semester=semester, year_level=year_level, year=year)
    view = derive_aggregate_view(kind, snapshot)
    return [
        ResourceViewOut(
            resource=resource,
            entries=[
                AggregateEntryOut(
                    day=entry.day.value,
                    start_time=entry.start_label(),
                    end_time=entry.end_label(),
                    duration_slots=entry.duration_slots,
                    subject=entry.subject,
                    kind=entry.kind,
                    section=entry.section,
                    schedule_id=entry.schedule_id,
                    room=entry.room,
                    professor=entry.professor,
                    substitute_teacher=entry.substitute_teacher,
                )
                for entry in entries
            ],
        )
        for resource, entries in view.items()
    ]


@router.get("/views/rooms", response_model=list[ResourceViewOut])
def room_views(
    program: str | None = Query(default=None),
    semester: str | None = Query(default=None),
    year_level: str | None = Query(default=None, alias="yearLevel"),
    year: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ResourceViewOut]:
    return _view("room", db, program, semester, year_level, year)


@router.get("/views/professors", response_model=list[ResourceViewOut])
def professor_views(
    program: str | None = Query(default=None),
    semester: str | None = Query(default=None),
    year_level: str | None = Query(default=None, alias="yearLevel"),
    year: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ResourceViewOut]:
    return _view("professor", db, program, semester, year_level, year)
