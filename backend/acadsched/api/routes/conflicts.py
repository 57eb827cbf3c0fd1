from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from acadsched.api.deps import get_db, get_room_pool
from acadsched.schemas.conflict import ConflictReport
from acadsched.services import schedule_store
from acadsched.services.conflict_service import ConflictService
from acadsched.services.rooms import RoomPool

router = APIRouter()


@router.get("/conflicts", response_model=ConflictReport)
def detect_conflicts(
    program: str | None = Query(default=None),
    semester: str | None = Query(default=None),
    year_level: str | None = Query(default=None, alias="yearLevel"),
    year: str | None = Query(default=None),
    pool: RoomPool = Depends(get_room_pool),
    db: Session = Depends(get_db),
) -> ConflictReport:
    snapshot = schedule_store.load_snapshot(db, program=program, semester=semester, year_level=year_level, year=year)
    service = ConflictService(snapshot, pool)
    return service.detect_conflicts()
