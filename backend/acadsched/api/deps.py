from collections.abc import Generator

from fastapi import Header
from sqlalchemy.orm import Session

from acadsched.core.config import Settings, get_settings
from acadsched.db.session import SessionLocal
from acadsched.services.rooms import RoomPool


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(x_actor: str | None = Header(default=None, max_length=200)) -> str | None:
    """Name recorded in the activity log; login is handled upstream."""
    if x_actor is None:
        return None
    return " ".join(x_actor.split()) or None


def get_room_pool() -> RoomPool:
    settings: Settings = get_settings()
    return RoomPool.from_settings(settings)
