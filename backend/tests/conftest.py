import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from acadsched.api.deps import get_db
from acadsched.db.base import Base
from acadsched.main import app
from acadsched.services.duration import SubjectCatalog
from acadsched.services.rooms import RoomPool


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def room_pool():
    return RoomPool(
        ["COMP LAB 601", "COMP LAB 602", "ROOM 301", "ROOM 302", "ROOM 303"],
        ["COURT", "PENTHOUSE"],
    )


@pytest.fixture()
def catalog():
    return SubjectCatalog([
        {"name": "DB SYSTEMS (LEC)", "lec": 2, "lab": 1, "compLab": "Yes"},
        {"name": "DB SYSTEMS (LAB)", "lec": 2, "lab": 1, "compLab": "Yes"},
        {"name": "NETWORKS (LEC)", "lec": 2, "lab": 0, "compLab": "No"},
        {"name": "WEB DEV (LAB)", "lec": 2, "lab": 1, "compLab": "Yes"},
        {"name": "P.E 1", "lec": 2, "lab": 0, "compLab": "No"},
    ])
