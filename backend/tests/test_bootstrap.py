import logging

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from acadsched.db import bootstrap


def _memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_missing_schema_parts_lists_absent_tables():
    engine = _memory_engine()
    with engine.connect() as connection:
        missing_tables, missing_columns = bootstrap.missing_schema_parts(connection)
    assert sorted(missing_tables) == sorted(bootstrap.REQUIRED_COLUMNS)
    assert missing_columns == {}

    bootstrap.Base.metadata.create_all(bind=engine)
    with engine.connect() as connection:
        assert bootstrap.missing_schema_parts(connection) == ([], {})


def test_runtime_schema_bootstrap_logs_outdated_schema(monkeypatch, caplog):
    engine = _memory_engine()
    monkeypatch.setattr(bootstrap, "engine", engine)
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)

    with caplog.at_level(logging.ERROR, logger=bootstrap.logger.name):
        bootstrap.ensure_runtime_schema_compatibility()

    assert "run alembic upgrade head" in caplog.text
