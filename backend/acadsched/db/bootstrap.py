from __future__ import annotations

import logging

from sqlalchemy import inspect

from acadsched.db.base import Base
from acadsched.db.session import engine
import acadsched.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "schedules": {"id", "section_name", "status", "schedule_map", "professor_assignments", "subjects"},
    "faculty": {"id", "professor_name", "shift", "qualified_courses", "non_teaching_assignments"},
    "substitute_history": {"id", "schedule_id", "doc_key", "original_professor", "substitute_teacher", "archived_at"},
    "activity_logs": {"id", "actor", "action", "details"},
}


def missing_schema_parts(connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility() -> None:
    Base.metadata.create_all(bind=engine)
    with engine.connect() as connection:
        missing_tables, missing_columns = missing_schema_parts(connection)
    if missing_tables or missing_columns:
        logger.error(
            "Database schema is out of date (missing tables: %s, missing columns: %s); run alembic upgrade head",
            missing_tables,
            missing_columns,
        )
        return
    logger.info("Database schema verified")
