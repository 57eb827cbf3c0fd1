"""create schedule documents, faculty, substitute history and activity logs

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


schedule_status_enum = sa.Enum("draft", "submitted", "archived", name="schedule_status")
faculty_shift_enum = sa.Enum("FULL-TIME", "PART-TIME", name="faculty_shift")
faculty_status_enum = sa.Enum("active", "archived", name="faculty_status")


def upgrade() -> None:
    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=120), primary_key=True, nullable=False),
        sa.Column("section_id", sa.String(length=100), nullable=False),
        sa.Column("section_name", sa.String(length=100), nullable=False),
        sa.Column("program", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("semester", sa.String(length=30), nullable=False, server_default=""),
        sa.Column("year_level", sa.String(length=30), nullable=False, server_default=""),
        sa.Column("year", sa.String(length=20), nullable=False, server_default=""),
        sa.Column("status", schedule_status_enum, nullable=False, server_default="draft"),
        sa.Column("schedule_map", sa.JSON(), nullable=False),
        sa.Column("professor_assignments", sa.JSON(), nullable=False),
        sa.Column("subjects", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_section_id", "schedules", ["section_id"])
    op.create_index("ix_schedules_section_name", "schedules", ["section_name"])
    op.create_index("ix_schedules_program", "schedules", ["program"])
    op.create_index("ix_schedules_semester", "schedules", ["semester"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("professor_name", sa.String(length=200), nullable=False),
        sa.Column("shift", faculty_shift_enum, nullable=False, server_default="FULL-TIME"),
        sa.Column("status", faculty_status_enum, nullable=False, server_default="active"),
        sa.Column("units", sa.Float(), nullable=False, server_default="0"),
        sa.Column("qualified_courses", sa.JSON(), nullable=False),
        sa.Column("non_teaching_assignments", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_professor_name", "faculty", ["professor_name"], unique=True)

    op.create_table(
        "substitute_history",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("schedule_id", sa.String(length=120), nullable=False),
        sa.Column("doc_key", sa.String(length=40), nullable=False),
        sa.Column("section", sa.String(length=100), nullable=False),
        sa.Column("program", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("day", sa.String(length=12), nullable=False),
        sa.Column("start_time", sa.String(length=10), nullable=False),
        sa.Column("end_time", sa.String(length=10), nullable=False, server_default=""),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("original_professor", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("substitute_teacher", sa.String(length=200), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_substitute_history_schedule_id", "substitute_history", ["schedule_id"])
    op.create_index("ix_substitute_history_substitute_teacher", "substitute_history", ["substitute_teacher"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=120), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_index("ix_substitute_history_substitute_teacher", table_name="substitute_history")
    op.drop_index("ix_substitute_history_schedule_id", table_name="substitute_history")
    op.drop_table("substitute_history")
    op.drop_index("ix_faculty_professor_name", table_name="faculty")
    op.drop_table("faculty")
    op.drop_index("ix_schedules_semester", table_name="schedules")
    op.drop_index("ix_schedules_program", table_name="schedules")
    op.drop_index("ix_schedules_section_name", table_name="schedules")
    op.drop_index("ix_schedules_section_id", table_name="schedules")
    op.drop_table("schedules")
    faculty_status_enum.drop(op.get_bind(), checkfirst=True)
    faculty_shift_enum.drop(op.get_bind(), checkfirst=True)
    schedule_status_enum.drop(op.get_bind(), checkfirst=True)
