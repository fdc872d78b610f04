"""create timetables and timetable bulk uploads

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


day_of_week_enum = sa.Enum(
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday", name="day_of_week"
)
upload_status_enum = sa.Enum("processing", "completed", "failed", name="upload_status")
record_status_column_enum = postgresql.ENUM("active", "inactive", name="record_status", create_type=False)


def upgrade() -> None:
    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "academic_year_id",
            sa.String(length=36),
            sa.ForeignKey("academic_years.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("full_date", sa.Date(), nullable=False),
        sa.Column("day", day_of_week_enum, nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("building_name", sa.String(length=200), nullable=True),
        sa.Column("status", record_status_column_enum, nullable=False, server_default="active"),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetables_branch_class_date", "timetables", ["branch_id", "class_id", "full_date"])
    op.create_index(
        "uq_timetables_active_class_date_start",
        "timetables",
        ["class_id", "full_date", "start_time"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "timetable_bulk_uploads",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("file_name", sa.String(length=300), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("uploaded_by", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("validate_only", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", upload_status_enum, nullable=False, server_default="processing"),
        sa.Column("total_rows", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed_rows", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("success_rows", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_rows", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("errors", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_timetable_bulk_uploads_uploaded_by", "timetable_bulk_uploads", ["uploaded_by"])


def downgrade() -> None:
    op.drop_index("ix_timetable_bulk_uploads_uploaded_by", table_name="timetable_bulk_uploads")
    op.drop_table("timetable_bulk_uploads")
    op.drop_index("uq_timetables_active_class_date_start", table_name="timetables")
    op.drop_index("ix_timetables_branch_class_date", table_name="timetables")
    op.drop_table("timetables")
    upload_status_enum.drop(op.get_bind(), checkfirst=True)
    day_of_week_enum.drop(op.get_bind(), checkfirst=True)
