"""create branches, academic years, classes, subjects and teachers

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


record_status_enum = sa.Enum("active", "inactive", name="record_status")
record_status_column_enum = postgresql.ENUM("active", "inactive", name="record_status", create_type=False)


def _status_column() -> sa.Column:
    return sa.Column("status", record_status_column_enum, nullable=False, server_default="active")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    record_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "branches",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("short_name", sa.String(length=50), nullable=False),
        sa.Column("legal_name", sa.String(length=200), nullable=False),
        _status_column(),
        *_timestamps(),
    )
    op.create_index("ix_branches_short_name", "branches", ["short_name"], unique=True)

    op.create_table(
        "academic_years",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        _status_column(),
        *_timestamps(),
    )
    op.create_index("ix_academic_years_name", "academic_years", ["name"], unique=True)

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE")),
        sa.Column(
            "academic_year_id", sa.String(length=36), sa.ForeignKey("academic_years.id", ondelete="CASCADE")
        ),
        _status_column(),
        *_timestamps(),
        sa.UniqueConstraint("name", "branch_id", "academic_year_id", name="uq_classes_name_branch_year"),
    )
    op.create_index("ix_classes_branch_id", "classes", ["branch_id"])
    op.create_index("ix_classes_academic_year_id", "classes", ["academic_year_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        _status_column(),
        *_timestamps(),
    )
    op.create_index("ix_subjects_name", "subjects", ["name"], unique=True)

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("branch_id", sa.String(length=36), sa.ForeignKey("branches.id", ondelete="CASCADE")),
        _status_column(),
        *_timestamps(),
    )
    op.create_index("ix_teachers_branch_id", "teachers", ["branch_id"])


def downgrade() -> None:
    op.drop_index("ix_teachers_branch_id", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_subjects_name", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_classes_academic_year_id", table_name="classes")
    op.drop_index("ix_classes_branch_id", table_name="classes")
    op.drop_table("classes")
    op.drop_index("ix_academic_years_name", table_name="academic_years")
    op.drop_table("academic_years")
    op.drop_index("ix_branches_short_name", table_name="branches")
    op.drop_table("branches")
    record_status_enum.drop(op.get_bind(), checkfirst=True)
