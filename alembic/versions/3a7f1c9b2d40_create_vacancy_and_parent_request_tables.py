"""create vacancy, application, teacher and parent request tables

Revision ID: 3a7f1c9b2d40
Revises:
Create Date: 2026-10-19 12:00:00.000000

This migration:
1. Creates the teachers table (read-only for this API, written by signup)
2. Creates parent_requests and vacancies, which reference each other
3. Creates vacancy_applications with one application per teacher per vacancy

parent_requests.vacancy_id is added after vacancies exists to break the
foreign key cycle.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3a7f1c9b2d40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS = {
    "vacancy_status": ("OPEN", "CLOSED", "PENDING"),
    "vacancy_application_status": ("PENDING", "ACCEPTED", "REJECTED"),
    "preferred_gender": ("MALE", "FEMALE", "ANY"),
    "preferred_teacher": ("MALE", "FEMALE", "ANY"),
    "parent_request_status": ("NEW", "PENDING", "DONE", "NOT_DONE"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the tables."""
    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).create(bind, checkfirst=True)

    op.create_table(
        "teachers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("subjects", sa.JSON(), nullable=False),
        sa.Column("fees", sa.String(length=100), nullable=True),
        sa.Column("cv_url", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teachers_email"), "teachers", ["email"], unique=True)

    op.create_table(
        "parent_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("application_number", sa.Integer(), nullable=False),
        # Request details
        sa.Column("parent_name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("salary", sa.String(length=100), nullable=True),
        sa.Column("preferred_teacher", _enum("preferred_teacher"), nullable=False),
        sa.Column("grade", sa.String(length=50), nullable=False),
        sa.Column("subjects", sa.JSON(), nullable=False),
        sa.Column("preferred_time", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        # Status tracking
        sa.Column(
            "status",
            _enum("parent_request_status"),
            nullable=False,
            server_default="NEW",
        ),
        sa.Column(
            "submitted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("vacancy_linked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number", name="uq_parent_requests_application_number"),
    )
    op.create_index("ix_parent_requests_status", "parent_requests", ["status"], unique=False)
    op.create_index(
        "ix_parent_requests_submitted_at", "parent_requests", ["submitted_at"], unique=False
    )

    op.create_table(
        "vacancies",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        # Posting details
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("subject", sa.String(length=100), nullable=False),
        sa.Column("class_level", sa.String(length=100), nullable=False),
        sa.Column("schedule", sa.String(length=100), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("preferred_gender", _enum("preferred_gender"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("salary", sa.String(length=100), nullable=False),
        # Lifecycle
        sa.Column("status", _enum("vacancy_status"), nullable=False, server_default="OPEN"),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "admin_last_viewed_applicants_at", sa.DateTime(timezone=True), nullable=True
        ),
        # Deferred acceptance cascade
        sa.Column("cascade_pending", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("cascade_error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["parent_requests.id"],
            name="fk_vacancies_parent_id",
            ondelete="SET NULL",
        ),
    )
    op.create_index(
        "ix_vacancies_featured_status", "vacancies", ["featured", "status"], unique=False
    )
    op.create_index("ix_vacancies_parent_id", "vacancies", ["parent_id"], unique=False)
    # Reconciliation job scans only marked rows
    op.create_index(
        "ix_vacancies_cascade_pending",
        "vacancies",
        ["cascade_pending"],
        unique=False,
        postgresql_where=sa.text("cascade_pending"),
    )

    # Close the cycle: parent request -> vacancy
    op.add_column(
        "parent_requests",
        sa.Column("vacancy_id", postgresql.UUID(as_uuid=True), nullable=True),
    )
    op.create_foreign_key(
        "fk_parent_requests_vacancy_id",
        "parent_requests",
        "vacancies",
        ["vacancy_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "vacancy_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vacancy_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "status",
            _enum("vacancy_application_status"),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column(
            "applied_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["vacancy_id"],
            ["vacancies.id"],
            name="fk_vacancy_applications_vacancy_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["teachers.id"],
            name="fk_vacancy_applications_teacher_id",
        ),
        sa.UniqueConstraint("vacancy_id", "teacher_id", name="uq_vacancy_applications_teacher"),
    )
    op.create_index(
        "ix_vacancy_applications_teacher_id", "vacancy_applications", ["teacher_id"], unique=False
    )
    op.create_index(
        "ix_vacancy_applications_vacancy_status",
        "vacancy_applications",
        ["vacancy_id", "status"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the tables and enum types."""
    op.drop_table("vacancy_applications")
    op.drop_constraint("fk_parent_requests_vacancy_id", "parent_requests", type_="foreignkey")
    op.drop_table("vacancies")
    op.drop_table("parent_requests")
    op.drop_index(op.f("ix_teachers_email"), table_name="teachers")
    op.drop_table("teachers")

    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).drop(bind, checkfirst=True)
