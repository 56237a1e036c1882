"""add budget transactions and scheduled calls

Revision ID: 7c2e5d8f1a93
Revises: 3a7f1c9b2d40
Create Date: 2026-10-19 15:00:00.000000

This migration:
1. Creates budget_transactions (payments and refunds, at most one refund
   per payment)
2. Creates scheduled_calls
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "7c2e5d8f1a93"
down_revision: str | Sequence[str] | None = "3a7f1c9b2d40"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS = {
    "budget_transaction_type": ("PAYMENT", "REFUND"),
    "budget_transaction_status": ("PAID", "PARTIAL", "REFUNDED"),
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
        "budget_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("teacher_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("teacher_name", sa.String(length=200), nullable=False),
        sa.Column("vacancy_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("vacancy_title", sa.String(length=200), nullable=False),
        sa.Column("application_id", postgresql.UUID(as_uuid=True), nullable=True),
        # Money
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("type", _enum("budget_transaction_type"), nullable=False),
        sa.Column("status", _enum("budget_transaction_status"), nullable=False),
        sa.Column(
            "remaining_amount",
            sa.Numeric(precision=12, scale=2),
            nullable=False,
            server_default="0",
        ),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        # Refunds
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("original_payment_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_admin_override", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["teacher_id"],
            ["teachers.id"],
            name="fk_budget_transactions_teacher_id",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["vacancy_id"],
            ["vacancies.id"],
            name="fk_budget_transactions_vacancy_id",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["vacancy_applications.id"],
            name="fk_budget_transactions_application_id",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["original_payment_id"],
            ["budget_transactions.id"],
            name="fk_budget_transactions_original_payment_id",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint(
            "original_payment_id", name="uq_budget_transactions_original_payment"
        ),
        sa.CheckConstraint("amount > 0", name="ck_budget_transactions_amount_positive"),
    )
    op.create_index("ix_budget_transactions_date", "budget_transactions", ["date"], unique=False)
    op.create_index("ix_budget_transactions_type", "budget_transactions", ["type"], unique=False)

    op.create_table(
        "scheduled_calls",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("contact_name", sa.String(length=200), nullable=False),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("call_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_scheduled_calls_completed_call_at",
        "scheduled_calls",
        ["is_completed", "call_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the tables and enum types."""
    op.drop_table("scheduled_calls")
    op.drop_table("budget_transactions")

    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).drop(bind, checkfirst=True)
