"""
Budget Models

Payment and refund records for teachers placed through vacancies.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.core.database import Base
from tutormatch.modules.shared.models import TimestampMixin, UUIDPrimaryKeyMixin
from tutormatch.modules.teachers.models import Teacher


class TransactionType(str, enum.Enum):
    PAYMENT = "payment"
    REFUND = "refund"


class TransactionStatus(str, enum.Enum):
    """Settlement status of a transaction."""

    PAID = "paid"
    PARTIAL = "partial"
    REFUNDED = "refunded"


class BudgetTransaction(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A payment to, or refund from, a teacher.

    Teacher and vacancy names are copied at creation so the record still
    reads correctly after either is deleted. A payment has at most one
    refund pointing at it.
    """

    __tablename__ = "budget_transactions"

    teacher_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="SET NULL", name="fk_budget_transactions_teacher_id"),
        nullable=True,
    )
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)
    vacancy_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vacancies.id", ondelete="SET NULL", name="fk_budget_transactions_vacancy_id"),
        nullable=True,
    )
    vacancy_title: Mapped[str] = mapped_column(String(200), nullable=False)
    application_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey(
            "vacancy_applications.id",
            ondelete="SET NULL",
            name="fk_budget_transactions_application_id",
        ),
        nullable=True,
    )

    # Money
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="budget_transaction_type"), nullable=False
    )
    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, name="budget_transaction_status"), nullable=False
    )
    remaining_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Refunds
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_payment_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey(
            "budget_transactions.id",
            ondelete="SET NULL",
            name="fk_budget_transactions_original_payment_id",
        ),
        nullable=True,
    )
    is_admin_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    teacher: Mapped[Teacher | None] = relationship(Teacher, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("original_payment_id", name="uq_budget_transactions_original_payment"),
        CheckConstraint("amount > 0", name="ck_budget_transactions_amount_positive"),
        Index("ix_budget_transactions_date", "date"),
        Index("ix_budget_transactions_type", "type"),
    )

    @property
    def teacher_phone(self) -> str | None:
        """Current phone of the teacher, None once the teacher is deleted."""
        return self.teacher.phone if self.teacher is not None else None

    def __repr__(self) -> str:
        return f"<BudgetTransaction(id={self.id}, type={self.type.value}, amount={self.amount})>"
