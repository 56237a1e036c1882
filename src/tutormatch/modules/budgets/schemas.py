"""
Budget Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tutormatch.modules.budgets.models import TransactionStatus, TransactionType


class BudgetTransactionCreate(BaseModel):
    """
    Request body for POST /admin/budget/transactions.

    Teacher name and vacancy title are looked up from the ids. Status
    defaults to `paid` for payments and `refunded` for refunds.
    """

    teacher_id: UUID
    vacancy_id: UUID
    application_id: UUID | None = None
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    type: TransactionType
    status: TransactionStatus | None = None
    remaining_amount: Decimal | None = Field(None, max_digits=12, decimal_places=2)
    due_date: datetime | None = None
    reason: str | None = Field(None, max_length=1000)
    original_payment_id: UUID | None = None
    is_admin_override: bool = False
    date: datetime | None = None

    @model_validator(mode="after")
    def validate_settlement(self) -> "BudgetTransactionCreate":
        if self.type == TransactionType.PAYMENT:
            if self.status == TransactionStatus.REFUNDED:
                raise ValueError("A payment cannot have status 'refunded'")
            if self.status == TransactionStatus.PARTIAL and (
                self.remaining_amount is None
                or self.remaining_amount <= 0
                or self.due_date is None
            ):
                raise ValueError("Partial payments require remaining_amount and due_date")
            return self

        if self.status not in (None, TransactionStatus.REFUNDED):
            raise ValueError("A refund must have status 'refunded'")
        if not self.reason or not self.reason.strip():
            raise ValueError("Refunds require a reason")
        if not self.is_admin_override and self.original_payment_id is None:
            raise ValueError("Refunds require original_payment_id")
        return self

    @property
    def resolved_status(self) -> TransactionStatus:
        if self.status is not None:
            return self.status
        if self.type == TransactionType.PAYMENT:
            return TransactionStatus.PAID
        return TransactionStatus.REFUNDED


class TransactionStatusUpdate(BaseModel):
    """Request body for PUT /admin/budget/transactions/{id}/status."""

    status: TransactionStatus

    @field_validator("status")
    @classmethod
    def only_paid(cls, value: TransactionStatus) -> TransactionStatus:
        if value != TransactionStatus.PAID:
            raise ValueError("Invalid status provided. Only 'paid' is allowed.")
        return value


# ============================================
# Response Schemas
# ============================================


class BudgetTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    teacher_id: UUID | None = None
    teacher_name: str
    teacher_phone: str | None = None
    vacancy_id: UUID | None = None
    vacancy_title: str
    application_id: UUID | None = None
    amount: Decimal
    type: TransactionType
    status: TransactionStatus
    remaining_amount: Decimal
    due_date: datetime | None = None
    date: datetime
    reason: str | None = None
    original_payment_id: UUID | None = None
    is_admin_override: bool
    created_at: datetime


class BudgetStats(BaseModel):
    total_payments: Decimal
    total_refunds: Decimal
    net_amount: Decimal


class BudgetTransactionListResponse(BaseModel):
    success: bool = True
    data: list[BudgetTransactionResponse]


class BudgetTransactionDetailResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: BudgetTransactionResponse


class BudgetStatsResponse(BaseModel):
    success: bool = True
    data: BudgetStats
