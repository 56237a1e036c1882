"""
Fixtures for budget tests.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from tutormatch.modules.budgets.models import (
    BudgetTransaction,
    TransactionStatus,
    TransactionType,
)
from tutormatch.modules.teachers.models import Teacher


@pytest.fixture
def teacher():
    teacher = MagicMock(spec=Teacher)
    teacher.id = uuid4()
    teacher.full_name = "Kwame Mensah"
    teacher.phone = "+233200000001"
    return teacher


@pytest.fixture
def make_transaction():
    """Factory for budget transaction models."""

    def _make(
        type: TransactionType = TransactionType.PAYMENT,
        status: TransactionStatus = TransactionStatus.PAID,
        amount: str = "500.00",
        remaining_amount: str = "0",
        original_payment_id=None,
    ):
        transaction = MagicMock(spec=BudgetTransaction)
        transaction.id = uuid4()
        transaction.teacher_id = uuid4()
        transaction.teacher_name = "Kwame Mensah"
        transaction.teacher_phone = "+233200000001"
        transaction.vacancy_id = uuid4()
        transaction.vacancy_title = "JHS Maths tutor"
        transaction.application_id = None
        transaction.amount = Decimal(amount)
        transaction.type = type
        transaction.status = status
        transaction.remaining_amount = Decimal(remaining_amount)
        transaction.due_date = None
        transaction.date = datetime.now(UTC)
        transaction.reason = "Placement ended early" if type == TransactionType.REFUND else None
        transaction.original_payment_id = original_payment_id
        transaction.is_admin_override = False
        transaction.created_at = datetime.now(UTC)
        return transaction

    return _make
