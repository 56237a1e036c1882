"""
Budget Service Layer

Business logic for teacher payments and refunds.

This module implements:
1. Recording payments (full or partial) and refunds
   - Names are copied from the teacher and vacancy at creation
   - A refund must match an existing payment, at most once, for no more
     than the payment's amount, unless the admin overrides
2. Settling partial payments
3. Totals across all transactions
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.modules.budgets import repository
from tutormatch.modules.budgets.exceptions import (
    InvalidOriginalPaymentError,
    RefundAlreadyProcessedError,
    RefundExceedsPaymentError,
    TransactionNotFoundError,
    TransactionNotPartialError,
)
from tutormatch.modules.budgets.models import BudgetTransaction, TransactionType
from tutormatch.modules.budgets.schemas import BudgetStats, BudgetTransactionCreate
from tutormatch.modules.shared import persistence_guard
from tutormatch.modules.teachers.models import UNKNOWN_TEACHER_NAME
from tutormatch.modules.vacancies.exceptions import (
    ApplicationNotFoundError,
    TeacherNotFoundError,
    VacancyNotFoundError,
)

logger = logging.getLogger(__name__)

REFUND_CONSTRAINT = "uq_budget_transactions_original_payment"
TEACHER_FK_CONSTRAINT = "fk_budget_transactions_teacher_id"
VACANCY_FK_CONSTRAINT = "fk_budget_transactions_vacancy_id"
APPLICATION_FK_CONSTRAINT = "fk_budget_transactions_application_id"


async def list_transactions(db: AsyncSession) -> list[BudgetTransaction]:
    return await repository.list_all(db)


async def _check_refund(db: AsyncSession, data: BudgetTransactionCreate) -> None:
    """
    Validate a refund against its original payment.

    The payment row stays locked until commit, so two refunds of the same
    payment cannot both pass the checks.
    """
    original = await repository.get_for_update(db, data.original_payment_id)
    if original is None or original.type != TransactionType.PAYMENT:
        raise InvalidOriginalPaymentError()
    if await repository.has_refund(db, original.id):
        raise RefundAlreadyProcessedError()
    if data.amount > original.amount:
        raise RefundExceedsPaymentError()


def _map_integrity_error(e: IntegrityError, data: BudgetTransactionCreate) -> None:
    message = str(e.orig)
    if REFUND_CONSTRAINT in message:
        raise RefundAlreadyProcessedError() from e
    if TEACHER_FK_CONSTRAINT in message:
        raise TeacherNotFoundError(data.teacher_id) from e
    if VACANCY_FK_CONSTRAINT in message:
        raise VacancyNotFoundError(data.vacancy_id) from e
    if APPLICATION_FK_CONSTRAINT in message:
        raise ApplicationNotFoundError(data.application_id) from e


async def record_transaction(
    db: AsyncSession,
    data: BudgetTransactionCreate,
) -> BudgetTransaction:
    """
    Record a payment or refund.

    Raises:
        TeacherNotFoundError: If the teacher does not exist
        VacancyNotFoundError: If the vacancy does not exist
        ApplicationNotFoundError: If application_id does not exist
        InvalidOriginalPaymentError: If the refunded payment does not exist
            or is itself a refund
        RefundAlreadyProcessedError: If the payment was already refunded
        RefundExceedsPaymentError: If the refund is larger than the payment
    """
    async with persistence_guard(db, "record the transaction"):
        teacher = await repository.get_teacher(db, data.teacher_id)
        if teacher is None:
            raise TeacherNotFoundError(data.teacher_id)

        vacancy_title = await repository.get_vacancy_title(db, data.vacancy_id)
        if vacancy_title is None:
            raise VacancyNotFoundError(data.vacancy_id)

        if data.type == TransactionType.REFUND:
            if data.is_admin_override:
                logger.info(f"Refund to teacher {data.teacher_id} recorded as admin override")
            else:
                await _check_refund(db, data)

        try:
            transaction = await repository.create(
                db,
                data,
                teacher_name=teacher.full_name or UNKNOWN_TEACHER_NAME,
                vacancy_title=vacancy_title,
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            _map_integrity_error(e, data)
            raise

    logger.info(
        f"Recorded {transaction.type.value} {transaction.id} of {transaction.amount} "
        f"for teacher {transaction.teacher_id} ({transaction.status.value})"
    )
    return transaction


async def mark_paid(db: AsyncSession, transaction_id: UUID) -> BudgetTransaction:
    """
    Settle a partial payment.

    Raises:
        TransactionNotFoundError: If the transaction does not exist
        TransactionNotPartialError: If it is not a partial payment
    """
    async with persistence_guard(db, "update the transaction"):
        transaction = await repository.settle_partial(db, transaction_id)
        if transaction is None:
            if await repository.get_by_id(db, transaction_id) is None:
                raise TransactionNotFoundError(transaction_id)
            raise TransactionNotPartialError()
        await db.commit()

    logger.info(f"Partial payment {transaction_id} marked paid")
    return transaction


async def get_stats(db: AsyncSession) -> BudgetStats:
    totals = await repository.totals_by_type(db)
    payments = totals.get(TransactionType.PAYMENT) or Decimal("0")
    refunds = totals.get(TransactionType.REFUND) or Decimal("0")
    return BudgetStats(
        total_payments=payments,
        total_refunds=refunds,
        net_amount=payments - refunds,
    )
