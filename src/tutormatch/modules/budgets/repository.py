"""
Budget Repository

Database operations for budget transactions.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.modules.teachers.models import Teacher
from tutormatch.modules.vacancies.models import Vacancy

from .models import BudgetTransaction, TransactionStatus, TransactionType
from .schemas import BudgetTransactionCreate


async def get_teacher(db: AsyncSession, teacher_id: UUID) -> Teacher | None:
    return await db.get(Teacher, teacher_id)


async def get_vacancy_title(db: AsyncSession, vacancy_id: UUID) -> str | None:
    result = await db.execute(select(Vacancy.title).where(Vacancy.id == vacancy_id))
    return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    data: BudgetTransactionCreate,
    teacher_name: str,
    vacancy_title: str,
) -> BudgetTransaction:
    """
    Insert a transaction.

    Raises:
        IntegrityError: If the original payment already has a refund
    """
    partial = data.resolved_status == TransactionStatus.PARTIAL
    refund_of = data.original_payment_id
    if data.type != TransactionType.REFUND or data.is_admin_override:
        refund_of = None

    transaction = BudgetTransaction(
        teacher_id=data.teacher_id,
        teacher_name=teacher_name,
        vacancy_id=data.vacancy_id,
        vacancy_title=vacancy_title,
        application_id=data.application_id,
        amount=data.amount,
        type=data.type,
        status=data.resolved_status,
        remaining_amount=data.remaining_amount if partial else Decimal("0"),
        due_date=data.due_date if partial else None,
        date=data.date or datetime.now(UTC),
        reason=data.reason,
        original_payment_id=refund_of,
        is_admin_override=data.is_admin_override,
    )

    db.add(transaction)
    await db.flush()

    return transaction


async def get_by_id(db: AsyncSession, id: UUID) -> BudgetTransaction | None:
    return await db.get(BudgetTransaction, id)


async def get_for_update(db: AsyncSession, id: UUID) -> BudgetTransaction | None:
    """Get a transaction and lock its row until the current transaction ends."""
    result = await db.execute(
        select(BudgetTransaction)
        .where(BudgetTransaction.id == id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def has_refund(db: AsyncSession, payment_id: UUID) -> bool:
    result = await db.execute(
        select(BudgetTransaction.id).where(
            BudgetTransaction.type == TransactionType.REFUND,
            BudgetTransaction.original_payment_id == payment_id,
        )
    )
    return result.first() is not None


async def list_all(db: AsyncSession) -> list[BudgetTransaction]:
    """All transactions, most recent first."""
    result = await db.execute(select(BudgetTransaction).order_by(BudgetTransaction.date.desc()))
    return list(result.scalars().all())


async def totals_by_type(db: AsyncSession) -> dict[TransactionType, Decimal]:
    """Sum of amounts per transaction type. Types with no rows are absent."""
    result = await db.execute(
        select(BudgetTransaction.type, func.sum(BudgetTransaction.amount)).group_by(
            BudgetTransaction.type
        )
    )
    return {row[0]: row[1] for row in result.all()}


async def settle_partial(db: AsyncSession, id: UUID) -> BudgetTransaction | None:
    """
    Mark a partial payment paid, clearing what remained and its due date.

    Returns None if the transaction does not exist or is not partial.
    """
    result = await db.execute(
        update(BudgetTransaction)
        .where(
            BudgetTransaction.id == id,
            BudgetTransaction.status == TransactionStatus.PARTIAL,
        )
        .values(status=TransactionStatus.PAID, remaining_amount=Decimal("0"), due_date=None)
        .returning(BudgetTransaction)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
