"""
Budget Admin Router

Endpoints for administrators to record teacher payments and refunds.
All endpoints require an admin token.

Endpoints:
- GET /admin/budget/transactions - List transactions, most recent first
- POST /admin/budget/transactions - Record a payment or refund
- PUT /admin/budget/transactions/{id}/status - Mark a partial payment paid
- GET /admin/budget/stats - Payment and refund totals
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.auth import AuthenticatedUser, get_current_admin_user
from tutormatch.core.database import get_db
from tutormatch.modules.budgets import service
from tutormatch.modules.budgets.models import TransactionStatus, TransactionType
from tutormatch.modules.budgets.schemas import (
    BudgetStatsResponse,
    BudgetTransactionCreate,
    BudgetTransactionDetailResponse,
    BudgetTransactionListResponse,
    BudgetTransactionResponse,
    TransactionStatusUpdate,
)
from tutormatch.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def _created_message(data: BudgetTransactionCreate) -> str:
    if data.type == TransactionType.REFUND:
        return "Refund recorded successfully"
    if data.resolved_status == TransactionStatus.PARTIAL:
        return "Partial payment recorded successfully"
    return "Payment recorded successfully"


@router.get(
    "/transactions",
    response_model=BudgetTransactionListResponse,
    summary="List Budget Transactions",
)
async def list_transactions(
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> BudgetTransactionListResponse:
    try:
        transactions = await service.list_transactions(db)
        return BudgetTransactionListResponse(
            data=[BudgetTransactionResponse.model_validate(t) for t in transactions]
        )
    except Exception as e:
        logger.exception(f"Error listing budget transactions: {e}")
        raise _internal_error(e) from e


@router.post(
    "/transactions",
    response_model=BudgetTransactionDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record Budget Transaction",
    description="""
Record a payment to a teacher, or a refund of one.

- A `partial` payment needs `remaining_amount` > 0 and `due_date`.
- A refund needs a `reason`. Unless `is_admin_override` is set it also
  needs `original_payment_id`: an existing payment, not yet refunded, of
  at least the refund amount.

**Access:** Admin only
""",
    responses={
        400: {"description": "Invalid original payment or refund too large"},
        404: {"description": "Teacher, vacancy or application not found"},
        409: {"description": "Payment already refunded"},
    },
)
async def record_transaction(
    data: BudgetTransactionCreate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> BudgetTransactionDetailResponse:
    try:
        transaction = await service.record_transaction(db, data)

        logger.info(f"Admin {admin.id} recorded budget transaction {transaction.id}")

        return BudgetTransactionDetailResponse(
            message=_created_message(data),
            data=BudgetTransactionResponse.model_validate(transaction),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error recording budget transaction: {e}")
        raise _internal_error(e) from e


@router.put(
    "/transactions/{transaction_id}/status",
    response_model=BudgetTransactionDetailResponse,
    summary="Mark Partial Payment Paid",
    responses={
        404: {"description": "Transaction not found"},
        409: {"description": "Transaction is not a partial payment"},
    },
)
async def update_transaction_status(
    transaction_id: UUID,
    data: TransactionStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> BudgetTransactionDetailResponse:
    try:
        transaction = await service.mark_paid(db, transaction_id)

        logger.info(f"Admin {admin.id} marked budget transaction {transaction_id} paid")

        return BudgetTransactionDetailResponse(
            message="Transaction status updated successfully",
            data=BudgetTransactionResponse.model_validate(transaction),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating budget transaction {transaction_id}: {e}")
        raise _internal_error(e) from e


@router.get(
    "/stats",
    response_model=BudgetStatsResponse,
    summary="Budget Totals",
)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> BudgetStatsResponse:
    try:
        return BudgetStatsResponse(data=await service.get_stats(db))
    except Exception as e:
        logger.exception(f"Error computing budget totals: {e}")
        raise _internal_error(e) from e
