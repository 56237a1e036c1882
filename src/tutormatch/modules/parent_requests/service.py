"""
Parent Request Service Layer

Business logic for tuition requests submitted by parents.

This module implements:
1. Submission:
   - Allocate the next sequential application number
   - Retry on a unique-number collision with a concurrent submission
2. Admin management:
   - List, get, delete
   - Manual status changes (never to DONE)
   - Linking a vacancy created for the request
3. Rejection escalation:
   - Atomic counter increment that gives up on the request at MAX_REJECTIONS
4. Acceptance cascade hook:
   - mark_parent_done(), called by the vacancy lifecycle
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.modules.parent_requests import repository
from tutormatch.modules.parent_requests.exceptions import (
    InvalidStatusChangeError,
    ParentRequestNotFoundError,
    RejectionLimitReachedError,
)
from tutormatch.modules.parent_requests.models import (
    MAX_REJECTIONS,
    ParentRequest,
    ParentRequestStatus,
)
from tutormatch.modules.parent_requests.schemas import MANUAL_STATUSES, ParentRequestCreate
from tutormatch.modules.shared import PersistenceFailureError, persistence_guard
from tutormatch.modules.vacancies import repository as vacancy_repository
from tutormatch.modules.vacancies.exceptions import VacancyNotFoundError

logger = logging.getLogger(__name__)

APPLICATION_NUMBER_MAX_ATTEMPTS = 5
APPLICATION_NUMBER_CONSTRAINT = "uq_parent_requests_application_number"


async def submit_parent_request(db: AsyncSession, data: ParentRequestCreate) -> ParentRequest:
    """
    Create a parent request with the next application number.

    Two submissions racing for the same number collide on the unique
    constraint; the loser re-reads the maximum and tries again.

    Raises:
        PersistenceFailureError: If no number could be allocated or the
            database is unavailable
    """
    operation = "submit your request"

    for attempt in range(1, APPLICATION_NUMBER_MAX_ATTEMPTS + 1):
        async with persistence_guard(db, operation):
            application_number = await repository.next_application_number(db)
            try:
                parent_request = await repository.create(db, data, application_number)
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                if APPLICATION_NUMBER_CONSTRAINT not in str(e.orig):
                    raise
                logger.warning(
                    f"Application number {application_number} taken "
                    f"(attempt {attempt}/{APPLICATION_NUMBER_MAX_ATTEMPTS}), retrying"
                )
                continue

        logger.info(
            f"Parent request {parent_request.id} submitted "
            f"(application number {application_number})"
        )
        return parent_request

    logger.error(
        f"Could not allocate an application number after "
        f"{APPLICATION_NUMBER_MAX_ATTEMPTS} attempts"
    )
    raise PersistenceFailureError(operation)


async def _raise_missing_or_given_up(db: AsyncSession, parent_id: UUID) -> None:
    """Explain why a guarded status UPDATE matched no row."""
    if await repository.exists(db, parent_id):
        raise RejectionLimitReachedError(MAX_REJECTIONS)
    raise ParentRequestNotFoundError(parent_id)


async def list_parent_requests(db: AsyncSession) -> list[ParentRequest]:
    return await repository.list_all(db)


async def get_parent_request(db: AsyncSession, parent_id: UUID) -> ParentRequest:
    """
    Raises:
        ParentRequestNotFoundError: If the request does not exist
    """
    parent_request = await repository.get_by_id(db, parent_id)
    if not parent_request:
        raise ParentRequestNotFoundError(parent_id)
    return parent_request


async def delete_parent_request(db: AsyncSession, parent_id: UUID) -> None:
    """
    Delete a parent request. A linked vacancy keeps existing with its
    parent reference cleared.

    Raises:
        ParentRequestNotFoundError: If the request does not exist
    """
    async with persistence_guard(db, "delete the request"):
        deleted = await repository.delete_parent_request(db, parent_id)
        if not deleted:
            raise ParentRequestNotFoundError(parent_id)
        await db.commit()

    logger.info(f"Parent request {parent_id} deleted")


async def update_parent_status(
    db: AsyncSession,
    parent_id: UUID,
    status: ParentRequestStatus,
) -> ParentRequest:
    """
    Change a request's status by hand.

    Raises:
        InvalidStatusChangeError: If status is DONE
        RejectionLimitReachedError: If the request reached MAX_REJECTIONS and
            status is not NOT_DONE
        ParentRequestNotFoundError: If the request does not exist
    """
    if status not in MANUAL_STATUSES:
        raise InvalidStatusChangeError(status.value)

    async with persistence_guard(db, "update the request status"):
        parent_request = await repository.update_status(db, parent_id, status)
        if not parent_request:
            await _raise_missing_or_given_up(db, parent_id)
        await db.commit()

    logger.info(f"Parent request {parent_id} status set to {status.value}")
    return parent_request


async def link_vacancy(
    db: AsyncSession,
    parent_id: UUID,
    vacancy_id: UUID,
    status: ParentRequestStatus = ParentRequestStatus.PENDING,
) -> ParentRequest:
    """
    Record the vacancy created to fill this request.

    Raises:
        InvalidStatusChangeError: If status is DONE
        VacancyNotFoundError: If the vacancy does not exist
        RejectionLimitReachedError: If the request reached MAX_REJECTIONS and
            status is not NOT_DONE
        ParentRequestNotFoundError: If the request does not exist
    """
    if status not in MANUAL_STATUSES:
        raise InvalidStatusChangeError(status.value)

    async with persistence_guard(db, "link the vacancy"):
        if not await vacancy_repository.get_by_id(db, vacancy_id):
            raise VacancyNotFoundError(vacancy_id)

        parent_request = await repository.link_vacancy(db, parent_id, vacancy_id, status)
        if not parent_request:
            await _raise_missing_or_given_up(db, parent_id)
        await db.commit()

    logger.info(f"Parent request {parent_id} linked to vacancy {vacancy_id}")
    return parent_request


async def record_rejection(db: AsyncSession, parent_id: UUID) -> ParentRequest:
    """
    Count one more rejection against the request.

    When the count reaches MAX_REJECTIONS the request is moved to NOT_DONE
    in the same statement.

    Raises:
        ParentRequestNotFoundError: If the request does not exist
    """
    async with persistence_guard(db, "record the rejection"):
        parent_request = await repository.increment_rejection(db, parent_id)
        if not parent_request:
            raise ParentRequestNotFoundError(parent_id)
        await db.commit()

    if parent_request.rejection_count >= MAX_REJECTIONS:
        logger.info(
            f"Parent request {parent_id} reached {parent_request.rejection_count} "
            f"rejections, marked not_done"
        )
    return parent_request


async def mark_parent_done(db: AsyncSession, parent_id: UUID) -> ParentRequest | None:
    """
    Mark a request done after a teacher was accepted on its vacancy.

    Commits its own transaction. Database errors propagate so the caller can
    retry. Returns None for a request deleted in the meantime, and for one
    that reached MAX_REJECTIONS, which stays NOT_DONE.
    """
    parent_request = await repository.update_status(db, parent_id, ParentRequestStatus.DONE)
    if parent_request is None and await repository.exists(db, parent_id):
        logger.warning(
            f"Parent request {parent_id} reached {MAX_REJECTIONS} rejections, left not_done"
        )
    elif parent_request is None:
        logger.warning(f"Parent request {parent_id} no longer exists, nothing to mark done")
    await db.commit()

    return parent_request
