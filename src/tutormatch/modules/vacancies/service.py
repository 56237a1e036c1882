"""
Vacancy Service Layer

Business logic for vacancies and the teacher application lifecycle.

This module implements:
1. Application Creation:
   - Lock the vacancy row, then check existence, open status, duplicate
     teacher and capacity in that order
   - Append a pending application and commit while the lock is held
   - Publish NEW_APPLICATION (best-effort)

2. Application Resolution:
   - Non-accept decisions update one application
   - Acceptance is a two-phase saga:
       a. under the row lock, accept the target and close the vacancy
          in one transaction
       b. reject the other pending applications, then mark the linked
          parent request done, each retried with backoff
       c. if (b) keeps failing, persist cascade_pending on the vacancy so
          the reconciliation job finishes it; the call still succeeds
   - Publish PARENT_STATUS_UPDATED (best-effort)

3. Vacancy Management:
   - Create (optionally linked to a parent request), update, open/close,
     delete, listings for the public, teachers and admins

Concurrency:
- Every apply and accept holds SELECT ... FOR UPDATE on the vacancy row
  for the length of its transaction, so two requests can never both pass
  the checks against the same state
- The (vacancy_id, teacher_id) unique constraint backs the duplicate check
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core import notifications
from tutormatch.core.config import settings
from tutormatch.core.retry import retry_async
from tutormatch.modules.parent_requests import repository as parent_repository
from tutormatch.modules.parent_requests import service as parent_service
from tutormatch.modules.parent_requests.exceptions import (
    ParentRequestNotFoundError,
    RejectionLimitReachedError,
)
from tutormatch.modules.parent_requests.models import (
    MAX_REJECTIONS,
    ParentRequest,
    ParentRequestStatus,
)
from tutormatch.modules.shared import persistence_guard
from tutormatch.modules.vacancies import repository
from tutormatch.modules.vacancies.exceptions import (
    AlreadyResolvedError,
    ApplicationNotFoundError,
    CapacityExceededError,
    DuplicateApplicationError,
    TeacherNotFoundError,
    VacancyClosedError,
    VacancyHasAcceptedApplicationError,
    VacancyNotFoundError,
    VacancyNotOpenError,
)
from tutormatch.modules.vacancies.helpers import (
    find_application,
    get_accepted_application,
    get_teacher_name,
    has_teacher_applied,
    is_at_capacity,
)
from tutormatch.modules.vacancies.models import (
    MAX_APPLICATIONS_PER_VACANCY,
    ApplicationStatus,
    Vacancy,
    VacancyApplication,
    VacancyStatus,
)
from tutormatch.modules.vacancies.schemas import VacancyCreate, VacancyUpdate

logger = logging.getLogger(__name__)

DUPLICATE_CONSTRAINT = "uq_vacancy_applications_teacher"
TEACHER_FK_CONSTRAINT = "fk_vacancy_applications_teacher_id"


def _notify(event_type: str, payload: dict[str, Any]) -> None:
    """Publish a notification. Failures are logged and never raised."""
    try:
        notifications.publish(event_type, payload)
    except Exception as e:
        logger.error(f"Failed to publish {event_type} notification: {e}", exc_info=True)


async def _get_vacancy_or_raise(db: AsyncSession, vacancy_id: UUID) -> Vacancy:
    vacancy = await repository.get_by_id(db, vacancy_id)
    if not vacancy:
        raise VacancyNotFoundError(vacancy_id)
    return vacancy


# ============================================
# Application Creation
# ============================================


async def apply_to_vacancy(
    db: AsyncSession,
    vacancy_id: UUID,
    teacher_id: UUID,
) -> VacancyApplication:
    """
    Submit a teacher's application to a vacancy.

    Args:
        db: Database session
        vacancy_id: Vacancy to apply to
        teacher_id: The authenticated teacher

    Returns:
        The new pending application, with its teacher loaded

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
        VacancyNotOpenError: If the vacancy is closed or pending
        DuplicateApplicationError: If the teacher already applied
        CapacityExceededError: If the vacancy already has the maximum applications
        TeacherNotFoundError: If teacher_id has no teacher profile
        PersistenceFailureError: If the database fails before the commit
    """
    async with persistence_guard(db, "submit your application"):
        vacancy = await repository.get_for_update(db, vacancy_id)
        if not vacancy:
            raise VacancyNotFoundError(vacancy_id)

        if vacancy.status != VacancyStatus.OPEN:
            raise VacancyNotOpenError()

        if has_teacher_applied(vacancy, teacher_id):
            raise DuplicateApplicationError()

        if is_at_capacity(vacancy):
            raise CapacityExceededError(MAX_APPLICATIONS_PER_VACANCY)

        try:
            application = await repository.add_application(db, vacancy, teacher_id)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if DUPLICATE_CONSTRAINT in str(e.orig):
                raise DuplicateApplicationError() from e
            if TEACHER_FK_CONSTRAINT in str(e.orig):
                raise TeacherNotFoundError(teacher_id) from e
            raise

    logger.info(f"Teacher {teacher_id} applied to vacancy {vacancy_id} (application {application.id})")

    _notify(
        notifications.EVENT_NEW_APPLICATION,
        {
            "teacherName": get_teacher_name(application),
            "vacancyTitle": vacancy.title,
            "vacancyId": str(vacancy_id),
            "applicationId": str(application.id),
        },
    )

    return application


# ============================================
# Application Resolution
# ============================================


async def resolve_application(
    db: AsyncSession,
    vacancy_id: UUID,
    application_id: UUID,
    decision: ApplicationStatus,
) -> Vacancy | None:
    """
    Apply an admin decision to an application.

    Accepting closes the vacancy and cascades to the other applications and
    the linked parent request (see module docstring). Any other decision
    only changes the one application.

    Returns:
        The vacancy reloaded with its applications, or None if the decision
        was saved but the vacancy could not be read back

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
        ApplicationNotFoundError: If the application is not on this vacancy
        AlreadyResolvedError: If another application is already accepted
        VacancyClosedError: If the vacancy is closed
        PersistenceFailureError: If the database fails before the commit
    """
    if decision != ApplicationStatus.ACCEPTED:
        return await _set_single_status(db, vacancy_id, application_id, decision)

    async with persistence_guard(db, "accept the application"):
        vacancy = await repository.get_for_update(db, vacancy_id)
        if not vacancy:
            raise VacancyNotFoundError(vacancy_id)

        if not find_application(vacancy, application_id):
            raise ApplicationNotFoundError(application_id)

        # A vacancy closed by an earlier acceptance reports VacancyClosed
        if vacancy.status == VacancyStatus.CLOSED:
            raise VacancyClosedError()

        if get_accepted_application(vacancy, exclude_id=application_id):
            raise AlreadyResolvedError()

        parent_id = vacancy.parent_id
        await repository.accept_and_close(db, vacancy_id, application_id)
        await db.commit()

    logger.info(f"Application {application_id} accepted, vacancy {vacancy_id} closed")

    await _run_acceptance_cascade(db, vacancy_id, application_id, parent_id)

    return await _reload_after_commit(db, vacancy_id)


async def _set_single_status(
    db: AsyncSession,
    vacancy_id: UUID,
    application_id: UUID,
    status: ApplicationStatus,
) -> Vacancy | None:
    async with persistence_guard(db, "update the application"):
        vacancy = await repository.get_for_update(db, vacancy_id)
        if not vacancy:
            raise VacancyNotFoundError(vacancy_id)

        if not find_application(vacancy, application_id):
            raise ApplicationNotFoundError(application_id)

        await repository.set_application_status(db, vacancy_id, application_id, status)
        await db.commit()

    logger.info(f"Application {application_id} on vacancy {vacancy_id} set to {status.value}")
    return await _reload_after_commit(db, vacancy_id)


async def _reload_step(db: AsyncSession, vacancy_id: UUID) -> Vacancy | None:
    try:
        return await repository.reload(db, vacancy_id)
    except Exception:
        await db.rollback()
        raise


async def _reload_after_commit(db: AsyncSession, vacancy_id: UUID) -> Vacancy | None:
    """
    Re-read a vacancy whose decision has already committed.

    The decision stands whatever happens here, so a read that keeps failing
    is logged and reported as None instead of raised.
    """
    try:
        return await retry_async(
            lambda: _reload_step(db, vacancy_id),
            attempts=settings.cascade_retry_attempts,
            backoff_seconds=settings.cascade_retry_backoff_seconds,
            description=f"Reloading vacancy {vacancy_id}",
        )
    except Exception as e:
        logger.error(
            f"Decision on vacancy {vacancy_id} saved but the vacancy could not be re-read: {e}",
            exc_info=True,
        )
        return None


async def _reject_siblings_step(
    db: AsyncSession,
    vacancy_id: UUID,
    accepted_application_id: UUID,
) -> int:
    try:
        rejected = await repository.reject_pending_siblings(db, vacancy_id, accepted_application_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return rejected


async def _mark_parent_done_step(db: AsyncSession, parent_id: UUID) -> ParentRequest | None:
    try:
        return await parent_service.mark_parent_done(db, parent_id)
    except Exception:
        await db.rollback()
        raise


async def _complete_cascade(
    db: AsyncSession,
    vacancy_id: UUID,
    accepted_application_id: UUID | None,
    parent_id: UUID | None,
) -> ParentRequest | None:
    """
    Run the follow-up writes of an acceptance, each retried with backoff.

    Both steps are idempotent, so a retry or a later reconciliation run can
    safely repeat them.

    Returns:
        The parent request marked done, if any
    """
    if accepted_application_id is not None:
        rejected = await retry_async(
            lambda: _reject_siblings_step(db, vacancy_id, accepted_application_id),
            attempts=settings.cascade_retry_attempts,
            backoff_seconds=settings.cascade_retry_backoff_seconds,
            description=f"Rejecting sibling applications on vacancy {vacancy_id}",
        )
        logger.info(f"Rejected {rejected} pending application(s) on vacancy {vacancy_id}")

    if parent_id is None:
        return None

    return await retry_async(
        lambda: _mark_parent_done_step(db, parent_id),
        attempts=settings.cascade_retry_attempts,
        backoff_seconds=settings.cascade_retry_backoff_seconds,
        description=f"Marking parent request {parent_id} done",
    )


async def _run_acceptance_cascade(
    db: AsyncSession,
    vacancy_id: UUID,
    accepted_application_id: UUID,
    parent_id: UUID | None,
) -> bool:
    """
    Finish an acceptance that has already committed.

    Never raises: an incomplete cascade is recorded on the vacancy for the
    reconciliation job and logged.

    Returns:
        True if the cascade completed
    """
    try:
        parent_request = await _complete_cascade(db, vacancy_id, accepted_application_id, parent_id)
    except Exception as e:
        logger.error(
            f"Acceptance cascade for vacancy {vacancy_id} incomplete, "
            f"deferring to reconciliation: {e}",
            exc_info=True,
        )
        await _mark_cascade_pending(db, vacancy_id, str(e))
        return False

    if parent_request is not None:
        _notify_parent_done(parent_request.id, vacancy_id)
    return True


async def _mark_cascade_pending(db: AsyncSession, vacancy_id: UUID, error: str) -> None:
    try:
        await repository.mark_cascade_pending(db, vacancy_id, error)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Could not record pending cascade on vacancy {vacancy_id}: {e}. "
            f"Sibling applications or parent status need manual repair.",
            exc_info=True,
        )


def _notify_parent_done(parent_id: UUID, vacancy_id: UUID) -> None:
    _notify(
        notifications.EVENT_PARENT_STATUS_UPDATED,
        {
            "parentId": str(parent_id),
            "newStatus": ParentRequestStatus.DONE.value,
            "vacancyId": str(vacancy_id),
        },
    )


async def reconcile_pending_cascades(db: AsyncSession) -> int:
    """
    Finish acceptance cascades that failed at request time.

    Each vacancy is handled independently; a failure leaves its marker in
    place for the next run.

    Returns:
        Number of vacancies whose cascade was completed
    """
    pending = await repository.get_cascade_pending(db)
    if not pending:
        return 0

    # Snapshot ids first; a rollback below expires every loaded instance
    work = []
    for vacancy in pending:
        accepted = get_accepted_application(vacancy)
        work.append((vacancy.id, accepted.id if accepted else None, vacancy.parent_id))

    completed = 0
    for vacancy_id, accepted_id, parent_id in work:
        try:
            parent_request = await _complete_cascade(db, vacancy_id, accepted_id, parent_id)
            await repository.clear_cascade_pending(db, vacancy_id)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Reconciliation failed for vacancy {vacancy_id}: {e}", exc_info=True)
            continue

        completed += 1
        if parent_request is not None:
            _notify_parent_done(parent_request.id, vacancy_id)

    logger.info(f"Reconciled {completed}/{len(pending)} pending acceptance cascade(s)")
    return completed


# ============================================
# Vacancy Management
# ============================================


async def create_vacancy(db: AsyncSession, data: VacancyCreate, admin_id: UUID) -> Vacancy:
    """
    Create an open vacancy.

    When parent_id is given the parent request is linked to the new vacancy
    and moved to pending in the same transaction.

    Raises:
        ParentRequestNotFoundError: If parent_id does not exist
        RejectionLimitReachedError: If the parent request was given up on
    """
    async with persistence_guard(db, "create the vacancy"):
        if data.parent_id and not await parent_repository.exists(db, data.parent_id):
            raise ParentRequestNotFoundError(data.parent_id)

        vacancy = await repository.create(db, data, admin_id)
        vacancy_id = vacancy.id

        if data.parent_id:
            linked = await parent_repository.link_vacancy(
                db, data.parent_id, vacancy_id, ParentRequestStatus.PENDING
            )
            if linked is None:
                raise RejectionLimitReachedError(MAX_REJECTIONS)

        await db.commit()

    logger.info(f"Vacancy {vacancy_id} created by admin {admin_id}")
    return await repository.reload(db, vacancy_id)


async def update_vacancy(db: AsyncSession, vacancy_id: UUID, data: VacancyUpdate) -> Vacancy:
    """
    Update descriptive fields.

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
    """
    async with persistence_guard(db, "update the vacancy"):
        vacancy = await _get_vacancy_or_raise(db, vacancy_id)
        await repository.update_fields(db, vacancy, data.model_dump(exclude_unset=True))
        await db.commit()

    logger.info(f"Vacancy {vacancy_id} updated")
    return await repository.reload(db, vacancy_id)


async def set_vacancy_status(
    db: AsyncSession,
    vacancy_id: UUID,
    status: VacancyStatus,
) -> Vacancy:
    """
    Open or close a vacancy.

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
        VacancyHasAcceptedApplicationError: If re-opening with an accepted teacher
    """
    async with persistence_guard(db, "update the vacancy status"):
        vacancy = await repository.get_for_update(db, vacancy_id)
        if not vacancy:
            raise VacancyNotFoundError(vacancy_id)

        if status == VacancyStatus.OPEN and get_accepted_application(vacancy):
            raise VacancyHasAcceptedApplicationError()

        await repository.set_status(db, vacancy, status)
        await db.commit()

    logger.info(f"Vacancy {vacancy_id} status set to {status.value}")
    return await repository.reload(db, vacancy_id)


async def delete_vacancy(db: AsyncSession, vacancy_id: UUID) -> None:
    """
    Delete a vacancy and its applications.

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
    """
    async with persistence_guard(db, "delete the vacancy"):
        deleted = await repository.delete_vacancy(db, vacancy_id)
        if not deleted:
            raise VacancyNotFoundError(vacancy_id)
        await db.commit()

    logger.info(f"Vacancy {vacancy_id} deleted")


async def list_vacancies(db: AsyncSession) -> list[Vacancy]:
    return await repository.list_all(db)


async def list_featured_vacancies(db: AsyncSession) -> list[Vacancy]:
    return await repository.list_featured(db)


async def get_vacancy(db: AsyncSession, vacancy_id: UUID) -> Vacancy:
    """
    Raises:
        VacancyNotFoundError: If the vacancy does not exist
    """
    return await _get_vacancy_or_raise(db, vacancy_id)


async def list_available_vacancies(
    db: AsyncSession,
    teacher_id: UUID,
) -> list[tuple[Vacancy, int]]:
    """Open vacancies with room that the teacher has not applied to, with applicant counts."""
    return await repository.list_available_for_teacher(db, teacher_id)


async def list_teacher_applications(
    db: AsyncSession,
    teacher_id: UUID,
) -> list[tuple[VacancyApplication, Vacancy]]:
    return await repository.list_applications_for_teacher(db, teacher_id)


async def list_applicants(db: AsyncSession, vacancy_id: UUID) -> list[VacancyApplication]:
    """
    Applications on a vacancy in the order they were made.

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
    """
    vacancy = await _get_vacancy_or_raise(db, vacancy_id)
    return list(vacancy.applications)


async def mark_applicants_viewed(db: AsyncSession, vacancy_id: UUID) -> datetime:
    """
    Record that an admin has seen the current applicants.

    Raises:
        VacancyNotFoundError: If the vacancy does not exist
    """
    async with persistence_guard(db, "update the vacancy"):
        vacancy = await _get_vacancy_or_raise(db, vacancy_id)
        viewed_at = await repository.mark_applicants_viewed(db, vacancy)
        await db.commit()

    return viewed_at
