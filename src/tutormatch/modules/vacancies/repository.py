"""
Vacancy Repository

Database operations for vacancies and their applications.

Design Principles:
- Single responsibility - only database operations, no business logic
- Functions flush but never commit: the service owns transaction boundaries,
  because the acceptance cascade must commit its steps in a fixed order
- Status changes on applications are single UPDATE statements scoped to the
  vacancy, so they never depend on stale in-memory state
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    MAX_APPLICATIONS_PER_VACANCY,
    ApplicationStatus,
    Vacancy,
    VacancyApplication,
    VacancyStatus,
)
from .schemas import VacancyCreate

# Fields an admin may change through the generic update endpoint
UPDATABLE_FIELDS = {
    "title",
    "subject",
    "class_level",
    "schedule",
    "location",
    "preferred_gender",
    "description",
    "salary",
    "featured",
}


async def create(db: AsyncSession, data: VacancyCreate, created_by: UUID) -> Vacancy:
    """Create a new open vacancy."""

    vacancy = Vacancy(
        title=data.title,
        subject=data.subject,
        class_level=data.class_level,
        schedule=data.schedule,
        location=data.location,
        preferred_gender=data.preferred_gender,
        description=data.description,
        salary=data.salary,
        status=VacancyStatus.OPEN,
        featured=data.featured,
        created_by=created_by,
        parent_id=data.parent_id,
        applications=[],
    )

    db.add(vacancy)
    await db.flush()

    return vacancy


async def get_by_id(db: AsyncSession, id: UUID) -> Vacancy | None:
    """Get vacancy by ID (applications loaded)."""
    return await db.get(Vacancy, id)


async def get_for_update(db: AsyncSession, id: UUID) -> Vacancy | None:
    """
    Get a vacancy and lock its row until the current transaction ends.

    Every apply and resolve goes through this lock, which serialises
    check-then-act sequences on the same vacancy. Applications are reloaded
    so the checks see the latest committed state.
    """
    result = await db.execute(
        select(Vacancy)
        .where(Vacancy.id == id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def reload(db: AsyncSession, id: UUID) -> Vacancy | None:
    """Re-read a vacancy and its applications, replacing any cached state."""
    db.expire_all()
    result = await db.execute(
        select(Vacancy).where(Vacancy.id == id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_all(db: AsyncSession) -> list[Vacancy]:
    """All vacancies, newest first."""
    result = await db.execute(select(Vacancy).order_by(Vacancy.created_at.desc()))
    return list(result.scalars().all())


async def list_featured(db: AsyncSession) -> list[Vacancy]:
    """Open vacancies flagged as featured."""
    result = await db.execute(
        select(Vacancy)
        .where(Vacancy.status == VacancyStatus.OPEN, Vacancy.featured.is_(True))
        .order_by(Vacancy.created_at.desc())
    )
    return list(result.scalars().all())


def _application_count():
    return (
        select(func.count(VacancyApplication.id))
        .where(VacancyApplication.vacancy_id == Vacancy.id)
        .correlate(Vacancy)
        .scalar_subquery()
    )


async def list_available_for_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> list[tuple[Vacancy, int]]:
    """
    Open vacancies the teacher can still apply to.

    Excludes full vacancies and vacancies the teacher already applied to.

    Returns:
        List of (vacancy, applicant_count) tuples, newest first
    """
    applicant_count = _application_count()
    already_applied = exists().where(
        VacancyApplication.vacancy_id == Vacancy.id,
        VacancyApplication.teacher_id == teacher_id,
    )

    result = await db.execute(
        select(Vacancy, applicant_count.label("applicant_count"))
        .where(
            Vacancy.status == VacancyStatus.OPEN,
            applicant_count < MAX_APPLICATIONS_PER_VACANCY,
            ~already_applied,
        )
        .order_by(Vacancy.created_at.desc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def list_applications_for_teacher(
    db: AsyncSession,
    teacher_id: UUID,
) -> list[tuple[VacancyApplication, Vacancy]]:
    """The teacher's applications with their vacancies, most recent first."""
    result = await db.execute(
        select(VacancyApplication, Vacancy)
        .join(Vacancy, VacancyApplication.vacancy_id == Vacancy.id)
        .where(VacancyApplication.teacher_id == teacher_id)
        .order_by(VacancyApplication.applied_at.desc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def add_application(
    db: AsyncSession,
    vacancy: Vacancy,
    teacher_id: UUID,
) -> VacancyApplication:
    """Append a pending application to the vacancy."""
    application = VacancyApplication(
        vacancy_id=vacancy.id,
        teacher_id=teacher_id,
        status=ApplicationStatus.PENDING,
        applied_at=datetime.now(UTC),
    )
    db.add(application)
    await db.flush()
    await db.refresh(application, attribute_names=["teacher"])
    return application


async def update_fields(db: AsyncSession, vacancy: Vacancy, fields: dict[str, Any]) -> Vacancy:
    """
    Apply a partial update of descriptive fields.

    Raises:
        ValueError: If a field outside UPDATABLE_FIELDS is passed
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields not updatable: {sorted(unknown)}")

    for key, value in fields.items():
        setattr(vacancy, key, value)

    await db.flush()
    return vacancy


async def set_status(db: AsyncSession, vacancy: Vacancy, status: VacancyStatus) -> Vacancy:
    """Set the vacancy status."""
    vacancy.status = status
    await db.flush()
    return vacancy


async def set_application_status(
    db: AsyncSession,
    vacancy_id: UUID,
    application_id: UUID,
    status: ApplicationStatus,
) -> int:
    """Set one application's status. Returns the number of rows updated (0 or 1)."""
    result = await db.execute(
        update(VacancyApplication)
        .where(
            VacancyApplication.id == application_id,
            VacancyApplication.vacancy_id == vacancy_id,
        )
        .values(status=status)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def accept_and_close(
    db: AsyncSession,
    vacancy_id: UUID,
    application_id: UUID,
) -> None:
    """
    Mark the application accepted and close the vacancy.

    Both statements belong to the caller's transaction and commit together.
    """
    await set_application_status(db, vacancy_id, application_id, ApplicationStatus.ACCEPTED)
    await db.execute(
        update(Vacancy)
        .where(Vacancy.id == vacancy_id)
        .values(status=VacancyStatus.CLOSED)
        .execution_options(synchronize_session=False)
    )


async def reject_pending_siblings(
    db: AsyncSession,
    vacancy_id: UUID,
    accepted_application_id: UUID,
) -> int:
    """
    Reject every other pending application on the vacancy.

    Applications already rejected (or accepted) are left alone, so running
    this twice has the same effect as running it once.

    Returns:
        Number of applications rejected
    """
    result = await db.execute(
        update(VacancyApplication)
        .where(
            VacancyApplication.vacancy_id == vacancy_id,
            VacancyApplication.id != accepted_application_id,
            VacancyApplication.status == ApplicationStatus.PENDING,
        )
        .values(status=ApplicationStatus.REJECTED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def mark_applicants_viewed(db: AsyncSession, vacancy: Vacancy) -> datetime:
    """Record that an admin viewed the vacancy's applicants now."""
    viewed_at = datetime.now(UTC)
    vacancy.admin_last_viewed_applicants_at = viewed_at
    await db.flush()
    return viewed_at


async def delete_vacancy(db: AsyncSession, id: UUID) -> bool:
    """Delete a vacancy (applications cascade). Returns False if it did not exist."""
    result = await db.execute(delete(Vacancy).where(Vacancy.id == id))
    return result.rowcount > 0


# ============================================
# Deferred Cascade (reconciliation)
# ============================================


async def mark_cascade_pending(db: AsyncSession, vacancy_id: UUID, error: str) -> None:
    """Persist the marker telling the reconciliation job to finish this cascade."""
    await db.execute(
        update(Vacancy)
        .where(Vacancy.id == vacancy_id)
        .values(cascade_pending=True, cascade_error=error[:2000])
        .execution_options(synchronize_session=False)
    )


async def clear_cascade_pending(db: AsyncSession, vacancy_id: UUID) -> None:
    await db.execute(
        update(Vacancy)
        .where(Vacancy.id == vacancy_id)
        .values(cascade_pending=False, cascade_error=None)
        .execution_options(synchronize_session=False)
    )


async def get_cascade_pending(db: AsyncSession, limit: int = 100) -> list[Vacancy]:
    """Closed vacancies whose acceptance cascade has not finished."""
    result = await db.execute(
        select(Vacancy)
        .where(Vacancy.cascade_pending.is_(True))
        .order_by(Vacancy.updated_at.asc())
        .limit(limit)
    )
    return list(result.scalars().all())
