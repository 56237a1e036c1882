"""
Parent Request Repository

Database operations for parent requests.

Status and counter changes are single UPDATE ... RETURNING statements so
concurrent admins never overwrite each other's increments.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import case, delete, func, literal, select, true, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import MAX_REJECTIONS, ParentRequest, ParentRequestStatus
from .schemas import ParentRequestCreate


async def next_application_number(db: AsyncSession) -> int:
    """Return max(application_number) + 1, starting at 1."""
    result = await db.execute(
        select(func.coalesce(func.max(ParentRequest.application_number), 0) + 1)
    )
    return int(result.scalar_one())


async def create(
    db: AsyncSession,
    data: ParentRequestCreate,
    application_number: int,
) -> ParentRequest:
    """
    Insert a new parent request.

    Raises:
        IntegrityError: If application_number is already taken
    """
    parent_request = ParentRequest(
        application_number=application_number,
        parent_name=data.parent_name,
        phone=data.phone,
        address=data.address,
        salary=data.salary,
        preferred_teacher=data.preferred_teacher,
        grade=data.grade,
        subjects=data.subjects,
        preferred_time=data.preferred_time,
        notes=data.notes,
        status=ParentRequestStatus.NEW,
        submitted_at=datetime.now(UTC),
        rejection_count=0,
    )

    db.add(parent_request)
    await db.flush()

    return parent_request


async def get_by_id(db: AsyncSession, id: UUID) -> ParentRequest | None:
    """Get parent request by ID."""
    return await db.get(ParentRequest, id)


async def exists(db: AsyncSession, id: UUID) -> bool:
    result = await db.execute(select(ParentRequest.id).where(ParentRequest.id == id))
    return result.scalar_one_or_none() is not None


async def list_all(db: AsyncSession) -> list[ParentRequest]:
    """All parent requests, most recently submitted first."""
    result = await db.execute(select(ParentRequest).order_by(ParentRequest.submitted_at.desc()))
    return list(result.scalars().all())


def _under_rejection_limit(status: ParentRequestStatus):
    """
    Row filter that keeps a request given up on in NOT_DONE.

    Moving to NOT_DONE is always allowed; any other status only applies while
    the rejection count is below MAX_REJECTIONS.
    """
    if status == ParentRequestStatus.NOT_DONE:
        return true()
    return ParentRequest.rejection_count < MAX_REJECTIONS


async def update_status(
    db: AsyncSession,
    id: UUID,
    status: ParentRequestStatus,
) -> ParentRequest | None:
    """
    Set the status.

    Returns the updated row, or None if it does not exist or has reached
    MAX_REJECTIONS and status is not NOT_DONE.
    """
    result = await db.execute(
        update(ParentRequest)
        .where(ParentRequest.id == id, _under_rejection_limit(status))
        .values(status=status)
        .returning(ParentRequest)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def link_vacancy(
    db: AsyncSession,
    id: UUID,
    vacancy_id: UUID,
    status: ParentRequestStatus,
) -> ParentRequest | None:
    """
    Record the vacancy created for this request.

    Returns None if the request does not exist or has reached MAX_REJECTIONS
    and status is not NOT_DONE.
    """
    result = await db.execute(
        update(ParentRequest)
        .where(ParentRequest.id == id, _under_rejection_limit(status))
        .values(vacancy_id=vacancy_id, vacancy_linked_at=datetime.now(UTC), status=status)
        .returning(ParentRequest)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def increment_rejection(db: AsyncSession, id: UUID) -> ParentRequest | None:
    """
    Add one rejection and give up on the request once the limit is reached.

    The SET expressions read the pre-update row, so the new count and the
    status decision come from the same value in a single statement.
    """
    new_count = ParentRequest.rejection_count + 1
    status_type = ParentRequest.__table__.c.status.type

    result = await db.execute(
        update(ParentRequest)
        .where(ParentRequest.id == id)
        .values(
            rejection_count=new_count,
            status=case(
                (new_count >= MAX_REJECTIONS, literal(ParentRequestStatus.NOT_DONE, status_type)),
                else_=ParentRequest.status,
            ),
        )
        .returning(ParentRequest)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def delete_parent_request(db: AsyncSession, id: UUID) -> bool:
    """Delete a parent request. Returns False if it did not exist."""
    result = await db.execute(delete(ParentRequest).where(ParentRequest.id == id))
    return result.rowcount > 0
