"""
Scheduled Call Repository
"""

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ScheduledCall
from .schemas import ScheduledCallCreate


async def create(db: AsyncSession, data: ScheduledCallCreate) -> ScheduledCall:
    call = ScheduledCall(**data.model_dump(), is_completed=False)
    db.add(call)
    await db.flush()
    return call


async def list_by_completion(db: AsyncSession, completed: bool) -> list[ScheduledCall]:
    """Calls with the given completion flag, soonest first."""
    result = await db.execute(
        select(ScheduledCall)
        .where(ScheduledCall.is_completed == completed)
        .order_by(ScheduledCall.call_at.asc())
    )
    return list(result.scalars().all())


async def set_completed(db: AsyncSession, id: UUID, completed: bool) -> ScheduledCall | None:
    """Returns the updated row, or None if it does not exist."""
    result = await db.execute(
        update(ScheduledCall)
        .where(ScheduledCall.id == id)
        .values(is_completed=completed)
        .returning(ScheduledCall)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def delete_call(db: AsyncSession, id: UUID) -> bool:
    """Delete a call. Returns False if it did not exist."""
    result = await db.execute(delete(ScheduledCall).where(ScheduledCall.id == id))
    return result.rowcount > 0
