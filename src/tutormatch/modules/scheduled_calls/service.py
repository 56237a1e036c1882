"""
Scheduled Call Service Layer
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.modules.scheduled_calls import repository
from tutormatch.modules.scheduled_calls.exceptions import ScheduledCallNotFoundError
from tutormatch.modules.scheduled_calls.models import ScheduledCall
from tutormatch.modules.scheduled_calls.schemas import ScheduledCallCreate
from tutormatch.modules.shared import persistence_guard

logger = logging.getLogger(__name__)


async def list_calls(db: AsyncSession, completed: bool = False) -> list[ScheduledCall]:
    return await repository.list_by_completion(db, completed)


async def schedule_call(db: AsyncSession, data: ScheduledCallCreate) -> ScheduledCall:
    async with persistence_guard(db, "schedule the call"):
        call = await repository.create(db, data)
        await db.commit()

    logger.info(f"Call {call.id} scheduled with {call.contact_name} at {call.call_at}")
    return call


async def set_completed(db: AsyncSession, call_id: UUID, completed: bool) -> ScheduledCall:
    """
    Raises:
        ScheduledCallNotFoundError: If the call does not exist
    """
    async with persistence_guard(db, "update the call"):
        call = await repository.set_completed(db, call_id, completed)
        if call is None:
            raise ScheduledCallNotFoundError(call_id)
        await db.commit()

    logger.info(f"Call {call_id} marked {'completed' if completed else 'not completed'}")
    return call


async def delete_call(db: AsyncSession, call_id: UUID) -> None:
    """
    Raises:
        ScheduledCallNotFoundError: If the call does not exist
    """
    async with persistence_guard(db, "delete the call"):
        if not await repository.delete_call(db, call_id):
            raise ScheduledCallNotFoundError(call_id)
        await db.commit()

    logger.info(f"Call {call_id} deleted")
