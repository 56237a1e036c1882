"""
Transaction helpers shared by the service layer.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.modules.shared.exceptions import PersistenceFailureError, ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def persistence_guard(db: AsyncSession, operation: str) -> AsyncIterator[None]:
    """
    Roll back and raise PersistenceFailureError on database errors or timeouts.

    Wrap a unit of work whose failure leaves nothing committed. Service
    errors raised inside the block roll back (releasing any row locks) and
    propagate unchanged.

    Usage:
        async with persistence_guard(db, "submit your application"):
            ...
            await db.commit()
    """
    try:
        yield
    except ServiceError:
        await db.rollback()
        raise
    except (SQLAlchemyError, OSError) as e:
        # OSError covers driver timeouts and dropped connections
        logger.error(f"Database failure during '{operation}': {e}", exc_info=True)
        await db.rollback()
        raise PersistenceFailureError(operation) from e
