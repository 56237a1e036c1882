"""
Scheduled Calls Admin Router

Endpoints:
- GET /admin/scheduled-calls?completed= - Open (default) or completed calls, soonest first
- POST /admin/scheduled-calls - Schedule a call
- PUT /admin/scheduled-calls/{id} - Mark completed or not
- DELETE /admin/scheduled-calls/{id} - Delete a call
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.auth import AuthenticatedUser, get_current_admin_user
from tutormatch.core.database import get_db
from tutormatch.modules.scheduled_calls import service
from tutormatch.modules.scheduled_calls.schemas import (
    ScheduledCallCreate,
    ScheduledCallDetailResponse,
    ScheduledCallListResponse,
    ScheduledCallResponse,
    ScheduledCallUpdate,
)
from tutormatch.modules.shared import ServiceError, to_http_exception
from tutormatch.modules.vacancies.schemas import MessageResponse

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


@router.get("", response_model=ScheduledCallListResponse, summary="List Scheduled Calls")
async def list_scheduled_calls(
    completed: bool = Query(False, description="List completed calls instead of open ones"),
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ScheduledCallListResponse:
    try:
        calls = await service.list_calls(db, completed)
        return ScheduledCallListResponse(
            count=len(calls),
            data=[ScheduledCallResponse.model_validate(c) for c in calls],
        )
    except Exception as e:
        logger.exception(f"Error listing scheduled calls: {e}")
        raise _internal_error(e) from e


@router.post(
    "",
    response_model=ScheduledCallDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule Call",
)
async def schedule_call(
    data: ScheduledCallCreate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ScheduledCallDetailResponse:
    try:
        call = await service.schedule_call(db, data)
        return ScheduledCallDetailResponse(data=ScheduledCallResponse.model_validate(call))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error scheduling call: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{call_id}",
    response_model=ScheduledCallDetailResponse,
    summary="Update Scheduled Call",
    responses={404: {"description": "Scheduled call not found"}},
)
async def update_scheduled_call(
    call_id: UUID,
    data: ScheduledCallUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ScheduledCallDetailResponse:
    try:
        call = await service.set_completed(db, call_id, data.is_completed)
        return ScheduledCallDetailResponse(data=ScheduledCallResponse.model_validate(call))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating scheduled call {call_id}: {e}")
        raise _internal_error(e) from e


@router.delete(
    "/{call_id}",
    response_model=MessageResponse,
    summary="Delete Scheduled Call",
    responses={404: {"description": "Scheduled call not found"}},
)
async def delete_scheduled_call(
    call_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> MessageResponse:
    try:
        await service.delete_call(db, call_id)

        logger.info(f"Admin {admin.id} deleted scheduled call {call_id}")

        return MessageResponse(message="Scheduled call deleted successfully")
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error deleting scheduled call {call_id}: {e}")
        raise _internal_error(e) from e
