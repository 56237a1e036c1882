"""
Parent Requests Admin Router

Endpoints for administrators to manage parent requests.
All endpoints require an admin token.

Endpoints:
- GET /admin/parent-requests - List requests, newest first
- GET /admin/parent-requests/{id} - Request detail
- PUT /admin/parent-requests/{id}/status - Set status (new, pending, not_done)
- PUT /admin/parent-requests/{id}/link-vacancy - Link the vacancy created for it
- PUT /admin/parent-requests/{id}/reject - Count a rejection
- DELETE /admin/parent-requests/{id} - Delete request
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.auth import AuthenticatedUser, get_current_admin_user
from tutormatch.core.database import get_db
from tutormatch.modules.parent_requests import service
from tutormatch.modules.parent_requests.exceptions import InvalidStatusChangeError
from tutormatch.modules.parent_requests.models import MAX_REJECTIONS
from tutormatch.modules.parent_requests.schemas import (
    LinkVacancyRequest,
    ParentRequestDetailResponse,
    ParentRequestListResponse,
    ParentRequestResponse,
    ParentRequestStatusUpdate,
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


@router.get(
    "",
    response_model=ParentRequestListResponse,
    summary="List Parent Requests",
)
async def list_parent_requests(
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ParentRequestListResponse:
    try:
        parent_requests = await service.list_parent_requests(db)
        return ParentRequestListResponse(
            data=[ParentRequestResponse.model_validate(p) for p in parent_requests]
        )
    except Exception as e:
        logger.exception(f"Error listing parent requests: {e}")
        raise _internal_error(e) from e


@router.get(
    "/{parent_id}",
    response_model=ParentRequestDetailResponse,
    summary="Get Parent Request",
    responses={404: {"description": "Parent request not found"}},
)
async def get_parent_request(
    parent_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ParentRequestDetailResponse:
    try:
        parent_request = await service.get_parent_request(db, parent_id)
        return ParentRequestDetailResponse(data=ParentRequestResponse.model_validate(parent_request))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error getting parent request {parent_id}: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{parent_id}/status",
    response_model=ParentRequestDetailResponse,
    summary="Update Parent Request Status",
    description="""
Set a request's status to `new`, `pending` or `not_done`.

`done` cannot be set here: a request becomes done when a teacher is
accepted on its linked vacancy.

**Access:** Admin only
""",
    responses={
        400: {"description": "Status cannot be set manually"},
        404: {"description": "Parent request not found"},
    },
)
async def update_parent_request_status(
    parent_id: UUID,
    data: ParentRequestStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ParentRequestDetailResponse:
    try:
        parent_request = await service.update_parent_status(db, parent_id, data.status)

        logger.info(f"Admin {admin.id} set parent request {parent_id} to {data.status.value}")

        return ParentRequestDetailResponse(
            message="Status updated successfully",
            data=ParentRequestResponse.model_validate(parent_request),
        )

    except InvalidStatusChangeError as e:
        logger.warning(f"Admin {admin.id} tried to set parent request {parent_id} to done")
        raise to_http_exception(e) from e
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating parent request {parent_id}: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{parent_id}/link-vacancy",
    response_model=ParentRequestDetailResponse,
    summary="Link Vacancy",
    responses={404: {"description": "Parent request or vacancy not found"}},
)
async def link_vacancy(
    parent_id: UUID,
    data: LinkVacancyRequest,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ParentRequestDetailResponse:
    """Record the vacancy created to fill this request."""
    try:
        parent_request = await service.link_vacancy(db, parent_id, data.vacancy_id, data.status)

        logger.info(f"Admin {admin.id} linked parent request {parent_id} to vacancy {data.vacancy_id}")

        return ParentRequestDetailResponse(
            message="Vacancy linked successfully",
            data=ParentRequestResponse.model_validate(parent_request),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error linking vacancy to parent request {parent_id}: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{parent_id}/reject",
    response_model=ParentRequestDetailResponse,
    summary="Record Rejection",
    description=f"""
Count one rejection against the request. After {MAX_REJECTIONS} rejections
the request is marked `not_done`.

**Access:** Admin only
""",
    responses={404: {"description": "Parent request not found"}},
)
async def record_rejection(
    parent_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ParentRequestDetailResponse:
    try:
        parent_request = await service.record_rejection(db, parent_id)

        logger.info(
            f"Admin {admin.id} recorded rejection on parent request {parent_id} "
            f"(count={parent_request.rejection_count})"
        )

        return ParentRequestDetailResponse(
            message="Rejection recorded",
            data=ParentRequestResponse.model_validate(parent_request),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error recording rejection on parent request {parent_id}: {e}")
        raise _internal_error(e) from e


@router.delete(
    "/{parent_id}",
    response_model=MessageResponse,
    summary="Delete Parent Request",
    responses={404: {"description": "Parent request not found"}},
)
async def delete_parent_request(
    parent_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> MessageResponse:
    try:
        await service.delete_parent_request(db, parent_id)

        logger.info(f"Admin {admin.id} deleted parent request {parent_id}")

        return MessageResponse(message="Parent request deleted successfully")

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error deleting parent request {parent_id}: {e}")
        raise _internal_error(e) from e
