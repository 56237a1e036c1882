"""
Parent Requests Router

Public endpoint for parents to submit tuition requests. No authentication.

Endpoints:
- POST /parent-requests - Submit a tuition request
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.database import get_db
from tutormatch.core.rate_limit import enforce_rate_limit
from tutormatch.modules.parent_requests import service
from tutormatch.modules.parent_requests.schemas import (
    ParentRequestCreate,
    ParentRequestResponse,
    ParentRequestSubmitResponse,
)
from tutormatch.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

# 10 submissions per hour per client IP
RATE_LIMIT_SUBMIT = (10, 3600)


@router.post(
    "",
    response_model=ParentRequestSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Parent Request",
    description="""
Submit a tuition request.

**Validation:**
- 1 to 3 subjects
- `preferred_teacher` is one of `male`, `female`, `any`

The response carries the request's application number, which parents quote
when they contact the office.
""",
    responses={
        201: {"description": "Request submitted"},
        422: {"description": "Validation error"},
        429: {"description": "Too many submissions"},
        503: {"description": "Could not save the request, safe to retry"},
    },
)
async def submit_parent_request(
    data: ParentRequestCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ParentRequestSubmitResponse:
    client_ip = request.client.host if request.client else "unknown"
    await enforce_rate_limit(f"parent_request:{client_ip}", *RATE_LIMIT_SUBMIT)

    try:
        parent_request = await service.submit_parent_request(db, data)

        return ParentRequestSubmitResponse(
            application_number=parent_request.application_number,
            data=ParentRequestResponse.model_validate(parent_request),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error submitting parent request: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
            },
        ) from e
