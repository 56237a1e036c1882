"""
Vacancies Admin Router

Endpoints for administrators to manage vacancies and decide applications.
All endpoints require an admin token.

Endpoints:
- POST /admin/vacancies - Create vacancy
- PUT /admin/vacancies/{id} - Update descriptive fields
- PATCH /admin/vacancies/{id}/status - Open or close
- DELETE /admin/vacancies/{id} - Delete vacancy and its applications
- GET /admin/vacancies/{id}/applicants - List applicants
- PATCH /admin/vacancies/{id}/applicants/mark-viewed - Record applicants viewed
- PUT /admin/vacancies/{id}/applications/{application_id}/status - Decide an application
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.auth import AuthenticatedUser, get_current_admin_user
from tutormatch.core.database import get_db
from tutormatch.core.rate_limit import enforce_rate_limit
from tutormatch.modules.shared import ServiceError, to_http_exception
from tutormatch.modules.vacancies import service
from tutormatch.modules.vacancies.exceptions import (
    AlreadyResolvedError,
    VacancyClosedError,
    VacancyHasAcceptedApplicationError,
)
from tutormatch.modules.vacancies.helpers import get_teacher_name
from tutormatch.modules.vacancies.models import VacancyApplication, VacancyStatus
from tutormatch.modules.vacancies.schemas import (
    ApplicantItem,
    ApplicantListResponse,
    ApplicationDecisionResponse,
    ApplicationStatusUpdate,
    MarkViewedResponse,
    MessageResponse,
    VacancyCreate,
    VacancyDetailResponse,
    VacancyResponse,
    VacancyStatusUpdate,
    VacancyUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Rate Limiting Configuration
# ============================================

RATE_LIMIT_DECIDE = (30, 60)  # 30 application decisions per minute
RATE_LIMIT_WRITE = (60, 60)  # 60 vacancy writes per minute


async def _check_admin_rate_limit(
    admin: AuthenticatedUser,
    action: str,
    limit: int,
    window_seconds: int,
) -> None:
    await enforce_rate_limit(f"admin:{action}:{admin.id}", limit, window_seconds)


# ============================================
# Helper Functions
# ============================================


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def _application_to_applicant(application: VacancyApplication) -> ApplicantItem:
    """Flatten an application and its teacher into an applicant row."""
    teacher = application.teacher
    return ApplicantItem(
        application_id=application.id,
        teacher_id=application.teacher_id,
        full_name=get_teacher_name(application),
        email=teacher.email if teacher else None,
        phone=teacher.phone if teacher else None,
        subjects=list(teacher.subjects or []) if teacher else [],
        fees=teacher.fees if teacher else None,
        cv_url=teacher.cv_url if teacher else None,
        status=application.status,
        applied_at=application.applied_at,
    )


# ============================================
# Vacancy Management Endpoints
# ============================================


@router.post(
    "",
    response_model=VacancyDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Vacancy",
    description="""
Create an open vacancy.

When `parent_id` is given, the parent request is linked to the new vacancy
and moved to `pending`.

**Access:** Admin only
""",
    responses={404: {"description": "Parent request not found"}},
)
async def create_vacancy(
    data: VacancyCreate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> VacancyDetailResponse:
    await _check_admin_rate_limit(admin, "vacancy_write", *RATE_LIMIT_WRITE)

    try:
        vacancy = await service.create_vacancy(db, data, admin.id)

        logger.info(f"Admin {admin.id} created vacancy {vacancy.id}")

        return VacancyDetailResponse(
            message="Vacancy created successfully",
            data=VacancyResponse.model_validate(vacancy),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error creating vacancy: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{vacancy_id}",
    response_model=VacancyDetailResponse,
    summary="Update Vacancy",
    responses={404: {"description": "Vacancy not found"}},
)
async def update_vacancy(
    vacancy_id: UUID,
    data: VacancyUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> VacancyDetailResponse:
    """Update descriptive fields. Status and applications are not editable here."""
    await _check_admin_rate_limit(admin, "vacancy_write", *RATE_LIMIT_WRITE)

    try:
        vacancy = await service.update_vacancy(db, vacancy_id, data)

        logger.info(f"Admin {admin.id} updated vacancy {vacancy_id}")

        return VacancyDetailResponse(
            message="Vacancy updated successfully",
            data=VacancyResponse.model_validate(vacancy),
        )

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


@router.patch(
    "/{vacancy_id}/status",
    response_model=VacancyDetailResponse,
    summary="Open or Close Vacancy",
    responses={
        404: {"description": "Vacancy not found"},
        409: {"description": "Cannot re-open a vacancy with an accepted application"},
    },
)
async def update_vacancy_status(
    vacancy_id: UUID,
    data: VacancyStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> VacancyDetailResponse:
    await _check_admin_rate_limit(admin, "vacancy_write", *RATE_LIMIT_WRITE)

    try:
        vacancy = await service.set_vacancy_status(db, vacancy_id, VacancyStatus(data.status))

        logger.info(f"Admin {admin.id} set vacancy {vacancy_id} status to {data.status}")

        return VacancyDetailResponse(
            message=f"Vacancy {data.status} successfully",
            data=VacancyResponse.model_validate(vacancy),
        )

    except VacancyHasAcceptedApplicationError as e:
        logger.warning(f"Admin {admin.id} tried to re-open vacancy {vacancy_id} with an accepted teacher")
        raise to_http_exception(e) from e
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating status of vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


@router.delete(
    "/{vacancy_id}",
    response_model=MessageResponse,
    summary="Delete Vacancy",
    responses={404: {"description": "Vacancy not found"}},
)
async def delete_vacancy(
    vacancy_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> MessageResponse:
    await _check_admin_rate_limit(admin, "vacancy_write", *RATE_LIMIT_WRITE)

    try:
        await service.delete_vacancy(db, vacancy_id)

        logger.info(f"Admin {admin.id} deleted vacancy {vacancy_id}")

        return MessageResponse(message="Vacancy deleted successfully")

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error deleting vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


# ============================================
# Applicant Endpoints
# ============================================


@router.get(
    "/{vacancy_id}/applicants",
    response_model=ApplicantListResponse,
    summary="List Applicants",
    responses={404: {"description": "Vacancy not found"}},
)
async def list_applicants(
    vacancy_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ApplicantListResponse:
    """Applicants of a vacancy in the order they applied, with teacher details."""
    try:
        applications = await service.list_applicants(db, vacancy_id)
        return ApplicantListResponse(data=[_application_to_applicant(a) for a in applications])

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error listing applicants of vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


@router.patch(
    "/{vacancy_id}/applicants/mark-viewed",
    response_model=MarkViewedResponse,
    summary="Mark Applicants Viewed",
    responses={404: {"description": "Vacancy not found"}},
)
async def mark_applicants_viewed(
    vacancy_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> MarkViewedResponse:
    try:
        viewed_at = await service.mark_applicants_viewed(db, vacancy_id)
        return MarkViewedResponse(admin_last_viewed_applicants_at=viewed_at)

    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error marking applicants viewed on vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


@router.put(
    "/{vacancy_id}/applications/{application_id}/status",
    response_model=ApplicationDecisionResponse,
    summary="Decide Application",
    description="""
Set an application's status.

**Accepting** an application:
- Closes the vacancy
- Rejects every other pending application
- Marks the linked parent request `done` and notifies admin dashboards

The response reports success once the acceptance itself is saved. If the
follow-up updates cannot be completed they are retried in the background.

**Access:** Admin only
""",
    responses={
        404: {"description": "Vacancy or application not found"},
        409: {"description": "Another application already accepted, or vacancy closed"},
        429: {"description": "Too many decisions"},
        503: {"description": "Database unavailable, safe to retry"},
    },
)
async def update_application_status(
    vacancy_id: UUID,
    application_id: UUID,
    data: ApplicationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: AuthenticatedUser = Depends(get_current_admin_user),
) -> ApplicationDecisionResponse:
    await _check_admin_rate_limit(admin, "decide", *RATE_LIMIT_DECIDE)

    try:
        vacancy = await service.resolve_application(db, vacancy_id, application_id, data.status)

        logger.info(
            f"Admin {admin.id} set application {application_id} on vacancy {vacancy_id} "
            f"to {data.status.value}"
        )

        return ApplicationDecisionResponse(
            message=f"Application {data.status.value} successfully",
            data=VacancyResponse.model_validate(vacancy) if vacancy is not None else None,
        )

    except (AlreadyResolvedError, VacancyClosedError) as e:
        logger.warning(f"Cannot accept application {application_id}: {e.message}")
        raise to_http_exception(e) from e
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error updating application {application_id}: {e}")
        raise _internal_error(e) from e
