"""
Vacancies Router

Public and teacher-facing endpoints for vacancies.

Endpoints:
- GET /vacancies - List all vacancies with their applications
- GET /vacancies/featured - Featured open vacancies
- GET /vacancies/available - Vacancies the calling teacher can apply to
- GET /vacancies/my-applications - The calling teacher's applications
- GET /vacancies/{id} - Vacancy detail
- POST /vacancies/{id}/apply - Apply to a vacancy (teacher)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.core.auth import AuthenticatedUser, get_current_teacher
from tutormatch.core.database import get_db
from tutormatch.core.rate_limit import enforce_rate_limit
from tutormatch.modules.shared import ServiceError, to_http_exception
from tutormatch.modules.vacancies import service
from tutormatch.modules.vacancies.exceptions import (
    CapacityExceededError,
    DuplicateApplicationError,
    VacancyNotFoundError,
    VacancyNotOpenError,
)
from tutormatch.modules.vacancies.schemas import (
    ApplicationResponse,
    ApplyResponse,
    AvailableVacancy,
    AvailableVacancyListResponse,
    TeacherApplicationItem,
    TeacherApplicationListResponse,
    VacancyDetailResponse,
    VacancyListResponse,
    VacancyResponse,
    VacancySummary,
    VacancySummaryListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# 10 applications per minute per teacher
RATE_LIMIT_APPLY = (10, 60)


def _internal_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


# ============================================
# Public Endpoints
# ============================================


@router.get(
    "",
    response_model=VacancyListResponse,
    summary="List Vacancies",
)
async def list_vacancies(db: AsyncSession = Depends(get_db)) -> VacancyListResponse:
    """All vacancies, newest first, with their applications."""
    try:
        vacancies = await service.list_vacancies(db)
        return VacancyListResponse(data=[VacancyResponse.model_validate(v) for v in vacancies])
    except Exception as e:
        logger.exception(f"Error listing vacancies: {e}")
        raise _internal_error(e) from e


@router.get(
    "/featured",
    response_model=VacancySummaryListResponse,
    summary="Featured Vacancies",
)
async def list_featured_vacancies(
    db: AsyncSession = Depends(get_db),
) -> VacancySummaryListResponse:
    """Open vacancies flagged as featured."""
    try:
        vacancies = await service.list_featured_vacancies(db)
        return VacancySummaryListResponse(
            data=[VacancySummary.model_validate(v) for v in vacancies]
        )
    except Exception as e:
        logger.exception(f"Error listing featured vacancies: {e}")
        raise _internal_error(e) from e


# ============================================
# Teacher Endpoints
# ============================================


@router.get(
    "/available",
    response_model=AvailableVacancyListResponse,
    summary="Available Vacancies",
    description="""
Open vacancies the calling teacher can still apply to: fewer than five
applications and no existing application from this teacher.

**Access:** Teacher only
""",
)
async def list_available_vacancies(
    db: AsyncSession = Depends(get_db),
    teacher: AuthenticatedUser = Depends(get_current_teacher),
) -> AvailableVacancyListResponse:
    try:
        rows = await service.list_available_vacancies(db, teacher.id)
        return AvailableVacancyListResponse(
            data=[
                AvailableVacancy(
                    **VacancySummary.model_validate(vacancy).model_dump(),
                    applicant_count=count,
                )
                for vacancy, count in rows
            ]
        )
    except Exception as e:
        logger.exception(f"Error listing available vacancies for teacher {teacher.id}: {e}")
        raise _internal_error(e) from e


@router.get(
    "/my-applications",
    response_model=TeacherApplicationListResponse,
    summary="My Applications",
)
async def list_my_applications(
    db: AsyncSession = Depends(get_db),
    teacher: AuthenticatedUser = Depends(get_current_teacher),
) -> TeacherApplicationListResponse:
    """The calling teacher's applications, most recent first."""
    try:
        rows = await service.list_teacher_applications(db, teacher.id)
        return TeacherApplicationListResponse(
            applications=[
                TeacherApplicationItem(
                    id=application.id,
                    status=application.status,
                    applied_at=application.applied_at,
                    vacancy=VacancySummary.model_validate(vacancy),
                )
                for application, vacancy in rows
            ]
        )
    except Exception as e:
        logger.exception(f"Error listing applications for teacher {teacher.id}: {e}")
        raise _internal_error(e) from e


@router.get(
    "/{vacancy_id}",
    response_model=VacancyDetailResponse,
    summary="Get Vacancy",
    responses={404: {"description": "Vacancy not found"}},
)
async def get_vacancy(
    vacancy_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> VacancyDetailResponse:
    try:
        vacancy = await service.get_vacancy(db, vacancy_id)
        return VacancyDetailResponse(data=VacancyResponse.model_validate(vacancy))
    except VacancyNotFoundError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error getting vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e


@router.post(
    "/{vacancy_id}/apply",
    response_model=ApplyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to Vacancy",
    description="""
Submit the calling teacher's application to a vacancy.

**Checks (in order):**
- Vacancy exists (404 `VACANCY_NOT_FOUND`)
- Vacancy is open (409 `VACANCY_NOT_OPEN`)
- Teacher has not applied yet (409 `DUPLICATE_APPLICATION`)
- Vacancy has fewer than 5 applications (409 `CAPACITY_EXCEEDED`)

A `NEW_APPLICATION` event is sent to connected admin dashboards.

**Access:** Teacher only
""",
    responses={
        404: {"description": "Vacancy not found"},
        409: {"description": "Vacancy not open, duplicate application, or capacity reached"},
        429: {"description": "Too many applications"},
        503: {"description": "Database unavailable, safe to retry"},
    },
)
async def apply_to_vacancy(
    vacancy_id: UUID,
    db: AsyncSession = Depends(get_db),
    teacher: AuthenticatedUser = Depends(get_current_teacher),
) -> ApplyResponse:
    await enforce_rate_limit(f"apply:{teacher.id}", *RATE_LIMIT_APPLY)

    try:
        application = await service.apply_to_vacancy(db, vacancy_id, teacher.id)
        return ApplyResponse(application=ApplicationResponse.model_validate(application))

    except (
        VacancyNotOpenError,
        DuplicateApplicationError,
        CapacityExceededError,
    ) as e:
        logger.info(f"Teacher {teacher.id} could not apply to vacancy {vacancy_id}: {e.error_code}")
        raise to_http_exception(e) from e
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Error applying to vacancy {vacancy_id}: {e}")
        raise _internal_error(e) from e
