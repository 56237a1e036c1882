"""
Vacancy Errors

Typed rejections raised by the application lifecycle. Each carries a stable
error code for the API and performs no mutation.
"""

from uuid import UUID

from tutormatch.modules.shared.exceptions import NotFoundError, ServiceError


class VacancyNotFoundError(NotFoundError):
    """Raised when a vacancy is not found."""

    def __init__(self, vacancy_id: UUID | None = None):
        super().__init__("Vacancy", vacancy_id, error_code="VACANCY_NOT_FOUND")


class ApplicationNotFoundError(NotFoundError):
    """Raised when an application is not found on the vacancy."""

    def __init__(self, application_id: UUID | None = None):
        super().__init__("Application", application_id, error_code="APPLICATION_NOT_FOUND")


class TeacherNotFoundError(NotFoundError):
    """Raised when the applying teacher has no teacher profile."""

    def __init__(self, teacher_id: UUID | None = None):
        super().__init__("Teacher", teacher_id, error_code="TEACHER_NOT_FOUND")


class VacancyNotOpenError(ServiceError):
    """Raised when applying to a vacancy that is not open."""

    def __init__(self):
        super().__init__(
            message="This vacancy is not open for applications",
            error_code="VACANCY_NOT_OPEN",
            status_code=409,
        )


class DuplicateApplicationError(ServiceError):
    """Raised when the teacher already applied to the vacancy."""

    def __init__(self):
        super().__init__(
            message="You have already applied to this vacancy",
            error_code="DUPLICATE_APPLICATION",
            status_code=409,
        )


class CapacityExceededError(ServiceError):
    """Raised when the vacancy already holds the maximum number of applications."""

    def __init__(self, limit: int):
        super().__init__(
            message=f"This vacancy already has the maximum of {limit} applications",
            error_code="CAPACITY_EXCEEDED",
            status_code=409,
        )


class AlreadyResolvedError(ServiceError):
    """Raised when accepting while another application is already accepted."""

    def __init__(self):
        super().__init__(
            message="Another application has already been accepted for this vacancy",
            error_code="ALREADY_RESOLVED",
            status_code=409,
        )


class VacancyClosedError(ServiceError):
    """Raised when accepting an application on a closed vacancy."""

    def __init__(self):
        super().__init__(
            message="This vacancy is already closed",
            error_code="VACANCY_CLOSED",
            status_code=409,
        )


class VacancyHasAcceptedApplicationError(ServiceError):
    """Raised when re-opening a vacancy that already has an accepted teacher."""

    def __init__(self):
        super().__init__(
            message="Cannot re-open a vacancy that has an accepted application",
            error_code="VACANCY_HAS_ACCEPTED_APPLICATION",
            status_code=409,
        )
