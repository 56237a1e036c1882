"""
Vacancy Shared Helpers

Pure functions over a loaded Vacancy, shared by service.py and jobs.py.
"""

from uuid import UUID

from tutormatch.modules.teachers.models import UNKNOWN_TEACHER_NAME
from tutormatch.modules.vacancies.models import (
    MAX_APPLICATIONS_PER_VACANCY,
    ApplicationStatus,
    Vacancy,
    VacancyApplication,
)


def find_application(vacancy: Vacancy, application_id: UUID) -> VacancyApplication | None:
    """Return the application with the given id, or None if it is not on this vacancy."""
    for application in vacancy.applications:
        if application.id == application_id:
            return application
    return None


def has_teacher_applied(vacancy: Vacancy, teacher_id: UUID) -> bool:
    """Check whether the teacher already holds an application on the vacancy."""
    return any(app.teacher_id == teacher_id for app in vacancy.applications)


def is_at_capacity(vacancy: Vacancy) -> bool:
    """Check whether the vacancy has no room for another application."""
    return len(vacancy.applications) >= MAX_APPLICATIONS_PER_VACANCY


def get_accepted_application(
    vacancy: Vacancy,
    exclude_id: UUID | None = None,
) -> VacancyApplication | None:
    """
    Return the vacancy's accepted application, if any.

    Args:
        vacancy: The vacancy with applications loaded
        exclude_id: Ignore this application (the one being decided)
    """
    for application in vacancy.applications:
        if application.status == ApplicationStatus.ACCEPTED and application.id != exclude_id:
            return application
    return None


def get_teacher_name(application: VacancyApplication) -> str:
    """Teacher display name for an application, falling back to a placeholder."""
    if application.teacher is not None and application.teacher.full_name:
        return application.teacher.full_name
    return UNKNOWN_TEACHER_NAME
