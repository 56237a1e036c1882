"""
Fixtures for vacancy tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from tutormatch.modules.teachers.models import Teacher
from tutormatch.modules.vacancies.models import (
    ApplicationStatus,
    PreferredGender,
    Vacancy,
    VacancyApplication,
    VacancyStatus,
)


@pytest.fixture
def make_teacher():
    """Factory for teacher models."""

    def _make(full_name: str = "Ama Mensah", **overrides):
        teacher = MagicMock(spec=Teacher)
        teacher.id = overrides.get("id", uuid4())
        teacher.full_name = full_name
        teacher.email = overrides.get("email", f"{uuid4().hex[:8]}@teachers.test")
        teacher.phone = overrides.get("phone", "+233200000000")
        teacher.subjects = overrides.get("subjects", ["Mathematics"])
        teacher.fees = overrides.get("fees", "GHS 300")
        teacher.cv_url = overrides.get("cv_url")
        return teacher

    return _make


@pytest.fixture
def make_application(make_teacher):
    """Factory for application models, each with its own teacher."""
    base_time = datetime.now(UTC) - timedelta(days=1)
    counter = {"n": 0}

    def _make(
        vacancy_id=None,
        status: ApplicationStatus = ApplicationStatus.PENDING,
        teacher=None,
    ):
        counter["n"] += 1
        teacher = teacher or make_teacher(full_name=f"Teacher {counter['n']}")
        application = MagicMock(spec=VacancyApplication)
        application.id = uuid4()
        application.vacancy_id = vacancy_id or uuid4()
        application.teacher_id = teacher.id
        application.teacher = teacher
        application.status = status
        application.applied_at = base_time + timedelta(minutes=counter["n"])
        return application

    return _make


@pytest.fixture
def make_vacancy(make_application):
    """
    Factory for vacancy models.

    `statuses` creates one application per entry, in order.
    """

    def _make(
        status: VacancyStatus = VacancyStatus.OPEN,
        statuses: list[ApplicationStatus] | None = None,
        parent_id=None,
        title: str = "Mathematics tutor for JHS 2",
    ):
        vacancy = MagicMock(spec=Vacancy)
        vacancy.id = uuid4()
        vacancy.title = title
        vacancy.subject = "Mathematics"
        vacancy.class_level = "JHS 2"
        vacancy.schedule = "Mon, Wed 4-6pm"
        vacancy.location = "East Legon"
        vacancy.preferred_gender = PreferredGender.ANY
        vacancy.description = "Help a JHS 2 student prepare for exams"
        vacancy.salary = "GHS 800 / month"
        vacancy.status = status
        vacancy.featured = False
        vacancy.created_by = uuid4()
        vacancy.parent_id = parent_id
        vacancy.admin_last_viewed_applicants_at = None
        vacancy.cascade_pending = False
        vacancy.cascade_error = None
        vacancy.created_at = datetime.now(UTC) - timedelta(days=2)
        vacancy.updated_at = datetime.now(UTC) - timedelta(days=2)
        vacancy.applications = [
            make_application(vacancy_id=vacancy.id, status=s) for s in (statuses or [])
        ]
        return vacancy

    return _make


@pytest.fixture
def open_vacancy(make_vacancy):
    """Open vacancy with two pending applications and a linked parent request."""
    return make_vacancy(
        statuses=[ApplicationStatus.PENDING, ApplicationStatus.PENDING],
        parent_id=uuid4(),
    )
