"""
Fixtures for parent request tests.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from tutormatch.modules.parent_requests.models import (
    ParentRequest,
    ParentRequestStatus,
    PreferredTeacher,
)
from tutormatch.modules.parent_requests.schemas import ParentRequestCreate


@pytest.fixture
def parent_request_create():
    """A valid submission from a parent."""
    return ParentRequestCreate(
        parent_name="Efua Owusu",
        phone="+233244000111",
        address="12 Ring Road, Accra",
        salary="GHS 600",
        preferred_teacher=PreferredTeacher.ANY,
        grade="Primary 6",
        subjects=["Mathematics", "English"],
        preferred_time="Weekends",
        notes=None,
    )


@pytest.fixture
def make_parent_request():
    """Factory for parent request models."""

    def _make(
        application_number: int = 1,
        status: ParentRequestStatus = ParentRequestStatus.NEW,
        rejection_count: int = 0,
        vacancy_id=None,
    ):
        parent_request = MagicMock(spec=ParentRequest)
        parent_request.id = uuid4()
        parent_request.application_number = application_number
        parent_request.parent_name = "Efua Owusu"
        parent_request.phone = "+233244000111"
        parent_request.address = "12 Ring Road, Accra"
        parent_request.salary = "GHS 600"
        parent_request.preferred_teacher = PreferredTeacher.ANY
        parent_request.grade = "Primary 6"
        parent_request.subjects = ["Mathematics", "English"]
        parent_request.preferred_time = "Weekends"
        parent_request.notes = None
        parent_request.status = status
        parent_request.submitted_at = datetime.now(UTC)
        parent_request.vacancy_id = vacancy_id
        parent_request.vacancy_linked_at = datetime.now(UTC) if vacancy_id else None
        parent_request.rejection_count = rejection_count
        return parent_request

    return _make
