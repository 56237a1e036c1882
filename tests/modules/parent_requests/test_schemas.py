"""
Unit tests for parent request schemas.
"""

import pytest
from pydantic import ValidationError

from tutormatch.modules.parent_requests.models import ParentRequestStatus
from tutormatch.modules.parent_requests.schemas import (
    MANUAL_STATUSES,
    LinkVacancyRequest,
    ParentRequestCreate,
)


def _payload(**overrides):
    payload = {
        "parent_name": "Efua Owusu",
        "phone": "+233244000111",
        "address": "12 Ring Road, Accra",
        "preferred_teacher": "any",
        "grade": "Primary 6",
        "subjects": ["Mathematics"],
        "preferred_time": "Weekends",
    }
    payload.update(overrides)
    return payload


class TestParentRequestCreate:
    @pytest.mark.parametrize("count", [1, 2, 3])
    def test_one_to_three_subjects(self, count):
        data = ParentRequestCreate(**_payload(subjects=[f"Subject {i}" for i in range(count)]))
        assert len(data.subjects) == count

    @pytest.mark.parametrize("subjects", [[], ["A", "B", "C", "D"]])
    def test_subject_count_out_of_range(self, subjects):
        with pytest.raises(ValidationError):
            ParentRequestCreate(**_payload(subjects=subjects))

    def test_subjects_are_stripped(self):
        data = ParentRequestCreate(**_payload(subjects=["  Physics "]))
        assert data.subjects == ["Physics"]

    def test_blank_subject_rejected(self):
        with pytest.raises(ValidationError):
            ParentRequestCreate(**_payload(subjects=["Physics", "   "]))

    def test_unknown_teacher_preference_rejected(self):
        with pytest.raises(ValidationError):
            ParentRequestCreate(**_payload(preferred_teacher="robot"))

    def test_optional_fields_default_to_none(self):
        data = ParentRequestCreate(**_payload())
        assert data.salary is None
        assert data.notes is None


class TestStatusRules:
    def test_done_is_not_a_manual_status(self):
        assert ParentRequestStatus.DONE not in MANUAL_STATUSES

    def test_link_defaults_to_pending(self):
        request = LinkVacancyRequest(vacancy_id="8f7e0c1e-3b6f-4a7e-9a9e-1d2c3b4a5f60")
        assert request.status == ParentRequestStatus.PENDING
