"""
Fixtures for scheduled call tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from tutormatch.modules.scheduled_calls.models import ScheduledCall


@pytest.fixture
def make_call():
    """Factory for scheduled call models."""

    def _make(is_completed: bool = False, in_hours: int = 2):
        call = MagicMock(spec=ScheduledCall)
        call.id = uuid4()
        call.contact_name = "Efua Owusu"
        call.phone_number = "+233244000111"
        call.call_at = datetime.now(UTC) + timedelta(hours=in_hours)
        call.notes = "Confirm Saturday start"
        call.is_completed = is_completed
        call.created_at = datetime.now(UTC)
        call.updated_at = datetime.now(UTC)
        return call

    return _make
