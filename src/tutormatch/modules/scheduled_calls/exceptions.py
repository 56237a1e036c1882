"""
Scheduled Call Errors
"""

from uuid import UUID

from tutormatch.modules.shared.exceptions import NotFoundError


class ScheduledCallNotFoundError(NotFoundError):
    def __init__(self, call_id: UUID | None = None):
        super().__init__("Scheduled call", call_id, error_code="SCHEDULED_CALL_NOT_FOUND")
