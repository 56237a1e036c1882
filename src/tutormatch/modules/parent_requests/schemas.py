"""
Parent Request Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tutormatch.modules.parent_requests.models import (
    ParentRequestStatus,
    PreferredTeacher,
)

# Statuses an admin may set by hand. DONE is reached only by accepting a
# teacher on the linked vacancy.
MANUAL_STATUSES = (
    ParentRequestStatus.NEW,
    ParentRequestStatus.PENDING,
    ParentRequestStatus.NOT_DONE,
)


class ParentRequestCreate(BaseModel):
    """Request body for POST /parent-requests."""

    parent_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1, max_length=500)
    salary: str | None = Field(None, max_length=100)
    preferred_teacher: PreferredTeacher
    grade: str = Field(..., min_length=1, max_length=50)
    subjects: list[str] = Field(..., min_length=1, max_length=3)
    preferred_time: str = Field(..., min_length=1, max_length=100)
    notes: str | None = None

    @field_validator("subjects")
    @classmethod
    def validate_subjects(cls, value: list[str]) -> list[str]:
        subjects = [s.strip() for s in value]
        if any(not s for s in subjects):
            raise ValueError("Subjects must not be blank")
        return subjects


class ParentRequestStatusUpdate(BaseModel):
    """Request body for PUT /admin/parent-requests/{id}/status."""

    status: ParentRequestStatus


class LinkVacancyRequest(BaseModel):
    """Request body for PUT /admin/parent-requests/{id}/link-vacancy."""

    vacancy_id: UUID
    status: ParentRequestStatus = ParentRequestStatus.PENDING


class ParentRequestResponse(BaseModel):
    """A parent request as shown to admins."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_number: int
    parent_name: str
    phone: str
    address: str
    salary: str | None = None
    preferred_teacher: PreferredTeacher
    grade: str
    subjects: list[str]
    preferred_time: str
    notes: str | None = None
    status: ParentRequestStatus
    submitted_at: datetime
    vacancy_id: UUID | None = None
    vacancy_linked_at: datetime | None = None
    rejection_count: int


class ParentRequestSubmitResponse(BaseModel):
    """Response after a parent submits a request."""

    success: bool = True
    message: str = "Request submitted successfully"
    application_number: int
    data: ParentRequestResponse


class ParentRequestDetailResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: ParentRequestResponse


class ParentRequestListResponse(BaseModel):
    success: bool = True
    data: list[ParentRequestResponse]
