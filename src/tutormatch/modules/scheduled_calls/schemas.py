"""
Scheduled Call Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScheduledCallCreate(BaseModel):
    """Request body for POST /admin/scheduled-calls."""

    contact_name: str = Field(..., min_length=1, max_length=200)
    phone_number: str | None = Field(None, max_length=20)
    call_at: datetime
    notes: str | None = None

    @field_validator("contact_name", "phone_number", "notes")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("contact_name")
    @classmethod
    def contact_name_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("Contact name is required")
        return value


class ScheduledCallUpdate(BaseModel):
    """Request body for PUT /admin/scheduled-calls/{id}."""

    is_completed: bool


class ScheduledCallResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    contact_name: str
    phone_number: str | None = None
    call_at: datetime
    notes: str | None = None
    is_completed: bool
    created_at: datetime
    updated_at: datetime


class ScheduledCallListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[ScheduledCallResponse]


class ScheduledCallDetailResponse(BaseModel):
    success: bool = True
    data: ScheduledCallResponse
