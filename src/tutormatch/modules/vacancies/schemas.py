"""
Vacancy Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tutormatch.modules.vacancies.models import (
    ApplicationStatus,
    PreferredGender,
    VacancyStatus,
)

# ============================================
# Request Schemas
# ============================================


class VacancyCreate(BaseModel):
    """Request body for POST /admin/vacancies."""

    title: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1, max_length=100)
    class_level: str = Field("Not specified", max_length=100)
    schedule: str = Field("Not specified", max_length=100)
    location: str = Field("Not specified", max_length=200)
    preferred_gender: PreferredGender = PreferredGender.ANY
    description: str = Field(..., min_length=1)
    salary: str = Field(..., min_length=1, max_length=100)
    featured: bool = False
    parent_id: UUID | None = Field(
        None, description="Parent request this vacancy was created to fill"
    )


class VacancyUpdate(BaseModel):
    """Request body for PUT /admin/vacancies/{id}.

    Status and applications are not editable here; use the status and
    application endpoints.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    subject: str | None = Field(None, min_length=1, max_length=100)
    class_level: str | None = Field(None, max_length=100)
    schedule: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=200)
    preferred_gender: PreferredGender | None = None
    description: str | None = Field(None, min_length=1)
    salary: str | None = Field(None, min_length=1, max_length=100)
    featured: bool | None = None

    @model_validator(mode="after")
    def validate_not_empty(self) -> "VacancyUpdate":
        if not self.model_dump(exclude_unset=True):
            raise ValueError("At least one field must be provided")
        return self


class VacancyStatusUpdate(BaseModel):
    """Request body for PATCH /admin/vacancies/{id}/status."""

    status: Literal["open", "closed"]

    @field_validator("status", mode="before")
    @classmethod
    def lowercase_status(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class ApplicationStatusUpdate(BaseModel):
    """Request body for the admin application decision endpoint."""

    status: ApplicationStatus = Field(
        ...,
        description="'accepted' closes the vacancy and rejects the other pending applications",
    )


# ============================================
# Response Schemas
# ============================================


class TeacherSummary(BaseModel):
    """Public teacher details shown alongside an application."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    phone: str | None = None
    subjects: list[str] = []
    fees: str | None = None
    cv_url: str | None = None


class ApplicationResponse(BaseModel):
    """A teacher's application to a vacancy."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vacancy_id: UUID
    teacher_id: UUID
    status: ApplicationStatus
    applied_at: datetime
    teacher: TeacherSummary | None = None


class VacancyResponse(BaseModel):
    """Full vacancy with its applications."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    subject: str
    class_level: str
    schedule: str
    location: str
    preferred_gender: PreferredGender
    description: str
    salary: str
    status: VacancyStatus
    featured: bool
    created_by: UUID
    parent_id: UUID | None = None
    admin_last_viewed_applicants_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    applications: list[ApplicationResponse] = []


class VacancySummary(BaseModel):
    """Vacancy fields shown in listings for teachers and the public."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    subject: str
    description: str
    salary: str
    status: VacancyStatus
    featured: bool


class AvailableVacancy(VacancySummary):
    """An open vacancy the calling teacher can still apply to."""

    applicant_count: int = Field(..., ge=0)


class TeacherApplicationItem(BaseModel):
    """One of the calling teacher's applications."""

    id: UUID
    status: ApplicationStatus
    applied_at: datetime
    vacancy: VacancySummary


class ApplicantItem(BaseModel):
    """Applicant row for the admin applicants view."""

    application_id: UUID
    teacher_id: UUID
    full_name: str
    email: str | None = None
    phone: str | None = None
    subjects: list[str] = []
    fees: str | None = None
    cv_url: str | None = None
    status: ApplicationStatus
    applied_at: datetime


class VacancyListResponse(BaseModel):
    success: bool = True
    data: list[VacancyResponse]


class VacancySummaryListResponse(BaseModel):
    success: bool = True
    data: list[VacancySummary]


class AvailableVacancyListResponse(BaseModel):
    success: bool = True
    data: list[AvailableVacancy]


class TeacherApplicationListResponse(BaseModel):
    success: bool = True
    applications: list[TeacherApplicationItem]


class ApplicantListResponse(BaseModel):
    success: bool = True
    data: list[ApplicantItem]


class VacancyDetailResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: VacancyResponse


class ApplicationDecisionResponse(BaseModel):
    """
    Response after an admin decides an application.

    `data` is null when the decision was saved but the vacancy could not be
    read back; fetch it again to see the result.
    """

    success: bool = True
    message: str | None = None
    data: VacancyResponse | None = None


class ApplyResponse(BaseModel):
    """Response after a teacher applies to a vacancy."""

    success: bool = True
    message: str = "Applied successfully"
    application: ApplicationResponse


class MarkViewedResponse(BaseModel):
    success: bool = True
    message: str = "Last viewed timestamp updated successfully"
    admin_last_viewed_applicants_at: datetime


class MessageResponse(BaseModel):
    success: bool = True
    message: str
