"""
Parent Request Models

Tuition requests submitted by parents. An admin may create a vacancy to fill
a request; accepting a teacher on that vacancy marks the request done.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from tutormatch.core.database import Base
from tutormatch.modules.shared.models import UUIDPrimaryKeyMixin

# Rejections after which a request is given up on
MAX_REJECTIONS = 5


class ParentRequestStatus(str, enum.Enum):
    """Status of a parent request."""

    NEW = "new"
    PENDING = "pending"
    DONE = "done"
    NOT_DONE = "not_done"


class PreferredTeacher(str, enum.Enum):
    """Preferred teacher gender."""

    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class ParentRequest(UUIDPrimaryKeyMixin, Base):
    """
    A parent's tuition request.

    `application_number` is the human-facing sequential number shown to
    parents and admins. It is allocated at submission time and unique.
    """

    __tablename__ = "parent_requests"

    application_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # Request details
    parent_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    salary: Mapped[str | None] = mapped_column(String(100), nullable=True)
    preferred_teacher: Mapped[PreferredTeacher] = mapped_column(
        Enum(PreferredTeacher, name="preferred_teacher"), nullable=False
    )
    grade: Mapped[str] = mapped_column(String(50), nullable=False)
    subjects: Mapped[list] = mapped_column(JSON, nullable=False)
    preferred_time: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Status tracking
    status: Mapped[ParentRequestStatus] = mapped_column(
        Enum(ParentRequestStatus, name="parent_request_status"),
        nullable=False,
        default=ParentRequestStatus.NEW,
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Linked vacancy (weak reference)
    vacancy_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vacancies.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )
    vacancy_linked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("application_number", name="uq_parent_requests_application_number"),
        Index("ix_parent_requests_status", "status"),
        Index("ix_parent_requests_submitted_at", "submitted_at"),
    )

    def __repr__(self) -> str:
        return f"<ParentRequest(id={self.id}, number={self.application_number})>"
