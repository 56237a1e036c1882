"""
Vacancy Models

Vacancies are teaching positions posted by admins. Each vacancy owns an
ordered list of teacher applications (at most MAX_APPLICATIONS_PER_VACANCY).
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutormatch.core.database import Base
from tutormatch.modules.shared.models import TimestampMixin, UUIDPrimaryKeyMixin
from tutormatch.modules.teachers.models import Teacher

MAX_APPLICATIONS_PER_VACANCY = 5


class VacancyStatus(str, enum.Enum):
    """Lifecycle status of a vacancy."""

    OPEN = "open"
    CLOSED = "closed"
    PENDING = "pending"


class ApplicationStatus(str, enum.Enum):
    """Status of a teacher's application to a vacancy."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PreferredGender(str, enum.Enum):
    """Preferred teacher gender for a vacancy."""

    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class Vacancy(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A teaching position.

    `cascade_pending` is set when an acceptance committed but the follow-up
    writes (sibling rejection, parent status) could not be completed; the
    reconciliation job finishes them later.
    """

    __tablename__ = "vacancies"

    # Posting details
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    class_level: Mapped[str] = mapped_column(String(100), nullable=False, default="Not specified")
    schedule: Mapped[str] = mapped_column(String(100), nullable=False, default="Not specified")
    location: Mapped[str] = mapped_column(String(200), nullable=False, default="Not specified")
    preferred_gender: Mapped[PreferredGender] = mapped_column(
        Enum(PreferredGender, name="preferred_gender"),
        nullable=False,
        default=PreferredGender.ANY,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    salary: Mapped[str] = mapped_column(String(100), nullable=False)

    # Lifecycle
    status: Mapped[VacancyStatus] = mapped_column(
        Enum(VacancyStatus, name="vacancy_status"),
        nullable=False,
        default=VacancyStatus.OPEN,
    )
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("parent_requests.id", ondelete="SET NULL"),
        nullable=True,
    )
    admin_last_viewed_applicants_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Deferred acceptance cascade
    cascade_pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cascade_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    applications: Mapped[list["VacancyApplication"]] = relationship(
        "VacancyApplication",
        back_populates="vacancy",
        cascade="all, delete-orphan",
        order_by="VacancyApplication.applied_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_vacancies_featured_status", "featured", "status"),
        Index("ix_vacancies_parent_id", "parent_id"),
        Index(
            "ix_vacancies_cascade_pending",
            "cascade_pending",
            postgresql_where=text("cascade_pending"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Vacancy(id={self.id}, title={self.title}, status={self.status.value})>"


class VacancyApplication(UUIDPrimaryKeyMixin, Base):
    """
    A teacher's application to a vacancy.

    Owned by the vacancy (deleted with it). The teacher reference is
    non-owning. One application per teacher per vacancy.
    """

    __tablename__ = "vacancy_applications"

    vacancy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vacancies.id", ondelete="CASCADE"),
        nullable=False,
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", name="fk_vacancy_applications_teacher_id"),
        nullable=False,
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="vacancy_application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    vacancy: Mapped["Vacancy"] = relationship("Vacancy", back_populates="applications")
    teacher: Mapped[Teacher | None] = relationship(Teacher, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("vacancy_id", "teacher_id", name="uq_vacancy_applications_teacher"),
        Index("ix_vacancy_applications_teacher_id", "teacher_id"),
        Index("ix_vacancy_applications_vacancy_status", "vacancy_id", "status"),
    )
