"""
Scheduled Call Models
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tutormatch.core.database import Base
from tutormatch.modules.shared.models import TimestampMixin, UUIDPrimaryKeyMixin


class ScheduledCall(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A call an admin plans to make."""

    __tablename__ = "scheduled_calls"

    contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    call_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("ix_scheduled_calls_completed_call_at", "is_completed", "call_at"),)

    def __repr__(self) -> str:
        return f"<ScheduledCall(id={self.id}, contact={self.contact_name})>"
