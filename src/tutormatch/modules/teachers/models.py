"""
Teacher Models
"""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from tutormatch.core.database import Base
from tutormatch.modules.shared.models import TimestampMixin, UUIDPrimaryKeyMixin

# Shown when an application outlives its teacher profile
UNKNOWN_TEACHER_NAME = "Unknown Teacher"


class Teacher(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Teacher profile.

    Owned by the signup service. Applications reference teachers by id
    without owning them.
    """

    __tablename__ = "teachers"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subjects: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    fees: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cv_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, name={self.full_name})>"
