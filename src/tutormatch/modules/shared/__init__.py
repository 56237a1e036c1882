"""
Shared building blocks for feature modules: model mixins, service errors
and transaction helpers.
"""

from tutormatch.modules.shared.exceptions import (
    NotFoundError,
    PersistenceFailureError,
    ServiceError,
    to_http_exception,
)
from tutormatch.modules.shared.models import TimestampMixin, UUIDPrimaryKeyMixin
from tutormatch.modules.shared.persistence import persistence_guard

__all__ = [
    "NotFoundError",
    "PersistenceFailureError",
    "ServiceError",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "persistence_guard",
    "to_http_exception",
]
