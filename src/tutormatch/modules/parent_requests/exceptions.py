"""
Parent Request Errors
"""

from uuid import UUID

from tutormatch.modules.shared.exceptions import NotFoundError, ServiceError


class ParentRequestNotFoundError(NotFoundError):
    """Raised when a parent request is not found."""

    def __init__(self, parent_id: UUID | None = None):
        super().__init__("Parent request", parent_id, error_code="PARENT_REQUEST_NOT_FOUND")


class InvalidStatusChangeError(ServiceError):
    """Raised when an admin asks for a status that cannot be set by hand."""

    def __init__(self, status: str):
        super().__init__(
            message=(
                f"Status '{status}' cannot be set manually. "
                "A request becomes done when a teacher is accepted on its vacancy."
            ),
            error_code="INVALID_STATUS_CHANGE",
            status_code=400,
        )


class RejectionLimitReachedError(ServiceError):
    """Raised when changing a request that was given up on after too many rejections."""

    def __init__(self, max_rejections: int):
        super().__init__(
            message=(
                f"This request was rejected {max_rejections} times and is closed as not done. "
                "Its status can no longer be changed."
            ),
            error_code="REJECTION_LIMIT_REACHED",
            status_code=409,
        )
