"""
Service Error Taxonomy

Every error a service function raises on purpose derives from ServiceError.
Routers turn them into HTTPException with a stable `error` code and a
human-readable `message`; nothing else about the failure reaches the client.
"""

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: object | None = None, error_code: str | None = None):
        message = f"{entity} {entity_id} not found" if entity_id else f"{entity} not found"
        super().__init__(
            message=message,
            error_code=error_code or f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
        )


class PersistenceFailureError(ServiceError):
    """
    Raised when the database fails or times out before anything was committed.

    The operation had no effect and the client may retry it.
    """

    def __init__(self, operation: str):
        super().__init__(
            message=f"Could not {operation} right now. Please try again.",
            error_code="PERSISTENCE_FAILURE",
            status_code=503,
        )


def to_http_exception(e: ServiceError) -> HTTPException:
    """Convert a service error to an HTTPException with a structured detail."""
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )
