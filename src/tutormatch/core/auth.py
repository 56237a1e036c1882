"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
Tokens are issued by the external auth service; this module validates them
and exposes the caller's identity (id, role, display name) to the routers.

SECURITY NOTE:
- Development mode test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production
"""

import logging
import os
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tutormatch.core.config import settings
from tutormatch.core.security import decode_token

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass
class AuthenticatedUser:
    """
    Identity of the caller, populated from JWT claims.

    Attributes:
        id: User's unique identifier (teacher id or admin id)
        role: 'admin' or 'teacher'
        email: Email claim (may be empty)
        name: Display name claim (optional)
    """

    id: UUID
    role: str
    email: str = ""
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER

    def __str__(self) -> str:
        return f"AuthenticatedUser(id={self.id}, role={self.role})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Both the settings object and the raw PYTHON_ENV variable must agree
    that this is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_USERS = {
    "dev-admin-token": AuthenticatedUser(
        id=UUID("00000000-0000-0000-0000-000000000001"),
        role=ROLE_ADMIN,
        email="admin@tutormatch.dev",
        name="Development Admin",
    ),
    "dev-teacher-token": AuthenticatedUser(
        id=UUID("00000000-0000-0000-0000-000000000002"),
        role=ROLE_TEACHER,
        email="teacher@tutormatch.dev",
        name="Development Teacher",
    ),
}


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def validate_token(token: str) -> AuthenticatedUser:
    """
    Validate a bearer token and extract the caller's identity.

    Args:
        token: Raw token string

    Returns:
        AuthenticatedUser built from the token claims

    Raises:
        HTTPException 401: If the token is invalid, expired or malformed
    """
    if _DEVELOPMENT_MODE and token in _DEV_USERS:
        logger.debug("Development mode: Using test token")
        return _DEV_USERS[token]

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        user_id_str = payload.get("sub")
        if not user_id_str:
            raise ValueError("Missing 'sub' claim in token")

        return AuthenticatedUser(
            id=UUID(user_id_str),
            role=payload.get("role", ""),
            email=payload.get("email", ""),
            name=payload.get("name"),
        )
    except ValueError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


def _require_role(user: AuthenticatedUser, role: str, error: str, message: str) -> None:
    if user.role != role:
        logger.warning(f"Access denied: user {user.id} has role '{user.role}', '{role}' required")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": error, "message": message},
        )


async def get_current_admin_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """
    FastAPI dependency that returns the authenticated admin.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
        HTTPException 403: If the caller is not an admin
    """
    user = validate_token(credentials.credentials)
    _require_role(user, ROLE_ADMIN, "ADMIN_ACCESS_REQUIRED", "Admin access is required.")
    logger.debug(f"Authenticated admin: {user.id}")
    return user


async def get_current_teacher(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """
    FastAPI dependency that returns the authenticated teacher.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
        HTTPException 403: If the caller is not a teacher
    """
    user = validate_token(credentials.credentials)
    _require_role(user, ROLE_TEACHER, "TEACHER_ACCESS_REQUIRED", "Teacher access is required.")
    return user


__all__ = [
    "AuthenticatedUser",
    "ROLE_ADMIN",
    "ROLE_TEACHER",
    "get_current_admin_user",
    "get_current_teacher",
    "validate_token",
]
