"""
Unit tests for token validation and role checks.
"""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from tutormatch.core.auth import (
    ROLE_ADMIN,
    ROLE_TEACHER,
    get_current_admin_user,
    get_current_teacher,
    validate_token,
)
from tutormatch.core.security import create_access_token, decode_token


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestValidateToken:
    def test_valid_token(self):
        user_id = uuid4()
        token = create_access_token(
            str(user_id), {"role": ROLE_TEACHER, "email": "t@test.com", "name": "Ama"}
        )

        user = validate_token(token)

        assert user.id == user_id
        assert user.is_teacher
        assert user.email == "t@test.com"
        assert user.name == "Ama"

    def test_expired_token(self):
        token = create_access_token(
            str(uuid4()), {"role": ROLE_ADMIN}, expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(HTTPException) as exc_info:
            validate_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "INVALID_TOKEN"

    def test_wrong_token_type(self):
        token = create_access_token(str(uuid4()), {"role": ROLE_ADMIN, "type": "refresh"})

        with pytest.raises(HTTPException) as exc_info:
            validate_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_TYPE"

    def test_malformed_subject(self):
        token = create_access_token("not-a-uuid", {"role": ROLE_ADMIN})

        with pytest.raises(HTTPException) as exc_info:
            validate_token(token)

        assert exc_info.value.detail["error"] == "INVALID_TOKEN_CLAIMS"

    def test_dev_tokens_disabled_outside_development(self):
        with pytest.raises(HTTPException):
            validate_token("dev-admin-token")

    def test_decode_rejects_foreign_signature(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "access"}, "another-secret", algorithm="HS256"
        )
        assert decode_token(token) is None


class TestRoleDependencies:
    @pytest.mark.asyncio
    async def test_admin_dependency_accepts_admin(self):
        token = create_access_token(str(uuid4()), {"role": ROLE_ADMIN})
        user = await get_current_admin_user(_credentials(token))
        assert user.is_admin

    @pytest.mark.asyncio
    async def test_admin_dependency_refuses_teacher(self):
        token = create_access_token(str(uuid4()), {"role": ROLE_TEACHER})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_admin_user(_credentials(token))

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_teacher_dependency_refuses_admin(self):
        token = create_access_token(str(uuid4()), {"role": ROLE_ADMIN})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_teacher(_credentials(token))

        assert exc_info.value.detail["error"] == "TEACHER_ACCESS_REQUIRED"
