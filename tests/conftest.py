"""
Shared test fixtures.
"""

import os

# Before any tutormatch import: settings are read once at import time
os.environ.setdefault("PYTHON_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-unit-tests-only")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402

from tutormatch.core.auth import ROLE_ADMIN, ROLE_TEACHER, AuthenticatedUser  # noqa: E402
from tutormatch.core.rate_limit import reset_memory_store  # noqa: E402


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.expire_all = MagicMock()
    return db


@pytest.fixture
def admin_user():
    return AuthenticatedUser(id=uuid4(), role=ROLE_ADMIN, email="admin@test.com", name="Admin")


@pytest.fixture
def teacher_user():
    return AuthenticatedUser(
        id=uuid4(), role=ROLE_TEACHER, email="teacher@test.com", name="Ama Teacher"
    )


@pytest.fixture(autouse=True)
def clear_rate_limits():
    """Rate limit counters are process-global; start every test from zero."""
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def client(mock_db, admin_user, teacher_user):
    """API client with the database and both caller identities stubbed."""
    from fastapi.testclient import TestClient

    from tutormatch.core.auth import get_current_admin_user, get_current_teacher
    from tutormatch.core.database import get_db
    from tutormatch.main import app

    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_admin_user] = lambda: admin_user
    app.dependency_overrides[get_current_teacher] = lambda: teacher_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(mock_db):
    """API client with only the database stubbed; tokens are checked for real."""
    from fastapi.testclient import TestClient

    from tutormatch.core.database import get_db
    from tutormatch.main import app

    app.dependency_overrides[get_db] = lambda: mock_db
    yield TestClient(app)
    app.dependency_overrides.clear()
