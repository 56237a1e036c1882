"""
Unit tests for persistence_guard and the service error mapping.
"""

import pytest
from sqlalchemy.exc import OperationalError

from tutormatch.modules.shared import (
    NotFoundError,
    PersistenceFailureError,
    persistence_guard,
    to_http_exception,
)


class TestPersistenceGuard:
    @pytest.mark.asyncio
    async def test_success_does_not_roll_back(self, mock_db):
        async with persistence_guard(mock_db, "save"):
            await mock_db.commit()

        mock_db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_service_error_rolls_back_and_propagates(self, mock_db):
        with pytest.raises(NotFoundError):
            async with persistence_guard(mock_db, "save"):
                raise NotFoundError("Vacancy")

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_error_becomes_persistence_failure(self, mock_db):
        error = OperationalError("SELECT 1", {}, Exception("could not connect"))

        with pytest.raises(PersistenceFailureError) as exc_info:
            async with persistence_guard(mock_db, "save the vacancy"):
                raise error

        assert exc_info.value.__cause__ is error
        assert exc_info.value.message == "Could not save the vacancy right now. Please try again."
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_becomes_persistence_failure(self, mock_db):
        with pytest.raises(PersistenceFailureError):
            async with persistence_guard(mock_db, "save"):
                raise TimeoutError()

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self, mock_db):
        with pytest.raises(KeyError):
            async with persistence_guard(mock_db, "save"):
                raise KeyError("bug")


class TestToHttpException:
    def test_structured_detail(self):
        http_error = to_http_exception(PersistenceFailureError("save"))

        assert http_error.status_code == 503
        assert http_error.detail == {
            "error": "PERSISTENCE_FAILURE",
            "message": "Could not save right now. Please try again.",
        }

    def test_not_found_default_code(self):
        error = NotFoundError("Parent request")
        assert error.error_code == "PARENT_REQUEST_NOT_FOUND"
        assert error.status_code == 404
