"""
Unit tests for the parent request repository.

Statements are compiled for PostgreSQL and inspected; no database is used.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from tutormatch.modules.parent_requests import repository
from tutormatch.modules.parent_requests.models import MAX_REJECTIONS, ParentRequestStatus


def _executed_sql(mock_db) -> str:
    statement = mock_db.execute.await_args.args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


class TestIncrementRejection:
    @pytest.mark.asyncio
    async def test_single_atomic_update(self, mock_db):
        """Count and status change in one UPDATE ... RETURNING statement."""
        parent_request = MagicMock()
        mock_db.execute.return_value = MagicMock(
            scalar_one_or_none=MagicMock(return_value=parent_request)
        )

        result = await repository.increment_rejection(mock_db, uuid4())

        assert result is parent_request
        mock_db.execute.assert_awaited_once()
        sql = _executed_sql(mock_db)
        assert sql.startswith("UPDATE parent_requests SET")
        assert "parent_requests.rejection_count + " in sql
        assert "CASE WHEN" in sql
        assert "RETURNING" in sql

    def test_limit(self):
        assert MAX_REJECTIONS == 5


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_returns_none_for_missing_row(self, mock_db):
        mock_db.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))

        assert await repository.update_status(mock_db, uuid4(), ParentRequestStatus.DONE) is None
        assert "RETURNING" in _executed_sql(mock_db)

    @pytest.mark.asyncio
    async def test_guarded_by_rejection_limit(self, mock_db):
        mock_db.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))

        await repository.update_status(mock_db, uuid4(), ParentRequestStatus.PENDING)

        assert "parent_requests.rejection_count < " in _executed_sql(mock_db)

    @pytest.mark.asyncio
    async def test_not_done_always_allowed(self, mock_db):
        mock_db.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))

        await repository.update_status(mock_db, uuid4(), ParentRequestStatus.NOT_DONE)

        assert "rejection_count <" not in _executed_sql(mock_db)


class TestLinkVacancy:
    @pytest.mark.asyncio
    async def test_guarded_by_rejection_limit(self, mock_db):
        mock_db.execute.return_value = MagicMock(scalar_one_or_none=MagicMock(return_value=None))

        await repository.link_vacancy(mock_db, uuid4(), uuid4(), ParentRequestStatus.PENDING)

        sql = _executed_sql(mock_db)
        assert "parent_requests.rejection_count < " in sql
        assert "vacancy_id=" in sql


class TestNextApplicationNumber:
    @pytest.mark.asyncio
    async def test_max_plus_one(self, mock_db):
        mock_db.execute.return_value = MagicMock(scalar_one=MagicMock(return_value=13))

        assert await repository.next_application_number(mock_db) == 13
        sql = _executed_sql(mock_db)
        assert "max(parent_requests.application_number)" in sql
        assert "coalesce" in sql
