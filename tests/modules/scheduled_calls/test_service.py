"""
Unit tests for the scheduled call service layer.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from tutormatch.modules.scheduled_calls.exceptions import ScheduledCallNotFoundError
from tutormatch.modules.scheduled_calls.schemas import ScheduledCallCreate
from tutormatch.modules.scheduled_calls.service import (
    delete_call,
    list_calls,
    schedule_call,
    set_completed,
)
from tutormatch.modules.shared import PersistenceFailureError

SERVICE = "tutormatch.modules.scheduled_calls.service"


class TestListCalls:
    @pytest.mark.asyncio
    async def test_open_calls_by_default(self, mock_db, make_call):
        calls = [make_call(), make_call(in_hours=5)]

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_by_completion = AsyncMock(return_value=calls)

            assert await list_calls(mock_db) == calls
            mock_repo.list_by_completion.assert_awaited_once_with(mock_db, False)


class TestScheduleCall:
    @pytest.mark.asyncio
    async def test_commits(self, mock_db, make_call):
        data = ScheduledCallCreate(contact_name="Efua Owusu", call_at=datetime.now(UTC))
        call = make_call()

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock(return_value=call)

            assert await schedule_call(mock_db, data) is call
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db):
        data = ScheduledCallCreate(contact_name="Efua Owusu", call_at=datetime.now(UTC))

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.create = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception()))

            with pytest.raises(PersistenceFailureError):
                await schedule_call(mock_db, data)

            mock_db.rollback.assert_awaited_once()


class TestSetCompleted:
    @pytest.mark.asyncio
    async def test_marks_completed(self, mock_db, make_call):
        call = make_call(is_completed=True)

        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.set_completed = AsyncMock(return_value=call)

            assert await set_completed(mock_db, call.id, True) is call
            mock_repo.set_completed.assert_awaited_once_with(mock_db, call.id, True)

    @pytest.mark.asyncio
    async def test_missing_call(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.set_completed = AsyncMock(return_value=None)

            with pytest.raises(ScheduledCallNotFoundError):
                await set_completed(mock_db, uuid4(), True)

            mock_db.commit.assert_not_awaited()


class TestDeleteCall:
    @pytest.mark.asyncio
    async def test_missing_call(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.delete_call = AsyncMock(return_value=False)

            with pytest.raises(ScheduledCallNotFoundError):
                await delete_call(mock_db, uuid4())

    @pytest.mark.asyncio
    async def test_deletes(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.delete_call = AsyncMock(return_value=True)

            await delete_call(mock_db, uuid4())

            mock_db.commit.assert_awaited_once()
