"""
Unit tests for the background job scheduler registry.
"""

from unittest.mock import AsyncMock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from tutormatch.core import scheduler


async def _noop():
    return None


@pytest.fixture
def empty_registry():
    with patch.dict(scheduler._job_registry, clear=True):
        yield scheduler._job_registry


class TestTriggerJobManually:
    @pytest.mark.asyncio
    async def test_unknown_job(self, empty_registry):
        with pytest.raises(ValueError, match="not found"):
            await scheduler.trigger_job_manually("missing")

    @pytest.mark.asyncio
    async def test_success_reports_result(self, empty_registry):
        job = AsyncMock(return_value={"completed": 3})
        scheduler.register_job("reconcile", job, IntervalTrigger(minutes=5))

        outcome = await scheduler.trigger_job_manually("reconcile")

        assert outcome["job_id"] == "reconcile"
        assert outcome["status"] == "success"
        assert outcome["result"] == {"completed": 3}
        job.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, empty_registry):
        job = AsyncMock(side_effect=RuntimeError("database down"))
        scheduler.register_job("reconcile", job, IntervalTrigger(minutes=5))

        outcome = await scheduler.trigger_job_manually("reconcile")

        assert outcome["status"] == "error"
        assert "database down" in outcome["error"]


class TestSchedulerLifecycle:
    @pytest.mark.asyncio
    async def test_jobs_registered_before_start_are_scheduled(self, empty_registry):
        scheduler.register_job("reconcile", _noop, IntervalTrigger(minutes=5))

        await scheduler.start_scheduler()
        try:
            jobs = scheduler.list_registered_jobs()
            assert jobs[0]["job_id"] == "reconcile"
            assert jobs[0]["next_run_time"] is not None
            assert scheduler.pause_job("reconcile") is True
            assert scheduler.list_registered_jobs()[0]["is_paused"] is True
            assert scheduler.resume_job("reconcile") is True
        finally:
            await scheduler.stop_scheduler()

        assert scheduler.get_scheduler() is None

    def test_pause_unknown_job(self, empty_registry):
        assert scheduler.pause_job("missing") is False
