"""
Unit tests for vacancy background jobs.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from tutormatch.core import scheduler
from tutormatch.modules.vacancies.jobs import (
    JOB_ID_RECONCILE_CASCADES,
    reconcile_acceptance_cascades,
    register_vacancy_jobs,
)

JOBS = "tutormatch.modules.vacancies.jobs"


class TestReconcileAcceptanceCascades:
    @pytest.mark.asyncio
    async def test_runs_reconciliation_in_own_session(self, mock_db):
        session_maker = MagicMock()
        session_maker.return_value.__aenter__.return_value = mock_db

        with (
            patch(f"{JOBS}.async_session_maker", session_maker),
            patch(f"{JOBS}.service") as mock_service,
        ):
            mock_service.reconcile_pending_cascades = AsyncMock(return_value=2)

            result = await reconcile_acceptance_cascades()

            assert result == {"completed": 2}
            mock_service.reconcile_pending_cascades.assert_awaited_once_with(mock_db)


class TestRegisterVacancyJobs:
    def test_registers_reconciliation_job(self):
        with patch.dict(scheduler._job_registry, clear=True):
            register_vacancy_jobs()

            job = scheduler._job_registry[JOB_ID_RECONCILE_CASCADES]
            assert job.func is reconcile_acceptance_cascades
            assert isinstance(job.trigger, IntervalTrigger)

    @pytest.mark.asyncio
    async def test_job_can_be_triggered_manually(self):
        with (
            patch.dict(scheduler._job_registry, clear=True),
            patch(f"{JOBS}.service") as mock_service,
            patch(f"{JOBS}.async_session_maker") as session_maker,
        ):
            session_maker.return_value.__aenter__.return_value = AsyncMock()
            mock_service.reconcile_pending_cascades = AsyncMock(return_value=0)
            register_vacancy_jobs()

            outcome = await scheduler.trigger_job_manually(JOB_ID_RECONCILE_CASCADES)

            assert outcome["status"] == "success"
            assert outcome["result"] == {"completed": 0}
