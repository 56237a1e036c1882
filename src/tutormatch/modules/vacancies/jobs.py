"""
Vacancy Background Jobs

Scheduled tasks for the application lifecycle:
1. Reconcile acceptance cascades that could not be finished at request time

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Jobs handle their own database sessions
- Individual vacancy failures don't stop the job; they stay marked and are
  picked up by the next run

Schedule:
- Runs every CASCADE_RECONCILE_INTERVAL_MINUTES (default 5)
- Can be triggered manually via /debug/jobs/{job_id}/trigger
"""

import logging
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from tutormatch.core.config import settings
from tutormatch.core.database import async_session_maker
from tutormatch.core.scheduler import register_job
from tutormatch.modules.vacancies import service

logger = logging.getLogger(__name__)

# Job IDs for registration and manual triggering
JOB_ID_RECONCILE_CASCADES = "vacancies_reconcile_cascades"


async def reconcile_acceptance_cascades() -> dict[str, Any]:
    """
    Finish sibling rejection and parent updates for accepted vacancies
    still marked cascade_pending.

    Returns:
        Dict with the number of vacancies completed
    """
    logger.debug("Starting acceptance cascade reconciliation")

    async with async_session_maker() as db:
        completed = await service.reconcile_pending_cascades(db)

    return {"completed": completed}


def register_vacancy_jobs() -> None:
    """
    Register vacancy background jobs with the scheduler.

    Call during application startup, before the scheduler is started.
    """
    interval = settings.cascade_reconcile_interval_minutes

    register_job(
        job_id=JOB_ID_RECONCILE_CASCADES,
        func=reconcile_acceptance_cascades,
        trigger=IntervalTrigger(minutes=interval),
    )
    logger.info(f"Registered job: {JOB_ID_RECONCILE_CASCADES} (interval: {interval} min)")
