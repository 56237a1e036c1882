"""
TutorMatch API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging, database and Redis connections
- Real-time notification broker
- Background job scheduler
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from tutormatch.api import api_router
from tutormatch.core import redis as redis_state
from tutormatch.core.auth import get_current_admin_user
from tutormatch.core.config import settings
from tutormatch.core.database import async_session_maker, close_db, init_db
from tutormatch.core.logging_config import configure_logging
from tutormatch.core.notifications import get_broker, start_notifications, stop_notifications
from tutormatch.core.redis import close_redis, init_redis
from tutormatch.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from tutormatch.modules.notifications import router as notifications_router
from tutormatch.modules.vacancies.jobs import register_vacancy_jobs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown of:
    - Redis connection
    - Database connection
    - Notification broker
    - Background job scheduler
    """
    configure_logging()
    logger.info(f"Starting TutorMatch API in {settings.python_env} mode...")

    # Initialize Redis
    try:
        await init_redis()
        logger.info("[OK] Redis connected")
    except Exception as e:
        logger.error(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    # Initialize Database
    try:
        await init_db()
        logger.info("[OK] Database connected")
    except Exception as e:
        logger.error(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    # Start the notification broker (local-only without Redis)
    await start_notifications(redis_state.redis_client)
    logger.info("[OK] Notification broker started")

    # Initialize Background Job Scheduler
    try:
        register_vacancy_jobs()
        await start_scheduler()
        logger.info("[OK] Background scheduler started")
    except Exception as e:
        logger.error(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    logger.info("Shutting down TutorMatch API...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()
    await stop_notifications()
    await close_redis()
    await close_db()
    logger.info("[OK] Cleanup complete")


app = FastAPI(
    title="TutorMatch API",
    description="Tuition vacancies, teacher applications and parent requests",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")
app.include_router(notifications_router, tags=["Notifications"])

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Debug endpoints expose infrastructure state and job controls
ADMIN_ONLY = [Depends(get_current_admin_user)]


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to TutorMatch API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}


@app.get("/debug/db", tags=["Debug"], dependencies=ADMIN_ONLY)
async def debug_db():
    """Test database connection."""
    try:
        async with async_session_maker() as session:
            result = await session.execute(text("SELECT 1"))
            return {"database": "connected", "result": result.scalar()}
    except Exception as e:
        return {"database": "error", "message": str(e)}


@app.get("/debug/redis", tags=["Debug"], dependencies=ADMIN_ONLY)
async def debug_redis():
    """Test Redis connection."""
    client = redis_state.redis_client
    try:
        if client:
            await client.ping()
            return {"redis": "connected"}
        return {"redis": "not initialized"}
    except Exception as e:
        return {"redis": "error", "message": str(e)}


@app.get("/debug/notifications", tags=["Debug"], dependencies=ADMIN_ONLY)
async def debug_notifications():
    """Notification broker state."""
    broker = get_broker()
    if broker is None:
        return {"broker": "not running"}
    return {"broker": "running", "subscribers": broker.subscriber_count}


# ============================================
# Background Job Debug Endpoints
# ============================================
# Manual triggering for maintenance. In production, jobs run on schedule.


@app.get("/debug/jobs", tags=["Debug"], dependencies=ADMIN_ONLY)
async def list_jobs():
    """List all registered background jobs and their status."""
    return {"jobs": list_registered_jobs()}


@app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"], dependencies=ADMIN_ONLY)
async def trigger_job(job_id: str):
    """
    Run a background job now, bypassing the schedule.

    Args:
        job_id: The ID of the job to trigger. Available jobs:
            - vacancies_reconcile_cascades

    Raises:
        HTTPException 400: If job_id is not found.
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/debug/jobs/{job_id}/pause", tags=["Debug"], dependencies=ADMIN_ONLY)
async def pause_job_endpoint(job_id: str):
    """Pause a scheduled background job."""
    return {"job_id": job_id, "paused": pause_job(job_id)}


@app.post("/debug/jobs/{job_id}/resume", tags=["Debug"], dependencies=ADMIN_ONLY)
async def resume_job_endpoint(job_id: str):
    """Resume a paused background job."""
    return {"job_id": job_id, "resumed": resume_job(job_id)}
