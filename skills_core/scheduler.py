"""
APScheduler-based scheduler for repeating session jobs.

Jobs are kept in memory only: heartbeats belong to live sessions and are
meaningless after a restart.
"""

import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


_scheduler: AsyncIOScheduler | None = None


def init_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the APScheduler.

    Call this during app startup (in FastAPI lifespan).
    """
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,
            "misfire_grace_time": 30,
        },
    )
    _scheduler.start()
    print("Session scheduler started")
    return _scheduler


def get_scheduler() -> AsyncIOScheduler | None:
    return _scheduler


def shutdown_scheduler() -> None:
    """
    Shutdown the scheduler gracefully.

    Call this during app shutdown.
    """
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        print("Session scheduler stopped")


def remove_job(job_id: str) -> bool:
    """Remove a job by id. Returns False if the scheduler or the job is gone."""
    if not _scheduler:
        return False
    try:
        _scheduler.remove_job(job_id)
    except JobLookupError:
        return False  # Already gone
    return True
