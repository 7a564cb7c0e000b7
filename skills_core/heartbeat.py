"""
Session heartbeat for cartório accounts.

While a cartório session is open its liveness timestamp is refreshed every
HEARTBEAT_INTERVAL_SECONDS and whenever the window regains focus. Starting
the heartbeat returns a stop function; the caller must invoke it on logout.
"""

import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError

from . import scheduler
from .config import get_heartbeat_interval_seconds
from .database import get_transaction
from .queries import touch_session

logger = logging.getLogger(__name__)


def _job_id(account_id: UUID) -> str:
    return f"heartbeat_{account_id}"


async def send_heartbeat(account_id: UUID) -> bool:
    """
    Refresh the account's liveness timestamp.

    A failed heartbeat is logged and reported, never raised: the next tick
    tries again.

    Returns:
        True if the timestamp was written
    """
    try:
        async with get_transaction() as conn:
            await touch_session(conn, account_id=account_id)
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Heartbeat failed for account %s: %s", account_id, e)
        sentry_sdk.capture_exception(e)
        return False

    logger.debug("Heartbeat sent for account %s", account_id)
    return True


def start_heartbeat(account_id: UUID) -> Callable[[], None]:
    """
    Schedule the repeating heartbeat for an account, first tick immediately.

    Starting again for the same account replaces the existing job.

    Returns:
        A stop function that cancels the job (safe to call more than once)
    """
    job_id = _job_id(account_id)
    sched = scheduler.get_scheduler()

    if sched is None:
        logger.warning("Scheduler not initialized, heartbeat for %s not started", account_id)
        return lambda: None

    sched.add_job(
        send_heartbeat,
        trigger="interval",
        seconds=get_heartbeat_interval_seconds(),
        next_run_time=datetime.now(timezone.utc),
        id=job_id,
        replace_existing=True,
        kwargs={"account_id": account_id},
    )
    logger.info("Heartbeat started for account %s", account_id)

    def stop() -> None:
        if scheduler.remove_job(job_id):
            logger.info("Heartbeat stopped for account %s", account_id)

    return stop
