"""Lesson completion gate.

Decides whether a lesson may be marked complete and persists progress.

Per (lesson, account) the lifecycle is:
    not_started -> in_progress -> completed

completed is terminal through this module: a later call with
mark_complete=False stores the new watched_seconds but leaves the record
completed.
"""

import logging
from uuid import UUID

import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError

from .database import get_transaction
from .enums import LessonState
from .errors import GateNotSatisfied, LessonNotFound, NotAuthenticated, PersistenceFailure
from .queries import get_completion, get_lesson, upsert_completion
from .refresh import ProgressRefresh

logger = logging.getLogger(__name__)


def can_complete(
    required_watch_seconds: int, watched_seconds: int, already_complete: bool = False
) -> bool:
    """True once enough time has been watched, or if the lesson is already complete."""
    return already_complete or watched_seconds >= required_watch_seconds


def lesson_state(record: dict | None) -> LessonState:
    """Where a completion record sits in the lesson lifecycle."""
    if record is None:
        return LessonState.not_started
    if record.get("is_complete"):
        return LessonState.completed
    return LessonState.in_progress


async def record_progress(
    *,
    account_id: UUID | None,
    lesson_id: UUID,
    watched_seconds: int,
    mark_complete: bool,
    refresh: ProgressRefresh | None = None,
) -> dict:
    """Validate and upsert the completion record for (lesson_id, account_id).

    Args:
        account_id: The account making progress (required)
        lesson_id: Lesson being watched
        watched_seconds: Seconds watched, stored as given
        mark_complete: Request to mark the lesson complete
        refresh: Refresh signal bumped after a successful write

    Returns:
        The stored completion record

    Raises:
        NotAuthenticated: account_id is missing
        LessonNotFound: the lesson does not exist
        GateNotSatisfied: mark_complete requested before the watch time elapsed
        PersistenceFailure: the write failed
    """
    if not account_id:
        raise NotAuthenticated("An account is required to record lesson progress")
    if watched_seconds < 0:
        raise ValueError("watched_seconds must not be negative")

    try:
        async with get_transaction() as conn:
            lesson = await get_lesson(conn, lesson_id)
            if lesson is None:
                raise LessonNotFound(f"Lesson {lesson_id} not found")

            existing = await get_completion(
                conn, account_id=account_id, lesson_id=lesson_id
            )
            already_complete = lesson_state(existing) == LessonState.completed

            if mark_complete and not can_complete(
                lesson["required_watch_seconds"], watched_seconds, already_complete
            ):
                raise GateNotSatisfied(
                    f"Lesson requires {lesson['required_watch_seconds']}s of watch "
                    f"time, got {watched_seconds}s"
                )

            if already_complete and not mark_complete:
                logger.info(
                    "Ignoring completion revert for lesson %s, account %s",
                    lesson_id,
                    account_id,
                )

            record = await upsert_completion(
                conn,
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=watched_seconds,
                is_complete=mark_complete or already_complete,
            )
    except SQLAlchemyError as e:
        logger.error(
            "Failed to save progress for lesson %s, account %s: %s",
            lesson_id,
            account_id,
            e,
        )
        sentry_sdk.capture_exception(e)
        raise PersistenceFailure("Could not save lesson progress") from e

    logger.info(
        "Progress saved: lesson=%s account=%s watched=%ss complete=%s",
        lesson_id,
        account_id,
        record["watched_seconds"],
        record["is_complete"],
    )

    if refresh is not None:
        refresh.bump()

    return record
