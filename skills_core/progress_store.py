"""Read access to lesson-completion data.

Scopes an account's completion records by course and lists a course's
lessons. Reads are retried on transient failures and surface
DataUnavailable once the retry budget is spent.
"""

from uuid import UUID

from .database import get_connection
from .queries import (
    get_account_completions,
    get_course_completions,
    get_lesson_ids,
    get_lesson_ids_by_course,
)
from .retry import with_read_retries


def _require_id(value: UUID | None, name: str) -> None:
    if not value:
        raise ValueError(f"{name} must be provided")


async def fetch_completions(account_id: UUID, course_id: UUID) -> list[dict]:
    """Get the account's completion records for the lessons of a course."""
    _require_id(account_id, "account_id")
    _require_id(course_id, "course_id")

    async def _read() -> list[dict]:
        async with get_connection() as conn:
            return await get_course_completions(
                conn, account_id=account_id, course_id=course_id
            )

    return await with_read_retries(_read, description="Completion records")


async def fetch_lesson_ids(course_id: UUID) -> list[UUID]:
    """Get the ordered lesson ids of a course ([] for an unknown course)."""
    _require_id(course_id, "course_id")

    async def _read() -> list[UUID]:
        async with get_connection() as conn:
            return await get_lesson_ids(conn, course_id)

    return await with_read_retries(_read, description="Course lessons")


async def fetch_all_completions(account_id: UUID) -> list[dict]:
    """Get every completion record of an account (dashboard overview)."""
    _require_id(account_id, "account_id")

    async def _read() -> list[dict]:
        async with get_connection() as conn:
            return await get_account_completions(conn, account_id=account_id)

    return await with_read_retries(_read, description="Completion records")


async def fetch_course_lessons() -> dict[UUID, list[UUID]]:
    """Get ordered lesson ids for every course."""

    async def _read() -> dict[UUID, list[UUID]]:
        async with get_connection() as conn:
            return await get_lesson_ids_by_course(conn)

    return await with_read_retries(_read, description="Course lessons")
