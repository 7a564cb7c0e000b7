"""Queries for lesson completion records.

One row per (lesson_id, account_id). Writes go through upsert_completion,
which keeps is_complete monotonic inside the statement itself.
"""

from uuid import UUID

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import completion_records, lessons


async def get_course_completions(
    conn: AsyncConnection, *, account_id: UUID, course_id: UUID
) -> list[dict]:
    """Get an account's completion records for the lessons of one course."""
    result = await conn.execute(
        select(completion_records)
        .join(lessons, lessons.c.lesson_id == completion_records.c.lesson_id)
        .where(
            and_(
                completion_records.c.account_id == account_id,
                lessons.c.course_id == course_id,
            )
        )
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def get_account_completions(
    conn: AsyncConnection, *, account_id: UUID
) -> list[dict]:
    """Get every completion record of an account."""
    result = await conn.execute(
        select(completion_records).where(completion_records.c.account_id == account_id)
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def get_completion(
    conn: AsyncConnection, *, account_id: UUID, lesson_id: UUID
) -> dict | None:
    result = await conn.execute(
        select(completion_records).where(
            and_(
                completion_records.c.account_id == account_id,
                completion_records.c.lesson_id == lesson_id,
            )
        )
    )
    row = result.fetchone()
    return dict(row._mapping) if row else None


async def upsert_completion(
    conn: AsyncConnection,
    *,
    account_id: UUID,
    lesson_id: UUID,
    watched_seconds: int,
    is_complete: bool,
) -> dict:
    """Insert or update the completion record for (lesson_id, account_id).

    watched_seconds is stored as given (last write wins). is_complete only
    ever moves from false to true: an existing true value is kept even if
    the incoming value is false, and completed_at is set on the first
    completion only.

    Returns the stored row as a dict.
    """
    now = func.now()
    stmt = pg_insert(completion_records).values(
        lesson_id=lesson_id,
        account_id=account_id,
        watched_seconds=watched_seconds,
        is_complete=is_complete,
        completed_at=now if is_complete else None,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["lesson_id", "account_id"],
        set_={
            "watched_seconds": stmt.excluded.watched_seconds,
            "last_viewed_at": now,
            "is_complete": or_(
                completion_records.c.is_complete, stmt.excluded.is_complete
            ),
            "completed_at": case(
                (
                    completion_records.c.completed_at.isnot(None),
                    completion_records.c.completed_at,
                ),
                else_=stmt.excluded.completed_at,
            ),
        },
    ).returning(completion_records)

    result = await conn.execute(stmt)
    row = result.fetchone()
    # No explicit commit - let the caller's transaction context handle it
    return dict(row._mapping)
