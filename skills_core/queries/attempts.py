"""Queries for quiz attempts (append-only)."""

from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import quiz_attempts


async def insert_attempt(
    conn: AsyncConnection,
    *,
    account_id: UUID,
    quiz_id: UUID,
    track_id: UUID | None,
    score: float,
    passed: bool,
    answers: list[dict],
) -> dict:
    """Append a quiz attempt. Every submission creates a separate record."""
    stmt = (
        pg_insert(quiz_attempts)
        .values(
            account_id=account_id,
            quiz_id=quiz_id,
            track_id=track_id,
            score=score,
            passed=passed,
            answers=answers,
        )
        .returning(quiz_attempts)
    )
    result = await conn.execute(stmt)
    row = result.fetchone()
    return dict(row._mapping)


async def get_passed_quiz_ids(
    conn: AsyncConnection, *, account_id: UUID, quiz_ids: list[UUID]
) -> set[UUID]:
    """Return the subset of quiz_ids with at least one passed attempt."""
    if not quiz_ids:
        return set()

    result = await conn.execute(
        select(quiz_attempts.c.quiz_id)
        .where(
            and_(
                quiz_attempts.c.account_id == account_id,
                quiz_attempts.c.quiz_id.in_(quiz_ids),
                quiz_attempts.c.passed.is_(True),
            )
        )
        .distinct()
    )
    return {row.quiz_id for row in result.fetchall()}


async def list_attempts(
    conn: AsyncConnection, *, account_id: UUID, quiz_id: UUID
) -> list[dict]:
    """Get an account's attempts at a quiz, newest first."""
    result = await conn.execute(
        select(quiz_attempts)
        .where(
            and_(
                quiz_attempts.c.account_id == account_id,
                quiz_attempts.c.quiz_id == quiz_id,
            )
        )
        .order_by(quiz_attempts.c.created_at.desc())
    )
    return [dict(row._mapping) for row in result.fetchall()]
