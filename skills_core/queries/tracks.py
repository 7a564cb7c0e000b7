"""Queries for per-account track progress."""

from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import TrackStatus
from ..tables import track_progress


async def is_track_completed(
    conn: AsyncConnection, *, account_id: UUID, track_id: UUID
) -> bool:
    result = await conn.execute(
        select(track_progress.c.status).where(
            and_(
                track_progress.c.account_id == account_id,
                track_progress.c.track_id == track_id,
            )
        )
    )
    status = result.scalar()
    return status == TrackStatus.completed


async def mark_track_completed(
    conn: AsyncConnection, *, account_id: UUID, track_id: UUID
) -> dict:
    """Upsert the track progress row as completed, keeping the first completed_at."""
    stmt = pg_insert(track_progress).values(
        account_id=account_id,
        track_id=track_id,
        status=TrackStatus.completed,
        completed_at=func.now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["account_id", "track_id"],
        set_={
            "status": TrackStatus.completed,
            "completed_at": func.coalesce(
                track_progress.c.completed_at, stmt.excluded.completed_at
            ),
        },
    ).returning(track_progress)

    result = await conn.execute(stmt)
    row = result.fetchone()
    return dict(row._mapping)
