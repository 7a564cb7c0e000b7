"""Queries for account session liveness."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import account_sessions


async def touch_session(conn: AsyncConnection, *, account_id: UUID) -> dict:
    """Refresh the liveness timestamp of an account session."""
    stmt = pg_insert(account_sessions).values(account_id=account_id)
    stmt = stmt.on_conflict_do_update(
        index_elements=["account_id"],
        set_={"last_seen_at": func.now()},
    ).returning(account_sessions)

    result = await conn.execute(stmt)
    row = result.fetchone()
    return dict(row._mapping)
