"""
Postgres access for progress, quiz and session data.

One pooled asyncpg engine per process. Read paths take a plain connection
(and go through the read retries); writes take a transaction so a quiz
attempt and the track completion it triggers commit together.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import get_db_query_timeout_seconds
from .tables import metadata  # noqa: F401 - exported for Alembic

_engine: AsyncEngine | None = None

ASYNC_SCHEME = "postgresql+asyncpg://"
SYNC_SCHEME = "postgresql://"


def _with_scheme(url: str, scheme: str) -> str:
    for known in (ASYNC_SCHEME, SYNC_SCHEME, "postgres://"):
        if url.startswith(known):
            return scheme + url[len(known):]
    raise ValueError(f"DATABASE_URL is not a Postgres URL: {url.split('://')[0]}://...")


def _get_database_url() -> str:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable must be set")
    return _with_scheme(database_url, ASYNC_SCHEME)


def get_engine() -> AsyncEngine:
    """Get or create the shared engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _get_database_url(),
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
            connect_args={"command_timeout": get_db_query_timeout_seconds()},
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """Connection for read paths (completions, catalog, quizzes, certification)."""
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """
    Connection inside a transaction for writes.

    Commits when the block exits normally and rolls back if it raises, so a
    failed quiz submission leaves neither the attempt nor the track update.
    """
    async with get_engine().begin() as conn:
        yield conn


async def close_engine() -> None:
    """Dispose of the pool. Called from the app lifespan on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def is_configured() -> bool:
    return bool(os.environ.get("DATABASE_URL"))


def get_sync_database_url() -> str:
    """psycopg2 URL for Alembic, which runs migrations synchronously."""
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL must be set for migrations")
    return _with_scheme(database_url, SYNC_SCHEME)
