"""Tests for the SQL emitted by the queries.

Statements are captured from a mock connection and compiled for PostgreSQL.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from skills_core.queries import (
    get_lesson_quiz_ids,
    get_passed_quiz_ids,
    insert_attempt,
    mark_track_completed,
    upsert_completion,
)


def _mock_conn(mapping: dict | None = None):
    row = MagicMock()
    row._mapping = mapping or {}
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = []
    conn = MagicMock()
    conn.execute = AsyncMock(return_value=result)
    return conn


def _sql(conn) -> str:
    stmt = conn.execute.call_args[0][0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestUpsertCompletion:
    @pytest.mark.asyncio
    async def test_upserts_on_lesson_and_account(self):
        conn = _mock_conn({"is_complete": True})

        result = await upsert_completion(
            conn,
            account_id=uuid.uuid4(),
            lesson_id=uuid.uuid4(),
            watched_seconds=130,
            is_complete=True,
        )

        sql = _sql(conn)
        assert "ON CONFLICT (lesson_id, account_id) DO UPDATE" in sql
        assert "excluded.watched_seconds" in sql
        assert result == {"is_complete": True}

    @pytest.mark.asyncio
    async def test_completion_flag_never_reverts(self):
        """The update keeps an existing true flag: is_complete OR excluded.is_complete."""
        conn = _mock_conn()

        await upsert_completion(
            conn,
            account_id=uuid.uuid4(),
            lesson_id=uuid.uuid4(),
            watched_seconds=10,
            is_complete=False,
        )

        sql = _sql(conn)
        assert "completion_records.is_complete OR excluded.is_complete" in sql


class TestInsertAttempt:
    @pytest.mark.asyncio
    async def test_is_plain_insert(self):
        conn = _mock_conn({"attempt_id": 1})

        await insert_attempt(
            conn,
            account_id=uuid.uuid4(),
            quiz_id=uuid.uuid4(),
            track_id=None,
            score=60.0,
            passed=True,
            answers=[],
        )

        sql = _sql(conn)
        assert sql.startswith("INSERT INTO quiz_attempts")
        assert "ON CONFLICT" not in sql


class TestMarkTrackCompleted:
    @pytest.mark.asyncio
    async def test_keeps_first_completion_time(self):
        conn = _mock_conn({"status": "completed"})

        await mark_track_completed(conn, account_id=uuid.uuid4(), track_id=uuid.uuid4())

        sql = _sql(conn)
        assert "ON CONFLICT (account_id, track_id) DO UPDATE" in sql
        assert "coalesce(track_progress.completed_at, excluded.completed_at)" in sql


class TestGetPassedQuizIds:
    @pytest.mark.asyncio
    async def test_no_quiz_ids_skips_query(self):
        conn = _mock_conn()

        assert await get_passed_quiz_ids(conn, account_id=uuid.uuid4(), quiz_ids=[]) == set()
        conn.execute.assert_not_called()


class TestGetLessonQuizIds:
    @pytest.mark.asyncio
    async def test_keeps_every_quiz_of_a_lesson(self):
        lesson_a, lesson_b = uuid.uuid4(), uuid.uuid4()
        q1, q2, q3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        conn = _mock_conn()
        conn.execute.return_value.fetchall.return_value = [
            MagicMock(lesson_id=lesson_a, quiz_id=q1),
            MagicMock(lesson_id=lesson_a, quiz_id=q2),
            MagicMock(lesson_id=lesson_b, quiz_id=q3),
        ]

        result = await get_lesson_quiz_ids(conn, [lesson_a, lesson_b])

        assert result == {lesson_a: [q1, q2], lesson_b: [q3]}
        assert "quizzes.tier = " in _sql(conn)

    @pytest.mark.asyncio
    async def test_no_lessons_skips_query(self):
        conn = _mock_conn()

        assert await get_lesson_quiz_ids(conn, []) == {}
        conn.execute.assert_not_called()
