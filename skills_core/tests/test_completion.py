"""Tests for the lesson completion gate."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from skills_core.completion import can_complete, lesson_state, record_progress
from skills_core.enums import LessonState
from skills_core.errors import (
    GateNotSatisfied,
    LessonNotFound,
    NotAuthenticated,
    PersistenceFailure,
)
from skills_core.refresh import ProgressRefresh


@asynccontextmanager
async def mock_db_connection():
    yield MagicMock()


def _lesson(lesson_id, required=120) -> dict:
    return {"lesson_id": lesson_id, "required_watch_seconds": required}


def _stored(lesson_id, account_id, watched, is_complete) -> dict:
    return {
        "lesson_id": lesson_id,
        "account_id": account_id,
        "watched_seconds": watched,
        "is_complete": is_complete,
    }


def patch_db(lesson, existing, stored=None):
    """Patch the database seams used by record_progress."""
    return (
        patch(
            "skills_core.completion.get_transaction",
            side_effect=lambda: mock_db_connection(),
        ),
        patch("skills_core.completion.get_lesson", AsyncMock(return_value=lesson)),
        patch("skills_core.completion.get_completion", AsyncMock(return_value=existing)),
        patch(
            "skills_core.completion.upsert_completion", AsyncMock(return_value=stored)
        ),
    )


class TestCanComplete:
    def test_false_before_required_time(self):
        assert can_complete(120, 90) is False

    def test_true_at_required_time(self):
        assert can_complete(120, 120) is True

    def test_true_when_already_complete(self):
        assert can_complete(120, 0, already_complete=True) is True

    @pytest.mark.parametrize("required", [0, 1, 60, 120])
    @pytest.mark.parametrize("already_complete", [False, True])
    def test_monotonic_in_watched_seconds(self, required, already_complete):
        watched_range = range(0, 2 * required + 3)
        for t in watched_range:
            if not can_complete(required, t, already_complete):
                continue
            for later in watched_range:
                if later > t:
                    assert can_complete(required, later, already_complete), (t, later)

    def test_never_passes_before_required_time(self):
        assert not any(can_complete(120, t) for t in range(120))


class TestLessonState:
    def test_no_record_is_not_started(self):
        assert lesson_state(None) == LessonState.not_started

    def test_incomplete_record_is_in_progress(self):
        assert lesson_state({"is_complete": False}) == LessonState.in_progress

    def test_complete_record_is_completed(self):
        assert lesson_state({"is_complete": True}) == LessonState.completed


class TestRecordProgress:
    @pytest.mark.asyncio
    async def test_gate_rejects_early_completion(self, account_id, lesson_id):
        """90s watched of 120s required: GateNotSatisfied and nothing written."""
        db, get_lesson, get_completion, upsert = patch_db(_lesson(lesson_id), None)
        with db, get_lesson, get_completion, upsert as mock_upsert:
            with pytest.raises(GateNotSatisfied):
                await record_progress(
                    account_id=account_id,
                    lesson_id=lesson_id,
                    watched_seconds=90,
                    mark_complete=True,
                )

        mock_upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_completes_after_required_time(self, account_id, lesson_id):
        stored = _stored(lesson_id, account_id, 130, True)
        db, get_lesson, get_completion, upsert = patch_db(_lesson(lesson_id), None, stored)
        refresh = ProgressRefresh()

        with db, get_lesson, get_completion, upsert as mock_upsert:
            record = await record_progress(
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=130,
                mark_complete=True,
                refresh=refresh,
            )

        assert record["is_complete"] is True
        call_kwargs = mock_upsert.call_args[1]
        assert call_kwargs["is_complete"] is True
        assert call_kwargs["watched_seconds"] == 130
        assert refresh.generation == 1

    @pytest.mark.asyncio
    async def test_progress_without_completion_is_stored(self, account_id, lesson_id):
        stored = _stored(lesson_id, account_id, 30, False)
        db, get_lesson, get_completion, upsert = patch_db(_lesson(lesson_id), None, stored)

        with db, get_lesson, get_completion, upsert as mock_upsert:
            await record_progress(
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=30,
                mark_complete=False,
            )

        assert mock_upsert.call_args[1]["is_complete"] is False

    @pytest.mark.asyncio
    async def test_revert_of_completed_lesson_is_ignored(self, account_id, lesson_id):
        """mark_complete=False on a completed record keeps it completed."""
        existing = _stored(lesson_id, account_id, 150, True)
        stored = _stored(lesson_id, account_id, 10, True)
        db, get_lesson, get_completion, upsert = patch_db(
            _lesson(lesson_id), existing, stored
        )

        with db, get_lesson, get_completion, upsert as mock_upsert:
            record = await record_progress(
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=10,
                mark_complete=False,
            )

        call_kwargs = mock_upsert.call_args[1]
        assert call_kwargs["is_complete"] is True
        assert call_kwargs["watched_seconds"] == 10
        assert record["is_complete"] is True

    @pytest.mark.asyncio
    async def test_recompleting_does_not_need_watch_time(self, account_id, lesson_id):
        existing = _stored(lesson_id, account_id, 150, True)
        stored = _stored(lesson_id, account_id, 5, True)
        db, get_lesson, get_completion, upsert = patch_db(
            _lesson(lesson_id), existing, stored
        )

        with db, get_lesson, get_completion, upsert as mock_upsert:
            await record_progress(
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=5,
                mark_complete=True,
            )

        mock_upsert.assert_called_once()

    @pytest.mark.asyncio
    async def test_requires_account(self, lesson_id):
        with pytest.raises(NotAuthenticated):
            await record_progress(
                account_id=None,
                lesson_id=lesson_id,
                watched_seconds=0,
                mark_complete=False,
            )

    @pytest.mark.asyncio
    async def test_rejects_negative_watch_time(self, account_id, lesson_id):
        with pytest.raises(ValueError):
            await record_progress(
                account_id=account_id,
                lesson_id=lesson_id,
                watched_seconds=-1,
                mark_complete=False,
            )

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, account_id, lesson_id):
        db, get_lesson, get_completion, upsert = patch_db(None, None)
        with db, get_lesson, get_completion, upsert:
            with pytest.raises(LessonNotFound):
                await record_progress(
                    account_id=account_id,
                    lesson_id=lesson_id,
                    watched_seconds=200,
                    mark_complete=True,
                )

    @pytest.mark.asyncio
    async def test_write_failure_is_persistence_failure(self, account_id, lesson_id):
        """Storage errors surface as PersistenceFailure and do not bump refresh."""
        db, get_lesson, get_completion, _ = patch_db(_lesson(lesson_id), None)
        failing_upsert = patch(
            "skills_core.completion.upsert_completion",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down"))),
        )
        refresh = ProgressRefresh()

        with db, get_lesson, get_completion, failing_upsert, patch(
            "skills_core.completion.sentry_sdk"
        ) as mock_sentry:
            with pytest.raises(PersistenceFailure):
                await record_progress(
                    account_id=account_id,
                    lesson_id=lesson_id,
                    watched_seconds=130,
                    mark_complete=True,
                    refresh=refresh,
                )

        mock_sentry.capture_exception.assert_called_once()
        assert refresh.generation == 0
