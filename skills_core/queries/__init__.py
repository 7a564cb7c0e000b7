"""Query layer for database operations using SQLAlchemy Core."""

from .accounts import touch_session
from .attempts import get_passed_quiz_ids, insert_attempt, list_attempts
from .catalog import (
    get_lesson,
    get_lesson_ids,
    get_lesson_ids_by_course,
    get_lesson_quiz_ids,
    get_quiz,
    get_quiz_questions,
    get_track,
    get_track_lessons,
    get_track_tier_quizzes,
    list_course_lessons,
    list_systems,
)
from .completions import (
    get_account_completions,
    get_completion,
    get_course_completions,
    upsert_completion,
)
from .tracks import is_track_completed, mark_track_completed

__all__ = [
    # Accounts
    "touch_session",
    # Attempts
    "insert_attempt",
    "get_passed_quiz_ids",
    "list_attempts",
    # Catalog
    "list_systems",
    "get_lesson",
    "list_course_lessons",
    "get_lesson_ids",
    "get_lesson_ids_by_course",
    "get_track",
    "get_track_lessons",
    "get_quiz",
    "get_quiz_questions",
    "get_lesson_quiz_ids",
    "get_track_tier_quizzes",
    # Completions
    "get_course_completions",
    "get_account_completions",
    "get_completion",
    "upsert_completion",
    # Tracks
    "is_track_completed",
    "mark_track_completed",
]
