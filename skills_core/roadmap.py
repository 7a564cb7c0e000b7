"""Track roadmap: the lessons of a track with their unlock status.

A lesson counts as completed once each of its lesson quizzes has a passed
attempt.
Lessons unlock one at a time in track order.
"""

from typing import Collection, Mapping, Sequence
from uuid import UUID

from .database import get_connection
from .enums import RoadmapStatus
from .errors import NotAuthenticated
from .queries import get_lesson_quiz_ids, get_passed_quiz_ids, get_track, get_track_lessons
from .retry import with_read_retries


def build_roadmap(
    track_lessons: Sequence[dict],
    lesson_quiz_ids: Mapping[UUID, Sequence[UUID]],
    passed_quiz_ids: Collection[UUID],
) -> list[dict]:
    """
    Attach a status to each lesson of a track.

    Args:
        track_lessons: Lesson rows in track order (each with lesson_id)
        lesson_quiz_ids: lesson_id -> ids of the lesson's quizzes
        passed_quiz_ids: Quiz ids the account has passed

    Returns:
        Copies of the lesson rows with "status", "quiz_ids" and "quiz_id"
        (the first quiz, or None) added. A lesson is completed only once
        every one of its quizzes is passed.
    """
    roadmap = []
    previous_completed = True  # the first lesson is always open
    for lesson in track_lessons:
        quiz_ids = list(lesson_quiz_ids.get(lesson["lesson_id"], ()))
        completed = bool(quiz_ids) and all(q in passed_quiz_ids for q in quiz_ids)

        if completed:
            status = RoadmapStatus.completed
        elif previous_completed:
            status = RoadmapStatus.pending
        else:
            status = RoadmapStatus.locked

        roadmap.append(
            {
                **lesson,
                "quiz_id": quiz_ids[0] if quiz_ids else None,
                "quiz_ids": quiz_ids,
                "status": status,
            }
        )
        previous_completed = completed
    return roadmap


async def get_track_roadmap(account_id: UUID, track_id: UUID) -> dict | None:
    """Get the track header and its roadmap for an account (None if no such track)."""
    if not account_id:
        raise NotAuthenticated("An account is required to view a track roadmap")

    async def _read() -> dict | None:
        async with get_connection() as conn:
            track = await get_track(conn, track_id)
            if track is None:
                return None
            lesson_rows = await get_track_lessons(conn, track_id)
            lesson_quiz_ids = await get_lesson_quiz_ids(
                conn, [row["lesson_id"] for row in lesson_rows]
            )
            quiz_ids = [q for ids in lesson_quiz_ids.values() for q in ids]
            passed = await get_passed_quiz_ids(
                conn, account_id=account_id, quiz_ids=quiz_ids
            )

        return {
            "track": track,
            "lessons": build_roadmap(lesson_rows, lesson_quiz_ids, passed),
        }

    return await with_read_retries(_read, description="Track roadmap")
