"""Queries for the static catalog: systems, courses, lessons, tracks and quizzes."""

from typing import Any
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import QuizTier
from ..tables import courses, lessons, quiz_questions, quizzes, systems, track_lessons, tracks


async def list_systems(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Get all systems with their courses, ordered by position."""
    systems_result = await conn.execute(
        select(systems).order_by(systems.c.position, systems.c.name)
    )
    system_rows = [dict(row._mapping) for row in systems_result.fetchall()]

    courses_result = await conn.execute(
        select(courses).order_by(courses.c.position, courses.c.name)
    )
    by_system: dict[UUID, list[dict]] = {}
    for row in courses_result.fetchall():
        by_system.setdefault(row.system_id, []).append(dict(row._mapping))

    for system in system_rows:
        system["courses"] = by_system.get(system["system_id"], [])
    return system_rows


async def get_lesson(conn: AsyncConnection, lesson_id: UUID) -> dict | None:
    result = await conn.execute(select(lessons).where(lessons.c.lesson_id == lesson_id))
    row = result.fetchone()
    return dict(row._mapping) if row else None


async def list_course_lessons(conn: AsyncConnection, course_id: UUID) -> list[dict]:
    """Get the lessons of a course in display order."""
    result = await conn.execute(
        select(lessons)
        .where(lessons.c.course_id == course_id)
        .order_by(lessons.c.position)
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def get_lesson_ids(conn: AsyncConnection, course_id: UUID) -> list[UUID]:
    """Get ordered lesson ids for a course. Unknown course yields []."""
    result = await conn.execute(
        select(lessons.c.lesson_id)
        .where(lessons.c.course_id == course_id)
        .order_by(lessons.c.position)
    )
    return [row.lesson_id for row in result.fetchall()]


async def get_lesson_ids_by_course(conn: AsyncConnection) -> dict[UUID, list[UUID]]:
    """Get ordered lesson ids for every course, keyed by course_id."""
    result = await conn.execute(
        select(lessons.c.course_id, lessons.c.lesson_id).order_by(
            lessons.c.course_id, lessons.c.position
        )
    )
    by_course: dict[UUID, list[UUID]] = {}
    for row in result.fetchall():
        by_course.setdefault(row.course_id, []).append(row.lesson_id)
    return by_course


async def get_track(conn: AsyncConnection, track_id: UUID) -> dict | None:
    result = await conn.execute(select(tracks).where(tracks.c.track_id == track_id))
    row = result.fetchone()
    return dict(row._mapping) if row else None


async def get_track_lessons(conn: AsyncConnection, track_id: UUID) -> list[dict]:
    """Get the lessons of a track ordered by their position in the track."""
    result = await conn.execute(
        select(
            track_lessons.c.position,
            lessons.c.lesson_id,
            lessons.c.title,
            lessons.c.description,
            lessons.c.video_url,
            lessons.c.thumbnail_url,
        )
        .join(lessons, lessons.c.lesson_id == track_lessons.c.lesson_id)
        .where(track_lessons.c.track_id == track_id)
        .order_by(track_lessons.c.position)
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def get_quiz(conn: AsyncConnection, quiz_id: UUID) -> dict | None:
    result = await conn.execute(select(quizzes).where(quizzes.c.quiz_id == quiz_id))
    row = result.fetchone()
    return dict(row._mapping) if row else None


async def get_quiz_questions(conn: AsyncConnection, quiz_id: UUID) -> list[dict]:
    """Get every question of a quiz, correct answers included."""
    result = await conn.execute(
        select(quiz_questions)
        .where(quiz_questions.c.quiz_id == quiz_id)
        .order_by(quiz_questions.c.position)
    )
    return [dict(row._mapping) for row in result.fetchall()]


async def get_lesson_quiz_ids(
    conn: AsyncConnection, lesson_ids: list[UUID]
) -> dict[UUID, list[UUID]]:
    """Map lesson_id -> ids of its lesson-scoped ('aula') quizzes.

    Lessons without a quiz are absent.
    """
    if not lesson_ids:
        return {}

    result = await conn.execute(
        select(quizzes.c.lesson_id, quizzes.c.quiz_id)
        .where(
            and_(
                quizzes.c.lesson_id.in_(lesson_ids),
                quizzes.c.tier == QuizTier.aula,
            )
        )
        .order_by(quizzes.c.lesson_id, quizzes.c.quiz_id)
    )
    by_lesson: dict[UUID, list[UUID]] = {}
    for row in result.fetchall():
        by_lesson.setdefault(row.lesson_id, []).append(row.quiz_id)
    return by_lesson


async def get_track_tier_quizzes(
    conn: AsyncConnection, track_id: UUID
) -> dict[QuizTier, UUID]:
    """Map certification tier -> quiz_id for a track. Missing tiers are absent."""
    result = await conn.execute(
        select(quizzes.c.tier, quizzes.c.quiz_id).where(
            and_(
                quizzes.c.track_id == track_id,
                quizzes.c.tier.in_([QuizTier.bronze, QuizTier.prata]),
            )
        )
    )
    tiers: dict[QuizTier, UUID] = {}
    for row in result.fetchall():
        tiers.setdefault(QuizTier(row.tier), row.quiz_id)
    return tiers
