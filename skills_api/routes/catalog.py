"""Catalog API routes.

Endpoints:
- GET /api/catalog/systems - Systems with their courses
- GET /api/catalog/courses/{course_id}/lessons - Lessons of a course with the account's progress
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from skills_api.auth import get_current_account
from skills_core.completion import lesson_state
from skills_core.context import Account
from skills_core.database import get_connection
from skills_core.enums import LessonState
from skills_core.queries import get_course_completions, list_course_lessons, list_systems
from skills_core.retry import with_read_retries

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


class CourseItem(BaseModel):
    course_id: UUID
    name: str
    description: str | None = None
    position: int = 0


class SystemItem(BaseModel):
    system_id: UUID
    name: str
    description: str | None = None
    position: int = 0
    courses: list[CourseItem]


class SystemListResponse(BaseModel):
    systems: list[SystemItem]


class LessonItem(BaseModel):
    lesson_id: UUID
    title: str
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    position: int
    required_watch_seconds: int
    watched_seconds: int = 0
    state: LessonState


class LessonListResponse(BaseModel):
    lessons: list[LessonItem]


@router.get("/systems", response_model=SystemListResponse)
async def get_systems(account: Account = Depends(get_current_account)):
    async def _read() -> list[dict]:
        async with get_connection() as conn:
            return await list_systems(conn)

    return {"systems": await with_read_retries(_read, description="Catalog")}


@router.get("/courses/{course_id}/lessons", response_model=LessonListResponse)
async def get_course_lessons(
    course_id: UUID,
    account: Account = Depends(get_current_account),
):
    """List a course's lessons in order, each with the account's lesson state."""

    async def _read() -> tuple[list[dict], list[dict]]:
        async with get_connection() as conn:
            lesson_rows = await list_course_lessons(conn, course_id)
            completions = await get_course_completions(
                conn, account_id=account.account_id, course_id=course_id
            )
        return lesson_rows, completions

    lesson_rows, completions = await with_read_retries(_read, description="Course lessons")
    records = {record["lesson_id"]: record for record in completions}

    lessons = []
    for row in lesson_rows:
        record = records.get(row["lesson_id"])
        lessons.append(
            LessonItem(
                lesson_id=row["lesson_id"],
                title=row["title"],
                description=row.get("description"),
                video_url=row.get("video_url"),
                thumbnail_url=row.get("thumbnail_url"),
                position=row["position"],
                required_watch_seconds=row["required_watch_seconds"],
                watched_seconds=record["watched_seconds"] if record else 0,
                state=lesson_state(record),
            )
        )
    return LessonListResponse(lessons=lessons)
