"""Progress tracking API routes.

Endpoints:
- POST /api/progress/lessons/{lesson_id} - Save watch progress, optionally completing the lesson
- GET /api/progress/courses - Progress overview across every course
- GET /api/progress/courses/{course_id} - Progress summary for one course
- GET /api/progress/accounts/{account_id}/courses/{course_id} - Another account's course progress (admin)
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from skills_api.auth import get_current_account, require_self_or_admin
from skills_core.completion import record_progress
from skills_core.context import Account
from skills_core.enums import LessonState
from skills_core.progress import course_progress, progress_overview

router = APIRouter(prefix="/api/progress", tags=["progress"])


class LessonProgressRequest(BaseModel):
    watched_seconds: int = Field(0, ge=0)
    complete: bool = False


class CompletionRecordResponse(BaseModel):
    lesson_id: UUID
    account_id: UUID
    watched_seconds: int
    is_complete: bool
    last_viewed_at: datetime | None = None
    completed_at: datetime | None = None


class LessonProgressResponse(BaseModel):
    success: bool
    message: str
    record: CompletionRecordResponse


class CourseProgressResponse(BaseModel):
    course_id: UUID
    total: int
    completed: int
    percent: int
    remaining: int
    status: LessonState


class OverallProgress(BaseModel):
    total: int
    completed: int
    percent: int
    remaining: int


class ProgressOverviewResponse(BaseModel):
    courses: list[CourseProgressResponse]
    overall: OverallProgress


@router.post("/lessons/{lesson_id}", response_model=LessonProgressResponse)
async def save_lesson_progress(
    lesson_id: UUID,
    body: LessonProgressRequest,
    request: Request,
    account: Account = Depends(get_current_account),
):
    """Save watched time for a lesson and, if requested, mark it complete.

    Returns 409 when completion is requested before the required watch time.
    """
    record = await record_progress(
        account_id=account.account_id,
        lesson_id=lesson_id,
        watched_seconds=body.watched_seconds,
        mark_complete=body.complete,
        refresh=getattr(request.app.state, "refresh", None),
    )

    if record["is_complete"]:
        message = "Aula concluída"
    else:
        message = "Progresso salvo"

    return LessonProgressResponse(success=True, message=message, record=record)


@router.get("/courses", response_model=ProgressOverviewResponse)
async def get_progress_overview(account: Account = Depends(get_current_account)):
    return await progress_overview(account.account_id)


@router.get("/courses/{course_id}", response_model=CourseProgressResponse)
async def get_course_progress(
    course_id: UUID,
    account: Account = Depends(get_current_account),
):
    """Get completed/total lesson counts and percent for a course."""
    return await course_progress(account.account_id, course_id)


@router.get(
    "/accounts/{account_id}/courses/{course_id}",
    response_model=CourseProgressResponse,
)
async def get_account_course_progress(
    account_id: UUID,
    course_id: UUID,
    account: Account = Depends(get_current_account),
):
    require_self_or_admin(account, account_id)
    return await course_progress(account_id, course_id)
