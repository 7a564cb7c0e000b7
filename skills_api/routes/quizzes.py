"""Quiz API routes.

Endpoints:
- GET /api/quizzes/{quiz_id} - Serve a quiz (random subset, no correct answers)
- POST /api/quizzes/{quiz_id}/attempts - Submit answers for grading
- GET /api/quizzes/{quiz_id}/attempts - Attempts of the current account, newest first
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from skills_api.auth import get_current_account
from skills_core.context import Account
from skills_core.database import get_connection
from skills_core.enums import QuizTier
from skills_core.queries import list_attempts
from skills_core.quizzes import serve_quiz, submit_attempt
from skills_core.retry import with_read_retries

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


# --- Request/Response Models ---


class QuizHeader(BaseModel):
    quiz_id: UUID
    title: str
    tier: QuizTier
    passing_correct_count: int


class QuestionItem(BaseModel):
    question_id: UUID
    prompt: str
    options: Any = None
    position: int = 0


class ServedQuizResponse(BaseModel):
    quiz: QuizHeader
    questions: list[QuestionItem]


class AnswerItem(BaseModel):
    question_id: UUID
    answer: Any = None


class SubmitAttemptRequest(BaseModel):
    track_id: UUID | None = None
    answers: list[AnswerItem] = []


class SubmitAttemptResponse(BaseModel):
    attempt_id: int
    approved: bool
    score: float
    correct_count: int
    total: int
    track_completed: bool | None = None


class AttemptItem(BaseModel):
    attempt_id: int
    score: float
    passed: bool
    created_at: str  # ISO format


class AttemptListResponse(BaseModel):
    attempts: list[AttemptItem]


# --- Endpoints ---


@router.get("/{quiz_id}", response_model=ServedQuizResponse)
async def get_quiz_for_display(
    quiz_id: UUID,
    account: Account = Depends(get_current_account),
):
    """Serve the quiz questions to show; correct answers are never included."""
    return await serve_quiz(quiz_id)


@router.post("/{quiz_id}/attempts", response_model=SubmitAttemptResponse, status_code=201)
async def submit_quiz_attempt(
    quiz_id: UUID,
    body: SubmitAttemptRequest,
    request: Request,
    account: Account = Depends(get_current_account),
):
    """Grade a submission. Each submission creates a separate attempt record."""
    return await submit_attempt(
        account_id=account.account_id,
        quiz_id=quiz_id,
        answers=[item.model_dump(mode="json") for item in body.answers],
        track_id=body.track_id,
        refresh=getattr(request.app.state, "refresh", None),
    )


@router.get("/{quiz_id}/attempts", response_model=AttemptListResponse)
async def list_quiz_attempts(
    quiz_id: UUID,
    account: Account = Depends(get_current_account),
):
    async def _read() -> list[dict]:
        async with get_connection() as conn:
            return await list_attempts(
                conn, account_id=account.account_id, quiz_id=quiz_id
            )

    rows = await with_read_retries(_read, description="Quiz attempts")

    attempts = []
    for row in rows:
        created_at = row["created_at"]
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        attempts.append(
            AttemptItem(
                attempt_id=row["attempt_id"],
                score=row["score"],
                passed=row["passed"],
                created_at=created_at,
            )
        )
    return AttemptListResponse(attempts=attempts)
