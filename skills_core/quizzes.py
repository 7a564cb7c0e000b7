"""Quiz serving, grading and attempt submission.

Quizzes come in three tiers: 'aula' quizzes belong to a lesson, while
'bronze' and 'prata' quizzes certify a whole track. Every submission is
stored as a new attempt; nothing is overwritten. Passing the last
outstanding lesson quiz of a track marks the track completed, which is what
unlocks the bronze certification quiz.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Sequence
from uuid import UUID

import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError

from .database import get_connection, get_transaction
from .enums import QuizTier
from .errors import NotAuthenticated, PersistenceFailure, QuizNotFound
from .queries import (
    get_lesson_quiz_ids,
    get_passed_quiz_ids,
    get_quiz,
    get_quiz_questions,
    get_track_lessons,
    insert_attempt,
    mark_track_completed,
)
from .refresh import ProgressRefresh
from .retry import with_read_retries

logger = logging.getLogger(__name__)


@dataclass
class GradeResult:
    score: float
    correct_count: int
    total: int
    passed: bool
    answers: list[dict] = field(default_factory=list)


def answers_match(given: Any, expected: Any) -> bool:
    """Structural deep equality over JSON values.

    Stricter than ==: True does not match 1 and 1 does not match "1".
    Object key order does not matter, list order does.
    """
    if isinstance(expected, bool) or isinstance(given, bool):
        return type(given) is type(expected) and given == expected
    if isinstance(expected, dict):
        if not isinstance(given, dict) or given.keys() != expected.keys():
            return False
        return all(answers_match(given[key], expected[key]) for key in expected)
    if isinstance(expected, (list, tuple)):
        if not isinstance(given, (list, tuple)) or len(given) != len(expected):
            return False
        return all(answers_match(g, e) for g, e in zip(given, expected))
    if isinstance(expected, (int, float)):
        return isinstance(given, (int, float)) and given == expected
    return type(given) is type(expected) and given == expected


def _answers_by_question(answers: Sequence[dict]) -> dict[str, Any]:
    """Index submitted answers by question id (the last answer for an id wins)."""
    return {str(a["question_id"]): a.get("answer") for a in answers if "question_id" in a}


def grade(quiz: dict, questions: Sequence[dict], answers: Sequence[dict]) -> GradeResult:
    """Score a submission against the questions being graded.

    Args:
        quiz: Quiz row (needs passing_correct_count)
        questions: The graded questions, each with question_id and correct_answer
        answers: Submitted answers: [{"question_id": ..., "answer": ...}]

    Questions without a submitted answer count as incorrect; answers for
    questions outside the graded set are ignored.
    """
    submitted = _answers_by_question(answers)

    graded_answers = []
    correct_count = 0
    for question in questions:
        question_id = str(question["question_id"])
        answered = question_id in submitted
        given = submitted.get(question_id)
        is_correct = answered and answers_match(given, question["correct_answer"])
        if is_correct:
            correct_count += 1
        graded_answers.append(
            {
                "question_id": question_id,
                "answer_given": given,
                "is_correct": is_correct,
            }
        )

    total = len(questions)
    score = (correct_count / total) * 100 if total else 0.0

    return GradeResult(
        score=score,
        correct_count=correct_count,
        total=total,
        passed=correct_count >= quiz["passing_correct_count"],
        answers=graded_answers,
    )


def select_questions(
    all_questions: Sequence[dict], count: int | None, rng: random.Random | None = None
) -> list[dict]:
    """Uniformly shuffle the questions and keep the first `count` (all if unset)."""
    shuffled = list(all_questions)
    (rng or random).shuffle(shuffled)
    if count is None or count >= len(shuffled):
        return shuffled
    return shuffled[: max(count, 0)]


def strip_answers(question: dict) -> dict:
    """Question payload safe to send to the learner."""
    return {key: value for key, value in question.items() if key != "correct_answer"}


def questions_to_grade(quiz: dict, questions: Sequence[dict], answers: Sequence[dict]) -> list[dict]:
    """Pick the question set a submission is graded against.

    Without questions_to_show every question is graded. With it, the learner
    only saw a random subset, so the answered questions are graded, topped up
    with unanswered ones (which score as incorrect) until the subset size is
    reached.
    """
    limit = quiz.get("questions_to_show")
    if not limit or limit >= len(questions):
        return list(questions)

    submitted = _answers_by_question(answers)
    answered = [q for q in questions if str(q["question_id"]) in submitted]
    unanswered = [q for q in questions if str(q["question_id"]) not in submitted]
    graded = answered[:limit]
    if len(graded) < limit:
        graded.extend(unanswered[: limit - len(graded)])
    return graded


async def serve_quiz(quiz_id: UUID, rng: random.Random | None = None) -> dict:
    """Load a quiz and the randomized questions to show, without correct answers."""

    async def _read() -> tuple[dict | None, list[dict]]:
        async with get_connection() as conn:
            quiz = await get_quiz(conn, quiz_id)
            if quiz is None:
                return None, []
            return quiz, await get_quiz_questions(conn, quiz_id)

    quiz, questions = await with_read_retries(_read, description="Quiz")
    if quiz is None:
        raise QuizNotFound(f"Quiz {quiz_id} not found")

    selected = select_questions(questions, quiz.get("questions_to_show"), rng=rng)
    return {
        "quiz": {
            "quiz_id": quiz["quiz_id"],
            "title": quiz["title"],
            "tier": quiz["tier"],
            "passing_correct_count": quiz["passing_correct_count"],
        },
        "questions": [strip_answers(q) for q in selected],
    }


async def check_track_completion(conn, *, account_id: UUID, track_id: UUID) -> bool:
    """Mark the track completed if every lesson quiz in it has a passed attempt.

    Returns True when the track is (now) completed.
    """
    track_lesson_rows = await get_track_lessons(conn, track_id)
    if not track_lesson_rows:
        return False

    lesson_quiz_ids = await get_lesson_quiz_ids(
        conn, [row["lesson_id"] for row in track_lesson_rows]
    )
    if not lesson_quiz_ids:
        return False

    quiz_ids = [q for ids in lesson_quiz_ids.values() for q in ids]
    passed = await get_passed_quiz_ids(conn, account_id=account_id, quiz_ids=quiz_ids)
    if not set(quiz_ids) <= passed:
        return False

    await mark_track_completed(conn, account_id=account_id, track_id=track_id)
    logger.info("Track %s completed by account %s", track_id, account_id)
    return True


async def submit_attempt(
    *,
    account_id: UUID | None,
    quiz_id: UUID,
    answers: Sequence[dict],
    track_id: UUID | None = None,
    refresh: ProgressRefresh | None = None,
) -> dict:
    """Grade a submission, append it as an attempt and re-check track completion.

    Returns:
        Dict with attempt_id, approved, score, correct_count, total and
        track_completed (None when no track check ran)

    Raises:
        NotAuthenticated: account_id is missing
        QuizNotFound: the quiz does not exist
        PersistenceFailure: the attempt could not be stored
    """
    if not account_id:
        raise NotAuthenticated("An account is required to submit a quiz")

    try:
        async with get_transaction() as conn:
            quiz = await get_quiz(conn, quiz_id)
            if quiz is None:
                raise QuizNotFound(f"Quiz {quiz_id} not found")
            questions = await get_quiz_questions(conn, quiz_id)

            result = grade(quiz, questions_to_grade(quiz, questions, answers), answers)

            attempt = await insert_attempt(
                conn,
                account_id=account_id,
                quiz_id=quiz_id,
                track_id=track_id,
                score=result.score,
                passed=result.passed,
                answers=result.answers,
            )

            track_completed = None
            if result.passed and QuizTier(quiz["tier"]) == QuizTier.aula and track_id:
                track_completed = await check_track_completion(
                    conn, account_id=account_id, track_id=track_id
                )
    except SQLAlchemyError as e:
        logger.error("Failed to submit quiz %s for account %s: %s", quiz_id, account_id, e)
        sentry_sdk.capture_exception(e)
        raise PersistenceFailure("Could not save quiz attempt") from e

    logger.info(
        "Quiz %s attempt by %s: %d/%d correct, passed=%s",
        quiz_id,
        account_id,
        result.correct_count,
        result.total,
        result.passed,
    )

    if refresh is not None and track_completed:
        refresh.bump()

    return {
        "attempt_id": attempt["attempt_id"],
        "approved": result.passed,
        "score": result.score,
        "correct_count": result.correct_count,
        "total": result.total,
        "track_completed": track_completed,
    }
