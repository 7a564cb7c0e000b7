"""Tests for quiz grading, serving and submission."""

import random
import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from skills_core.enums import QuizTier
from skills_core.errors import NotAuthenticated, PersistenceFailure, QuizNotFound
from skills_core.quizzes import (
    answers_match,
    check_track_completion,
    grade,
    questions_to_grade,
    select_questions,
    serve_quiz,
    strip_answers,
    submit_attempt,
)


@asynccontextmanager
async def mock_db_connection():
    yield MagicMock()


def _question(correct, position=0) -> dict:
    return {
        "question_id": uuid.uuid4(),
        "prompt": f"Question {position}",
        "options": ["a", "b", "c"],
        "correct_answer": correct,
        "position": position,
    }


def _quiz(passing=3, tier=QuizTier.aula, questions_to_show=None) -> dict:
    return {
        "quiz_id": uuid.uuid4(),
        "title": "Quiz",
        "tier": tier,
        "passing_correct_count": passing,
        "questions_to_show": questions_to_show,
    }


def _answer(question, answer) -> dict:
    return {"question_id": str(question["question_id"]), "answer": answer}


class TestAnswersMatch:
    def test_equal_scalars(self):
        assert answers_match("b", "b")
        assert answers_match(2, 2)

    def test_bool_does_not_match_int(self):
        assert not answers_match(1, True)
        assert not answers_match(True, 1)

    def test_string_does_not_match_number(self):
        assert not answers_match("1", 1)

    def test_int_matches_equal_float(self):
        assert answers_match(1, 1.0)

    def test_lists_compare_in_order(self):
        assert answers_match(["a", "b"], ["a", "b"])
        assert not answers_match(["b", "a"], ["a", "b"])

    def test_objects_ignore_key_order(self):
        assert answers_match({"x": 1, "y": [1, 2]}, {"y": [1, 2], "x": 1})

    def test_objects_with_different_keys(self):
        assert not answers_match({"x": 1}, {"x": 1, "y": 2})

    def test_none(self):
        assert answers_match(None, None)
        assert not answers_match(None, "a")


class TestGrade:
    def test_three_of_five_passes_with_threshold_three(self):
        """5 questions, passing_correct_count=3, 3 correct: score 60, passed."""
        questions = [_question(c, i) for i, c in enumerate(["a", "b", "c", "a", "b"])]
        answers = [
            _answer(questions[0], "a"),
            _answer(questions[1], "b"),
            _answer(questions[2], "c"),
            _answer(questions[3], "c"),
            _answer(questions[4], "c"),
        ]

        result = grade(_quiz(passing=3), questions, answers)

        assert result.score == 60
        assert result.correct_count == 3
        assert result.passed is True

    def test_below_threshold_fails(self):
        questions = [_question("a", i) for i in range(5)]
        answers = [_answer(questions[0], "a"), _answer(questions[1], "a")]

        result = grade(_quiz(passing=3), questions, answers)

        assert result.score == 40
        assert result.passed is False

    def test_missing_answers_are_incorrect(self):
        questions = [_question("a"), _question("b")]

        result = grade(_quiz(passing=1), questions, [_answer(questions[0], "a")])

        assert result.correct_count == 1
        assert result.answers[1]["is_correct"] is False
        assert result.answers[1]["answer_given"] is None

    def test_extra_answers_are_ignored(self):
        questions = [_question("a")]
        answers = [
            _answer(questions[0], "a"),
            {"question_id": str(uuid.uuid4()), "answer": "a"},
        ]

        result = grade(_quiz(passing=1), questions, answers)

        assert result.correct_count == 1
        assert result.score == 100
        assert len(result.answers) == 1

    def test_structured_answers(self):
        questions = [_question({"order": [3, 1, 2]})]
        answers = [_answer(questions[0], {"order": [3, 1, 2]})]

        assert grade(_quiz(passing=1), questions, answers).passed is True

    def test_no_questions_scores_zero(self):
        result = grade(_quiz(passing=0), [], [])

        assert result.score == 0
        assert result.passed is True

    def test_score_matches_correct_fraction(self):
        """score == correct_count / total * 100 for every correct count."""
        questions = [_question("a", i) for i in range(4)]
        for correct in range(5):
            answers = [_answer(q, "a") for q in questions[:correct]]
            result = grade(_quiz(passing=2), questions, answers)
            assert result.score == correct / 4 * 100
            assert result.passed == (correct >= 2)


class TestSelectQuestions:
    def test_prefix_of_shuffle(self):
        questions = [_question("a", i) for i in range(10)]

        selected = select_questions(questions, 4, rng=random.Random(7))

        assert len(selected) == 4
        assert len({q["question_id"] for q in selected}) == 4
        assert all(q in questions for q in selected)

    def test_unset_count_returns_all(self):
        questions = [_question("a", i) for i in range(3)]
        assert len(select_questions(questions, None)) == 3

    def test_count_above_available_returns_all(self):
        questions = [_question("a", i) for i in range(3)]
        assert len(select_questions(questions, 10)) == 3

    def test_does_not_mutate_input(self):
        questions = [_question("a", i) for i in range(5)]
        original = list(questions)

        select_questions(questions, 2, rng=random.Random(1))

        assert questions == original


class TestQuestionsToGrade:
    def test_all_questions_without_limit(self):
        questions = [_question("a", i) for i in range(5)]
        assert questions_to_grade(_quiz(), questions, []) == questions

    def test_answered_subset_is_graded(self):
        questions = [_question("a", i) for i in range(5)]
        answers = [_answer(questions[3], "a"), _answer(questions[1], "a")]

        graded = questions_to_grade(_quiz(questions_to_show=2), questions, answers)

        assert [q["question_id"] for q in graded] == [
            questions[1]["question_id"],
            questions[3]["question_id"],
        ]

    def test_unanswered_questions_fill_the_subset(self):
        questions = [_question("a", i) for i in range(5)]
        answers = [_answer(questions[4], "a")]

        graded = questions_to_grade(_quiz(questions_to_show=3), questions, answers)

        assert len(graded) == 3
        assert questions[4] in graded


class TestStripAnswers:
    def test_removes_correct_answer(self):
        stripped = strip_answers(_question("secret"))

        assert "correct_answer" not in stripped
        assert stripped["prompt"] == "Question 0"


class TestServeQuiz:
    @pytest.mark.asyncio
    async def test_serves_subset_without_answers(self):
        quiz = _quiz(questions_to_show=2)
        questions = [_question("a", i) for i in range(5)]

        with (
            patch(
                "skills_core.quizzes.get_connection",
                side_effect=lambda: mock_db_connection(),
            ),
            patch("skills_core.quizzes.get_quiz", AsyncMock(return_value=quiz)),
            patch(
                "skills_core.quizzes.get_quiz_questions",
                AsyncMock(return_value=questions),
            ),
        ):
            served = await serve_quiz(quiz["quiz_id"])

        assert served["quiz"]["quiz_id"] == quiz["quiz_id"]
        assert len(served["questions"]) == 2
        assert all("correct_answer" not in q for q in served["questions"])

    @pytest.mark.asyncio
    async def test_unknown_quiz(self):
        with (
            patch(
                "skills_core.quizzes.get_connection",
                side_effect=lambda: mock_db_connection(),
            ),
            patch("skills_core.quizzes.get_quiz", AsyncMock(return_value=None)),
        ):
            with pytest.raises(QuizNotFound):
                await serve_quiz(uuid.uuid4())


class TestCheckTrackCompletion:
    @pytest.mark.asyncio
    async def test_marks_completed_when_every_lesson_quiz_passed(self, account_id, track_id):
        lesson_ids = [uuid.uuid4(), uuid.uuid4()]
        quiz_ids = {lid: [uuid.uuid4()] for lid in lesson_ids}

        with (
            patch(
                "skills_core.quizzes.get_track_lessons",
                AsyncMock(return_value=[{"lesson_id": lid} for lid in lesson_ids]),
            ),
            patch(
                "skills_core.quizzes.get_lesson_quiz_ids",
                AsyncMock(return_value=quiz_ids),
            ),
            patch(
                "skills_core.quizzes.get_passed_quiz_ids",
                AsyncMock(return_value={q for ids in quiz_ids.values() for q in ids}),
            ),
            patch(
                "skills_core.quizzes.mark_track_completed", AsyncMock()
            ) as mock_mark,
        ):
            completed = await check_track_completion(
                MagicMock(), account_id=account_id, track_id=track_id
            )

        assert completed is True
        mock_mark.assert_awaited_once()
        assert mock_mark.call_args[1] == {"account_id": account_id, "track_id": track_id}

    @pytest.mark.asyncio
    async def test_outstanding_quiz_keeps_track_open(self, account_id, track_id):
        lesson_ids = [uuid.uuid4(), uuid.uuid4()]
        quiz_ids = {lid: [uuid.uuid4()] for lid in lesson_ids}

        with (
            patch(
                "skills_core.quizzes.get_track_lessons",
                AsyncMock(return_value=[{"lesson_id": lid} for lid in lesson_ids]),
            ),
            patch(
                "skills_core.quizzes.get_lesson_quiz_ids",
                AsyncMock(return_value=quiz_ids),
            ),
            patch(
                "skills_core.quizzes.get_passed_quiz_ids",
                AsyncMock(return_value=set(quiz_ids[lesson_ids[0]])),
            ),
            patch(
                "skills_core.quizzes.mark_track_completed", AsyncMock()
            ) as mock_mark,
        ):
            completed = await check_track_completion(
                MagicMock(), account_id=account_id, track_id=track_id
            )

        assert completed is False
        mock_mark.assert_not_called()

    @pytest.mark.asyncio
    async def test_every_quiz_of_a_lesson_must_be_passed(self, account_id, track_id):
        lesson_id = uuid.uuid4()
        first, second = uuid.uuid4(), uuid.uuid4()

        with (
            patch(
                "skills_core.quizzes.get_track_lessons",
                AsyncMock(return_value=[{"lesson_id": lesson_id}]),
            ),
            patch(
                "skills_core.quizzes.get_lesson_quiz_ids",
                AsyncMock(return_value={lesson_id: [first, second]}),
            ),
            patch(
                "skills_core.quizzes.get_passed_quiz_ids",
                AsyncMock(return_value={second}),
            ) as mock_passed,
            patch(
                "skills_core.quizzes.mark_track_completed", AsyncMock()
            ) as mock_mark,
        ):
            completed = await check_track_completion(
                MagicMock(), account_id=account_id, track_id=track_id
            )

        assert completed is False
        mock_mark.assert_not_called()
        assert set(mock_passed.call_args[1]["quiz_ids"]) == {first, second}

    @pytest.mark.asyncio
    async def test_track_without_lessons_is_not_completed(self, account_id, track_id):
        with (
            patch("skills_core.quizzes.get_track_lessons", AsyncMock(return_value=[])),
            patch(
                "skills_core.quizzes.mark_track_completed", AsyncMock()
            ) as mock_mark,
        ):
            completed = await check_track_completion(
                MagicMock(), account_id=account_id, track_id=track_id
            )

        assert completed is False
        mock_mark.assert_not_called()


class TestSubmitAttempt:
    def _patches(self, quiz, questions, attempt_id=1):
        return (
            patch(
                "skills_core.quizzes.get_transaction",
                side_effect=lambda: mock_db_connection(),
            ),
            patch("skills_core.quizzes.get_quiz", AsyncMock(return_value=quiz)),
            patch(
                "skills_core.quizzes.get_quiz_questions",
                AsyncMock(return_value=questions),
            ),
            patch(
                "skills_core.quizzes.insert_attempt",
                AsyncMock(return_value={"attempt_id": attempt_id}),
            ),
            patch(
                "skills_core.quizzes.check_track_completion",
                AsyncMock(return_value=True),
            ),
        )

    @pytest.mark.asyncio
    async def test_passed_lesson_quiz_rechecks_track(self, account_id, track_id):
        quiz = _quiz(passing=1)
        questions = [_question("a")]
        db, get_quiz, get_questions, insert, check = self._patches(quiz, questions)

        with db, get_quiz, get_questions, insert as mock_insert, check as mock_check:
            result = await submit_attempt(
                account_id=account_id,
                quiz_id=quiz["quiz_id"],
                answers=[_answer(questions[0], "a")],
                track_id=track_id,
            )

        assert result["approved"] is True
        assert result["score"] == 100
        assert result["track_completed"] is True
        mock_check.assert_awaited_once()
        assert mock_insert.call_args[1]["passed"] is True
        assert mock_insert.call_args[1]["track_id"] == track_id

    @pytest.mark.asyncio
    async def test_failed_attempt_is_still_stored(self, account_id, track_id):
        quiz = _quiz(passing=1)
        questions = [_question("a")]
        db, get_quiz, get_questions, insert, check = self._patches(quiz, questions)

        with db, get_quiz, get_questions, insert as mock_insert, check as mock_check:
            result = await submit_attempt(
                account_id=account_id,
                quiz_id=quiz["quiz_id"],
                answers=[_answer(questions[0], "b")],
                track_id=track_id,
            )

        assert result["approved"] is False
        assert result["track_completed"] is None
        mock_insert.assert_awaited_once()
        mock_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_certification_quiz_does_not_recheck_track(self, account_id, track_id):
        quiz = _quiz(passing=1, tier=QuizTier.bronze)
        questions = [_question("a")]
        db, get_quiz, get_questions, insert, check = self._patches(quiz, questions)

        with db, get_quiz, get_questions, insert, check as mock_check:
            result = await submit_attempt(
                account_id=account_id,
                quiz_id=quiz["quiz_id"],
                answers=[_answer(questions[0], "a")],
                track_id=track_id,
            )

        assert result["approved"] is True
        mock_check.assert_not_called()

    @pytest.mark.asyncio
    async def test_requires_account(self):
        with pytest.raises(NotAuthenticated):
            await submit_attempt(account_id=None, quiz_id=uuid.uuid4(), answers=[])

    @pytest.mark.asyncio
    async def test_unknown_quiz(self, account_id):
        db, get_quiz, get_questions, insert, check = self._patches(None, [])

        with db, get_quiz, get_questions, insert as mock_insert, check:
            with pytest.raises(QuizNotFound):
                await submit_attempt(
                    account_id=account_id, quiz_id=uuid.uuid4(), answers=[]
                )

        mock_insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_failure(self, account_id):
        quiz = _quiz(passing=1)
        questions = [_question("a")]
        db, get_quiz, get_questions, _, check = self._patches(quiz, questions)
        failing_insert = patch(
            "skills_core.quizzes.insert_attempt",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down"))),
        )

        with db, get_quiz, get_questions, failing_insert, check, patch(
            "skills_core.quizzes.sentry_sdk"
        ):
            with pytest.raises(PersistenceFailure):
                await submit_attempt(
                    account_id=account_id,
                    quiz_id=quiz["quiz_id"],
                    answers=[_answer(questions[0], "a")],
                )
