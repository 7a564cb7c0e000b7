"""Progress aggregation over lesson-completion records.

Pure functions: no I/O, deterministic for identical inputs.
"""

from dataclasses import asdict, dataclass
from typing import Any, Hashable, Iterable, Mapping

from .enums import LessonState


@dataclass(frozen=True)
class ProgressSummary:
    """Completion counts for one course."""

    total: int
    completed: int
    percent: int
    remaining: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def round_percent(completed: int, total: int) -> int:
    """Round completed/total*100 half-up using integer arithmetic (0 if total is 0)."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def _record_value(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def compute_progress(
    lesson_ids: Iterable[Hashable], completions: Iterable[Any]
) -> ProgressSummary:
    """Compute completion counts for a course.

    Completion records for lessons outside lesson_ids are ignored, and
    several completed records for one lesson count once.

    Args:
        lesson_ids: The course's lesson ids
        completions: Completion records (dicts or objects with lesson_id/is_complete)
    """
    course_lessons = set(lesson_ids)
    total = len(course_lessons)

    completed_lessons = {
        _record_value(record, "lesson_id")
        for record in completions
        if _record_value(record, "is_complete")
        and _record_value(record, "lesson_id") in course_lessons
    }
    completed = len(completed_lessons)

    return ProgressSummary(
        total=total,
        completed=completed,
        percent=round_percent(completed, total),
        remaining=max(total - completed, 0),
    )


def compute_progress_by_course(
    course_lessons: Mapping[Hashable, Iterable[Hashable]],
    completions: Iterable[Any],
) -> dict[Hashable, ProgressSummary]:
    """Compute a ProgressSummary for every course from one set of records."""
    completions = list(completions)
    return {
        course_id: compute_progress(lesson_ids, completions)
        for course_id, lesson_ids in course_lessons.items()
    }


def progress_status(summary: ProgressSummary) -> LessonState:
    """Classify a course as not started, in progress or completed."""
    if summary.total == 0 or summary.completed == 0:
        return LessonState.not_started
    if summary.completed >= summary.total:
        return LessonState.completed
    return LessonState.in_progress
