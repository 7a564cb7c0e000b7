"""Course progress as shown to the learner.

Joins the progress store reads with the pure aggregation functions.
"""

from uuid import UUID

from .aggregation import compute_progress, compute_progress_by_course, progress_status
from .progress_store import (
    fetch_all_completions,
    fetch_completions,
    fetch_course_lessons,
    fetch_lesson_ids,
)


async def course_progress(account_id: UUID, course_id: UUID) -> dict:
    """Get the ProgressSummary of one course plus its status."""
    lesson_ids = await fetch_lesson_ids(course_id)
    completions = await fetch_completions(account_id, course_id)
    summary = compute_progress(lesson_ids, completions)
    return {
        "course_id": course_id,
        **summary.to_dict(),
        "status": progress_status(summary),
    }


async def progress_overview(account_id: UUID) -> dict:
    """
    Get progress for every course plus the totals across all of them.

    Returns:
        {"courses": [...per-course summaries...], "overall": {total, completed, percent, remaining}}
    """
    course_lessons = await fetch_course_lessons()
    completions = await fetch_all_completions(account_id)

    summaries = compute_progress_by_course(course_lessons, completions)
    all_lesson_ids = [
        lesson_id for lesson_ids in course_lessons.values() for lesson_id in lesson_ids
    ]
    overall = compute_progress(all_lesson_ids, completions)

    return {
        "courses": [
            {
                "course_id": course_id,
                **summary.to_dict(),
                "status": progress_status(summary),
            }
            for course_id, summary in summaries.items()
        ],
        "overall": overall.to_dict(),
    }
