"""Tiered certification state for a track: bronze -> prata -> ouro.

The state is derived on every request from the track-completion row and the
account's passed quiz attempts. Nothing here writes.
"""

from dataclasses import asdict, dataclass
from typing import Collection
from uuid import UUID

from .database import get_connection
from .enums import QuizTier
from .errors import NotAuthenticated
from .queries import get_passed_quiz_ids, get_track_tier_quizzes, is_track_completed
from .retry import with_read_retries


@dataclass(frozen=True)
class CertificationState:
    track_completed: bool
    bronze_unlocked: bool
    bronze_approved: bool
    prata_unlocked: bool
    prata_approved: bool
    ouro_unlocked: bool
    bronze_quiz_id: UUID | None = None
    prata_quiz_id: UUID | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def derive_certification(
    track_completed: bool,
    bronze_quiz_id: UUID | None,
    prata_quiz_id: UUID | None,
    passed_quiz_ids: Collection[UUID],
) -> CertificationState:
    """
    Derive the unlock chain from already-persisted facts.

    A tier without a configured quiz is not applicable: it is neither
    unlocked nor approved, which also keeps every later tier locked.
    """
    bronze_unlocked = track_completed and bronze_quiz_id is not None
    bronze_approved = bronze_quiz_id is not None and bronze_quiz_id in passed_quiz_ids
    prata_unlocked = bronze_approved and prata_quiz_id is not None
    prata_approved = prata_quiz_id is not None and prata_quiz_id in passed_quiz_ids

    return CertificationState(
        track_completed=track_completed,
        bronze_unlocked=bronze_unlocked,
        bronze_approved=bronze_approved,
        prata_unlocked=prata_unlocked,
        prata_approved=prata_approved,
        ouro_unlocked=prata_approved,
        bronze_quiz_id=bronze_quiz_id,
        prata_quiz_id=prata_quiz_id,
    )


async def compute_certification(account_id: UUID, track_id: UUID) -> CertificationState:
    """Load the account's track facts and derive its certification state."""
    if not account_id:
        raise NotAuthenticated("An account is required to view certification")

    async def _read() -> CertificationState:
        async with get_connection() as conn:
            track_completed = await is_track_completed(
                conn, account_id=account_id, track_id=track_id
            )
            tier_quizzes = await get_track_tier_quizzes(conn, track_id)
            passed = await get_passed_quiz_ids(
                conn, account_id=account_id, quiz_ids=list(tier_quizzes.values())
            )

        return derive_certification(
            track_completed,
            tier_quizzes.get(QuizTier.bronze),
            tier_quizzes.get(QuizTier.prata),
            passed,
        )

    return await with_read_retries(_read, description="Certification state")
