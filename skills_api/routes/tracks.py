"""Track API routes.

Endpoints:
- GET /api/tracks/{track_id}/certification - Bronze/prata/ouro unlock state
- GET /api/tracks/{track_id}/roadmap - Track lessons with completed/pending/locked status
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from skills_api.auth import get_current_account
from skills_core.certification import compute_certification
from skills_core.context import Account
from skills_core.enums import RoadmapStatus
from skills_core.roadmap import get_track_roadmap

router = APIRouter(prefix="/api/tracks", tags=["tracks"])


class CertificationResponse(BaseModel):
    track_completed: bool
    bronze_unlocked: bool
    bronze_approved: bool
    prata_unlocked: bool
    prata_approved: bool
    ouro_unlocked: bool
    bronze_quiz_id: UUID | None = None
    prata_quiz_id: UUID | None = None


class RoadmapLesson(BaseModel):
    lesson_id: UUID
    position: int
    title: str
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None
    quiz_id: UUID | None = None
    quiz_ids: list[UUID] = []
    status: RoadmapStatus


class TrackInfo(BaseModel):
    track_id: UUID
    course_id: UUID | None = None
    name: str


class RoadmapResponse(BaseModel):
    track: TrackInfo
    lessons: list[RoadmapLesson]


@router.get("/{track_id}/certification", response_model=CertificationResponse)
async def get_certification(
    track_id: UUID,
    account: Account = Depends(get_current_account),
):
    state = await compute_certification(account.account_id, track_id)
    return state.to_dict()


@router.get("/{track_id}/roadmap", response_model=RoadmapResponse)
async def get_roadmap(
    track_id: UUID,
    account: Account = Depends(get_current_account),
):
    roadmap = await get_track_roadmap(account.account_id, track_id)
    if roadmap is None:
        raise HTTPException(404, "Track not found")
    return roadmap
