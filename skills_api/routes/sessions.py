"""Session API routes.

Endpoints:
- POST /api/sessions/heartbeat - Refresh the liveness timestamp of a cartório session

The web client calls the heartbeat every 60 seconds and when the window
regains focus.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from skills_api.auth import get_current_account
from skills_core.context import Account
from skills_core.enums import AccountType
from skills_core.heartbeat import send_heartbeat

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class HeartbeatResponse(BaseModel):
    recorded: bool


@router.post("/heartbeat", response_model=HeartbeatResponse)
async def heartbeat(account: Account = Depends(get_current_account)):
    """Record session liveness. Admin sessions are not tracked."""
    if account.account_type != AccountType.cartorio:
        return HeartbeatResponse(recorded=False)
    return HeartbeatResponse(recorded=await send_heartbeat(account.account_id))
