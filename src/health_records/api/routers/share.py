# ============================================================================
# src/health_records/api/routers/share.py
# ============================================================================
"""
Share links for a set of reports.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...core.models import User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api/share", tags=["share"])


class CreateShareRequest(BaseModel):
    report_ids: List[str] = Field(alias="reportIds", min_length=1)
    doctor_email: Optional[str] = Field(default=None, alias="doctorEmail")
    expires_in_days: int = Field(default=7, alias="expiresInDays", ge=1, le=365)


@router.post("/create", status_code=201)
async def create_share(
    payload: CreateShareRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    shared = services.sharing.create_share(
        user.id,
        payload.report_ids,
        doctor_email=payload.doctor_email,
        expires_in_days=payload.expires_in_days,
    )
    return {
        "id": shared.id,
        "shareToken": shared.share_token,
        "shareUrl": f"/api/share/{shared.share_token}",
        "expiresAt": shared.expires_at.isoformat(),
    }


@router.get("/{share_token}")
async def view_share(share_token: str, services: Services = Depends(get_services)):
    """Public: the token is the credential."""
    return await services.sharing.view_share(share_token)
