# ============================================================================
# src/health_records/api/routers/users.py
# ============================================================================
"""
User registration. Authentication is handled upstream; requests identify
the acting user with the X-User-Id header.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...constants import SPECIALIZATIONS, UserRole
from ...core.models import RecordModel, User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api/users", tags=["users"])


class UserCreate(RecordModel):
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.PATIENT
    specialization: Optional[str] = None
    date_of_birth: Optional[str] = None
    phone: Optional[str] = None
    language: Optional[str] = None


@router.post("", status_code=201)
async def create_user(payload: UserCreate, services: Services = Depends(get_services)):
    if services.storage.get_user_by_email(payload.email) is not None:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    if payload.role == UserRole.DOCTOR:
        if payload.specialization not in SPECIALIZATIONS:
            raise HTTPException(
                status_code=400,
                detail=f"Doctors need a specialization, one of: {', '.join(SPECIALIZATIONS)}",
            )
    elif payload.specialization is not None:
        raise HTTPException(status_code=400, detail="Only doctors have a specialization")

    user = User(**payload.model_dump())
    services.storage.create_user(user)
    return user.to_document()


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return user.to_document()
