# ============================================================================
# src/health_records/api/routers/reminders.py
# ============================================================================
"""
Medication, appointment and refill reminders for the current user.

Reminders are stored and listed only; nothing here delivers them.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...constants import ReminderType
from ...core.models import RecordModel, Reminder, User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


class ReminderCreate(RecordModel):
    medication_id: Optional[str] = None
    type: ReminderType
    title: str
    message: Optional[str] = None
    scheduled_time: datetime
    is_completed: bool = False
    is_active: bool = True


class ReminderUpdate(RecordModel):
    title: Optional[str] = None
    message: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    is_completed: Optional[bool] = None
    is_active: Optional[bool] = None


def _own_reminder(services: Services, reminder_id: str, user: User) -> Reminder:
    reminder = services.storage.get_reminder(reminder_id)
    if reminder is None or reminder.user_id != user.id:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return reminder


@router.get("")
async def list_reminders(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [r.to_document() for r in services.storage.get_user_reminders(user.id)]


@router.get("/active")
async def list_active_reminders(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Active reminders that are not completed yet."""
    return [r.to_document() for r in services.storage.get_active_reminders(user.id)]


@router.post("", status_code=201)
async def create_reminder(
    payload: ReminderCreate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if payload.medication_id is not None:
        medication = services.storage.get_medication(payload.medication_id)
        if medication is None or medication.user_id != user.id:
            raise HTTPException(status_code=404, detail="Medication not found")

    reminder = Reminder(user_id=user.id, **payload.model_dump())
    services.storage.create_reminder(reminder)
    return reminder.to_document()


@router.patch("/{reminder_id}")
async def update_reminder(
    reminder_id: str,
    payload: ReminderUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    _own_reminder(services, reminder_id, user)

    fields = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
    updated = services.storage.update_reminder(reminder_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return updated.to_document()


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    _own_reminder(services, reminder_id, user)
    services.storage.delete_reminder(reminder_id)
    return {"message": "Reminder deleted successfully"}
