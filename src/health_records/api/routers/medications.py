# ============================================================================
# src/health_records/api/routers/medications.py
# ============================================================================
"""
Medication list management for the current user.

Prescription uploads add medications automatically; these endpoints cover
manual entries and edits.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...constants import MedicationFrequency
from ...core.models import Medication, RecordModel, User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api/medications", tags=["medications"])


class MedicationCreate(RecordModel):
    name: str
    dosage: str
    frequency: MedicationFrequency = MedicationFrequency.DAILY
    duration: Optional[str] = None
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    prescribed_by: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None


class MedicationUpdate(RecordModel):
    name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[MedicationFrequency] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    is_active: Optional[bool] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None


@router.get("")
async def list_medications(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [m.to_document() for m in services.storage.get_user_medications(user.id)]


@router.get("/active")
async def list_active_medications(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [m.to_document() for m in services.storage.get_active_medications(user.id)]


@router.post("", status_code=201)
async def create_medication(
    payload: MedicationCreate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    medication = Medication(user_id=user.id, **payload.model_dump())
    services.storage.create_medication(medication)
    return medication.to_document()


@router.patch("/{medication_id}")
async def update_medication(
    medication_id: str,
    payload: MedicationUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    medication = services.storage.get_medication(medication_id)
    if medication is None or medication.user_id != user.id:
        raise HTTPException(status_code=404, detail="Medication not found")

    fields = payload.model_dump(mode="json", by_alias=True, exclude_unset=True)
    updated = services.storage.update_medication(medication_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail="Medication not found")
    return updated.to_document()


@router.delete("/{medication_id}")
async def delete_medication(
    medication_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    medication = services.storage.get_medication(medication_id)
    if medication is None:
        raise HTTPException(status_code=404, detail="Medication not found")
    if medication.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    services.storage.delete_medication(medication_id)
    return {"message": "Medication deleted successfully"}
