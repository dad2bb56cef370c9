# ============================================================================
# src/health_records/api/routers/patients.py
# ============================================================================
"""
Patient-side views: assigned doctors, health timelines and dashboard totals.
"""

from fastapi import APIRouter, Depends, HTTPException

from ...constants import ReportStatus
from ...core.models import User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api", tags=["patient"])


@router.get("/patient/doctors")
async def get_my_doctors(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return services.assignments.get_patient_doctors(user.id)


@router.get("/timeline")
async def get_my_timeline(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [e.to_document() for e in services.storage.get_user_timeline(user.id)]


@router.get("/patient/{patient_id}/healthTimeline")
async def get_patient_timeline(
    patient_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Visible to the patient and to doctors holding an approved assignment."""
    if user.id != patient_id and not services.assignments.doctor_can_view_patient(user, patient_id):
        raise HTTPException(status_code=403, detail="Access denied")
    if services.storage.get_user(patient_id) is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return [e.to_document() for e in services.storage.get_user_timeline(patient_id)]


@router.get("/dashboard/stats")
async def get_dashboard_stats(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """
    Totals for the patient dashboard.

    healthScore is a rough engagement figure: 50 plus 10 per completed
    report and 5 per active medication, capped at 100.
    """
    reports = services.storage.get_user_reports(user.id)
    active_medications = services.storage.get_active_medications(user.id)
    pending_reminders = services.storage.get_active_reminders(user.id)

    completed = sum(1 for r in reports if r.status == ReportStatus.COMPLETED)
    health_score = min(100, 50 + completed * 10 + len(active_medications) * 5)
    return {
        "totalReports": len(reports),
        "activeMedications": len(active_medications),
        "pendingReminders": len(pending_reminders),
        "healthScore": f"{health_score}%",
    }
