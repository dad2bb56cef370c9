# ============================================================================
# src/health_records/api/routers/doctors.py
# ============================================================================
"""
Doctor dashboard: approved patients and their records, pending approvals,
shared reports.
"""

from fastapi import APIRouter, Depends

from ...core.models import User
from ..dependencies import Services, get_current_doctor, get_services

router = APIRouter(prefix="/api/doctor", tags=["doctor"])


@router.get("/patients")
async def get_patients(
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    return services.assignments.get_doctor_patients(doctor)


@router.get("/pending-approvals")
async def get_pending_approvals(
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    return services.assignments.get_pending_approvals(doctor)


@router.get("/shared-reports")
async def get_shared_reports(
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    return [s.to_document() for s in services.assignments.get_doctor_shared_reports(doctor)]


@router.put("/shared-reports/{shared_report_id}/complete")
async def complete_treatment(
    shared_report_id: str,
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    shared = services.assignments.complete_treatment(shared_report_id, doctor)
    return {"message": "Treatment marked as completed", "sharedReport": shared.to_document()}


@router.put("/shared-reports/{shared_report_id}/hide")
async def hide_shared_report(
    shared_report_id: str,
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    shared = services.assignments.hide_from_dashboard(shared_report_id, doctor)
    return {"message": "Shared report hidden from dashboard", "sharedReport": shared.to_document()}


@router.get("/patient/{patient_id}/reports")
async def get_patient_records(
    patient_id: str,
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    """Profile, shared reports, medications and timeline of an approved patient."""
    return services.assignments.get_patient_records(doctor, patient_id)


@router.get("/patient/{patient_id}/timeline")
async def get_patient_timeline(
    patient_id: str,
    doctor: User = Depends(get_current_doctor),
    services: Services = Depends(get_services),
):
    return services.assignments.get_patient_timeline(doctor, patient_id)
