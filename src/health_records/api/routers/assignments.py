# ============================================================================
# src/health_records/api/routers/assignments.py
# ============================================================================
"""
AI doctor assignment and patient approval.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...core.models import User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api", tags=["assignments"])


class UploadReportRequest(BaseModel):
    patient_id: str = Field(alias="patientId")
    report_id: str = Field(alias="reportId")
    report_url: Optional[str] = Field(default=None, alias="reportURL")


@router.post("/uploadReport")
async def upload_report_for_assignment(
    payload: UploadReportRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Pick a doctor for a processed report. Same report, same assignment."""
    result = await services.assignments.assign_doctor(
        payload.patient_id,
        payload.report_id,
        payload.report_url,
        acting_user_id=user.id,
    )
    shared = result.shared_report
    doctor = result.doctor

    suggested = None
    if doctor is not None:
        suggested = {
            "id": doctor.id,
            "firstName": doctor.first_name,
            "lastName": doctor.last_name,
            "email": doctor.email,
            "specialization": doctor.specialization,
            "phone": doctor.phone,
            "profilePictureUrl": doctor.profile_picture_url,
        }

    return {
        "message": (
            "Report already assigned to a doctor"
            if result.duplicate
            else "Doctor assigned. Approve the assignment to share your report."
        ),
        "sharedReportId": shared.id,
        "suggestedDoctor": suggested,
        "aiDetection": {
            "detectedSpecialization": shared.detected_specialization,
            "confidence": result.detection.confidence if result.detection else None,
            "analyzedText": result.detection.analyzed_text if result.detection else None,
        },
        "approvalStatus": shared.approval_status.value,
        "expiresAt": shared.expires_at.isoformat(),
        "duplicate": result.duplicate,
    }


@router.put("/shared-reports/{shared_report_id}/approve")
async def approve_doctor(
    shared_report_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    shared = services.assignments.approve_doctor(shared_report_id, user.id)
    return {
        "message": "Doctor approved successfully",
        "sharedReport": shared.to_document(),
    }
