# ============================================================================
# src/health_records/core/models.py
# ============================================================================
"""
Domain records persisted in the document store.

Attributes are snake_case in Python; stored documents and HTTP payloads use
camelCase aliases (originalText, approvalStatus, reportURL, ...).

Analyzer output stored on a report is a tagged union keyed by `kind` so
each report type has a concrete shape instead of an untyped blob.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..constants import (
    ApprovalStatus,
    DocumentType,
    FindingStatus,
    MedicationFrequency,
    REPORT_TRANSITIONS,
    ReminderType,
    ReportStatus,
    RiskLevel,
    TimelineEventType,
    TreatmentStatus,
    UserRole,
)
from ..utils.exceptions import InvalidStatusTransition


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class RecordModel(BaseModel):
    """Base for everything that round-trips through the document store."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Analyzer output
# ============================================================================

class KeyFinding(RecordModel):
    parameter: str
    value: str
    normal_range: str
    status: FindingStatus
    explanation: str


class MedicalAnalysis(RecordModel):
    key_findings: List[KeyFinding]
    summary: str
    recommendations: List[str]
    risk_level: RiskLevel
    next_steps: List[str]


class MedicationInfo(RecordModel):
    name: str
    dosage: str
    frequency: str
    instructions: str
    side_effects: List[str] = Field(default_factory=list)
    interactions: List[str] = Field(default_factory=list)
    generic_alternatives: List[str] = Field(default_factory=list)


class BloodTestAnalysis(MedicalAnalysis):
    kind: Literal["blood_test"] = "blood_test"


class GeneralAnalysis(MedicalAnalysis):
    kind: Literal["general"] = "general"


class ImagingAnalysis(MedicalAnalysis):
    kind: Literal["imaging"] = "imaging"


class PrescriptionAnalysis(RecordModel):
    kind: Literal["prescription"] = "prescription"
    medications: List[MedicationInfo]


class InsufficientContentData(RecordModel):
    kind: Literal["insufficient_content"] = "insufficient_content"
    message: str = "Text extraction failed"
    extracted_length: int = 0
    suggestion: str = "Upload a higher quality scan or PDF with selectable text"


class AnalysisUnavailableData(RecordModel):
    kind: Literal["analysis_unavailable"] = "analysis_unavailable"
    message: str = "Analysis unavailable - please consult healthcare provider"


ExtractedData = Annotated[
    Union[
        BloodTestAnalysis,
        GeneralAnalysis,
        ImagingAnalysis,
        PrescriptionAnalysis,
        InsufficientContentData,
        AnalysisUnavailableData,
    ],
    Field(discriminator="kind"),
]


# ============================================================================
# Stored records
# ============================================================================

class User(RecordModel):
    id: str = Field(default_factory=new_id)
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.PATIENT
    specialization: Optional[str] = None
    date_of_birth: Optional[str] = None
    phone: Optional[str] = None
    language: Optional[str] = None
    profile_picture_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Report(RecordModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    file_name: str
    file_url: str
    report_type: DocumentType = DocumentType.GENERAL
    original_text: Optional[str] = ""
    extracted_data: Optional[ExtractedData] = None
    analysis: Optional[MedicalAnalysis] = None
    summary: Optional[str] = None
    status: ReportStatus = ReportStatus.PROCESSING
    uploaded_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def transition_to(self, status: ReportStatus) -> None:
        """
        Move to a new lifecycle status.

        Raises:
            InvalidStatusTransition: anything other than
                processing -> completed | failed
        """
        status = ReportStatus(status)
        if status not in REPORT_TRANSITIONS[self.status]:
            raise InvalidStatusTransition(self.status.value, status.value)
        self.status = status


class Medication(RecordModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    report_id: Optional[str] = None
    name: str
    dosage: str
    frequency: MedicationFrequency = MedicationFrequency.DAILY
    duration: Optional[str] = None
    instructions: Optional[str] = None
    side_effects: Optional[str] = None
    is_active: bool = True
    prescribed_by: Optional[str] = None
    prescription_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Reminder(RecordModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    medication_id: Optional[str] = None
    type: ReminderType
    title: str
    message: Optional[str] = None
    scheduled_time: datetime
    is_completed: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("scheduled_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive times are taken as UTC
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @property
    def is_pending(self) -> bool:
        return self.is_active and not self.is_completed


class HealthTimelineEntry(RecordModel):
    """One clinical event. Written once, never updated."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    user_id: str
    report_id: Optional[str] = None
    consultation_id: Optional[str] = None
    date: datetime
    event_type: TimelineEventType
    report_type: Optional[str] = None
    title: str
    description: Optional[str] = None
    summary: Optional[str] = None
    analysis: Optional[MedicalAnalysis] = None
    medications: Optional[List[MedicationInfo]] = None
    metrics: Optional[Dict[str, str]] = None
    severity_level: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    comparison_data: Optional[Dict[str, Any]] = None
    doctor_info: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    file_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class SharedReport(RecordModel):
    """
    Patient <-> doctor relationship for one report (AI assignment), or a
    manual share link over several reports.
    """
    id: str = Field(default_factory=new_id)
    user_id: str
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    doctor_email: Optional[str] = None
    report_id: Optional[str] = None
    report_ids: Optional[List[str]] = None
    report_url: Optional[str] = Field(default=None, alias="reportURL")
    detected_specialization: Optional[str] = None
    report_summary: Optional[str] = None
    symptoms: Optional[str] = None
    description: Optional[str] = None
    share_token: str = Field(default_factory=new_id)
    expires_at: datetime
    is_active: bool = True
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    treatment_status: TreatmentStatus = TreatmentStatus.ACTIVE
    hide_from_dashboard: bool = False
    view_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)

    def is_currently_active(self, now: Optional[datetime] = None) -> bool:
        """Expiry is a hard cutoff regardless of is_active."""
        now = now or utcnow()
        return self.is_active and now < self.expires_at
