# ============================================================================
# src/health_records/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .document_types import (
    DocumentType,
    TimelineEventType,
    IMAGING_TYPES,
    timeline_event_for,
)
from .statuses import (
    ReportStatus,
    REPORT_TRANSITIONS,
    ApprovalStatus,
    TreatmentStatus,
    UserRole,
    RiskLevel,
    FindingStatus,
    SEVERITY_BY_RISK,
    MedicationFrequency,
    ReminderType,
)
from .specializations import (
    SPECIALIZATIONS,
    GENERAL_PHYSICIAN,
    SPECIALIZATION_DESCRIPTIONS,
    DETECTION_RULES,
)
