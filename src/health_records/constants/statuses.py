# ============================================================================
# src/health_records/constants/statuses.py
# ============================================================================
"""
Lifecycle states and fixed vocabularies used by the stored records.
"""

from enum import Enum


class ReportStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# Allowed report transitions. Terminal states have no outgoing edges.
REPORT_TRANSITIONS = {
    ReportStatus.PROCESSING: {ReportStatus.COMPLETED, ReportStatus.FAILED},
    ReportStatus.COMPLETED: set(),
    ReportStatus.FAILED: set(),
}


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    # Reserved: nothing sets it yet
    REJECTED = "rejected"


class TreatmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    # Reserved: nothing sets it yet
    DISCONTINUED = "discontinued"


class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FindingStatus(str, Enum):
    NORMAL = "normal"
    ABNORMAL = "abnormal"
    BORDERLINE = "borderline"


# Scan severity shown on the timeline, keyed by analysis risk level
SEVERITY_BY_RISK = {
    RiskLevel.HIGH: "Critical",
    RiskLevel.MEDIUM: "Moderate",
    RiskLevel.LOW: "Low",
}


class MedicationFrequency(str, Enum):
    DAILY = "daily"
    TWICE_DAILY = "twice_daily"
    THREE_TIMES_DAILY = "three_times_daily"
    FOUR_TIMES_DAILY = "four_times_daily"
    WEEKLY = "weekly"
    AS_NEEDED = "as_needed"


class ReminderType(str, Enum):
    MEDICATION = "medication"
    APPOINTMENT = "appointment"
    REFILL = "refill"
