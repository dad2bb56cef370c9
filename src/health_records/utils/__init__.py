# ============================================================================
# src/health_records/utils/__init__.py
# ============================================================================
"""
Utility modules for the health records service.
"""

from .exceptions import (
    HealthRecordsError,
    ConfigurationError,
    ExtractionError,
    ExtractionTimeout,
    UnsupportedFileType,
    InsufficientContent,
    AnalysisUnavailable,
    LLMResponseError,
    LLMTimeoutError,
    InvalidStatusTransition,
    ReportNotFound,
    AssignmentError,
    PatientNotFound,
    InvalidPatient,
    ForbiddenAction,
    ReportNotReady,
    NoDoctorAvailable,
    ApprovalError,
    SharedReportNotFound,
    UnauthorizedApproval,
    AlreadyApproved,
)
from .logging import setup_logging, JsonFormatter, log_performance, log_stage
