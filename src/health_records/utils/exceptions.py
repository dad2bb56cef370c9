# ============================================================================
# src/health_records/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the health records service.

Extraction and analysis errors are caught inside the ingestion pipeline and
turned into report state. Assignment and approval errors are raised on the
request path and mapped to HTTP status codes by the API routers.
"""

from typing import Optional


class HealthRecordsError(Exception):
    """Base exception for all health records errors."""
    pass


class ConfigurationError(HealthRecordsError):
    """Invalid configuration."""
    pass


# ----------------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------------

class ExtractionError(HealthRecordsError):
    """OCR or PDF text extraction failed."""
    pass


class ExtractionTimeout(ExtractionError):
    """OCR did not finish within the configured timeout."""
    def __init__(self, message: str, timeout_seconds: float):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


class UnsupportedFileType(ExtractionError):
    """Uploaded file is neither a PDF nor a supported image."""
    pass


class InsufficientContent(HealthRecordsError):
    """Extracted text is too short (or a sentinel) to be worth analyzing."""
    def __init__(self, message: str, extracted_length: int = 0):
        super().__init__(message)
        self.extracted_length = extracted_length


# ----------------------------------------------------------------------------
# Model
# ----------------------------------------------------------------------------

class AnalysisUnavailable(HealthRecordsError):
    """Model not configured or the call failed. Always recoverable via fallback."""
    pass


class LLMResponseError(AnalysisUnavailable):
    """Model returned output that is not valid JSON for the requested schema."""
    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class LLMTimeoutError(AnalysisUnavailable):
    """Model call exceeded the configured timeout."""
    pass


# ----------------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------------

class InvalidStatusTransition(HealthRecordsError):
    """Report status may only move processing -> completed | failed."""
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move report from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class ReportNotFound(HealthRecordsError):
    """Report does not exist or is not owned by the caller."""
    pass


# ----------------------------------------------------------------------------
# Doctor assignment
# ----------------------------------------------------------------------------

class AssignmentError(HealthRecordsError):
    """Doctor assignment could not be completed."""
    pass


class PatientNotFound(AssignmentError):
    """Patient id does not resolve to a user."""
    pass


class InvalidPatient(AssignmentError):
    """User exists but is not a patient."""
    pass


class ForbiddenAction(HealthRecordsError):
    """Acting user is not allowed to perform this action."""
    pass


class ReportNotReady(AssignmentError):
    """Report has no extracted text yet."""
    pass


class NoDoctorAvailable(AssignmentError):
    """No doctor for the detected specialization nor for the default one."""
    def __init__(self, message: str, detected_specialization: str):
        super().__init__(message)
        self.detected_specialization = detected_specialization


# ----------------------------------------------------------------------------
# Approval
# ----------------------------------------------------------------------------

class ApprovalError(HealthRecordsError):
    """Approval transition rejected."""
    pass


class SharedReportNotFound(ApprovalError):
    """Shared report does not exist."""
    pass


class UnauthorizedApproval(ApprovalError):
    """Acting user does not own the shared report."""
    pass


class AlreadyApproved(ApprovalError):
    """Shared report was approved before."""
    pass
