# ============================================================================
# src/health_records/constants/document_types.py
# ============================================================================
"""
Document Types and Timeline Mappings
- Types the keyword classifier can emit
- Which types are imaging studies
- Report type -> timeline event type
"""

from enum import Enum


class DocumentType(str, Enum):
    """
    Document types produced by classification.

    MRI and CT_SCAN are never emitted by the keyword classifier but are
    accepted on stored reports and handled as imaging.
    """
    BLOOD_TEST = "blood_test"
    PRESCRIPTION = "prescription"
    X_RAY = "x-ray"
    MRI = "mri"
    CT_SCAN = "ct_scan"
    GENERAL = "general"


IMAGING_TYPES = {DocumentType.X_RAY, DocumentType.MRI, DocumentType.CT_SCAN}


class TimelineEventType(str, Enum):
    UPLOADED_REPORT = "uploaded_report"
    PRESCRIPTION = "prescription"
    SCAN = "scan"
    CONSULTATION = "consultation"
    METRIC = "metric"


def timeline_event_for(document_type: DocumentType) -> TimelineEventType:
    """Timeline event type for a processed report of the given type."""
    if document_type == DocumentType.PRESCRIPTION:
        return TimelineEventType.PRESCRIPTION
    if document_type in IMAGING_TYPES:
        return TimelineEventType.SCAN
    return TimelineEventType.UPLOADED_REPORT
