# ============================================================================
# src/health_records/core/__init__.py
# ============================================================================
"""
Domain records and persistence.

The pipeline and services live in their own modules
(core.pipeline, core.assignment, core.sharing) and are imported from there.
"""

from .models import (
    User,
    Report,
    Medication,
    Reminder,
    HealthTimelineEntry,
    SharedReport,
    MedicalAnalysis,
    MedicationInfo,
    KeyFinding,
)
from .document_store import DocumentStore
from .blob_store import BlobStore
from .storage import HealthRecordsStorage
