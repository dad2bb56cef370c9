# ============================================================================
# src/health_records/analysis/__init__.py
# ============================================================================
"""
AI-backed analysis with deterministic fallbacks.
"""

from .medical_analyzer import MedicalAnalyzer, clean_summary_text
from .specialization_matcher import (
    SpecializationMatcher,
    SpecializationMatch,
    resolve_specialization,
)
from .medication_normalizer import normalize_frequency, to_medication
