# ============================================================================
# src/health_records/classifiers/document_classifier.py
# ============================================================================
"""
Document Classification

Deterministic keyword matching over extracted text, case-insensitive,
first match wins in this order:

1. prescription
2. blood test
3. imaging (x-ray)
4. general (default, never an error)
"""

import logging
from typing import List, Tuple

from ..constants import DocumentType

logger = logging.getLogger(__name__)


KEYWORD_RULES: List[Tuple[DocumentType, Tuple[str, ...]]] = [
    (DocumentType.PRESCRIPTION, ("prescription", "medication", "dosage")),
    (DocumentType.BLOOD_TEST, ("blood", "glucose", "cholesterol", "hemoglobin", "platelet")),
    (DocumentType.X_RAY, ("x-ray", "radiograph", "imaging")),
]


class DocumentClassifier:
    """Pure, side-effect-free classifier."""

    def __init__(self, rules: List[Tuple[DocumentType, Tuple[str, ...]]] = None):
        self.rules = rules or KEYWORD_RULES

    def classify(self, text: str) -> DocumentType:
        lowered = (text or "").lower()
        for document_type, keywords in self.rules:
            if any(keyword in lowered for keyword in keywords):
                return document_type
        return DocumentType.GENERAL


_default_classifier = DocumentClassifier()


def classify(text: str) -> DocumentType:
    """Classify with the default keyword rules."""
    document_type = _default_classifier.classify(text)
    logger.debug(f"Detected document type: {document_type.value}")
    return document_type
