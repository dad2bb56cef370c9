# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import json
from datetime import timedelta
from typing import Any, Dict, List, Optional, Union

import pytest

from health_records.analysis.medical_analyzer import MedicalAnalyzer
from health_records.analysis.specialization_matcher import SpecializationMatcher
from health_records.constants import UserRole
from health_records.core.document_store import DocumentStore
from health_records.core.models import Report, User, utcnow
from health_records.core.storage import HealthRecordsStorage
from health_records.llm.base import BackendType, BaseLLMClient, UnconfiguredLLMClient


# ============================================================================
# LLM DOUBLES
# ============================================================================

class ScriptedLLMClient(BaseLLMClient):
    """Returns queued responses in order and records every call."""

    def __init__(self, responses: Optional[List[Union[str, Dict[str, Any]]]] = None, error: Exception = None):
        super().__init__({"timeout": 5.0})
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OLLAMA

    @property
    def model_name(self) -> str:
        return "scripted"

    async def _complete(self, system_prompt, user_prompt, output_schema=None) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "output_schema": output_schema,
        })
        if self.error is not None:
            raise self.error
        response = self.responses.pop(0)
        return response if isinstance(response, str) else json.dumps(response)

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True, "backend": "ollama", "model": "scripted", "details": "test double"}


@pytest.fixture
def unconfigured_llm():
    return UnconfiguredLLMClient("LLM backend disabled")


@pytest.fixture
def scripted_llm():
    """Factory: scripted_llm(responses=[...]) or scripted_llm(error=...)."""
    def _make(responses=None, error=None):
        return ScriptedLLMClient(responses=responses, error=error)
    return _make


@pytest.fixture
def fallback_analyzer(unconfigured_llm):
    return MedicalAnalyzer(unconfigured_llm)


# ============================================================================
# STORAGE
# ============================================================================

@pytest.fixture
def document_store(tmp_path):
    return DocumentStore(tmp_path / "health_records.db")


@pytest.fixture
def storage(document_store):
    return HealthRecordsStorage(document_store)


@pytest.fixture
def patient(storage):
    return storage.create_user(User(
        email="jane.doe@example.com",
        first_name="Jane",
        last_name="Doe",
        role=UserRole.PATIENT,
        date_of_birth="1985-04-12",
        phone="555-0101",
    ))


@pytest.fixture
def make_doctor(storage):
    def _make(specialization: str, email: Optional[str] = None, first_name: str = "Gregory"):
        slug = specialization.lower().replace(" ", "-")
        return storage.create_user(User(
            email=email or f"{first_name.lower()}.{slug}@clinic.example.com",
            first_name=first_name,
            last_name="House",
            role=UserRole.DOCTOR,
            specialization=specialization,
        ))
    return _make


@pytest.fixture
def make_report(storage):
    """Factory for a stored report owned by user_id with the given text."""
    def _make(user_id: str, original_text: str = "", **fields):
        report = Report(
            user_id=user_id,
            file_name=fields.pop("file_name", "report.pdf"),
            file_url=fields.pop("file_url", "/uploads/report.pdf"),
            original_text=original_text,
            **fields,
        )
        return storage.create_report(report)
    return _make


@pytest.fixture
def past():
    return utcnow() - timedelta(days=1)


# ============================================================================
# SAMPLE TEXT
# ============================================================================

@pytest.fixture
def sample_lab_text():
    """Sample lab report text for testing"""
    return """
    City Diagnostics Laboratory Report

    Patient: Jane Doe
    Date: 2024-01-15

    LIPID PANEL AND CBC

    Test                Result      Reference Range
    ----------------------------------------------------
    Hemoglobin          13.5        12.0-15.5 g/dL
    Total Cholesterol   240         <200 mg/dL
    Platelets           245         150-400 K/uL
    """


@pytest.fixture
def sample_prescription_text():
    return """Dr. Smith Family Clinic
Patient: Jane Doe
Prescription
Amoxicillin 500mg twice daily for 7 days
Ibuprofen 200mg as needed for pain
"""


@pytest.fixture
def sample_radiology_text():
    """Sample radiology report text"""
    return """
    RADIOLOGY REPORT

    Examination: Chest X-Ray PA and Lateral

    FINDINGS:
    The lungs are clear without focal consolidation, effusion, or pneumothorax.
    The cardiac silhouette is normal in size and contour.

    IMPRESSION:
    Normal chest radiograph.
    """


# ============================================================================
# PDF FILES
# ============================================================================

@pytest.fixture
def make_pdf(tmp_path):
    """Factory: make_pdf(["line", ...]) -> single-page PDF bytes (reportlab)."""
    from reportlab.lib.pagesizes import letter
    from reportlab.pdfgen import canvas

    def _make(lines: List[str], name: str = "test.pdf") -> bytes:
        pdf_path = tmp_path / name
        c = canvas.Canvas(str(pdf_path), pagesize=letter)
        y = 750
        for line in lines:
            c.drawString(72, y, line)
            y -= 20
        c.showPage()
        c.save()
        return pdf_path.read_bytes()

    return _make


@pytest.fixture
def blank_pdf(make_pdf):
    return make_pdf([], name="blank.pdf")


@pytest.fixture
def matcher_for(scripted_llm):
    """Factory: specialization matcher whose model answers `answer`."""
    def _make(answer: str):
        return SpecializationMatcher(scripted_llm(responses=[answer]))
    return _make


@pytest.fixture
def valid_analysis():
    """Schema-conforming model output for a lipid panel"""
    return {
        "keyFindings": [
            {
                "parameter": "Total Cholesterol",
                "value": "240 mg/dL",
                "normalRange": "<200 mg/dL",
                "status": "abnormal",
                "explanation": "Cholesterol is above the recommended level.",
            }
        ],
        "summary": "Cholesterol is elevated; other values are normal.",
        "recommendations": ["Discuss diet changes with your doctor"],
        "riskLevel": "medium",
        "nextSteps": ["Repeat lipid panel in 3 months"],
    }
