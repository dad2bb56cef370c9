# ============================================================================
# FILE: tests/unit/test_specialization_matcher.py
# ============================================================================
"""
Unit tests for specialization matching
"""

import pytest

from health_records.analysis import SpecializationMatcher, resolve_specialization
from health_records.constants import GENERAL_PHYSICIAN, SPECIALIZATIONS
from health_records.llm.base import UnconfiguredLLMClient
from health_records.utils.exceptions import LLMTimeoutError


def test_taxonomy():
    assert len(SPECIALIZATIONS) == 10
    assert SPECIALIZATIONS[-1] == GENERAL_PHYSICIAN == "General Physician"


@pytest.mark.parametrize("answer,expected", [
    ("Cardiologist", ("Cardiologist", "exact")),
    ("  ent specialist ", ("ENT Specialist", "exact")),
    ("I recommend a Cardiologist for this patient", ("Cardiologist", "partial")),
    ("Pulmonologist.", ("Pulmonologist", "partial")),
    ("Oncologist", ("General Physician", "default")),
    ("", ("General Physician", "default")),
])
def test_resolve_specialization(answer, expected):
    assert resolve_specialization(answer, GENERAL_PHYSICIAN) == expected


@pytest.mark.asyncio
async def test_empty_text_skips_model(scripted_llm):
    """Test empty input defaults without invoking the model"""
    llm = scripted_llm(responses=["Cardiologist"])
    matcher = SpecializationMatcher(llm)

    for text in ("", "   \n\t"):
        match = await matcher.match_specialization(text)
        assert match.specialization == "General Physician"
        assert match.match_type == "default"

    assert llm.calls == []


@pytest.mark.asyncio
async def test_partial_match_through_model(matcher_for, sample_lab_text):
    matcher = matcher_for("I recommend a Cardiologist for this patient")

    match = await matcher.match_specialization(sample_lab_text)

    assert match.specialization == "Cardiologist"
    assert match.confidence == "medium"


@pytest.mark.asyncio
async def test_exact_match_is_high_confidence(matcher_for, sample_radiology_text):
    match = await matcher_for("Pulmonologist").match_specialization(sample_radiology_text)

    assert match.specialization == "Pulmonologist"
    assert match.confidence == "high"
    assert match.analyzed_text.endswith("...")
    assert len(match.analyzed_text) <= 203


@pytest.mark.asyncio
async def test_model_failure_defaults(scripted_llm, sample_lab_text):
    """Test a model timeout never escapes the matcher"""
    matcher = SpecializationMatcher(scripted_llm(error=LLMTimeoutError("LLM request timed out after 60s")))

    match = await matcher.match_specialization(sample_lab_text)

    assert match.specialization == "General Physician"
    assert match.confidence == "low"


@pytest.mark.asyncio
async def test_unconfigured_model_defaults(sample_lab_text):
    matcher = SpecializationMatcher(UnconfiguredLLMClient())

    match = await matcher.match_specialization(sample_lab_text)

    assert match.specialization == "General Physician"


@pytest.mark.asyncio
async def test_prompt_lists_every_specialization(scripted_llm, sample_lab_text):
    llm = scripted_llm(responses=["Endocrinologist"])
    await SpecializationMatcher(llm).match_specialization(sample_lab_text)

    prompt = llm.calls[0]["user_prompt"]
    for name in SPECIALIZATIONS:
        assert name in prompt
    assert "Hemoglobin" in prompt
    assert llm.calls[0]["output_schema"] is None
