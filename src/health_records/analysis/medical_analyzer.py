# ============================================================================
# src/health_records/analysis/medical_analyzer.py
# ============================================================================
"""
Medical Analyzer

Turns extracted report text into structured findings or a medication list.

Primary path: one schema-constrained model call. The response must parse
and validate against the record models; anything else counts as a failed
call.

Fallback path (model unconfigured, call failed, output invalid):
deterministic synthesis from the raw text. analyze() and
extract_medications() never raise.
"""

import json
import logging
import re
from typing import List, Sequence

from pydantic import ValidationError

from ..constants import FindingStatus, RiskLevel
from ..core.models import (
    KeyFinding,
    MedicalAnalysis,
    Medication,
    MedicationInfo,
    RecordModel,
    Report,
)
from ..llm.base import BaseLLMClient
from ..llm.schemas import MEDICAL_ANALYSIS_SCHEMA, MEDICATION_LIST_SCHEMA
from ..utils.exceptions import AnalysisUnavailable
from . import prompts


class _MedicationList(RecordModel):
    medications: List[MedicationInfo]


# Markdown cleanup for the shared health summary, applied in order
_SUMMARY_CLEANUP = [
    (re.compile(r"\*{2,}"), ""),                           # runs of asterisks
    (re.compile(r"^\s*\*\s*", re.MULTILINE), "- "),        # asterisk bullets -> dashes
    (re.compile(r"\*\s*"), ""),                            # stray asterisks
    (re.compile(r"\s{3,}"), "\n\n"),                       # whitespace runs -> paragraph break
    (re.compile(r"^\s*\*\s*(.*)$", re.MULTILINE), r"- \1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),                     # emphasis
    (re.compile(r"[*#_~`]"), ""),                          # leftover markdown symbols
    (re.compile(r"\n{3,}"), "\n\n"),
]


def clean_summary_text(text: str) -> str:
    """Strip markdown so the summary renders correctly as plain text."""
    for pattern, replacement in _SUMMARY_CLEANUP:
        text = pattern.sub(replacement, text)
    return text.strip()


class MedicalAnalyzer:
    """
    Structured analysis of medical text via an injected LLM client.

    The client decides availability: an UnconfiguredLLMClient makes every
    call take the fallback path.
    """

    def __init__(self, llm: BaseLLMClient):
        self.llm = llm
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Findings
    # ------------------------------------------------------------------
    async def analyze(self, text: str) -> MedicalAnalysis:
        """Findings, summary, recommendations, risk level and next steps."""
        if not self.llm.is_configured:
            return self.fallback_analysis(text)

        try:
            data = await self.llm.complete(
                prompts.ANALYSIS_SYSTEM_PROMPT,
                prompts.ANALYSIS_PROMPT.format(report_text=text),
                output_schema=MEDICAL_ANALYSIS_SCHEMA,
            )
            analysis = MedicalAnalysis.model_validate(data)
            self.logger.info(
                f"Analysis: {len(analysis.key_findings)} findings, risk={analysis.risk_level.value}"
            )
            return analysis
        except ValidationError as e:
            self.logger.error(f"Analysis output failed validation ({e.error_count()} errors)")
        except Exception as e:
            self.logger.error(f"Medical analysis failed: {e}")

        return self.fallback_analysis(text)

    @staticmethod
    def fallback_analysis(text: str) -> MedicalAnalysis:
        lines = [line for line in (text or "").lower().split("\n") if line.strip()]
        return MedicalAnalysis(
            key_findings=[
                KeyFinding(
                    parameter="Document Analysis",
                    value="Text extracted successfully",
                    normal_range="N/A",
                    status=FindingStatus.NORMAL,
                    explanation=(
                        "Document was processed and text was extracted. "
                        "Manual review recommended for detailed analysis."
                    ),
                )
            ],
            summary=(
                f"Medical document processed containing {len(lines)} lines of text. "
                "Professional medical review recommended for detailed analysis."
            ),
            recommendations=[
                "Consult with your healthcare provider for professional interpretation",
                "Keep this document for your medical records",
            ],
            risk_level=RiskLevel.LOW,
            next_steps=[
                "Schedule appointment with healthcare provider if needed",
                "Ask questions about any values you don't understand",
            ],
        )

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------
    async def extract_medications(self, text: str) -> List[MedicationInfo]:
        if not self.llm.is_configured:
            return self.fallback_medications(text)

        try:
            data = await self.llm.complete(
                prompts.MEDICATION_SYSTEM_PROMPT,
                prompts.MEDICATION_PROMPT.format(prescription_text=text),
                output_schema=MEDICATION_LIST_SCHEMA,
            )
            medications = _MedicationList.model_validate(data).medications
            self.logger.info(f"Extracted {len(medications)} medication(s)")
            return medications
        except ValidationError as e:
            self.logger.error(f"Medication output failed validation ({e.error_count()} errors)")
        except Exception as e:
            self.logger.error(f"Medication extraction failed: {e}")

        return self.fallback_medications(text)

    @staticmethod
    def fallback_medications(text: str) -> List[MedicationInfo]:
        """Every substantive line not naming the doctor or patient is a candidate drug."""
        medications = []
        for line in (text or "").split("\n"):
            line = line.strip()
            lowered = line.lower()
            if len(line) <= 5 or "doctor" in lowered or "patient" in lowered:
                continue
            medications.append(MedicationInfo(
                name=line.split(" ")[0] or "Unknown Medication",
                dosage="As prescribed",
                frequency="As directed by physician",
                instructions="Please consult your healthcare provider for detailed instructions",
                side_effects=["Consult your pharmacist or doctor for side effect information"],
                interactions=["Check with your healthcare provider for drug interactions"],
                generic_alternatives=["Ask your pharmacist about generic alternatives"],
            ))
        return medications

    # ------------------------------------------------------------------
    # Free text
    # ------------------------------------------------------------------
    async def generate_health_summary(
        self,
        reports: Sequence[Report],
        medications: Sequence[Medication],
    ) -> str:
        """
        Plain-text narrative of recent reports and current medications.

        Raises:
            AnalysisUnavailable: the model call failed
        """
        if not self.llm.is_configured:
            return prompts.UNCONFIGURED_SUMMARY.format(
                report_count=len(reports),
                medication_count=len(medications),
            )

        reports_json = json.dumps([r.to_document() for r in reports])
        medications_json = json.dumps([m.to_document() for m in medications])
        try:
            text = await self.llm.complete(
                prompts.SUMMARY_SYSTEM_PROMPT,
                prompts.SUMMARY_PROMPT.format(
                    reports_json=reports_json,
                    medications_json=medications_json,
                ),
            )
        except AnalysisUnavailable as e:
            raise AnalysisUnavailable(f"Failed to generate health summary: {e}") from e

        return clean_summary_text(text)

    async def translate_medical_text(self, text: str, target_language: str) -> str:
        """Translation, or the original text when the model can't help."""
        if not self.llm.is_configured:
            self.logger.warning("Translation requires a configured AI model")
            return text

        try:
            translated = await self.llm.complete(
                prompts.TRANSLATION_SYSTEM_PROMPT.format(target_language=target_language),
                prompts.TRANSLATION_PROMPT.format(target_language=target_language, text=text),
            )
        except AnalysisUnavailable as e:
            self.logger.error(f"Translation failed: {e}")
            return text

        return translated or text
