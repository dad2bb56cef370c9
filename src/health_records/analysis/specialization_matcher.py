# ============================================================================
# src/health_records/analysis/specialization_matcher.py
# ============================================================================
"""
Specialization Matcher

Asks the model which of the ten specializations a report needs, then maps
the free-text answer onto the taxonomy:

1. exact match (case-insensitive)
2. partial match: first taxonomy entry contained in the answer, which
   handles answers like "I recommend a Cardiologist for this patient"
3. default: General Physician

Empty input, an unconfigured model and any model failure all resolve to
the default. match_specialization() never raises.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import assignment_settings
from ..constants import SPECIALIZATIONS
from ..llm.base import BaseLLMClient
from . import prompts

# Match type -> confidence reported to the caller
CONFIDENCE_BY_MATCH = {
    "exact": "high",
    "partial": "medium",
    "default": "low",
}


@dataclass
class SpecializationMatch:
    specialization: str
    confidence: str
    match_type: str
    analyzed_text: str = ""


def resolve_specialization(response: str, default: str) -> Tuple[str, str]:
    """
    Map a model answer onto the taxonomy.

    Returns:
        (specialization, match_type) where match_type is exact/partial/default
    """
    answer = (response or "").strip().lower()

    for name in SPECIALIZATIONS:
        if answer == name.lower():
            return name, "exact"

    for name in SPECIALIZATIONS:
        if name.lower() in answer:
            return name, "partial"

    return default, "default"


class SpecializationMatcher:

    def __init__(self, llm: BaseLLMClient, default_specialization: Optional[str] = None):
        self.llm = llm
        self.default_specialization = default_specialization or assignment_settings.DEFAULT_SPECIALIZATION
        self.logger = logging.getLogger(self.__class__.__name__)

    def _default(self, report_text: str) -> SpecializationMatch:
        return SpecializationMatch(
            specialization=self.default_specialization,
            confidence=CONFIDENCE_BY_MATCH["default"],
            match_type="default",
            analyzed_text=_preview(report_text),
        )

    async def match_specialization(self, report_text: str) -> SpecializationMatch:
        if not report_text or not report_text.strip():
            self.logger.info(f"No report text for specialization matching - defaulting to {self.default_specialization}")
            return self._default(report_text)

        if not self.llm.is_configured:
            self.logger.info(f"AI model not available - defaulting to {self.default_specialization}")
            return self._default(report_text)

        try:
            answer = await self.llm.complete(
                prompts.SPECIALIZATION_SYSTEM_PROMPT,
                prompts.build_specialization_prompt(report_text),
            )
        except Exception as e:
            self.logger.error(f"Specialization matching failed: {e}")
            return self._default(report_text)

        specialization, match_type = resolve_specialization(answer, self.default_specialization)
        self.logger.info(
            f"Detected specialization: {specialization} "
            f"(match={match_type}, answer={answer[:80]!r}, text_length={len(report_text)})"
        )
        return SpecializationMatch(
            specialization=specialization,
            confidence=CONFIDENCE_BY_MATCH[match_type],
            match_type=match_type,
            analyzed_text=_preview(report_text),
        )


def _preview(text: Optional[str]) -> str:
    return (text or "")[:200] + "..."
