# ============================================================================
# src/health_records/analysis/medication_normalizer.py
# ============================================================================
"""
Maps extracted medication info onto stored Medication records.

Stored frequency is a fixed vocabulary. Free-text frequencies from the
model ("twice a day", "BID", "q8h") are normalized here; the original
wording is kept in notes whenever it is not already a vocabulary value.
"""

import re
from typing import Optional, Tuple

from ..constants import MedicationFrequency
from ..core.models import Medication, MedicationInfo

# Checked in order; first match wins
FREQUENCY_PATTERNS = [
    (MedicationFrequency.AS_NEEDED, r"\b(prn|as needed|when needed|if needed|as required|sos)\b"),
    (MedicationFrequency.WEEKLY, r"\b(weekly|per week|a week|every week)\b"),
    (MedicationFrequency.FOUR_TIMES_DAILY, r"\b(qid|q6h|four times|4 times|every 6 hours)\b"),
    (MedicationFrequency.THREE_TIMES_DAILY, r"\b(tid|q8h|three times|3 times|thrice|every 8 hours)\b"),
    (MedicationFrequency.TWICE_DAILY, r"\b(bid|q12h|twice|two times|2 times|every 12 hours)\b"),
    (MedicationFrequency.DAILY, r"\b(qd|od|qhs|daily|once a day|every day|at bedtime|nightly|every morning)\b"),
]


def normalize_frequency(raw: Optional[str]) -> Tuple[MedicationFrequency, bool]:
    """
    Returns:
        (frequency, recognized). Unrecognized text maps to DAILY with
        recognized=False.
    """
    text = (raw or "").strip().lower()
    for value in MedicationFrequency:
        if text == value.value:
            return value, True

    for frequency, pattern in FREQUENCY_PATTERNS:
        if re.search(pattern, text):
            return frequency, True

    return MedicationFrequency.DAILY, False


def to_medication(info: MedicationInfo, user_id: str, report_id: Optional[str] = None) -> Medication:
    frequency, _ = normalize_frequency(info.frequency)
    notes = None
    if info.frequency and info.frequency.strip().lower() != frequency.value:
        notes = f"Frequency as prescribed: {info.frequency}"

    return Medication(
        user_id=user_id,
        report_id=report_id,
        name=info.name,
        dosage=info.dosage,
        frequency=frequency,
        instructions=info.instructions,
        side_effects=", ".join(info.side_effects),
        is_active=True,
        notes=notes,
    )
