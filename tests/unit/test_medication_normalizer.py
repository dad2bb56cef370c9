# ============================================================================
# FILE: tests/unit/test_medication_normalizer.py
# ============================================================================
"""
Unit tests for medication frequency normalization
"""

import pytest

from health_records.analysis import normalize_frequency, to_medication
from health_records.constants import MedicationFrequency
from health_records.core.models import MedicationInfo


@pytest.mark.parametrize("raw,expected", [
    ("daily", MedicationFrequency.DAILY),
    ("twice_daily", MedicationFrequency.TWICE_DAILY),
    ("Twice a day", MedicationFrequency.TWICE_DAILY),
    ("BID", MedicationFrequency.TWICE_DAILY),
    ("1 tablet TID after meals", MedicationFrequency.THREE_TIMES_DAILY),
    ("every 6 hours", MedicationFrequency.FOUR_TIMES_DAILY),
    ("once weekly", MedicationFrequency.WEEKLY),
    ("PRN for pain", MedicationFrequency.AS_NEEDED),
    ("at bedtime", MedicationFrequency.DAILY),
])
def test_normalize_frequency(raw, expected):
    frequency, recognized = normalize_frequency(raw)
    assert frequency == expected
    assert recognized is True


@pytest.mark.parametrize("raw", [None, "", "As directed by physician"])
def test_unrecognized_frequency_defaults_to_daily(raw):
    assert normalize_frequency(raw) == (MedicationFrequency.DAILY, False)


def _info(frequency):
    return MedicationInfo(
        name="Amoxicillin",
        dosage="500mg",
        frequency=frequency,
        instructions="Take with food",
        side_effects=["Nausea", "Rash"],
        interactions=[],
        generic_alternatives=[],
    )


def test_to_medication_keeps_raw_frequency_in_notes():
    medication = to_medication(_info("2 times a day"), user_id="u1", report_id="r1")

    assert medication.frequency == MedicationFrequency.TWICE_DAILY
    assert medication.notes == "Frequency as prescribed: 2 times a day"
    assert medication.side_effects == "Nausea, Rash"
    assert medication.report_id == "r1"
    assert medication.is_active is True


def test_to_medication_vocabulary_value_has_no_note():
    medication = to_medication(_info("weekly"), user_id="u1")

    assert medication.frequency == MedicationFrequency.WEEKLY
    assert medication.notes is None
