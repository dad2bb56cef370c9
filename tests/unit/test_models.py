# ============================================================================
# FILE: tests/unit/test_models.py
# ============================================================================
"""
Unit tests for domain records and the report state machine
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from health_records.constants import DocumentType, ReportStatus, TimelineEventType, timeline_event_for
from health_records.core.models import (
    ExtractedData,
    HealthTimelineEntry,
    InsufficientContentData,
    PrescriptionAnalysis,
    Reminder,
    Report,
    SharedReport,
    utcnow,
)
from health_records.utils.exceptions import InvalidStatusTransition


def _report(**fields):
    return Report(user_id="u1", file_name="a.pdf", file_url="/uploads/a.pdf", **fields)


@pytest.mark.parametrize("target", [ReportStatus.COMPLETED, ReportStatus.FAILED])
def test_processing_transitions(target):
    report = _report()
    report.transition_to(target)
    assert report.status == target


@pytest.mark.parametrize("terminal", [ReportStatus.COMPLETED, ReportStatus.FAILED])
@pytest.mark.parametrize("target", list(ReportStatus))
def test_terminal_states_never_move(terminal, target):
    """Test completed/failed never go back to processing or anywhere else"""
    report = _report(status=terminal)

    with pytest.raises(InvalidStatusTransition):
        report.transition_to(target)
    assert report.status == terminal


def test_processing_cannot_stay_processing():
    with pytest.raises(InvalidStatusTransition):
        _report().transition_to(ReportStatus.PROCESSING)


def test_extracted_data_is_tagged_union():
    adapter = TypeAdapter(ExtractedData)

    data = adapter.validate_python({"kind": "insufficient_content", "extractedLength": 12})
    assert isinstance(data, InsufficientContentData)
    assert data.extracted_length == 12

    data = adapter.validate_python({"kind": "prescription", "medications": []})
    assert isinstance(data, PrescriptionAnalysis)

    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "unknown"})


def test_report_document_round_trip():
    report = _report(extracted_data=InsufficientContentData(extracted_length=3))
    loaded = Report.model_validate(report.to_document())

    assert isinstance(loaded.extracted_data, InsufficientContentData)
    assert loaded == report


def test_shared_report_aliases_and_expiry():
    shared = SharedReport(
        user_id="p1",
        report_url="/uploads/a.pdf",
        expires_at=utcnow() + timedelta(days=90),
    )
    document = shared.to_document()

    assert document["reportURL"] == "/uploads/a.pdf"
    assert document["approvalStatus"] == "pending"
    assert document["treatmentStatus"] == "active"
    assert shared.is_currently_active()
    assert not shared.is_currently_active(now=utcnow() + timedelta(days=91))

    inactive = shared.model_copy(update={"is_active": False})
    assert not inactive.is_currently_active()


def test_reminder_naive_time_is_utc():
    reminder = Reminder.model_validate({
        "userId": "u1",
        "type": "medication",
        "title": "Take Metformin",
        "scheduledTime": "2026-01-05T08:00:00",
    })

    assert reminder.scheduled_time == datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)
    assert reminder.is_pending
    assert not reminder.model_copy(update={"is_completed": True}).is_pending
    with pytest.raises(ValidationError):
        Reminder(user_id="u1", type="birthday", title="x", scheduled_time=utcnow())


def test_timeline_entry_is_immutable():
    entry = HealthTimelineEntry(
        user_id="u1",
        date=utcnow(),
        event_type=TimelineEventType.SCAN,
        title="x-ray - chest.png",
    )
    with pytest.raises(ValidationError):
        entry.title = "changed"


@pytest.mark.parametrize("document_type,event", [
    (DocumentType.PRESCRIPTION, TimelineEventType.PRESCRIPTION),
    (DocumentType.X_RAY, TimelineEventType.SCAN),
    (DocumentType.MRI, TimelineEventType.SCAN),
    (DocumentType.CT_SCAN, TimelineEventType.SCAN),
    (DocumentType.BLOOD_TEST, TimelineEventType.UPLOADED_REPORT),
    (DocumentType.GENERAL, TimelineEventType.UPLOADED_REPORT),
])
def test_timeline_event_mapping(document_type, event):
    assert timeline_event_for(document_type) == event
