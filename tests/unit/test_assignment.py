# ============================================================================
# FILE: tests/unit/test_assignment.py
# ============================================================================
"""
Unit tests for doctor assignment and the approval workflow
"""

import asyncio
from datetime import date, timedelta
from unittest.mock import patch

import pytest
import pytest_asyncio

from health_records.analysis import SpecializationMatcher
from health_records.constants import ApprovalStatus, TimelineEventType, TreatmentStatus
from health_records.core.assignment import (
    DoctorAssignmentService,
    age_from_birth_date,
    assignment_id,
)
from health_records.core.models import HealthTimelineEntry, Medication, SharedReport, User, utcnow
from health_records.utils.exceptions import (
    AlreadyApproved,
    ForbiddenAction,
    InvalidPatient,
    NoDoctorAvailable,
    PatientNotFound,
    ReportNotFound,
    ReportNotReady,
    SharedReportNotFound,
    UnauthorizedApproval,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def service_for(storage, scripted_llm):
    """Factory: assignment service whose model answers each call in order."""
    def _make(*answers):
        return DoctorAssignmentService(storage, SpecializationMatcher(scripted_llm(responses=list(answers))))
    return _make


@pytest.fixture
def lab_report(make_report, patient, sample_lab_text):
    return make_report(patient.id, sample_lab_text, summary="Cholesterol is elevated")


# ============================================================================
# ASSIGNMENT
# ============================================================================

@pytest.mark.asyncio
async def test_assigns_matching_specialist(service_for, make_doctor, patient, lab_report):
    cardiologist = make_doctor("Cardiologist")
    make_doctor("General Physician")

    result = await service_for("Cardiologist").assign_doctor(
        patient.id, lab_report.id, "/uploads/labs.pdf", acting_user_id=patient.id
    )

    shared = result.shared_report
    assert result.duplicate is False
    assert result.doctor.id == cardiologist.id
    assert result.detection.confidence == "high"
    assert shared.id == assignment_id(patient.id, lab_report.id)
    assert shared.patient_id == patient.id
    assert shared.doctor_id == cardiologist.id
    assert shared.doctor_email == cardiologist.email
    assert shared.report_url == "/uploads/labs.pdf"
    assert shared.detected_specialization == "Cardiologist"
    assert shared.report_summary == "Cholesterol is elevated"
    assert shared.approval_status == ApprovalStatus.PENDING
    assert shared.treatment_status == TreatmentStatus.ACTIVE
    assert shared.share_token


@pytest.mark.asyncio
async def test_expiry_is_ninety_days(service_for, make_doctor, patient, lab_report):
    make_doctor("Cardiologist")
    before = utcnow()

    result = await service_for("Cardiologist").assign_doctor(patient.id, lab_report.id)

    expires_at = result.shared_report.expires_at
    assert before + timedelta(days=90) <= expires_at <= utcnow() + timedelta(days=90)


@pytest.mark.asyncio
async def test_report_url_defaults_to_file_url(service_for, make_doctor, patient, lab_report):
    make_doctor("Cardiologist")

    result = await service_for("Cardiologist").assign_doctor(patient.id, lab_report.id)

    assert result.shared_report.report_url == lab_report.file_url


@pytest.mark.asyncio
async def test_idempotent_per_report(service_for, storage, make_doctor, patient, lab_report):
    """Test the same (patient, report) always yields the same SharedReport"""
    cardiologist = make_doctor("Cardiologist")
    make_doctor("Neurologist")
    service = service_for("Cardiologist", "Neurologist")

    first = await service.assign_doctor(patient.id, lab_report.id)
    second = await service.assign_doctor(patient.id, lab_report.id)

    assert second.duplicate is True
    assert second.shared_report.id == first.shared_report.id
    assert second.doctor.id == cardiologist.id
    assert second.shared_report.detected_specialization == "Cardiologist"
    assert len(storage.get_shared_reports_by_patient(patient.id)) == 1
    # The matcher is not consulted for a known report
    assert len(service.matcher.llm.calls) == 1


@pytest.mark.asyncio
async def test_concurrent_assignments_converge(service_for, storage, make_doctor, patient, lab_report):
    make_doctor("Cardiologist")
    service = service_for("Cardiologist", "Cardiologist")

    first, second = await asyncio.gather(
        service.assign_doctor(patient.id, lab_report.id),
        service.assign_doctor(patient.id, lab_report.id),
    )

    assert first.shared_report.id == second.shared_report.id
    assert len(storage.get_shared_reports_by_patient(patient.id)) == 1
    assert sorted([first.duplicate, second.duplicate]) == [False, True]


@pytest.mark.asyncio
async def test_lost_race_returns_stored_record(service_for, storage, make_doctor, patient, lab_report):
    """Test the conditional create result wins over the in-memory record"""
    make_doctor("Cardiologist")
    service = service_for("Cardiologist")
    winner = await service_for("Cardiologist").assign_doctor(patient.id, lab_report.id)

    # Dedup lookup misses, as it would for a writer that read before the winner committed
    with patch.object(service, "_find_existing", return_value=None):
        result = await service.assign_doctor(patient.id, lab_report.id)

    assert result.duplicate is True
    assert result.shared_report.share_token == winner.shared_report.share_token


@pytest.mark.asyncio
async def test_general_physician_fallback_keeps_detection(service_for, make_doctor, patient, lab_report):
    """Test fallback doctor while detectedSpecialization records the original value"""
    gp = make_doctor("General Physician")

    result = await service_for("Pulmonologist").assign_doctor(patient.id, lab_report.id)

    assert result.doctor.id == gp.id
    assert result.shared_report.detected_specialization == "Pulmonologist"


@pytest.mark.asyncio
async def test_no_doctor_available(service_for, storage, make_doctor, patient, lab_report):
    make_doctor("Dermatologist")

    with pytest.raises(NoDoctorAvailable) as exc_info:
        await service_for("Pulmonologist").assign_doctor(patient.id, lab_report.id)

    assert exc_info.value.detected_specialization == "Pulmonologist"
    assert "Pulmonologist" in str(exc_info.value)
    assert storage.get_shared_reports_by_patient(patient.id) == []


@pytest.mark.asyncio
async def test_first_registered_doctor_is_selected(service_for, make_doctor, patient, lab_report):
    first = make_doctor("Cardiologist", first_name="Ada")
    make_doctor("Cardiologist", first_name="Bob")

    result = await service_for("Cardiologist").assign_doctor(patient.id, lab_report.id)

    assert result.doctor.id == first.id


@pytest.mark.asyncio
async def test_report_without_text_is_rejected(service_for, make_doctor, make_report, patient):
    make_doctor("General Physician")
    report = make_report(patient.id, "")
    service = service_for("Cardiologist")

    with pytest.raises(ReportNotReady):
        await service.assign_doctor(patient.id, report.id)
    assert service.matcher.llm.calls == []


@pytest.mark.asyncio
async def test_patient_checks(service_for, storage, make_doctor, make_report, patient, lab_report):
    doctor = make_doctor("Cardiologist")
    service = service_for()

    with pytest.raises(PatientNotFound):
        await service.assign_doctor("nobody", lab_report.id)
    with pytest.raises(InvalidPatient):
        await service.assign_doctor(doctor.id, lab_report.id)
    with pytest.raises(ForbiddenAction):
        await service.assign_doctor(patient.id, lab_report.id, acting_user_id=doctor.id)
    with pytest.raises(ReportNotFound):
        await service.assign_doctor(patient.id, "missing-report")

    other = storage.create_user(User(email="other@example.com", first_name="Other", last_name="Patient"))
    foreign_report = make_report(other.id, "Hemoglobin 13.5 g/dL and more text for the report body")
    with pytest.raises(ForbiddenAction):
        await service.assign_doctor(patient.id, foreign_report.id)


# ============================================================================
# APPROVAL
# ============================================================================

@pytest_asyncio.fixture
async def assigned(service_for, make_doctor, patient, lab_report):
    doctor = make_doctor("Cardiologist")
    service = service_for("Cardiologist")
    result = await service.assign_doctor(patient.id, lab_report.id)
    return service, doctor, result.shared_report


@pytest.mark.asyncio
async def test_approval_gate(assigned, patient):
    """Test pending relationships stay off the doctor's patient list until approved"""
    service, doctor, shared = assigned

    assert service.get_doctor_patients(doctor) == []
    pending = service.get_pending_approvals(doctor)
    assert [p["sharedReportId"] for p in pending] == [shared.id]

    approved = service.approve_doctor(shared.id, patient.id)

    assert approved.approval_status == ApprovalStatus.APPROVED
    patients = service.get_doctor_patients(doctor)
    assert [p["id"] for p in patients] == [patient.id]
    assert patients[0]["detectedSpecialization"] == "Cardiologist"
    assert patients[0]["reportURL"] == shared.report_url
    assert patients[0]["approvalStatus"] == "approved"
    assert service.get_pending_approvals(doctor) == []


@pytest.mark.asyncio
async def test_already_approved(assigned, storage, patient):
    service, _, shared = assigned
    service.approve_doctor(shared.id, patient.id)

    with patch.object(storage, "update_shared_report", wraps=storage.update_shared_report) as update:
        with pytest.raises(AlreadyApproved):
            service.approve_doctor(shared.id, patient.id)

    update.assert_not_called()


@pytest.mark.asyncio
async def test_approval_requires_owner(assigned, storage, make_doctor):
    service, doctor, shared = assigned
    stranger = storage.create_user(User(email="stranger@example.com", first_name="S", last_name="T"))

    with pytest.raises(UnauthorizedApproval):
        service.approve_doctor(shared.id, stranger.id)
    with pytest.raises(UnauthorizedApproval):
        service.approve_doctor(shared.id, doctor.id)
    with pytest.raises(SharedReportNotFound):
        service.approve_doctor("missing", stranger.id)

    assert storage.get_shared_report(shared.id).approval_status == ApprovalStatus.PENDING


@pytest.mark.asyncio
async def test_expired_relationship_is_hidden(assigned, storage, patient):
    service, doctor, shared = assigned
    service.approve_doctor(shared.id, patient.id)
    storage.update_shared_report(shared.id, {"expiresAt": (utcnow() - timedelta(days=1)).isoformat()})

    assert service.get_doctor_patients(doctor) == []


# ============================================================================
# DOCTOR / PATIENT VIEWS
# ============================================================================

@pytest.mark.asyncio
async def test_complete_and_hide(assigned, storage, patient, make_doctor):
    service, doctor, shared = assigned
    service.approve_doctor(shared.id, patient.id)

    completed = service.complete_treatment(shared.id, doctor)
    assert completed.treatment_status == TreatmentStatus.COMPLETED

    other_doctor = make_doctor("Cardiologist", first_name="Ada")
    with pytest.raises(ForbiddenAction):
        service.hide_from_dashboard(shared.id, other_doctor)

    hidden = service.hide_from_dashboard(shared.id, doctor)
    assert hidden.hide_from_dashboard is True
    assert service.get_doctor_patients(doctor) == []
    assert service.get_doctor_shared_reports(doctor) == []


@pytest.mark.asyncio
async def test_doctor_views_require_doctor(assigned, patient):
    service, _, _ = assigned

    with pytest.raises(ForbiddenAction):
        service.get_doctor_patients(patient)


@pytest.mark.asyncio
async def test_patient_doctors(assigned, patient):
    service, doctor, shared = assigned

    doctors = service.get_patient_doctors(patient.id)

    assert len(doctors) == 1
    assert doctors[0]["id"] == doctor.id
    assert doctors[0]["specialization"] == "Cardiologist"
    assert doctors[0]["sharedReportId"] == shared.id
    assert doctors[0]["approvalStatus"] == "pending"


def test_age_from_birth_date():
    today = date(2024, 6, 15)

    assert age_from_birth_date("1985-04-12", today=today) == 39
    assert age_from_birth_date("1985-08-01", today=today) == 38
    assert age_from_birth_date(None) is None
    assert age_from_birth_date("not a date") is None


def test_assignment_id_is_deterministic():
    assert assignment_id("p1", "r1") == assignment_id("p1", "r1")
    assert assignment_id("p1", "r1") != assignment_id("p1", "r2")


# ============================================================================
# DOCTOR ACCESS
# ============================================================================

@pytest.mark.asyncio
async def test_pending_assignment_grants_nothing(assigned, patient, lab_report):
    """Test a doctor sees nothing of the patient before approval"""
    service, doctor, _ = assigned

    assert service.doctor_can_view_report(doctor, lab_report.id) is False
    assert service.doctor_can_view_patient(doctor, patient.id) is False
    assert service.get_doctor_shared_reports(doctor) == []
    with pytest.raises(ForbiddenAction):
        service.get_patient_records(doctor, patient.id)
    with pytest.raises(ForbiddenAction):
        service.get_patient_timeline(doctor, patient.id)


@pytest.mark.asyncio
async def test_approved_assignment_grants_named_report(assigned, make_doctor, make_report, patient, lab_report):
    service, doctor, shared = assigned
    service.approve_doctor(shared.id, patient.id)
    unshared = make_report(patient.id, "Chest X-ray shows clear lungs without infiltrates")
    other_doctor = make_doctor("Cardiologist", first_name="Ada")

    assert service.doctor_can_view_report(doctor, lab_report.id) is True
    assert service.doctor_can_view_report(doctor, unshared.id) is False
    assert service.doctor_can_view_patient(doctor, patient.id) is True
    assert service.doctor_can_view_report(other_doctor, lab_report.id) is False
    assert service.doctor_can_view_patient(other_doctor, patient.id) is False
    assert service.doctor_can_view_report(patient, lab_report.id) is False
    assert [s.id for s in service.get_doctor_shared_reports(doctor)] == [shared.id]


@pytest.mark.asyncio
async def test_expired_assignment_revokes_access(assigned, storage, patient, lab_report):
    service, doctor, shared = assigned
    service.approve_doctor(shared.id, patient.id)
    storage.update_shared_report(shared.id, {"expiresAt": (utcnow() - timedelta(days=1)).isoformat()})

    assert service.doctor_can_view_report(doctor, lab_report.id) is False
    assert service.get_doctor_shared_reports(doctor) == []


def test_multi_report_share_grants_each_report(storage, make_doctor, make_report, patient):
    doctor = make_doctor("Neurologist")
    first = make_report(patient.id, "MRI brain without contrast, no acute findings")
    second = make_report(patient.id, "EEG within normal limits")
    storage.create_shared_report(SharedReport(
        user_id=patient.id,
        patient_id=patient.id,
        doctor_email=doctor.email,
        report_ids=[first.id, second.id],
        expires_at=utcnow() + timedelta(days=7),
        approval_status=ApprovalStatus.APPROVED,
    ))
    service = DoctorAssignmentService(storage, matcher=None)

    assert service.doctor_can_view_report(doctor, first.id) is True
    assert service.doctor_can_view_report(doctor, second.id) is True


@pytest.mark.asyncio
async def test_patient_records_for_doctor(assigned, storage, make_report, patient, lab_report):
    """Test the bundle lists only shared reports but the whole medication list and timeline"""
    service, doctor, shared = assigned
    service.approve_doctor(shared.id, patient.id)
    make_report(patient.id, "Chest X-ray shows clear lungs without infiltrates")
    storage.create_medication(Medication(user_id=patient.id, name="Atorvastatin", dosage="20mg"))
    storage.create_timeline_entry(HealthTimelineEntry(
        user_id=patient.id,
        report_id=lab_report.id,
        date=utcnow(),
        event_type=TimelineEventType.UPLOADED_REPORT,
        title="Blood Test",
    ))

    records = service.get_patient_records(doctor, patient.id)
    timeline = service.get_patient_timeline(doctor, patient.id)

    assert records["patient"]["id"] == patient.id
    assert records["patient"]["email"] == patient.email
    assert [r["id"] for r in records["reports"]] == [lab_report.id]
    assert [m["name"] for m in records["medications"]] == ["Atorvastatin"]
    assert [e["reportId"] for e in records["timeline"]] == [lab_report.id]
    assert timeline["patient"]["id"] == patient.id
    assert len(timeline["timeline"]) == 1
