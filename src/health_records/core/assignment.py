# ============================================================================
# src/health_records/core/assignment.py
# ============================================================================
"""
Doctor Assignment & Approval Workflow

assign_doctor():
    patient checks -> dedup on (patient, report) -> report must have text
    -> specialization matcher -> doctor lookup with General Physician
    fallback -> pending SharedReport (90 day expiry)

approve_doctor():
    pending -> approved, by the owning patient only. Approval is what
    makes the relationship visible on the doctor's patient list.

Doctor reads of reports and patient records go through an approved,
unexpired SharedReport; a pending assignment grants nothing.

The SharedReport id is derived from (patient_id, report_id) and written
with a conditional create, so two concurrent assignments of the same
report converge on one record.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from ..analysis.specialization_matcher import SpecializationMatch, SpecializationMatcher
from ..config import assignment_settings
from ..constants import ApprovalStatus, TreatmentStatus, UserRole
from ..utils.exceptions import (
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
from ..utils.logging import log_performance
from .models import SharedReport, User, utcnow
from .storage import HealthRecordsStorage

logger = logging.getLogger(__name__)


def assignment_id(patient_id: str, report_id: str) -> str:
    """Deterministic SharedReport id for one patient/report pair."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"shared-report:{patient_id}:{report_id}"))


def age_from_birth_date(date_of_birth: Optional[str], today: Optional[date] = None) -> Optional[int]:
    if not date_of_birth:
        return None
    try:
        born = datetime.fromisoformat(date_of_birth).date()
    except ValueError:
        return None
    today = today or utcnow().date()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


@dataclass
class AssignmentResult:
    shared_report: SharedReport
    doctor: Optional[User]
    detection: Optional[SpecializationMatch] = None
    duplicate: bool = False


class DoctorAssignmentService:
    """
    Routes patients to doctors and manages the resulting relationships.
    """

    def __init__(
        self,
        storage: HealthRecordsStorage,
        matcher: SpecializationMatcher,
        expiry_days: Optional[int] = None,
        default_specialization: Optional[str] = None,
    ):
        self.storage = storage
        self.matcher = matcher
        self.expiry_days = expiry_days or assignment_settings.ASSIGNMENT_EXPIRY_DAYS
        self.default_specialization = default_specialization or assignment_settings.DEFAULT_SPECIALIZATION

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------
    @log_performance(logger, "Doctor assignment")
    async def assign_doctor(
        self,
        patient_id: str,
        report_id: str,
        report_url: Optional[str] = None,
        acting_user_id: Optional[str] = None,
    ) -> AssignmentResult:
        """
        Assign a doctor for one uploaded report.

        Raises:
            PatientNotFound, InvalidPatient, ForbiddenAction: caller checks
            ReportNotFound, ReportNotReady: report missing or not extracted yet
            NoDoctorAvailable: neither the detected specialization nor the
                default one has a registered doctor
        """
        patient = self.storage.get_user(patient_id)
        if patient is None:
            raise PatientNotFound("Patient not found")
        if patient.role != UserRole.PATIENT:
            raise InvalidPatient("Only patients can upload reports")
        if acting_user_id is not None and acting_user_id != patient_id:
            raise ForbiddenAction("Can only upload reports for yourself")

        existing = self._find_existing(patient_id, report_id)
        if existing is not None:
            logger.info(f"Report {report_id} already assigned to doctor {existing.doctor_id}")
            return self._duplicate(existing)

        report = self.storage.get_report(report_id)
        if report is None:
            raise ReportNotFound("Report not found")
        if report.user_id != patient_id:
            raise ForbiddenAction("Report does not belong to this patient")
        if not (report.original_text or "").strip():
            raise ReportNotReady(
                "Report text not yet extracted. Please wait for processing to complete."
            )

        detection = await self.matcher.match_specialization(report.original_text)
        doctor = self._select_doctor(detection.specialization)

        shared = SharedReport(
            id=assignment_id(patient_id, report_id),
            user_id=patient_id,
            patient_id=patient_id,
            doctor_id=doctor.id,
            doctor_email=doctor.email,
            report_id=report_id,
            report_url=report_url or report.file_url,
            detected_specialization=detection.specialization,
            report_summary=report.summary,
            expires_at=utcnow() + timedelta(days=self.expiry_days),
            approval_status=ApprovalStatus.PENDING,
            treatment_status=TreatmentStatus.ACTIVE,
        )
        stored, created = self.storage.create_shared_report_if_absent(shared)
        if not created:
            logger.info(f"Concurrent assignment for report {report_id} won, returning stored record")
            return self._duplicate(stored)

        logger.info(
            f"Assigned Dr. {doctor.full_name} ({doctor.specialization}) to patient {patient_id} "
            f"for report {report_id}, detected {detection.specialization} [{detection.confidence}]"
        )
        return AssignmentResult(shared_report=stored, doctor=doctor, detection=detection)

    def _find_existing(self, patient_id: str, report_id: str) -> Optional[SharedReport]:
        for shared in self.storage.get_shared_reports_by_patient(patient_id):
            if shared.report_id == report_id:
                return shared
        return None

    def _duplicate(self, shared: SharedReport) -> AssignmentResult:
        doctor = self.storage.get_user(shared.doctor_id) if shared.doctor_id else None
        return AssignmentResult(shared_report=shared, doctor=doctor, duplicate=True)

    def _select_doctor(self, specialization: str) -> User:
        """First registered doctor for the specialization, then for the default one."""
        doctors = self.storage.get_doctors_by_specialization(specialization)
        if not doctors and specialization != self.default_specialization:
            logger.info(f"No {specialization} registered, falling back to {self.default_specialization}")
            doctors = self.storage.get_doctors_by_specialization(self.default_specialization)
        if not doctors:
            raise NoDoctorAvailable(
                f"No doctors available for {specialization} specialization",
                detected_specialization=specialization,
            )
        return doctors[0]

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------
    def approve_doctor(self, shared_report_id: str, acting_patient_id: str) -> SharedReport:
        shared = self.storage.get_shared_report(shared_report_id)
        if shared is None:
            raise SharedReportNotFound("Shared report not found")
        if shared.patient_id != acting_patient_id:
            raise UnauthorizedApproval("Unauthorized to approve this assignment")
        if shared.approval_status == ApprovalStatus.APPROVED:
            raise AlreadyApproved("Doctor already approved")

        updated = self.storage.update_shared_report(
            shared_report_id, {"approvalStatus": ApprovalStatus.APPROVED.value}
        )
        if updated is None:
            raise SharedReportNotFound("Shared report not found")
        logger.info(f"Patient {acting_patient_id} approved shared report {shared_report_id}")
        return updated

    # ------------------------------------------------------------------
    # Doctor views
    # ------------------------------------------------------------------
    def get_doctor_patients(self, doctor: User) -> List[Dict[str, Any]]:
        """Approved, visible relationships, one card per patient (latest share)."""
        self._require_doctor(doctor)
        shares = self.storage.get_shared_reports_by_doctor_email(doctor.email, ApprovalStatus.APPROVED)

        cards: Dict[str, Dict[str, Any]] = {}
        for shared in shares:
            if shared.hide_from_dashboard or not shared.is_currently_active():
                continue
            if shared.patient_id in cards:
                continue
            patient = self.storage.get_user(shared.patient_id) if shared.patient_id else None
            if patient is None:
                continue
            cards[shared.patient_id] = self._patient_card(patient, shared)
        return list(cards.values())

    def get_pending_approvals(self, doctor: User) -> List[Dict[str, Any]]:
        self._require_doctor(doctor)
        shares = self.storage.get_shared_reports_by_doctor_email(doctor.email, ApprovalStatus.PENDING)
        pending = []
        for shared in shares:
            if not shared.is_currently_active():
                continue
            patient = self.storage.get_user(shared.patient_id) if shared.patient_id else None
            if patient is not None:
                pending.append(self._patient_card(patient, shared))
        return pending

    def get_doctor_shared_reports(self, doctor: User) -> List[SharedReport]:
        """Approved, unexpired shares the doctor has not hidden."""
        return [s for s in self._granted_shares(doctor) if not s.hide_from_dashboard]

    # ------------------------------------------------------------------
    # Doctor access
    # ------------------------------------------------------------------
    def _granted_shares(self, doctor: User) -> List[SharedReport]:
        self._require_doctor(doctor)
        return [
            s for s in self.storage.get_shared_reports_by_doctor_email(doctor.email, ApprovalStatus.APPROVED)
            if s.is_currently_active()
        ]

    def doctor_can_view_report(self, doctor: User, report_id: str) -> bool:
        """True when an approved, active share names the report."""
        if doctor.role != UserRole.DOCTOR:
            return False
        return any(
            s.report_id == report_id or report_id in (s.report_ids or [])
            for s in self._granted_shares(doctor)
        )

    def doctor_can_view_patient(self, doctor: User, patient_id: str) -> bool:
        if doctor.role != UserRole.DOCTOR:
            return False
        return any(s.patient_id == patient_id for s in self._granted_shares(doctor))

    def get_patient_records(self, doctor: User, patient_id: str) -> Dict[str, Any]:
        """
        Patient profile, shared reports, medications and timeline.

        Only reports named by one of the doctor's approved shares are
        included; medications and timeline cover the whole patient.

        Raises:
            ForbiddenAction: no approved, active share for this patient
            PatientNotFound: the patient account no longer exists
        """
        shares = [s for s in self._granted_shares(doctor) if s.patient_id == patient_id]
        if not shares:
            raise ForbiddenAction("Access denied. No approved assignment for this patient.")
        patient = self.storage.get_user(patient_id)
        if patient is None:
            raise PatientNotFound("Patient not found")

        shared_ids = set()
        for shared in shares:
            if shared.report_id:
                shared_ids.add(shared.report_id)
            shared_ids.update(shared.report_ids or [])

        return {
            "patient": self._patient_profile(patient),
            "reports": [
                r.to_document() for r in self.storage.get_user_reports(patient_id)
                if r.id in shared_ids
            ],
            "medications": [m.to_document() for m in self.storage.get_user_medications(patient_id)],
            "timeline": [e.to_document() for e in self.storage.get_user_timeline(patient_id)],
        }

    def get_patient_timeline(self, doctor: User, patient_id: str) -> Dict[str, Any]:
        if not self.doctor_can_view_patient(doctor, patient_id):
            raise ForbiddenAction("Access denied. No approved assignment for this patient.")
        patient = self.storage.get_user(patient_id)
        if patient is None:
            raise PatientNotFound("Patient not found")
        return {
            "patient": self._patient_profile(patient),
            "timeline": [e.to_document() for e in self.storage.get_user_timeline(patient_id)],
        }

    def complete_treatment(self, shared_report_id: str, doctor: User) -> SharedReport:
        self._own_share(shared_report_id, doctor)
        return self.storage.update_shared_report(
            shared_report_id, {"treatmentStatus": TreatmentStatus.COMPLETED.value}
        )

    def hide_from_dashboard(self, shared_report_id: str, doctor: User) -> SharedReport:
        self._own_share(shared_report_id, doctor)
        return self.storage.update_shared_report(shared_report_id, {"hideFromDashboard": True})

    def _own_share(self, shared_report_id: str, doctor: User) -> SharedReport:
        self._require_doctor(doctor)
        shared = self.storage.get_shared_report(shared_report_id)
        if shared is None:
            raise SharedReportNotFound("Shared report not found")
        if shared.doctor_email != doctor.email:
            raise ForbiddenAction("Shared report is assigned to another doctor")
        return shared

    @staticmethod
    def _require_doctor(user: User) -> None:
        if user.role != UserRole.DOCTOR:
            raise ForbiddenAction("Only doctors can access this resource")

    @staticmethod
    def _patient_profile(patient: User) -> Dict[str, Any]:
        return {
            "id": patient.id,
            "firstName": patient.first_name,
            "lastName": patient.last_name,
            "email": patient.email,
            "dateOfBirth": patient.date_of_birth,
            "phone": patient.phone,
            "profilePictureUrl": patient.profile_picture_url,
        }

    @staticmethod
    def _patient_card(patient: User, shared: SharedReport) -> Dict[str, Any]:
        return {
            "id": patient.id,
            "firstName": patient.first_name,
            "lastName": patient.last_name,
            "email": patient.email,
            "age": age_from_birth_date(patient.date_of_birth),
            "phone": patient.phone,
            "dateOfBirth": patient.date_of_birth,
            "profilePictureUrl": patient.profile_picture_url,
            "sharedReportId": shared.id,
            "lastReportSummary": shared.report_summary,
            "lastReportDate": shared.created_at.isoformat(),
            "detectedSpecialization": shared.detected_specialization,
            "symptoms": shared.symptoms,
            "description": shared.description,
            "reportURL": shared.report_url,
            "approvalStatus": shared.approval_status.value,
            "treatmentStatus": shared.treatment_status.value,
        }

    # ------------------------------------------------------------------
    # Patient views
    # ------------------------------------------------------------------
    def get_patient_doctors(self, patient_id: str) -> List[Dict[str, Any]]:
        """Doctors assigned to the patient, newest relationship first."""
        doctors = []
        for shared in self.storage.get_shared_reports_by_patient(patient_id):
            if not shared.doctor_id:
                continue
            doctor = self.storage.get_user(shared.doctor_id)
            if doctor is None:
                continue
            doctors.append({
                "id": doctor.id,
                "firstName": doctor.first_name,
                "lastName": doctor.last_name,
                "email": doctor.email,
                "specialization": doctor.specialization,
                "phone": doctor.phone,
                "profilePictureUrl": doctor.profile_picture_url,
                "sharedReportId": shared.id,
                "reportId": shared.report_id,
                "detectedSpecialization": shared.detected_specialization,
                "approvalStatus": shared.approval_status.value,
                "treatmentStatus": shared.treatment_status.value,
                "expiresAt": shared.expires_at.isoformat(),
            })
        return doctors
