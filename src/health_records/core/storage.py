# ============================================================================
# src/health_records/core/storage.py
# ============================================================================
"""
Typed access to the document store.

Wraps DocumentStore collections with the record models and owns secondary
ordering: the store filters on one field, this layer sorts in Python.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..constants import ApprovalStatus, UserRole
from .document_store import DocumentStore
from .models import (
    HealthTimelineEntry,
    Medication,
    Reminder,
    Report,
    SharedReport,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)

USERS = "users"
REPORTS = "reports"
MEDICATIONS = "medications"
REMINDERS = "reminders"
TIMELINE = "health_timeline"
SHARED_REPORTS = "shared_reports"


def _newest_first(records, attr: str = "created_at"):
    return sorted(records, key=lambda r: getattr(r, attr), reverse=True)


class HealthRecordsStorage:
    """Record-level operations used by the pipeline, services and API."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, user: User) -> User:
        self.store.insert(USERS, user.to_document())
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        doc = self.store.get(USERS, user_id)
        return User.model_validate(doc) if doc else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        docs = self.store.find_by(USERS, "email", email)
        return User.model_validate(docs[0]) if docs else None

    def get_doctors_by_specialization(self, specialization: str) -> List[User]:
        docs = self.store.find_by(USERS, "specialization", specialization)
        return [
            u for u in (User.model_validate(d) for d in docs)
            if u.role == UserRole.DOCTOR
        ]

    def get_all_doctors(self) -> List[User]:
        docs = self.store.find_by(USERS, "role", UserRole.DOCTOR.value)
        return [User.model_validate(d) for d in docs]

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def create_report(self, report: Report) -> Report:
        self.store.insert(REPORTS, report.to_document())
        return report

    def get_report(self, report_id: str) -> Optional[Report]:
        doc = self.store.get(REPORTS, report_id)
        return Report.model_validate(doc) if doc else None

    def update_report(self, report_id: str, fields: Dict[str, Any]) -> Optional[Report]:
        """
        Partial update using camelCase document keys.

        Returns None when the report was deleted in the meantime.
        """
        fields = {**fields, "updatedAt": utcnow().isoformat()}
        doc = self.store.update(REPORTS, report_id, fields)
        return Report.model_validate(doc) if doc else None

    def get_user_reports(self, user_id: str) -> List[Report]:
        docs = self.store.find_by(REPORTS, "userId", user_id)
        return _newest_first(Report.model_validate(d) for d in docs)

    def delete_report(self, report_id: str) -> bool:
        return self.store.delete(REPORTS, report_id)

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------
    def create_medication(self, medication: Medication) -> Medication:
        self.store.insert(MEDICATIONS, medication.to_document())
        return medication

    def get_medication(self, medication_id: str) -> Optional[Medication]:
        doc = self.store.get(MEDICATIONS, medication_id)
        return Medication.model_validate(doc) if doc else None

    def get_user_medications(self, user_id: str) -> List[Medication]:
        docs = self.store.find_by(MEDICATIONS, "userId", user_id)
        return _newest_first(Medication.model_validate(d) for d in docs)

    def get_active_medications(self, user_id: str) -> List[Medication]:
        return [m for m in self.get_user_medications(user_id) if m.is_active]

    def update_medication(self, medication_id: str, fields: Dict[str, Any]) -> Optional[Medication]:
        fields = {**fields, "updatedAt": utcnow().isoformat()}
        doc = self.store.update(MEDICATIONS, medication_id, fields)
        return Medication.model_validate(doc) if doc else None

    def delete_medication(self, medication_id: str) -> bool:
        return self.store.delete(MEDICATIONS, medication_id)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    def create_reminder(self, reminder: Reminder) -> Reminder:
        self.store.insert(REMINDERS, reminder.to_document())
        return reminder

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        doc = self.store.get(REMINDERS, reminder_id)
        return Reminder.model_validate(doc) if doc else None

    def get_user_reminders(self, user_id: str) -> List[Reminder]:
        """Soonest scheduled first."""
        docs = self.store.find_by(REMINDERS, "userId", user_id)
        return sorted(
            (Reminder.model_validate(d) for d in docs),
            key=lambda r: r.scheduled_time,
        )

    def get_active_reminders(self, user_id: str) -> List[Reminder]:
        return [r for r in self.get_user_reminders(user_id) if r.is_pending]

    def update_reminder(self, reminder_id: str, fields: Dict[str, Any]) -> Optional[Reminder]:
        doc = self.store.update(REMINDERS, reminder_id, fields)
        return Reminder.model_validate(doc) if doc else None

    def delete_reminder(self, reminder_id: str) -> bool:
        return self.store.delete(REMINDERS, reminder_id)

    # ------------------------------------------------------------------
    # Health timeline (append-only)
    # ------------------------------------------------------------------
    def create_timeline_entry(self, entry: HealthTimelineEntry) -> HealthTimelineEntry:
        self.store.insert(TIMELINE, entry.to_document())
        return entry

    def get_user_timeline(self, user_id: str) -> List[HealthTimelineEntry]:
        docs = self.store.find_by(TIMELINE, "userId", user_id)
        return _newest_first((HealthTimelineEntry.model_validate(d) for d in docs), "date")

    # ------------------------------------------------------------------
    # Shared reports
    # ------------------------------------------------------------------
    def create_shared_report(self, shared: SharedReport) -> SharedReport:
        self.store.insert(SHARED_REPORTS, shared.to_document())
        return shared

    def create_shared_report_if_absent(self, shared: SharedReport) -> Tuple[SharedReport, bool]:
        doc, created = self.store.insert_if_absent(SHARED_REPORTS, shared.to_document())
        return SharedReport.model_validate(doc), created

    def get_shared_report(self, shared_id: str) -> Optional[SharedReport]:
        doc = self.store.get(SHARED_REPORTS, shared_id)
        return SharedReport.model_validate(doc) if doc else None

    def get_shared_report_by_token(self, token: str) -> Optional[SharedReport]:
        docs = self.store.find_by(SHARED_REPORTS, "shareToken", token)
        return SharedReport.model_validate(docs[0]) if docs else None

    def get_shared_reports_by_patient(self, patient_id: str) -> List[SharedReport]:
        docs = self.store.find_by(SHARED_REPORTS, "patientId", patient_id)
        return _newest_first(SharedReport.model_validate(d) for d in docs)

    def get_shared_reports_by_owner(self, user_id: str) -> List[SharedReport]:
        docs = self.store.find_by(SHARED_REPORTS, "userId", user_id)
        return _newest_first(SharedReport.model_validate(d) for d in docs)

    def get_shared_reports_by_doctor_email(
        self,
        doctor_email: str,
        approval_status: Optional[ApprovalStatus] = None,
    ) -> List[SharedReport]:
        docs = self.store.find_by(SHARED_REPORTS, "doctorEmail", doctor_email)
        shares = [SharedReport.model_validate(d) for d in docs]
        if approval_status is not None:
            shares = [s for s in shares if s.approval_status == approval_status]
        return _newest_first(shares)

    def update_shared_report(self, shared_id: str, fields: Dict[str, Any]) -> Optional[SharedReport]:
        doc = self.store.update(SHARED_REPORTS, shared_id, fields)
        return SharedReport.model_validate(doc) if doc else None
