# ============================================================================
# src/health_records/core/sharing.py
# ============================================================================
"""
Manual report sharing through an unguessable link token.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ..analysis.medical_analyzer import MedicalAnalyzer
from ..config import assignment_settings
from ..constants import ApprovalStatus
from ..utils.exceptions import ForbiddenAction, ReportNotFound, SharedReportNotFound
from .models import SharedReport, utcnow
from .storage import HealthRecordsStorage

logger = logging.getLogger(__name__)


class ShareService:

    def __init__(self, storage: HealthRecordsStorage, analyzer: MedicalAnalyzer):
        self.storage = storage
        self.analyzer = analyzer

    def create_share(
        self,
        owner_id: str,
        report_ids: List[str],
        doctor_email: Optional[str] = None,
        expires_in_days: Optional[int] = None,
    ) -> SharedReport:
        """
        Share the owner's reports. The owner initiates it, so the share
        needs no further approval.

        Raises:
            ReportNotFound: a report id does not exist
            ForbiddenAction: a report belongs to someone else
        """
        for report_id in report_ids:
            report = self.storage.get_report(report_id)
            if report is None:
                raise ReportNotFound(f"Report {report_id} not found")
            if report.user_id != owner_id:
                raise ForbiddenAction("Can only share your own reports")

        days = expires_in_days or assignment_settings.DEFAULT_SHARE_EXPIRY_DAYS
        shared = SharedReport(
            user_id=owner_id,
            patient_id=owner_id,
            doctor_email=doctor_email,
            report_ids=list(report_ids),
            expires_at=utcnow() + timedelta(days=days),
            approval_status=ApprovalStatus.APPROVED,
        )
        self.storage.create_shared_report(shared)
        logger.info(f"User {owner_id} shared {len(report_ids)} report(s), expires in {days} days")
        return shared

    async def view_share(self, share_token: str) -> Dict[str, Any]:
        """
        Resolve a share link and count the view.

        Raises:
            SharedReportNotFound: unknown token, deactivated or expired share
            AnalysisUnavailable: the health summary could not be generated
        """
        shared = self.storage.get_shared_report_by_token(share_token)
        if shared is None or not shared.is_currently_active():
            raise SharedReportNotFound("Shared report not found or expired")

        view_count = shared.view_count + 1
        self.storage.update_shared_report(shared.id, {"viewCount": view_count})

        report_ids = list(shared.report_ids or [])
        if shared.report_id and shared.report_id not in report_ids:
            report_ids.append(shared.report_id)
        reports = [r for r in (self.storage.get_report(i) for i in report_ids) if r is not None]
        medications = self.storage.get_active_medications(shared.user_id)
        health_summary = await self.analyzer.generate_health_summary(reports, medications)

        patient = self.storage.get_user(shared.user_id)
        return {
            "patient": {
                "firstName": patient.first_name if patient else None,
                "lastName": patient.last_name if patient else None,
            },
            "reports": [r.to_document() for r in reports],
            "medications": [m.to_document() for m in medications],
            "healthSummary": health_summary,
            "sharedAt": shared.created_at.isoformat(),
            "viewCount": view_count,
        }
