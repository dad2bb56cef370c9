# ============================================================================
# src/health_records/core/pipeline.py
# ============================================================================
"""
Report Ingestion Pipeline

Flow for one uploaded file:
1. Placeholder report persisted at upload time (status=processing)
2. Text extraction (OCR / PDF). Failure is recorded, not raised
3. Extracted text + classified type persisted
4. Content sufficiency gate: short or sentinel text gets a diagnostic
   summary and never reaches the analyzer
5. Analysis: findings for blood tests / general / imaging, medication
   extraction (+ one Medication per item) for prescriptions
6. Final status: failed only if extraction failed, otherwise completed
7. One timeline entry for reports whose extraction succeeded

Steps run strictly in order for a report. The only shared state is the
document store; a report deleted mid-run turns later writes into no-ops.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from ..classifiers.document_classifier import DocumentClassifier
from ..config import extraction_settings
from ..constants import (
    DocumentType,
    IMAGING_TYPES,
    ReportStatus,
    SEVERITY_BY_RISK,
    timeline_event_for,
)
from ..extractors import EXTRACTION_SENTINELS, TextExtractor
from ..analysis.medical_analyzer import MedicalAnalyzer
from ..analysis.medication_normalizer import to_medication
from ..utils.exceptions import InvalidStatusTransition
from ..utils.logging import log_stage
from .models import (
    AnalysisUnavailableData,
    BloodTestAnalysis,
    GeneralAnalysis,
    HealthTimelineEntry,
    ImagingAnalysis,
    InsufficientContentData,
    MedicalAnalysis,
    MedicationInfo,
    PrescriptionAnalysis,
    Report,
)
from .storage import HealthRecordsStorage


INSUFFICIENT_CONTENT_SUMMARY = (
    "Document uploaded but OCR could not extract readable text. This may be due to:\n\n"
    "- Low image quality or resolution\n"
    "- Blurry or unclear text\n"
    "- Handwritten content (not supported)\n"
    "- Heavy shadows or glare on the document\n\n"
    "Please try:\n"
    "1. Re-scanning with higher quality (at least 300 DPI)\n"
    "2. Ensuring good lighting without shadows\n"
    "3. Taking a clear, straight photo of the document\n"
    "4. Using a PDF with selectable text instead of a scan"
)

ANALYSIS_UNAVAILABLE_SUMMARY = (
    "Document processed successfully. Professional medical review recommended."
)

TECHNICAL_FAILURE_SUMMARY = (
    "Processing failed due to technical error. Please try uploading again."
)

_ANALYSIS_KINDS = {
    DocumentType.BLOOD_TEST: BloodTestAnalysis,
    DocumentType.GENERAL: GeneralAnalysis,
    DocumentType.X_RAY: ImagingAnalysis,
    DocumentType.MRI: ImagingAnalysis,
    DocumentType.CT_SCAN: ImagingAnalysis,
}


def extract_metrics(analysis: Optional[MedicalAnalysis]) -> Dict[str, str]:
    """keyFinding parameter (lower-cased, whitespace -> '_') -> value."""
    if analysis is None:
        return {}
    return {
        re.sub(r"\s+", "_", finding.parameter.lower()): finding.value
        for finding in analysis.key_findings
        if finding.parameter and finding.value
    }


class ReportIngestionPipeline:
    """
    Orchestrates extraction, classification and analysis for uploaded reports.

    process() is meant to run as a detached background task: it never
    raises, and every outcome ends up on the stored report.
    """

    def __init__(
        self,
        storage: HealthRecordsStorage,
        extractor: TextExtractor,
        analyzer: MedicalAnalyzer,
        classifier: Optional[DocumentClassifier] = None,
        min_analysis_chars: Optional[int] = None,
    ):
        self.storage = storage
        self.extractor = extractor
        self.analyzer = analyzer
        self.classifier = classifier or DocumentClassifier()
        self.min_analysis_chars = (
            min_analysis_chars
            if min_analysis_chars is not None
            else extraction_settings.MIN_ANALYSIS_CHARS
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def create_placeholder(self, user_id: str, file_name: str, file_url: str) -> Report:
        """Persist the processing-state report returned to the uploader."""
        report = Report(
            user_id=user_id,
            file_name=file_name,
            file_url=file_url,
            report_type=DocumentType.GENERAL,
            original_text="",
            status=ReportStatus.PROCESSING,
        )
        self.storage.create_report(report)
        self.logger.info(f"Created report {report.id} for {file_name}", extra={"report_id": report.id})
        return report

    def has_sufficient_content(self, text: Optional[str]) -> bool:
        return bool(text) and len(text) > self.min_analysis_chars and text not in EXTRACTION_SENTINELS

    # ------------------------------------------------------------------
    # Background processing
    # ------------------------------------------------------------------
    async def process(self, report_id: str, data: bytes, mime_type: Optional[str]) -> Optional[Report]:
        """
        Run the full pipeline for one report.

        Returns:
            The final report, or None if it was deleted while processing.
        """
        self.logger.info(f"Starting background processing for report {report_id}", extra={"report_id": report_id})
        try:
            return await self._run(report_id, data, mime_type)
        except Exception as e:
            self.logger.exception(f"Report processing failed for {report_id}: {e}", extra={"report_id": report_id})
            return self._finish(report_id, ReportStatus.FAILED, {"summary": TECHNICAL_FAILURE_SUMMARY})

    async def _run(self, report_id: str, data: bytes, mime_type: Optional[str]) -> Optional[Report]:
        # Extraction
        extraction_failed = False
        report_type = DocumentType.GENERAL
        try:
            with log_stage(self.logger, f"Text extraction for {report_id}"):
                text = await self.extractor.extract(data, mime_type)
            if text:
                report_type = self.classifier.classify(text)
                self.logger.info(f"Detected document type: {report_type.value}", extra={"report_id": report_id})
        except Exception as e:
            extraction_failed = True
            text = str(e) or "Text extraction failed"

        if self.storage.update_report(report_id, {
            "originalText": text,
            "reportType": report_type.value,
        }) is None:
            self.logger.warning(f"Report {report_id} deleted during processing, stopping")
            return None

        # Analysis
        if extraction_failed or not self.has_sufficient_content(text):
            self.logger.info(
                "Insufficient text content extracted. Document may be low quality or corrupted.",
                extra={"report_id": report_id},
            )
            analysis = None
            extracted_data = InsufficientContentData(extracted_length=len(text or ""))
            summary = INSUFFICIENT_CONTENT_SUMMARY
        else:
            analysis, extracted_data, summary = await self._analyze(report_id, text, report_type)

        # Final state
        status = ReportStatus.FAILED if extraction_failed else ReportStatus.COMPLETED
        report = self._finish(report_id, status, {
            "analysis": analysis.to_document() if analysis else None,
            "extractedData": extracted_data.to_document(),
            "summary": text if extraction_failed else summary,
        })
        if report is None:
            return None

        if not extraction_failed:
            self._record_timeline(report, analysis, extracted_data, summary)

        self.logger.info(f"Finished processing report {report_id}: {status.value}", extra={"report_id": report_id})
        return report

    async def _analyze(self, report_id: str, text: str, report_type: DocumentType) -> Tuple:
        """(analysis, extracted_data, summary) for text that passed the gate."""
        try:
            with log_stage(self.logger, f"Analysis of {report_type.value} report {report_id}"):
                if report_type == DocumentType.PRESCRIPTION:
                    medications = await self.analyzer.extract_medications(text)
                    self._store_medications(report_id, medications)
                    return (
                        None,
                        PrescriptionAnalysis(medications=medications),
                        f"Prescription contains {len(medications)} medication(s)",
                    )

                analysis = await self.analyzer.analyze(text)
                kind = _ANALYSIS_KINDS.get(report_type, GeneralAnalysis)
                return analysis, kind.model_validate(analysis.model_dump()), analysis.summary
        except Exception as e:
            self.logger.error(f"Analysis failed: {e}", extra={"report_id": report_id})
            return None, AnalysisUnavailableData(), ANALYSIS_UNAVAILABLE_SUMMARY

    def _store_medications(self, report_id: str, medications: List[MedicationInfo]) -> None:
        report = self.storage.get_report(report_id)
        if report is None:
            return
        for info in medications:
            try:
                self.storage.create_medication(to_medication(info, report.user_id, report.id))
            except Exception as e:
                self.logger.error(f"Failed to create medication {info.name!r}: {e}", extra={"report_id": report_id})

    def _finish(self, report_id: str, status: ReportStatus, fields: Dict) -> Optional[Report]:
        """Apply the terminal status transition together with the final fields."""
        report = self.storage.get_report(report_id)
        if report is None:
            self.logger.warning(f"Report {report_id} no longer exists, final update skipped")
            return None
        try:
            report.transition_to(status)
        except InvalidStatusTransition as e:
            self.logger.error(f"Final update rejected for {report_id}: {e}")
            return None
        return self.storage.update_report(report_id, {**fields, "status": status.value})

    def _record_timeline(
        self,
        report: Report,
        analysis: Optional[MedicalAnalysis],
        extracted_data,
        summary: str,
    ) -> Optional[HealthTimelineEntry]:
        try:
            report_type = report.report_type
            severity = None
            if report_type in IMAGING_TYPES and analysis is not None:
                severity = SEVERITY_BY_RISK[analysis.risk_level]

            entry = HealthTimelineEntry(
                user_id=report.user_id,
                report_id=report.id,
                date=report.uploaded_at or report.created_at,
                event_type=timeline_event_for(report_type),
                report_type=report_type.value,
                title=f"{report_type.value.replace('_', ' ')} - {report.file_name}",
                description=summary,
                summary=summary,
                file_url=report.file_url,
                analysis=analysis,
                risk_level=analysis.risk_level if analysis else None,
                metrics=extract_metrics(analysis) or None,
                medications=(
                    extracted_data.medications
                    if isinstance(extracted_data, PrescriptionAnalysis)
                    else None
                ),
                severity_level=severity,
            )
            return self.storage.create_timeline_entry(entry)
        except Exception as e:
            # The report keeps its completed status
            self.logger.error(f"Failed to create timeline entry for {report.id}: {e}")
            return None
