# ============================================================================
# src/health_records/core/report_export.py
# ============================================================================
"""
Plain-text rendering of an analyzed report for download.
"""

from datetime import datetime
from typing import List, Optional

from ..extractors import EXTRACTION_SENTINELS
from .models import PrescriptionAnalysis, Report, User, utcnow

RULE = "-" * 80

DISCLAIMER = (
    "DISCLAIMER: This analysis is for informational purposes only and is not a\n"
    "substitute for professional medical advice, diagnosis, or treatment. Always\n"
    "consult with your healthcare provider regarding any medical concerns."
)


def export_filename(report: Report, today: Optional[datetime] = None) -> str:
    today = today or utcnow()
    return f"medical_report_{report.id}_{today.date().isoformat()}.txt"


def _section(title: str, lines: List[str]) -> List[str]:
    return [title, RULE, *lines, ""]


def format_report_text(report: Report, owner: User, generated_at: Optional[datetime] = None) -> str:
    """
    Render summary, findings, recommendations, medications and the
    extracted text as a fixed-width document.
    """
    generated_at = generated_at or utcnow()
    out = [
        "MEDICAL REPORT ANALYSIS",
        "=" * 80,
        "",
        f"Patient: {owner.full_name}",
        f"Report Date: {report.created_at.date().isoformat()}",
        f"Report Type: {report.report_type.value.replace('_', ' ').upper()}",
        f"File Name: {report.file_name}",
        f"Status: {report.status.value.upper()}",
        "",
        RULE,
        "",
    ]

    if report.summary:
        out += _section("SUMMARY", [report.summary])

    analysis = report.analysis
    if analysis is not None:
        if analysis.key_findings:
            findings = []
            for i, finding in enumerate(analysis.key_findings, 1):
                findings += [
                    f"{i}. {finding.parameter}",
                    f"   Value: {finding.value}",
                    f"   Normal Range: {finding.normal_range}",
                    f"   Status: {finding.status.value.upper()}",
                    f"   Explanation: {finding.explanation}",
                ]
            out += _section("KEY FINDINGS", findings)
        if analysis.recommendations:
            out += _section(
                "RECOMMENDATIONS",
                [f"{i}. {rec}" for i, rec in enumerate(analysis.recommendations, 1)],
            )
        if analysis.next_steps:
            out += _section(
                "NEXT STEPS",
                [f"{i}. {step}" for i, step in enumerate(analysis.next_steps, 1)],
            )
        out += [f"RISK LEVEL: {analysis.risk_level.value.upper()}", ""]

    if isinstance(report.extracted_data, PrescriptionAnalysis) and report.extracted_data.medications:
        meds = []
        for i, med in enumerate(report.extracted_data.medications, 1):
            meds += [
                f"{i}. {med.name}",
                f"   Dosage: {med.dosage}",
                f"   Frequency: {med.frequency}",
                f"   Instructions: {med.instructions}",
            ]
            if med.side_effects:
                meds.append(f"   Side Effects: {', '.join(med.side_effects)}")
        out += _section("MEDICATIONS", meds)

    text = (report.original_text or "").strip()
    if text and text not in EXTRACTION_SENTINELS:
        out += _section("ORIGINAL TEXT", [text])

    out += [RULE, "", DISCLAIMER, "", f"Generated on: {generated_at.isoformat(timespec='seconds')}", ""]
    return "\n".join(out)
