# ============================================================================
# src/health_records/api/routers/reports.py
# ============================================================================
"""
Report upload, retrieval and deletion.

Upload returns as soon as the placeholder report is stored; extraction and
analysis run as a background task. Clients poll GET /api/reports/{id}
until originalText is filled in.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from ...config import extraction_settings
from ...core.models import Report, User
from ...core.report_export import export_filename, format_report_text
from ...extractors import sniff_mime_type
from ..dependencies import Services, get_current_user, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])

TOO_LARGE = "File too large. Maximum size is 10MB."


def _readable_report(services: Services, report_id: str, user: User) -> Report:
    report = services.storage.get_report(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    if report.user_id != user.id and not services.assignments.doctor_can_view_report(user, report.id):
        raise HTTPException(status_code=403, detail="Access denied")
    return report


@router.post("/upload", status_code=201)
async def upload_report(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """
    Store the file, create a processing report and queue the pipeline.

    Rejects files over the size limit (413) and anything that is not a
    PDF, JPEG or PNG (400).
    """
    limit = extraction_settings.MAX_UPLOAD_BYTES
    if file.size is not None and file.size > limit:
        raise HTTPException(status_code=413, detail=TOO_LARGE)
    # At most one byte past the limit is buffered
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(status_code=413, detail=TOO_LARGE)
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")

    mime_type = sniff_mime_type(content, file.content_type)
    if mime_type not in extraction_settings.ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PDF, JPEG, and PNG files are allowed.",
        )

    file_name = file.filename or "upload"
    file_url = services.blob_store.store(content, file_name)
    report = services.pipeline.create_placeholder(user.id, file_name, file_url)

    background_tasks.add_task(services.pipeline.process, report.id, content, mime_type)
    logger.info(f"Queued processing for report {report.id} ({mime_type}, {len(content)} bytes)")

    return {
        "reportId": report.id,
        "status": report.status.value,
        "fileName": report.file_name,
        "fileUrl": report.file_url,
    }


@router.get("")
async def list_reports(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [r.to_document() for r in services.storage.get_user_reports(user.id)]


@router.get("/{report_id}")
async def get_report(
    report_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return _readable_report(services, report_id, user).to_document()


@router.get("/{report_id}/download")
async def download_report(
    report_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """The analysis as a plain-text attachment."""
    report = _readable_report(services, report_id, user)
    owner = services.storage.get_user(report.user_id)
    if owner is None:
        raise HTTPException(status_code=404, detail="User not found")

    return Response(
        content=format_report_text(report, owner),
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(report)}"'},
    )


@router.delete("/{report_id}")
async def delete_report(
    report_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    report = services.storage.get_report(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    if report.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    services.storage.delete_report(report_id)
    services.blob_store.delete(report.file_url)
    logger.info(f"Deleted report {report_id}")
    return {"message": "Report deleted successfully"}
