# ============================================================================
# src/health_records/api/errors.py
# ============================================================================
"""
Domain exception -> HTTP response mapping.

Request-path failures (assignment, approval, ownership) surface to the
client immediately. The background pipeline never reaches this layer.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..utils.exceptions import (
    AlreadyApproved,
    AnalysisUnavailable,
    ForbiddenAction,
    HealthRecordsError,
    InsufficientContent,
    InvalidPatient,
    InvalidStatusTransition,
    NoDoctorAvailable,
    PatientNotFound,
    ReportNotFound,
    ReportNotReady,
    SharedReportNotFound,
    UnauthorizedApproval,
    UnsupportedFileType,
)

logger = logging.getLogger(__name__)

# First matching class wins, so subclasses come before their bases
STATUS_BY_ERROR = [
    (NoDoctorAvailable, 404),
    (PatientNotFound, 404),
    (ReportNotFound, 404),
    (SharedReportNotFound, 404),
    (InvalidPatient, 400),
    (ReportNotReady, 400),
    (AlreadyApproved, 400),
    (InvalidStatusTransition, 400),
    (UnsupportedFileType, 400),
    (InsufficientContent, 400),
    (ForbiddenAction, 403),
    (UnauthorizedApproval, 403),
    (AnalysisUnavailable, 503),
]


def status_for(exc: HealthRecordsError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def health_records_error_handler(request: Request, exc: HealthRecordsError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")

    content = {"detail": str(exc)}
    if isinstance(exc, NoDoctorAvailable):
        content["detectedSpecialization"] = exc.detected_specialization
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HealthRecordsError, health_records_error_handler)
