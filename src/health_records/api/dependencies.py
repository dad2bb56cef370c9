# ============================================================================
# src/health_records/api/dependencies.py
# ============================================================================
"""
Service wiring and request dependencies.

Everything the routers need is built once per app in build_services() and
kept on app.state. Tests pass their own Services into create_app().
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from ..analysis.medical_analyzer import MedicalAnalyzer
from ..analysis.specialization_matcher import SpecializationMatcher
from ..config import base_settings
from ..constants import UserRole
from ..core.assignment import DoctorAssignmentService
from ..core.blob_store import BlobStore
from ..core.document_store import DocumentStore
from ..core.models import User
from ..core.pipeline import ReportIngestionPipeline
from ..core.sharing import ShareService
from ..core.storage import HealthRecordsStorage
from ..extractors import TextExtractor
from ..llm.base import BaseLLMClient
from ..llm.client import create_client

logger = logging.getLogger(__name__)


@dataclass
class Services:
    storage: HealthRecordsStorage
    blob_store: BlobStore
    llm: BaseLLMClient
    analyzer: MedicalAnalyzer
    pipeline: ReportIngestionPipeline
    assignments: DoctorAssignmentService
    sharing: ShareService


def build_services(
    database_path: Optional[Path] = None,
    uploads_dir: Optional[Path] = None,
    llm: Optional[BaseLLMClient] = None,
    extractor: Optional[TextExtractor] = None,
) -> Services:
    storage = HealthRecordsStorage(DocumentStore(database_path or base_settings.DATABASE_PATH))
    llm = llm or create_client()
    analyzer = MedicalAnalyzer(llm)
    matcher = SpecializationMatcher(llm)

    logger.info(f"LLM backend: {llm.backend_type.value} (model={llm.model_name})")
    return Services(
        storage=storage,
        blob_store=BlobStore(uploads_dir or base_settings.UPLOADS_DIR),
        llm=llm,
        analyzer=analyzer,
        pipeline=ReportIngestionPipeline(storage, extractor or TextExtractor(), analyzer),
        assignments=DoctorAssignmentService(storage, matcher),
        sharing=ShareService(storage, analyzer),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> User:
    """Acting user from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = services.storage.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid user")
    return user


def get_current_doctor(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.DOCTOR:
        raise HTTPException(status_code=403, detail="Only doctors can access this resource")
    return user
