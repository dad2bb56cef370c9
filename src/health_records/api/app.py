# ============================================================================
# src/health_records/api/app.py
# ============================================================================
"""
FastAPI application for the health records service.

Serves report upload and status, doctor assignment and approval, the
doctor and patient dashboards, medications, timelines and share links.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import base_settings, logging_settings
from ..utils.logging import setup_logging
from .dependencies import Services, build_services
from .errors import register_error_handlers
from .routers import (
    assignments,
    doctors,
    health,
    medications,
    patients,
    reminders,
    reports,
    share,
    translate,
    users,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(
        level=logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_FORMAT_JSON,
    )
    logger.info(f"Health Records API {__version__} starting")
    yield
    await app.state.services.llm.close()
    logger.info("Health Records API stopped")


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-built services (tests). Built from settings when omitted.
    """
    if services is None:
        base_settings.create_directories()
        services = build_services()

    app = FastAPI(
        title="Health Records API",
        description="Medical report ingestion, AI analysis and doctor assignment",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=base_settings.CORS_ORIGINS,
        allow_origin_regex=base_settings.CORS_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    for module in (
        health, users, reports, assignments, doctors,
        patients, medications, reminders, share, translate,
    ):
        app.include_router(module.router)

    return app
