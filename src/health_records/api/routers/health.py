# ============================================================================
# src/health_records/api/routers/health.py
# ============================================================================

from fastapi import APIRouter, Depends

from ... import __version__
from ..dependencies import Services, get_services

router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    return {"status": "ok", "service": "Health Records API"}


@router.get("/api/health")
async def health(services: Services = Depends(get_services)):
    """Service status plus the LLM backend check. Degraded AI is still healthy."""
    llm_status = await services.llm.health_check()
    return {
        "status": "healthy",
        "version": __version__,
        "llm": llm_status,
        "llmStatistics": services.llm.get_statistics(),
    }
