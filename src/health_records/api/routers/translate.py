# ============================================================================
# src/health_records/api/routers/translate.py
# ============================================================================

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...core.models import User
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/api", tags=["translate"])


class TranslateRequest(BaseModel):
    text: Optional[str] = None
    target_language: Optional[str] = Field(default=None, alias="targetLanguage")


@router.post("/translate")
async def translate(
    payload: TranslateRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if not payload.text or not payload.target_language:
        raise HTTPException(status_code=400, detail="Text and target language are required")

    translated = await services.analyzer.translate_medical_text(payload.text, payload.target_language)
    return {"translatedText": translated, "targetLanguage": payload.target_language}
