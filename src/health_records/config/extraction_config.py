# ============================================================================
# src/health_records/config/extraction_config.py
# ============================================================================
"""
Extraction Settings
- OCR timeout and character whitelist
- PDF text-layer threshold and OCR fallback bounds
- Upload limits
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OCR_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Tesseract is killed after this many seconds per image"
    )
    OCR_CHAR_WHITELIST: str = Field(
        default="ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.,:/%-() ",
        description="Characters Tesseract is allowed to emit"
    )
    PDF_MIN_TEXT_CHARS: int = Field(
        default=50,
        description="Below this many characters a PDF is treated as scanned"
    )
    PDF_OCR_MAX_PAGES: int = Field(
        default=10,
        description="Maximum pages rasterized for the OCR fallback"
    )
    PDF_RENDER_SCALE: float = Field(
        default=2.0,
        description="Rasterization scale for the OCR fallback (1.0 = 72 DPI)"
    )
    MIN_ANALYSIS_CHARS: int = Field(
        default=50,
        description="Extracted text must be longer than this to be sent for analysis"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted upload size"
    )
    ALLOWED_MIME_TYPES: List[str] = Field(
        default=["application/pdf", "image/jpeg", "image/png", "image/jpg"],
        description="Accepted upload content types"
    )


extraction_settings = ExtractionSettings()
