# ============================================================================
# src/health_records/extractors/ocr_extractor.py
# ============================================================================
"""
OCR for uploaded images and rasterized PDF pages.

Tesseract (via pytesseract) runs as a subprocess per image. pytesseract
kills the subprocess when the timeout elapses, and the process exits on its
own on success, so no worker outlives a call.

Recognition is restricted to a character whitelist of letters, digits and
common report punctuation, with interword spacing preserved so that
tabular lab values stay aligned.
"""

import asyncio
import io
import logging
import shlex
from typing import Optional

import pytesseract
from PIL import Image, UnidentifiedImageError

from ..config import extraction_settings
from ..utils.exceptions import ExtractionError, ExtractionTimeout

# Returned when OCR succeeds but finds nothing
NO_TEXT_DETECTED = "No text detected"


class OCRExtractor:
    """
    Tesseract OCR bounded by a per-image timeout.

    Config options come from extraction_settings unless overridden:
        timeout_seconds: hard limit per image (default: 30)
        whitelist: characters Tesseract may emit
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        whitelist: Optional[str] = None,
    ):
        self.timeout_seconds = timeout_seconds or extraction_settings.OCR_TIMEOUT_SECONDS
        self.whitelist = whitelist or extraction_settings.OCR_CHAR_WHITELIST
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def tesseract_config(self) -> str:
        whitelist = shlex.quote(f"tessedit_char_whitelist={self.whitelist}")
        return f"-c {whitelist} -c preserve_interword_spaces=1"

    def recognize(self, image: Image.Image) -> str:
        """
        OCR a single image (blocking).

        Returns:
            Recognized text, stripped. Empty when nothing was found.

        Raises:
            ExtractionTimeout: Tesseract was killed after timeout_seconds
            ExtractionError: Tesseract failed or is not installed
        """
        try:
            text = pytesseract.image_to_string(
                image,
                config=self.tesseract_config,
                timeout=self.timeout_seconds,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise ExtractionError(f"OCR processing failed: {e}") from e
        except RuntimeError as e:
            # pytesseract signals a killed process with a bare RuntimeError
            if "timeout" in str(e).lower():
                self.logger.warning(f"OCR timed out after {self.timeout_seconds:g}s")
                raise ExtractionTimeout(
                    f"OCR timeout after {self.timeout_seconds:g} seconds",
                    self.timeout_seconds,
                ) from e
            raise ExtractionError(f"OCR processing failed: {e}") from e

        return (text or "").strip()

    async def extract_from_image(self, data: bytes) -> str:
        """
        OCR an uploaded image file.

        Returns:
            The recognized text, or NO_TEXT_DETECTED when OCR found nothing.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ExtractionError(f"OCR processing failed: cannot read image ({e})") from e

        self.logger.info(f"Running OCR on {image.width}x{image.height} image")
        text = (await asyncio.to_thread(self.recognize, image) or "").strip()
        self.logger.info(f"OCR completed: {len(text)} chars")
        return text or NO_TEXT_DETECTED
