# src/health_records/extractors/text_extractor.py
"""
Text extraction from uploaded report files.

Images go straight to OCR. PDFs go through the text layer first:
1. pypdfium2: Fast, good Unicode support, best for modern PDFs
2. PyPDF2: Fallback, widely compatible
3. OCR over rasterized pages when the text layer is nearly empty (scans)

Whichever of text layer / OCR produced more characters wins.
"""

import asyncio
import io
import logging
from typing import List, Optional

import pypdfium2
import PyPDF2
from PIL import Image

from ..config import extraction_settings
from ..utils.exceptions import ExtractionError, UnsupportedFileType
from .ocr_extractor import OCRExtractor

# Returned when a PDF has neither a text layer nor OCR-able content
NO_TEXT_IN_PDF = "No text found in PDF"

PDF_MIME_TYPE = "application/pdf"


def sniff_mime_type(data: bytes, declared: Optional[str] = None) -> str:
    """
    Resolve the content type from magic bytes, falling back to the declared one.

    Browsers and mobile clients frequently send application/octet-stream.
    """
    header = data[:16]
    if header.startswith(b"%PDF"):
        return PDF_MIME_TYPE
    if header.startswith(b"\x89PNG"):
        return "image/png"
    if header.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    return declared or "application/octet-stream"


class TextExtractor:
    """
    Converts uploaded file bytes into plain text.

    Pure bytes -> text: nothing is persisted here. Failures raise
    ExtractionError (or ExtractionTimeout from OCR); "found nothing" is
    reported through the sentinel strings instead.
    """

    def __init__(self, ocr: Optional[OCRExtractor] = None):
        self.ocr = ocr or OCRExtractor()
        self.min_text_chars = extraction_settings.PDF_MIN_TEXT_CHARS
        self.max_ocr_pages = extraction_settings.PDF_OCR_MAX_PAGES
        self.render_scale = extraction_settings.PDF_RENDER_SCALE
        self.logger = logging.getLogger(__name__)

    async def extract(self, data: bytes, mime_type: Optional[str] = None) -> str:
        """
        Extract text from a PDF or image upload.

        Args:
            data: Raw file bytes
            mime_type: Declared content type

        Returns:
            Extracted text, or a sentinel when nothing readable was found
        """
        mime_type = sniff_mime_type(data, mime_type)

        if mime_type == PDF_MIME_TYPE:
            self.logger.info("Processing PDF...")
            return await self.extract_from_pdf(data)

        if mime_type.startswith("image/"):
            self.logger.info("Processing image with OCR...")
            return await self.ocr.extract_from_image(data)

        raise UnsupportedFileType(f"Unsupported file type: {mime_type}")

    async def extract_from_pdf(self, data: bytes) -> str:
        try:
            text = await asyncio.to_thread(self._extract_text_layer, data)
        except Exception as e:
            raise ExtractionError(f"PDF text extraction failed: {e}") from e

        self.logger.info(f"PDF text layer: {len(text)} chars")

        if len(text) < self.min_text_chars:
            self.logger.info("PDF has minimal text content. Falling back to OCR...")
            try:
                ocr_text = await self._ocr_pages(data)
                if len(ocr_text) > len(text):
                    self.logger.info(
                        f"OCR extracted {len(ocr_text)} chars vs {len(text)} from the text layer"
                    )
                    return ocr_text
            except Exception as e:
                # Keep whatever the text layer gave us
                self.logger.warning(f"OCR fallback failed: {e}")

        return text or NO_TEXT_IN_PDF

    # ------------------------------------------------------------------
    # Text layer
    # ------------------------------------------------------------------
    def _extract_text_layer(self, data: bytes) -> str:
        try:
            pages = self._extract_with_pypdfium2(data)
        except Exception as e:
            self.logger.warning(f"pypdfium2 failed, trying PyPDF2: {e}")
            pages = self._extract_with_pypdf2(data)

        return "".join(page + "\n" for page in pages).strip()

    def _extract_with_pypdfium2(self, data: bytes) -> List[str]:
        pdf = pypdfium2.PdfDocument(data)
        try:
            pages = []
            for page_num in range(len(pdf)):
                page = pdf[page_num]
                textpage = page.get_textpage()
                pages.append((textpage.get_text_range() or "").strip())
                textpage.close()
                page.close()
            return pages
        finally:
            pdf.close()

    def _extract_with_pypdf2(self, data: bytes) -> List[str]:
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            try:
                reader.decrypt("")
            except Exception:
                raise RuntimeError("PDF is encrypted and requires a password")
        return [(page.extract_text() or "").strip() for page in reader.pages]

    # ------------------------------------------------------------------
    # OCR fallback
    # ------------------------------------------------------------------
    def _render_pages(self, data: bytes) -> List[Image.Image]:
        """Rasterize at most max_ocr_pages pages to PIL images."""
        pdf = pypdfium2.PdfDocument(data)
        try:
            images = []
            for page_num in range(min(len(pdf), self.max_ocr_pages)):
                page = pdf[page_num]
                bitmap = page.render(scale=self.render_scale)
                images.append(bitmap.to_pil())
                page.close()
            return images
        finally:
            pdf.close()

    async def _ocr_pages(self, data: bytes) -> str:
        images = await asyncio.to_thread(self._render_pages, data)

        chunks = []
        for page_num, image in enumerate(images, start=1):
            self.logger.info(f"Running OCR on page {page_num}...")
            page_text = (await asyncio.to_thread(self.ocr.recognize, image) or "").strip()
            if page_text:
                chunks.append(page_text)

        return "\n\n".join(chunks)
