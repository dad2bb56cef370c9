# src/health_records/extractors/__init__.py
"""
Text Extraction Module

- PDF text layer (pypdfium2, PyPDF2)
- OCR for images and scanned PDFs (Tesseract)
"""

from .ocr_extractor import OCRExtractor, NO_TEXT_DETECTED
from .text_extractor import TextExtractor, NO_TEXT_IN_PDF, sniff_mime_type

# Literal results meaning "extraction ran but found nothing"
EXTRACTION_SENTINELS = frozenset({NO_TEXT_DETECTED, NO_TEXT_IN_PDF})
