"""
Extractors
==========

Text extractors for the two supported document families.

Available Extractors:
- PDFExtractor: Embedded text layer via PyMuPDF (no OCR)
- ImageExtractor: Bounded-time OCR via a Tesseract engine

Usage:
    from content_analyzer.extractors import ImageExtractor, PDFExtractor, TesseractBackend

    pdf = PDFExtractor(max_size_bytes=50 * 1024 * 1024)
    result = await pdf.extract(Path("post.pdf"))

    ocr = ImageExtractor(engine=TesseractBackend(lang="eng"), timeout_ms=30000)
    if ocr.is_available():
        result = await ocr.extract(Path("post.png"))
"""

from .base import BaseExtractor
from .image import SUPPORTED_IMAGE_EXTENSIONS, ImageExtractor, ProgressReporter
from .pdf import PDF_SIGNATURE, PDFExtractor
from .tesseract import TesseractBackend, TesseractTimeoutError

__all__ = [
    "BaseExtractor",
    "ImageExtractor",
    "PDFExtractor",
    "PDF_SIGNATURE",
    "ProgressReporter",
    "SUPPORTED_IMAGE_EXTENSIONS",
    "TesseractBackend",
    "TesseractTimeoutError",
]
