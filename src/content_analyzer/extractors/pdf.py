"""
PDF Extractor
=============

Direct text-layer extraction from PDF files using PyMuPDF.

Validation runs before parsing and never touches the PDF structure:
    1. file exists                  -> NOT_FOUND
    2. size <= max_size_bytes       -> TOO_LARGE
    3. first five bytes == b"%PDF-" -> INVALID_FORMAT

Parsing runs in the default executor so the event loop is never blocked.
Scanned PDFs without a text layer fail with NO_TEXT_FOUND; they are not
sent to OCR.
"""

import asyncio
import logging
from pathlib import Path
from typing import List

import fitz  # PyMuPDF

from content_analyzer.errors import ErrorKind, ExtractionError
from content_analyzer.extractors.base import BaseExtractor
from content_analyzer.models import DEFAULT_MAX_PDF_SIZE, ExtractionResult, PDFMetadata

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"


class PDFExtractor(BaseExtractor):
    """
    Extract plain text from a PDF's embedded text layer.

    Attributes:
        max_size_bytes: Largest accepted file (default: 50 MB)
        max_pages: Pages parsed per document, 0 for all
    """

    def __init__(
        self,
        max_size_bytes: int = DEFAULT_MAX_PDF_SIZE,
        max_pages: int = 0,
    ):
        super().__init__(name="PyMuPDF")
        self.max_size_bytes = max_size_bytes
        self.max_pages = max_pages

    def get_supported_formats(self) -> List[str]:
        return [".pdf"]

    def validate(self, file_path: Path) -> None:
        file_path = Path(file_path)
        self._require_file(file_path, label="PDF file")

        size = file_path.stat().st_size
        if size > self.max_size_bytes:
            raise ExtractionError(
                ErrorKind.TOO_LARGE,
                "PDF file too large",
                detail=f"{size / (1024 * 1024):.2f}MB exceeds "
                f"{self.max_size_bytes / (1024 * 1024):.2f}MB",
            )

        with open(file_path, "rb") as fh:
            header = fh.read(len(PDF_SIGNATURE))
        if header != PDF_SIGNATURE:
            raise ExtractionError(
                ErrorKind.INVALID_FORMAT,
                "File does not appear to be a valid PDF",
                detail=f"header={header!r}",
            )

    async def extract(self, file_path: Path, **kwargs) -> ExtractionResult:
        """
        Extract text from all (or the first ``max_pages``) pages.

        Args:
            file_path: Path to PDF file
            **kwargs: ``max_pages`` overrides the instance setting

        Returns:
            ExtractionResult with page-joined text

        Raises:
            ExtractionError: NOT_FOUND, TOO_LARGE, INVALID_FORMAT,
                PARSE_FAILURE or NO_TEXT_FOUND
        """
        file_path = Path(file_path)
        self.validate(file_path)

        max_pages = kwargs.get("max_pages", self.max_pages)
        loop = asyncio.get_running_loop()
        text, page_count = await loop.run_in_executor(
            None, self._extract_sync, file_path, max_pages
        )

        self._require_text(text, "PDF")
        logger.info(f"PDF extracted: {file_path.name} ({page_count} pages, {len(text)} chars)")
        return ExtractionResult(text=text, extractor=self.name, page_count=page_count)

    async def get_metadata(self, file_path: Path) -> PDFMetadata:
        """
        Read page count and document metadata without extracting text.

        Raises:
            ExtractionError: Same validation kinds as extract(), or PARSE_FAILURE
        """
        file_path = Path(file_path)
        self.validate(file_path)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._metadata_sync, file_path)

    def _open(self, file_path: Path) -> fitz.Document:
        try:
            doc = fitz.open(file_path)
        except Exception as e:
            raise ExtractionError(
                ErrorKind.PARSE_FAILURE, "PDF text extraction failed", detail=str(e)
            ) from e

        if doc.needs_pass:
            doc.close()
            raise ExtractionError(
                ErrorKind.PARSE_FAILURE,
                "PDF text extraction failed",
                detail="document is encrypted",
            )
        return doc

    def _extract_sync(self, file_path: Path, max_pages: int) -> tuple[str, int]:
        """Blocking extraction - runs in thread executor."""
        doc = self._open(file_path)
        try:
            page_count = len(doc)
            limit = page_count if max_pages <= 0 else min(max_pages, page_count)
            pages = [doc[page_num].get_text("text") for page_num in range(limit)]
        except Exception as e:
            raise ExtractionError(
                ErrorKind.PARSE_FAILURE, "PDF text extraction failed", detail=str(e)
            ) from e
        finally:
            doc.close()

        return "\n\n".join(pages), page_count

    def _metadata_sync(self, file_path: Path) -> PDFMetadata:
        try:
            doc = fitz.open(file_path)
        except Exception as e:
            raise ExtractionError(
                ErrorKind.PARSE_FAILURE, "Failed to get PDF metadata", detail=str(e)
            ) from e

        try:
            info = {k: v for k, v in (doc.metadata or {}).items() if v}
            return PDFMetadata(
                page_count=doc.page_count,
                format=info.pop("format", ""),
                is_encrypted=bool(doc.is_encrypted),
                metadata=info,
            )
        finally:
            doc.close()
