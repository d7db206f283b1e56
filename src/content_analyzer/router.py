"""
Extraction Router
=================

Selects exactly one extractor for an upload from its declared media type.

Usage:
    from content_analyzer import ExtractionRouter

    router = ExtractionRouter()
    decision = router.route("image/png")
    result = await decision.extractor.extract(path)

Routing Matrix:
    | Declared media type | Extractor       |
    |---------------------|-----------------|
    | application/pdf     | PDFExtractor    |
    | image/*             | ImageExtractor  |
    | anything else       | rejected (415)  |

The router never inspects file contents and never deletes files.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from content_analyzer.errors import UnsupportedMediaTypeError
from content_analyzer.extractors.base import BaseExtractor
from content_analyzer.extractors.image import ImageExtractor
from content_analyzer.extractors.pdf import PDFExtractor
from content_analyzer.models import ExtractionResult, PipelineConfig

PDF_MEDIA_TYPE = "application/pdf"
IMAGE_MEDIA_PREFIX = "image/"


class ExtractorKind(Enum):
    """Extraction path chosen for a document."""
    PDF = "pdf"
    IMAGE = "image"


@dataclass
class RoutingDecision:
    """Routing decision from ExtractionRouter.route()."""
    media_type: str
    kind: ExtractorKind
    extractor: BaseExtractor


def normalize_media_type(media_type: str | None) -> str:
    """Lower-case a MIME type and drop parameters ("; charset=...")."""
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


class ExtractionRouter:
    """
    Routes documents to the PDF or image extractor.

    Attributes:
        pdf_extractor: Extractor for application/pdf
        image_extractor: Extractor for image/*
    """

    def __init__(
        self,
        pdf_extractor: BaseExtractor | None = None,
        image_extractor: BaseExtractor | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        """
        Initialize ExtractionRouter.

        Args:
            pdf_extractor: PDF extractor (default: PDFExtractor from config)
            image_extractor: Image extractor (default: ImageExtractor from config)
            config: Pipeline configuration used for default extractors
        """
        config = config or PipelineConfig()
        self.pdf_extractor = pdf_extractor or PDFExtractor(
            max_size_bytes=config.max_pdf_size_bytes,
            max_pages=config.pdf_max_pages,
        )
        self.image_extractor = image_extractor or ImageExtractor(
            language=config.ocr_language,
            timeout_ms=config.ocr_timeout_ms,
        )

    def route(self, media_type: str | None) -> RoutingDecision:
        """
        Choose the extractor for a declared media type.

        Raises:
            UnsupportedMediaTypeError: If neither extractor applies
        """
        normalized = normalize_media_type(media_type)

        if normalized == PDF_MEDIA_TYPE:
            return RoutingDecision(normalized, ExtractorKind.PDF, self.pdf_extractor)

        if normalized.startswith(IMAGE_MEDIA_PREFIX):
            return RoutingDecision(normalized, ExtractorKind.IMAGE, self.image_extractor)

        raise UnsupportedMediaTypeError(media_type or "")

    async def extract(
        self,
        media_type: str | None,
        file_path: Path,
        **kwargs,
    ) -> ExtractionResult:
        """
        Route and extract in one step.

        Raises:
            UnsupportedMediaTypeError: If the media type is not routable
            ExtractionError: On any extractor failure
        """
        decision = self.route(media_type)
        return await decision.extractor.extract(Path(file_path), **kwargs)
