"""
Image Extractor
===============

Bounded-time OCR for raster images.

The recognition coroutine and a timer race through ``asyncio.wait_for``.
When the timer wins, the recognition task is cancelled. The engine shares
the same deadline, so tesseract is either never launched or killed when the
budget runs out; a late result, if any, is dropped.

Usage:
    extractor = ImageExtractor(engine=TesseractBackend())
    result = await extractor.extract(
        Path("post.png"),
        language="eng",
        timeout_ms=30000,
        on_progress=lambda stage, fraction: print(stage, fraction),
    )
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from content_analyzer.errors import ErrorKind, ExtractionError
from content_analyzer.extractors.base import BaseExtractor
from content_analyzer.extractors.tesseract import (
    ProgressCallback,
    TesseractBackend,
    TesseractTimeoutError,
)
from content_analyzer.models import (
    DEFAULT_OCR_LANGUAGE,
    DEFAULT_OCR_TIMEOUT_MS,
    ExtractionResult,
)

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = [".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".webp"]


class ProgressReporter:
    """
    Forwards progress to an optional callback.

    Fractions are clamped to [0, 1] and never decrease. Callback errors are
    logged and ignored; reports after close() are dropped.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self._last = 0.0
        self._closed = False

    def __call__(self, stage: str, fraction: float) -> None:
        if self._callback is None or self._closed:
            return

        fraction = min(1.0, max(self._last, float(fraction)))
        self._last = fraction
        try:
            self._callback(stage, fraction)
        except Exception:
            logger.warning("Progress callback failed at stage %r", stage, exc_info=True)

    def close(self) -> None:
        self._closed = True


class ImageExtractor(BaseExtractor):
    """
    Extract text from images with a Tesseract engine.

    Attributes:
        engine: OCR engine exposing ``async recognize(path, lang, timeout_s, on_progress)``
        language: Default OCR language
        timeout_ms: Default recognition budget in milliseconds
    """

    def __init__(
        self,
        engine: Optional[TesseractBackend] = None,
        language: str = DEFAULT_OCR_LANGUAGE,
        timeout_ms: int = DEFAULT_OCR_TIMEOUT_MS,
    ):
        super().__init__(name="Tesseract OCR")
        self.engine = engine or TesseractBackend(lang=language)
        self.language = language
        self.timeout_ms = timeout_ms

    def is_available(self) -> bool:
        return self.engine.is_available()

    def get_supported_formats(self) -> List[str]:
        return list(SUPPORTED_IMAGE_EXTENSIONS)

    def validate(self, file_path: Path) -> None:
        file_path = Path(file_path)
        self._require_file(file_path, label="Image file")

        ext = file_path.suffix.lower()
        if ext not in SUPPORTED_IMAGE_EXTENSIONS:
            raise ExtractionError(
                ErrorKind.UNSUPPORTED_IMAGE_FORMAT,
                "Unsupported image format",
                detail=ext or "(no extension)",
            )

    async def extract(
        self,
        file_path: Path,
        language: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        **kwargs,
    ) -> ExtractionResult:
        """
        Recognize text in an image within a time budget.

        Args:
            file_path: Path to image file
            language: OCR language (default: extractor setting)
            timeout_ms: Recognition budget (default: extractor setting)
            on_progress: Advisory (stage, fraction) callback

        Returns:
            ExtractionResult with recognized text

        Raises:
            ExtractionError: NOT_FOUND, UNSUPPORTED_IMAGE_FORMAT, TIMEOUT,
                NO_TEXT_FOUND or RECOGNITION_FAILURE
        """
        file_path = Path(file_path)
        self.validate(file_path)

        language = language or self.language
        timeout_ms = timeout_ms if timeout_ms is not None else self.timeout_ms
        timeout_s = timeout_ms / 1000

        progress = ProgressReporter(on_progress)
        progress("loading image", 0.0)

        try:
            text = await asyncio.wait_for(
                self.engine.recognize(
                    file_path, lang=language, timeout_s=timeout_s, on_progress=progress
                ),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, TesseractTimeoutError) as e:
            raise ExtractionError(
                ErrorKind.TIMEOUT,
                f"OCR timeout after {timeout_ms}ms",
                detail=str(e) or None,
            ) from e
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(
                ErrorKind.RECOGNITION_FAILURE, "OCR processing failed", detail=str(e)
            ) from e
        else:
            progress("done", 1.0)
        finally:
            progress.close()

        self._require_text(text, "image")
        logger.info(f"Image recognized: {file_path.name} ({len(text)} chars, lang={language})")
        return ExtractionResult(text=text, extractor=self.name, page_count=1)
