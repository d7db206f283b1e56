"""
Analysis Pipeline
=================

Sequences validate -> extract -> analyze -> cleanup for one uploaded document.

State machine:

    RECEIVED -> VALIDATED -> EXTRACTING -> ANALYZING -> COMPLETED
        \\___________\\____________\\____________\\-----> FAILED(kind)

Every failure leaves the pipeline as a PipelineError with a tagged kind.
The uploaded file is deleted exactly once on every exit path; a failed
deletion is logged and never replaces the primary outcome.

Usage:
    pipeline = AnalysisPipeline(router=shared_router)
    result = await pipeline.run(UploadedDocument(path, "application/pdf", size))
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from content_analyzer.analyzer import analyze
from content_analyzer.errors import (
    ErrorKind,
    ExtractionError,
    PipelineError,
    UnsupportedMediaTypeError,
)
from content_analyzer.extractors.tesseract import ProgressCallback
from content_analyzer.models import AnalysisResult, PipelineConfig, UploadedDocument
from content_analyzer.router import ExtractionRouter, ExtractorKind

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class PipelineState(str, Enum):
    """Lifecycle state of a single pipeline run."""

    RECEIVED = "received"
    VALIDATED = "validated"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisPipeline:
    """
    One-shot orchestrator for a single upload.

    Create one instance per request; the router (and its extractors) may be
    shared since they hold no per-request state.
    """

    def __init__(
        self,
        router: ExtractionRouter | None = None,
        config: PipelineConfig | None = None,
        analyzer: Callable[[str], AnalysisResult] = analyze,
    ):
        """
        Initialize the pipeline.

        Args:
            router: Extraction router (default: built from config)
            config: Pipeline configuration, used only when router is None
            analyzer: Text analysis function
        """
        self.router = router or ExtractionRouter(config=config)
        self.analyzer = analyzer
        self.state = PipelineState.RECEIVED
        self.history: list[PipelineState] = [PipelineState.RECEIVED]
        self.failure: PipelineError | None = None
        self.cleanup_count = 0

    async def run(
        self,
        document: UploadedDocument | None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Extract and analyze one document.

        Args:
            document: Persisted upload, or None if no file was sent
            on_progress: Advisory OCR progress callback (images only)

        Returns:
            AnalysisResult

        Raises:
            PipelineError: On any failure, with a tagged kind
            RuntimeError: If the pipeline instance was already used
        """
        if self.state != PipelineState.RECEIVED:
            raise RuntimeError(f"Pipeline already used (state={self.state.value})")

        start_time = time.time()
        try:
            result = await self._execute(document, on_progress)
            self._transition(PipelineState.COMPLETED)
            logger.info(
                "Pipeline completed: score=%d suggestions=%d (%.0fms)",
                result.score,
                len(result.suggestions),
                (time.time() - start_time) * 1000,
            )
            return result
        except PipelineError as e:
            self._fail(e)
            raise
        except Exception as e:
            logger.exception("Unexpected pipeline error: %s", e)
            error = PipelineError(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE, detail=str(e))
            self._fail(error)
            raise error from e
        finally:
            self._cleanup(document)

    async def _execute(
        self,
        document: UploadedDocument | None,
        on_progress: Optional[ProgressCallback],
    ) -> AnalysisResult:
        if document is None or not document.path.is_file():
            raise PipelineError(ErrorKind.NO_FILE, "No file uploaded")
        self._transition(PipelineState.VALIDATED)

        try:
            decision = self.router.route(document.declared_media_type)
        except UnsupportedMediaTypeError as e:
            raise PipelineError(
                ErrorKind.UNSUPPORTED_MEDIA_TYPE, "Unsupported file type", detail=str(e)
            ) from e
        self._transition(PipelineState.EXTRACTING)

        kwargs = {}
        if decision.kind == ExtractorKind.IMAGE and on_progress is not None:
            kwargs["on_progress"] = on_progress

        try:
            extraction = await decision.extractor.extract(document.path, **kwargs)
        except ExtractionError as e:
            raise PipelineError(
                ErrorKind.EXTRACTION_FAILED,
                e.message,
                extraction_kind=e.kind,
                detail=e.detail,
            ) from e
        self._transition(PipelineState.ANALYZING)

        return self.analyzer(extraction.text)

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self, error: PipelineError) -> None:
        self.failure = error
        self._transition(PipelineState.FAILED)
        logger.warning(
            "Pipeline failed: kind=%s extraction_kind=%s message=%s detail=%s",
            error.kind.value,
            error.extraction_kind.value if error.extraction_kind else None,
            error.message,
            error.detail,
        )

    def _cleanup(self, document: UploadedDocument | None) -> None:
        """Delete the uploaded file; errors are logged, never raised."""
        self.cleanup_count += 1
        if document is None:
            return
        try:
            document.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not clean up %s: %s", document.path, e)


async def run_pipeline(
    document: UploadedDocument | None,
    router: ExtractionRouter | None = None,
    config: PipelineConfig | None = None,
    on_progress: Optional[ProgressCallback] = None,
) -> AnalysisResult:
    """
    Run a fresh pipeline for one document.

    Raises:
        PipelineError: On any failure
    """
    pipeline = AnalysisPipeline(router=router, config=config)
    return await pipeline.run(document, on_progress=on_progress)
