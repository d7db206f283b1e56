"""
Error Taxonomy
==============

Tagged error kinds carried through the extraction pipeline.

Callers classify failures by ``kind``, never by message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds produced by extractors and the pipeline."""

    # Pipeline level
    NO_FILE = "no_file"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    EXTRACTION_FAILED = "extraction_failed"
    INTERNAL = "internal"

    # Extraction level
    NOT_FOUND = "not_found"
    INVALID_FORMAT = "invalid_format"
    TOO_LARGE = "too_large"
    PARSE_FAILURE = "parse_failure"
    UNSUPPORTED_IMAGE_FORMAT = "unsupported_image_format"
    TIMEOUT = "timeout"
    RECOGNITION_FAILURE = "recognition_failure"
    NO_TEXT_FOUND = "no_text_found"


class ExtractionError(Exception):
    """
    Raised by an extractor when a document cannot be turned into text.

    Attributes:
        kind: Specific extraction failure kind
        message: Short, user-safe description
        detail: Underlying library message, kept for diagnostics
    """

    def __init__(self, kind: ErrorKind, message: str, detail: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class UnsupportedMediaTypeError(Exception):
    """Raised by the router when no extractor handles a media type."""

    def __init__(self, media_type: str):
        super().__init__(f"Unsupported media type: {media_type}")
        self.media_type = media_type


class PipelineError(Exception):
    """
    Terminal failure of a pipeline run.

    ``extraction_kind`` is set when ``kind`` is EXTRACTION_FAILED and names
    the extractor's specific failure.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        extraction_kind: ErrorKind | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.extraction_kind = extraction_kind
        self.detail = detail

    @property
    def effective_kind(self) -> ErrorKind:
        """Most specific kind available (extraction kind if present)."""
        return self.extraction_kind or self.kind
