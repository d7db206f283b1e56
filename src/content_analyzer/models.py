"""
Data Models for Content Analysis
================================

Shared data models for the extraction and analysis pipeline.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_OCR_LANGUAGE = "eng"
DEFAULT_OCR_TIMEOUT_MS = 30_000
DEFAULT_MAX_PDF_SIZE = 50 * 1024 * 1024  # 50 MB


@dataclass
class PipelineConfig:
    """Configuration for the extraction pipeline."""

    ocr_language: str = DEFAULT_OCR_LANGUAGE
    ocr_timeout_ms: int = DEFAULT_OCR_TIMEOUT_MS
    max_pdf_size_bytes: int = DEFAULT_MAX_PDF_SIZE
    pdf_max_pages: int = 0  # 0 = all pages

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Build configuration from environment variables.

        Environment variables:
            OCR_LANGUAGE: Tesseract language code (default: eng)
            OCR_TIMEOUT_MS: Recognition timeout in milliseconds (default: 30000)
            PDF_MAX_SIZE: Maximum PDF size in bytes (default: 50 MB)
            PDF_MAX_PAGES: Maximum pages parsed per PDF, 0 for all (default: 0)
        """
        return cls(
            ocr_language=os.getenv("OCR_LANGUAGE", DEFAULT_OCR_LANGUAGE),
            ocr_timeout_ms=int(os.getenv("OCR_TIMEOUT_MS", DEFAULT_OCR_TIMEOUT_MS)),
            max_pdf_size_bytes=int(os.getenv("PDF_MAX_SIZE", DEFAULT_MAX_PDF_SIZE)),
            pdf_max_pages=int(os.getenv("PDF_MAX_PAGES", 0)),
        )


@dataclass
class UploadedDocument:
    """An upload already persisted to disk by the HTTP layer."""

    path: Path
    declared_media_type: str
    size_bytes: int = 0

    def __post_init__(self) -> None:
        self.path = Path(self.path)


@dataclass(frozen=True)
class ExtractionResult:
    """Plain text produced by exactly one extractor."""

    text: str
    extractor: str = ""
    page_count: int = 1


@dataclass(frozen=True)
class PDFMetadata:
    """Pre-flight information about a PDF, read without extracting text."""

    page_count: int
    format: str
    is_encrypted: bool
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalysisMetrics:
    """Counts derived from the analyzed text."""

    character_count: int
    word_count: int
    emoji_count: int
    hashtag_count: int
    has_questions: bool

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the camelCase wire format.

        ``characterCount`` counts code points. A JavaScript client measuring
        ``text.length`` sees UTF-16 units instead, so each astral character
        (most emoji, e.g. "😀") is 1 here and 2 there.
        """
        return {
            "characterCount": self.character_count,
            "wordCount": self.word_count,
            "emojiCount": self.emoji_count,
            "hashtagCount": self.hashtag_count,
            "hasQuestions": self.has_questions,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal artifact of a pipeline run."""

    original_text: str
    suggestions: tuple[str, ...]
    score: int
    metrics: AnalysisMetrics

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire format."""
        return {
            "originalText": self.original_text,
            "suggestions": list(self.suggestions),
            "score": self.score,
            "metrics": self.metrics.to_dict(),
        }
