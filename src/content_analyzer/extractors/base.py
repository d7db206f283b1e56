"""
Base Extractor
==============

Abstract base class for document text extractors.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from content_analyzer.errors import ErrorKind, ExtractionError
from content_analyzer.models import ExtractionResult


class BaseExtractor(ABC):
    """
    Abstract base class for extractors.

    All extractors must implement:
    - extract(): Turn a file into plain text (coroutine)
    - validate(): Pure pre-flight checks, raising ExtractionError

    Optional overrides:
    - is_available(): Check runtime dependencies
    - get_supported_formats(): Return supported file extensions
    """

    def __init__(self, name: str = "BaseExtractor"):
        """
        Initialize extractor.

        Args:
            name: Human-readable name for the extractor
        """
        self.name = name

    @abstractmethod
    def validate(self, file_path: Path) -> None:
        """
        Check the file before any extraction work starts.

        Raises:
            ExtractionError: If the file cannot be handled
        """

    @abstractmethod
    async def extract(self, file_path: Path, **kwargs) -> ExtractionResult:
        """
        Extract plain text from a file.

        Args:
            file_path: Path to the document
            **kwargs: Extractor-specific options

        Returns:
            ExtractionResult with non-empty text

        Raises:
            ExtractionError: On any failure
        """

    def is_available(self) -> bool:
        return True

    def get_supported_formats(self) -> List[str]:
        """
        Return list of supported file formats.

        Returns:
            List of file extensions (e.g., ['.pdf', '.png'])
        """
        return []

    def _require_file(self, file_path: Path, label: str = "File") -> None:
        if not file_path.is_file():
            raise ExtractionError(
                ErrorKind.NOT_FOUND,
                f"{label} not found",
                detail=str(file_path),
            )

    def _require_text(self, text: str | None, source: str) -> str:
        if not text or not text.strip():
            raise ExtractionError(
                ErrorKind.NO_TEXT_FOUND,
                f"No text could be extracted from the {source}",
            )
        return text

    def __repr__(self) -> str:
        available = "available" if self.is_available() else "unavailable"
        return f"{self.__class__.__name__}(name='{self.name}', {available})"
