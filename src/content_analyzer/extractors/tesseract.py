"""
Tesseract OCR Engine
====================

Local OCR using Tesseract. Free, offline, good for simple documents.

Recognition is bounded by one deadline. Work is skipped once the deadline
passes or the caller cancels, and pytesseract kills the tesseract child
process when the remaining budget elapses.
"""

import asyncio
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

# Message pytesseract uses when it kills a timed-out tesseract process
_PYTESSERACT_TIMEOUT_MESSAGE = "Tesseract process timeout"

# Pillow format names tesseract reads straight from the file
NATIVE_FORMATS = {"PNG", "JPEG", "BMP", "TIFF"}


class TesseractTimeoutError(TimeoutError):
    """Recognition ran out of budget, or was abandoned before tesseract started."""


def _remaining_budget(
    deadline: Optional[float], abandoned: Optional[threading.Event]
) -> float:
    """Seconds left before the deadline, 0 meaning unbounded."""
    if abandoned is not None and abandoned.is_set():
        raise TesseractTimeoutError("recognition abandoned before tesseract started")
    if deadline is None:
        return 0
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise TesseractTimeoutError("deadline passed before tesseract started")
    return remaining


class TesseractBackend:
    """
    OCR engine using local Tesseract installation.

    Environment variables:
        TESSERACT_PATH: Path to tesseract binary (default: tesseract on PATH)
        OCR_LANGUAGE: Languages to use (default: eng)
    """

    def __init__(
        self,
        tesseract_path: Optional[str] = None,
        lang: Optional[str] = None,
        config: str = "",
    ):
        """
        Initialize Tesseract engine.

        Args:
            tesseract_path: Path to tesseract binary
            lang: OCR languages (e.g., "eng" or "deu+eng")
            config: Extra tesseract CLI flags
        """
        self.name = "Tesseract"
        self.tesseract_path = tesseract_path or os.getenv("TESSERACT_PATH", "tesseract")
        self.lang = lang or os.getenv("OCR_LANGUAGE", "eng")
        self.config = config

        # Configure pytesseract
        pytesseract.pytesseract.tesseract_cmd = self.tesseract_path

    def is_available(self) -> bool:
        """Check if Tesseract is installed and accessible."""
        try:
            pytesseract.get_tesseract_version()
            return True
        except Exception:
            return False

    async def recognize(
        self,
        file_path: Path,
        lang: Optional[str] = None,
        timeout_s: float = 0,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Run OCR on an image file.

        The budget is an absolute deadline fixed before the executor hop.
        Tesseract only gets what is left of it, and is never launched once
        the deadline has passed or this coroutine has been cancelled.

        Args:
            file_path: Path to image file
            lang: OCR language, defaults to the engine setting
            timeout_s: Hard limit for the whole recognition, 0 for none
            on_progress: Optional (stage, fraction) callback

        Returns:
            Raw recognized text

        Raises:
            TesseractTimeoutError: If the deadline passed before or during tesseract
        """
        lang = lang or self.lang
        deadline = time.monotonic() + timeout_s if timeout_s else None
        abandoned = threading.Event()
        if on_progress:
            on_progress("recognizing text", 0.1)

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, self._recognize_sync, Path(file_path), lang, deadline, abandoned
            )
        except asyncio.CancelledError:
            abandoned.set()
            raise

    def _recognize_sync(
        self,
        file_path: Path,
        lang: str,
        deadline: Optional[float] = None,
        abandoned: Optional[threading.Event] = None,
    ) -> str:
        """Blocking OCR - runs in thread executor."""
        _remaining_budget(deadline, abandoned)
        with Image.open(file_path) as image:
            if image.format in NATIVE_FORMATS:
                return self._run_tesseract(str(file_path), lang, deadline, abandoned)

            # Re-encode formats tesseract may not decode, before the budget check
            image.load()
            with tempfile.TemporaryDirectory() as tmp_dir:
                source = Path(tmp_dir) / "input.png"
                image.save(source, format="PNG")
                return self._run_tesseract(str(source), lang, deadline, abandoned)

    def _run_tesseract(
        self,
        source: str,
        lang: str,
        deadline: Optional[float],
        abandoned: Optional[threading.Event],
    ) -> str:
        # A path source means pytesseract does no encoding before Popen
        timeout = _remaining_budget(deadline, abandoned)
        try:
            return pytesseract.image_to_string(
                source, lang=lang, config=self.config, timeout=timeout
            )
        except RuntimeError as e:
            if str(e) == _PYTESSERACT_TIMEOUT_MESSAGE:
                raise TesseractTimeoutError("tesseract killed at the recognition deadline") from e
            raise

    def get_available_languages(self) -> List[str]:
        """Get list of installed Tesseract languages."""
        try:
            return pytesseract.get_languages()
        except Exception:
            return []

    def __repr__(self) -> str:
        available = "available" if self.is_available() else "unavailable"
        return f"{self.__class__.__name__}(name='{self.name}', {available})"
