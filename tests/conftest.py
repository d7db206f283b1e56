"""
Test Configuration and Fixtures for social-content-analyzer

This module provides shared fixtures, markers, and configuration for all tests.
"""

import asyncio
import io
import tempfile
from pathlib import Path
from typing import Generator

import pytest


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: Integration tests (may need tesseract)")
    config.addinivalue_line("markers", "performance: Performance benchmark tests")
    config.addinivalue_line("markers", "slow: Slow tests (skip with -m 'not slow')")
    config.addinivalue_line("markers", "api: API/service tests")


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory(prefix="content_analyzer_test_") as tmpdir:
        yield Path(tmpdir)


# =============================================================================
# Sample Document Fixtures
# =============================================================================

@pytest.fixture
def create_text_pdf(temp_dir: Path):
    """Factory fixture to create a PDF with an embedded text layer."""
    def _create(filename: str = "post.pdf", content: str = "Sample post content") -> Path:
        import fitz
        pdf_path = temp_dir / filename
        doc = fitz.open()
        page = doc.new_page()
        y_pos = 72
        for line in content.split("\n"):
            page.insert_text((72, y_pos), line, fontsize=12)
            y_pos += 20
        doc.save(str(pdf_path))
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def create_multipage_pdf(temp_dir: Path):
    """Factory fixture to create a multi-page text PDF."""
    def _create(filename: str = "multipage.pdf", pages: int = 3) -> Path:
        import fitz
        pdf_path = temp_dir / filename
        doc = fitz.open()
        for i in range(pages):
            page = doc.new_page()
            page.insert_text((72, 72), f"Page {i + 1} content", fontsize=12)
        doc.save(str(pdf_path))
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def create_blank_pdf(temp_dir: Path):
    """Factory fixture to create a valid PDF with no text (like a scan)."""
    def _create(filename: str = "blank.pdf") -> Path:
        import fitz
        from PIL import Image

        pdf_path = temp_dir / filename
        img = Image.new("RGB", (200, 100), color="white")
        img_bytes = io.BytesIO()
        img.save(img_bytes, format="PNG")

        doc = fitz.open()
        page = doc.new_page()
        page.insert_image(fitz.Rect(72, 72, 300, 200), stream=img_bytes.getvalue())
        doc.save(str(pdf_path))
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def create_encrypted_pdf(temp_dir: Path):
    """Factory fixture to create a password-protected PDF."""
    def _create(filename: str = "locked.pdf") -> Path:
        import fitz
        pdf_path = temp_dir / filename
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((72, 72), "Secret text", fontsize=12)
        doc.save(
            str(pdf_path),
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner",
            user_pw="user",
        )
        doc.close()
        return pdf_path
    return _create


@pytest.fixture
def create_image(temp_dir: Path):
    """Factory fixture to create an image file, optionally with drawn text."""
    def _create(filename: str = "post.png", text: str = "", size=(400, 120)) -> Path:
        from PIL import Image, ImageDraw, ImageFont

        image_path = temp_dir / filename
        img = Image.new("RGB", size, color="white")
        if text:
            try:
                font = ImageFont.load_default(size=48)
            except TypeError:
                font = ImageFont.load_default()
            ImageDraw.Draw(img).text((10, 30), text, fill="black", font=font)
        fmt = "JPEG" if image_path.suffix.lower() in (".jpg", ".jpeg") else None
        img.save(image_path, format=fmt)
        return image_path
    return _create


@pytest.fixture
def create_file(temp_dir: Path):
    """Factory fixture to write raw bytes to a file."""
    def _create(filename: str, content: bytes) -> Path:
        path = temp_dir / filename
        path.write_bytes(content)
        return path
    return _create


# =============================================================================
# OCR Engine Fixtures
# =============================================================================

class FakeOCREngine:
    """Stand-in for TesseractBackend with controllable delay and outcome."""

    def __init__(
        self,
        text: str = "Recognized post text #ocr",
        delay: float = 0.0,
        error: Exception | None = None,
        progress_steps: tuple = (),
    ):
        self.name = "FakeOCR"
        self.text = text
        self.delay = delay
        self.error = error
        self.progress_steps = progress_steps
        self.calls = 0
        self.cancelled = False
        self.finished = False
        self.last_lang = None
        self.last_timeout_s = None

    def is_available(self) -> bool:
        return True

    async def recognize(self, file_path, lang=None, timeout_s=0, on_progress=None):
        self.calls += 1
        self.last_lang = lang
        self.last_timeout_s = timeout_s
        if on_progress:
            for stage, fraction in self.progress_steps:
                on_progress(stage, fraction)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        self.finished = True
        return self.text


@pytest.fixture
def fake_engine_factory():
    """Factory fixture for FakeOCREngine instances."""
    return FakeOCREngine


@pytest.fixture
def tesseract_available() -> bool:
    """Check if Tesseract is available."""
    try:
        import pytesseract
        pytesseract.get_tesseract_version()
        return True
    except Exception:
        return False


@pytest.fixture
def skip_if_no_tesseract(tesseract_available):
    """Skip test if Tesseract is not available."""
    if not tesseract_available:
        pytest.skip("Tesseract not installed or not accessible")



# =============================================================================
# Performance Fixtures
# =============================================================================

@pytest.fixture
def performance_timer():
    """Simple performance timer context manager."""
    import time

    class Timer:
        def __init__(self):
            self.start_time = None
            self.end_time = None
            self.elapsed_ms = None

        def __enter__(self):
            self.start_time = time.perf_counter()
            return self

        def __exit__(self, *args):
            self.end_time = time.perf_counter()
            self.elapsed_ms = (self.end_time - self.start_time) * 1000

    return Timer
