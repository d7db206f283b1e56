"""
Content Analyzer Service - FastAPI Application

Minimal REST API that analyzes an uploaded PDF or image for social-media
engagement.
"""

import logging
import os
import re
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

load_dotenv()
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from content_analyzer import (
    AnalysisPipeline,
    ErrorKind,
    ExtractionError,
    ExtractionRouter,
    PipelineConfig,
    PipelineError,
    UploadedDocument,
    __version__,
)
from content_analyzer.extractors import PDFExtractor

logger = logging.getLogger(__name__)

# ============================================================================
# Settings
# ============================================================================

UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", "uploads"))
UPLOAD_MAX_SIZE = int(os.getenv("UPLOAD_MAX_SIZE", 10 * 1024 * 1024))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

ALLOWED_MEDIA_TYPES = {"application/pdf", "image/jpeg", "image/png"}
ALLOWED_EXTENSIONS = {".pdf", ".jpg", ".jpeg", ".png"}

# Initialize FastAPI app
app = FastAPI(
    title="Social Media Content Analyzer",
    description="Engagement analysis for text extracted from PDFs and images",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Shared across requests; extractors hold no per-request state
config = PipelineConfig.from_env()
router = ExtractionRouter(config=config)

UPLOAD_DIR.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Pydantic Models
# ============================================================================


class MetricsResponse(BaseModel):
    """Counts derived from the extracted text."""

    characterCount: int
    wordCount: int
    emojiCount: int
    hashtagCount: int
    hasQuestions: bool


class AnalysisResponse(BaseModel):
    """Engagement analysis response."""

    originalText: str
    suggestions: list[str]
    score: int
    metrics: MetricsResponse


class PDFMetadataResponse(BaseModel):
    """PDF pre-flight inspection response."""

    success: bool = True
    file_name: str
    page_count: int
    format: str
    is_encrypted: bool
    metadata: dict[str, str] = {}
    processing_time_ms: float


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "OK"
    timestamp: str
    version: str = __version__
    uptime_seconds: float
    ocr_available: bool


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = False
    error: str
    kind: str | None = None


# ============================================================================
# Global state
# ============================================================================

_start_time = time.time()


# ============================================================================
# Helpers
# ============================================================================


def sanitize_filename(name: str) -> str:
    """Replace anything outside [a-zA-Z0-9.-_] with an underscore."""
    return re.sub(r"[^a-zA-Z0-9.\-_]", "_", name) or "upload"


def unique_upload_path(original_name: str) -> Path:
    """Timestamp + random suffix keeps concurrent uploads apart."""
    stamp = int(time.time() * 1000)
    return UPLOAD_DIR / f"{stamp}-{uuid.uuid4().hex[:8]}-{sanitize_filename(original_name)}"


def status_for_kind(kind: ErrorKind, extraction_kind: ErrorKind | None = None) -> int:
    """Map a tagged error kind to an HTTP status code."""
    if kind == ErrorKind.NO_FILE:
        return 400
    if kind == ErrorKind.UNSUPPORTED_MEDIA_TYPE:
        return 415
    if kind == ErrorKind.EXTRACTION_FAILED:
        if extraction_kind == ErrorKind.TOO_LARGE:
            return 413
        return 422
    return 500


async def save_upload(file: UploadFile) -> UploadedDocument:
    """
    Gatekeep and persist an upload.

    Raises:
        HTTPException: 400 for disallowed type/extension, 413 when too large
    """
    file_name = file.filename or "upload"
    media_type = (file.content_type or "").lower()
    extension = Path(file_name).suffix.lower()

    if media_type not in ALLOWED_MEDIA_TYPES or extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Only PDF and image files (JPEG, PNG) are allowed",
        )

    content = await file.read(UPLOAD_MAX_SIZE + 1)
    if len(content) > UPLOAD_MAX_SIZE:
        raise HTTPException(status_code=413, detail="File too large")

    path = unique_upload_path(file_name)
    try:
        path.write_bytes(content)
    except OSError:
        path.unlink(missing_ok=True)
        raise
    return UploadedDocument(path=path, declared_media_type=media_type, size_bytes=len(content))


# ============================================================================
# Endpoints
# ============================================================================


@app.get("/api", tags=["System"])
async def api_info():
    """API documentation summary."""
    return {
        "message": "Social Media Content Analyzer API",
        "version": __version__,
        "endpoints": {
            "POST /api/analyze": "Analyze PDF or image files for engagement suggestions",
            "POST /api/pdf/metadata": "Inspect a PDF without extracting its text",
            "GET /api/health": "Check server status",
        },
    }


@app.get("/api/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint for container orchestration."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=time.time() - _start_time,
        ocr_available=router.image_extractor.is_available(),
    )


@app.post(
    "/api/analyze",
    response_model=AnalysisResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    tags=["Analysis"],
)
async def analyze_upload(
    file: UploadFile | None = File(default=None, description="PDF or image file"),
):
    """
    Extract text from a PDF or image and score it for engagement.

    **Extraction paths:**
    - **application/pdf**: embedded text layer (scanned PDFs are rejected with 422)
    - **image/jpeg, image/png**: Tesseract OCR with a time budget

    Returns the original text, up to four suggestions, a score in [30, 100]
    and the underlying metrics.
    """
    document = await save_upload(file) if file is not None else None

    pipeline = AnalysisPipeline(router=router)
    try:
        result = await pipeline.run(document)
    except PipelineError as e:
        return JSONResponse(
            status_code=status_for_kind(e.kind, e.extraction_kind),
            content={"success": False, "error": e.message, "kind": e.effective_kind.value},
        )

    return result.to_dict()


@app.post(
    "/api/pdf/metadata",
    response_model=PDFMetadataResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Analysis"],
)
async def pdf_metadata(
    file: UploadFile = File(..., description="PDF file to inspect"),
):
    """Return page count and document info of a PDF without extracting text."""
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    extractor = router.pdf_extractor
    if not isinstance(extractor, PDFExtractor):
        raise HTTPException(status_code=500, detail="PDF inspection unavailable")

    start_time = time.time()
    document = await save_upload(file)

    try:
        info = await extractor.get_metadata(document.path)
    except ExtractionError as e:
        logger.warning("PDF metadata failed: kind=%s detail=%s", e.kind.value, e.detail)
        return JSONResponse(
            status_code=status_for_kind(ErrorKind.EXTRACTION_FAILED, e.kind),
            content={"success": False, "error": e.message, "kind": e.kind.value},
        )
    finally:
        document.path.unlink(missing_ok=True)

    return PDFMetadataResponse(
        file_name=file.filename,
        page_count=info.page_count,
        format=info.format,
        is_encrypted=info.is_encrypted,
        metadata={k: str(v) for k, v in info.metadata.items()},
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def api_not_found(path: str):
    """Unknown API routes."""
    return JSONResponse(status_code=404, content={"success": False, "error": "Endpoint not found"})


# ============================================================================
# Error handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """General exception handler."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )
