"""
Social Media Content Analyzer
=============================

Extracts text from a single uploaded PDF or image and scores it for
social-media engagement.

Features:
- Media-type routing (PDF text layer vs. image OCR)
- PDF validation before parsing (signature, size, text presence)
- Bounded-time Tesseract OCR with real cancellation on timeout
- Deterministic, explainable engagement score with suggestions

Basic Usage:
    from content_analyzer import analyze

    result = analyze("Excited to share my new project! #tech")
    print(result.score, result.suggestions)

Pipeline Usage:
    from content_analyzer import AnalysisPipeline, UploadedDocument

    pipeline = AnalysisPipeline()
    result = await pipeline.run(
        UploadedDocument(path="uploads/post.png", declared_media_type="image/png")
    )
"""

__version__ = "0.1.0"

from .analyzer import SUGGESTION_RULES, SuggestionRule, analyze
from .errors import ErrorKind, ExtractionError, PipelineError, UnsupportedMediaTypeError
from .models import (
    AnalysisMetrics,
    AnalysisResult,
    ExtractionResult,
    PDFMetadata,
    PipelineConfig,
    UploadedDocument,
)
from .pipeline import AnalysisPipeline, PipelineState, run_pipeline
from .router import ExtractionRouter, ExtractorKind, RoutingDecision

__all__ = [
    # Version
    "__version__",
    # Analysis
    "analyze",
    "SuggestionRule",
    "SUGGESTION_RULES",
    "AnalysisMetrics",
    "AnalysisResult",
    # Errors
    "ErrorKind",
    "ExtractionError",
    "PipelineError",
    "UnsupportedMediaTypeError",
    # Routing
    "ExtractionRouter",
    "ExtractorKind",
    "RoutingDecision",
    # Pipeline
    "AnalysisPipeline",
    "PipelineState",
    "run_pipeline",
    "PipelineConfig",
    "UploadedDocument",
    "ExtractionResult",
    "PDFMetadata",
]
