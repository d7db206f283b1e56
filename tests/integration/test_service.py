"""
Integration Tests for the FastAPI Service
=========================================

Runs the HTTP layer against real PDFs and a fake OCR engine.
"""

import os
import tempfile

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="content_analyzer_uploads_"))

import pytest
from fastapi.testclient import TestClient

from content_analyzer import ErrorKind, ExtractionRouter
from content_analyzer.extractors import ImageExtractor, PDFExtractor
from service import main


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "UPLOAD_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def install_router(monkeypatch, fake_engine_factory):
    def _install(engine=None, **pdf_options):
        router = ExtractionRouter(
            pdf_extractor=PDFExtractor(**pdf_options),
            image_extractor=ImageExtractor(engine=engine or fake_engine_factory()),
        )
        monkeypatch.setattr(main, "router", router)
        return router
    return _install


@pytest.fixture
def client(upload_dir, install_router):
    install_router()
    return TestClient(main.app)


def _post(client, path, name, media_type, url="/api/analyze"):
    with open(path, "rb") as fh:
        return client.post(url, files={"file": (name, fh, media_type)})


# =============================================================================
# System Endpoints
# =============================================================================


@pytest.mark.api
@pytest.mark.integration
class TestSystemEndpoints:
    """API-001: Documentation, health and unknown routes."""

    def test_api_info(self, client):
        response = client.get("/api")
        assert response.status_code == 200
        assert "POST /api/analyze" in response.json()["endpoints"]

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["ocr_available"] is True
        assert "timestamp" in body

    def test_unknown_api_route(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "Endpoint not found"


# =============================================================================
# Analyze Endpoint
# =============================================================================


@pytest.mark.api
@pytest.mark.integration
class TestAnalyzeEndpoint:
    """API-010: Upload gatekeeping, pipeline outcomes and cleanup."""

    def test_pdf_success(self, client, upload_dir, create_text_pdf):
        path = create_text_pdf(content="What do you think about remote work? #remote")
        response = _post(client, path, "post.pdf", "application/pdf")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"originalText", "suggestions", "score", "metrics"}
        assert body["metrics"]["hasQuestions"] is True
        assert body["metrics"]["hashtagCount"] == 1
        assert 30 <= body["score"] <= 100
        assert list(upload_dir.iterdir()) == []

    def test_image_success(self, client, upload_dir, create_image):
        response = _post(client, create_image("shot.png"), "shot.png", "image/png")

        assert response.status_code == 200
        assert response.json()["originalText"] == "Recognized post text #ocr"
        assert list(upload_dir.iterdir()) == []

    def test_no_file(self, client):
        response = client.post("/api/analyze")
        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"
        assert response.json()["kind"] == ErrorKind.NO_FILE.value

    def test_disallowed_type(self, client, upload_dir, create_file):
        path = create_file("notes.txt", b"hello")
        response = _post(client, path, "notes.txt", "text/plain")

        assert response.status_code == 400
        assert list(upload_dir.iterdir()) == []

    def test_mismatched_extension(self, client, create_file):
        path = create_file("post.gif", b"GIF89a")
        response = _post(client, path, "post.gif", "image/png")
        assert response.status_code == 400

    def test_upload_too_large(self, client, monkeypatch, create_text_pdf):
        monkeypatch.setattr(main, "UPLOAD_MAX_SIZE", 10)
        response = _post(client, create_text_pdf(), "post.pdf", "application/pdf")
        assert response.status_code == 413

    def test_invalid_pdf(self, client, upload_dir, create_file):
        path = create_file("fake.pdf", b"this is not a pdf")
        response = _post(client, path, "fake.pdf", "application/pdf")

        assert response.status_code == 422
        assert response.json()["kind"] == ErrorKind.INVALID_FORMAT.value
        assert list(upload_dir.iterdir()) == []

    def test_scanned_pdf(self, client, create_blank_pdf):
        response = _post(client, create_blank_pdf(), "scan.pdf", "application/pdf")
        assert response.status_code == 422
        assert response.json()["kind"] == ErrorKind.NO_TEXT_FOUND.value

    def test_pdf_over_parser_limit(self, upload_dir, install_router, create_text_pdf):
        install_router(max_size_bytes=16)
        client = TestClient(main.app)

        response = _post(client, create_text_pdf(), "post.pdf", "application/pdf")

        assert response.status_code == 413
        assert response.json()["kind"] == ErrorKind.TOO_LARGE.value

    def test_ocr_timeout(self, upload_dir, install_router, fake_engine_factory, create_image):
        router = install_router(engine=fake_engine_factory(delay=5.0))
        router.image_extractor.timeout_ms = 50
        client = TestClient(main.app)

        response = _post(client, create_image(), "post.png", "image/png")

        assert response.status_code == 422
        assert response.json()["kind"] == ErrorKind.TIMEOUT.value
        assert list(upload_dir.iterdir()) == []

    def test_filenames_are_sanitized(self, client, upload_dir, monkeypatch, create_text_pdf):
        saved = []
        original = main.unique_upload_path

        def spy(name):
            path = original(name)
            saved.append(path)
            return path

        monkeypatch.setattr(main, "unique_upload_path", spy)
        _post(client, create_text_pdf(), "my post (final).pdf", "application/pdf")

        assert saved[0].name.endswith("-my_post__final_.pdf")
        assert saved[0].parent == upload_dir


# =============================================================================
# PDF Metadata Endpoint
# =============================================================================


@pytest.mark.api
@pytest.mark.integration
class TestMetadataEndpoint:
    """API-020: Pre-flight PDF inspection."""

    def test_metadata(self, client, upload_dir, create_multipage_pdf):
        response = _post(
            client, create_multipage_pdf(pages=2), "deck.pdf", "application/pdf",
            url="/api/pdf/metadata",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["page_count"] == 2
        assert body["file_name"] == "deck.pdf"
        assert list(upload_dir.iterdir()) == []

    def test_metadata_invalid_pdf(self, client, create_file):
        path = create_file("fake.pdf", b"nope")
        response = _post(client, path, "fake.pdf", "application/pdf", url="/api/pdf/metadata")
        assert response.status_code == 422

    def test_metadata_rejects_images(self, client, create_image):
        response = _post(client, create_image(), "post.png", "image/png", url="/api/pdf/metadata")
        assert response.status_code == 400

    def test_metadata_unavailable_leaves_no_upload(
        self, client, upload_dir, create_text_pdf, monkeypatch
    ):
        monkeypatch.setattr(main.router, "pdf_extractor", object())
        response = _post(
            client, create_text_pdf(), "post.pdf", "application/pdf", url="/api/pdf/metadata"
        )

        assert response.status_code == 500
        assert list(upload_dir.iterdir()) == []


@pytest.mark.api
@pytest.mark.integration
class TestUploadPersistence:
    """API-025: Failed writes leave nothing in the upload directory."""

    def test_partial_write_removed(
        self, upload_dir, install_router, create_text_pdf, monkeypatch
    ):
        install_router()
        pdf_path = create_text_pdf()

        def write_then_fail(path, data):
            with open(path, "wb") as fh:
                fh.write(data[:10])
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(main.Path, "write_bytes", write_then_fail)
        client = TestClient(main.app, raise_server_exceptions=False)
        response = _post(client, pdf_path, "post.pdf", "application/pdf")

        assert response.status_code == 500
        assert list(upload_dir.iterdir()) == []


# =============================================================================
# Helpers
# =============================================================================


@pytest.mark.unit
class TestStatusMapping:
    """API-030: Error kind to HTTP status."""

    @pytest.mark.parametrize(
        "kind,extraction_kind,status",
        [
            (ErrorKind.NO_FILE, None, 400),
            (ErrorKind.UNSUPPORTED_MEDIA_TYPE, None, 415),
            (ErrorKind.EXTRACTION_FAILED, ErrorKind.TOO_LARGE, 413),
            (ErrorKind.EXTRACTION_FAILED, ErrorKind.NO_TEXT_FOUND, 422),
            (ErrorKind.EXTRACTION_FAILED, ErrorKind.TIMEOUT, 422),
            (ErrorKind.EXTRACTION_FAILED, ErrorKind.PARSE_FAILURE, 422),
            (ErrorKind.INTERNAL, None, 500),
        ],
    )
    def test_status_for_kind(self, kind, extraction_kind, status):
        assert main.status_for_kind(kind, extraction_kind) == status

    def test_sanitize_filename(self):
        assert main.sanitize_filename("a b/c?.png") == "a_b_c_.png"
        assert main.sanitize_filename("") == "upload"
