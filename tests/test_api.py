"""API endpoint tests."""

import pytest
from fastapi.testclient import TestClient

import httpx

from ocr_md.api.routes import get_pipeline
from ocr_md.config import get_settings
from ocr_md.main import app

from conftest import PDF_BYTES

EXPECTED_MARKDOWN = "A ![x](data:image/jpeg;base64,base64data) B\n\n---\n\nC"


@pytest.fixture
def client(pipeline):
    """Create test client wired to the fake provider."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fresh_settings():
    """Reload settings from the (patched) environment for one test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"


def test_pdf2md_success(client, provider):
    response = client.post(
        "/pdf2md",
        content=PDF_BYTES,
        headers={"X-Filename": "../secret/report.pdf"},
    )

    assert response.status_code == 200
    assert response.text == EXPECTED_MARKDOWN
    assert response.headers["content-type"].startswith("text/markdown")
    assert "charset=utf-8" in response.headers["content-type"]
    assert 'filename="report.md"' in response.headers["content-disposition"]
    assert b'filename="report.pdf"' in provider.requests["upload"].content
    assert provider.calls == ["upload", "url", "ocr"]


def test_pdf2md_default_filename(client, provider):
    response = client.post("/pdf2md", content=PDF_BYTES)

    assert response.status_code == 200
    assert 'filename="uploaded_document.md"' in response.headers["content-disposition"]


def test_pdf2md_empty_body(client, provider):
    response = client.post("/pdf2md", content=b"")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == 400
    assert "No PDF data" in error["message"]
    assert provider.calls == []


def test_pdf2md_upload_failure(client, provider):
    provider.replies["upload"] = httpx.Response(500, text="provider exploded")

    response = client.post(
        "/pdf2md", content=PDF_BYTES, headers={"X-Filename": "report.pdf"}
    )

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == 500
    assert "report.pdf" in error["message"]
    assert "File upload failed" in error["message"]
    assert "detail" not in error
    assert "provider exploded" not in response.text
    assert provider.calls == ["upload"]


def test_pdf2md_exposes_detail_when_enabled(client, provider, monkeypatch, fresh_settings):
    monkeypatch.setenv("EXPOSE_ERROR_DETAIL", "true")
    provider.replies["ocr"] = httpx.Response(503, text="overloaded")

    response = client.post("/pdf2md", content=PDF_BYTES)

    error = response.json()["error"]
    assert response.status_code == 500
    assert error["kind"] == "ocr"
    assert "overloaded" in error["detail"]


def test_pdf2md_query_overrides(client, provider):
    response = client.post(
        "/pdf2md?model=mistral-ocr-2505&expiry=45", content=PDF_BYTES
    )

    assert response.status_code == 200
    assert provider.json_body("ocr")["model"] == "mistral-ocr-2505"
    assert provider.requests["url"].url.params["expiry"] == "45"


def test_pdf2md_rejects_non_positive_expiry(client, provider):
    response = client.post("/pdf2md?expiry=0", content=PDF_BYTES)

    assert response.status_code == 422
    assert provider.calls == []


def test_pdf2md_unconfigured(monkeypatch, fresh_settings):
    monkeypatch.setenv("MISTRAL_API_KEY", "")
    client = TestClient(app)

    response = client.post("/pdf2md", content=PDF_BYTES)

    assert response.status_code == 503


def test_convert_upload(client, provider):
    response = client.post(
        "/convert",
        files={"file": ("paper.pdf", PDF_BYTES, "application/pdf")},
    )

    assert response.status_code == 200
    assert response.text == EXPECTED_MARKDOWN
    assert 'filename="paper.md"' in response.headers["content-disposition"]


def test_convert_no_file(client):
    """Test convert endpoint without file."""
    response = client.post("/convert")
    assert response.status_code == 422  # Validation error


def test_convert_non_pdf(client):
    """Test convert endpoint with non-PDF file."""
    response = client.post(
        "/convert",
        files={"file": ("test.txt", b"not a pdf", "text/plain")},
    )
    assert response.status_code == 400
    assert "PDF" in response.json()["detail"]


def test_cors_preflight_allows_filename_header(client):
    response = client.options(
        "/pdf2md",
        headers={
            "Origin": "https://app.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Filename",
        },
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers
