"""Shared fixtures: a fake Mistral API served through httpx.MockTransport."""

import json
from pathlib import Path
from typing import Optional, Union

import httpx
import pytest

from ocr_md.config import Settings
from ocr_md.services.pipeline import OcrPipeline

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"

OCR_PAGES = {
    "pages": [
        {
            "index": 0,
            "markdown": "A ![x](x) B",
            "images": [{"id": "x", "image_base64": "base64data"}],
        },
        {"index": 1, "markdown": "C", "images": []},
    ],
    "model": "mistral-ocr-2505",
}

Reply = Union[httpx.Response, Exception]


class FakeProvider:
    """Records every call and answers with canned responses per endpoint."""

    def __init__(self, watch_dir: Optional[Path] = None):
        self.calls: list[str] = []
        self.requests: dict[str, httpx.Request] = {}
        self.staged_files: list[Path] = []
        self.watch_dir = watch_dir
        self.replies: dict[str, Reply] = {
            "upload": httpx.Response(200, json={"id": "file-123", "purpose": "ocr"}),
            "url": httpx.Response(200, json={"url": "https://files.example/signed?sig=abc"}),
            "ocr": httpx.Response(200, json=OCR_PAGES),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "POST" and path == "/v1/files":
            name = "upload"
            if self.watch_dir is not None and self.watch_dir.exists():
                self.staged_files = list(self.watch_dir.iterdir())
        elif request.method == "GET" and path.startswith("/v1/files/") and path.endswith("/url"):
            name = "url"
        elif request.method == "POST" and path == "/v1/ocr":
            name = "ocr"
        else:
            return httpx.Response(404, json={"detail": "not found"})

        self.calls.append(name)
        self.requests[name] = request

        reply = self.replies[name]
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def json_body(self, name: str) -> dict:
        return json.loads(self.requests[name].content)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment's .env file."""
    return Settings(
        _env_file=None,
        mistral_api_key="test-key",
        mistral_base_url="https://api.mistral.test/",
        temp_dir=tmp_path / "staging",
    )


@pytest.fixture
def provider(settings):
    return FakeProvider(watch_dir=settings.temp_dir)


@pytest.fixture
def pipeline(settings, provider):
    return OcrPipeline(settings, transport=provider.transport)
