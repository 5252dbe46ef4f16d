"""HTTP client for the Mistral OCR API."""

import json
import logging
from typing import Any, BinaryIO, Optional
from urllib.parse import quote

import httpx

from ..config import Settings
from ..utils import truncate_text

logger = logging.getLogger(__name__)

# Longest response body excerpt kept in diagnostics
BODY_SNIPPET_LENGTH = 500


def body_snippet(response: httpx.Response) -> str:
    """Return a bounded excerpt of the response body for diagnostics."""
    return truncate_text(response.text, BODY_SNIPPET_LENGTH)


def decode_json(response: httpx.Response) -> Any:
    """Decode a JSON response body.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    return json.loads(response.text)


class MistralClient:
    """Thin async wrapper around the three Mistral endpoints the pipeline uses.

    Methods return the raw ``httpx.Response``; interpreting status codes and
    bodies is left to the pipeline stages. Transport errors (connection
    failures, timeouts) propagate as ``httpx.HTTPError``.

    Use as an async context manager so the underlying connection pool is
    closed when the invocation ends.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.mistral_api_key:
            raise ValueError("Mistral API key cannot be empty.")

        self._client = httpx.AsyncClient(
            base_url=settings.mistral_base_url,
            timeout=settings.request_timeout_seconds,
            headers={
                "Authorization": f"Bearer {settings.mistral_api_key}",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def __aenter__(self) -> "MistralClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def upload_file(self, stream: BinaryIO, filename: str) -> httpx.Response:
        """Upload a document for OCR."""
        logger.debug(f"POST /v1/files ({filename})")
        return await self._client.post(
            "/v1/files",
            files={"file": (filename, stream, "application/pdf")},
            data={"purpose": "ocr"},
        )

    async def get_signed_url(self, file_id: str, expiry_seconds: int) -> httpx.Response:
        """Request a short-lived URL for a previously uploaded file."""
        logger.debug(f"GET /v1/files/{file_id}/url")
        return await self._client.get(
            f"/v1/files/{quote(file_id, safe='')}/url",
            params={"expiry": expiry_seconds},
        )

    async def submit_ocr(self, document_url: str, model: str) -> httpx.Response:
        """Run OCR on the document behind ``document_url``."""
        logger.debug(f"POST /v1/ocr (model={model})")
        return await self._client.post(
            "/v1/ocr",
            json={
                "model": model,
                "document": {"type": "document_url", "document_url": document_url},
                "include_image_base64": True,
            },
        )
