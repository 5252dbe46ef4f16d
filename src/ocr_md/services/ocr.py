"""OCR submission stage: run the provider's OCR job on a signed URL."""

import logging
from typing import Any

import httpx

from ..errors import OcrError
from ..models import OcrPage, OcrResult, StageResult
from .client import MistralClient, body_snippet, decode_json

logger = logging.getLogger(__name__)


async def submit_ocr(
    client: MistralClient,
    document_url: str,
    model: str,
) -> StageResult[OcrResult]:
    """Submit an OCR job and parse the per-page result.

    Args:
        client: Provider client for this invocation.
        document_url: Signed URL of the uploaded document.
        model: OCR model identifier.

    Returns:
        StageResult holding the parsed OcrResult, or an OcrError.
    """
    try:
        response = await client.submit_ocr(document_url, model)
    except httpx.TimeoutException as e:
        return StageResult.failure(
            OcrError(
                "OCR processing request timed out.",
                detail=f"OCR request timed out: {e!r}",
            )
        )
    except httpx.HTTPError as e:
        return StageResult.failure(
            OcrError(
                "Failed to trigger OCR processing due to API request error.",
                detail=f"OCR request failed: {e!r}",
            )
        )

    status = response.status_code
    if status != 200:
        return StageResult.failure(
            OcrError(
                f"OCR processing request failed with status: {status}",
                detail=f"OCR Processing API returned status {status}. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    try:
        data = decode_json(response)
    except ValueError:
        return StageResult.failure(
            OcrError(
                "Invalid JSON received from OCR process API.",
                detail=f"Failed to decode JSON from OCR response. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    if not isinstance(data, dict):
        return StageResult.failure(
            OcrError(
                "Invalid response format from OCR process.",
                detail=f"OCR response was not a valid JSON object. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    result = parse_ocr_response(data)
    logger.info(f"OCR returned {len(result.pages)} page(s)")
    return StageResult.success(result)


def parse_ocr_response(data: dict[str, Any]) -> OcrResult:
    """Build an OcrResult from the provider's JSON response.

    Parsing is lenient: missing or mistyped fields become empty values and
    entries that are not objects are skipped.
    """
    raw_pages = data.get("pages")
    if not isinstance(raw_pages, list):
        raw_pages = []

    pages = []
    for position, raw_page in enumerate(raw_pages):
        if not isinstance(raw_page, dict):
            logger.warning(f"Skipping malformed page entry at position {position}")
            continue

        index = raw_page.get("index")
        if not isinstance(index, int) or isinstance(index, bool):
            index = position

        markdown = raw_page.get("markdown")
        if not isinstance(markdown, str):
            markdown = ""

        pages.append(
            OcrPage(
                index=index,
                markdown=markdown,
                images=_collect_images(raw_page.get("images")),
            )
        )

    model = data.get("model")
    return OcrResult(pages=pages, model=model if isinstance(model, str) else None)


def _collect_images(raw_images: Any) -> dict[str, str]:
    """Map image id to base64 payload, keeping only well-formed entries."""
    images: dict[str, str] = {}
    if not isinstance(raw_images, list):
        return images

    for img in raw_images:
        if not isinstance(img, dict):
            continue
        image_id = img.get("id")
        payload = img.get("image_base64")
        if isinstance(image_id, str) and isinstance(payload, str):
            images[image_id] = payload

    return images
