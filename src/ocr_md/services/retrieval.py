"""Retrieval-URL stage: exchange a file id for a short-lived signed URL."""

import logging

import httpx

from ..errors import RetrievalUrlError
from ..models import StageResult
from .client import MistralClient, body_snippet, decode_json

logger = logging.getLogger(__name__)


async def get_retrieval_url(
    client: MistralClient,
    file_id: str,
    expiry_seconds: int,
) -> StageResult[str]:
    """Request a signed URL the OCR job can fetch the document from."""
    try:
        response = await client.get_signed_url(file_id, expiry_seconds)
    except httpx.TimeoutException as e:
        return StageResult.failure(
            RetrievalUrlError(
                f"Getting signed URL for file {file_id} timed out.",
                detail=f"Signed URL request for file {file_id} timed out: {e!r}",
            )
        )
    except httpx.HTTPError as e:
        return StageResult.failure(
            RetrievalUrlError(
                "Failed to get signed URL due to API request error.",
                detail=f"Signed URL request for file {file_id} failed: {e!r}",
            )
        )

    status = response.status_code
    if status != 200:
        return StageResult.failure(
            RetrievalUrlError(
                f"Getting signed URL failed for file {file_id} with status: {status}",
                detail=(
                    f"Get Signed URL API returned status {status} for file {file_id}. "
                    f"Body: {body_snippet(response)}"
                ),
                provider_status=status,
            )
        )

    try:
        data = decode_json(response)
    except ValueError:
        return StageResult.failure(
            RetrievalUrlError(
                "Invalid JSON received from signed URL API.",
                detail=(
                    f"Failed to decode JSON from signed URL response for file {file_id}. "
                    f"Body: {body_snippet(response)}"
                ),
                provider_status=status,
            )
        )

    url = data.get("url") if isinstance(data, dict) else None
    if not isinstance(url, str) or not url:
        return StageResult.failure(
            RetrievalUrlError(
                f"Signed URL not found for file {file_id}.",
                detail=(
                    f"Signed URL missing in response for file {file_id}. "
                    f"Body: {body_snippet(response)}"
                ),
                provider_status=status,
            )
        )

    logger.info(f"Obtained signed URL for file {file_id} (expiry {expiry_seconds}s)")
    return StageResult.success(url)
