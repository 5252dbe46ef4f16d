"""Upload stage: stage document bytes with the OCR provider."""

import logging
from typing import BinaryIO

import httpx

from ..errors import UploadError
from ..models import StageResult
from .client import MistralClient, body_snippet, decode_json

logger = logging.getLogger(__name__)


async def upload_document(
    client: MistralClient,
    stream: BinaryIO,
    filename: str,
) -> StageResult[str]:
    """Upload a document for OCR and return the provider's file id.

    Args:
        client: Provider client for this invocation.
        stream: Open binary stream with the PDF content.
        filename: Display filename sent with the upload.

    Returns:
        StageResult holding the file id, or an UploadError.
    """
    try:
        response = await client.upload_file(stream, filename)
    except httpx.TimeoutException as e:
        return StageResult.failure(
            UploadError(
                "File upload timed out.",
                detail=f"Upload request for {filename} timed out: {e!r}",
            )
        )
    except (httpx.HTTPError, OSError) as e:
        return StageResult.failure(
            UploadError(
                "Failed to upload file due to API request error.",
                detail=f"Upload request for {filename} failed: {e!r}",
            )
        )

    status = response.status_code
    if status != 200:
        return StageResult.failure(
            UploadError(
                f"File upload failed with status: {status}",
                detail=f"Upload API returned status {status}. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    try:
        data = decode_json(response)
    except ValueError:
        return StageResult.failure(
            UploadError(
                "Invalid JSON received from file upload API.",
                detail=f"Failed to decode JSON from upload response. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    file_id = data.get("id") if isinstance(data, dict) else None
    if not isinstance(file_id, str) or not file_id:
        return StageResult.failure(
            UploadError(
                "File ID not found in upload response.",
                detail=f"File ID missing in upload response. Body: {body_snippet(response)}",
                provider_status=status,
            )
        )

    logger.info(f"Uploaded {filename} as file {file_id}")
    return StageResult.success(file_id)
