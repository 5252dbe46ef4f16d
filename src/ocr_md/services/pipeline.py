"""PDF to Markdown pipeline built on the Mistral OCR API."""

import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional, Union

import aiofiles
import httpx

from ..config import Settings
from ..errors import FormatError, InvalidInputError, PipelineError, ProcessingError, UploadError
from ..models import ConversionOutcome, OcrResult, StageResult
from .client import MistralClient
from .markdown import assemble_markdown
from .ocr import submit_ocr
from .retrieval import get_retrieval_url
from .upload import upload_document

logger = logging.getLogger(__name__)

PdfContent = Union[bytes, bytearray, memoryview, BinaryIO]


class OcrPipeline:
    """Runs one PDF through upload, signed URL, OCR and Markdown assembly.

    The pipeline holds only read-only configuration, so a single instance can
    serve concurrent invocations. Every call to :meth:`process` owns its own
    HTTP client, temp file and intermediate values.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.mistral_api_key:
            raise ValueError("Mistral API key cannot be empty.")
        self.settings = settings
        self._transport = transport

    async def process(
        self,
        content: PdfContent,
        filename: Optional[str] = None,
        model: Optional[str] = None,
        expiry_seconds: Optional[int] = None,
    ) -> ConversionOutcome:
        """Convert a PDF to Markdown.

        Args:
            content: Raw PDF bytes or an open binary stream.
            filename: Display filename used for the upload and diagnostics.
            model: OCR model override.
            expiry_seconds: Signed URL expiry override.

        Returns:
            ConversionOutcome with the Markdown, or the ProcessingError of
            the first stage that failed.
        """
        filename = filename or self.settings.default_filename
        model = model or self.settings.ocr_model
        if expiry_seconds is None:
            expiry_seconds = self.settings.signed_url_expiry_seconds

        invalid = _validate_content(content)
        if invalid is not None:
            return self._fail(invalid, filename)

        try:
            async with staged_document(content, self.settings.temp_dir) as stream:
                async with MistralClient(self.settings, transport=self._transport) as client:
                    ocr = await self._run_stages(client, stream, filename, model, expiry_seconds)
        except PipelineError as e:
            return self._fail(e, filename)

        if not ocr.ok:
            return self._fail(ocr.error, filename)

        assembled = _assemble(ocr.value)
        if not assembled.ok:
            return self._fail(assembled.error, filename)

        pages = len(ocr.value.pages)
        logger.info(f"Converted {filename}: {pages} page(s)")
        return ConversionOutcome(
            filename=filename,
            markdown=assembled.value,
            pages_processed=pages,
        )

    async def _run_stages(
        self,
        client: MistralClient,
        stream: BinaryIO,
        filename: str,
        model: str,
        expiry_seconds: int,
    ) -> StageResult[OcrResult]:
        """Upload, fetch the signed URL and run OCR, stopping at the first failure."""
        uploaded = await upload_document(client, stream, filename)
        if not uploaded.ok:
            return StageResult.failure(uploaded.error)

        signed_url = await get_retrieval_url(client, uploaded.value, expiry_seconds)
        if not signed_url.ok:
            return StageResult.failure(signed_url.error)

        return await submit_ocr(client, signed_url.value, model)

    def _fail(self, cause: PipelineError, filename: str) -> ConversionOutcome:
        error = ProcessingError(cause, filename)
        logger.error(
            f"Failed during OCR processing for {filename}. Reason: {cause.message}"
            + (f" | Detail: {cause.detail}" if cause.detail else "")
        )
        return ConversionOutcome(filename=filename, error=error)


@asynccontextmanager
async def staged_document(content: PdfContent, temp_dir: Path) -> AsyncIterator[BinaryIO]:
    """Yield a readable binary stream for ``content``.

    Streams are passed through untouched. In-memory bytes are written to a
    temp file under ``temp_dir``, which is removed when the context exits,
    whatever the outcome.

    Raises:
        UploadError: If the temp file cannot be written.
    """
    if not isinstance(content, (bytes, bytearray, memoryview)):
        yield content
        return

    temp_path = temp_dir / f"ocr_upload_{uuid.uuid4().hex}.pdf"
    try:
        try:
            temp_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise UploadError(
                "Failed to create temporary file for OCR upload.",
                detail=f"Could not write {temp_path}: {e}",
            ) from e

        with open(temp_path, "rb") as stream:
            yield stream
    finally:
        try:
            if temp_path.exists():
                temp_path.unlink()
        except OSError as e:
            logger.warning(f"Failed to cleanup temp file: {e}")


def _validate_content(content: PdfContent) -> Optional[InvalidInputError]:
    """Return an error if ``content`` holds no PDF data."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        if len(content) == 0:
            return InvalidInputError("No PDF data received in request body.")
        return None

    if not hasattr(content, "read"):
        return InvalidInputError(
            "Invalid PDF content provided. Must be bytes or a binary stream.",
            detail=f"Unsupported content type: {type(content).__name__}",
        )

    # Only seekable streams can be checked without consuming them
    seekable = getattr(content, "seekable", None)
    if seekable is not None and seekable():
        position = content.tell()
        end = content.seek(0, 2)
        content.seek(position)
        if end <= position:
            return InvalidInputError("No PDF data received in request body.")

    return None


def _assemble(result: OcrResult) -> StageResult[str]:
    try:
        return StageResult.success(assemble_markdown(result))
    except (TypeError, ValueError) as e:
        return StageResult.failure(
            FormatError(
                "Failed to format OCR response as markdown.",
                detail=f"Assembly error: {e!r}",
            )
        )
