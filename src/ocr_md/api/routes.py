"""API routes for PDF to Markdown conversion."""

import logging
from pathlib import Path
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Header, HTTPException, Query, Request, UploadFile
from fastapi.responses import PlainTextResponse

from ..config import get_settings
from ..models import ConversionOutcome, HealthResponse
from ..services.pipeline import OcrPipeline
from ..utils import sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter()


def get_pipeline() -> OcrPipeline:
    """Build the OCR pipeline from the process-wide settings."""
    settings = get_settings()

    if not settings.mistral_api_key:
        logger.error("MISTRAL_API_KEY is not configured")
        raise HTTPException(
            status_code=503,
            detail="OCR provider is not configured",
        )

    return OcrPipeline(settings)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


@router.post("/pdf2md", response_class=PlainTextResponse)
async def pdf_to_markdown(
    request: Request,
    pipeline: Annotated[OcrPipeline, Depends(get_pipeline)],
    x_filename: Annotated[Optional[str], Header()] = None,
    model: Annotated[Optional[str], Query(description="OCR model override")] = None,
    expiry: Annotated[Optional[int], Query(gt=0, description="Signed URL expiry in seconds")] = None,
) -> PlainTextResponse:
    """Convert a PDF sent as the raw request body to Markdown.

    The display filename is taken from the ``X-Filename`` header.
    """
    settings = get_settings()
    contents = await request.body()

    if len(contents) > settings.max_file_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds maximum of {settings.max_file_size_mb}MB",
        )

    filename = sanitize_filename(x_filename or settings.default_filename)
    logger.info(f"Received {len(contents)} bytes for {filename}")

    outcome = await pipeline.process(contents, filename, model=model, expiry_seconds=expiry)
    return _markdown_response(outcome)


@router.post("/convert", response_class=PlainTextResponse)
async def convert_pdf(
    file: Annotated[UploadFile, File(description="PDF file to convert")],
    pipeline: Annotated[OcrPipeline, Depends(get_pipeline)],
    model: Annotated[Optional[str], Query(description="OCR model override")] = None,
) -> PlainTextResponse:
    """Upload a PDF file as multipart form data and convert it to Markdown."""
    settings = get_settings()

    # Validate file type
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=400,
            detail="File must be a PDF",
        )

    # Check file size
    contents = await file.read()
    if len(contents) > settings.max_file_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds maximum of {settings.max_file_size_mb}MB",
        )

    filename = sanitize_filename(file.filename)
    logger.info(f"Received upload {filename} ({len(contents)} bytes)")

    outcome = await pipeline.process(contents, filename, model=model)
    return _markdown_response(outcome)


def _markdown_response(outcome: ConversionOutcome) -> PlainTextResponse:
    """Render a successful outcome, or raise its error for the app's handler."""
    markdown = outcome.unwrap()

    return PlainTextResponse(
        content=markdown,
        media_type="text/markdown",
        headers={"Content-Disposition": _content_disposition(outcome.filename)},
    )


def _content_disposition(filename: str) -> str:
    md_name = Path(filename).stem + ".md"
    # Header values must be latin-1; keep an ASCII fallback next to the UTF-8 form
    ascii_name = md_name.encode("ascii", "ignore").decode("ascii") or "document.md"
    return f"inline; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(md_name)}"
