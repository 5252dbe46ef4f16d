"""Failure taxonomy for the OCR pipeline."""

from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Which part of the pipeline a failure originated from."""

    INVALID_INPUT = "invalid_input"
    UPLOAD = "upload"
    RETRIEVAL_URL = "retrieval_url"
    OCR = "ocr"
    FORMAT = "format"


class PipelineError(Exception):
    """Base class for classified pipeline failures.

    ``message`` is safe to show to end users. ``detail`` holds the low-level
    diagnostic information (provider status codes, response snippets,
    transport errors) meant for operator logs only.
    """

    kind: FailureKind
    http_status: int = 500

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        provider_status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.provider_status = provider_status


class InvalidInputError(PipelineError):
    """The request carried no usable PDF content."""

    kind = FailureKind.INVALID_INPUT
    http_status = 400


class UploadError(PipelineError):
    kind = FailureKind.UPLOAD


class RetrievalUrlError(PipelineError):
    kind = FailureKind.RETRIEVAL_URL


class OcrError(PipelineError):
    kind = FailureKind.OCR


class FormatError(PipelineError):
    kind = FailureKind.FORMAT


class ProcessingError(PipelineError):
    """Outward-facing failure wrapping whichever stage failed first."""

    def __init__(self, cause: PipelineError, filename: str):
        super().__init__(
            f"Failed to process PDF content to markdown for {filename}. {cause.message}",
            detail=cause.detail,
            provider_status=cause.provider_status,
        )
        self.cause = cause
        self.filename = filename
        self.kind = cause.kind
        self.http_status = cause.http_status
