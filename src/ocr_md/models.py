"""Pydantic models for request/response and internal data structures."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from .errors import PipelineError, ProcessingError

T = TypeVar("T")


# ============================================================
# API Models
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"


class ErrorBody(BaseModel):
    """Error payload returned to API callers."""

    code: int
    message: str
    kind: Optional[str] = None
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Envelope for error responses."""

    error: ErrorBody


# ============================================================
# OCR Result Models
# ============================================================

class OcrPage(BaseModel):
    """One page of OCR output."""

    index: int
    markdown: str = ""
    # Image id -> base64 payload, in provider order
    images: dict[str, str] = Field(default_factory=dict)


class OcrResult(BaseModel):
    """Ordered OCR output for a whole document."""

    pages: list[OcrPage] = Field(default_factory=list)
    model: Optional[str] = None


# ============================================================
# Pipeline Results
# ============================================================

@dataclass(frozen=True)
class StageResult(Generic[T]):
    """Outcome of a single pipeline stage: a value or a failure."""

    value: Optional[T] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PipelineError) -> "StageResult[T]":
        return cls(error=error)


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of one pipeline invocation."""

    filename: str
    markdown: Optional[str] = None
    pages_processed: int = 0
    error: Optional[ProcessingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def detail(self) -> Optional[str]:
        """Diagnostic detail of the failure, if any."""
        return self.error.detail if self.error else None

    def unwrap(self) -> str:
        """Return the markdown or raise the processing error."""
        if self.error is not None:
            raise self.error
        return self.markdown or ""
