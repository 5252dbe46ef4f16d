"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import router
from .config import get_settings
from .errors import PipelineError
from .models import ErrorBody, ErrorResponse

# Configure logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    # Startup
    logger.info("Starting OCR MD service")

    # Ensure temp directory exists
    settings.temp_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Temp directory: {settings.temp_dir}")

    logger.info(f"OCR provider: {settings.mistral_base_url} (model {settings.ocr_model})")
    if not settings.mistral_api_key:
        logger.warning("MISTRAL_API_KEY is not set; conversions will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down OCR MD service")


# Create FastAPI app
app = FastAPI(
    title="OCR MD",
    description="PDF to Markdown converter backed by Mistral OCR",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Filename"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Render pipeline failures as a structured JSON error."""
    body = ErrorBody(code=exc.http_status, message=exc.message)

    if get_settings().expose_error_detail:
        body.kind = exc.kind.value
        body.detail = exc.detail

    return JSONResponse(
        status_code=exc.http_status,
        content=ErrorResponse(error=body).model_dump(exclude_none=True),
    )


# Include API routes
app.include_router(router)


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
