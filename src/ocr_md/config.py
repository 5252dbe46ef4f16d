"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Mistral OCR configuration
    mistral_api_key: str = ""
    mistral_base_url: str = "https://api.mistral.ai"
    ocr_model: str = "mistral-ocr-latest"
    signed_url_expiry_seconds: int = 120
    request_timeout_seconds: float = 60.0

    # File handling
    default_filename: str = "uploaded_document.pdf"
    max_file_size_mb: int = 50
    temp_dir: Path = Path("/tmp/ocr_md")

    # Error responses
    expose_error_detail: bool = False

    # HTTP server
    cors_allow_origins: list[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"

    @field_validator("mistral_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def max_file_size_bytes(self) -> int:
        """Return max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
