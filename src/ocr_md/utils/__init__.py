"""Utility functions for ocr_md."""

from .helpers import DEFAULT_SAFE_FILENAME, sanitize_filename, truncate_text

__all__ = ["DEFAULT_SAFE_FILENAME", "sanitize_filename", "truncate_text"]
