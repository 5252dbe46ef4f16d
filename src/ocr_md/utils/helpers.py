"""Utility helper functions."""

import re
from pathlib import PurePosixPath

DEFAULT_SAFE_FILENAME = "sanitized_upload.pdf"
MAX_FILENAME_LENGTH = 200

_UNSAFE_CHARS = re.compile(r'[\x00-\x1f\x7f/\\:*?"<>|]')


def sanitize_filename(filename: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Sanitize a client-supplied filename to a safe display basename.

    Args:
        filename: Original filename, possibly containing a path.
        max_length: Maximum length of the result.

    Returns:
        Sanitized filename, or a fixed default if nothing usable remains.
    """
    # Drop any directory part, for both separator styles
    basename = PurePosixPath(filename.replace("\\", "/")).name

    # Replace control characters and characters unsafe in paths or headers
    sanitized = _UNSAFE_CHARS.sub("_", basename)

    sanitized = sanitized[:max_length]

    if not sanitized.strip(". ") or sanitized.lower() == ".pdf":
        return DEFAULT_SAFE_FILENAME

    return sanitized


def truncate_text(text: str, max_length: int = 500, suffix: str = "...") -> str:
    """Truncate text to a maximum length.

    Args:
        text: Text to truncate.
        max_length: Maximum length including suffix.
        suffix: Suffix to add if truncated.

    Returns:
        Truncated text.
    """
    if len(text) <= max_length:
        return text

    # Try to truncate at a word boundary
    truncated = text[: max_length - len(suffix)]
    last_space = truncated.rfind(" ")

    if last_space > max_length // 2:
        truncated = truncated[:last_space]

    return truncated.rstrip() + suffix
