"""Markdown assembly service."""

import html
import logging
import re

from ..models import OcrPage, OcrResult

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n---\n\n"
DATA_URI_PREFIX = "data:image/jpeg;base64,"


def assemble_markdown(result: OcrResult) -> str:
    """Combine OCR pages into a single Markdown document.

    Images are inlined as data URIs and pages are joined with a horizontal
    rule, in the order the provider returned them.

    Args:
        result: Parsed OCR result.

    Returns:
        Combined Markdown. Empty string when there are no pages.
    """
    return PAGE_SEPARATOR.join(render_page(page) for page in result.pages)


def render_page(page: OcrPage) -> str:
    """Return the page's Markdown with its image placeholders inlined."""
    images = _usable_images(page.images)

    if not page.markdown or not images:
        return page.markdown

    return replace_images_in_markdown(page.markdown, images)


def replace_images_in_markdown(markdown: str, images: dict[str, str]) -> str:
    """Replace ``![id](id)`` placeholders with inline data URI images.

    Only the first occurrence of each placeholder is replaced. If any
    substitution fails, the original text is returned unmodified.

    Args:
        markdown: Page Markdown text.
        images: Image id to base64 payload.

    Returns:
        Markdown with placeholders replaced.
    """
    result = markdown
    for image_id, payload in _usable_images(images).items():
        data_uri = _to_data_uri(payload)
        replacement = f"![{html.escape(image_id, quote=True)}]({data_uri})"
        pattern = re.escape(f"![{image_id}]({image_id})")

        try:
            result = re.sub(pattern, lambda _: replacement, result, count=1)
        except re.error as e:
            logger.warning(f"Image substitution failed for '{image_id}': {e}")
            return markdown

    return result


def _usable_images(images: dict[str, str]) -> dict[str, str]:
    """Drop entries with an empty or non-text id or payload."""
    return {
        image_id: payload
        for image_id, payload in images.items()
        if isinstance(image_id, str)
        and image_id
        and isinstance(payload, str)
        and payload
    }


def _to_data_uri(payload: str) -> str:
    if payload.startswith("data:image/"):
        return payload
    return DATA_URI_PREFIX + payload
