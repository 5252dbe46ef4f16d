"""Services for OCR-based PDF to Markdown conversion."""

from .client import MistralClient
from .upload import upload_document
from .retrieval import get_retrieval_url
from .ocr import submit_ocr
from .markdown import assemble_markdown
from .pipeline import OcrPipeline

__all__ = [
    "MistralClient",
    "upload_document",
    "get_retrieval_url",
    "submit_ocr",
    "assemble_markdown",
    "OcrPipeline",
]
