"""PDF text extraction with pypdf."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_TEXT = "[Unable to extract text from PDF]"


def extract_pdf_text(content: bytes) -> tuple[str, int]:
    """Extract plain text and the page count from PDF bytes.

    Extraction problems are not fatal: unreadable input yields the
    ``EXTRACTION_FAILED_TEXT`` marker and zero pages.

    Args:
        content: Raw PDF bytes.

    Returns:
        A tuple of (text, page_count). Page texts are joined with newlines.
    """
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages), len(pages)
    except Exception:
        logger.warning("[extract_pdf_text] failed to extract text from PDF", exc_info=True)
        return EXTRACTION_FAILED_TEXT, 0
