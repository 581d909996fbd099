"""
Plain-text fallback for weekly mailing PDFs.

Some providers only accept text, so the mailing has to be flattened before it
can be inlined into the prompt. Extraction is best-effort: a PDF that cannot be
parsed yields an empty string and a warning, never an exception.
"""

import base64
import io
import logging

import pdfplumber

logger = logging.getLogger(__name__)


def extract_text(content: bytes) -> str:
    """
    Concatenate the text of every page, in page order, with page markers.

    Pages without a text layer (scanned images) are skipped.
    """
    try:
        parts = []
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                text = (page.extract_text() or "").strip()
                if text:
                    parts.append(f"--- Page {page_num} ---\n{text}")
        return "\n\n".join(parts)
    except Exception as e:
        logger.warning("PDF text extraction failed: %s", e)
        return ""


def extract_text_from_base64(content_base64: str) -> str:
    try:
        content = base64.b64decode(content_base64)
    except (ValueError, TypeError) as e:
        logger.warning("Document is not valid base64: %s", e)
        return ""
    return extract_text(content)
