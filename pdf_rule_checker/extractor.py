"""
PDF text extraction with pypdf.

Text from every page is merged, in page order, into one string. Page
boundaries are not preserved beyond a newline between pages; the judge only
ever sees a flat text prefix (see prompt.truncate_text).
"""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader

from .exceptions import ExtractionError
from .models import Document

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n"


def extract_text(data: bytes) -> Document:
    """Decode a PDF byte buffer into a Document.

    Args:
        data: Raw PDF bytes, exactly as uploaded.

    Returns:
        Document with the page count and the merged text of all pages.

    Raises:
        ExtractionError: the buffer is empty, not a PDF, corrupt, or needs a
            user password to open.
    """
    if not data:
        raise ExtractionError("Uploaded file is empty")

    try:
        reader = PdfReader(io.BytesIO(data))
        # Owner-password-only files open with an empty user password
        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionError("PDF is password protected")
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except ExtractionError:
        raise
    except Exception as e:
        logger.warning("PDF parsing failed: %s", e)
        raise ExtractionError(
            "Could not read the uploaded file as a PDF",
            details={"reason": str(e)},
        ) from e

    text = PAGE_SEPARATOR.join(pages)
    logger.info("Extracted %d page(s), %d characters", len(pages), len(text))
    return Document(raw_bytes=data, page_count=len(pages), text=text)
