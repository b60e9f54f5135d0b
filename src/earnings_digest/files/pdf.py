"""PDF text extraction.

Extraction never raises: parser errors come back as a `Failure` so the
loader can decide what an unreadable document means.
"""

from __future__ import annotations

from io import BytesIO
import logging

import pdfplumber

from earnings_digest.core.types import ExtractionFailure, Failure, Result, Success

log = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> Result[str, ExtractionFailure]:
    """Extract page text from PDF bytes.

    Pages are joined with blank lines; pages without a text layer contribute
    nothing.

    Args:
        data: Raw PDF bytes.

    Returns:
        `Success` with the joined text (possibly empty) or `Failure` with an
        `ExtractionFailure` describing why the document could not be parsed.
    """
    pages: list[str] = []
    try:
        with pdfplumber.open(BytesIO(data)) as pdf:
            for page in pdf.pages:
                value = (page.extract_text() or "").strip()
                if value:
                    pages.append(value)
    except Exception as e:  # pdfplumber surfaces several unrelated error types
        log.debug("pdfplumber failed on %d bytes", len(data), exc_info=True)
        return Failure(ExtractionFailure(reason=f"PDF parse error: {e}", cause=e))
    return Success("\n\n".join(pages))
