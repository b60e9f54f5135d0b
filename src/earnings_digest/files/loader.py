"""Turn an uploaded document into text or a binary fallback payload"""  # noqa: D415

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import logging

from earnings_digest.constants import (
    LOG_PREVIEW_CHARS,
    MAX_UPLOAD_BYTES,
    PDF_MIME_TYPE,
    SCANNED_TEXT_THRESHOLD,
)
from earnings_digest.core.types import (
    ExtractedContent,
    ExtractionFailure,
    Failure,
    Result,
    Success,
    UploadedDocument,
)
from earnings_digest.exceptions import PayloadTooLargeError

from .pdf import extract_pdf_text

log = logging.getLogger(__name__)

type PdfTextExtractor = Callable[[bytes], Result[str, ExtractionFailure]]


def stripped_length(text: str) -> int:
    """Count characters left after trimming surrounding whitespace."""
    return len(text.strip())


@dataclasses.dataclass(frozen=True, slots=True)
class ScannedSourcePolicy:
    """Decides when extracted PDF text is too thin to be trusted.

    `signal` maps the extracted text to a score; anything scoring below
    `threshold` is treated as a scanned or otherwise unreadable source.
    """

    threshold: int = SCANNED_TEXT_THRESHOLD
    signal: Callable[[str], int] = stripped_length

    def is_unreadable(self, text: str) -> bool:
        """Return True when the text should be replaced by the original file."""
        return self.signal(text) < self.threshold


def describe_size(num_bytes: int) -> str:
    """Render a byte count for messages, e.g. "~20 MB" or "64 bytes"."""
    if num_bytes >= 1024 * 1024:
        return f"~{num_bytes // (1024 * 1024)} MB"
    if num_bytes >= 1024:
        return f"~{num_bytes // 1024} KB"
    return f"{num_bytes} bytes"


def too_large_message(max_bytes: int) -> str:
    """Build the rejection message for uploads above `max_bytes`."""
    return (
        "File is too large for this environment. "
        f"Please keep files under {describe_size(max_bytes)}."
    )


def decode_text(data: bytes) -> str:
    """Decode bytes as UTF-8, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")


class DocumentLoader:
    """Loads one upload into `ExtractedContent`.

    PDFs go through text extraction and the scanned-source policy; every
    other declared type is decoded as UTF-8 text.
    """

    def __init__(
        self,
        max_bytes: int = MAX_UPLOAD_BYTES,
        policy: ScannedSourcePolicy | None = None,
        pdf_extractor: PdfTextExtractor = extract_pdf_text,
    ) -> None:
        self.max_bytes = max_bytes
        self.policy = policy or ScannedSourcePolicy()
        self._pdf_extractor = pdf_extractor

    def check_size(self, document: UploadedDocument) -> None:
        """Reject uploads above the server-side cap."""
        if document.size_bytes > self.max_bytes:
            raise PayloadTooLargeError(too_large_message(self.max_bytes))

    def load(self, document: UploadedDocument) -> ExtractedContent:
        """Extract content from an upload, choosing text or binary mode.

        Raises:
            PayloadTooLargeError: The upload exceeds `max_bytes`. Checked
                before any parsing.
        """
        self.check_size(document)

        if not document.is_pdf:
            text = decode_text(document.data)
            self._log_extracted(document, text)
            return ExtractedContent.from_text(text)

        text = self._pdf_text(document)
        self._log_extracted(document, text)
        if self.policy.is_unreadable(text):
            log.info(
                "PDF '%s' yielded %d characters; switching to binary submission",
                document.filename,
                len(text),
            )
            return ExtractedContent.from_binary(document.data, PDF_MIME_TYPE)
        return ExtractedContent.from_text(text)

    def _pdf_text(self, document: UploadedDocument) -> str:
        match self._pdf_extractor(document.data):
            case Success(value=text):
                return text
            case Failure(error=failure):
                # Degrade to empty text; the scanned-source policy reroutes it.
                log.warning(
                    "Text extraction failed for '%s': %s",
                    document.filename,
                    failure.reason,
                )
                return ""
        raise TypeError("PDF extractor must return Success or Failure")

    def _log_extracted(self, document: UploadedDocument, text: str) -> None:
        log.debug(
            "Extracted %d characters from '%s' (%s)",
            len(text),
            document.filename,
            document.mime_type,
        )
        log.debug("Text preview: %s", text[:LOG_PREVIEW_CHARS])
