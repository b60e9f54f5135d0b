"""Map failures to a fixed error kind, HTTP status, and user-safe message"""  # noqa: D415

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
import logging

from earnings_digest.exceptions import EarningsDigestError, ErrorKind

log = logging.getLogger(__name__)

# Client-input errors are 4xx; everything else is 5xx.
STATUS_BY_KIND: Mapping[ErrorKind, int] = {
    ErrorKind.INPUT_VALIDATION: 400,
    ErrorKind.PAYLOAD_TOO_LARGE: 413,
    ErrorKind.CONFIG_MISSING: 500,
    ErrorKind.UPSTREAM_MODEL: 502,
    ErrorKind.SCHEMA_PARSE: 502,
    ErrorKind.UNEXPECTED: 500,
}

UNEXPECTED_MESSAGE = (
    "Unexpected error while processing the document. Please try again."
)


@dataclasses.dataclass(frozen=True, slots=True)
class ClassifiedError:
    """Terminal outcome of a failed request."""

    kind: ErrorKind
    message: str
    status_code: int

    @property
    def is_client_error(self) -> bool:
        """True for 4xx outcomes."""
        return 400 <= self.status_code < 500

    def to_payload(self) -> dict[str, str]:
        """Response body for a failed request."""
        return {"error": self.message}


def classify_error(error: BaseException) -> ClassifiedError:
    """Classify any exception raised while handling a request.

    Known pipeline errors keep their own message. Anything else becomes
    `UNEXPECTED` with a generic message, and its detail goes to the log only.
    """
    if isinstance(error, EarningsDigestError):
        kind = error.kind
        message = error.message
    else:
        log.error("Unexpected error while analyzing document", exc_info=error)
        kind = ErrorKind.UNEXPECTED
        message = UNEXPECTED_MESSAGE
    return ClassifiedError(
        kind=kind, message=message, status_code=STATUS_BY_KIND[kind]
    )
