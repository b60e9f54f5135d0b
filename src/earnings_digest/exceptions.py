"""Exceptions raised by the earnings digest pipeline.

Each concrete exception carries the `ErrorKind` it maps to, so the error
classifier never has to guess from message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed set of failure categories surfaced to callers."""

    INPUT_VALIDATION = "input_validation"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    CONFIG_MISSING = "config_missing"
    UPSTREAM_MODEL = "upstream_model"
    SCHEMA_PARSE = "schema_parse"
    UNEXPECTED = "unexpected"


class EarningsDigestError(Exception):
    """Base exception for earnings digest errors.

    `message` is safe to show to an end user; internal detail belongs in the
    exception chain (`raise ... from`) and in the logs.
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str) -> None:  # noqa: D107
        super().__init__(message)
        self.message = message


class InputValidationError(EarningsDigestError):
    """Raised when the tool selector or file field is wrong or missing"""  # noqa: D415

    kind = ErrorKind.INPUT_VALIDATION


class PayloadTooLargeError(EarningsDigestError):
    """Raised when an upload exceeds the server-side byte cap"""  # noqa: D415

    kind = ErrorKind.PAYLOAD_TOO_LARGE


class ConfigMissingError(EarningsDigestError):
    """Raised when the Gemini API key is not configured"""  # noqa: D415

    kind = ErrorKind.CONFIG_MISSING


class UpstreamModelError(EarningsDigestError):
    """Raised when the model call fails, times out, or returns nothing"""  # noqa: D415

    kind = ErrorKind.UPSTREAM_MODEL


class SchemaParseError(EarningsDigestError):
    """Raised when the model payload is not a JSON object"""  # noqa: D415

    kind = ErrorKind.SCHEMA_PARSE
