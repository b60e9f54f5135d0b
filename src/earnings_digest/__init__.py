"""Earnings call document ingestion and Gemini summarization."""

import importlib.metadata
import logging

from earnings_digest.analyzer import EarningsAnalyzer, validate_request
from earnings_digest.config import DigestSettings, FrozenConfig, resolve_config
from earnings_digest.core.schema import (
    EARNINGS_SUMMARY_CONTRACT,
    BulletPoint,
    EarningsSummary,
    ForwardGuidance,
    SchemaContract,
)
from earnings_digest.core.types import (
    BinaryPart,
    ExtractedContent,
    Failure,
    PromptContext,
    Result,
    Success,
    TextPart,
    UploadedDocument,
)
from earnings_digest.errors import ClassifiedError, classify_error
from earnings_digest.exceptions import (
    ConfigMissingError,
    EarningsDigestError,
    ErrorKind,
    InputValidationError,
    PayloadTooLargeError,
    SchemaParseError,
    UpstreamModelError,
)
from earnings_digest.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("earnings-digest")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library modules log to the package logger; applications attach handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Entry points
    "EarningsAnalyzer",
    "validate_request",
    # Configuration
    "DigestSettings",
    "FrozenConfig",
    "resolve_config",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Core Types & Data Models
    "UploadedDocument",
    "ExtractedContent",
    "TextPart",
    "BinaryPart",
    "PromptContext",
    "Result",
    "Success",
    "Failure",
    # Summary schema
    "EarningsSummary",
    "BulletPoint",
    "ForwardGuidance",
    "SchemaContract",
    "EARNINGS_SUMMARY_CONTRACT",
    # Errors
    "ClassifiedError",
    "classify_error",
    "ErrorKind",
    "EarningsDigestError",
    "InputValidationError",
    "PayloadTooLargeError",
    "ConfigMissingError",
    "UpstreamModelError",
    "SchemaParseError",
]
