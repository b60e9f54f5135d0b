"""The user-facing entry point for summarizing one uploaded document.

`EarningsAnalyzer` runs the stages in order (load, prompt, generate,
normalize) and returns an explicit `Result`: a complete `EarningsSummary` or
a `ClassifiedError`. Nothing is shared between calls, so one analyzer can
serve concurrent requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from earnings_digest.client.extraction_client import StructuredExtractionClient
from earnings_digest.config import FrozenConfig
from earnings_digest.constants import TOOL_EARNINGS_SUMMARY
from earnings_digest.core.schema import EarningsSummary
from earnings_digest.core.types import Failure, Result, Success, UploadedDocument
from earnings_digest.errors import ClassifiedError, classify_error
from earnings_digest.exceptions import InputValidationError
from earnings_digest.files.loader import DocumentLoader, ScannedSourcePolicy
from earnings_digest.prompts.builder import PromptBuilder
from earnings_digest.response.normalizer import ResultNormalizer
from earnings_digest.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)


def validate_request(tool: Any, document: UploadedDocument | None) -> UploadedDocument:
    """Check the tool selector and file field of an incoming request.

    Raises:
        InputValidationError: Unsupported tool or missing file.
    """
    if tool != TOOL_EARNINGS_SUMMARY:
        raise InputValidationError(
            f"Unsupported tool. Only '{TOOL_EARNINGS_SUMMARY}' is implemented."
        )
    if document is None:
        raise InputValidationError("No file provided. Please attach a document.")
    return document


class EarningsAnalyzer:
    """Runs one document through the summary pipeline."""

    def __init__(
        self,
        config: FrozenConfig,
        *,
        loader: DocumentLoader | None = None,
        prompt_builder: PromptBuilder | None = None,
        client: StructuredExtractionClient | None = None,
        normalizer: ResultNormalizer | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the analyzer, building default stages from `config`."""
        self.config = config
        self._telemetry = telemetry or TelemetryContext()
        self.loader = loader or DocumentLoader(
            max_bytes=config.max_upload_bytes,
            policy=ScannedSourcePolicy(threshold=config.scanned_text_threshold),
        )
        self.prompt_builder = prompt_builder or PromptBuilder(
            max_chars=config.max_prompt_chars
        )
        self.client = client or StructuredExtractionClient(
            config, telemetry=self._telemetry
        )
        self.normalizer = normalizer or ResultNormalizer()

    async def summarize(self, document: UploadedDocument) -> EarningsSummary:
        """Produce a summary, raising pipeline errors as they occur."""
        # Reject oversized uploads before handing bytes to a worker thread
        self.loader.check_size(document)

        with self._telemetry("digest.load", size_bytes=document.size_bytes):
            content = await asyncio.to_thread(self.loader.load, document)
        log.info(
            "Loaded '%s' (%d bytes) in %s mode",
            document.filename,
            document.size_bytes,
            content.mode,
            extra={"filename": document.filename, "mode": content.mode},
        )

        with self._telemetry("digest.prompt"):
            prompt = self.prompt_builder.build(content)
        if prompt.truncated:
            log.info("Transcript truncated to %d characters", self.prompt_builder.max_chars)

        raw = await self.client.extract(prompt)

        with self._telemetry("digest.normalize"):
            return self.normalizer.normalize(raw)

    async def analyze(
        self, tool: Any, document: UploadedDocument | None
    ) -> Result[EarningsSummary, ClassifiedError]:
        """Validate the request and summarize the document.

        Never raises for pipeline failures; they come back as `Failure`
        carrying a `ClassifiedError`. Task cancellation still propagates.
        """
        try:
            checked = validate_request(tool, document)
            summary = await self.summarize(checked)
        except Exception as e:
            classified = classify_error(e)
            log.warning(
                "Analysis failed (%s, %d): %s",
                classified.kind.value,
                classified.status_code,
                classified.message,
            )
            self._telemetry.count("digest.error", kind=classified.kind.value)
            return Failure(classified)
        return Success(summary)
