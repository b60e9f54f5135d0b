"""Single structured-output call to Gemini.

The client makes exactly one `generate_content` request per `extract()`,
asks for JSON that follows the summary contract, and turns every failure
into an `UpstreamModelError` or `SchemaParseError`. Failed calls are not
retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import json
import logging
from typing import Any, assert_never

from google import genai
from google.genai import types

from earnings_digest.config import FrozenConfig
from earnings_digest.constants import RESPONSE_MIME_TYPE
from earnings_digest.core.schema import EARNINGS_SUMMARY_CONTRACT, SchemaContract
from earnings_digest.core.types import BinaryPart, MessagePart, PromptContext, TextPart
from earnings_digest.exceptions import (
    ConfigMissingError,
    SchemaParseError,
    UpstreamModelError,
)
from earnings_digest.telemetry import TelemetryContext, TelemetryContextProtocol

log = logging.getLogger(__name__)

type ClientFactory = Callable[[str], Any]


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def to_provider_part(part: MessagePart) -> types.Part:
    """Convert a neutral message part into a google-genai `Part`."""
    match part:
        case TextPart(text=text):
            return types.Part.from_text(text=text)
        case BinaryPart(mime_type=mime_type, data=data):
            return types.Part.from_bytes(data=bytes(data), mime_type=mime_type)
        case _:
            assert_never(part)


def to_provider_contents(prompt: PromptContext) -> list[types.Content]:
    """Wrap all parts of one prompt into a single user turn."""
    return [
        types.Content(
            role="user", parts=[to_provider_part(p) for p in prompt.parts]
        )
    ]


class StructuredExtractionClient:
    """Requests a contract-shaped JSON object from Gemini.

    The SDK client is built per call through `client_factory`, so the
    instance holds no per-request state and is safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        client_factory: ClientFactory | None = None,
        contract: SchemaContract = EARNINGS_SUMMARY_CONTRACT,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._contract = contract
        self._telemetry = telemetry or TelemetryContext()

    def build_generation_config(self) -> types.GenerateContentConfig:
        """Generation config enforcing JSON output against the contract."""
        return types.GenerateContentConfig(
            response_mime_type=RESPONSE_MIME_TYPE,
            response_json_schema=self._contract.to_json_schema(),
        )

    async def extract(self, prompt: PromptContext) -> dict[str, Any]:
        """Issue the model call and parse its JSON payload.

        Returns:
            The parsed JSON object, not yet normalized.

        Raises:
            ConfigMissingError: No API key configured; raised before any
                client is created.
            UpstreamModelError: The call failed, timed out, or returned no
                text.
            SchemaParseError: The returned text is not a JSON object.
        """
        if not self._config.has_api_key:
            raise ConfigMissingError(
                "GEMINI_API_KEY is not configured. Please set it in your environment."
            )

        text = await self._generate(prompt)
        return self._parse(text)

    async def _generate(self, prompt: PromptContext) -> str:
        model = self._config.model
        timeout = self._config.request_timeout_seconds
        with self._telemetry("digest.generate", model=model):
            try:
                client = self._client_factory(str(self._config.api_key))
            except Exception as e:
                log.error("Could not build Gemini client: %s", e, exc_info=True)
                raise UpstreamModelError(
                    "The model service failed to produce a summary. Please try again."
                ) from e
            try:
                async with asyncio.timeout(timeout):
                    response = await client.aio.models.generate_content(
                        model=model,
                        contents=to_provider_contents(prompt),
                        config=self.build_generation_config(),
                    )
            except TimeoutError as e:
                log.error("Gemini call to %s timed out after %.1fs", model, timeout)
                raise UpstreamModelError(
                    f"The model did not respond within {timeout:g} seconds."
                ) from e
            except Exception as e:
                log.error("Gemini call to %s failed: %s", model, e, exc_info=True)
                raise UpstreamModelError(
                    "The model service failed to produce a summary. Please try again."
                ) from e
            finally:
                # Each call owns its client; release the connection pool
                await client.aio.aclose()

        text = getattr(response, "text", None)
        if not text:
            raise UpstreamModelError("No text returned from Gemini model.")
        log.debug("Gemini returned %d characters", len(text))
        return text

    def _parse(self, text: str) -> dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            log.warning("Model returned non-JSON payload: %s", e)
            raise SchemaParseError(
                "The model response could not be parsed as structured data."
            ) from e
        if not isinstance(data, dict):
            raise SchemaParseError("The model response was not a JSON object.")
        return data
