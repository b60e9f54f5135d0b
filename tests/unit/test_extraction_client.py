import asyncio
import json

from google.genai import types
import pytest

from earnings_digest.client.extraction_client import (
    StructuredExtractionClient,
    to_provider_contents,
    to_provider_part,
)
from earnings_digest.config import FrozenConfig
from earnings_digest.core.types import BinaryPart, PromptContext, TextPart
from earnings_digest.exceptions import (
    ConfigMissingError,
    SchemaParseError,
    UpstreamModelError,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def text_prompt() -> PromptContext:
    return PromptContext(parts=(TextPart("Summarize this call."),))


@pytest.fixture
def client(digest_config, client_factory) -> StructuredExtractionClient:
    return StructuredExtractionClient(digest_config, client_factory=client_factory)


class TestProviderParts:
    def test_text_part(self):
        part = to_provider_part(TextPart("hello"))

        assert isinstance(part, types.Part)
        assert part.text == "hello"

    def test_binary_part_keeps_bytes_and_type(self):
        part = to_provider_part(BinaryPart("application/pdf", b"%PDF-1.4"))

        assert part.inline_data is not None
        assert part.inline_data.data == b"%PDF-1.4"
        assert part.inline_data.mime_type == "application/pdf"

    def test_all_parts_go_into_one_user_turn(self):
        prompt = PromptContext(
            parts=(TextPart("Read the deck."), BinaryPart("application/pdf", b"%PDF"))
        )

        contents = to_provider_contents(prompt)

        assert len(contents) == 1
        assert contents[0].role == "user"
        assert len(contents[0].parts) == 2


class TestGenerationConfig:
    def test_requests_json_against_contract(self, client):
        config = client.build_generation_config()

        assert config.response_mime_type == "application/json"
        assert config.response_json_schema["additionalProperties"] is False
        assert "tone" in config.response_json_schema["properties"]


class TestExtract:
    @pytest.mark.asyncio
    async def test_returns_parsed_object_from_single_call(
        self, client, fake_models, client_factory, text_prompt, mock_api_key
    ):
        fake_models.text = json.dumps({"tone": "neutral", "confidence": "low"})

        result = await client.extract(text_prompt)

        assert result == {"tone": "neutral", "confidence": "low"}
        assert len(fake_models.calls) == 1
        assert fake_models.calls[0]["model"] == "gemini-2.5-flash"
        assert client_factory.api_keys == [mock_api_key]

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_client_is_built(
        self, keyless_config, client_factory, fake_models, text_prompt
    ):
        client = StructuredExtractionClient(
            keyless_config, client_factory=client_factory
        )

        with pytest.raises(ConfigMissingError, match="GEMINI_API_KEY"):
            await client.extract(text_prompt)

        assert client_factory.api_keys == []
        assert fake_models.calls == []

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_upstream_error(
        self, client, fake_models, text_prompt
    ):
        fake_models.error = RuntimeError("503 UNAVAILABLE internal detail")

        with pytest.raises(UpstreamModelError) as exc_info:
            await client.extract(text_prompt)

        assert "internal detail" not in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert len(fake_models.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_text_is_upstream_error(self, client, fake_models, text_prompt):
        fake_models.text = ""

        with pytest.raises(UpstreamModelError, match="No text returned"):
            await client.extract(text_prompt)

    @pytest.mark.asyncio
    async def test_non_json_is_schema_parse_error(
        self, client, fake_models, text_prompt
    ):
        fake_models.text = "Sure! Here is the summary: tone is positive."

        with pytest.raises(SchemaParseError):
            await client.extract(text_prompt)

    @pytest.mark.asyncio
    async def test_json_array_is_schema_parse_error(
        self, client, fake_models, text_prompt
    ):
        fake_models.text = "[1, 2, 3]"

        with pytest.raises(SchemaParseError, match="not a JSON object"):
            await client.extract(text_prompt)

    @pytest.mark.asyncio
    async def test_slow_model_times_out(
        self, mock_api_key, client_factory, fake_models, text_prompt
    ):
        fake_models.delay = 1.0
        config = FrozenConfig(api_key=mock_api_key, request_timeout_seconds=0.01)
        client = StructuredExtractionClient(config, client_factory=client_factory)

        with pytest.raises(UpstreamModelError, match="did not respond"):
            await client.extract(text_prompt)

    @pytest.mark.asyncio
    async def test_uses_configured_model(
        self, mock_api_key, client_factory, fake_models, text_prompt
    ):
        config = FrozenConfig(api_key=mock_api_key, model="gemini-2.5-pro")
        client = StructuredExtractionClient(config, client_factory=client_factory)

        await client.extract(text_prompt)

        assert fake_models.calls[0]["model"] == "gemini-2.5-pro"

    @pytest.mark.asyncio
    async def test_caller_cancellation_is_not_classified(
        self, client, fake_models, text_prompt
    ):
        fake_models.delay = 10.0
        task = asyncio.create_task(client.extract(text_prompt))
        await asyncio.sleep(0.01)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_client_is_closed_after_success(
        self, client, client_factory, text_prompt
    ):
        await client.extract(text_prompt)

        assert client_factory.closed == 1

    @pytest.mark.asyncio
    async def test_client_is_closed_after_sdk_error(
        self, client, client_factory, fake_models, text_prompt
    ):
        fake_models.error = RuntimeError("boom")

        with pytest.raises(UpstreamModelError):
            await client.extract(text_prompt)

        assert client_factory.closed == 1

    @pytest.mark.asyncio
    async def test_client_is_closed_after_timeout(
        self, mock_api_key, client_factory, fake_models, text_prompt
    ):
        fake_models.delay = 1.0
        config = FrozenConfig(api_key=mock_api_key, request_timeout_seconds=0.01)
        client = StructuredExtractionClient(config, client_factory=client_factory)

        with pytest.raises(UpstreamModelError, match="did not respond"):
            await client.extract(text_prompt)

        assert client_factory.closed == 1

    @pytest.mark.asyncio
    async def test_each_call_closes_its_own_client(
        self, client, client_factory, text_prompt
    ):
        await client.extract(text_prompt)
        await client.extract(text_prompt)

        assert len(client_factory.api_keys) == 2
        assert client_factory.closed == 2

    @pytest.mark.asyncio
    async def test_no_client_to_close_without_key(
        self, keyless_config, client_factory, text_prompt
    ):
        client = StructuredExtractionClient(
            keyless_config, client_factory=client_factory
        )

        with pytest.raises(ConfigMissingError):
            await client.extract(text_prompt)

        assert client_factory.closed == 0
