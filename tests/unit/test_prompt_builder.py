import pytest

from earnings_digest.constants import MAX_PROMPT_CHARS, PDF_MIME_TYPE
from earnings_digest.core.types import BinaryPart, ExtractedContent, TextPart
from earnings_digest.prompts.builder import (
    SCANNED_DOCUMENT_INSTRUCTION,
    SYSTEM_PROMPT,
    TRANSCRIPT_HEADER,
    PromptBuilder,
)

pytestmark = pytest.mark.unit


class TestTruncation:
    def test_keeps_prefix_up_to_budget(self):
        builder = PromptBuilder()
        text = "a" * MAX_PROMPT_CHARS + "TAIL"

        trimmed = builder.truncate(text)

        assert len(trimmed) == MAX_PROMPT_CHARS
        assert text.startswith(trimmed)
        assert "TAIL" not in trimmed

    def test_is_idempotent(self):
        builder = PromptBuilder(max_chars=10)
        once = builder.truncate("0123456789abcdef")

        assert builder.truncate(once) == once

    def test_short_text_is_untouched(self):
        assert PromptBuilder().truncate("short") == "short"

    def test_rejects_non_positive_budget(self):
        with pytest.raises(ValueError, match="max_chars"):
            PromptBuilder(max_chars=0)


class TestTextPrompt:
    def test_single_text_part_with_instructions_and_fenced_transcript(self):
        prompt = PromptBuilder().build(ExtractedContent.from_text("Revenue rose 8%."))

        assert len(prompt.parts) == 1
        part = prompt.parts[0]
        assert isinstance(part, TextPart)
        assert part.text == (
            f'{SYSTEM_PROMPT}\n\n{TRANSCRIPT_HEADER}\n\n"""Revenue rose 8%."""'
        )
        assert prompt.truncated is False
        assert prompt.has_attachment is False

    def test_long_transcript_is_cut_and_flagged(self):
        text = "x" * 45_000
        prompt = PromptBuilder().build(ExtractedContent.from_text(text))

        body = prompt.parts[0].text
        assert prompt.truncated is True
        assert f'"""{"x" * MAX_PROMPT_CHARS}"""' in body
        assert "x" * (MAX_PROMPT_CHARS + 1) not in body

    def test_transcript_at_budget_is_not_flagged(self):
        text = "y" * MAX_PROMPT_CHARS
        prompt = PromptBuilder().build(ExtractedContent.from_text(text))

        assert prompt.truncated is False


class TestBinaryPrompt:
    def test_instruction_then_attachment_with_original_bytes(self):
        data = b"%PDF-1.7 scanned"
        prompt = PromptBuilder().build(ExtractedContent.from_binary(data, PDF_MIME_TYPE))

        first, second = prompt.parts
        assert isinstance(first, TextPart)
        assert first.text == f"{SYSTEM_PROMPT}\n\n{SCANNED_DOCUMENT_INSTRUCTION}"
        assert isinstance(second, BinaryPart)
        assert second.data == data
        assert second.mime_type == PDF_MIME_TYPE
        assert prompt.has_attachment is True

    def test_custom_instructions_are_used(self):
        builder = PromptBuilder(instructions="Be brief.")
        prompt = builder.build(ExtractedContent.from_binary(b"%PDF", PDF_MIME_TYPE))

        assert prompt.parts[0].text.startswith("Be brief.\n\n")


def test_system_prompt_lists_every_output_key():
    for key in (
        "tone",
        "confidence",
        "tone_rationale",
        "key_positives",
        "key_concerns",
        "forward_guidance",
        "capacity_utilization",
        "growth_initiatives",
        "raw_notes",
    ):
        assert key in SYSTEM_PROMPT
