"""Prompt assembly for the earnings summary request.

The builder is a pure function of `ExtractedContent`: it never reads files
or talks to the network, and text is only ever shortened by keeping its
prefix.
"""

from __future__ import annotations

from earnings_digest.constants import MAX_PROMPT_CHARS
from earnings_digest.core.types import (
    BinaryPart,
    ExtractedContent,
    MessagePart,
    PromptContext,
    TextPart,
)

SYSTEM_PROMPT = """
You are a buy-side equity research analyst assistant. Your job is to create a **strictly factual**,
structured summary of an earnings call transcript or management commentary.

Rules:
- **Never hallucinate or invent numbers, guidance, or initiatives.**
- Only use information explicitly present in the transcript text provided.
- If a field is missing, vague, or not clearly stated, mark it as **null** (for strings) or an **empty array** (for lists).
- When in doubt, be conservative and prefer "not discussed" / null over guessing.
- Capture short **supporting direct quotes** where possible, but never fabricate quotes.

Tone assessment:
- "optimistic": management is clearly positive on outlook/trajectory.
- "cautious": mixed but leaning careful/guarded.
- "neutral": largely descriptive, little explicit positive or negative tone.
- "pessimistic": clearly negative, focused on headwinds.

Confidence:
- "high": transcript has explicit guidance and multiple concrete data points.
- "medium": some guidance but with qualifiers or limited detail.
- "low": vague language, limited data, or very partial transcript.

Forward guidance:
- Summarize **only** what they explicitly guide on (revenue, margins, capex, and other specifics).
- Avoid adding your own projections.

Capacity utilization:
- Only summarize if there is explicit discussion of utilization, load factors, occupancy, or similar metrics.

Growth initiatives:
- Capture 2-3 **distinct** new or emphasized growth initiatives (products, geographies, channels, capex projects, etc.).
- If none are clearly articulated, return an empty array.

Output format:
Return **valid JSON** with exactly these keys:
- tone: one of "optimistic", "cautious", "neutral", "pessimistic", "unknown"
- confidence: one of "high", "medium", "low", "unknown"
- tone_rationale: string or null
- key_positives, key_concerns, growth_initiatives: arrays of {"summary": string, "supporting_quote": string or null}
- forward_guidance: {"revenue", "margin", "capex", "other"}, each a string or null
- capacity_utilization: string or null
- raw_notes (optional): string or null

If something is missing or ambiguous, use:
- "unknown" for tone or confidence, or
- null / [] as appropriate for other fields.

Respond with **JSON only**, with no surrounding explanation text.
""".strip()

TRANSCRIPT_HEADER = "Transcript text (may be truncated for length):"

SCANNED_DOCUMENT_INSTRUCTION = (
    "Please analyze the attached PDF document. It appears to be a scanned transcript."
)


class PromptBuilder:
    """Builds the ordered message parts for one summary request."""

    def __init__(
        self,
        max_chars: int = MAX_PROMPT_CHARS,
        instructions: str = SYSTEM_PROMPT,
    ) -> None:
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self.max_chars = max_chars
        self.instructions = instructions

    def truncate(self, text: str) -> str:
        """Keep at most `max_chars` leading characters of `text`."""
        return text[: self.max_chars]

    def build(self, content: ExtractedContent) -> PromptContext:
        """Assemble the request parts for text or binary content.

        Text content becomes one text part with the (possibly truncated)
        transcript fenced in triple quotes. Binary content becomes an
        instruction part followed by the attachment itself.
        """
        if content.mode == "binary":
            # ExtractedContent guarantees both are set in binary mode
            attachment = BinaryPart(
                mime_type=str(content.mime_type), data=bytes(content.data or b"")
            )
            parts: tuple[MessagePart, ...] = (
                TextPart(self._compose(SCANNED_DOCUMENT_INSTRUCTION)),
                attachment,
            )
            return PromptContext(parts=parts)

        trimmed = self.truncate(content.text)
        user_prompt = f'{TRANSCRIPT_HEADER}\n\n"""{trimmed}"""'
        return PromptContext(
            parts=(TextPart(self._compose(user_prompt)),),
            truncated=len(trimmed) < len(content.text),
        )

    def _compose(self, context: str) -> str:
        return f"{self.instructions}\n\n{context}"
