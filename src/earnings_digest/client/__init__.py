"""Gemini client components for structured extraction"""  # noqa: D415

from .extraction_client import (
    StructuredExtractionClient,
    to_provider_contents,
    to_provider_part,
)

__all__ = [
    "StructuredExtractionClient",
    "to_provider_contents",
    "to_provider_part",
]
