"""
Document loading for uploaded transcripts and commentary
"""  # noqa: D200, D212, D415

from .loader import (
    DocumentLoader,
    ScannedSourcePolicy,
    decode_text,
    describe_size,
    stripped_length,
    too_large_message,
)
from .pdf import extract_pdf_text

__all__ = [
    "DocumentLoader",
    "ScannedSourcePolicy",
    "decode_text",
    "describe_size",
    "extract_pdf_text",
    "stripped_length",
    "too_large_message",
]
