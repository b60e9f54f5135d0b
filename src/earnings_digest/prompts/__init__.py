"""Prompt assembly for structured earnings summaries."""

from .builder import SYSTEM_PROMPT, PromptBuilder

__all__ = ["SYSTEM_PROMPT", "PromptBuilder"]
