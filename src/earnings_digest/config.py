"""Configuration for the earnings digest service.

Settings are validated by pydantic-settings from ``GEMINI_*`` environment
variables (optionally seeded from a ``.env`` file), merged with programmatic
overrides, and frozen once. The resulting `FrozenConfig` is passed
explicitly to the components that need it; nothing reads the environment at
request time.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from earnings_digest.constants import (
    DEFAULT_MODEL,
    MAX_PROMPT_CHARS,
    MAX_UPLOAD_BYTES,
    REQUEST_TIMEOUT_SECONDS,
    SCANNED_TEXT_THRESHOLD,
)


class DigestSettings(BaseSettings):
    """Pydantic settings schema for the digest service.

    A missing API key is allowed here: it is reported per request as a
    configuration error rather than preventing startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier (must accept PDF input)",
        min_length=1,
    )

    request_timeout_seconds: float = Field(
        default=REQUEST_TIMEOUT_SECONDS,
        description="Upper bound on the single model call",
        gt=0,
    )

    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        description="Server-side cap on upload size",
        gt=0,
    )

    max_prompt_chars: int = Field(
        default=MAX_PROMPT_CHARS,
        description="Characters of transcript text sent to the model",
        gt=0,
    )

    scanned_text_threshold: int = Field(
        default=SCANNED_TEXT_THRESHOLD,
        description="Extracted PDF characters below which the file is sent as-is",
        ge=0,
    )

    def to_frozen(self) -> FrozenConfig:
        """Convert to the immutable configuration used by the pipeline."""
        return FrozenConfig(
            api_key=self.api_key or None,
            model=self.model,
            request_timeout_seconds=self.request_timeout_seconds,
            max_upload_bytes=self.max_upload_bytes,
            max_prompt_chars=self.max_prompt_chars,
            scanned_text_threshold=self.scanned_text_threshold,
        )


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to the pipeline components."""

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    max_prompt_chars: int = MAX_PROMPT_CHARS
    scanned_text_threshold: int = SCANNED_TEXT_THRESHOLD

    @property
    def has_api_key(self) -> bool:
        """True when a non-empty API key is configured."""
        return bool(self.api_key)

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"request_timeout_seconds={self.request_timeout_seconds!r}, "
            f"max_upload_bytes={self.max_upload_bytes!r}, "
            f"max_prompt_chars={self.max_prompt_chars!r}, "
            f"scanned_text_threshold={self.scanned_text_threshold!r})"
        )

    def __repr__(self) -> str:
        """Representation with redacted API key for safe debugging."""
        return self.__str__()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> FrozenConfig:
    """Resolve configuration once, with programmatic values taking precedence.

    Args:
        programmatic: Explicit field values; unknown keys are ignored.
        env_file: Optional ``.env`` file read before the process environment
            is consulted.

    Returns:
        A validated `FrozenConfig`.

    Raises:
        pydantic.ValidationError: If any value fails validation.

    Example:
        config = resolve_config({"model": "gemini-2.5-pro"})
    """
    overrides = {
        key: value
        for key, value in (programmatic or {}).items()
        if key in DigestSettings.model_fields
    }
    settings = DigestSettings(_env_file=env_file, **overrides)  # type: ignore[call-arg]
    return settings.to_frozen()
