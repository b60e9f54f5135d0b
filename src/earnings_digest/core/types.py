"""Core data types that flow through the digest pipeline.

An upload moves through three immutable shapes: the `UploadedDocument` as
received, the `ExtractedContent` chosen by the loader, and the
`PromptContext` handed to the model client. Each stage returns a new value
and never mutates its input.
"""

from __future__ import annotations

import dataclasses
import typing

from earnings_digest.constants import PDF_MIME_TYPE, PDF_SUFFIX

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result type for explicit, non-raising failure paths ---


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful step result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed step result, carrying the failure value."""

    error: TFailure


type Result[TSuccess, TFailure] = Success[TSuccess] | Failure[TFailure]


# --- Upload and extraction ---


@dataclasses.dataclass(frozen=True, slots=True)
class UploadedDocument:
    """Raw bytes of one upload with the media type the client declared.

    Owned by a single request and discarded once it completes.
    """

    filename: str
    mime_type: str
    data: bytes

    def __post_init__(self) -> None:
        """Validate UploadedDocument invariants."""
        _require(
            condition=isinstance(self.filename, str),
            message="must be str",
            field_name="filename",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.mime_type, str),
            message="must be str",
            field_name="mime_type",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.data, bytes),
            message="must be bytes",
            field_name="data",
            exc=TypeError,
        )

    @property
    def size_bytes(self) -> int:
        """Byte length of the upload."""
        return len(self.data)

    @property
    def is_pdf(self) -> bool:
        """True when either the MIME type or the filename says PDF."""
        return (
            self.mime_type.lower() == PDF_MIME_TYPE
            or self.filename.lower().endswith(PDF_SUFFIX)
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """Why text extraction from a document did not produce text."""

    reason: str
    cause: Exception | None = None


type ContentMode = typing.Literal["text", "binary"]


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractedContent:
    """What the loader decided to send to the model.

    Exactly one mode is active: `text` carries the decoded or extracted
    transcript, `binary` carries the original upload bytes for multimodal
    submission.
    """

    mode: ContentMode
    text: str = ""
    data: bytes | None = None
    mime_type: str | None = None

    def __post_init__(self) -> None:
        """Validate that exactly one mode's payload is present."""
        _require(
            condition=self.mode in ("text", "binary"),
            message=f"must be 'text' or 'binary', got {self.mode!r}",
            field_name="mode",
        )
        if self.mode == "text":
            _require(
                condition=isinstance(self.text, str),
                message="must be str",
                field_name="text",
                exc=TypeError,
            )
            _require(
                condition=self.data is None and self.mime_type is None,
                message="text mode cannot carry binary data",
                field_name="data",
            )
        else:
            _require(
                condition=isinstance(self.data, bytes),
                message="binary mode requires bytes",
                field_name="data",
                exc=TypeError,
            )
            _require(
                condition=bool(self.mime_type),
                message="binary mode requires a mime type",
                field_name="mime_type",
            )

    @classmethod
    def from_text(cls, text: str) -> ExtractedContent:
        """Create text-mode content."""
        return cls(mode="text", text=text)

    @classmethod
    def from_binary(cls, data: bytes, mime_type: str) -> ExtractedContent:
        """Create binary-mode content carrying the original upload bytes."""
        return cls(mode="binary", data=data, mime_type=mime_type)


# --- Neutral message parts ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextPart:
    """A text part of the outbound model request."""

    text: str

    def __post_init__(self) -> None:
        """Validate TextPart invariants."""
        _require(
            condition=isinstance(self.text, str),
            message="text must be a str",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class BinaryPart:
    """An inline binary attachment (media type plus raw bytes).

    Bytes stay raw here; the provider SDK encodes them for transport.
    """

    mime_type: str
    data: bytes

    def __post_init__(self) -> None:
        """Validate BinaryPart invariants."""
        _require(
            condition=isinstance(self.mime_type, str) and self.mime_type.strip() != "",
            message="mime_type must be a non-empty str",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.data, bytes | bytearray),
            message="data must be bytes-like",
            exc=TypeError,
        )


type MessagePart = TextPart | BinaryPart


@dataclasses.dataclass(frozen=True, slots=True)
class PromptContext:
    """Ordered message parts forming one logical model request."""

    parts: tuple[MessagePart, ...]
    truncated: bool = False

    def __post_init__(self) -> None:
        """Validate PromptContext invariants."""
        _require(
            condition=isinstance(self.parts, tuple) and len(self.parts) > 0,
            message="must be a non-empty tuple",
            field_name="parts",
        )
        _require(
            condition=all(isinstance(p, TextPart | BinaryPart) for p in self.parts),
            message="must contain only TextPart or BinaryPart",
            field_name="parts",
            exc=TypeError,
        )

    @property
    def has_attachment(self) -> bool:
        """True when the request carries a binary attachment."""
        return any(isinstance(p, BinaryPart) for p in self.parts)
