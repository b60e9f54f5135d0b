"""The structured output contract for an earnings summary.

Two views of the same shape live here:

- `SchemaContract` describes every field (type, nullability, enum set,
  default) as data. The model client renders it to JSON Schema for the
  provider, and the normalizer walks it to fill gaps.
- The pydantic models (`EarningsSummary` and friends) are the typed,
  closed result that leaves the core.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
import dataclasses
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TONE_VALUES: tuple[str, ...] = (
    "optimistic",
    "cautious",
    "neutral",
    "pessimistic",
    "unknown",
)
CONFIDENCE_VALUES: tuple[str, ...] = ("high", "medium", "low", "unknown")
GUIDANCE_KEYS: tuple[str, ...] = ("revenue", "margin", "capex", "other")

Tone = Literal["optimistic", "cautious", "neutral", "pessimistic", "unknown"]
Confidence = Literal["high", "medium", "low", "unknown"]

FieldKind = Literal["enum", "string", "bullets", "guidance"]


# --- Result models ---


class BulletPoint(BaseModel):
    """A summarized claim with an optional literal supporting quote."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    summary: str
    supporting_quote: str | None = None


class ForwardGuidance(BaseModel):
    """Management's stated expectations, split by topic."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    revenue: str | None = None
    margin: str | None = None
    capex: str | None = None
    other: str | None = None


class EarningsSummary(BaseModel):
    """Structured summary of one transcript or commentary document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tone: Tone = "unknown"
    confidence: Confidence = "unknown"
    tone_rationale: str | None = None
    key_positives: list[BulletPoint] = Field(default_factory=list)
    key_concerns: list[BulletPoint] = Field(default_factory=list)
    forward_guidance: ForwardGuidance = Field(default_factory=ForwardGuidance)
    capacity_utilization: str | None = None
    growth_initiatives: list[BulletPoint] = Field(default_factory=list)
    raw_notes: str | None = None


# --- Field-level contract ---


@dataclasses.dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declared shape of one top-level summary field."""

    name: str
    kind: FieldKind
    nullable: bool = False
    required: bool = True
    enum: tuple[str, ...] = ()
    default_factory: Callable[[], Any] = lambda: None

    def default(self) -> Any:
        """Return a fresh fallback value for this field."""
        return self.default_factory()

    def to_json_schema(self) -> dict[str, Any]:
        """Render this field as a JSON Schema fragment."""
        if self.kind == "enum":
            return {"type": "string", "enum": list(self.enum)}
        if self.kind == "string":
            return {"type": ["string", "null"] if self.nullable else "string"}
        if self.kind == "bullets":
            return {"type": "array", "items": _bullet_schema()}
        return _guidance_schema()


def _nullable_string() -> dict[str, Any]:
    return {"type": ["string", "null"]}


def _bullet_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "summary": {"type": "string"},
            "supporting_quote": _nullable_string(),
        },
        "required": ["summary"],
    }


def _guidance_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {key: _nullable_string() for key in GUIDANCE_KEYS},
    }


def _empty_guidance() -> dict[str, None]:
    return dict.fromkeys(GUIDANCE_KEYS)


@dataclasses.dataclass(frozen=True, slots=True)
class SchemaContract:
    """Closed set of fields the model output must satisfy."""

    fields: tuple[FieldSpec, ...]

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    @property
    def field_names(self) -> tuple[str, ...]:
        """Names of every field in declaration order."""
        return tuple(f.name for f in self.fields)

    @property
    def required_names(self) -> tuple[str, ...]:
        """Names of the fields the model must always return."""
        return tuple(f.name for f in self.fields if f.required)

    def get(self, name: str) -> FieldSpec | None:
        """Look up a field by name."""
        return next((f for f in self.fields if f.name == name), None)

    def to_json_schema(self) -> dict[str, Any]:
        """Render the contract as a closed JSON Schema object."""
        return {
            "type": "object",
            "additionalProperties": False,
            "properties": {f.name: f.to_json_schema() for f in self.fields},
            "required": list(self.required_names),
        }


EARNINGS_SUMMARY_CONTRACT = SchemaContract(
    fields=(
        FieldSpec(
            "tone", "enum", enum=TONE_VALUES, default_factory=lambda: "unknown"
        ),
        FieldSpec(
            "confidence",
            "enum",
            enum=CONFIDENCE_VALUES,
            default_factory=lambda: "unknown",
        ),
        FieldSpec("tone_rationale", "string", nullable=True),
        FieldSpec("key_positives", "bullets", default_factory=list),
        FieldSpec("key_concerns", "bullets", default_factory=list),
        FieldSpec("forward_guidance", "guidance", default_factory=_empty_guidance),
        FieldSpec("capacity_utilization", "string", nullable=True),
        FieldSpec("growth_initiatives", "bullets", default_factory=list),
        FieldSpec("raw_notes", "string", nullable=True, required=False),
    )
)
