"""Normalize raw model output into a complete `EarningsSummary`.

The normalizer is total: whatever mapping comes back from the model, the
result has every contract field. Missing fields get their documented
default, fields outside the contract are dropped, and values of the wrong
shape are replaced by the field default. This is a structural guarantee
only; it says nothing about whether the content is true.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from earnings_digest.core.schema import (
    EARNINGS_SUMMARY_CONTRACT,
    GUIDANCE_KEYS,
    EarningsSummary,
    FieldSpec,
    SchemaContract,
)

log = logging.getLogger(__name__)

_MISSING = object()


class ResultNormalizer:
    """Fills gaps in a raw candidate summary using the schema contract."""

    def __init__(self, contract: SchemaContract = EARNINGS_SUMMARY_CONTRACT) -> None:
        self.contract = contract

    def normalize(self, raw: Mapping[str, Any] | Any) -> EarningsSummary:
        """Return a fully populated summary built from `raw`."""
        return EarningsSummary.model_validate(self.normalize_mapping(raw))

    def normalize_mapping(self, raw: Mapping[str, Any] | Any) -> dict[str, Any]:
        """Return a plain dict with exactly the contract's fields."""
        if not isinstance(raw, Mapping):
            log.warning("Expected a JSON object, got %s", type(raw).__name__)
            raw = {}

        unknown = sorted(str(k) for k in raw if k not in self.contract.field_names)
        if unknown:
            log.debug("Dropping fields outside the contract: %s", unknown)

        normalized: dict[str, Any] = {}
        for spec in self.contract:
            value = raw.get(spec.name, _MISSING)
            if value is _MISSING:
                normalized[spec.name] = spec.default()
            else:
                normalized[spec.name] = self._coerce(spec, value)
        return normalized

    # --- Per-kind coercion ---

    def _coerce(self, spec: FieldSpec, value: Any) -> Any:
        match spec.kind:
            case "enum":
                if isinstance(value, str) and value in spec.enum:
                    return value
            case "string":
                if isinstance(value, str) or (value is None and spec.nullable):
                    return value
            case "bullets":
                if isinstance(value, list):
                    return self._bullets(spec.name, value)
            case "guidance":
                if isinstance(value, Mapping):
                    return self._guidance(value)
                if value is None:
                    return spec.default()
        log.warning(
            "Field '%s' has unexpected value %r; using default", spec.name, value
        )
        return spec.default()

    def _bullets(self, name: str, items: list[Any]) -> list[dict[str, Any]]:
        bullets: list[dict[str, Any]] = []
        for item in items:
            if not isinstance(item, Mapping) or not isinstance(item.get("summary"), str):
                log.warning("Skipping malformed entry in '%s': %r", name, item)
                continue
            quote = item.get("supporting_quote")
            bullets.append(
                {
                    "summary": item["summary"],
                    "supporting_quote": quote if isinstance(quote, str) else None,
                }
            )
        return bullets

    def _guidance(self, value: Mapping[str, Any]) -> dict[str, str | None]:
        return {
            key: value.get(key) if isinstance(value.get(key), str) else None
            for key in GUIDANCE_KEYS
        }
