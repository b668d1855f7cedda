"""Configuration schema for prompt composition and enrichment."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal, cast

ProviderType = Literal["openrouter", "anthropic"]

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def _coerce_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return None
    return bool(value)


def _coerce_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class CompositionConfig:
    """Settings for model-assisted prompt composition.

    None values mean "not set" so that layers can be merged; the fully
    merged config always has every field populated from DEFAULT_CONFIG.
    """

    enabled: bool | None = None
    provider: ProviderType | None = None
    selection_model: str | None = None
    extraction_model: str | None = None
    enrichment_model: str | None = None
    timeout_ms: int | None = None
    cache_ttl_ms: int | None = None
    fallback_to_static: bool | None = None

    @property
    def timeout_seconds(self) -> float:
        return (self.timeout_ms or 0) / 1000

    @property
    def cache_ttl_seconds(self) -> float:
        return (self.cache_ttl_ms or 0) / 1000

    def merge(self, other: CompositionConfig) -> CompositionConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new CompositionConfig instance.
        """
        values = {}
        for f in fields(self):
            theirs = getattr(other, f.name)
            values[f.name] = theirs if theirs is not None else getattr(self, f.name)
        return CompositionConfig(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompositionConfig:
        """Create from a dictionary. Unknown keys are ignored."""
        provider = data.get("provider")
        if provider is not None:
            provider = str(provider).lower()
            if provider not in ("openrouter", "anthropic"):
                provider = None

        def _str(key: str) -> str | None:
            value = data.get(key)
            return str(value) if value not in (None, "") else None

        return cls(
            enabled=_coerce_bool(data.get("enabled")),
            provider=cast(ProviderType | None, provider),
            selection_model=_str("selection_model"),
            extraction_model=_str("extraction_model"),
            enrichment_model=_str("enrichment_model"),
            timeout_ms=_coerce_int(data.get("timeout_ms")),
            cache_ttl_ms=_coerce_int(data.get("cache_ttl_ms")),
            fallback_to_static=_coerce_bool(data.get("fallback_to_static")),
        )


DEFAULT_CONFIG = CompositionConfig(
    enabled=True,
    provider="openrouter",
    selection_model="anthropic/claude-3.5-haiku",
    extraction_model="anthropic/claude-3.5-haiku",
    enrichment_model="anthropic/claude-3.5-haiku",
    timeout_ms=10_000,
    cache_ttl_ms=3_600_000,
    fallback_to_static=True,
)
