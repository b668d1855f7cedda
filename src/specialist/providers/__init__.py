"""Model provider definitions and lookup."""

from specialist.providers.anthropic import ANTHROPIC
from specialist.providers.base import Provider
from specialist.providers.openrouter import OPENROUTER

__all__ = [
    "Provider",
    "PROVIDERS",
    "ANTHROPIC",
    "OPENROUTER",
    "get_configured_providers",
    "get_provider_by_name",
]

PROVIDERS: tuple[Provider, ...] = (
    OPENROUTER,
    ANTHROPIC,
)


def get_configured_providers() -> list[Provider]:
    """Return providers whose API key is set."""
    return [provider for provider in PROVIDERS if provider.is_configured()]


def get_provider_by_name(name: str) -> Provider | None:
    """Find provider by name (case-insensitive)."""
    name_lower = name.lower()
    for provider in PROVIDERS:
        if provider.name == name_lower:
            return provider
    return None
