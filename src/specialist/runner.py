"""Provider resolution for commands that call a model."""

from specialist.console import console
from specialist.providers import (
    PROVIDERS,
    Provider,
    get_configured_providers,
    get_provider_by_name,
)


def resolve_provider(provider_name: str | None) -> Provider | None:
    """Resolve which provider to use.

    Returns the provider if valid, None if validation fails (errors printed).

    Logic:
    - If provider_name provided: validate it exists and has an API key
    - If not provided: use the first provider with an API key
    """
    if provider_name:
        provider = get_provider_by_name(provider_name)
        if provider is None:
            console.print(f"[red]Unknown provider: {provider_name}[/red]")
            console.print("Available providers: " + ", ".join(p.name for p in PROVIDERS))
            return None
        if not provider.is_configured():
            console.print(
                f"[red]Provider '{provider.name}' has no API key "
                f"(set {provider.api_key_env}).[/red]"
            )
            console.print(f"Get a key: {provider.install_info}")
            return None
        return provider

    configured = get_configured_providers()
    if not configured:
        console.print("[red]No provider API keys found.[/red]")
        console.print("Set at least one of:")
        for provider in PROVIDERS:
            console.print(f"  - {provider.api_key_env} ({provider.name})")
        return None

    provider = configured[0]
    console.print(f"[dim]Auto-selected provider: {provider.name}[/dim]")
    return provider
