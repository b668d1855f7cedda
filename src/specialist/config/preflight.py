"""Preflight checks to validate the environment."""

from specialist.config.loader import (
    get_home_config_path,
    get_local_config_path,
    load_composition_config,
)
from specialist.console import console
from specialist.providers import PROVIDERS, get_configured_providers


def check_providers() -> bool:
    """Check which model providers have API keys."""
    console.print("[bold]Model Providers:[/bold]")

    for provider in PROVIDERS:
        if provider.is_configured():
            console.print(
                f"  [green]✓[/green] {provider.name} ([cyan]{provider.api_key_env}[/cyan])"
            )
        else:
            console.print(
                f"  [dim]✗[/dim] {provider.name} - [dim]set {provider.api_key_env}[/dim]"
            )

    configured = get_configured_providers()
    if not configured:
        console.print("\n[yellow]⚠[/yellow] No provider API keys found.")
        console.print("[dim]Composition will use static prompts only.[/dim]")
        return False

    console.print(f"\n[green]✓[/green] {len(configured)} provider(s) configured")
    return True


def check_config() -> bool:
    """Show the merged composition config and where it came from."""
    console.print("\n[bold]Configuration:[/bold]")
    for label, path in (
        ("global", get_home_config_path()),
        ("project", get_local_config_path()),
    ):
        state = "[green]found[/green]" if path.exists() else "[dim]not found[/dim]"
        console.print(f"  {label}: {path} ({state})")

    config = load_composition_config()
    for key, value in config.to_dict().items():
        console.print(f"  [cyan]{key}[/cyan] = {value}")

    if config.enabled and config.provider not in {p.name for p in get_configured_providers()}:
        console.print(
            f"\n[yellow]⚠[/yellow] Provider '{config.provider}' has no API key; "
            "model-assisted composition will be disabled."
        )
        return False
    return True


CHECKS = [
    check_providers,
    check_config,
]


def run_all_checks() -> bool:
    """Run all preflight checks."""
    console.print("[bold]Running preflight checks...[/bold]\n")

    results = [check() for check in CHECKS]
    all_passed = all(results)

    if all_passed:
        console.print("\n[bold green]All preflight checks passed![/bold green]")
    else:
        console.print("\n[bold red]Some preflight checks failed.[/bold red]")

    return all_passed
