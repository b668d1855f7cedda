"""Command-line interface for specialist."""

import json
import logging
from pathlib import Path

import click
from rich.markup import escape

from specialist import __version__
from specialist.adapter import CompositionTelemetry, SpecialistAdapter
from specialist.clients import EchoClient
from specialist.composition import CompositionResult, compose_static, find_template_issues
from specialist.config import CompositionConfig, load_composition_config
from specialist.config.preflight import run_all_checks
from specialist.console import console
from specialist.enrichment import EnrichmentOptions, changelog_entries, enrich_template
from specialist.errors import SpecialistError
from specialist.log import configure_logging
from specialist.runner import resolve_provider
from specialist.templates import (
    SpecialistTemplate,
    list_artifacts,
    load_template,
    read_template_document,
    resolve_template_path,
    schema_errors,
)

logger = logging.getLogger(__name__)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"specialist [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Specialist - dynamic prompt composition for agent benchmarking."""
    configure_logging(verbose=verbose)

    if ctx.invoked_subcommand is None:
        console.print("[bold]specialist[/bold] - compose and enrich specialist prompts")
        console.print("\nRun [cyan]specialist --help[/cyan] for available commands.")


@main.command()
@click.argument("template", type=click.Path(path_type=Path))
@click.option("--provider", "-p", help="Model provider (default: from config).")
@click.option("--model", "-m", help="Model used to analyze documentation.")
@click.option("--force", is_flag=True, help="Re-enrich entries that already have metadata.")
@click.option(
    "--timeout",
    default=30_000,
    type=int,
    help="Per-document model timeout in milliseconds (default: 30000).",
)
@click.option(
    "--concurrency",
    "-c",
    default=3,
    type=click.IntRange(min=1),
    help="Documents analyzed at once (default: 3).",
)
def enrich(
    template: Path,
    provider: str | None,
    model: str | None,
    force: bool,
    timeout: int,
    concurrency: int,
) -> None:
    """Enrich a template's documentation into a new versioned artifact.

    Exits non-zero when any documentation entry could not be enriched; the
    artifact is written either way.
    """
    options = EnrichmentOptions(
        provider=provider or load_composition_config().provider or "openrouter",
        model=model,
        force=force,
        timeout_seconds=timeout / 1000,
        concurrency=concurrency,
    )
    try:
        result = enrich_template(template, options)
    except SpecialistError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    console.print(f"[green]Wrote[/green] {result.path} (v{result.version})")
    console.print(f"  Source:   {result.source}")
    console.print(f"  Enriched: {result.documents_enriched}")
    console.print(f"  Skipped:  {result.documents_skipped}")

    if result.errors:
        console.print(f"[red]  Failed:   {len(result.errors)}[/red]")
        for failure in result.errors:
            console.print(f"    - document {failure.index}: {failure.error}")
        raise SystemExit(1)


@main.command()
@click.argument("template", type=click.Path(path_type=Path))
def resolve(template: Path) -> None:
    """Show which file a template path resolves to."""
    try:
        path = resolve_template_path(template)
    except SpecialistError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    click.echo(str(path))
    artifacts = list_artifacts(path)
    if artifacts:
        console.print(f"[dim]{len(artifacts)} enriched artifact(s) on disk[/dim]")


@main.command()
@click.argument("template", type=click.Path(path_type=Path))
@click.argument("prompt")
@click.option("--model", "-m", help="Target model, for model-specific prompts.")
@click.option("--provider", "-p", help="Provider for the selection model.")
@click.option("--static", "static_only", is_flag=True, help="Skip model-assisted selection.")
@click.option("--task-type", "-t", help="Force a task type (static composition only).")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def compose(
    template: Path,
    prompt: str,
    model: str | None,
    provider: str | None,
    static_only: bool,
    task_type: str | None,
    as_json: bool,
) -> None:
    """Compose the system prompt a request would receive."""
    try:
        if static_only or task_type:
            loaded = load_template(resolve_template_path(template))
            result = compose_static(loaded, prompt, model=model, task_type=task_type)
            telemetry = None
        else:
            result, telemetry = _compose_with_model(template, prompt, model, provider)
    except SpecialistError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    if as_json:
        payload = {
            "prompt": result.prompt,
            "task_type": result.task_type,
            "prompt_id": result.prompt_id,
            "used_model_specific": result.used_model_specific,
            "telemetry": telemetry.to_dict() if telemetry else None,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(
        f"[bold]Task:[/bold] {result.task_type}  [bold]Prompt:[/bold] {result.prompt_id}"
    )
    if telemetry is not None and telemetry.fallback_used:
        console.print(f"[yellow]Static fallback:[/yellow] {telemetry.fallback_reason}")
    console.print()
    click.echo(result.prompt)


def _compose_with_model(
    template: Path, prompt: str, model: str | None, provider_name: str | None
) -> tuple[CompositionResult, CompositionTelemetry]:
    path = resolve_template_path(template)
    config = load_composition_config(load_template(path))
    provider = resolve_provider(provider_name or config.provider)
    if provider is None:
        console.print("[dim]Falling back to static composition.[/dim]")
        config = config.merge(CompositionConfig(enabled=False))
        llm_client = None
    else:
        config = config.merge(CompositionConfig(provider=provider.name))  # type: ignore[arg-type]
        llm_client = provider.create_client(timeout=config.timeout_seconds)

    with SpecialistAdapter(EchoClient(), path, config=config, llm_client=llm_client) as adapter:
        return adapter.compose(prompt, model=model)


def _prompt_texts(loaded: SpecialistTemplate) -> dict[str, str]:
    """Map every prompt id in a template to its text."""
    texts = {f"default.{k}": v for k, v in loaded.general.default.items()}
    for model_key, parts in loaded.general.model_specific.items():
        texts.update({f"general.model_specific.{model_key}.{k}": v for k, v in parts.items()})
    for task_name, bundle in loaded.tasks.items():
        texts.update({f"{task_name}.default.{k}": v for k, v in bundle.default.items()})
        for model_key, parts in bundle.model_specific.items():
            texts.update(
                {f"{task_name}.model_specific.{model_key}.{k}": v for k, v in parts.items()}
            )
    return texts


@main.command()
@click.argument("template", type=click.Path(path_type=Path))
def validate(template: Path) -> None:
    """Validate a template file and its prompt texts."""
    try:
        data = read_template_document(template)
    except SpecialistError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    problems = schema_errors(data)
    for problem in problems:
        console.print(f"  [red]✗[/red] {problem}")

    warnings = 0
    if not problems:
        try:
            loaded = load_template(template)
        except SpecialistError as e:
            console.print(f"  [red]✗[/red] {e}")
            raise SystemExit(1) from e
        for label, text in _prompt_texts(loaded).items():
            for issue in find_template_issues(text):
                warnings += 1
                console.print(f"  [yellow]⚠[/yellow] {label}: {issue}")

    if problems:
        console.print(f"\n[bold red]{template} is invalid.[/bold red]")
        raise SystemExit(1)
    suffix = f" with {warnings} warning(s)" if warnings else ""
    console.print(f"[green]✓[/green] {template} is valid{suffix}")


@main.command()
@click.argument("template", type=click.Path(path_type=Path))
@click.option(
    "--limit",
    "-n",
    default=10,
    type=int,
    help="Number of entries to show (default: 10).",
)
@click.option("--breaking-only", is_flag=True, help="Only show entries with breaking changes.")
def changelog(template: Path, limit: int, breaking_only: bool) -> None:
    """Show the version history of a template."""
    try:
        loaded = load_template(resolve_template_path(template))
    except SpecialistError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    entries = changelog_entries(loaded.version_metadata, limit=limit, breaking_only=breaking_only)
    if not entries:
        console.print(f"[dim]No changelog entries for {loaded.name}.[/dim]")
        return

    console.print(f"[bold]{loaded.name} v{loaded.version}[/bold]\n")
    for entry in entries:
        console.print(
            f"  [cyan]{entry.get('version')}[/cyan] ({entry.get('type', 'patch')}) "
            f"{str(entry.get('date', ''))[:19]}"
        )
        for change in entry.get("changes", []):
            marker = "[red]![/red]" if change.get("breaking") else "-"
            console.print(
                f"      {marker} {change.get('category', 'other')}: "
                f"{escape(str(change.get('description', '')))}",
                highlight=False,
            )
    if loaded.version_metadata.get("deprecated"):
        console.print("\n[yellow]⚠ This template is deprecated.[/yellow]")


@main.command()
def preflight() -> None:
    """Validate environment is ready (API keys, config)."""
    if not run_all_checks():
        raise SystemExit(1)
