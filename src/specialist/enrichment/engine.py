"""Batch enrichment of template documentation into a new artifact."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from specialist.config import load_composition_config
from specialist.enrichment.fetcher import DocumentFetcher
from specialist.enrichment.prompts import build_analysis_prompt, parse_enrichment_response
from specialist.enrichment.versioning import ChangeEntry, bump_version, update_version_metadata
from specialist.errors import (
    EnrichmentDocumentError,
    SpecialistError,
    TemplateLoadError,
    TemplateNotFoundError,
)
from specialist.providers import get_provider_by_name
from specialist.templates import (
    DocumentationReference,
    Enrichment,
    SpecialistTemplate,
    dump_template,
    find_latest_artifact,
    load_template,
    write_artifact,
)
from specialist.templates.resolver import template_dir

logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 2000


@dataclass(frozen=True)
class EnrichmentOptions:
    """Options for one enrichment run."""

    provider: str = "openrouter"
    model: str | None = None  # defaults to the configured enrichment model
    force: bool = False
    timeout_seconds: float = 30.0
    concurrency: int = 3


@dataclass(frozen=True)
class DocumentFailure:
    """A documentation entry that could not be enriched."""

    index: int
    error: str


@dataclass
class EnrichmentResult:
    """Outcome of an enrichment run."""

    path: Path
    source: Path
    version: str
    documents_enriched: int = 0
    documents_skipped: int = 0
    errors: list[DocumentFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _create_client(provider_name: str, timeout: float) -> Any:
    provider = get_provider_by_name(provider_name)
    if provider is None:
        raise SpecialistError(f"Unknown provider: {provider_name}")
    client = provider.create_client(timeout=timeout)
    if client is None:
        raise SpecialistError(
            f"{provider.api_key_env} is not set; cannot enrich with {provider.name}"
        )
    return client


def enrich_document(
    index: int,
    doc: DocumentationReference,
    template: SpecialistTemplate,
    *,
    client: Any,
    fetcher: DocumentFetcher,
    model: str,
    timeout: float,
) -> Enrichment:
    """Fetch and analyze one documentation entry.

    Every failure is raised as EnrichmentDocumentError carrying the index.
    """
    try:
        content = fetcher.fetch(doc)
    except (httpx.HTTPError, OSError, ValueError) as e:
        raise EnrichmentDocumentError(index, f"fetch failed: {e}") from e
    if not content.strip():
        raise EnrichmentDocumentError(index, "documentation content is empty")

    prompt = build_analysis_prompt(doc, content, template)
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
            timeout=timeout,
        )
        text = completion.choices[0].message.content or ""
    except Exception as e:
        raise EnrichmentDocumentError(index, f"model call failed: {e}") from e

    try:
        return parse_enrichment_response(text, template, model)
    except ValueError as e:
        raise EnrichmentDocumentError(index, str(e)) from e


def enrich_template(
    template_path: Path | str,
    options: EnrichmentOptions | None = None,
    *,
    llm_client: Any = None,
    fetcher: DocumentFetcher | None = None,
    project_root: Path | None = None,
) -> EnrichmentResult:
    """Enrich a template's documentation and write the next artifact.

    The newest existing artifact is used as the starting point, so entries
    enriched in earlier runs are skipped unless ``force`` is set. A model
    client is only created when at least one entry needs enriching. Entries
    that fail keep their previous state and are reported in ``errors``; the
    artifact is written regardless.
    """
    options = options or EnrichmentOptions()
    root = project_root or Path.cwd()
    path = Path(template_path)
    if not path.is_absolute():
        path = root / path
    if not path.is_file():
        raise TemplateNotFoundError(path)

    source = find_latest_artifact(path) or path
    template = load_template(source)
    try:
        version = bump_version(template.version)
    except ValueError as e:
        raise TemplateLoadError(
            source, f"version '{template.version}' is not a semantic version"
        ) from e
    model = options.model or load_composition_config(template, project_root=root).enrichment_model
    if not model:
        raise SpecialistError("No enrichment model configured")

    logger.info("Enriching %s (v%s -> v%s) with %s", source, template.version, version, model)

    fetcher = fetcher or DocumentFetcher(
        base_dirs=[root, template_dir(path)], timeout=options.timeout_seconds
    )
    documentation = list(template.documentation)
    pending = [
        index for index, doc in enumerate(documentation)
        if options.force or not doc.is_enriched
    ]
    result = EnrichmentResult(
        path=path,
        source=source,
        version=version,
        documents_skipped=len(documentation) - len(pending),
    )

    if pending:
        client = llm_client or _create_client(options.provider, options.timeout_seconds)
        batch_size = max(1, options.concurrency)
        with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="specialist-enrich") as pool:
            for start in range(0, len(pending), batch_size):
                batch = pending[start : start + batch_size]
                futures = {
                    index: pool.submit(
                        enrich_document,
                        index,
                        documentation[index],
                        template,
                        client=client,
                        fetcher=fetcher,
                        model=model,
                        timeout=options.timeout_seconds,
                    )
                    for index in batch
                }
                for index, future in futures.items():
                    try:
                        enrichment = future.result()
                    except EnrichmentDocumentError as e:
                        logger.warning("Could not enrich document %d: %s", index, e.message)
                        result.errors.append(DocumentFailure(index=index, error=e.message))
                        continue
                    documentation[index] = documentation[index].with_enrichment(enrichment)
                    result.documents_enriched += 1
                logger.debug("Finished batch of %d documents", len(batch))

    changes = [
        ChangeEntry(
            category="enrichment",
            description=(
                f"Enriched {result.documents_enriched} documentation entries with {model}"
                + (f" ({len(result.errors)} failed)" if result.errors else "")
            ),
        )
    ]
    metadata = update_version_metadata(template.version_metadata, version, changes)
    updated = template.with_documentation(tuple(documentation)).with_version(version, metadata)
    result.path = write_artifact(path, version, dump_template(updated))

    logger.info(
        "Wrote %s: %d enriched, %d skipped, %d failed",
        result.path,
        result.documents_enriched,
        result.documents_skipped,
        len(result.errors),
    )
    return result
