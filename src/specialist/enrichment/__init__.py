"""Documentation enrichment and template versioning."""

from specialist.enrichment.engine import (
    DocumentFailure,
    EnrichmentOptions,
    EnrichmentResult,
    enrich_document,
    enrich_template,
)
from specialist.enrichment.fetcher import DocumentFetcher, html_to_text
from specialist.enrichment.versioning import (
    ChangeEntry,
    bump_version,
    changelog_entries,
    compare_versions,
    update_version_metadata,
)

__all__ = [
    "ChangeEntry",
    "DocumentFailure",
    "DocumentFetcher",
    "EnrichmentOptions",
    "EnrichmentResult",
    "bump_version",
    "changelog_entries",
    "compare_versions",
    "enrich_document",
    "enrich_template",
    "html_to_text",
    "update_version_metadata",
]
