"""Specialist templates, enriched artifacts and their resolution."""

from specialist.templates.base import (
    DocumentationReference,
    Enrichment,
    PromptBundle,
    PromptStrategy,
    SpecialistTemplate,
    VariableSpec,
)
from specialist.templates.loader import (
    dump_template,
    load_template,
    read_template_document,
    schema_errors,
)
from specialist.templates.resolver import (
    artifact_base_name,
    find_latest_artifact,
    is_artifact_path,
    list_artifacts,
    next_artifact_path,
    resolve_template_path,
    version_warnings,
    write_artifact,
)

__all__ = [
    "DocumentationReference",
    "Enrichment",
    "PromptBundle",
    "PromptStrategy",
    "SpecialistTemplate",
    "VariableSpec",
    "artifact_base_name",
    "dump_template",
    "find_latest_artifact",
    "is_artifact_path",
    "list_artifacts",
    "load_template",
    "next_artifact_path",
    "read_template_document",
    "resolve_template_path",
    "schema_errors",
    "version_warnings",
    "write_artifact",
]
