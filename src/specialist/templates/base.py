"""Specialist template definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Keys under ``prompts`` that are not task types
RESERVED_PROMPT_KEYS: frozenset[str] = frozenset(
    {"default", "model_specific", "prompt_strategy"}
)


def _str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, list | tuple):
        return tuple(str(v) for v in value if v is not None)
    return ()


def _str_dict(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


@dataclass(frozen=True)
class Enrichment:
    """Model-generated metadata attached to a documentation reference."""

    summary: str = ""
    key_concepts: tuple[str, ...] = ()
    relevant_tasks: tuple[str, ...] = ()
    relevant_tech_stack: tuple[str, ...] = ()
    relevant_tags: tuple[str, ...] = ()
    code_patterns: tuple[str, ...] = ()
    enriched_at: str | None = None
    enrichment_model: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk representation."""
        result: dict[str, Any] = {
            "summary": self.summary,
            "key_concepts": list(self.key_concepts),
            "relevant_for_tasks": list(self.relevant_tasks),
            "relevant_tech_stack": list(self.relevant_tech_stack),
            "relevant_tags": list(self.relevant_tags),
            "code_patterns": list(self.code_patterns),
        }
        if self.enriched_at is not None:
            result["last_enriched"] = self.enriched_at
        if self.enrichment_model is not None:
            result["enrichment_model"] = self.enrichment_model
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Enrichment:
        """Create from the on-disk representation."""
        enriched_at = data.get("last_enriched")
        model = data.get("enrichment_model")
        return cls(
            summary=str(data.get("summary", "")),
            key_concepts=_str_tuple(data.get("key_concepts")),
            relevant_tasks=_str_tuple(data.get("relevant_for_tasks")),
            relevant_tech_stack=_str_tuple(data.get("relevant_tech_stack")),
            relevant_tags=_str_tuple(data.get("relevant_tags")),
            code_patterns=_str_tuple(data.get("code_patterns")),
            enriched_at=str(enriched_at) if enriched_at is not None else None,
            enrichment_model=str(model) if model is not None else None,
        )


@dataclass(frozen=True)
class DocumentationReference:
    """A documentation source referenced by a template.

    Exactly one of ``url`` or ``path`` is normally set. Keys the template
    carries beyond the known ones are kept in ``extra`` so they survive a
    round trip into an enriched artifact.
    """

    type: str = "reference"
    description: str = ""
    url: str | None = None
    path: str | None = None
    enrichment: Enrichment | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def location(self) -> str | None:
        """Return the url or path this reference points at."""
        return self.url or self.path

    @property
    def is_enriched(self) -> bool:
        return self.enrichment is not None

    def with_enrichment(self, enrichment: Enrichment) -> DocumentationReference:
        """Return a copy carrying the given enrichment."""
        return DocumentationReference(
            type=self.type,
            description=self.description,
            url=self.url,
            path=self.path,
            enrichment=enrichment,
            extra=dict(self.extra),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {"type": self.type}
        if self.url is not None:
            result["url"] = self.url
        if self.path is not None:
            result["path"] = self.path
        result["description"] = self.description
        result.update(self.extra)
        if self.enrichment is not None:
            result["enrichment"] = self.enrichment.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentationReference:
        """Create from a documentation entry in a template."""
        known = {"type", "description", "url", "path", "enrichment"}
        enrichment_raw = data.get("enrichment")
        url = data.get("url")
        path = data.get("path")
        return cls(
            type=str(data.get("type", "reference")),
            description=str(data.get("description", "")),
            url=str(url) if url else None,
            path=str(path) if path else None,
            enrichment=(
                Enrichment.from_dict(enrichment_raw)
                if isinstance(enrichment_raw, dict)
                else None
            ),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class PromptBundle:
    """Prompt texts for one task type: a default set plus per-model overrides."""

    default: dict[str, str] = field(default_factory=dict)
    model_specific: dict[str, dict[str, str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"default": dict(self.default)}
        if self.model_specific:
            result["model_specific"] = {
                model: dict(parts) for model, parts in self.model_specific.items()
            }
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], label: str) -> PromptBundle:
        """Create from a prompts entry.

        A mapping with neither ``default`` nor ``model_specific`` is read as
        a flat default. A mapping with ``model_specific`` but no ``default``
        raises ValueError.
        """
        if "default" not in data and "model_specific" not in data:
            return cls(default=_str_dict(data))
        if "default" not in data:
            raise ValueError(f"prompts.{label} has model_specific but no default")
        model_specific_raw = data.get("model_specific") or {}
        if not isinstance(model_specific_raw, dict):
            raise ValueError(f"prompts.{label}.model_specific must be a mapping")
        return cls(
            default=_str_dict(data.get("default")),
            model_specific={
                str(model): _str_dict(parts)
                for model, parts in model_specific_raw.items()
                if isinstance(parts, dict)
            },
        )


@dataclass(frozen=True)
class PromptStrategy:
    """Template-level policy for prompt selection and substitution."""

    fallback: str = "default"
    model_detection: str = "auto"
    interpolation_style: str = "mustache"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptStrategy:
        interpolation = data.get("interpolation")
        style = "mustache"
        if isinstance(interpolation, dict):
            style = str(interpolation.get("style", "mustache"))
        return cls(
            fallback=str(data.get("fallback", "default")),
            model_detection=str(data.get("model_detection", "auto")),
            interpolation_style=style,
        )

    @property
    def allows_static_fallback(self) -> bool:
        """Whether a failed model-assisted selection may use static composition."""
        return self.fallback != "none"


@dataclass(frozen=True)
class VariableSpec:
    """A substitution variable the template declares."""

    name: str
    description: str = ""
    enum: tuple[str, ...] = ()
    default: str | None = None
    tasks: tuple[str, ...] = ()  # Tasks the default applies to (empty = all)

    def default_for(self, task_type: str) -> str | None:
        """Return the default value applicable to a task type."""
        if self.default is None:
            return None
        if self.tasks and task_type not in self.tasks:
            return None
        return self.default

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> VariableSpec:
        default = data.get("default")
        return cls(
            name=name,
            description=str(data.get("description", "")),
            enum=_str_tuple(data.get("enum")),
            default=str(default) if default is not None else None,
            tasks=_str_tuple(data.get("tasks")),
        )


@dataclass(frozen=True)
class SpecialistTemplate:
    """A specialist persona with prompt bundles and documentation.

    ``raw`` holds the parsed document exactly as read so that fields this
    class does not model survive when an enriched artifact is written.
    """

    name: str
    version: str = "0.0.0"
    persona: dict[str, Any] = field(default_factory=dict)
    capabilities: dict[str, Any] = field(default_factory=dict)
    documentation: tuple[DocumentationReference, ...] = ()
    general: PromptBundle = field(default_factory=PromptBundle)
    tasks: dict[str, PromptBundle] = field(default_factory=dict)
    strategy: PromptStrategy = PromptStrategy()
    variables: dict[str, VariableSpec] = field(default_factory=dict)
    task_detection: dict[str, Any] = field(default_factory=dict)
    llm_config: dict[str, Any] = field(default_factory=dict)
    version_metadata: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
    source: Path | None = None

    @property
    def tech_stack(self) -> tuple[str, ...]:
        return _str_tuple(self.persona.get("tech_stack"))

    @property
    def tags(self) -> tuple[str, ...]:
        return _str_tuple(self.capabilities.get("tags"))

    @property
    def task_types(self) -> tuple[str, ...]:
        """Task types declared through prompt bundles or detection patterns."""
        declared = list(self.tasks)
        patterns = self.task_detection.get("patterns")
        if isinstance(patterns, dict):
            declared.extend(t for t in patterns if t not in declared)
        return tuple(declared)

    def with_documentation(
        self, documentation: tuple[DocumentationReference, ...]
    ) -> SpecialistTemplate:
        """Return a copy with the documentation list replaced."""
        return self._replace(documentation=documentation)

    def with_version(
        self, version: str, version_metadata: dict[str, Any]
    ) -> SpecialistTemplate:
        """Return a copy at a new version with updated version metadata."""
        return self._replace(version=version, version_metadata=version_metadata)

    def _replace(self, **changes: Any) -> SpecialistTemplate:
        values = {
            "name": self.name,
            "version": self.version,
            "persona": self.persona,
            "capabilities": self.capabilities,
            "documentation": self.documentation,
            "general": self.general,
            "tasks": self.tasks,
            "strategy": self.strategy,
            "variables": self.variables,
            "task_detection": self.task_detection,
            "llm_config": self.llm_config,
            "version_metadata": self.version_metadata,
            "raw": self.raw,
            "source": self.source,
        }
        values.update(changes)
        return SpecialistTemplate(**values)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, keeping every field of the document it was read from."""
        result = dict(self.raw)
        result["name"] = self.name
        result["version"] = self.version
        result["documentation"] = [doc.to_dict() for doc in self.documentation]
        if self.version_metadata:
            result["version_metadata"] = self.version_metadata
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> SpecialistTemplate:
        """Create from a parsed template document.

        Raises ValueError when a prompt bundle is malformed.
        """
        prompts = data.get("prompts") or {}
        general = PromptBundle.from_dict(
            {k: prompts[k] for k in ("default", "model_specific") if k in prompts},
            "default",
        )
        tasks: dict[str, PromptBundle] = {}
        for key, value in prompts.items():
            if key in RESERVED_PROMPT_KEYS or not isinstance(value, dict):
                continue
            tasks[str(key)] = PromptBundle.from_dict(value, str(key))

        strategy_raw = prompts.get("prompt_strategy")
        strategy = (
            PromptStrategy.from_dict(strategy_raw)
            if isinstance(strategy_raw, dict)
            else PromptStrategy()
        )

        docs_raw = data.get("documentation") or []
        documentation = tuple(
            DocumentationReference.from_dict(entry)
            for entry in docs_raw
            if isinstance(entry, dict)
        )

        variables_raw = data.get("variables") or {}
        variables = {
            str(name): VariableSpec.from_dict(str(name), spec)
            for name, spec in variables_raw.items()
            if isinstance(spec, dict)
        }

        def _mapping(key: str) -> dict[str, Any]:
            value = data.get(key)
            return dict(value) if isinstance(value, dict) else {}

        return cls(
            name=str(data.get("name", "")),
            version=str(data.get("version") or "0.0.0"),
            persona=_mapping("persona"),
            capabilities=_mapping("capabilities"),
            documentation=documentation,
            general=general,
            tasks=tasks,
            strategy=strategy,
            variables=variables,
            task_detection=_mapping("task_detection"),
            llm_config=_mapping("llm_config"),
            version_metadata=_mapping("version_metadata"),
            raw=dict(data),
            source=source,
        )
