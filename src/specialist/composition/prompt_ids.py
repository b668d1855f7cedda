"""Prompt ids: dotted paths naming one prompt text inside a template.

Four shapes exist::

    default.<key>
    general.model_specific.<model>.<key>
    <task>.default.<key>
    <task>.model_specific.<model>.<key>

Model names may themselves contain dots; the last segment is always the key.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from specialist.errors import PromptNotFoundError
from specialist.templates.base import PromptBundle, SpecialistTemplate

PREVIEW_LENGTH = 100

USE_CASES: dict[str, str] = {
    "spawnerPrompt": "Initial specialist introduction and capabilities",
    "systemPrompt": "System-level instructions",
    "contextPrompt": "Additional context for requests",
    "project_setup": "Setting up a new project from scratch",
    "component_generation": "Adding a component to an existing project",
    "migration": "Migrating or upgrading an existing project",
    "bug_fix": "Debugging issues in an existing project",
    "refactoring": "Restructuring existing code",
    "testing": "Writing or extending tests",
    "documentation": "Writing or updating documentation",
}


@dataclass(frozen=True)
class PromptCandidate:
    """A prompt text offered to the selection model."""

    prompt_id: str
    text: str
    task_type: str
    key: str

    @property
    def preview(self) -> str:
        if len(self.text) <= PREVIEW_LENGTH:
            return self.text
        return self.text[:PREVIEW_LENGTH] + "..."

    @property
    def use_case(self) -> str:
        lookup = self.key if self.task_type == "default" else self.task_type
        return USE_CASES.get(lookup, "General purpose prompt")


def normalize_model_name(model: str) -> str:
    """Lowercase a model name and drop any ``provider/`` prefix."""
    return model.strip().lower().rsplit("/", 1)[-1]


def match_model_key(keys: Iterable[str], model: str | None) -> str | None:
    """Find the model-specific key matching a model name.

    Tries an exact match, then a match ignoring case and provider prefix,
    then a prefix match in either direction (``claude-sonnet-4`` matches
    ``claude-sonnet-4-20250514``).
    """
    if not model:
        return None
    keys = list(keys)
    if model in keys:
        return model

    wanted = normalize_model_name(model)
    normalized = {key: normalize_model_name(key) for key in keys}
    for key, norm in normalized.items():
        if norm == wanted:
            return key
    for key, norm in normalized.items():
        if wanted.startswith(norm) or norm.startswith(wanted):
            return key
    return None


def _bundle_candidates(
    bundle: PromptBundle, task_type: str, model: str | None
) -> list[PromptCandidate]:
    candidates = []
    prefix = "default" if task_type == "default" else f"{task_type}.default"
    for key, text in bundle.default.items():
        if text:
            candidates.append(PromptCandidate(f"{prefix}.{key}", text, task_type, key))

    model_key = match_model_key(bundle.model_specific, model)
    if model_key is not None:
        owner = "general" if task_type == "default" else task_type
        for key, text in bundle.model_specific[model_key].items():
            if text:
                candidates.append(
                    PromptCandidate(
                        f"{owner}.model_specific.{model_key}.{key}", text, task_type, key
                    )
                )
    return candidates


def list_candidates(
    template: SpecialistTemplate, model: str | None = None
) -> list[PromptCandidate]:
    """List the prompt texts a selection may choose from.

    Task bundles come first, then the general bundle. Model-specific texts
    are only offered when a target model is known and matches.
    """
    candidates: list[PromptCandidate] = []
    for task_type, bundle in template.tasks.items():
        candidates.extend(_bundle_candidates(bundle, task_type, model))
    candidates.extend(_bundle_candidates(template.general, "default", model))
    return candidates


def prompt_id_task(prompt_id: str) -> str:
    """Return the task segment of a prompt id (``default`` for general ids)."""
    head = prompt_id.split(".", 1)[0]
    return "default" if head in ("default", "general") else head


def resolve_prompt_id(template: SpecialistTemplate, prompt_id: str) -> str:
    """Return the prompt text a prompt id points at.

    Raises PromptNotFoundError for an unknown shape, a missing path or an
    empty text.
    """
    parts = prompt_id.split(".")
    texts: dict[str, str] | None = None

    if len(parts) == 2 and parts[0] == "default":
        texts = template.general.default
    elif len(parts) >= 4 and parts[:2] == ["general", "model_specific"]:
        texts = template.general.model_specific.get(".".join(parts[2:-1]))
    elif len(parts) == 3 and parts[1] == "default":
        bundle = template.tasks.get(parts[0])
        texts = bundle.default if bundle is not None else None
    elif len(parts) >= 4 and parts[1] == "model_specific":
        bundle = template.tasks.get(parts[0])
        if bundle is not None:
            texts = bundle.model_specific.get(".".join(parts[2:-1]))
    else:
        raise PromptNotFoundError(prompt_id, "unrecognized prompt id shape")

    if texts is None:
        raise PromptNotFoundError(prompt_id, "no such task or model entry")
    text = texts.get(parts[-1])
    if not text:
        raise PromptNotFoundError(prompt_id, f"no text for key '{parts[-1]}'")
    return text
