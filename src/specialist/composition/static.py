"""Deterministic prompt composition without any model calls."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from specialist.composition.context import (
    append_documentation_section,
    build_template_context,
)
from specialist.composition.prompt_ids import match_model_key
from specialist.composition.substitution import render
from specialist.templates.base import PromptBundle, SpecialistTemplate

logger = logging.getLogger(__name__)

PROMPT_PART_ORDER: tuple[str, ...] = ("spawnerPrompt", "systemPrompt", "contextPrompt")

DEFAULT_TASK_PATTERNS: dict[str, tuple[str, ...]] = {
    "project_setup": (
        r"\b(setup|scaffold|initialize|create).*(project|app|application|workspace)\b",
        r"\bnew\s+(project|app|application|workspace)\b",
        r"\bbootstrap\b",
        r"\bset\s*up.*from\s*scratch\b",
    ),
    "component_generation": (
        r"\b(create|generate|add|build).*(component|button|form|modal|card|navbar|header|footer)\b",
        r"\bnew\s+(ui|component|button|form|modal)\b",
    ),
    "migration": (
        r"\bmigrate\b",
        r"\bupgrade\s+(to|from)\b",
        r"\b(move|switch|transition)\s+(to|from)\b",
        r"\bconvert.*to\b",
        r"\bporting\b",
    ),
    "bug_fix": (
        r"\b(fix|resolve|debug|repair)\b",
        r"\b(bug|issue|error|problem)\b",
        r"\bnot\s+working\b",
        r"\bbroken\b",
    ),
    "refactoring": (
        r"\brefactor\b",
        r"\brestructure\b",
        r"\bclean\s*up\b",
        r"\bimprove.*code\b",
        r"\breorganize\b",
        r"\boptimize\b",
    ),
    "testing": (
        r"\b(add|write|create)\s+(test|tests|unit\s*test)\b",
        r"\btest\s+(coverage|suite)\b",
        r"\bautomated\s+testing\b",
    ),
    "documentation": (
        r"\b(add|write|create|update)\s+(docs|documentation|readme)\b",
        r"\bdocument\b",
        r"\bcomment\b",
    ),
}

BUILTIN_TASK_TYPES: tuple[str, ...] = (*DEFAULT_TASK_PATTERNS, "default")


@dataclass(frozen=True)
class CompositionResult:
    """A composed system prompt and how it was chosen."""

    prompt: str
    task_type: str
    prompt_id: str | None = None
    used_model_specific: bool = False


def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a template detection pattern.

    ``/body/flags`` is read as a regular expression. Anything else is a
    plain phrase in which ``*`` matches any run of characters.
    """
    last_slash = pattern.rfind("/")
    if pattern.startswith("/") and last_slash > 0:
        body, flags = pattern[1:last_slash], pattern[last_slash + 1 :]
        ignore_case = not flags or "i" in flags
        try:
            return re.compile(body, re.IGNORECASE if ignore_case else 0)
        except re.error:
            logger.warning("Invalid regex pattern %r, treating as plain text", pattern)
    escaped = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(escaped, re.IGNORECASE)


def _task_patterns(
    template: SpecialistTemplate | None,
) -> tuple[dict[str, list[re.Pattern[str]]], list[str]]:
    detection = template.task_detection if template is not None else {}
    declared = detection.get("patterns")
    if isinstance(declared, dict) and declared:
        patterns = {
            str(task): [pattern_to_regex(str(p)) for p in items]
            for task, items in declared.items()
            if isinstance(items, list)
        }
    else:
        patterns = {
            task: [re.compile(p, re.IGNORECASE) for p in items]
            for task, items in DEFAULT_TASK_PATTERNS.items()
        }

    priority_raw = detection.get("priority")
    if isinstance(priority_raw, list) and priority_raw:
        priority = [str(t) for t in priority_raw]
    else:
        priority = list(patterns)
    priority.extend(t for t in patterns if t not in priority)
    return patterns, priority


def detect_task_type(user_prompt: str, template: SpecialistTemplate | None = None) -> str:
    """Detect the task type of a request by pattern matching.

    Uses the template's ``task_detection`` patterns when it declares any,
    the built-in patterns otherwise. Returns ``default`` when nothing matches.
    """
    text = user_prompt.strip().lower()
    patterns, priority = _task_patterns(template)
    for task_type in priority:
        for pattern in patterns.get(task_type, ()):
            if pattern.search(text):
                return task_type
    return "default"


def select_prompt(
    template: SpecialistTemplate, task_type: str, model: str | None = None
) -> tuple[dict[str, str], str, bool]:
    """Pick the prompt parts for a task type and model.

    Order: task model-specific, task default, general model-specific,
    general default. Returns (parts, prompt id prefix, used model-specific).
    """
    bundle: PromptBundle | None = template.tasks.get(task_type)
    if bundle is not None:
        model_key = match_model_key(bundle.model_specific, model)
        if model_key is not None:
            return bundle.model_specific[model_key], f"{task_type}.model_specific.{model_key}", True
        if bundle.default:
            return bundle.default, f"{task_type}.default", False

    model_key = match_model_key(template.general.model_specific, model)
    if model_key is not None:
        return template.general.model_specific[model_key], f"general.model_specific.{model_key}", True
    return template.general.default, "default", False


def combine_prompt_parts(parts: Mapping[str, str]) -> str:
    """Join the known prompt parts in order, skipping blank ones."""
    texts = [parts[key].strip() for key in PROMPT_PART_ORDER if parts.get(key, "").strip()]
    return "\n\n".join(texts)


def compose_static(
    template: SpecialistTemplate,
    user_prompt: str,
    model: str | None = None,
    context: Mapping[str, Any] | None = None,
    task_type: str | None = None,
) -> CompositionResult:
    """Compose a system prompt using pattern-based task detection only."""
    task_type = task_type or detect_task_type(user_prompt, template)
    parts, prefix, used_model_specific = select_prompt(template, task_type, model)
    combined = combine_prompt_parts(parts)

    template_context = build_template_context(template, user_prompt, task_type, extra=context)
    prompt = render(append_documentation_section(combined, template_context), template_context)

    logger.debug("Static composition picked %s for task '%s'", prefix, task_type)
    return CompositionResult(
        prompt=prompt,
        task_type=task_type,
        prompt_id=prefix,
        used_model_specific=used_model_specific,
    )
