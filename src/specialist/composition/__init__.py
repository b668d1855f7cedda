"""Prompt composition: selection, context building and substitution."""

from specialist.composition.context import (
    append_documentation_section,
    build_template_context,
    filter_documentation,
)
from specialist.composition.prompt_ids import (
    PromptCandidate,
    list_candidates,
    match_model_key,
    prompt_id_task,
    resolve_prompt_id,
)
from specialist.composition.static import (
    BUILTIN_TASK_TYPES,
    CompositionResult,
    combine_prompt_parts,
    compose_static,
    detect_task_type,
    select_prompt,
)
from specialist.composition.substitution import (
    find_template_issues,
    placeholder_names,
    render,
)

__all__ = [
    "BUILTIN_TASK_TYPES",
    "CompositionResult",
    "PromptCandidate",
    "append_documentation_section",
    "build_template_context",
    "combine_prompt_parts",
    "compose_static",
    "detect_task_type",
    "filter_documentation",
    "find_template_issues",
    "list_candidates",
    "match_model_key",
    "placeholder_names",
    "prompt_id_task",
    "render",
    "resolve_prompt_id",
    "select_prompt",
]
