"""Substitution context and documentation ranking."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from specialist.templates.base import (
    DocumentationReference,
    Enrichment,
    SpecialistTemplate,
)

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 5

# Score added per documentation type
TYPE_PRIORITY: dict[str, float] = {
    "official": 2.0,
    "reference": 1.0,
    "examples": 0.5,
    "recipes": 0.5,
    "control": 0.0,
}

DOCUMENTATION_SECTION = """

## Relevant Documentation

The following documentation resources are most relevant to your task:

{{#documentation}}
### {{title}}

{{summary}}

**Key Concepts**: {{#key_concepts}}{{.}}{{^last}}, {{/last}}{{/key_concepts}}

{{#link}}**Reference**: {{link}}{{/link}}

{{#code_patterns.0}}
**Code Patterns**:
{{#code_patterns}}
- {{.}}
{{/code_patterns}}
{{/code_patterns.0}}

---
{{/documentation}}"""

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9.+#-]*")


@dataclass(frozen=True)
class RankedDocument:
    """A documentation entry prepared for the substitution context."""

    title: str
    summary: str
    key_concepts: tuple[str, ...]
    link: str | None
    code_patterns: tuple[str, ...]
    score: float

    def to_context(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "key_concepts": list(self.key_concepts),
            "link": self.link,
            "code_patterns": list(self.code_patterns),
            "relevance_score": self.score,
        }


def _terms(text: str) -> set[str]:
    return set(_WORD_RE.findall(text.lower()))


def score_document(
    doc: DocumentationReference,
    task_type: str,
    template: SpecialistTemplate,
    prompt_terms: set[str],
) -> float:
    """Score an enriched documentation entry for a request."""
    enrichment = doc.enrichment
    if enrichment is None:
        return 0.0

    score = 0.0
    if task_type in enrichment.relevant_tasks:
        score += 10
    score += 5 * len(set(enrichment.relevant_tech_stack) & set(template.tech_stack))
    score += 3 * len(set(enrichment.relevant_tags) & set(template.tags))

    # Terms the user mentioned that the document is about
    mentioned = {
        term
        for term in (*enrichment.relevant_tech_stack, *enrichment.relevant_tags, *enrichment.key_concepts)
        if term and _terms(term) and _terms(term) <= prompt_terms
    }
    score += 10 * len(mentioned)

    score += TYPE_PRIORITY.get(doc.type, 0.0)
    return score


def filter_documentation(
    template: SpecialistTemplate,
    task_type: str,
    user_prompt: str = "",
    limit: int = MAX_DOCUMENTS,
) -> list[RankedDocument]:
    """Pick the enriched documentation relevant to a task, best first.

    An entry qualifies when its enrichment lists the task type; for the
    ``default`` task every enriched entry qualifies. Ties keep template order.
    """
    prompt_terms = _terms(user_prompt)
    scored: list[tuple[float, int, DocumentationReference, Enrichment]] = []
    for index, doc in enumerate(template.documentation):
        if doc.enrichment is None:
            continue
        if task_type != "default" and task_type not in doc.enrichment.relevant_tasks:
            continue
        score = score_document(doc, task_type, template, prompt_terms)
        scored.append((score, index, doc, doc.enrichment))

    scored.sort(key=lambda item: (-item[0], item[1]))
    ranked = []
    for score, _index, doc, enrichment in scored[:limit]:
        ranked.append(
            RankedDocument(
                title=doc.description,
                summary=enrichment.summary,
                key_concepts=enrichment.key_concepts,
                link=doc.location,
                code_patterns=enrichment.code_patterns,
                score=score,
            )
        )
    logger.debug(
        "Selected %d of %d documentation entries for task '%s'",
        len(ranked),
        len(template.documentation),
        task_type,
    )
    return ranked


def build_template_context(
    template: SpecialistTemplate,
    user_prompt: str,
    task_type: str,
    variables: Mapping[str, Any] | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the substitution context for a composed prompt.

    Later sources win: template facts, declared variable defaults for the
    task, ``extra`` request context, then ``variables``.
    """
    documentation = filter_documentation(template, task_type, user_prompt)
    persona_values = template.persona.get("values")

    context: dict[str, Any] = {
        "name": template.name,
        "version": template.version,
        "persona": template.persona,
        "capabilities": template.capabilities,
        "task_type": task_type,
        "user_prompt": user_prompt,
        "tech_stack": ", ".join(template.tech_stack),
        "values": ", ".join(persona_values) if isinstance(persona_values, list) else "",
        "tags": ", ".join(template.tags),
    }
    for name, spec in template.variables.items():
        default = spec.default_for(task_type)
        if default is not None:
            context[name] = default
    if extra:
        context.update(extra)
    if variables:
        context.update(variables)
    context["documentation"] = [doc.to_context() for doc in documentation] or None
    return context


def append_documentation_section(prompt: str, context: Mapping[str, Any]) -> str:
    """Append the documentation block when the context has documentation."""
    if not context.get("documentation"):
        return prompt
    return prompt + DOCUMENTATION_SECTION
