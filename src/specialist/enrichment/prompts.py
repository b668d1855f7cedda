"""Analysis prompt and response parsing for documentation enrichment."""

from __future__ import annotations

import logging
from collections.abc import Collection
from datetime import UTC, datetime
from typing import Any

from specialist.selection.parsing import extract_json_object
from specialist.templates.base import DocumentationReference, Enrichment, SpecialistTemplate

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 10_000

ANALYSIS_PROMPT = """You are a documentation analyst. Analyze the following documentation and extract structured metadata.

**Documentation Type**: {doc_type}
**User Description**: {description}

**Available Task Types in Template**:
{task_types}

**Available Tech Stack**:
{tech_stack}

**Available Capability Tags**:
{tags}

**Documentation Content**:
```
{content}
```

**Task**: Analyze this documentation and provide structured metadata in JSON format:

```json
{{
  "summary": "2-3 paragraph comprehensive summary of the documentation",
  "key_concepts": ["concept1", "concept2", "..."],
  "relevant_for_tasks": ["task_type1", "task_type2"],
  "relevant_tech_stack": ["tech1", "tech2"],
  "relevant_tags": ["tag1", "tag2"],
  "code_patterns": ["code example 1", "code example 2"]
}}
```

**Instructions**:
1. Write a comprehensive 2-3 paragraph summary
2. Extract 3-10 key concepts
3. Match task types ONLY from the available list that this doc is relevant for
4. Match tech stack items ONLY from the available list
5. Match capability tags ONLY from the available list
6. Extract 2-5 important code patterns or examples (keep them concise)

IMPORTANT: Only return the JSON object, no other text."""


def available_task_types(template: SpecialistTemplate) -> list[str]:
    """Task types the enrichment may tag documents with."""
    return [*template.task_types, "default"]


def _bullets(items: Collection[str]) -> str:
    return "\n".join(f"- {item}" for item in items) or "- (none)"


def build_analysis_prompt(
    doc: DocumentationReference, content: str, template: SpecialistTemplate
) -> str:
    """Build the prompt asking the model to describe one document."""
    if len(content) > MAX_CONTENT_CHARS:
        content = content[:MAX_CONTENT_CHARS] + " ...(truncated)"
    return ANALYSIS_PROMPT.format(
        doc_type=doc.type,
        description=doc.description,
        task_types=_bullets(available_task_types(template)),
        tech_stack=_bullets(template.tech_stack),
        tags=_bullets(template.tags),
        content=content,
    )


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if isinstance(item, str | int | float) and str(item).strip()]


def _within(values: list[str], vocabulary: Collection[str], label: str) -> tuple[str, ...]:
    kept = tuple(v for v in values if v in vocabulary)
    dropped = [v for v in values if v not in vocabulary]
    if dropped:
        logger.debug("Dropping %s outside the template vocabulary: %s", label, ", ".join(dropped))
    return kept


def parse_enrichment_response(
    text: str, template: SpecialistTemplate, model: str, now: str | None = None
) -> Enrichment:
    """Parse an analysis response into an Enrichment.

    Task types, tech stack and tags outside the template's vocabulary are
    dropped. Raises ValueError when no JSON object can be found.
    """
    data = extract_json_object(text or "")
    if data is None:
        raise ValueError("no JSON object in enrichment response")

    return Enrichment(
        summary=str(data.get("summary", "")).strip(),
        key_concepts=tuple(_string_list(data, "key_concepts")),
        relevant_tasks=_within(
            _string_list(data, "relevant_for_tasks"), available_task_types(template), "task types"
        ),
        relevant_tech_stack=_within(
            _string_list(data, "relevant_tech_stack"), template.tech_stack, "tech stack"
        ),
        relevant_tags=_within(_string_list(data, "relevant_tags"), template.tags, "tags"),
        code_patterns=tuple(_string_list(data, "code_patterns")),
        enriched_at=now or datetime.now(UTC).isoformat(),
        enrichment_model=model,
    )
