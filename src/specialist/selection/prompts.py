"""Prompts and tool definitions for the selection and extraction calls."""

from __future__ import annotations

from typing import Any

from specialist.composition.prompt_ids import PromptCandidate
from specialist.composition.substitution import placeholder_names
from specialist.templates.base import SpecialistTemplate

EXTRACTION_TOOL_NAME = "extract_template_variables"
TEMPLATE_PREVIEW_LENGTH = 300

# Context keys filled by the composer itself, never extracted
RESERVED_VARIABLES = frozenset(
    {
        "name",
        "version",
        "persona",
        "capabilities",
        "task_type",
        "user_prompt",
        "tech_stack",
        "values",
        "tags",
        "documentation",
        "workspace_dir",
        "has_tools",
        "tool_count",
    }
)

SELECTION_PROMPT = """You are a prompt classification expert. Select the BEST template that matches the user's intent.

User Request: "{user_prompt}"

Available Templates:
{options}

Analyze the user's request and respond with JSON in this exact format:
{{
  "selected_prompt_id": "<prompt_id>",
  "confidence": "<High|Medium|Low>",
  "reasoning": "<brief explanation>"
}}

Select the template that best matches the user's intent. Consider:
- Primary action (setup, add component, fix, refactor, test, document)
- Specificity (model-specific prompts are more detailed)
- Context provided in the user request"""

EXTRACTION_PROMPT = """Extract variables from the user request to fill template placeholders.

User Request: "{user_prompt}"

Template Preview: {preview}

Instructions:
- Extract ONLY explicitly mentioned or strongly implied variables
- Leave a variable out if it is not mentioned
- Be precise with names (exact framework, package and component names)
- When a variable lists allowed values, use one of them exactly

Call the {tool_name} tool with the extracted values."""


def build_selection_prompt(user_prompt: str, candidates: list[PromptCandidate]) -> str:
    """Build the prompt asking the model to pick one candidate id."""
    options = "\n\n".join(
        f"{index}. ID: {candidate.prompt_id}\n"
        f"   Template: {candidate.preview}\n"
        f"   Use Case: {candidate.use_case}"
        for index, candidate in enumerate(candidates, start=1)
    )
    return SELECTION_PROMPT.format(user_prompt=user_prompt, options=options)


def build_extraction_prompt(user_prompt: str, prompt_text: str) -> str:
    """Build the prompt asking the model to fill the selected text's variables."""
    preview = prompt_text[:TEMPLATE_PREVIEW_LENGTH]
    if len(prompt_text) > TEMPLATE_PREVIEW_LENGTH:
        preview += "..."
    return EXTRACTION_PROMPT.format(
        user_prompt=user_prompt, preview=preview, tool_name=EXTRACTION_TOOL_NAME
    )


def extractable_variables(template: SpecialistTemplate, prompt_text: str) -> list[str]:
    """Names the extraction call may fill: declared variables plus placeholders."""
    names = [name for name in template.variables if name not in RESERVED_VARIABLES]
    for name in placeholder_names(prompt_text):
        if name not in RESERVED_VARIABLES and name not in names:
            names.append(name)
    return names


def build_extraction_tool(template: SpecialistTemplate, prompt_text: str) -> dict[str, Any]:
    """Build the function-calling tool definition for variable extraction."""
    properties: dict[str, Any] = {}
    for name in extractable_variables(template, prompt_text):
        spec = template.variables.get(name)
        prop: dict[str, Any] = {"type": "string"}
        if spec is not None:
            if spec.description:
                prop["description"] = spec.description
            if spec.enum:
                prop["enum"] = list(spec.enum)
        properties[name] = prop

    return {
        "type": "function",
        "function": {
            "name": EXTRACTION_TOOL_NAME,
            "description": "Extract variables from user prompt for template placeholders",
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": [],
            },
        },
    }
