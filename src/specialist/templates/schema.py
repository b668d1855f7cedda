"""JSON Schema for specialist template documents."""

from __future__ import annotations

from typing import Any

_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

_PROMPT_PARTS: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

ENRICHMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "key_concepts": _STRING_LIST,
        "relevant_for_tasks": _STRING_LIST,
        "relevant_tech_stack": _STRING_LIST,
        "relevant_tags": _STRING_LIST,
        "code_patterns": _STRING_LIST,
        "last_enriched": {"type": "string"},
        "enrichment_model": {"type": "string"},
    },
}

TEMPLATE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "prompts"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {"type": "string"},
        "persona": {
            "type": "object",
            "properties": {"tech_stack": _STRING_LIST},
        },
        "capabilities": {
            "type": "object",
            "properties": {"tags": _STRING_LIST},
        },
        "documentation": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "url": {"type": "string"},
                    "path": {"type": "string"},
                    "description": {"type": "string"},
                    "enrichment": ENRICHMENT_SCHEMA,
                },
            },
        },
        "prompts": {
            "type": "object",
            "required": ["default"],
            "properties": {
                "default": _PROMPT_PARTS,
                "model_specific": {
                    "type": "object",
                    "additionalProperties": _PROMPT_PARTS,
                },
                "prompt_strategy": {"type": "object"},
            },
            "additionalProperties": {"type": "object"},
        },
        "variables": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "description": {"type": "string"},
                    "enum": _STRING_LIST,
                    "default": {"type": "string"},
                    "tasks": _STRING_LIST,
                },
            },
        },
        "task_detection": {
            "type": "object",
            "properties": {
                "patterns": {
                    "type": "object",
                    "additionalProperties": _STRING_LIST,
                },
                "priority": _STRING_LIST,
            },
        },
        "llm_config": {"type": "object"},
        "version_metadata": {"type": "object"},
    },
}
