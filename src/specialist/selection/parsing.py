"""Parsing and validating judgment-model responses."""

from __future__ import annotations

import logging
import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any, Literal, cast

import json5

from specialist.errors import ExtractionError, SelectionError
from specialist.templates.base import VariableSpec

logger = logging.getLogger(__name__)

Confidence = Literal["High", "Medium", "Low"]
CONFIDENCE_LEVELS: tuple[str, ...] = ("High", "Medium", "Low")

_FENCED_JSON_RE = re.compile(r"```(?:json5?)?\s*(\{.*?\})\s*```", re.DOTALL)
_BARE_JSON_RE = re.compile(r"(\{.*\})", re.DOTALL)


@dataclass(frozen=True)
class SelectionResult:
    """The prompt a selection call picked."""

    prompt_id: str
    confidence: Confidence
    reasoning: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "selected_prompt_id": self.prompt_id,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Pull the first JSON object out of free-form model output."""
    match = _FENCED_JSON_RE.search(text) or _BARE_JSON_RE.search(text)
    if match is None:
        return None
    try:
        data = json5.loads(match.group(1))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def parse_selection_response(
    text: str, candidate_ids: Collection[str]
) -> SelectionResult:
    """Parse a selection response, checking the id against the candidates.

    Raises SelectionError when no JSON object is found, a field is missing or
    invalid, or the selected id was not offered.
    """
    data = extract_json_object(text or "")
    if data is None:
        raise SelectionError("no JSON object in selection response")

    prompt_id = data.get("selected_prompt_id")
    if not isinstance(prompt_id, str) or not prompt_id:
        raise SelectionError("selection response has no selected_prompt_id")
    if prompt_id not in candidate_ids:
        raise SelectionError(f"selected prompt '{prompt_id}' was not a candidate")

    confidence = str(data.get("confidence", "")).strip().capitalize()
    if confidence not in CONFIDENCE_LEVELS:
        raise SelectionError(f"invalid confidence level: {data.get('confidence')!r}")

    return SelectionResult(
        prompt_id=prompt_id,
        confidence=cast(Confidence, confidence),
        reasoning=str(data.get("reasoning", "")),
    )


def parse_tool_arguments(arguments: str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Decode tool-call arguments, given as a JSON string or a mapping."""
    if arguments is None:
        raise ExtractionError("tool call has no arguments")
    if isinstance(arguments, Mapping):
        return dict(arguments)
    try:
        data = json5.loads(arguments)
    except ValueError as e:
        raise ExtractionError(f"tool call arguments are not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("tool call arguments are not an object")
    return data


def validate_variables(
    raw: Mapping[str, Any],
    allowed: Collection[str],
    specs: Mapping[str, VariableSpec] | None = None,
) -> dict[str, str]:
    """Keep only known, scalar, enum-conforming variables as strings.

    Enum values match case-insensitively and are normalized to the declared
    spelling. Anything else is dropped.
    """
    specs = specs or {}
    validated: dict[str, str] = {}
    for name, value in raw.items():
        if name not in allowed:
            logger.debug("Dropping unknown extracted variable '%s'", name)
            continue
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, str | int | float):
            text = str(value).strip()
        else:
            logger.debug("Dropping non-scalar extracted variable '%s'", name)
            continue
        if not text:
            continue

        spec = specs.get(name)
        if spec is not None and spec.enum:
            matches = [option for option in spec.enum if option.lower() == text.lower()]
            if not matches:
                logger.warning(
                    "Dropping variable '%s': %r is not one of %s",
                    name,
                    text,
                    ", ".join(spec.enum),
                )
                continue
            text = matches[0]
        validated[name] = text
    return validated
