"""Model-assisted prompt selection and variable extraction."""

from specialist.selection.cache import PromptCache, TTLCache, fingerprint
from specialist.selection.parsing import (
    SelectionResult,
    parse_selection_response,
    parse_tool_arguments,
    validate_variables,
)
from specialist.selection.prompts import (
    EXTRACTION_TOOL_NAME,
    build_extraction_prompt,
    build_extraction_tool,
    build_selection_prompt,
    extractable_variables,
)
from specialist.selection.timeouts import CallTimeoutError, call_with_timeout

__all__ = [
    "EXTRACTION_TOOL_NAME",
    "CallTimeoutError",
    "PromptCache",
    "SelectionResult",
    "TTLCache",
    "build_extraction_prompt",
    "build_extraction_tool",
    "build_selection_prompt",
    "call_with_timeout",
    "extractable_variables",
    "fingerprint",
    "parse_selection_response",
    "parse_tool_arguments",
    "validate_variables",
]
