"""Tests for selection and extraction prompts, parsing and timeouts."""

import threading
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from specialist.composition import list_candidates
from specialist.errors import ExtractionError, SelectionError
from specialist.selection import (
    EXTRACTION_TOOL_NAME,
    CallTimeoutError,
    build_extraction_prompt,
    build_extraction_tool,
    build_selection_prompt,
    call_with_timeout,
    extractable_variables,
    parse_selection_response,
    parse_tool_arguments,
    validate_variables,
)
from specialist.templates import SpecialistTemplate, VariableSpec

CANDIDATES = {"bug_fix.default.systemPrompt", "default.systemPrompt"}


@pytest.fixture
def template(template_data: dict[str, Any]) -> SpecialistTemplate:
    return SpecialistTemplate.from_dict(template_data)


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


class TestParseSelectionResponse:
    """Tests for parse_selection_response."""

    def test_fenced_json(self) -> None:
        """Test parsing a fenced JSON block and normalizing confidence."""
        text = (
            "Here is my answer:\n```json\n"
            '{"selected_prompt_id": "bug_fix.default.systemPrompt", '
            '"confidence": "high", "reasoning": "mentions a bug"}\n```'
        )
        result = parse_selection_response(text, CANDIDATES)

        assert result.prompt_id == "bug_fix.default.systemPrompt"
        assert result.confidence == "High"
        assert result.reasoning == "mentions a bug"

    def test_bare_json_with_surrounding_text(self) -> None:
        """Test that an unfenced object inside prose is found."""
        text = 'I pick {"selected_prompt_id": "default.systemPrompt", "confidence": "Low"} ok'
        result = parse_selection_response(text, CANDIDATES)

        assert result.prompt_id == "default.systemPrompt"
        assert result.to_dict()["confidence"] == "Low"

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("no json here", "no JSON object"),
            ('{"confidence": "High"}', "no selected_prompt_id"),
            ('{"selected_prompt_id": "testing.default.x", "confidence": "High"}', "not a candidate"),
            ('{"selected_prompt_id": "default.systemPrompt", "confidence": "certain"}', "invalid confidence"),
        ],
    )
    def test_invalid_responses(self, text: str, message: str) -> None:
        """Test that malformed selections raise SelectionError."""
        with pytest.raises(SelectionError, match=message):
            parse_selection_response(text, CANDIDATES)


class TestToolArguments:
    """Tests for parse_tool_arguments and validate_variables."""

    def test_parses_json_string(self) -> None:
        """Test decoding a JSON arguments string."""
        assert parse_tool_arguments('{"framework": "Remix"}') == {"framework": "Remix"}

    def test_accepts_mapping(self) -> None:
        """Test that already decoded arguments pass through."""
        assert parse_tool_arguments({"a": 1}) == {"a": 1}

    @pytest.mark.parametrize("arguments", [None, "{not json", "[1, 2]"])
    def test_invalid_arguments(self, arguments: Any) -> None:
        """Test that unusable arguments raise ExtractionError."""
        with pytest.raises(ExtractionError):
            parse_tool_arguments(arguments)

    def test_validate_variables(self) -> None:
        """Test filtering, stringifying and enum normalization."""
        specs = {"framework": VariableSpec("framework", enum=("Next.js", "Remix"))}
        raw = {
            "framework": "remix",
            "count": 3,
            "flag": True,
            "nested": {"a": 1},
            "blank": "  ",
            "unknown": "x",
        }
        allowed = ["framework", "count", "flag", "nested", "blank"]

        assert validate_variables(raw, allowed, specs) == {
            "framework": "Remix",
            "count": "3",
            "flag": "true",
        }

    def test_enum_mismatch_dropped(self) -> None:
        """Test that values outside the enum are dropped."""
        specs = {"framework": VariableSpec("framework", enum=("Next.js", "Remix"))}
        assert validate_variables({"framework": "Vue"}, ["framework"], specs) == {}


class TestJudgePrompts:
    """Tests for the selection and extraction prompt builders."""

    def test_selection_prompt_lists_candidates(self, template: SpecialistTemplate) -> None:
        """Test that every candidate id and use case is offered."""
        candidates = list_candidates(template)
        prompt = build_selection_prompt("Fix the login bug", candidates)

        assert 'User Request: "Fix the login bug"' in prompt
        for candidate in candidates:
            assert f"ID: {candidate.prompt_id}" in prompt
        assert "Use Case: Debugging issues in an existing project" in prompt
        assert '"selected_prompt_id"' in prompt

    def test_extraction_prompt_truncates_preview(self) -> None:
        """Test that long prompt texts are previewed."""
        prompt = build_extraction_prompt("Add a card", "y" * 400)
        assert "y" * 300 + "..." in prompt
        assert "y" * 301 not in prompt
        assert EXTRACTION_TOOL_NAME in prompt

    def test_extractable_variables_skip_reserved(self) -> None:
        """Test that composer-owned names are never extracted."""
        template = SpecialistTemplate(name="bare")
        text = "You are {{name}} for {{user_prompt}}. Build {{component_name}} in {{workspace_dir}}."
        assert extractable_variables(template, text) == ["component_name"]

    def test_extraction_tool_schema(self, template: SpecialistTemplate) -> None:
        """Test the function tool built for a prompt text."""
        tool = build_extraction_tool(template, "Set up {{framework}} with {{styling}}.")

        assert tool["type"] == "function"
        function = tool["function"]
        assert function["name"] == EXTRACTION_TOOL_NAME
        properties = function["parameters"]["properties"]
        assert list(properties) == ["framework", "project_name", "component_name", "styling"]
        assert properties["framework"] == {
            "type": "string",
            "description": "Frontend framework",
            "enum": ["Next.js", "Remix"],
        }
        assert properties["styling"] == {"type": "string"}
        assert function["parameters"]["required"] == []


class TestCallWithTimeout:
    """Tests for call_with_timeout."""

    def test_returns_result(self, executor: ThreadPoolExecutor) -> None:
        """Test that a fast call returns its value."""
        assert call_with_timeout(executor, lambda: 42, timeout=1.0) == 42

    def test_propagates_errors(self, executor: ThreadPoolExecutor) -> None:
        """Test that exceptions from the call are re-raised."""

        def _fail() -> None:
            raise ValueError("bad response")

        with pytest.raises(ValueError, match="bad response"):
            call_with_timeout(executor, _fail, timeout=1.0)

    def test_times_out_without_waiting(self, executor: ThreadPoolExecutor) -> None:
        """Test that the caller is released at the deadline."""
        release = threading.Event()
        start = time.perf_counter()
        try:
            with pytest.raises(CallTimeoutError) as exc_info:
                call_with_timeout(executor, lambda: release.wait(5), timeout=0.05, label="selection")
        finally:
            release.set()

        assert time.perf_counter() - start < 2
        assert exc_info.value.label == "selection"
        assert "timed out" in str(exc_info.value)
