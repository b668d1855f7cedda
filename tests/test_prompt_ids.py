"""Tests for prompt ids and candidate listing."""

from typing import Any

import pytest

from specialist.composition import (
    PromptCandidate,
    list_candidates,
    match_model_key,
    prompt_id_task,
    resolve_prompt_id,
)
from specialist.errors import PromptNotFoundError
from specialist.templates import SpecialistTemplate


@pytest.fixture
def template(template_data: dict[str, Any]) -> SpecialistTemplate:
    return SpecialistTemplate.from_dict(template_data)


class TestResolvePromptId:
    """Tests for resolve_prompt_id."""

    def test_general_default(self, template: SpecialistTemplate) -> None:
        """Test the default.<key> shape."""
        assert resolve_prompt_id(template, "default.systemPrompt").startswith("Work with care")

    def test_general_model_specific(self, template: SpecialistTemplate) -> None:
        """Test the general.model_specific.<model>.<key> shape."""
        text = resolve_prompt_id(template, "general.model_specific.claude-sonnet-4.systemPrompt")
        assert text == "Sonnet instructions for {{name}}."

    def test_task_default(self, template: SpecialistTemplate) -> None:
        """Test the <task>.default.<key> shape."""
        text = resolve_prompt_id(template, "bug_fix.default.systemPrompt")
        assert text.startswith("Debug the reported issue")

    def test_task_model_specific_with_dotted_model(self, template: SpecialistTemplate) -> None:
        """Test that model names containing dots resolve."""
        text = resolve_prompt_id(
            template, "project_setup.model_specific.anthropic/claude-3.5-sonnet.systemPrompt"
        )
        assert text == "Detailed {{framework}} setup for Claude."

    @pytest.mark.parametrize(
        "prompt_id",
        [
            "garbage",
            "bug_fix.systemPrompt",
            "bug_fix.default.missingKey",
            "testing.default.systemPrompt",
            "general.model_specific.gpt-4o.systemPrompt",
            "project_setup.model_specific.gpt-4o.systemPrompt",
        ],
    )
    def test_unknown_ids_raise(self, template: SpecialistTemplate, prompt_id: str) -> None:
        """Test that ids not pointing at a prompt text raise."""
        with pytest.raises(PromptNotFoundError) as exc_info:
            resolve_prompt_id(template, prompt_id)
        assert exc_info.value.prompt_id == prompt_id

    def test_empty_text_raises(self, template_data: dict[str, Any]) -> None:
        """Test that an empty prompt text counts as missing."""
        template_data["prompts"]["bug_fix"]["default"]["contextPrompt"] = ""
        template = SpecialistTemplate.from_dict(template_data)

        with pytest.raises(PromptNotFoundError):
            resolve_prompt_id(template, "bug_fix.default.contextPrompt")

    def test_prompt_id_task(self) -> None:
        """Test the task a prompt id belongs to."""
        assert prompt_id_task("default.systemPrompt") == "default"
        assert prompt_id_task("general.model_specific.m.systemPrompt") == "default"
        assert prompt_id_task("bug_fix.default.systemPrompt") == "bug_fix"


class TestCandidates:
    """Tests for list_candidates and model matching."""

    def test_candidates_without_model(self, template: SpecialistTemplate) -> None:
        """Test that only default texts are offered without a model."""
        ids = [c.prompt_id for c in list_candidates(template)]
        assert ids == [
            "project_setup.default.systemPrompt",
            "bug_fix.default.systemPrompt",
            "default.spawnerPrompt",
            "default.systemPrompt",
        ]

    def test_candidates_include_matching_model(self, template: SpecialistTemplate) -> None:
        """Test that model-specific texts are offered for a matching model."""
        ids = [c.prompt_id for c in list_candidates(template, "claude-sonnet-4-20250514")]
        assert "general.model_specific.claude-sonnet-4.systemPrompt" in ids
        assert not any("anthropic/claude-3.5-sonnet" in i for i in ids)

    def test_candidate_ids_resolve(self, template: SpecialistTemplate) -> None:
        """Test that every offered candidate id resolves to its text."""
        for candidate in list_candidates(template, "claude-3.5-sonnet"):
            assert resolve_prompt_id(template, candidate.prompt_id) == candidate.text

    def test_match_model_key(self) -> None:
        """Test exact, normalized and prefix model matching."""
        keys = ["anthropic/claude-3.5-sonnet", "claude-sonnet-4"]
        assert match_model_key(keys, "claude-sonnet-4") == "claude-sonnet-4"
        assert match_model_key(keys, "Claude-3.5-Sonnet") == "anthropic/claude-3.5-sonnet"
        assert match_model_key(keys, "claude-sonnet-4-20250514") == "claude-sonnet-4"
        assert match_model_key(keys, "llama-3") is None
        assert match_model_key(keys, None) is None

    def test_candidate_preview_and_use_case(self) -> None:
        """Test preview truncation and use case lookup."""
        long_text = "x" * 150
        candidate = PromptCandidate("bug_fix.default.systemPrompt", long_text, "bug_fix", "systemPrompt")
        assert candidate.preview == "x" * 100 + "..."
        assert candidate.use_case == "Debugging issues in an existing project"

        general = PromptCandidate("default.spawnerPrompt", "short", "default", "spawnerPrompt")
        assert general.preview == "short"
        assert general.use_case == "Initial specialist introduction and capabilities"

        custom = PromptCandidate("deploy.default.systemPrompt", "t", "deploy", "systemPrompt")
        assert custom.use_case == "General purpose prompt"
