"""Shared fixtures for specialist tests."""

import copy
import json
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

SAMPLE_TEMPLATE: dict[str, Any] = {
    "name": "nextjs-specialist",
    "version": "1.0.0",
    "persona": {
        "purpose": "Next.js application expert",
        "values": ["type safety", "performance"],
        "tech_stack": ["nextjs", "react", "typescript"],
    },
    "capabilities": {"tags": ["routing", "ssr"]},
    "documentation": [
        {
            "type": "official",
            "url": "https://nextjs.org/docs",
            "description": "Next.js documentation",
        },
        {
            "type": "reference",
            "path": "docs/routing.md",
            "description": "Routing guide",
        },
    ],
    "prompts": {
        "default": {
            "spawnerPrompt": "You are {{name}}, an expert in {{tech_stack}}.",
            "systemPrompt": "Work with care. Values: {{values}}.",
        },
        "model_specific": {
            "claude-sonnet-4": {"systemPrompt": "Sonnet instructions for {{name}}."},
        },
        "project_setup": {
            "default": {"systemPrompt": "Set up a {{framework}} project named {{project_name}}."},
            "model_specific": {
                "anthropic/claude-3.5-sonnet": {
                    "systemPrompt": "Detailed {{framework}} setup for Claude.",
                },
            },
        },
        "bug_fix": {
            "default": {"systemPrompt": "Debug the reported issue in {{component_name}}."},
        },
        "prompt_strategy": {"fallback": "default", "model_detection": "auto"},
    },
    "variables": {
        "framework": {
            "description": "Frontend framework",
            "enum": ["Next.js", "Remix"],
            "default": "Next.js",
        },
        "project_name": {"description": "Name of the new project"},
        "component_name": {"description": "Component the request is about"},
    },
}


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from real API keys, env overrides and ~/.specialist."""
    for var in (
        "OPENROUTER_API_KEY",
        "ANTHROPIC_API_KEY",
        "CLAUDE_MODEL",
        "OPENROUTER_MODEL",
        "SPECIALIST_LLM_ENABLED",
        "SPECIALIST_LLM_PROVIDER",
        "SPECIALIST_SELECTION_MODEL",
        "SPECIALIST_EXTRACTION_MODEL",
        "SPECIALIST_ENRICHMENT_MODEL",
        "SPECIALIST_SELECTION_TIMEOUT_MS",
        "SPECIALIST_CACHE_TTL_MS",
        "SPECIALIST_FALLBACK_TO_STATIC",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.setattr(
        "specialist.config.loader.get_home_config_path",
        lambda: tmp_path / "home" / ".specialist" / "config.yaml",
    )
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def template_data() -> dict[str, Any]:
    """A fresh copy of the sample template document."""
    return copy.deepcopy(SAMPLE_TEMPLATE)


@pytest.fixture
def write_template(tmp_path: Path) -> Callable[..., Path]:
    """Write a template document into tmp_path and return its path."""

    def _write(data: dict[str, Any], name: str = "nextjs-template.json5") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
        return path

    return _write


@pytest.fixture
def template_path(write_template: Callable[..., Path], template_data: dict[str, Any]) -> Path:
    """The sample template written to disk."""
    return write_template(template_data)


def _completion(content: str | None = None, tool_calls: list[Any] | None = None) -> Any:
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    usage = SimpleNamespace(prompt_tokens=12, completion_tokens=7)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


@pytest.fixture
def make_completion() -> Callable[..., Any]:
    """Build a chat completion object shaped like the openai SDK's."""
    return _completion


@pytest.fixture
def make_tool_completion() -> Callable[..., Any]:
    """Build a completion that calls a tool with JSON arguments."""

    def _make(name: str, arguments: dict[str, Any] | str) -> Any:
        raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
        call = SimpleNamespace(
            id="call_1", function=SimpleNamespace(name=name, arguments=raw)
        )
        return _completion(tool_calls=[call])

    return _make
