"""Tests for providers and downstream clients."""

import os
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

from specialist.clients import (
    AgentRequest,
    EchoClient,
    Message,
    OpenAICompatibleClient,
    model_for_client,
)
from specialist.providers import (
    ANTHROPIC,
    OPENROUTER,
    PROVIDERS,
    get_configured_providers,
    get_provider_by_name,
)
from specialist.runner import resolve_provider


class TestProviders:
    """Tests for the provider registry."""

    def test_registry_names(self) -> None:
        """Test that both providers are registered."""
        assert [p.name for p in PROVIDERS] == ["openrouter", "anthropic"]

    def test_lookup_is_case_insensitive(self) -> None:
        """Test provider lookup by name."""
        assert get_provider_by_name("OpenRouter") is OPENROUTER
        assert get_provider_by_name("anthropic") is ANTHROPIC
        assert get_provider_by_name("bedrock") is None

    def test_configured_providers_follow_env(self) -> None:
        """Test that only providers with a key count as configured."""
        assert get_configured_providers() == []
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            assert get_configured_providers() == [ANTHROPIC]

    def test_create_client_without_key(self) -> None:
        """Test that no client is built when the key is missing."""
        assert OPENROUTER.create_client() is None

    def test_create_client_passes_settings(self) -> None:
        """Test that the OpenAI client is bound to the provider endpoint."""
        with (
            patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}),
            patch("openai.OpenAI") as mock_openai,
        ):
            client = ANTHROPIC.create_client(timeout=5.0)

        assert client is mock_openai.return_value
        mock_openai.assert_called_once_with(
            api_key="sk-test",
            base_url="https://api.anthropic.com/v1",
            default_headers={"anthropic-version": "2023-06-01"},
            timeout=5.0,
            max_retries=0,
        )


class TestResolveProvider:
    """Tests for resolve_provider."""

    def test_no_keys_returns_none(self) -> None:
        """Test that nothing is selected without any API key."""
        assert resolve_provider(None) is None

    def test_unknown_provider_returns_none(self) -> None:
        """Test that an unknown name is rejected."""
        assert resolve_provider("bedrock") is None

    def test_named_provider_without_key(self) -> None:
        """Test that a named provider needs its key."""
        assert resolve_provider("openrouter") is None

    def test_auto_selects_first_configured(self) -> None:
        """Test auto-selection of the first provider with a key."""
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            assert resolve_provider(None) is ANTHROPIC


class TestClients:
    """Tests for downstream clients."""

    def test_echo_client_returns_system_and_user(self) -> None:
        """Test that EchoClient echoes what it was sent."""
        client = EchoClient()
        request = AgentRequest(
            messages=(
                Message(role="system", content="SYS"),
                Message(role="user", content="first"),
                Message(role="assistant", content="ok"),
                Message(role="user", content="second"),
            )
        )

        response = client.send(request)

        assert response.content == "SYS\n\nsecond"
        assert client.requests == [request]

    def test_last_user_message(self) -> None:
        """Test that the most recent user message is found."""
        request = AgentRequest(messages=(Message(role="system", content="s"),))
        assert request.last_user_message() is None

    def test_openai_compatible_client_send(self) -> None:
        """Test that requests are forwarded to chat completions."""
        call = SimpleNamespace(
            id="call_9", function=SimpleNamespace(name="read_file", arguments='{"p": 1}')
        )
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="done", tool_calls=[call]))],
            usage=SimpleNamespace(prompt_tokens=30, completion_tokens=4),
        )
        sdk = MagicMock()
        sdk.chat.completions.create.return_value = completion
        tools: tuple[dict[str, Any], ...] = ({"type": "function", "function": {"name": "read_file"}},)
        client = OpenAICompatibleClient(OPENROUTER, "some/model", client=sdk)

        response = client.send(
            AgentRequest(messages=(Message(role="user", content="hi"),), tools=tools)
        )

        assert response.content == "done"
        assert response.tokens_in == 30
        assert response.tokens_out == 4
        assert response.tool_calls == ({"id": "call_9", "name": "read_file", "arguments": '{"p": 1}'},)
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "some/model"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert kwargs["tools"] == list(tools)

    def test_model_for_client(self) -> None:
        """Test that only the client name and its environment variable are consulted."""
        openrouter_client = OpenAICompatibleClient(OPENROUTER, "m-1")
        assert model_for_client(openrouter_client) is None
        with patch.dict(os.environ, {"OPENROUTER_MODEL": "openai/gpt-4o"}):
            assert model_for_client(openrouter_client) == "openai/gpt-4o"
        assert model_for_client(EchoClient()) is None

        anthropic_client: Any = SimpleNamespace(name="anthropic")
        with patch.dict(os.environ, {"CLAUDE_MODEL": "claude-sonnet-4"}):
            assert model_for_client(anthropic_client) == "claude-sonnet-4"
        assert model_for_client(anthropic_client) is None
