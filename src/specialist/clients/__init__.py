"""Downstream clients the adapter can wrap."""

from __future__ import annotations

import os

from specialist.clients.base import AgentClient, AgentRequest, AgentResponse, Message
from specialist.clients.echo import EchoClient
from specialist.clients.openai_compat import OpenAICompatibleClient

__all__ = [
    "AgentClient",
    "AgentRequest",
    "AgentResponse",
    "EchoClient",
    "MODEL_ENV_VARS",
    "Message",
    "OpenAICompatibleClient",
    "model_for_client",
]

# Client name -> environment variable naming the model it runs
MODEL_ENV_VARS: dict[str, str] = {
    "anthropic": "CLAUDE_MODEL",
    "openrouter": "OPENROUTER_MODEL",
}


def model_for_client(client: AgentClient) -> str | None:
    """Return the model named by the environment variable for a client's name."""
    env_var = MODEL_ENV_VARS.get(client.name)
    if env_var is None:
        return None
    return os.environ.get(env_var) or None
