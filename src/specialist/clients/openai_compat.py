"""Client for OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import logging
from typing import Any

from specialist.clients.base import AgentRequest, AgentResponse
from specialist.providers.base import Provider

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
    """Send requests to a provider's chat completions endpoint."""

    def __init__(self, provider: Provider, model: str, client: Any = None) -> None:
        self.provider = provider
        self.model = model
        self._client = client

    @property
    def name(self) -> str:
        return self.provider.name

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self.provider.create_client()
            if self._client is None:
                raise RuntimeError(
                    f"{self.provider.api_key_env} is not set; "
                    f"cannot call {self.provider.name}"
                )
        return self._client

    def send(self, request: AgentRequest) -> AgentResponse:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in request.messages],
        }
        if request.tools:
            kwargs["tools"] = list(request.tools)

        logger.debug("Sending %d messages to %s/%s", len(request.messages), self.name, self.model)
        completion = self._get_client().chat.completions.create(**kwargs)

        choice = completion.choices[0].message
        usage = getattr(completion, "usage", None)
        tool_calls = tuple(
            {
                "id": call.id,
                "name": call.function.name,
                "arguments": call.function.arguments,
            }
            for call in (choice.tool_calls or [])
        )
        return AgentResponse(
            content=choice.content or "",
            tokens_in=getattr(usage, "prompt_tokens", None),
            tokens_out=getattr(usage, "completion_tokens", None),
            tool_calls=tool_calls,
        )
