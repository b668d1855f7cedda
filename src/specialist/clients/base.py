"""Request, response and client interface for downstream model calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class Message:
    """A single role-tagged chat message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class AgentRequest:
    """A call to a downstream client."""

    messages: tuple[Message, ...]
    tools: tuple[dict[str, Any], ...] = ()
    workspace_dir: str | None = None

    def last_user_message(self) -> Message | None:
        """Return the most recent user message, if any."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None

    def with_messages(self, messages: tuple[Message, ...]) -> AgentRequest:
        """Return a copy with the message list replaced."""
        return AgentRequest(
            messages=messages, tools=self.tools, workspace_dir=self.workspace_dir
        )


@dataclass(frozen=True)
class AgentResponse:
    """What a downstream client returns."""

    content: str
    tokens_in: int | None = None
    tokens_out: int | None = None
    cost_usd: float | None = None
    tool_calls: tuple[dict[str, Any], ...] = field(default_factory=tuple)


class AgentClient(Protocol):
    """Protocol every downstream client implements."""

    @property
    def name(self) -> str: ...

    def send(self, request: AgentRequest) -> AgentResponse: ...
