"""Client that answers with the request it received."""

from __future__ import annotations

from specialist.clients.base import AgentRequest, AgentResponse


class EchoClient:
    """Offline client returning the system and last user message verbatim."""

    name = "echo"

    def __init__(self) -> None:
        self.requests: list[AgentRequest] = []

    def send(self, request: AgentRequest) -> AgentResponse:
        self.requests.append(request)
        parts = [m.content for m in request.messages if m.role == "system"]
        last = request.last_user_message()
        if last is not None:
            parts.append(last.content)
        return AgentResponse(content="\n\n".join(parts), tokens_in=0, tokens_out=0)
