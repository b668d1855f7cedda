"""Base provider definition."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Provider:
    """An OpenAI-compatible model API used for judgment and enrichment calls."""

    name: str
    base_url: str
    api_key_env: str
    install_info: str
    default_headers: dict[str, str] = field(default_factory=dict)

    def api_key(self) -> str | None:
        """Return the API key from the environment, if set."""
        return os.environ.get(self.api_key_env) or None

    def is_configured(self) -> bool:
        """Check if this provider's API key is available."""
        return self.api_key() is not None

    def create_client(self, timeout: float | None = None) -> Any:
        """Create an OpenAI client bound to this provider.

        Returns None when the API key is not set.
        """
        key = self.api_key()
        if key is None:
            return None

        import openai

        return openai.OpenAI(
            api_key=key,
            base_url=self.base_url,
            default_headers=self.default_headers or None,
            timeout=timeout,
            max_retries=0,
        )
