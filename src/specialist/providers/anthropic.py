"""Anthropic provider definition (OpenAI-compatible endpoint)."""

from specialist.providers.base import Provider

ANTHROPIC = Provider(
    name="anthropic",
    base_url="https://api.anthropic.com/v1",
    api_key_env="ANTHROPIC_API_KEY",
    install_info="https://console.anthropic.com/settings/keys",
    default_headers={"anthropic-version": "2023-06-01"},
)
