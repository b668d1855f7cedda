"""OpenRouter provider definition."""

from specialist.providers.base import Provider

OPENROUTER = Provider(
    name="openrouter",
    base_url="https://openrouter.ai/api/v1",
    api_key_env="OPENROUTER_API_KEY",
    install_info="https://openrouter.ai/keys",
)
