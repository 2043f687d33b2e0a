"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in sample .env files; treated the same as an empty credential.
PLACEHOLDER_CREDENTIALS = frozenset({
    "your_openai_api_key_here",
    "your_hugging_face_token_here",
})


def is_usable_credential(value: str | None) -> bool:
    """True when a credential is set and is not a known placeholder."""
    token = (value or "").strip()
    return bool(token) and token not in PLACEHOLDER_CREDENTIALS


class LocalProviderConfig(BaseModel):
    """Local text-generation service (Ollama-style /api/generate)."""
    endpoints: list[str] = Field(
        default_factory=lambda: ["http://localhost:11434/api/generate"]
    )
    model: str = "llama3.2"
    fallback_model: str = "llama3"  # Retried once on HTTP 404 for the primary model
    temperature: float = 0.7
    max_tokens: int = 150


class OpenAIProviderConfig(BaseModel):
    """Hosted chat-completion service."""
    api_key: str = ""
    api_base: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    max_tokens: int = 150


class HubProviderConfig(BaseModel):
    """Hosted inference hub with several candidate models."""
    token: str = ""
    api_base: str = "https://api-inference.huggingface.co/models"
    whoami_url: str = "https://huggingface.co/api/whoami-v2"
    models: list[str] = Field(
        default_factory=lambda: [
            "microsoft/DialoGPT-medium",
            "facebook/blenderbot-400M-distill",
            "distilgpt2",
        ]
    )


class ProvidersConfig(BaseModel):
    """Configuration for reply providers, in priority order."""
    local: LocalProviderConfig = Field(default_factory=LocalProviderConfig)
    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
    hub: HubProviderConfig = Field(default_factory=HubProviderConfig)


class Config(BaseSettings):
    """Root configuration for nudge."""
    model_config = SettingsConfigDict(env_prefix="NUDGE_", env_nested_delimiter="__")

    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    def has_openai(self) -> bool:
        return is_usable_credential(self.providers.openai.api_key)

    def has_hub(self) -> bool:
        return is_usable_credential(self.providers.hub.token)
