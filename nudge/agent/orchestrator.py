"""
Reply orchestration across providers in fixed priority order.

Each call walks the provider chain (local → hosted chat → inference hub)
and returns the first usable answer. Providers without configuration are
skipped. A provider that needs a credential check is probed once per
orchestrator; a failed probe keeps it out of every later call. When nothing
answers, the rule-based responder produces the reply, so
``generate_response`` always returns a non-empty string.

Calls run strictly one provider after another. No timeouts are imposed here;
callers that need bounded latency wrap the call in their own deadline.
"""

from enum import Enum
from typing import Any, Sequence

import httpx
from loguru import logger
from pydantic import ValidationError

from nudge.agent.responder import RuleResponder
from nudge.config.schema import Config
from nudge.personality.prompts import PersonalitySettings, combined_prompt
from nudge.providers.base import ResponseProvider
from nudge.providers.hub_provider import HubProvider
from nudge.providers.local_provider import LocalProvider
from nudge.providers.openai_provider import OpenAIProvider


class CredentialHealth(str, Enum):
    """Cached outcome of a provider's one-time credential probe."""
    UNTESTED = "untested"
    WORKING = "working"
    FAILING = "failing"


def coerce_personality(value: Any) -> PersonalitySettings:
    """Accept settings, a plain mapping, or nothing; bad input means defaults."""
    if isinstance(value, PersonalitySettings):
        return value
    if value is None:
        return PersonalitySettings()
    try:
        return PersonalitySettings.model_validate(value)
    except ValidationError:
        logger.warning("Unusable personality settings {!r}, using defaults", value)
        return PersonalitySettings()


class Orchestrator:
    """Priority-ordered provider chain with a rule-based terminal fallback."""

    def __init__(
        self,
        providers: Sequence[ResponseProvider] | None = None,
        responder: RuleResponder | None = None,
    ):
        self.providers: list[ResponseProvider] = list(providers or [])
        self.responder = responder or RuleResponder()
        # Per instance, so separate orchestrators never share probe results.
        self._credential_health: dict[str, CredentialHealth] = {
            p.name: CredentialHealth.UNTESTED for p in self.providers if p.probes_credentials
        }

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        responder: RuleResponder | None = None,
    ) -> "Orchestrator":
        """Build the standard local → hosted → hub chain from configuration."""
        config = config or Config()
        local = config.providers.local
        hosted = config.providers.openai
        hub = config.providers.hub
        providers: list[ResponseProvider] = [
            LocalProvider(
                endpoints=local.endpoints,
                model=local.model,
                fallback_model=local.fallback_model,
                temperature=local.temperature,
                max_tokens=local.max_tokens,
                transport=transport,
            ),
            OpenAIProvider(
                api_key=hosted.api_key,
                api_base=hosted.api_base,
                model=hosted.model,
                temperature=hosted.temperature,
                max_tokens=hosted.max_tokens,
            ),
            HubProvider(
                token=hub.token,
                api_base=hub.api_base,
                whoami_url=hub.whoami_url,
                models=hub.models,
                transport=transport,
            ),
        ]
        return cls(providers=providers, responder=responder)

    def credential_health(self, provider_name: str = "hub") -> CredentialHealth:
        return self._credential_health.get(provider_name, CredentialHealth.UNTESTED)

    async def _credentials_ok(self, provider: ResponseProvider) -> bool:
        state = self._credential_health.get(provider.name, CredentialHealth.UNTESTED)
        if state is CredentialHealth.UNTESTED:
            # Concurrent first calls may both probe; either result is valid.
            try:
                works = await provider.check_credentials()
            except Exception as e:
                logger.warning("Credential probe for {} raised: {}", provider.name, e)
                works = False
            state = CredentialHealth.WORKING if works else CredentialHealth.FAILING
            self._credential_health[provider.name] = state
            logger.info("Credential probe for {}: {}", provider.name, state.value)
        return state is CredentialHealth.WORKING

    async def _attempt(
        self, provider: ResponseProvider, message: str, personality_prompt: str
    ) -> str | None:
        try:
            answer = await provider.try_respond(message, personality_prompt)
        except Exception as e:
            logger.warning("Provider {} raised instead of returning None: {}", provider.name, e)
            return None
        if isinstance(answer, str) and answer.strip():
            return answer.strip()
        return None

    async def generate_response(self, message: str, personality: Any = None) -> str:
        """Produce a reply to ``message`` in the given personality.

        Never raises; always returns a non-empty string.
        """
        settings = coerce_personality(personality)
        message = message if isinstance(message, str) else str(message or "")
        personality_prompt = combined_prompt(settings.intensity_level, settings.style_type)

        logger.debug(
            "Generating reply (intensity={}, style={})",
            settings.intensity_level, settings.style_type,
        )

        for provider in self.providers:
            if not provider.is_configured():
                logger.debug("Skipping {}: not configured", provider.name)
                continue
            if provider.probes_credentials and not await self._credentials_ok(provider):
                logger.debug("Skipping {}: credentials not working", provider.name)
                continue

            answer = await self._attempt(provider, message, personality_prompt)
            if answer:
                return answer

        logger.info("All providers failed, using rule-based reply")
        return self.responder.smart_response(message, settings)

    def health(self) -> dict[str, Any]:
        """Describe which providers would be tried and the probe state."""
        providers = []
        for provider in self.providers:
            entry: dict[str, Any] = {
                "name": provider.name,
                "configured": provider.is_configured(),
            }
            if provider.probes_credentials:
                entry["credentials"] = self.credential_health(provider.name).value
            endpoints = getattr(provider, "endpoints", None)
            if endpoints is not None:
                entry["endpoints"] = list(endpoints)
            providers.append(entry)
        return {"providers": providers, "fallback": "rules"}
