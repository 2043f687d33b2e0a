"""Hosted chat-completion provider.

Works with any OpenAI-compatible API through the ``openai`` package.
"""

import re
from typing import Any

from loguru import logger
from openai import AsyncOpenAI

from nudge.config.schema import is_usable_credential
from nudge.providers.base import ResponseProvider, usable_answer

ASSISTANT_INSTRUCTION = "You are a helpful AI assistant. Keep responses concise and conversational."
DEFAULT_SYSTEM_MESSAGE = (
    "You are a helpful, friendly AI assistant. Keep responses concise and conversational."
)


_BEARER_PREFIX = "bearer "
_LEADING_THINK_RE = re.compile(r"^\s*(?:<think\b[^>]*>[\s\S]*?</think>\s*)+", re.IGNORECASE)
_THINK_TAG_RE = re.compile(r"</?think\b[^>]*>", re.IGNORECASE)


def clean_api_key(value: str | None) -> str:
    """Raw secret only; the SDK adds its own ``Bearer`` header."""
    key = (value or "").strip()
    if key[:len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
        key = key[len(_BEARER_PREFIX):].strip()
    return key


def strip_think_prefix(text: str | None) -> str | None:
    """Drop reasoning blocks at the start of a reply.

    A reply that is nothing but a think block keeps its inner text.
    """
    if not isinstance(text, str):
        return text
    match = _LEADING_THINK_RE.match(text)
    if match is None:
        return text
    rest = text[match.end():].lstrip()
    return rest or _THINK_TAG_RE.sub("", text).strip()


def build_system_message(personality_prompt: str) -> str:
    if personality_prompt:
        return f"{personality_prompt} {ASSISTANT_INSTRUCTION}"
    return DEFAULT_SYSTEM_MESSAGE


class OpenAIProvider(ResponseProvider):
    """Single chat-completion request; the first choice is the answer."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.7,
        max_tokens: int = 150,
        client: Any | None = None,
        timeout: float | None = None,
    ):
        """Initialize the hosted chat provider.

        Args:
            api_key: API key; empty or a placeholder value disables the provider.
            api_base: API base URL. The SDK default is used if not set.
            model: Chat model identifier.
            temperature: Sampling temperature.
            max_tokens: Maximum response tokens.
            client: Pre-built async client (tests inject a double here).
            timeout: Request timeout in seconds; None leaves it to the SDK.
        """
        self.api_key = clean_api_key(api_key)
        self.api_base = api_base
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    def is_configured(self) -> bool:
        return self._client is not None or is_usable_credential(self.api_key)

    def _get_client(self) -> Any:
        # Built lazily: AsyncOpenAI refuses to construct without a key.
        if self._client is None:
            kwargs: dict[str, Any] = {"api_key": self.api_key, "max_retries": 0}
            if self.api_base:
                kwargs["base_url"] = self.api_base
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def try_respond(self, message: str, personality_prompt: str) -> str | None:
        if not self.is_configured():
            return None

        messages = [
            {"role": "system", "content": build_system_message(personality_prompt)},
            {"role": "user", "content": message},
        ]

        try:
            logger.debug("Trying hosted chat model {}", self.model)
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.warning("Hosted chat request failed: {}", e)
            return None

        answer = usable_answer(strip_think_prefix(content))
        if answer:
            logger.info("Reply from hosted chat model {}", self.model)
        return answer
