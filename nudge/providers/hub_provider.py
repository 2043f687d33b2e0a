"""Hosted inference-hub provider with several candidate models."""

from typing import Any

import httpx
from loguru import logger

from nudge.config.schema import is_usable_credential
from nudge.providers.base import HTTPProvider, usable_answer

DEFAULT_MODELS = [
    "microsoft/DialoGPT-medium",
    "facebook/blenderbot-400M-distill",
    "distilgpt2",
]

# Answers this long or longer are almost always degenerate echoes.
MAX_ANSWER_CHARS = 300

_CONVERSATIONAL_MARKERS = ("dialogpt",)
_WARMING_MARKERS = ("loading", "warming up")


def is_conversational(model: str) -> bool:
    return any(marker in model.lower() for marker in _CONVERSATIONAL_MARKERS)


def build_request_body(model: str, text: str) -> dict[str, Any]:
    """Conversation-history shape for dialogue models, plain generation otherwise."""
    if is_conversational(model):
        return {
            "inputs": {
                "past_user_inputs": [],
                "generated_responses": [],
                "text": text,
            },
            "parameters": {
                "max_length": 1000,
                "min_length": 1,
                "do_sample": True,
                "temperature": 0.7,
            },
        }
    return {
        "inputs": text,
        "parameters": {
            "max_length": 100,
            "min_length": 1,
            "do_sample": True,
            "temperature": 0.7,
        },
    }


def extract_generated_text(data: Any, *echoes: str) -> str:
    """Pull the answer out of any of the hub's response shapes.

    Generated text usually repeats the input, so each of ``echoes`` is
    removed once before trimming.
    """
    if isinstance(data, dict):
        conversation = data.get("conversation")
        if isinstance(conversation, dict):
            responses = conversation.get("generated_responses")
            if isinstance(responses, list) and responses and isinstance(responses[0], str):
                return responses[0].strip()
        text = data.get("generated_text")
    elif isinstance(data, list) and data and isinstance(data[0], dict):
        text = data[0].get("generated_text")
    else:
        return ""

    if not isinstance(text, str):
        return ""
    text = text.strip()
    for echo in echoes:
        if echo:
            text = text.replace(echo, "", 1)
    return text.strip()


class HubProvider(HTTPProvider):
    """Walks the candidate models in order and returns the first sane answer."""

    name = "hub"
    probes_credentials = True

    def __init__(
        self,
        token: str | None = None,
        api_base: str = "https://api-inference.huggingface.co/models",
        whoami_url: str = "https://huggingface.co/api/whoami-v2",
        models: list[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        super().__init__(transport=transport, timeout=timeout)
        self.token = (token or "").strip()
        self.api_base = api_base.rstrip("/")
        self.whoami_url = whoami_url
        self.models = list(models) if models is not None else list(DEFAULT_MODELS)

    def is_configured(self) -> bool:
        return is_usable_credential(self.token)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def check_credentials(self) -> bool:
        try:
            async with self._client(self._auth_headers()) as client:
                response = await client.get(self.whoami_url)
        except httpx.HTTPError as e:
            logger.warning("Inference hub token check failed: {}", e)
            return False
        logger.info("Inference hub token check: HTTP {}", response.status_code)
        return response.is_success

    @staticmethod
    def build_input(message: str, personality_prompt: str) -> str:
        if not personality_prompt:
            return message
        return f"{personality_prompt}\n\nUser: {message}"

    async def try_respond(self, message: str, personality_prompt: str) -> str | None:
        text = self.build_input(message, personality_prompt)

        async with self._client(self._auth_headers()) as client:
            for model in self.models:
                url = f"{self.api_base}/{model}"
                try:
                    logger.debug("Trying inference hub model {}", model)
                    response = await client.post(url, json=build_request_body(model, text))

                    if not response.is_success:
                        body = response.text.lower()
                        if response.status_code == 503 or any(m in body for m in _WARMING_MARKERS):
                            logger.info("Hub model {} is still loading, skipping", model)
                        else:
                            logger.warning("Hub model {} returned HTTP {}", model, response.status_code)
                        continue

                    raw = extract_generated_text(response.json(), text, message)
                    answer = usable_answer(raw, max_length=MAX_ANSWER_CHARS)
                    if answer:
                        logger.info("Reply from inference hub model {}", model)
                        return answer
                    logger.debug("Hub model {} gave no usable answer", model)

                except (httpx.HTTPError, ValueError) as e:
                    logger.warning("Hub model {} failed: {}", model, e)
                    continue

        return None
