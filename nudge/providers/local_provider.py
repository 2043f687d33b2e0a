"""Local text-generation provider (Ollama-compatible /api/generate endpoints)."""

from typing import Any

import httpx
from loguru import logger

from nudge.providers.base import HTTPProvider, usable_answer


class LocalProvider(HTTPProvider):
    """
    Tries each configured endpoint in order with the primary model.

    A 404 from an endpoint usually means the model is not pulled there, so
    that endpoint gets exactly one more request with the fallback model
    before moving on. Any other failure advances to the next endpoint.
    """

    name = "local"

    def __init__(
        self,
        endpoints: list[str],
        model: str = "llama3.2",
        fallback_model: str | None = "llama3",
        temperature: float = 0.7,
        max_tokens: int = 150,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        super().__init__(transport=transport, timeout=timeout)
        self.endpoints = list(endpoints)
        self.model = model
        self.fallback_model = fallback_model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def is_configured(self) -> bool:
        return bool(self.endpoints)

    def _request_body(self, model: str, prompt: str) -> dict[str, Any]:
        return {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
        }

    @staticmethod
    def build_prompt(message: str, personality_prompt: str) -> str:
        if not personality_prompt:
            return message
        return f"{personality_prompt}\n\nUser message: {message}\n\nResponse:"

    @staticmethod
    def _extract_answer(response: httpx.Response) -> str | None:
        data = response.json()
        if not isinstance(data, dict):
            return None
        return usable_answer(data.get("response"))

    async def try_respond(self, message: str, personality_prompt: str) -> str | None:
        prompt = self.build_prompt(message, personality_prompt)

        async with self._client() as client:
            for endpoint in self.endpoints:
                try:
                    logger.debug("Trying local endpoint {} ({})", endpoint, self.model)
                    response = await client.post(
                        endpoint, json=self._request_body(self.model, prompt)
                    )

                    if response.status_code == 404 and self.fallback_model:
                        logger.info(
                            "Model {} not found at {}, retrying with {}",
                            self.model, endpoint, self.fallback_model,
                        )
                        response = await client.post(
                            endpoint, json=self._request_body(self.fallback_model, prompt)
                        )

                    if not response.is_success:
                        logger.warning(
                            "Local endpoint {} returned HTTP {}", endpoint, response.status_code
                        )
                        continue

                    answer = self._extract_answer(response)
                    if answer:
                        logger.info("Reply from local endpoint {}", endpoint)
                        return answer
                    logger.debug("Local endpoint {} returned an empty answer", endpoint)

                except (httpx.HTTPError, ValueError) as e:
                    logger.warning("Local endpoint {} failed: {}", endpoint, e)
                    continue

        return None
