"""Base interface for reply providers."""

from abc import ABC, abstractmethod

import httpx


class ResponseProvider(ABC):
    """
    One external text-generation backend.

    Implementations turn (message, personality prompt) into a single answer
    string, or ``None`` when they have nothing usable so the caller can move
    on to the next provider. ``try_respond`` must not raise.
    """

    name: str = "provider"

    # Providers that need a one-time credential check before first use.
    probes_credentials: bool = False

    def is_configured(self) -> bool:
        """Whether the provider has what it needs to be tried at all."""
        return True

    async def check_credentials(self) -> bool:
        """Lightweight identity check; only called when ``probes_credentials``."""
        return True

    @abstractmethod
    async def try_respond(self, message: str, personality_prompt: str) -> str | None:
        """Return a trimmed answer, or None to fall through to the next provider."""
        pass


class HTTPProvider(ResponseProvider):
    """Provider talking plain HTTP through a short-lived ``httpx.AsyncClient``."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        # No timeout by default: callers needing bounded latency wrap the
        # whole orchestration call in their own deadline.
        self._transport = transport
        self._timeout = timeout

    def _client(self, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            headers=headers,
        )


def usable_answer(text: str | None, max_length: int | None = None) -> str | None:
    """Trim ``text`` and accept it only if longer than one character.

    With ``max_length`` set, answers of that length or more are rejected too.
    """
    if not isinstance(text, str):
        return None
    answer = text.strip()
    if len(answer) <= 1:
        return None
    if max_length is not None and len(answer) >= max_length:
        return None
    return answer
