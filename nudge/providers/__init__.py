"""Reply provider abstraction module."""

from nudge.providers.base import ResponseProvider
from nudge.providers.hub_provider import HubProvider
from nudge.providers.local_provider import LocalProvider
from nudge.providers.openai_provider import OpenAIProvider

__all__ = ["ResponseProvider", "LocalProvider", "OpenAIProvider", "HubProvider"]
