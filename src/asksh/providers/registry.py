"""Provider detection in a fixed priority order."""

from __future__ import annotations

import httpx

from asksh.config.models import AppSettings
from asksh.errors import NoProviderError
from asksh.providers.anthropic import AnthropicProvider
from asksh.providers.base import Provider
from asksh.providers.gemini import GeminiProvider
from asksh.providers.ollama import OllamaProvider
from asksh.providers.openai import LMStudioProvider, OpenAIProvider

PROVIDER_TYPES: tuple[type[Provider], ...] = (
    OpenAIProvider,
    AnthropicProvider,
    GeminiProvider,
    OllamaProvider,
    LMStudioProvider,
)


class ProviderRegistry:
    def __init__(
        self,
        settings: AppSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.providers: list[Provider] = [
            provider_type(settings, transport=transport) for provider_type in PROVIDER_TYPES
        ]

    def list(self) -> list[Provider]:
        return list(self.providers)

    def get(self, name: str) -> Provider:
        for provider in self.providers:
            if provider.name != name:
                continue
            if not provider.is_available():
                raise NoProviderError(f"provider '{name}' is not configured")
            return provider
        raise NoProviderError(f"unknown provider '{name}'")

    def detect(self) -> Provider:
        """Return the forced provider, else the first configured one."""
        if self.settings.general.provider:
            return self.get(self.settings.general.provider)
        for provider in self.providers:
            if provider.is_available():
                return provider
        raise NoProviderError()
