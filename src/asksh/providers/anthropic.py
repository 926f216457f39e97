"""Anthropic Messages API backend."""

from __future__ import annotations

from asksh.errors import ModelNotFoundError, ProviderAPIError
from asksh.providers.base import Provider, error_message, response_field

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(Provider):
    name = "anthropic"
    fallback_models = ("claude-3-5-haiku-20241022", "claude-3-haiku-20240307")

    @property
    def primary_model(self) -> str | None:
        return self.settings.anthropic.model

    def is_available(self) -> bool:
        return bool(self.settings.anthropic.api_key)

    async def complete(self, model: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.settings.anthropic.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        status, body = await self.post_json(ANTHROPIC_MESSAGES_URL, payload, headers)

        error = body.get("error") if isinstance(body, dict) else None
        if status >= 400 or error:
            message = error_message(body)
            error_type = error.get("type") if isinstance(error, dict) else None
            if status == 404 or error_type == "not_found_error" or (
                error_type == "invalid_request_error" and "model" in message
            ):
                raise ModelNotFoundError(model, provider=self.name)
            raise ProviderAPIError(message, provider=self.name, status_code=status)

        return self.require_text(response_field(body, "content", 0, "text"))
