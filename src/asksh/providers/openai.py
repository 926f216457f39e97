"""OpenAI chat completions, plus OpenAI-compatible local servers."""

from __future__ import annotations

from typing import Any

from asksh.errors import ModelNotFoundError, ProviderAPIError
from asksh.providers.base import Provider, error_message, response_field

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(Provider):
    name = "openai"
    fallback_models = ("gpt-4o-mini", "gpt-3.5-turbo")

    @property
    def primary_model(self) -> str | None:
        return self.settings.openai.model

    @property
    def endpoint(self) -> str:
        return OPENAI_CHAT_URL

    def is_available(self) -> bool:
        return bool(self.settings.openai.api_key)

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.openai.api_key}"}

    async def complete(self, model: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        status, body = await self.post_json(self.endpoint, payload, self.headers())
        self._raise_for_error(model, status, body)

        return self.require_text(response_field(body, "choices", 0, "message", "content"))

    def _raise_for_error(self, model: str, status: int, body: Any) -> None:
        error = body.get("error") if isinstance(body, dict) else None
        if status < 400 and not error:
            return

        message = error_message(body)
        code = error.get("code") if isinstance(error, dict) else None
        if status == 404 or code == "model_not_found" or "does not exist" in message:
            raise ModelNotFoundError(model, provider=self.name)
        raise ProviderAPIError(message, provider=self.name, status_code=status)


class LMStudioProvider(OpenAIProvider):
    """LM Studio's local server speaks the OpenAI chat completions protocol."""

    name = "lmstudio"
    fallback_models = ()

    @property
    def primary_model(self) -> str | None:
        return self.settings.lmstudio.model

    @property
    def endpoint(self) -> str:
        return f"{self.settings.lmstudio.host}/v1/chat/completions"

    def is_available(self) -> bool:
        return bool(self.settings.lmstudio.model)

    def headers(self) -> dict[str, str]:
        return {}
