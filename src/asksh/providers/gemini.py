"""Google Gemini generateContent backend."""

from __future__ import annotations

from asksh.errors import ModelNotFoundError, ProviderAPIError
from asksh.providers.base import Provider, error_message, response_field

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key={key}"


class GeminiProvider(Provider):
    name = "gemini"
    fallback_models = ("gemini-2.0-flash-exp", "gemini-1.5-flash", "gemini-pro")

    @property
    def primary_model(self) -> str | None:
        return self.settings.gemini.model

    def is_available(self) -> bool:
        return bool(self.settings.gemini.api_key)

    async def complete(self, model: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        url = GEMINI_URL.format(model=model, key=self.settings.gemini.api_key or "")
        status, body = await self.post_json(url, payload)

        error = body.get("error") if isinstance(body, dict) else None
        if status >= 400 or error:
            message = error_message(body)
            code = error.get("code") if isinstance(error, dict) else None
            if status == 404 or code == 404 or "not found" in message:
                raise ModelNotFoundError(model, provider=self.name)
            raise ProviderAPIError(message, provider=self.name, status_code=status)

        return self.require_text(response_field(body, "candidates", 0, "content", "parts", 0, "text"))
