"""Local Ollama chat backend."""

from __future__ import annotations

from asksh.errors import ModelNotFoundError, ProviderAPIError
from asksh.providers.base import Provider, error_message, response_field


class OllamaProvider(Provider):
    name = "ollama"

    @property
    def primary_model(self) -> str | None:
        return self.settings.ollama.model

    def is_available(self) -> bool:
        return bool(self.settings.ollama.model)

    async def complete(self, model: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        status, body = await self.post_json(f"{self.settings.ollama.host}/api/chat", payload)

        error = body.get("error") if isinstance(body, dict) else None
        if status >= 400 or error:
            message = error_message(body)
            if status == 404 or "not found" in message:
                raise ModelNotFoundError(model, provider=self.name)
            raise ProviderAPIError(message, provider=self.name, status_code=status)

        return self.require_text(response_field(body, "message", "content"))
