"""Provider capability shared by every model backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from asksh.config.models import AppSettings
from asksh.errors import EmptyResponseError, ModelNotFoundError, ProviderAPIError, ProviderError
from asksh.prompting.templates import build_explain_prompt, build_refine_prompt, clean_command
from asksh.runtime_logging import RuntimeLogger, get_runtime_logger

GENERATE_TEMPERATURE = 0.1
GENERATE_MAX_TOKENS = 500
EXPLAIN_TEMPERATURE = 0.3
EXPLAIN_MAX_TOKENS = 800


@dataclass(slots=True)
class CommandResponse:
    command: str
    model: str
    provider: str


class Provider(ABC):
    """Generate, refine and explain shell commands with one model backend.

    ``generate_command`` walks ``models`` in order and only moves on when a
    model is reported missing; any other failure is raised immediately.
    """

    name: str = ""
    fallback_models: tuple[str, ...] = ()

    def __init__(
        self,
        settings: AppSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.timeout = settings.general.timeout
        self.transport = transport

    @property
    def logger(self) -> RuntimeLogger:
        return get_runtime_logger().bind(provider=self.name)

    @property
    @abstractmethod
    def primary_model(self) -> str | None: ...

    @abstractmethod
    def is_available(self) -> bool: ...

    @abstractmethod
    async def complete(self, model: str, prompt: str, *, temperature: float, max_tokens: int) -> str:
        """Send one prompt to ``model`` and return the raw completion text."""

    @property
    def models(self) -> list[str]:
        ordered: list[str] = []
        for model in (self.primary_model, *self.fallback_models):
            if model and model not in ordered:
                ordered.append(model)
        return ordered

    async def generate_command(self, prompt: str) -> CommandResponse:
        last_error: ProviderError | None = None
        for model in self.models:
            self.logger.debug("provider.try_model", model=model)
            try:
                text = await self.complete(
                    model,
                    prompt,
                    temperature=GENERATE_TEMPERATURE,
                    max_tokens=GENERATE_MAX_TOKENS,
                )
            except ModelNotFoundError as exc:
                self.logger.info("provider.model_not_found", model=model)
                last_error = exc
                continue

            command = clean_command(text)
            if not command:
                raise EmptyResponseError(provider=self.name)
            self.logger.debug("provider.command", model=model, command=command)
            return CommandResponse(command=command, model=model, provider=self.name)

        if last_error is not None:
            raise last_error
        raise ProviderAPIError("no model configured", provider=self.name)

    async def refine_command(self, command: str, refinement: str) -> CommandResponse:
        return await self.generate_command(build_refine_prompt(command, refinement))

    async def explain_command(self, command: str) -> str:
        models = self.models
        if not models:
            raise ProviderAPIError("no model configured", provider=self.name)
        text = await self.complete(
            models[0],
            build_explain_prompt(command),
            temperature=EXPLAIN_TEMPERATURE,
            max_tokens=EXPLAIN_MAX_TOKENS,
        )
        return text.strip()

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> tuple[int, Any]:
        """POST ``payload`` and return ``(status_code, decoded_json)``."""
        self.logger.debug("provider.request", url=_redact(url))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.error("provider.request_failed", error=str(exc))
            raise ProviderAPIError(str(exc), provider=self.name) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderAPIError(
                f"invalid JSON response (HTTP {response.status_code})",
                provider=self.name,
                status_code=response.status_code,
            ) from exc
        self.logger.debug("provider.response", status_code=response.status_code)
        return response.status_code, body

    def require_text(self, text: Any) -> str:
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponseError(provider=self.name)
        return text.strip()


def _redact(url: str) -> str:
    # Gemini passes the key as a query parameter.
    head, separator, _ = url.partition("?key=")
    return f"{head}?key=***" if separator else url


def response_field(body: Any, *path: str | int) -> Any:
    """Walk ``path`` through nested objects and arrays, ``None`` on any shape mismatch."""
    node = body
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or key >= len(node):
                return None
            node = node[key]
        elif isinstance(node, dict):
            node = node.get(key)
        else:
            return None
    return node


def error_message(body: Any) -> str:
    """Best-effort message out of the JSON error shapes providers return."""
    if not isinstance(body, dict):
        return str(body)
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("type") or error)
    if error:
        return str(error)
    return str(body)
