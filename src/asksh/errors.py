"""Exception taxonomy shared across asksh layers."""

from __future__ import annotations


class AskShError(Exception):
    """Base class for recoverable, user-reportable failures."""


class ProviderError(AskShError):
    """A model provider call failed (generate, refine or explain)."""

    def __init__(self, message: str, *, provider: str = "") -> None:
        self.provider = provider
        super().__init__(message)


class NoProviderError(ProviderError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "no API provider configured. Set one of: OPENAI_API_KEY, ANTHROPIC_API_KEY, "
            "GEMINI_API_KEY, OLLAMA_MODEL or LMSTUDIO_MODEL"
        )


class ModelNotFoundError(ProviderError):
    def __init__(self, model: str, *, provider: str = "") -> None:
        self.model = model
        super().__init__(f"model not found: {model}", provider=provider)


class ProviderAPIError(ProviderError):
    def __init__(self, message: str, *, provider: str = "", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"API request failed: {message}", provider=provider)


class EmptyResponseError(ProviderError):
    def __init__(self, *, provider: str = "") -> None:
        super().__init__("empty response from API", provider=provider)


class ExecutionFailure(AskShError):
    """The executed command exited non-zero or its shell could not be launched."""

    def __init__(self, command: str, exit_code: int, reason: str | None = None) -> None:
        self.command = command
        self.exit_code = exit_code
        self.reason = reason
        detail = reason or f"exited with status {exit_code}"
        super().__init__(f"command {detail}")


class InteractionError(RuntimeError):
    """The review terminal UI failed. Fatal: never handled inside the review loop."""
