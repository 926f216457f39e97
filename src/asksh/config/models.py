"""Settings schema for asksh."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

ProviderName = Literal["openai", "anthropic", "gemini", "ollama", "lmstudio"]

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-haiku-20241022"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_LMSTUDIO_HOST = "http://localhost:1234"


class GeneralSettings(BaseModel):
    provider: ProviderName | None = Field(default=None, description="Force a provider instead of auto-detection")
    timeout: float = Field(default=30.0, gt=0, le=600, description="HTTP timeout in seconds")
    verbose: bool = Field(default=False)


class HostedProviderSettings(BaseModel):
    api_key: str | None = Field(default=None)
    model: str

    @field_validator("api_key")
    @classmethod
    def blank_key_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


class OpenAISettings(HostedProviderSettings):
    model: str = Field(default=DEFAULT_OPENAI_MODEL)


class AnthropicSettings(HostedProviderSettings):
    model: str = Field(default=DEFAULT_ANTHROPIC_MODEL)


class GeminiSettings(HostedProviderSettings):
    model: str = Field(default=DEFAULT_GEMINI_MODEL)


class LocalProviderSettings(BaseModel):
    host: str
    model: str | None = Field(default=None)

    @field_validator("host")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class OllamaSettings(LocalProviderSettings):
    host: str = Field(default=DEFAULT_OLLAMA_HOST)


class LMStudioSettings(LocalProviderSettings):
    host: str = Field(default=DEFAULT_LMSTUDIO_HOST)


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    anthropic: AnthropicSettings = Field(default_factory=AnthropicSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    lmstudio: LMStudioSettings = Field(default_factory=LMStudioSettings)

    def setting_items(self) -> list[tuple[str, str]]:
        """Flatten key/value pairs, masking API keys."""

        result: list[tuple[str, str]] = []

        def walk(prefix: str, value: object) -> None:
            if isinstance(value, dict):
                for key, nested in value.items():
                    walk(f"{prefix}.{key}" if prefix else key, nested)
            elif prefix.endswith("api_key") and value:
                result.append((prefix, "********"))
            else:
                result.append((prefix, str(value)))

        walk("", self.model_dump())
        return result
