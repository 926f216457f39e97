"""Load/save application settings and overlay the environment."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from asksh.config.models import AppSettings
from asksh.paths import settings_path
from asksh.runtime_logging import get_runtime_logger

# Environment variable -> dotted settings key. Values from the environment
# win over the settings file but are never written back to it.
ENVIRONMENT_KEYS: dict[str, str] = {
    "OPENAI_API_KEY": "openai.api_key",
    "ANTHROPIC_API_KEY": "anthropic.api_key",
    "GEMINI_API_KEY": "gemini.api_key",
    "OLLAMA_MODEL": "ollama.model",
    "OLLAMA_HOST": "ollama.host",
    "LMSTUDIO_MODEL": "lmstudio.model",
    "LMSTUDIO_HOST": "lmstudio.host",
    "ASKSH_PROVIDER": "general.provider",
}


class SettingsStore:
    """Settings JSON on disk. Environment values are layered on separately."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings_path()

    def load(self) -> AppSettings:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return self._reset()

        try:
            return AppSettings.model_validate_json(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValidationError) as exc:
            # Keep the unreadable file next to the fresh one for inspection.
            backup = self.path.with_suffix(".corrupt.json")
            backup.write_bytes(raw)
            get_runtime_logger().warning("settings.corrupt", path=str(self.path), backup=str(backup), error=str(exc))
            return self._reset()

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.model_dump(mode="json"), indent=2, sort_keys=True)
        self.path.write_text(f"{payload}\n", encoding="utf-8")

    def update(self, dotted_key: str, value: Any) -> AppSettings:
        updated = _set_dotted(self.load(), dotted_key, value)
        self.save(updated)
        return updated

    def _reset(self) -> AppSettings:
        settings = AppSettings()
        self.save(settings)
        return settings

    def save_working_model(self, provider: str, model: str) -> AppSettings:
        """Remember the model that last answered so the next run tries it first."""
        return self.update(f"{provider}.model", model)


def apply_environment(settings: AppSettings, environ: Mapping[str, str] | None = None) -> AppSettings:
    env = os.environ if environ is None else environ
    result = settings
    for variable, dotted_key in ENVIRONMENT_KEYS.items():
        value = env.get(variable)
        if value:
            result = _set_dotted(result, dotted_key, value)
    return result


def _set_dotted(settings: AppSettings, dotted_key: str, value: Any) -> AppSettings:
    data = settings.model_dump()

    keys = dotted_key.split(".")
    cursor: dict[str, Any] = data
    for key in keys[:-1]:
        nested = cursor.get(key)
        if not isinstance(nested, dict):
            raise KeyError(f"Unknown setting path: {dotted_key}")
        cursor = nested
    if keys[-1] not in cursor:
        raise KeyError(f"Unknown setting path: {dotted_key}")
    cursor[keys[-1]] = value

    return AppSettings.model_validate(data)
