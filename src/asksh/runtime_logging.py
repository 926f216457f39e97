"""JSONL event log for one ``x`` invocation.

Every line is a JSON object with ``ts``, ``level``, ``event`` (a dotted name
such as ``review.transition``), ``run`` (shared by all lines written by the
same process) and whatever fields the caller attached. Command text is only
ever passed at debug level by callers.
"""

from __future__ import annotations

import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

from asksh.paths import log_path

LogLevel = Literal["off", "error", "warning", "info", "debug"]

_SEVERITY: dict[str, int] = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
    "off": 100,
}
_ALIASES = {"warn": "warning", "none": "off", "disabled": "off", "0": "off"}

# Rotated to ``<name>.1`` once the sink grows past this size.
MAX_LOG_BYTES = 1_000_000

RUN_ID = uuid.uuid4().hex[:8]

_runtime_logger: "RuntimeLogger | None" = None


def parse_level(value: str | None, default: LogLevel = "warning") -> LogLevel:
    if not value:
        return default
    name = value.strip().lower()
    name = _ALIASES.get(name, name)
    return name if name in _SEVERITY else default  # type: ignore[return-value]


def resolve_log_file(path: str | Path | None) -> Path:
    return log_path() if path is None else Path(path).expanduser().resolve()


@dataclass(slots=True)
class RuntimeLogger:
    level: LogLevel
    sink_path: Path
    context: dict[str, Any] = field(default_factory=dict)
    max_bytes: int = MAX_LOG_BYTES
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def enabled(self, level: str) -> bool:
        threshold = _SEVERITY.get(self.level, _SEVERITY["warning"])
        if threshold >= _SEVERITY["off"]:
            return False
        return _SEVERITY.get(level, _SEVERITY["debug"]) >= threshold

    def bind(self, **fields: Any) -> "RuntimeLogger":
        """Child logger that adds ``fields`` to every line and shares the sink."""
        return RuntimeLogger(
            level=self.level,
            sink_path=self.sink_path,
            context={**self.context, **fields},
            max_bytes=self.max_bytes,
            _lock=self._lock,
        )

    def log(self, level: str, event: str, **fields: Any) -> None:
        if not self.enabled(level):
            return
        record = {
            **self.context,
            **fields,
            "ts": datetime.now(UTC).isoformat(),
            "level": level,
            "event": event,
            "run": RUN_ID,
            "pid": os.getpid(),
        }
        line = json.dumps(record, sort_keys=True, default=str)
        with self._lock:
            self.sink_path.parent.mkdir(parents=True, exist_ok=True)
            self._rotate_if_full()
            with self.sink_path.open("a", encoding="utf-8") as handle:
                handle.write(f"{line}\n")

    def _rotate_if_full(self) -> None:
        try:
            size = self.sink_path.stat().st_size
        except FileNotFoundError:
            return
        if size >= self.max_bytes:
            self.sink_path.replace(self.sink_path.with_name(f"{self.sink_path.name}.1"))

    def debug(self, event: str, **fields: Any) -> None:
        self.log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log("error", event, **fields)


def _disabled() -> RuntimeLogger:
    return RuntimeLogger(level="off", sink_path=Path(os.devnull))


def configure_runtime_logging(
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> RuntimeLogger:
    """Install the process-wide logger.

    Explicit arguments win over ``ASKSH_LOG_LEVEL`` / ``ASKSH_LOG_FILE``.
    """
    global _runtime_logger

    effective_level = parse_level(level or os.getenv("ASKSH_LOG_LEVEL"))
    if effective_level == "off":
        _runtime_logger = _disabled()
        return _runtime_logger

    sink = resolve_log_file(log_file or os.getenv("ASKSH_LOG_FILE"))
    _runtime_logger = RuntimeLogger(level=effective_level, sink_path=sink)
    _runtime_logger.info("logging.configured", configured_level=effective_level, sink_path=str(sink))
    return _runtime_logger


def get_runtime_logger() -> RuntimeLogger:
    if _runtime_logger is None:
        return configure_runtime_logging()
    return _runtime_logger
