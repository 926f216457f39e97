"""Gather environment context for the generation prompt."""

from __future__ import annotations

import os
import re
import sys
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

MAX_FILE_LINES = 50
MAX_HISTORY_LINES = 5
MAX_FILE_SIZE = 8192
MAX_FILES_PER_PROMPT = 3
MAX_LISTING_ENTRIES = 20

_FILE_PATTERNS = (
    re.compile(
        r"\b([\w.-]+\.(?:go|py|js|ts|jsx|tsx|rs|c|cpp|h|hpp|java|rb|php|sh|bash|zsh|yaml|yml"
        r"|json|xml|html|css|scss|md|txt|sql|env|toml|ini|cfg|conf))\b"
    ),
    re.compile(r"\b([\w./]+/[\w.-]+)\b"),
)
_WORD_PUNCTUATION = ",.;:!?\"'()[]{}"


@dataclass(slots=True)
class EnvironmentContext:
    current_dir: str
    os_name: str
    shell: str
    directory_listing: list[str] = field(default_factory=list)
    referenced_files: dict[str, str] = field(default_factory=dict)
    shell_history: list[str] = field(default_factory=list)

    def format(self) -> str:
        lines = [
            "=== SYSTEM CONTEXT ===",
            f"Current Directory: {self.current_dir}",
            f"Operating System: {self.os_name}",
            f"Shell: {self.shell}",
        ]

        if self.directory_listing:
            lines.append("")
            lines.append("=== FILES IN CURRENT DIRECTORY ===")
            for name in self.directory_listing[:MAX_LISTING_ENTRIES]:
                lines.append(f"  {name}")
            hidden = len(self.directory_listing) - MAX_LISTING_ENTRIES
            if hidden > 0:
                lines.append(f"  ... and {hidden} more files")

        if self.shell_history:
            lines.append("")
            lines.append("=== RECENT COMMANDS (for context) ===")
            for index, command in enumerate(self.shell_history, start=1):
                lines.append(f"  {index}. {command}")

        for filename, content in self.referenced_files.items():
            lines.append("")
            lines.append(f"=== CONTENT OF '{filename}' ===")
            lines.append(content)

        return "\n".join(lines)


def os_name() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if os.name == "nt":
        return "windows"
    return sys.platform


def shell_name(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    shell = env.get("SHELL", "")
    if not shell:
        return "unknown"
    return Path(shell).name


def gather_context(
    instruction: str,
    *,
    cwd: Path | None = None,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> EnvironmentContext:
    root = cwd or Path.cwd()
    shell = shell_name(environ)
    listing = directory_listing(root)
    return EnvironmentContext(
        current_dir=str(root),
        os_name=os_name(),
        shell=shell,
        directory_listing=listing,
        referenced_files=referenced_files(instruction, root, listing),
        shell_history=shell_history(shell, home or Path.home()),
    )


def directory_listing(root: Path) -> list[str]:
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name)
    except OSError:
        return []

    names: list[str] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        names.append(f"{entry.name}/" if entry.is_dir() else entry.name)
    return names


def referenced_files(instruction: str, root: Path, listing: list[str]) -> dict[str, str]:
    """Read files the instruction mentions, in order of first mention."""
    existing = {name.rstrip("/") for name in listing}
    found: list[str] = []

    def consider(candidate: str) -> None:
        if candidate in found:
            return
        if candidate in existing:
            found.append(candidate)
            return
        path = (root / candidate).resolve()
        try:
            path.relative_to(root.resolve())
        except ValueError:
            return
        if path.is_file():
            found.append(candidate)

    for pattern in _FILE_PATTERNS:
        for match in pattern.finditer(instruction):
            consider(match.group(1))
    for word in instruction.split():
        word = word.strip(_WORD_PUNCTUATION)
        if word in existing:
            consider(word)

    files: dict[str, str] = {}
    for name in found:
        if len(files) >= MAX_FILES_PER_PROMPT:
            break
        content = read_file_excerpt(root / name)
        if content:
            files[name] = content
    return files


def read_file_excerpt(path: Path) -> str | None:
    try:
        if not path.is_file():
            return None
        size = path.stat().st_size
        if size > MAX_FILE_SIZE:
            return f"[File too large: {size} bytes, contents omitted]"
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            lines: list[str] = []
            for line in handle:
                if len(lines) >= MAX_FILE_LINES:
                    lines.append(f"... [truncated at {MAX_FILE_LINES} lines]")
                    break
                lines.append(line.rstrip("\n"))
    except OSError:
        return None
    return "\n".join(lines)


def history_file(shell: str, home: Path) -> Path:
    if shell == "zsh":
        return home / ".zsh_history"
    if shell == "bash":
        return home / ".bash_history"
    if shell == "fish":
        return home / ".local" / "share" / "fish" / "fish_history"
    bash_history = home / ".bash_history"
    if bash_history.exists():
        return bash_history
    return home / ".zsh_history"


def shell_history(shell: str, home: Path, limit: int = MAX_HISTORY_LINES) -> list[str]:
    commands: deque[str] = deque(maxlen=limit)
    try:
        with history_file(shell, home).open(encoding="utf-8", errors="replace") as handle:
            for raw in handle:
                command = _history_command(shell, raw.rstrip("\n"))
                if command:
                    commands.append(command)
    except OSError:
        return []
    return list(commands)


def _history_command(shell: str, line: str) -> str | None:
    # zsh extended history: ": 1700000000:0;command"
    if line.startswith(": ") and ";" in line:
        line = line.split(";", 1)[1]
    # fish: "- cmd: command" followed by indented metadata
    elif shell == "fish":
        if not line.startswith("- cmd: "):
            return None
        line = line[len("- cmd: ") :]
    line = line.strip()
    if not line or line.startswith("x "):
        return None
    return line
