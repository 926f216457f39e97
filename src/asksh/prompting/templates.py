"""Prompt text for generate/refine/explain and model output cleanup."""

from __future__ import annotations

import re

from asksh.prompting.context import EnvironmentContext

_FENCE = re.compile(r"^```[\w+-]*\s*\n?(?P<body>.*?)\n?```$", re.DOTALL)


def build_prompt(instruction: str, context: EnvironmentContext) -> str:
    return f"""You are a shell command generator. Convert the user's natural language instruction into a shell command.

Rules:
- Return ONLY the shell command, nothing else
- No explanations, no markdown formatting, no code block markers
- No backticks, no ```bash, no comments
- Just the raw executable command(s)
- Use pipes (|) and operators (&&, ||) as needed
- If multiple commands are needed, combine them with && or ;
- Use the files and recent commands below only when they are relevant

{context.format()}

Instruction: {instruction}

Command:"""


def build_refine_prompt(command: str, refinement: str) -> str:
    return f"""You are a shell command generator. Modify the given command based on the user's refinement request.

Current command: {command}

User's refinement request: {refinement}

Rules:
- Return ONLY the modified shell command, nothing else
- No explanations, no markdown formatting, no code block markers
- Just the raw executable command

Modified command:"""


def build_explain_prompt(command: str) -> str:
    return f"""Explain this shell command in simple terms. Break down each flag and option.
Keep it concise but educational. Format as a brief explanation followed by a breakdown of flags.

Command: {command}

Explanation:"""


def clean_command(text: str) -> str:
    """Strip markdown fences, inline backticks and a leading ``$ `` prompt."""
    cleaned = text.strip()
    fenced = _FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group("body").strip()
    if len(cleaned) >= 2 and cleaned.startswith("`") and cleaned.endswith("`"):
        cleaned = cleaned.strip("`").strip()
    if cleaned.startswith("$ "):
        cleaned = cleaned[2:].lstrip()
    return cleaned
