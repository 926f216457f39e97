"""Rule-based risk classifier for generated shell commands.

Commands are trimmed and lowercased before matching, so every pattern below is
written in lowercase. Display and execution always use the original text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable


class RiskLevel(IntEnum):
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


@dataclass(frozen=True, slots=True)
class DangerousRule:
    pattern: re.Pattern[str]
    description: str
    level: RiskLevel
    suggestion: str = ""


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    level: RiskLevel = RiskLevel.NONE
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    @property
    def requires_confirmation(self) -> bool:
        return self.level >= RiskLevel.HIGH


def _rule(pattern: str, description: str, level: RiskLevel, suggestion: str = "") -> DangerousRule:
    return DangerousRule(re.compile(pattern), description, level, suggestion)


# Flags such as -r, -rf, -fr, -Rf (lowercased) and --no-preserve-root.
_RM_FLAGS = r"(?:-[a-z]*[rf][a-z]*\s+|--no-preserve-root\s+)*"
_DISK = r"/dev/(?:sd[a-z]|nvme|hd[a-z]|disk)"

RULES: tuple[DangerousRule, ...] = (
    # Root and home targets match as path prefixes: rm -rf /var/lib is critical too.
    _rule(
        rf"\brm\s+{_RM_FLAGS}(?:/|\"\s*/|'\s*/)",
        "Removes root filesystem - THIS WILL DESTROY YOUR SYSTEM",
        RiskLevel.CRITICAL,
        "Never run rm -rf on root. Specify the exact path you want to delete.",
    ),
    _rule(
        rf"\brm\s+{_RM_FLAGS}(?:~|\$home|/home/\*|/users/\*)",
        "Removes entire home directory",
        RiskLevel.CRITICAL,
        "Specify the exact subdirectory you want to delete.",
    ),
    _rule(
        r"\bmkfs(?:\.\w+)?\s",
        "Formats a filesystem - ALL DATA WILL BE LOST",
        RiskLevel.CRITICAL,
        "Double-check the device path. This is irreversible.",
    ),
    _rule(
        rf"\bdd\s+.*\bof\s*=\s*{_DISK}",
        "Writes directly to disk - CAN DESTROY DATA",
        RiskLevel.CRITICAL,
        "Verify the output device is correct. Consider backing up first.",
    ),
    _rule(
        r">\s*/dev/(?:sd[a-z]|nvme|hd[a-z])",
        "Redirects output to raw disk device",
        RiskLevel.CRITICAL,
        "This will overwrite the disk. Use a file path instead.",
    ),
    _rule(
        r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:",
        "Fork bomb - WILL CRASH YOUR SYSTEM",
        RiskLevel.CRITICAL,
        "This is a malicious command. Do not run it.",
    ),
    _rule(
        r"\brm\s+(?:-[a-z]*[rf][a-z]*\s+)+",
        "Recursive/forced deletion",
        RiskLevel.HIGH,
        "Consider using 'rm -i' for interactive confirmation, or list files first with 'ls'.",
    ),
    _rule(
        r"\bchmod\s+(?:-r\s+)?(?:000|777)\s",
        "Dangerous permission change",
        RiskLevel.HIGH,
        "777 makes files world-writable. 000 removes all access. Use more specific permissions.",
    ),
    _rule(
        r"\bchmod\s+-r\s",
        "Recursive permission change",
        RiskLevel.MEDIUM,
        "Verify the target directory before applying recursive permission changes.",
    ),
    _rule(
        r"\bchown\s+-r\s",
        "Recursive ownership change",
        RiskLevel.MEDIUM,
        "Verify the target directory and new owner before applying.",
    ),
    _rule(
        r">\s*/etc/",
        "Overwrites system configuration file",
        RiskLevel.HIGH,
        "Back up the original file first. Consider using '>>' to append instead.",
    ),
    _rule(
        r"\bdd\s+",
        "Low-level disk operation",
        RiskLevel.HIGH,
        "Double-check if= and of= parameters. Data can be lost if reversed.",
    ),
    _rule(
        r"\bmv\s+.*\s+/dev/null",
        "Moving files to /dev/null deletes them permanently",
        RiskLevel.HIGH,
        "Use 'rm' if you want to delete. This is irreversible.",
    ),
    _rule(
        r"\bcurl\s+.*\|\s*(?:sudo\s+)?(?:ba|z)?sh\b",
        "Piping remote script directly to shell",
        RiskLevel.HIGH,
        "Download the script first, review it, then execute.",
    ),
    _rule(
        r"\bwget\s+.*\|\s*(?:sudo\s+)?(?:ba|z)?sh\b",
        "Piping remote script directly to shell",
        RiskLevel.HIGH,
        "Download the script first, review it, then execute.",
    ),
    _rule(
        r"\beval\s+.*\$",
        "Executing dynamically constructed command",
        RiskLevel.HIGH,
        "Avoid eval when possible. It can execute unintended code.",
    ),
    _rule(
        r"\bsudo\s+rm\s",
        "Deleting files with elevated privileges",
        RiskLevel.MEDIUM,
        "Verify the files to be deleted before running with sudo.",
    ),
    _rule(
        r"\bsudo\s+",
        "Running with elevated privileges",
        RiskLevel.LOW,
        "Command runs as root. Verify this is necessary.",
    ),
    _rule(
        r"\brm\s",
        "Deleting files",
        RiskLevel.LOW,
        "Consider using trash/recycle instead of permanent deletion.",
    ),
    _rule(
        r"\bkill\s+-(?:9|kill)\b",
        "Force killing process",
        RiskLevel.MEDIUM,
        "SIGKILL doesn't allow graceful shutdown. Try 'kill' without -9 first.",
    ),
    _rule(
        r"\bkillall\s",
        "Killing all processes by name",
        RiskLevel.MEDIUM,
        "This affects ALL processes with that name. Be specific.",
    ),
    _rule(
        r"\bpkill\s",
        "Killing processes by pattern",
        RiskLevel.MEDIUM,
        "Verify which processes will be affected with 'pgrep' first.",
    ),
    _rule(
        r"\b(?:shutdown|reboot|poweroff|halt)\b",
        "System shutdown/reboot",
        RiskLevel.MEDIUM,
        "This will terminate all running programs.",
    ),
    _rule(
        r"\bsystemctl\s+(?:stop|disable|mask)\s",
        "Stopping/disabling system service",
        RiskLevel.MEDIUM,
        "Verify this won't affect critical system functionality.",
    ),
    _rule(
        r"\biptables\s+(?:-f|--flush)\b",
        "Flushing firewall rules",
        RiskLevel.HIGH,
        "This removes all firewall rules. Your system may become exposed.",
    ),
    _rule(
        r"\bufw\s+disable\b",
        "Disabling firewall",
        RiskLevel.HIGH,
        "This disables the firewall entirely. Your system may become exposed.",
    ),
    _rule(
        r"\bhistory\s+-c\b",
        "Clearing shell history",
        RiskLevel.MEDIUM,
        "This is often used to hide malicious activity.",
    ),
    _rule(
        r"\bshred\s",
        "Securely erasing files (unrecoverable)",
        RiskLevel.HIGH,
        "Shredded files cannot be recovered. Verify targets carefully.",
    ),
    _rule(
        r"\btruncate\s",
        "Truncating files",
        RiskLevel.MEDIUM,
        "This can cause data loss. Verify the target file.",
    ),
    _rule(
        r"(?<!>)>(?![>&|])(?!\s*/dev/null)\s*[^\s|&]",
        "Overwriting file with redirect",
        RiskLevel.LOW,
        "This overwrites the file. Use '>>' to append instead if needed.",
    ),
)

_LEVEL_NAMES: dict[RiskLevel, str] = {
    RiskLevel.NONE: "Safe",
    RiskLevel.LOW: "Low Risk",
    RiskLevel.MEDIUM: "Medium Risk",
    RiskLevel.HIGH: "High Risk",
    RiskLevel.CRITICAL: "CRITICAL DANGER",
}

_CONFIRMATION_WORDS: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "CONFIRM",
    RiskLevel.CRITICAL: "I UNDERSTAND THE RISK",
}


def analyze_command(command: str, rules: Iterable[DangerousRule] = RULES) -> RiskAssessment:
    """Score ``command`` against every rule, in table order.

    The level is the highest level among matching rules. Every match
    contributes its description to ``warnings`` (no de-duplication) and its
    suggestion, when it has one, to ``suggestions``.
    """
    normalized = command.strip().lower()

    level = RiskLevel.NONE
    warnings: list[str] = []
    suggestions: list[str] = []
    for rule in rules:
        if rule.pattern.search(normalized) is None:
            continue
        if rule.level > level:
            level = rule.level
        warnings.append(rule.description)
        if rule.suggestion:
            suggestions.append(rule.suggestion)

    return RiskAssessment(level=level, warnings=tuple(warnings), suggestions=tuple(suggestions))


def risk_level_name(level: RiskLevel) -> str:
    return _LEVEL_NAMES.get(level, "Unknown")


def confirmation_word(level: RiskLevel) -> str:
    """Phrase the user must type before a command at ``level`` may run."""
    return _CONFIRMATION_WORDS.get(level, "")
