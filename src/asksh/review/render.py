"""Rich renderables for one frame of the review screen."""

from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.text import Text

from asksh.review.machine import ConfirmingDangerous, Editing, Refining, ReviewSession
from asksh.safety.classifier import RiskLevel, risk_level_name

_BADGE_STYLES: dict[RiskLevel, Style] = {
    RiskLevel.LOW: Style(color="yellow", bold=True),
    RiskLevel.MEDIUM: Style(color="dark_orange", bold=True),
    RiskLevel.HIGH: Style(color="red", bold=True, blink=True),
    RiskLevel.CRITICAL: Style(color="bright_red", bgcolor="dark_red", bold=True, blink=True),
}

_MENU = (
    ("y/Enter", "Execute"),
    ("n/Esc", "Cancel"),
    ("e", "Edit command"),
    ("r", "Refine with AI"),
    ("x", "Explain command"),
)

_DANGER_MENU = (
    ("y", "Requires typed confirmation"),
    ("n/Esc", "Cancel (recommended)"),
    ("e", "Edit command"),
    ("r", "Refine with AI"),
    ("x", "Explain command"),
)


def provider_line(session: ReviewSession) -> Text:
    return Text(f"Using {session.provider} ({session.model_name})", style="italic grey50")


def risk_badge(level: RiskLevel) -> Text | None:
    if level == RiskLevel.NONE:
        return None
    name = risk_level_name(level)
    label = f"!! {name} !!" if level >= RiskLevel.HIGH else f"* {name}"
    return Text(label, style=_BADGE_STYLES[level])


def command_box(session: ReviewSession) -> Panel:
    dangerous = session.assessment.level >= RiskLevel.HIGH
    text = Text(session.command, style="bold red" if dangerous else "bold yellow")
    return Panel(
        text,
        box=box.HEAVY if dangerous else box.ROUNDED,
        border_style="red" if dangerous else "blue",
        padding=(1, 2),
        title="DANGEROUS COMMAND" if dangerous else None,
    )


def warnings_block(session: ReviewSession) -> Panel | None:
    assessment = session.assessment
    if assessment.level < RiskLevel.MEDIUM or not assessment.warnings:
        return None

    body = Text()
    body.append(" SAFETY WARNINGS ", style="bold red on dark_red")
    body.append("\n\n")
    for warning in assessment.warnings:
        body.append(f"- {warning}\n", style="dark_orange")
    if assessment.suggestions:
        body.append("\nSuggestions:\n", style="italic grey62")
        for suggestion in assessment.suggestions:
            body.append(f"  -> {suggestion}\n", style="italic grey62")
    body.rstrip()
    return Panel(body, box=box.DOUBLE, border_style="red", padding=(1, 2))


def explanation_block(session: ReviewSession) -> Panel | None:
    if not session.explanation:
        return None
    return Panel(
        Text(session.explanation, style="grey85"),
        border_style="grey42",
        padding=(1, 2),
        title="Explanation",
    )


def prompt_label(session: ReviewSession) -> Text:
    """Heading shown above the input while a sub-mode is active."""
    state = session.state
    if isinstance(state, ConfirmingDangerous):
        return Text(
            f"Type '{state.required_phrase}' to execute this dangerous command:",
            style="bold red",
        )
    if isinstance(state, Editing):
        return Text("Edit command:", style="bold magenta")
    if isinstance(state, Refining):
        return Text("How would you like to refine this command?", style="bold magenta")
    return Text("")


def prompt_help(session: ReviewSession) -> Text:
    state = session.state
    if isinstance(state, ConfirmingDangerous):
        return Text("Press Esc to cancel", style="grey50")
    if isinstance(state, Editing):
        return Text("Press Enter to confirm, Esc to cancel", style="grey50")
    if isinstance(state, Refining):
        return Text("Press Enter to refine, Esc to cancel", style="grey50")
    return action_menu(session.assessment.level)


def action_menu(level: RiskLevel) -> Text:
    dangerous = level >= RiskLevel.HIGH
    entries = _DANGER_MENU if dangerous else _MENU
    menu = Text()
    for index, (key, description) in enumerate(entries):
        if index:
            menu.append("  |  ", style="grey35")
        key_style = "bold red" if dangerous and index == 0 else "bold magenta"
        menu.append(key, style=key_style)
        menu.append(f" {description}", style="grey85")
    return menu


def render_frame(session: ReviewSession) -> RenderableType:
    """Everything above the input line, in display order."""
    parts: list[RenderableType] = [provider_line(session), Text("")]
    badge = risk_badge(session.assessment.level)
    if badge is not None:
        parts.extend([badge, Text("")])
    parts.append(command_box(session))
    for block in (warnings_block(session), explanation_block(session)):
        if block is not None:
            parts.append(block)
    return Group(*parts)
