"""Textual front end that drives the review state machine."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Input, Static

from asksh.errors import InteractionError
from asksh.review.machine import (
    Accept,
    Decline,
    Escape,
    InputChanged,
    Interrupt,
    Normal,
    Refining,
    RequestExplain,
    ReviewAction,
    ReviewEvent,
    ReviewOutcome,
    ReviewSession,
    StartEdit,
    StartRefine,
    Submit,
    transition,
)
from asksh.review.render import prompt_help, prompt_label, render_frame
from asksh.runtime_logging import get_runtime_logger

_NORMAL_ACTIONS = {"accept", "decline", "edit", "refine", "explain"}


class ReviewApp(App[ReviewOutcome]):
    TITLE = "x - Natural Language Shell"
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Cancel", show=False, priority=True),
        Binding("escape", "escape", "Back", show=False, priority=True),
        Binding("y,Y,enter", "accept", "Execute"),
        Binding("n,N,q", "decline", "Cancel"),
        Binding("e,E", "edit", "Edit"),
        Binding("r,R", "refine", "Refine"),
        Binding("x,X", "explain", "Explain"),
    ]

    CSS = """
    Screen {
        layout: vertical;
        padding: 1 2;
    }

    #title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #entry-area {
        height: auto;
    }

    #entry {
        width: 80;
    }

    #help {
        margin-top: 1;
    }

    .hidden {
        display: none;
    }
    """

    def __init__(self, session: ReviewSession) -> None:
        self.session = session
        self.logger = get_runtime_logger().bind(provider=session.provider, model=session.model_name)
        super().__init__()

    def compose(self) -> ComposeResult:
        yield Static(self.TITLE, id="title")
        yield Static(id="frame")
        with Vertical(id="entry-area", classes="hidden"):
            yield Static(id="prompt-label")
            yield Input(id="entry")
        yield Static(id="help")

    def on_mount(self) -> None:
        self.logger.debug(
            "review.started",
            risk_level=self.session.assessment.level.name,
            command=self.session.command,
        )
        self._refresh_view(previous_mode=None)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in _NORMAL_ACTIONS:
            return isinstance(self.session.state, Normal)
        return True

    def action_accept(self) -> None:
        self.apply_event(Accept())

    def action_decline(self) -> None:
        self.apply_event(Decline())

    def action_edit(self) -> None:
        self.apply_event(StartEdit())

    def action_refine(self) -> None:
        self.apply_event(StartRefine())

    def action_explain(self) -> None:
        self.apply_event(RequestExplain())

    def action_interrupt(self) -> None:
        self.apply_event(Interrupt())

    def action_escape(self) -> None:
        # Escape backs out of a sub-mode; in the menu it cancels.
        if isinstance(self.session.state, Normal):
            self.apply_event(Decline())
        else:
            self.apply_event(Escape())

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        if self.session.pending_input == event.value:
            return
        self.apply_event(InputChanged(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        # The Input can lag one keystroke behind if Submitted races Changed.
        if self.session.pending_input != event.value:
            self.apply_event(InputChanged(event.value))
        self.apply_event(Submit())

    def apply_event(self, event: ReviewEvent) -> None:
        previous_mode = self.session.mode
        self.session, outcome = transition(self.session, event)
        self.logger.debug(
            "review.transition",
            review_event=type(event).__name__,
            from_mode=previous_mode,
            to_mode=self.session.mode,
            risk_level=self.session.assessment.level.name,
        )
        if outcome is not None:
            self.logger.info(
                "review.outcome",
                action=outcome.action.value,
                risk_level=self.session.assessment.level.name,
            )
            self.exit(outcome)
            return
        self._refresh_view(previous_mode=previous_mode)

    def _refresh_view(self, *, previous_mode: str | None) -> None:
        session = self.session
        self.query_one("#frame", Static).update(render_frame(session))
        self.query_one("#help", Static).update(prompt_help(session))

        entry_area = self.query_one("#entry-area", Vertical)
        entry = self.query_one("#entry", Input)
        if isinstance(session.state, Normal):
            entry_area.add_class("hidden")
            self.set_focus(None)
            self.refresh_bindings()
            return

        self.query_one("#prompt-label", Static).update(prompt_label(session))
        entry_area.remove_class("hidden")
        if entry.value != session.pending_input:
            entry.value = session.pending_input
            entry.cursor_position = len(entry.value)
        if session.mode != previous_mode:
            refining = isinstance(session.state, Refining)
            entry.placeholder = "e.g., add timestamps, make recursive..." if refining else ""
            entry.focus()
        self.refresh_bindings()


async def run_review(
    command: str,
    provider: str,
    model_name: str,
    explanation: str | None = None,
) -> ReviewOutcome:
    """Run one review pass and return its terminal outcome.

    Quitting the app without an outcome counts as a cancel. A crash of the
    terminal UI raises ``InteractionError``.
    """
    app = ReviewApp(ReviewSession.start(command, provider, model_name, explanation))
    outcome = await app.run_async()
    if app.return_code not in (0, None):
        raise InteractionError(f"review UI exited with code {app.return_code}")
    if outcome is None:
        return ReviewOutcome(ReviewAction.CANCEL, command)
    return outcome
