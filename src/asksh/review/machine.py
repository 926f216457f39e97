"""Finite-state machine behind the interactive command review.

The machine is pure: ``transition`` takes the current session and one input
event and returns the next session plus, when the pass is over, the terminal
outcome. Rendering and key handling live in ``asksh.review.app``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from asksh.safety.classifier import RiskAssessment, RiskLevel, analyze_command, confirmation_word


class ReviewAction(str, Enum):
    EXECUTE = "execute"
    CANCEL = "cancel"
    REFINE = "refine"
    EXPLAIN = "explain"


@dataclass(frozen=True, slots=True)
class ReviewOutcome:
    action: ReviewAction
    command: str
    refinement_request: str = ""


# States


@dataclass(frozen=True, slots=True)
class Normal:
    mode = "normal"


@dataclass(frozen=True, slots=True)
class Editing:
    buffer: str
    mode = "editing"


@dataclass(frozen=True, slots=True)
class Refining:
    buffer: str = ""
    mode = "refining"


@dataclass(frozen=True, slots=True)
class ConfirmingDangerous:
    required_phrase: str
    attempt: str = ""
    mode = "confirming_dangerous"


ReviewState = Union[Normal, Editing, Refining, ConfirmingDangerous]


# Events


@dataclass(frozen=True, slots=True)
class Accept:
    pass


@dataclass(frozen=True, slots=True)
class Decline:
    pass


@dataclass(frozen=True, slots=True)
class StartEdit:
    pass


@dataclass(frozen=True, slots=True)
class StartRefine:
    pass


@dataclass(frozen=True, slots=True)
class RequestExplain:
    pass


@dataclass(frozen=True, slots=True)
class Interrupt:
    pass


@dataclass(frozen=True, slots=True)
class InputChanged:
    value: str


@dataclass(frozen=True, slots=True)
class Submit:
    pass


@dataclass(frozen=True, slots=True)
class Escape:
    pass


ReviewEvent = Union[
    Accept,
    Decline,
    StartEdit,
    StartRefine,
    RequestExplain,
    Interrupt,
    InputChanged,
    Submit,
    Escape,
]


@dataclass(frozen=True, slots=True)
class ReviewSession:
    command: str
    provider: str
    model_name: str
    assessment: RiskAssessment
    state: ReviewState = field(default_factory=Normal)
    explanation: str | None = None

    @classmethod
    def start(
        cls,
        command: str,
        provider: str,
        model_name: str,
        explanation: str | None = None,
    ) -> "ReviewSession":
        return cls(
            command=command,
            provider=provider,
            model_name=model_name,
            assessment=analyze_command(command),
            explanation=explanation,
        )

    @property
    def mode(self) -> str:
        return self.state.mode

    @property
    def pending_input(self) -> str:
        state = self.state
        if isinstance(state, (Editing, Refining)):
            return state.buffer
        if isinstance(state, ConfirmingDangerous):
            return state.attempt
        return ""

    def with_command(self, command: str) -> "ReviewSession":
        """Replace the command and re-score it in the same step."""
        return replace(self, command=command, assessment=analyze_command(command))


Transition = tuple[ReviewSession, Union[ReviewOutcome, None]]


def transition(session: ReviewSession, event: ReviewEvent) -> Transition:
    if isinstance(event, Interrupt):
        return session, ReviewOutcome(ReviewAction.CANCEL, session.command)

    state = session.state
    if isinstance(state, Normal):
        return _from_normal(session, event)
    if isinstance(state, Editing):
        return _from_editing(session, state, event)
    if isinstance(state, Refining):
        return _from_refining(session, state, event)
    if isinstance(state, ConfirmingDangerous):
        return _from_confirming(session, state, event)
    raise TypeError(f"unknown review state: {state!r}")


def _from_normal(session: ReviewSession, event: ReviewEvent) -> Transition:
    if isinstance(event, Accept):
        level = session.assessment.level
        if level >= RiskLevel.HIGH:
            state = ConfirmingDangerous(required_phrase=confirmation_word(level))
            return replace(session, state=state), None
        return session, ReviewOutcome(ReviewAction.EXECUTE, session.command)
    if isinstance(event, Decline):
        return session, ReviewOutcome(ReviewAction.CANCEL, session.command)
    if isinstance(event, StartEdit):
        return replace(session, state=Editing(buffer=session.command)), None
    if isinstance(event, StartRefine):
        return replace(session, state=Refining()), None
    if isinstance(event, RequestExplain):
        return session, ReviewOutcome(ReviewAction.EXPLAIN, session.command)
    return session, None


def _from_editing(session: ReviewSession, state: Editing, event: ReviewEvent) -> Transition:
    if isinstance(event, InputChanged):
        return replace(session, state=Editing(buffer=event.value)), None
    if isinstance(event, Submit):
        edited = session.with_command(state.buffer)
        return replace(edited, state=Normal()), None
    if isinstance(event, Escape):
        return replace(session, state=Normal()), None
    return session, None


def _from_refining(session: ReviewSession, state: Refining, event: ReviewEvent) -> Transition:
    if isinstance(event, InputChanged):
        return replace(session, state=Refining(buffer=event.value)), None
    if isinstance(event, Submit):
        outcome = ReviewOutcome(
            ReviewAction.REFINE,
            session.command,
            refinement_request=state.buffer,
        )
        return session, outcome
    if isinstance(event, Escape):
        return replace(session, state=Normal()), None
    return session, None


def _from_confirming(
    session: ReviewSession,
    state: ConfirmingDangerous,
    event: ReviewEvent,
) -> Transition:
    if isinstance(event, InputChanged):
        return replace(session, state=replace(state, attempt=event.value)), None
    if isinstance(event, Submit):
        if state.attempt.strip() == state.required_phrase:
            return session, ReviewOutcome(ReviewAction.EXECUTE, session.command)
        return replace(session, state=replace(state, attempt="")), None
    if isinstance(event, Escape):
        return replace(session, state=Normal()), None
    return session, None
