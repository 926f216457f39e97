"""Generate, review, and loop on refine/explain until a final decision."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import click

from asksh.errors import ProviderError
from asksh.prompting.context import EnvironmentContext, gather_context
from asksh.prompting.templates import build_prompt
from asksh.providers.base import CommandResponse, Provider
from asksh.review.app import run_review
from asksh.review.machine import ReviewAction, ReviewOutcome
from asksh.runtime_logging import get_runtime_logger

Reviewer = Callable[[str, str, str, Optional[str]], Awaitable[ReviewOutcome]]
MessageSink = Callable[[str], None]
ResponseSink = Callable[[CommandResponse], None]


def _echo_error(message: str) -> None:
    click.echo(message, err=True)


def _ignore_response(_response: CommandResponse) -> None:
    return


async def run_session(
    instruction: str,
    provider: Provider,
    *,
    reviewer: Reviewer = run_review,
    on_message: MessageSink = _echo_error,
    on_response: ResponseSink = _ignore_response,
    context: EnvironmentContext | None = None,
) -> ReviewOutcome:
    """Drive one instruction to an EXECUTE or CANCEL outcome.

    A failure of the initial generation propagates to the caller. Refine and
    explain failures are reported through ``on_message`` and the same command
    goes back to review. ``on_response`` sees every command the provider
    produced, in order.
    """
    logger = get_runtime_logger().bind(provider=provider.name)
    prompt = build_prompt(instruction, context or gather_context(instruction))

    response = await provider.generate_command(prompt)
    on_response(response)
    command, model = response.command, response.model
    explanation: str | None = None

    while True:
        outcome = await reviewer(command, provider.name, model, explanation)
        explanation = None
        logger.info("session.outcome", action=outcome.action.value)

        if outcome.action in (ReviewAction.EXECUTE, ReviewAction.CANCEL):
            return outcome

        if outcome.action is ReviewAction.REFINE:
            try:
                refined = await provider.refine_command(outcome.command, outcome.refinement_request)
            except ProviderError as exc:
                logger.warning("session.refine.failed", error=str(exc))
                on_message(f"Error refining command: {exc}")
                command = outcome.command
                continue
            on_response(refined)
            command, model = refined.command, refined.model
            continue

        # EXPLAIN
        command = outcome.command
        try:
            explanation = await provider.explain_command(command)
        except ProviderError as exc:
            logger.warning("session.explain.failed", error=str(exc))
            on_message(f"Error explaining command: {exc}")
