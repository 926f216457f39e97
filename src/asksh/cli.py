"""CLI entrypoint for asksh."""

from __future__ import annotations

import asyncio
import json
import sys

import click
from pydantic import ValidationError

from asksh.config.models import AppSettings
from asksh.config.store import SettingsStore, apply_environment
from asksh.errors import ExecutionFailure, ProviderError
from asksh.paths import settings_path
from asksh.providers.base import CommandResponse
from asksh.providers.registry import ProviderRegistry
from asksh.review.machine import ReviewAction
from asksh.runtime_logging import configure_runtime_logging, get_runtime_logger
from asksh.safety.classifier import analyze_command, confirmation_word, risk_level_name
from asksh.session import run_session
from asksh.shell.gate import execute_command
from asksh.version import __version__

PROVIDER_CHOICES = ["openai", "anthropic", "gemini", "ollama", "lmstudio"]


class DefaultCommandGroup(click.Group):
    """Group that routes unknown leading words to ``default_command``."""

    default_command = "run"

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and args[0] not in self.commands and args[0] not in ctx.help_option_names:
            args = [self.default_command, *args]
        return super().parse_args(ctx, args)


@click.group(cls=DefaultCommandGroup, context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """x: turn a natural-language request into a reviewed shell command."""


@main.command()
@click.argument("instruction", nargs=-1, required=True)
@click.option(
    "--provider",
    "provider_name",
    type=click.Choice(PROVIDER_CHOICES),
    help="Use this provider instead of auto-detection",
)
@click.option("--verbose", "-v", is_flag=True, help="Show provider details and log at debug level")
@click.option("--dry-run", is_flag=True, help="Print the accepted command instead of running it")
def run(instruction: tuple[str, ...], provider_name: str | None, verbose: bool, dry_run: bool) -> None:
    """Generate a command for INSTRUCTION, review it, then run it."""
    store = SettingsStore()
    settings = _load_settings(store, provider_name)
    verbose = verbose or settings.general.verbose
    configure_runtime_logging(level="debug" if verbose else None)
    logger = get_runtime_logger()

    try:
        provider = ProviderRegistry(settings).detect()
    except ProviderError as exc:
        raise click.ClickException(str(exc)) from exc

    if verbose:
        click.echo(f"Using provider: {provider.name}", err=True)

    def remember(response: CommandResponse) -> None:
        if verbose:
            click.echo(f"Model: {response.model}", err=True)
        if response.model == provider.primary_model:
            return
        try:
            store.save_working_model(response.provider, response.model)
        except (OSError, KeyError, ValidationError) as exc:
            logger.warning("settings.save_working_model_failed", error=str(exc))

    try:
        outcome = asyncio.run(run_session(" ".join(instruction), provider, on_response=remember))
    except ProviderError as exc:
        logger.error("session.generate.failed", provider=provider.name, error=str(exc))
        raise click.ClickException(f"Error generating command: {exc}") from exc

    if outcome.action is not ReviewAction.EXECUTE:
        click.echo("Command execution cancelled")
        return

    if dry_run:
        click.echo(outcome.command)
        return

    try:
        execute_command(outcome.command)
    except ExecutionFailure as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(exc.exit_code)


@main.command()
def version() -> None:
    """Print the installed version."""
    click.echo(__version__)


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.command("settings")
def settings_command() -> None:
    """Print effective settings with API keys masked."""
    settings = _load_settings(SettingsStore(), None)
    for key, value in settings.setting_items():
        click.echo(f"{key} = {value}")


@main.command()
@click.argument("command")
def check(command: str) -> None:
    """Score COMMAND against the safety rules without calling a model."""
    assessment = analyze_command(command)
    payload = {
        "command": command,
        "level": risk_level_name(assessment.level),
        "warnings": list(assessment.warnings),
        "suggestions": list(assessment.suggestions),
        "requires_confirmation": assessment.requires_confirmation,
        "confirmation_phrase": confirmation_word(assessment.level),
    }
    click.echo(json.dumps(payload, indent=2))


def _load_settings(store: SettingsStore, provider_name: str | None) -> AppSettings:
    try:
        settings = apply_environment(store.load())
    except (OSError, ValidationError) as exc:
        raise click.ClickException(f"Invalid settings: {exc}") from exc
    if provider_name:
        general = settings.general.model_copy(update={"provider": provider_name})
        settings = settings.model_copy(update={"general": general})
    return settings


if __name__ == "__main__":
    main()
