"""Run an accepted command in the user's shell with inherited stdio."""

from __future__ import annotations

import os
import subprocess
from typing import Mapping

from asksh.errors import ExecutionFailure
from asksh.runtime_logging import get_runtime_logger

DEFAULT_SHELL = "/bin/sh"


def resolve_shell(env: Mapping[str, str] | None = None) -> str:
    environ = os.environ if env is None else env
    return environ.get("SHELL") or DEFAULT_SHELL


def execute_command(command: str, *, shell: str | None = None, env: Mapping[str, str] | None = None) -> int:
    """Block until ``command`` finishes under ``$SHELL -c``.

    Returns 0 on success. A non-zero exit, death by signal, or a shell that
    cannot be started raises ``ExecutionFailure`` carrying the exit status.
    """
    program = shell or resolve_shell(env)
    logger = get_runtime_logger()
    logger.info("gate.execute", shell=program)
    logger.debug("gate.execute.command", command=command)

    try:
        completed = subprocess.run([program, "-c", command], env=None if env is None else dict(env))
    except OSError as exc:
        logger.error("gate.launch_failed", shell=program, error=str(exc))
        raise ExecutionFailure(command, 127, reason=f"could not start {program}: {exc}") from exc

    exit_code = completed.returncode
    if exit_code < 0:
        # Killed by a signal: report it the way a shell would.
        exit_code = 128 - exit_code
    logger.info("gate.exit", exit_code=exit_code)
    if exit_code != 0:
        raise ExecutionFailure(command, exit_code)
    return 0
