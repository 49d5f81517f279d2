"""
Command runner — the SINGLE PLACE where ``subprocess.run`` is called.

Actions never spawn processes themselves. They call execute_command()
and wrap a CommandError in their own error family, adding which
resolved input the command was run against.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600

# Output kept on errors and results (tail, in characters)
_OUTPUT_TAIL = 2000


@dataclass
class CommandResult:
    """Outcome of a command that exited 0."""

    command: list[str]
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0


class CommandError(Exception):
    """A command could not be started, timed out, or exited non-zero."""

    def __init__(
        self,
        command: list[str],
        reason: str,
        *,
        return_code: int | None = None,
        stderr: str = "",
    ):
        self.command = command
        self.reason = reason
        self.return_code = return_code
        self.stderr = stderr
        detail = f"`{' '.join(command)}` {reason}"
        if stderr:
            detail = f"{detail}, stderr: {stderr.strip()}"
        super().__init__(detail)


def execute_command(
    cmd: list[str | Path],
    *,
    env_overrides: dict[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT,
    cwd: str | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        cmd: Program and arguments. Paths are converted to strings.
        env_overrides: Variables layered over the current environment.
        timeout: Seconds before the command is killed.
        cwd: Working directory for the command.

    Returns:
        CommandResult on exit code 0.

    Raises:
        CommandError: On a non-zero exit, a timeout, or an OS error.
    """
    args = [str(part) for part in cmd]

    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    logger.debug("Executing: %s", " ".join(args))
    start = time.monotonic()
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(args, f"timed out after {timeout}s") from e
    except OSError as e:
        raise CommandError(args, f"could not be started ({e})") from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-_OUTPUT_TAIL:] if result.stdout else ""
    stderr = result.stderr[-_OUTPUT_TAIL:] if result.stderr else ""

    if result.returncode != 0:
        logger.debug("Command failed (exit %d): %s", result.returncode, " ".join(args))
        raise CommandError(
            args,
            f"exited with code {result.returncode}",
            return_code=result.returncode,
            stderr=stderr,
        )

    logger.debug("Command succeeded in %dms: %s", elapsed_ms, args[0])
    return CommandResult(command=args, stdout=stdout, stderr=stderr, elapsed_ms=elapsed_ms)
