"""Blocking external process invocation with tagged results."""

import logging
import subprocess
from collections.abc import Mapping, Sequence

from .exceptions import CommandError, CommandTimeoutError
from .models import CommandResult, CommandStatus

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    timeout: float | None = None,
    capture: bool = True,
    input_text: str | None = None,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
) -> CommandResult:
    """Run one external command and report how it finished.

    Never raises for the command's own failure: a missing executable, a
    non-zero exit and a timeout are all returned as a CommandResult status.

    Args:
        args: Command and arguments
        timeout: Seconds before the command is killed (None = unbounded)
        capture: Capture stdout/stderr instead of streaming to the terminal
        input_text: Text written to the command's stdin
        env: Full environment for the child (None = inherit)
        cwd: Working directory for the child

    Returns:
        CommandResult with returncode, captured output and status
    """
    argv = [str(arg) for arg in args]
    logger.debug("Running: %s", " ".join(argv))
    try:
        completed = subprocess.run(
            argv,
            capture_output=capture,
            text=True,
            input=input_text,
            timeout=timeout,
            env=dict(env) if env is not None else None,
            cwd=cwd,
            check=False,
        )
    except FileNotFoundError as e:
        return CommandResult(
            args=argv, returncode=127, stderr=str(e), status=CommandStatus.MISSING
        )
    except subprocess.TimeoutExpired as e:
        return CommandResult(
            args=argv,
            returncode=-1,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            status=CommandStatus.TIMED_OUT,
        )

    return CommandResult(
        args=argv,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        status=CommandStatus.OK if completed.returncode == 0 else CommandStatus.FAILED,
    )


def check_result(result: CommandResult, hint: str = "") -> CommandResult:
    """Raise for any non-OK result, return it unchanged otherwise."""
    if result.timed_out:
        raise CommandTimeoutError(result, hint)
    if not result.ok:
        raise CommandError(result, hint)
    return result


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
