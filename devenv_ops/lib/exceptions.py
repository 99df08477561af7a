"""Exception hierarchy for devenv_ops tools.

Every error carries a ``hint``: the plausible root causes and, where they exist,
the manual commands a user can run to diagnose the failure. Scripts render the
hint next to the message instead of only reporting that something failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CommandResult, StepOutcome


class DevEnvError(Exception):
    """Base class for all devenv_ops failures."""

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint


class ToolAbsentError(DevEnvError):
    """A required external tool is not installed."""

    def __init__(self, tool: str, hint: str = "") -> None:
        super().__init__(f"{tool} is not installed", hint)
        self.tool = tool


class CommandError(DevEnvError):
    """An external command exited with a non-zero status."""

    def __init__(
        self, result: CommandResult, hint: str = "", message: str | None = None
    ) -> None:
        if message is None:
            detail = result.stderr.strip() or result.stdout.strip()
            message = f"command failed ({result.returncode}): {result.command_line}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message, hint)
        self.result = result


class CommandTimeoutError(CommandError):
    """An external command exceeded its time budget."""

    def __init__(self, result: CommandResult, hint: str = "") -> None:
        super().__init__(result, hint, message=f"command timed out: {result.command_line}")


class InvalidSelectionError(DevEnvError):
    """Interactive input was not a valid choice."""


class ProvisioningError(DevEnvError):
    """A provisioning step failed; earlier steps stay completed."""

    def __init__(self, step_id: str, message: str, hint: str = "") -> None:
        super().__init__(f"step '{step_id}' failed: {message}", hint)
        self.step_id = step_id
        self.outcomes: list[StepOutcome] = []
