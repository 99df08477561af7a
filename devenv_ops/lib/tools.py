"""Presence and version checks for external tools."""

import shutil
from collections.abc import Callable

from .models import CommandResult
from .process import run_command

Runner = Callable[..., CommandResult]


class ToolChecker:
    """Side-effect-free queries about installed tools.

    Never raises: an absent tool or a failing probe is reported as
    ``False`` / ``""``.
    """

    def __init__(
        self,
        runner: Runner = run_command,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        """Initialize checker.

        Args:
            runner: Process runner used for version and package-manager probes
            which: PATH lookup function
        """
        self.runner = runner
        self.which = which

    def is_installed(self, tool: str) -> bool:
        """Return True if tool is an executable on PATH."""
        return self.which(tool) is not None

    def brew_has(self, formula: str) -> bool:
        """Return True if Homebrew reports formula as installed."""
        if not self.is_installed("brew"):
            return False
        return self.runner(["brew", "list", formula]).ok

    def version(self, tool: str, flag: str = "--version") -> str:
        """Return the first line of the tool's version output, or "" if unavailable."""
        if not self.is_installed(tool):
            return ""
        result = self.runner([tool, flag])
        if not result.ok:
            return ""
        # java -version and friends print on stderr
        for line in (result.stdout or result.stderr).splitlines():
            if line.strip():
                return line.strip()
        return ""
