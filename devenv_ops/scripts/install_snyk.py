#!/usr/bin/env python3
"""Install the Snyk CLI with npm and test the current project."""

import argparse
import sys

from rich.console import Console

from devenv_ops.lib.exceptions import DevEnvError
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import render_error
from devenv_ops.lib.node_tooling import setup_snyk
from devenv_ops.lib.process import run_command
from devenv_ops.lib.tools import ToolChecker


def main() -> int:
    """Install Snyk if missing, then run ``snyk test``.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Install Snyk and run snyk test")
    parser.parse_args()

    console = Console()
    try:
        setup_snyk(ToolChecker(), run_command)
        console.print("[green]Snyk test completed.[/green]")
        return 0

    except DevEnvError as e:
        LOGGER.error("Snyk setup failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
