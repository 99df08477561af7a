#!/usr/bin/env python3
"""Install or upgrade Ruby with Homebrew and add it to PATH."""

import argparse
import sys
from pathlib import Path

from rich.console import Console

from devenv_ops.lib.config import RubyConfig
from devenv_ops.lib.exceptions import DevEnvError
from devenv_ops.lib.ledger import StepLedger
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import ReadLine, confirm, render_error
from devenv_ops.lib.plans import Toolchain

UPGRADE_PROMPT = "Do you want to install/upgrade to the latest version? (yes/no): "


def install_ruby(
    toolchain: Toolchain, ledger: StepLedger, read_line: ReadLine, console: Console
) -> int:
    """Install Homebrew Ruby, asking first when a Ruby is already on PATH.

    An accepted upgrade forgets previously completed steps so that every step
    runs again.

    Returns:
        Exit code: 0 on success or when the upgrade is declined
    """
    current = toolchain.checker.version("ruby")
    if current:
        console.print(f"[green]Ruby is already installed:[/green] {current}")
        if not confirm(read_line, UPGRADE_PROMPT, "yes"):
            console.print("Installation cancelled.")
            return 0
        ledger.reset()

    toolchain.ruby_plan().run(ledger)
    console.print(f"[green]Ruby installed:[/green] {toolchain.verify_ruby()}")
    console.print(f"Open a new terminal or run: source {toolchain.shell_rc}")
    return 0


def main() -> int:
    """Install Ruby.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    defaults = RubyConfig()
    parser = argparse.ArgumentParser(description="Install Ruby with Homebrew")
    parser.add_argument(
        "--shell-rc",
        type=Path,
        default=defaults.shell_rc,
        help=f"Shell rc file receiving PATH setup (default: {defaults.shell_rc})",
    )
    parser.add_argument(
        "--ledger",
        type=Path,
        default=defaults.ledger_path,
        help=f"Completed-steps ledger (default: {defaults.ledger_path})",
    )
    args = parser.parse_args()

    console = Console()
    try:
        return install_ruby(
            Toolchain(args.shell_rc), StepLedger(args.ledger), console.input, console
        )

    except (EOFError, KeyboardInterrupt):
        console.print("\nCancelled.")
        return 1
    except DevEnvError as e:
        LOGGER.error("Ruby installation failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
