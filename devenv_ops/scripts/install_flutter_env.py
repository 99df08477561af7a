#!/usr/bin/env python3
"""Install the Flutter development environment (Homebrew, Xcode, Java, Ruby, Android, Flutter)."""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from devenv_ops.lib.config import FlutterEnvConfig
from devenv_ops.lib.exceptions import DevEnvError
from devenv_ops.lib.ledger import StepLedger
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import render_error
from devenv_ops.lib.plans import FlutterToolchain
from devenv_ops.lib.process import run_command


def print_versions(console: Console, report: dict[str, str]) -> None:
    table = Table(title="Installed versions")
    table.add_column("Tool")
    table.add_column("Version")
    for tool, version in report.items():
        table.add_row(tool, version)
    console.print(table)


def main() -> int:
    """Run the Flutter environment plan, resuming after the last completed step.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    defaults = FlutterEnvConfig()
    parser = argparse.ArgumentParser(description="Install the Flutter development environment")
    parser.add_argument(
        "--ledger",
        type=Path,
        default=defaults.ledger_path,
        help=f"Completed-steps ledger (default: {defaults.ledger_path})",
    )
    parser.add_argument(
        "--shell-rc",
        type=Path,
        default=defaults.shell_rc,
        help=f"Shell rc file receiving PATH setup (default: {defaults.shell_rc})",
    )
    parser.add_argument(
        "--flutter-version",
        default=defaults.flutter_version,
        help=f"Flutter SDK version (default: {defaults.flutter_version})",
    )
    parser.add_argument("--reset", action="store_true", help="Forget completed steps first")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not wait for Enter")
    args = parser.parse_args()

    console = Console()
    config = FlutterEnvConfig(
        flutter_version=args.flutter_version,
        ledger_path=args.ledger,
        shell_rc=args.shell_rc,
    )
    ledger = StepLedger(config.ledger_path)

    try:
        if args.reset:
            ledger.reset()
            LOGGER.info("Ledger %s reset", ledger.path)

        toolchain = FlutterToolchain(config)
        plan = toolchain.flutter_plan()
        console.rule("[bold blue]Flutter Development Environment Installation")
        console.print(f"Steps: {', '.join(plan.step_ids)}")
        console.print(f"Installation ledger: {ledger.path}")
        console.print(f"To reinstall everything, run with --reset or delete {ledger.path}")
        if not args.yes:
            console.input("Press Enter to continue or Ctrl+C to cancel...")

        # sudo credentials are cached for the later elevated steps
        run_command(["sudo", "-v"], capture=False)

        toolchain.export_environment()
        plan.run(ledger)

        console.print("[green]Installation completed successfully![/green]")
        print_versions(console, toolchain.versions_report())
        run_command(["flutter", "doctor", "-v"], capture=False)
        console.print(f"Open a new terminal or run: source {config.shell_rc}")
        return 0

    except (EOFError, KeyboardInterrupt):
        console.print("\nCancelled.")
        return 1
    except DevEnvError as e:
        LOGGER.error("Flutter environment installation failed: %s", e)
        render_error(console, e)
        console.print(f"Re-run to resume; completed steps are recorded in {ledger.path}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
