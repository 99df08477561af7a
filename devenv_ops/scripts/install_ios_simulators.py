#!/usr/bin/env python3
"""Batch-create iPhone simulators for selected iOS runtimes."""

import argparse
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devenv_ops.lib.config import SimulatorConfig, is_apple_silicon
from devenv_ops.lib.exceptions import DevEnvError, ToolAbsentError
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import ReadLine, confirm, render_error, select_many
from devenv_ops.lib.models import BatchCreateResult, SimRuntime
from devenv_ops.lib.process import check_result
from devenv_ops.lib.simctl import SimctlClient, create_batch, delete_matching
from devenv_ops.lib.tools import ToolChecker

MENU_OPTIONS = [
    "Create simulators for selected iOS versions",
    "List current simulators",
    "List available iOS runtimes",
    "Delete all simulators of the configured devices",
    "Exit",
]


def choose_runtimes(
    runtimes: Sequence[SimRuntime], read_line: ReadLine, console: Console
) -> list[SimRuntime]:
    """Ask for space-separated runtime numbers; invalid tokens are skipped."""
    console.print("Available iOS versions:")
    for number, runtime in enumerate(runtimes, start=1):
        console.print(f"  {number}) iOS {runtime.version}")

    indexes, rejected = select_many(len(runtimes), "Enter numbers (e.g. 1 3 4): ", read_line)
    for token in rejected:
        LOGGER.warning("Skipping invalid selection: %s", token)
        console.print(f"[yellow]Skipping invalid selection:[/yellow] {escape(token)}")
    return [runtimes[index] for index in indexes]


def summary_table(result: BatchCreateResult) -> Table:
    table = Table(title="Simulator creation summary")
    table.add_column("Simulator")
    table.add_column("Status")
    table.add_column("Detail")
    for outcome in result.outcomes:
        table.add_row(
            escape(outcome.name), outcome.status.value, escape(outcome.udid or outcome.message)
        )
    return table


def create_for_selected(
    client: SimctlClient, config: SimulatorConfig, read_line: ReadLine, console: Console
) -> int:
    """Create every configured device for the runtimes the user picks.

    Returns:
        Exit code: 1 when no runtime is installed or none was validly selected
    """
    runtimes = client.list_runtimes()
    if not runtimes:
        console.print("[red]No iOS runtimes found.[/red] Install one from Xcode > Settings.")
        return 1

    selected = choose_runtimes(runtimes, read_line, console)
    if not selected:
        LOGGER.error("No valid iOS version selected")
        console.print("[red]No valid iOS version selected.[/red]")
        return 1

    result = create_batch(client, config.devices, selected, pause=config.create_pause)
    console.print(summary_table(result))
    console.print(
        f"Created: {result.created}  Failed: {result.failed}  "
        f"Skipped: {result.skipped}  Total: {result.total}"
    )
    return 0


def delete_configured(
    client: SimctlClient, config: SimulatorConfig, read_line: ReadLine, console: Console
) -> int:
    """Delete simulators of every configured device after a YES confirmation."""
    console.print("[yellow]This deletes every simulator of these devices:[/yellow]")
    for device in config.devices:
        console.print(f"  - {escape(device)}")
    if not confirm(read_line, "Type 'YES' to confirm: ", "YES"):
        console.print("Deletion cancelled.")
        return 0

    deleted = delete_matching(client, config.devices)
    console.print(f"[green]Deleted {len(deleted)} simulators.[/green]")
    return 0


def run_menu(
    client: SimctlClient, config: SimulatorConfig, read_line: ReadLine, console: Console
) -> int:
    """Show the menu once and run the chosen action.

    Returns:
        Exit code of the action, 1 for an invalid choice
    """
    console.rule("[bold blue]iOS Simulator Batch Creator")
    for number, label in enumerate(MENU_OPTIONS, start=1):
        console.print(f"{number}) {label}")

    choice = read_line(f"Enter choice (1-{len(MENU_OPTIONS)}): ").strip()
    if choice == "1":
        return create_for_selected(client, config, read_line, console)
    if choice == "2":
        listing = check_result(
            client.raw_device_listing(available_only=True),
            hint="Check that Xcode and its simulator runtimes are installed.",
        )
        console.print(listing.stdout, markup=False, highlight=False)
        return 0
    if choice == "3":
        console.print(client.runtimes_listing(), markup=False, highlight=False)
        return 0
    if choice == "4":
        return delete_configured(client, config, read_line, console)
    if choice == "5":
        return 0

    LOGGER.error("Invalid menu choice: %r", choice)
    console.print("[red]Invalid choice.[/red]")
    return 1


def main() -> int:
    """Create simulators interactively.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Batch-create iOS simulators")
    parser.parse_args()

    console = Console()
    try:
        if not is_apple_silicon():
            raise DevEnvError(
                "this tool requires an Apple Silicon (arm64) Mac",
                hint="Intel Macs cannot run the arm64 simulator runtimes it creates.",
            )
        checker = ToolChecker()
        if not checker.is_installed("xcodebuild"):
            raise ToolAbsentError("Xcode", hint="Install Xcode from the App Store.")
        LOGGER.info("Using %s", checker.version("xcodebuild", "-version"))

        config = SimulatorConfig()
        return run_menu(SimctlClient(config), config, console.input, console)

    except (EOFError, KeyboardInterrupt):
        console.print("\nCancelled.")
        return 1
    except DevEnvError as e:
        LOGGER.error("Simulator batch creation failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
