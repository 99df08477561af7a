#!/usr/bin/env python3
"""Interactive iOS Simulator manager: boot, wipe and shut down simulators."""

import argparse
import sys

from rich.console import Console
from rich.markup import escape

from devenv_ops.lib.config import SimulatorConfig
from devenv_ops.lib.exceptions import DevEnvError, ToolAbsentError
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import Menu, MenuOption, ReadLine, confirm, render_error, select_index
from devenv_ops.lib.models import SimulatorDevice
from devenv_ops.lib.simctl import SimctlClient
from devenv_ops.lib.tools import ToolChecker

DEVICE_PROMPT = "Select device number (or 'q' to cancel): "
WIPE_PROMPT = "Are you sure you want to WIPE this device? (type 'yes'): "


class SimulatorManager:
    """Menu actions operating on the currently available simulators."""

    def __init__(self, client: SimctlClient, console: Console, read_line: ReadLine) -> None:
        """Initialize manager.

        Args:
            client: simctl client
            console: Output console
            read_line: Reads one line of input given a prompt
        """
        self.client = client
        self.console = console
        self.read_line = read_line

    def choose_device(self) -> SimulatorDevice | None:
        """Show available simulators and return the one picked, None on cancel."""
        devices = self.client.list_devices()
        if not devices:
            self.console.print("[yellow]No available iPhone/iPad simulators found.[/yellow]")
            return None

        self.console.print("Available Simulators:")
        for number, device in enumerate(devices, start=1):
            marker = "[green]Booted[/green]" if device.booted else "[dim]Shutdown[/dim]"
            runtime = f" ({device.runtime})" if device.runtime else ""
            self.console.print(f"  {number}) [{marker}] {escape(device.name)}{runtime}")

        index = select_index(len(devices), DEVICE_PROMPT, self.read_line)
        if index is None:
            self.console.print("Cancelled.")
            return None
        return devices[index]

    def start(self) -> None:
        device = self.choose_device()
        if device is None:
            return
        if device.booted:
            self.console.print(f"[yellow]{escape(device.name)} is already booted.[/yellow]")
        else:
            LOGGER.info("Booting %s (%s)", device.name, device.udid)
            self.client.boot(device.udid)
        self.client.open_simulator_app()
        self.console.print(f"[green]{escape(device.name)} is running.[/green]")

    def wipe(self) -> None:
        device = self.choose_device()
        if device is None:
            return
        self.console.print(f"Target: [cyan]{escape(device.name)}[/cyan]")
        if not confirm(self.read_line, WIPE_PROMPT, "yes"):
            self.console.print("Wipe cancelled.")
            return
        if device.booted:
            LOGGER.info("Shutting down %s before erase", device.name)
            self.client.shutdown(device.udid)
        self.client.erase(device.udid)
        self.console.print(
            f"[green]{escape(device.name)} has been reset to factory settings.[/green]"
        )

    def shutdown_all(self) -> None:
        self.client.shutdown_all()
        self.console.print("[green]All simulators have been shut down.[/green]")

    def menu(self) -> Menu:
        return Menu(
            "iOS Simulator Manager",
            [
                MenuOption("Start a Simulator (Boot & Open)", self.start),
                MenuOption("Wipe Data (Factory Reset)", self.wipe),
                MenuOption("Shutdown ALL Simulators", self.shutdown_all),
                MenuOption("Exit", exits=True),
            ],
            console=self.console,
            read_line=self.read_line,
        )


def main() -> int:
    """Run the simulator manager menu until the user exits.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Manage iOS simulators")
    parser.parse_args()

    console = Console()
    try:
        if not ToolChecker().is_installed("xcodebuild"):
            raise ToolAbsentError("Xcode", hint="Install Xcode from the App Store.")

        manager = SimulatorManager(SimctlClient(SimulatorConfig()), console, console.input)
        manager.menu().run()
        return 0

    except (EOFError, KeyboardInterrupt):
        console.print("\nCancelled.")
        return 1
    except DevEnvError as e:
        LOGGER.error("Simulator manager failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
