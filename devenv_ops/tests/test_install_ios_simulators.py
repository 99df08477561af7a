"""Tests for the simulator batch creator script."""

from unittest.mock import patch

import pytest
from conftest import FakeRunner, ScriptedInput, read_sample
from rich.console import Console

from devenv_ops.lib.config import SimulatorConfig
from devenv_ops.lib.exceptions import CommandTimeoutError
from devenv_ops.lib.simctl import SimctlClient
from devenv_ops.scripts.install_ios_simulators import main, run_menu


@pytest.fixture
def client(fake_runner: FakeRunner, simulator_config: SimulatorConfig) -> SimctlClient:
    """Return a simctl client backed by the captured listings."""
    fake_runner.on("xcrun", "simctl", "list", "devices", stdout=read_sample("simctl_devices.txt"))
    fake_runner.on("xcrun", "simctl", "list", "runtimes", stdout=read_sample("simctl_runtimes.txt"))
    fake_runner.on(
        "xcrun", "simctl", "list", "devicetypes", stdout=read_sample("simctl_devicetypes.txt")
    )
    return SimctlClient(simulator_config, fake_runner)


class TestCreate:
    """Tests for menu option 1."""

    def test_creates_for_valid_runtimes(
        self,
        client: SimctlClient,
        simulator_config: SimulatorConfig,
        fake_runner: FakeRunner,
        console: Console,
    ) -> None:
        """Test that invalid tokens are skipped and every device/runtime pair is created."""
        code = run_menu(client, simulator_config, ScriptedInput("1", "2 9 1"), console)

        assert code == 0
        created = [argv[3] for argv in fake_runner.commands if argv[2] == "create"]
        assert created == [
            "[iOS 18.0] iPhone 15",
            "[iOS 17.5] iPhone 15",
            "[iOS 18.0] iPhone 14 Plus",
            "[iOS 17.5] iPhone 14 Plus",
        ]
        output = console.export_text()
        assert "Skipping invalid selection: 9" in output
        assert "Created: 4" in output

    def test_no_valid_runtime(
        self,
        client: SimctlClient,
        simulator_config: SimulatorConfig,
        fake_runner: FakeRunner,
        console: Console,
    ) -> None:
        """Test that a selection without any valid number exits 1."""
        code = run_menu(client, simulator_config, ScriptedInput("1", "x 7"), console)

        assert code == 1
        assert not fake_runner.ran("xcrun", "simctl", "create")

    def test_no_runtimes_installed(
        self, simulator_config: SimulatorConfig, fake_runner: FakeRunner, console: Console
    ) -> None:
        """Test that a machine without iOS runtimes exits 1 before asking."""
        read_line = ScriptedInput("1")

        code = run_menu(SimctlClient(simulator_config, fake_runner), simulator_config, read_line, console)

        assert code == 1
        assert len(read_line.prompts) == 1


class TestDelete:
    """Tests for menu option 4."""

    def test_deletes_after_confirmation(
        self,
        client: SimctlClient,
        simulator_config: SimulatorConfig,
        fake_runner: FakeRunner,
        console: Console,
    ) -> None:
        """Test that YES deletes every simulator whose name contains a configured device."""
        code = run_menu(client, simulator_config, ScriptedInput("4", "YES"), console)

        assert code == 0
        deleted = [argv[3] for argv in fake_runner.commands if argv[2] == "delete"]
        assert deleted == [
            "1A2B3C4D-1111-2222-3333-444455556666",
            "2B3C4D5E-1111-2222-3333-444455556666",
        ]
        assert "Deleted 2 simulators." in console.export_text()

    def test_lowercase_yes_cancels(
        self,
        client: SimctlClient,
        simulator_config: SimulatorConfig,
        fake_runner: FakeRunner,
        console: Console,
    ) -> None:
        """Test that the confirmation is case sensitive."""
        code = run_menu(client, simulator_config, ScriptedInput("4", "yes"), console)

        assert code == 0
        assert not fake_runner.ran("xcrun", "simctl", "delete")


@pytest.mark.parametrize("choice", ["0", "6", "one", ""])
def test_invalid_menu_choice(
    client: SimctlClient, simulator_config: SimulatorConfig, console: Console, choice: str
) -> None:
    """Test that an unknown menu choice exits 1."""
    assert run_menu(client, simulator_config, ScriptedInput(choice), console) == 1


def test_list_devices_option_shows_available_only(
    client: SimctlClient,
    simulator_config: SimulatorConfig,
    fake_runner: FakeRunner,
    console: Console,
) -> None:
    """Test that option 2 prints the available-devices listing."""
    fake_runner.on(
        "xcrun", "simctl", "list", "devices", "available", stdout="    iPhone 16 (ABC) (Shutdown)\n"
    )

    assert run_menu(client, simulator_config, ScriptedInput("2"), console) == 0

    assert fake_runner.ran("xcrun", "simctl", "list", "devices", "available")
    assert "iPhone 16 (ABC) (Shutdown)" in console.export_text()


def test_list_devices_option_timeout_raises(
    client: SimctlClient,
    simulator_config: SimulatorConfig,
    fake_runner: FakeRunner,
    console: Console,
) -> None:
    """Test that a timed-out device listing is reported instead of printing nothing."""
    fake_runner.timeout("xcrun", "simctl", "list", "devices", "available")

    with pytest.raises(CommandTimeoutError):
        run_menu(client, simulator_config, ScriptedInput("2"), console)


def test_list_runtimes_option(
    client: SimctlClient, simulator_config: SimulatorConfig, console: Console
) -> None:
    """Test that option 3 prints only the iOS runtime lines."""
    assert run_menu(client, simulator_config, ScriptedInput("3"), console) == 0

    output = console.export_text()
    assert "com.apple.CoreSimulator.SimRuntime.iOS-18-0" in output
    assert "watchOS" not in output


def test_main_requires_apple_silicon() -> None:
    """Test main() exits with 1 on an Intel Mac."""
    with (
        patch("sys.argv", ["install_ios_simulators"]),
        patch("devenv_ops.scripts.install_ios_simulators.is_apple_silicon", return_value=False),
    ):
        exit_code = main()

    assert exit_code == 1
