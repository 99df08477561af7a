"""iOS Simulator control through ``xcrun simctl``."""

import time
from collections.abc import Callable, Sequence

from .config import SimulatorConfig
from .exceptions import CommandTimeoutError
from .logging_config import LOGGER
from .models import (
    BatchCreateResult,
    CommandResult,
    CreateOutcome,
    CreateStatus,
    SimRuntime,
    SimulatorDevice,
)
from .process import check_result, run_command
from .simctl_parser import parse_device_types, parse_devices, parse_runtimes

Runner = Callable[..., CommandResult]

DEVICE_FAMILIES = ("iPhone", "iPad")


def simulator_name(version: str, device_type: str) -> str:
    """Return the name given to batch-created simulators."""
    return f"[iOS {version}] {device_type}"


class SimctlClient:
    """Wraps the simctl subcommands the simulator tools need."""

    def __init__(self, config: SimulatorConfig, runner: Runner = run_command) -> None:
        """Initialize simctl client.

        Args:
            config: Timeouts for listing and creation
            runner: Process runner (injectable for tests)
        """
        self.config = config
        self.runner = runner

    def _simctl(self, *args: str, timeout: float | None = None) -> CommandResult:
        return self.runner(["xcrun", "simctl", *args], timeout=timeout)

    def list_devices(
        self, available_only: bool = True, families: tuple[str, ...] = DEVICE_FAMILIES
    ) -> list[SimulatorDevice]:
        """Return simulators, iPhone/iPad only by default.

        Raises:
            CommandTimeoutError: If simctl does not answer within list_timeout
            CommandError: If simctl fails
        """
        args = ["list", "devices", "available"] if available_only else ["list", "devices"]
        result = check_result(
            self._simctl(*args, timeout=self.config.list_timeout),
            hint="Check that Xcode is installed and `xcrun simctl list` works in a terminal.",
        )
        return parse_devices(result.stdout, families)

    def list_runtimes(self) -> list[SimRuntime]:
        """Return installed iOS runtimes.

        Raises:
            CommandTimeoutError: If simctl does not answer within list_timeout
            CommandError: If simctl fails
        """
        result = check_result(
            self._simctl("list", "runtimes", timeout=self.config.list_timeout),
            hint="Install a runtime from Xcode > Settings > Platforms.",
        )
        return parse_runtimes(result.stdout)

    def raw_device_listing(self, available_only: bool = False) -> CommandResult:
        """Return the unparsed device listing, all devices unless available_only."""
        args = ["list", "devices", "available"] if available_only else ["list", "devices"]
        return self._simctl(*args, timeout=self.config.list_timeout)

    def runtimes_listing(self) -> str:
        """Return the raw iOS lines of the runtime listing."""
        result = check_result(self._simctl("list", "runtimes", timeout=self.config.list_timeout))
        return "\n".join(line for line in result.stdout.splitlines() if "iOS" in line)

    def device_types(self) -> list[str]:
        """Return device type names known to simctl.

        Raises:
            CommandTimeoutError: If simctl does not answer within devicetype_timeout
        """
        result = check_result(
            self._simctl("list", "devicetypes", timeout=self.config.devicetype_timeout)
        )
        return parse_device_types(result.stdout)

    def boot(self, udid: str) -> None:
        check_result(self._simctl("boot", udid))

    def shutdown(self, udid: str) -> None:
        check_result(self._simctl("shutdown", udid))

    def shutdown_all(self) -> None:
        check_result(self._simctl("shutdown", "all"))

    def erase(self, udid: str) -> None:
        check_result(
            self._simctl("erase", udid),
            hint="A device must be shut down before it can be erased.",
        )

    def delete(self, udid: str) -> CommandResult:
        return self._simctl("delete", udid)

    def create(self, name: str, device_type: str, runtime_id: str) -> CommandResult:
        return self._simctl(
            "create", name, device_type, runtime_id, timeout=self.config.create_timeout
        )

    def open_simulator_app(self) -> None:
        check_result(self.runner(["open", "-a", "Simulator"]))


def create_batch(
    client: SimctlClient,
    device_types: Sequence[str],
    runtimes: Sequence[SimRuntime],
    pause: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchCreateResult:
    """Create one simulator per (device type, runtime) pair.

    Existing simulators with the same name are skipped, unknown device types are
    skipped, and a failing or timed-out creation does not stop the batch.

    Args:
        client: simctl client
        device_types: Device type names, e.g. "iPhone 16 Pro"
        runtimes: Runtimes selected by the user
        pause: Seconds to wait between creations
        sleep: Sleep function (injectable for tests)

    Returns:
        BatchCreateResult with one outcome per pair
    """
    result = BatchCreateResult()
    total = len(device_types) * len(runtimes)

    try:
        known_types = set(client.device_types())
    except CommandTimeoutError:
        LOGGER.error("Timed out listing device types")
        known_types = set(device_types)

    LOGGER.info(
        "Creating %d simulators (%d devices x %d iOS versions)",
        total,
        len(device_types),
        len(runtimes),
    )

    for device_type in device_types:
        for runtime in runtimes:
            name = simulator_name(runtime.version, device_type)
            LOGGER.info("[%d/%d] %s", result.total + 1, total, name)

            if device_type not in known_types:
                result.outcomes.append(
                    CreateOutcome(
                        name=name,
                        status=CreateStatus.SKIPPED_UNAVAILABLE,
                        message=f"device type '{device_type}' not available",
                    )
                )
                continue

            result.outcomes.append(_create_one(client, name, device_type, runtime))
            if pause:
                sleep(pause)

    LOGGER.info(
        "Created: %d, failed: %d, skipped: %d, total: %d",
        result.created,
        result.failed,
        result.skipped,
        result.total,
    )
    return result


def _create_one(
    client: SimctlClient, name: str, device_type: str, runtime: SimRuntime
) -> CreateOutcome:
    listing = client.raw_device_listing()
    if listing.timed_out:
        return CreateOutcome(
            name=name, status=CreateStatus.TIMED_OUT, message="timed out checking simulators"
        )
    existing = {device.name for device in parse_devices(listing.stdout)} if listing.ok else set()
    if name in existing:
        LOGGER.info("%s already exists, skipping", name)
        return CreateOutcome(name=name, status=CreateStatus.SKIPPED_EXISTS)

    created = client.create(name, device_type, runtime.identifier)
    if created.timed_out:
        LOGGER.error("Creating %s timed out (>%ss)", name, client.config.create_timeout)
        return CreateOutcome(
            name=name,
            status=CreateStatus.TIMED_OUT,
            message=f"timed out after {client.config.create_timeout}s",
        )
    if not created.ok:
        message = (created.stderr or created.stdout).strip()
        LOGGER.error("Creating %s failed: %s", name, message)
        return CreateOutcome(name=name, status=CreateStatus.FAILED, message=message)

    udid = created.stdout.strip()[:36]
    LOGGER.info("Created %s: %s", name, udid)
    return CreateOutcome(name=name, status=CreateStatus.CREATED, udid=udid)


def delete_matching(client: SimctlClient, device_types: Sequence[str]) -> list[SimulatorDevice]:
    """Delete every simulator (any runtime) whose name contains one of device_types.

    Returns:
        Devices that were deleted
    """
    deleted: list[SimulatorDevice] = []
    for device in client.list_devices(available_only=False, families=()):
        if not any(device_type in device.name for device_type in device_types):
            continue
        if client.delete(device.udid).ok:
            LOGGER.info("Deleted %s (%s)", device.name, device.udid)
            deleted.append(device)
        else:
            LOGGER.warning("Could not delete %s (%s)", device.name, device.udid)
    return deleted
