"""Parsers for ``xcrun simctl list`` text output.

``xcrun simctl list devices``::

    == Devices ==
    -- iOS 17.5 --
        iPhone 15 (1A2B3C4D-1111-2222-3333-444455556666) (Shutdown)

``xcrun simctl list runtimes``::

    iOS 17.5 (17.5 - 21F79) - com.apple.CoreSimulator.SimRuntime.iOS-17-5

``xcrun simctl list devicetypes``::

    iPhone 15 (com.apple.CoreSimulator.SimDeviceType.iPhone-15)
"""

import re

from .models import SimRuntime, SimulatorDevice

_SECTION = re.compile(r"^--\s*(.+?)\s*--$")
_DEVICE = re.compile(r"^\s*(.+?) \(([0-9A-F]{8}-[0-9A-F-]+)\) \(([^)]+)\)")
_RUNTIME = re.compile(r"^iOS (\d+\.\d+)\b.*- (com\.apple\.CoreSimulator\.SimRuntime\.\S+)")
_DEVICE_TYPE = re.compile(r"^(.+?) \((com\.apple\.CoreSimulator\.SimDeviceType\.[^)]+)\)")


def parse_devices(output: str, families: tuple[str, ...] = ()) -> list[SimulatorDevice]:
    """Parse device listing into SimulatorDevice values.

    Args:
        output: Raw stdout of ``xcrun simctl list devices``
        families: Keep only devices whose line mentions one of these (e.g. "iPhone")

    Returns:
        Devices in listing order
    """
    devices: list[SimulatorDevice] = []
    runtime = ""
    for line in output.splitlines():
        stripped = line.strip()
        section = _SECTION.match(stripped)
        if section:
            runtime = section.group(1)
            continue
        if families and not any(family in line for family in families):
            continue
        match = _DEVICE.match(line)
        if not match:
            continue
        name, udid, state = match.groups()
        devices.append(SimulatorDevice(name=name, udid=udid, state=state, runtime=runtime))
    return devices


def parse_runtimes(output: str) -> list[SimRuntime]:
    """Parse runtime listing, keeping iOS runtimes only."""
    runtimes: list[SimRuntime] = []
    for line in output.splitlines():
        match = _RUNTIME.match(line.strip())
        if match:
            runtimes.append(SimRuntime(version=match.group(1), identifier=match.group(2)))
    return runtimes


def parse_device_types(output: str) -> list[str]:
    """Parse device type listing into device type names."""
    names: list[str] = []
    for line in output.splitlines():
        match = _DEVICE_TYPE.match(line.strip())
        if match:
            names.append(match.group(1))
    return names
