"""Result models for devenv_ops operations."""

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

UNKNOWN_FINGERPRINT = "UNKNOWN"


class CommandStatus(Enum):
    """How an external command finished."""

    OK = "ok"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    MISSING = "missing"


@dataclass
class CommandResult:
    """Captured outcome of one external process invocation."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    status: CommandStatus = CommandStatus.OK

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.OK

    @property
    def timed_out(self) -> bool:
        return self.status is CommandStatus.TIMED_OUT

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)


class StepStatus(Enum):
    """Outcome of a ledger-gated provisioning step."""

    SKIPPED = "skipped"
    ALREADY_PRESENT = "already_present"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class StepOutcome:
    """Result from running one provisioning task."""

    step_id: str
    status: StepStatus
    error: str = ""


class KeychainKind(Enum):
    """Which keychain a certificate was discovered in."""

    LOGIN = "login"
    SYSTEM = "system"


@dataclass(frozen=True)
class CertificateEntry:
    """One certificate discovered during a keychain scan.

    Entries are unique by fingerprint within a scan; identities (certificate with
    private key) are discovered first and win over a public-only duplicate.
    """

    kind: KeychainKind
    fingerprint: str
    common_name: str
    has_identity: bool = False


class ExportStatus(Enum):
    """Final state of a certificate export attempt."""

    FULL_IDENTITY = "full_identity"
    PUBLIC_CERT_ONLY = "public_cert_only"
    FAILED = "failed"


class ExportTier(Enum):
    """Export strategy that produced a result."""

    UNPRIVILEGED = "unprivileged"
    ELEVATED = "elevated"
    PUBLIC_ONLY = "public_only"


@dataclass
class ArtifactInfo:
    """Details read back from an exported .p12 or .cer file."""

    path: Path
    common_name: str
    fingerprint: str
    not_valid_after: str
    has_private_key: bool


@dataclass
class ExportResult:
    """Result from exporting one CertificateEntry.

    ``path`` is set for the two success states, ``reason`` for FAILED.
    ``artifact`` holds what could be read back from the written file.
    """

    status: ExportStatus
    tier: ExportTier
    path: Path | None = None
    reason: str = ""
    artifact: ArtifactInfo | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not ExportStatus.FAILED


@dataclass(frozen=True)
class SimulatorDevice:
    """A simulator listed by ``xcrun simctl list devices``."""

    name: str
    udid: str
    state: str
    runtime: str = ""

    @property
    def booted(self) -> bool:
        return self.state == "Booted"


@dataclass(frozen=True)
class SimRuntime:
    """An installed iOS simulator runtime."""

    version: str
    identifier: str


class CreateStatus(Enum):
    """Outcome of creating one simulator in a batch."""

    CREATED = "created"
    SKIPPED_EXISTS = "skipped_exists"
    SKIPPED_UNAVAILABLE = "skipped_unavailable"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass
class CreateOutcome:
    """Result from creating one (device type, runtime) simulator."""

    name: str
    status: CreateStatus
    udid: str = ""
    message: str = ""


@dataclass
class BatchCreateResult:
    """Counts for a simulator batch creation run."""

    outcomes: list[CreateOutcome] = field(default_factory=list)

    def count(self, *statuses: CreateStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status in statuses)

    @property
    def created(self) -> int:
        return self.count(CreateStatus.CREATED)

    @property
    def failed(self) -> int:
        return self.count(CreateStatus.FAILED, CreateStatus.TIMED_OUT)

    @property
    def skipped(self) -> int:
        return self.count(CreateStatus.SKIPPED_EXISTS, CreateStatus.SKIPPED_UNAVAILABLE)

    @property
    def total(self) -> int:
        return len(self.outcomes)


@dataclass
class ScanFinding:
    """A sensitive-looking column name or cell value found in a SQLite database."""

    location: str
    table: str
    column: str
    label: str
    snippet: str = ""


@dataclass
class EncodeResult:
    """Result from base64-encoding a directory."""

    encoded: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    errors: list[Path] = field(default_factory=list)
