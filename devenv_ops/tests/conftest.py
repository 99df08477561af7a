"""Test fixtures for devenv_ops tests."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import pkcs12
from rich.console import Console

from devenv_ops.lib.config import KeychainConfig, SimulatorConfig
from devenv_ops.lib.models import CommandResult, CommandStatus

SAMPLES_DIR = Path(__file__).parent / "samples"


def read_sample(name: str) -> str:
    """Return the contents of a captured tool output sample."""
    return (SAMPLES_DIR / name).read_text(encoding="utf-8")


class FakeRunner:
    """Process runner double that records calls and replays scripted results.

    Results are registered per argument prefix; the longest matching prefix
    wins. Several results registered for one prefix are returned in order, the
    last one repeating. Unregistered commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, Any]]] = []
        self.scripted: dict[tuple[str, ...], list[CommandResult]] = {}

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        status: CommandStatus | None = None,
    ) -> "FakeRunner":
        if status is None:
            status = CommandStatus.OK if returncode == 0 else CommandStatus.FAILED
        result = CommandResult(
            args=list(prefix),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            status=status,
        )
        self.scripted.setdefault(tuple(prefix), []).append(result)
        return self

    def timeout(self, *prefix: str) -> "FakeRunner":
        return self.on(*prefix, returncode=-1, status=CommandStatus.TIMED_OUT)

    def __call__(self, args: Sequence[str], **kwargs: Any) -> CommandResult:
        argv = [str(arg) for arg in args]
        self.calls.append((argv, kwargs))

        matches = [
            prefix for prefix in self.scripted if tuple(argv[: len(prefix)]) == prefix
        ]
        if not matches:
            return CommandResult(args=argv, returncode=0)

        queue = self.scripted[max(matches, key=len)]
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(
            args=argv,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            status=result.status,
        )

    @property
    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(argv[: len(prefix)]) == prefix for argv in self.commands)

    def kwargs_for(self, *prefix: str) -> dict[str, Any]:
        for argv, kwargs in self.calls:
            if tuple(argv[: len(prefix)]) == prefix:
                return kwargs
        raise AssertionError(f"{prefix} was never run")


class ScriptedInput:
    """read_line double returning queued answers, then raising EOFError."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Return a fresh fake process runner."""
    return FakeRunner()


@pytest.fixture
def console() -> Console:
    """Return a console that records output instead of writing to the terminal."""
    return Console(record=True, width=200, force_terminal=False, color_system=None)


@pytest.fixture
def keychain_config(tmp_path: Path) -> KeychainConfig:
    """Return keychain config pointing into the temporary directory."""
    return KeychainConfig(
        login_keychain=tmp_path / "login.keychain-db",
        system_keychain=tmp_path / "System.keychain",
        output_dir=tmp_path / "exported_certs",
    )


@pytest.fixture
def simulator_config() -> SimulatorConfig:
    """Return simulator config with two device types and no pause."""
    return SimulatorConfig(devices=["iPhone 15", "iPhone 14 Plus"], create_pause=0)


@pytest.fixture
def signing_key() -> RSAPrivateKey:
    """Generate RSA private key for the test certificate."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def signing_cert(signing_key: RSAPrivateKey) -> x509.Certificate:
    """Return a self-signed code signing certificate."""
    name = x509.Name([x509.NameAttribute(x509.NameOID.COMMON_NAME, "My Org/Dev Cert")])
    now = datetime.now(tz=UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=30))
        .sign(signing_key, hashes.SHA256())
    )


@pytest.fixture
def signing_cert_pem(signing_cert: x509.Certificate) -> str:
    """Return the test certificate as PEM text."""
    return signing_cert.public_bytes(serialization.Encoding.PEM).decode()


@pytest.fixture
def signing_fingerprint(signing_cert: x509.Certificate) -> str:
    """Return the test certificate's uppercase SHA-1 fingerprint."""
    return signing_cert.fingerprint(hashes.SHA1()).hex().upper()


def write_pkcs12(
    path: Path, key: RSAPrivateKey, cert: x509.Certificate, passphrase: str
) -> Path:
    """Write a PKCS#12 bundle the way ``security export`` would."""
    encryption = (
        serialization.BestAvailableEncryption(passphrase.encode())
        if passphrase
        else serialization.NoEncryption()
    )
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(b"dev", key, cert, None, encryption)
    )
    return path
