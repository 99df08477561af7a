"""Tests for the tiered export attempter."""

from unittest.mock import MagicMock

import pytest
from conftest import FakeRunner, write_pkcs12
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from rich.console import Console

from devenv_ops.lib.cert_utils import get_common_name
from devenv_ops.lib.config import KeychainConfig
from devenv_ops.lib.exporter import FINAL_FAILURE, ExportAttempter, diagnostic_commands
from devenv_ops.lib.keychain import KeychainClient
from devenv_ops.lib.models import CertificateEntry, ExportStatus, ExportTier, KeychainKind


@pytest.fixture
def entry(signing_fingerprint: str) -> CertificateEntry:
    """Return a login keychain entry for the test certificate."""
    return CertificateEntry(
        kind=KeychainKind.LOGIN,
        fingerprint=signing_fingerprint,
        common_name="My Org/Dev Cert",
        has_identity=True,
    )


def _attempter(
    runner: FakeRunner, config: KeychainConfig, console: Console, answer: bool = False
) -> tuple[ExportAttempter, MagicMock]:
    confirm = MagicMock(return_value=answer)
    return ExportAttempter(KeychainClient(runner), config, confirm, console), confirm


class TestExportAttempter:
    """Tests for ExportAttempter.export."""

    def test_unprivileged_success(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
    ) -> None:
        """Test that tier one success never asks about elevation."""
        attempter, confirm = _attempter(fake_runner, keychain_config, console)

        result = attempter.export(entry, keychain_config.output_dir, "")

        assert result.status is ExportStatus.FULL_IDENTITY
        assert result.tier is ExportTier.UNPRIVILEGED
        assert result.path == keychain_config.output_dir / "My_Org_Dev_Cert.p12"
        confirm.assert_not_called()
        argv = fake_runner.commands[0]
        assert argv[argv.index("-P") + 1] == ""
        assert not fake_runner.ran("sudo")

    def test_unprivileged_success_reads_back_bundle(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
        signing_key: RSAPrivateKey,
        signing_cert: x509.Certificate,
    ) -> None:
        """Test that an exported bundle holding the selected identity verifies cleanly."""
        keychain_config.output_dir.mkdir(parents=True)
        write_pkcs12(
            keychain_config.output_dir / "My_Org_Dev_Cert.p12", signing_key, signing_cert, "pw"
        )
        attempter, _ = _attempter(fake_runner, keychain_config, console)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        assert result.succeeded
        assert result.path.exists()
        assert result.artifact.has_private_key
        assert result.artifact.fingerprint == entry.fingerprint
        assert result.artifact.common_name == get_common_name(signing_cert)

    def test_decline_skips_elevated_tier(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
        signing_cert_pem: str,
    ) -> None:
        """Test that declining escalation goes straight to the public certificate."""
        fake_runner.on("security", "export", returncode=1, stderr="denied")
        fake_runner.on("security", "find-certificate", stdout=signing_cert_pem)
        attempter, confirm = _attempter(fake_runner, keychain_config, console, answer=False)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        confirm.assert_called_once()
        assert not fake_runner.ran("sudo")
        assert result.status is ExportStatus.PUBLIC_CERT_ONLY
        assert result.tier is ExportTier.PUBLIC_ONLY
        assert result.path == keychain_config.output_dir / "My_Org_Dev_Cert.cer"
        assert result.path.read_text(encoding="utf-8") == signing_cert_pem.strip() + "\n"
        assert result.artifact.fingerprint == entry.fingerprint
        assert not result.artifact.has_private_key

    def test_elevated_success(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
    ) -> None:
        """Test that consent leads to sudo unlock then sudo export."""
        fake_runner.on("security", "export", returncode=1)
        attempter, _ = _attempter(fake_runner, keychain_config, console, answer=True)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        assert result.status is ExportStatus.FULL_IDENTITY
        assert result.tier is ExportTier.ELEVATED
        assert fake_runner.ran("sudo", "security", "unlock-keychain")
        assert fake_runner.ran("sudo", "security", "export")

    def test_unlock_failure_is_tolerated(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
    ) -> None:
        """Test that a failed sudo unlock still attempts the sudo export."""
        fake_runner.on("security", "export", returncode=1)
        fake_runner.on("sudo", "security", "unlock-keychain", returncode=51)
        attempter, _ = _attempter(fake_runner, keychain_config, console, answer=True)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        assert result.tier is ExportTier.ELEVATED

    def test_elevated_failure_explains_then_falls_back(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
        signing_cert_pem: str,
    ) -> None:
        """Test that failed escalation prints reasons and diagnostics before the fallback."""
        fake_runner.on("security", "export", returncode=1)
        fake_runner.on("sudo", "security", "export", returncode=1)
        fake_runner.on("security", "find-certificate", stdout=signing_cert_pem)
        attempter, _ = _attempter(fake_runner, keychain_config, console, answer=True)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        output = console.export_text()
        assert "Possible reasons" in output
        for command in diagnostic_commands(keychain_config)[:2]:
            assert command in output
        assert result.status is ExportStatus.PUBLIC_CERT_ONLY

    def test_final_failure(
        self,
        fake_runner: FakeRunner,
        keychain_config: KeychainConfig,
        console: Console,
        entry: CertificateEntry,
    ) -> None:
        """Test that no PEM from the public export reports the final failure."""
        fake_runner.on("security", "export", returncode=1)
        fake_runner.on("security", "find-certificate", returncode=44)
        attempter, _ = _attempter(fake_runner, keychain_config, console)

        result = attempter.export(entry, keychain_config.output_dir, "pw")

        assert result.status is ExportStatus.FAILED
        assert result.reason == FINAL_FAILURE
        assert result.path is None
        assert not result.succeeded
