"""Tiered certificate export: unprivileged, elevated with consent, public-only."""

from collections.abc import Callable
from pathlib import Path

from rich.console import Console

from .cert_utils import inspect_pkcs12, inspect_public_certificate
from .config import KeychainConfig
from .keychain import KeychainClient, export_path, keychain_for
from .logging_config import LOGGER
from .models import ArtifactInfo, CertificateEntry, ExportResult, ExportStatus, ExportTier
from .security_parser import extract_pem

NON_EXPORTABLE_REASONS = [
    "Private key is not present in that keychain (only the public certificate exists).",
    "Private key is marked non-exportable.",
    "Private key resides on a hardware token or the Secure Enclave (T2/SEP/smartcard).",
    "Access control prevents export even for root.",
]

FINAL_FAILURE = "final export attempt failed"


def diagnostic_commands(config: KeychainConfig) -> list[str]:
    """Return manual commands that show which identities really hold a private key."""
    return [
        f"security find-identity -p codesigning -v {config.login_keychain}",
        f"security find-identity -p codesigning -v {config.system_keychain}",
        "Keychain Access -> select the certificate and expand it; "
        "no key icon means the private key is not available here",
    ]


class ExportAttempter:
    """Exports one certificate, escalating only with explicit user consent."""

    def __init__(
        self,
        client: KeychainClient,
        config: KeychainConfig,
        confirm_elevation: Callable[[], bool],
        console: Console | None = None,
    ) -> None:
        """Initialize export attempter.

        Args:
            client: Keychain client running the security commands
            config: Keychain locations
            confirm_elevation: Asks the user whether to retry with sudo
            console: Where explanations are printed
        """
        self.client = client
        self.config = config
        self.confirm_elevation = confirm_elevation
        self.console = console or Console()

    def export(self, entry: CertificateEntry, output_dir: Path, passphrase: str) -> ExportResult:
        """Export entry into output_dir.

        Args:
            entry: Certificate selected from the inventory
            output_dir: Directory receiving <sanitized name>.p12 / .cer
            passphrase: PKCS#12 passphrase; "" is passed explicitly

        Returns:
            ExportResult describing which tier succeeded, or FAILED
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        keychain = keychain_for(entry, self.config)
        p12_path = export_path(output_dir, entry.common_name, ".p12")

        result = self.client.export_identity(keychain, entry.fingerprint, p12_path, passphrase)
        if result.ok:
            LOGGER.info("Exported identity %s to %s", entry.fingerprint, p12_path)
            return ExportResult(
                status=ExportStatus.FULL_IDENTITY,
                tier=ExportTier.UNPRIVILEGED,
                path=p12_path,
                artifact=self._verify_pkcs12(p12_path, passphrase, entry),
            )

        LOGGER.warning("Unprivileged export failed for %s", entry.fingerprint)
        self.console.print(
            "[yellow]Could not export the private key without elevated privileges, "
            "or the private key is not exportable.[/yellow]"
        )

        if self.confirm_elevation():
            elevated = self._export_elevated(keychain, entry, p12_path, passphrase)
            if elevated is not None:
                return elevated
            self._explain_non_exportable()
        else:
            LOGGER.info("Elevated export declined by user")

        return self._export_public(keychain, entry, p12_path.with_suffix(".cer"))

    def _export_elevated(
        self, keychain: Path, entry: CertificateEntry, p12_path: Path, passphrase: str
    ) -> ExportResult | None:
        self.console.print("Attempting sudo unlock + export...")
        unlock = self.client.unlock(keychain, elevated=True)
        if not unlock.ok:
            LOGGER.warning("Unlocking %s failed, trying export anyway", keychain)

        result = self.client.export_identity(
            keychain, entry.fingerprint, p12_path, passphrase, elevated=True
        )
        if not result.ok:
            LOGGER.warning("Elevated export failed for %s", entry.fingerprint)
            return None

        LOGGER.info("Exported identity %s with sudo to %s", entry.fingerprint, p12_path)
        return ExportResult(
            status=ExportStatus.FULL_IDENTITY,
            tier=ExportTier.ELEVATED,
            path=p12_path,
            artifact=self._verify_pkcs12(p12_path, passphrase, entry),
        )

    def _export_public(
        self, keychain: Path, entry: CertificateEntry, cer_path: Path
    ) -> ExportResult:
        result = self.client.find_certificate_pem(keychain, entry.fingerprint)
        pem = extract_pem(result.stdout) if result.ok else ""
        if not pem:
            LOGGER.error("Public certificate export failed for %s", entry.fingerprint)
            return ExportResult(
                status=ExportStatus.FAILED, tier=ExportTier.PUBLIC_ONLY, reason=FINAL_FAILURE
            )

        cer_path.write_text(pem, encoding="utf-8")
        LOGGER.info("Saved public certificate %s to %s", entry.fingerprint, cer_path)
        return ExportResult(
            status=ExportStatus.PUBLIC_CERT_ONLY,
            tier=ExportTier.PUBLIC_ONLY,
            path=cer_path,
            artifact=self._verify_public(cer_path, entry),
        )

    def _explain_non_exportable(self) -> None:
        self.console.print("[yellow]Export with sudo failed as well.[/yellow]")
        self.console.print("Possible reasons:")
        for reason in NON_EXPORTABLE_REASONS:
            self.console.print(f"  - {reason}")
        self.console.print("\nDiagnostic steps you can run:")
        for position, command in enumerate(diagnostic_commands(self.config), start=1):
            self.console.print(f"  {position}) {command}", markup=False)
        self.console.print("\nFalling back to exporting the public certificate only.")

    def _verify_pkcs12(
        self, path: Path, passphrase: str, entry: CertificateEntry
    ) -> ArtifactInfo | None:
        try:
            info = inspect_pkcs12(path, passphrase)
        except (OSError, ValueError) as e:
            LOGGER.warning("Could not read back %s: %s", path, e)
            return None
        if not info.has_private_key:
            LOGGER.warning("%s contains no private key", path)
        if info.fingerprint != entry.fingerprint:
            LOGGER.warning(
                "%s fingerprint %s differs from selected %s",
                path,
                info.fingerprint,
                entry.fingerprint,
            )
        return info

    def _verify_public(self, path: Path, entry: CertificateEntry) -> ArtifactInfo | None:
        try:
            info = inspect_public_certificate(path)
        except (OSError, ValueError) as e:
            LOGGER.warning("Could not read back %s: %s", path, e)
            return None
        if info.fingerprint != entry.fingerprint:
            LOGGER.warning(
                "%s fingerprint %s differs from selected %s",
                path,
                info.fingerprint,
                entry.fingerprint,
            )
        return info
