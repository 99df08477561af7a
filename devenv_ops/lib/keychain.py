"""Keychain access through the macOS ``security`` CLI and certificate inventory."""

import logging
from collections.abc import Callable
from pathlib import Path

from .config import KeychainConfig
from .models import CertificateEntry, CommandResult, KeychainKind
from .process import run_command
from .security_parser import parse_certificates, parse_identities

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


def sanitize_name(common_name: str) -> str:
    """Replace spaces and slashes with underscores for use as a file name.

    Idempotent: sanitizing an already sanitized name returns it unchanged.
    """
    return common_name.replace(" ", "_").replace("/", "_")


def export_path(output_dir: Path, common_name: str, suffix: str = ".p12") -> Path:
    """Return the deterministic export path for a certificate."""
    return output_dir / f"{sanitize_name(common_name)}{suffix}"


class KeychainClient:
    """Thin wrapper over the ``security`` commands used for inventory and export."""

    def __init__(self, runner: Runner = run_command) -> None:
        """Initialize keychain client.

        Args:
            runner: Process runner (injectable for tests)
        """
        self.runner = runner

    def find_identities(self, keychain: Path) -> str:
        """Return raw code-signing identity listing, "" if the query fails."""
        result = self.runner(
            ["security", "find-identity", "-p", "codesigning", "-v", str(keychain)]
        )
        return result.stdout if result.ok else ""

    def find_certificates(self, keychain: Path) -> str:
        """Return raw listing of every certificate with SHA-1 hashes, "" on failure."""
        result = self.runner(["security", "find-certificate", "-a", "-Z", str(keychain)])
        return result.stdout if result.ok else ""

    def export_identity(
        self,
        keychain: Path,
        fingerprint: str,
        output: Path,
        passphrase: str,
        elevated: bool = False,
    ) -> CommandResult:
        """Export certificate + private key as PKCS#12.

        ``-P`` is always passed, including an empty passphrase; omitting it makes
        ``security`` prompt interactively.
        """
        args = [
            "security",
            "export",
            "-k",
            str(keychain),
            "-t",
            "identities",
            "-f",
            "pkcs12",
            "-o",
            str(output),
            "-P",
            passphrase,
            "-Z",
            fingerprint,
        ]
        if elevated:
            args = ["sudo", *args]
        return self.runner(args)

    def unlock(self, keychain: Path, elevated: bool = False) -> CommandResult:
        """Unlock a keychain (may prompt for the macOS password)."""
        args = ["security", "unlock-keychain", str(keychain)]
        if elevated:
            args = ["sudo", *args]
        return self.runner(args, capture=False)

    def find_certificate_pem(self, keychain: Path, fingerprint: str) -> CommandResult:
        """Return the public certificate matching fingerprint in PEM form."""
        return self.runner(
            ["security", "find-certificate", "-Z", fingerprint, "-p", str(keychain)]
        )


class KeychainInventory:
    """Builds the numbered certificate list shown by the export tool."""

    def __init__(self, client: KeychainClient) -> None:
        """Initialize inventory builder.

        Args:
            client: Keychain client used for the raw queries
        """
        self.client = client

    def scan(
        self,
        keychain: Path,
        kind: KeychainKind,
        known: list[CertificateEntry] | None = None,
    ) -> list[CertificateEntry]:
        """Scan one keychain for identities, then for all certificates.

        Args:
            keychain: Keychain file to query
            kind: Label recorded on each entry
            known: Entries already discovered (their fingerprints are not repeated)

        Returns:
            New entries from this keychain: identities first, then public
            certificates whose fingerprint was not seen before
        """
        seen = {entry.fingerprint for entry in known or []}
        entries: list[CertificateEntry] = []

        for fingerprint, name in parse_identities(self.client.find_identities(keychain)):
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            entries.append(
                CertificateEntry(
                    kind=kind, fingerprint=fingerprint, common_name=name, has_identity=True
                )
            )

        for fingerprint, name in parse_certificates(self.client.find_certificates(keychain)):
            if fingerprint in seen:
                continue
            seen.add(fingerprint)
            entries.append(CertificateEntry(kind=kind, fingerprint=fingerprint, common_name=name))

        logger.info("Found %d certificates in %s keychain", len(entries), kind.value)
        return entries

    def scan_all(self, config: KeychainConfig) -> list[CertificateEntry]:
        """Scan login then system keychain, deduplicating across both."""
        entries = self.scan(config.login_keychain, KeychainKind.LOGIN)
        entries += self.scan(config.system_keychain, KeychainKind.SYSTEM, known=entries)
        return entries


def keychain_for(entry: CertificateEntry, config: KeychainConfig) -> Path:
    """Return the keychain file an entry was discovered in."""
    if entry.kind is KeychainKind.LOGIN:
        return config.login_keychain
    return config.system_keychain
