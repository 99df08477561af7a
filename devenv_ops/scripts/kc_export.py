#!/usr/bin/env python3
"""Export a certificate from the login or system keychain as .p12 or .cer."""

import argparse
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devenv_ops.lib.config import KeychainConfig
from devenv_ops.lib.exceptions import DevEnvError, InvalidSelectionError
from devenv_ops.lib.exporter import ExportAttempter
from devenv_ops.lib.keychain import KeychainClient, KeychainInventory
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import ReadLine, confirm_yes_no, render_error, select_index
from devenv_ops.lib.models import ArtifactInfo, CertificateEntry, ExportStatus

INDEX_PROMPT = "Enter certificate index to export (or press Enter to quit): "
PASSPHRASE_PROMPT = "Enter export passphrase for .p12 (leave empty for no passphrase): "
ELEVATION_PROMPT = escape("Retry with sudo/unlock (may ask for macOS password)? [y/N]: ")


def inventory_table(entries: Sequence[CertificateEntry]) -> Table:
    """Return the numbered certificate table."""
    table = Table(title="Certificates")
    table.add_column("Idx", justify="right")
    table.add_column("Type")
    table.add_column("SHA1")
    table.add_column("Common Name")
    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), entry.kind.value, entry.fingerprint, escape(entry.common_name))
    return table


def print_artifact(console: Console, artifact: ArtifactInfo | None) -> None:
    if artifact is None:
        return
    console.print(f" Subject     : {artifact.common_name}", markup=False)
    console.print(f" Valid until : {artifact.not_valid_after}")
    if artifact.has_private_key:
        console.print(" Private key : included")


def export_selected(
    entries: Sequence[CertificateEntry],
    attempter: ExportAttempter,
    output_dir: Path,
    read_line: ReadLine,
    read_secret: Callable[[str], str],
    console: Console,
) -> int:
    """Ask for an index and a passphrase, then export that certificate.

    Returns:
        Exit code: 0 on export or when the user quits, 1 on invalid input or
        when every export tier failed
    """
    console.print(inventory_table(entries))
    console.print(f"Total certificates found: {len(entries)}")
    if not entries:
        return 0

    try:
        index = select_index(len(entries), INDEX_PROMPT, read_line)
    except InvalidSelectionError as e:
        LOGGER.error("Invalid certificate index: %s", e)
        render_error(console, e)
        return 1
    if index is None:
        console.print("Exit.")
        return 0

    passphrase = read_secret(PASSPHRASE_PROMPT)
    entry = entries[index]
    console.print(f"Exporting: {entry.common_name}", markup=False)
    console.print(f" Type : {entry.kind.value}")
    console.print(f" SHA1 : {entry.fingerprint}")

    result = attempter.export(entry, output_dir, passphrase)
    if result.status is ExportStatus.FULL_IDENTITY:
        console.print(f"[green]Exported .p12 ({result.tier.value}):[/green] {result.path}")
        print_artifact(console, result.artifact)
        return 0
    if result.status is ExportStatus.PUBLIC_CERT_ONLY:
        console.print(f"[green]Public certificate saved:[/green] {result.path}")
        print_artifact(console, result.artifact)
        console.print("Note: private key not exported.")
        return 0

    console.print(
        "[red]Final export attempt failed.[/red] Check keychain permissions or whether "
        "the private key is on a hardware token."
    )
    return 1


def main() -> int:
    """List keychain certificates and export the one the user picks.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Export a keychain certificate")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("exported_certs"),
        help="Directory for exported files (default: exported_certs)",
    )
    parser.add_argument("--login-keychain", type=Path, help="Login keychain path")
    parser.add_argument("--system-keychain", type=Path, help="System keychain path")
    args = parser.parse_args()

    console = Console()
    config = KeychainConfig(output_dir=args.output_dir)
    if args.login_keychain:
        config.login_keychain = args.login_keychain
    if args.system_keychain:
        config.system_keychain = args.system_keychain

    try:
        client = KeychainClient()
        console.print("Scanning Login & System keychains...")
        entries = KeychainInventory(client).scan_all(config)

        attempter = ExportAttempter(
            client,
            config,
            confirm_elevation=lambda: confirm_yes_no(console.input, ELEVATION_PROMPT),
            console=console,
        )
        return export_selected(
            entries,
            attempter,
            config.output_dir,
            console.input,
            lambda prompt: console.input(prompt, password=True),
            console,
        )

    except (EOFError, KeyboardInterrupt):
        console.print("\nCancelled.")
        return 1
    except DevEnvError as e:
        LOGGER.error("Keychain export failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
