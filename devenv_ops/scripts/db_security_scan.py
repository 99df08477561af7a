#!/usr/bin/env python3
"""Report sensitive-looking columns and values in a SQLite database."""

import argparse
import sqlite3
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devenv_ops.lib.db_scanner import DatabaseScanner
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.models import ScanFinding


def findings_table(findings: Sequence[ScanFinding]) -> Table:
    table = Table(title="Findings")
    table.add_column("Location")
    table.add_column("Table")
    table.add_column("Column")
    table.add_column("Match")
    table.add_column("Snippet", overflow="fold")
    for finding in findings:
        table.add_row(
            finding.location,
            escape(finding.table),
            escape(finding.column),
            finding.label,
            escape(finding.snippet),
        )
    return table


def main() -> int:
    """Scan one database and print every finding.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(
        description="Scan a SQLite database for sensitive columns and values"
    )
    parser.add_argument("database", type=Path, help="SQLite database file")
    args = parser.parse_args()

    if not args.database.is_file():
        LOGGER.error("Database not found: %s", args.database)
        return 1

    console = Console()
    try:
        findings = DatabaseScanner().scan(args.database)
    except sqlite3.Error as e:
        LOGGER.error("Could not read %s: %s", args.database, e)
        return 1

    if findings:
        console.print(findings_table(findings))
    console.print(f"Total findings: {len(findings)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
