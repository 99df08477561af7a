"""Scan SQLite databases for sensitive-looking column names and values."""

import logging
import re
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from .config import ScannerConfig
from .models import ScanFinding

logger = logging.getLogger(__name__)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class DatabaseScanner:
    """Flags columns whose names contain a keyword and cells matching a regex or keyword."""

    def __init__(self, config: ScannerConfig | None = None) -> None:
        """Initialize scanner.

        Args:
            config: Patterns and keywords (defaults to ScannerConfig())
        """
        self.config = config or ScannerConfig()
        self.patterns = {
            label: re.compile(pattern) for label, pattern in self.config.patterns.items()
        }
        self.keywords = [(keyword, keyword.lower()) for keyword in self.config.keywords]

    def scan(self, db_path: Path) -> list[ScanFinding]:
        """Scan every table of a database opened read-only.

        Tables that cannot be read are skipped.

        Raises:
            sqlite3.Error: If the file cannot be opened as a database
        """
        uri = f"{db_path.resolve().as_uri()}?mode=ro"
        connection = sqlite3.connect(uri, uri=True)
        try:
            tables = [
                row[0]
                for row in connection.execute(
                    "SELECT name FROM sqlite_master WHERE type='table'"
                )
            ]
            findings: list[ScanFinding] = []
            for table in tables:
                try:
                    findings.extend(self._scan_table(connection, table))
                except sqlite3.Error as e:
                    logger.warning("Skipping table %s: %s", table, e)
            return findings
        finally:
            connection.close()

    def _scan_table(self, connection: sqlite3.Connection, table: str) -> list[ScanFinding]:
        cursor = connection.execute(f"SELECT * FROM {_quote(table)}")
        columns = [description[0] for description in cursor.description]

        findings = list(self.check_columns(table, columns))
        for row in cursor:
            for column, cell in zip(columns, row):
                finding = self.check_value(table, column, cell)
                if finding is not None:
                    findings.append(finding)
        return findings

    def check_columns(self, table: str, columns: list[str]) -> Iterator[ScanFinding]:
        """Yield one finding per (column, keyword) pair where the name contains the keyword."""
        for column in columns:
            lowered = column.lower()
            for keyword, needle in self.keywords:
                if needle in lowered:
                    yield ScanFinding(
                        location="COLUMN",
                        table=table,
                        column=column,
                        label=f"COLUMN_KEYWORD_{keyword.upper()}",
                    )

    def check_value(self, table: str, column: str, cell: object) -> ScanFinding | None:
        """Return a finding for the first regex, then keyword, matching the cell."""
        if cell is None:
            return None
        text = cell.decode(errors="replace") if isinstance(cell, bytes) else str(cell)

        label = self._match_label(text)
        if label is None:
            return None
        return ScanFinding(
            location="VALUE",
            table=table,
            column=column,
            label=label,
            snippet=self.snippet(text),
        )

    def _match_label(self, text: str) -> str | None:
        for label, pattern in self.patterns.items():
            if not pattern.search(text):
                continue
            # E.164 numbers carry at least 7 digits
            if label == "phone_universal":
                digits = re.sub(r"[^0-9]", "", text)
                if len(digits) < self.config.min_phone_digits:
                    continue
            return f"REGEX_{label.upper()}"

        lowered = text.lower()
        for keyword, needle in self.keywords:
            if needle in lowered:
                return f"KEYWORD_{keyword.upper()}"
        return None

    def snippet(self, text: str) -> str:
        return text[: self.config.snippet_length].replace("\n", " ").strip()
