"""Parsers for macOS ``security`` CLI output.

Output formats handled:

``security find-identity -p codesigning -v <keychain>``::

      1) 0123456789ABCDEF0123456789ABCDEF01234567 "Apple Development: Jane Doe (ABCDE12345)"
         1 valid identities found

``security find-certificate -a -Z <keychain>``::

    SHA-256 hash: ...
    SHA-1 hash: 0123456789abcdef0123456789abcdef01234567
    keychain: "/Users/jane/Library/Keychains/login.keychain-db"
    attributes:
        "alis"<blob>="Apple Root CA"

Lines that do not fit are skipped.
"""

import re

from .models import UNKNOWN_FINGERPRINT

NO_IDENTITIES_MARKER = "0 valid identities found"

_NO_IDENTITIES = re.compile(r"\b" + re.escape(NO_IDENTITIES_MARKER), re.IGNORECASE)
_IDENTITY_LINE = re.compile(r"\)\s*([0-9A-F]{40})\s+\"([^\"]+)\"")
_SHA1_LINE = re.compile(r"^SHA-1\S*\s+\S+\s+([0-9A-Fa-f]+)")
_ALIAS_LINE = re.compile(r"\"alis\"<blob>=\"([^\"]*)\"")
_PEM_BLOCK = re.compile(
    r"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.DOTALL
)


def parse_identities(output: str) -> list[tuple[str, str]]:
    """Parse find-identity output into (fingerprint, name) pairs.

    Args:
        output: Raw stdout of ``security find-identity``

    Returns:
        Unique (fingerprint, display name) pairs in output order; empty when the
        tool reports zero valid identities
    """
    if not output.strip() or _NO_IDENTITIES.search(output):
        return []

    identities: list[tuple[str, str]] = []
    seen: set[str] = set()
    for line in output.splitlines():
        match = _IDENTITY_LINE.search(line)
        if not match:
            continue
        fingerprint, name = match.group(1), match.group(2)
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        identities.append((fingerprint, name))
    return identities


def parse_certificates(output: str) -> list[tuple[str, str]]:
    """Parse find-certificate -a -Z output into (fingerprint, name) pairs.

    A ``SHA-1`` line sets the current fingerprint; the following ``"alis"``
    attribute line emits a record. Records whose alias is empty are skipped.
    A record with no preceding SHA-1 line gets the UNKNOWN sentinel.

    Args:
        output: Raw stdout of ``security find-certificate``

    Returns:
        (fingerprint, display name) pairs in output order, duplicates included
    """
    certificates: list[tuple[str, str]] = []
    current_sha = ""
    for line in output.splitlines():
        sha_match = _SHA1_LINE.match(line.strip())
        if sha_match:
            current_sha = sha_match.group(1).upper()
            continue

        alias_match = _ALIAS_LINE.search(line)
        if not alias_match:
            continue
        name = alias_match.group(1)
        if not name:
            continue
        certificates.append((current_sha or UNKNOWN_FINGERPRINT, name))
        current_sha = ""
    return certificates


def extract_pem(output: str) -> str:
    """Return the first PEM certificate block in output, or "" if none."""
    match = _PEM_BLOCK.search(output)
    return f"{match.group(0)}\n" if match else ""
