"""Tests for security CLI output parsers."""

from conftest import read_sample

from devenv_ops.lib.models import UNKNOWN_FINGERPRINT
from devenv_ops.lib.security_parser import extract_pem, parse_certificates, parse_identities


class TestParseIdentities:
    """Tests for parse_identities."""

    def test_parses_sample_without_duplicates(self) -> None:
        """Test that identities listed in both sections appear once."""
        identities = parse_identities(read_sample("security_find_identity.txt"))

        assert identities == [
            (
                "1A2B3C4D5E6F7A8B9C0D1E2F3A4B5C6D7E8F9A0B",
                "Apple Development: Jane Doe (ABCDE12345)",
            ),
            (
                "0F1E2D3C4B5A69788796A5B4C3D2E1F00F1E2D3C",
                "Apple Distribution: Example Corp (ZXCVB67890)",
            ),
        ]

    def test_zero_valid_identities(self) -> None:
        """Test that the zero-identities marker yields an empty list."""
        output = "\nPolicy: Code Signing\n  Matching identities\n     0 valid identities found\n"

        assert parse_identities(output) == []

    def test_ten_identities_is_not_zero(self) -> None:
        """Test that a count ending in zero is not mistaken for zero identities."""
        line = '  1) 1A2B3C4D5E6F7A8B9C0D1E2F3A4B5C6D7E8F9A0B "Dev"\n'

        assert len(parse_identities(line + "     10 valid identities found\n")) == 1

    def test_empty_output(self) -> None:
        """Test that blank output yields an empty list."""
        assert parse_identities("") == []
        assert parse_identities("   \n") == []

    def test_malformed_lines_skipped(self) -> None:
        """Test that lines without a 40-hex fingerprint are ignored."""
        output = '  1) NOTAHASH "Broken"\n  2) 1A2B3C "Short"\n'

        assert parse_identities(output) == []


class TestParseCertificates:
    """Tests for parse_certificates."""

    def test_parses_sample(self) -> None:
        """Test fingerprints are uppercased and empty aliases dropped."""
        certificates = parse_certificates(read_sample("security_find_certificate.txt"))

        assert certificates == [
            (
                "1A2B3C4D5E6F7A8B9C0D1E2F3A4B5C6D7E8F9A0B",
                "Apple Development: Jane Doe (ABCDE12345)",
            ),
            ("9988776655443322110099887766554433221100", "My Org/Dev Cert"),
        ]

    def test_alias_without_hash_uses_unknown(self) -> None:
        """Test that an alias with no preceding SHA-1 line gets the sentinel."""
        output = 'attributes:\n    "alis"<blob>="Orphan"\n'

        assert parse_certificates(output) == [(UNKNOWN_FINGERPRINT, "Orphan")]

    def test_hash_does_not_leak_to_next_record(self) -> None:
        """Test that a hash is used for one alias only."""
        output = (
            "SHA-1 hash: AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA\n"
            '    "alis"<blob>="First"\n'
            '    "alis"<blob>="Second"\n'
        )

        assert parse_certificates(output) == [
            ("AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", "First"),
            (UNKNOWN_FINGERPRINT, "Second"),
        ]

    def test_duplicates_are_kept(self) -> None:
        """Test that the parser leaves deduplication to the inventory."""
        block = 'SHA-1 hash: BBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBBB\n    "alis"<blob>="Dup"\n'

        assert len(parse_certificates(block * 2)) == 2


class TestExtractPem:
    """Tests for extract_pem."""

    def test_first_block_with_newline(self, signing_cert_pem: str) -> None:
        """Test that the first PEM block is returned with a trailing newline."""
        output = "keychain noise\n" + signing_cert_pem + signing_cert_pem

        pem = extract_pem(output)

        assert pem == signing_cert_pem.strip() + "\n"

    def test_no_block(self) -> None:
        """Test that output without a certificate yields an empty string."""
        assert extract_pem("security: SecKeychainSearchCopyNext: not found") == ""
