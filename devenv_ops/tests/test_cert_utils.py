"""Tests for certificate read-back utilities."""

from pathlib import Path

import pytest
from conftest import write_pkcs12
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from devenv_ops.lib.cert_utils import (
    get_common_name,
    inspect_pkcs12,
    inspect_public_certificate,
    load_certificate,
    sha1_fingerprint,
)


def test_load_pem_and_der(signing_cert: x509.Certificate) -> None:
    """Test that PEM and DER encodings load to the same certificate."""
    pem = signing_cert.public_bytes(serialization.Encoding.PEM)
    der = signing_cert.public_bytes(serialization.Encoding.DER)

    assert load_certificate(pem) == signing_cert
    assert load_certificate(der) == signing_cert


def test_sha1_fingerprint_format(signing_cert: x509.Certificate) -> None:
    """Test that the fingerprint is 40 uppercase hex characters."""
    fingerprint = sha1_fingerprint(signing_cert)

    assert len(fingerprint) == 40
    assert fingerprint == fingerprint.upper()
    int(fingerprint, 16)


def test_get_common_name(signing_cert: x509.Certificate) -> None:
    """Test that the subject CN is returned."""
    assert get_common_name(signing_cert) == "My Org/Dev Cert"


def test_inspect_public_certificate(
    tmp_path: Path, signing_cert_pem: str, signing_fingerprint: str
) -> None:
    """Test reading back an exported .cer file."""
    path = tmp_path / "My_Org_Dev_Cert.cer"
    path.write_text(signing_cert_pem, encoding="utf-8")

    info = inspect_public_certificate(path)

    assert info.fingerprint == signing_fingerprint
    assert info.common_name == "My Org/Dev Cert"
    assert not info.has_private_key


@pytest.mark.parametrize("passphrase", ["secret", ""])
def test_inspect_pkcs12(
    tmp_path: Path,
    signing_key: RSAPrivateKey,
    signing_cert: x509.Certificate,
    signing_fingerprint: str,
    passphrase: str,
) -> None:
    """Test reading back a .p12 bundle with and without a passphrase."""
    path = write_pkcs12(tmp_path / "dev.p12", signing_key, signing_cert, passphrase)

    info = inspect_pkcs12(path, passphrase)

    assert info.has_private_key
    assert info.fingerprint == signing_fingerprint


def test_inspect_pkcs12_wrong_passphrase(
    tmp_path: Path, signing_key: RSAPrivateKey, signing_cert: x509.Certificate
) -> None:
    """Test that a wrong passphrase raises ValueError."""
    path = write_pkcs12(tmp_path / "dev.p12", signing_key, signing_cert, "secret")

    with pytest.raises(ValueError):
        inspect_pkcs12(path, "wrong")
