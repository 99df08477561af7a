"""Certificate utility functions for reading back exported keychain artifacts."""

from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import pkcs12

from .models import ArtifactInfo


def load_certificate(data: bytes) -> x509.Certificate:
    """Load a certificate from PEM, falling back to DER."""
    if b"-----BEGIN CERTIFICATE-----" in data:
        return x509.load_pem_x509_certificate(data)
    return x509.load_der_x509_certificate(data)


def sha1_fingerprint(cert: x509.Certificate) -> str:
    """Return the uppercase hex SHA-1 fingerprint, as ``security`` prints it."""
    return cert.fingerprint(hashes.SHA1()).hex().upper()  # noqa: S303


def get_common_name(cert: x509.Certificate) -> str:
    """Return the subject CN, or "" when the subject has none."""
    attributes = cert.subject.get_attributes_for_oid(x509.NameOID.COMMON_NAME)
    if not attributes:
        return ""
    value = attributes[0].value
    return value if isinstance(value, str) else value.decode()


def inspect_public_certificate(path: Path) -> ArtifactInfo:
    """Read an exported .cer file.

    Raises:
        ValueError: If the file is not a certificate
    """
    cert = load_certificate(path.read_bytes())
    return ArtifactInfo(
        path=path,
        common_name=get_common_name(cert),
        fingerprint=sha1_fingerprint(cert),
        not_valid_after=cert.not_valid_after_utc.isoformat(),
        has_private_key=False,
    )


def inspect_pkcs12(path: Path, passphrase: str) -> ArtifactInfo:
    """Read an exported .p12 bundle with its passphrase.

    An empty passphrase is tried as both ``b""`` and no password, since
    exporters differ in how they encode it.

    Raises:
        ValueError: If the bundle cannot be decrypted or holds no certificate
    """
    data = path.read_bytes()
    try:
        key, cert, _ = pkcs12.load_key_and_certificates(data, passphrase.encode())
    except ValueError:
        if passphrase:
            raise
        key, cert, _ = pkcs12.load_key_and_certificates(data, None)

    if cert is None:
        raise ValueError(f"no certificate in {path}")

    return ArtifactInfo(
        path=path,
        common_name=get_common_name(cert),
        fingerprint=sha1_fingerprint(cert),
        not_valid_after=cert.not_valid_after_utc.isoformat(),
        has_private_key=key is not None,
    )
