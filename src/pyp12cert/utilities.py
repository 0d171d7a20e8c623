"""
This module provides utility functions for checking and rendering the
signer certificate.
"""
from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID

# Short names the signature format expects where they differ from RFC 4514
_SHORT_NAMES = {
    NameOID.EMAIL_ADDRESS: "E",
}


def is_certificate_valid(cert: x509.Certificate, now: Optional[datetime] = None) -> bool:
    """
    Checks the certificate's validity window.

    Args:
        cert: The certificate to check.
        now: The instant to check against. Defaults to the current UTC time;
             naive values are taken as UTC.

    Returns:
        True if ``not_valid_before <= now <= not_valid_after``, False otherwise.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return cert.not_valid_before_utc <= now <= cert.not_valid_after_utc


def issuer_name(cert: x509.Certificate) -> str:
    """
    Renders the issuer as ``shortName=value`` pairs joined by ``", "``.

    Attributes are emitted in the reverse of their encoded order, so a
    ``C, O, OU, CN`` issuer renders as ``CN=..., OU=..., O=..., C=...``.
    """
    attributes = reversed(list(cert.issuer))
    return ", ".join(
        f"{_SHORT_NAMES.get(attr.oid, attr.rfc4514_attribute_name)}={attr.value}"
        for attr in attributes
    )


def serial_hex(cert: x509.Certificate) -> str:
    """Returns the serial number as a lowercase hex string."""
    return format(cert.serial_number, "x")


def cert_to_pem(cert: x509.Certificate) -> bytes:
    """
    Converts a certificate object to PEM format.

    Args:
        cert: The certificate to convert.

    Returns:
        The PEM-encoded certificate as bytes.
    """
    return cert.public_bytes(encoding=serialization.Encoding.PEM)


def cert_to_der(cert: x509.Certificate) -> bytes:
    """Returns the DER encoding of a certificate."""
    return cert.public_bytes(encoding=serialization.Encoding.DER)
