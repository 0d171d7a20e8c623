import pytest
from datetime import timedelta

from cryptography import x509
from cryptography.x509.oid import NameOID

from pyp12cert.utilities import (
    cert_to_der,
    cert_to_pem,
    is_certificate_valid,
    issuer_name,
    serial_hex,
)
from conftest import make_certificate


def test_cert_to_pem(signer_cert):
    pem_bytes = cert_to_pem(signer_cert)

    assert isinstance(pem_bytes, bytes)
    assert pem_bytes.startswith(b'-----BEGIN CERTIFICATE-----')

    # Check that it can be loaded back
    loaded_cert = x509.load_pem_x509_certificate(pem_bytes)
    assert loaded_cert.serial_number == signer_cert.serial_number


def test_cert_to_der(signer_cert):
    der = cert_to_der(signer_cert)
    assert der[0] == 0x30
    assert x509.load_der_x509_certificate(der) == signer_cert


def test_is_certificate_valid(signer_cert, now):
    assert is_certificate_valid(signer_cert, now)
    assert is_certificate_valid(signer_cert)


def test_is_certificate_valid_inclusive_bounds(signer_cert):
    not_before = signer_cert.not_valid_before_utc
    not_after = signer_cert.not_valid_after_utc

    assert is_certificate_valid(signer_cert, not_before)
    assert is_certificate_valid(signer_cert, not_after)
    assert not is_certificate_valid(signer_cert, not_before - timedelta(seconds=1))
    assert not is_certificate_valid(signer_cert, not_after + timedelta(seconds=1))


def test_is_certificate_valid_naive_time_is_utc(signer_cert):
    naive_after = signer_cert.not_valid_after_utc.replace(tzinfo=None)
    assert is_certificate_valid(signer_cert, naive_after)
    assert not is_certificate_valid(signer_cert, naive_after + timedelta(seconds=1))


def test_issuer_name_reverses_encoded_order(signer_cert):
    assert issuer_name(signer_cert) == (
        "CN=AUTORIDAD DE CERTIFICACION SUBCA-2 SECURITY DATA, "
        "OU=ENTIDAD DE CERTIFICACION DE INFORMACION, "
        "O=SECURITY DATA S.A. 2, C=EC"
    )


def test_issuer_name_email_short_name(signer_key, now):
    issuer = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, u"EC"),
        x509.NameAttribute(NameOID.EMAIL_ADDRESS, u"ca@example.com"),
        x509.NameAttribute(NameOID.COMMON_NAME, u"TEST CA"),
    ])
    cert = make_certificate(
        signer_key, signer_key, issuer, issuer,
        now - timedelta(days=1), now + timedelta(days=1), leaf=False,
    )
    assert issuer_name(cert) == "CN=TEST CA, E=ca@example.com, C=EC"


def test_serial_hex(signer_cert):
    value = serial_hex(signer_cert)
    assert value == value.lower()
    assert int(value, 16) == signer_cert.serial_number
