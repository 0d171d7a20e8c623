import hashlib
import hmac
import os

import pytest
import datetime
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import char, univ

from pyp12cert import asn1, pbe
from pyp12cert.constants import (
    OID_CERT_BAG,
    OID_DATA,
    OID_FRIENDLY_NAME,
    OID_KEY_BAG,
    OID_PKCS8_SHROUDED_KEY_BAG,
    OID_SHA1,
    OID_X509_CERTIFICATE,
)

PASSWORD = "s3cr3t-p12"

NOW = datetime.datetime.now(datetime.timezone.utc)

ISSUER = x509.Name([
    x509.NameAttribute(NameOID.COUNTRY_NAME, u"EC"),
    x509.NameAttribute(NameOID.ORGANIZATION_NAME, u"SECURITY DATA S.A. 2"),
    x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, u"ENTIDAD DE CERTIFICACION DE INFORMACION"),
    x509.NameAttribute(NameOID.COMMON_NAME, u"AUTORIDAD DE CERTIFICACION SUBCA-2 SECURITY DATA"),
])


def _rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_certificate(key, issuer_key, subject, issuer, not_before, not_after, leaf=True):
    """Builds a certificate; leaf certificates carry the fuller extension set."""
    builder = x509.CertificateBuilder().subject_name(
        subject
    ).issuer_name(
        issuer
    ).public_key(
        key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        not_before
    ).not_valid_after(
        not_after
    ).add_extension(
        x509.BasicConstraints(ca=not leaf, path_length=None), critical=True,
    )
    if leaf:
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=True, content_commitment=True, key_encipherment=True,
                data_encipherment=False, key_agreement=False, key_cert_sign=False,
                crl_sign=False, encipher_only=False, decipher_only=False,
            ),
            critical=True,
        ).add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.EMAIL_PROTECTION]),
            critical=False,
        ).add_extension(
            x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False,
        ).add_extension(
            x509.SubjectAlternativeName([x509.RFC822Name(u"firmante@example.com")]), critical=False,
        )
    return builder.sign(issuer_key, hashes.SHA256())


@pytest.fixture(scope="session")
def ca_key():
    return _rsa_key()


@pytest.fixture(scope="session")
def signer_key():
    return _rsa_key()


@pytest.fixture(scope="session")
def second_key():
    return _rsa_key()


@pytest.fixture(scope="session")
def ca_cert(ca_key):
    return make_certificate(
        ca_key, ca_key, ISSUER, ISSUER,
        NOW - datetime.timedelta(days=3650), NOW + datetime.timedelta(days=3650),
        leaf=False,
    )


@pytest.fixture(scope="session")
def signer_cert(signer_key, ca_key):
    subject = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, u"EC"),
        x509.NameAttribute(NameOID.COMMON_NAME, u"JUAN PEREZ"),
    ])
    return make_certificate(
        signer_key, ca_key, subject, ISSUER,
        (NOW - datetime.timedelta(days=30)).replace(microsecond=0),
        (NOW + datetime.timedelta(days=335)).replace(microsecond=0),
    )


@pytest.fixture(scope="session")
def p12_bytes(signer_key, signer_cert, ca_cert):
    """A PKCS#12 file serialized by cryptography with its best available encryption."""
    return pkcs12.serialize_key_and_certificates(
        name=b"juan perez",
        key=signer_key,
        cert=signer_cert,
        cas=[pkcs12.PKCS12Certificate(ca_cert, b"SECURITY DATA S.A. 2 cert")],
        encryption_algorithm=serialization.BestAvailableEncryption(PASSWORD.encode()),
    )


@pytest.fixture(scope="session")
def legacy_p12_bytes(signer_key, signer_cert, ca_cert):
    """A PKCS#12 file protected with SHA1/3DES and a SHA-1 MAC."""
    encryption = (
        serialization.PrivateFormat.PKCS12.encryption_builder()
        .kdf_rounds(2048)
        .key_cert_algorithm(pkcs12.PBES.PBESv1SHA1And3KeyTripleDESCBC)
        .hmac_hash(hashes.SHA1())
        .build(PASSWORD.encode())
    )
    return pkcs12.serialize_key_and_certificates(
        name=b"juan perez",
        key=signer_key,
        cert=signer_cert,
        cas=[pkcs12.PKCS12Certificate(ca_cert, b"SECURITY DATA S.A. 2 cert")],
        encryption_algorithm=encryption,
    )


def _safe_bag(bag_id, value_der, friendly_name):
    bag = asn1.SafeBag()
    bag['bagId'] = bag_id
    bag['bagValue'] = value_der
    if friendly_name is not None:
        attribute = asn1.PKCS12Attribute()
        attribute['attrId'] = OID_FRIENDLY_NAME
        attribute['attrValues'].append(der_encoder.encode(char.BMPString(friendly_name)))
        bag['bagAttributes'].append(attribute)
    return bag


def build_pfx(certificates, keys, password=PASSWORD, shrouded=True, mac=True):
    """
    Assembles a PKCS#12 container bag by bag.

    Args:
        certificates: (x509.Certificate or its DER bytes, friendly name) pairs,
            in bag order.
        keys: (private key, friendly name) pairs, in bag order.
        password: Password for the shrouded key bags and the MAC.
        shrouded: Store keys in pkcs8ShroudedKeyBags rather than plain keyBags.
        mac: Add a SHA-1 integrity MAC.
    """
    safe_contents = asn1.SafeContents()
    for cert, name in certificates:
        if not isinstance(cert, bytes):
            cert = cert.public_bytes(serialization.Encoding.DER)
        cert_bag = asn1.CertBag()
        cert_bag['certId'] = OID_X509_CERTIFICATE
        cert_bag['certValue'] = der_encoder.encode(univ.OctetString(cert))
        safe_contents.append(_safe_bag(OID_CERT_BAG, der_encoder.encode(cert_bag), name))

    for key, name in keys:
        if shrouded:
            value = key.private_bytes(
                serialization.Encoding.DER,
                serialization.PrivateFormat.PKCS8,
                serialization.BestAvailableEncryption(password.encode()),
            )
            safe_contents.append(_safe_bag(OID_PKCS8_SHROUDED_KEY_BAG, value, name))
        else:
            value = key.private_bytes(
                serialization.Encoding.DER,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            )
            safe_contents.append(_safe_bag(OID_KEY_BAG, value, name))

    block = asn1.ContentInfo()
    block['contentType'] = OID_DATA
    block['content'] = der_encoder.encode(univ.OctetString(der_encoder.encode(safe_contents)))
    auth_safe = asn1.AuthenticatedSafe()
    auth_safe.append(block)
    content = der_encoder.encode(auth_safe)

    pfx = asn1.PFX()
    pfx['version'] = 3
    pfx['authSafe']['contentType'] = OID_DATA
    pfx['authSafe']['content'] = der_encoder.encode(univ.OctetString(content))
    if mac:
        salt = os.urandom(8)
        mac_key = pbe.pkcs12_kdf("sha1", pbe.KDF_ID_MAC, password, salt, 2048, 20)
        pfx['macData']['mac']['digestAlgorithm']['algorithm'] = OID_SHA1
        pfx['macData']['mac']['digest'] = hmac.new(mac_key, content, hashlib.sha1).digest()
        pfx['macData']['macSalt'] = salt
        pfx['macData']['iterations'] = 2048
    return der_encoder.encode(pfx)


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def pfx_builder():
    return build_pfx
