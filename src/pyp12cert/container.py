"""
This module decodes password protected PKCS#12 (PFX) containers into typed
certificate and private key bags.
"""
import base64
import binascii
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pyasn1.type import univ

from . import asn1, pbe
from .constants import (
    OID_CERT_BAG,
    OID_DATA,
    OID_ENCRYPTED_DATA,
    OID_FRIENDLY_NAME,
    OID_KEY_BAG,
    OID_LOCAL_KEY_ID,
    OID_PKCS8_SHROUDED_KEY_BAG,
    OID_SAFE_CONTENTS_BAG,
    OID_X509_CERTIFICATE,
    PFX_VERSION,
)
from .exceptions import MalformedContainerError


logger = logging.getLogger(__name__)


class BagType(enum.Enum):
    """The PKCS#12 bag kinds this library decodes."""
    CERT_BAG = OID_CERT_BAG
    PKCS8_SHROUDED_KEY_BAG = OID_PKCS8_SHROUDED_KEY_BAG
    KEY_BAG = OID_KEY_BAG

    @classmethod
    def from_oid(cls, oid: univ.ObjectIdentifier) -> Optional["BagType"]:
        for member in cls:
            if member.value == oid:
                return member
        return None


@dataclass(frozen=True)
class DecodedKey:
    """A key bag payload already decoded into an RSA private key."""
    key: rsa.RSAPrivateKey


@dataclass(frozen=True)
class RawKeyPayload:
    """A key bag payload kept as its decrypted PrivateKeyInfo DER."""
    der: bytes


KeyPayload = Union[DecodedKey, RawKeyPayload]


@dataclass(frozen=True)
class CertificateBag:
    certificate: x509.Certificate
    friendly_names: Tuple[str, ...] = ()
    local_key_id: Optional[bytes] = None

    @property
    def friendly_name(self) -> str:
        return self.friendly_names[0] if self.friendly_names else ""

    @property
    def extension_count(self) -> int:
        return len(self.certificate.extensions)


@dataclass(frozen=True)
class KeyBag:
    """A pkcs8ShroudedKeyBag or plain keyBag; ``bag_type`` records which."""
    payload: KeyPayload
    friendly_names: Tuple[str, ...] = ()
    local_key_id: Optional[bytes] = None
    bag_type: BagType = BagType.PKCS8_SHROUDED_KEY_BAG

    @property
    def friendly_name(self) -> str:
        return self.friendly_names[0] if self.friendly_names else ""


Bag = Union[CertificateBag, KeyBag]


@dataclass
class Container:
    """
    The decoded content of one PKCS#12 container.

    Bags are grouped by kind and kept in the order they appear in the file.
    """
    bags: Dict[BagType, List[Bag]] = field(default_factory=lambda: {t: [] for t in BagType})
    mac_verified: bool = False

    def bags_by_type(self, bag_type: BagType) -> List[Bag]:
        """Returns the bags of ``bag_type`` in encounter order."""
        return list(self.bags[bag_type])

    @property
    def cert_bags(self) -> List[CertificateBag]:
        return self.bags_by_type(BagType.CERT_BAG)

    @property
    def key_bags(self) -> List[KeyBag]:
        """Shrouded key bags, or the plain key bags when there are none."""
        shrouded = self.bags_by_type(BagType.PKCS8_SHROUDED_KEY_BAG)
        return shrouded or self.bags_by_type(BagType.KEY_BAG)

    def add(self, bag_type: BagType, bag: Bag) -> None:
        self.bags[bag_type].append(bag)


def _to_der(data: bytes) -> bytes:
    # DER/BER input starts with a SEQUENCE tag; anything else may be base64 text.
    if data[:1] == b"\x30":
        return data
    try:
        return base64.b64decode(b"".join(data.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedContainerError("Data is neither DER nor base64 encoded PKCS#12") from exc


def _read_attributes(safe_bag: asn1.SafeBag) -> Tuple[Tuple[str, ...], Optional[bytes]]:
    friendly_names: List[str] = []
    local_key_id = None
    attributes = safe_bag['bagAttributes']
    if not attributes.isValue:
        return (), None

    for attribute in attributes:
        if attribute['attrId'] == OID_FRIENDLY_NAME:
            for value in attribute['attrValues']:
                friendly_names.append(str(asn1.decode(value, asn1.FriendlyName())))
        elif attribute['attrId'] == OID_LOCAL_KEY_ID:
            for value in attribute['attrValues']:
                local_key_id = asn1.decode(value, univ.OctetString()).asOctets()
    return tuple(friendly_names), local_key_id


def _load_certificate(bag_value) -> x509.Certificate:
    cert_bag = asn1.decode(bag_value, asn1.CertBag())
    if cert_bag['certId'] != OID_X509_CERTIFICATE:
        raise MalformedContainerError(f"Unsupported certificate type {cert_bag['certId']}")
    der = asn1.decode(cert_bag['certValue'], univ.OctetString()).asOctets()
    try:
        cert = x509.load_der_x509_certificate(der)
        # Fields are parsed on first access; read the ones selection and rendering use.
        cert.issuer, cert.extensions, cert.not_valid_before_utc, cert.not_valid_after_utc
    except (ValueError, x509.InvalidVersion, x509.DuplicateExtension) as exc:
        raise MalformedContainerError(f"Invalid certificate in cert bag: {exc}") from exc
    return cert


def _key_payload(private_key_info: bytes) -> KeyPayload:
    try:
        key = serialization.load_der_private_key(private_key_info, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        logger.debug("Keeping key bag undecoded: %s", exc)
        return RawKeyPayload(private_key_info)
    if isinstance(key, rsa.RSAPrivateKey):
        return DecodedKey(key)
    logger.debug("Keeping %s key bag undecoded", type(key).__name__)
    return RawKeyPayload(private_key_info)


def _read_safe_contents(data: bytes, password: str, container: Container) -> None:
    safe_contents = asn1.decode(data, asn1.SafeContents())
    for safe_bag in safe_contents:
        bag_id = safe_bag['bagId']
        bag_value = safe_bag['bagValue']

        if bag_id == OID_SAFE_CONTENTS_BAG:
            _read_safe_contents(bag_value.asOctets(), password, container)
            continue

        bag_type = BagType.from_oid(bag_id)
        if bag_type is None:
            logger.debug("Skipping unsupported bag type %s", bag_id)
            continue

        friendly_names, local_key_id = _read_attributes(safe_bag)
        if bag_type is BagType.CERT_BAG:
            bag = CertificateBag(_load_certificate(bag_value), friendly_names, local_key_id)
        elif bag_type is BagType.PKCS8_SHROUDED_KEY_BAG:
            encrypted = asn1.decode(bag_value, asn1.EncryptedPrivateKeyInfo())
            private_key_info = pbe.decrypt(encrypted['encryptionAlgorithm'],
                                           encrypted['encryptedData'].asOctets(), password)
            bag = KeyBag(_key_payload(private_key_info), friendly_names, local_key_id, bag_type)
        else:
            bag = KeyBag(_key_payload(bag_value.asOctets()), friendly_names, local_key_id, bag_type)

        logger.debug("Decoded %s (friendly name %r)", bag_type.name, bag.friendly_name)
        container.add(bag_type, bag)


def _read_encrypted_data(content, password: str) -> bytes:
    encrypted_data = asn1.decode(content, asn1.EncryptedData())
    info = encrypted_data['encryptedContentInfo']
    if info['contentType'] != OID_DATA:
        raise MalformedContainerError(f"Unsupported encrypted content type {info['contentType']}")
    if not info['encryptedContent'].isValue:
        raise MalformedContainerError("Encrypted safe contents carry no data")
    return pbe.decrypt(info['contentEncryptionAlgorithm'], info['encryptedContent'].asOctets(), password)


def decode(data: bytes, password: str) -> Container:
    """
    Decodes a PKCS#12 container.

    Args:
        data: The container as DER (or base64 text of the DER).
        password: The container password, used for the MAC and for decryption.

    Returns:
        A Container with the certificate and key bags in file order.

    Raises:
        MalformedContainerError: If the bytes are not a supported PKCS#12 structure.
        AuthenticationError: If the password fails the MAC check or does not decrypt the bags.
    """
    if not data:
        raise MalformedContainerError("Empty PKCS#12 data")
    pfx = asn1.decode(_to_der(bytes(data)), asn1.PFX())

    if int(pfx['version']) != PFX_VERSION:
        raise MalformedContainerError(f"Unsupported PFX version {int(pfx['version'])}")
    auth_safe = pfx['authSafe']
    if auth_safe['contentType'] != OID_DATA or not auth_safe['content'].isValue:
        raise MalformedContainerError(f"Unsupported PFX content type {auth_safe['contentType']}")
    content = asn1.decode(auth_safe['content'], univ.OctetString()).asOctets()

    container = Container()
    if pfx['macData'].isValue:
        pbe.verify_mac(pfx['macData'], content, password)
        container.mac_verified = True
    else:
        logger.debug("Container has no integrity MAC")

    for index, content_info in enumerate(asn1.decode(content, asn1.AuthenticatedSafe())):
        content_type = content_info['contentType']
        if content_type == OID_DATA:
            logger.debug("Block %d: plain safe contents", index)
            safe_contents = asn1.decode(content_info['content'], univ.OctetString()).asOctets()
        elif content_type == OID_ENCRYPTED_DATA:
            logger.debug("Block %d: encrypted safe contents", index)
            safe_contents = _read_encrypted_data(content_info['content'], password)
        else:
            raise MalformedContainerError(f"Unsupported safe contents type {content_type}")
        _read_safe_contents(safe_contents, password, container)

    logger.info(
        "Decoded PKCS#12 container: %d certificate bag(s), %d key bag(s)",
        len(container.cert_bags), len(container.key_bags),
    )
    return container
