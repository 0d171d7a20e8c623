"""
Selection of the signer certificate and its private key among the bags of a
decoded container.
"""
import logging
from typing import Mapping, Optional, Sequence

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .constants import COMPANION_CERT_BAG_INDEX, INCORRECT_PASSWORD_MESSAGE, KEY_SELECTION_POLICIES
from .container import CertificateBag, DecodedKey, RawKeyPayload, KeyBag
from .exceptions import KeyDecodeError, KeySelectionError, NoCertificateFoundError, NoKeyBagFoundError


logger = logging.getLogger(__name__)


def select_certificate_bag(bags: Sequence[CertificateBag]) -> CertificateBag:
    """
    Selects the signer certificate: the one with the most X.509 extensions.

    Ties keep the bag encountered first.

    Raises:
        NoCertificateFoundError: If ``bags`` is empty.
    """
    if not bags:
        raise NoCertificateFoundError(INCORRECT_PASSWORD_MESSAGE)

    selected = bags[0]
    for bag in bags[1:]:
        if bag.extension_count > selected.extension_count:
            selected = bag
    logger.debug("Selected certificate with %d extension(s) out of %d bag(s)",
                 selected.extension_count, len(bags))
    return selected


def companion_friendly_name(bags: Sequence[CertificateBag]) -> str:
    """
    Returns the friendly name identifying the issuer's packaging convention.

    It is read from the second cert bag; single certificate containers use
    their only bag.

    Raises:
        NoCertificateFoundError: If ``bags`` is empty.
    """
    if not bags:
        raise NoCertificateFoundError("The container holds no certificate bag")
    index = COMPANION_CERT_BAG_INDEX if len(bags) > COMPANION_CERT_BAG_INDEX else 0
    return bags[index].friendly_name


def _matching_policy(friendly_name: str, policies: Mapping[str, str]) -> Optional[str]:
    for marker in policies:
        if marker in friendly_name:
            return marker
    return None


def select_key_bag(bags: Sequence[KeyBag], friendly_name: str,
                   policies: Optional[Mapping[str, str]] = None) -> KeyBag:
    """
    Selects the key bag holding the signing key.

    Args:
        bags: Key bags in container order.
        friendly_name: The companion friendly name of the certificate bags.
        policies: Issuer marker -> text the key bag friendly name must contain.
            Defaults to ``constants.KEY_SELECTION_POLICIES``.

    Raises:
        NoKeyBagFoundError: If ``bags`` is empty.
        KeySelectionError: If an issuer marker matches but no key bag carries
            the required friendly name.
    """
    if not bags:
        raise NoKeyBagFoundError("The container holds no private key bag")
    if policies is None:
        policies = KEY_SELECTION_POLICIES

    marker = _matching_policy(friendly_name, policies)
    if marker is None:
        return bags[0]

    required = policies[marker]
    for bag in bags:
        if required in bag.friendly_name:
            logger.debug("Selected key bag %r for issuer %r", bag.friendly_name, marker)
            return bag
    raise KeySelectionError(marker, required)


def resolve_private_key(bag: KeyBag) -> rsa.RSAPrivateKey:
    """
    Returns the RSA private key of a key bag, decoding a raw payload if needed.

    Raises:
        KeyDecodeError: If the payload is not an RSA private key.
    """
    payload = bag.payload
    if isinstance(payload, DecodedKey):
        return payload.key
    if not isinstance(payload, RawKeyPayload):
        raise KeyDecodeError(f"Key bag carries no key material: {payload!r}")

    try:
        key = serialization.load_der_private_key(payload.der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyDecodeError(f"Unable to decode private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyDecodeError(f"Unsupported private key type {type(key).__name__}")
    return key
