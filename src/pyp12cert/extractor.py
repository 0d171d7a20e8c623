"""
This module assembles everything an XAdES signature builder needs from a
PKCS#12 container: the signer certificate in its canonical encodings, the
RSA public numbers, the private key and the random element identifiers.
"""
import logging
import random
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple

from . import container as p12_container
from .certificate import CertInfo, ExtractionResult, RandomValues
from .codec import (
    bigint_to_base64,
    bounded_random,
    hex_to_base64,
    sha1_to_base64,
    strip_pem,
    wrap_base64,
)
from .constants import EXPONENT_LIMB_BITS, RANDOM_VALUE_BOUNDS
from .exceptions import ExpiredOrNotYetValidError
from .selector import (
    companion_friendly_name,
    resolve_private_key,
    select_certificate_bag,
    select_key_bag,
)
from .utilities import cert_to_der, cert_to_pem, is_certificate_valid, issuer_name, serial_hex


logger = logging.getLogger(__name__)


def draw_random_values(rng: Optional[random.Random] = None,
                       bounds: Mapping[str, Tuple[int, int]] = RANDOM_VALUE_BOUNDS) -> RandomValues:
    """
    Draws one bounded random integer per signature element identifier.

    Args:
        rng: Random source passed to ``codec.bounded_random``.
        bounds: Slot name -> inclusive (min, max).
    """
    return RandomValues(**{
        slot: bounded_random(low, high, rng=rng) for slot, (low, high) in bounds.items()
    })


def exponent_to_base64(public_exponent: int) -> str:
    """
    Encodes the low limb of the public exponent as base64.

    Exponents below 2**28, 65537 included, are encoded whole.
    """
    limb = public_exponent & ((1 << EXPONENT_LIMB_BITS) - 1)
    return hex_to_base64(format(limb, "x"))


def signing_time(now: datetime) -> str:
    """Formats ``now`` as ISO-8601 truncated to whole seconds, without offset."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S")


def extract_cert_info(container_bytes: bytes, password: str,
                      rng: Optional[random.Random] = None,
                      now: Optional[datetime] = None,
                      policies: Optional[Mapping[str, str]] = None) -> ExtractionResult:
    """
    Extracts the signer certificate information from a PKCS#12 container.

    Args:
        container_bytes: The raw container (DER or base64 text).
        password: The container password.
        rng: Random source for the element identifiers.
        now: The instant used for the validity check and the signing time.
             Defaults to the current UTC time.
        policies: Issuer marker -> required key bag friendly name text.

    Returns:
        An ExtractionResult with the random identifiers and the certificate info.

    Raises:
        MalformedContainerError: If the bytes are not a PKCS#12 container.
        AuthenticationError: If the password is incorrect.
        NoCertificateFoundError: If the container holds no certificate.
        NoKeyBagFoundError: If the container holds no private key.
        KeySelectionError: If the issuer's signing key bag is missing.
        KeyDecodeError: If the selected key is not an RSA private key.
        ExpiredOrNotYetValidError: If the certificate is outside its validity window.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    decoded = p12_container.decode(container_bytes, password)
    cert_bags = decoded.cert_bags
    key_bags = decoded.key_bags

    cert_bag = select_certificate_bag(cert_bags)
    friendly_name = companion_friendly_name(cert_bags)
    cert = cert_bag.certificate

    if not is_certificate_valid(cert, now):
        raise ExpiredOrNotYetValidError(cert.not_valid_before_utc, cert.not_valid_after_utc, now)

    issuer = issuer_name(cert)
    logger.info("Selected signer certificate %s issued by %s", serial_hex(cert), issuer)

    key = resolve_private_key(select_key_bag(key_bags, friendly_name, policies))
    public_numbers = key.private_numbers().public_numbers

    certificate_x509 = wrap_base64(strip_pem(cert_to_pem(cert).decode("ascii")))
    digest_value = sha1_to_base64(cert_to_der(cert))

    cert_info = CertInfo(
        digest_value=digest_value,
        issuer_name=issuer,
        issuer_serial_number=int(serial_hex(cert), 16),
        signing_time=signing_time(now),
        certificate_x509=certificate_x509,
        modulus=wrap_base64(bigint_to_base64(public_numbers.n)),
        exponent=exponent_to_base64(public_numbers.e),
        key=key,
    )
    return ExtractionResult(random_values=draw_random_values(rng), cert_info=cert_info)
