"""
This module defines the records handed to an XML signature builder.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict

from cryptography.hazmat.primitives.asymmetric import rsa


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


@dataclass
class CertInfo:
    """
    Certificate and key material for the signature's KeyInfo and
    SignedProperties elements.
    """
    digest_value: str
    issuer_name: str
    issuer_serial_number: int
    signing_time: str
    certificate_x509: str
    modulus: str
    exponent: str
    key: rsa.RSAPrivateKey

    def as_dict(self) -> Dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class RandomValues:
    """Random numeric suffixes of the signature element identifiers."""
    certificate_number: int
    signature_number: int
    signed_properties_number: int
    signed_info_number: int
    signed_properties_id_number: int
    reference_id_number: int
    signature_value_number: int
    object_number: int

    def as_dict(self) -> Dict[str, int]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class ExtractionResult:
    random_values: RandomValues
    cert_info: CertInfo

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        """
        Returns the camelCase record (``randomValues``/``certInfo``) consumed
        by signature templates.
        """
        return {
            "randomValues": self.random_values.as_dict(),
            "certInfo": self.cert_info.as_dict(),
        }
