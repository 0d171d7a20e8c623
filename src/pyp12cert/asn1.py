"""
ASN.1 structures of the PKCS#12 envelope (RFC 7292) and the PKCS#5/#7/#8
pieces it embeds, declared with pyasn1.

Open types (bag values, content, algorithm parameters) are kept as
``univ.Any`` and decoded in a second pass once their OID is known.
"""
from pyasn1.codec.ber import decoder as ber_decoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import char, namedtype, tag, univ

from .exceptions import MalformedContainerError


def _explicit(tag_id):
    return tag.Tag(tag.tagClassContext, tag.tagFormatConstructed, tag_id)


class AlgorithmIdentifier(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('algorithm', univ.ObjectIdentifier()),
        namedtype.OptionalNamedType('parameters', univ.Any())
    )


class DigestInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('digestAlgorithm', AlgorithmIdentifier()),
        namedtype.NamedType('digest', univ.OctetString())
    )


class ContentInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('contentType', univ.ObjectIdentifier()),
        namedtype.OptionalNamedType('content', univ.Any().subtype(explicitTag=_explicit(0)))
    )


class MacData(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('mac', DigestInfo()),
        namedtype.NamedType('macSalt', univ.OctetString()),
        namedtype.DefaultedNamedType('iterations', univ.Integer(1))
    )


class PFX(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer()),
        namedtype.NamedType('authSafe', ContentInfo()),
        namedtype.OptionalNamedType('macData', MacData())
    )


class AuthenticatedSafe(univ.SequenceOf):
    componentType = ContentInfo()


class EncryptedContentInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('contentType', univ.ObjectIdentifier()),
        namedtype.NamedType('contentEncryptionAlgorithm', AlgorithmIdentifier()),
        namedtype.OptionalNamedType('encryptedContent', univ.OctetString().subtype(
            implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 0)))
    )


class EncryptedData(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('version', univ.Integer()),
        namedtype.NamedType('encryptedContentInfo', EncryptedContentInfo())
    )


class PKCS12Attribute(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('attrId', univ.ObjectIdentifier()),
        namedtype.NamedType('attrValues', univ.SetOf(componentType=univ.Any()))
    )


class SafeBag(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('bagId', univ.ObjectIdentifier()),
        namedtype.NamedType('bagValue', univ.Any().subtype(explicitTag=_explicit(0))),
        namedtype.OptionalNamedType('bagAttributes', univ.SetOf(componentType=PKCS12Attribute()))
    )


class SafeContents(univ.SequenceOf):
    componentType = SafeBag()


class CertBag(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('certId', univ.ObjectIdentifier()),
        namedtype.NamedType('certValue', univ.Any().subtype(explicitTag=_explicit(0)))
    )


class EncryptedPrivateKeyInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('encryptionAlgorithm', AlgorithmIdentifier()),
        namedtype.NamedType('encryptedData', univ.OctetString())
    )


class PKCS12PbeParams(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('salt', univ.OctetString()),
        namedtype.NamedType('iterations', univ.Integer())
    )


class PBKDF2Params(univ.Sequence):
    # Only the 'specified' salt alternative is supported.
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('salt', univ.OctetString()),
        namedtype.NamedType('iterationCount', univ.Integer()),
        namedtype.OptionalNamedType('keyLength', univ.Integer()),
        namedtype.OptionalNamedType('prf', AlgorithmIdentifier())
    )


class PBES2Params(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType('keyDerivationFunc', AlgorithmIdentifier()),
        namedtype.NamedType('encryptionScheme', AlgorithmIdentifier())
    )


FriendlyName = char.BMPString


def decode(substrate, spec):
    """
    Decodes BER/DER ``substrate`` against ``spec``.

    Raises:
        MalformedContainerError: If the substrate does not match the structure
            or carries trailing data.
    """
    if isinstance(substrate, univ.OctetString):
        substrate = substrate.asOctets()
    name = type(spec).__name__
    try:
        value, rest = ber_decoder.decode(substrate, asn1Spec=spec)
    except PyAsn1Error as exc:
        raise MalformedContainerError(f"Malformed {name} structure: {exc}") from exc
    if rest:
        raise MalformedContainerError(f"Trailing data after {name} structure")
    return value
