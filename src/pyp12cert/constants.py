"""
This module contains constants used throughout the pyp12cert library,
including PKCS#12 object identifiers, encoding parameters and the
per-slot bounds of the signature element identifiers.
"""
from pyasn1.type import univ

# PKCS#7 content types
OID_DATA = univ.ObjectIdentifier('1.2.840.113549.1.7.1')
OID_ENCRYPTED_DATA = univ.ObjectIdentifier('1.2.840.113549.1.7.6')

# PKCS#12 bag types
OID_KEY_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.1')
OID_PKCS8_SHROUDED_KEY_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.2')
OID_CERT_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.3')
OID_CRL_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.4')
OID_SECRET_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.5')
OID_SAFE_CONTENTS_BAG = univ.ObjectIdentifier('1.2.840.113549.1.12.10.1.6')

# Certificate types inside a certBag
OID_X509_CERTIFICATE = univ.ObjectIdentifier('1.2.840.113549.1.9.22.1')

# PKCS#9 bag attributes
OID_FRIENDLY_NAME = univ.ObjectIdentifier('1.2.840.113549.1.9.20')
OID_LOCAL_KEY_ID = univ.ObjectIdentifier('1.2.840.113549.1.9.21')

# PKCS#12 password based encryption (PBES1 with the PKCS#12 KDF)
OID_PBE_SHA1_RC4_128 = univ.ObjectIdentifier('1.2.840.113549.1.12.1.1')
OID_PBE_SHA1_RC4_40 = univ.ObjectIdentifier('1.2.840.113549.1.12.1.2')
OID_PBE_SHA1_3DES = univ.ObjectIdentifier('1.2.840.113549.1.12.1.3')
OID_PBE_SHA1_2DES = univ.ObjectIdentifier('1.2.840.113549.1.12.1.4')
OID_PBE_SHA1_RC2_128 = univ.ObjectIdentifier('1.2.840.113549.1.12.1.5')
OID_PBE_SHA1_RC2_40 = univ.ObjectIdentifier('1.2.840.113549.1.12.1.6')

# PKCS#5 v2 (PBES2)
OID_PBES2 = univ.ObjectIdentifier('1.2.840.113549.1.5.13')
OID_PBKDF2 = univ.ObjectIdentifier('1.2.840.113549.1.5.12')
OID_HMAC_SHA1 = univ.ObjectIdentifier('1.2.840.113549.2.7')
OID_HMAC_SHA224 = univ.ObjectIdentifier('1.2.840.113549.2.8')
OID_HMAC_SHA256 = univ.ObjectIdentifier('1.2.840.113549.2.9')
OID_HMAC_SHA384 = univ.ObjectIdentifier('1.2.840.113549.2.10')
OID_HMAC_SHA512 = univ.ObjectIdentifier('1.2.840.113549.2.11')
OID_DES_EDE3_CBC = univ.ObjectIdentifier('1.2.840.113549.3.7')
OID_AES128_CBC = univ.ObjectIdentifier('2.16.840.1.101.3.4.1.2')
OID_AES192_CBC = univ.ObjectIdentifier('2.16.840.1.101.3.4.1.22')
OID_AES256_CBC = univ.ObjectIdentifier('2.16.840.1.101.3.4.1.42')

# Digest algorithms (MAC)
OID_SHA1 = univ.ObjectIdentifier('1.3.14.3.2.26')
OID_SHA224 = univ.ObjectIdentifier('2.16.840.1.101.3.4.2.4')
OID_SHA256 = univ.ObjectIdentifier('2.16.840.1.101.3.4.2.1')
OID_SHA384 = univ.ObjectIdentifier('2.16.840.1.101.3.4.2.2')
OID_SHA512 = univ.ObjectIdentifier('2.16.840.1.101.3.4.2.3')

# Supported PFX version
PFX_VERSION = 3

# RFC 2045 canonical base64 line length
BASE64_LINE_WIDTH = 76

# Limb width of the big integers the exponent field historically came from
EXPONENT_LIMB_BITS = 28

# Default bounds of codec.bounded_random
DEFAULT_RANDOM_MIN = 990
DEFAULT_RANDOM_MAX = 9999

# Inclusive (min, max) bounds of each signature element identifier
RANDOM_VALUE_BOUNDS = {
    "certificate_number": (999990, 9999999),
    "signature_number": (99990, 999999),
    "signed_properties_number": (99990, 999999),
    "signed_info_number": (99990, 999999),
    "signed_properties_id_number": (99990, 999999),
    "reference_id_number": (99990, 999999),
    "signature_value_number": (99990, 999999),
    "object_number": (99990, 999999),
}

# Issuer marker found in the companion friendly name -> text the key bag
# friendly name must contain. Issuers without an entry use the first key bag.
KEY_SELECTION_POLICIES = {
    "BANCO CENTRAL": "Signing Key",
}

# Index of the cert bag whose friendly name identifies the issuer
COMPANION_CERT_BAG_INDEX = 1

INCORRECT_PASSWORD_MESSAGE = "Unable to parse certificate. Incorrect Password?"
