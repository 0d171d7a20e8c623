"""
Password based cryptography used by PKCS#12 containers: the RFC 7292
key derivation function, integrity MAC verification and the PBES1/PBES2
decryption schemes protecting safe contents and shrouded key bags.
"""
import hashlib
import hmac
import logging

from Cryptodome.Cipher import ARC2
from cryptography.hazmat.decrepit.ciphers.algorithms import ARC4, TripleDES
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from pyasn1.type import univ

from . import asn1
from .constants import (
    OID_AES128_CBC,
    OID_AES192_CBC,
    OID_AES256_CBC,
    OID_DES_EDE3_CBC,
    OID_HMAC_SHA1,
    OID_HMAC_SHA224,
    OID_HMAC_SHA256,
    OID_HMAC_SHA384,
    OID_HMAC_SHA512,
    OID_PBE_SHA1_2DES,
    OID_PBE_SHA1_3DES,
    OID_PBE_SHA1_RC2_128,
    OID_PBE_SHA1_RC2_40,
    OID_PBE_SHA1_RC4_128,
    OID_PBE_SHA1_RC4_40,
    OID_PBES2,
    OID_PBKDF2,
    OID_SHA1,
    OID_SHA224,
    OID_SHA256,
    OID_SHA384,
    OID_SHA512,
)
from .exceptions import AuthenticationError, MalformedContainerError


logger = logging.getLogger(__name__)

# RFC 7292 appendix B.3 diversifiers
KDF_ID_KEY = 1
KDF_ID_IV = 2
KDF_ID_MAC = 3

MAC_DIGESTS = {
    OID_SHA1: "sha1",
    OID_SHA224: "sha224",
    OID_SHA256: "sha256",
    OID_SHA384: "sha384",
    OID_SHA512: "sha512",
}

PBKDF2_PRFS = {
    OID_HMAC_SHA1: "sha1",
    OID_HMAC_SHA224: "sha224",
    OID_HMAC_SHA256: "sha256",
    OID_HMAC_SHA384: "sha384",
    OID_HMAC_SHA512: "sha512",
}

# OID -> (cipher, key size, iv size)
PBES1_SCHEMES = {
    OID_PBE_SHA1_3DES: ("3des", 24, 8),
    OID_PBE_SHA1_2DES: ("3des", 16, 8),
    OID_PBE_SHA1_RC2_128: ("rc2", 16, 8),
    OID_PBE_SHA1_RC2_40: ("rc2", 5, 8),
    OID_PBE_SHA1_RC4_128: ("rc4", 16, 0),
    OID_PBE_SHA1_RC4_40: ("rc4", 5, 0),
}

# OID -> (cipher, key size)
PBES2_CIPHERS = {
    OID_AES128_CBC: ("aes", 16),
    OID_AES192_CBC: ("aes", 24),
    OID_AES256_CBC: ("aes", 32),
    OID_DES_EDE3_CBC: ("3des", 24),
}


def _bmp_password(password: str) -> bytes:
    return password.encode("utf-16-be") + b"\x00\x00"


def _fill(data: bytes, block_size: int) -> bytes:
    if not data:
        return b""
    size = block_size * ((len(data) + block_size - 1) // block_size)
    return (data * (size // len(data) + 1))[:size]


def pkcs12_kdf(hash_name: str, id_byte: int, password: str, salt: bytes,
               iterations: int, size: int) -> bytes:
    """
    Derives key material with the PKCS#12 v1.1 KDF (RFC 7292 appendix B.2).

    Args:
        hash_name: hashlib name of the underlying digest (e.g. 'sha1').
        id_byte: 1 for a key, 2 for an IV, 3 for a MAC key.
        password: The container password; encoded as a NUL terminated BMPString.
        salt: The salt from the algorithm parameters.
        iterations: The iteration count from the algorithm parameters.
        size: Number of bytes to produce.

    Returns:
        ``size`` bytes of derived material.
    """
    block_size = hashlib.new(hash_name).block_size
    diversifier = bytes([id_byte]) * block_size
    block = _fill(salt, block_size) + _fill(_bmp_password(password), block_size)
    modulus = 1 << (block_size * 8)

    result = b""
    while len(result) < size:
        a_value = hashlib.new(hash_name, diversifier + block).digest()
        for _ in range(1, iterations):
            a_value = hashlib.new(hash_name, a_value).digest()
        result += a_value
        if len(result) >= size:
            break

        # I_j = (I_j + B + 1) mod 2^v
        b_value = int.from_bytes(_fill(a_value, block_size)[:block_size], "big")
        chunks = []
        for j in range(0, len(block), block_size):
            i_j = int.from_bytes(block[j:j + block_size], "big")
            chunks.append(((i_j + b_value + 1) % modulus).to_bytes(block_size, "big"))
        block = b"".join(chunks)
    return result[:size]


def verify_mac(mac_data: asn1.MacData, content: bytes, password: str) -> None:
    """
    Verifies the container integrity MAC over the authSafe content.

    Raises:
        AuthenticationError: If the computed HMAC does not match.
        MalformedContainerError: If the MAC digest algorithm is unknown.
    """
    algorithm = mac_data['mac']['digestAlgorithm']['algorithm']
    hash_name = MAC_DIGESTS.get(algorithm)
    if hash_name is None:
        raise MalformedContainerError(f"Unsupported MAC digest algorithm {algorithm}")

    salt = mac_data['macSalt'].asOctets()
    iterations = int(mac_data['iterations'])
    expected = mac_data['mac']['digest'].asOctets()
    logger.debug("Verifying %s MAC (%d iterations)", hash_name, iterations)

    key = pkcs12_kdf(hash_name, KDF_ID_MAC, password, salt, iterations,
                     hashlib.new(hash_name).digest_size)
    computed = hmac.new(key, content, hash_name).digest()
    if not hmac.compare_digest(computed, expected):
        raise AuthenticationError("PKCS#12 MAC could not be verified. Incorrect Password?")


def _unpad(data: bytes, block_bits: int) -> bytes:
    unpadder = padding.PKCS7(block_bits).unpadder()
    try:
        return unpadder.update(data) + unpadder.finalize()
    except ValueError as exc:
        raise AuthenticationError("Decryption failed (bad padding). Incorrect Password?") from exc


def _run_cbc(algorithm, iv: bytes, data: bytes) -> bytes:
    if len(data) % (algorithm.block_size // 8):
        raise MalformedContainerError("Encrypted data is not a whole number of blocks")
    decryptor = Cipher(algorithm, modes.CBC(iv)).decryptor()
    plain = decryptor.update(data) + decryptor.finalize()
    return _unpad(plain, algorithm.block_size)


def _decrypt_pbes1(scheme, params: asn1.PKCS12PbeParams, data: bytes, password: str) -> bytes:
    cipher, key_size, iv_size = scheme
    salt = params['salt'].asOctets()
    iterations = int(params['iterations'])
    key = pkcs12_kdf("sha1", KDF_ID_KEY, password, salt, iterations, key_size)

    if cipher == "rc4":
        decryptor = Cipher(ARC4(key), mode=None).decryptor()
        return decryptor.update(data) + decryptor.finalize()

    iv = pkcs12_kdf("sha1", KDF_ID_IV, password, salt, iterations, iv_size)
    if cipher == "3des":
        return _run_cbc(TripleDES(key), iv, data)

    if len(data) % ARC2.block_size:
        raise MalformedContainerError("Encrypted data is not a whole number of blocks")
    rc2 = ARC2.new(key, ARC2.MODE_CBC, iv=iv, effective_keylen=key_size * 8)
    return _unpad(rc2.decrypt(data), ARC2.block_size * 8)


def _decrypt_pbes2(params: asn1.PBES2Params, data: bytes, password: str) -> bytes:
    kdf = params['keyDerivationFunc']
    if kdf['algorithm'] != OID_PBKDF2:
        raise MalformedContainerError(f"Unsupported PBES2 key derivation {kdf['algorithm']}")
    kdf_params = asn1.decode(kdf['parameters'], asn1.PBKDF2Params())

    prf_name = "sha1"
    if kdf_params['prf'].isValue:
        prf_oid = kdf_params['prf']['algorithm']
        prf_name = PBKDF2_PRFS.get(prf_oid)
        if prf_name is None:
            raise MalformedContainerError(f"Unsupported PBKDF2 PRF {prf_oid}")

    scheme = params['encryptionScheme']
    cipher_spec = PBES2_CIPHERS.get(scheme['algorithm'])
    if cipher_spec is None:
        raise MalformedContainerError(f"Unsupported PBES2 cipher {scheme['algorithm']}")
    cipher, key_size = cipher_spec
    if kdf_params['keyLength'].isValue:
        key_size = int(kdf_params['keyLength'])
    iv = asn1.decode(scheme['parameters'], univ.OctetString()).asOctets()

    logger.debug("PBES2 with PBKDF2-%s and %s-%d", prf_name, cipher, key_size * 8)
    key = hashlib.pbkdf2_hmac(prf_name, password.encode("utf-8"),
                              kdf_params['salt'].asOctets(),
                              int(kdf_params['iterationCount']), key_size)
    if cipher == "aes":
        return _run_cbc(algorithms.AES(key), iv, data)
    return _run_cbc(TripleDES(key), iv, data)


def decrypt(algorithm: asn1.AlgorithmIdentifier, data: bytes, password: str) -> bytes:
    """
    Decrypts password protected PKCS#12 data.

    Args:
        algorithm: The encryption AlgorithmIdentifier of the protected structure.
        data: The ciphertext.
        password: The container password.

    Returns:
        The plaintext with padding removed.

    Raises:
        AuthenticationError: If the password does not decrypt the data.
        MalformedContainerError: If the algorithm is unknown or its parameters are invalid.
    """
    oid = algorithm['algorithm']
    if not algorithm['parameters'].isValue:
        raise MalformedContainerError(f"Missing parameters for encryption algorithm {oid}")

    scheme = PBES1_SCHEMES.get(oid)
    if scheme is not None:
        logger.debug("PKCS#12 PBE %s", oid)
        params = asn1.decode(algorithm['parameters'], asn1.PKCS12PbeParams())
        return _decrypt_pbes1(scheme, params, data, password)

    if oid == OID_PBES2:
        params = asn1.decode(algorithm['parameters'], asn1.PBES2Params())
        return _decrypt_pbes2(params, data, password)

    raise MalformedContainerError(f"Unsupported encryption algorithm {oid}")

