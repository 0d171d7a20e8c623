"""
Encoding helpers producing the exact textual forms an XML signature builder
expects: base64 of hex strings and big integers, 76 column line wrapping,
and bounded random identifiers.
"""
import base64
import hashlib
import random
import re
from typing import Optional

from .constants import BASE64_LINE_WIDTH, DEFAULT_RANDOM_MAX, DEFAULT_RANDOM_MIN
from .exceptions import InvalidHexError

_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_PEM_BOUNDARY_RE = re.compile(r"-----(BEGIN|END) [^-]+-----")

_system_random = random.SystemRandom()


def is_hex_string(value: str) -> bool:
    """Returns True if ``value`` is a non-empty string of hex digits."""
    return bool(_HEX_RE.fullmatch(value))


def wrap_base64(text: str, width: int = BASE64_LINE_WIDTH) -> str:
    """
    Removes every line break from ``text`` and re-wraps it at ``width`` columns.

    Lines are joined with LF; the result never contains a carriage return.
    """
    flat = text.replace("\r", "").replace("\n", "")
    return "\n".join(flat[i:i + width] for i in range(0, len(flat), width))


def strip_pem(pem: str) -> str:
    """Returns the base64 body of a PEM block without delimiters or line breaks."""
    body = _PEM_BOUNDARY_RE.sub("", pem)
    return "".join(body.split())


def hex_to_base64(hex_string: str) -> str:
    """
    Converts a hex string to base64.

    Odd length input is left padded with a single zero.

    Raises:
        InvalidHexError: If the input contains non-hex characters or is empty.
    """
    if len(hex_string) % 2 != 0:
        hex_string = "0" + hex_string
    if not is_hex_string(hex_string):
        raise InvalidHexError(hex_string)
    return base64.b64encode(bytes.fromhex(hex_string)).decode("ascii")


def bigint_to_base64(value: int) -> str:
    """
    Encodes a non-negative integer as big-endian bytes in base64, wrapped at 76 columns.
    """
    if value < 0:
        raise ValueError("Only non-negative integers can be encoded")
    hex_string = format(value, "x")
    if len(hex_string) % 2 != 0:
        hex_string = "0" + hex_string
    return wrap_base64(hex_to_base64(hex_string))


def sha1_to_base64(data: bytes) -> str:
    """Returns the base64 encoded SHA-1 digest of ``data``."""
    return base64.b64encode(hashlib.sha1(data).digest()).decode("ascii")


def bounded_random(min_value: int = DEFAULT_RANDOM_MIN, max_value: int = DEFAULT_RANDOM_MAX,
                   rng: Optional[random.Random] = None) -> int:
    """
    Draws a uniformly distributed integer in ``[min_value, max_value]``.

    Args:
        min_value: Inclusive lower bound.
        max_value: Inclusive upper bound.
        rng: Random source; defaults to a process wide ``random.SystemRandom``.
    """
    if min_value > max_value:
        raise ValueError(f"Empty range [{min_value}, {max_value}]")
    return (rng or _system_random).randint(min_value, max_value)
