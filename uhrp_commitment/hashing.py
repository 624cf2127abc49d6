"""
UHRP Commitment Hashing

All hashes use SHA-256. Hex output is lowercase; the content hash carried in
a commitment must match SHA256_HEX_PATTERN exactly.
"""

import hashlib
import re
from typing import Pattern, Union

SHA256_HEX_PATTERN = r"^[a-f0-9]{64}$"

_SHA256_HEX_RE = re.compile(SHA256_HEX_PATTERN)


def sha256_digest(data: Union[bytes, str]) -> bytes:
    """Compute the raw 32-byte SHA-256 digest."""
    if isinstance(data, str):
        data = data.encode('utf-8')

    return hashlib.sha256(data).digest()


def sha256_hex(data: Union[bytes, str]) -> str:
    """Compute SHA-256 as lowercase hexadecimal."""
    return sha256_digest(data).hex()


def is_valid_sha256_hex(text: str, pattern: Union[str, Pattern] = None) -> bool:
    """
    Check that text is a 64-character lowercase hex SHA-256 digest.

    Uppercase hex is rejected, and so is a trailing newline.
    """
    if not isinstance(text, str):
        return False

    if pattern is None:
        regex = _SHA256_HEX_RE
    elif isinstance(pattern, str):
        regex = re.compile(pattern)
    else:
        regex = pattern

    return regex.fullmatch(text) is not None
