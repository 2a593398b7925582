"""CRC32C integrity digest for frame payloads."""

from typing import Callable

import crc32c


def digest(payload: bytes) -> int:
    """
    Compute the CRC32C digest of a payload.

    Args:
        payload: Encoded record bytes

    Returns:
        Unsigned 32-bit checksum
    """
    return crc32c.crc32c(payload) & 0xFFFFFFFF


def verify(
    payload: bytes,
    expected: int,
    algorithm: Callable[[bytes], int] = digest,
) -> bool:
    """Check a payload against a stored checksum."""
    return algorithm(payload) == expected
