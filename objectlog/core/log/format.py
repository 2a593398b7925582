"""
Frame format for the binary log.

A frame is the encoded record followed by the encoded checksum of those
bytes:

    Payload (variable)   - CBOR encoding of the record
    Checksum (1-5 bytes) - CBOR unsigned integer, CRC32C of Payload

There is no length prefix, no separator and no file header. Frame boundaries
come from the self-delimiting CBOR encoding alone.
"""

from dataclasses import dataclass
from typing import Any, Callable

from objectlog.core import checksum as checksum_module
from objectlog.core.codec import BinaryCodec

Digest = Callable[[bytes], int]


@dataclass(frozen=True)
class Frame:
    """
    One encoded record ready to be appended.

    Attributes:
        payload: Encoded record
        checksum: Digest of the payload
        checksum_bytes: Encoded checksum
    """

    payload: bytes
    checksum: int
    checksum_bytes: bytes

    def serialize(self) -> bytes:
        """Return the frame as written to disk."""
        return self.payload + self.checksum_bytes

    def size(self) -> int:
        """Size of the frame in bytes."""
        return len(self.payload) + len(self.checksum_bytes)


def encode_frame(
    codec: BinaryCodec,
    record: Any,
    digest: Digest = checksum_module.digest,
) -> Frame:
    """
    Build the frame for a record.

    Args:
        codec: Codec used for both the payload and the checksum
        record: Record to encode
        digest: Checksum function over payload bytes

    Returns:
        Encoded frame

    Raises:
        EncodeError: If the record is not representable
    """
    payload = codec.encode(record)
    checksum = digest(payload)
    return Frame(
        payload=payload,
        checksum=checksum,
        checksum_bytes=codec.encode_checksum(checksum),
    )
