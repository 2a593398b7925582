"""
objectlog - an append-only object log.

Records are serialized into a single file and read back in the order they
were written. Two encodings are provided:
- Binary: CBOR frames, each followed by a CRC32C checksum
- Text: back-to-back JSON documents

The binary reader recovers every complete, verified frame and stops
quietly at a torn or corrupted tail.
"""

__version__ = "0.1.0"

from objectlog.core.codec import (
    CodecError,
    EncodeError,
    EndOfData,
    MalformedData,
)
from objectlog.core.log import (
    BinaryLog,
    HaltReason,
    LogOpenError,
    LogReport,
    LogWriteError,
    ReadHalt,
    TextEntry,
    TextLog,
    open_log,
)

__all__ = [
    "BinaryLog",
    "CodecError",
    "EncodeError",
    "EndOfData",
    "HaltReason",
    "LogOpenError",
    "LogReport",
    "LogWriteError",
    "MalformedData",
    "ReadHalt",
    "TextEntry",
    "TextLog",
    "open_log",
]
