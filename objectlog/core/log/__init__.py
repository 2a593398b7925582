"""
Append-only log storage.

This package provides:
- Binary frames of CBOR payload plus CRC32C checksum
- A streaming reader that stops at torn or corrupted frames
- A textual JSON log with per-document error reporting
- Log handles owning the append-mode file
"""

from objectlog.core.log.format import Frame, encode_frame
from objectlog.core.log.log import (
    BinaryLog,
    LogOpenError,
    LogReport,
    TextLog,
    open_log,
)
from objectlog.core.log.reader import (
    FrameReader,
    HaltReason,
    ReadHalt,
    ReadState,
    ReadStep,
)
from objectlog.core.log.text import TextEntry, TextReader, TextWriter
from objectlog.core.log.writer import FrameWriter, LogWriteError

__all__ = [
    "BinaryLog",
    "Frame",
    "FrameReader",
    "FrameWriter",
    "HaltReason",
    "LogOpenError",
    "LogReport",
    "LogWriteError",
    "ReadHalt",
    "ReadState",
    "ReadStep",
    "TextEntry",
    "TextLog",
    "TextReader",
    "TextWriter",
    "encode_frame",
    "open_log",
]
