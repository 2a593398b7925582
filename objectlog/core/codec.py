"""
Record codecs for the object log.

A codec turns one record into bytes and back. The binary codec uses CBOR,
which is self-delimiting: decoding consumes exactly the bytes of one value
and leaves the stream positioned at the next one. The textual codec uses
compact JSON documents.

Both codecs can be bound to a dataclass ``record_type``. Records are then
converted to a field mapping before encoding and rebuilt after decoding.
"""

import dataclasses
import json
from typing import Any, BinaryIO, Optional, Tuple, Type

import cbor2

MAX_CHECKSUM = 0xFFFFFFFF


class CodecError(Exception):
    """Base class for codec failures."""
    pass


class EndOfData(CodecError):
    """Raised when the stream holds no more bytes."""
    pass


class MalformedData(CodecError):
    """Raised when bytes exist but do not form a valid encoded value."""
    pass


class EncodeError(CodecError):
    """Raised when a record cannot be represented by the codec."""
    pass


def _at_end(stream: BinaryIO) -> bool:
    """Check whether a stream is exhausted without consuming anything."""
    peek = getattr(stream, "peek", None)
    if peek is not None:
        return not peek(1)

    position = stream.tell()
    if not stream.read(1):
        return True
    stream.seek(position)
    return False


class _RecordCodec:
    """Shared record <-> plain value conversion."""

    def __init__(self, record_type: Optional[Type[Any]] = None):
        if record_type is not None and not dataclasses.is_dataclass(record_type):
            raise TypeError(f"record_type must be a dataclass, got {record_type!r}")
        self.record_type = record_type

    def _to_value(self, record: Any) -> Any:
        if self.record_type is None:
            return record
        if not isinstance(record, self.record_type):
            raise EncodeError(
                f"Expected {self.record_type.__name__} record, got {type(record).__name__}"
            )
        return dataclasses.asdict(record)

    def to_record(self, value: Any) -> Any:
        """
        Build a record from a decoded plain value.

        Raises:
            MalformedData: If the value does not fit the record type
        """
        if self.record_type is None:
            return value
        if not isinstance(value, dict):
            raise MalformedData(
                f"Expected a mapping for {self.record_type.__name__}, "
                f"got {type(value).__name__}"
            )
        try:
            return self.record_type(**value)
        except (TypeError, ValueError) as e:
            raise MalformedData(
                f"Cannot build {self.record_type.__name__}: {e}"
            ) from e


class BinaryCodec(_RecordCodec):
    """
    CBOR codec for the binary log.

    Payloads and checksums share the same encoding so the reader can pull
    both off the stream with one decode primitive.
    """

    name = "binary"

    def encode(self, record: Any) -> bytes:
        """
        Encode a record to CBOR.

        Raises:
            EncodeError: If the record is not representable
        """
        return self._dumps(self._to_value(record))

    def decode(self, stream: BinaryIO) -> Any:
        """
        Decode exactly one record from the stream.

        Raises:
            EndOfData: If the stream is exhausted
            MalformedData: If the bytes are invalid or cut short
        """
        return self.to_record(self.decode_value(stream))

    def encode_value(self, value: Any) -> bytes:
        """Encode a plain decoded value without record type checks."""
        return self._dumps(value)

    def decode_value(self, stream: BinaryIO) -> Any:
        """
        Decode exactly one plain value from the stream.

        No record is built, so no record type code runs.

        Raises:
            EndOfData: If the stream is exhausted
            MalformedData: If the bytes are invalid or cut short
        """
        return self._load(stream)

    def encode_checksum(self, checksum: int) -> bytes:
        """Encode a 32-bit checksum as a CBOR unsigned integer."""
        if not 0 <= checksum <= MAX_CHECKSUM:
            raise EncodeError(f"Checksum out of 32-bit range: {checksum}")
        return self._dumps(checksum)

    def decode_checksum(self, stream: BinaryIO) -> int:
        """
        Decode one checksum value from the stream.

        Raises:
            EndOfData: If the stream is exhausted
            MalformedData: If the value is not a 32-bit unsigned integer
        """
        value = self._load(stream)
        if type(value) is not int or not 0 <= value <= MAX_CHECKSUM:
            raise MalformedData(f"Invalid checksum value: {value!r}")
        return value

    @staticmethod
    def _dumps(value: Any) -> bytes:
        try:
            return cbor2.dumps(value)
        except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
            raise EncodeError(f"Cannot encode {type(value).__name__}: {e}") from e

    @staticmethod
    def _load(stream: BinaryIO) -> Any:
        if _at_end(stream):
            raise EndOfData("No more data in stream")

        try:
            return cbor2.CBORDecoder(stream).decode()
        except cbor2.CBORDecodeEOF as e:
            raise MalformedData(f"Value truncated by end of stream: {e}") from e
        except (cbor2.CBORDecodeError, TypeError, ValueError, OverflowError) as e:
            raise MalformedData(f"Invalid CBOR value: {e}") from e


class TextCodec(_RecordCodec):
    """
    JSON codec for the textual log.

    Documents are written compactly with no trailing newline; the reader
    relies on JSON's own delimiters to split them.
    """

    name = "text"

    def __init__(self, record_type: Optional[Type[Any]] = None):
        super().__init__(record_type)
        self._decoder = json.JSONDecoder()

    def encode(self, record: Any) -> bytes:
        """
        Encode a record as a compact UTF-8 JSON document.

        Raises:
            EncodeError: If the record is not JSON serializable
        """
        try:
            text = json.dumps(
                self._to_value(record),
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Cannot encode {type(record).__name__}: {e}") from e
        return text.encode("utf-8")

    def decode_document(self, text: str, index: int) -> Tuple[Any, int]:
        """
        Decode one JSON document starting at ``index``.

        Returns:
            Tuple of (record, index just past the document)

        Raises:
            MalformedData: If no valid document starts at ``index``
        """
        try:
            value, end = self._decoder.raw_decode(text, index)
        except json.JSONDecodeError as e:
            raise MalformedData(f"Invalid JSON document: {e}") from e
        return self.to_record(value), end
