"""
Log handles owning an append-mode file.

A handle opens its file once, in create-or-append mode, and keeps it for its
whole lifetime. Appends go through that file; every read opens the file
again so readers never share position with the writer.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Optional, Type, Union

from objectlog.core import checksum as checksum_module
from objectlog.core.codec import BinaryCodec, TextCodec
from objectlog.core.log.reader import FrameReader, HaltCallback, ReadHalt
from objectlog.core.log.text import TextReader, TextWriter
from objectlog.core.log.writer import FrameWriter
from objectlog.utils.config import Config, get_config
from objectlog.utils.logging import bind_log, get_logger

logger = get_logger(__name__)

ENCODINGS = ("binary", "text")


class LogOpenError(OSError):
    """Raised when the log file cannot be created or opened."""
    pass


@dataclass(frozen=True)
class LogReport:
    """
    Result of scanning a binary log.

    Attributes:
        records: Number of frames that decoded and verified
        valid_bytes: Length of the prefix made of verified frames
        file_size: Size of the file when the scan finished
        halt: Why the scan stopped
    """

    records: int
    valid_bytes: int
    file_size: int
    halt: ReadHalt

    @property
    def intact(self) -> bool:
        """True when every byte of the file belongs to a verified frame."""
        return self.halt.clean and self.valid_bytes == self.file_size


class _AppendLog:
    """Base handle: owns the path and the long-lived append file."""

    encoding = ""

    def __init__(self, path: Union[str, Path], config: Optional[Config] = None):
        self.path = Path(path)
        self.config = config if config is not None else get_config()
        self._file: Optional[BinaryIO] = None
        self._log = bind_log(logger, self.path, self.encoding)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "ab", buffering=0)
        except OSError as e:
            self._log.error("Failed to open log", error=str(e))
            raise LogOpenError(f"Cannot open log {self.path}: {e}") from e

        self._log.info("Opened log", size=self.size())

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    def size(self) -> int:
        """Current size of the log file in bytes."""
        return self.path.stat().st_size

    def _append_file(self) -> BinaryIO:
        if self.closed:
            raise ValueError(f"Cannot append to closed log {self.path}")
        return self._file

    def close(self) -> None:
        """Close the append file. Reading remains possible."""
        if self._file is not None and not self._file.closed:
            self._file.close()
            self._log.debug("Closed log")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self.path)!r}, closed={self.closed})"


class BinaryLog(_AppendLog):
    """
    Append-only log of checksummed CBOR frames.

    Records are read back in append order. Reading stops quietly at the
    first torn or corrupted frame; see ``FrameReader``.
    """

    encoding = "binary"

    def __init__(
        self,
        path: Union[str, Path],
        record_type: Optional[Type[Any]] = None,
        config: Optional[Config] = None,
        on_halt: Optional[HaltCallback] = None,
    ):
        """
        Open or create a binary log.

        Args:
            path: Log file path
            record_type: Optional dataclass records are converted to and from
            config: Configuration, defaults to the global configuration
            on_halt: Called with the halt diagnostic at the end of every read

        Raises:
            LogOpenError: If the file cannot be created or opened
        """
        self.codec = BinaryCodec(record_type)
        self.on_halt = on_halt
        super().__init__(path, config)

        self._writer = FrameWriter(
            self.codec,
            digest=checksum_module.digest,
            buffer_size=self.config.get("log.write_buffer_size", 8192),
            fsync_on_append=self.config.get("log.fsync_on_append", False),
        )

    def append(self, record: Any) -> int:
        """
        Append one record.

        Returns:
            Number of bytes appended

        Raises:
            EncodeError: If the record is not representable
            LogWriteError: If the write fails
            ValueError: If the log is closed
        """
        return self._writer.append(self._append_file(), record)

    def records(self) -> FrameReader:
        """Return a fresh reader over every verified record in the log."""
        return FrameReader(
            self.path,
            self.codec,
            digest=checksum_module.digest,
            buffer_size=self.config.get("log.read_buffer_size", 65536),
            on_halt=self.on_halt,
        )

    def verify(self) -> LogReport:
        """
        Scan the whole log and report how much of it is trustworthy.

        The file is never modified.
        """
        reader = self.records()
        records = sum(1 for _ in reader)
        halt = reader.last_halt
        report = LogReport(
            records=records,
            valid_bytes=halt.position,
            file_size=self.size(),
            halt=halt,
        )

        self._log.info(
            "Verified log",
            records=report.records,
            valid_bytes=report.valid_bytes,
            file_size=report.file_size,
            reason=halt.reason,
        )

        return report


class TextLog(_AppendLog):
    """Append-only log of back-to-back JSON documents."""

    encoding = "text"

    def __init__(
        self,
        path: Union[str, Path],
        record_type: Optional[Type[Any]] = None,
        config: Optional[Config] = None,
    ):
        """
        Open or create a textual log.

        Raises:
            LogOpenError: If the file cannot be created or opened
        """
        self.codec = TextCodec(record_type)
        super().__init__(path, config)

        self._writer = TextWriter(
            self.codec,
            buffer_size=self.config.get("log.write_buffer_size", 8192),
            fsync_on_append=self.config.get("log.fsync_on_append", False),
        )

    def append(self, record: Any) -> int:
        """
        Append one record.

        Raises:
            EncodeError: If the record is not JSON serializable
            LogWriteError: If the write fails
            ValueError: If the log is closed
        """
        return self._writer.append(self._append_file(), record)

    def records(self) -> TextReader:
        """Return a fresh reader yielding one ``TextEntry`` per document."""
        return TextReader(
            self.path,
            self.codec,
            chunk_size=self.config.get("text.read_chunk_size", 4096),
        )


def open_log(
    path: Union[str, Path],
    encoding: str = "binary",
    record_type: Optional[Type[Any]] = None,
    config: Optional[Config] = None,
) -> Union[BinaryLog, TextLog]:
    """
    Open a log with the encoding chosen at runtime.

    Args:
        path: Log file path
        encoding: "binary" or "text"
        record_type: Optional dataclass records are converted to and from
        config: Configuration, defaults to the global configuration

    Raises:
        ValueError: If the encoding is unknown
        LogOpenError: If the file cannot be created or opened
    """
    if encoding == "binary":
        return BinaryLog(path, record_type=record_type, config=config)
    if encoding == "text":
        return TextLog(path, record_type=record_type, config=config)
    raise ValueError(f"Unknown encoding {encoding!r}, expected one of {ENCODINGS}")
