"""
Frame writer for appending records to a log file.

Each append opens a fresh buffered writer over the log's append-mode file,
writes the record's bytes, flushes and closes the buffer. The log's own file
stays open for later appends.
"""

import io
import os
from typing import Any, BinaryIO, Iterable

from objectlog.core import checksum as checksum_module
from objectlog.core.codec import BinaryCodec
from objectlog.core.log.format import Digest, encode_frame
from objectlog.utils.logging import get_logger

logger = get_logger(__name__)


class LogWriteError(OSError):
    """Raised when an append cannot be written or flushed."""
    pass


class BufferedAppender:
    """
    Writes byte chunks to an append-mode file through a short-lived buffer.

    Attributes:
        buffer_size: Size of the per-append write buffer
        fsync_on_append: Whether to fsync after each flush
    """

    def __init__(self, buffer_size: int = io.DEFAULT_BUFFER_SIZE, fsync_on_append: bool = False):
        if buffer_size <= 0:
            raise ValueError(f"Buffer size must be positive, got {buffer_size}")

        self.buffer_size = buffer_size
        self.fsync_on_append = fsync_on_append

    def write_chunks(self, file: BinaryIO, chunks: Iterable[bytes]) -> int:
        """
        Write chunks in order and flush them to the file.

        Args:
            file: Raw file opened in append mode
            chunks: Byte strings to write back-to-back

        Returns:
            Number of bytes written

        Raises:
            LogWriteError: If writing, flushing or syncing fails
        """
        written = 0
        try:
            # The buffer owns a duplicate descriptor; closing it leaves the
            # caller's file open.
            with open(os.dup(file.fileno()), "ab", buffering=self.buffer_size) as buffered:
                for chunk in chunks:
                    buffered.write(chunk)
                    written += len(chunk)
                buffered.flush()

                if self.fsync_on_append:
                    os.fsync(buffered.fileno())

        except OSError as e:
            logger.error(
                "Append failed",
                file=getattr(file, "name", None),
                bytes_attempted=written,
                error=str(e),
            )
            raise LogWriteError(f"Append failed: {e}") from e

        return written


class FrameWriter(BufferedAppender):
    """
    Appends records to a binary log as [payload][checksum] frames.
    """

    def __init__(
        self,
        codec: BinaryCodec,
        digest: Digest = checksum_module.digest,
        buffer_size: int = io.DEFAULT_BUFFER_SIZE,
        fsync_on_append: bool = False,
    ):
        """
        Initialize a frame writer.

        Args:
            codec: Codec for payloads and checksums
            digest: Checksum function over payload bytes
            buffer_size: Size of the per-append write buffer
            fsync_on_append: Whether to fsync after each append
        """
        super().__init__(buffer_size=buffer_size, fsync_on_append=fsync_on_append)
        self.codec = codec
        self.digest = digest

    def append(self, file: BinaryIO, record: Any) -> int:
        """
        Append one record as a frame.

        The record is fully encoded before any byte is written, so an
        unrepresentable record leaves the file untouched.

        Args:
            file: Raw file opened in append mode
            record: Record to append

        Returns:
            Number of bytes appended

        Raises:
            EncodeError: If the record is not representable
            LogWriteError: If the write fails
        """
        frame = encode_frame(self.codec, record, self.digest)

        written = self.write_chunks(file, (frame.payload, frame.checksum_bytes))

        logger.debug(
            "Appended frame",
            payload_size=len(frame.payload),
            checksum=frame.checksum,
            size=frame.size(),
        )

        return written
