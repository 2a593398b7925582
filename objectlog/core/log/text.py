"""
Textual log: back-to-back JSON documents with no separators.

Unlike the binary log there is no checksum, so a document that fails to
parse is reported to the caller as an error entry instead of silently
ending the sequence. The parser cannot find the next document boundary
after a syntax error, so the error entry is always the last one.
"""

import codecs
import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional, Union

from objectlog.core.codec import MalformedData, TextCodec
from objectlog.core.log.writer import BufferedAppender
from objectlog.utils.logging import bind_log, get_logger

logger = get_logger(__name__)

_WHITESPACE = " \t\n\r"

# Bytes that are not valid UTF-8 survive decoding as lone surrogates.
_ESCAPED_BYTES = re.compile("[\udc80-\udcff]")


@dataclass(frozen=True)
class TextEntry:
    """
    Result of decoding one position of a textual log.

    Attributes:
        position: Byte offset of the document in the file, comparable
            with ``ReadHalt.position``
        value: Decoded record, if parsing succeeded
        error: Parse error, if parsing failed
    """

    position: int
    value: Any = None
    error: Optional[MalformedData] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the decoded record or raise its parse error."""
        if self.error is not None:
            raise self.error
        return self.value


class TextWriter(BufferedAppender):
    """Appends records to a textual log as compact JSON documents."""

    def __init__(
        self,
        codec: TextCodec,
        buffer_size: int = io.DEFAULT_BUFFER_SIZE,
        fsync_on_append: bool = False,
    ):
        super().__init__(buffer_size=buffer_size, fsync_on_append=fsync_on_append)
        self.codec = codec

    def append(self, file: BinaryIO, record: Any) -> int:
        """
        Append one record.

        Raises:
            EncodeError: If the record is not JSON serializable
            LogWriteError: If the write fails
        """
        document = self.codec.encode(record)
        written = self.write_chunks(file, (document,))
        logger.debug("Appended document", size=written)
        return written


class TextReader:
    """
    Lazy reader over a textual log.

    Each call to ``iter()`` reopens the file and yields one ``TextEntry``
    per document.
    """

    def __init__(
        self,
        path: Union[str, Path],
        codec: TextCodec,
        chunk_size: int = 4096,
    ):
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")

        self.path = Path(path)
        self.codec = codec
        self.chunk_size = chunk_size
        self._log = bind_log(logger, self.path, codec.name)

    def __iter__(self) -> Iterator[TextEntry]:
        with open(self.path, "rb") as stream:
            yield from self._entries(stream)

    def values(self) -> Iterator[Any]:
        """
        Yield decoded records, raising at the first malformed document.

        Raises:
            MalformedData: If a document fails to parse
        """
        for entry in self:
            yield entry.unwrap()

    def _entries(self, stream: BinaryIO) -> Iterator[TextEntry]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")
        buffer = ""
        index = 0
        # Byte offset in the file of buffer[index].
        offset = 0
        eof = False

        while True:
            while index < len(buffer) and buffer[index] in _WHITESPACE:
                index += 1
                offset += 1

            if index == len(buffer):
                if eof:
                    return
            else:
                try:
                    value, end = self.codec.decode_document(buffer, index)
                except MalformedData as e:
                    if eof:
                        yield self._error(offset, e)
                        return
                else:
                    if _ESCAPED_BYTES.search(buffer, index, end):
                        yield self._error(
                            offset,
                            MalformedData("Invalid UTF-8 in text log document"),
                        )
                        return
                    # A number at the end of the buffer may continue in the next chunk.
                    if end < len(buffer) or eof:
                        yield TextEntry(position=offset, value=value)
                        offset += _byte_length(buffer[index:end])
                        index = end
                        continue

            # Drop parsed text and pull the next chunk.
            chunk = stream.read(self.chunk_size)
            eof = not chunk
            text = decoder.decode(chunk, final=eof)
            buffer = buffer[index:] + text
            index = 0

    def _error(self, position: int, error: MalformedData) -> TextEntry:
        self._log.warning(
            "Malformed document in text log",
            position=position,
            error=str(error),
        )
        return TextEntry(position=position, error=error)


def _byte_length(text: str) -> int:
    """Length of decoded text in the file, escaped bytes included."""
    return len(text.encode("utf-8", "surrogateescape"))
