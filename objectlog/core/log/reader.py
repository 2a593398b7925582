"""
Streaming frame reader for the binary log.

Reads frames sequentially from the start of the file and yields records
until the end of the log or the first frame that cannot be trusted:
- a payload cut short by a partial write
- a payload with no complete checksum after it
- a checksum that does not match the payload
- a verified value that does not fit the record type

None of these raise. The reader stops, and the reason is reported through
``FrameReader.last_halt``, the ``on_halt`` callback and a log event.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from objectlog.core import checksum as checksum_module
from objectlog.core.codec import BinaryCodec, CodecError, EndOfData, MalformedData
from objectlog.core.log.format import Digest
from objectlog.utils.logging import bind_log, get_logger

logger = get_logger(__name__)


class ReadState(Enum):
    """States of a single read iteration."""

    READING_PAYLOAD = "reading_payload"
    READING_CHECKSUM = "reading_checksum"
    VERIFYING = "verifying"
    EMITTING = "emitting"
    TERMINATED = "terminated"


class HaltReason(Enum):
    """Why a read iteration stopped."""

    END_OF_LOG = "end_of_log"
    TORN_PAYLOAD = "torn_payload"
    MISSING_CHECKSUM = "missing_checksum"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    INVALID_RECORD = "invalid_record"


@dataclass(frozen=True)
class ReadHalt:
    """
    Diagnostic describing where and why reading stopped.

    Attributes:
        reason: Halt reason
        position: Byte position of the first frame not yielded
        frames: Number of records yielded before halting
        detail: Human readable description of the failure
    """

    reason: HaltReason
    position: int
    frames: int
    detail: str = ""

    @property
    def clean(self) -> bool:
        """True when the log ended on a frame boundary."""
        return self.reason is HaltReason.END_OF_LOG


@dataclass(frozen=True)
class ReadStep:
    """
    One step of a read iteration: either a record or the final halt.

    Attributes:
        record: Decoded record, for value steps
        halt: Halt diagnostic, for the final done step
    """

    record: Any = None
    halt: Optional[ReadHalt] = None

    @property
    def done(self) -> bool:
        return self.halt is not None


HaltCallback = Callable[[ReadHalt], None]


class FrameReader:
    """
    Lazy, forward-only reader over a binary log file.

    Every call to ``iter()`` opens the file again from offset zero, so a
    reader can be iterated any number of times. A single iteration never
    resumes after it has halted.
    """

    def __init__(
        self,
        path: Union[str, Path],
        codec: BinaryCodec,
        digest: Digest = checksum_module.digest,
        buffer_size: int = 65536,
        on_halt: Optional[HaltCallback] = None,
    ):
        """
        Initialize a frame reader.

        Args:
            path: Path to the log file
            codec: Codec for payloads and checksums
            digest: Checksum function over payload bytes
            buffer_size: Read buffer size
            on_halt: Called with the halt diagnostic at the end of each iteration
        """
        self.path = Path(path)
        self.codec = codec
        self.digest = digest
        self.buffer_size = buffer_size
        self.on_halt = on_halt
        self.last_halt: Optional[ReadHalt] = None
        self._log = bind_log(logger, self.path, codec.name)

    def __iter__(self) -> Iterator[Any]:
        for step in self.steps():
            if step.done:
                return
            yield step.record

    def steps(self) -> Iterator[ReadStep]:
        """
        Run one read iteration as a sequence of tagged steps.

        Yields:
            A value step per verified record, then exactly one done step

        Raises:
            FileNotFoundError: If the log file does not exist
        """
        with open(self.path, "rb", buffering=self.buffer_size) as stream:
            state = ReadState.READING_PAYLOAD
            frames = 0
            frame_start = 0
            value: Any = None
            canonical = b""
            stored = 0
            halt: Optional[ReadHalt] = None

            while state is not ReadState.TERMINATED:
                if state is ReadState.READING_PAYLOAD:
                    frame_start = stream.tell()
                    try:
                        value = self.codec.decode_value(stream)
                    except EndOfData:
                        halt = ReadHalt(HaltReason.END_OF_LOG, frame_start, frames)
                        state = ReadState.TERMINATED
                        continue
                    except MalformedData as e:
                        halt = ReadHalt(HaltReason.TORN_PAYLOAD, frame_start, frames, str(e))
                        state = ReadState.TERMINATED
                        continue

                    # Compare against the canonical encoding of what was decoded.
                    try:
                        canonical = self.codec.encode_value(value)
                    except CodecError as e:
                        halt = ReadHalt(
                            HaltReason.CHECKSUM_MISMATCH,
                            frame_start,
                            frames,
                            f"Decoded value cannot be re-encoded: {e}",
                        )
                        state = ReadState.TERMINATED
                        continue
                    state = ReadState.READING_CHECKSUM

                elif state is ReadState.READING_CHECKSUM:
                    try:
                        stored = self.codec.decode_checksum(stream)
                    except CodecError as e:
                        halt = ReadHalt(
                            HaltReason.MISSING_CHECKSUM,
                            frame_start,
                            frames,
                            str(e) or "No checksum after payload",
                        )
                        state = ReadState.TERMINATED
                        continue
                    state = ReadState.VERIFYING

                elif state is ReadState.VERIFYING:
                    if not checksum_module.verify(canonical, stored, self.digest):
                        halt = ReadHalt(
                            HaltReason.CHECKSUM_MISMATCH,
                            frame_start,
                            frames,
                            f"expected {self.digest(canonical)}, stored {stored}",
                        )
                        state = ReadState.TERMINATED
                        continue
                    state = ReadState.EMITTING

                elif state is ReadState.EMITTING:
                    # Record types only ever see verified values.
                    try:
                        record = self.codec.to_record(value)
                    except MalformedData as e:
                        halt = ReadHalt(HaltReason.INVALID_RECORD, frame_start, frames, str(e))
                        state = ReadState.TERMINATED
                        continue
                    frames += 1
                    yield ReadStep(record=record)
                    value = None
                    state = ReadState.READING_PAYLOAD

        self._report(halt)
        yield ReadStep(halt=halt)

    def _report(self, halt: ReadHalt) -> None:
        self.last_halt = halt

        if halt.clean:
            self._log.debug(
                "Reached end of log",
                frames=halt.frames,
                position=halt.position,
            )
        else:
            self._log.warning(
                "Stopped reading at untrusted frame",
                reason=halt.reason,
                frames=halt.frames,
                position=halt.position,
                detail=halt.detail,
            )

        if self.on_halt is not None:
            self.on_halt(halt)
