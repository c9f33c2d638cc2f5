"""Shared data type definitions (WriteRequest, WriteProgress, WriterState)."""

from dataclasses import dataclass
from enum import Enum

from common.constants import MAX_FILE_SIZE, MAX_WRITE_SIZE
from common.exceptions import OutOfRangeError


@dataclass(frozen=True)
class WriteRequest:
    """
    Validated size parameters of one chunked write.

    Raises OutOfRangeError unless 0 <= total_size <= MAX_FILE_SIZE and
    1 <= chunk_size <= MAX_WRITE_SIZE.
    """
    total_size: int
    chunk_size: int

    def __post_init__(self):
        if not 0 <= self.total_size <= MAX_FILE_SIZE:
            raise OutOfRangeError('file size', self.total_size, MAX_FILE_SIZE)
        if not 1 <= self.chunk_size <= MAX_WRITE_SIZE:
            raise OutOfRangeError('buffer size', self.chunk_size, MAX_WRITE_SIZE, minimum=1)

    @property
    def chunk_count(self) -> int:
        """Number of write calls needed to transfer total_size bytes."""
        return -(-self.total_size // self.chunk_size)

    @property
    def last_chunk_size(self) -> int:
        """Size of the final write (0 when nothing is written)."""
        if self.total_size == 0:
            return 0
        return self.total_size % self.chunk_size or self.chunk_size


@dataclass
class WriteProgress:
    """
    Transient loop state of the chunked writer.
    """
    remaining: int
    bytes_written: int = 0
    chunks_written: int = 0

    @property
    def done(self) -> bool:
        return self.remaining == 0

    def advance(self, size: int) -> None:
        """Record one successful chunk of the given size."""
        self.remaining -= size
        self.bytes_written += size
        self.chunks_written += 1


class WriterState(str, Enum):
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"
