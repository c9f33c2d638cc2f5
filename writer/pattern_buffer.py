"""Builds the reusable chunk buffer filled with the 'a'..'z' pattern."""

from typing import Optional

from common.constants import MAX_WRITE_SIZE, PATTERN_ALPHABET
from common.exceptions import AllocationFailureError, OutOfRangeError
from common.logging_config import get_logger

logger = get_logger(__name__)


class ChunkBuffer:
    """Read-only, fixed-length payload buffer shared by every write of one file."""

    def __init__(self, data: bytes):
        self._data = data
        self._view: Optional[memoryview] = memoryview(data)

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index):
        return self._data[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, ChunkBuffer):
            return self._data == other._data
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._data)

    @property
    def released(self) -> bool:
        return self._view is None

    def view(self, length: int) -> memoryview:
        """
        Return a zero-copy view of the first `length` bytes.

        Raises:
            ValueError: If the buffer was released or length is out of bounds
        """
        if self._view is None:
            raise ValueError("chunk buffer has been released")
        if length < 0 or length > len(self._data):
            raise ValueError(f"view length {length} outside buffer of {len(self._data)} bytes")
        return self._view[:length]

    def tobytes(self) -> bytes:
        return self._data

    def release(self) -> None:
        """Release the underlying view; further views raise ValueError."""
        if self._view is not None:
            self._view.release()
            self._view = None

    def __enter__(self) -> 'ChunkBuffer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


def fill_pattern(size: int) -> bytes:
    """Return `size` bytes where byte i is ord('a') + i % 26."""
    repeats, remainder = divmod(size, len(PATTERN_ALPHABET))
    return PATTERN_ALPHABET * repeats + PATTERN_ALPHABET[:remainder]


def build(chunk_size: int) -> ChunkBuffer:
    """
    Allocate and fill the chunk buffer.

    Args:
        chunk_size: Buffer length in bytes

    Returns:
        ChunkBuffer of exactly chunk_size bytes

    Raises:
        OutOfRangeError: If chunk_size is not in [1, MAX_WRITE_SIZE]
        AllocationFailureError: If the memory cannot be allocated
    """
    if chunk_size < 1 or chunk_size > MAX_WRITE_SIZE:
        raise OutOfRangeError('buffer size', chunk_size, MAX_WRITE_SIZE, minimum=1)

    try:
        data = fill_pattern(chunk_size)
    except MemoryError as e:
        raise AllocationFailureError(chunk_size) from e

    logger.debug(f"Allocated pattern buffer of {chunk_size} bytes")
    return ChunkBuffer(data)
