"""Custom exception classes shared by the writer core, storage client and CLI."""

from enum import Enum
from typing import Optional, Union


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    OUT_OF_RANGE = "out_of_range"
    ALLOCATION_FAILURE = "allocation_failure"
    SHORT_WRITE = "short_write"
    CONNECTION = "connection"
    OPEN = "open"
    WRITE = "write"
    CLOSE = "close"


class ChunkWriteException(Exception):
    """
    Base exception class for all chunkwrite errors.
    """
    kind: ErrorKind


class ValidationError(ChunkWriteException):
    """
    Raised when user-supplied sizes are rejected before any I/O.
    """
    kind = ErrorKind.INVALID_INPUT


class InvalidSizeError(ValidationError):
    """
    Raised when a size is not an unsigned decimal integer.
    """
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, name: str, raw_value: str):
        self.name = name
        self.raw_value = raw_value
        super().__init__(f"invalid {name} {raw_value!r} - must be an unsigned integer")


class OutOfRangeError(ValidationError):
    """
    Raised when a size exceeds a platform or protocol limit.
    """
    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, name: str, value: Union[int, str], limit: int, minimum: int = 0):
        self.name = name
        self.value = value
        self.limit = limit
        self.minimum = minimum
        super().__init__(f"invalid {name} {value} - must be >= {minimum} and <= {limit}")


class AllocationFailureError(ChunkWriteException):
    """
    Raised when the pattern buffer cannot be allocated.
    """
    kind = ErrorKind.ALLOCATION_FAILURE

    def __init__(self, size: int):
        self.size = size
        super().__init__(f"could not allocate buffer of size {size}")


class ShortWriteError(ChunkWriteException):
    """
    Raised when a single write transfers fewer bytes than requested.
    """
    kind = ErrorKind.SHORT_WRITE

    def __init__(self, expected: int, actual: int, bytes_written: int = 0):
        self.expected = expected
        self.actual = actual
        self.bytes_written = bytes_written
        super().__init__(
            f"write returned {actual} of {expected} bytes "
            f"after {bytes_written} bytes written"
        )


class StorageClientError(ChunkWriteException):
    """
    Base class for failures reported by the remote storage client.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class StoreConnectionError(StorageClientError):
    """
    Raised when the store is unreachable or the bucket cannot be resolved.
    """
    kind = ErrorKind.CONNECTION


class OpenError(StorageClientError):
    """
    Raised when a key cannot be opened for writing.
    """
    kind = ErrorKind.OPEN


class StoreWriteError(StorageClientError):
    """
    Raised when the store rejects or fails a write call.
    """
    kind = ErrorKind.WRITE


class CloseError(StorageClientError):
    """
    Raised when committing or aborting an open key fails.
    """
    kind = ErrorKind.CLOSE
