"""Parses and range-checks the total size and chunk size of a write."""

import re
from typing import Union

from common.constants import MAX_FILE_SIZE, MAX_WRITE_SIZE
from common.exceptions import InvalidSizeError, OutOfRangeError
from common.types import WriteRequest

_UNSIGNED_RE = re.compile(r'[0-9]+')

SizeInput = Union[str, int]


def parse_unsigned(name: str, raw_value: SizeInput, limit: int) -> int:
    """
    Parse an unsigned decimal integer no larger than limit.

    Args:
        name: Parameter name used in the error message
        raw_value: User input (string or int)
        limit: Largest accepted value

    Returns:
        Parsed non-negative integer

    Raises:
        InvalidSizeError: If the input is not an unsigned decimal integer
        OutOfRangeError: If the value exceeds limit
    """
    if isinstance(raw_value, bool):
        raise InvalidSizeError(name, str(raw_value))
    if isinstance(raw_value, int):
        if raw_value < 0:
            raise InvalidSizeError(name, str(raw_value))
        return raw_value

    text = str(raw_value).strip()
    if not _UNSIGNED_RE.fullmatch(text):
        raise InvalidSizeError(name, str(raw_value))

    digits = text.lstrip('0') or '0'
    if len(digits) > len(str(limit)):
        raise OutOfRangeError(name, f"{digits[:20]}... ({len(digits)} digits)", limit)
    return int(digits)


def validate(total_size_input: SizeInput, chunk_size_input: SizeInput) -> WriteRequest:
    """
    Build a WriteRequest from user-supplied sizes.

    Args:
        total_size_input: Total number of bytes to write
        chunk_size_input: Number of bytes per write call

    Returns:
        Immutable WriteRequest

    Raises:
        InvalidSizeError: If either size is not an unsigned integer
        OutOfRangeError: If total size exceeds MAX_FILE_SIZE, or chunk size
            is 0 or exceeds MAX_WRITE_SIZE
    """
    total_size = parse_unsigned('file size', total_size_input, MAX_FILE_SIZE)
    if total_size > MAX_FILE_SIZE:
        raise OutOfRangeError('file size', total_size, MAX_FILE_SIZE)

    chunk_size = parse_unsigned('buffer size', chunk_size_input, MAX_WRITE_SIZE)
    if chunk_size < 1 or chunk_size > MAX_WRITE_SIZE:
        raise OutOfRangeError('buffer size', chunk_size, MAX_WRITE_SIZE, minimum=1)

    return WriteRequest(total_size=total_size, chunk_size=chunk_size)
