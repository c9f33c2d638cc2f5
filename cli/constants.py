"""CLI constants: exit codes, usage text and terminal colors."""

from enum import IntEnum

from common.exceptions import ErrorKind


class ExitCode(IntEnum):
    SUCCESS = 0
    USAGE = -1
    OPEN_FAILURE = -2
    WRITE_FAILURE = -3
    CONNECTION_FAILURE = -4
    ALLOCATION_FAILURE = -5
    CLOSE_FAILURE = -6


EXIT_CODES = {
    ErrorKind.INVALID_INPUT: ExitCode.WRITE_FAILURE,
    ErrorKind.OUT_OF_RANGE: ExitCode.WRITE_FAILURE,
    ErrorKind.ALLOCATION_FAILURE: ExitCode.ALLOCATION_FAILURE,
    ErrorKind.SHORT_WRITE: ExitCode.WRITE_FAILURE,
    ErrorKind.WRITE: ExitCode.WRITE_FAILURE,
    ErrorKind.CONNECTION: ExitCode.CONNECTION_FAILURE,
    ErrorKind.OPEN: ExitCode.OPEN_FAILURE,
    ErrorKind.CLOSE: ExitCode.CLOSE_FAILURE,
}

PROG = "chunkwrite"

USAGE = f"{PROG} <filename> <filesize> <buffersize> <host-name> <port> <bucket-name> <volume-name>"

DESCRIPTION = (
    "Write a key of <filesize> bytes to an object store in <buffersize> chunks. "
    "Every chunk carries the repeating pattern 'abc...z'."
)

CONFIG_DIR_NAME = ".chunkwrite"
CONFIG_FILE_NAME = "config.json"

GREEN = "\033[32m"
RESET = "\033[0m"
