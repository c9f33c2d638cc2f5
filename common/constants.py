"""Project-wide constants (platform limits, pattern, protocol defaults)."""

OFFSET_BITS: int = 64
MAX_FILE_SIZE: int = (1 << OFFSET_BITS) - 1  # largest unsigned file offset

WRITE_SIZE_BITS: int = 32
MAX_WRITE_SIZE: int = (1 << (WRITE_SIZE_BITS - 1)) - 1  # signed 32-bit write length

PATTERN_ALPHABET: bytes = b"abcdefghijklmnopqrstuvwxyz"

DEFAULT_TIMEOUT_SECONDS: int = 30
DEFAULT_REPLICATION: int = 0  # 0 lets the store pick its default
DEFAULT_BLOCK_SIZE: int = 0

WRITE_OFFSET_HEADER: str = "X-Write-Offset"
REQUEST_ID_HEADER: str = "X-Request-ID"
