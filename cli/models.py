"""Command request data types for CLI."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class WriteCommand:
    """Write a key of file_size bytes in buffer_size chunks."""

    filename: str
    file_size: str
    buffer_size: str
    host: str
    port: int
    bucket: str
    volume: str
    overwrite: bool = False
    progress: bool = False
    debug: bool = False
    config_path: Optional[Path] = None
