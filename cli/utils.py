"""Utility functions for CLI operations."""

import sys
from typing import Optional, TextIO

from cli.constants import GREEN, RESET


class ProgressReporter:
    """Progress line for a chunked write, redrawn in place on a terminal stream."""

    def __init__(self, filename: str, total_size: int, stream: Optional[TextIO] = None):
        """
        Initialize the progress reporter.

        Args:
            filename: Display name for the key being written
            total_size: Total number of bytes to write
            stream: Output stream (defaults to stdout)
        """
        self.filename = filename
        self.total_size = total_size
        self.stream = stream if stream is not None else sys.stdout
        self._finished = False

    def __call__(self, written: int, total: int) -> None:
        """Display current write progress."""
        progress = (written / total) * 100 if total else 100.0
        self.stream.write(
            f"\rWriting {self.filename}: {format_file_size(written)} / {format_file_size(total)} "
            f"({GREEN}{progress:.1f}%{RESET})"
        )
        self.stream.flush()

    def finish(self) -> None:
        """Finalize progress display with newline."""
        if not self._finished:
            self._finished = True
            self.stream.write('\n')
            self.stream.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB', 'PiB']
    size = size_bytes / 1024.0

    for unit in units[:-1]:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} {units[-1]}"
