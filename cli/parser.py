"""Command-line parser for the write command."""

import argparse
from pathlib import Path
from typing import Optional, Sequence

from cli.constants import DESCRIPTION, PROG, USAGE
from cli.models import WriteCommand


class ParseError(Exception):
    """Raised when command-line parsing fails."""

    pass


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises ParseError instead of exiting with status 2."""

    def error(self, message):
        raise ParseError(message)


def build_parser() -> argparse.ArgumentParser:
    ap = _Parser(prog=PROG, usage=USAGE, description=DESCRIPTION)
    ap.add_argument("filename", help="Key name to write inside the bucket")
    ap.add_argument("file_size", help="Total number of bytes to write")
    ap.add_argument("buffer_size", help="Bytes per write call (chunk size)")
    ap.add_argument("host", help="Gateway host name")
    ap.add_argument("port", help="Gateway port")
    ap.add_argument("bucket", help="Bucket name")
    ap.add_argument("volume", help="Volume name")
    ap.add_argument("--overwrite", action="store_true", help="Replace the key if it already exists")
    ap.add_argument("--progress", action="store_true", help="Show a progress line while writing")
    ap.add_argument("--debug", action="store_true", help="Enable debug logging")
    ap.add_argument("--config", type=Path, default=None, help="Path to config JSON file")
    return ap


def parse_port(raw_port: str) -> int:
    """
    Parse a TCP port number.

    Raises:
        ParseError: If the value is not an integer in 1..65535
    """
    try:
        port = int(raw_port)
    except ValueError:
        raise ParseError(f"invalid port {raw_port!r} - must be an integer")
    if not 0 < port < 65536:
        raise ParseError(f"invalid port {port} - must be between 1 and 65535")
    return port


def parse_command(argv: Optional[Sequence[str]] = None) -> WriteCommand:
    """Parse command-line arguments into a WriteCommand.

    Sizes are kept as strings; range checks belong to the size validator.

    Raises:
        ParseError: If arguments are missing, extra, or the port is invalid
    """
    args = build_parser().parse_args(argv)

    if not args.filename.strip():
        raise ParseError("filename must not be empty")

    return WriteCommand(
        filename=args.filename,
        file_size=args.file_size,
        buffer_size=args.buffer_size,
        host=args.host,
        port=parse_port(args.port),
        bucket=args.bucket,
        volume=args.volume,
        overwrite=args.overwrite,
        progress=args.progress,
        debug=args.debug,
        config_path=args.config,
    )
