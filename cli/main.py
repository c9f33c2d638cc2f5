"""CLI entry point."""

import sys
from typing import Optional, Sequence

from common.logging_config import setup_logging
from cli.commands import handle_write
from cli.constants import USAGE, ExitCode
from cli.parser import ParseError, parse_command
from storage.base import StorageClient


def main(argv: Optional[Sequence[str]] = None, client: Optional[StorageClient] = None) -> int:
    """Entry point for CLI."""
    argv = list(sys.argv[1:] if argv is None else argv)

    try:
        cmd = parse_command(argv)
    except ParseError as e:
        sys.stderr.write(f"Usage: {USAGE}\nerror: {e}\n")
        return int(ExitCode.USAGE)

    logger = setup_logging('cli', log_level='DEBUG' if cmd.debug else None)
    if cmd.debug:
        logger.info("Debug logging enabled")

    logger.info("CLI starting...")
    try:
        return int(handle_write(cmd, client=client))
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    sys.exit(main())
