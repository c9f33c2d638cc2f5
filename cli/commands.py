"""Command handler for the write operation."""

import sys
from typing import Optional, TextIO

from common.exceptions import ChunkWriteException, CloseError
from common.logging_config import get_logger
from cli.config import Config, default_config_path
from cli.constants import EXIT_CODES, ExitCode
from cli.models import WriteCommand
from cli.utils import ProgressReporter, format_file_size
from storage.base import RemoteWriteStream, StorageClient
from storage.http_client import HttpStorageClient
from writer import pattern_buffer
from writer.chunked_writer import write_all
from writer.size_validator import validate

logger = get_logger(__name__)


def build_client(config: Config) -> HttpStorageClient:
    """
    Create the gateway client described by the configuration.

    Args:
        config: Configuration instance

    Returns:
        HttpStorageClient instance
    """
    logger.debug(f"Creating HttpStorageClient [scheme={config.get_scheme()} timeout={config.get_timeout()}]")
    return HttpStorageClient(
        scheme=config.get_scheme(),
        timeout=config.get_timeout(),
        token=config.get_token(),
    )


def report_error(step: str, error: ChunkWriteException, err: TextIO) -> ExitCode:
    """Print a one-line error for the failing step and return its exit code."""
    code = EXIT_CODES[error.kind]
    logger.debug(f"{step} failed: kind={error.kind.value} exit_code={int(code)}")
    err.write(f"ERROR: {step}: {error}\n")
    err.flush()
    return code


def handle_write(
    cmd: WriteCommand,
    client: Optional[StorageClient] = None,
    config: Optional[Config] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None
) -> ExitCode:
    """
    Handle the write command: validate, allocate, connect, open, write, close.

    Sizes are validated and the buffer is allocated before any network I/O.
    On a failed write the key is aborted rather than committed, and the
    connection is always released.

    Args:
        cmd: Parsed WriteCommand
        client: Optional StorageClient for dependency injection (testing)
        config: Optional Config (loaded from cmd.config_path or the default path)
        out: Stream for results (defaults to stdout)
        err: Stream for error messages (defaults to stderr)

    Returns:
        ExitCode of the run
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    if config is None:
        config = Config(cmd.config_path or default_config_path())
    if client is None:
        client = build_client(config)

    logger.info(
        f"Executing write command: {cmd.filename} size={cmd.file_size} buffer={cmd.buffer_size} "
        f"target={cmd.host}:{cmd.port}/{cmd.volume}/{cmd.bucket}"
    )

    try:
        request = validate(cmd.file_size, cmd.buffer_size)
    except ChunkWriteException as e:
        return report_error("invalid size", e, err)

    try:
        buffer = pattern_buffer.build(request.chunk_size)
    except ChunkWriteException as e:
        return report_error("buffer allocation", e, err)

    with buffer:
        try:
            connection = client.connect(cmd.host, cmd.port, cmd.bucket, cmd.volume)
        except ChunkWriteException as e:
            return report_error("connect", e, err)

        try:
            return _write_key(cmd, client, config, connection, request, buffer, out, err)
        finally:
            client.disconnect(connection)


def _write_key(cmd, client, config, connection, request, buffer, out, err) -> ExitCode:
    hints = config.get_write_hints()
    try:
        file = client.open_for_write(
            connection,
            cmd.filename,
            buffer_size=request.chunk_size,
            replication=hints['replication'],
            block_size=hints['block_size'],
            overwrite=cmd.overwrite,
        )
    except ChunkWriteException as e:
        return report_error(f"open {cmd.filename} for writing", e, err)

    reporter = ProgressReporter(cmd.filename, request.total_size, stream=out) if cmd.progress else None

    try:
        progress = write_all(RemoteWriteStream(client, file), request, buffer, progress=reporter)
    except ChunkWriteException as e:
        if reporter is not None:
            reporter.finish()
        try:
            client.abort(file)
        except CloseError as abort_error:
            logger.warning(f"Could not abort {cmd.filename}: {abort_error}")
        return report_error(f"write {cmd.filename}", e, err)

    if reporter is not None:
        reporter.finish()

    try:
        client.close(file)
    except ChunkWriteException as e:
        return report_error(f"close {cmd.filename}", e, err)

    out.write(
        f"Wrote {cmd.filename}: {format_file_size(progress.bytes_written)} "
        f"in {progress.chunks_written} chunk(s)\n"
    )
    out.flush()
    logger.info(f"Write command completed: {progress.bytes_written} bytes")
    return ExitCode.SUCCESS
