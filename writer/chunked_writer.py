"""Streams a logical write of total_size bytes as fixed-size chunks against a sink."""

from typing import Callable, Optional, Protocol

from common.exceptions import ShortWriteError
from common.logging_config import get_logger
from common.types import WriteProgress, WriteRequest, WriterState
from writer.pattern_buffer import ChunkBuffer

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class ChunkSink(Protocol):
    """Write capability consumed by the chunked writer."""

    def write(self, data: memoryview) -> int:
        """Write data and return the number of bytes the store accepted."""
        ...


class ChunkedWriter:
    """
    Drives the write loop for one WriteRequest.

    The writer moves from WRITING to DONE when every byte has been accepted,
    or to FAILED on the first short write or sink error. A failed writer
    issues no further writes.
    """

    def __init__(self, sink: ChunkSink, request: WriteRequest, buffer: ChunkBuffer):
        if len(buffer) < request.chunk_size:
            raise ValueError(
                f"buffer of {len(buffer)} bytes is smaller than chunk size {request.chunk_size}"
            )
        self.sink = sink
        self.request = request
        self.buffer = buffer
        self.progress = WriteProgress(remaining=request.total_size)
        self.state = WriterState.WRITING

    def run(self, on_progress: Optional[ProgressCallback] = None) -> WriteProgress:
        """
        Write until remaining reaches zero.

        Args:
            on_progress: Optional callback invoked with (bytes_written, total_size)
                after every accepted chunk

        Returns:
            Final WriteProgress

        Raises:
            ShortWriteError: If a write accepts fewer bytes than requested
            RuntimeError: If the writer already finished or failed
        """
        if self.state is not WriterState.WRITING:
            raise RuntimeError(f"writer is {self.state.value}")

        total_size = self.request.total_size
        logger.debug(
            f"Writing {total_size} bytes in {self.request.chunk_count} chunk(s) "
            f"of up to {self.request.chunk_size} bytes"
        )

        try:
            while self.progress.remaining > 0:
                current_size = min(self.request.chunk_size, self.progress.remaining)
                written = self.sink.write(self.buffer.view(current_size))
                if written != current_size:
                    raise ShortWriteError(current_size, written, self.progress.bytes_written)
                self.progress.advance(current_size)
                if on_progress is not None:
                    on_progress(self.progress.bytes_written, total_size)
        except BaseException:
            self.state = WriterState.FAILED
            raise

        self.state = WriterState.DONE
        logger.debug(f"Wrote {self.progress.bytes_written} bytes in {self.progress.chunks_written} chunk(s)")
        return self.progress


def write_all(
    sink: ChunkSink,
    request: WriteRequest,
    buffer: ChunkBuffer,
    progress: Optional[ProgressCallback] = None
) -> WriteProgress:
    """
    Write request.total_size bytes from buffer to sink in chunk_size pieces.

    Args:
        sink: Object with write(data) -> bytes accepted
        request: Validated sizes
        buffer: Pattern buffer of at least request.chunk_size bytes
        progress: Optional callback invoked with (bytes_written, total_size)

    Returns:
        Final WriteProgress (remaining == 0)

    Raises:
        ShortWriteError: On the first write that accepts fewer bytes than requested
        ValueError: If the buffer is smaller than the chunk size
    """
    return ChunkedWriter(sink, request, buffer).run(progress)
