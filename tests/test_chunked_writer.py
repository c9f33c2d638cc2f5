"""Tests for the chunked write loop."""

import pytest

from common.exceptions import ShortWriteError, StoreWriteError
from common.types import WriteRequest, WriterState
from writer.chunked_writer import ChunkedWriter, write_all
from writer.pattern_buffer import build


@pytest.fixture
def run_write(make_sink):
    """Run write_all for (total_size, chunk_size) and return (sink, progress)."""
    def _run(total_size, chunk_size, sink=None):
        sink = sink if sink is not None else make_sink()
        request = WriteRequest(total_size=total_size, chunk_size=chunk_size)
        progress = write_all(sink, request, build(chunk_size))
        return sink, progress
    return _run


def test_zero_total_size_performs_no_writes(run_write):
    sink, progress = run_write(0, 30)

    assert sink.sizes == []
    assert progress.done
    assert progress.bytes_written == 0


def test_trailing_short_chunk(run_write):
    """Test 100 bytes in 30-byte chunks writes [30, 30, 30, 10]."""
    sink, progress = run_write(100, 30)

    assert sink.sizes == [30, 30, 30, 10]
    assert sum(sink.sizes) == 100
    assert progress.remaining == 0
    assert progress.chunks_written == 4


def test_exact_single_chunk(run_write):
    sink, _ = run_write(30, 30)

    assert sink.sizes == [30]


def test_chunk_larger_than_total(run_write):
    sink, _ = run_write(7, 4096)

    assert sink.sizes == [7]


def test_exact_multiple_has_uniform_chunks(run_write):
    sink, _ = run_write(90, 30)

    assert sink.sizes == [30, 30, 30]


@pytest.mark.parametrize('total_size,chunk_size', [(1, 1), (25, 26), (1000, 7), (4096, 1024), (53, 26)])
def test_write_count_and_sizes(run_write, total_size, chunk_size):
    """Test ceil(total/chunk) writes, all full except possibly the last."""
    sink, _ = run_write(total_size, chunk_size)

    assert len(sink.sizes) == -(-total_size // chunk_size)
    assert all(size == chunk_size for size in sink.sizes[:-1])
    assert sink.sizes[-1] == (total_size % chunk_size or chunk_size)
    assert sum(sink.sizes) == total_size


def test_payload_is_buffer_prefix(run_write):
    sink, _ = run_write(30, 26)

    assert sink.payloads[0] == b'abcdefghijklmnopqrstuvwxyz'
    assert sink.payloads[1] == b'abcd'


def test_short_write_fails_fast(run_write, make_sink):
    """Test a short second write stops the loop after one successful write."""
    sink = make_sink(short_on_call=2)

    with pytest.raises(ShortWriteError) as exc_info:
        run_write(100, 30, sink)

    assert sink.sizes == [30, 30]
    assert exc_info.value.expected == 30
    assert exc_info.value.actual == 29
    assert exc_info.value.bytes_written == 30


def test_short_write_on_last_chunk(run_write, make_sink):
    sink = make_sink(short_on_call=4)

    with pytest.raises(ShortWriteError) as exc_info:
        run_write(100, 30, sink)

    assert exc_info.value.expected == 10
    assert exc_info.value.actual == 9
    assert exc_info.value.bytes_written == 90


def test_over_reported_write_is_also_rejected(run_write, make_sink):
    sink = make_sink(accept=lambda call, length: length + 1)

    with pytest.raises(ShortWriteError):
        run_write(10, 5, sink)

    assert sink.sizes == [5]


def test_sink_error_propagates_unchanged():
    class FailingSink:
        calls = 0

        def write(self, data):
            self.calls += 1
            raise StoreWriteError("gateway down")

    sink = FailingSink()
    writer = ChunkedWriter(sink, WriteRequest(total_size=100, chunk_size=30), build(30))

    with pytest.raises(StoreWriteError, match="gateway down"):
        writer.run()

    assert sink.calls == 1
    assert writer.state is WriterState.FAILED


def test_writer_state_transitions(make_sink):
    writer = ChunkedWriter(make_sink(), WriteRequest(total_size=60, chunk_size=30), build(30))
    assert writer.state is WriterState.WRITING

    writer.run()

    assert writer.state is WriterState.DONE
    with pytest.raises(RuntimeError):
        writer.run()


def test_failed_writer_cannot_resume(make_sink):
    sink = make_sink(short_on_call=1)
    writer = ChunkedWriter(sink, WriteRequest(total_size=60, chunk_size=30), build(30))

    with pytest.raises(ShortWriteError):
        writer.run()
    with pytest.raises(RuntimeError):
        writer.run()

    assert writer.state is WriterState.FAILED
    assert sink.sizes == [30]
    assert writer.progress.bytes_written == 0


def test_buffer_smaller_than_chunk_is_rejected(make_sink):
    with pytest.raises(ValueError):
        ChunkedWriter(make_sink(), WriteRequest(total_size=60, chunk_size=30), build(10))


def test_progress_callback(make_sink):
    calls = []
    request = WriteRequest(total_size=70, chunk_size=30)

    write_all(make_sink(), request, build(30), progress=lambda done, total: calls.append((done, total)))

    assert calls == [(30, 70), (60, 70), (70, 70)]
