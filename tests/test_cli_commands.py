"""Tests for the write command handler."""

import io
from unittest.mock import Mock

import pytest

from cli.commands import build_client, handle_write
from cli.constants import ExitCode
from cli.models import WriteCommand
from common.constants import MAX_WRITE_SIZE
from common.exceptions import (
    AllocationFailureError,
    CloseError,
    OpenError,
    StoreConnectionError,
    StoreWriteError,
)
from storage.base import Connection, FileHandle, StorageClient
from storage.http_client import HttpStorageClient
from storage.memory_client import InMemoryStorageClient


def make_command(**overrides):
    fields = dict(
        filename='key1',
        file_size='100',
        buffer_size='30',
        host='localhost',
        port=9878,
        bucket='bucket1',
        volume='vol1',
    )
    fields.update(overrides)
    return WriteCommand(**fields)


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


def run(cmd, client, config, streams):
    out, err = streams
    return handle_write(cmd, client=client, config=config, out=out, err=err)


def test_handle_write_success(memory_client, temp_config, streams):
    """Test a full write commits the key and reports the size."""
    code = run(make_command(), memory_client, temp_config, streams)

    assert code == ExitCode.SUCCESS
    assert memory_client.write_sizes == [30, 30, 30, 10]
    content = memory_client.get_key('vol1', 'bucket1', 'key1')
    assert content == (b'abcdefghijklmnopqrstuvwxyzabcd' * 3) + b'abcdefghij'
    assert 'Wrote key1: 100 B in 4 chunk(s)' in streams[0].getvalue()
    assert streams[1].getvalue() == ''


def test_handle_write_zero_bytes(memory_client, temp_config, streams):
    code = run(make_command(file_size='0'), memory_client, temp_config, streams)

    assert code == ExitCode.SUCCESS
    assert memory_client.write_sizes == []
    assert memory_client.get_key('vol1', 'bucket1', 'key1') == b''


def test_invalid_size_fails_before_connect(temp_config, streams):
    """Test validation errors are reported before any I/O."""
    client = Mock(spec=StorageClient)

    code = run(make_command(buffer_size=str(MAX_WRITE_SIZE + 1)), client, temp_config, streams)

    assert code == ExitCode.WRITE_FAILURE
    assert 'ERROR: invalid size' in streams[1].getvalue()
    client.connect.assert_not_called()


def test_non_numeric_size(temp_config, streams):
    client = Mock(spec=StorageClient)

    code = run(make_command(file_size='lots'), client, temp_config, streams)

    assert code == ExitCode.WRITE_FAILURE
    client.connect.assert_not_called()


def test_allocation_failure(temp_config, streams, monkeypatch):
    from writer import pattern_buffer

    def failing_build(size):
        raise AllocationFailureError(size)

    monkeypatch.setattr(pattern_buffer, 'build', failing_build)
    client = Mock(spec=StorageClient)

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.ALLOCATION_FAILURE
    assert 'could not allocate buffer of size 30' in streams[1].getvalue()
    client.connect.assert_not_called()


def test_connection_failure(temp_config, streams):
    client = Mock(spec=StorageClient)
    client.connect.side_effect = StoreConnectionError("Cannot connect to localhost:9878")

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.CONNECTION_FAILURE
    assert 'ERROR: connect: Cannot connect' in streams[1].getvalue()
    client.disconnect.assert_not_called()


def test_open_failure_disconnects(temp_config, streams):
    client = Mock(spec=StorageClient)
    connection = Connection('localhost', 9878, 'bucket1', 'vol1')
    client.connect.return_value = connection
    client.open_for_write.side_effect = OpenError("Key already exists")

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.OPEN_FAILURE
    client.disconnect.assert_called_once_with(connection)


def test_open_uses_chunk_size_and_config_hints(temp_config, streams):
    temp_config.data['replication'] = 3
    temp_config.data['block_size'] = 1024
    client = Mock(spec=StorageClient)
    connection = Connection('localhost', 9878, 'bucket1', 'vol1')
    client.connect.return_value = connection
    client.open_for_write.return_value = FileHandle(connection, 'key1', 's1')
    client.write.side_effect = lambda file, data, length: length

    code = run(make_command(overwrite=True), client, temp_config, streams)

    assert code == ExitCode.SUCCESS
    client.open_for_write.assert_called_once_with(
        connection, 'key1', buffer_size=30, replication=3, block_size=1024, overwrite=True
    )
    assert [c.args[2] for c in client.write.call_args_list] == [30, 30, 30, 10]
    client.close.assert_called_once()
    client.abort.assert_not_called()
    client.disconnect.assert_called_once_with(connection)


def test_short_write_aborts_and_disconnects(temp_config, streams):
    """Test a short write stops writing, aborts the key and releases the connection."""
    client = InMemoryStorageClient(max_write_size=29)
    client.create_bucket('vol1', 'bucket1')

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.WRITE_FAILURE
    assert client.write_sizes == [30]
    assert 'key1' not in client.volumes['vol1']['bucket1']
    assert client.sessions == {}
    assert 'write returned 29 of 30 bytes' in streams[1].getvalue()


def test_store_write_error_is_write_failure(temp_config, streams):
    client = Mock(spec=StorageClient)
    connection = Connection('localhost', 9878, 'bucket1', 'vol1')
    client.connect.return_value = connection
    client.open_for_write.return_value = FileHandle(connection, 'key1', 's1')
    client.write.side_effect = StoreWriteError("Request timed out")
    client.abort.side_effect = CloseError("abort failed")

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.WRITE_FAILURE
    assert client.write.call_count == 1
    client.close.assert_not_called()
    client.disconnect.assert_called_once_with(connection)
    assert 'Request timed out' in streams[1].getvalue()


def test_close_failure(temp_config, streams):
    client = Mock(spec=StorageClient)
    connection = Connection('localhost', 9878, 'bucket1', 'vol1')
    client.connect.return_value = connection
    client.open_for_write.return_value = FileHandle(connection, 'key1', 's1')
    client.write.side_effect = lambda file, data, length: length
    client.close.side_effect = CloseError("Failed to commit key1")

    code = run(make_command(), client, temp_config, streams)

    assert code == ExitCode.CLOSE_FAILURE
    client.disconnect.assert_called_once_with(connection)


def test_progress_output(memory_client, temp_config, streams):
    code = run(make_command(progress=True), memory_client, temp_config, streams)

    output = streams[0].getvalue()
    assert code == ExitCode.SUCCESS
    assert output.count('\rWriting key1:') == 4
    assert '100 B / 100 B' in output
    assert '100.0%' in output


def test_build_client_from_config(temp_config):
    temp_config.data['scheme'] = 'https'
    temp_config.data['timeout'] = 5
    temp_config.set_token('tok_xyz')

    client = build_client(temp_config)

    assert isinstance(client, HttpStorageClient)
    assert client.scheme == 'https'
    assert client.timeout == 5
    assert client.token == 'tok_xyz'
