"""In-process object store used by tests and local dry runs."""

import uuid
from typing import Dict, Optional

from common.exceptions import CloseError, OpenError, StoreConnectionError, StoreWriteError
from common.logging_config import get_logger
from storage.base import Connection, FileHandle, StorageClient

logger = get_logger(__name__)


class InMemoryStorageClient(StorageClient):
    """
    StorageClient keeping keys in a dict of volumes -> buckets -> keys.

    Writes are buffered per session and become visible only on close().
    `max_write_size` caps how many bytes a single write accepts, which lets
    callers simulate short writes.
    """

    def __init__(self, max_write_size: Optional[int] = None):
        self.volumes: Dict[str, Dict[str, Dict[str, bytes]]] = {}
        self.max_write_size = max_write_size
        self.sessions: Dict[str, bytearray] = {}
        self.write_sizes: list[int] = []
        self.unreachable = False

    def create_bucket(self, volume: str, bucket: str) -> None:
        self.volumes.setdefault(volume, {}).setdefault(bucket, {})

    def get_key(self, volume: str, bucket: str, key: str) -> bytes:
        return self.volumes[volume][bucket][key]

    def connect(self, host: str, port: int, bucket: str, volume: str) -> Connection:
        if self.unreachable:
            raise StoreConnectionError(f"Cannot connect to {host}:{port}. Is the gateway running?")
        if volume not in self.volumes:
            raise StoreConnectionError("Failed to connect: Volume not found.", code='VOLUME_NOT_FOUND')
        if bucket not in self.volumes[volume]:
            raise StoreConnectionError("Failed to connect: Bucket not found.", code='BUCKET_NOT_FOUND')
        return Connection(host=host, port=port, bucket=bucket, volume=volume)

    def open_for_write(
        self,
        connection: Connection,
        path: str,
        buffer_size: int,
        replication: int = 0,
        block_size: int = 0,
        overwrite: bool = False
    ) -> FileHandle:
        if connection.closed:
            raise OpenError("Connection is closed")
        key = path.lstrip('/')
        if not key:
            raise OpenError(f"Invalid key name: {path!r}")
        keys = self.volumes[connection.volume][connection.bucket]
        if key in keys and not overwrite:
            raise OpenError(
                f"Failed to open {key} for writing: Key already exists. Use --overwrite to replace it.",
                code='KEY_ALREADY_EXISTS',
            )
        session_id = str(uuid.uuid4())
        self.sessions[session_id] = bytearray()
        return FileHandle(connection=connection, path=key, session_id=session_id)

    def write(self, file: FileHandle, data: memoryview, length: int) -> int:
        if file.closed or file.session_id not in self.sessions:
            raise StoreWriteError(f"Write session for {file.path} is not open", code='SESSION_NOT_FOUND')
        accepted = length if self.max_write_size is None else min(length, self.max_write_size)
        self.sessions[file.session_id] += data[:accepted]
        self.write_sizes.append(length)
        file.offset += accepted
        return accepted

    def close(self, file: FileHandle) -> None:
        if file.closed:
            return
        try:
            content = self.sessions.pop(file.session_id)
        except KeyError as e:
            raise CloseError(f"Failed to commit {file.path}: unknown session") from e
        self.volumes[file.connection.volume][file.connection.bucket][file.path] = bytes(content)
        file.closed = True
        logger.debug(f"Committed {file.path} ({len(content)} bytes)")

    def abort(self, file: FileHandle) -> None:
        self.sessions.pop(file.session_id, None)
        file.closed = True

    def disconnect(self, connection: Connection) -> None:
        connection.closed = True
