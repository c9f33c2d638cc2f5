"""Abstract remote storage client and the handles it hands out."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Connection:
    """
    An open connection to one bucket of one volume.
    """
    host: str
    port: int
    bucket: str
    volume: str
    session: Any = field(default=None, repr=False, compare=False)
    closed: bool = False


@dataclass
class FileHandle:
    """
    A key opened for writing.
    """
    connection: Connection
    path: str
    session_id: str
    offset: int = 0
    closed: bool = False


class StorageClient(ABC):
    """Connection, open, write and close operations of an object store."""

    @abstractmethod
    def connect(self, host: str, port: int, bucket: str, volume: str) -> Connection:
        """
        Connect to a bucket.

        Raises:
            StoreConnectionError: If the store or bucket cannot be reached
        """

    @abstractmethod
    def open_for_write(
        self,
        connection: Connection,
        path: str,
        buffer_size: int,
        replication: int = 0,
        block_size: int = 0,
        overwrite: bool = False
    ) -> FileHandle:
        """
        Open a key for writing.

        Raises:
            OpenError: If the key cannot be created
        """

    @abstractmethod
    def write(self, file: FileHandle, data: memoryview, length: int) -> int:
        """
        Write the first `length` bytes of data.

        Returns:
            Number of bytes the store accepted

        Raises:
            StoreWriteError: If the store fails the call
        """

    @abstractmethod
    def close(self, file: FileHandle) -> None:
        """
        Commit the key.

        Raises:
            CloseError: If the commit fails
        """

    @abstractmethod
    def abort(self, file: FileHandle) -> None:
        """
        Discard an uncommitted key.

        Raises:
            CloseError: If the store cannot discard the key
        """

    @abstractmethod
    def disconnect(self, connection: Connection) -> None:
        """Release the connection. Safe to call more than once."""


class RemoteWriteStream:
    """Adapts a client and an open file handle to the writer's sink interface."""

    def __init__(self, client: StorageClient, file: FileHandle):
        self.client = client
        self.file = file

    def write(self, data: memoryview) -> int:
        return self.client.write(self.file, data, len(data))
