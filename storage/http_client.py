"""HTTP client for writing keys through the object-store gateway."""

import uuid
from typing import Optional, Type
from urllib.parse import quote

import httpx

from common.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    REQUEST_ID_HEADER,
    WRITE_OFFSET_HEADER,
)
from common.exceptions import (
    CloseError,
    OpenError,
    StorageClientError,
    StoreConnectionError,
    StoreWriteError,
)
from common.logging_config import get_logger
from common.protocol import (
    BucketInfoResponse,
    CommitResponse,
    ErrorResponse,
    OpenKeyRequest,
    OpenKeyResponse,
    WriteResponse,
)
from storage.base import Connection, FileHandle, StorageClient

logger = get_logger(__name__)


ERROR_MESSAGES = {
    'VOLUME_NOT_FOUND': 'Volume not found.',
    'BUCKET_NOT_FOUND': 'Bucket not found.',
    'KEY_ALREADY_EXISTS': 'Key already exists. Use --overwrite to replace it.',
    'PERMISSION_DENIED': 'You do not have permission to write to this bucket.',
    'INVALID_TOKEN': 'Not authenticated. Check the token in the config file.',
    'QUOTA_EXCEEDED': 'Quota exceeded for this bucket or volume.',
    'SESSION_NOT_FOUND': 'Write session is unknown or has expired.',
    'NOT_ENOUGH_SPACE': 'Storage capacity exceeded on the cluster.',
}

STATUS_MESSAGES = {
    400: 'Bad request',
    401: 'Not authenticated',
    403: 'Access forbidden',
    404: 'Not found',
    409: 'Conflict',
    413: 'Payload too large',
    500: 'Server error',
    503: 'Service unavailable',
    507: 'Insufficient storage',
}


def format_error(response: httpx.Response) -> tuple[str, Optional[str]]:
    """
    Map a gateway error response to a user-friendly message.

    Args:
        response: HTTP response object

    Returns:
        Tuple of (message, error_code); error_code is None when the body
        carries none
    """
    try:
        error = ErrorResponse.model_validate(response.json())
        detail, code = error.detail, error.code
    except ValueError:
        detail = response.text if response.text else 'Unknown error'
        code = None

    if code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code], code

    message = STATUS_MESSAGES.get(response.status_code, detail)
    if code:
        return f"{message} (Code: {code})", code
    return f"{message} (HTTP {response.status_code})", None


class HttpStorageClient(StorageClient):
    """StorageClient speaking the gateway's HTTP protocol. Performs no retries."""

    def __init__(
        self,
        scheme: str = 'http',
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            scheme: URL scheme of the gateway ('http' or 'https')
            timeout: Per-request timeout in seconds
            token: Optional bearer token sent with every request
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.scheme = scheme
        self.timeout = timeout
        self.token = token
        self.transport = transport
        self.request_id: Optional[str] = None

    def _headers(self) -> dict:
        headers = {}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(
        self,
        connection: Connection,
        method: str,
        endpoint: str,
        error_cls: Type[StorageClientError],
        **kwargs
    ) -> httpx.Response:
        """
        Make one HTTP request on the connection's session.

        Raises:
            error_cls: If the request cannot be sent or times out
        """
        if connection.closed or connection.session is None:
            raise error_cls(f"Connection to {connection.host}:{connection.port} is closed")

        self.request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', {})
        headers[REQUEST_ID_HEADER] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        try:
            response = connection.session.request(method, endpoint, headers=headers, **kwargs)
        except httpx.ConnectError as e:
            raise error_cls(
                f"Cannot connect to {connection.host}:{connection.port}. Is the gateway running?"
            ) from e
        except httpx.TimeoutException as e:
            raise error_cls(f"Request timed out: {method} {endpoint}") from e
        except httpx.HTTPError as e:
            raise error_cls(f"HTTP error on {method} {endpoint}: {e}") from e

        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
        )
        return response

    @staticmethod
    def _bucket_path(volume: str, bucket: str) -> str:
        return f"/volumes/{quote(volume, safe='')}/buckets/{quote(bucket, safe='')}"

    def connect(self, host: str, port: int, bucket: str, volume: str) -> Connection:
        base_url = f"{self.scheme}://{host}:{port}"
        logger.info(f"Connecting to {base_url} [volume={volume} bucket={bucket}]")

        session = httpx.Client(
            base_url=base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self.transport,
        )
        connection = Connection(host=host, port=port, bucket=bucket, volume=volume, session=session)

        try:
            response = self._request(
                connection, 'GET', self._bucket_path(volume, bucket), StoreConnectionError
            )
            if response.status_code != 200:
                message, code = format_error(response)
                raise StoreConnectionError(f"Failed to connect: {message}", code=code)
            BucketInfoResponse.model_validate(response.json())
        except ValueError as e:
            session.close()
            raise StoreConnectionError(f"Malformed bucket info from {base_url}: {e}") from e
        except StoreConnectionError:
            session.close()
            raise

        logger.info(f"Connected to {base_url}")
        return connection

    def open_for_write(
        self,
        connection: Connection,
        path: str,
        buffer_size: int,
        replication: int = 0,
        block_size: int = 0,
        overwrite: bool = False
    ) -> FileHandle:
        key = path.lstrip('/')
        if not key:
            raise OpenError(f"Invalid key name: {path!r}")

        body = OpenKeyRequest(
            buffer_size=buffer_size,
            replication=replication,
            block_size=block_size,
            overwrite=overwrite,
        )
        endpoint = f"{self._bucket_path(connection.volume, connection.bucket)}/keys/{quote(key, safe='/')}"
        logger.info(f"Opening {key} for writing [buffer_size={buffer_size}]")

        response = self._request(connection, 'POST', endpoint, OpenError, json=body.model_dump())
        if response.status_code != 201:
            message, code = format_error(response)
            raise OpenError(f"Failed to open {key} for writing: {message}", code=code)

        try:
            opened = OpenKeyResponse.model_validate(response.json())
        except ValueError as e:
            raise OpenError(f"Malformed open response for {key}: {e}") from e

        return FileHandle(connection=connection, path=opened.key, session_id=opened.session_id)

    def write(self, file: FileHandle, data: memoryview, length: int) -> int:
        if file.closed:
            raise StoreWriteError(f"{file.path} is already closed")

        response = self._request(
            file.connection,
            'PUT',
            f"/sessions/{quote(file.session_id, safe='')}",
            StoreWriteError,
            content=data[:length].tobytes(),
            headers={
                WRITE_OFFSET_HEADER: str(file.offset),
                'Content-Type': 'application/octet-stream',
            },
        )
        if response.status_code != 200:
            message, code = format_error(response)
            raise StoreWriteError(f"Write to {file.path} failed at offset {file.offset}: {message}", code=code)

        try:
            written = WriteResponse.model_validate(response.json()).bytes_written
        except ValueError as e:
            raise StoreWriteError(f"Malformed write response for {file.path}: {e}") from e

        file.offset += written
        return written

    def close(self, file: FileHandle) -> None:
        if file.closed:
            return

        response = self._request(
            file.connection, 'POST', f"/sessions/{quote(file.session_id, safe='')}/commit", CloseError
        )
        if response.status_code != 200:
            message, code = format_error(response)
            raise CloseError(f"Failed to commit {file.path}: {message}", code=code)

        try:
            committed = CommitResponse.model_validate(response.json())
        except ValueError as e:
            raise CloseError(f"Malformed commit response for {file.path}: {e}") from e

        file.closed = True
        logger.info(f"Committed {committed.key} ({committed.size} bytes)")

    def abort(self, file: FileHandle) -> None:
        if file.closed:
            return

        response = self._request(
            file.connection, 'DELETE', f"/sessions/{quote(file.session_id, safe='')}", CloseError
        )
        file.closed = True
        if response.status_code not in (200, 204, 404):
            message, code = format_error(response)
            raise CloseError(f"Failed to abort {file.path}: {message}", code=code)
        logger.info(f"Aborted write session for {file.path}")

    def disconnect(self, connection: Connection) -> None:
        if connection.closed:
            return
        if connection.session is not None:
            connection.session.close()
        connection.closed = True
        logger.info(f"Disconnected from {connection.host}:{connection.port}")
