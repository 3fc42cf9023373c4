"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Serializes responses straight onto the connection's byte sink.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n              ← status line
    Content-Type: text/css\r\n       ← only when serving a file
    \r\n                             ← end of headers
    body { color: red; }             ← file bytes, streamed in chunks

Error responses are just the status line and the blank line:

    HTTP/1.1 404 Not Found\r\n
    \r\n

There is no Content-Length by default: the connection is closed after
every response, and the close marks the end of the body. Passing
include_content_length=True adds it after Content-Type for served files.

=============================================================================
WHY STREAM INSTEAD OF read() + sendall()?
=============================================================================

    path.read_bytes()           → whole file in memory, per request
    read(chunk_size) in a loop  → at most chunk_size bytes in memory

A 2 GB video costs 8 KB of memory per connection, not 2 GB.

=============================================================================
FAILURE SEMANTICS
=============================================================================

A send that fails aborts the response on the spot. There is no retry and
no attempt to finish a partial body: the client already has a broken
response, and the only fix is a new request. The file handle is released
on every path.

=============================================================================
"""

import os
import time
from typing import BinaryIO, Callable, Optional

from .resource import ResolvedResource, ResourceStatus
from .status_codes import HTTPStatus


DEFAULT_GREETING = b"Hello, World!"

HTTP_VERSION = "HTTP/1.1"


class ResponseWriteError(Exception):
    """Raised when the response cannot be written (socket or file error)."""


class ResponseTimeout(ResponseWriteError):
    """Raised when streaming a body takes longer than the write timeout."""


# =============================================================================
# RESOURCE STATUS → HTTP STATUS
# =============================================================================
#
# The resolver decides WHAT happened, this table decides what the client sees.
#
RESOURCE_STATUS = {
    ResourceStatus.OK: HTTPStatus.OK,
    ResourceStatus.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ResourceStatus.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ResourceStatus.SERVER_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def status_line(status: HTTPStatus) -> bytes:
    """
    Build the status line, CRLF included.

        >>> status_line(HTTPStatus.NOT_FOUND)
        b'HTTP/1.1 404 Not Found\\r\\n'
    """
    return f"{HTTP_VERSION} {int(status)} {status.phrase}\r\n".encode("ascii")


class ResponseWriter:
    """
    Writes one response to a byte sink.

    =========================================================================
    USAGE
    =========================================================================

        writer = ResponseWriter(conn.send, chunk_size=8192, timeout=60.0)

        with resolver.resolve(request.path) as resource:
            writer.write_resource(resource)

        writer.status        # HTTPStatus.OK
        writer.bytes_sent    # total bytes handed to the sink

    `send` is any callable taking bytes: Connection.send, socket.sendall,
    a BytesIO's write, a list's append in tests.

    =========================================================================
    """

    def __init__(
        self,
        send: Callable[[bytes], object],
        chunk_size: int = 8192,
        timeout: Optional[float] = None,
        include_content_length: bool = False,
    ):
        """
        Args:
            send: Byte sink. Any OSError it raises aborts the response.
            chunk_size: Bytes read from the file per send.
            timeout: Seconds allowed for streaming a body. None = no limit.
            include_content_length: Add Content-Length for served files.
        """
        self._send_bytes = send
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.include_content_length = include_content_length

        # Filled in as the response goes out, for access logging
        self.status: Optional[HTTPStatus] = None
        self.bytes_sent = 0

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def write_head(
        self,
        status: HTTPStatus,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> None:
        """Send the status line, optional headers and the blank line."""
        self.status = status

        head = status_line(status)
        if content_type is not None:
            head += f"Content-Type: {content_type}\r\n".encode("latin-1")
        if content_length is not None:
            head += f"Content-Length: {content_length}\r\n".encode("ascii")
        head += b"\r\n"

        self._send(head)

    def write_greeting(self, body: bytes = DEFAULT_GREETING) -> None:
        """Send the canned 200 OK response used when no files are served."""
        self.write_head(HTTPStatus.OK)
        self._send(body)

    def write_error(self, status: HTTPStatus) -> None:
        """Send a bodiless error response (400, 408, 413, ...)."""
        self.write_head(status)

    def write_resource(self, resource: ResolvedResource) -> None:
        """
        Send the response for a resolved resource and release it.

        OK resources get Content-Type and the streamed file body.
        Everything else gets its status line only.

        Raises:
            ResponseWriteError: The sink or the file failed mid-response.
            ResponseTimeout: Streaming took longer than `timeout`.
        """
        try:
            status = RESOURCE_STATUS[resource.status]

            if not resource.is_ok:
                self.write_head(status)
                return

            content_length = None
            if self.include_content_length:
                content_length = self._file_size(resource.file)

            self.write_head(status, resource.mime_type, content_length)
            self._stream(resource.file)
        finally:
            resource.close()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _stream(self, file: BinaryIO) -> None:
        """Copy the file to the sink in chunk_size pieces until EOF."""
        deadline = None
        if self.timeout is not None:
            deadline = time.monotonic() + self.timeout

        while True:
            try:
                chunk = file.read(self.chunk_size)
            except OSError as e:
                raise ResponseWriteError(f"File read failed: {e}") from e

            if not chunk:
                break

            if deadline is not None and time.monotonic() > deadline:
                raise ResponseTimeout(
                    f"Body not sent within {self.timeout}s "
                    f"({self.bytes_sent} bytes written)"
                )

            self._send(chunk)

    def _send(self, data: bytes) -> None:
        try:
            self._send_bytes(data)
        except OSError as e:
            raise ResponseWriteError(
                f"Send failed after {self.bytes_sent} bytes: {e}"
            ) from e
        self.bytes_sent += len(data)

    @staticmethod
    def _file_size(file: BinaryIO) -> Optional[int]:
        """Size of an open file, or None if it has no file descriptor."""
        try:
            return os.fstat(file.fileno()).st_size
        except OSError:
            return None
