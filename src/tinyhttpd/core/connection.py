"""
=============================================================================
CLIENT CONNECTION
=============================================================================

One accepted client socket, used for exactly one request/response and
then closed. No keep-alive: closing is how the client learns where the
body ends.

    accepted ──► read_request() ──► send() … send() ──► close()
                      │                                   ▲
                      └── timeout / too large / reset ────┘

=============================================================================
BOUNDED READS
=============================================================================

The header block has to fit in max_request_size bytes. recv() is never
asked for more than one byte past that limit:

    ┌──────────────────────────────────────────────┬───┐
    │ max_request_size bytes                       │ +1│
    └──────────────────────────────────────────────┴───┘

Holding limit+1 bytes without a blank line is proof enough that the
request is too large, so memory stays bounded however much is sent.

`timeout` is a deadline for the WHOLE read. Each recv() only gets the
time that is left, so trickling a byte at a time does not extend it.

=============================================================================
"""

import contextlib
import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..http.request import RequestTooLarge


logger = logging.getLogger(__name__)

# Blank line closing the header block
HEADER_TERMINATOR = b"\r\n\r\n"

# Total time close() spends draining what the client still sends
LINGER_SECONDS = 0.5


class ConnectionReadError(Exception):
    """The socket failed while the request was being read."""


class ConnectionState(Enum):
    OPEN = "open"
    READING = "reading"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client socket plus the limits that apply to it.

    Attributes:
        socket: Accepted client socket.
        address: (ip, port) of the client.
        timeout: Seconds allowed to receive the whole request. None = wait forever.
        max_request_size: Largest header block accepted, in bytes.
        id: Short random tag that prefixes this connection's log lines.
    """

    socket: socket.socket
    address: tuple
    timeout: Optional[float] = 30.0
    max_request_size: int = 4096
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.OPEN
    opened_at: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Receive the request line and headers.

        Reading stops at the blank line or when the client half-closes.
        A partial request is returned as-is; the parser copes with it.

        Returns:
            The bytes received, or None if the client sent nothing at all.

        Raises:
            RequestTooLarge: The limit was passed before the blank line.
            TimeoutError: The deadline passed first.
            ConnectionReadError: recv() failed.
        """
        self.state = ConnectionState.READING

        deadline = time.monotonic() + self.timeout if self.timeout else None
        received = bytearray()

        while HEADER_TERMINATOR not in received:
            if len(received) > self.max_request_size:
                break

            if deadline is not None:
                left = deadline - time.monotonic()
                if left <= 0:
                    raise TimeoutError("Request read timeout")
                self.socket.settimeout(left)

            try:
                chunk = self.socket.recv(self.max_request_size + 1 - len(received))
            except socket.timeout:
                raise TimeoutError("Request read timeout")
            except OSError as e:
                raise ConnectionReadError(f"Read failed: {e}") from e

            if not chunk:
                break  # half-close: nothing more is coming

            received += chunk

        if len(received) > self.max_request_size:
            raise RequestTooLarge(len(received), self.max_request_size)

        return bytes(received) if received else None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> None:
        """sendall() the bytes. OSError propagates to the response writer."""
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Close politely, then release the socket. Safe to call twice.

            shutdown(SHUT_WR)   our FIN: "the response is complete"
            drain               swallow what the client still sends, so
                                the kernel doesn't answer it with a RST
                                that could destroy the unread response
            close()
        """
        if self.state is ConnectionState.CLOSED:
            return

        with contextlib.suppress(OSError):  # peer may be gone
            self.socket.shutdown(socket.SHUT_WR)

        # One deadline for the whole drain; a trickling peer can't extend it
        deadline = time.monotonic() + LINGER_SECONDS
        with contextlib.suppress(OSError):
            while True:
                left = deadline - time.monotonic()
                if left <= 0:
                    break
                self.socket.settimeout(left)
                if not self.socket.recv(1024):
                    break

        with contextlib.suppress(OSError):
            self.socket.close()

        self.state = ConnectionState.CLOSED
        elapsed = time.monotonic() - self.opened_at
        logger.debug(f"[{self.id}] Closed after {elapsed:.3f}s")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

