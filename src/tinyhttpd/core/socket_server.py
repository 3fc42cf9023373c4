"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the listening socket and hands every accepted client to a callback.
Nothing in here knows about HTTP.

=============================================================================
SERIAL ACCEPT LOOP
=============================================================================

    bind() ──► listen() ──┐
                          ▼
             ┌──► accept() ──► handler(conn) ──┐
             │                                 │
             └──────── still running? ◄────────┘
                          │ no
                          ▼
                       close()

The handler runs on the accepting thread and returns only when its
connection is finished, so clients are answered strictly one after
another. Nothing is shared between iterations, so nothing needs a lock.
A slow client is bounded by the connection's own read and write
deadlines, not by this loop.

=============================================================================
STOPPING
=============================================================================

accept() wakes up every POLL_INTERVAL seconds to look at the running
flag. shutdown() only clears the flag, so it is safe from a signal
handler or another thread. SIGINT/SIGTERM are hooked only when serving
from the main thread; Python refuses to install handlers anywhere else.

=============================================================================
"""

import contextlib
import logging
import signal
import socket
import threading
from typing import Callable, Iterator, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ConnectionHandler = Callable[[Connection], None]

# Seconds accept() blocks before re-checking the running flag
POLL_INTERVAL = 1.0


class SocketServer:
    """
    Accepts TCP clients one at a time.

        listener = SocketServer(config)
        listener.start(handle)     # blocks; handle(conn) must close conn

    From another thread:

        listener.shutdown()
        listener.wait_for_shutdown(5.0)
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None
        self._running = False
        self._stopped = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once bound, even with port 0."""
        if self._listener is None:
            return (self.config.host, self.config.port)
        host, port = self._listener.getsockname()[:2]
        return (host, port)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def bind(self) -> None:
        """
        Create, bind and listen.

        Raises:
            OSError: The address is taken or not available. The socket is
                     released before the error propagates.
        """
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart immediately even while old connections sit in TIME_WAIT
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.settimeout(POLL_INTERVAL)

        try:
            listener.bind((self.config.host, self.config.port))
            listener.listen(self.config.backlog)
        except OSError as e:
            listener.close()
            logger.error(f"Cannot listen on {self.config.host}:{self.config.port}: {e}")
            raise

        self._listener = listener

    def start(self, handler: ConnectionHandler) -> None:
        """
        Serve until shutdown() is called. Blocks.

        Binds first if bind() was not called already.
        """
        # Flag first: shutdown() may arrive as soon as the port accepts
        self._running = True
        self._stopped.clear()

        try:
            if self._listener is None:
                self.bind()

            host, port = self.address
            logger.info(f"Listening on {host}:{port}")

            with self._stop_on_signals():
                self._serve(handler)
        finally:
            self._close()

    def shutdown(self) -> None:
        """Ask the loop to stop after the current connection. Idempotent."""
        if self._running:
            logger.info("Shutdown requested")
        self._running = False

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """True once the loop has exited and the socket is closed."""
        return self._stopped.wait(timeout)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _serve(self, handler: ConnectionHandler) -> None:
        while self._running:
            try:
                client, address = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"accept() failed: {e}")
                break

            logger.debug(f"Client {address[0]}:{address[1]} connected")

            handler(Connection(
                socket=client,
                address=address,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            ))

    @contextlib.contextmanager
    def _stop_on_signals(self) -> Iterator[None]:
        """Route SIGINT/SIGTERM to shutdown() while serving."""
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def on_signal(signum, frame):
            logger.info(f"{signal.Signals(signum).name} received")
            self.shutdown()

        previous = {
            sig: signal.signal(sig, on_signal)
            for sig in (signal.SIGINT, signal.SIGTERM)
        }
        try:
            yield
        finally:
            for sig, old_handler in previous.items():
                signal.signal(sig, old_handler)

    def _close(self) -> None:
        self._running = False
        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                pass
            self._listener = None
        self._stopped.set()
        logger.info("Listener closed")
