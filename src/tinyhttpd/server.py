"""
=============================================================================
HTTP SERVER
=============================================================================

Glues the pieces together for each connection.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │  SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │  Connection.read_request()  ── too large ──►  413                   │
    │        │                    ── timeout ────►  408                   │
    │        ▼                                                             │
    │  RequestParser.parse()      (never fails)                           │
    │        │                                                             │
    │        ├── no document root ──────────────►  200 "Hello, World!"    │
    │        ├── no path in request line ───────►  400                    │
    │        ▼                                                             │
    │  StaticResolver.resolve(path)                                       │
    │        │                                                             │
    │        ▼                                                             │
    │  ResponseWriter.write_resource()  → 200 + file / 403 / 404 / 500    │
    │        │                                                             │
    │        ▼                                                             │
    │  Connection.close()         (always, on every path)                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR ISOLATION
=============================================================================

Whatever goes wrong while handling one connection (socket reset, write
failure, a bug) is logged and ends THAT connection. The accept loop keeps
going and the next client is unaffected.

=============================================================================
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionReadError
from .handlers import StaticResolver
from .http import (
    Request,
    RequestParser,
    RequestTooLarge,
    ResponseWriter,
    ResponseWriteError,
    HTTPStatus,
)


logger = logging.getLogger(__name__)

# Access log, one line per response. Configure separately if needed:
#   logging.getLogger("tinyhttpd.access").addHandler(file_handler)
access_logger = logging.getLogger("tinyhttpd.access")


class HTTPServer:
    """
    Minimal HTTP/1.1 server: a greeting, or static files from a root.

    =========================================================================
    USAGE
    =========================================================================

        # Greeting mode
        HTTPServer().run()

        # Static files
        server = HTTPServer(ServerConfig(document_root="./public"))
        server.run()  # blocks until Ctrl+C

        # Without sockets (tests, embedding)
        out = []
        server.respond(b"GET / HTTP/1.1\\r\\n\\r\\n", out.append)
        b"".join(out)

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)

        # Stateless, shared by every connection
        self._parser = RequestParser()
        self._resolver: Optional[StaticResolver] = None
        if self.config.serves_files:
            self._resolver = StaticResolver(
                self.config.document_root,
                index_file=self.config.index_file,
            )

        self._greeting = self.config.greeting.encode("utf-8")

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Listen and serve until shutdown() or a signal. Blocks.

        host/port, when given, replace the configured ones.

        Raises:
            OSError: The address could not be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        mode = (
            f"files from {self.config.document_root}"
            if self._resolver is not None
            else "greeting only (no document root)"
        )
        logger.info(f"tinyhttpd starting: {mode}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Interrupted")

        logger.info("tinyhttpd stopped")

    def shutdown(self):
        """Stop accepting connections. The current one is finished first."""
        self._socket_server.shutdown()

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Root handler in the usual format, package loggers at log_level."""
        level = getattr(logging, self.config.log_level.upper())

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Serve one connection: read, respond, close.

        Called by SocketServer on the accepting thread. Never raises:
        every failure is logged and only ends this connection.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                data = conn.read_request()
                if data is None:
                    logger.debug(f"[{conn.id}] Client closed without sending a request")
                    return

                self.respond(data, conn.send, conn.address)

            except RequestTooLarge as e:
                logger.warning(f"[{conn.id}] {e}")
                self._send_error(conn, e.status_code)

            except TimeoutError:
                logger.warning(f"[{conn.id}] Request read timeout")
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT)

            except ConnectionReadError as e:
                logger.warning(f"[{conn.id}] {e}")

            except ResponseWriteError as e:
                logger.warning(f"[{conn.id}] Response aborted: {e}")

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def respond(
        self,
        data: bytes,
        send: Callable[[bytes], object],
        client_address: Tuple[str, int] = ("", 0),
    ) -> Request:
        """
        Parse one request and write its response to `send`.

        This is the whole HTTP pipeline without sockets; _handle_connection
        wraps it with reading and closing.

        Args:
            data: Raw request bytes.
            send: Byte sink for the response.
            client_address: (ip, port), for the access log.

        Returns:
            The parsed request.

        Raises:
            ResponseWriteError: The sink failed mid-response.
        """
        started = time.time()
        writer = ResponseWriter(
            send,
            chunk_size=self.config.chunk_size,
            timeout=self.config.write_timeout,
            include_content_length=self.config.include_content_length,
        )

        request = self._parser.parse(data)
        logger.debug(f"Parsed request:\n{request.describe()}")

        try:
            if self._resolver is None:
                writer.write_greeting(self._greeting)
            elif request.path is None:
                writer.write_error(HTTPStatus.BAD_REQUEST)
            else:
                with self._resolver.resolve(request.path) as resource:
                    writer.write_resource(resource)
        finally:
            self._log_access(client_address, request, writer, started)

        return request

    def _send_error(self, conn: Connection, status: HTTPStatus):
        """Send a bodiless error for failures that happen before parsing."""
        try:
            ResponseWriter(conn.send).write_error(status)
        except ResponseWriteError as e:
            logger.debug(f"[{conn.id}] Could not send {int(status)}: {e}")

    def _log_access(
        self,
        client_address: Tuple[str, int],
        request: Request,
        writer: ResponseWriter,
        started: float,
    ):
        """
        One line per response, Apache-style:

            127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /style.css" 200 1234 0.41ms
        """
        duration_ms = (time.time() - started) * 1000
        timestamp = datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S +0000")
        status = int(writer.status) if writer.status is not None else "-"

        access_logger.info(
            f'{client_address[0] or "-"} - - [{timestamp}] '
            f'"{request.method or "-"} {request.path or "-"}" {status} '
            f'{writer.bytes_sent} {duration_ms:.2f}ms'
        )

